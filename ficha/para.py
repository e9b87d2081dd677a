from typing import List

# Sentinels that switch on an "other, please specify" companion field.
OTHER_MASC: str = "Otro"
OTHER_FEM: str = "Otra"
OTHER_OR_SEVERAL: str = "Otro o varias"
OTHER_LOWER: str = "otro"
NONE_OPTION: str = "Ninguna"

YES: str = "si"
NO: str = "no"

yes_no: dict[str, str] = {YES: "Sí", NO: "No"}

sex_options: dict[str, str] = {
    "masculino": "Masculino",
    "femenino": "Femenino",
    "otro": "Otro",
}

job_types: dict[str, str] = {
    "temporal": "Temporal",
    "permanente": "Permanente",
}

disabilities_fallback: List[str] = [
    "Ninguna",
    "Visual",
    "Auditiva",
    "Motriz",
    "Intelectual",
    "Psicosocial",
    "Múltiple",
    "Otro",
]

indigenous_languages: List[str] = [
    "Ninguna",
    "Náhuatl",
    "Maya",
    "Zapoteco",
    "Mixteco",
    "Otomí",
    "Totonaco",
    "Tzotzil",
    "Tzeltal",
    "Mazahua",
    "Huichol",
    "Chinanteco",
    "Mazateco",
    "Mixe",
    "Tlapaneco",
    "Tarahumara",
    "Zoque",
    "Chol",
    "Huasteco",
    "Tepehuano",
    "Otro o varias",
]

careers: List[str] = [
    "Ingeniería en Sistemas Computacionales",
    "Ingeniería en Tecnologías de la Información",
    "Ingeniería en Mecatrónica",
    "Ingeniería en Energías Renovables",
    "Ingeniería en Biotecnología",
    "Ingeniería Industrial",
    "Licenciatura en Administración",
    "Licenciatura en Contaduría Pública",
    "Licenciatura en Turismo",
    "Licenciatura en Gastronomía",
    "Técnico Superior Universitario en Desarrollo de Software Multiplataforma",
    "Técnico Superior Universitario en Infraestructura de Redes Digitales",
    "Técnico Superior Universitario en Mecatrónica",
    "Técnico Superior Universitario en Energías Renovables",
    "Técnico Superior Universitario en Biotecnología",
    "Técnico Superior Universitario en Procesos Industriales",
    "Técnico Superior Universitario en Administración",
    "Técnico Superior Universitario en Contaduría",
    "Técnico Superior Universitario en Turismo",
    "Técnico Superior Universitario en Gastronomía",
]

awareness_channels: List[str] = [
    "Redes sociales (Facebook, Instagram, TikTok)",
    "Página web oficial de UTEZ",
    "Recomendación de familiares o amigos",
    "Ferias educativas",
    "Visita a preparatoria",
    "Radio",
    "Televisión",
    "Periódico o revista",
    "Volantes o carteles",
    "Otro",
]

utez_options: List[str] = [
    "Primera opción",
    "Segunda opción",
    "Tercera opción",
    "Cuarta opción",
    "Quinta opción",
    "Otra",
]

high_school_types: List[str] = [
    "Bachillerato General",
    "Bachillerato Tecnológico",
    "Preparatoria Abierta",
    "CONALEP",
    "CECYTE",
    "CBTIS",
    "CBTA",
    "CETis",
    "Preparatoria Particular",
    "Telebachillerato",
    "Otra",
]

nationalities_fallback: List[str] = [
    "Mexicana",
    "Extranjera",
]

civil_statuses_fallback: List[str] = [
    "Soltero(a)",
    "Casado(a)",
    "Unión libre",
    "Divorciado(a)",
    "Viudo(a)",
]

native_languages_fallback: List[str] = [
    "Español",
    "Inglés",
    "Francés",
    "Alemán",
    "Italiano",
    "Portugués",
    "Chino Mandarín",
    "Japonés",
    "Coreano",
    "Árabe",
    "Ruso",
    "Náhuatl",
    "Maya",
    "Zapoteco",
    "Mixteco",
    "Otomí",
]

mexican_states: List[str] = [
    "Aguascalientes",
    "Baja California",
    "Baja California Sur",
    "Campeche",
    "Chiapas",
    "Chihuahua",
    "Ciudad de México",
    "Coahuila",
    "Colima",
    "Durango",
    "Guanajuato",
    "Guerrero",
    "Hidalgo",
    "Jalisco",
    "México",
    "Michoacán",
    "Morelos",
    "Nayarit",
    "Nuevo León",
    "Oaxaca",
    "Puebla",
    "Querétaro",
    "Quintana Roo",
    "San Luis Potosí",
    "Sinaloa",
    "Sonora",
    "Tabasco",
    "Tamaulipas",
    "Tlaxcala",
    "Veracruz",
    "Yucatán",
    "Zacatecas",
]

# Only Morelos ships offline; other states need the API.
municipalities_fallback: dict[str, List[str]] = {
    "Morelos": [
        "Amacuzac",
        "Atlatlahucan",
        "Axochiapan",
        "Ayala",
        "Coatlán del Río",
        "Cuautla",
        "Cuernavaca",
        "Emiliano Zapata",
        "Huitzilac",
        "Jantetelco",
        "Jiutepec",
        "Jojutla",
        "Jonacatepec de Leandro Valle",
        "Mazatepec",
        "Miacatlán",
        "Ocuituco",
        "Puente de Ixtla",
        "Temixco",
        "Tepalcingo",
        "Tepoztlán",
        "Tetecala",
        "Tetela del Volcán",
        "Tlalnepantla",
        "Tlaltizapán de Zapata",
        "Tlaquiltenango",
        "Tlayacapan",
        "Totolapan",
        "Xochitepec",
        "Yautepec",
        "Yecapixtla",
        "Zacatepec",
        "Zacualpan de Amilpas",
    ],
}
