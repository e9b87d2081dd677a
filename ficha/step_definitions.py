# ficha/step_definitions.py
from __future__ import annotations

from .form_data_builder import Section
from .para import OTHER_MASC, OTHER_FEM, OTHER_OR_SEVERAL, OTHER_LOWER, NONE_OPTION, YES
from .utils import AppSchema, FieldConfig, StepDefinition
from .validation import (
    required, required_choice, required_selection, match_pattern, min_length, max_length,
    exact_length, is_within_range, matches_field, is_min_age, is_within_date_range,
    exclusive_choice, field_equals, field_contains, any_of, never,
    NAME_PATTERN, CURP_PATTERN, POSTAL_CODE_PATTERN, EMAIL_PATTERN, CCT_PATTERN,
    INCOME_PATTERN, AREA_CODE_PATTERN, PHONE_PATTERN, PLACE_PATTERN,
)

PG = AppSchema.PersonalGeneral
AD = AppSchema.Address
SU = AppSchema.Supplementary
IN = AppSchema.Income
CA = AppSchema.Career
AH = AppSchema.AcademicHistory

MIN_AGE: int = 15
MIN_GPA: float = 6.0
MAX_GPA: float = 10.0

is_mexican = field_equals(Section.PERSONAL_GENERAL, 'nacionalidad', 'mexicana', ignore_case=True)
is_foreign = field_equals(Section.PERSONAL_GENERAL, 'nacionalidad', 'extranjera', ignore_case=True)
is_working = field_equals(Section.INCOME, 'trabajas', YES)

def _name_rules(label: str) -> list:
    return [
        required(f"Escribe tu {label}."),
        min_length(3, "Mínimo 3 caracteres"),
        match_pattern(NAME_PATTERN, "Solo letras, acentos y espacios"),
        max_length(50, "Máximo 50 caracteres"),
    ]

def _place_rules(message: str) -> list:
    return [
        required(message),
        max_length(50, "Máximo 50 caracteres, solo letras"),
        match_pattern(PLACE_PATTERN, "Máximo 50 caracteres, solo letras"),
    ]

def _companion(field, controlled_by, message: str) -> FieldConfig:
    """An "other, please specify" text box, shown and required only under `controlled_by`."""
    return {'field': field, 'validators': [required(message), max_length(100, "Máximo 100 caracteres")],
            'required_when': controlled_by, 'visible_when': controlled_by}

def _multiselect(field, message: str) -> FieldConfig:
    return {'field': field, 'validators': [
        required_selection(message),
        exclusive_choice(NONE_OPTION, f"'{NONE_OPTION}' no puede combinarse con otras opciones."),
    ]}

FIELD_RULES: dict[Section, list[FieldConfig]] = {
    Section.PERSONAL_GENERAL: [
        {'field': PG.NOMBRE, 'validators': _name_rules('nombre')},
        {'field': PG.PRIMER_APELLIDO, 'validators': _name_rules('primer apellido')},
        {'field': PG.SEGUNDO_APELLIDO, 'validators': _name_rules('segundo apellido')},
        {'field': PG.CURP, 'validators': [
            required("Escribe tu CURP."),
            exact_length(18, "Debe tener exactamente 18 caracteres"),
            match_pattern(CURP_PATTERN, "Formato de CURP inválido"),
        ]},
        {'field': PG.FECHA_NACIMIENTO, 'validators': [
            required("Selecciona tu fecha de nacimiento."),
            is_within_date_range(message="La fecha de nacimiento no es válida."),
            is_min_age(MIN_AGE, f"Debe ser mayor de {MIN_AGE} años"),
        ]},
        {'field': PG.SEXO, 'validators': [required_choice("Selecciona tu sexo.")]},
        {'field': PG.NACIONALIDAD, 'validators': [required_choice("Selecciona tu nacionalidad.")]},
        {'field': PG.ESTADO_NACIMIENTO, 'validators': [required_choice("Selecciona el estado de nacimiento.")],
         'required_when': is_mexican, 'visible_when': is_mexican},
        {'field': PG.MUNICIPIO_NACIMIENTO, 'validators': [required_choice("Selecciona el municipio de nacimiento.")],
         'required_when': is_mexican, 'visible_when': is_mexican},
        {'field': PG.PAIS_NACIMIENTO, 'validators': _place_rules("Escribe tu país de nacimiento."),
         'required_when': is_foreign, 'visible_when': is_foreign},
        {'field': PG.ESTADO_NACIMIENTO_EXTRANJERO, 'validators': _place_rules("Escribe el estado o provincia."),
         'required_when': is_foreign, 'visible_when': is_foreign},
        {'field': PG.CIUDAD_NACIMIENTO, 'validators': _place_rules("Escribe tu ciudad de nacimiento."),
         'required_when': is_foreign, 'visible_when': is_foreign},
        {'field': PG.ESTADO_CIVIL, 'validators': [required_choice("Selecciona tu estado civil.")]},
        {'field': PG.LENGUA_NATAL, 'validators': [required_choice("Selecciona tu lengua natal.")]},
        {'field': PG.TIENE_HIJOS, 'validators': [required_choice("Indica si tienes hijos.")]},
    ],
    Section.ADDRESS: [
        {'field': AD.CALLE, 'validators': [required(), max_length(100, "Máximo 100 caracteres")]},
        {'field': AD.NUMERO_EXTERIOR, 'validators': [required(), max_length(10, "Máximo 10 caracteres")]},
        {'field': AD.NUMERO_INTERIOR, 'validators': [max_length(10, "Máximo 10 caracteres")],
         'required_when': never},
        {'field': AD.COLONIA, 'validators': [required(), max_length(100, "Máximo 100 caracteres")]},
        {'field': AD.LOCALIDAD, 'validators': [max_length(100, "Máximo 100 caracteres")],
         'required_when': never},
        {'field': AD.ESTADO, 'validators': [required_choice("Selecciona tu estado.")]},
        {'field': AD.MUNICIPIO, 'validators': [required_choice("Selecciona tu municipio.")]},
        {'field': AD.CODIGO_POSTAL, 'validators': [
            required(),
            match_pattern(POSTAL_CODE_PATTERN, "Debe tener exactamente 5 dígitos"),
        ]},
        {'field': AD.EMAIL, 'validators': [
            required(),
            match_pattern(EMAIL_PATTERN, "Formato de email inválido"),
        ]},
    ],
    Section.SUPPLEMENTARY: [
        _multiselect(SU.DISCAPACIDADES, "Selecciona al menos una opción (o 'Ninguna')."),
        _companion(SU.DISCAPACIDAD_OTRA,
                   field_contains(Section.SUPPLEMENTARY, 'discapacidades', OTHER_MASC),
                   "Especifica la discapacidad."),
        _multiselect(SU.LENGUAS_INDIGENAS_PADRES, "Selecciona al menos una opción (o 'Ninguna')."),
        _companion(SU.LENGUAS_INDIGENAS_PADRES_OTRA,
                   field_contains(Section.SUPPLEMENTARY, 'lenguas_indigenas_padres', OTHER_OR_SEVERAL),
                   "Especifica las lenguas de tus padres."),
        _multiselect(SU.LENGUAS_INDIGENAS_PERSONALES, "Selecciona al menos una opción (o 'Ninguna')."),
        _companion(SU.LENGUAS_INDIGENAS_PERSONALES_OTRA,
                   field_contains(Section.SUPPLEMENTARY, 'lenguas_indigenas_personales', OTHER_OR_SEVERAL),
                   "Especifica las lenguas que hablas."),
    ],
    Section.INCOME: [
        {'field': IN.INGRESO_FAMILIAR, 'validators': [
            required("Escribe el ingreso familiar."),
            match_pattern(INCOME_PATTERN, "Máximo 5 cifras, solo números"),
        ]},
        {'field': IN.TRABAJAS, 'validators': [required_choice("Indica si trabajas.")]},
        {'field': IN.TIPO_TRABAJO, 'validators': [required_choice("Selecciona el tipo de trabajo.")],
         'required_when': is_working, 'visible_when': is_working},
        {'field': IN.LADA, 'validators': [
            required("Escribe la lada."),
            match_pattern(AREA_CODE_PATTERN, "Debe tener exactamente 3 dígitos"),
        ], 'required_when': is_working, 'visible_when': is_working},
        {'field': IN.TELEFONO, 'validators': [
            required("Escribe el teléfono."),
            match_pattern(PHONE_PATTERN, "Debe tener exactamente 7 dígitos"),
        ], 'required_when': is_working, 'visible_when': is_working},
        {'field': IN.INGRESO_MENSUAL, 'validators': [match_pattern(INCOME_PATTERN, "Máximo 5 cifras, solo números")],
         'required_when': never, 'visible_when': is_working},
        {'field': IN.NOMBRE_EMPRESA, 'validators': [
            required("Escribe el nombre de la empresa."),
            min_length(5, "Entre 5 y 50 caracteres"),
            max_length(50, "Entre 5 y 50 caracteres"),
        ], 'required_when': is_working, 'visible_when': is_working},
        {'field': IN.PUESTO, 'validators': [
            required("Escribe tu puesto."),
            max_length(50, "Máximo 50 caracteres"),
        ], 'required_when': is_working, 'visible_when': is_working},
        {'field': IN.HORARIO, 'validators': [max_length(50, "Máximo 50 caracteres")],
         'required_when': never, 'visible_when': is_working},
    ],
    Section.CAREER: [
        {'field': CA.CARRERA_INTERES, 'validators': [required_choice("Selecciona la carrera de tu interés.")]},
        {'field': CA.MEDIO_DIFUSION, 'validators': [required_choice("Selecciona cómo te enteraste.")]},
        _companion(CA.MEDIO_DIFUSION_OTRO,
                   field_equals(Section.CAREER, 'medio_difusion', OTHER_MASC),
                   "Especifica el medio."),
        {'field': CA.OPCION_UTEZ, 'validators': [required_choice("Selecciona qué opción es la UTEZ para ti.")]},
        _companion(CA.OPCION_UTEZ_OTRA,
                   field_equals(Section.CAREER, 'opcion_utez', OTHER_FEM),
                   "Especifica tu opción."),
    ],
    Section.ACADEMIC_HISTORY: [
        {'field': AH.TIPO_PREPA, 'validators': [required_choice("Selecciona el tipo de preparatoria.")]},
        _companion(AH.TIPO_PREPA_OTRA,
                   field_equals(Section.ACADEMIC_HISTORY, 'tipo_prepa', OTHER_FEM),
                   "Especifica el tipo de preparatoria."),
        {'field': AH.NOMBRE_PREPA, 'validators': [
            required("Escribe el nombre de tu preparatoria."),
            max_length(150, "Máximo 150 caracteres"),
        ]},
        {'field': AH.CLAVE_CCT, 'validators': [
            required("Escribe la clave CCT."),
            match_pattern(CCT_PATTERN, "Debe tener exactamente 10 caracteres alfanuméricos"),
        ]},
        {'field': AH.CLAVE_CCT_CONFIRMACION, 'validators': [
            required("Confirma la clave CCT."),
            match_pattern(CCT_PATTERN, "Debe tener exactamente 10 caracteres alfanuméricos"),
            matches_field(Section.ACADEMIC_HISTORY, 'clave_cct', "Las claves CCT no coinciden"),
        ]},
        {'field': AH.ESTADO, 'validators': [required_choice("Selecciona el estado de tu preparatoria.")]},
        _companion(AH.ESTADO_OTRO,
                   field_equals(Section.ACADEMIC_HISTORY, 'estado', OTHER_LOWER),
                   "Especifica el estado."),
        {'field': AH.MUNICIPIO, 'validators': [required_choice("Selecciona el municipio de tu preparatoria.")]},
        _companion(AH.MUNICIPIO_OTRO,
                   any_of(field_equals(Section.ACADEMIC_HISTORY, 'estado', OTHER_LOWER),
                          field_equals(Section.ACADEMIC_HISTORY, 'municipio', OTHER_LOWER)),
                   "Especifica el municipio."),
        {'field': AH.PROMEDIO, 'validators': [
            required("Escribe tu promedio."),
            is_within_range(MIN_GPA, MAX_GPA, "El promedio debe estar entre 6.0 y 10.0"),
        ]},
        {'field': AH.TIENE_BECA, 'validators': [required_choice("Indica si cuentas con beca.")]},
        _companion(AH.NOMBRE_BECA,
                   field_equals(Section.ACADEMIC_HISTORY, 'tiene_beca', YES),
                   "Escribe el nombre de la beca."),
    ],
}

STEPS_BY_ID: dict[int, StepDefinition] = {
    1: {
        'id': 1, 'name': 'personal', 'title': 'Información personal',
        'subtitle': 'Tus datos generales y tu domicilio actual.',
        'sections': [Section.PERSONAL_GENERAL, Section.ADDRESS],
    },
    2: {
        'id': 2, 'name': 'socioeconomic', 'title': 'Datos complementarios e ingresos',
        'subtitle': 'Discapacidades, lenguas indígenas y situación económica.',
        'sections': [Section.SUPPLEMENTARY, Section.INCOME],
    },
    3: {
        'id': 3, 'name': 'career', 'title': 'Elección de carrera',
        'subtitle': 'La carrera que quieres estudiar en la UTEZ.',
        'sections': [Section.CAREER],
    },
    4: {
        'id': 4, 'name': 'academic_history', 'title': 'Antecedentes escolares',
        'subtitle': 'Tu preparatoria y tu promedio.',
        'sections': [Section.ACADEMIC_HISTORY],
    },
    5: {
        'id': 5, 'name': 'review', 'title': 'Revisión',
        'subtitle': 'Revisa el estado de cada sección de tu ficha.',
        'sections': [],
    },
}

SECTION_TITLES: dict[Section, str] = {
    Section.PERSONAL_GENERAL: 'Datos generales',
    Section.ADDRESS: 'Domicilio',
    Section.SUPPLEMENTARY: 'Datos complementarios',
    Section.INCOME: 'Ingresos',
    Section.CAREER: 'Elección de carrera',
    Section.ACADEMIC_HISTORY: 'Antecedentes escolares',
}
