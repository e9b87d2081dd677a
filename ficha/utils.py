# ficha/utils.py
from __future__ import annotations
import copy
from typing import (
    Any, NotRequired, TypedDict,
)
from dataclasses import dataclass

from .para import (
    sex_options, yes_no, job_types, awareness_channels,
    utez_options, OTHER_LOWER,
)
from .form_data_builder import Section
from .validation import ValidatorFunc, Predicate

# ===================================================================
# 1. CORE DATA STRUCTURES & TYPE ALIASES
# ===================================================================

# Names of the option lists served by the catalog service
CATALOG_NATIONALITIES: str = 'nationalities'
CATALOG_STATES: str = 'states'
CATALOG_MUNICIPALITIES: str = 'municipalities'
CATALOG_CIVIL_STATUSES: str = 'civil_statuses'
CATALOG_NATIVE_LANGUAGES: str = 'native_languages'
CATALOG_INDIGENOUS_LANGUAGES: str = 'indigenous_languages'
CATALOG_DISABILITIES: str = 'disabilities'
CATALOG_HIGH_SCHOOL_TYPES: str = 'high_school_types'
CATALOG_CAREERS: str = 'careers'

@dataclass(frozen=True)
class FormField:
    """Defines everything about a form field in one place."""
    key: str
    label: str
    section: Section
    ui_type: str = 'text'
    options: list[str] | dict[str, str] | None = None
    # Options come from the catalog service instead of `options`
    catalog: str | None = None
    # Key of the field (same section) whose value selects this field's catalog
    depends_on: str | None = None
    default_value: Any = ''
    max_length: int | None = None
    uppercase: bool = False
    # Choices offered on top of the catalog, e.g. 'otro'
    extra_options: tuple[str, ...] = ()
    # Keys (same section) cleared whenever this field changes value
    resets: tuple[str, ...] = ()
    placeholder: str = ''

class FieldConfig(TypedDict):
    field: FormField
    validators: list[ValidatorFunc]
    required_when: NotRequired[Predicate]
    visible_when: NotRequired[Predicate]

class StepDefinition(TypedDict):
    id: int
    name: str
    title: str
    subtitle: str
    sections: list[Section]

# --- Typed records, one per section ---

class PersonalGeneralData(TypedDict):
    nombre: str
    primer_apellido: str
    segundo_apellido: str
    curp: str
    fecha_nacimiento: str
    edad: int
    sexo: str
    nacionalidad: str
    estado_nacimiento: str
    municipio_nacimiento: str
    pais_nacimiento: str
    estado_nacimiento_extranjero: str
    ciudad_nacimiento: str
    estado_civil: str
    lengua_natal: str
    tiene_hijos: str

class AddressData(TypedDict):
    calle: str
    numero_exterior: str
    numero_interior: str
    colonia: str
    localidad: str
    estado: str
    municipio: str
    codigo_postal: str
    email: str

class SupplementaryData(TypedDict):
    discapacidades: list[str]
    discapacidad_otra: str
    lenguas_indigenas_padres: list[str]
    lenguas_indigenas_padres_otra: str
    lenguas_indigenas_personales: list[str]
    lenguas_indigenas_personales_otra: str

class IncomeData(TypedDict):
    ingreso_familiar: str
    trabajas: str
    tipo_trabajo: str
    lada: str
    telefono: str
    ingreso_mensual: str
    nombre_empresa: str
    puesto: str
    horario: str

class CareerData(TypedDict):
    carrera_interes: str
    medio_difusion: str
    medio_difusion_otro: str
    opcion_utez: str
    opcion_utez_otra: str

class AcademicHistoryData(TypedDict):
    tipo_prepa: str
    tipo_prepa_otra: str
    nombre_prepa: str
    clave_cct: str
    clave_cct_confirmacion: str
    estado: str
    municipio: str
    estado_otro: str
    municipio_otro: str
    promedio: str
    tiene_beca: str
    nombre_beca: str

class ApplicantRecord(TypedDict):
    personal_general: PersonalGeneralData
    address: AddressData
    supplementary: SupplementaryData
    income: IncomeData
    career: CareerData
    academic_history: AcademicHistoryData

# ===================================================================
# 2. THE APPLICATION SCHEMA (Single Source of Truth)
# ===================================================================

_PG = Section.PERSONAL_GENERAL
_AD = Section.ADDRESS
_SU = Section.SUPPLEMENTARY
_IN = Section.INCOME
_CA = Section.CAREER
_AH = Section.ACADEMIC_HISTORY

class AppSchema:
    """
    Defines all fields used in the application, grouped by section. Each
    field is an instance of the FormField dataclass.
    """
    class PersonalGeneral:
        NOMBRE = FormField(key='nombre', label='Nombre', section=_PG, max_length=50, placeholder='Ingresa tu nombre')
        PRIMER_APELLIDO = FormField(key='primer_apellido', label='Primer apellido', section=_PG, max_length=50)
        SEGUNDO_APELLIDO = FormField(key='segundo_apellido', label='Segundo apellido', section=_PG, max_length=50)
        CURP = FormField(key='curp', label='CURP', section=_PG, max_length=18, uppercase=True,
                         placeholder='CURP (18 caracteres)')
        FECHA_NACIMIENTO = FormField(key='fecha_nacimiento', label='Fecha de nacimiento', section=_PG, ui_type='date')
        EDAD = FormField(key='edad', label='Edad', section=_PG, ui_type='readonly', default_value=0)
        SEXO = FormField(key='sexo', label='Sexo', section=_PG, ui_type='radio', options=sex_options)
        NACIONALIDAD = FormField(key='nacionalidad', label='Nacionalidad', section=_PG, ui_type='select',
                                 catalog=CATALOG_NATIONALITIES)
        ESTADO_NACIMIENTO = FormField(key='estado_nacimiento', label='Estado de nacimiento', section=_PG,
                                      ui_type='select', catalog=CATALOG_STATES, resets=('municipio_nacimiento',))
        MUNICIPIO_NACIMIENTO = FormField(key='municipio_nacimiento', label='Municipio de nacimiento', section=_PG,
                                         ui_type='select', catalog=CATALOG_MUNICIPALITIES,
                                         depends_on='estado_nacimiento')
        PAIS_NACIMIENTO = FormField(key='pais_nacimiento', label='País de nacimiento', section=_PG, max_length=50)
        ESTADO_NACIMIENTO_EXTRANJERO = FormField(key='estado_nacimiento_extranjero', label='Estado/Provincia',
                                                 section=_PG, max_length=50)
        CIUDAD_NACIMIENTO = FormField(key='ciudad_nacimiento', label='Ciudad de nacimiento', section=_PG, max_length=50)
        ESTADO_CIVIL = FormField(key='estado_civil', label='Estado civil', section=_PG, ui_type='select',
                                 catalog=CATALOG_CIVIL_STATUSES)
        LENGUA_NATAL = FormField(key='lengua_natal', label='Lengua natal', section=_PG, ui_type='select',
                                 catalog=CATALOG_NATIVE_LANGUAGES)
        TIENE_HIJOS = FormField(key='tiene_hijos', label='¿Tienes hijos?', section=_PG, ui_type='radio', options=yes_no)

    class Address:
        CALLE = FormField(key='calle', label='Calle', section=_AD, max_length=100)
        NUMERO_EXTERIOR = FormField(key='numero_exterior', label='Número exterior', section=_AD, max_length=10)
        NUMERO_INTERIOR = FormField(key='numero_interior', label='Número interior', section=_AD, max_length=10)
        COLONIA = FormField(key='colonia', label='Colonia', section=_AD, max_length=100)
        LOCALIDAD = FormField(key='localidad', label='Localidad', section=_AD, max_length=100)
        ESTADO = FormField(key='estado', label='Estado', section=_AD, ui_type='select', catalog=CATALOG_STATES,
                           resets=('municipio',))
        MUNICIPIO = FormField(key='municipio', label='Municipio', section=_AD, ui_type='select',
                              catalog=CATALOG_MUNICIPALITIES, depends_on='estado')
        CODIGO_POSTAL = FormField(key='codigo_postal', label='Código postal', section=_AD, max_length=5)
        EMAIL = FormField(key='email', label='Correo electrónico', section=_AD, placeholder='correo@ejemplo.com')

    class Supplementary:
        DISCAPACIDADES = FormField(key='discapacidades', label='Discapacidades', section=_SU, ui_type='multiselect',
                                   catalog=CATALOG_DISABILITIES, default_value=[])
        DISCAPACIDAD_OTRA = FormField(key='discapacidad_otra', label='Especifica la discapacidad', section=_SU,
                                      max_length=100)
        LENGUAS_INDIGENAS_PADRES = FormField(key='lenguas_indigenas_padres',
                                             label='Lenguas indígenas que hablan tus padres', section=_SU,
                                             ui_type='multiselect', catalog=CATALOG_INDIGENOUS_LANGUAGES,
                                             default_value=[])
        LENGUAS_INDIGENAS_PADRES_OTRA = FormField(key='lenguas_indigenas_padres_otra',
                                                  label='Especifica las lenguas de tus padres', section=_SU,
                                                  max_length=100)
        LENGUAS_INDIGENAS_PERSONALES = FormField(key='lenguas_indigenas_personales',
                                                 label='Lenguas indígenas que hablas', section=_SU,
                                                 ui_type='multiselect', catalog=CATALOG_INDIGENOUS_LANGUAGES,
                                                 default_value=[])
        LENGUAS_INDIGENAS_PERSONALES_OTRA = FormField(key='lenguas_indigenas_personales_otra',
                                                      label='Especifica las lenguas que hablas', section=_SU,
                                                      max_length=100)

    class Income:
        INGRESO_FAMILIAR = FormField(key='ingreso_familiar', label='Ingreso familiar mensual', section=_IN,
                                     max_length=5)
        TRABAJAS = FormField(key='trabajas', label='¿Trabajas actualmente?', section=_IN, ui_type='radio',
                             options=yes_no)
        TIPO_TRABAJO = FormField(key='tipo_trabajo', label='Tipo de trabajo', section=_IN, ui_type='radio',
                                 options=job_types)
        LADA = FormField(key='lada', label='Lada', section=_IN, max_length=3)
        TELEFONO = FormField(key='telefono', label='Teléfono', section=_IN, max_length=7)
        INGRESO_MENSUAL = FormField(key='ingreso_mensual', label='Ingreso mensual', section=_IN, max_length=5)
        NOMBRE_EMPRESA = FormField(key='nombre_empresa', label='Nombre de la empresa', section=_IN, max_length=50)
        PUESTO = FormField(key='puesto', label='Puesto', section=_IN, max_length=50)
        HORARIO = FormField(key='horario', label='Horario', section=_IN, max_length=50)

    class Career:
        CARRERA_INTERES = FormField(key='carrera_interes', label='Carrera de interés', section=_CA,
                                    ui_type='select', catalog=CATALOG_CAREERS)
        MEDIO_DIFUSION = FormField(key='medio_difusion', label='¿Cómo te enteraste de la UTEZ?', section=_CA,
                                   ui_type='select', options=awareness_channels)
        MEDIO_DIFUSION_OTRO = FormField(key='medio_difusion_otro', label='Especifica el medio', section=_CA,
                                        max_length=100)
        OPCION_UTEZ = FormField(key='opcion_utez', label='¿Qué opción es la UTEZ para ti?', section=_CA,
                                ui_type='select', options=utez_options)
        OPCION_UTEZ_OTRA = FormField(key='opcion_utez_otra', label='Especifica', section=_CA, max_length=100)

    class AcademicHistory:
        TIPO_PREPA = FormField(key='tipo_prepa', label='Tipo de preparatoria', section=_AH, ui_type='select',
                               catalog=CATALOG_HIGH_SCHOOL_TYPES)
        TIPO_PREPA_OTRA = FormField(key='tipo_prepa_otra', label='Especifica el tipo de preparatoria', section=_AH,
                                    max_length=100)
        NOMBRE_PREPA = FormField(key='nombre_prepa', label='Nombre de la preparatoria', section=_AH, max_length=150)
        CLAVE_CCT = FormField(key='clave_cct', label='Clave CCT', section=_AH, max_length=10, uppercase=True,
                              placeholder='10 caracteres alfanuméricos')
        CLAVE_CCT_CONFIRMACION = FormField(key='clave_cct_confirmacion', label='Confirma la clave CCT', section=_AH,
                                           max_length=10, uppercase=True)
        ESTADO = FormField(key='estado', label='Estado de la preparatoria', section=_AH, ui_type='select',
                           catalog=CATALOG_STATES, extra_options=(OTHER_LOWER,),
                           resets=('municipio', 'municipio_otro'))
        MUNICIPIO = FormField(key='municipio', label='Municipio de la preparatoria', section=_AH, ui_type='select',
                              catalog=CATALOG_MUNICIPALITIES, depends_on='estado', extra_options=(OTHER_LOWER,))
        ESTADO_OTRO = FormField(key='estado_otro', label='Especifica el estado', section=_AH, max_length=100)
        MUNICIPIO_OTRO = FormField(key='municipio_otro', label='Especifica el municipio', section=_AH, max_length=100)
        PROMEDIO = FormField(key='promedio', label='Promedio general', section=_AH, max_length=4, placeholder='Ej. 8.5')
        TIENE_BECA = FormField(key='tiene_beca', label='¿Cuentas con beca?', section=_AH, ui_type='radio',
                               options=yes_no)
        NOMBRE_BECA = FormField(key='nombre_beca', label='Nombre de la beca', section=_AH, max_length=100)

    @classmethod
    def get_section_fields(cls, section: Section) -> list[FormField]:
        return [
            field_instance
            for group in (cls.PersonalGeneral, cls.Address, cls.Supplementary,
                          cls.Income, cls.Career, cls.AcademicHistory)
            for field_instance in group.__dict__.values()
            if isinstance(field_instance, FormField) and field_instance.section is section
        ]

    @classmethod
    def get_field(cls, section: Section, key: str) -> FormField:
        for field in cls.get_section_fields(section):
            if field.key == key:
                return field
        raise KeyError(f"Unknown field '{key}' in section '{section.value}'")

def empty_record() -> ApplicantRecord:
    """A fresh record: every section present, every answer at its default."""
    record: dict[str, Any] = {}
    for section in Section:
        record[section.value] = {
            field.key: copy.copy(field.default_value)
            for field in AppSchema.get_section_fields(section)
        }
    return record  # type: ignore[return-value]

# ===================================================================
# 3. CENTRALIZED CONSTANTS & SESSION MANAGEMENT
# ===================================================================

STEP_KEY: str = 'step'
FORM_STATE_KEY: str = 'form_state'
FORM_ATTEMPTED_SUBMISSION_KEY: str = 'form_attempted_submission'
CURRENT_STEP_ERRORS_KEY: str = 'current_step_errors'
