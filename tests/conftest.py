# tests/conftest.py
from __future__ import annotations

import copy
import sys
from pathlib import Path
from datetime import date, timedelta
from typing import Any

import pytest

# Make the `ficha` directory importable without installing the project.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from ficha.form_state import FormState

def birth_date_years_ago(years: int) -> str:
    """An ISO birth date a few days past the `years`-th birthday."""
    return (date.today() - timedelta(days=years * 366)).isoformat()

VALID_SECTIONS: dict[str, dict[str, Any]] = {
    'personal_general': {
        'nombre': 'Carlos',
        'primer_apellido': 'Gómez',
        'segundo_apellido': 'Martínez',
        'curp': 'GOMC050101HMSRRRA1',
        'fecha_nacimiento': birth_date_years_ago(18),
        'sexo': 'masculino',
        'nacionalidad': 'Mexicana',
        'estado_nacimiento': 'Morelos',
        'municipio_nacimiento': 'Cuernavaca',
        'estado_civil': 'Soltero(a)',
        'lengua_natal': 'Español',
        'tiene_hijos': 'no',
    },
    'address': {
        'calle': 'Av. Universidad Tecnológica',
        'numero_exterior': '1',
        'colonia': 'Palo Escrito',
        'estado': 'Morelos',
        'municipio': 'Emiliano Zapata',
        'codigo_postal': '62760',
        'email': 'carlos@example.com',
    },
    'supplementary': {
        'discapacidades': ['Ninguna'],
        'lenguas_indigenas_padres': ['Ninguna'],
        'lenguas_indigenas_personales': ['Ninguna'],
    },
    'income': {
        'ingreso_familiar': '8000',
        'trabajas': 'no',
    },
    'career': {
        'carrera_interes': 'Ingeniería en Sistemas Computacionales',
        'medio_difusion': 'Radio',
        'opcion_utez': 'Primera opción',
    },
    'academic_history': {
        'tipo_prepa': 'CBTIS',
        'nombre_prepa': 'CBTIS 76',
        'clave_cct': '17DCT0001A',
        'clave_cct_confirmacion': '17DCT0001A',
        'estado': 'Morelos',
        'municipio': 'Cuernavaca',
        'promedio': '8.5',
        'tiene_beca': 'no',
    },
}

@pytest.fixture
def valid_sections() -> dict[str, dict[str, Any]]:
    return copy.deepcopy(VALID_SECTIONS)

@pytest.fixture
def form_state() -> FormState:
    return FormState()

@pytest.fixture
def personal_state() -> FormState:
    """Only the first step (general data and address) is filled in."""
    state = FormState()
    state.update_section('personal_general', VALID_SECTIONS['personal_general'])
    state.update_section('address', VALID_SECTIONS['address'])
    return state

@pytest.fixture
def complete_state() -> FormState:
    state = FormState()
    for section, data in VALID_SECTIONS.items():
        state.update_section(section, data)
    return state
