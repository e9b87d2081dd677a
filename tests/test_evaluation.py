# tests/test_evaluation.py
from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock

import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from conftest import birth_date_years_ago
from ficha.catalogs import CatalogClient, CatalogService
from ficha.evaluation import INVALID_OPTION_MESSAGE, compute_progress, evaluate, validate_section
from ficha.form_data_builder import Section
from ficha.form_state import FormState
from ficha.utils import empty_record

def offline_catalogs() -> CatalogService:
    """A catalog service whose API is down, so every list comes from the bundled data."""
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("offline")
    return CatalogService(CatalogClient('http://catalogs.test/api', session=session))

# --- Progress ---

def test_empty_record_is_zero_percent() -> None:
    assert compute_progress(empty_record()) == 0

def test_complete_record_is_one_hundred_percent(complete_state: FormState) -> None:
    evaluation = complete_state.evaluation()
    assert evaluation.completion_percent == 100
    assert all(evaluation.section_valid.values())
    assert all(evaluation.step_valid.values())
    assert evaluation.errors == {}

def test_progress_counts_only_active_required_fields(personal_state: FormState) -> None:
    """19 of the 35 fields required for a Mexican applicant who does not work are valid."""
    assert personal_state.completion_percent == 54

def test_progress_never_drops_while_filling_valid_answers(valid_sections) -> None:
    state = FormState()
    last_percent = state.completion_percent
    for section, data in valid_sections.items():
        for key, value in data.items():
            state.update_section(section, {key: value})
            percent = state.completion_percent
            assert percent >= last_percent, f"Progress dropped after setting {section}.{key}"
            last_percent = percent
    assert last_percent == 100

# --- Section gates ---

def test_first_step_complete_others_pending(personal_state: FormState) -> None:
    evaluation = personal_state.evaluation()
    assert evaluation.section_valid[Section.PERSONAL_GENERAL]
    assert evaluation.section_valid[Section.ADDRESS]
    assert not evaluation.section_valid[Section.SUPPLEMENTARY]
    assert not evaluation.section_valid[Section.INCOME]
    assert not evaluation.section_valid[Section.CAREER]
    assert not evaluation.section_valid[Section.ACADEMIC_HISTORY]

    assert evaluation.step_valid['personal']
    assert not evaluation.step_valid['socioeconomic']
    assert not evaluation.step_valid['career']
    assert not evaluation.step_valid['academic_history']
    assert 'review' not in evaluation.step_valid

    assert personal_state.can_advance(1)
    assert not personal_state.can_advance(2)

def test_fixed_length_fields(personal_state: FormState) -> None:
    personal_state.update_section('address', {'codigo_postal': '6276'})
    personal_state.update_section('personal_general', {'curp': 'GOMC050101HMS'})
    is_valid, errors = personal_state.validate_step(1)

    assert not is_valid
    assert errors['address.codigo_postal'] == "Debe tener exactamente 5 dígitos"
    assert errors['personal_general.curp'] == "Debe tener exactamente 18 caracteres"

def test_cct_confirmation_must_match(complete_state: FormState) -> None:
    complete_state.update_section('academic_history', {'clave_cct_confirmacion': '17DCT0002A'})
    is_valid, errors = validate_section(Section.ACADEMIC_HISTORY, complete_state.record)

    assert not is_valid
    assert errors == {'academic_history.clave_cct_confirmacion': "Las claves CCT no coinciden"}

def test_gpa_out_of_range(complete_state: FormState) -> None:
    complete_state.update_section('academic_history', {'promedio': '5.9'})
    _, errors = validate_section(Section.ACADEMIC_HISTORY, complete_state.record)
    assert errors['academic_history.promedio'] == "El promedio debe estar entre 6.0 y 10.0"

def test_underage_applicant_is_rejected(personal_state: FormState) -> None:
    personal_state.update_section('personal_general', {'fecha_nacimiento': birth_date_years_ago(14)})
    _, errors = validate_section(Section.PERSONAL_GENERAL, personal_state.record)
    assert errors['personal_general.fecha_nacimiento'] == "Debe ser mayor de 15 años"

# --- Conditional fields ---

def test_job_fields_ignored_when_not_working(complete_state: FormState) -> None:
    record = complete_state.record
    assert record['income']['trabajas'] == 'no'
    assert record['income']['puesto'] == ''
    is_valid, errors = validate_section(Section.INCOME, record)
    assert is_valid
    assert errors == {}

def test_job_fields_required_when_working(complete_state: FormState) -> None:
    before = complete_state.completion_percent
    complete_state.update_section('income', {'trabajas': 'si'})
    is_valid, errors = validate_section(Section.INCOME, complete_state.record)

    assert not is_valid
    for key in ('tipo_trabajo', 'lada', 'telefono', 'nombre_empresa', 'puesto'):
        assert f'income.{key}' in errors, f"'{key}' should be required while working"
    # Monthly income and schedule stay optional
    assert 'income.ingreso_mensual' not in errors
    assert 'income.horario' not in errors
    assert complete_state.completion_percent < before

    complete_state.update_section('income', {
        'tipo_trabajo': 'permanente', 'lada': '777', 'telefono': '1234567',
        'nombre_empresa': 'Textiles del Sur', 'puesto': 'Auxiliar',
    })
    assert validate_section(Section.INCOME, complete_state.record)[0]
    assert complete_state.completion_percent == 100

def test_foreign_applicant_needs_place_of_birth(personal_state: FormState) -> None:
    personal_state.update_section('personal_general', {'nacionalidad': 'Extranjera'})
    is_valid, errors = validate_section(Section.PERSONAL_GENERAL, personal_state.record)

    assert not is_valid
    assert set(errors) == {
        'personal_general.pais_nacimiento',
        'personal_general.estado_nacimiento_extranjero',
        'personal_general.ciudad_nacimiento',
    }

    personal_state.update_section('personal_general', {
        'pais_nacimiento': 'Guatemala',
        'estado_nacimiento_extranjero': 'Quetzaltenango',
        'ciudad_nacimiento': 'Quetzaltenango',
    })
    assert validate_section(Section.PERSONAL_GENERAL, personal_state.record)[0]

def test_other_disability_needs_description(complete_state: FormState) -> None:
    complete_state.update_section('supplementary', {'discapacidades': ['Visual', 'Otro']})
    is_valid, errors = validate_section(Section.SUPPLEMENTARY, complete_state.record)
    assert not is_valid
    assert errors == {'supplementary.discapacidad_otra': "Especifica la discapacidad."}

def test_none_combined_with_other_options_is_invalid(complete_state: FormState) -> None:
    complete_state.update_section('supplementary', {'discapacidades': ['Ninguna', 'Visual']})
    _, errors = validate_section(Section.SUPPLEMENTARY, complete_state.record)
    assert 'supplementary.discapacidades' in errors

def test_optional_field_with_bad_shape_is_reported_but_does_not_block(personal_state: FormState) -> None:
    personal_state.update_section('address', {'numero_interior': 'DEPARTAMENTO 12'})
    is_valid, errors = validate_section(Section.ADDRESS, personal_state.record)
    assert is_valid
    assert errors == {'address.numero_interior': "Máximo 10 caracteres"}

def test_other_high_school_state(complete_state: FormState) -> None:
    complete_state.update_section('academic_history', {'estado': 'otro'})
    record = complete_state.record
    assert record['academic_history']['municipio'] == ''

    _, errors = validate_section(Section.ACADEMIC_HISTORY, record)
    assert set(errors) == {
        'academic_history.estado_otro',
        'academic_history.municipio',
        'academic_history.municipio_otro',
    }

    complete_state.update_section('academic_history', {
        'estado_otro': 'Texas', 'municipio': 'otro', 'municipio_otro': 'Houston',
    })
    assert validate_section(Section.ACADEMIC_HISTORY, complete_state.record)[0]

# --- Catalog membership ---

def test_bundled_catalogs_accept_a_complete_record(complete_state: FormState) -> None:
    catalogs = offline_catalogs()
    options = catalogs.catalog_options(complete_state.record)
    assert complete_state.evaluation(options).completion_percent == 100

def test_unknown_option_is_rejected(complete_state: FormState) -> None:
    catalogs = offline_catalogs()
    complete_state.update_section('career', {'carrera_interes': 'Medicina'})
    evaluation = complete_state.evaluation(catalogs.catalog_options(complete_state.record))

    assert not evaluation.section_valid[Section.CAREER]
    assert evaluation.errors['career.carrera_interes'] == INVALID_OPTION_MESSAGE

def test_unloaded_catalog_accepts_nothing(complete_state: FormState) -> None:
    evaluation = evaluate(complete_state.record, options={})
    assert evaluation.errors['personal_general.nacionalidad'] == INVALID_OPTION_MESSAGE
    assert evaluation.section_valid[Section.INCOME], "Fixed options do not depend on catalogs"
    assert not evaluation.section_valid[Section.PERSONAL_GENERAL]

def test_lowercase_codes_are_accepted_without_normalization(valid_sections) -> None:
    """A record that never went through FormState still accepts codes typed in lowercase."""
    record = empty_record()
    record['academic_history'].update(valid_sections['academic_history'])
    record['academic_history']['clave_cct'] = 'abc1234567'
    record['academic_history']['clave_cct_confirmacion'] = 'abc1234567'
    record['personal_general'].update(valid_sections['personal_general'])
    record['personal_general']['curp'] = 'gomc050101hmsrrra1'

    assert validate_section(Section.ACADEMIC_HISTORY, record) == (True, {})
    assert validate_section(Section.PERSONAL_GENERAL, record) == (True, {})
