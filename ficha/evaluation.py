# ficha/evaluation.py
"""
The validation engine. Runs the rule table in `step_definitions` against an
applicant record and derives per-field status, per-section and per-step
validity, and the completion percentage. Pure functions, no I/O.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any
from collections.abc import Mapping, Sequence

from .form_data_builder import Section
from .step_definitions import FIELD_RULES, STEPS_BY_ID
from .utils import FieldConfig, FormField, StepDefinition
from .validation import ValidationResult, always, get_value, is_blank

# Catalog name (or "catalog:parent value" for dependent catalogs) -> option names
CatalogOptions = Mapping[str, Sequence[str]]

INVALID_OPTION_MESSAGE: str = "Selecciona una opción válida."

@dataclass(frozen=True)
class FieldStatus:
    active: bool  # required under the current answers, counts toward completion
    valid: bool
    message: str = ''

@dataclass(frozen=True)
class Evaluation:
    section_valid: dict[Section, bool]
    step_valid: dict[str, bool]
    completion_percent: int
    errors: dict[str, str]

def error_key(field: FormField) -> str:
    return f"{field.section.value}.{field.key}"

def options_key(field: FormField, record: dict[str, Any]) -> str | None:
    """Where a field's catalog options live in a CatalogOptions mapping."""
    if not field.catalog:
        return None
    if field.depends_on:
        parent = get_value(record, field.section, field.depends_on) or ''
        return f"{field.catalog}:{parent}"
    return field.catalog

def _allowed_values(field: FormField, record: dict[str, Any], options: CatalogOptions | None) -> list[str] | None:
    if field.options:
        return list(field.options)
    key = options_key(field, record)
    if key is None or options is None:
        return None
    # A catalog that never loaded counts as empty: nothing is a valid selection yet.
    return [*options.get(key, []), *field.extra_options]

def _check_selection(field: FormField, value: Any, record: dict[str, Any],
                     options: CatalogOptions | None) -> ValidationResult:
    allowed = _allowed_values(field, record, options)
    if allowed is None:
        return True, ""
    chosen = value if isinstance(value, (list, tuple)) else [value]
    if any(item not in allowed for item in chosen):
        return False, INVALID_OPTION_MESSAGE
    return True, ""

def evaluate_field(rule: FieldConfig, record: dict[str, Any], options: CatalogOptions | None = None) -> FieldStatus:
    field = rule['field']
    if not rule.get('visible_when', always)(record):
        return FieldStatus(active=False, valid=True)

    value = get_value(record, field.section, field.key)
    active = rule.get('required_when', always)(record)
    if not active and is_blank(value):
        # Optional under current conditions: neither penalized nor credited
        return FieldStatus(active=False, valid=True)

    for validator_func in rule['validators']:
        is_valid, msg = validator_func(value, record)
        if not is_valid:
            return FieldStatus(active=active, valid=False, message=msg)

    if not is_blank(value):
        is_valid, msg = _check_selection(field, value, record, options)
        if not is_valid:
            return FieldStatus(active=active, valid=False, message=msg)
    return FieldStatus(active=active, valid=True)

def validate_section(section: Section, record: dict[str, Any],
                     options: CatalogOptions | None = None) -> tuple[bool, dict[str, str]]:
    """AND over the section's active-required fields; errors for every failing field."""
    errors: dict[str, str] = {}
    is_section_valid = True
    for rule in FIELD_RULES[section]:
        status = evaluate_field(rule, record, options)
        if not status.valid:
            errors[error_key(rule['field'])] = status.message
            if status.active:
                is_section_valid = False
    return is_section_valid, errors

def execute_step_validators(step_def: StepDefinition, record: dict[str, Any],
                            options: CatalogOptions | None = None) -> tuple[bool, dict[str, str]]:
    new_errors: dict[str, str] = {}
    is_step_valid = True
    for section in step_def['sections']:
        is_valid, errors = validate_section(section, record, options)
        new_errors.update(errors)
        if not is_valid:
            is_step_valid = False
    return is_step_valid, new_errors

def compute_progress(record: dict[str, Any], options: CatalogOptions | None = None) -> int:
    """Valid active-required fields over all active-required fields, 0-100, rounded half up."""
    active_count = 0
    valid_count = 0
    for rules in FIELD_RULES.values():
        for rule in rules:
            status = evaluate_field(rule, record, options)
            if status.active:
                active_count += 1
                if status.valid:
                    valid_count += 1
    if active_count == 0:
        return 0
    return math.floor(valid_count * 100 / active_count + 0.5)

def evaluate(record: dict[str, Any], options: CatalogOptions | None = None) -> Evaluation:
    section_valid: dict[Section, bool] = {}
    errors: dict[str, str] = {}
    for section in Section:
        section_valid[section], section_errors = validate_section(section, record, options)
        errors.update(section_errors)

    step_valid = {
        step_def['name']: all(section_valid[section] for section in step_def['sections'])
        for step_def in STEPS_BY_ID.values()
        if step_def['sections']
    }
    return Evaluation(
        section_valid=section_valid,
        step_valid=step_valid,
        completion_percent=compute_progress(record, options),
        errors=errors,
    )
