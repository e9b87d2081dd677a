# ficha/form_state.py
from __future__ import annotations
import copy
import logging
from typing import Any
from collections.abc import Mapping, Sequence

from .evaluation import CatalogOptions, Evaluation, evaluate, execute_step_validators
from .form_data_builder import Section
from .para import NONE_OPTION
from .step_definitions import FIELD_RULES, STEPS_BY_ID
from .utils import AppSchema, ApplicantRecord, empty_record
from .validation import calculate_age, parse_iso_date

logger = logging.getLogger(__name__)

def _derive_age(section_data: dict[str, Any]) -> int:
    birth_date = parse_iso_date(section_data.get('fecha_nacimiento'))
    return max(calculate_age(birth_date), 0) if birth_date else 0

def _clear_hidden_fields(record: dict[str, Any], section: Section) -> None:
    """Companion fields of `section` hidden by the current answers go back to their defaults."""
    section_data = record[section.value]
    changed = True
    while changed:
        changed = False
        for rule in FIELD_RULES[section]:
            visible_when = rule.get('visible_when')
            if visible_when is None or visible_when(record):
                continue
            field = rule['field']
            if section_data[field.key] != field.default_value:
                section_data[field.key] = copy.copy(field.default_value)
                changed = True

def update_section(record: Mapping[str, Any], section: Section | str,
                   partial: Mapping[str, Any]) -> ApplicantRecord:
    """
    Shallow-merges `partial` into one section and returns a new record.
    Every other section is carried over untouched; hidden companion fields
    of the merged section are cleared.
    """
    section = Section(section)
    current: dict[str, Any] = dict(record[section.value])
    unknown = set(partial) - set(current)
    if unknown:
        raise KeyError(f"Unknown field(s) for section '{section.value}': {', '.join(sorted(unknown))}")

    merged = {**current, **copy.deepcopy(dict(partial))}
    for key in partial:
        field = AppSchema.get_field(section, key)
        if field.uppercase and isinstance(merged[key], str):
            merged[key] = merged[key].upper()
        if merged[key] != current[key]:
            for dependent_key in field.resets:
                if dependent_key not in partial:
                    merged[dependent_key] = copy.copy(AppSchema.get_field(section, dependent_key).default_value)

    if section is Section.PERSONAL_GENERAL:
        merged['edad'] = _derive_age(merged)

    new_record: dict[str, Any] = {name: copy.deepcopy(data) for name, data in record.items()}
    new_record[section.value] = merged
    _clear_hidden_fields(new_record, section)
    return new_record  # type: ignore[return-value]

def apply_exclusive_option(previous: Sequence[str], current: Sequence[str],
                           exclusive: str = NONE_OPTION) -> list[str]:
    """
    Picking `exclusive` replaces the whole selection; picking anything else
    drops `exclusive` from it.
    """
    added = [option for option in current if option not in previous]
    if exclusive in added:
        return [exclusive]
    if exclusive in current and len(current) > 1:
        return [option for option in current if option != exclusive]
    return list(current)

class FormState:
    """Owns one applicant record for the lifetime of a browser session."""

    def __init__(self, record: Mapping[str, Any] | None = None) -> None:
        self._record: dict[str, Any] = dict(empty_record())
        for name, data in copy.deepcopy(dict(record or {})).items():
            # Sections missing from `record` keep their empty defaults
            self._record[name] = {**self._record.get(name, {}), **data}

    @property
    def record(self) -> ApplicantRecord:
        return copy.deepcopy(self._record)  # type: ignore[return-value]

    def section(self, section: Section | str) -> dict[str, Any]:
        return copy.deepcopy(self._record[Section(section).value])

    def get(self, section: Section, key: str) -> Any:
        return self._record[section.value][key]

    def update_section(self, section: Section | str, partial: Mapping[str, Any]) -> ApplicantRecord:
        self._record = dict(update_section(self._record, section, partial))
        logger.debug(f"Updated section '{Section(section).value}' with keys {sorted(partial)}")
        return self.record

    def evaluation(self, options: CatalogOptions | None = None) -> Evaluation:
        return evaluate(self._record, options)

    @property
    def completion_percent(self) -> int:
        return self.evaluation().completion_percent

    def validate_step(self, step_id: int, options: CatalogOptions | None = None) -> tuple[bool, dict[str, str]]:
        step_def = STEPS_BY_ID.get(step_id)
        if step_def is None:
            raise KeyError(f"Unknown step id: {step_id}")
        return execute_step_validators(step_def, self._record, options)

    def can_advance(self, step_id: int, options: CatalogOptions | None = None) -> bool:
        is_valid, _ = self.validate_step(step_id, options)
        return is_valid
