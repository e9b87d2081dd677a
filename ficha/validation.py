# ficha/validation.py
from __future__ import annotations
import re
from re import Pattern
from typing import Any
from collections.abc import Callable
from datetime import date, datetime

from .form_data_builder import Section

# --- Type Aliases ---
ValidationResult = tuple[bool, str]
# A validator gets the value and the entire applicant record for context
ValidatorFunc = Callable[[Any | None, dict[str, Any]], ValidationResult]
# A predicate decides, from the whole record, whether a rule applies
Predicate = Callable[[dict[str, Any]], bool]

# --- Regex Patterns (centralized) ---
NAME_PATTERN: Pattern[str] = re.compile(r'^[a-zA-ZáéíóúÁÉÍÓÚüÜñÑ\s]+$')
# Codes are stored uppercase but accepted in either case
CURP_PATTERN: Pattern[str] = re.compile(r'^[A-Z]{4}[0-9]{6}[HM][A-Z]{5}[0-9A-Z][0-9]$', re.IGNORECASE)
POSTAL_CODE_PATTERN: Pattern[str] = re.compile(r'^\d{5}$')
EMAIL_PATTERN: Pattern[str] = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
CCT_PATTERN: Pattern[str] = re.compile(r'^[A-Z0-9]{10}$', re.IGNORECASE)
INCOME_PATTERN: Pattern[str] = re.compile(r'^\d{1,5}$')
AREA_CODE_PATTERN: Pattern[str] = re.compile(r'^\d{3}$')
PHONE_PATTERN: Pattern[str] = re.compile(r'^\d{7}$')
# Foreign place names: no digits or punctuation
PLACE_PATTERN: Pattern[str] = re.compile(r'^[^0-9!@#$%^&*(),.?":{}|<>]+$')
DATE_FORMAT_STORAGE: str = '%Y-%m-%d'

# ===================================================================
# RECORD HELPERS
# ===================================================================

def get_value(record: dict[str, Any], section: Section, key: str) -> Any | None:
    """Reads a single answer out of the applicant record."""
    return record.get(section.value, {}).get(key)

def is_blank(value: Any | None) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False

def calculate_age(birth_date: date, today: date | None = None) -> int:
    """Full years elapsed between `birth_date` and `today`."""
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age

def parse_iso_date(value: Any | None) -> date | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT_STORAGE).date()
    except ValueError:
        return None

# ===================================================================
# PREDICATES (when is a field required / visible?)
# ===================================================================

def always(record: dict[str, Any]) -> bool:
    return True

def never(record: dict[str, Any]) -> bool:
    return False

def field_equals(section: Section, key: str, expected: str, ignore_case: bool = False) -> Predicate:
    """True when the controlling field holds `expected`."""
    def predicate(record: dict[str, Any]) -> bool:
        value = get_value(record, section, key)
        if not isinstance(value, str):
            return False
        if ignore_case:
            return value.strip().casefold() == expected.casefold()
        return value == expected
    return predicate

def field_contains(section: Section, key: str, option: str) -> Predicate:
    """True when a multi-selection includes `option`."""
    def predicate(record: dict[str, Any]) -> bool:
        value = get_value(record, section, key)
        return isinstance(value, (list, tuple)) and option in value
    return predicate

def any_of(*predicates: Predicate) -> Predicate:
    def predicate(record: dict[str, Any]) -> bool:
        return any(p(record) for p in predicates)
    return predicate

# ===================================================================
# GENERIC VALIDATOR GENERATORS (Our Reusable Building Blocks)
# ===================================================================

def required(message: str = "Este campo es obligatorio") -> ValidatorFunc:
    """Ensures a value is not None, not an empty string, and not just whitespace."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if is_blank(value):
            return False, message
        return True, ""
    return validator

def required_choice(message: str = "Selecciona una opción") -> ValidatorFunc:
    """Ensures a value from a select/radio is not None or empty/whitespace."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False, message
        return True, ""
    return validator

def required_selection(message: str = "Selecciona al menos una opción") -> ValidatorFunc:
    """Ensures a multi-select holds at least one option."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if not isinstance(value, (list, tuple)) or not value:
            return False, message
        return True, ""
    return validator

def match_pattern(pattern: Pattern[str], message: str) -> ValidatorFunc:
    """Ensures a string value matches a regex pattern."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        # Chain it with required() to validate non-empty fields.
        if not value or not isinstance(value, str):
            return True, "" # Don't fail on empty values, that's `required`'s job.
        if not pattern.match(value.strip()):
            return False, message
        return True, ""
    return validator

def min_length(limit: int, message: str) -> ValidatorFunc:
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value.strip()) < limit:
            return False, message
        return True, ""
    return validator

def max_length(limit: int, message: str) -> ValidatorFunc:
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value.strip()) > limit:
            return False, message
        return True, ""
    return validator

def exact_length(length: int, message: str) -> ValidatorFunc:
    """Ensures a code field has exactly `length` characters."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value.strip()) != length:
            return False, message
        return True, ""
    return validator

def is_within_range(min_value: float, max_value: float, message: str) -> ValidatorFunc:
    """Ensures a numeric (or numeric string) value lies in [min_value, max_value]."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if value is None or (isinstance(value, str) and not value.strip()):
            return True, ""
        try:
            number = float(value)
        except (TypeError, ValueError):
            return False, message
        if number != number or number < min_value or number > max_value: # NaN fails too
            return False, message
        return True, ""
    return validator

def matches_field(section: Section, other_key: str, message: str) -> ValidatorFunc:
    """Ensures a confirmation field repeats the field it confirms."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        other_value = get_value(record, section, other_key) or ''
        if value.strip().upper() != str(other_value).strip().upper():
            return False, message
        return True, ""
    return validator

def is_min_age(years: int, message: str, today: date | None = None) -> ValidatorFunc:
    """Ensures an ISO birth date belongs to someone at least `years` old."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ""
        birth_date = parse_iso_date(value)
        if birth_date is None:
            return False, "Fecha inválida."
        if calculate_age(birth_date, today) < years:
            return False, message
        return True, ""
    return validator

def is_within_date_range(
    min_date: date | None = date(1900, 1, 1), max_date: date | None = None,
    message: str = "La fecha está fuera del rango permitido."
) -> ValidatorFunc:
    """Ensures a date string is within the specified min/max range. `max_date` defaults to today."""
    def validator(value: str | None, record: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ''
        dt_object = parse_iso_date(value)
        if dt_object is None:
            return False, "Fecha inválida."
        upper = max_date or date.today()
        if (min_date and dt_object < min_date) or dt_object > upper:
            return False, message
        return True, ''
    return validator

def exclusive_choice(option: str, message: str) -> ValidatorFunc:
    """Ensures `option` (e.g. "Ninguna") is never combined with other choices."""
    def validator(value: Any | None, record: dict[str, Any]) -> ValidationResult:
        if isinstance(value, (list, tuple)) and option in value and len(value) > 1:
            return False, message
        return True, ""
    return validator
