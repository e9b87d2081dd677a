from __future__ import annotations
from enum import Enum
from typing import TypedDict

# ===================================================================
# 1. THE SECTIONS OF AN APPLICANT RECORD
# ===================================================================
# Every merge and every rule names one of these, so the record can never
# grow a section the form does not know about.

class Section(str, Enum):
    PERSONAL_GENERAL = 'personal_general'
    ADDRESS = 'address'
    SUPPLEMENTARY = 'supplementary'
    INCOME = 'income'
    CAREER = 'career'
    ACADEMIC_HISTORY = 'academic_history'

# ===================================================================
# 2. THE "BLUEPRINT" OF THE WIZARD
# ===================================================================

class FormTemplate(TypedDict):
    """A blueprint for the admission wizard."""
    name: str
    description: str
    # The ordered sequence of step IDs the applicant walks through.
    step_sequence: list[int]

ADMISSION_TEMPLATE: FormTemplate = {
    'name': "Ficha de Admisión UTEZ",
    'description': "Universidad Tecnológica Emiliano Zapata del Estado de Morelos",
    'step_sequence': [
        # Applicant
        1, 2,
        # Career & school
        3, 4,
        # Review
        5,
    ],
}

# ===================================================================
# 3. NAVIGATION ALONG THE SEQUENCE
# ===================================================================

def calculate_next_step_id(current_step_id: int, form_template: FormTemplate | None) -> int:
    """Calculates the ID of the next step in the sequence."""
    if not form_template or not form_template['step_sequence']:
        return 0

    step_sequence: list[int] = form_template['step_sequence']
    try:
        current_index: int = step_sequence.index(current_step_id)
        if current_index < len(step_sequence) - 1:
            return step_sequence[current_index + 1]
        return current_step_id # Stay on the last step if there's no next one
    except ValueError:
        return step_sequence[0] # Go to start if current step isn't in sequence

def calculate_prev_step_id(current_step_id: int, form_template: FormTemplate | None) -> int:
    """Calculates the ID of the previous step in the sequence."""
    if not form_template or not form_template['step_sequence']:
        return 0

    step_sequence: list[int] = form_template['step_sequence']
    try:
        current_index: int = step_sequence.index(current_step_id)
        return step_sequence[current_index - 1] if current_index > 0 else step_sequence[0]
    except ValueError:
        return step_sequence[0]
