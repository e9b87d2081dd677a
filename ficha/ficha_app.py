# ===================================================================
# 1. IMPORTS
# ===================================================================
import logging
from nicegui import ui, app, run
from typing import Any, cast
from collections.abc import Callable

# Local application imports
from .catalogs import CatalogClient, CatalogService
from .config import API_BASE_URL, CATALOG_TIMEOUT, HOST, PORT, LOG_LEVEL
from .evaluation import error_key
from .form_data_builder import ADMISSION_TEMPLATE, calculate_next_step_id, calculate_prev_step_id
from .form_state import FormState, apply_exclusive_option
from .step_definitions import FIELD_RULES, STEPS_BY_ID, SECTION_TITLES
from .utils import (
    AppSchema, FieldConfig, FormField, StepDefinition, STEP_KEY, FORM_STATE_KEY,
    FORM_ATTEMPTED_SUBMISSION_KEY, CURRENT_STEP_ERRORS_KEY,
)
from .validation import always

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Shared by every session; catalogs are the same for all applicants.
catalogs = CatalogService(CatalogClient(API_BASE_URL, timeout=CATALOG_TIMEOUT))

# Changing one of these can show or hide other fields, so the step is redrawn.
REDRAWING_UI_TYPES: set[str] = {'select', 'radio', 'multiselect', 'date'}

# ===================================================================
# 2. SESSION HELPERS
# ===================================================================

def get_session() -> dict[str, Any]:
    """The per-tab session. Nothing is persisted once the tab closes."""
    session = cast(dict[str, Any], app.storage.client)
    if FORM_STATE_KEY not in session:
        session[FORM_STATE_KEY] = FormState()
        session[STEP_KEY] = ADMISSION_TEMPLATE['step_sequence'][0]
        session[FORM_ATTEMPTED_SUBMISSION_KEY] = False
        session[CURRENT_STEP_ERRORS_KEY] = {}
    return session

def get_form_state() -> FormState:
    return cast(FormState, get_session()[FORM_STATE_KEY])

# ===================================================================
# 3. CORE LOGIC & NAVIGATION
# ===================================================================

async def on_field_change(field: FormField, value: Any) -> None:
    form_state = get_form_state()
    if field.ui_type == 'multiselect':
        value = apply_exclusive_option(form_state.get(field.section, field.key), value or [])
    elif value is None:
        value = field.default_value
    if value == form_state.get(field.section, field.key):
        return

    form_state.update_section(field.section, {field.key: value})
    dependents = [f for f in AppSchema.get_section_fields(field.section) if f.depends_on == field.key]
    if dependents and value:
        # Warm the dependent catalog before redrawing
        await run.io_bound(catalogs.municipalities, value)

    render_progress.refresh()
    if field.ui_type in REDRAWING_UI_TYPES:
        update_step_content.refresh()

async def _handle_step_confirmation(button: ui.button) -> None:
    button.disable()
    try:
        session = get_session()
        current_step_id: int = session.get(STEP_KEY, 0)
        current_step_def = STEPS_BY_ID.get(current_step_id)
        if not current_step_def: return

        form_state = get_form_state()
        all_valid, new_errors = form_state.validate_step(
            current_step_id, catalogs.catalog_options(form_state.record)
        )
        session[FORM_ATTEMPTED_SUBMISSION_KEY] = True
        session[CURRENT_STEP_ERRORS_KEY] = new_errors

        if all_valid:
            logger.info(f"Step '{current_step_def['name']}' completed")
            ui.notify("¡Sección completada!", type='positive')
            next_step()
        else:
            logger.info(f"Step '{current_step_def['name']}' blocked by {len(new_errors)} field error(s)")
            ui.notify("Corrige los campos marcados antes de continuar.", type='negative')
            update_step_content.refresh()
    finally:
        button.enable()

def next_step() -> None:
    session = get_session()
    current_step_id = session.get(STEP_KEY, 0)
    session[STEP_KEY] = calculate_next_step_id(current_step_id, ADMISSION_TEMPLATE)
    session[FORM_ATTEMPTED_SUBMISSION_KEY] = False
    session[CURRENT_STEP_ERRORS_KEY] = {}
    update_step_content.refresh()

def prev_step() -> None:
    session = get_session()
    current_step_id = session.get(STEP_KEY, 0)
    session[STEP_KEY] = calculate_prev_step_id(current_step_id, ADMISSION_TEMPLATE)
    session[FORM_ATTEMPTED_SUBMISSION_KEY] = False
    session[CURRENT_STEP_ERRORS_KEY] = {}
    update_step_content.refresh()

def go_to_step(step_id: int) -> None:
    session = get_session()
    session[STEP_KEY] = step_id
    session[FORM_ATTEMPTED_SUBMISSION_KEY] = False
    session[CURRENT_STEP_ERRORS_KEY] = {}
    update_step_content.refresh()

# ===================================================================
# 4. UI RENDERING
# ===================================================================

def _handler(f: FormField) -> Callable[[Any], Any]:
    return lambda e: on_field_change(f, e.value)

def _create_text_input(f: FormField, v: Any, options: Any) -> ui.input:
    return ui.input(label=f.label, value=v, placeholder=f.placeholder, on_change=_handler(f))

def _create_select_input(f: FormField, v: Any, options: Any) -> ui.select:
    return ui.select(options=options, label=f.label, value=v if v in options else None,
                     with_input=True, on_change=_handler(f))

def _create_multiselect_input(f: FormField, v: Any, options: Any) -> ui.select:
    selected = [item for item in (v or []) if item in options]
    return ui.select(options=options, label=f.label, value=selected, multiple=True,
                     on_change=_handler(f)).props('use-chips')

def _create_radio_buttons(f: FormField, v: Any, options: Any) -> ui.radio:
    ui.label(f.label).classes('text-body2 text-grey-8')
    return ui.radio(options=options, value=v if v in options else None, on_change=_handler(f)).props('inline')

def _create_date_input(f: FormField, v: Any, options: Any) -> ui.input:
    return ui.input(label=f.label, value=v, on_change=_handler(f)).props('type=date stack-label')

def _create_readonly_input(f: FormField, v: Any, options: Any) -> ui.input:
    return ui.input(label=f.label, value=str(v or '')).props('readonly')

def create_field(field_definition: FormField) -> None:
    """Creates a UI element based on a FormField definition, showing its error once the step was submitted."""
    session = get_session()
    form_state = get_form_state()
    current_value = form_state.get(field_definition.section, field_definition.key)
    form_attempted: bool = session.get(FORM_ATTEMPTED_SUBMISSION_KEY, False)
    current_errors: dict[str, str] = session.get(CURRENT_STEP_ERRORS_KEY, {})

    error_message: str | None = current_errors.get(error_key(field_definition)) if form_attempted else None
    options = field_definition.options or catalogs.options_for(field_definition, form_state.record)

    with ui.column().classes('w-full no-wrap q-mb-sm'):
        # --- Element Creator Map ---
        creator_map: dict[str, Callable[..., Any]] = {
            'text': _create_text_input,
            'select': _create_select_input,
            'multiselect': _create_multiselect_input,
            'radio': _create_radio_buttons,
            'date': _create_date_input,
            'readonly': _create_readonly_input,
        }
        creator = creator_map.get(field_definition.ui_type)
        if not creator: raise ValueError(f"Unsupported UI type: {field_definition.ui_type}")

        element = creator(field_definition, current_value, options)
        if field_definition.ui_type == 'radio':
            if error_message:
                ui.label(error_message).classes('text-negative text-caption')
            return

        props_list: list[str] = ['outlined', 'dense']
        if field_definition.max_length:
            props_list.append(f"maxlength={field_definition.max_length}")
        if error_message:
            props_list.append(f'error-message="{error_message}"')
            props_list.append('error')
        element.props(' '.join(props_list)).classes('w-full')

def render_generic_step(step_def: StepDefinition) -> None:
    ui.label(step_def['title']).classes('text-h6 q-mb-xs')
    ui.markdown(step_def['subtitle'])

    record = get_form_state().record
    for section in step_def['sections']:
        ui.label(SECTION_TITLES[section]).classes('text-subtitle1 text-primary q-mt-md')
        rules: dict[str, FieldConfig] = {rule['field'].key: rule for rule in FIELD_RULES[section]}
        for field in AppSchema.get_section_fields(section):
            rule = rules.get(field.key)
            if rule is not None and not rule.get('visible_when', always)(record):
                continue
            create_field(field)

    with ui.row().classes('w-full q-mt-lg justify-between items-center'):
        if step_def['id'] != ADMISSION_TEMPLATE['step_sequence'][0]:
            ui.button("← Anterior", on_click=lambda: prev_step()).props('flat color=grey')
        else:
            ui.label()
        confirm_button = ui.button("Guardar y continuar →").props('color=primary unelevated')
        confirm_button.on('click', lambda: _handle_step_confirmation(confirm_button))

def render_review_step(step_def: StepDefinition) -> None:
    """Per-section status, with a shortcut back to every step that still has errors."""
    ui.label(step_def['title']).classes('text-h6 q-mb-md')
    ui.markdown(step_def['subtitle'])

    form_state = get_form_state()
    evaluation = form_state.evaluation(catalogs.catalog_options(form_state.record))

    for step_id in ADMISSION_TEMPLATE['step_sequence']:
        other_step = STEPS_BY_ID[step_id]
        for section in other_step['sections']:
            is_valid = evaluation.section_valid[section]
            with ui.row().classes('w-full items-center q-py-xs'):
                ui.icon('check_circle' if is_valid else 'error', color='positive' if is_valid else 'negative')
                ui.label(SECTION_TITLES[section]).classes('col')
                if not is_valid:
                    ui.button("Completar", on_click=lambda s=step_id: go_to_step(s)).props('flat dense color=primary')

    if all(evaluation.step_valid.values()):
        ui.label("Tu ficha está completa.").classes('text-positive text-subtitle1 q-mt-md')
    else:
        ui.label("Aún hay secciones pendientes.").classes('text-negative text-subtitle1 q-mt-md')

    with ui.row().classes('w-full q-mt-md justify-between items-center'):
        ui.button("← Volver y editar", on_click=lambda: prev_step()).props('flat color=grey')

@ui.refreshable
def render_progress() -> None:
    form_state = get_form_state()
    percent = form_state.evaluation(catalogs.catalog_options(form_state.record)).completion_percent
    with ui.row().classes('w-full items-center no-wrap'):
        ui.linear_progress(value=percent / 100, show_value=False).classes('col')
        ui.label(f"{percent}%").classes('text-caption q-ml-sm')

# ===================================================================
# 5. NAVIGATION ENGINE
# ===================================================================
@ui.refreshable
def update_step_content() -> None:
    session = get_session()
    current_step_id: int = session.get(STEP_KEY, 0)
    step_to_render = STEPS_BY_ID.get(current_step_id)
    if not step_to_render:
        ui.label(f"Error: paso desconocido ({current_step_id})").classes('text-negative text-h6')
        return
    if step_to_render.get('name') == 'review':
        render_review_step(step_to_render)
    else:
        render_generic_step(step_to_render)

# ===================================================================
# 6. PAGE ROUTING
# ===================================================================

@ui.page('/')
async def main_page() -> None:
    get_session()
    catalogs.discard_fallbacks()
    await run.io_bound(catalogs.preload)

    ui.query('body').style('background-color: #f0f2f5;')
    with ui.header(elevated=True).classes('bg-primary text-white q-pa-sm items-center'):
        ui.label("Ficha de admisión UTEZ").classes('text-h5')

    with ui.column().classes('w-full items-center q-mt-md'):
        with ui.card().classes('q-pa-md shadow-4').style('width: 95%; max-width: 900px;'):
            if catalogs.using_fallback:
                with ui.row().classes('w-full items-center text-warning'):
                    ui.icon('wifi_off')
                    ui.label("Error de conexión: se están usando datos locales.")
            render_progress()
            with ui.column().classes('w-full'):
                update_step_content()

def main() -> None:
    ui.run(host=HOST, port=PORT, title="Ficha de admisión UTEZ", reload=False)

if __name__ in {"__main__", "__mp_main__"}:
    main()
