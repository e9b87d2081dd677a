# ficha/catalogs.py
"""
Reference catalogs (states, municipalities, careers, ...) served by the
admissions REST API.

`CatalogClient` talks HTTP and normalizes every endpoint to a list of
`CatalogItem`. `CatalogService` sits between the client and the form: it
memoizes results, and when the API is unreachable it falls back to the
lists bundled in `para` so the applicant can keep going.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any

import requests

from .config import API_BASE_URL, CATALOG_TIMEOUT
from .evaluation import CatalogOptions, options_key
from .para import (
    NONE_OPTION, OTHER_MASC, OTHER_FEM, OTHER_OR_SEVERAL,
    nationalities_fallback, mexican_states, municipalities_fallback,
    civil_statuses_fallback, native_languages_fallback, indigenous_languages,
    disabilities_fallback, high_school_types, careers,
)
from .step_definitions import FIELD_RULES
from .utils import (
    FormField,
    CATALOG_NATIONALITIES, CATALOG_STATES, CATALOG_MUNICIPALITIES, CATALOG_CIVIL_STATUSES,
    CATALOG_NATIVE_LANGUAGES, CATALOG_INDIGENOUS_LANGUAGES, CATALOG_DISABILITIES,
    CATALOG_HIGH_SCHOOL_TYPES, CATALOG_CAREERS,
)
from .validation import get_value

logger = logging.getLogger(__name__)

MEXICO_COUNTRY_ID: int = 1

class CatalogError(Exception):
    """A catalog could not be fetched or came back in an unexpected shape."""

@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str

def normalize_catalog_response(payload: Any, catalog: str) -> list[CatalogItem]:
    """
    Accepts both `{"data": [...]}` envelopes and bare arrays of
    `{"id": ..., "name": ...}` objects.
    """
    items = payload.get('data') if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise CatalogError(f"La respuesta de '{catalog}' no contiene un arreglo válido.")

    normalized: list[CatalogItem] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not item.get('name'):
            raise CatalogError(f"Elemento inválido en el índice {index}: falta la propiedad 'name'.")
        try:
            item_id = int(item['id'])
        except (KeyError, TypeError, ValueError):
            item_id = index
        normalized.append(CatalogItem(id=item_id, name=str(item['name']).strip()))
    return normalized

class CatalogClient:
    def __init__(self, base_url: str = API_BASE_URL, timeout: float = CATALOG_TIMEOUT,
                 session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str, catalog: str) -> list[CatalogItem]:
        url = f"{self.base_url}{path}"
        logger.info(f"Fetching catalog '{catalog}' from {url}")
        try:
            resp = self.session.get(url, headers={'Accept': 'application/json'}, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.Timeout as e:
            raise CatalogError("Tiempo de espera agotado. Verifica tu conexión a internet.") from e
        except requests.ConnectionError as e:
            raise CatalogError("No se pudo conectar al servidor.") from e
        except requests.HTTPError as e:
            status = getattr(e.response, 'status_code', '?')
            raise CatalogError(f"Error del servidor: HTTP {status}") from e
        except ValueError as e:
            # requests' JSONDecodeError is both a ValueError and a RequestException
            raise CatalogError(f"La respuesta de '{catalog}' no es JSON válido.") from e
        except requests.RequestException as e:
            raise CatalogError(f"No se pudo obtener el catálogo '{catalog}': {e}") from e
        return normalize_catalog_response(payload, catalog)

    def fetch_nationalities(self) -> list[CatalogItem]:
        return self._get('/nationalities', CATALOG_NATIONALITIES)

    def fetch_states(self, country_id: int = MEXICO_COUNTRY_ID) -> list[CatalogItem]:
        return self._get(f'/states/country/{country_id}', CATALOG_STATES)

    def fetch_municipalities(self, state_id: int) -> list[CatalogItem]:
        return self._get(f'/municipalities/state/{state_id}', CATALOG_MUNICIPALITIES)

    def fetch_civil_statuses(self) -> list[CatalogItem]:
        return self._get('/civil-status', CATALOG_CIVIL_STATUSES)

    def fetch_native_languages(self) -> list[CatalogItem]:
        return self._get('/native-languages', CATALOG_NATIVE_LANGUAGES)

    def fetch_indigenous_languages(self) -> list[CatalogItem]:
        return self._get('/indigenous-languages', CATALOG_INDIGENOUS_LANGUAGES)

    def fetch_disabilities(self) -> list[CatalogItem]:
        return self._get('/disabilities', CATALOG_DISABILITIES)

    def fetch_high_school_types(self) -> list[CatalogItem]:
        return self._get('/high-school-types', CATALOG_HIGH_SCHOOL_TYPES)

    def fetch_careers(self) -> list[CatalogItem]:
        return self._get('/careers', CATALOG_CAREERS)

# Catalog name -> (client method, offline fallback)
_SOURCES: dict[str, tuple[str, list[str]]] = {
    CATALOG_NATIONALITIES: ('fetch_nationalities', nationalities_fallback),
    CATALOG_STATES: ('fetch_states', mexican_states),
    CATALOG_CIVIL_STATUSES: ('fetch_civil_statuses', civil_statuses_fallback),
    CATALOG_NATIVE_LANGUAGES: ('fetch_native_languages', native_languages_fallback),
    CATALOG_INDIGENOUS_LANGUAGES: ('fetch_indigenous_languages', indigenous_languages),
    CATALOG_DISABILITIES: ('fetch_disabilities', disabilities_fallback),
    CATALOG_HIGH_SCHOOL_TYPES: ('fetch_high_school_types', high_school_types),
    CATALOG_CAREERS: ('fetch_careers', careers),
}

# Options the form's rules depend on: (leading, trailing)
_ENSURED_OPTIONS: dict[str, tuple[list[str], list[str]]] = {
    CATALOG_DISABILITIES: ([NONE_OPTION], [OTHER_MASC]),
    CATALOG_INDIGENOUS_LANGUAGES: ([NONE_OPTION], [OTHER_OR_SEVERAL]),
    CATALOG_HIGH_SCHOOL_TYPES: ([], [OTHER_FEM]),
}

def _from_names(names: list[str]) -> list[CatalogItem]:
    return [CatalogItem(id=index + 1, name=name) for index, name in enumerate(names)]

class CatalogService:
    def __init__(self, client: CatalogClient) -> None:
        self.client = client
        self._cache: dict[str, list[CatalogItem]] = {}
        self.using_fallback: set[str] = set()
        self.errors: dict[str, str] = {}

    def items(self, catalog: str) -> list[CatalogItem]:
        if catalog in self._cache:
            return self._cache[catalog]
        method_name, fallback = _SOURCES[catalog]
        try:
            items = getattr(self.client, method_name)()
        except CatalogError as e:
            logger.warning(f"Catalog '{catalog}' unavailable, using bundled data: {e}")
            self.errors[catalog] = str(e)
            self.using_fallback.add(catalog)
            items = _from_names(fallback)

        leading, trailing = _ENSURED_OPTIONS.get(catalog, ([], []))
        names = {item.name for item in items}
        items = (
            [CatalogItem(id=0, name=name) for name in leading if name not in names]
            + items
            + [CatalogItem(id=-1, name=name) for name in trailing if name not in names]
        )
        self._cache[catalog] = items
        return items

    def names(self, catalog: str) -> list[str]:
        return [item.name for item in self.items(catalog)]

    def municipalities(self, state_name: str | None) -> list[str]:
        if not state_name:
            return []
        cache_key = f"{CATALOG_MUNICIPALITIES}:{state_name}"
        if cache_key in self._cache:
            return [item.name for item in self._cache[cache_key]]

        state = next((item for item in self.items(CATALOG_STATES) if item.name == state_name), None)
        if state is None or CATALOG_STATES in self.using_fallback:
            # Fallback state ids are made up; the API can't be asked about them.
            items = _from_names(municipalities_fallback.get(state_name, []))
            if CATALOG_STATES in self.using_fallback:
                self.using_fallback.add(cache_key)
        else:
            try:
                items = self.client.fetch_municipalities(state.id)
            except CatalogError as e:
                logger.warning(f"Municipalities of '{state_name}' unavailable, using bundled data: {e}")
                self.errors[cache_key] = str(e)
                self.using_fallback.add(cache_key)
                items = _from_names(municipalities_fallback.get(state_name, []))
        self._cache[cache_key] = items
        return [item.name for item in items]

    def preload(self) -> None:
        for catalog in _SOURCES:
            self.items(catalog)

    def discard_fallbacks(self) -> None:
        """Forgets bundled lists served while the API was down, so the next lookup asks the API again."""
        for catalog in self.using_fallback:
            self._cache.pop(catalog, None)
            self.errors.pop(catalog, None)
        self.using_fallback.clear()

    def options_for(self, field: FormField, record: dict[str, Any]) -> list[str]:
        """The choices to offer for a catalog-backed field under the current answers."""
        if not field.catalog:
            return list(field.options or [])
        if field.catalog == CATALOG_MUNICIPALITIES:
            parent = get_value(record, field.section, field.depends_on or '')
            if parent in field.extra_options:
                return list(field.extra_options)
            names = self.municipalities(parent)
        else:
            names = self.names(field.catalog)
        return [*names, *(option for option in field.extra_options if option not in names)]

    def catalog_options(self, record: dict[str, Any]) -> CatalogOptions:
        """Every catalog the record's fields draw from, keyed the way `evaluation` expects."""
        options: dict[str, list[str]] = {}
        for rules in FIELD_RULES.values():
            for rule in rules:
                field = rule['field']
                key = options_key(field, record)
                if key is None or key in options:
                    continue
                # extra_options are added back by the evaluator
                options[key] = [
                    name for name in self.options_for(field, record) if name not in field.extra_options
                ]
        return options
