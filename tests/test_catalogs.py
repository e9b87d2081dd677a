# tests/test_catalogs.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from ficha.catalogs import (
    CatalogClient, CatalogError, CatalogItem, CatalogService, normalize_catalog_response,
)
from ficha.utils import AppSchema, CATALOG_DISABILITIES, CATALOG_CAREERS, CATALOG_STATES

BASE_URL = 'http://catalogs.test/api/fichas-utez'

def make_response(payload: Any = None, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp

def make_client(*responses: MagicMock) -> tuple[CatalogClient, MagicMock]:
    session = MagicMock()
    session.get.side_effect = list(responses)
    return CatalogClient(BASE_URL, timeout=3, session=session), session

# --- normalize_catalog_response ---

def test_normalize_accepts_envelope_and_bare_list() -> None:
    envelope = {'data': [{'id': 1, 'name': 'Mexicana'}, {'id': 2, 'name': 'Extranjera'}]}
    bare = [{'id': 1, 'name': 'Mexicana'}, {'id': 2, 'name': 'Extranjera'}]
    expected = [CatalogItem(1, 'Mexicana'), CatalogItem(2, 'Extranjera')]

    assert normalize_catalog_response(envelope, 'nationalities') == expected
    assert normalize_catalog_response(bare, 'nationalities') == expected

def test_normalize_fills_missing_ids_and_trims_names() -> None:
    items = normalize_catalog_response([{'name': ' Visual '}, {'id': 'x', 'name': 'Motriz'}], 'disabilities')
    assert items == [CatalogItem(0, 'Visual'), CatalogItem(1, 'Motriz')]

@pytest.mark.parametrize('payload', [
    {'items': []},
    {'data': None},
    'Morelos',
    [{'id': 1}],
    [{'id': 1, 'name': ''}],
])
def test_normalize_rejects_bad_shapes(payload: Any) -> None:
    with pytest.raises(CatalogError):
        normalize_catalog_response(payload, 'states')

# --- CatalogClient ---

def test_client_builds_endpoint_urls() -> None:
    client, session = make_client(
        make_response({'data': [{'id': 17, 'name': 'Morelos'}]}),
        make_response({'data': [{'id': 1, 'name': 'Cuernavaca'}]}),
    )
    assert client.fetch_states() == [CatalogItem(17, 'Morelos')]
    assert client.fetch_municipalities(17) == [CatalogItem(1, 'Cuernavaca')]

    urls = [call.args[0] for call in session.get.call_args_list]
    assert urls == [f'{BASE_URL}/states/country/1', f'{BASE_URL}/municipalities/state/17']
    assert session.get.call_args.kwargs['timeout'] == 3

def test_client_http_error_raises_catalog_error() -> None:
    client, _ = make_client(make_response(status_code=500))
    with pytest.raises(CatalogError, match='HTTP 500'):
        client.fetch_careers()

def test_client_timeout_raises_catalog_error() -> None:
    session = MagicMock()
    session.get.side_effect = requests.Timeout()
    client = CatalogClient(BASE_URL, session=session)
    with pytest.raises(CatalogError, match='Tiempo de espera agotado'):
        client.fetch_nationalities()

def test_client_invalid_json_raises_catalog_error() -> None:
    resp = make_response()
    resp.json.side_effect = ValueError("Expecting value")
    client, _ = make_client(resp)
    with pytest.raises(CatalogError, match='JSON'):
        client.fetch_civil_statuses()

def test_client_uses_its_own_session_by_default() -> None:
    with patch('ficha.catalogs.requests.Session') as session_cls:
        session_cls.return_value.get.return_value = make_response([{'id': 1, 'name': 'Español'}])
        client = CatalogClient(BASE_URL)
        assert client.fetch_native_languages() == [CatalogItem(1, 'Español')]
    session_cls.assert_called_once_with()

# --- CatalogService ---

def test_service_falls_back_when_api_is_down() -> None:
    client = MagicMock(spec=CatalogClient)
    client.fetch_careers.side_effect = CatalogError("No se pudo conectar al servidor.")
    service = CatalogService(client)

    names = service.names(CATALOG_CAREERS)
    assert 'Ingeniería en Sistemas Computacionales' in names
    assert CATALOG_CAREERS in service.using_fallback
    assert service.errors[CATALOG_CAREERS] == "No se pudo conectar al servidor."

def test_service_puts_none_first_for_disabilities() -> None:
    client = MagicMock(spec=CatalogClient)
    client.fetch_disabilities.return_value = [CatalogItem(3, 'Visual'), CatalogItem(4, 'Otro')]
    service = CatalogService(client)

    assert service.names(CATALOG_DISABILITIES) == ['Ninguna', 'Visual', 'Otro']
    assert not service.using_fallback

def test_service_memoizes_catalogs() -> None:
    client = MagicMock(spec=CatalogClient)
    client.fetch_states.return_value = [CatalogItem(17, 'Morelos')]
    client.fetch_municipalities.return_value = [CatalogItem(1, 'Cuernavaca'), CatalogItem(2, 'Cuautla')]
    service = CatalogService(client)

    assert service.municipalities('Morelos') == ['Cuernavaca', 'Cuautla']
    assert service.municipalities('Morelos') == ['Cuernavaca', 'Cuautla']
    service.names(CATALOG_STATES)
    client.fetch_states.assert_called_once_with()
    client.fetch_municipalities.assert_called_once_with(17)

def test_service_municipalities_of_unknown_state() -> None:
    client = MagicMock(spec=CatalogClient)
    client.fetch_states.return_value = [CatalogItem(17, 'Morelos')]
    service = CatalogService(client)

    assert service.municipalities('') == []
    assert service.municipalities('Atlántida') == []
    client.fetch_municipalities.assert_not_called()

def test_options_for_dependent_field() -> None:
    client = MagicMock(spec=CatalogClient)
    client.fetch_states.return_value = [CatalogItem(17, 'Morelos')]
    client.fetch_municipalities.return_value = [CatalogItem(1, 'Cuernavaca')]
    service = CatalogService(client)
    municipio = AppSchema.AcademicHistory.MUNICIPIO

    record = {'academic_history': {'estado': 'Morelos'}}
    assert service.options_for(municipio, record) == ['Cuernavaca', 'otro']

    record = {'academic_history': {'estado': 'otro'}}
    assert service.options_for(municipio, record) == ['otro']

def test_service_retries_the_api_after_discarding_fallbacks() -> None:
    """Bundled lists served during an outage are dropped once asked, so a recovered API is used again."""
    client = MagicMock(spec=CatalogClient)
    client.fetch_careers.side_effect = [
        CatalogError("No se pudo conectar al servidor."),
        [CatalogItem(7, 'Ingeniería en Software')],
    ]
    client.fetch_states.side_effect = CatalogError("No se pudo conectar al servidor.")
    service = CatalogService(client)

    assert 'Ingeniería en Software' not in service.names(CATALOG_CAREERS)
    assert service.municipalities('Morelos'), "Bundled Morelos municipalities while offline"
    assert CATALOG_CAREERS in service.using_fallback

    service.discard_fallbacks()
    assert not service.using_fallback
    assert service.errors == {}
    assert service.names(CATALOG_CAREERS) == ['Ingeniería en Software']
    assert client.fetch_careers.call_count == 2

def test_discarding_fallbacks_keeps_live_catalogs() -> None:
    client = MagicMock(spec=CatalogClient)
    client.fetch_careers.return_value = [CatalogItem(7, 'Ingeniería en Software')]
    service = CatalogService(client)

    service.names(CATALOG_CAREERS)
    service.discard_fallbacks()
    service.names(CATALOG_CAREERS)
    client.fetch_careers.assert_called_once_with()
