from __future__ import annotations

import pytest
import requests

from conftest import FakeResponse, FakeSession
from marks_lookup.errors import UpstreamAuthError, UpstreamFetchError
from marks_lookup.services.sheets import GoogleSheetsClient

TOKEN = FakeResponse(200, {"access_token": "ya29.token"})
LISTING = {
    "sheets": [
        {"properties": {"sheetId": 0, "title": "Sem 1", "index": 0}},
        {"properties": {"sheetId": 7, "title": "Sem 2", "index": 1}},
    ]
}


def test_client_does_not_authenticate_until_first_read(settings):
    session = FakeSession()
    GoogleSheetsClient(settings, session)
    assert session.posts == []


def test_list_sheets_preserves_order(settings):
    session = FakeSession(post=[TOKEN], get=[FakeResponse(200, LISTING)])
    client = GoogleSheetsClient(settings, session)

    sheets = client.list_sheets()

    assert [(s.sheet_id, s.title) for s in sheets] == [(0, "Sem 1"), (7, "Sem 2")]
    [call] = session.gets
    assert call["url"] == "https://sheets.googleapis.com/v4/spreadsheets/spreadsheet-123"
    assert call["params"] == {"fields": "sheets.properties"}
    assert call["headers"] == {"Authorization": "Bearer ya29.token"}
    assert call["timeout"] == 5.0


def test_get_rows_quotes_title_and_stringifies(settings):
    session = FakeSession(
        post=[TOKEN],
        get=[FakeResponse(200, {"range": "'Sem 1'!A1:Z9", "values": [["Enrollment No."], [20210000001, "BCA"]]})],
    )
    client = GoogleSheetsClient(settings, session)

    rows = client.get_rows("Sem 1/A")

    assert rows == [["Enrollment No."], ["20210000001", "BCA"]]
    assert session.gets[0]["url"].endswith("/spreadsheets/spreadsheet-123/values/Sem%201%2FA")


def test_get_rows_of_empty_sheet(settings):
    session = FakeSession(post=[TOKEN], get=[FakeResponse(200, {"range": "Empty!A1:Z1000"})])
    assert GoogleSheetsClient(settings, session).get_rows("Empty") == []


def test_token_is_fetched_once_per_client(settings):
    session = FakeSession(
        post=[TOKEN],
        get=[FakeResponse(200, LISTING), FakeResponse(200, {"values": []}), FakeResponse(200, {"values": []})],
    )
    client = GoogleSheetsClient(settings, session)
    client.list_sheets()
    client.get_rows("Sem 1")
    client.get_rows("Sem 2")
    assert len(session.posts) == 1


def test_token_failure_surfaces_before_any_fetch(settings):
    session = FakeSession(post=[FakeResponse(401, {"error": "unauthorized_client"})])
    with pytest.raises(UpstreamAuthError):
        GoogleSheetsClient(settings, session).list_sheets()
    assert session.gets == []


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(403, {"error": {"code": 403}}),
        FakeResponse(404, {"error": {"code": 404}}),
        FakeResponse(200, raise_json=True),
        FakeResponse(200, []),
        requests.ConnectionError("reset"),
        requests.Timeout("slow"),
    ],
)
def test_fetch_failures(settings, response):
    session = FakeSession(post=[TOKEN], get=[response])
    with pytest.raises(UpstreamFetchError):
        GoogleSheetsClient(settings, session).get_rows("Sem 1")


def test_listing_entry_without_title(settings):
    session = FakeSession(post=[TOKEN], get=[FakeResponse(200, {"sheets": [{"properties": {"sheetId": 1}}]})])
    with pytest.raises(UpstreamFetchError):
        GoogleSheetsClient(settings, session).list_sheets()
