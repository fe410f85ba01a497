# Shared pytest fixtures
from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from marks_lookup.auth.dependencies import get_sheets_reader
from marks_lookup.config import ServiceAccountCredentials, Settings
from marks_lookup.main import app
from marks_lookup.schemas.marks import SheetInfo

ENROLLMENT = "20210000001"

TITLE_ROW = ["Enrollment No.", "Course", "Fee", "Maths", "", "", "Physics", "", "Student Name", "Year"]
# Maths: internal col 3, external col 4, spacer col 5. Physics (last): internal 6, external 7.
DATA_ROW = [ENROLLMENT, "B.Tech CSE", "Y", "40", "35", "", "38", "30", "Asha Rao", "2nd Year"]


class FakeSheetsReader:
    """In-memory SheetsReader; `sheets` maps title -> rows in listing order."""

    def __init__(self, sheets: dict[str, list[list[str]]] | None = None):
        self.sheets = sheets or {}
        self.calls: list[tuple[str, ...]] = []

    def list_sheets(self) -> list[SheetInfo]:
        self.calls.append(("list_sheets",))
        return [SheetInfo(sheet_id=i, title=t) for i, t in enumerate(self.sheets)]

    def get_rows(self, title: str) -> list[list[str]]:
        self.calls.append(("get_rows", title))
        return [list(row) for row in self.sheets[title]]


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None, raise_json: bool = False):
        self.status_code = status_code
        self._json = json_data
        self._raise_json = raise_json

    def json(self):
        if self._raise_json:
            raise ValueError("not json")
        return self._json


class FakeSession:
    """Stands in for requests.Session; queue responses (or exceptions) per method."""

    def __init__(self, post=None, get=None):
        self.post_responses = list(post or [])
        self.get_responses = list(get or [])
        self.posts: list[dict] = []
        self.gets: list[dict] = []

    def _next(self, queue):
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, data=None, timeout=None):
        self.posts.append({"url": url, "data": data, "timeout": timeout})
        return self._next(self.post_responses)

    def get(self, url, params=None, headers=None, timeout=None):
        self.gets.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        return self._next(self.get_responses)


@pytest.fixture(scope="session")
def rsa_key_pair() -> tuple[str, str]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture()
def settings(rsa_key_pair) -> Settings:
    return Settings(
        credentials=ServiceAccountCredentials(
            client_email="marks-reader@example-project.iam.gserviceaccount.com",
            private_key=rsa_key_pair[0],
        ),
        spreadsheet_id="spreadsheet-123",
        timeout_seconds=5.0,
    )


@pytest.fixture()
def title_row() -> list[str]:
    return list(TITLE_ROW)


@pytest.fixture()
def data_row() -> list[str]:
    return list(DATA_ROW)


@pytest.fixture()
def fake_reader() -> FakeSheetsReader:
    return FakeSheetsReader(
        {
            "Sem 1": [
                ["Marks Statement"],
                TITLE_ROW,
                ["20210000999", "B.Tech CSE", "Y", "10", "10", "", "10", "10", "Other", "1st Year"],
            ],
            "Sem 2": [
                TITLE_ROW,
                DATA_ROW,
            ],
        }
    )


@pytest.fixture()
def api_client(fake_reader: FakeSheetsReader):
    app.dependency_overrides[get_sheets_reader] = lambda: fake_reader
    yield TestClient(app)
    app.dependency_overrides.clear()
