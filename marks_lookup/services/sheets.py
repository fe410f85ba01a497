from typing import Any, List, Optional, Protocol
from urllib.parse import quote

import requests

from ..auth.security import fetch_access_token
from ..config import Settings
from ..errors import UpstreamFetchError
from ..log import get_logger
from ..schemas.marks import SheetInfo


logger = get_logger("sheets")


class SheetsReader(Protocol):
    """The two Sheets API reads the marks lookup needs."""

    def list_sheets(self) -> List[SheetInfo]:
        ...

    def get_rows(self, title: str) -> List[List[str]]:
        ...


class GoogleSheetsClient:
    """
    SheetsReader backed by the Google Sheets v4 REST API.

    The bearer token is fetched on the first read, so building a client costs
    nothing and a request rejected before any read never talks to Google.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self._access_token: Optional[str] = None

    @property
    def access_token(self) -> str:
        if self._access_token is None:
            self._access_token = fetch_access_token(self.settings, self.session)
        return self._access_token

    def _spreadsheet_url(self, *parts: str) -> str:
        base = f"{self.settings.sheets_api_url}/spreadsheets/{quote(self.settings.spreadsheet_id, safe='')}"
        return "/".join([base, *parts])

    def _get_json(self, url: str, params: Optional[dict] = None) -> dict:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        try:
            res = self.session.get(
                url, params=params, headers=headers, timeout=self.settings.timeout_seconds
            )
        except requests.RequestException as e:
            raise UpstreamFetchError(f"sheets request failed: {type(e).__name__}") from e

        if not 200 <= res.status_code < 300:
            raise UpstreamFetchError(f"sheets API returned HTTP {res.status_code}")
        try:
            payload = res.json()
        except ValueError as e:
            raise UpstreamFetchError("sheets API returned malformed JSON") from e
        if not isinstance(payload, dict):
            raise UpstreamFetchError("sheets API returned an unexpected payload")
        return payload

    def list_sheets(self) -> List[SheetInfo]:
        payload = self._get_json(self._spreadsheet_url(), params={"fields": "sheets.properties"})
        sheets: List[SheetInfo] = []
        for sheet in payload.get("sheets", []):
            props: dict[str, Any] = sheet.get("properties", {})
            if "title" not in props:
                raise UpstreamFetchError("sheet listing entry has no title")
            sheets.append(SheetInfo(sheet_id=props.get("sheetId", 0), title=props["title"]))
        logger.debug("Spreadsheet has %d sheets", len(sheets))
        return sheets

    def get_rows(self, title: str) -> List[List[str]]:
        payload = self._get_json(self._spreadsheet_url("values", quote(title, safe="")))
        values = payload.get("values", [])
        return [[str(cell) for cell in row] for row in values]
