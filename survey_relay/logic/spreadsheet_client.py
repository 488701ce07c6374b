"""Google Sheets `values:append` over httpx."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"


class SpreadsheetClient:
    def __init__(self, http: httpx.Client, base_url: str = SHEETS_API_BASE) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")

    def append(
        self,
        spreadsheet_id: str,
        range: str,
        api_key: str,
        values: Sequence[Sequence[Any]],
        access_token: Optional[str] = None,
    ) -> dict:
        """Append rows after the last row of `range` and return the API reply.

        Raises httpx.HTTPStatusError for non-2xx replies.
        """
        url = f"{self.base_url}/{quote(spreadsheet_id, safe='')}/values/{quote(range, safe='')}:append"
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        resp = self.http.post(
            url,
            params={"valueInputOption": "USER_ENTERED", "key": api_key},
            headers=headers,
            json={"values": [list(row) for row in values]},
        )
        resp.raise_for_status()
        body = resp.json()
        updates = body.get("updates", {}) if isinstance(body, dict) else {}
        logger.info(
            "spreadsheet.appended",
            extra={"spreadsheet_id": spreadsheet_id, "updated_range": updates.get("updatedRange")},
        )
        return body


__all__ = ["SpreadsheetClient", "SHEETS_API_BASE"]
