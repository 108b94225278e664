# dss_auditor/repositories/sheets_repo.py
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from dss_auditor.core.errors import ConfigError, SheetsWriteError
from dss_auditor.repositories.base import BaseHttpRepository
from dss_auditor.services.engine.verdict import AuditVerdict

logger = logging.getLogger("dss.sheets")


SHEET_COLUMNS = [
    "Booking ID",
    "Week",
    "DSS Compliance?",
    "Booking Value Tier",
    "L1 Reason",
    "L2 Reason",
    "Experience Type",
    "Refund Type Verdict",
    "Refund Amount & Method",
    "DSS Rule Misapplied",
    "DSS Severity Match",
]


class SheetsProxyWriter(BaseHttpRepository):
    """
    Appends verdict rows through a Google Apps Script web app.
    The proxy owns spreadsheet auth; this side only POSTs rows.
    """

    def __init__(
        self,
        *,
        proxy_url: str,
        spreadsheet_id: str = "",
        sheet_name: str = "Refund Audits",
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        if not proxy_url:
            raise ConfigError("Missing SHEETS_PROXY_URL")
        super().__init__(client, timeout=timeout)
        self.proxy_url = proxy_url
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name

    @staticmethod
    def format_row(verdict: AuditVerdict) -> List[str]:
        record = verdict.as_record()
        return [str(record.get(col, "") or "") for col in SHEET_COLUMNS]

    def write(self, verdict: AuditVerdict) -> Dict[str, Any]:
        return self._post({
            "spreadsheetId": self.spreadsheet_id,
            "sheetName": self.sheet_name,
            "row": self.format_row(verdict),
        })

    def write_many(self, verdicts: Sequence[AuditVerdict]) -> Dict[str, Any]:
        if not verdicts:
            return {"appended": 0}
        return self._post({
            "spreadsheetId": self.spreadsheet_id,
            "sheetName": self.sheet_name,
            "rows": [self.format_row(v) for v in verdicts],
        })

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            # Apps Script web apps answer with a 302 to the script output
            r = self.client.post(self.proxy_url, json=self._encode(body), follow_redirects=True)
        except httpx.HTTPError as e:
            raise SheetsWriteError(f"Sheets proxy unreachable: {e}") from e

        if r.status_code >= 400:
            raise SheetsWriteError(f"Sheets proxy request failed: {r.status_code}")

        try:
            result = r.json()
        except ValueError:
            result = {"raw": r.text}

        logger.info("sheet row(s) appended sheet=%s", self.sheet_name)
        return result
