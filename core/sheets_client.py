"""
Google Sheets ledger client.

The ledger is an append-only spreadsheet; one row per confirmation.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from .exceptions import LedgerError, UpstreamTimeoutError
from .google_auth import SHEETS_SCOPES, GoogleSession


class SheetsLedgerClient:
    """Appends order rows to a spreadsheet range (e.g. ``Sheet1!A:J``)."""

    def __init__(
        self,
        service: Any,
        spreadsheet_id: str,
        range_name: str = "Sheet1!A:J",
        http_factory: Optional[Callable[[], Any]] = None,
        timeout_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._service = service
        self._spreadsheet_id = spreadsheet_id
        self._range = range_name
        self._http_factory = http_factory
        self._timeout = timeout_seconds
        self._logger = logger or logging.getLogger("print_prep.core.sheets_client")

    @classmethod
    def from_service_account(cls, credentials_file: str, spreadsheet_id: str,
                             range_name: str = "Sheet1!A:J", timeout_seconds: float = 30.0,
                             logger: Optional[logging.Logger] = None) -> "SheetsLedgerClient":
        session = GoogleSession.from_service_account(
            "sheets", "v4", credentials_file, SHEETS_SCOPES, timeout_seconds
        )
        return cls(session.service, spreadsheet_id, range_name, session.new_http,
                   timeout_seconds, logger)

    def append_row(self, values: List[str]) -> None:
        """
        Append one row after the last non-empty row of the range.

        Raises:
            LedgerError: Sheets rejected the append
            UpstreamTimeoutError: Append did not finish in time
        """
        request = self._service.spreadsheets().values().append(
            spreadsheetId=self._spreadsheet_id,
            range=self._range,
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": [list(values)]},
        )
        self._execute(request, "ledger append")
        self._logger.info(f"Appended ledger row for order {values[1] if len(values) > 1 else '?'}")

    def has_order(self, order_number: str) -> bool:
        """True if any existing row carries ``order_number`` in column B."""
        sheet = self._range.split("!", 1)[0] if "!" in self._range else self._range
        request = self._service.spreadsheets().values().get(
            spreadsheetId=self._spreadsheet_id,
            range=f"{sheet}!B:B",
        )
        response = self._execute(request, "ledger lookup")
        return any(row and str(row[0]) == str(order_number) for row in response.get("values", []))

    def _execute(self, request, operation: str) -> dict:
        try:
            if self._http_factory is not None:
                return request.execute(http=self._http_factory())
            return request.execute()
        except HttpError as exc:
            self._logger.error(f"Sheets {operation} failed: {exc}")
            raise LedgerError(f"Sheets {operation} failed: {getattr(exc, 'reason', exc)}",
                              {"operation": operation})
        except TimeoutError:
            self._logger.error(f"Sheets {operation} timed out")
            raise UpstreamTimeoutError(f"Sheets {operation}", self._timeout)
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            self._logger.error(f"Sheets {operation} failed: {exc}")
            raise LedgerError(f"Sheets {operation} failed: {exc}", {"operation": operation})
