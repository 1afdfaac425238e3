# app/sheets_backend.py
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Set

import gspread
import requests
from google.auth.exceptions import RefreshError, TransportError as GoogleTransportError
from google.oauth2.service_account import Credentials
from gspread.exceptions import APIError, GSpreadException

from .config import BACKEND_CLIENT, BACKEND_JWT, SCOPES, SHEETS_API_URL, TOKEN_URL, SheetConfig
from .credentials import build_service_credential, to_pem
from .exceptions import AuthenticationError, ConfigurationError, TransportError
from .models import JoinWaitlistResponse, ServiceCredential, WaitlistEntry
from .token_exchange import fetch_access_token

logger = logging.getLogger(__name__)


def _flatten_data_rows(rows: List[List[str]]) -> Set[str]:
    """Skip the header row and collect every value from columns A:B"""
    return {value for row in rows[1:] for value in row[:2]}


class WaitlistSheet(ABC):
    """Spreadsheet holding one (email, name) row per waitlist signup"""

    def __init__(self, config: SheetConfig):
        self.config = config

    @abstractmethod
    def list_emails(self) -> Set[str]:
        ...

    @abstractmethod
    def append_entry(self, entry: WaitlistEntry) -> None:
        ...

    def close(self) -> None:
        pass

    def email_exists(self, email: str) -> bool:
        return email in self.list_emails()

    def add_if_absent(self, entry: WaitlistEntry) -> JoinWaitlistResponse:
        if self.email_exists(entry.email):
            logger.info(f"Found existing signup for {entry.email}")
            return JoinWaitlistResponse(exists=True)

        self.append_entry(entry)
        return JoinWaitlistResponse(exists=False)


class RestWaitlistSheet(WaitlistSheet):
    """Sheets v4 REST calls authenticated with a self-signed JWT assertion.

    One instance serves one request; the access token is fetched on first use
    and dropped with the instance.
    """

    def __init__(self, config: SheetConfig, credential: Optional[ServiceCredential] = None,
                 session: Optional[requests.Session] = None):
        super().__init__(config)
        self.credential = credential or build_service_credential(config)
        self._owns_session = session is None
        self.session = session or requests.Session()
        self._access_token = None

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def _auth_headers(self):
        if self._access_token is None:
            self._access_token = fetch_access_token(
                self.credential, session=self.session, timeout=self.config.http_timeout
            )
        return {"authorization": f"Bearer {self._access_token}"}

    def _values_url(self, range_name: str) -> str:
        return f"{SHEETS_API_URL}/{self.config.spreadsheet_id}/values/{self.config.sheet_name}!{range_name}"

    def list_emails(self) -> Set[str]:
        headers = self._auth_headers()
        logger.info("Fetching existing signups from spreadsheet")
        try:
            response = self.session.get(
                self._values_url("A:B"), headers=headers, timeout=self.config.http_timeout
            )
        except requests.RequestException as e:
            logger.error(f"Failed to read spreadsheet values: {str(e)}")
            raise TransportError("Failed to read spreadsheet", details=str(e)) from e

        if not response.ok:
            logger.error(f"Spreadsheet read failed with status {response.status_code}")
            raise TransportError("Failed to read spreadsheet", details=response.text)

        try:
            values = response.json().get("values", [])
        except ValueError as e:
            raise TransportError("Failed to read spreadsheet", details=response.text) from e

        logger.info(f"Retrieved {len(values)} rows from spreadsheet")
        return _flatten_data_rows(values)

    def append_entry(self, entry: WaitlistEntry) -> None:
        headers = self._auth_headers()
        logger.info(f"Adding {entry.email} to waitlist spreadsheet")
        try:
            response = self.session.post(
                self._values_url("A:append"),
                params={"valueInputOption": "RAW"},
                headers=headers,
                json={"values": [entry.as_row()]},
                timeout=self.config.http_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error adding {entry.email} to spreadsheet: {str(e)}")
            raise TransportError("Failed to add email to spreadsheet", details=str(e)) from e

        if not response.ok:
            logger.error(f"Error adding {entry.email} to spreadsheet: status {response.status_code}")
            raise TransportError("Failed to add email to spreadsheet", details=response.text)

        logger.info(f"Successfully added {entry.email} to spreadsheet")


class GspreadWaitlistSheet(WaitlistSheet):
    """gspread client session, for local development"""

    def __init__(self, config: SheetConfig, credential: Optional[ServiceCredential] = None,
                 worksheet: Optional[gspread.Worksheet] = None):
        super().__init__(config)
        self.credential = credential or build_service_credential(config)
        self._worksheet = worksheet

    def _init_google_sheets(self) -> gspread.Client:
        """Initialize Google Sheets client"""
        logger.info("Initializing Google Sheets client")
        service_account_info = {
            "type": "service_account",
            "private_key": to_pem(self.credential.private_key_bytes),
            "client_email": self.credential.account_email,
            "token_uri": TOKEN_URL,
        }
        try:
            creds = Credentials.from_service_account_info(service_account_info, scopes=SCOPES)
        except ValueError as e:
            raise ConfigurationError("Invalid service account credentials", details=str(e)) from e
        return gspread.authorize(creds)

    @property
    def worksheet(self) -> gspread.Worksheet:
        if self._worksheet is None:
            client = self._init_google_sheets()
            try:
                spreadsheet = client.open_by_key(self.config.spreadsheet_id)
                self._worksheet = spreadsheet.worksheet(self.config.sheet_name)
            except (RefreshError, GoogleTransportError, APIError, GSpreadException) as e:
                raise self._translate(e, "Failed to open spreadsheet") from e
            logger.info("Google Sheets worksheet opened")
        return self._worksheet

    @staticmethod
    def _translate(error: Exception, message: str):
        if isinstance(error, RefreshError):
            return AuthenticationError("Authentication failed", details=str(error))
        return TransportError(message, details=str(error))

    def list_emails(self) -> Set[str]:
        worksheet = self.worksheet
        try:
            all_values = worksheet.get_all_values()
        except (RefreshError, GoogleTransportError, APIError, GSpreadException) as e:
            logger.error(f"GSpread error reading waitlist: {str(e)}")
            raise self._translate(e, "Failed to read spreadsheet") from e

        logger.info(f"Retrieved {len(all_values)} rows from spreadsheet")
        return _flatten_data_rows(all_values)

    def append_entry(self, entry: WaitlistEntry) -> None:
        worksheet = self.worksheet
        logger.info(f"Adding {entry.email} to waitlist spreadsheet")
        try:
            worksheet.append_row(entry.as_row(), value_input_option="RAW")
        except (RefreshError, GoogleTransportError, APIError, GSpreadException) as e:
            logger.error(f"Error adding {entry.email} to spreadsheet: {str(e)}")
            raise self._translate(e, "Failed to add email to spreadsheet") from e

        logger.info(f"Successfully added {entry.email} to spreadsheet")


def create_waitlist_sheet(config: SheetConfig) -> WaitlistSheet:
    if config.backend == BACKEND_JWT:
        return RestWaitlistSheet(config)
    if config.backend == BACKEND_CLIENT:
        return GspreadWaitlistSheet(config)
    raise ConfigurationError(f"Unknown waitlist backend: {config.backend}")
