import os
from dataclasses import dataclass
from dotenv import load_dotenv
from pathlib import Path
from typing import List, Optional

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path, override=True)

LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN")

# Google service account settings
SCOPES = ['https://www.googleapis.com/auth/spreadsheets']
TOKEN_URL = 'https://www.googleapis.com/oauth2/v4/token'
SHEETS_API_URL = 'https://sheets.googleapis.com/v4/spreadsheets'

BACKEND_JWT = "jwt"
BACKEND_CLIENT = "client"


@dataclass(frozen=True)
class SheetConfig:
    spreadsheet_id: Optional[str]
    service_account_email: Optional[str]
    private_key: Optional[str]
    sheet_name: str = "Sheet1"
    backend: str = BACKEND_JWT
    http_timeout: float = 10.0


def load_sheet_config() -> SheetConfig:
    """Read the waitlist sheet settings from the environment at call time"""
    return SheetConfig(
        spreadsheet_id=os.getenv("GOOGLE_SHEET_ID"),
        service_account_email=os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
        private_key=os.getenv("GOOGLE_PRIVATE_KEY"),
        sheet_name=os.getenv("WAITLIST_SHEET_NAME", "Sheet1"),
        backend=os.getenv("WAITLIST_BACKEND", BACKEND_JWT).strip().lower(),
        http_timeout=float(os.getenv("SHEETS_HTTP_TIMEOUT", 10)),
    )


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "http://localhost:4321")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
