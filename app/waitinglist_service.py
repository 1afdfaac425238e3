# app/waitinglist_service.py
import logging
import threading
from typing import Callable

from .config import SheetConfig, load_sheet_config
from .exceptions import ConflictError, InternalError
from .models import JoinWaitlistResponse, WaitlistEntry
from .sheets_backend import WaitlistSheet, create_waitlist_sheet

# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

SUCCESS_MESSAGE = "Thanks for joining the waitlist!"
CONFLICT_MESSAGE = "This email is already on the waitlist."
INTERNAL_ERROR_MESSAGE = "Something went wrong. Please try again later."

# Serializes read-then-append within this process. Separate worker
# processes can still both append the same new email. Held across the token,
# read and append calls, so a slow Sheets response delays every signup in
# the worker for up to three SHEETS_HTTP_TIMEOUT periods.
_signup_lock = threading.Lock()


class WaitlistService:
    def __init__(self,
                 config_loader: Callable[[], SheetConfig] = load_sheet_config,
                 sheet_factory: Callable[[SheetConfig], WaitlistSheet] = create_waitlist_sheet):
        self.config_loader = config_loader
        self.sheet_factory = sheet_factory

    def _open_sheet(self) -> WaitlistSheet:
        config = self.config_loader()
        logger.info(f"Using '{config.backend}' waitlist backend")
        return self.sheet_factory(config)

    def add_to_waitlist(self, entry: WaitlistEntry) -> JoinWaitlistResponse:
        """Append the entry unless its email is already present"""
        logger.info(f"Starting waitlist registration for: {entry.email}")
        sheet = self._open_sheet()
        try:
            with _signup_lock:
                return sheet.add_if_absent(entry)
        finally:
            sheet.close()

    def join(self, entry: WaitlistEntry) -> str:
        """Register a validated signup and return the user-facing message.

        Raises ConflictError for a known email and InternalError for any
        other failure, so credentials and upstream responses stay internal.
        """
        try:
            result = self.add_to_waitlist(entry)
        except Exception as e:
            logger.error(f"Waitlist registration failed for {entry.email}: {type(e).__name__}: {str(e)}")
            raise InternalError(INTERNAL_ERROR_MESSAGE) from e

        if result.exists:
            logger.warning(f"Duplicate signup attempt for: {entry.email}")
            raise ConflictError(CONFLICT_MESSAGE)

        logger.info(f"Successfully completed waitlist registration for: {entry.email}")
        return SUCCESS_MESSAGE

    def check_existing_signup(self, email: str) -> bool:
        """Check if email already exists in waitlist"""
        logger.info(f"Checking for existing signup: {email}")
        try:
            sheet = self._open_sheet()
            try:
                return sheet.email_exists(email)
            finally:
                sheet.close()
        except Exception as e:
            logger.error(f"Error checking existing signup for {email}: {type(e).__name__}: {str(e)}")
            raise InternalError(INTERNAL_ERROR_MESSAGE) from e
