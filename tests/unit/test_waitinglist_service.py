import pytest
from unittest.mock import Mock

from app.exceptions import AuthenticationError, ConfigurationError, ConflictError, InternalError
from app.models import JoinWaitlistResponse
from app.sheets_backend import WaitlistSheet
from app.waitinglist_service import (
    CONFLICT_MESSAGE,
    INTERNAL_ERROR_MESSAGE,
    SUCCESS_MESSAGE,
    WaitlistService,
)


@pytest.fixture
def sheet():
    return Mock(spec=WaitlistSheet)


@pytest.fixture
def service(sheet_config, sheet):
    return WaitlistService(config_loader=lambda: sheet_config, sheet_factory=lambda config: sheet)


class TestJoin:
    def test_new_signup(self, service, sheet, new_entry):
        sheet.add_if_absent.return_value = JoinWaitlistResponse(exists=False)

        assert service.join(new_entry) == SUCCESS_MESSAGE
        sheet.add_if_absent.assert_called_once_with(new_entry)
        sheet.close.assert_called_once()

    def test_duplicate_signup_is_a_conflict(self, service, sheet, new_entry):
        sheet.add_if_absent.return_value = JoinWaitlistResponse(exists=True)

        with pytest.raises(ConflictError) as exc_info:
            service.join(new_entry)

        assert exc_info.value.message == CONFLICT_MESSAGE

    def test_authentication_failure_is_collapsed(self, service, sheet, new_entry):
        sheet.add_if_absent.side_effect = AuthenticationError(
            "Authentication failed", details='{"error": "invalid_grant", "access_token": "leak"}'
        )

        with pytest.raises(InternalError) as exc_info:
            service.join(new_entry)

        assert exc_info.value.message == INTERNAL_ERROR_MESSAGE
        assert exc_info.value.details is None
        assert "invalid_grant" not in str(exc_info.value)
        sheet.close.assert_called_once()

    def test_configuration_failure_is_collapsed(self, sheet_config, new_entry):
        def broken_factory(config):
            raise ConfigurationError("Invalid private key format.")

        service = WaitlistService(config_loader=lambda: sheet_config, sheet_factory=broken_factory)

        with pytest.raises(InternalError, match="Something went wrong"):
            service.join(new_entry)

    def test_factory_receives_loaded_config(self, sheet_config, sheet, new_entry):
        sheet.add_if_absent.return_value = JoinWaitlistResponse(exists=False)
        factory = Mock(return_value=sheet)

        WaitlistService(config_loader=lambda: sheet_config, sheet_factory=factory).join(new_entry)

        factory.assert_called_once_with(sheet_config)


class TestCheckExistingSignup:
    def test_exists(self, service, sheet):
        sheet.email_exists.return_value = True

        assert service.check_existing_signup("dup@example.com") is True
        sheet.email_exists.assert_called_once_with("dup@example.com")
        sheet.close.assert_called_once()

    def test_failure_is_collapsed(self, service, sheet):
        sheet.email_exists.side_effect = RuntimeError("boom")

        with pytest.raises(InternalError):
            service.check_existing_signup("dup@example.com")
