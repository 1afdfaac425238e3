import json
import pytest
import requests
from unittest.mock import Mock

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from app.config import SheetConfig
from app.models import ServiceCredential, WaitlistEntry


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_der(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def private_key_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def sheet_config(private_key_pem):
    return SheetConfig(
        spreadsheet_id="test-sheet-id",
        service_account_email="waitlist@test-project.iam.gserviceaccount.com",
        private_key=private_key_pem.replace("\n", "\\n"),
    )


@pytest.fixture
def service_credential(private_key_der):
    return ServiceCredential(
        account_email="waitlist@test-project.iam.gserviceaccount.com",
        private_key_bytes=private_key_der,
        scope="https://www.googleapis.com/auth/spreadsheets",
    )


@pytest.fixture
def new_entry():
    return WaitlistEntry(email="new@example.com", name="Jane Doe")


@pytest.fixture
def sample_sheet_values():
    return [
        ["Email", "Name"],
        ["dup@example.com", "Existing Person"],
        ["other@example.com", "Someone Else"],
    ]


@pytest.fixture
def make_response():
    def _make_response(status_code=200, json_body=None, text=""):
        response = requests.Response()
        response.status_code = status_code
        response.encoding = "utf-8"
        if json_body is not None:
            response._content = json.dumps(json_body).encode("utf-8")
        else:
            response._content = text.encode("utf-8")
        return response
    return _make_response


@pytest.fixture
def mock_session():
    return Mock(spec=requests.Session)
