import logging
from typing import Optional

import requests

from .config import TOKEN_URL
from .exceptions import AuthenticationError, TransportError
from .jwt_assertion import build_assertion
from .models import ServiceCredential

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


def exchange_assertion(assertion: str, session: Optional[requests.Session] = None,
                       timeout: float = 10.0) -> str:
    """Trade a signed assertion for a bearer access token"""
    http = session or requests
    logger.info("Requesting access token from OAuth2 token endpoint")
    try:
        response = http.post(
            TOKEN_URL,
            json={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.error(f"Token endpoint request failed: {str(e)}")
        raise TransportError("Token endpoint unreachable", details=str(e)) from e

    try:
        token_data = response.json()
    except ValueError:
        token_data = None

    if not response.ok or not isinstance(token_data, dict) or not token_data.get("access_token"):
        logger.error(f"Authentication failed with status {response.status_code}")
        raise AuthenticationError("Authentication failed", details=response.text)

    logger.info("Access token obtained")
    return token_data["access_token"]


def fetch_access_token(credential: ServiceCredential, session: Optional[requests.Session] = None,
                       timeout: float = 10.0) -> str:
    return exchange_assertion(build_assertion(credential), session=session, timeout=timeout)
