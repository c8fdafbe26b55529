"""
Shared test helpers: SAML fixtures, canned STS responses and logger reset.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock
from urllib.parse import quote
import base64
import logging

import pytest

from gsts.domain.role import Role
from gsts.domain.session import Session
from gsts.logger import LOGGER_NAME

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAML_SESSION_BASIC = "saml-session-basic"
SAML_SESSION_BASIC_WITH_SESSION_DURATION = "saml-session-basic-with-session-duration"
SAML_SESSION_BASIC_WITH_MULTIPLE_ROLES = "saml-session-basic-with-multiple-roles"
SAML_SESSION_BASIC_GOV_CLOUD_US = "saml-session-basic-gov-cloud-us"
SAML_SESSION_BASIC_CN = "saml-session-basic-cn"


def sample_assertion(name: str) -> str:
    """Base64 SAML assertion of a fixture."""
    return base64.b64encode((FIXTURES_DIR / f"{name}.xml").read_bytes()).decode("ascii")


def response_from_assertion(assertion: str) -> str:
    """Form-post body carrying a SAML assertion, as the browser sends it."""
    return f"SAMLResponse={quote(assertion, safe='')}&RelayState="


def sts_response(expiration=None, access_key_id="ASIAEXAMPLE"):
    """Canned STS AssumeRoleWithSAML response."""
    return {
        "Credentials": {
            "AccessKeyId": access_key_id,
            "SecretAccessKey": "secret-access-key",
            "SessionToken": "session-token",
            "Expiration": expiration or (datetime.now(timezone.utc) + timedelta(hours=1)).replace(microsecond=0),
        },
        "AssumedRoleUser": {
            "AssumedRoleId": "AROAEXAMPLE:foo@example.com",
            "Arn": "arn:aws:sts::123456789:assumed-role/Foobar/foo@example.com",
        },
    }


def make_session(role_arn="arn:aws:iam::123456789:role/Foobar", expires_in=timedelta(hours=1), **kwargs):
    """Session for a role, expiring relative to now."""
    role = Role.from_arn(role_arn, principal_arn="arn:aws:iam::123456789:saml-provider/GSuite")
    values = {
        "access_key_id": "ASIAEXAMPLE",
        "secret_access_key": "secret-access-key",
        "session_token": "session-token",
        "expires_at": datetime.now(timezone.utc) + expires_in,
        "role": role,
    }
    values.update(kwargs)
    return Session(**values)


@pytest.fixture
def sts_client():
    """STS client stub returning a valid credentials response."""
    client = MagicMock()
    client.assume_role_with_saml.return_value = sts_response()
    return client


@pytest.fixture
def multiple_roles_response():
    """Form-post body of an assertion offering three roles."""
    return response_from_assertion(sample_assertion(SAML_SESSION_BASIC_WITH_MULTIPLE_ROLES))


@pytest.fixture(autouse=True)
def reset_gsts_logger():
    """Undo handlers installed by configure_logging so caplog keeps working."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
