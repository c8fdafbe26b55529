"""
Unit tests for Session domain model.
"""

import json
import pytest
from datetime import datetime, timedelta, timezone
from gsts.domain.role import Role
from gsts.domain.session import (
    EXPIRATION_DELTA,
    Session,
    TemporaryCredentials,
    format_timestamp,
    parse_timestamp,
)

from conftest import make_session

NOW = datetime(2020, 4, 19, 10, 0, 0, tzinfo=timezone.utc)


def test_session_valid_until_expiration_delta():
    """Test a session is valid iff expiration minus 30s is in the future."""
    assert EXPIRATION_DELTA == timedelta(seconds=30)

    session = make_session(expires_at=NOW + timedelta(seconds=31))
    assert session.is_valid(now=NOW)

    session = make_session(expires_at=NOW + timedelta(seconds=30))
    assert not session.is_valid(now=NOW)

    session = make_session(expires_at=NOW + timedelta(seconds=10))
    assert not session.is_valid(now=NOW)


def test_session_invalid_without_credentials():
    """Test a session missing credential parts is never valid."""
    session = make_session(session_token="")

    assert not session.is_valid()


def test_session_expires_in():
    """Test remaining validity excludes the safety delta."""
    session = make_session(expires_at=NOW + timedelta(minutes=10))

    assert session.expires_in(now=NOW) == timedelta(minutes=9, seconds=30)


def test_session_naive_expiration_is_utc():
    """Test naive datetimes are interpreted as UTC."""
    session = make_session(expires_at=datetime(2020, 4, 19, 10, 32, 19))

    assert session.expires_at.tzinfo == timezone.utc


def test_session_repr_hides_secrets():
    """Test secrets never appear in repr."""
    session = make_session(saml_assertion="PHNhbWw+")
    text = repr(session)

    assert "secret-access-key" not in text
    assert "session-token" not in text
    assert "PHNhbWw+" not in text
    assert "ASIAEXAMPLE" in text


def test_session_to_json():
    """Test credential_process JSON output."""
    session = make_session(expires_at=datetime(2020, 4, 19, 10, 32, 19, tzinfo=timezone.utc))

    assert json.loads(session.to_json()) == {
        "Version": 1,
        "AccessKeyId": "ASIAEXAMPLE",
        "SecretAccessKey": "secret-access-key",
        "SessionToken": "session-token",
        "Expiration": "2020-04-19T10:32:19.000Z",
    }


def test_session_to_ini():
    """Test profile file schema."""
    session = make_session(
        expires_at=datetime(2020, 4, 19, 10, 32, 19, tzinfo=timezone.utc),
        saml_assertion="PHNhbWw+",
    )

    assert session.to_ini() == {
        "aws_access_key_id": "ASIAEXAMPLE",
        "aws_role_arn": "arn:aws:iam::123456789:role/Foobar",
        "aws_role_name": "Foobar",
        "aws_role_principal_arn": "arn:aws:iam::123456789:saml-provider/GSuite",
        "aws_secret_access_key": "secret-access-key",
        "aws_session_expiration": "2020-04-19T10:32:19.000Z",
        "aws_session_token": "session-token",
        "aws_saml_assertion": "PHNhbWw+",
    }


def test_session_to_ini_omits_unset_keys():
    """Test optional keys are not written when unset."""
    session = make_session()

    assert "aws_saml_assertion" not in session.to_ini()


def test_session_from_older_ini_section():
    """Test sections without role name or principal still load."""
    session = Session.from_ini({
        "aws_access_key_id": "ASIAEXAMPLE",
        "aws_role_arn": "arn:aws:iam::123456789:role/Foobar",
        "aws_secret_access_key": "secret-access-key",
        "aws_session_expiration": "2020-04-19T10:32:19.000Z",
        "aws_session_token": "session-token",
    }, profile="sts")

    assert session.role.name == "Foobar"
    assert session.role.principal_arn is None
    assert session.profile == "sts"
    assert session.expires_at == datetime(2020, 4, 19, 10, 32, 19, tzinfo=timezone.utc)


def test_session_from_credentials():
    """Test exchanged credentials are bound to the assumed role."""
    role = Role.from_arn("arn:aws:iam::123456789:role/Foobar")
    credentials = TemporaryCredentials.from_response({
        "AccessKeyId": "ASIAEXAMPLE",
        "SecretAccessKey": "secret-access-key",
        "SessionToken": "session-token",
        "Expiration": datetime(2020, 4, 19, 10, 32, 19),
    })

    session = Session.from_credentials(credentials, role=role, profile="sts")

    assert session.role is role
    assert session.profile == "sts"
    assert session.expires_at == datetime(2020, 4, 19, 10, 32, 19, tzinfo=timezone.utc)


def test_session_with_profile_returns_copy():
    """Test sessions are never mutated."""
    session = make_session(profile="a")
    other = session.with_profile("b")

    assert session.profile == "a"
    assert other.profile == "b"


def test_timestamp_format():
    """Test timestamps use milliseconds and a Z suffix."""
    value = datetime(2020, 4, 19, 12, 32, 19, 123456, tzinfo=timezone(timedelta(hours=2)))

    assert format_timestamp(value) == "2020-04-19T10:32:19.123Z"
    assert parse_timestamp("2020-04-19T10:32:19.123Z") == datetime(
        2020, 4, 19, 10, 32, 19, 123000, tzinfo=timezone.utc
    )


def test_session_requires_role():
    """Test session construction validates its role."""
    with pytest.raises(TypeError):
        make_session(role="arn:aws:iam::123456789:role/Foobar")
