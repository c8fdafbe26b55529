"""
Unit tests for the SAML assertion parser.
"""

import base64
import pytest
from gsts.domain.assertion import AssertionParser
from gsts.domain.role import Role
from gsts.errors import CredentialsError, ErrorKind

from conftest import (
    SAML_SESSION_BASIC,
    SAML_SESSION_BASIC_CN,
    SAML_SESSION_BASIC_GOV_CLOUD_US,
    SAML_SESSION_BASIC_WITH_MULTIPLE_ROLES,
    SAML_SESSION_BASIC_WITH_SESSION_DURATION,
    response_from_assertion,
    sample_assertion,
)

GSUITE_PRINCIPAL = "arn:aws:iam::123456789:saml-provider/GSuite"


@pytest.fixture
def parser():
    return AssertionParser()


def _assertion_with_roles(*values):
    attribute_values = "".join(f"<saml2:AttributeValue>{value}</saml2:AttributeValue>" for value in values)
    xml = (
        '<saml2:Assertion xmlns:saml2="urn:oasis:names:tc:SAML:2.0:assertion">'
        "<saml2:AttributeStatement>"
        '<saml2:Attribute Name="https://aws.amazon.com/SAML/Attributes/Role">'
        f"{attribute_values}"
        "</saml2:Attribute>"
        "</saml2:AttributeStatement>"
        "</saml2:Assertion>"
    )
    return base64.b64encode(xml.encode("utf-8")).decode("ascii")


def test_parses_single_role(parser):
    """Test a single role is parsed with its principal."""
    assertion = sample_assertion(SAML_SESSION_BASIC)

    parsed = parser.parse(response_from_assertion(assertion))

    assert parsed.roles == [Role("foobar", "arn:aws:iam::123456789:role/foobar", GSUITE_PRINCIPAL)]
    assert parsed.saml_assertion == assertion
    assert parsed.session_duration is None


def test_parses_multiple_roles_in_assertion_order(parser):
    """Test roles keep the order they have in the assertion."""
    assertion = sample_assertion(SAML_SESSION_BASIC_WITH_MULTIPLE_ROLES)

    parsed = parser.parse(response_from_assertion(assertion))

    assert parsed.roles == [
        Role("Foobiz", "arn:aws:iam::987654321:role/Foobiz", "arn:aws:iam::987654321:saml-provider/GSuite"),
        Role("Admin", "arn:aws:iam::987654321:role/Admin", "arn:aws:iam::987654321:saml-provider/GSuite"),
        Role("Foobar", "arn:aws:iam::123456789:role/Foobar", GSUITE_PRINCIPAL),
    ]


def test_parses_session_duration(parser):
    """Test SessionDuration is attached to every role."""
    assertion = sample_assertion(SAML_SESSION_BASIC_WITH_SESSION_DURATION)

    parsed = parser.parse(response_from_assertion(assertion))

    assert parsed.session_duration == 43200
    assert parsed.roles[0].session_duration == 43200


def test_parses_gov_cloud_arns(parser):
    """Test AWS GovCloud (US) ARNs."""
    parsed = parser.parse(response_from_assertion(sample_assertion(SAML_SESSION_BASIC_GOV_CLOUD_US)))

    assert parsed.roles == [
        Role("Foobar", "arn:aws-us-gov:iam:us-gov-west-1:123456789012:role/Foobar", GSUITE_PRINCIPAL),
    ]


def test_parses_cn_arns(parser):
    """Test AWS China ARNs."""
    parsed = parser.parse(response_from_assertion(sample_assertion(SAML_SESSION_BASIC_CN)))

    assert parsed.roles == [
        Role("Foobar", "arn:aws-cn:iam::123456789012:role/Foobar", GSUITE_PRINCIPAL),
    ]


def test_accepts_bytes_and_mappings(parser):
    """Test payloads given as bytes or already-decoded form fields."""
    assertion = sample_assertion(SAML_SESSION_BASIC)

    from_bytes = parser.parse(response_from_assertion(assertion).encode("utf-8"))
    from_mapping = parser.parse({"SAMLResponse": [assertion]})

    assert from_bytes.roles == from_mapping.roles
    assert from_mapping.saml_assertion == assertion


def test_accepts_principal_before_role(parser):
    """Test role pairs in either order."""
    assertion = _assertion_with_roles(f"{GSUITE_PRINCIPAL},arn:aws:iam::123456789:role/Foobar")

    parsed = parser.parse({"SAMLResponse": assertion})

    assert parsed.roles[0].role_arn == "arn:aws:iam::123456789:role/Foobar"
    assert parsed.roles[0].principal_arn == GSUITE_PRINCIPAL


def test_skips_malformed_role_values(parser):
    """Test unparseable role values are skipped, not fatal."""
    assertion = _assertion_with_roles(
        "not-an-arn",
        "arn:aws:iam::123456789:role/Foobar",
        f"arn:aws:iam::123456789:role/Broken/,{GSUITE_PRINCIPAL}",
        f"ARN:AWS:IAM::123456789:ROLE/Shouting,{GSUITE_PRINCIPAL}",
        f"arn:aws:iam::123456789:role/Admin,{GSUITE_PRINCIPAL}",
    )

    parsed = parser.parse({"SAMLResponse": assertion})

    assert [role.name for role in parsed.roles] == ["Admin"]


def test_duplicate_roles_are_listed_once(parser):
    """Test duplicate role values collapse to one role."""
    value = f"arn:aws:iam::123456789:role/Foobar,{GSUITE_PRINCIPAL}"

    parsed = parser.parse({"SAMLResponse": _assertion_with_roles(value, value)})

    assert len(parsed.roles) == 1


def test_assertion_without_roles(parser):
    """Test an assertion with no role attribute yields no roles."""
    parsed = parser.parse({"SAMLResponse": _assertion_with_roles()})

    assert parsed.roles == []


@pytest.mark.parametrize("payload", [
    "RelayState=foo",
    "SAMLResponse=",
    "SAMLResponse=%%%not-base64%%%",
    "SAMLResponse=" + base64.b64encode(b"<not-closed>").decode("ascii"),
])
def test_malformed_payloads(parser, payload):
    """Test undecodable payloads raise MALFORMED_ASSERTION."""
    with pytest.raises(CredentialsError) as exc_info:
        parser.parse(payload)

    assert exc_info.value.kind is ErrorKind.MALFORMED_ASSERTION
    assert not exc_info.value.is_recoverable


def test_role_with_trailing_slash_does_not_abort_parse(parser):
    """Test a role name ending in a slash is skipped and the other roles are kept."""
    assertion = _assertion_with_roles(
        f"arn:aws:iam::123456789:role/Broken/,{GSUITE_PRINCIPAL}",
        f"arn:aws:iam::123456789:role/Foobar,{GSUITE_PRINCIPAL}",
    )

    parsed = parser.parse({"SAMLResponse": assertion})

    assert parsed.roles == [Role("Foobar", "arn:aws:iam::123456789:role/Foobar", GSUITE_PRINCIPAL)]
