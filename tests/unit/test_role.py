"""
Unit tests for Role domain model.
"""

import pytest
from gsts.domain.role import Role, role_name_from_arn


def test_role_from_arn_derives_name():
    """Test the short name is the last path segment of the ARN."""
    role = Role.from_arn(
        "arn:aws:iam::123456789:role/Foobar",
        principal_arn="arn:aws:iam::123456789:saml-provider/GSuite",
    )

    assert role.name == "Foobar"
    assert role.account_id == "123456789"
    assert role.session_duration is None


def test_role_name_from_arn_with_path():
    """Test role paths are stripped from the name."""
    assert role_name_from_arn("arn:aws:iam::123456789:role/team/ops/Admin") == "Admin"


@pytest.mark.parametrize("role_arn", [
    "arn:aws-us-gov:iam:us-gov-west-1:123456789012:role/Foobar",
    "arn:aws-cn:iam::123456789012:role/Foobar",
])
def test_role_accepts_other_partitions(role_arn):
    """Test GovCloud and China ARNs are kept verbatim."""
    role = Role.from_arn(role_arn)

    assert role.role_arn == role_arn
    assert role.name == "Foobar"


def test_role_rejects_malformed_arn():
    """Test role ARN validation."""
    with pytest.raises(ValueError):
        Role.from_arn("arn:aws:iam::123456789:user/Foobar")


def test_role_rejects_malformed_principal():
    """Test principal ARN validation."""
    with pytest.raises(ValueError):
        Role.from_arn("arn:aws:iam::123456789:role/Foobar", principal_arn="GSuite")


def test_role_is_immutable():
    """Test roles cannot be mutated."""
    role = Role.from_arn("arn:aws:iam::123456789:role/Foobar")

    with pytest.raises(Exception):
        role.name = "Other"


@pytest.mark.parametrize("role_arn", [
    "arn:aws:iam::123456789:role/Foobar/",
    "arn:aws:iam::123456789:role/",
    "ARN:AWS:IAM::123456789:ROLE/Foobar",
])
def test_role_rejects_empty_name_and_other_case(role_arn):
    """Test role names cannot be empty and ARNs are matched case-sensitively."""
    with pytest.raises(ValueError):
        Role.from_arn(role_arn)
