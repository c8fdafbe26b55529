"""
Role Domain Model - An assumable role extracted from a SAML assertion.
"""

from dataclasses import dataclass
from typing import Optional
import re

# ARN partition segment is kept verbatim (aws, aws-us-gov, aws-cn, aws-iso...).
# The resource name runs to the next comma or whitespace and never ends in "/".
ROLE_ARN_PATTERN = re.compile(r"arn:aws[a-z-]*:iam:[^:,]*:[0-9]+:role/[^,\s]*[^,\s/](?=[,\s]|$)")
PRINCIPAL_ARN_PATTERN = re.compile(r"arn:aws[a-z-]*:iam:[^:,]*:[0-9]+:saml-provider/[^,\s]*[^,\s/](?=[,\s]|$)")


@dataclass(frozen=True)
class Role:
    """
    Role entity - a role ARN paired with the SAML provider that trusts it.

    Domain rules:
    - role_arn is a well-formed IAM role ARN of any partition
    - principal_arn, when known, is a well-formed SAML provider ARN
    - session_duration is the IdP-declared hint, not a caller override
    """
    name: str
    role_arn: str
    principal_arn: Optional[str] = None
    session_duration: Optional[int] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Role name is required")

        if not self.role_arn or not ROLE_ARN_PATTERN.fullmatch(self.role_arn):
            raise ValueError(f"Invalid role ARN: {self.role_arn!r}")

        if self.principal_arn is not None and not PRINCIPAL_ARN_PATTERN.fullmatch(self.principal_arn):
            raise ValueError(f"Invalid principal ARN: {self.principal_arn!r}")

    @classmethod
    def from_arn(
        cls,
        role_arn: str,
        principal_arn: Optional[str] = None,
        session_duration: Optional[int] = None,
        name: Optional[str] = None,
    ) -> "Role":
        """
        Build a role, deriving its short name from the ARN path when not given.

        Args:
            role_arn: Fully-qualified role ARN
            principal_arn: SAML provider ARN
            session_duration: IdP-declared session duration in seconds
            name: Explicit short name

        Returns:
            New role instance
        """
        return cls(
            name=name or role_name_from_arn(role_arn),
            role_arn=role_arn,
            principal_arn=principal_arn,
            session_duration=session_duration,
        )

    @property
    def account_id(self) -> str:
        """AWS account ID segment of the role ARN."""
        return self.role_arn.split(":")[4]

    def __str__(self) -> str:
        return f"{self.name} ({self.role_arn})"


def role_name_from_arn(role_arn: str) -> str:
    """Return the last path segment of a role ARN (``role/path/Name`` -> ``Name``)."""
    resource = role_arn.split(":", 5)[-1]
    return resource.rsplit("/", 1)[-1]
