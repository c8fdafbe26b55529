"""
Session Domain Model - A materialized set of temporary AWS credentials.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, Mapping
from datetime import datetime, timedelta, timezone
import json
from gsts.domain.role import Role

# Safety buffer subtracted from the expiration to avoid requests failing
# at the exact time of expiration.
EXPIRATION_DELTA = timedelta(seconds=30)

# Profile file keys.
INI_ACCESS_KEY_ID = "aws_access_key_id"
INI_ROLE_ARN = "aws_role_arn"
INI_ROLE_NAME = "aws_role_name"
INI_ROLE_PRINCIPAL_ARN = "aws_role_principal_arn"
INI_SECRET_ACCESS_KEY = "aws_secret_access_key"
INI_SESSION_EXPIRATION = "aws_session_expiration"
INI_SESSION_TOKEN = "aws_session_token"
INI_SAML_ASSERTION = "aws_saml_assertion"


def format_timestamp(value: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with milliseconds (``2020-04-19T10:32:19.000Z``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class TemporaryCredentials:
    """Expiring credential bundle returned by the token exchange service."""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    expires_at: datetime

    @classmethod
    def from_response(cls, credentials: Mapping[str, Any]) -> "TemporaryCredentials":
        """Map an STS ``Credentials`` structure 1:1."""
        expiration = credentials["Expiration"]
        if isinstance(expiration, str):
            expiration = parse_timestamp(expiration)
        elif expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)

        return cls(
            access_key_id=credentials["AccessKeyId"],
            secret_access_key=credentials["SecretAccessKey"],
            session_token=credentials["SessionToken"],
            expires_at=expiration,
        )


@dataclass(frozen=True)
class Session:
    """
    Session entity - temporary credentials bound to a role and an expiry.

    Domain rules:
    - expires_at is always an absolute, timezone-aware timestamp
    - A session is valid iff expires_at minus EXPIRATION_DELTA is in the future
    - Sessions are never mutated; a refresh produces a new session
    """
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    expires_at: datetime
    role: Role
    saml_assertion: Optional[str] = field(default=None, repr=False)
    profile: Optional[str] = None
    version: int = 1

    def __post_init__(self):
        if not isinstance(self.expires_at, datetime):
            raise TypeError("`expires_at` must be a datetime")

        if not isinstance(self.role, Role):
            raise TypeError("`role` must be a Role")

        if self.expires_at.tzinfo is None:
            object.__setattr__(self, "expires_at", self.expires_at.replace(tzinfo=timezone.utc))

    @classmethod
    def from_credentials(
        cls,
        credentials: TemporaryCredentials,
        role: Role,
        saml_assertion: Optional[str] = None,
        profile: Optional[str] = None,
    ) -> "Session":
        """
        Bind exchanged credentials to the role they were issued for.

        Args:
            credentials: Credential bundle from the token exchange
            role: Role that was assumed
            saml_assertion: Assertion the credentials were exchanged for
            profile: Profile the session will be stored under

        Returns:
            New session instance
        """
        return cls(
            access_key_id=credentials.access_key_id,
            secret_access_key=credentials.secret_access_key,
            session_token=credentials.session_token,
            expires_at=credentials.expires_at,
            role=role,
            saml_assertion=saml_assertion,
            profile=profile,
        )

    def with_profile(self, profile: str) -> "Session":
        """Return a copy of this session bound to another profile."""
        return replace(self, profile=profile)

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Check if all credential parts are present and the session has not expired."""
        if not self.access_key_id or not self.secret_access_key or not self.session_token:
            return False

        now = now or datetime.now(timezone.utc)
        return self.expires_at - EXPIRATION_DELTA > now

    def expires_in(self, now: Optional[datetime] = None) -> timedelta:
        """Remaining validity, after the safety delta (negative once expired)."""
        now = now or datetime.now(timezone.utc)
        return self.expires_at - EXPIRATION_DELTA - now

    def to_ini(self) -> Dict[str, str]:
        """Flatten into the profile file schema (optional keys omitted when unset)."""
        content = {
            INI_ACCESS_KEY_ID: self.access_key_id,
            INI_ROLE_ARN: self.role.role_arn,
            INI_ROLE_NAME: self.role.name,
            INI_ROLE_PRINCIPAL_ARN: self.role.principal_arn,
            INI_SECRET_ACCESS_KEY: self.secret_access_key,
            INI_SESSION_EXPIRATION: format_timestamp(self.expires_at),
            INI_SESSION_TOKEN: self.session_token,
            INI_SAML_ASSERTION: self.saml_assertion,
        }
        return {key: value for key, value in content.items() if value is not None}

    @classmethod
    def from_ini(cls, content: Mapping[str, str], profile: Optional[str] = None) -> "Session":
        """
        Rebuild a session from a profile file section.

        Older sections without role name or principal ARN are accepted; the
        name is then derived from the role ARN.

        Raises:
            KeyError: A required key is missing
            ValueError: Expiration or role ARN is malformed
        """
        role = Role.from_arn(
            content[INI_ROLE_ARN],
            principal_arn=content.get(INI_ROLE_PRINCIPAL_ARN) or None,
            name=content.get(INI_ROLE_NAME) or None,
        )

        return cls(
            access_key_id=content[INI_ACCESS_KEY_ID],
            secret_access_key=content[INI_SECRET_ACCESS_KEY],
            session_token=content[INI_SESSION_TOKEN],
            expires_at=parse_timestamp(content[INI_SESSION_EXPIRATION]),
            role=role,
            saml_assertion=content.get(INI_SAML_ASSERTION) or None,
            profile=profile,
        )

    def to_credential_process(self) -> Dict[str, Any]:
        """
        Credentials in the AWS CLI ``credential_process`` shape.

        See https://docs.aws.amazon.com/cli/latest/userguide/cli-configure-sourcing-external.html
        """
        return {
            "Version": self.version,
            "AccessKeyId": self.access_key_id,
            "SecretAccessKey": self.secret_access_key,
            "SessionToken": self.session_token,
            "Expiration": format_timestamp(self.expires_at),
        }

    def to_json(self) -> str:
        """Serialize for ``credential_process`` consumption. Contains secrets."""
        return json.dumps(self.to_credential_process())
