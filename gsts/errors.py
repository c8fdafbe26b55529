"""
Errors - Tagged error kinds raised by the credentials core.

A single exception type carries an ErrorKind tag and the payload of that
kind. Callers branch on ``error.kind`` rather than on the exception class:

    try:
        session = store.load(profile, expected_role_arn=role_arn)
    except CredentialsError as e:
        if not e.is_recoverable:
            raise
        session = None
"""

from enum import Enum
from typing import Any, List, Optional


class ErrorKind(Enum):
    """Failure kinds of the credentials core."""
    MALFORMED_ASSERTION = "malformed_assertion"  # Payload cannot be decoded
    ROLE_NOT_FOUND = "role_not_found"            # Requested role ARN not in assertion
    NOT_FOUND = "not_found"                      # Profile file absent
    PROFILE_NOT_FOUND = "profile_not_found"      # Section absent from profile file
    ROLE_MISMATCH = "role_mismatch"              # Cached session is for another role
    INVALID_PROFILE = "invalid_profile"          # Profile section is incomplete or unreadable


# Kinds meaning "no usable cached session" rather than a hard failure.
RECOVERABLE_KINDS = frozenset({
    ErrorKind.NOT_FOUND,
    ErrorKind.PROFILE_NOT_FOUND,
    ErrorKind.ROLE_MISMATCH,
    ErrorKind.INVALID_PROFILE,
})


class CredentialsError(Exception):
    """
    Credentials core failure.

    Attributes:
        kind: Error kind tag
        roles: Full list of available roles (ROLE_NOT_FOUND)
        expected_role_arn: Role ARN the caller asked for (ROLE_NOT_FOUND, ROLE_MISMATCH)
        received_role_arn: Role ARN found in the cache (ROLE_MISMATCH)
        profile: Profile name (PROFILE_NOT_FOUND, ROLE_MISMATCH, INVALID_PROFILE)
        path: Profile file path (NOT_FOUND, PROFILE_NOT_FOUND, INVALID_PROFILE)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        roles: Optional[List[Any]] = None,
        expected_role_arn: Optional[str] = None,
        received_role_arn: Optional[str] = None,
        profile: Optional[str] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.roles = list(roles) if roles is not None else []
        self.expected_role_arn = expected_role_arn
        self.received_role_arn = received_role_arn
        self.profile = profile
        self.path = path

    @property
    def is_recoverable(self) -> bool:
        """True when the caller should re-authenticate instead of failing."""
        return self.kind in RECOVERABLE_KINDS

    @classmethod
    def malformed_assertion(cls, reason: str) -> "CredentialsError":
        return cls(ErrorKind.MALFORMED_ASSERTION, f"Unable to decode SAML assertion: {reason}")

    @classmethod
    def role_not_found(cls, roles: List[Any], role_arn: Optional[str] = None) -> "CredentialsError":
        return cls(
            ErrorKind.ROLE_NOT_FOUND,
            f'Custom role "{role_arn}" not found' if role_arn else "Custom role not found",
            roles=roles,
            expected_role_arn=role_arn,
        )

    @classmethod
    def not_found(cls, path: str) -> "CredentialsError":
        return cls(ErrorKind.NOT_FOUND, f'Credentials file "{path}" does not exist', path=path)

    @classmethod
    def profile_not_found(cls, profile: str, path: Optional[str] = None) -> "CredentialsError":
        return cls(
            ErrorKind.PROFILE_NOT_FOUND,
            f'Credentials for profile "{profile}" are not available',
            profile=profile,
            path=path,
        )

    @classmethod
    def invalid_profile(cls, profile: str, reason: str, path: Optional[str] = None) -> "CredentialsError":
        return cls(
            ErrorKind.INVALID_PROFILE,
            f'Credentials for profile "{profile}" are unreadable: {reason}',
            profile=profile,
            path=path,
        )

    @classmethod
    def role_mismatch(cls, profile: str, received_role_arn: str, expected_role_arn: str) -> "CredentialsError":
        return cls(
            ErrorKind.ROLE_MISMATCH,
            f'Profile "{profile}" holds credentials for role "{received_role_arn}" '
            f'instead of "{expected_role_arn}"',
            expected_role_arn=expected_role_arn,
            received_role_arn=received_role_arn,
            profile=profile,
        )


def remote_error_code(error: Exception) -> Optional[str]:
    """
    Extract the machine-readable error code from a token exchange failure.

    Args:
        error: Exception raised by the token exchange service client

    Returns:
        Error code (e.g. "ValidationError", "InvalidIdentityToken"), or None
        if the exception does not carry one (transport errors)
    """
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return None
    return response.get("Error", {}).get("Code")
