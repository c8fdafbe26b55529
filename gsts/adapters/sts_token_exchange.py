"""
STS Token Exchange Adapter - Exchanges SAML assertions via AWS STS.

Uses STS AssumeRoleWithSAML to obtain temporary credentials. The call is
authenticated by the assertion itself, so requests are sent unsigned.
"""

from typing import Any, Dict, Optional
import logging
import re

import boto3
from botocore import UNSIGNED
from botocore.config import Config
from botocore.exceptions import ClientError

from gsts.ports.token_exchange_port import TokenExchangePort
from gsts.domain.role import Role
from gsts.domain.session import TemporaryCredentials
from gsts.errors import remote_error_code

log = logging.getLogger(__name__)

# STS reports an over-long duration as, e.g.:
#   1 validation error detected: Value '60000' at 'durationSeconds' failed to
#   satisfy constraint: Member must have value less than or equal to 43200
DURATION_FIELD_PATTERN = re.compile(r"durationSeconds", re.IGNORECASE)
DURATION_CAP_PATTERN = re.compile(r"value less than or equal to ([0-9]+)")


def parse_duration_cap(error: ClientError) -> Optional[int]:
    """
    Extract the maximum allowed duration from a duration-cap rejection.

    Args:
        error: Exception raised by the STS client

    Returns:
        Maximum allowed DurationSeconds, or None if the error is not a
        validation failure on the duration field advertising a bound
    """
    if remote_error_code(error) != "ValidationError":
        return None

    message = error.response.get("Error", {}).get("Message", "") or ""
    if not DURATION_FIELD_PATTERN.search(message):
        return None

    matches = DURATION_CAP_PATTERN.search(message)
    if not matches:
        return None

    return int(matches.group(1))


class StsTokenExchangeAdapter(TokenExchangePort):
    """
    AWS token exchange using STS AssumeRoleWithSAML.

    Performs one request per call, or two when the requested duration is
    above the role's maximum and STS advertises that maximum.
    """

    def __init__(
        self,
        region: Optional[str] = None,
        client: Any = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize STS adapter.

        Args:
            region: AWS region to send requests to
            client: Preconfigured STS client (defaults to an unsigned boto3 client)
            logger: Logger for diagnostics
        """
        self._logger = logger or log

        if client is None:
            client = boto3.client("sts", region_name=region, config=Config(signature_version=UNSIGNED))

        self._sts = client

    def assume_role(
        self,
        saml_assertion: str,
        role: Role,
        duration_seconds: Optional[int] = None,
    ) -> TemporaryCredentials:
        """Assume role with SAML, capping the duration once if STS asks to."""
        session_duration = duration_seconds or role.session_duration

        try:
            response = self._send(saml_assertion, role, session_duration)
        except ClientError as e:
            maximum = parse_duration_cap(e) if session_duration else None
            if maximum is None:
                raise

            self._logger.warning(
                "Requested session duration %d exceeds maximum session duration of %d allowed for role. "
                "Please set --aws-session-duration=%d or $GSTS_AWS_SESSION_DURATION=%d to suppress this warning",
                session_duration,
                maximum,
                maximum,
                maximum,
            )
            response = self._send(saml_assertion, role, maximum)

        self._logger.debug('Role ARN "%s" has been assumed', role.role_arn)

        return TemporaryCredentials.from_response(response["Credentials"])

    def _send(self, saml_assertion: str, role: Role, duration_seconds: Optional[int]) -> Dict[str, Any]:
        if not role.principal_arn:
            raise ValueError(f"Role \"{role.role_arn}\" has no principal ARN to assume it with")

        params = {
            "PrincipalArn": role.principal_arn,
            "RoleArn": role.role_arn,
            "SAMLAssertion": saml_assertion,
        }

        # Without a duration STS applies its own default.
        if duration_seconds:
            params["DurationSeconds"] = int(duration_seconds)

        self._logger.debug(
            'Assuming role "%s" with principal "%s" for %s',
            role.role_arn,
            role.principal_arn,
            f"{duration_seconds} seconds" if duration_seconds else "the default duration",
        )

        return self._sts.assume_role_with_saml(**params)
