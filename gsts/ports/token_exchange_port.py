"""
Token Exchange Port - Interface for exchanging a SAML assertion for credentials.

Implementations:
- StsTokenExchangeAdapter: AWS STS AssumeRoleWithSAML
"""

from abc import ABC, abstractmethod
from typing import Optional
from gsts.domain.role import Role
from gsts.domain.session import TemporaryCredentials


class TokenExchangePort(ABC):
    """Port: Exchange a SAML assertion for temporary credentials."""

    @abstractmethod
    def assume_role(
        self,
        saml_assertion: str,
        role: Role,
        duration_seconds: Optional[int] = None,
    ) -> TemporaryCredentials:
        """
        Assume a role with a SAML assertion.

        Duration precedence: duration_seconds, then role.session_duration,
        then the remote service default (no duration sent).

        Args:
            saml_assertion: Base64 SAML assertion
            role: Role (and trusted principal) to assume
            duration_seconds: Caller override of the session duration

        Returns:
            Expiring credential bundle

        Raises:
            Any error reported by the remote service, unmodified, except the
            duration-cap rejection which is retried once internally
        """
        pass
