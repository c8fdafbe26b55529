"""
Credentials Manager - High-level SDK for SAML to STS credential exchange.

Composes the assertion parser, role resolver, token exchange and session
store into the two operations the command line needs.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

from gsts.domain.assertion import AssertionParser, SAMLPayload
from gsts.domain.resolver import resolve_role
from gsts.domain.role import Role
from gsts.domain.session import Session
from gsts.ports.session_store_port import SessionStorePort
from gsts.ports.token_exchange_port import TokenExchangePort
from gsts.adapters.ini_session_store import IniSessionStoreAdapter
from gsts.adapters.sts_token_exchange import StsTokenExchangeAdapter
from gsts.errors import CredentialsError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedRole:
    """Roles offered by an assertion, and the one to assume if known."""
    role_to_assume: Optional[Role]
    available_roles: List[Role]
    saml_assertion: str = field(repr=False)


class CredentialsManager:
    """
    Orchestrates SAML parsing, role selection, STS exchange and caching.

    Example:
        from gsts.sdk import CredentialsManager
        from gsts.adapters import StsTokenExchangeAdapter, IniSessionStoreAdapter

        manager = CredentialsManager(
            token_exchange=StsTokenExchangeAdapter(region="us-east-1"),
            store=IniSessionStoreAdapter("~/.cache/gsts/credentials"),
        )

        prepared = manager.prepare_role_with_saml(form_body)
        session = manager.assume_role_with_saml(
            prepared.saml_assertion, prepared.role_to_assume, profile="default"
        )
    """

    def __init__(
        self,
        token_exchange: TokenExchangePort,
        store: Optional[SessionStorePort] = None,
        parser: Optional[AssertionParser] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize credentials manager with adapters.

        Args:
            token_exchange: Token exchange adapter (required)
            store: Session store; None runs in cacheless mode
            parser: Assertion parser (defaults to one sharing this logger)
            logger: Logger for diagnostics
        """
        self._logger = logger or log
        self._token_exchange = token_exchange
        self._store = store
        self._parser = parser or AssertionParser(logger=self._logger)

    @classmethod
    def from_config(cls, config, logger: Optional[logging.Logger] = None) -> "CredentialsManager":
        """
        Build a manager wired to AWS STS and the profile file in the cache directory.

        Args:
            config: Resolved gsts.config.Config
            logger: Logger for diagnostics

        Returns:
            Configured manager (cacheless if the credentials cache is disabled)
        """
        store = None
        if config.credentials_cache:
            store = IniSessionStoreAdapter(config.credentials_file, logger=logger)

        return cls(
            token_exchange=StsTokenExchangeAdapter(region=config.aws_region, logger=logger),
            store=store,
            logger=logger,
        )

    @property
    def store(self) -> Optional[SessionStorePort]:
        return self._store

    @property
    def caching_enabled(self) -> bool:
        return self._store is not None

    def prepare_role_with_saml(
        self,
        saml_response: SAMLPayload,
        custom_role_arn: Optional[str] = None,
    ) -> PreparedRole:
        """
        Parse a SAML response and resolve the role to assume.

        Args:
            saml_response: Form-post body carrying the SAML response
            custom_role_arn: Role ARN requested by the caller

        Returns:
            Role to assume (None if the caller must choose), all available
            roles sorted by ARN, and the SAML assertion

        Raises:
            CredentialsError: MALFORMED_ASSERTION or ROLE_NOT_FOUND
        """
        parsed = self._parser.parse(saml_response)
        resolution = resolve_role(parsed.roles, custom_role_arn)

        if not custom_role_arn:
            self._logger.debug("A custom role ARN has not been set so returning all parsed roles")
        else:
            self._logger.debug(
                'Found custom role ARN "%s" with principal ARN "%s"',
                resolution.role_to_assume.role_arn,
                resolution.role_to_assume.principal_arn,
            )

        return PreparedRole(
            role_to_assume=resolution.role_to_assume,
            available_roles=resolution.available_roles,
            saml_assertion=parsed.saml_assertion,
        )

    def assume_role_with_saml(
        self,
        saml_assertion: str,
        role: Role,
        profile: str,
        custom_session_duration: Optional[int] = None,
    ) -> Session:
        """
        Exchange the assertion for credentials and persist the session.

        Args:
            saml_assertion: Base64 SAML assertion
            role: Role to assume
            profile: Profile to store the session under
            custom_session_duration: Session duration override in seconds

        Returns:
            The new session, whether or not it was cached
        """
        credentials = self._token_exchange.assume_role(saml_assertion, role, custom_session_duration)

        session = Session.from_credentials(
            credentials,
            role=role,
            saml_assertion=saml_assertion,
            profile=profile,
        )

        if self._store is not None:
            self._store.save(profile, session)

        return session

    def load_session(self, profile: str, role_arn: Optional[str] = None) -> Session:
        """
        Load the cached session for a profile.

        Raises:
            CredentialsError: NOT_FOUND when caching is disabled or nothing is
                stored, PROFILE_NOT_FOUND, or ROLE_MISMATCH
        """
        if self._store is None:
            raise CredentialsError.not_found("<credentials cache disabled>")

        return self._store.load(profile, expected_role_arn=role_arn)
