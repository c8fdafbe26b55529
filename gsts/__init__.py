"""
gsts - Google SAML to AWS STS credentials

Exchanges a Google Workspace SAML assertion for temporary AWS credentials,
caches them per profile and serves them to the AWS CLI and SDKs through
``credential_process``.

Usage:
    from gsts import CredentialsManager
    from gsts.adapters import StsTokenExchangeAdapter, IniSessionStoreAdapter

    manager = CredentialsManager(
        token_exchange=StsTokenExchangeAdapter(region="eu-west-1"),
        store=IniSessionStoreAdapter("~/.cache/gsts/credentials"),
    )

    # Parse the intercepted form-post body and pick a role
    prepared = manager.prepare_role_with_saml(form_body, custom_role_arn=role_arn)

    # Exchange the assertion and cache the session
    session = manager.assume_role_with_saml(
        prepared.saml_assertion, prepared.role_to_assume, profile="work"
    )
"""

__version__ = "0.1.0"

from gsts.sdk.credentials_manager import CredentialsManager
from gsts.domain.role import Role
from gsts.domain.session import Session
from gsts.errors import CredentialsError, ErrorKind

__all__ = [
    "CredentialsManager",
    "Role",
    "Session",
    "CredentialsError",
    "ErrorKind",
]
