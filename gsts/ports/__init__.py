"""
Ports - Interfaces for token exchange, session storage, and SAML capture.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from gsts.ports.token_exchange_port import TokenExchangePort
from gsts.ports.session_store_port import SessionStorePort
from gsts.ports.saml_source_port import SAMLResponseSource

__all__ = [
    "TokenExchangePort",
    "SessionStorePort",
    "SAMLResponseSource",
]
