"""
SDK - High-level credentials orchestration.
"""

from gsts.sdk.credentials_manager import CredentialsManager, PreparedRole

__all__ = [
    "CredentialsManager",
    "PreparedRole",
]
