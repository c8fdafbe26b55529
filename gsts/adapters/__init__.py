"""
Adapters - Implementations of ports.

Token Exchange:
- StsTokenExchangeAdapter: AWS STS AssumeRoleWithSAML

Session Storage:
- IniSessionStoreAdapter: Flat INI profile file
- MemorySessionStoreAdapter: In-memory sessions (testing)

SAML Capture:
- FileSAMLResponseSource: Form-post body from a file or stdin
"""

from gsts.adapters.sts_token_exchange import StsTokenExchangeAdapter
from gsts.adapters.ini_session_store import IniSessionStoreAdapter
from gsts.adapters.memory_session_store import MemorySessionStoreAdapter
from gsts.adapters.file_saml_source import FileSAMLResponseSource

__all__ = [
    "StsTokenExchangeAdapter",
    "IniSessionStoreAdapter",
    "MemorySessionStoreAdapter",
    "FileSAMLResponseSource",
]
