"""
File SAML Response Source - Reads a captured SAML form-post body.

Used when the browser login is driven outside this process: the
intercepted POST body is written to a file, or piped on stdin ("-").
"""

from pathlib import Path
from typing import IO, Optional, Union
import sys

from gsts.ports.saml_source_port import SAMLResponseSource


class FileSAMLResponseSource(SAMLResponseSource):
    """SAML form-post body from a file or standard input."""

    def __init__(self, path: Union[str, Path], stdin: Optional[IO[str]] = None):
        self._path = str(path)
        self._stdin = stdin or sys.stdin

    def capture(self) -> str:
        if self._path == "-":
            return self._stdin.read().strip()

        return Path(self._path).expanduser().read_text(encoding="utf-8").strip()
