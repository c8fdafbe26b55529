"""
Formatter - Renders a session for standard output.
"""

from typing import Optional
import json

from gsts.domain.session import Session

EMPTY_CREDENTIAL_PROCESS = {"Version": 1}


def format_output(session: Optional[Session], output_format: Optional[str]) -> str:
    """
    Render a session in the requested output format.

    Args:
        session: Session to render; None when no credentials could be obtained
        output_format: "json", "none" or None

    Returns:
        Text to print (empty when nothing should be printed)

    Raises:
        ValueError: Unsupported output format
    """
    if output_format is None or output_format == "none":
        return ""

    if output_format == "json":
        if session is None:
            return json.dumps(EMPTY_CREDENTIAL_PROCESS)
        return session.to_json()

    raise ValueError(f"Unsupported output format {output_format}")
