"""
SAML Response Source Port - Interface for obtaining the SAML form-post body.

The browser automation that performs the interactive login lives outside
this package; it hands over the intercepted POST body through this port.

Implementations:
- FileSAMLResponseSource: Body captured to a file or piped on stdin
"""

from abc import ABC, abstractmethod


class SAMLResponseSource(ABC):
    """Port: Provide the intercepted SAML form-post body."""

    @abstractmethod
    def capture(self) -> str:
        """
        Return the form-post body carrying the ``SAMLResponse`` field.

        Returns:
            URL-encoded form body
        """
        pass
