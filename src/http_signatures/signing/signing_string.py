"""
Canonical signing string construction

The signing string is shared by the signer and the verifier: one line per
signed header, in the order the header names are listed, joined with a single
newline and without a trailing newline.
"""

from typing import Iterable, List

from ..exceptions import SignedHeaderNotFoundError
from .types import REQUEST_TARGET, SignableMessage


class SigningStringBuilder:
    """
    Builds the canonical signing string for a message and header list.
    """

    def __init__(self, message: SignableMessage):
        self.message = message

    def build(self, header_names: Iterable[str]) -> str:
        """
        Build the signing string.

        Args:
            header_names: Ordered signed header names; ``(request-target)``
                expands to the lower-cased method and request target

        Returns:
            str: Canonical signing string

        Raises:
            SignedHeaderNotFoundError: If a listed header is absent
        """
        return '\n'.join(self._line(name.lower()) for name in header_names)

    def _line(self, name: str) -> str:
        if name == REQUEST_TARGET:
            return f"{REQUEST_TARGET}: {self._request_target()}"
        return f"{name}: {self._header_value(name)}"

    def _request_target(self) -> str:
        return f"{self.message.method.lower()} {self.message.request_target}"

    def _header_value(self, name: str) -> str:
        values: List[str] = self.message.get_header_values(name)
        if not values:
            raise SignedHeaderNotFoundError(name)
        return ', '.join(values)


def build_signing_string(message: SignableMessage, header_names: Iterable[str]) -> str:
    """
    Build the canonical signing string for ``message``.

    Args:
        message: Message to canonicalize
        header_names: Ordered signed header names

    Returns:
        str: Signing string

    Raises:
        SignedHeaderNotFoundError: If a listed header is absent
    """
    return SigningStringBuilder(message).build(header_names)
