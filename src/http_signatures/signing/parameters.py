"""
Parsing and formatting of Signature header parameters

Header grammar: comma-separated ``name="value"`` pairs. The recognized names
are ``keyId``, ``algorithm``, ``headers`` and ``signature``. Parsing is lenient
in the sense that it never raises: anything that cannot become a complete
:class:`SignatureParameters` yields ``None``. :func:`parse_strict` raises
:class:`SignatureParseError` instead.
"""

import base64
import binascii
import logging
import re
from typing import Dict, Iterable, Optional

from ..exceptions import ErrorCodes, SignatureParseError
from .types import AUTHORIZATION_SCHEME, SignatureParameters

logger = logging.getLogger(__name__)

_PARAM_PATTERN = re.compile(r'\s*([A-Za-z]+)="([^"]*)"\s*(?:,|$)')

REQUIRED_PARAMETERS = ('keyId', 'algorithm', 'headers', 'signature')


def _split_parameters(header_value: str) -> Optional[Dict[str, str]]:
    params: Dict[str, str] = {}
    position = 0
    value = header_value.strip()

    while position < len(value):
        match = _PARAM_PATTERN.match(value, position)
        if not match or match.end() == position:
            return None
        name, param_value = match.groups()
        params[name] = param_value
        position = match.end()

    return params


def _decode_signature(encoded: str) -> Optional[bytes]:
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None


def parse_strict(header_value: Optional[str]) -> SignatureParameters:
    """
    Parse a Signature header value, raising on any problem.

    Args:
        header_value: Raw header value, e.g.
            ``keyId="k",algorithm="hmac-sha256",headers="date",signature="..."``

    Returns:
        SignatureParameters: Parsed parameters

    Raises:
        SignatureParseError: If the value is malformed, incomplete, or carries
            a signature that is not valid base64
    """
    if not header_value or not isinstance(header_value, str):
        raise SignatureParseError("Signature header is empty", ErrorCodes.INVALID_SIGNATURE_PARAMETERS)

    params = _split_parameters(header_value)
    if params is None:
        raise SignatureParseError(
            "Signature header is not a list of name=\"value\" pairs",
            ErrorCodes.INVALID_SIGNATURE_PARAMETERS
        )

    missing = [name for name in REQUIRED_PARAMETERS if not params.get(name)]
    if missing:
        raise SignatureParseError(
            f"Signature header is missing parameters: {', '.join(missing)}",
            ErrorCodes.INVALID_SIGNATURE_PARAMETERS,
            {"missing": missing}
        )

    header_names = params['headers'].split()
    if not header_names:
        raise SignatureParseError("Signature header lists no signed headers", ErrorCodes.INVALID_SIGNATURE_PARAMETERS)

    signature = _decode_signature(params['signature'])
    if signature is None:
        raise SignatureParseError("Signature is not valid base64", ErrorCodes.INVALID_SIGNATURE_PARAMETERS)

    return SignatureParameters(
        key_id=params['keyId'],
        algorithm=params['algorithm'],
        header_names=tuple(header_names),
        signature=signature
    )


def parse(header_value: Optional[str]) -> Optional[SignatureParameters]:
    """
    Parse a Signature header value without raising.

    Returns:
        SignatureParameters, or None when :func:`parse_strict` would raise
    """
    try:
        return parse_strict(header_value)
    except SignatureParseError as e:
        logger.debug(f"Unparseable signature parameters: {e.message}")
        return None


def parse_authorization(header_value: Optional[str]) -> Optional[SignatureParameters]:
    """
    Parse an Authorization header value of the ``Signature`` scheme.

    Returns None when the value does not start with ``Signature `` or the
    remainder does not parse.
    """
    if not header_value or not header_value.startswith(AUTHORIZATION_SCHEME):
        return None
    return parse(header_value[len(AUTHORIZATION_SCHEME):])


def format_parameters(params: SignatureParameters) -> str:
    """
    Serialize parameters to a Signature header value.

    This is the exact inverse of :func:`parse`.
    """
    return build_header_value(
        params.key_id,
        params.algorithm,
        params.header_names,
        base64.b64encode(params.signature).decode('ascii')
    )


def build_header_value(key_id: str, algorithm: str, header_names: Iterable[str], signature_b64: str) -> str:
    return (
        f'keyId="{key_id}",'
        f'algorithm="{algorithm}",'
        f'headers="{" ".join(header_names)}",'
        f'signature="{signature_b64}"'
    )


def format_authorization(params: SignatureParameters) -> str:
    """Serialize parameters to an ``Authorization: Signature ...`` value."""
    return AUTHORIZATION_SCHEME + format_parameters(params)
