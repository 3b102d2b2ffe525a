"""
Verification middleware for WSGI applications

This module provides an adapter exposing a WSGI environ as a signable message
and a middleware that rejects requests whose signature (and optionally digest)
does not verify.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

from ..exceptions import DigestError
from ..signing.types import HttpMessage
from .verifier import Verifier

logger = logging.getLogger(__name__)

# Characters allowed unescaped in a path (pchar plus "/")
_PATH_SAFE = "/!$&'()*+,;=:@~"

# Headers WSGI exposes without the HTTP_ prefix
_UNPREFIXED_HEADERS = {
    'CONTENT_TYPE': 'Content-Type',
    'CONTENT_LENGTH': 'Content-Length',
}


def _request_target(environ: Dict[str, Any]) -> str:
    raw = environ.get('RAW_URI') or environ.get('REQUEST_URI')
    if raw:
        return raw

    # PATH_INFO is the percent-decoded path carried as latin-1 code points
    decoded = environ.get('SCRIPT_NAME', '') + environ.get('PATH_INFO', '')
    path = quote(decoded.encode('latin-1'), safe=_PATH_SAFE) or '/'
    query = environ.get('QUERY_STRING')
    return f"{path}?{query}" if query else path


def _headers(environ: Dict[str, Any]) -> Tuple[Tuple[str, str], ...]:
    headers: List[Tuple[str, str]] = []
    for key, value in environ.items():
        if key.startswith('HTTP_'):
            name = key[5:].replace('_', '-').title()
            headers.append((name, value))
        elif key in _UNPREFIXED_HEADERS and value:
            headers.append((_UNPREFIXED_HEADERS[key], value))
    return tuple(headers)


def _read_body(environ: Dict[str, Any]) -> bytes:
    """Read the request body and put a rewound copy back into the environ."""
    try:
        length = int(environ.get('CONTENT_LENGTH') or 0)
    except ValueError:
        length = 0

    stream = environ.get('wsgi.input')
    body = stream.read(length) if stream is not None and length > 0 else b''
    environ['wsgi.input'] = io.BytesIO(body)
    return body


def message_from_wsgi_environ(environ: Dict[str, Any]) -> HttpMessage:
    """
    Build a signable message from a WSGI environ.

    The request target is taken verbatim from ``RAW_URI``/``REQUEST_URI`` when
    the server provides it; otherwise it is rebuilt from the decoded path,
    escaping only characters that may not appear in a path. The body is
    buffered and ``wsgi.input`` replaced so the wrapped application can still
    read it.
    """
    return HttpMessage(
        method=environ.get('REQUEST_METHOD', 'GET'),
        request_target=_request_target(environ),
        headers=_headers(environ),
        body=_read_body(environ)
    )


@dataclass
class VerificationMiddlewareConfig:
    """
    Request verification middleware configuration

    Attributes:
        require_digest: Also verify the Digest header
        exempt_paths: Paths (compared with PATH_INFO, without query) that skip verification
        on_failure: Optional callback invoked with the environ of rejected requests
    """
    require_digest: bool = False
    exempt_paths: Tuple[str, ...] = ()
    on_failure: Optional[Callable[[Dict[str, Any]], None]] = None


class SignatureVerificationMiddleware:
    """
    WSGI middleware answering 401 for requests that fail verification.

    Example:
        >>> app.wsgi_app = SignatureVerificationMiddleware(app.wsgi_app, verifier)
    """

    def __init__(
        self,
        app: Callable,
        verifier: Verifier,
        config: Optional[VerificationMiddlewareConfig] = None
    ):
        self.app = app
        self.verifier = verifier
        self.config = config or VerificationMiddlewareConfig()

    def __call__(self, environ: Dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        if environ.get('PATH_INFO', '/') in self.config.exempt_paths:
            return self.app(environ, start_response)

        message = message_from_wsgi_environ(environ)

        if not self.verifier.is_valid(message):
            return self._reject(environ, start_response, '401 Unauthorized', b'Invalid signature')

        if self.config.require_digest:
            try:
                digest_valid = self.verifier.is_valid_digest(message)
            except DigestError as e:
                logger.warning(f"Rejected request with malformed Digest header: {e.message}")
                return self._reject(environ, start_response, '400 Bad Request', b'Malformed Digest header')
            if not digest_valid:
                return self._reject(environ, start_response, '401 Unauthorized', b'Invalid digest')

        environ['http_signatures.verified'] = True
        return self.app(environ, start_response)

    def _reject(
        self,
        environ: Dict[str, Any],
        start_response: Callable,
        status: str,
        body: bytes
    ) -> List[bytes]:
        if self.config.on_failure:
            self.config.on_failure(environ)

        start_response(status, [
            ('Content-Type', 'text/plain'),
            ('Content-Length', str(len(body))),
            ('WWW-Authenticate', 'Signature realm="http-signatures"'),
        ])
        return [body]
