"""
HTTP client integration for request signing

This module provides integration between message signing and the requests
library: an adapter exposing a PreparedRequest as a signable message, and an
auth handler that signs outgoing requests automatically.
"""

import logging
from email.utils import formatdate
from typing import Optional, Union
from urllib.parse import urlsplit

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest

from ..exceptions import ErrorCodes, SigningError
from .signing_config import Context, SigningConfig
from .types import AUTHORIZATION_HEADER, DIGEST_HEADER, SIGNATURE_HEADER, HttpMessage

logger = logging.getLogger(__name__)


def request_target_from_url(url: str) -> str:
    """
    Extract the request target (path plus query, verbatim) from a URL.

    Example:
        >>> request_target_from_url('https://example.com/path?query=123')
        '/path?query=123'
    """
    parts = urlsplit(url)
    target = parts.path or '/'
    if parts.query:
        target = f"{target}?{parts.query}"
    return target


def message_from_prepared_request(request: PreparedRequest) -> HttpMessage:
    """
    Build a signable message from a requests PreparedRequest.

    Raises:
        SigningError: If the body is a stream and cannot be read up front
    """
    body = request.body
    if body is not None and not isinstance(body, (str, bytes)):
        raise SigningError(
            "Streaming request bodies cannot be signed",
            ErrorCodes.SIGNING_FAILED,
            {"body_type": type(body).__name__}
        )

    return HttpMessage(
        method=request.method or 'GET',
        request_target=request_target_from_url(request.url),
        headers=tuple(request.headers.items()),
        body=body
    )


class HttpSignatureAuth(AuthBase):
    """
    requests auth handler that signs each outgoing request.

    Example:
        >>> config = create_signing_config().key('secret1', 'secret').build()
        >>> requests.get(url, auth=HttpSignatureAuth(config))
    """

    def __init__(self, context: Union[Context, SigningConfig]):
        if isinstance(context, SigningConfig):
            context = Context(context)
        self.context = context
        # Validate that a signing key is available before any request is made
        self.context.signer()
        logger.info(f"Configured request signing for key ID: {context.config.signing_key_id}")

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        self._fill_default_headers(request)

        message = message_from_prepared_request(request)
        signed = self.context.sign(message)

        for name in (DIGEST_HEADER, SIGNATURE_HEADER, AUTHORIZATION_HEADER):
            value = signed.get_header(name)
            if value is not None and value != message.get_header(name):
                request.headers[name] = value

        logger.debug(f"Signed {request.method} request to {request.url}")
        return request

    def _fill_default_headers(self, request: PreparedRequest) -> None:
        """Add Date and Host when they are signed but not yet set."""
        signed_headers = self.context.config.headers
        if 'date' in signed_headers and 'Date' not in request.headers:
            request.headers['Date'] = formatdate(usegmt=True)
        if 'host' in signed_headers and 'Host' not in request.headers:
            request.headers['Host'] = urlsplit(request.url).netloc


def create_signing_session(
    context: Union[Context, SigningConfig],
    session: Optional[requests.Session] = None
) -> requests.Session:
    """
    Create a requests session that signs every request.

    Args:
        context: Signing context or configuration
        session: Optional existing session to configure

    Returns:
        requests.Session: Session with HttpSignatureAuth installed
    """
    session = session or requests.Session()
    session.auth = HttpSignatureAuth(context)
    return session
