"""
HTTP Signatures SDK - Signature Verification Module

Verification of Signature / Authorization headers and Digest headers, plus
WSGI middleware for server-side request verification.
"""

from .types import (
    DigestCheckResult,
    VerificationFailure,
)

from .verifier import (
    Verifier,
    create_verifier,
    verify_message,
)

from .middleware import (
    SignatureVerificationMiddleware,
    VerificationMiddlewareConfig,
    message_from_wsgi_environ,
)

__all__ = [
    # Types
    'DigestCheckResult',
    'VerificationFailure',
    # Core verification
    'Verifier',
    'create_verifier',
    'verify_message',
    # Middleware
    'SignatureVerificationMiddleware',
    'VerificationMiddlewareConfig',
    'message_from_wsgi_environ',
]
