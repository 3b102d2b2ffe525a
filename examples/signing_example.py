#!/usr/bin/env python3
"""
HTTP Signatures SDK - Signing and Verification Example

This example signs requests with a shared secret, verifies them the way a
server would, and shows how tampering and malformed Digest headers surface.
"""

import io
import os
import sys

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from http_signatures import (
    DigestError,
    HttpMessage,
    Key,
    KeyStore,
    Signer,
    SigningError,
    SignatureVerificationMiddleware,
    Verifier,
    create_from_profile,
    Context,
)
from http_signatures.verification import VerificationMiddlewareConfig

DATE = "Fri, 01 Aug 2014 13:44:32 -0700"


def basic_signing_example():
    """Sign a request and verify it"""
    print("=== Basic Signing Example ===")

    message = HttpMessage(
        method="GET",
        request_target="/path?query=123",
        headers=[("Date", DATE)],
        body="Some body (though any body in a GET should be ignored)"
    )
    signer = Signer(Key("secret1", "secret"), "hmac-sha256", ["(request-target)", "date"])
    signed = signer.sign_with_digest(message)

    print(f"   Digest:    {signed.get_header('Digest')}")
    print(f"   Signature: {signed.get_header('Signature')}")

    verifier = Verifier(KeyStore({"secret1": "secret"}))
    print(f"   Valid signature: {verifier.is_valid(signed)}")
    print(f"   Valid digest:    {verifier.is_valid_digest(signed)}")
    print(f"   Tampered method: {verifier.is_valid(signed.with_method('POST'))}")
    print(f"   Tampered body:   {verifier.is_valid_with_digest(signed.with_body('other'))}")


def profile_example():
    """Sign with the strict profile"""
    print("\n\n=== Security Profile Example ===")

    context = Context(create_from_profile("strict", {"client-001": "s3cr3t"}))
    message = HttpMessage(
        method="POST",
        request_target="/api/items",
        headers=[("Host", "api.example.com"), ("Date", DATE)],
        body=b'{"name": "example"}'
    )
    signed = context.sign(message)

    print(f"   Headers signed: {' '.join(context.config.headers)}")
    print(f"   Digest: {signed.get_header('Digest')}")
    print(f"   Verified: {context.verifier().is_valid_with_digest(signed)}")


def middleware_example():
    """Verify a WSGI request through the middleware"""
    print("\n\n=== WSGI Middleware Example ===")

    def app(environ, start_response):
        start_response("200 OK", [("Content-Type", "text/plain")])
        return [b"hello"]

    signer = Signer(Key("secret1", "secret"), "hmac-sha256", ["(request-target)", "date"])
    signed = signer.sign_with_digest(HttpMessage("POST", "/hello", [("Date", DATE)], b"payload"))

    wrapped = SignatureVerificationMiddleware(
        app, Verifier({"secret1": "secret"}), VerificationMiddlewareConfig(require_digest=True)
    )
    environ = {
        "REQUEST_METHOD": "POST",
        "PATH_INFO": "/hello",
        "QUERY_STRING": "",
        "CONTENT_LENGTH": str(len(signed.body)),
        "wsgi.input": io.BytesIO(signed.body),
        "HTTP_DATE": DATE,
        "HTTP_DIGEST": signed.get_header("Digest"),
        "HTTP_SIGNATURE": signed.get_header("Signature"),
    }

    def start_response(status, headers):
        print(f"   Response status: {status}")

    print(f"   Response body: {b''.join(wrapped(environ, start_response))!r}")


def error_handling_example():
    """Show the errors callers handle"""
    print("\n\n=== Error Handling Example ===")

    verifier = Verifier({"secret1": "secret"})
    message = HttpMessage("GET", "/", [("Date", DATE), ("Digest", "SHA-255=xxx")])

    try:
        verifier.is_valid_digest(message)
    except DigestError as e:
        print(f"   Malformed digest: {type(e).__name__}: {e} [{e.kind.value}]")

    try:
        Signer(Key("secret1", "secret"), "hmac-sha256", ["host"]).sign(message)
    except SigningError as e:
        print(f"   Missing header: {type(e).__name__}: {e}")


def main():
    """Run all examples"""
    print("HTTP Signatures SDK - Examples")
    print("=" * 50)

    basic_signing_example()
    profile_example()
    middleware_example()
    error_handling_example()

    print("\n\n=== All Examples Completed Successfully! ===")


if __name__ == "__main__":
    main()
