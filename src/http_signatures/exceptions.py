"""
Exception classes for the HTTP Signatures SDK
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCodes:
    """Standard error codes for programmatic handling"""

    # Key store errors
    KEY_NOT_FOUND = "KEY_NOT_FOUND"
    INVALID_KEY = "INVALID_KEY"

    # Algorithm errors
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"

    # Signature header errors
    INVALID_SIGNATURE_PARAMETERS = "INVALID_SIGNATURE_PARAMETERS"
    SIGNED_HEADER_NOT_FOUND = "SIGNED_HEADER_NOT_FOUND"

    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"
    NO_SIGNING_KEY = "NO_SIGNING_KEY"

    # Digest errors
    DIGEST_MISSING = "DIGEST_MISSING"
    DIGEST_MALFORMED = "DIGEST_MALFORMED"
    DIGEST_UNSUPPORTED_ALGORITHM = "DIGEST_UNSUPPORTED_ALGORITHM"

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"


class DigestErrorKind(str, Enum):
    """Structural problems a Digest header can have"""
    MISSING_HEADER = "missing_header"
    MALFORMED = "malformed"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"


class HttpSignaturesError(Exception):
    """Base exception for all HTTP Signatures SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} (code: {self.error_code})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message='{self.message}', error_code='{self.error_code}')"


class KeyStoreError(HttpSignaturesError):
    """Exception raised for key store lookups and key validation"""
    pass


class KeyNotFoundError(KeyStoreError):
    """Exception raised when a key id is not present in the key store"""

    def __init__(self, key_id: str):
        super().__init__(
            f"Key not found: {key_id}",
            ErrorCodes.KEY_NOT_FOUND,
            {"key_id": key_id}
        )
        self.key_id = key_id


class AlgorithmError(HttpSignaturesError):
    """Exception raised when an algorithm name is not registered"""
    pass


class SignatureParseError(HttpSignaturesError):
    """Exception raised for malformed Signature header parameters"""
    pass


class SignedHeaderNotFoundError(HttpSignaturesError):
    """Exception raised when a header named in the signed list is absent"""

    def __init__(self, header_name: str):
        super().__init__(
            f"Signed header not found in message: {header_name}",
            ErrorCodes.SIGNED_HEADER_NOT_FOUND,
            {"header": header_name}
        )
        self.header_name = header_name


class SigningError(HttpSignaturesError):
    """Exception raised when a message cannot be signed"""
    pass


class DigestError(HttpSignaturesError):
    """
    Exception raised for structurally invalid Digest headers.

    A well-formed Digest header whose value does not match the body is not an
    error; it verifies as False.
    """

    _CODES = {
        DigestErrorKind.MISSING_HEADER: ErrorCodes.DIGEST_MISSING,
        DigestErrorKind.MALFORMED: ErrorCodes.DIGEST_MALFORMED,
        DigestErrorKind.UNSUPPORTED_ALGORITHM: ErrorCodes.DIGEST_UNSUPPORTED_ALGORITHM,
    }

    def __init__(self, message: str, kind: DigestErrorKind, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, self._CODES[kind], details)
        self.kind = kind


class ConfigurationError(HttpSignaturesError):
    """Exception raised for invalid SDK configuration"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCodes.INVALID_CONFIG, details)
