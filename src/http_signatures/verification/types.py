"""
Type definitions for signature verification

This module provides the tagged digest-check result and the internal failure
reasons recorded (at debug level only) when a signature does not verify.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..exceptions import DigestError, DigestErrorKind


class VerificationFailure(str, Enum):
    """Why a signature did not verify"""
    MISSING_SIGNATURE = "missing_signature"
    INVALID_PARAMETERS = "invalid_parameters"
    UNKNOWN_KEY = "unknown_key"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    MISSING_SIGNED_HEADER = "missing_signed_header"
    SIGNATURE_MISMATCH = "signature_mismatch"


@dataclass(frozen=True)
class DigestCheckResult:
    """
    Tagged result of a Digest header check

    Either the header was well-formed (``error_kind`` is None) and ``valid``
    tells whether it matched the body, or it was structurally invalid and
    ``error_kind`` names the problem.

    Attributes:
        valid: True if the digest matched the body
        error_kind: Structural problem, if any
        message: Human-readable description of the structural problem
        error: The DigestError that was caught, re-raised by :meth:`unwrap`
    """
    valid: bool
    error_kind: Optional[DigestErrorKind] = None
    message: Optional[str] = None
    error: Optional[DigestError] = field(default=None, compare=False, repr=False)

    @property
    def is_structural_error(self) -> bool:
        return self.error_kind is not None

    @classmethod
    def ok(cls, valid: bool) -> 'DigestCheckResult':
        return cls(valid=valid)

    @classmethod
    def structural_error(cls, error: DigestError) -> 'DigestCheckResult':
        return cls(valid=False, error_kind=error.kind, message=error.message, error=error)

    def unwrap(self) -> bool:
        """
        Return the boolean outcome, raising for structural errors.

        Raises:
            DigestError: If the header was structurally invalid
        """
        if self.error is not None:
            raise self.error
        if self.error_kind is not None:
            raise DigestError(self.message or "Invalid Digest header", self.error_kind)
        return self.valid
