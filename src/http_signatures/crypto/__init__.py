"""
HTTP Signatures SDK - Keys and Algorithms

Shared-secret key storage and the registry of keyed-hash and digest
algorithms used by signing and verification.
"""

from .algorithms import (
    AlgorithmRegistry,
    DEFAULT_REGISTRY,
    DEFAULT_SIGNATURE_ALGORITHM,
    DEFAULT_DIGEST_ALGORITHM,
    SigningFunction,
    DigestFunction,
    hmac_function,
    digest_function,
    constant_time_equals,
)
from .keystore import (
    Key,
    KeyStore,
    KeyMaterial,
    create_key_store,
)

__all__ = [
    # Algorithms
    'AlgorithmRegistry',
    'DEFAULT_REGISTRY',
    'DEFAULT_SIGNATURE_ALGORITHM',
    'DEFAULT_DIGEST_ALGORITHM',
    'SigningFunction',
    'DigestFunction',
    'hmac_function',
    'digest_function',
    'constant_time_equals',
    # Keys
    'Key',
    'KeyStore',
    'KeyMaterial',
    'create_key_store',
]
