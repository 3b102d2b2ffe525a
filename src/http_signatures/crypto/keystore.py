"""
Shared-secret key store

Maps key identifiers to HMAC key material. The store holds an immutable
snapshot of its keys; rotation replaces the whole snapshot in a single
assignment so concurrent readers never observe a partially updated table.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Union

from ..exceptions import ErrorCodes, KeyNotFoundError, KeyStoreError

logger = logging.getLogger(__name__)

KeyMaterial = Union[str, bytes]


@dataclass(frozen=True)
class Key:
    """
    A named shared secret.

    Attributes:
        id: Key identifier as carried in the ``keyId`` signature parameter
        material: Secret bytes used as the HMAC key
    """
    id: str
    material: bytes

    def __post_init__(self):
        if not self.id:
            raise KeyStoreError("Key ID cannot be empty", ErrorCodes.INVALID_KEY)

        if '"' in self.id:
            raise KeyStoreError(
                "Key ID cannot contain a double quote",
                ErrorCodes.INVALID_KEY,
                {"key_id": self.id}
            )

        if isinstance(self.material, str):
            object.__setattr__(self, 'material', self.material.encode('utf-8'))
        elif isinstance(self.material, (bytearray, memoryview)):
            object.__setattr__(self, 'material', bytes(self.material))
        elif not isinstance(self.material, bytes):
            raise KeyStoreError(
                f"Key material for {self.id} must be str or bytes",
                ErrorCodes.INVALID_KEY,
                {"key_id": self.id}
            )

    def __repr__(self) -> str:
        return f"Key(id='{self.id}', material=<{len(self.material)} bytes>)"


def _build_table(keys: Mapping[str, KeyMaterial]) -> Mapping[str, Key]:
    if not isinstance(keys, Mapping):
        raise KeyStoreError("Keys must be a mapping of key id to secret", ErrorCodes.INVALID_KEY)
    return MappingProxyType({key_id: Key(key_id, material) for key_id, material in keys.items()})


class KeyStore:
    """
    Lookup of key id to :class:`Key`.

    Example:
        >>> store = KeyStore({'secret1': 'secret'})
        >>> store.fetch('secret1').material
        b'secret'
    """

    def __init__(self, keys: Optional[Mapping[str, KeyMaterial]] = None):
        self._keys = _build_table(keys or {})

    def get(self, key_id: str) -> Optional[Key]:
        """Return the key for ``key_id`` or None when it is unknown."""
        return self._keys.get(key_id)

    def fetch(self, key_id: str) -> Key:
        """
        Return the key for ``key_id``.

        Raises:
            KeyNotFoundError: If the key id is unknown
        """
        key = self._keys.get(key_id)
        if key is None:
            raise KeyNotFoundError(key_id)
        return key

    def replace_keys(self, keys: Mapping[str, KeyMaterial]) -> None:
        """
        Swap in a new key table (e.g. on rotation).

        The new table is fully built before it becomes visible.
        """
        table = _build_table(keys)
        self._keys = table
        logger.info(f"Key store updated with {len(table)} key(s)")

    def key_ids(self) -> list:
        return list(self._keys)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __repr__(self) -> str:
        return f"KeyStore(key_ids={self.key_ids()})"


def create_key_store(keys: Union[KeyStore, Mapping[str, KeyMaterial], None]) -> KeyStore:
    """Accept an existing store or a plain mapping and return a KeyStore."""
    if isinstance(keys, KeyStore):
        return keys
    return KeyStore(keys or {})

