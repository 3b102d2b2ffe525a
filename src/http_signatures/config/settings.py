"""
Configuration loading for the HTTP Signatures SDK

Loads keys and signing settings from a JSON document (string, dict or file),
applies environment overrides, and produces a ready-to-use Context.
"""

import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..crypto.algorithms import DEFAULT_DIGEST_ALGORITHM, DEFAULT_REGISTRY, DEFAULT_SIGNATURE_ALGORITHM
from ..crypto.keystore import KeyStore
from ..exceptions import ConfigurationError, HttpSignaturesError
from ..signing.signing_config import DEFAULT_SIGNED_HEADERS, SECURITY_PROFILES, Context, SigningConfig
from ..verification.middleware import SignatureVerificationMiddleware, VerificationMiddlewareConfig

logger = logging.getLogger(__name__)

ENV_KEY_ID = "HTTP_SIGNATURES_KEY_ID"
ENV_ALGORITHM = "HTTP_SIGNATURES_ALGORITHM"
ENV_LOG_LEVEL = "HTTP_SIGNATURES_LOG_LEVEL"

KEY_ENCODINGS = ('utf-8', 'base64')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class SigningSettings:
    """Signing section of the configuration"""
    key_id: Optional[str] = None
    algorithm: str = DEFAULT_SIGNATURE_ALGORITHM
    headers: List[str] = field(default_factory=lambda: list(DEFAULT_SIGNED_HEADERS))
    profile: Optional[str] = None
    include_digest: bool = False
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM
    use_authorization_header: bool = False


@dataclass
class VerificationSettings:
    """Verification section of the configuration"""
    require_digest: bool = False


@dataclass
class LoggingSettings:
    """Logging section of the configuration"""
    level: str = "WARNING"


@dataclass
class HttpSignaturesConfig:
    """
    Complete SDK configuration

    Attributes:
        keys: Mapping of key id to decoded secret bytes
        signing: Signing settings
        verification: Verification settings
        logging: Logging settings
    """
    keys: Dict[str, bytes]
    signing: SigningSettings = field(default_factory=SigningSettings)
    verification: VerificationSettings = field(default_factory=VerificationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> 'HttpSignaturesConfig':
        """
        Parse a configuration dictionary.

        Args:
            data: Parsed JSON document
            environ: Environment used for overrides (defaults to os.environ)

        Raises:
            ConfigurationError: If the document is invalid
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration must be a JSON object")

        try:
            encoding = data.get('key_encoding', 'utf-8')
            keys = _decode_keys(data.get('keys', {}), encoding)
            signing = SigningSettings(**data.get('signing', {}))
            verification = VerificationSettings(**data.get('verification', {}))
            logging_settings = LoggingSettings(**data.get('logging', {}))
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration format: {e}")

        config = cls(keys=keys, signing=signing, verification=verification, logging=logging_settings)
        config._apply_environment(os.environ if environ is None else environ)
        config._validate()
        return config

    @classmethod
    def from_json(cls, json_string: str, environ: Optional[Mapping[str, str]] = None) -> 'HttpSignaturesConfig':
        """Load configuration from a JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}")
        return cls.from_dict(data, environ)

    @classmethod
    def from_file(cls, file_path: Union[str, Path], environ: Optional[Mapping[str, str]] = None) -> 'HttpSignaturesConfig':
        """Load configuration from a JSON file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", {"path": str(file_path)})
        return cls.from_json(json_string, environ)

    def to_signing_config(self) -> SigningConfig:
        """
        Convert to a SigningConfig.

        Raises:
            ConfigurationError: If the settings do not form a valid signing configuration
        """
        signing = self.signing
        headers = signing.headers
        include_digest = signing.include_digest
        digest_algorithm = signing.digest_algorithm
        if signing.profile:
            profile = SECURITY_PROFILES[signing.profile]
            headers = list(profile.headers)
            include_digest = profile.include_digest
            digest_algorithm = profile.digest_algorithm

        try:
            return SigningConfig(
                key_store=KeyStore(self.keys),
                key_id=signing.key_id,
                algorithm=signing.algorithm,
                headers=tuple(headers),
                include_digest=include_digest,
                digest_algorithm=digest_algorithm,
                use_authorization_header=signing.use_authorization_header
            )
        except HttpSignaturesError as e:
            raise ConfigurationError(f"Invalid signing configuration: {e.message}", e.details)

    def to_context(self) -> Context:
        return Context(self.to_signing_config())

    def to_middleware_config(
        self,
        exempt_paths: Iterable[str] = (),
        on_failure: Optional[Callable[[Dict[str, Any]], None]] = None
    ) -> VerificationMiddlewareConfig:
        """Build the WSGI middleware settings from the verification section."""
        return VerificationMiddlewareConfig(
            require_digest=self.verification.require_digest,
            exempt_paths=tuple(exempt_paths),
            on_failure=on_failure
        )

    def wrap_wsgi_app(self, app: Callable, exempt_paths: Iterable[str] = ()) -> SignatureVerificationMiddleware:
        """
        Wrap a WSGI application with signature verification.

        The Digest header is also checked when ``verification.require_digest``
        is set.
        """
        return SignatureVerificationMiddleware(
            app,
            self.to_context().verifier(),
            self.to_middleware_config(exempt_paths)
        )

    def configure_logging(self) -> None:
        """Apply the configured level to the package logger (no handlers are added)."""
        logging.getLogger('http_signatures').setLevel(self.logging.level)

    def _apply_environment(self, environ: Mapping[str, str]) -> None:
        if environ.get(ENV_KEY_ID):
            self.signing.key_id = environ[ENV_KEY_ID]
        if environ.get(ENV_ALGORITHM):
            self.signing.algorithm = environ[ENV_ALGORITHM]
        if environ.get(ENV_LOG_LEVEL):
            self.logging.level = environ[ENV_LOG_LEVEL]

    def _validate(self) -> None:
        self.logging.level = self.logging.level.upper()
        if self.logging.level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")

        if self.signing.profile and self.signing.profile not in SECURITY_PROFILES:
            raise ConfigurationError(
                f"Unknown security profile: {self.signing.profile}",
                {"available_profiles": list(SECURITY_PROFILES)}
            )

        if DEFAULT_REGISTRY.signing_fn(self.signing.algorithm) is None:
            raise ConfigurationError(f"Unsupported signature algorithm: {self.signing.algorithm}")

        if self.signing.key_id is not None and self.signing.key_id not in self.keys:
            raise ConfigurationError(f"Signing key not found in configured keys: {self.signing.key_id}")

        if not isinstance(self.signing.headers, list) or not self.signing.headers:
            raise ConfigurationError("signing.headers must be a non-empty list")


def _decode_keys(keys: Any, encoding: str) -> Dict[str, bytes]:
    if not isinstance(keys, Mapping):
        raise ConfigurationError("keys must be an object mapping key id to secret")
    if encoding not in KEY_ENCODINGS:
        raise ConfigurationError(f"Invalid key_encoding: {encoding}", {"supported": list(KEY_ENCODINGS)})

    decoded: Dict[str, bytes] = {}
    for key_id, secret in keys.items():
        if not isinstance(secret, str):
            raise ConfigurationError(f"Secret for key {key_id} must be a string")
        if encoding == 'base64':
            try:
                decoded[key_id] = base64.b64decode(secret, validate=True)
            except (binascii.Error, ValueError):
                raise ConfigurationError(f"Secret for key {key_id} is not valid base64")
        else:
            decoded[key_id] = secret.encode('utf-8')
    return decoded


def load_config_from_json(json_string: str) -> HttpSignaturesConfig:
    """Load configuration from a JSON string"""
    return HttpSignaturesConfig.from_json(json_string)


def load_config_from_file(file_path: Union[str, Path]) -> HttpSignaturesConfig:
    """Load configuration from a JSON file"""
    return HttpSignaturesConfig.from_file(file_path)


def load_context_from_file(file_path: Union[str, Path]) -> Context:
    """Load configuration from a file and build a Context"""
    config = load_config_from_file(file_path)
    config.configure_logging()
    logger.info(f"Loaded signing configuration from {file_path}")
    return config.to_context()
