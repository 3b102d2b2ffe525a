"""
Configuration management for the HTTP Signatures SDK
"""

from .settings import (
    HttpSignaturesConfig,
    SigningSettings,
    VerificationSettings,
    LoggingSettings,
    ENV_KEY_ID,
    ENV_ALGORITHM,
    ENV_LOG_LEVEL,
    load_config_from_json,
    load_config_from_file,
    load_context_from_file,
)

__all__ = [
    'HttpSignaturesConfig',
    'SigningSettings',
    'VerificationSettings',
    'LoggingSettings',
    'ENV_KEY_ID',
    'ENV_ALGORITHM',
    'ENV_LOG_LEVEL',
    'load_config_from_json',
    'load_config_from_file',
    'load_context_from_file',
]
