"""
Configuration management for the Garmin Python SDK

Environment variant profiles and client settings.
"""

from .environment import (
    ApiVariant,
    EnvironmentProfile,
    ENVIRONMENT_PROFILES,
    DEFAULT_VARIANT,
)
from .settings import ClientConfig

__all__ = [
    'ApiVariant',
    'EnvironmentProfile',
    'ENVIRONMENT_PROFILES',
    'DEFAULT_VARIANT',
    'ClientConfig',
]
