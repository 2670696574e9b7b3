"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from caffio.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from caffio.core.exceptions import (
    CaffioError,
    NotFoundError,
    ConflictError,
    UnauthorizedError,
    InvalidArgumentError,
    UpstreamFailureError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "CaffioError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "UpstreamFailureError",
]
