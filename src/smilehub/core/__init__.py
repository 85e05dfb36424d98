"""Core module - configuration, exceptions, and utilities."""

from .config import Config, ScanConfig, SessionConfig, get_config, set_config
from .exceptions import (
    AuthenticationError,
    ConnectionError,
    NotConnectedError,
    ParseError,
    SmileHubError,
    StorageError,
    TimeoutError,
    ValidationError,
)
from .utils import (
    detect_local_network,
    expand_address_space,
    format_mac,
    get_interfaces,
    validate_ip,
    validate_network,
)

__all__ = [
    "Config",
    "ScanConfig",
    "SessionConfig",
    "get_config",
    "set_config",
    "SmileHubError",
    "ConnectionError",
    "TimeoutError",
    "AuthenticationError",
    "ParseError",
    "NotConnectedError",
    "ValidationError",
    "StorageError",
    "detect_local_network",
    "expand_address_space",
    "format_mac",
    "get_interfaces",
    "validate_ip",
    "validate_network",
]
