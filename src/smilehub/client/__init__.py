"""Gateway client - authenticated session and control commands."""

from .commands import DHW_MODES, GATEWAY_MODES, REGULATION_MODES
from .session import STATE_ENDPOINT, GatewaySession

__all__ = [
    "GatewaySession",
    "STATE_ENDPOINT",
    "GATEWAY_MODES",
    "DHW_MODES",
    "REGULATION_MODES",
]
