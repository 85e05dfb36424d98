"""smilehub - Discovery and state extraction for Plugwise Smile gateways."""

__version__ = "0.1.0"
__author__ = "smilehub contributors"

from .core.config import Config, get_config
from .core.exceptions import SmileHubError

__all__ = ["Config", "get_config", "SmileHubError", "__version__"]
