"""Authenticated HTTP session with a confirmed gateway."""

import asyncio
import base64
import contextlib
import logging
from collections.abc import AsyncIterator

import aiohttp

from ..core.config import SessionConfig
from ..core.exceptions import (
    AuthenticationError,
    ConnectionError,
    NotConnectedError,
    ParseError,
    TimeoutError,
    ValidationError,
)
from ..extraction import RelayPolicy, extract, extract_gateway_ids, first_relay, parse_gateway_info
from ..gateway.models import GatewayData, GatewayInfo
from ..gateway.xml import ensure_list, get_path, parse_xml, text_of
from . import commands

logger = logging.getLogger(__name__)

STATE_ENDPOINT = "/core/domain_objects"
DEFAULT_USERNAME = "smile"
DEFAULT_PORT = 80
DEFAULT_TIMEOUT = 10.0
DEFAULT_COMMAND_TIMEOUT = 5.0


def basic_authorization(username: str, password: str) -> str:
    """``Authorization`` header value for HTTP Basic auth."""
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


class GatewaySession:
    """Issue read and write requests to one gateway.

    Every call is an independent request with its own timeout; nothing is
    pooled or retried. Pass ``session`` to reuse an existing
    ``aiohttp.ClientSession``; otherwise a short-lived one is opened per call.
    """

    def __init__(
        self,
        host: str,
        password: str,
        *,
        username: str = DEFAULT_USERNAME,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
        relay_policy: RelayPolicy = first_relay,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._authorization = basic_authorization(username, password)
        self._timeout = timeout
        self._command_timeout = command_timeout
        self._session = session
        self._relay_policy = relay_policy
        self._connected = False
        self._gateway_info: GatewayInfo | None = None
        self._gateway_id = ""
        self._heater_id = ""

    @classmethod
    def from_config(
        cls,
        host: str,
        password: str,
        config: SessionConfig,
        **kwargs,
    ) -> "GatewaySession":
        """Create a session using username/port/timeouts from configuration."""
        kwargs.setdefault("username", config.username)
        kwargs.setdefault("port", config.port)
        kwargs.setdefault("timeout", config.timeout)
        kwargs.setdefault("command_timeout", config.command_timeout)
        return cls(host, password, **kwargs)

    @property
    def host(self) -> str:
        return self._host

    @property
    def base_url(self) -> str:
        if self._port == DEFAULT_PORT:
            return f"http://{self._host}"
        return f"http://{self._host}:{self._port}"

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def gateway_info(self) -> GatewayInfo | None:
        return self._gateway_info

    @property
    def gateway_id(self) -> str:
        return self._gateway_id

    @property
    def heater_id(self) -> str:
        return self._heater_id

    @contextlib.asynccontextmanager
    async def _client(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession() as session:
            yield session

    async def _request(
        self,
        path: str,
        method: str = "GET",
        data: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Perform one authenticated request and return the body text.

        Raises:
            AuthenticationError: On HTTP 401.
            TimeoutError: When the call exceeds ``timeout``.
            ParseError: If the body cannot be decoded.
            ConnectionError: On any other non-2xx status or transport failure.
        """
        timeout = timeout or self._timeout
        url = f"{self.base_url}{path}"
        logger.debug("HTTP %s %s", method, url)

        try:
            async with self._client() as client:
                async with client.request(
                    method,
                    url,
                    headers={"Authorization": self._authorization, "Content-Type": "text/xml"},
                    data=data,
                    timeout=aiohttp.ClientTimeout(total=timeout),
                ) as response:
                    if response.status == 401:
                        raise AuthenticationError(
                            "Invalid credentials", f"{self._host} rejected user {self._username}"
                        )
                    if not 200 <= response.status < 300:
                        raise ConnectionError(
                            f"HTTP {response.status} from {self._host}",
                            f"{method} {path}",
                            status=response.status,
                        )
                    return await response.text()
        except UnicodeDecodeError as e:
            raise ParseError(f"Undecodable response from {self._host}", str(e)) from e
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"{method} {url}", timeout) from e
        except (aiohttp.ClientError, OSError) as e:
            raise ConnectionError(f"Failed to connect to gateway at {self._host}", str(e)) from e

    def _require_connected(self, operation: str) -> None:
        if not self._connected:
            raise NotConnectedError(operation)

    async def connect(self) -> GatewayInfo:
        """Authenticate, read the gateway's identity and remember its appliance ids.

        Raises:
            AuthenticationError: If the credential is rejected.
            ConnectionError: If the gateway cannot be reached.
            ParseError: If the response is not a gateway state document.
        """
        self._connected = False
        data = parse_xml(await self._request(STATE_ENDPOINT))

        info = parse_gateway_info(data)
        if info is None:
            raise ParseError("No gateway information found", self._host)

        self._gateway_info = info
        self._gateway_id, self._heater_id = extract_gateway_ids(data)
        self._connected = True
        logger.debug("Connected to %s (%s %s) at %s", info.name, info.model, info.version, self._host)
        return info

    async def fetch_state(self) -> str:
        """Fetch the full state document as raw XML."""
        return await self._request(STATE_ENDPOINT)

    async def issue_command(self, uri: str, payload: str | None = None, method: str = "PUT") -> None:
        """Send a control request; the response body is ignored."""
        await self._request(uri, method, payload, timeout=self._command_timeout)

    async def get_devices(self) -> GatewayData:
        """Fetch and extract the current entity model."""
        self._require_connected("get_devices")
        result = extract(await self.fetch_state(), self._relay_policy)
        self._gateway_info = result.gateway_info
        self._gateway_id = result.gateway_id or self._gateway_id
        self._heater_id = result.heater_id or self._heater_id
        return result

    async def set_temperature(
        self,
        location_id: str,
        setpoint: float | None = None,
        setpoint_low: float | None = None,
        setpoint_high: float | None = None,
    ) -> None:
        """Set a zone's thermostat setpoint (first given of setpoint, low, high)."""
        self._require_connected("set_temperature")
        for value in (setpoint, setpoint_low, setpoint_high):
            if value is not None:
                break
        else:
            raise ValidationError("No temperature setpoint provided")

        await self.issue_command(*commands.thermostat_command(location_id, value))

    async def set_temperature_offset(self, device_id: str, offset: float) -> None:
        self._require_connected("set_temperature_offset")
        await self.issue_command(*commands.temperature_offset_command(device_id, offset))

    async def set_switch_state(self, appliance_id: str, state: bool) -> bool:
        self._require_connected("set_switch_state")
        await self.issue_command(*commands.relay_command(appliance_id, state))
        return state

    async def set_preset(self, location_id: str, preset: str) -> None:
        """Change a zone's preset, resending its current name and type."""
        self._require_connected("set_preset")
        data = parse_xml(await self.fetch_state())

        for location in ensure_list(get_path(data, "domain_objects.location")):
            if isinstance(location, dict) and text_of(location.get("id")) == location_id:
                break
        else:
            raise ValidationError(f"Location {location_id} not found")

        name = text_of(location.get("name")) or "Unknown"
        location_type = text_of(location.get("type")) or "room"
        await self.issue_command(*commands.preset_command(location_id, name, location_type, preset))

    async def set_gateway_mode(self, mode: str) -> None:
        self._require_connected("set_gateway_mode")
        uri, payload = commands.gateway_mode_command(self._gateway_id, mode)
        await self.issue_command(uri, payload)

    async def set_dhw_mode(self, mode: str) -> None:
        self._require_connected("set_dhw_mode")
        await self.issue_command(*commands.dhw_mode_command(mode))

    async def set_regulation_mode(self, mode: str) -> None:
        self._require_connected("set_regulation_mode")
        await self.issue_command(*commands.regulation_mode_command(mode))

    async def delete_notification(self) -> None:
        self._require_connected("delete_notification")
        await self.issue_command("/core/notifications", method="DELETE")

    async def reboot(self) -> None:
        self._require_connected("reboot")
        await self.issue_command("/core/gateways;@reboot", method="POST")
