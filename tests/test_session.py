"""Tests for the gateway session and command payloads."""

import asyncio
from datetime import datetime, timezone

import aiohttp
import pytest

from conftest import FakeSession, MockResponse, UndecodableResponse
from smilehub.client import commands
from smilehub.client.session import GatewaySession, basic_authorization
from smilehub.core.config import SessionConfig
from smilehub.core.exceptions import (
    AuthenticationError,
    ConnectionError,
    NotConnectedError,
    ParseError,
    TimeoutError,
    ValidationError,
)
from smilehub.gateway.models import GatewayType


def _connected_session(fake: FakeSession, xml: str, **kwargs) -> GatewaySession:
    fake.queue_request(MockResponse(200, xml))
    session = GatewaySession("10.0.0.3", "abcd1234", session=fake, **kwargs)
    asyncio.run(session.connect())
    fake.request_calls.clear()
    return session


class TestConnect:
    """Test authentication and error mapping."""

    def test_connect_reads_gateway(self, adam_xml):
        fake = FakeSession(MockResponse(200, adam_xml))
        session = GatewaySession("10.0.0.3", "abcd1234", session=fake)

        info = asyncio.run(session.connect())

        assert info.name == "Adam"
        assert info.type == GatewayType.THERMOSTAT
        assert session.connected
        assert session.gateway_id == "app-gw"
        assert session.heater_id == "app-boiler"

        method, url, kwargs = fake.request_calls[0]
        assert method == "GET"
        assert url == "http://10.0.0.3/core/domain_objects"
        # base64("smile:abcd1234")
        assert kwargs["headers"]["Authorization"] == "Basic c21pbGU6YWJjZDEyMzQ="
        assert "auth" not in kwargs
        assert kwargs["headers"]["Content-Type"] == "text/xml"

    def test_custom_port_in_url(self):
        session = GatewaySession("10.0.0.3", "pw", port=8080)
        assert session.base_url == "http://10.0.0.3:8080"

    def test_from_config(self):
        config = SessionConfig(username="stretch", port=81, timeout=4.0)
        session = GatewaySession.from_config("10.0.0.9", "pw", config)
        assert session.base_url == "http://10.0.0.9:81"
        assert session._authorization == basic_authorization("stretch", "pw")

    def test_401_raises_authentication_error(self):
        session = GatewaySession("10.0.0.3", "wrong", session=FakeSession(MockResponse(401)))
        with pytest.raises(AuthenticationError):
            asyncio.run(session.connect())
        assert not session.connected

    def test_500_raises_connection_error(self):
        session = GatewaySession("10.0.0.3", "pw", session=FakeSession(MockResponse(500)))
        with pytest.raises(ConnectionError) as exc_info:
            asyncio.run(session.connect())
        assert exc_info.value.status == 500

    def test_transport_error_raises_connection_error(self):
        fake = FakeSession(aiohttp.ClientConnectionError("refused"))
        session = GatewaySession("10.0.0.3", "pw", session=fake)
        with pytest.raises(ConnectionError) as exc_info:
            asyncio.run(session.connect())
        assert exc_info.value.status is None

    def test_timeout_raises_timeout_error(self):
        fake = FakeSession(asyncio.TimeoutError())
        session = GatewaySession("10.0.0.3", "pw", session=fake, timeout=0.5)
        with pytest.raises(TimeoutError) as exc_info:
            asyncio.run(session.connect())
        assert exc_info.value.timeout == 0.5
        assert isinstance(exc_info.value, ConnectionError)

    def test_undecodable_body_raises_parse_error(self):
        session = GatewaySession("10.0.0.3", "pw", session=FakeSession(UndecodableResponse()))
        with pytest.raises(ParseError):
            asyncio.run(session.connect())
        assert not session.connected

    def test_fetch_state_undecodable_body_raises_parse_error(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(UndecodableResponse())
        with pytest.raises(ParseError):
            asyncio.run(session.fetch_state())

    def test_non_gateway_document_raises_parse_error(self):
        fake = FakeSession(MockResponse(200, "<domain_objects/>"))
        session = GatewaySession("10.0.0.3", "pw", session=fake)
        with pytest.raises(ParseError):
            asyncio.run(session.connect())


class TestDevices:
    """Test state retrieval."""

    def test_get_devices_requires_connect(self):
        session = GatewaySession("10.0.0.3", "pw", session=FakeSession())
        with pytest.raises(NotConnectedError):
            asyncio.run(session.get_devices())

    def test_get_devices(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200, adam_xml))

        data = asyncio.run(session.get_devices())

        assert data.get_entity("app-tom").sensors["temperature"] == 21.5
        assert fake.request_calls[0][1].endswith("/core/domain_objects")


class TestCommands:
    """Control requests use PUT with XML payloads."""

    def test_set_temperature(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200))

        asyncio.run(session.set_temperature("loc-living", 21.0))

        method, url, kwargs = fake.request_calls[0]
        assert method == "PUT"
        assert url == "http://10.0.0.3/core/locations;id=loc-living/thermostat"
        assert kwargs["data"] == (
            "<thermostat_functionality><setpoint>21</setpoint></thermostat_functionality>"
        )

    def test_set_temperature_uses_low_when_no_setpoint(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200))

        asyncio.run(session.set_temperature("loc-living", setpoint_low=18.5))

        assert "<setpoint>18.5</setpoint>" in fake.request_calls[0][2]["data"]

    def test_set_temperature_without_value(self, adam_xml):
        session = _connected_session(FakeSession(), adam_xml)
        with pytest.raises(ValidationError):
            asyncio.run(session.set_temperature("loc-living"))

    def test_set_switch_state(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200))

        assert asyncio.run(session.set_switch_state("app-plug", False)) is False

        _, url, kwargs = fake.request_calls[0]
        assert url.endswith("/core/appliances;id=app-plug/relay")
        assert "<state>off</state>" in kwargs["data"]

    def test_set_preset_resends_name_and_type(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200, adam_xml), MockResponse(200))

        asyncio.run(session.set_preset("loc-living", "away"))

        method, url, kwargs = fake.request_calls[1]
        assert method == "PUT"
        assert url.endswith("/core/locations;id=loc-living")
        assert "<name>Living room</name>" in kwargs["data"]
        assert "<type>livingroom</type>" in kwargs["data"]
        assert "<preset>away</preset>" in kwargs["data"]

    def test_set_preset_unknown_location(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200, adam_xml))
        with pytest.raises(ValidationError):
            asyncio.run(session.set_preset("nowhere", "home"))

    def test_set_gateway_mode_uses_gateway_id(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200))

        asyncio.run(session.set_gateway_mode("home"))

        assert fake.request_calls[0][1].endswith("/core/appliances;id=app-gw/gateway_mode_control")

    def test_command_auth_failure(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(401))
        with pytest.raises(AuthenticationError):
            asyncio.run(session.set_dhw_mode("boost"))

    def test_reboot_and_notifications(self, adam_xml):
        fake = FakeSession()
        session = _connected_session(fake, adam_xml)
        fake.queue_request(MockResponse(200), MockResponse(200))

        asyncio.run(session.reboot())
        asyncio.run(session.delete_notification())

        assert fake.request_calls[0][0] == "POST"
        assert fake.request_calls[0][1].endswith("/core/gateways;@reboot")
        assert fake.request_calls[1][0] == "DELETE"

    def test_commands_require_connect(self):
        session = GatewaySession("10.0.0.3", "pw", session=FakeSession())
        with pytest.raises(NotConnectedError):
            asyncio.run(session.set_switch_state("x", True))


class TestCommandBuilders:
    """Test the pure payload builders."""

    def test_gateway_mode_away_has_validity_window(self):
        now = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        _, payload = commands.gateway_mode_command("gw", "away", now=now)
        assert "<valid_from>2024-01-02T03:04:05.000Z</valid_from>" in payload
        assert f"<valid_to>{commands.MODE_VALID_TO}</valid_to>" in payload

    def test_gateway_mode_home_has_no_window(self):
        _, payload = commands.gateway_mode_command("gw", "home")
        assert "valid_from" not in payload

    def test_invalid_modes(self):
        with pytest.raises(ValidationError):
            commands.gateway_mode_command("gw", "party")
        with pytest.raises(ValidationError):
            commands.dhw_mode_command("scalding")
        with pytest.raises(ValidationError):
            commands.regulation_mode_command("cooling")

    def test_regulation_bleeding_has_duration(self):
        uri, payload = commands.regulation_mode_command("bleeding_hot")
        assert uri == "/core/appliances;type=gateway/regulation_mode_control"
        assert "<duration>300</duration>" in payload

    def test_preset_escapes_name(self):
        _, payload = commands.preset_command("loc", "Kids & guests", "bedroom", "home")
        assert "<name>Kids &amp; guests</name>" in payload
        assert '<location id="loc">' in payload

    def test_temperature_offset(self):
        uri, payload = commands.temperature_offset_command("app-tom", -0.5)
        assert uri == "/core/appliances;id=app-tom/offset;type=temperature_offset"
        assert "<offset>-0.5</offset>" in payload
