"""Shared fixtures: gateway XML documents and a fake aiohttp session."""

import asyncio
from typing import Any

import pytest

from smilehub.core.config import Config, set_config

ADAM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<domain_objects>
  <gateway id="gw-1">
    <name>Adam</name>
    <vendor_model>smile_open_therm_159</vendor_model>
    <firmware_version>3.7.8</firmware_version>
    <hardware_version>AME Smile 2.0 board</hardware_version>
    <hostname>smile000000</hostname>
    <mac_address>012345670001</mac_address>
  </gateway>
  <appliance id="app-gw">
    <name>Adam</name>
    <type>gateway</type>
    <vendor_name>Plugwise</vendor_name>
    <logs>
      <point_log id="pl-1">
        <type>outdoor_temperature</type>
        <period start_date="2024-01-01T10:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">7.8</measurement>
        </period>
      </point_log>
    </logs>
  </appliance>
  <appliance id="app-boiler">
    <name>OpenTherm</name>
    <type>heater_central</type>
    <logs>
      <point_log id="pl-2">
        <type>flame_state</type>
        <period start_date="2024-01-01T10:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">on</measurement>
        </period>
      </point_log>
      <point_log id="pl-3">
        <type>intended_boiler_temperature</type>
        <period start_date="2024-01-01T10:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">38.1</measurement>
        </period>
      </point_log>
    </logs>
  </appliance>
  <appliance id="app-tom">
    <name>Tom Living</name>
    <type>thermostatic_radiator_valve</type>
    <vendor_name>Plugwise</vendor_name>
    <vendor_model>106-03</vendor_model>
    <firmware_version>2020-11-04T00:00:00+01:00</firmware_version>
    <location id="loc-living"/>
    <logs>
      <point_log id="pl-4">
        <type>temperature</type>
        <unit>C</unit>
        <period start_date="2024-01-01T10:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">21.5</measurement>
        </period>
      </point_log>
      <cumulative_log id="cl-1">
        <type>energy_total</type>
        <unit>Wh</unit>
        <period start_date="2024-01-01T00:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">1542.3</measurement>
        </period>
      </cumulative_log>
    </logs>
    <actuator_functionalities>
      <temperature_offset_functionality id="off-1">
        <offset>-0.5</offset>
        <lower_bound>-2.0</lower_bound>
        <upper_bound>2.0</upper_bound>
        <resolution>0.1</resolution>
      </temperature_offset_functionality>
    </actuator_functionalities>
  </appliance>
  <appliance id="app-plug">
    <name>Plug Kitchen</name>
    <type>zz_misc</type>
    <logs>
      <point_log id="pl-5">
        <type>electricity_consumed</type>
        <period start_date="2024-01-01T10:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00" tariff="nl_peak">12.5</measurement>
          <measurement log_date="2024-01-01T10:00:00" tariff="nl_offpeak">0.0</measurement>
        </period>
      </point_log>
      <cumulative_log id="cl-2">
        <type>electricity_consumed</type>
        <period start_date="2024-01-01T00:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">4521.0</measurement>
        </period>
      </cumulative_log>
      <interval_log id="il-1">
        <type>electricity_consumed</type>
        <period start_date="2024-01-01T09:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">88.0</measurement>
        </period>
      </interval_log>
    </logs>
    <actuator_functionalities>
      <relay_functionality id="rel-1">
        <state>on</state>
        <lock>false</lock>
      </relay_functionality>
      <relay_functionality id="rel-2">
        <state>off</state>
      </relay_functionality>
    </actuator_functionalities>
  </appliance>
  <location id="loc-living">
    <name>Living room</name>
    <type>livingroom</type>
    <preset>home</preset>
    <logs>
      <point_log id="pl-6">
        <type>temperature</type>
        <period start_date="2024-01-01T10:00:00" end_date="2024-01-01T10:00:00">
          <measurement log_date="2024-01-01T10:00:00">21.5</measurement>
        </period>
      </point_log>
    </logs>
    <actuator_functionalities>
      <thermostat_functionality id="th-1">
        <setpoint>20.5</setpoint>
        <lower_bound>4.0</lower_bound>
        <upper_bound>30.0</upper_bound>
        <resolution>0.01</resolution>
      </thermostat_functionality>
    </actuator_functionalities>
  </location>
</domain_objects>
"""

# One appliance, one location: the repeated-tag lists collapse to single nodes
SINGLE_XML = """<domain_objects>
  <gateway id="gw-2">
    <name>Anna</name>
    <vendor_model>smile_thermo_143</vendor_model>
    <firmware_version>4.0.15</firmware_version>
  </gateway>
  <appliance id="only-app">
    <name>Anna</name>
    <type>thermostat</type>
    <logs>
      <point_log id="p1">
        <type>temperature</type>
        <period start_date="x" end_date="x">
          <measurement log_date="x">19.0</measurement>
        </period>
      </point_log>
    </logs>
  </appliance>
  <location id="only-loc">
    <name>Home</name>
    <type>building</type>
  </location>
</domain_objects>
"""


def gateway_xml(name: str = "Adam", model: str = "smile_open_therm_159", version: str = "3.7.8") -> str:
    """Minimal state document carrying only gateway metadata."""
    return (
        "<domain_objects><gateway id=\"gw\">"
        f"<name>{name}</name><vendor_model>{model}</vendor_model>"
        f"<firmware_version>{version}</firmware_version>"
        "</gateway></domain_objects>"
    )


class MockResponse:
    def __init__(self, status: int = 200, text_data: str = "") -> None:
        self.status = status
        self._text = text_data

    async def __aenter__(self) -> "MockResponse":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def text(self) -> str:
        return self._text


class UndecodableResponse(MockResponse):
    """A 2xx answer whose body is not valid in its declared charset."""

    async def text(self) -> str:
        return b"\xff\xfe<domain".decode("utf-8")


class HangingResponse:
    """Never answers; only a timeout gets the caller out."""

    async def __aenter__(self) -> "HangingResponse":
        await asyncio.sleep(3600)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class FakeSession:
    """Stands in for ``aiohttp.ClientSession``; queued responses are returned in order."""

    def __init__(self, *responses: Any) -> None:
        self._queue: list[Any] = list(responses)
        self.request_calls: list[tuple[str, str, dict[str, Any]]] = []

    def queue_request(self, *responses: Any) -> None:
        self._queue.extend(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> Any:
        self.request_calls.append((method, url, dict(kwargs)))
        if not self._queue:
            raise AssertionError(f"Unexpected {method} {url} with no queued response")
        result = self._queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    """Give every test a fresh config rooted in its temp directory."""
    config = Config(data_dir=tmp_path / "data")
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def adam_xml() -> str:
    return ADAM_XML


@pytest.fixture
def single_xml() -> str:
    return SINGLE_XML
