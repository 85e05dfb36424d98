"""Domain-model extraction from a full ``/core/domain_objects`` document."""

import logging
from typing import Any

from ..core.exceptions import ParseError
from ..gateway.models import GatewayData, GatewayEntity
from ..gateway.xml import ensure_list, get_path, parse_xml
from .actuators import RelayPolicy, first_relay
from .appliances import parse_appliance, parse_location
from .gateway import extract_gateway_ids, parse_gateway_info

logger = logging.getLogger(__name__)


def extract_document(
    data: dict[str, Any],
    relay_policy: RelayPolicy = first_relay,
) -> GatewayData:
    """Extract gateway metadata and entities from an already parsed document.

    Appliances come first, then locations, each in document order.
    Malformed entries are skipped; the rest of the document still extracts.

    Raises:
        ParseError: If the document has no gateway block.
    """
    gateway_info = parse_gateway_info(data)
    if gateway_info is None:
        raise ParseError("No gateway information found")

    gateway_id, heater_id = extract_gateway_ids(data)
    entities: list[GatewayEntity] = []
    skipped = 0

    for appliance in ensure_list(get_path(data, "domain_objects.appliance")):
        entity = parse_appliance(appliance, relay_policy)
        if entity is None:
            skipped += 1
        else:
            entities.append(entity)

    for location in ensure_list(get_path(data, "domain_objects.location")):
        entity = parse_location(location, relay_policy)
        if entity is None:
            skipped += 1
        else:
            entities.append(entity)

    if skipped:
        logger.warning("Skipped %d malformed entr%s", skipped, "y" if skipped == 1 else "ies")
    logger.debug("Extracted %d entities from %s", len(entities), gateway_info.name)

    return GatewayData(
        gateway_info=gateway_info,
        gateway_id=gateway_id,
        heater_id=heater_id,
        entities=entities,
    )


def extract(payload: str | bytes, relay_policy: RelayPolicy = first_relay) -> GatewayData:
    """Parse a raw state payload into the normalized entity model.

    Args:
        payload: XML text returned by the gateway's state endpoint.
        relay_policy: Chooses which relay functionalities become switches.

    Returns:
        Gateway metadata and the list of entities.

    Raises:
        ParseError: If the payload is not XML or has no gateway block.
    """
    return extract_document(parse_xml(payload), relay_policy)
