"""Utility functions for smilehub."""

from ipaddress import IPv4Address, IPv4Network, ip_address, ip_network

import psutil

from .exceptions import ValidationError

FALLBACK_NETWORK = "192.168.1.0/24"

# Refuse to sweep anything wider than a /20
MAX_SWEEP_HOSTS = 4094


def validate_ip(ip_str: str) -> IPv4Address:
    """Validate and parse an IPv4 address string."""
    try:
        ip = ip_address(ip_str.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid IP address: {ip_str}", str(e)) from e
    if ip.version == 6:
        raise ValidationError(f"IPv6 address not supported: {ip_str}")
    return ip


def validate_network(network_str: str) -> IPv4Network:
    """Validate and parse a network CIDR string."""
    try:
        net = ip_network(network_str.strip(), strict=False)
    except ValueError as e:
        raise ValidationError(f"Invalid network: {network_str}", str(e)) from e
    if net.version == 6:
        raise ValidationError(f"IPv6 networks are not supported: {network_str}")
    return net


def _expand_range(part: str) -> list[str]:
    start_str, end_str = part.split("-", 1)
    start = validate_ip(start_str)
    end_str = end_str.strip()
    # Allow the short form 10.0.0.1-5
    if "." not in end_str:
        prefix = str(start).rsplit(".", 1)[0]
        end_str = f"{prefix}.{end_str}"
    end = validate_ip(end_str)
    if int(start) > int(end):
        raise ValidationError(f"Invalid range (start > end): {part}")
    return [str(IPv4Address(n)) for n in range(int(start), int(end) + 1)]


def expand_address_space(address_space: str | list[str]) -> list[str]:
    """Expand an address space description into an ordered list of IPs.

    Accepts a CIDR network (``192.168.1.0/24``), an inclusive range
    (``10.0.0.1-10.0.0.5`` or ``10.0.0.1-5``), a single address, or a
    comma-separated / list combination of those. Duplicates are dropped,
    first occurrence wins.
    """
    parts = address_space.split(",") if isinstance(address_space, str) else address_space

    addresses: list[str] = []
    seen: set[str] = set()
    for part in parts:
        part = part.strip()
        if not part:
            continue
        if "/" in part:
            net = validate_network(part)
            expanded = [str(ip) for ip in net.hosts()] if net.num_addresses > 1 else [
                str(net.network_address)
            ]
        elif "-" in part:
            expanded = _expand_range(part)
        else:
            expanded = [str(validate_ip(part))]

        for ip in expanded:
            if ip not in seen:
                seen.add(ip)
                addresses.append(ip)

    if len(addresses) > MAX_SWEEP_HOSTS:
        raise ValidationError(
            f"Address space too large: {len(addresses)} hosts",
            f"Limit is {MAX_SWEEP_HOSTS}; scan a narrower network",
        )
    return addresses


def get_interfaces() -> dict[str, dict[str, str | int | bool | None]]:
    """Get available network interfaces with their IPv4 addresses."""
    interfaces: dict[str, dict[str, str | int | bool | None]] = {}
    stats = psutil.net_if_stats()

    for name, addrs in psutil.net_if_addrs().items():
        interface_info: dict[str, str | int | bool | None] = {
            "ipv4": None,
            "netmask": None,
            "mac": None,
        }

        for addr in addrs:
            if addr.family.name == "AF_INET":
                interface_info["ipv4"] = addr.address
                interface_info["netmask"] = addr.netmask
            elif addr.family.name == "AF_PACKET" or addr.family.name == "AF_LINK":
                interface_info["mac"] = addr.address

        stat = stats.get(name)
        interface_info["is_up"] = bool(stat and stat.isup)
        interfaces[name] = interface_info

    return interfaces


def detect_local_network() -> str:
    """Guess the local /24 to sweep from the first active IPv4 interface."""
    for name, info in get_interfaces().items():
        ipv4 = info.get("ipv4")
        if not info.get("is_up") or not ipv4 or name.startswith("lo"):
            continue
        if str(ipv4).startswith(("127.", "169.254.")):
            continue
        return str(ip_network(f"{ipv4}/24", strict=False))

    return FALLBACK_NETWORK


def format_mac(mac: str) -> str:
    """Format MAC address consistently."""
    mac = mac.replace("-", ":").lower()
    parts = mac.split(":")
    if len(parts) == 6:
        return ":".join(p.zfill(2) for p in parts)
    if len(mac) == 12 and ":" not in mac:
        return ":".join(mac[i : i + 2] for i in range(0, 12, 2))
    return mac
