"""Wake-on-LAN magic packets.

A magic packet is 6 bytes of 0xFF followed by the target MAC address
repeated 16 times, broadcast over UDP.
"""

from __future__ import annotations

import logging
import re
import socket

logger = logging.getLogger(__name__)

WOL_PORT = 9
_MAC_SEPARATORS = re.compile(r"[:\-.]")


def parse_mac(mac_address: str) -> bytes:
    """Convert 'AA:BB:CC:DD:EE:FF' (or '-', '.', no separator) to 6 bytes."""
    digits = _MAC_SEPARATORS.sub("", mac_address.strip())
    if len(digits) != 12:
        raise ValueError(f"Invalid MAC address: {mac_address!r}")
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValueError(f"Invalid MAC address: {mac_address!r}") from e


def magic_packet(mac_address: str) -> bytes:
    return b"\xff" * 6 + parse_mac(mac_address) * 16


def send_magic_packet(
    mac_address: str,
    broadcast_address: str = "255.255.255.255",
    port: int = WOL_PORT,
) -> None:
    """Broadcast a Wake-on-LAN packet for the given MAC address."""
    packet = magic_packet(mac_address)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.sendto(packet, (broadcast_address, port))
    logger.info("Sent Wake-on-LAN packet to %s via %s:%d", mac_address, broadcast_address, port)
