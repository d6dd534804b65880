"""Pcap and pcapng decoding for capture summaries.

Only what a summary needs is decoded: frame timestamps, IPv4/IPv6 addresses
and TCP/UDP ports. Frames of other link or network types are returned as
undecodable rather than rejected.
"""

import ipaddress
import struct
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO

PCAP_MAGIC_US = 0xA1B2C3D4
PCAP_MAGIC_NS = 0xA1B23C4D
PCAPNG_SHB = 0x0A0D0D0A
PCAPNG_BYTE_ORDER = 0x1A2B3C4D

# pcapng block types
BLOCK_IDB = 0x00000001
BLOCK_SPB = 0x00000003
BLOCK_EPB = 0x00000006

OPT_END = 0
OPT_IF_TSRESOL = 9

LINKTYPE_ETHERNET = 1
LINKTYPE_RAW = 101
LINKTYPE_LINUX_SLL = 113
LINKTYPE_IPV4 = 228
LINKTYPE_IPV6 = 229

ETH_TYPE_IP = 0x0800
ETH_TYPE_IP6 = 0x86DD
ETH_TYPE_VLAN = (0x8100, 0x88A8)

IP_PROTO_TCP = 6
IP_PROTO_UDP = 17


class CaptureFormatError(ValueError):
    """Raised when a file is not a well-formed pcap or pcapng capture."""

    pass


@dataclass
class Frame:
    """One captured link-layer frame.

    Attributes:
        timestamp: Capture time in seconds since the epoch, or None when the
            block carries no timestamp (pcapng simple packet blocks).
        linktype: Link-layer header type of the interface.
        data: Captured bytes.
    """

    timestamp: float | None
    linktype: int
    data: bytes


@dataclass
class Packet:
    """Network and transport details decoded from a frame."""

    version: int
    src: str
    dst: str
    protocol: str | None = None
    sport: int = 0
    dport: int = 0
    payload_size: int = 0


def _read(f: BinaryIO, size: int) -> bytes:
    data = f.read(size)
    if len(data) < size:
        raise CaptureFormatError(f"Truncated capture: expected {size} bytes, got {len(data)}")
    return data


def iter_frames(f: BinaryIO) -> Iterator[Frame]:
    """Yield frames from a pcap or pcapng stream.

    Raises:
        CaptureFormatError: If the stream is not a capture or is truncated.
    """
    head = f.read(4)
    if len(head) < 4:
        raise CaptureFormatError("File too short for a capture header")

    # the section header block type reads the same in both byte orders
    if struct.unpack("<I", head)[0] == PCAPNG_SHB:
        yield from _pcapng_frames(f, head)
        return

    for endian in ("<", ">"):
        magic = struct.unpack(endian + "I", head)[0]
        if magic in (PCAP_MAGIC_US, PCAP_MAGIC_NS):
            yield from _pcap_frames(f, endian, nano=magic == PCAP_MAGIC_NS)
            return

    raise CaptureFormatError(f"Unknown capture magic {head.hex()}")


def _pcap_frames(f: BinaryIO, endian: str, nano: bool) -> Iterator[Frame]:
    _, _, _, _, _, network = struct.unpack(endian + "HHiIII", _read(f, 20))
    linktype = network & 0xFFFF
    divisor = 1e9 if nano else 1e6

    while True:
        header = f.read(16)
        if not header:
            return
        if len(header) < 16:
            raise CaptureFormatError("Truncated pcap record header")
        sec, frac, incl_len, _ = struct.unpack(endian + "IIII", header)
        yield Frame(sec + frac / divisor, linktype, _read(f, incl_len))


def _ticks_per_second(options: bytes, endian: str) -> int:
    """Timestamp resolution from an interface's if_tsresol option."""
    offset = 0
    while offset + 4 <= len(options):
        code, length = struct.unpack(endian + "HH", options[offset : offset + 4])
        if code == OPT_END:
            break
        value = options[offset + 4 : offset + 4 + length]
        if code == OPT_IF_TSRESOL and value:
            exponent = value[0] & 0x7F
            return 2**exponent if value[0] & 0x80 else 10**exponent
        offset += 4 + length + (-length % 4)
    return 1_000_000


def _pcapng_frames(f: BinaryIO, head: bytes) -> Iterator[Frame]:
    endian = "<"
    interfaces: list[tuple[int, int]] = []
    pending = head

    while True:
        raw = pending + f.read(8 - len(pending))
        pending = b""
        if not raw:
            return
        if len(raw) < 8:
            raise CaptureFormatError("Truncated pcapng block header")

        block_type = struct.unpack(endian + "I", raw[:4])[0]
        if block_type == PCAPNG_SHB:
            order = _read(f, 4)
            if struct.unpack("<I", order)[0] == PCAPNG_BYTE_ORDER:
                endian = "<"
            elif struct.unpack(">I", order)[0] == PCAPNG_BYTE_ORDER:
                endian = ">"
            else:
                raise CaptureFormatError("Bad pcapng byte-order magic")
            interfaces = []
            total = struct.unpack(endian + "I", raw[4:])[0]
            if total < 16 or total % 4:
                raise CaptureFormatError(f"Bad pcapng block length {total}")
            rest = order + _read(f, total - 12)
        else:
            total = struct.unpack(endian + "I", raw[4:])[0]
            if total < 12 or total % 4:
                raise CaptureFormatError(f"Bad pcapng block length {total}")
            rest = _read(f, total - 8)

        body = rest[:-4]

        if block_type == BLOCK_IDB:
            if len(body) < 8:
                raise CaptureFormatError("Truncated interface description block")
            linktype, _, _ = struct.unpack(endian + "HHI", body[:8])
            interfaces.append((linktype, _ticks_per_second(body[8:], endian)))

        elif block_type == BLOCK_EPB:
            if len(body) < 20:
                raise CaptureFormatError("Truncated enhanced packet block")
            iface, ts_high, ts_low, cap_len, _ = struct.unpack(endian + "IIIII", body[:20])
            if iface >= len(interfaces):
                raise CaptureFormatError(f"Packet refers to unknown interface {iface}")
            linktype, ticks_per_second = interfaces[iface]
            timestamp = ((ts_high << 32) | ts_low) / ticks_per_second
            yield Frame(timestamp, linktype, body[20 : 20 + cap_len])

        elif block_type == BLOCK_SPB:
            if not interfaces or len(body) < 4:
                raise CaptureFormatError("Simple packet block without interface")
            (orig_len,) = struct.unpack(endian + "I", body[:4])
            yield Frame(None, interfaces[0][0], body[4 : 4 + orig_len])


def decode(frame: Frame) -> Packet | None:
    """Decode the IP and transport headers of a frame.

    Returns:
        The decoded Packet, or None if the frame holds no IPv4/IPv6 packet
        or is too short to decode.
    """
    data = frame.data

    if frame.linktype == LINKTYPE_ETHERNET:
        if len(data) < 14:
            return None
        (eth_type,) = struct.unpack("!H", data[12:14])
        offset = 14
        while eth_type in ETH_TYPE_VLAN and len(data) >= offset + 4:
            (eth_type,) = struct.unpack("!H", data[offset + 2 : offset + 4])
            offset += 4
        if eth_type not in (ETH_TYPE_IP, ETH_TYPE_IP6):
            return None
        return _decode_ip(data[offset:])

    if frame.linktype == LINKTYPE_LINUX_SLL:
        if len(data) < 16:
            return None
        (protocol,) = struct.unpack("!H", data[14:16])
        if protocol not in (ETH_TYPE_IP, ETH_TYPE_IP6):
            return None
        return _decode_ip(data[16:])

    if frame.linktype in (LINKTYPE_RAW, LINKTYPE_IPV4, LINKTYPE_IPV6):
        return _decode_ip(data)

    return None


def _decode_ip(data: bytes) -> Packet | None:
    if not data:
        return None

    version = data[0] >> 4
    if version == 4:
        header_len = (data[0] & 0x0F) * 4
        if header_len < 20 or len(data) < header_len:
            return None
        (total_len,) = struct.unpack("!H", data[2:4])
        end = total_len if header_len <= total_len <= len(data) else len(data)
        protocol = data[9]
        src = ipaddress.IPv4Address(data[12:16])
        dst = ipaddress.IPv4Address(data[16:20])
        payload = data[header_len:end]
    elif version == 6:
        if len(data) < 40:
            return None
        (payload_len,) = struct.unpack("!H", data[4:6])
        protocol = data[6]
        src = ipaddress.IPv6Address(data[8:24])
        dst = ipaddress.IPv6Address(data[24:40])
        payload = data[40 : 40 + payload_len]
    else:
        return None

    packet = Packet(version=version, src=str(src), dst=str(dst))

    if protocol == IP_PROTO_TCP and len(payload) >= 20:
        packet.protocol = "TCP"
        packet.sport, packet.dport = struct.unpack("!HH", payload[:4])
        packet.payload_size = max(0, len(payload) - (payload[12] >> 4) * 4)
    elif protocol == IP_PROTO_UDP and len(payload) >= 8:
        packet.protocol = "UDP"
        packet.sport, packet.dport = struct.unpack("!HH", payload[:4])
        packet.payload_size = len(payload) - 8

    return packet
