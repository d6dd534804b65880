"""Content readers: plain text, PDF documents and network captures."""

import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from filesift import constants
from filesift.analysis.capture import CaptureFormatError, decode, iter_frames
from filesift.models import ContentType

logger = logging.getLogger(__name__)


class FileReadError(Exception):
    """Raised when a file's content cannot be read or split."""

    pass


def read_text(path: Path) -> str:
    """Read a text file as UTF-8, undecodable bytes replaced.

    Line endings are normalized to "\\n" and a single trailing newline is
    dropped, so the result is exactly the file's lines joined with "\\n".

    Raises:
        FileReadError: If the file cannot be opened or read.
    """
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            text = f.read()
    except OSError as e:
        raise FileReadError(f"Failed to read {path}: {e}") from e
    if text.endswith("\n"):
        text = text[:-1]
    return text


def read_pdf(path: Path) -> str:
    """Extract the text of a PDF page by page.

    Raises:
        FileReadError: If the file is not a readable PDF.
    """
    try:
        reader = PdfReader(path)
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, OSError, ValueError) as e:
        raise FileReadError(f"Failed to extract text from PDF {path}: {e}") from e
    return "\n\n".join(page.rstrip("\n") for page in pages)


def _format_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def summarize_capture(
    path: Path,
    max_packets: int = constants.CAPTURE_MAX_PACKETS,
    top_n: int = constants.CAPTURE_TOP_N,
) -> str:
    """Render a pcap or pcapng capture as a text summary.

    The summary holds the packet count, first and last timestamps, a protocol
    breakdown and the busiest source/destination addresses and ports. Frames
    that fail to decode are counted but contribute no protocol information.

    Args:
        path: Capture file.
        max_packets: Stop after this many packets.
        top_n: Entries per "top" table.

    Returns:
        Multi-line summary text.

    Raises:
        FileReadError: If the file is not a readable capture.
    """
    total = 0
    truncated = False
    first_ts: str | None = None
    last_ts: str | None = None
    protocols: Counter[str] = Counter()
    src_ips: Counter[str] = Counter()
    dst_ips: Counter[str] = Counter()
    src_ports: Counter[int] = Counter()
    dst_ports: Counter[int] = Counter()

    try:
        with open(path, "rb") as f:
            for frame in iter_frames(f):
                total += 1
                if frame.timestamp is not None:
                    if first_ts is None:
                        first_ts = _format_ts(frame.timestamp)
                    last_ts = _format_ts(frame.timestamp)

                packet = decode(frame)
                if packet is not None:
                    protocols[f"IPv{packet.version}"] += 1
                    src_ips[packet.src] += 1
                    dst_ips[packet.dst] += 1

                    if packet.protocol:
                        protocols[packet.protocol] += 1
                        src_ports[packet.sport] += 1
                        dst_ports[packet.dport] += 1
                        ports = {packet.sport, packet.dport}
                        if packet.payload_size:
                            if 53 in ports:
                                protocols["DNS"] += 1
                            elif 443 in ports:
                                protocols["TLS"] += 1
                            elif packet.protocol == "TCP" and ports & {80, 8080}:
                                protocols["HTTP"] += 1

                if total >= max_packets:
                    truncated = True
                    break
    except (OSError, CaptureFormatError) as e:
        raise FileReadError(f"Failed to read capture {path}: {e}") from e
    except (ValueError, OverflowError) as e:
        raise FileReadError(f"Bad packet timestamp in capture {path}: {e}") from e

    lines = ["=== PCAP File Analysis ===", ""]
    if truncated:
        logger.info(f"Capture {path} truncated at {max_packets} packets")
        lines += [f"Large capture detected. Processing first {max_packets:,} packets only.", ""]

    lines += [
        "Summary:",
        f"- Total Packets: {total}",
        f"- First Packet: {first_ts or 'n/a'}",
        f"- Last Packet: {last_ts or 'n/a'}",
        "",
        "Protocols:",
    ]
    for proto, count in protocols.most_common():
        lines.append(f"- {proto}: {count} packets ({count / total * 100:.2f}%)")

    tables = (
        ("Top Source IPs:", src_ips, "{}"),
        ("Top Destination IPs:", dst_ips, "{}"),
        ("Top Source Ports:", src_ports, "Port {}"),
        ("Top Destination Ports:", dst_ports, "Port {}"),
    )
    for title, counter, label in tables:
        lines += ["", title]
        for key, count in counter.most_common(top_n):
            lines.append(f"- {label.format(key)}: {count} packets")

    return "\n".join(lines)


def read_content(path: Path, content_type: ContentType) -> str:
    """Read a file's content as text according to its content type.

    Raises:
        FileReadError: If reading fails or the type has no text form.
    """
    if content_type is ContentType.DOCUMENT:
        return read_pdf(path)
    if content_type is ContentType.CAPTURE_LOG:
        return summarize_capture(path)
    if content_type is ContentType.TEXT:
        return read_text(path)
    raise FileReadError(f"Content type {content_type.value} of {path} cannot be read as text")
