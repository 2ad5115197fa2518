"""
Display attributes derived from stored channel values
None of these functions mutate the row they read.
"""

from typing import Optional

from .fields import get_field
from .models import (
    CHANNEL_SLOTS,
    COL,
    TOTAL_CHANNELS,
    VFO_SLOTS,
    Bandwidth,
    ChannelTable,
    parse_int,
)
from .subtones import subtone_family

SCAN_GLYPH = "\u2968"


def _int_field(headers: list[str], row: Optional[list[str]], name: str) -> int:
    value = parse_int(get_field(headers, row, name))
    return value or 0


def derive_bandwidth(headers: list[str], row: Optional[list[str]]) -> str:
    value = get_field(headers, row, COL.BANDWIDTH)
    if value == Bandwidth.NARROW.value:
        return "N"
    if value == Bandwidth.WIDE.value:
        return "W"
    return ""


def derive_scan(headers: list[str], row: Optional[list[str]]) -> str:
    return SCAN_GLYPH if get_field(headers, row, COL.SCAN) == "1" else ""


def derive_offset(headers: list[str], row: Optional[list[str]]) -> str:
    """Duplex sign; empty when there is no transmit frequency"""
    tx = _int_field(headers, row, COL.TX_FREQ)
    rx = _int_field(headers, row, COL.RX_FREQ)
    if tx == 0:
        return ""
    return "-" if tx < rx else "+"


def derive_subtone(headers: list[str], row: Optional[list[str]]) -> str:
    """Subtone family from the rx subtone, falling back to tx when rx is off"""
    value = _int_field(headers, row, COL.RX_SUB) or _int_field(headers, row, COL.TX_SUB)
    return subtone_family(value)


def derive_subtone_rx_only(headers: list[str], row: Optional[list[str]]) -> str:
    """Single-column variant that ignores the tx subtone (superseded)"""
    return subtone_family(_int_field(headers, row, COL.RX_SUB))


def project_cell(table: ChannelTable, number: int) -> dict:
    """Display attributes for grid cell `number` (1-32)"""
    if number in VFO_SLOTS:
        return {
            "number": number,
            "title": f"VFO{VFO_SLOTS.index(number) + 1}",
            "bandwidth": "",
            "scan": "",
            "offset": "",
            "subtone": "",
            "is_vfo": True,
            "is_empty": False,
        }

    row = None
    if not table.is_empty and number - 1 < len(table.rows):
        row = table.rows[number - 1]

    headers = table.headers
    return {
        "number": number,
        "title": get_field(headers, row, COL.TITLE),
        "bandwidth": derive_bandwidth(headers, row) if row is not None else "",
        "scan": derive_scan(headers, row) if row is not None else "",
        "offset": derive_offset(headers, row) if row is not None else "",
        "subtone": derive_subtone(headers, row) if row is not None else "",
        "is_vfo": False,
        "is_empty": row is None,
    }


def project_grid(table: ChannelTable) -> list[dict]:
    """All 32 grid cells; rows past slot 30 are not displayed"""
    return [project_cell(table, number) for number in range(1, TOTAL_CHANNELS + 1)]


def count_populated(table: ChannelTable) -> int:
    if table.is_empty:
        return 0
    return sum(1 for row in table.rows[:CHANNEL_SLOTS] if row is not None)
