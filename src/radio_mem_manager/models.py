"""
Radio Memory Manager Data Models
Channel table layout, column vocabulary and frequency helpers
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class COL:
    """Canonical CSV column names (lower-cased, as they appear in the header)"""
    TITLE = "title"
    TX_FREQ = "tx_freq"
    RX_FREQ = "rx_freq"
    TX_SUB = "tx_sub_audio(ctcss=freq/dcs=number)"
    RX_SUB = "rx_sub_audio(ctcss=freq/dcs=number)"
    TX_POWER = "tx_power(h/m/l)"
    BANDWIDTH = "bandwidth(12500/25000)"
    SCAN = "scan(0=off/1=on)"
    TALK_AROUND = "talk around(0=off/1=on)"
    PRE_DE_EMPH_BYPASS = "pre_de_emph_bypass(0=off/1=on)"
    SIGN = "sign(0=off/1=on)"
    TX_DIS = "tx_dis(0=off/1=on)"
    BCLO = "bclo(0=off/1=on)"
    MUTE = "mute(0=off/1=on)"
    RX_MODULATION = "rx_modulation(0=fm/1=am)"
    TX_MODULATION = "tx_modulation(0=fm/1=am)"


# Column order of a freshly created table
CANONICAL_HEADERS = (
    COL.TITLE,
    COL.TX_FREQ,
    COL.RX_FREQ,
    COL.TX_SUB,
    COL.RX_SUB,
    COL.TX_POWER,
    COL.BANDWIDTH,
    COL.SCAN,
    COL.TALK_AROUND,
    COL.PRE_DE_EMPH_BYPASS,
    COL.SIGN,
    COL.TX_DIS,
    COL.BCLO,
    COL.MUTE,
    COL.RX_MODULATION,
    COL.TX_MODULATION,
)

# Short edit-form keys mapped to their CSV columns
FIELD_KEYS = {
    "title": COL.TITLE,
    "tx_freq": COL.TX_FREQ,
    "rx_freq": COL.RX_FREQ,
    "tx_sub_audio": COL.TX_SUB,
    "rx_sub_audio": COL.RX_SUB,
    "tx_power": COL.TX_POWER,
    "bandwidth": COL.BANDWIDTH,
    "scan": COL.SCAN,
    "talk_around": COL.TALK_AROUND,
    "pre_de_emph_bypass": COL.PRE_DE_EMPH_BYPASS,
    "sign": COL.SIGN,
    "tx_dis": COL.TX_DIS,
    "bclo": COL.BCLO,
    "mute": COL.MUTE,
    "rx_modulation": COL.RX_MODULATION,
    "tx_modulation": COL.TX_MODULATION,
}

BINARY_FIELDS = (
    ("scan", "Scan"),
    ("talk_around", "Talk Around"),
    ("pre_de_emph_bypass", "Pre/De-Emphasis Bypass"),
    ("sign", "Sign"),
    ("tx_dis", "TX Disable"),
    ("bclo", "BCLO"),
    ("mute", "Mute"),
)

CHANNEL_SLOTS = 30   # Slots backed by CSV rows
TOTAL_CHANNELS = 32  # Including the two VFO slots
VFO_SLOTS = (31, 32)
DEFAULT_FILL = "0"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class TxPower(str, Enum):
    """Transmit power levels"""
    HIGH = "H"
    MEDIUM = "M"
    LOW = "L"


class Bandwidth(str, Enum):
    """Channel bandwidth in Hz"""
    NARROW = "12500"
    WIDE = "25000"


class Modulation(str, Enum):
    """Stored modulation flag"""
    FM = "0"
    AM = "1"


class SubtoneKind(str, Enum):
    """Subtone families"""
    OFF = "off"
    CTCSS = "ctcss"
    DCS = "dcs"


# Frequency bands accepted by the radio, in Hz
TX_BANDS = {
    "2m": {"min": 144_000_000, "max": 148_000_000},
    "70cm": {"min": 420_000_000, "max": 450_000_000},
}

RX_BANDS = {
    "broadcast/air": {"min": 88_000_000, "max": 137_000_000},
    **TX_BANDS,
}

# Receive range decoded as AM
AM_BAND = {"min": 118_000_000, "max": 137_000_000}


@dataclass
class ChannelTable:
    """Header set plus positional channel rows.

    Slot i (0-based) is display channel i + 1. A None row is an empty slot.
    """

    headers: list[str] = field(default_factory=list)
    """Lower-cased column names defining positional meaning"""

    rows: list[Optional[list[str]]] = field(default_factory=list)
    """Channel rows, None where the slot is unused"""

    @classmethod
    def empty(cls) -> "ChannelTable":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.headers


@dataclass
class Group:
    """A named channel table snapshot with its comments"""

    name: str

    csv_text: str = ""
    """Serialized channel table"""

    comments: dict[str, str] = field(default_factory=dict)
    """Slot index (as string) to free-text note"""


def get_band_for_frequency(frequency: int, bands: Optional[dict] = None) -> Optional[str]:
    """Get band name for a given frequency in Hz"""
    for band, band_range in (bands or RX_BANDS).items():
        if band_range["min"] <= frequency <= band_range["max"]:
            return band
    return None


def format_frequency(frequency_hz: int) -> str:
    """Format frequency for display (e.g., 146.520000)"""
    mhz = frequency_hz / 1_000_000
    return f"{mhz:.6f}"


def parse_int(value: str) -> Optional[int]:
    """Leading integer of a cell value ("146000000", " 23", "885x"), else None"""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def parse_frequency(frequency_str: str) -> int:
    """Parse MHz frequency string to Hz"""
    cleaned = "".join(c for c in frequency_str if c.isdigit() or c == ".")
    mhz = float(cleaned)
    return round(mhz * 1_000_000)
