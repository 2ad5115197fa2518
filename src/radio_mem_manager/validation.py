"""
Channel edit validation
Strict field-level rules applied before an edit is committed
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from .models import (
    AM_BAND,
    BINARY_FIELDS,
    RX_BANDS,
    TX_BANDS,
    Bandwidth,
    Modulation,
    TxPower,
    get_band_for_frequency,
    parse_int,
)
from .subtones import is_valid_stored

TITLE_MAX_LENGTH = 8
_PRINTABLE_ASCII = re.compile(r"[\x20-\x7e]*")


@dataclass
class ValidationResult:
    """Outcome of validating a candidate channel"""

    valid: bool = True
    errors: list[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.errors.append(message)
        self.valid = False


def _frequency_ok(value: str, bands: dict) -> bool:
    hz = parse_int(value)
    if hz is None:
        return False
    return hz == 0 or get_band_for_frequency(hz, bands) is not None


def validate_strict(fields: dict[str, str]) -> ValidationResult:
    """Validate the keys present in `fields`, collecting every failure"""
    result = ValidationResult()

    title = fields.get("title")
    if title is not None:
        if not _PRINTABLE_ASCII.fullmatch(title):
            result.add("Title must contain only ASCII characters.")
        if len(title) > TITLE_MAX_LENGTH:
            result.add(f"Title must be {TITLE_MAX_LENGTH} characters or fewer.")

    if "tx_freq" in fields and not _frequency_ok(fields["tx_freq"], TX_BANDS):
        result.add("TX Freq must be 0 or in 144.000-148.000 or 420.000-450.000 MHz.")

    if "rx_freq" in fields and not _frequency_ok(fields["rx_freq"], RX_BANDS):
        result.add(
            "RX Freq must be 0 or in 88.000-137.000, 144.000-148.000, "
            "or 420.000-450.000 MHz."
        )

    for key, label in (("tx_sub_audio", "TX Subtone"), ("rx_sub_audio", "RX Subtone")):
        if key in fields and not is_valid_stored(fields[key]):
            result.add(f"{label} must be 0 (Off), a valid CTCSS tone, or a valid DCS code.")

    if "tx_power" in fields and fields["tx_power"] not in {p.value for p in TxPower}:
        result.add("TX Power must be H, M, or L.")

    if "bandwidth" in fields and fields["bandwidth"] not in {b.value for b in Bandwidth}:
        result.add("Bandwidth must be 12500 or 25000.")

    for key, label in BINARY_FIELDS:
        if key in fields and fields[key] not in ("0", "1"):
            result.add(f"{label} must be 0 or 1.")

    return result


def compute_modulation(frequency: Optional[str]) -> str:
    """AM inside the airband receive range, FM everywhere else"""
    hz = parse_int(frequency or "")
    if hz is not None and AM_BAND["min"] <= hz <= AM_BAND["max"]:
        return Modulation.AM.value
    return Modulation.FM.value


def apply_modulation(fields: dict[str, str]) -> dict[str, str]:
    """Copy of `fields` with rx/tx modulation derived from the frequencies"""
    result = dict(fields)
    if "rx_freq" in fields:
        result["rx_modulation"] = compute_modulation(fields["rx_freq"])
    if "tx_freq" in fields:
        result["tx_modulation"] = compute_modulation(fields["tx_freq"])
    return result
