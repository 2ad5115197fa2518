"""
Channel Store
Owns the in-memory channel table and every operation that mutates it
"""

import logging
from typing import Iterable, Optional

from .derivation import derive_bandwidth, derive_subtone
from .fields import get_field, row_to_fields, set_field
from .models import (
    CANONICAL_HEADERS,
    CHANNEL_SLOTS,
    COL,
    DEFAULT_FILL,
    FIELD_KEYS,
    ChannelTable,
    get_band_for_frequency,
    parse_int,
)
from .validation import ValidationResult, apply_modulation, validate_strict

_LOG = logging.getLogger(__name__)


class ChannelStore:
    """In-memory channel table; slot numbers here are 0-based"""

    MAX_SLOTS = CHANNEL_SLOTS

    def __init__(self, table: Optional[ChannelTable] = None):
        self._table = table or ChannelTable.empty()

    @property
    def table(self) -> ChannelTable:
        return self._table

    @property
    def headers(self) -> list[str]:
        return self._table.headers

    @property
    def rows(self) -> list[Optional[list[str]]]:
        return self._table.rows

    @property
    def slot_count(self) -> int:
        """Length of the backing row list (may exceed MAX_SLOTS)"""
        return len(self._table.rows)

    def load(self, table: ChannelTable) -> None:
        """Replace the current table"""
        self._table = table

    def reset(self) -> None:
        self._table = ChannelTable.empty()

    def get(self, slot: int) -> Optional[list[str]]:
        """Get the row in a slot, None if the slot is empty or out of range"""
        if 0 <= slot < len(self._table.rows):
            return self._table.rows[slot]
        return None

    def set_row(self, slot: int, row: list[str]) -> bool:
        """Store a row, growing the backing list with empty slots as needed"""
        if slot < 0:
            return False
        rows = self._table.rows
        if slot >= len(rows):
            rows.extend([None] * (slot + 1 - len(rows)))
        rows[slot] = row
        return True

    def clear(self, slot: int) -> bool:
        """Mark a slot as empty"""
        if 0 <= slot < len(self._table.rows):
            self._table.rows[slot] = None
            return True
        return False

    def widen_headers(self, required: Iterable[str] = CANONICAL_HEADERS) -> list[str]:
        """Add missing columns and pad present rows with the default value.

        Returns the names of the columns that were added.
        """
        headers = self._table.headers
        added = [name for name in required if name not in headers]
        headers.extend(added)

        width = len(headers)
        for row in self._table.rows:
            if row is not None and len(row) < width:
                row.extend([DEFAULT_FILL] * (width - len(row)))

        if added:
            _LOG.debug("widened headers with %s", added)
        return added

    def reorder(self, source: int, target: int) -> bool:
        """Move a channel by drag-and-drop rules.

        Dropping onto an empty slot moves the row there and leaves the source
        empty. Dropping onto a populated slot removes the row and inserts it
        at the target, shifting the rows in between.
        """
        if source == target or target < 0:
            return False
        row = self.get(source)
        if row is None:
            return False

        rows = self._table.rows
        if self.get(target) is None:
            self.set_row(target, row)
            rows[source] = None
        else:
            rows.pop(source)
            rows.insert(target, row)

        _LOG.debug("moved slot %d to %d", source, target)
        return True

    def populated_slots(self) -> list[int]:
        return [i for i, row in enumerate(self._table.rows[: self.MAX_SLOTS]) if row is not None]

    def fields(self, slot: int) -> Optional[dict[str, str]]:
        """Edit-form values for a slot, None when the slot is empty"""
        row = self.get(slot)
        if row is None:
            return None
        return row_to_fields(self._table.headers, row)

    def commit_edit(self, slot: int, fields: dict[str, str]) -> ValidationResult:
        """Validate and write an edited channel.

        On success the header set is widened to the canonical columns and the
        modulation flags are recomputed from the frequencies. A failed
        validation leaves the table untouched.
        """
        if not 0 <= slot < self.MAX_SLOTS:
            result = ValidationResult()
            result.add(f"Channel must be 1-{self.MAX_SLOTS}.")
            return result

        candidate = {key: value for key, value in fields.items() if key in FIELD_KEYS}
        result = validate_strict(candidate)
        if not result.valid:
            return result

        candidate = apply_modulation(candidate)
        self.widen_headers()

        row = self.get(slot)
        if row is None:
            row = [DEFAULT_FILL] * len(self._table.headers)
            set_field(self._table.headers, row, COL.TITLE, "")
            self.set_row(slot, row)

        for key, value in candidate.items():
            set_field(self._table.headers, row, FIELD_KEYS[key], value)
        return result

    def summary(self) -> dict:
        """Get a summary of channel contents"""
        headers = self._table.headers
        used = [self._table.rows[i] for i in self.populated_slots()]
        bandwidths: dict[str, int] = {}
        subtones: dict[str, int] = {}
        bands: dict[str, int] = {}

        for row in used:
            bw = derive_bandwidth(headers, row)
            if bw:
                bandwidths[bw] = bandwidths.get(bw, 0) + 1

            family = derive_subtone(headers, row)
            if family:
                subtones[family] = subtones.get(family, 0) + 1

            band = get_band_for_frequency(parse_int(get_field(headers, row, COL.RX_FREQ)) or 0)
            if band:
                bands[band] = bands.get(band, 0) + 1

        return {
            "total_channels": self.MAX_SLOTS,
            "used_channels": len(used),
            "free_channels": self.MAX_SLOTS - len(used),
            "channels_by_bandwidth": bandwidths,
            "channels_by_subtone": subtones,
            "channels_by_band": bands,
        }
