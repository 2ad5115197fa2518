import pytest

from radio_mem_manager.groups import GroupSession
from radio_mem_manager.models import CANONICAL_HEADERS, ChannelTable
from radio_mem_manager.storage import MemoryStorage, StorageError

SEVEN_COLUMN_CSV = (
    "Title,TX_Freq,RX_Freq,tx_sub_audio(ctcss=freq/dcs=number),"
    "rx_sub_audio(ctcss=freq/dcs=number),tx_power(h/m/l),bandwidth(12500/25000)\n"
    "CALL,146520000,146520000,0,0,H,25000\n"
    "\n"
    "RPT1,146000000,146600000,8850,8850,M,12500\n"
)


def make_row(title="CH", tx="146520000", rx="146520000", tx_sub="0", rx_sub="0",
             power="H", bandwidth="25000", scan="0") -> list[str]:
    """A complete canonical row"""
    return [title, tx, rx, tx_sub, rx_sub, power, bandwidth, scan,
            "0", "0", "0", "0", "0", "0", "0", "0"]


def make_table(count: int) -> ChannelTable:
    """Canonical table with `count` populated rows titled CH0, CH1, ..."""
    return ChannelTable(
        headers=list(CANONICAL_HEADERS),
        rows=[make_row(title=f"CH{i}") for i in range(count)],
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session(storage):
    return GroupSession(storage)


class FailingWrites(MemoryStorage):
    """Memory storage whose writes fail once `failing` is set"""

    failing = False

    def set_item(self, key: str, value: str) -> None:
        if self.failing:
            raise StorageError("disk full")
        super().set_item(key, value)
