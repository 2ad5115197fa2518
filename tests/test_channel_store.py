from radio_mem_manager import csv_codec
from radio_mem_manager.channel_store import ChannelStore
from radio_mem_manager.fields import get_field
from radio_mem_manager.models import CANONICAL_HEADERS, COL, ChannelTable

from conftest import SEVEN_COLUMN_CSV, make_row, make_table


def titles(store: ChannelStore) -> list:
    return [row[0] if row is not None else None for row in store.rows]


class TestBasicOperations:
    def test_get_out_of_range(self):
        store = ChannelStore(make_table(2))
        assert store.get(5) is None
        assert store.get(-1) is None

    def test_set_row_extends_with_empty_slots(self):
        store = ChannelStore(make_table(1))
        store.set_row(3, make_row(title="NEW"))
        assert titles(store) == ["CH0", None, None, "NEW"]

    def test_clear(self):
        store = ChannelStore(make_table(2))
        assert store.clear(1)
        assert store.get(1) is None
        assert not store.clear(9)

    def test_reset(self):
        store = ChannelStore(make_table(2))
        store.reset()
        assert store.table.is_empty


class TestWidenHeaders:
    def test_adds_missing_columns_and_pads_rows(self):
        store = ChannelStore(csv_codec.parse(SEVEN_COLUMN_CSV))
        added = store.widen_headers()

        assert len(added) == 9
        assert store.headers == list(CANONICAL_HEADERS)
        assert store.rows[1] is None
        for slot in (0, 2):
            row = store.get(slot)
            assert len(row) == 16
            assert row[7:] == ["0"] * 9

    def test_complete_table_is_untouched(self):
        store = ChannelStore(make_table(2))
        assert store.widen_headers() == []
        assert len(store.headers) == 16


class TestReorder:
    def test_move_into_empty_slot_swaps(self):
        store = ChannelStore(make_table(6))
        store.clear(4)
        before = titles(store)

        assert store.reorder(1, 4)

        after = titles(store)
        assert after[4] == "CH1"
        assert after[1] is None
        for i in (0, 2, 3, 5):
            assert after[i] == before[i]

    def test_move_onto_populated_slot_splices_forward(self):
        store = ChannelStore(make_table(8))

        assert store.reorder(2, 5)

        assert titles(store) == ["CH0", "CH1", "CH3", "CH4", "CH5", "CH2", "CH6", "CH7"]

    def test_move_onto_populated_slot_splices_backward(self):
        store = ChannelStore(make_table(8))

        assert store.reorder(6, 1)

        assert titles(store) == ["CH0", "CH6", "CH1", "CH2", "CH3", "CH4", "CH5", "CH7"]

    def test_move_past_end_extends_table(self):
        store = ChannelStore(make_table(2))
        assert store.reorder(0, 4)
        assert titles(store) == [None, "CH1", None, None, "CH0"]

    def test_same_slot_is_noop(self):
        store = ChannelStore(make_table(3))
        assert not store.reorder(1, 1)
        assert titles(store) == ["CH0", "CH1", "CH2"]

    def test_empty_source_is_noop(self):
        store = ChannelStore(make_table(3))
        store.clear(0)
        assert not store.reorder(0, 2)
        assert titles(store) == [None, "CH1", "CH2"]

    def test_rows_beyond_thirty_are_preserved(self):
        store = ChannelStore(make_table(32))
        assert store.reorder(0, 5)
        assert store.slot_count == 32
        assert titles(store)[31] == "CH31"


class TestCommitEdit:
    def test_widens_headers_on_first_edit(self):
        store = ChannelStore(csv_codec.parse(SEVEN_COLUMN_CSV))

        result = store.commit_edit(0, {"title": "SIMPLEX"})

        assert result.valid
        assert len(store.headers) == 16
        assert get_field(store.headers, store.get(0), COL.TITLE) == "SIMPLEX"
        assert store.get(2)[7:] == ["0"] * 9

    def test_computes_modulation(self):
        store = ChannelStore(make_table(1))

        store.commit_edit(0, {"rx_freq": "120000000", "tx_freq": "0"})

        row = store.get(0)
        assert get_field(store.headers, row, COL.RX_MODULATION) == "1"
        assert get_field(store.headers, row, COL.TX_MODULATION) == "0"

    def test_creates_row_in_empty_slot(self):
        store = ChannelStore(ChannelTable.empty())

        result = store.commit_edit(3, {"title": "NEW", "rx_freq": "146520000"})

        assert result.valid
        row = store.get(3)
        assert len(row) == 16
        assert row[0] == "NEW"
        assert store.get(0) is None

    def test_invalid_edit_leaves_table_untouched(self):
        table = csv_codec.parse(SEVEN_COLUMN_CSV)
        store = ChannelStore(table)

        result = store.commit_edit(0, {"title": "TOOLONGNAME", "tx_freq": "100000000"})

        assert not result.valid
        assert len(result.errors) == 2
        assert store.table == csv_codec.parse(SEVEN_COLUMN_CSV)

    def test_title_with_line_break_is_rejected(self):
        store = ChannelStore(make_table(2))

        assert not store.commit_edit(0, {"title": "AB\n"}).valid

        assert csv_codec.parse(csv_codec.serialize(store.table)) == make_table(2)

    def test_slot_out_of_range(self):
        store = ChannelStore(make_table(1))
        assert not store.commit_edit(30, {"title": "X"}).valid

    def test_fields_prefill(self):
        store = ChannelStore(make_table(1))
        assert store.fields(0)["title"] == "CH0"
        assert store.fields(5) is None


def test_summary():
    table = make_table(3)
    table.rows[1][4] = "23"
    table.rows[2] = None
    summary = ChannelStore(table).summary()

    assert summary["used_channels"] == 2
    assert summary["free_channels"] == 28
    assert summary["channels_by_bandwidth"] == {"W": 2}
    assert summary["channels_by_subtone"] == {"DTS": 1}
    assert summary["channels_by_band"] == {"2m": 2}
