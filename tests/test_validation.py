import pytest

from radio_mem_manager.validation import apply_modulation, compute_modulation, validate_strict


def test_empty_candidate_is_valid():
    result = validate_strict({})
    assert result.valid
    assert result.errors == []


@pytest.mark.parametrize("title, valid", [("OK1", True), ("", True), ("12345678", True),
                                          ("TOOLONGNAME", False), ("CAFÉ", False),
                                          ("AB\n", False), ("A\tB", False)])
def test_title(title, valid):
    assert validate_strict({"title": title}).valid is valid


@pytest.mark.parametrize(
    "hz, valid",
    [
        ("0", True),
        ("146500000", True),
        ("144000000", True),
        ("148000000", True),
        ("446000000", True),
        ("100000000", False),
        ("148000001", False),
        ("", False),
        ("abc", False),
    ],
)
def test_tx_frequency(hz, valid):
    assert validate_strict({"tx_freq": hz}).valid is valid


@pytest.mark.parametrize(
    "hz, valid",
    [("0", True), ("100000000", True), ("88000000", True), ("137000000", True),
     ("140000000", False), ("460000000", False)],
)
def test_rx_frequency(hz, valid):
    assert validate_strict({"rx_freq": hz}).valid is valid


@pytest.mark.parametrize("stored, valid", [("0", True), ("8850", True), ("23", True),
                                           ("8851", False), ("24", False)])
def test_subtones_are_strict(stored, valid):
    assert validate_strict({"tx_sub_audio": stored}).valid is valid
    assert validate_strict({"rx_sub_audio": stored}).valid is valid


def test_power_and_bandwidth():
    assert validate_strict({"tx_power": "M", "bandwidth": "12500"}).valid
    result = validate_strict({"tx_power": "X", "bandwidth": "20000"})
    assert result.errors == ["TX Power must be H, M, or L.", "Bandwidth must be 12500 or 25000."]


def test_binary_flags():
    fields = {"scan": "1", "talk_around": "0", "pre_de_emph_bypass": "1", "sign": "0",
              "tx_dis": "1", "bclo": "0", "mute": "1"}
    assert validate_strict(fields).valid
    result = validate_strict({"scan": "2", "mute": "yes"})
    assert result.errors == ["Scan must be 0 or 1.", "Mute must be 0 or 1."]


def test_all_errors_are_collected():
    result = validate_strict({
        "title": "TOOLONGNAME",
        "tx_freq": "100000000",
        "rx_freq": "500000000",
        "tx_sub_audio": "1",
        "tx_power": "Z",
    })
    assert not result.valid
    assert len(result.errors) == 5


@pytest.mark.parametrize(
    "hz, flag",
    [("120000000", "1"), ("118000000", "1"), ("137000000", "1"), ("146000000", "0"),
     ("117999999", "0"), ("0", "0"), ("", "0")],
)
def test_compute_modulation(hz, flag):
    assert compute_modulation(hz) == flag


def test_apply_modulation_is_per_frequency():
    fields = apply_modulation({"rx_freq": "120000000", "tx_freq": "146000000"})
    assert fields["rx_modulation"] == "1"
    assert fields["tx_modulation"] == "0"
    assert "rx_modulation" not in apply_modulation({"title": "X"})
