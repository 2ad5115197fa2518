import json

import pytest

from radio_mem_manager import csv_codec
from radio_mem_manager.config import AppConfig
from radio_mem_manager.main import main

from conftest import SEVEN_COLUMN_CSV


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "channels.json"


@pytest.fixture
def run(data_file):
    def _run(*args: str) -> int:
        return main(["--data-file", str(data_file), *args])
    return _run


@pytest.fixture
def imported(tmp_path, run):
    csv_path = tmp_path / "Club.csv"
    csv_path.write_text(SEVEN_COLUMN_CSV, encoding="utf-8")
    assert run("import", str(csv_path)) == 0
    return csv_path


def test_no_command_prints_help(run, capsys):
    assert run() == 0
    assert "usage" in capsys.readouterr().out


def test_import_names_group_after_file(capsys, imported, run, data_file):
    out = capsys.readouterr().out
    assert "Loaded 2 channel(s) into group 'Club'" in out

    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert stored["active_group"] == "Club"


def test_import_missing_file(run, tmp_path, capsys):
    assert run("import", str(tmp_path / "missing.csv")) == 1
    assert "File not found" in capsys.readouterr().out


def test_list_shows_channels(imported, run, capsys):
    capsys.readouterr()
    assert run("list") == 0
    out = capsys.readouterr().out
    assert "CALL" in out
    assert "RPT1" in out
    assert "146.600000" in out
    assert "88.5" in out


def test_set_and_list(imported, run, capsys):
    assert run("set", "2", "--title", "NEW", "--rx", "446.000", "--tx", "446.000",
               "--rx-sub", "D023", "--power", "L", "--scan", "1") == 0
    capsys.readouterr()

    run("list")
    out = capsys.readouterr().out
    assert "NEW" in out
    assert "D023" in out


def test_set_rejects_invalid_values(imported, run, capsys):
    capsys.readouterr()
    assert run("set", "1", "--title", "TOOLONGNAME", "--tx", "100") == 1
    out = capsys.readouterr().out
    assert "Title must be 8 characters or fewer." in out
    assert "TX Freq" in out


def test_set_rejects_bad_subtone_text(imported, run, capsys):
    assert run("set", "1", "--rx-sub", "tone") == 1
    assert "Invalid subtone" in capsys.readouterr().out


def test_set_requires_active_group(run, capsys):
    assert run("set", "1", "--title", "X") == 1
    assert "No active group" in capsys.readouterr().out


def test_channel_out_of_range(imported, run, capsys):
    assert run("clear", "31") == 1
    assert "Channel must be 1-30" in capsys.readouterr().out


def test_move_and_export(imported, run, tmp_path):
    assert run("move", "1", "2") == 0

    out_path = tmp_path / "out.csv"
    assert run("export", str(out_path)) == 0
    table = csv_codec.parse(out_path.read_text(encoding="utf-8"))
    assert table.rows[0] is None
    assert table.rows[1][0] == "CALL"
    assert len(table.headers) == 16


def test_move_empty_channel_fails(imported, run):
    assert run("move", "2", "1") == 1


def test_comment(imported, run, capsys):
    assert run("comment", "1", "Calling channel") == 0
    capsys.readouterr()
    assert run("comment", "1") == 0
    assert "Calling channel" in capsys.readouterr().out


def test_group_commands(imported, run, capsys):
    assert run("rename", "Cabin") == 0
    capsys.readouterr()

    assert run("groups") == 0
    assert "* Cabin (2 channels)" in capsys.readouterr().out

    assert run("use", "Club") == 1
    assert run("delete") == 0
    capsys.readouterr()
    assert run("groups") == 0
    assert "No groups stored." in capsys.readouterr().out


def test_groups_lists_note_counts(imported, run, capsys):
    run("comment", "1", "Calling channel")
    capsys.readouterr()

    assert run("groups") == 0
    assert "* Club (2 channels, 1 note(s))" in capsys.readouterr().out


def test_summary(imported, run, capsys):
    capsys.readouterr()
    assert run("summary") == 0
    out = capsys.readouterr().out
    assert "Used channels:   2" in out
    assert "2m: 2" in out


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("RADIO_MEM_DATA_FILE", str(tmp_path / "x.json"))
    monkeypatch.setenv("RADIO_MEM_PORT", "8080")
    monkeypatch.setenv("RADIO_MEM_QUOTA", "0")
    config = AppConfig.from_env()
    assert config.data_file == tmp_path / "x.json"
    assert config.port == 8080
    assert config.storage_quota_bytes is None
