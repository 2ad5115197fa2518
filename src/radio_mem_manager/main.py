"""
Radio Memory Manager - Main Entry Point
Command-line interface for managing channel groups
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import csv_codec
from .config import AppConfig
from .derivation import count_populated, project_grid
from .fields import get_field
from .groups import GroupSession, group_name_from_filename
from .models import CHANNEL_SLOTS, COL, TxPower, format_frequency, parse_frequency, parse_int
from .storage import JsonFileStorage
from .subtones import format_subtone, parse_subtone

# CLI option name -> edit-form key for the 0/1 flags
FLAG_OPTIONS = {
    "scan": "scan",
    "talk_around": "talk_around",
    "bypass": "pre_de_emph_bypass",
    "sign": "sign",
    "tx_dis": "tx_dis",
    "bclo": "bclo",
    "mute": "mute",
}


def create_session(config: AppConfig) -> GroupSession:
    """Open storage and restore the last active group"""
    storage = JsonFileStorage(config.data_file, quota_bytes=config.storage_quota_bytes)
    session = GroupSession(storage)
    session.startup()
    return session


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        prog="radio-mem",
        description="Channel table manager for 30-channel handheld radios",
    )

    parser.add_argument(
        "--data-file",
        "-d",
        type=Path,
        help="Storage file (default: ~/.radio_mem_manager.json)",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List command
    list_parser = subparsers.add_parser("list", help="List channels of the active group")
    list_parser.add_argument(
        "--all",
        action="store_true",
        help="Show all slots including empty ones and the VFOs",
    )

    # Import command
    import_parser = subparsers.add_parser("import", help="Import a CSV file as a group")
    import_parser.add_argument("file", type=Path, help="Input CSV file")
    import_parser.add_argument("--name", "-n", help="Group name (default: file name)")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export the active group to CSV")
    export_parser.add_argument(
        "file",
        type=Path,
        nargs="?",
        help="Output file (default: <group>.csv)",
    )

    # Set command
    set_parser = subparsers.add_parser("set", help="Edit a channel")
    set_parser.add_argument("channel", type=int, help=f"Channel number (1-{CHANNEL_SLOTS})")
    set_parser.add_argument("--title", "-t", help="Channel name (max 8 ASCII characters)")
    set_parser.add_argument("--tx", help="TX frequency in MHz (0 disables transmit)")
    set_parser.add_argument("--rx", help="RX frequency in MHz")
    set_parser.add_argument("--tx-sub", help="TX subtone: off, tone in Hz (88.5) or DCS (D023)")
    set_parser.add_argument("--rx-sub", help="RX subtone: off, tone in Hz (88.5) or DCS (D023)")
    set_parser.add_argument(
        "--power",
        "-p",
        choices=[p.value for p in TxPower],
        help="TX power",
    )
    set_parser.add_argument(
        "--bandwidth",
        "-b",
        choices=["12500", "25000"],
        help="Bandwidth in Hz",
    )
    for option in FLAG_OPTIONS:
        set_parser.add_argument(
            f"--{option.replace('_', '-')}",
            dest=option,
            choices=["0", "1"],
            help=f"{option.replace('_', ' ')} flag",
        )

    # Clear command
    clear_parser = subparsers.add_parser("clear", help="Clear a channel")
    clear_parser.add_argument("channel", type=int, help="Channel number to clear")

    # Move command
    move_parser = subparsers.add_parser("move", help="Move a channel (drag-and-drop rules)")
    move_parser.add_argument("source", type=int, help="Channel to move")
    move_parser.add_argument("target", type=int, help="Destination channel")

    # Comment command
    comment_parser = subparsers.add_parser("comment", help="Set or show a channel note")
    comment_parser.add_argument("channel", type=int, help="Channel number")
    comment_parser.add_argument("text", nargs="?", help="Note text (empty string removes it)")

    # Group commands
    subparsers.add_parser("groups", help="List stored groups")
    use_parser = subparsers.add_parser("use", help="Make a stored group active")
    use_parser.add_argument("name", help="Group name")
    rename_parser = subparsers.add_parser("rename", help="Rename the active group")
    rename_parser.add_argument("name", help="New group name")
    delete_parser = subparsers.add_parser("delete", help="Delete a group")
    delete_parser.add_argument("name", nargs="?", help="Group name (default: active group)")

    # Summary command
    subparsers.add_parser("summary", help="Show channel summary")

    return parser


def _slot(channel: int) -> Optional[int]:
    """1-based channel number to 0-based slot, None if out of range"""
    if 1 <= channel <= CHANNEL_SLOTS:
        return channel - 1
    print(f"Error: Channel must be 1-{CHANNEL_SLOTS}")
    return None


def _require_group(session: GroupSession) -> bool:
    if session.active_group:
        return True
    print("Error: No active group. Import a CSV file or select a group first.")
    return False


def _frequency_text(value: str) -> str:
    hz = parse_int(value)
    return format_frequency(hz) if hz else "-"


def cmd_list(session: GroupSession, args: argparse.Namespace) -> int:
    """List channels of the active group"""
    table = session.store.table
    if table.is_empty and not args.all:
        print("No channels found.")
        return 0

    print(f"Group: {session.active_group or '-'}")
    print(f"{'Ch':>3} {'Name':<8} {'RX (MHz)':>11} {'TX (MHz)':>11} {'Sub':<6} {'Flags':<6} Note")
    print("-" * 60)

    for cell in project_grid(table):
        number = cell["number"]
        if (cell["is_empty"] or cell["is_vfo"]) and not args.all:
            continue
        if cell["is_vfo"]:
            print(f"{number:>3} {cell['title']:<8}")
            continue
        if cell["is_empty"]:
            print(f"{number:>3} {'-':<8}")
            continue

        row = table.rows[number - 1]
        rx = _frequency_text(get_field(table.headers, row, COL.RX_FREQ))
        tx = _frequency_text(get_field(table.headers, row, COL.TX_FREQ))
        sub = format_subtone(get_field(table.headers, row, COL.RX_SUB))
        flags = f"{cell['bandwidth']}{cell['scan']}{cell['offset']}"
        note = session.get_comment(number - 1)
        print(f"{number:>3} {cell['title'] or '-':<8} {rx:>11} {tx:>11} {sub:<6} {flags:<6} {note}")

    return 0


def cmd_import(session: GroupSession, args: argparse.Namespace) -> int:
    """Import a CSV file as the active group"""
    filepath = args.file

    if not filepath.exists():
        print(f"Error: File not found: {filepath}")
        return 1

    try:
        text = csv_codec.read_csv_text(filepath)
    except IOError as e:
        print(f"Error: Failed to read {filepath}: {e}")
        return 1

    name = args.name or group_name_from_filename(filepath.name)
    status = session.import_csv(text, name)
    print(f"Loaded {count_populated(session.store.table)} channel(s) into group '{name}'.")
    if not status.saved:
        print(f"Warning: {status.message}")
        return 1
    return 0


def cmd_export(session: GroupSession, args: argparse.Namespace) -> int:
    """Export the active group to a CSV file"""
    if session.store.table.is_empty:
        print("Nothing to export.")
        return 1

    filepath = args.file or Path(session.export_filename())
    try:
        csv_codec.write_csv_file(filepath, session.store.table)
    except IOError as e:
        print(f"Export failed: {e}")
        return 1

    print(f"Exported channels to {filepath}")
    return 0


def collect_fields(args: argparse.Namespace) -> dict[str, str]:
    """Edit-form fields from the `set` options that were given"""
    fields: dict[str, str] = {}
    if args.title is not None:
        fields["title"] = args.title
    if args.tx is not None:
        fields["tx_freq"] = str(parse_frequency(args.tx))
    if args.rx is not None:
        fields["rx_freq"] = str(parse_frequency(args.rx))
    if args.tx_sub is not None:
        fields["tx_sub_audio"] = parse_subtone(args.tx_sub)
    if args.rx_sub is not None:
        fields["rx_sub_audio"] = parse_subtone(args.rx_sub)
    if args.power is not None:
        fields["tx_power"] = args.power
    if args.bandwidth is not None:
        fields["bandwidth"] = args.bandwidth
    for option, key in FLAG_OPTIONS.items():
        value = getattr(args, option)
        if value is not None:
            fields[key] = value
    return fields


def cmd_set(session: GroupSession, args: argparse.Namespace) -> int:
    """Edit a channel"""
    slot = _slot(args.channel)
    if slot is None or not _require_group(session):
        return 1

    try:
        fields = collect_fields(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    result = session.edit_channel(slot, fields)
    if not result.valid:
        print(f"Channel {args.channel} not saved:")
        for error in result.errors:
            print(f"  - {error}")
        return 1

    print(f"Set channel {args.channel}")
    return 0


def cmd_clear(session: GroupSession, args: argparse.Namespace) -> int:
    """Clear a channel"""
    slot = _slot(args.channel)
    if slot is None or not _require_group(session):
        return 1

    if session.clear_channel(slot):
        print(f"Cleared channel {args.channel}")
    else:
        print(f"Channel {args.channel} is already empty")
    return 0


def cmd_move(session: GroupSession, args: argparse.Namespace) -> int:
    """Move a channel onto another slot"""
    source = _slot(args.source)
    target = _slot(args.target)
    if source is None or target is None or not _require_group(session):
        return 1

    if session.move_channel(source, target):
        print(f"Moved channel {args.source} to {args.target}")
        return 0
    print(f"Nothing to move: channel {args.source} is empty or unchanged")
    return 1


def cmd_comment(session: GroupSession, args: argparse.Namespace) -> int:
    """Show or set a channel note"""
    slot = _slot(args.channel)
    if slot is None or not _require_group(session):
        return 1

    if args.text is None:
        print(session.get_comment(slot) or "(no note)")
        return 0

    status = session.set_comment(slot, args.text)
    if not status.saved:
        print(f"Error: {status.message}")
        return 1
    print(f"Updated note for channel {args.channel}")
    return 0


def cmd_groups(session: GroupSession, _args: argparse.Namespace) -> int:
    """List stored groups"""
    names = session.list_groups()
    if not names:
        print("No groups stored.")
        return 0
    for name in names:
        group = session.get_group(name)
        if group is None:
            continue
        marker = "*" if name == session.active_group else " "
        used = count_populated(csv_codec.parse(group.csv_text))
        notes = f", {len(group.comments)} note(s)" if group.comments else ""
        print(f"{marker} {name} ({used} channels{notes})")
    return 0


def cmd_use(session: GroupSession, args: argparse.Namespace) -> int:
    """Switch the active group"""
    if session.load_group(args.name):
        print(f"Active group: {args.name} ({count_populated(session.store.table)} channels)")
        return 0
    print(f"Error: Group not found: {args.name}")
    return 1


def cmd_rename(session: GroupSession, args: argparse.Namespace) -> int:
    """Rename the active group"""
    if not _require_group(session):
        return 1
    old_name = session.active_group
    if session.rename_active(args.name):
        print(f"Renamed '{old_name}' to '{session.active_group}'")
        return 0
    print("Group name unchanged.")
    return 1


def cmd_delete(session: GroupSession, args: argparse.Namespace) -> int:
    """Delete a group"""
    name = args.name or session.active_group
    if not name or name not in session.list_groups():
        print(f"Error: Group not found: {name or '-'}")
        return 1

    if name == session.active_group:
        session.delete_active()
    else:
        session.delete_group(name)

    if name in session.list_groups():
        print(f"Error: Could not delete '{name}'")
        return 1
    print(f"Deleted '{name}'.")
    if session.active_group:
        print(f"Active group: {session.active_group}")
    return 0


def cmd_summary(session: GroupSession, _args: argparse.Namespace) -> int:
    """Show channel summary"""
    summary = session.store.summary()

    print(f"Group: {session.active_group or '-'}")
    print("=" * 40)
    print(f"Total channels:  {summary['total_channels']}")
    print(f"Used channels:   {summary['used_channels']}")
    print(f"Free channels:   {summary['free_channels']}")

    if summary["channels_by_band"]:
        print("\nChannels by band:")
        for band, count in sorted(summary["channels_by_band"].items()):
            print(f"  {band}: {count}")

    if summary["channels_by_subtone"]:
        print("\nChannels by subtone:")
        for family, count in sorted(summary["channels_by_subtone"].items()):
            print(f"  {family}: {count}")

    return 0


COMMANDS = {
    "list": cmd_list,
    "import": cmd_import,
    "export": cmd_export,
    "set": cmd_set,
    "clear": cmd_clear,
    "move": cmd_move,
    "comment": cmd_comment,
    "groups": cmd_groups,
    "use": cmd_use,
    "rename": cmd_rename,
    "delete": cmd_delete,
    "summary": cmd_summary,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config = AppConfig.from_env()
    if args.data_file:
        config.data_file = args.data_file
    if args.log_level:
        config.log_level = args.log_level.upper()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    # Restore the active group from the previous session
    session = create_session(config)

    handler = COMMANDS.get(args.command)
    if handler:
        return handler(session, args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
