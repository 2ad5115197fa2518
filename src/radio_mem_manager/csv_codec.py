"""
Channel CSV codec
Parses radio channel CSV text into a ChannelTable and writes it back
"""

import logging
from pathlib import Path

from .models import ChannelTable

_LOG = logging.getLogger(__name__)

_NEEDS_QUOTING = (",", '"', "\n")


def parse_line(line: str) -> list[str]:
    """Split one CSV line into fields.

    Inside quotes a doubled quote is a literal quote and a lone quote ends
    quoting. The final field is always emitted.
    """
    fields = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]
        if in_quotes:
            if ch == '"' and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            elif ch == '"':
                in_quotes = False
            else:
                current.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    fields.append("".join(current))
    return fields


def parse(text: str) -> ChannelTable:
    """Parse CSV text. Blank lines after the header become empty slots."""
    if not text:
        return ChannelTable.empty()

    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    headers = [h.strip().lower() for h in parse_line(lines[0])]
    rows = []
    for line in lines[1:]:
        if line.strip() == "":
            rows.append(None)
        else:
            rows.append(parse_line(line))

    _LOG.debug("parsed %d columns, %d slots", len(headers), len(rows))
    return ChannelTable(headers=headers, rows=rows)


def escape_field(value: str) -> str:
    """Quote a field if it contains a comma, quote or newline"""
    if any(token in value for token in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'
    return value


def serialize(table: ChannelTable) -> str:
    """Serialize a table; empty slots are written as blank lines"""
    lines = [",".join(table.headers)]
    for row in table.rows:
        if row is None:
            lines.append("")
        else:
            lines.append(",".join(escape_field(value) for value in row))
    return "\n".join(lines)


def read_csv_text(filepath: Path) -> str:
    """Read a CSV file as text (UTF-8, BOM tolerated)"""
    with open(filepath, encoding="utf-8-sig", newline="") as f:
        return f.read()


def write_csv_file(filepath: Path, table: ChannelTable) -> None:
    """Serialize a table to a CSV file"""
    with open(filepath, "w", encoding="utf-8", newline="") as f:
        f.write(serialize(table))
