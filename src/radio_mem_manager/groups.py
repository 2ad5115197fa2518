"""
Group Persistence
Named channel tables (profiles) and their comments in key/value storage
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from . import csv_codec
from .channel_store import ChannelStore
from .models import Group
from .storage import KeyValueStorage, StorageError
from .validation import ValidationResult

_LOG = logging.getLogger(__name__)

GROUPS_KEY = "channel_groups"
ACTIVE_KEY = "active_group"
COMMENTS_KEY = "channel_comments"
LEGACY_KEY = "csv_data"

MIGRATED_GROUP_NAME = "Imported"
DEFAULT_EXPORT_NAME = "channels.csv"


@dataclass
class SaveStatus:
    saved: bool
    message: str = ""


def group_name_from_filename(filename: str) -> str:
    """Group name for an imported file: the file name without .csv"""
    return re.sub(r"\.csv$", "", filename, flags=re.IGNORECASE)


class GroupSession:
    """The single editing session: current table, its comments and group name.

    Every read-modify-write of the stored maps re-reads storage first.
    """

    def __init__(self, storage: KeyValueStorage, store: Optional[ChannelStore] = None):
        self.storage = storage
        self.store = store or ChannelStore()
        self.comments: dict[str, str] = {}
        self.active_group = ""

    # --- Storage helpers ---

    def _read_map(self, key: str) -> dict:
        raw = self.storage.get_item(key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            _LOG.warning("Ignoring unreadable %s entry", key)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_map(self, key: str, data: dict) -> None:
        self.storage.set_item(key, json.dumps(data))

    def read_groups(self) -> dict[str, str]:
        return self._read_map(GROUPS_KEY)

    def read_comments(self) -> dict[str, dict[str, str]]:
        return self._read_map(COMMENTS_KEY)

    def list_groups(self) -> list[str]:
        return list(self.read_groups())

    def get_group(self, name: str) -> Optional[Group]:
        groups = self.read_groups()
        if name not in groups:
            return None
        return Group(name=name, csv_text=groups[name], comments=self.read_comments().get(name, {}))

    # --- Lifecycle ---

    def migrate_legacy(self) -> bool:
        """Wrap a pre-group single CSV blob into the "Imported" group"""
        old_data = self.storage.get_item(LEGACY_KEY)
        if not old_data:
            return False
        groups = self.read_groups()
        groups[MIGRATED_GROUP_NAME] = old_data
        self._write_map(GROUPS_KEY, groups)
        self.storage.set_item(ACTIVE_KEY, MIGRATED_GROUP_NAME)
        self.storage.remove_item(LEGACY_KEY)
        _LOG.info("Migrated legacy channel data to group '%s'", MIGRATED_GROUP_NAME)
        return True

    def startup(self) -> bool:
        """Run the legacy migration and load the stored active group"""
        try:
            self.migrate_legacy()
        except StorageError as e:
            _LOG.warning("Legacy migration failed: %s", e)
        saved_name = self.storage.get_item(ACTIVE_KEY)
        if saved_name:
            return self.load_group(saved_name)
        return False

    def save_active(self) -> SaveStatus:
        """Write the current table and comments under the active group name.

        Storage failures are reported, not raised; memory is left as is.
        """
        name = self.active_group
        if not name:
            return SaveStatus(False, "No active group")
        try:
            groups = self.read_groups()
            groups[name] = csv_codec.serialize(self.store.table)
            self._write_map(GROUPS_KEY, groups)

            comments = self.read_comments()
            if self.comments:
                comments[name] = dict(self.comments)
            else:
                comments.pop(name, None)
            self._write_map(COMMENTS_KEY, comments)

            self.storage.set_item(ACTIVE_KEY, name)
        except StorageError as e:
            _LOG.warning("Failed to save group '%s': %s", name, e)
            return SaveStatus(False, f"Could not save '{name}': {e}")
        return SaveStatus(True, f"Saved '{name}'")

    def load_group(self, name: str) -> bool:
        """Replace the session with a stored group; unknown names are ignored"""
        groups = self.read_groups()
        if name not in groups:
            return False

        self.store.load(csv_codec.parse(groups[name]))
        self.store.widen_headers()
        self.comments = dict(self.read_comments().get(name, {}))
        self.active_group = name
        try:
            self.storage.set_item(ACTIVE_KEY, name)
        except StorageError as e:
            _LOG.warning("Failed to record active group: %s", e)
        _LOG.debug("loaded group '%s'", name)
        return True

    def import_csv(self, text: str, name: str) -> SaveStatus:
        """Make imported CSV text the active group and save it"""
        self.active_group = name
        self.store.load(csv_codec.parse(text))
        self.comments = dict(self.read_comments().get(name, {}))
        return self.save_active()

    def rename_active(self, new_name: str) -> bool:
        """Move the active group's CSV and comments to a new name"""
        new_name = new_name.strip()
        old_name = self.active_group
        if not new_name or new_name == old_name:
            return False

        try:
            groups = self.read_groups()
            if old_name and old_name in groups:
                groups[new_name] = groups.pop(old_name)
                self._write_map(GROUPS_KEY, groups)

                # An overwritten group's notes go with its table
                comments = self.read_comments()
                moved = comments.pop(old_name, None)
                replaced = comments.pop(new_name, None)
                if moved:
                    comments[new_name] = moved
                if moved or replaced:
                    self._write_map(COMMENTS_KEY, comments)

            self.active_group = new_name
            self.storage.set_item(ACTIVE_KEY, new_name)
        except StorageError as e:
            _LOG.warning("Failed to rename '%s': %s", old_name, e)
            return False
        return True

    def delete_group(self, name: str) -> list[str]:
        """Remove a group and its comments; returns the remaining group names.

        Deleting the active group resets the session to an empty table. When
        the write fails the group stays stored, the session is untouched and
        the returned names still include it.
        """
        groups = self.read_groups()
        if name in groups:
            del groups[name]
            try:
                self._write_map(GROUPS_KEY, groups)
            except StorageError as e:
                _LOG.warning("Failed to delete group '%s': %s", name, e)
                return self.list_groups()

        try:
            comments = self.read_comments()
            if name in comments:
                del comments[name]
                self._write_map(COMMENTS_KEY, comments)
        except StorageError as e:
            _LOG.warning("Failed to delete comments of '%s': %s", name, e)

        if name and name == self.active_group:
            self.active_group = ""
            self.comments = {}
            self.store.reset()
        return list(groups)

    def delete_active(self) -> Optional[str]:
        """Delete the active group and load the first remaining one.

        Returns the group active afterwards, None when no group is left.
        """
        name = self.active_group
        remaining = self.delete_group(name)
        if name and name in remaining:
            return name
        if remaining:
            self.load_group(remaining[0])
            return remaining[0]
        try:
            self.storage.remove_item(ACTIVE_KEY)
        except StorageError as e:
            _LOG.warning("Failed to clear active group: %s", e)
        return None

    def export_filename(self) -> str:
        return f"{self.active_group}.csv" if self.active_group else DEFAULT_EXPORT_NAME

    def export_csv(self) -> str:
        return csv_codec.serialize(self.store.table)

    # --- Channel edits (0-based slots) ---

    def edit_channel(self, slot: int, fields: dict[str, str]) -> ValidationResult:
        result = self.store.commit_edit(slot, fields)
        if result.valid:
            self.save_active()
        return result

    def clear_channel(self, slot: int) -> bool:
        if not self.store.clear(slot):
            return False
        self.save_active()
        return True

    def move_channel(self, source: int, target: int) -> bool:
        """Reorder a channel; its comment travels with it"""
        spliced = self.store.get(target) is not None
        if not self.store.reorder(source, target):
            return False
        self._move_comment(source, target, spliced)
        self.save_active()
        return True

    def _move_comment(self, source: int, target: int, spliced: bool) -> None:
        if not self.comments:
            return
        keyed = {int(k): text for k, text in self.comments.items() if k.isdigit()}
        size = max([source, target, self.store.slot_count - 1, *keyed]) + 1
        notes: list[Optional[str]] = [None] * size
        for index, text in keyed.items():
            notes[index] = text

        if spliced:
            notes.insert(target, notes.pop(source))
        elif notes[source] is not None:
            notes[target], notes[source] = notes[source], None

        self.comments = {str(i): text for i, text in enumerate(notes) if text}

    def get_comment(self, slot: int) -> str:
        return self.comments.get(str(slot), "")

    def set_comment(self, slot: int, text: str) -> SaveStatus:
        """Attach a note to a slot; blank text removes it"""
        text = text.strip()
        if text:
            self.comments[str(slot)] = text
        else:
            self.comments.pop(str(slot), None)
        return self.save_active()
