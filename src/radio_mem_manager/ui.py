"""
Radio Memory Manager - Flask Web API
JSON endpoints backing the channel grid page
"""

import logging
import threading
from pathlib import Path
from typing import Optional

from flask import Flask, Response, jsonify, request

from .config import AppConfig
from .derivation import count_populated, project_grid
from .groups import GroupSession, group_name_from_filename
from .models import CHANNEL_SLOTS
from .storage import JsonFileStorage

app = Flask(__name__)

_LOG = logging.getLogger(__name__)

# Global state
session: Optional[GroupSession] = None
edit_lock = threading.Lock()


def get_session() -> GroupSession:
    """Get or create the editing session."""
    global session
    if session is None:
        config = AppConfig.from_env()
        storage = JsonFileStorage(config.data_file, quota_bytes=config.storage_quota_bytes)
        session = GroupSession(storage)
        # Restore the last active group on first access
        session.startup()
    return session


def _slot(number: int) -> Optional[int]:
    if 1 <= number <= CHANNEL_SLOTS:
        return number - 1
    return None


def _json_body() -> dict:
    """Request JSON object; anything else reads as empty"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def channels_to_list(sess: GroupSession) -> list[dict]:
    """Grid cells with their stored fields and notes for JSON response."""
    cells = []
    for cell in project_grid(sess.store.table):
        slot = _slot(cell["number"])
        if slot is not None:
            cell["fields"] = sess.store.fields(slot)
            cell["comment"] = sess.get_comment(slot)
        cells.append(cell)
    return cells


# Routes

@app.route("/api/status")
def get_status():
    """Get the active group and channel count."""
    sess = get_session()
    return jsonify({
        "active_group": sess.active_group,
        "groups": sess.list_groups(),
        "populated": count_populated(sess.store.table),
    })


@app.route("/api/channels")
def get_channels():
    """Get all grid cells of the active group."""
    sess = get_session()
    return jsonify({"channels": channels_to_list(sess), "group": sess.active_group})


@app.route("/api/channels/<int:number>")
def get_channel(number: int):
    """Get the stored fields of one channel."""
    sess = get_session()
    slot = _slot(number)
    if slot is None:
        return jsonify({"success": False, "message": f"Channel must be 1-{CHANNEL_SLOTS}"}), 404

    return jsonify({
        "success": True,
        "number": number,
        "fields": sess.store.fields(slot),
        "comment": sess.get_comment(slot),
    })


@app.route("/api/channels/<int:number>", methods=["PUT"])
def save_channel(number: int):
    """Validate and save an edited channel."""
    sess = get_session()
    slot = _slot(number)
    if slot is None:
        return jsonify({"success": False, "message": f"Channel must be 1-{CHANNEL_SLOTS}"}), 404

    data = _json_body()
    raw_fields = data.get("fields", {})
    if not isinstance(raw_fields, dict):
        return jsonify({"success": False, "message": "Fields must be an object"}), 400
    fields = {key: str(value) for key, value in raw_fields.items()}

    with edit_lock:
        result = sess.edit_channel(slot, fields)
        if result.valid and "comment" in data:
            sess.set_comment(slot, str(data["comment"]))

    if not result.valid:
        return jsonify({"success": False, "errors": result.errors}), 400
    return jsonify({"success": True, "message": f"Saved channel {number}"})


@app.route("/api/channels/<int:number>", methods=["DELETE"])
def clear_channel(number: int):
    """Clear a channel."""
    sess = get_session()
    slot = _slot(number)
    if slot is None:
        return jsonify({"success": False, "message": f"Channel must be 1-{CHANNEL_SLOTS}"}), 404

    with edit_lock:
        cleared = sess.clear_channel(slot)
    return jsonify({"success": cleared, "message": f"Cleared channel {number}" if cleared else "Channel is empty"})


@app.route("/api/reorder", methods=["POST"])
def reorder_channels():
    """Drop one channel onto another."""
    sess = get_session()
    data = _json_body()
    try:
        source = _slot(int(data.get("source", 0)))
        target = _slot(int(data.get("target", 0)))
    except (TypeError, ValueError):
        source = target = None
    if source is None or target is None:
        return jsonify({"success": False, "message": "Invalid channel number"})

    with edit_lock:
        moved = sess.move_channel(source, target)
    return jsonify({"success": moved})


@app.route("/api/comments/<int:number>", methods=["PUT"])
def save_comment(number: int):
    """Set or remove a channel note."""
    sess = get_session()
    slot = _slot(number)
    if slot is None:
        return jsonify({"success": False, "message": f"Channel must be 1-{CHANNEL_SLOTS}"}), 404

    data = _json_body()
    with edit_lock:
        status = sess.set_comment(slot, str(data.get("comment", "")))
    return jsonify({"success": status.saved, "message": status.message})


@app.route("/api/groups")
def get_groups():
    """Get stored group names and the active one."""
    sess = get_session()
    return jsonify({"groups": sess.list_groups(), "active": sess.active_group})


@app.route("/api/groups/<name>/load", methods=["POST"])
def load_group(name: str):
    """Switch to a stored group."""
    sess = get_session()
    with edit_lock:
        loaded = sess.load_group(name)
    if not loaded:
        return jsonify({"success": False, "message": "Group not found"})
    return jsonify({
        "success": True,
        "message": f"Loaded {count_populated(sess.store.table)} channel(s).",
    })


@app.route("/api/groups/active", methods=["PUT"])
def rename_group():
    """Rename the active group."""
    sess = get_session()
    data = _json_body()
    new_name = str(data.get("name", "")).strip()
    if not new_name:
        return jsonify({"success": False, "message": "Group name is required"})

    with edit_lock:
        renamed = sess.rename_active(new_name)
    return jsonify({"success": renamed, "active": sess.active_group})


@app.route("/api/groups/<name>", methods=["DELETE"])
def delete_group(name: str):
    """Delete a group; deleting the active one loads the next."""
    sess = get_session()
    if name not in sess.list_groups():
        return jsonify({"success": False, "message": "Group not found"})

    with edit_lock:
        if name == sess.active_group:
            sess.delete_active()
        else:
            sess.delete_group(name)
    if name in sess.list_groups():
        return jsonify({"success": False, "message": f"Could not delete '{name}'"})
    return jsonify({
        "success": True,
        "message": "Stored data cleared.",
        "active": sess.active_group,
    })


@app.route("/api/import", methods=["POST"])
def import_file():
    """Import an uploaded CSV file as a group."""
    if "file" not in request.files:
        return jsonify({"success": False, "message": "No file provided"})

    file = request.files["file"]
    if file.filename == "":
        return jsonify({"success": False, "message": "No file selected"})
    if Path(file.filename).suffix.lower() != ".csv":
        return jsonify({"success": False, "message": "Unsupported file format"})

    sess = get_session()
    text = file.read().decode("utf-8-sig", errors="replace")
    name = request.form.get("name") or group_name_from_filename(file.filename)

    with edit_lock:
        status = sess.import_csv(text, name)
    _LOG.info("Imported %s as group '%s'", file.filename, name)

    return jsonify({
        "success": True,
        "saved": status.saved,
        "group": name,
        "imported": count_populated(sess.store.table),
        "message": status.message if not status.saved else f"Loaded {count_populated(sess.store.table)} channel(s).",
    })


@app.route("/api/export/csv")
def export_csv():
    """Export the active group as a CSV download."""
    sess = get_session()
    if sess.store.table.is_empty:
        return jsonify({"success": False, "message": "Nothing to export"}), 404

    return Response(
        sess.export_csv(),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{sess.export_filename()}"'},
    )


@app.route("/api/summary")
def get_summary():
    """Get channel summary statistics."""
    sess = get_session()
    return jsonify(sess.store.summary())


def launch():
    """Launch the Flask web interface."""
    config = AppConfig.from_env()
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    print("Starting Radio Memory Manager...")
    print(f"Open http://{config.host}:{config.port} in your browser")
    app.run(host=config.host, port=config.port, debug=False)


if __name__ == "__main__":
    launch()
