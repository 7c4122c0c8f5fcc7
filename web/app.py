"""Flask application for the Web Label Sheet Designer."""

import sys
import os
import csv
import logging
from io import BytesIO

from urllib.parse import urlparse

from flask import Flask, request, jsonify, send_file

# Add parent directory so we can import shared modules
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from models.label_config import OPTION_KEYS, TEMPLATES, Options
from export.sheet_renderer import render_page_png
from pipeline.errors import EditSessionError
from utils.geometry import Box
from utils.value_format import label_style, label_text
from web.config import Config
from web.logging_setup import configure_logging
from web.state import state

app = Flask(__name__)
app.config.from_object(Config)
configure_logging(app, Config.LOG_LEVEL)

logger = logging.getLogger(__name__)

# Options the settings panel may change directly
OPTION_ALLOWED_KEYS = set(OPTION_KEYS.values()) - {"columnConfig", "visualEditorMode"}

FORMATTING_KEYS = {
    "fontSize": "font_size",
    "color": "color",
    "align": "align",
    "fontWeight": "font_weight",
}


@app.before_request
def csrf_check():
    """Reject non-GET/HEAD/OPTIONS requests with a foreign Origin or Referer."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return
    origin = request.headers.get("Origin") or request.headers.get("Referer")
    if origin:
        host = urlparse(origin).hostname
        if host not in app.config["ALLOWED_HOSTS"]:
            return jsonify(error="Forbidden: cross-origin request"), 403


@app.errorhandler(EditSessionError)
def edit_session_error(exc):
    return jsonify(error=str(exc)), 400


def _upload_path(name: str) -> str:
    upload_dir = app.config["UPLOAD_DIR"]
    os.makedirs(upload_dir, exist_ok=True)
    return os.path.join(upload_dir, name)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _pointer(data: dict):
    pointer = data.get("pointer") or {}
    try:
        return float(pointer["x"]), float(pointer["y"])
    except (KeyError, TypeError, ValueError):
        raise EditSessionError("pointer must have numeric x and y")


def _field_from(data: dict):
    try:
        label_index = int(data["label"])
    except (KeyError, TypeError, ValueError):
        raise EditSessionError("label must be a label index")
    return state.session.field_at(label_index, str(data.get("column", "")))


def _editor_info() -> dict:
    editor = state.session.editor
    selected = editor.selected
    return {
        "mode": editor.editor_mode,
        "state": editor.state.value,
        "selected": selected.to_dict() if selected is not None else None,
    }


# ---------------------------------------------------------------------------
# Templates & options
# ---------------------------------------------------------------------------

@app.route("/api/templates")
def get_templates():
    return jsonify(templates=[t.to_dict() for t in TEMPLATES])


@app.route("/api/options")
def get_options():
    return jsonify(state.session.options.to_dict())


@app.route("/api/options", methods=["PUT"])
def update_options():
    data = _json_body()
    with state.lock:
        merged = state.session.options.to_dict()
        for key, val in data.items():
            if key in OPTION_ALLOWED_KEYS:
                merged[key] = val
        state.session.options = Options.from_dict(merged)
        state.session.save()
        return jsonify(ok=True, options=state.session.options.to_dict())


@app.route("/api/options/reset", methods=["POST"])
def reset_options():
    with state.lock:
        state.store.clear()
        return jsonify(ok=True, options=state.session.options.to_dict())


@app.route("/api/upload-options", methods=["POST"])
def upload_options():
    if "file" not in request.files:
        return jsonify(error="No file provided"), 400
    f = request.files["file"]
    tmp_path = _upload_path("uploaded_options.json")
    f.save(tmp_path)
    try:
        options = Options.load_json(tmp_path)
    except (ValueError, UnicodeDecodeError) as e:
        return jsonify(error=f"Invalid options file: {e}"), 400
    with state.lock:
        state.store.replace(options.to_dict())
        return jsonify(ok=True, options=state.session.options.to_dict())


@app.route("/api/download-options")
def download_options():
    tmp_path = _upload_path("label_options.json")
    with state.lock:
        state.session.options.save_json(tmp_path)
    return send_file(
        tmp_path,
        mimetype="application/json",
        as_attachment=True,
        download_name="label_options.json",
    )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@app.route("/api/upload-csv", methods=["POST"])
def upload_csv():
    if "file" not in request.files:
        return jsonify(error="No file provided"), 400
    f = request.files["file"]
    if not f.filename:
        return jsonify(error="Empty filename"), 400

    # Save to temp then load
    tmp_path = _upload_path("uploaded.csv")
    f.save(tmp_path)
    with state.lock:
        try:
            state.load_records(tmp_path, f.filename)
        except (ValueError, csv.Error) as e:
            return jsonify(error=f"CSV error: {e}"), 400
        return jsonify(
            ok=True,
            filename=f.filename,
            headers=state.records.headers,
            row_count=state.records.row_count,
            status=state.session.status,
        )


@app.route("/api/records/info")
def records_info():
    return jsonify(
        loaded=state.records.is_loaded,
        filename=state.csv_filename,
        headers=state.records.headers,
        row_count=state.records.row_count,
    )


# ---------------------------------------------------------------------------
# Labels & preview
# ---------------------------------------------------------------------------

@app.route("/api/labels")
def get_labels():
    session = state.session
    with state.lock:
        pages = session.pages
        return jsonify(
            status=session.status,
            template=session.options.template.to_dict(),
            labelStyle=label_style(session.options),
            availableColumns=session.available_columns,
            rowIndices=session.row_indices,
            pages=[
                [
                    None if label is None else dict(label.to_dict(), text=label_text(label, session.options))
                    for label in page
                ]
                for page in pages
            ],
        )


@app.route("/api/pages/<int:page_idx>/preview.png")
def preview_page(page_idx):
    with state.lock:
        pages = state.session.pages
        if not pages:
            return jsonify(error=state.session.status or "No labels"), 400
        if page_idx < 0 or page_idx >= len(pages):
            return jsonify(error="Page index out of range"), 404
        png = render_page_png(pages[page_idx], state.session.options, app.config["PREVIEW_DPI"])
    return send_file(BytesIO(png), mimetype="image/png")


# ---------------------------------------------------------------------------
# Visual editor
# ---------------------------------------------------------------------------

@app.route("/api/editor")
def editor_info():
    return jsonify(_editor_info())


@app.route("/api/editor/mode", methods=["POST"])
def set_editor_mode():
    enabled = bool(_json_body().get("enabled"))
    with state.lock:
        state.session.editor.set_editor_mode(enabled)
        return jsonify(ok=True, editor=_editor_info(), status=state.session.status)


@app.route("/api/editor/select", methods=["POST"])
def select_field():
    data = _json_body()
    with state.lock:
        field = _field_from(data)
        selected = state.session.editor.select(field)
        return jsonify(ok=selected, editor=_editor_info())


@app.route("/api/editor/deselect", methods=["POST"])
def deselect_field():
    with state.lock:
        state.session.editor.deselect()
        return jsonify(ok=True, editor=_editor_info())


@app.route("/api/editor/close", methods=["POST"])
def close_editor():
    with state.lock:
        state.session.editor.close()
        return jsonify(ok=True, editor=_editor_info())


@app.route("/api/editor/drag-start", methods=["POST"])
def drag_start():
    data = _json_body()
    with state.lock:
        field = _field_from(data)
        try:
            box = Box.from_dict(data.get("box") or {})
        except (KeyError, TypeError, ValueError):
            raise EditSessionError("box must have numeric width and height")
        state.session.editor.start_drag(field, box, _pointer(data))
        return jsonify(ok=True, editor=_editor_info())


@app.route("/api/editor/drag-move", methods=["POST"])
def drag_move():
    data = _json_body()
    with state.lock:
        position = state.session.editor.move(_pointer(data))
        return jsonify(ok=True, position=position.to_dict())


@app.route("/api/editor/drag-end", methods=["POST"])
def drag_end():
    with state.lock:
        position = state.session.editor.end_drag()
        return jsonify(
            ok=position is not None,
            position=position.to_dict() if position is not None else None,
            editor=_editor_info(),
        )


@app.route("/api/editor/formatting", methods=["PUT"])
def update_formatting():
    data = _json_body()
    changes = {FORMATTING_KEYS[k]: v for k, v in data.items() if k in FORMATTING_KEYS}
    with state.lock:
        formatting = state.session.editor.update_formatting(**changes)
        return jsonify(ok=True, formatting=formatting.to_dict())


@app.route("/api/editor/formatting/save", methods=["POST"])
def save_formatting():
    with state.lock:
        state.session.editor.save_formatting()
        return jsonify(ok=True, editor=_editor_info())


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    logger.info("Label Sheet Designer Web - http://localhost:%s", Config.PORT)
    app.run(host="127.0.0.1", port=Config.PORT, debug=Config.DEBUG)


if __name__ == "__main__":
    main()
