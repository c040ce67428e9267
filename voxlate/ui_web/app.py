"""Flask JSON front-end for a local voxlate session."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from voxlate_core import Settings, TranslatorSession, load_settings, save_settings
from voxlate_core.config import coerce_optional_str
from voxlate_core.errors import VoxlateError
from voxlate_core.pipeline import StageResult
from voxlate_core.services import ALLOWED_MIME_TYPES

LOGGER = logging.getLogger(__name__)

API = Blueprint("api", __name__, url_prefix="/api")

ERROR_STATUS = {
    "busy": 409,
    "recording_failed": 409,
    "permission_denied": 403,
    "invalid_audio": 400,
    "empty_response": 422,
    "service_unavailable": 502,
    "not_configured": 500,
}


def create_app(config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.update(
        MAX_CONTENT_LENGTH=20 * 1024 * 1024,  # generous safety limit (~20 MB)
        VOXLATE_LOAD_CATALOG=True,
    )
    if config:
        app.config.update(config)

    app.register_blueprint(API)

    with app.app_context():
        session = current_app.config.get("VOXLATE_SESSION")
        if not isinstance(session, TranslatorSession):
            session = TranslatorSession(load_settings())
            current_app.config["VOXLATE_SESSION"] = session
        if current_app.config["VOXLATE_LOAD_CATALOG"]:
            session.load_catalog()
        LOGGER.info("Translator session ready (%s -> %s)", session.state.source_lang, session.state.target_lang)

    return app


@API.get("/health")
def health() -> Response:
    return jsonify({"ok": True})


@API.get("/state")
def api_state() -> Response:
    session = current_session()
    return jsonify(state_payload(session))


@API.get("/languages")
def api_languages() -> Response:
    session = current_session()
    return jsonify({"languages": [entry.to_mapping() for entry in session.state.catalog]})


@API.post("/text")
def api_set_text() -> Response:
    payload = request.get_json(silent=True) or {}
    session = current_session()
    session.set_text(str(payload.get("text") or ""))
    return jsonify(state_payload(session))


@API.post("/languages/select")
def api_select_languages() -> Response:
    payload = request.get_json(silent=True) or {}
    session = current_session()
    result = session.select_languages(
        source=coerce_optional_str(payload.get("source")),
        target=coerce_optional_str(payload.get("target")),
    )
    return result_response(session, result)


@API.post("/translate")
def api_translate() -> Response:
    payload = request.get_json(silent=True) or {}
    session = current_session()
    if "text" in payload:
        session.set_text(str(payload.get("text") or ""))
    if payload.get("source") or payload.get("target"):
        selected = session.select_languages(
            source=coerce_optional_str(payload.get("source")),
            target=coerce_optional_str(payload.get("target")),
        )
        if not selected.ok:
            return result_response(session, selected)
    return result_response(session, session.translate())


@API.post("/swap")
def api_swap() -> Response:
    session = current_session()
    return result_response(session, session.swap_languages())


@API.post("/record/start")
def api_record_start() -> Response:
    session = current_session()
    return result_response(session, session.start_recording())


@API.post("/record/stop")
def api_record_stop() -> Response:
    session = current_session()
    return result_response(session, session.stop_recording())


@API.post("/transcribe")
def api_transcribe() -> Response:
    audio_file = request.files.get("audio")
    if audio_file is None:
        return json_error("missing_audio", "Missing audio upload", 400)

    mimetype = _normalize_mime_type(audio_file.mimetype)
    if mimetype not in ALLOWED_MIME_TYPES:
        return json_error("unsupported_type", f"Unsupported audio type: {mimetype}", 400)

    raw_data = audio_file.read()
    if not raw_data:
        return json_error("empty_audio", "Uploaded audio file is empty", 400)

    session = current_session()
    return result_response(session, session.transcribe_audio(raw_data, mimetype))


@API.post("/speak")
def api_speak() -> Response:
    session = current_session()
    handle = session.speak()
    payload = state_payload(session)
    payload["speaking"] = handle is not None
    return jsonify(payload)


@API.post("/speak/stop")
def api_speak_stop() -> Response:
    session = current_session()
    payload = state_payload(session)
    payload["cancelled"] = session.stop_speaking()
    return jsonify(payload)


@API.get("/settings")
def api_get_settings() -> Response:
    session = current_session()
    return jsonify(session.settings.to_mapping())


@API.post("/settings")
def api_update_settings() -> Response:
    payload = request.get_json(silent=True) or {}
    session = current_session()
    merged = session.settings.to_mapping()
    merged.update({key: value for key, value in payload.items() if key in merged})
    updated = Settings.from_mapping(merged)
    save_settings(updated)
    session.apply_settings(updated)
    return jsonify(updated.to_mapping())


def current_session() -> TranslatorSession:
    session = current_app.config.get("VOXLATE_SESSION")
    if isinstance(session, TranslatorSession):
        return session
    session = TranslatorSession(load_settings())
    current_app.config["VOXLATE_SESSION"] = session
    return session


def state_payload(session: TranslatorSession) -> dict[str, Any]:
    payload = session.state.to_mapping()
    payload["level"] = session.recorder.level
    return payload


def result_response(session: TranslatorSession, result: StageResult) -> Response:
    if result.ok:
        return jsonify(state_payload(session))
    return voxlate_error(session, result.error)


def voxlate_error(session: TranslatorSession, error: VoxlateError) -> Response:
    payload = {
        "error": {"code": error.code, "message": error.status, "detail": str(error)},
        "state": state_payload(session),
    }
    return jsonify(payload), ERROR_STATUS.get(error.code, 500)


def json_error(code: str, message: str, status: int) -> Response:
    payload = {"error": {"code": code, "message": message}}
    return jsonify(payload), status


@API.errorhandler(Exception)
def handle_unexpected(exc: Exception) -> Response:
    if isinstance(exc, HTTPException):
        return exc
    LOGGER.exception("Unhandled error while serving %s", request.path)
    return json_error("internal_error", str(exc), 500)


def _normalize_mime_type(value: Any) -> str:
    mimetype = str(value or "").strip().lower()
    if not mimetype:
        return ""
    if ";" in mimetype:
        mimetype = mimetype.split(";", 1)[0].strip()
    return mimetype


if __name__ == "__main__":  # pragma: no cover - manual execution
    logging.basicConfig(level=logging.INFO)
    app = create_app({"ENV": "production"})
    app.run(host="127.0.0.1", port=8080, threaded=True)
