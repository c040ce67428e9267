import io
import json
from pathlib import Path

import httpx
import numpy as np
import pytest
import soundfile as sf

from voxlate.ui_web.app import create_app
from voxlate_core.config import Settings
from voxlate_core.errors import RecordingError
from voxlate_core.session import TranslatorSession

LANGUAGES = [
    {"language": "de", "name": "alemán"},
    {"language": "en", "name": "inglés"},
    {"language": "fr", "name": "francés"},
    {"language": "es", "name": "español"},
    {"language": "it", "name": "italiano"},
]


def make_wav(duration: float = 0.25, samplerate: int = 16000, channels: int = 1, subtype: str = "PCM_16") -> bytes:
    t = np.linspace(0, duration, int(duration * samplerate), endpoint=False)
    tone = 0.1 * np.sin(2 * np.pi * 440 * t)
    if channels > 1:
        tone = np.column_stack([tone] * channels)
    buffer = io.BytesIO()
    sf.write(buffer, tone, samplerate, format="WAV", subtype=subtype)
    return buffer.getvalue()


class FakeGoogle:
    """In-memory stand-in for the Translation and Speech REST endpoints."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.languages = list(LANGUAGES)
        self.translations = {"hola": "hello", "hello": "hola"}
        self.transcript: str | None = "hola"
        self.failures: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failures:
            return httpx.Response(self.failures[path], json={"error": {"code": self.failures[path], "message": "boom"}})
        if path == "/language/translate/v2/languages":
            return httpx.Response(200, json={"data": {"languages": self.languages}})
        if path == "/language/translate/v2":
            q = request.url.params["q"]
            text = self.translations.get(q, f"[{request.url.params['target']}] {q}")
            return httpx.Response(200, json={"data": {"translations": [{"translatedText": text}]}})
        if path == "/v1/speech:recognize":
            if self.transcript is None:
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"results": [{"alternatives": [{"transcript": self.transcript, "confidence": 0.93}]}]})
        return httpx.Response(404, json={"error": {"message": "not found"}})

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    @property
    def translate_calls(self) -> list[httpx.Request]:
        return self.calls("/language/translate/v2")

    @property
    def recognize_bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.calls("/v1/speech:recognize")]


class FakeRecorder:
    def __init__(self, path: Path | None = None, start_error=None, stop_error=None) -> None:
        self.path = path
        self.start_error = start_error
        self.stop_error = stop_error
        self.samplerate = 16000
        self.level = 0.0
        self.recording = False

    @property
    def is_recording(self) -> bool:
        return self.recording

    def start(self) -> None:
        if self.start_error:
            raise self.start_error
        self.recording = True

    def stop(self) -> Path:
        if not self.recording:
            raise RecordingError("No recording in progress")
        self.recording = False
        if self.stop_error:
            raise self.stop_error
        return self.path


@pytest.fixture()
def wav_bytes() -> bytes:
    return make_wav()


@pytest.fixture()
def wav_factory():
    return make_wav


@pytest.fixture()
def google(monkeypatch) -> FakeGoogle:
    fake = FakeGoogle()
    client = httpx.Client(transport=httpx.MockTransport(fake.handler))
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setattr("voxlate_core.services._client.get_http_client", lambda: client)
    yield fake
    client.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(source_language="es", target_language="en")


@pytest.fixture()
def recorder(tmp_path, wav_bytes) -> FakeRecorder:
    path = tmp_path / "recording.wav"
    path.write_bytes(wav_bytes)
    return FakeRecorder(path=path)


@pytest.fixture()
def session(settings, recorder) -> TranslatorSession:
    return TranslatorSession(settings, recorder=recorder)


@pytest.fixture()
def flask_app(monkeypatch, tmp_path, google, session):
    monkeypatch.setattr("voxlate_core.config.SETTINGS_PATH", tmp_path / "cfg" / "settings.json")
    app = create_app({"TESTING": True, "VOXLATE_SESSION": session})
    yield app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()
