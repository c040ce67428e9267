"""Unit tests for AudioRecorder with a stand-in sounddevice module."""

from __future__ import annotations

import numpy as np
import pytest
import soundfile as sf

from voxlate_core.capture import AudioRecorder
from voxlate_core.config import Settings
from voxlate_core.errors import PermissionDeniedError, RecordingError
from voxlate_core.session import TranslatorSession


class FakePortAudioError(Exception):
    pass


class FakeStream:
    def __init__(self, samplerate, channels, dtype, callback) -> None:
        self.samplerate = samplerate
        self.channels = channels
        self.dtype = dtype
        self.callback = callback
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.started = False

    def close(self) -> None:
        self.closed = True


class FakeSoundDevice:
    PortAudioError = FakePortAudioError

    def __init__(self, deny: bool = False) -> None:
        self.deny = deny
        self.streams: list[FakeStream] = []

    def check_input_settings(self, **_kwargs) -> None:
        if self.deny:
            raise FakePortAudioError("Error querying device -1")

    def InputStream(self, **kwargs) -> FakeStream:
        stream = FakeStream(**kwargs)
        self.streams.append(stream)
        return stream


@pytest.fixture()
def sounddevice(monkeypatch) -> FakeSoundDevice:
    fake = FakeSoundDevice()
    monkeypatch.setattr("voxlate_core.capture._load_sounddevice", lambda: fake)
    return fake


def _feed(stream: FakeStream, samples: np.ndarray) -> None:
    stream.callback(samples.reshape(-1, 1), len(samples), None, None)


def test_records_to_16bit_wav(sounddevice, tmp_path):
    recorder = AudioRecorder(directory=tmp_path)

    recorder.start()
    assert recorder.is_recording
    (stream,) = sounddevice.streams
    assert (stream.samplerate, stream.channels, stream.dtype) == (16000, 1, "int16")
    _feed(stream, np.full(1600, 16384, dtype=np.int16))
    _feed(stream, np.zeros(1600, dtype=np.int16))
    path = recorder.stop()

    assert not recorder.is_recording
    assert stream.closed
    assert path.parent == tmp_path
    with sf.SoundFile(str(path)) as data:
        assert data.samplerate == 16000
        assert data.subtype == "PCM_16"
        assert len(data) == 3200


def test_level_tracks_latest_block(sounddevice, tmp_path):
    recorder = AudioRecorder(directory=tmp_path)
    recorder.start()

    _feed(sounddevice.streams[0], np.array([0, -32768, 100], dtype=np.int16))

    assert recorder.level == pytest.approx(1.0)
    recorder.stop()
    assert recorder.level == 0.0


def test_denied_microphone_raises_permission_error(sounddevice):
    sounddevice.deny = True
    recorder = AudioRecorder()

    with pytest.raises(PermissionDeniedError):
        recorder.start()
    assert not recorder.is_recording
    assert sounddevice.streams == []


def test_missing_portaudio_is_a_permission_error(monkeypatch):
    def missing():
        raise OSError("PortAudio library not found")

    monkeypatch.setattr("voxlate_core.capture._load_sounddevice", missing)

    with pytest.raises(PermissionDeniedError):
        AudioRecorder().check_permission()


def test_start_while_recording_is_rejected(sounddevice):
    recorder = AudioRecorder()
    recorder.start()

    with pytest.raises(RecordingError):
        recorder.start()
    assert len(sounddevice.streams) == 1


def test_stop_without_audio_still_closes_stream(sounddevice):
    recorder = AudioRecorder()
    recorder.start()

    with pytest.raises(RecordingError, match="No audio"):
        recorder.stop()
    assert sounddevice.streams[0].closed
    assert not recorder.is_recording


def test_stop_while_idle_is_rejected():
    with pytest.raises(RecordingError):
        AudioRecorder().stop()


def test_unwritable_directory_is_a_recording_error(sounddevice, tmp_path):
    recorder = AudioRecorder(directory=tmp_path / "gone")
    recorder.start()
    _feed(sounddevice.streams[0], np.zeros(160, dtype=np.int16))

    with pytest.raises(RecordingError, match="Failed to save"):
        recorder.stop()
    assert not recorder.is_recording


def test_failed_write_removes_partial_file(sounddevice, tmp_path, monkeypatch):
    def broken_write(*_args, **_kwargs):
        raise RuntimeError("Error opening file: disk full")

    monkeypatch.setattr("voxlate_core.capture.sf.write", broken_write)
    recorder = AudioRecorder(directory=tmp_path)
    recorder.start()
    _feed(sounddevice.streams[0], np.zeros(160, dtype=np.int16))

    with pytest.raises(RecordingError):
        recorder.stop()
    assert list(tmp_path.iterdir()) == []


def test_session_reports_save_failure(sounddevice, tmp_path):
    recorder = AudioRecorder(directory=tmp_path / "gone")
    session = TranslatorSession(Settings(source_language="es"), recorder=recorder)
    assert session.start_recording().ok
    _feed(sounddevice.streams[0], np.zeros(160, dtype=np.int16))

    result = session.stop_recording()

    assert isinstance(result.error, RecordingError)
    assert result.stage == "stop_capture"
    assert session.state.is_recording is False
    assert session.state.busy is False
    assert session.state.status == RecordingError.status
