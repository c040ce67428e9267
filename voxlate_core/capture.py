"""Microphone capture into temporary WAV files."""

from __future__ import annotations

import logging
import tempfile
import threading
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf

from .errors import PermissionDeniedError, RecordingError

LOGGER = logging.getLogger(__name__)

SAMPLE_DTYPE = "int16"
FULL_SCALE = 32768.0


def _load_sounddevice() -> Any:
    # Importing sounddevice fails with OSError when PortAudio is missing.
    import sounddevice

    return sounddevice


class AudioRecorder:
    """Records 16-bit PCM audio from the default input device."""

    def __init__(
        self,
        samplerate: int = 16000,
        channels: int = 1,
        directory: Path | None = None,
    ) -> None:
        self.samplerate = samplerate
        self.channels = channels
        self.directory = directory
        self.stream: Any = None
        self.level = 0.0
        self._frames: list[np.ndarray] = []
        self._frames_lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self.stream is not None

    def check_permission(self) -> None:
        """Raise :class:`PermissionDeniedError` unless the input device can be opened."""
        try:
            sd = _load_sounddevice()
        except OSError as exc:
            raise PermissionDeniedError(f"Audio input is unavailable: {exc}") from exc
        try:
            sd.check_input_settings(samplerate=self.samplerate, channels=self.channels, dtype=SAMPLE_DTYPE)
        except (sd.PortAudioError, ValueError) as exc:
            raise PermissionDeniedError(f"Microphone cannot be opened: {exc}") from exc

    def start(self) -> None:
        if self.is_recording:
            raise RecordingError("A recording is already in progress")
        self.check_permission()
        sd = _load_sounddevice()

        with self._frames_lock:
            self._frames.clear()
        self.level = 0.0
        try:
            stream = sd.InputStream(
                samplerate=self.samplerate,
                channels=self.channels,
                dtype=SAMPLE_DTYPE,
                callback=self._callback,
            )
            stream.start()
        except sd.PortAudioError as exc:
            raise RecordingError(f"Failed to start recording: {exc}") from exc
        self.stream = stream
        LOGGER.info("Recording started (%d Hz, %d channel(s))", self.samplerate, self.channels)

    def stop(self) -> Path:
        """Finish the capture and return the path of the written WAV file."""
        if not self.is_recording:
            raise RecordingError("No recording in progress")

        stream, self.stream = self.stream, None
        self.level = 0.0
        try:
            stream.stop()
        except Exception as exc:
            raise RecordingError(f"Failed to stop recording: {exc}") from exc
        finally:
            stream.close()

        with self._frames_lock:
            frames, self._frames = self._frames, []
        if not frames:
            raise RecordingError("No audio was captured")
        audio = np.concatenate(frames, axis=0)

        path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(suffix=".wav", delete=False, dir=self.directory) as tmp:
                path = Path(tmp.name)
            sf.write(str(path), audio, self.samplerate, subtype="PCM_16")
        except (OSError, RuntimeError) as exc:
            if path is not None:
                path.unlink(missing_ok=True)
            raise RecordingError(f"Failed to save recording: {exc}") from exc
        LOGGER.info("Recording saved to %s (%.2fs)", path, len(audio) / self.samplerate)
        return path

    def _callback(self, indata: np.ndarray, _frames: int, _time_info: Any, status: Any) -> None:
        if status:
            LOGGER.warning("Audio callback status: %s", status)
        with self._frames_lock:
            self._frames.append(indata.copy())
        self.level = float(np.max(np.abs(indata.astype(np.int32)))) / FULL_SCALE if len(indata) else 0.0


__all__ = ["AudioRecorder"]
