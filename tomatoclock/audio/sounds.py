"""Completion tones: synthesized with numpy, cached as WAV, played by Qt.

``work_complete`` rises C5 to E5, ``break_complete`` goes E5, C5, E5,
and ``test`` is a plain A4 for the settings test button.  Every tone
lasts half a second.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR

log = logging.getLogger(__name__)

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SAMPLE_RATE = 44100
TONE_SECONDS = 0.5
PEAK_GAIN = 0.3

C5, E5, A4 = 523.25, 659.25, 440.0

# name -> [(offset in seconds, frequency in Hz), ...]
TONES: dict[str, list[tuple[float, float]]] = {
    "work_complete": [(0.0, C5), (0.15, E5)],
    "break_complete": [(0.0, E5), (0.1, C5), (0.2, E5)],
    "test": [(0.0, A4)],
}
SOUND_NAMES = tuple(TONES)


# ── synthesis ────────────────────────────────────────────────────────────


def _envelope(length: int) -> np.ndarray:
    """10 ms linear attack to PEAK_GAIN, exponential fall to 0.01."""
    attack = min(int(SAMPLE_RATE * 0.01), length)
    env = np.empty(length, dtype=np.float64)
    env[:attack] = np.linspace(0.0, PEAK_GAIN, attack, endpoint=False)
    tail = length - attack
    if tail > 0:
        env[attack:] = PEAK_GAIN * np.power(0.01 / PEAK_GAIN, np.linspace(0.0, 1.0, tail))
    return env


def _stepped_sine(steps: list[tuple[float, float]]) -> np.ndarray:
    """A sine that jumps frequency at each ``(offset, hz)`` step.

    Phase is accumulated sample by sample so the jumps don't click.
    """
    n = int(SAMPLE_RATE * TONE_SECONDS)
    freqs = np.empty(n, dtype=np.float64)
    bounds = [int(SAMPLE_RATE * offset) for offset, _ in steps] + [n]
    for (_, hz), begin, end in zip(steps, bounds, bounds[1:]):
        freqs[begin:end] = hz
    phase = 2 * np.pi * np.cumsum(freqs) / SAMPLE_RATE
    return np.sin(phase) * _envelope(n)


def _pcm16_wav(samples: np.ndarray) -> bytes:
    """Mono 16-bit WAV from float samples in [-1, 1]."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(SAMPLE_RATE)
        wav.writeframes(pcm.tobytes())
    return out.getvalue()


def render(name: str) -> bytes:
    """WAV bytes for the tone called *name*."""
    return _pcm16_wav(_stepped_sine(TONES[name]))


# ── playback ─────────────────────────────────────────────────────────────


class SoundManager(QObject):
    """Writes the tones to *sounds_dir* once and plays them on request."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._dir = sounds_dir or SOUNDS_DIR
        self._effects: dict = {}
        for name in SOUND_NAMES:
            self._cache(name)
        self._load_effects()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def path_for(self, name: str) -> Path:
        return self._dir / f"{name}.wav"

    def play(self, name: str) -> None:
        """Unknown names and a disabled manager are silently ignored."""
        effect = self._effects.get(name) if self._enabled else None
        if effect is not None:
            effect.play()

    def _cache(self, name: str) -> None:
        path = self.path_for(name)
        if path.exists():
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(render(name))
        log.debug("Wrote %s", path)

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(self.path_for(name))))
            self._effects[name] = effect
