"""Trainer sound cues played through Qt multimedia."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QUrl
from PyQt6.QtMultimedia import QSoundEffect

from chessdeck.trainer.interfaces import (
    SOUND_CAPTURE,
    SOUND_FAILURE,
    SOUND_MOVE,
    ISoundPlayer,
)

_LOGGER = logging.getLogger(__name__)

_PACKAGE_SOUNDS_DIR = Path(__file__).resolve().parents[1] / "assets" / "sounds"
_CHECKOUT_SOUNDS_DIR = Path(__file__).resolve().parents[3] / "assets" / "sounds"


def default_sounds_dir() -> Path:
    """Directory holding ``move.wav``, ``capture.wav`` and ``sad.wav``.

    WAVs shipped inside the package (``chessdeck/assets/sounds``) win over a
    source checkout's top-level ``assets/sounds``.  Neither ships with the
    library itself; drop the files in place or pass ``sounds_dir`` to
    :class:`SoundPlayer`.
    """
    if _PACKAGE_SOUNDS_DIR.is_dir():
        return _PACKAGE_SOUNDS_DIR
    return _CHECKOUT_SOUNDS_DIR


class SoundPlayer(ISoundPlayer):
    """Plays trainer sound cues (WAV via QSoundEffect).

    Each cue is pre-loaded once, so playback is immediate.  A new cue
    always interrupts the previous one.  Cues whose file is missing are
    skipped silently after a warning at load time.
    """

    _FILES: dict[str, str] = {
        SOUND_MOVE: "move.wav",
        SOUND_CAPTURE: "capture.wav",
        SOUND_FAILURE: "sad.wav",
    }

    def __init__(self, sounds_dir: Path | None = None) -> None:
        self._enabled = True
        self._volume = 0.8
        self._effects: dict[str, QSoundEffect] = {}
        self._current: QSoundEffect | None = None

        directory = sounds_dir or default_sounds_dir()
        for name, filename in self._FILES.items():
            path = directory / filename
            if not path.is_file():
                _LOGGER.warning("Sound file not found: %s", path)
                continue
            effect = QSoundEffect()
            effect.setSource(QUrl.fromLocalFile(str(path)))
            effect.setVolume(self._volume)
            self._effects[name] = effect

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def loaded(self) -> frozenset[str]:
        """Cue names that have a sound file behind them."""
        return frozenset(self._effects)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def set_volume(self, volume: int) -> None:
        """Set volume in range 0–100."""
        self._volume = max(0, min(100, volume)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def play(self, name: str) -> None:
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            return
        if self._current is not None and self._current.isPlaying():
            self._current.stop()
        self._current = effect
        effect.play()
