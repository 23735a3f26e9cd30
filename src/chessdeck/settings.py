"""User-configurable trainer settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class TrainerSettings:
    """All user-configurable settings."""

    # Sound
    sound_enabled: bool = True
    sound_volume: int = 80  # 0–100

    # Puzzle timings (milliseconds)
    opponent_reply_delay_ms: int = 500
    correct_feedback_ms: int = 1000
    incorrect_feedback_ms: int = 800
    revert_delay_ms: int = 0
    setup_move_delay_ms: int = 0


class _ConfigurableSoundPlayer(Protocol):
    def set_enabled(self, enabled: bool) -> None: ...

    def set_volume(self, volume: int) -> None: ...


def apply_sound_settings(player: _ConfigurableSoundPlayer, settings: TrainerSettings) -> None:
    player.set_enabled(settings.sound_enabled)
    player.set_volume(settings.sound_volume)
