"""Process-wide key-value settings kept outside the game core.

Sound/music toggles, the ads flag and the high score live here. Values
have registered defaults and are created on first access, so a fresh
install reads the defaults without any explicit setup.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from block_shock.game.events import GameEvents


logger = logging.getLogger(__name__)

SOUND_ENABLED = "isSoundEnabled"
MUSIC_ENABLED = "isMusicEnabled"
ADS_REMOVED = "adsRemoved"
HIGH_SCORE = "highScore"

DEFAULTS: Dict[str, Any] = {
    SOUND_ENABLED: True,
    MUSIC_ENABLED: True,
    ADS_REMOVED: False,
    HIGH_SCORE: 0,
}


class InMemorySettings:
    def __init__(self, defaults: Optional[Dict[str, Any]] = None) -> None:
        self.defaults: Dict[str, Any] = dict(DEFAULTS if defaults is None else defaults)
        self.values: Dict[str, Any] = {}

    def _get(self, key: str) -> Any:
        if key not in self.values:
            self.values[key] = self.defaults.get(key)
        return self.values[key]

    def _set(self, key: str, value: Any) -> None:
        self.values[key] = value

    def get_bool(self, key: str) -> bool:
        return bool(self._get(key))

    def set_bool(self, key: str, value: bool) -> None:
        self._set(key, bool(value))

    def get_int(self, key: str) -> int:
        value = self._get(key)
        return int(value) if value is not None else 0

    def set_int(self, key: str, value: int) -> None:
        self._set(key, int(value))


class JsonFileSettings(InMemorySettings):
    """Settings persisted to a small JSON file, written on every change."""

    def __init__(self, path: Union[str, Path], defaults: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(defaults)
        self.path = Path(path)
        self.values = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self.path)
            return {}
        return data

    def _set(self, key: str, value: Any) -> None:
        super()._set(key, value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(self.values, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self.path)


class HighScoreRecorder(GameEvents):
    """Keeps the stored high score in step with the running score."""

    def __init__(self, settings: InMemorySettings) -> None:
        self.settings = settings

    @property
    def high_score(self) -> int:
        return self.settings.get_int(HIGH_SCORE)

    def _offer(self, score: int) -> None:
        if score > self.high_score:
            self.settings.set_int(HIGH_SCORE, score)

    def on_scored(self, delta: int, score: int) -> None:
        self._offer(score)

    def on_game_over(self, final_score: int) -> None:
        self._offer(final_score)
