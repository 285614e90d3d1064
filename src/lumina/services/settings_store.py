"""JSON persistence for the settings record."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError
from result import Err, Ok, Result

from lumina.models.settings import Settings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Reads and writes ``config.json``; a missing file means defaults.

    The last successfully loaded or saved record is cached and served by
    :meth:`current` to services that need it on every call.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._current = Settings()

    @property
    def path(self) -> Path:
        return self._path

    def current(self) -> Settings:
        return self._current

    async def load(self) -> Result[Settings, str]:
        if not self._path.exists():
            self._current = Settings()
            return Ok(self._current)
        try:
            raw = self._path.read_text(encoding="utf-8")
            settings = Settings.model_validate_json(raw)
        except (OSError, ValidationError) as exc:
            return Err(f"Could not read {self._path}: {exc}")
        self._current = settings
        return Ok(settings)

    async def save(self, settings: Settings) -> Result[None, str]:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            return Err(f"Could not write {self._path}: {exc}")
        self._current = settings
        logger.info("Saved settings to %s", self._path)
        return Ok(None)
