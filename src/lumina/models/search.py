"""Search result models."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from PySide6.QtCore import Qt


class SearchResultRoles:
    """Named Qt UserRole offsets for SearchResult data in list models."""

    ID = Qt.ItemDataRole.UserRole
    DESCRIPTION = Qt.ItemDataRole.UserRole + 1
    ICON = Qt.ItemDataRole.UserRole + 2
    ACTION_LABEL = Qt.ItemDataRole.UserRole + 3
    SCORE = Qt.ItemDataRole.UserRole + 4


class ActionType(StrEnum):
    """What committing a result does."""

    OPEN_FILE = "OpenFile"
    OPEN_APP = "OpenApp"
    OPEN_URL = "OpenUrl"
    COPY_TO_CLIPBOARD = "CopyToClipboard"
    AI_RESPONSE = "AiResponse"

    @property
    def label(self) -> str:
        """Human label for badges, e.g. ``OpenFile`` -> ``Open File``."""
        return re.sub(r"(?<!^)([A-Z])", r" \1", self.value)

    @property
    def opens_path(self) -> bool:
        return self in (ActionType.OPEN_FILE, ActionType.OPEN_APP, ActionType.OPEN_URL)


class SearchResult(BaseModel):
    """A single actionable search result. Immutable once received."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    icon: str | None = None
    action_type: ActionType
    action_data: str
    score: float = 0.0

    @property
    def action_label(self) -> str:
        return self.action_type.label
