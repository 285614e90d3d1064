"""Pydantic models for Lumina."""

from lumina.models.search import ActionType, SearchResult, SearchResultRoles
from lumina.models.settings import (
    AI_SERVICES,
    DEFAULT_MODEL,
    SUGGESTED_MODELS,
    Settings,
)

__all__ = [
    "AI_SERVICES",
    "ActionType",
    "DEFAULT_MODEL",
    "SUGGESTED_MODELS",
    "SearchResult",
    "SearchResultRoles",
    "Settings",
]
