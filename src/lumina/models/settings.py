"""User-editable launcher settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_MODEL = "anthropic/claude-3.5-sonnet"

SUGGESTED_MODELS: tuple[tuple[str, str], ...] = (
    ("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet"),
    ("openai/gpt-4o", "GPT-4o"),
    ("google/gemini-pro-1.5", "Gemini Pro 1.5"),
    ("meta-llama/llama-3.2-90b-vision-instruct", "Llama 3.2 90B"),
    ("google/gemma-2-9b-it:free", "Gemma 2 9B"),
)

AI_SERVICES: tuple[str, ...] = ("openrouter", "openai")


def _default_search_directories() -> list[str]:
    home = Path.home()
    return [
        str(home),
        "/usr/share/applications",
        "/var/lib/flatpak/exports/share/applications",
        str(home / ".local" / "share" / "applications"),
    ]


class Settings(BaseModel):
    """Persisted settings record.

    The session controller passes this through untouched; only the search
    and AI services read individual fields.
    """

    ai_service: str = "openrouter"
    openrouter_api_key: str | None = None
    openai_api_key: str | None = None
    default_model: str = DEFAULT_MODEL
    search_directories: list[str] = Field(default_factory=_default_search_directories)

    def api_key(self) -> str | None:
        """Return the key configured for the selected AI service, if any."""
        if self.ai_service == "openrouter":
            return self.openrouter_api_key or None
        if self.ai_service == "openai":
            return self.openai_api_key or None
        return None
