"""Configuration for Lumina."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    config_dir: Path = field(default_factory=lambda: Path.home() / ".config" / "lumina")
    debounce_ms: int = 300
    min_loading_ms: int = 200
    ai_sigil: str = "/"
    max_results: int = 10
    instance_name: str = "lumina-launcher"

    @property
    def settings_path(self) -> Path:
        return self.config_dir / "config.json"

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def min_loading_seconds(self) -> float:
        return self.min_loading_ms / 1000
