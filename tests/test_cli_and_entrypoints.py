"""CLI and entrypoint tests."""

from __future__ import annotations

import runpy
from pathlib import Path

import pytest
import typer
from result import Err, Ok
from typer.testing import CliRunner

from lumina.cli import _do_open, _do_search, app, mask_secret
from lumina.config import Config
from lumina.models.settings import Settings


def _write_settings(config_dir: Path, settings: Settings) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "config.json").write_text(settings.model_dump_json(), encoding="utf-8")


def test_cli_serve_invokes_run_app(monkeypatch, tmp_path: Path) -> None:
    called: dict[str, object] = {}

    def fake_run_app(config, *, toggle=False, verbose=False):  # type: ignore[no-untyped-def]
        called["config"] = config
        called["toggle"] = toggle
        called["verbose"] = verbose

    monkeypatch.setattr("lumina.ui.app.run_app", fake_run_app)
    runner = CliRunner()

    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert called["toggle"] is False

    result = runner.invoke(app, ["--toggle", "--verbose", "--config-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert called["toggle"] is True
    assert called["verbose"] is True
    assert isinstance(called["config"], Config)
    assert called["config"].config_dir == tmp_path  # type: ignore[attr-defined]


def test_cli_search_invokes_asyncio_run(monkeypatch) -> None:
    called = {"count": 0}

    def fake_asyncio_run(coro) -> None:  # type: ignore[no-untyped-def]
        called["count"] += 1
        coro.close()

    monkeypatch.setattr("lumina.cli.asyncio.run", fake_asyncio_run)
    runner = CliRunner()
    result = runner.invoke(app, ["search", "notes"])
    assert result.exit_code == 0
    assert called["count"] == 1


@pytest.mark.asyncio
async def test_do_search_prints_ranked_results(capsys, tmp_path: Path) -> None:
    data = tmp_path / "data"
    data.mkdir()
    (data / "alpha.txt").write_text("", encoding="utf-8")
    config = Config(config_dir=tmp_path / "cfg")
    _write_settings(config.config_dir, Settings(search_directories=[str(data)]))

    await _do_search(config, "alpha")
    out = capsys.readouterr().out
    assert "📄 alpha.txt  [Open File]" in out
    assert str(data / "alpha.txt") in out

    await _do_search(config, "2+2")
    assert "🧮 2+2 = 4  [Copy To Clipboard]" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_do_search_reports_failure(monkeypatch, capsys, tmp_path: Path) -> None:
    async def failing_search(self, query: str):  # type: ignore[no-untyped-def]
        return Err("Search failed: disk")

    monkeypatch.setattr("lumina.services.search_service.SearchService.search", failing_search)
    config = Config(config_dir=tmp_path / "cfg")
    with pytest.raises(typer.Exit):
        await _do_search(config, "anything")
    assert "Search failed: disk" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_do_open_runs_top_result_through_execute_action(
    monkeypatch, capsys, tmp_path: Path
) -> None:
    data = tmp_path / "data"
    data.mkdir()
    (data / "alpha.txt").write_text("", encoding="utf-8")
    config = Config(config_dir=tmp_path / "cfg")
    _write_settings(config.config_dir, Settings(search_directories=[str(data)]))
    opened: list[str] = []

    async def fake_open_path(self, path: str):  # type: ignore[no-untyped-def]
        opened.append(path)
        return Ok(None)

    monkeypatch.setattr(
        "lumina.services.action_service.ActionService.open_path", fake_open_path
    )

    await _do_open(config, "alpha")
    assert opened == [str(data / "alpha.txt")]
    assert "Opened: alpha.txt" in capsys.readouterr().out

    with pytest.raises(typer.Exit):
        await _do_open(config, "zzz-nothing")
    assert "No results" in capsys.readouterr().err


def test_cli_config_masks_keys(tmp_path: Path) -> None:
    _write_settings(
        tmp_path,
        Settings(openrouter_api_key="sk-or-secret-1234", search_directories=["/srv/files"]),
    )
    runner = CliRunner()
    result = runner.invoke(app, ["config", "--config-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert str(tmp_path / "config.json") in result.output
    assert "****1234" in result.output
    assert "sk-or-secret" not in result.output
    assert "openai_api_key:     (not set)" in result.output
    assert "- /srv/files" in result.output


def test_mask_secret() -> None:
    assert mask_secret(None) == "(not set)"
    assert mask_secret("") == "(not set)"
    assert mask_secret("abc") == "****"
    assert mask_secret("sk-abcdef") == "****cdef"


def test_python_module_entrypoint_invokes_cli_app(monkeypatch) -> None:
    called = {"count": 0}

    def fake_app() -> None:
        called["count"] += 1

    monkeypatch.setattr("lumina.cli.app", fake_app)
    runpy.run_module("lumina.__main__", run_name="__main__")
    assert called["count"] == 1
