from __future__ import annotations

import json
import os
import textwrap
import uuid
from pathlib import Path

import pytest

import md_highlight.engine as engine_module
from helpers import plain_text
from md_highlight.cli import cli
from md_highlight.renderer import render


def _write(tmp_path: Path, filename: str, content: str) -> Path:
    path = tmp_path / filename
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _error_text(result) -> str:
    """Return combined stdout and exception text for assertions."""
    return f"{result.output}{result.exception}"


def test_cli_prints_markup(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(
        tmp_path,
        "doc.md",
        """
        # Notes
        Some **bold** text.
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output == render(target.read_text(encoding="utf-8"))
    assert result.output.startswith('<span class="md-header md-header-1">')


def test_cli_writes_output_file(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "- item\n")
    destination = tmp_path / "doc.html"

    result = cli_runner.invoke(cli, [str(target), "--output", str(destination)])

    assert result.exit_code == 0
    assert result.output == ""
    assert destination.read_text(encoding="utf-8") == render("- item\n")
    assert not list(tmp_path.glob("*.tmp"))


def test_cli_narrows_to_viewport(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    lines = [f"line {index}" for index in range(40)]
    target = tmp_path / "long.md"
    target.write_text("\n".join(lines), encoding="utf-8")

    result = cli_runner.invoke(
        cli,
        [
            str(target),
            "--first-line",
            "10",
            "--last-line",
            "12",
            "--buffer",
            "1",
            "--max-lines",
            "20",
        ],
    )

    assert result.exit_code == 0
    assert plain_text(result.output) == "\n".join(lines[9:14])


def test_cli_reads_config_from_pyproject(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.md-highlight]
        max_lines_for_full_highlight = 5
        visible_lines_buffer = 0
        """,
    )
    target = tmp_path / "doc.md"
    target.write_text("\n".join(f"line {index}" for index in range(10)), encoding="utf-8")

    result = cli_runner.invoke(cli, [str(target), "--first-line", "3", "--last-line", "3"])

    assert result.exit_code == 0
    assert plain_text(result.output) == "line 3"


def test_cli_prints_stats(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# Title\n")

    result = cli_runner.invoke(cli, [str(target), "--stats"])

    assert result.exit_code == 0
    assert '"totalHighlights": 1' in result.output
    stats_line = next(line for line in result.output.splitlines() if "totalHighlights" in line)
    assert json.loads(stats_line[stats_line.index("{") :])["cacheSize"] == 1


def test_cli_requires_both_viewport_bounds(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# Title\n")

    result = cli_runner.invoke(cli, [str(target), "--first-line", "3"])

    assert result.exit_code == 2
    assert "must be given together" in result.output


def test_cli_rejects_reversed_viewport(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# Title\n")

    result = cli_runner.invoke(cli, [str(target), "--first-line", "5", "--last-line", "2"])

    assert result.exit_code == 2
    assert "Viewport must satisfy" in result.output


def test_cli_rejects_invalid_config(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.md-highlight]
        max_cache_size = 0
        """,
    )
    target = _write(tmp_path, "doc.md", "# Title\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 2
    assert "max_cache_size" in result.output


def test_cli_rejects_negative_buffer(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# Title\n")

    result = cli_runner.invoke(cli, [str(target), "--buffer", "-1"])

    assert result.exit_code == 2
    assert "visible_lines_buffer" in result.output


def test_cli_rejects_non_markdown_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "notes.txt", "# Heading\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "not a Markdown file" in result.output


def test_path_traversal_prevented(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    outside = tmp_path.parent / f"outside-{uuid.uuid4().hex}.md"
    outside.write_text("# Outside\n", encoding="utf-8")

    try:
        result = cli_runner.invoke(cli, [str(outside)])
        assert result.exit_code != 0
        assert "outside of the working directory" in result.output
    finally:
        outside.unlink(missing_ok=True)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="Symlink support is required")
def test_symlink_rejected(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = _write(tmp_path, "source.md", "# Heading\n")
    link = tmp_path / "alias.md"
    try:
        os.symlink(source, link, target_is_directory=False)
    except OSError as error:  # pragma: no cover - platform dependent
        pytest.skip(f"Unable to create symlink: {error}")

    result = cli_runner.invoke(cli, [str(link)])

    assert result.exit_code != 0
    assert "Symlinks" in result.output


def test_file_size_limit_enforced(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MD_HIGHLIGHT_MAX_FILE_SIZE", "10")
    target = tmp_path / "large.md"
    target.write_text("X" * 20, encoding="utf-8")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "maximum allowed size" in _error_text(result)


def test_invalid_size_env_var(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MD_HIGHLIGHT_MAX_FILE_SIZE", "huge")
    target = _write(tmp_path, "doc.md", "# Title\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "MD_HIGHLIGHT_MAX_FILE_SIZE" in _error_text(result)


def test_invalid_utf8_handling(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "broken.md"
    target.write_bytes(b"\xff\xfe# Heading\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code != 0
    assert "Invalid UTF-8" in _error_text(result)


def test_cli_reports_failed_pass(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = _write(tmp_path, "doc.md", "# Title\n")

    def _explode(content, registry):
        raise RuntimeError("render boom")

    monkeypatch.setattr(engine_module, "render", _explode)

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert "Highlighting failed" in result.output
