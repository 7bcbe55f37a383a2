"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from agent_log_scanner import __version__
from agent_log_scanner.cli import main
from agent_log_scanner.parser import summary_id_for

PROJECT_ID = "-Users-testuser-dev-myapp"

SUGGESTIONS = json.dumps([
    {
        "category": "workflow",
        "target": "global",
        "suggestion": "- Read files before editing them",
        "reasoning": "An edit failed on stale content",
        "evidence": "old_string not found",
    },
])


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    monkeypatch.setenv("AGENT_LOG_SCANNER_CACHE_PATH", str(tmp_path / "cache"))
    monkeypatch.setenv("AGENT_LOG_SCANNER_GLOBAL_NOTES", str(tmp_path / "global" / "CLAUDE.md"))
    monkeypatch.delenv("AGENT_LOG_SCANNER_PAGE_SIZE", raising=False)


@pytest.fixture
def session_file(tmp_projects_dir):
    return tmp_projects_dir / PROJECT_ID / "session-001.jsonl"


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


class TestList:

    def test_lists_newest_first(self, runner, tmp_projects_dir):
        result = runner.invoke(main, ["--root", str(tmp_projects_dir), "list"])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("2025-01-21 09:00 | myapp | 1 turns |")
        assert lines[1].startswith("2025-01-20 10:00 | myapp | 5 turns |")
        assert lines[2].startswith("2025-01-19 08:00 | widget |")

    def test_project_filter(self, runner, tmp_projects_dir):
        result = runner.invoke(main, ["--root", str(tmp_projects_dir), "list", "--project", "widget"])
        assert result.exit_code == 0
        assert "session-003.jsonl" in result.output
        assert "myapp" not in result.output

    def test_paging(self, runner, tmp_projects_dir, monkeypatch):
        monkeypatch.setenv("AGENT_LOG_SCANNER_PAGE_SIZE", "1")

        result = runner.invoke(main, ["--root", str(tmp_projects_dir), "list"])
        assert result.exit_code == 0
        assert "session-003.jsonl" in result.output
        assert "2 more files not loaded" in result.output

        result = runner.invoke(main, ["--root", str(tmp_projects_dir), "list", "--pages", "2"])
        assert "1 more files not loaded" in result.output

        result = runner.invoke(main, ["--root", str(tmp_projects_dir), "list", "--all"])
        assert "more files" not in result.output
        assert result.output.count(".jsonl") == 3

    def test_empty_root(self, runner, tmp_path):
        result = runner.invoke(main, ["--root", str(tmp_path / "nothing"), "list"])
        assert result.exit_code == 0
        assert "No sessions found." in result.output

    def test_discovery_failure(self, runner, tmp_projects_dir):
        with patch("agent_log_scanner.catalog.discover_log_files", side_effect=PermissionError("denied")):
            result = runner.invoke(main, ["--root", str(tmp_projects_dir), "list"])
        assert result.exit_code == 1
        assert "denied" in result.output


class TestShowAndStats:

    def test_show_text(self, runner, session_file):
        result = runner.invoke(main, ["show", str(session_file)])
        assert result.exit_code == 0
        assert "[Human]\nHelp me refactor the auth module" in result.output
        assert "[Tool: Edit]" in result.output

    def test_show_json(self, runner, session_file):
        result = runner.invoke(main, ["show", str(session_file), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["session"]["project_name"] == "myapp"
        assert data["session"]["message_count"] == 8

    def test_show_markdown(self, runner, session_file):
        result = runner.invoke(main, ["show", str(session_file), "--format", "md"])
        assert result.exit_code == 0
        assert result.output.startswith("# myapp")

    def test_show_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["show", str(tmp_path / "gone.jsonl")])
        assert result.exit_code == 1
        assert "Failed to load session" in result.output

    def test_show_uses_catalog_session_id(self, runner, session_file):
        result = runner.invoke(main, ["show", str(session_file), "--format", "json"])
        assert json.loads(result.output)["session"]["id"] == summary_id_for(session_file.resolve())

    def test_show_invalid_utf8(self, runner, session_file):
        session_file.write_bytes(b"\xff\xfe\xfd")
        result = runner.invoke(main, ["show", str(session_file)])
        assert result.exit_code == 1
        assert "Failed to load session" in result.output

    def test_stats(self, runner, session_file):
        result = runner.invoke(main, ["stats", str(session_file)])
        assert result.exit_code == 0
        assert "Turns:           5" in result.output
        assert "Tool calls:      3" in result.output
        assert "Errors:          1" in result.output
        assert "Duration:        5m" in result.output
        assert "  Read: 1" in result.output

    def test_prompt(self, runner, session_file, tmp_path):
        global_notes = tmp_path / "global" / "CLAUDE.md"
        global_notes.parent.mkdir(parents=True)
        global_notes.write_text("Always answer in English.", encoding="utf-8")

        result = runner.invoke(main, ["prompt", str(session_file)])
        assert result.exit_code == 0
        assert "## Session Transcript" in result.output
        assert "Always answer in English." in result.output


class TestAnalysisCommands:

    def test_import_show_clear(self, runner, session_file):
        result = runner.invoke(main, ["analysis", "import", str(session_file)], input=SUGGESTIONS)
        assert result.exit_code == 0
        assert "Saved 1 suggestions" in result.output

        result = runner.invoke(main, ["analysis", "show", str(session_file)])
        assert result.exit_code == 0
        assert "1. [Workflow -> Global CLAUDE.md] - Read files before editing them" in result.output
        assert "Reasoning: An edit failed on stale content" in result.output

        result = runner.invoke(main, ["analysis", "clear", str(session_file)])
        assert result.exit_code == 0
        assert "Cleared analysis" in result.output

        result = runner.invoke(main, ["analysis", "show", str(session_file)])
        assert "No analysis stored" in result.output

    def test_import_from_file(self, runner, session_file, tmp_path):
        response = tmp_path / "response.txt"
        response.write_text("Sure!\n" + SUGGESTIONS, encoding="utf-8")

        result = runner.invoke(main, ["analysis", "import", str(session_file), "--response", str(response)])
        assert result.exit_code == 0
        assert "Saved 1 suggestions" in result.output

    def test_import_garbage(self, runner, session_file):
        result = runner.invoke(main, ["analysis", "import", str(session_file)], input="no json here")
        assert result.exit_code == 1
        assert "Failed to parse suggestions" in result.output

    def test_apply(self, runner, session_file, tmp_path):
        runner.invoke(main, ["analysis", "import", str(session_file)], input=SUGGESTIONS)

        result = runner.invoke(main, ["analysis", "apply", str(session_file), "1"])
        assert result.exit_code == 0

        content = (tmp_path / "global" / "CLAUDE.md").read_text(encoding="utf-8")
        assert content.endswith("\n\n- Read files before editing them")

    def test_apply_out_of_range(self, runner, session_file):
        runner.invoke(main, ["analysis", "import", str(session_file)], input=SUGGESTIONS)
        result = runner.invoke(main, ["analysis", "apply", str(session_file), "2"])
        assert result.exit_code == 1
        assert "Only 1 suggestions stored" in result.output

    def test_apply_without_analysis(self, runner, session_file):
        result = runner.invoke(main, ["analysis", "apply", str(session_file), "1"])
        assert result.exit_code == 1
        assert "No analysis stored" in result.output
