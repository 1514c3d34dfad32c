"""Tests for the command-line entry point."""

import json
import logging

import pytest

from main import build_parser, main
from src.settings import get_settings


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParser:
    """Tests for argument parsing."""

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_federated_options(self):
        args = build_parser().parse_args(["federated", "alice", "--platforms", "ig,x", "--mode", "mock"])
        assert args.query == "alice"
        assert args.platforms == "ig,x"
        assert args.mode == "mock"


class TestCommands:
    """Tests for the search, federated and profile commands."""

    def test_search_json(self, dataset_file, capsys):
        assert main(["--dataset", str(dataset_file), "search", "alice", "--json"]) == 0
        rows = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in rows] == ["instagram:alice", "x:alice_tweets"]

    def test_search_table(self, dataset_file, capsys):
        assert main(["--dataset", str(dataset_file), "search", "--platform", "instagram"]) == 0
        out = capsys.readouterr().out
        assert "@bruno.beats" in out
        assert "3,000" in out

    def test_search_no_matches(self, dataset_file, capsys):
        assert main(["--dataset", str(dataset_file), "search", "zzz"]) == 0
        assert "No matches." in capsys.readouterr().out

    def test_search_invalid_platform(self, dataset_file, capsys):
        assert main(["--dataset", str(dataset_file), "search", "--platform", "myspace"]) == 2
        assert "myspace" in capsys.readouterr().err

    def test_missing_dataset(self, tmp_path, capsys):
        assert main(["--dataset", str(tmp_path / "none.json"), "search", "alice"]) == 2
        assert "Dataset not found" in capsys.readouterr().err

    def test_profile(self, dataset_file, capsys):
        assert main(["--dataset", str(dataset_file), "profile", "twitter", "@alice_tweets"]) == 0
        assert json.loads(capsys.readouterr().out)["id"] == "alice"

    def test_profile_not_found(self, dataset_file, capsys):
        assert main(["--dataset", str(dataset_file), "profile", "instagram", "nobody"]) == 1
        assert "No profile for nobody on instagram" in capsys.readouterr().err

    def test_federated_mock(self, dataset_file, capsys):
        code = main([
            "--dataset", str(dataset_file),
            "federated", "alice", "--platforms", "instagram,bogus", "--mode", "mock", "--json",
        ])
        assert code == 0
        body = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in body["results"]] == ["instagram:alice"]
        assert body["issues"][0]["platform"] == "unknown"

    def test_federated_issues_on_stderr(self, dataset_file, capsys):
        main(["--dataset", str(dataset_file), "federated", "alice", "--platforms", "ig nope", "--mode", "mock"])
        captured = capsys.readouterr()
        assert "Alice Wander" in captured.out
        assert "unknown: Unknown platform: 'nope'" in captured.err


class TestDataMode:
    """Data mode from the environment, whatever its case."""

    @pytest.fixture(autouse=True)
    def _fresh_settings(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_mode_is_case_insensitive(self, dataset_file, monkeypatch, capsys):
        monkeypatch.setenv("SOCIAL_DATA_MODE", "Mock")
        code = main(["--dataset", str(dataset_file), "federated", "alice", "--platforms", "instagram", "--json"])
        assert code == 0
        body = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in body["results"]] == ["instagram:alice"]

    def test_unknown_mode_exits_cleanly(self, dataset_file, monkeypatch, capsys):
        monkeypatch.setenv("SOCIAL_DATA_MODE", "staging")
        assert main(["--dataset", str(dataset_file), "federated", "alice"]) == 2
        assert "unknown data mode 'staging'" in capsys.readouterr().err
