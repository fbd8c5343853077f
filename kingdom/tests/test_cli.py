"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main


class TestCli:
    """Tests for the kingdom command."""

    def test_cards(self, capsys):
        catalog = main(["cards"])

        out = capsys.readouterr().out
        assert len(out.strip().splitlines()) == len(catalog)
        assert "Throne Room" in out

    def test_simulate_and_replay(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("KINGDOM_CONFIG", raising=False)
        monkeypatch.delenv("KINGDOM_SEED", raising=False)
        record_file = tmp_path / "match.json"

        result = main(["simulate", "--seed", "3", "--max-turns", "5", "--record", str(record_file)])

        out = capsys.readouterr().out
        assert "Seed: 3" in out
        assert json.loads(record_file.read_text())["seed"] == 3

        replayed = main(["replay", str(record_file)])

        assert replayed.scores == result.scores
        assert replayed.turns == result.turns

    def test_simulate_from_config_file(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("KINGDOM_SEED", raising=False)
        config_file = tmp_path / "game.json"
        config_file.write_text(json.dumps({"player_names": ["Ann", "Bob", "Cy"], "seed": 4}))

        result = main(["simulate", "--config", str(config_file), "--policy", "first", "--max-turns", "2"])

        out = capsys.readouterr().out
        assert len(result.scores) == 3
        assert "Cy:" in out

    def test_invalid_player_count(self, capsys, monkeypatch):
        monkeypatch.delenv("KINGDOM_CONFIG", raising=False)

        with pytest.raises(SystemExit) as excinfo:
            main(["simulate", "--players", "1"])

        assert excinfo.value.code == 1
        assert "invalid configuration" in capsys.readouterr().out

    def test_missing_record(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["replay", str(tmp_path / "nope.json")])

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])
