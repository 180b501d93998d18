"""Tests for the gravity-snake command line."""

import json

import pytest

from gravity_snake.cli import _build_parser, main, parse_moves
from gravity_snake.config import EngineConfig
from gravity_snake.levels import LevelDef, save_levels
from gravity_snake.snake import Direction


class TestCLIParser:
    def test_no_command_returns_1(self):
        assert main([]) == 1

    def test_play_args(self):
        parser = _build_parser()
        args = parser.parse_args(["play", "first-steps", "--moves", "RR", "--json"])
        assert args.command == "play"
        assert args.level == "first-steps"
        assert args.moves == "RR"
        assert args.as_json is True
        assert args.paced is False
        assert args.config is None

    def test_play_requires_moves(self):
        parser = _build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["play", "first-steps"])


class TestParseMoves:
    def test_codes(self):
        assert parse_moves("Ur d l") == [
            Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT,
        ]

    def test_unknown_code(self):
        with pytest.raises(ValueError, match="Unknown move code"):
            parse_moves("RX")


class TestCLICommands:
    def test_levels(self, capsys):
        assert main(["levels"]) == 0
        out = capsys.readouterr().out.split()
        assert out == ["first-steps", "mind-the-gap", "stepping-stone"]

    def test_show(self, capsys):
        assert main(["show", "first-steps"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "first-steps: 7x4"
        assert out[1].startswith("apples=1 blocks=0 portal=(6, 2)")
        assert out[-1] == "#######"

    def test_show_unknown_level(self):
        assert main(["show", "nowhere"]) == 1

    def test_play_winning_sequence(self, capsys):
        assert main(["play", "first-steps", "--moves", "RRRR"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[-1] == "state=won steps=4 restarts=0"

    def test_play_unfinished_returns_2(self, capsys):
        assert main(["play", "first-steps", "--moves", "R"]) == 2

    def test_play_stops_after_win(self, capsys):
        assert main(["play", "first-steps", "--moves", "RRRRLL", "--json"]) == 0
        state = json.loads(capsys.readouterr().out)
        assert state["outcomes"] == ["moved", "moved", "moved", "won"]
        assert state["state"] == "won"

    def test_play_bad_moves(self):
        assert main(["play", "first-steps", "--moves", "Z"]) == 1

    def test_play_with_config(self, tmp_path, capsys):
        path = tmp_path / "engine.json"
        EngineConfig(move_ms=0, fall_ms=0, min_push_ms=0).save(path)
        assert main([
            "play", "first-steps", "--moves", "RRRR",
            "--config", str(path), "--paced",
        ]) == 0

    def test_play_with_misspelled_config(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"move_msec": 10}))
        assert main([
            "play", "first-steps", "--moves", "R", "--config", str(path),
        ]) == 1

    def test_levels_file(self, tmp_path, capsys):
        path = tmp_path / "levels.json"
        save_levels([LevelDef(key="tiny", map=("1SP", "###"))], path)
        assert main(["--levels-file", str(path), "levels"]) == 0
        assert capsys.readouterr().out.split() == ["tiny"]
        assert main(["--levels-file", str(path), "play", "tiny", "--moves", "R"]) == 0
