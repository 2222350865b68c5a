"""
Tests for the CLI command table over layout files.
"""

import json
import logging
import tomllib
from pathlib import Path

import pytest

from cli.main import COMMANDS, main


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def layout_file(tmp_path, layout_dict):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps(layout_dict))
    return str(path)


@pytest.fixture
def conflicting_file(tmp_path, layout_dict):
    layout_dict["events"].append({"name": "other", "req": ["eq"]})
    layout_dict["eventValues"]["other"] = 1.5
    path = tmp_path / "conflict.json"
    path.write_text(json.dumps(layout_dict))
    return str(path)


class TestCommands:
    def test_help_without_args(self, capsys):
        main([])
        assert "COMMANDS" in capsys.readouterr().out

    def test_every_command_is_callable(self):
        assert all(callable(fn) for fn in COMMANDS.values())

    def test_unknown_command(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["frobnicate"])
        assert exc.value.code == 1
        assert "Unknown command" in capsys.readouterr().out

    def test_console_scripts_point_at_entry_points(self):
        from api import server
        from cli import main as cli_main

        pyproject = Path(__file__).parent.parent / "pyproject.toml"
        scripts = tomllib.loads(pyproject.read_text())["project"]["scripts"]
        assert scripts == {"eqbal": "cli.main:main", "eqbal-api": "api.server:main"}
        assert callable(cli_main.main)
        assert callable(server.main)


class TestPeriods:
    def test_lists_periods(self, capsys, layout_file):
        main(["periods", layout_file, "eq"])
        out = capsys.readouterr().out
        assert "cast windlance" in out
        assert "2.5" in out

    def test_nothing_consumes(self, capsys, layout_file):
        main(["periods", layout_file, "bal"])
        assert "Nothing consumes" in capsys.readouterr().out


class TestCheck:
    def test_valid_position(self, capsys, layout_file):
        main(["check", layout_file, "drink health", "3.0"])
        assert "valid" in capsys.readouterr().out

    def test_conflict_exits_2(self, capsys, conflicting_file):
        with pytest.raises(SystemExit) as exc:
            main(["check", conflicting_file, "other", "1.5", "eq"])
        assert exc.value.code == 2
        assert "CONFLICT" in capsys.readouterr().out

    def test_unknown_event(self, capsys, layout_file):
        with pytest.raises(SystemExit) as exc:
            main(["check", layout_file, "nope", "1.0"])
        assert exc.value.code == 1

    def test_bad_time(self, capsys, layout_file):
        with pytest.raises(SystemExit) as exc:
            main(["check", layout_file, "drink health", "soon"])
        assert exc.value.code == 1


class TestPlaceAndMove:
    def test_place(self, capsys, conflicting_file):
        main(["place", conflicting_file, "other"])
        assert "earliest legal position 0.0" in capsys.readouterr().out

    def test_move_settles_behind(self, capsys, conflicting_file):
        main(["move", conflicting_file, "other", "1.5"])
        assert "1.5 -> 0.99" in capsys.readouterr().out

    def test_move_stays(self, capsys, layout_file):
        main(["move", layout_file, "drink health", "3.0"])
        assert "stays at 3.0" in capsys.readouterr().out

    def test_move_saves_layout(self, capsys, conflicting_file):
        main(["move", conflicting_file, "other", "1.5"])
        saved = json.loads(Path(conflicting_file).read_text())
        assert saved["eventValues"]["other"] == 0.99
        assert saved["eventValues"]["cast windlance"] == 1.0

    def test_saved_layout_validates(self, capsys, conflicting_file):
        main(["move", conflicting_file, "other", "1.5"])
        main(["validate", conflicting_file])
        assert "no conflicts" in capsys.readouterr().out


class TestValidate:
    def test_clean(self, capsys, layout_file):
        main(["validate", layout_file])
        assert "no conflicts" in capsys.readouterr().out

    def test_conflicts_exit_2(self, capsys, conflicting_file):
        with pytest.raises(SystemExit) as exc:
            main(["validate", conflicting_file])
        assert exc.value.code == 2
        assert "other conflicts on eq at time 1.5" in capsys.readouterr().out

    def test_missing_file(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["validate", str(tmp_path / "missing.json")])
        assert exc.value.code == 1
        assert "cannot read" in capsys.readouterr().out

    def test_invalid_json(self, capsys, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SystemExit) as exc:
            main(["validate", str(path)])
        assert exc.value.code == 1
        assert "invalid layout" in capsys.readouterr().out


class TestDefault:
    def test_prints_loadable_layout(self, capsys):
        main(["default"])
        data = json.loads(capsys.readouterr().out)
        assert "eq" in data["balances"]
        assert data["events"][0]["name"] == "cast windlance"
