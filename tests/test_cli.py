"""Tests for the fsmgen command line."""
from __future__ import annotations

from fsmgen.codegen import CodeGenerator, main

from conftest import DOOR_SPEC


def write_spec(tmp_path, text=DOOR_SPEC, name="door.fsm"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestMain:
    def test_writes_module(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path)
        out_dir = tmp_path / "out"
        assert main([str(spec), "-o", str(out_dir)]) == 0

        generated = out_dir / "door_fsm.py"
        assert generated.exists()
        assert "class Machine(turn.Callback):" in generated.read_text(encoding="utf-8")

        stdout = capsys.readouterr().out
        assert "Generating code for: door" in stdout
        assert "✓ Generated:" in stdout

    def test_data_only(self, tmp_path) -> None:
        spec = write_spec(tmp_path)
        assert main([str(spec), "-o", str(tmp_path), "--data-only"]) == 0
        source = (tmp_path / "door_fsm.py").read_text(encoding="utf-8")
        assert "class Machine:" in source
        assert "to: Optional[State] = None" in source

    def test_stdout(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path)
        assert main([str(spec), "--stdout", "--import", "import decimal"]) == 0
        out = capsys.readouterr().out
        assert "from door.fsm" in out
        assert "\nimport decimal\n" in out
        assert not (tmp_path / "door_fsm.py").exists()

    def test_normalize(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path, "States{Open,Close} InitialState( Open ) Events{Turn} Transitions{Turn[Open=>Close]}")
        assert main([str(spec), "--normalize"]) == 0
        assert capsys.readouterr().out == (
            "States {\n"
            "    Open,\n"
            "    Close,\n"
            "}\n"
            "\n"
            "InitialState(Open)\n"
            "\n"
            "Events {\n"
            "    Turn,\n"
            "}\n"
            "\n"
            "Transitions {\n"
            "    Turn [Open => Close],\n"
            "}\n"
        )

    def test_description_error(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path, "Stats { Open }")
        assert main([str(spec), "-o", str(tmp_path)]) == 1
        err = capsys.readouterr().err
        assert str(spec) in err
        assert "1:1: expected keyword 'States'" in err
        assert not (tmp_path / "door_fsm.py").exists()

    def test_description_error_on_stdout_path(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path, "States { Open } InitialState(Ajar) Events { } Transitions { }")
        assert main([str(spec), "--stdout"]) == 1
        assert "initial state 'Ajar'" in capsys.readouterr().err

    def test_invalid_import_line(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path)
        assert main([str(spec), "--stdout", "--import", "x = 1"]) == 1
        assert "not an import statement" in capsys.readouterr().err

    def test_shadowing_event_reported(self, tmp_path, capsys) -> None:
        spec = write_spec(tmp_path, "States { Idle, Busy }\nInitialState(Idle)\nEvents { Type }\nTransitions { Type [Idle => Busy] }")
        assert main([str(spec), "-o", str(tmp_path)]) == 1
        assert f"{spec}:3:10: event namespace 'type'" in capsys.readouterr().err
        assert not (tmp_path / "door_fsm.py").exists()

    def test_missing_file(self, tmp_path, capsys) -> None:
        assert main([str(tmp_path / "absent.fsm")]) == 1
        assert "not found" in capsys.readouterr().err


class TestGenerate:
    def test_returns_false_on_error(self, tmp_path) -> None:
        spec = write_spec(tmp_path, "States { Open }")
        assert CodeGenerator().generate(str(spec), str(tmp_path)) is False

    def test_returns_true(self, tmp_path) -> None:
        spec = write_spec(tmp_path)
        assert CodeGenerator(callbacks=False).generate(str(spec), str(tmp_path / "gen")) is True
        assert (tmp_path / "gen" / "door_fsm.py").exists()
