"""Tests for the shutterguide command line."""

import json

import pytest

from helpers import front_session

from shutterguide.cli import main


@pytest.fixture
def session_file(tmp_path):
    path = tmp_path / "session.jsonl"
    path.write_text("\n".join(front_session(4600)) + "\n")
    return str(path)


class TestInfo:
    def test_table(self, capsys):
        assert main(["info"]) == 0
        out = capsys.readouterr().out
        assert "[Capture Sequence]" in out
        for name in ("front", "right_45", "left_45", "vertex", "back_donor"):
            assert name in out
        assert "Auto-capture confidence: >= 0.85" in out

    def test_angle_detail(self, capsys):
        assert main(["info", "--angle", "vertex"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Vertex (vertex)")
        assert "Region:       vertex" in out
        assert "Phone:        pitch -95..-85" in out

    def test_unknown_angle(self, capsys):
        assert main(["info", "--angle", "top"]) == 2
        assert "Unknown capture angle" in capsys.readouterr().err

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / "engine.yaml"
        path.write_text("shutter:\n  countdown_s: 5\n")
        assert main(["info", "--config", str(path)]) == 0
        assert "Countdown:               5s" in capsys.readouterr().out

    def test_bad_config_exits(self, tmp_path, capsys):
        path = tmp_path / "engine.yaml"
        path.write_text("camera: {}\n")
        with pytest.raises(SystemExit) as info:
            main(["info", "--config", str(path)])
        assert info.value.code == 2
        assert "cannot load config" in capsys.readouterr().err

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as info:
            main([])
        assert info.value.code == 1


class TestReplay:
    def test_replay_captures(self, session_file, capsys):
        assert main(["replay", session_file]) == 0
        out = capsys.readouterr().out
        assert "Angle: front" in out
        assert "stabilizing" in out
        assert "Final phase: captured" in out
        assert "Captured at t=4.480s" in out

    def test_json_output(self, session_file, capsys):
        assert main(["replay", session_file, "--json"]) == 0
        out = capsys.readouterr().out
        state = json.loads(out[out.index("{\n"):out.rindex("}") + 1])
        assert state["phase"] == "captured"
        assert state["angle"] == "front"
        assert state["conditions"]["lighting_ok"] is True

    def test_wrong_angle_does_not_capture(self, session_file, capsys):
        assert main(["replay", session_file, "--angle", "vertex"]) == 0
        out = capsys.readouterr().out
        assert "Captured at" not in out
        assert "region_correct" in out

    def test_trace_output(self, session_file, tmp_path, capsys):
        trace = tmp_path / "trace.jsonl"
        assert main(["replay", session_file, "--trace", "minimal", "--trace-output", str(trace)]) == 0
        captured = capsys.readouterr()
        assert "Observability: level=minimal" in captured.out
        assert "[CAPTURE]" in captured.err
        records = [json.loads(line) for line in trace.read_text().splitlines()]
        assert [r["record_type"] for r in records].count("capture_fire") == 1

    def test_bad_session(self, tmp_path, capsys):
        path = tmp_path / "bad.jsonl"
        path.write_text('{"type": "tick", "t_ns": 0}\nnot json\n')
        assert main(["replay", str(path)]) == 2
        assert "line 2" in capsys.readouterr().err

    def test_short_histogram(self, tmp_path, capsys):
        path = tmp_path / "short.jsonl"
        path.write_text(json.dumps({"type": "lighting", "t_ns": 0, "histogram": [0] * 255}) + "\n")
        assert main(["replay", str(path)]) == 2
        err = capsys.readouterr().err
        assert "line 1" in err
        assert "256 bins" in err
        assert "Traceback" not in err

    def test_missing_session(self, tmp_path, capsys):
        assert main(["replay", str(tmp_path / "missing.jsonl")]) == 2
        assert "cannot read" in capsys.readouterr().err

    def test_unknown_angle(self, session_file, capsys):
        assert main(["replay", session_file, "--angle", "top"]) == 2
