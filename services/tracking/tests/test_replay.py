"""Tests for the offline replay CLI."""
from __future__ import annotations

import json

import pytest

from tracking.replay import main


def _line(seq: int, *boxes: tuple[float, float], camera_id: str = "cam-01") -> str:
    return json.dumps({
        "camera_id": camera_id,
        "frame_seq": seq,
        "detections": [
            {"box": {"x": x, "y": y, "width": 10, "height": 10}, "label": "cat", "score": 0.9}
            for x, y in boxes
        ],
    })


def _read_events(path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_replay_writes_one_event_per_frame(tmp_path):
    src = tmp_path / "detections.jsonl"
    out = tmp_path / "tracks.jsonl"
    src.write_text("\n".join([_line(0, (0, 0)), _line(1, (5, 5)), _line(2)]) + "\n")

    assert main([str(src), "--output", str(out)]) == 0

    events = _read_events(out)
    assert [e["frame_seq"] for e in events] == [0, 1, 2]
    assert [[(t["track_id"], t["age"]) for t in e["tracks"]] for e in events] == [
        [(0, 0)], [(0, 0)], [(0, 1)],
    ]


def test_replay_honours_tracker_options(tmp_path):
    src = tmp_path / "detections.jsonl"
    out = tmp_path / "tracks.jsonl"
    src.write_text("\n".join([_line(0, (0, 0)), _line(1, (20, 0)), _line(2)]) + "\n")

    assert main([str(src), "-o", str(out), "--match-distance", "10", "--max-age", "2"]) == 0

    events = _read_events(out)
    assert [t["track_id"] for t in events[1]["tracks"]] == [1, 0]
    # Track 0 ages out on its second miss; track 1 has missed once
    assert [(t["track_id"], t["age"]) for t in events[2]["tracks"]] == [(1, 1)]


def test_replay_skips_invalid_and_foreign_lines(tmp_path, capsys):
    src = tmp_path / "detections.jsonl"
    out = tmp_path / "tracks.jsonl"
    src.write_text(
        "\n".join([
            _line(0, (0, 0)),
            "not json",
            _line(1, (0, 0), camera_id="cam-02"),
            "",
            _line(2, (3, 3)),
        ]) + "\n"
    )

    assert main([str(src), "-o", str(out)]) == 1

    events = _read_events(out)
    assert [e["frame_seq"] for e in events] == [0, 2]
    err = capsys.readouterr().err
    assert "line 2: invalid detection frame" in err
    assert "ID:0 cat (90%)" in err


def test_replay_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope.jsonl")]) == 2
    assert "cannot open input" in capsys.readouterr().err


def test_replay_skips_undecodable_line(tmp_path, capsys):
    src = tmp_path / "detections.jsonl"
    out = tmp_path / "tracks.jsonl"
    src.write_bytes(
        _line(0, (0, 0)).encode() + b"\n\xff\xfe garbage\n" + _line(1, (2, 2)).encode() + b"\n"
    )

    assert main([str(src), "-o", str(out)]) == 1

    events = _read_events(out)
    assert [e["frame_seq"] for e in events] == [0, 1]
    assert events[1]["tracks"][0]["track_id"] == 0
    err = capsys.readouterr().err
    assert "line 2: not valid UTF-8" in err
    assert "Done. 2 frames" in err


@pytest.mark.parametrize(
    "option",
    [
        ["--max-age", "0"],
        ["--match-distance", "0"],
        ["--match-distance", "-5"],
        ["--min-score", "1.5"],
        ["--min-score", "-0.1"],
    ],
)
def test_replay_rejects_out_of_range_options(tmp_path, capsys, option):
    src = tmp_path / "detections.jsonl"
    src.write_text(_line(0, (0, 0)) + "\n")
    assert main([str(src), *option]) == 2
    assert "Error: " + option[0] in capsys.readouterr().err
