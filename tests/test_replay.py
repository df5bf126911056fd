"""Tests for trace replay, both the library function and the CLI script."""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from recency_cache import InvalidCapacityError, TraceError, replay_operations

_SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "replay_trace.py"
_SPEC = importlib.util.spec_from_file_location("replay_trace", _SCRIPT_PATH)
assert _SPEC and _SPEC.loader
_MODULE = importlib.util.module_from_spec(_SPEC)
_SPEC.loader.exec_module(_MODULE)

replay_main = _MODULE.main

SCENARIO_OPERATIONS = [
    "LRUCache", "put", "put", "get", "put", "get", "put", "get", "get", "get",
]
SCENARIO_ARGUMENTS = [
    [2], [1, "a"], [2, "b"], [1], [3, "c"], [2], [4, "d"], [1], [3], [4],
]


def test_replay_reference_scenario():
    outputs, cache = replay_operations(SCENARIO_OPERATIONS, SCENARIO_ARGUMENTS)

    assert outputs == [None, None, None, "a", None, None, None, None, "c", "d"]
    assert list(cache.keys()) == [4, 3]
    assert cache.stats().evictions == 2


def test_replay_constructor_only():
    outputs, cache = replay_operations(["LRUCache"], [[4]])
    assert outputs == [None]
    assert cache.capacity == 4


@pytest.mark.parametrize(
    "operations,arguments,message",
    [
        (["LRUCache", "get"], [[1]], "2 operations but 1 argument lists"),
        ([], [], "must start with"),
        (["put", "LRUCache"], [[1, 1], [2]], "must start with"),
        (["LRUCache"], [[1, 2]], "exactly 1 argument"),
        (["LRUCache", "LRUCache"], [[1], [1]], "may only appear first"),
        (["LRUCache", "delete"], [[1], [1]], "unknown operation 'delete'"),
        (["LRUCache", "put"], [[1], [1]], "put takes 2 argument"),
        (["LRUCache", "get"], [[1], []], "get takes 1 argument"),
        (["LRUCache", ["put"]], [[1], [1, 1]], r"unknown operation \['put'\]"),
        (
            ["LRUCache", "put"],
            [[2], [[1, 2], 3]],
            r"operation 1: key \[1, 2\] is not hashable",
        ),
        (["LRUCache", "get"], [[2], [{"k": 1}]], "is not hashable"),
    ],
)
def test_replay_rejects_malformed_trace(operations, arguments, message):
    with pytest.raises(TraceError, match=message):
        replay_operations(operations, arguments)


def test_replay_rejects_non_positive_capacity():
    with pytest.raises(InvalidCapacityError):
        replay_operations(["LRUCache", "put"], [[0], [1, 1]])


class TestReplayScript:
    def _write_trace(self, tmp_path, payload) -> Path:
        path = tmp_path / "trace.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_prints_outputs_and_stats(self, tmp_path, capsys):
        trace = self._write_trace(
            tmp_path,
            {"operations": SCENARIO_OPERATIONS, "arguments": SCENARIO_ARGUMENTS},
        )
        output = tmp_path / "result.json"

        exit_code = replay_main(["--trace", str(trace), "--output", str(output)])

        assert exit_code == 0
        printed = json.loads(capsys.readouterr().out)
        assert printed["outputs"] == [
            None, None, None, "a", None, None, None, None, "c", "d",
        ]
        assert printed["stats"]["capacity"] == 2
        assert printed["stats"]["evictions"] == 2
        assert json.loads(output.read_text(encoding="utf-8")) == printed

    def test_malformed_trace_exits_2(self, tmp_path):
        trace = self._write_trace(
            tmp_path, {"operations": ["get"], "arguments": [[1]]}
        )
        assert replay_main(["--trace", str(trace)]) == 2

    def test_missing_lists_exits_2(self, tmp_path):
        trace = self._write_trace(tmp_path, {"operations": ["LRUCache"]})
        assert replay_main(["--trace", str(trace)]) == 2

    def test_invalid_json_exits_2(self, tmp_path):
        trace = tmp_path / "trace.json"
        trace.write_text("{not json", encoding="utf-8")
        assert replay_main(["--trace", str(trace)]) == 2

    def test_zero_capacity_exits_2(self, tmp_path):
        trace = self._write_trace(
            tmp_path, {"operations": ["LRUCache"], "arguments": [[0]]}
        )
        assert replay_main(["--trace", str(trace)]) == 2

    def test_missing_trace_file_exits_2(self, tmp_path):
        assert replay_main(["--trace", str(tmp_path / "nope.json")]) == 2

    def test_non_utf8_trace_exits_2(self, tmp_path):
        trace = tmp_path / "trace.json"
        trace.write_bytes(b"\xff\xfe\x00garbage")
        assert replay_main(["--trace", str(trace)]) == 2

    def test_unhashable_key_exits_2(self, tmp_path):
        trace = self._write_trace(
            tmp_path,
            {"operations": ["LRUCache", "put"], "arguments": [[2], [[1, 2], 3]]},
        )
        assert replay_main(["--trace", str(trace)]) == 2

    def test_log_level_is_case_insensitive(self, tmp_path, capsys):
        trace = self._write_trace(
            tmp_path, {"operations": ["LRUCache"], "arguments": [[1]]}
        )
        assert replay_main(["--trace", str(trace), "--log-level", "debug"]) == 0

    def test_unknown_log_level_flag_exits_2(self, tmp_path):
        trace = self._write_trace(
            tmp_path, {"operations": ["LRUCache"], "arguments": [[1]]}
        )
        with pytest.raises(SystemExit) as excinfo:
            replay_main(["--trace", str(trace), "--log-level", "verbose"])
        assert excinfo.value.code == 2

    def test_unknown_log_level_env_exits_2(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RECENCY_CACHE_LOG_LEVEL", "verbose")
        trace = self._write_trace(
            tmp_path, {"operations": ["LRUCache"], "arguments": [[1]]}
        )
        with pytest.raises(SystemExit) as excinfo:
            replay_main(["--trace", str(trace)])
        assert excinfo.value.code == 2
