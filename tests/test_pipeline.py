"""
Tests for transformation runs (Trace file → UPPAAL XML file).

Tests cover:
    - Successful run and default output path
    - Failure results for bad input and unwritable output
    - Model dump
    - Background runs and busy contexts
"""

import os

import pytest
from trace2nta.builder import BuildContext
from trace2nta.config import TransformConfig
from trace2nta.errors import RunInProgressError
from trace2nta import pipeline
from trace2nta.pipeline import (
    RunResult,
    default_output_path,
    start_transformation,
    transform_file,
)

TRACE = """
name: Counter
statements:
  - kind: declaration
    scope: global
    expression: int x = 0;
  - kind: test
    expression: x < 5
  - kind: assignment
    expression: x := x + 1
"""


@pytest.fixture
def trace_file(tmp_path):
    path = tmp_path / "counter.yaml"
    path.write_text(TRACE, encoding="utf-8")
    return str(path)


class TestTransformFile:

    def test_successful_run(self, trace_file, tmp_path):
        result = transform_file(trace_file)
        assert result == RunResult(success=True, output_path=str(tmp_path / "counter.xml"))
        with open(result.output_path, encoding="utf-8") as f:
            xml = f.read()
        assert "<name>Counter</name>" in xml
        assert '<label kind="guard">x &lt; 5</label>' in xml
        assert '<label kind="assignment">x := x + 1</label>' in xml
        assert "Process1 =  Counter();" in xml

    def test_explicit_output_path(self, trace_file, tmp_path):
        result = transform_file(trace_file, str(tmp_path / "out" / "model"))
        assert result.success
        assert result.output_path == str(tmp_path / "out" / "model.xml")
        assert os.path.exists(result.output_path)

    def test_output_dir_from_config(self, trace_file, tmp_path):
        config = TransformConfig(output_dir=str(tmp_path / "generated"))
        result = transform_file(trace_file, config=config)
        assert result.output_path == str(tmp_path / "generated" / "counter.xml")

    def test_model_dump_written(self, trace_file, tmp_path):
        result = transform_file(trace_file, config=TransformConfig(write_model_dump=True))
        assert result.success
        assert os.path.exists(tmp_path / "counter.model.yaml")
        with open(trace_file, encoding="utf-8") as f:
            assert f.read() == TRACE

    def test_missing_trace_fails(self, tmp_path):
        result = transform_file(str(tmp_path / "absent.yaml"))
        assert result.success is False
        assert "not found" in result.error
        assert result.output_path is None

    def test_invalid_trace_fails(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("statements:\n  - {kind: jump, expression: x}\n", encoding="utf-8")
        result = transform_file(str(path))
        assert result.success is False
        assert not os.path.exists(tmp_path / "bad.xml")

    def test_unwritable_output_fails(self, trace_file, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        result = transform_file(trace_file, str(blocker / "model.xml"))
        assert result.success is False

    def test_directory_as_trace_fails(self, tmp_path):
        result = transform_file(str(tmp_path))
        assert result.success is False
        assert "Cannot read trace file" in result.error

    def test_numeric_comment_written(self, tmp_path):
        path = tmp_path / "numbered.yaml"
        path.write_text(
            "statements:\n  - {kind: assignment, expression: 'x := 1', comment: 42}\n",
            encoding="utf-8",
        )
        result = transform_file(str(path))
        assert result.success
        with open(result.output_path, encoding="utf-8") as f:
            assert '<label kind="comments">42</label>' in f.read()

    def test_busy_context_rejected(self, trace_file):
        context = BuildContext()
        with context.running():
            with pytest.raises(RunInProgressError):
                transform_file(trace_file, context=context)

    def test_context_released_after_run(self, trace_file):
        context = BuildContext()
        transform_file(trace_file, context=context)
        assert not context.run_lock.locked()
        assert context.nta.name == "Counter"


def test_default_output_path():
    assert default_output_path("/data/run.yaml", TransformConfig()) == "/data/run.xml"
    assert default_output_path("/data/run.yaml", TransformConfig(output_dir="/out")) == "/out/run.xml"


class TestBackgroundRun:

    def test_callback_receives_result(self, trace_file):
        results = []
        thread = start_transformation(trace_file, on_done=results.append)
        thread.join(timeout=10)
        assert not thread.is_alive()
        assert len(results) == 1
        assert results[0].success

    def test_busy_context_reported_as_failure(self, trace_file):
        context = BuildContext()
        results = []
        with context.running():
            thread = start_transformation(trace_file, context=context, on_done=results.append)
            thread.join(timeout=10)
        assert results[0].success is False
        assert "already in use" in results[0].error

    def test_unreadable_trace_reported(self, tmp_path):
        """Undecodable input still reaches the callback as a failure."""
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"statements:\n  - {kind: test, expression: caf\xe9}\n")
        results = []
        thread = start_transformation(str(path), on_done=results.append)
        thread.join(timeout=10)
        assert len(results) == 1
        assert results[0].success is False
        assert "Cannot read trace file" in results[0].error

    def test_unexpected_error_reported(self, trace_file, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(pipeline, "transform_file", broken)
        results = []
        thread = start_transformation(trace_file, on_done=results.append)
        thread.join(timeout=10)
        assert results == [RunResult(success=False, error="RuntimeError: disk on fire")]
