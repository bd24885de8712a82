"""
Tests for the public entry points.
"""

import asyncio
import sys

import pytest

import cmdbatch
from cmdbatch import CommandRunner, ExitInfo, InvalidInputError, run, run_sync, summarize
from process_utils import FAST_TWO, SLOW_ONE, RecordingExecutor

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")


class TestRun:
    """Test cases for run and run_sync."""

    @posix_only
    def test_run_single_string(self):
        results = asyncio.run(run("true"))
        assert results == [ExitInfo(exit_code=0, command="true")]

    @posix_only
    def test_run_sync_with_keyword_options(self):
        output = []
        results = run_sync([SLOW_ONE, FAST_TWO], mode="parallel", on_output=output.append)
        assert output == ["2\n", "1\n"]
        assert [r.exit_code for r in results] == [0, 0]

    @posix_only
    def test_keyword_options_override_mapping(self):
        output = []
        run_sync([SLOW_ONE, FAST_TWO], {"mode": "parallel"}, mode="sequential", on_output=output.append)
        assert output == ["1\n", "2\n"]

    def test_run_rejects_number(self):
        with pytest.raises(InvalidInputError):
            run_sync(6)

    def test_run_rejects_none(self):
        with pytest.raises(InvalidInputError):
            asyncio.run(run(None))

    def test_exports(self):
        assert cmdbatch.Mode.PARALLEL.value == "parallel"
        assert issubclass(cmdbatch.TokenizationError, cmdbatch.CmdBatchError)


class TestCommandRunner:
    """Test cases for the reusable runner object."""

    def test_runner_applies_its_options(self):
        executor = RecordingExecutor()
        runner = CommandRunner(executor=executor, cwd="/tmp", mode="parallel")
        results = runner.run_sync(["a", {"command": "b", "cwd": "/var"}])

        assert len(results) == 2
        assert [o.cwd for o in executor.dispatched] == ["/tmp", "/var"]
        assert all(o.mode == cmdbatch.Mode.PARALLEL for o in executor.dispatched)

    def test_per_call_overrides_do_not_stick(self):
        executor = RecordingExecutor()
        runner = CommandRunner(executor=executor, cwd="/tmp")
        runner.run_sync("a", cwd="/srv")
        runner.run_sync("b")
        assert [o.cwd for o in executor.dispatched] == ["/srv", "/tmp"]

    def test_runner_rejects_unknown_option(self):
        with pytest.raises(InvalidInputError):
            CommandRunner(workdir="/tmp")


class TestSummarize:
    """Test cases for batch summaries."""

    def test_summary_counts(self):
        results = [
            ExitInfo(exit_code=0),
            ExitInfo(exit_code=2),
            ExitInfo(exit_code=2, errored=True, error="No such file or directory"),
            ExitInfo(exit_code=None, signal=9),
        ]
        summary = summarize(results)

        assert summary.total_commands == 4
        assert summary.successful_commands == 1
        assert summary.failed_commands == 2
        assert summary.errored_commands == 1
        assert summary.success_rate == 25.0

    def test_empty_summary(self):
        summary = CommandRunner().get_summary([])
        assert summary.total_commands == 0
        assert summary.success_rate == 0.0
