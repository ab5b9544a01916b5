from __future__ import annotations

import pytest

from devsession.log import BufferedLogger, SessionError, Severity
from devsession.process import SubprocessRunner


def test_read_returns_stdout_and_logs_stderr() -> None:
    logger = BufferedLogger()
    runner = SubprocessRunner(logger)

    output = runner.read(["sh", "-c", "echo out; echo err >&2"])

    assert output == "out\n"
    assert "err" in logger.messages(Severity.DEBUG)


def test_missing_tool_fails() -> None:
    runner = SubprocessRunner(BufferedLogger())

    with pytest.raises(SessionError, match="Required tool not found: definitely-not-a-tool"):
        runner.read(["definitely-not-a-tool"])
    with pytest.raises(SessionError, match="Required tool not found"):
        runner.call(["definitely-not-a-tool"])


def test_non_zero_exit_fails() -> None:
    runner = SubprocessRunner(BufferedLogger())

    with pytest.raises(SessionError, match="sh exited with code 3"):
        runner.call(["sh", "-c", "exit 3"])
    with pytest.raises(SessionError, match="sh exited with code 2"):
        runner.read(["sh", "-c", "exit 2"])
