"""Tests for subprocess streaming helpers."""

import logging
import os
import sys
from unittest.mock import Mock

import pytest

from releasebox.utils.stream_process import (
    DefaultOutputMiddleware,
    LoggerOutputMiddleware,
    OutputMiddleware,
    run_command,
)


class TestRunCommand:
    """Test run_command with a real interpreter subprocess."""

    def test_captures_both_streams(self):
        code = "import sys; print('out'); print('err', file=sys.stderr)"
        return_code, stdout, stderr = run_command([sys.executable, "-c", code])

        assert return_code == 0
        assert stdout == ["out"]
        assert stderr == ["err"]

    def test_nonzero_exit(self):
        return_code, _stdout, _stderr = run_command(
            [sys.executable, "-c", "raise SystemExit(3)"]
        )
        assert return_code == 3

    def test_cwd_and_env(self, tmp_path):
        code = "import os; print(os.getcwd()); print(os.environ['RB_TEST'])"
        _rc, stdout, _stderr = run_command(
            [sys.executable, "-c", code], cwd=tmp_path, env={**os.environ, "RB_TEST": "yes"}
        )
        assert stdout[1] == "yes"

    def test_missing_executable(self):
        with pytest.raises(FileNotFoundError):
            run_command(["releasebox-no-such-binary"])

    def test_middleware_transforms_lines(self):
        class UpperMiddleware(OutputMiddleware[str]):
            def process(self, line: str, stream_type: str) -> str:
                return line.upper()

        _rc, stdout, _stderr = run_command(
            [sys.executable, "-c", "print('hello')"], middleware=UpperMiddleware()
        )
        assert stdout == ["HELLO"]

    def test_undecodable_stderr_is_kept(self):
        code = (
            "import sys; print('done'); "
            "sys.stderr.buffer.write(b'ok\\n\\xff caf\\xe9\\nafter\\n')"
        )
        return_code, stdout, stderr = run_command([sys.executable, "-c", code])

        assert return_code == 0
        assert stdout == ["done"]
        assert stderr[0] == "ok"
        assert stderr[1] == "\ufffd caf\ufffd"
        assert stderr[2] == "after"

    def test_large_undecodable_stderr_is_drained(self):
        code = (
            "import sys\n"
            "for _ in range(20000):\n"
            "    sys.stderr.buffer.write(b'link \\xff warning\\n')\n"
        )
        return_code, _stdout, stderr = run_command([sys.executable, "-c", code])

        assert return_code == 0
        assert len(stderr) == 20000


class TestMiddleware:
    """Test output middleware implementations."""

    def test_default_middleware(self):
        assert DefaultOutputMiddleware().process("line", "stdout") == "line"

    def test_logger_middleware_levels(self):
        logger = Mock(spec=logging.Logger)
        middleware = LoggerOutputMiddleware(logger, stderr_prefix="[linux] ")

        middleware.process("compiled", "stdout")
        middleware.process("Compiling serval", "stderr")

        logger.debug.assert_called_once_with("%s%s", "", "compiled")
        logger.info.assert_called_once_with("%s%s", "[linux] ", "Compiling serval")
