"""
Tests for the process runner
"""

import sys
import time

from conftest import process_alive, requires_proc
from execution.runner import run_process


def test_captures_stdout_and_stderr(tmp_path):
    outcome = run_process("echo out; echo err >&2", cwd=tmp_path)

    assert outcome.ok
    assert outcome.return_code == 0
    assert outcome.stdout == "out\n"
    assert outcome.stderr == "err\n"


def test_non_zero_exit(tmp_path):
    outcome = run_process("exit 3", cwd=tmp_path)

    assert not outcome.ok
    assert outcome.return_code == 3
    assert outcome.timed_out is False


def test_stdin_is_written_and_closed(tmp_path):
    outcome = run_process("cat", cwd=tmp_path, stdin_text="hello\nworld\n")

    assert outcome.stdout == "hello\nworld\n"


def test_stdin_ignored_by_program(tmp_path):
    outcome = run_process("echo done", cwd=tmp_path, stdin_text="x" * 100000)

    assert outcome.ok
    assert outcome.stdout == "done\n"


def test_without_stdin_program_sees_eof(tmp_path):
    outcome = run_process([sys.executable, "-c", "import sys; print(repr(sys.stdin.read()))"], cwd=tmp_path)

    assert outcome.stdout.strip() == "''"


def test_env_is_layered_over_process_environment(tmp_path):
    outcome = run_process('echo "$PLOT_PATH"; test -n "$PATH"', cwd=tmp_path, env={"PLOT_PATH": "/x/plot.png"})

    assert outcome.ok
    assert outcome.stdout == "/x/plot.png\n"


def test_runs_in_working_directory(tmp_path):
    outcome = run_process("pwd", cwd=tmp_path)

    assert outcome.stdout.strip() == str(tmp_path.resolve())


def test_timeout_kills_whole_process_group(tmp_path):
    started = time.time()
    # The shell forks a child sleep; killing only the shell would leave it holding the pipes
    outcome = run_process("sleep 30; echo never", cwd=tmp_path, timeout_seconds=0.5)

    assert time.time() - started < 10
    assert outcome.timed_out
    assert not outcome.ok
    assert "timed out after 0.5 seconds" in outcome.stderr
    assert "never" not in outcome.stdout


def test_spawn_failure_is_reported(tmp_path):
    outcome = run_process(["/definitely/not/a/binary"], cwd=tmp_path)

    assert outcome.spawn_failed
    assert not outcome.ok
    assert outcome.return_code == -1
    assert outcome.stderr


def test_invalid_utf8_output_is_replaced(tmp_path):
    outcome = run_process([sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'\\xff ok')"], cwd=tmp_path)

    assert outcome.ok
    assert outcome.stdout.endswith(" ok")


SPAWN_SLEEPER = (
    "import subprocess, sys\n"
    "child = subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)'],\n"
    "                         stdin=subprocess.DEVNULL, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)\n"
    "print(child.pid)\n"
)


@requires_proc
def test_background_children_do_not_outlive_step(tmp_path):
    outcome = run_process([sys.executable, "-c", SPAWN_SLEEPER], cwd=tmp_path)

    assert outcome.ok
    assert not process_alive(int(outcome.stdout))
