"""Tests for process.py — launching + pid lookup."""

import multiprocessing
import subprocess

import pytest

from procutil.process import get_pid, popen, spawn, system
from procutil.stream import ProcessInputStream


def test_system_returns_exit_code():
    assert system(["true"]) == 0


def test_system_nonzero():
    assert system(["sh", "-c", "exit 42"]) == 42


def test_system_with_env_and_cwd(tmp_path):
    marker = tmp_path / "marker"
    code = system(["sh", "-c", 'echo "$TEST_VAR" > marker'], env={"TEST_VAR": "works"}, cwd=str(tmp_path))
    assert code == 0
    assert marker.read_text().strip() == "works"


def test_system_inherits_stdout(capfd):
    system(["echo", "inherited"])
    assert capfd.readouterr().out == "inherited\n"


def test_popen_returns_stream():
    stream = popen(["echo", "hello"])
    assert isinstance(stream, ProcessInputStream)
    assert stream.as_text() == "hello\n"


def test_popen_with_env():
    stream = popen(["sh", "-c", "echo $TEST_VAR"], env={"TEST_VAR": "works"})
    assert stream.as_text().strip() == "works"


def test_popen_logs_debug(recording_logger):
    popen(["true"], display_name="noop", logger=recording_logger).wait_for()
    assert recording_logger.messages == [("debug", "Executing: noop")]


def test_spawn_failure_raises_oserror(recording_logger):
    with pytest.raises(FileNotFoundError):
        spawn(["/nonexistent/definitely-not-here"], logger=recording_logger)
    level, msg = recording_logger.messages[0]
    assert level == "error"
    assert "/nonexistent/definitely-not-here" in msg


def test_system_spawn_failure(recording_logger):
    with pytest.raises(OSError):
        system(["/nonexistent/definitely-not-here"], logger=recording_logger)


def test_get_pid_popen():
    proc = subprocess.Popen(["true"])
    pid = get_pid(proc)
    assert pid == proc.pid
    assert pid > 0
    assert proc.wait() == 0


def test_get_pid_after_exit():
    proc = subprocess.Popen(["true"])
    proc.wait()
    assert get_pid(proc) == proc.pid


def test_get_pid_from_stream():
    stream = popen(["true"])
    assert get_pid(stream.process) > 0
    stream.wait_for()


def test_get_pid_unstarted_multiprocessing():
    assert get_pid(multiprocessing.Process(target=print)) == -1


def test_get_pid_method():
    class Handle:
        def pid(self):
            return 321

    assert get_pid(Handle()) == 321


def test_get_pid_unsupported():
    class Handle:
        def pid(self):
            raise NotImplementedError

    assert get_pid(Handle()) == -1
    assert get_pid(object()) == -1
    assert get_pid(None) == -1


def test_get_pid_never_zero():
    class Handle:
        pid = 0

    assert get_pid(Handle()) == -1


def test_spawn_failure_with_debug_only_logger():
    class DebugOnly:
        def __init__(self):
            self.messages = []

        def debug(self, msg):
            self.messages.append(msg)

    logger = DebugOnly()
    with pytest.raises(FileNotFoundError):
        popen(["/nonexistent/definitely-not-here"], logger=logger)
    assert logger.messages == ["Executing: /nonexistent/definitely-not-here"]


def test_popen_with_broken_config(monkeypatch, tmp_path):
    monkeypatch.setenv("PROCUTIL_CONFIG", str(tmp_path / "missing.yaml"))
    assert popen(["echo", "hi"]).as_text() == "hi\n"
    assert system(["true"]) == 0


def test_spawn_failure_with_broken_config(monkeypatch, tmp_path):
    monkeypatch.setenv("PROCUTIL_CONFIG", str(tmp_path / "missing.yaml"))
    with pytest.raises(FileNotFoundError):
        popen(["/nonexistent/definitely-not-here"])
