"""Process launching (inherited stdio or a captured pipe) and pid lookup."""

import os
import subprocess

from procutil import log
from procutil.stream import ProcessInputStream


def _merged_env(env: dict[str, str] | None) -> dict[str, str] | None:
    if env is None:
        return None
    return {**os.environ, **env}


def spawn(
    args: list[str],
    env: dict[str, str] | None = None,
    cwd: str | None = None,
    logger=None,
    **redirects,
) -> subprocess.Popen:
    """Start a child process. Spawn failures propagate as OSError.

    ``logger`` needs a ``debug`` method; ``error`` is used when present.
    """
    logger = logger or log
    try:
        return subprocess.Popen(args, env=_merged_env(env), cwd=cwd, **redirects)
    except OSError as e:
        report = getattr(logger, "error", None)
        if report is not None:
            report(f"Failed to start {args[0] if args else '<empty command>'}: {e}")
        raise


def system(
    args: list[str],
    env: dict[str, str] | None = None,
    cwd: str | None = None,
    logger=None,
) -> int:
    """Run a command with inherited stdin/stdout/stderr. Returns exit code.

    See system(3).
    """
    logger = logger or log
    logger.debug(f"Executing: {' '.join(args)}")
    proc = spawn(args, env=env, cwd=cwd, logger=logger)
    return proc.wait()


def popen(
    args: list[str],
    env: dict[str, str] | None = None,
    cwd: str | None = None,
    display_name: str | None = None,
    logger=None,
) -> ProcessInputStream:
    """Run a command and return a stream over its merged stdout+stderr.

    The child's stdin is closed right after it starts. See popen(3).
    """
    logger = logger or log
    logger.debug(f"Executing: {display_name or ' '.join(args)}")
    proc = spawn(
        args,
        env=env,
        cwd=cwd,
        logger=logger,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )
    proc.stdin.close()
    return ProcessInputStream(proc, display_name=display_name)


def get_pid(process) -> int:
    """Return the OS process id of a child process, or -1 if it can't be determined.

    Accepts anything exposing ``pid`` as an attribute or a method
    (subprocess.Popen, asyncio subprocesses, multiprocessing.Process, ...).
    """
    try:
        pid = process.pid
        if callable(pid):
            pid = pid()
        pid = int(pid)
    except Exception:
        return -1
    return pid if pid > 0 else -1
