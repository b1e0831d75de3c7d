"""Reader end of the combined stdout/stderr pipe of a running process."""

import locale
import select
import subprocess

from procutil.config import settings_or_defaults


class ProcessExitError(OSError):
    """A child process finished with a non-zero exit code."""

    def __init__(
        self,
        message: str,
        exit_code: int,
        display_name: str | None = None,
        output: bytes | str | None = None,
    ):
        super().__init__(message)
        self.exit_code = exit_code
        self.display_name = display_name
        self.output = output


def _wait(process: subprocess.Popen) -> int:
    try:
        return process.wait()
    except KeyboardInterrupt as e:
        raise InterruptedError(f"interrupted while waiting for pid {process.pid}") from e


class ProcessInputStream:
    """Forward-only byte stream over a child's output pipe.

    Not restartable. Once EOF is reached, call wait_for() (or use as_text /
    verify_or_die_with, which do it for you) so the exit status is collected.
    """

    def __init__(self, process: subprocess.Popen, display_name: str | None = None):
        self._process = process
        self._base = process.stdout
        self.display_name = display_name

    def with_display_name(self, name: str | None) -> "ProcessInputStream":
        self.display_name = name
        return self

    @property
    def process(self) -> subprocess.Popen:
        return self._process

    @property
    def raw(self):
        """The underlying pipe."""
        return self._base

    def read(self, size: int = -1) -> bytes:
        if size is None:
            size = -1
        return self._base.read(size)

    def readinto(self, buffer) -> int:
        return self._base.readinto(buffer)

    def skip(self, n: int) -> int:
        """Discard up to n bytes. Returns how many were skipped, fewer only at EOF."""
        skipped = 0
        while skipped < n:
            chunk = self._base.read(min(n - skipped, 8192))
            if not chunk:
                break
            skipped += len(chunk)
        return skipped

    def available(self) -> int:
        """Bytes that can be read without blocking. An estimate; 0 when unknown."""
        try:
            ready, _, _ = select.select([self._base], [], [], 0)
        except (OSError, ValueError):
            # Windows pipes and closed streams can't be polled.
            return 0
        if not ready:
            return 0
        return len(self._base.peek(1))

    def close(self) -> None:
        self._base.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def wait_for(self) -> int:
        """Block until the process exits and return its status. Idempotent."""
        return _wait(self._process)

    def as_text(self) -> str:
        """Read everything, reap the process, and decode the output."""
        data = self.read()
        self.wait_for()
        encoding = settings_or_defaults().encoding or locale.getpreferredencoding(False)
        return data.decode(encoding, errors="replace")

    def verify_or_die_with(self, error_message: str) -> str:
        """Return the output, or raise ProcessExitError carrying it on non-zero exit."""
        text = self.as_text()
        code = self.wait_for()
        if code == 0:
            return text
        raise ProcessExitError(
            f"{error_message}\n{text}",
            exit_code=code,
            display_name=self.display_name,
            output=text,
        )

    def with_error_check(self) -> "ErrorCheckingStream":
        return ErrorCheckingStream(self)


class ErrorCheckingStream:
    """Wraps a ProcessInputStream so that EOF on a failed process is a read error.

    Bytes produced before EOF are returned as usual. The read that observes EOF
    reaps the process and raises ProcessExitError if its exit code is non-zero.
    """

    def __init__(self, stream: ProcessInputStream):
        self._stream = stream

    @property
    def stream(self) -> ProcessInputStream:
        return self._stream

    def _check(self, output: bytes = b"") -> None:
        code = self._stream.wait_for()
        if code != 0:
            name = self._stream.display_name
            if name is None:
                name = repr(self._stream.process)
            raise ProcessExitError(
                f"Process '{name}' terminated with exit code={code}",
                exit_code=code,
                display_name=name,
                output=output,
            )

    def read(self, size: int = -1) -> bytes:
        if size is None:
            size = -1
        data = self._stream.read(size)
        if size < 0:
            # Unbounded reads always end at EOF.
            self._check(data)
        elif size > 0 and not data:
            self._check()
        return data

    def readinto(self, buffer) -> int:
        n = self._stream.readinto(buffer)
        if len(buffer) > 0 and not n:
            self._check()
        return n

    def skip(self, n: int) -> int:
        return self._stream.skip(n)

    def available(self) -> int:
        return self._stream.available()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
