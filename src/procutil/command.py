"""Build up the arguments, environment and working directory of a process invocation."""

import os
from collections.abc import Iterable, Mapping

from procutil import process, windows
from procutil.stream import ProcessInputStream

DEFAULT_PROPERTY_PREFIX = "-D"


def _quote_if_spaced(value: str) -> str:
    if " " in value or not value:
        return f'"{value}"'
    return value


class CommandSpec:
    """Arguments, environment overlay and working directory for one invocation.

    Every ``add*`` method is null safe: ``None`` arguments are ignored. Once
    configured, use system() or popen() to run it, or build() to get the spawn
    keyword arguments and drive ``subprocess`` yourself.
    """

    def __init__(self, *args):
        self._args: list[str] = []
        self.env: dict[str, str] = {}
        self._pwd: str | None = None
        self.add(*args)

    @property
    def working_dir(self) -> str | None:
        return self._pwd

    def pwd(self, directory) -> "CommandSpec":
        self._pwd = os.fspath(directory) if directory is not None else None
        return self

    def add(self, *args) -> "CommandSpec":
        """Append arguments.

        Strings are added as-is, bytes are decoded with the filesystem encoding,
        paths become their absolute path, lists and other iterables are flattened,
        another CommandSpec is merged (args appended, env entries overwriting ours)
        and anything else goes through str().
        """
        for a in args:
            if a is None:
                continue
            if isinstance(a, CommandSpec):
                self.add_all(a._args)
                self.env.update(a.env)
            elif isinstance(a, str):
                self._args.append(a)
            elif isinstance(a, (bytes, bytearray)):
                self._args.append(os.fsdecode(bytes(a)))
            elif isinstance(a, os.PathLike):
                self._args.append(os.path.abspath(os.fspath(a)))
            elif isinstance(a, Iterable) and not isinstance(a, Mapping):
                self.add(*a)
            else:
                self._args.append(str(a))
        return self

    def add_all(self, args: Iterable | None) -> "CommandSpec":
        if args is not None:
            self.add(*args)
        return self

    def prepend(self, *args) -> "CommandSpec":
        """Insert arguments at the front, normalized the same way as add().

        Env entries of a prepended CommandSpec never override ours.
        """
        head = CommandSpec(*args)
        self._args[0:0] = head._args
        for key, value in head.env.items():
            self.env.setdefault(key, value)
        return self

    def add_quoted(self, arg: str | None) -> "CommandSpec":
        """Add an argument wrapped in double quotes.

        Only needed when the receiving side joins arguments into one string
        (ssh, rsh). Regular invocations pass each argument separately.
        """
        if arg is None:
            return self
        return self.add(f'"{arg}"')

    def add_key_value_pair(self, prefix: str | None, key: str | None, value) -> "CommandSpec":
        """Add ``<prefix>key=value``, prefix defaulting to ``-D``. Nothing is escaped."""
        if key is None:
            return self
        if prefix is None:
            prefix = DEFAULT_PROPERTY_PREFIX
        return self.add(f"{prefix}{key}={value}")

    def add_key_value_pairs(self, prefix: str | None, props: Mapping | None) -> "CommandSpec":
        if props:
            for key, value in props.items():
                self.add_key_value_pair(prefix, key, value)
        return self

    def to_list(self) -> list[str]:
        return self._args

    def to_command_array(self) -> tuple[str, ...]:
        return tuple(self._args)

    def clear(self) -> None:
        self._args.clear()
        self.env.clear()

    def clone(self) -> "CommandSpec":
        r = CommandSpec()
        r._args.extend(self._args)
        r.env.update(self.env)
        r._pwd = self._pwd
        return r

    __copy__ = clone

    def build(self) -> dict:
        """Keyword arguments for subprocess.Popen / subprocess.run."""
        env = None
        if self.env:
            env = {**os.environ, **self.env}
        return {"args": list(self._args), "cwd": self._pwd, "env": env}

    def system(self, logger=None) -> int:
        """Run with the caller's stdin/stdout/stderr and wait. Returns the exit code."""
        return process.system(list(self._args), env=self.env, cwd=self._pwd, logger=logger)

    def popen(self, logger=None) -> ProcessInputStream:
        """Run and return a stream over the combined stdout+stderr."""
        return process.popen(
            list(self._args),
            env=self.env,
            cwd=self._pwd,
            display_name=self.to_string_with_quote(),
            logger=logger,
        )

    def to_windows_command(self, escape_vars: bool = False) -> "CommandSpec":
        """Return a new CommandSpec running this command through cmd.exe /C.

        With escape_vars, %VAR% references are escaped instead of expanded.
        """
        return CommandSpec(windows.windows_command(self._args, escape_vars=escape_vars))

    def to_string_with_quote(self) -> str:
        """Space-joined args, quoting those with spaces. For display only."""
        return " ".join(_quote_if_spaced(a) for a in self._args)

    def __str__(self) -> str:
        env = "".join(f"{k}=\"{v}\" " if " " in v else f"{k}={v} " for k, v in self.env.items())
        return env + self.to_string_with_quote()

    def __repr__(self) -> str:
        return f"CommandSpec({self._args!r}, env={self.env!r}, pwd={self._pwd!r})"

    def __eq__(self, other) -> bool:
        if self is other:
            return True
        if not isinstance(other, CommandSpec):
            return NotImplemented
        return self._args == other._args and self.env == other.env and self._pwd == other._pwd

    def __hash__(self) -> int:
        return hash((tuple(self._args), frozenset(self.env.items()), self._pwd))
