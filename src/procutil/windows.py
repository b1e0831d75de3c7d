"""Escape a command line for cmd.exe and wrap it so the exit code survives.

Arguments are wrapped in double quotes if they contain any of::

    space * ? , ; ^ & < > | "

and, when ``escape_vars`` is set, a ``%`` followed by a letter.

``^&<>|`` would need a ``^`` prefix when typed at an interactive prompt, but not
when cmd.exe is spawned with the command as an argument, so no caret is added.

A ``"`` is doubled. Windows has trouble with some combinations of quotes and
spaces, so quotes are best avoided.

With ``escape_vars``, a letter following ``%`` gets its own pair of quotes so
``%foo%`` becomes ``"%"f"oo%"``. The second ``%`` needs nothing since no letter
follows it.

Example::

    -Dfoo=*abc?def;ghi^jkl&mno<pqr>stu|vwx"yz%end
    "-Dfoo=*abc?def;ghi^jkl&mno<pqr>stu|vwx""yz%"e"nd"
"""

import string

from procutil.config import Settings, load_settings

QUOTE_TRIGGERS = " *?,;"
SHELL_OPERATORS = "^&<>|"

# Batch files can't return the right error code on their own, so the command
# runs under cmd.exe. %% delays ERRORLEVEL expansion until the command has run.
EXIT_SUFFIX = "&& exit %%ERRORLEVEL%%"


def _start_quoting(buf: list[str], arg: str, at: int) -> bool:
    buf.append('"')
    buf.append(arg[:at])
    return True


def escape_args(args: list[str], escape_vars: bool = False) -> str:
    """Join args into one cmd.exe command string ending in the exit-code suffix."""
    buf = []
    for arg in args:
        quoted = percent = False
        for i, c in enumerate(arg):
            if not quoted and c in QUOTE_TRIGGERS:
                quoted = _start_quoting(buf, arg, i)
            elif c in SHELL_OPERATORS:
                if not quoted:
                    quoted = _start_quoting(buf, arg, i)
            elif c == '"':
                if not quoted:
                    quoted = _start_quoting(buf, arg, i)
                buf.append('"')
            elif percent and escape_vars and c in string.ascii_letters:
                if not quoted:
                    quoted = _start_quoting(buf, arg, i)
                buf.append('"')
                buf.append(c)
                c = '"'
            percent = c == "%"
            if quoted:
                buf.append(c)
        if quoted:
            buf.append('"')
        else:
            buf.append(arg)
        buf.append(" ")
    buf.append(EXIT_SUFFIX)
    return "".join(buf)


def windows_command(
    args: list[str], escape_vars: bool = False, settings: Settings | None = None
) -> list[str]:
    """Return ``[shell, flag, "<escaped command>"]`` for the given args."""
    settings = settings or load_settings()
    escaped = escape_args(args, escape_vars=escape_vars)
    return [settings.windows_shell, settings.windows_shell_flag, f'"{escaped}"']
