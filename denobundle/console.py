"""
console.py — Progress output for denobundle.

Diagnostics are passed around as a plain ``log(msg)`` callable so each build
can be given its own sink.  The default prints ``[denobundle] <msg>`` to
stderr, keeping stdout free for the final report.
"""

import sys
from typing import Callable, Optional

Log = Callable[[str], None]

PREFIX = "[denobundle]"


def stderr_log(msg: str) -> None:
    print(f"{PREFIX} {msg}", file=sys.stderr)


def quiet_log(msg: str) -> None:
    pass


def resolve_log(log: Optional[Log]) -> Log:
    """Return *log*, or the stderr logger when none was given."""
    return log if log is not None else stderr_log
