"""
process.py — Thin subprocess wrapper around the ``deno`` binary.

Both collaborators (graph loader and bundler) shell out to deno and need the
same treatment: capture stdout/stderr as text, and turn every failure mode
(binary missing, non-zero exit) into a typed error carrying the tool's own
message verbatim.
"""

import subprocess
from typing import List, Optional, Type

from denobundle.errors import DenoBundleError


def run_deno(
    deno: str,
    args: List[str],
    error_cls: Type[DenoBundleError],
    cwd: Optional[str] = None,
) -> str:
    """Execute ``deno <args>`` and return its stdout.

    Args:
        deno:      Path or name of the deno executable.
        args:      Subcommand and arguments, e.g. ``["info", "--json", "main.ts"]``.
        error_cls: Error type raised on failure.
        cwd:       Working directory, or ``None`` for the current one.

    Returns:
        The decoded stdout of the process.

    Raises:
        error_cls: when deno cannot be started or exits non-zero.  There is
        no retry and no timeout; the caller decides what to do.
    """
    command = [deno] + list(args)
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        # Binary not installed or cwd does not exist
        raise error_cls(
            f"could not run {deno!r}: {exc}",
            command=command,
        ) from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise error_cls(
            stderr or f"{' '.join(command)} exited with status {result.returncode}",
            command=command,
            returncode=result.returncode,
            stderr=result.stderr,
        )
    return result.stdout
