"""
errors.py — Exception types raised by denobundle.

Only failures of the external collaborators (``deno info`` and
``deno bundle``) get their own types.  Filesystem errors are left as the
``OSError`` subclasses Python already raises.
"""

from typing import List, Optional


class DenoBundleError(Exception):
    """Base class for every error raised by a deno subprocess wrapper."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class GraphResolutionError(DenoBundleError):
    """The module graph loader could not resolve an entry point or dependency."""


class BundlerError(DenoBundleError):
    """The bundler rejected the input (syntax error, missing file, ...)."""
