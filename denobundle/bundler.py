"""
bundler.py — In-memory wrapper around ``deno bundle``.

deno writes its output to disk, so the bundle is produced inside a private
temporary directory and read back as text.  Each emitted file becomes an
OutputArtifact whose ``path`` is already the final destination; nothing is
written there until the orchestrator persists the (rewritten) text.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional, Sequence

from denobundle.errors import BundlerError
from denobundle.process import run_deno

PACKAGES_BUNDLE = "bundle"
PACKAGES_EXTERNAL = "external"


@dataclass
class OutputArtifact:
    """One emitted file: destination path plus its text."""

    path: str
    text: str


def _collect(tmp_root: str, dest_root: str) -> List[OutputArtifact]:
    """Read every file under *tmp_root*, re-rooted at *dest_root*, sorted by path."""
    rel_paths: List[str] = []
    for dirpath, _dirnames, filenames in os.walk(tmp_root):
        for name in filenames:
            rel_paths.append(os.path.relpath(os.path.join(dirpath, name), tmp_root))

    artifacts: List[OutputArtifact] = []
    for rel in sorted(rel_paths):
        with open(os.path.join(tmp_root, rel), "r", encoding="utf-8") as fh:
            text = fh.read()
        artifacts.append(OutputArtifact(path=os.path.join(dest_root, rel), text=text))
    return artifacts


class DenoBundler:
    """Bundle entry points to ESM with deno, returning artifacts in memory."""

    def __init__(self, deno: str = "deno", cwd: Optional[str] = None):
        self.deno = deno
        self.cwd = cwd

    def command_args(
        self,
        entrypoints: Sequence[str],
        external: Sequence[str],
        packages: str,
        outdir: Optional[str],
        output: Optional[str],
        minify: bool,
    ) -> List[str]:
        """Arguments passed to ``deno`` (after the binary itself)."""
        args = ["bundle", "--format", "esm", "--packages", packages]
        if minify:
            args.append("--minify")
        for name in external:
            args.extend(["--external", name])
        if output:
            args.extend(["--output", output])
        else:
            args.extend(["--outdir", outdir or "."])
        args.extend(entrypoints)
        return args

    def bundle(
        self,
        entrypoints: Sequence[str],
        external: Sequence[str],
        packages: str = PACKAGES_BUNDLE,
        output_dir: Optional[str] = None,
        output_path: Optional[str] = None,
        minify: bool = True,
    ) -> List[OutputArtifact]:
        """
        Run deno bundle and return the emitted files.

        With *output_path* the single-file bundle is destined for that path;
        otherwise every emitted file goes under *output_dir*.  Raises
        BundlerError with deno's stderr when bundling fails.
        """
        with tempfile.TemporaryDirectory(prefix="denobundle-") as tmp:
            if output_path:
                dest_root = os.path.dirname(output_path)
                args = self.command_args(
                    entrypoints, external, packages,
                    outdir=None,
                    output=os.path.join(tmp, os.path.basename(output_path)),
                    minify=minify,
                )
            else:
                dest_root = output_dir or "."
                args = self.command_args(
                    entrypoints, external, packages,
                    outdir=tmp, output=None, minify=minify,
                )

            run_deno(self.deno, args, BundlerError, cwd=self.cwd)
            return _collect(tmp, dest_root)
