"""
build.py — Build orchestration for denobundle.

Sequence for one build, strictly linear:

    external mappings (only if something is external)
      -> deno bundle (in memory)
      -> per artifact: replacements, specifier rewrite, write to disk
      -> duration + written paths

Every call owns its mapping and buffers, so independent builds can run
concurrently as long as their output paths do not overlap.
"""

from __future__ import annotations

import dataclasses
import os
import time
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Set

from denobundle.bundler import PACKAGES_BUNDLE, PACKAGES_EXTERNAL, DenoBundler
from denobundle.console import Log, resolve_log
from denobundle.graph import DenoGraphLoader
from denobundle.mappings import build_mappings
from denobundle.rewrite import rewrite

DEFAULT_ENTRYPOINTS = ["./main.ts"]
DEFAULT_OUTPUT_DIR = "dist"

# ---------------------------------------------------------------------------
# Options / result
# ---------------------------------------------------------------------------


@dataclass
class BuildOptions:
    """
    Build configuration.  ``None`` on any field means "use the default".

    Attributes
    ----------
    entrypoints:  files to bundle (default ``["./main.ts"]``)
    external:     package-name prefixes to resolve instead of inline
    output_dir:   directory for multi-file output (default ``"dist"``)
    output_path:  single-file output path, overrides output_dir
    minify:       minify emitted code (default True)
    replace:      literal find -> replace pairs applied to emitted text
    """

    entrypoints: Optional[List[str]] = None
    external: Optional[List[str]] = None
    output_dir: Optional[str] = None
    output_path: Optional[str] = None
    minify: Optional[bool] = None
    replace: Optional[Dict[str, str]] = None

    def merged(self, fallback: "BuildOptions") -> "BuildOptions":
        """Return a copy where unset fields are taken from *fallback*."""
        updates = {
            f.name: getattr(fallback, f.name)
            for f in fields(self)
            if getattr(self, f.name) is None
        }
        return dataclasses.replace(self, **updates)

    def resolved(self) -> "BuildOptions":
        """Return a copy with every default applied."""
        return BuildOptions(
            entrypoints=list(self.entrypoints) if self.entrypoints is not None else list(DEFAULT_ENTRYPOINTS),
            external=list(self.external) if self.external is not None else [],
            output_dir=self.output_dir if self.output_dir is not None else DEFAULT_OUTPUT_DIR,
            output_path=self.output_path,
            minify=self.minify if self.minify is not None else True,
            replace=dict(self.replace) if self.replace is not None else {},
        )


@dataclass
class BuildResult:
    duration: int
    output_files: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# I/O helpers
# ---------------------------------------------------------------------------

def _write_text(path: str, text: str) -> None:
    """Create *path*'s parent directories as needed, then write *text*."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build(
    options: Optional[BuildOptions] = None,
    *,
    loader: Optional[DenoGraphLoader] = None,
    bundler: Optional[DenoBundler] = None,
    log: Optional[Log] = None,
) -> BuildResult:
    """Bundle a Deno project and post-process its output.

    Args:
        options: Build configuration; missing fields take their defaults.
        loader:  Module graph loader, only used when something is external.
        bundler: Object with the :meth:`DenoBundler.bundle` signature.
        log:     Diagnostic sink for this build (stderr by default).

    Returns:
        BuildResult with the elapsed milliseconds and the written paths, in
        the order the bundler reported the artifacts.

    Any loader, bundler or filesystem error propagates.  Files written before
    the failure are left in place.
    """
    opts = (options or BuildOptions()).resolved()
    log = resolve_log(log)
    if bundler is None:
        bundler = DenoBundler()

    start = time.monotonic()
    log("Bundling project...")

    mappings = build_mappings(opts.external, opts.entrypoints, loader=loader, log=log)

    artifacts = bundler.bundle(
        opts.entrypoints,
        opts.external,
        packages=PACKAGES_EXTERNAL if mappings is not None else PACKAGES_BUNDLE,
        output_dir=None if opts.output_path else opts.output_dir,
        output_path=opts.output_path,
        minify=opts.minify,
    )

    output_files: List[str] = []
    hits: Set[str] = set()
    for artifact in artifacts:
        artifact.text = rewrite(artifact.text, opts.replace, mappings, hits=hits)
        _write_text(artifact.path, artifact.text)
        output_files.append(artifact.path)

    # The mapping comes from the loader, not from the bundle itself
    if mappings:
        for bare in mappings:
            if bare not in hits:
                log(f"warning: no import of {bare!r} found in the bundle output; left unchanged")

    duration = int((time.monotonic() - start) * 1000)
    log(f"Bundle completed in {duration}ms")

    return BuildResult(duration=duration, output_files=output_files)
