"""
denobundle — Deno bundler wrapper with external package resolution.

Bundles entry points to ESM with ``deno bundle`` and post-processes the
output:

- imports of packages marked external are rewritten to the specifier deno
  resolved them to (``npm:``, ``jsr:``, ``https:``)
- arbitrary literal string replacements are applied to the emitted code

Example::

    from denobundle import BuildOptions, build

    result = build(BuildOptions(
        entrypoints=["./main.ts"],
        external=["h3", "rendu"],
        replace={"Deno.serve": "Bunny.v1.serve"},
    ))
    print(f"Bundled in {result.duration}ms")
"""

__version__ = "0.1.0"

from denobundle.build import BuildOptions, BuildResult, build  # noqa: E402
from denobundle.cli import parse_cli_args  # noqa: E402
from denobundle.errors import BundlerError, DenoBundleError, GraphResolutionError  # noqa: E402
from denobundle.mappings import build_mappings  # noqa: E402
from denobundle.rewrite import rewrite  # noqa: E402

__all__ = [
    "BuildOptions",
    "BuildResult",
    "BundlerError",
    "DenoBundleError",
    "GraphResolutionError",
    "build",
    "build_mappings",
    "parse_cli_args",
    "rewrite",
]
