"""
cli.py — denobundle command line entry point.

Usage:
    denobundle                                   # bundle ./main.ts into dist/
    denobundle src/main.ts src/worker.ts         # positional entry points
    denobundle -i ./main.ts -e h3,rendu          # keep h3 and rendu external
    denobundle --outputPath dist/app.js --no-minify
    denobundle -r Deno.serve=Bunny.v1.serve -r Deno.env=Bun.env
    python -m denobundle ...                     # module invocation
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

_FALSE_VALUES = {"false", "0", "no", "off"}

from denobundle import __version__
from denobundle.build import BuildOptions, build
from denobundle.bundler import DenoBundler
from denobundle.console import stderr_log
from denobundle.config import load_bundlerrc, options_from_rc, parse_replace_pairs, split_list_values
from denobundle.errors import DenoBundleError
from denobundle.graph import DenoGraphLoader


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="denobundle",
        description="Bundle a Deno project to ESM, keeping chosen packages external.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=[],
        metavar="ENTRYPOINT",
        help="Extra entry points, appended to --entrypoints",
    )
    parser.add_argument(
        "-i", "--entrypoints",
        action="append",
        default=[],
        help="Entry point files (repeatable or comma-separated; default: ./main.ts)",
    )
    parser.add_argument(
        "-e", "--external",
        action="append",
        default=[],
        help="Package-name prefixes to leave external (repeatable or comma-separated)",
    )
    parser.add_argument(
        "-o", "--outputDir",
        dest="output_dir",
        default=None,
        help="Output directory (default: dist)",
    )
    parser.add_argument(
        "--outputPath",
        dest="output_path",
        default=None,
        help="Single-file output path (overrides --outputDir)",
    )
    parser.add_argument(
        "-m", "--minify",
        action="store_const",
        const=True,
        default=None,
        help="Minify the output (default); --minify=false turns it off",
    )
    parser.add_argument(
        "--no-minify",
        dest="no_minify",
        action="store_true",
        help="Do not minify; wins over --minify",
    )
    parser.add_argument(
        "-r", "--replace",
        action="append",
        default=[],
        metavar="FIND=REPLACE",
        help="Literal replacement applied to the bundled code (repeatable)",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="PATH",
        help="Read settings from this file instead of .denobundlerc",
    )
    parser.add_argument(
        "--deno",
        default=None,
        metavar="PATH",
        help="deno executable to run (default: deno on PATH)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"denobundle {__version__}",
    )
    return parser


def _expand_minify_value(argv: List[str]) -> List[str]:
    """Rewrite `--minify=<bool>` into `--minify` or `--no-minify`."""
    out: List[str] = []
    for i, arg in enumerate(argv):
        if arg == "--":
            return out + list(argv[i:])
        if arg.startswith("--minify="):
            value = arg.split("=", 1)[1].strip().lower()
            arg = "--no-minify" if value in _FALSE_VALUES else "--minify"
        out.append(arg)
    return out


def _options_from_namespace(args: argparse.Namespace) -> BuildOptions:
    """BuildOptions holding only what was given on the command line."""
    entrypoints = split_list_values(args.entrypoints) + split_list_values(args.paths)
    external = split_list_values(args.external)
    replace = parse_replace_pairs(split_list_values(args.replace))

    return BuildOptions(
        entrypoints=entrypoints or None,
        external=external or None,
        output_dir=args.output_dir,
        output_path=args.output_path,
        minify=False if args.no_minify else args.minify,
        replace=replace or None,
    )


def parse_cli_args(argv: List[str]) -> BuildOptions:
    """
    Parse command line arguments into BuildOptions.

    Array flags accept both ``--external=h3,rendu`` and
    ``--external=h3 --external=rendu``.  Lists and replacements that end up
    empty are left as ``None``; minify is always set (true unless
    ``--no-minify``).
    """
    args = _build_parser().parse_intermixed_args(_expand_minify_value(argv))
    opts = _options_from_namespace(args)
    if opts.minify is None:
        opts.minify = True
    return opts


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_intermixed_args(_expand_minify_value(sys.argv[1:] if argv is None else argv))

    # --- Load .denobundlerc (CLI args override config) ---
    try:
        rc = load_bundlerrc(os.getcwd(), path=args.config)
    except (OSError, ValueError) as exc:
        print(f"Error: cannot read config {args.config}: {exc}", file=sys.stderr)
        return 1
    if rc:
        stderr_log("Loaded config")
    options = _options_from_namespace(args).merged(options_from_rc(rc))

    deno = args.deno or (rc["deno"] if isinstance(rc.get("deno"), str) else "deno")

    try:
        result = build(
            options,
            loader=DenoGraphLoader(deno=deno),
            bundler=DenoBundler(deno=deno),
            log=stderr_log,
        )
    except DenoBundleError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if exc.command:
            print(f"       command: {' '.join(exc.command)}", file=sys.stderr)
        return 1

    print(f"Done! Bundled {len(result.output_files)} file(s) in {result.duration}ms")
    for path in result.output_files:
        print(f"      {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
