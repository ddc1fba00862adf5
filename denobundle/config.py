"""
config.py — ``.denobundlerc`` loading and value normalisation.

The CLI merges three sources, highest priority first:

    command line  >  .denobundlerc  >  built-in defaults

The rc file is JSON and uses the same option names as the command line.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from denobundle.build import BuildOptions

RC_NAME = ".denobundlerc"


def split_list_values(values: Optional[Iterable[Any]]) -> List[str]:
    """
    Flatten repeated and comma-separated values into one list.

    ``["h3,rendu", "hono"]`` and ``["h3", "rendu", "hono"]`` both give
    ``["h3", "rendu", "hono"]``.  Empty pieces are dropped.
    """
    if values is None:
        return []
    if isinstance(values, (str, int, float)):
        values = [values]
    out: List[str] = []
    for item in values:
        out.extend(piece for piece in str(item).split(",") if piece)
    return out


def parse_replace_pairs(values: Iterable[str]) -> Dict[str, str]:
    """
    Parse ``key=value`` entries; only the first ``=`` separates.

    Entries without ``=`` or with an empty key are dropped silently.
    """
    pairs: Dict[str, str] = {}
    for arg in values:
        key, sep, value = arg.partition("=")
        if sep and key:
            pairs[key] = value
    return pairs


def load_bundlerrc(project_root: str, path: Optional[str] = None) -> Dict:
    """
    Load rc configuration, with fallback chain:

        1. *path*, when given (no fallback, errors propagate)
        2. <project_root>/.denobundlerc
        3. ~/.denobundlerc
        4. Empty dict (no config found)

    Recognised keys (all optional):
        entrypoints   list[str] | str  — files to bundle
        external      list[str] | str  — package prefixes to keep external
        outputDir     str              — output directory
        outputPath    str              — single-file output path
        minify        bool             — minify output
        replace       dict[str, str]   — literal replacements
        deno          str              — deno executable to run

    Returns a dict (possibly empty) with the first readable settings found.

    An explicit *path* that is missing, unreadable, corrupt or not a JSON
    object raises (OSError or ValueError) instead of falling back.
    """
    if path is not None:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object")
        return data

    candidates = [
        Path(project_root) / RC_NAME,
        Path.home() / RC_NAME,
    ]

    for candidate in candidates:
        if candidate.is_file():
            try:
                with open(str(candidate), "r", encoding="utf-8") as fh:
                    data = json.load(fh)
                if isinstance(data, dict):
                    return data
            except (OSError, json.JSONDecodeError):
                # Corrupt or unreadable config → try next candidate
                pass

    return {}


def options_from_rc(rc: Dict) -> BuildOptions:
    """Turn rc settings into BuildOptions, ignoring values of the wrong type."""
    opts = BuildOptions()

    if "entrypoints" in rc:
        opts.entrypoints = split_list_values(rc["entrypoints"]) or None
    if "external" in rc:
        opts.external = split_list_values(rc["external"]) or None
    if isinstance(rc.get("outputDir"), str):
        opts.output_dir = rc["outputDir"]
    if isinstance(rc.get("outputPath"), str):
        opts.output_path = rc["outputPath"]
    if isinstance(rc.get("minify"), bool):
        opts.minify = rc["minify"]
    if isinstance(rc.get("replace"), dict):
        opts.replace = {
            k: v for k, v in rc["replace"].items()
            if isinstance(k, str) and k and isinstance(v, str)
        } or None

    return opts
