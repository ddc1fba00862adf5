"""
mappings.py — Bare specifier -> resolved specifier mapping for external packages.

Walks the module graph produced by the loader and keeps, for every import of a
package the caller marked as external, the fully qualified specifier deno
resolved it to (``npm:``, ``jsr:`` or ``https:``).  The rewrite engine later
substitutes these into the bundled output.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

from denobundle.console import Log, resolve_log
from denobundle.graph import DenoGraphLoader, ModuleGraph

# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

EXTERNAL_PROTOCOLS = ("npm:", "jsr:", "https:")

# deno sometimes reports canonical package specifiers as "npm:/pkg@1.0.0"
_SLASH_AFTER_PROTOCOL = re.compile(r"^(npm|jsr):/")

# Read-only view handed to the rewrite engine; None means "nothing external".
SpecifierMap = Mapping[str, str]


def normalize_specifier(specifier: str) -> str:
    """Strip a stray ``/`` right after an ``npm:`` or ``jsr:`` prefix."""
    return _SLASH_AFTER_PROTOCOL.sub(r"\1:", specifier, count=1)


def is_external_protocol(specifier: str) -> bool:
    return specifier.startswith(EXTERNAL_PROTOCOLS)


def matches_external(bare: str, external: Sequence[str]) -> bool:
    """Prefix match: ``"h3"`` covers ``"h3"`` and ``"h3/router"`` alike."""
    return any(bare.startswith(name) for name in external)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def mappings_from_graph(graph: ModuleGraph, external: Sequence[str]) -> SpecifierMap:
    """
    Collect the mapping for *external* from an already loaded *graph*.

    Only ES modules are walked.  Edges without resolution data, or whose
    target (after one redirect hop) is not a non-empty string, are skipped.
    """
    mappings: Dict[str, str] = {}

    for module in graph.modules:
        if module.kind != "esm" or not module.dependencies:
            continue

        for dep in module.dependencies:
            if dep.code is None:
                continue

            bare = dep.specifier
            resolved = dep.code.specifier
            if isinstance(resolved, str):
                resolved = graph.redirects.get(resolved, resolved)

            if not resolved or not isinstance(resolved, str):
                continue

            resolved = normalize_specifier(resolved)
            if is_external_protocol(resolved) and matches_external(bare, external):
                mappings[bare] = resolved

    return MappingProxyType(mappings)


def build_mappings(
    external: Optional[Sequence[str]],
    entrypoints: Sequence[str],
    loader: Optional[DenoGraphLoader] = None,
    log: Optional[Log] = None,
) -> Optional[SpecifierMap]:
    """
    Build the external specifier mapping for a build.

    Parameters
    ----------
    external:
        Package-name prefixes the caller wants left out of the bundle.
    entrypoints:
        Files whose dependency graph is resolved.
    loader:
        Object with a ``load(entrypoints) -> ModuleGraph`` method.  Defaults
        to :class:`DenoGraphLoader`.  Never touched when *external* is empty.
    log:
        Diagnostic sink; receives the mapping listing when it is non-empty.

    Returns
    -------
    ``None`` when nothing is external, otherwise a read-only mapping (which
    may be empty).  Loader errors propagate unchanged.
    """
    if not external:
        return None

    log = resolve_log(log)
    if loader is None:
        loader = DenoGraphLoader()

    graph = loader.load(entrypoints)
    mappings = mappings_from_graph(graph, external)

    if mappings:
        log("\n\t".join(
            ["External mappings:"]
            + [f"{bare} => {resolved}" for bare, resolved in mappings.items()]
        ))

    return mappings
