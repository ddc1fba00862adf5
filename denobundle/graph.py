"""
graph.py — Module graph loader for denobundle.

Wraps ``deno info --json`` and converts its output into a small typed graph:
the modules reachable from the entry points, their import edges, and the
redirect table deno uses to canonicalise intermediate specifiers.

How deno decides what a bare name resolves to is deno's business; this module
only reads the answer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from denobundle.errors import GraphResolutionError
from denobundle.process import run_deno

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class Resolution:
    """
    Where the loader resolved one import edge to.

    Attributes
    ----------
    specifier:
        Resolved specifier before redirects, e.g. ``"npm:h3@^1"``.  ``None``
        when the loader reported no string target (resolution error, dynamic
        import it could not follow, ...).
    span:
        Source position of the import in the importing module, as reported
        by the loader (``{"start": {...}, "end": {...}}``), or ``None``.
    error:
        The loader's error message for this edge, if any.
    """

    specifier: Optional[str] = None
    span: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


@dataclass
class Dependency:
    """One import edge: the bare specifier as written plus its resolution."""

    specifier: str
    code: Optional[Resolution] = None


@dataclass
class GraphModule:
    specifier: str
    kind: str
    dependencies: List[Dependency] = field(default_factory=list)


@dataclass
class ModuleGraph:
    """
    The module graph reachable from a set of entry points.

    Attributes
    ----------
    roots:
        Root module specifiers, one per entry point, in request order.
    modules:
        Every module in the graph, de-duplicated by specifier.
    redirects:
        Intermediate resolved specifier -> canonical specifier.  Lookups that
        miss fall back to the original specifier.
    """

    roots: List[str] = field(default_factory=list)
    modules: List[GraphModule] = field(default_factory=list)
    redirects: Dict[str, Any] = field(default_factory=dict)

    def merge(self, other: "ModuleGraph") -> None:
        """Fold *other* into this graph in place."""
        seen = {m.specifier for m in self.modules}
        for root in other.roots:
            if root not in self.roots:
                self.roots.append(root)
        for module in other.modules:
            if module.specifier not in seen:
                seen.add(module.specifier)
                self.modules.append(module)
        self.redirects.update(other.redirects)


# ---------------------------------------------------------------------------
# JSON conversion
# ---------------------------------------------------------------------------

def _parse_resolution(raw: Any) -> Optional[Resolution]:
    if not isinstance(raw, dict):
        return None
    specifier = raw.get("specifier")
    return Resolution(
        specifier=specifier if isinstance(specifier, str) else None,
        span=raw.get("span") if isinstance(raw.get("span"), dict) else None,
        error=raw.get("error") if isinstance(raw.get("error"), str) else None,
    )


def parse_graph(data: Dict[str, Any]) -> ModuleGraph:
    """
    Convert the JSON document printed by ``deno info --json`` to a ModuleGraph.

    Unknown keys are ignored.  Modules without a ``dependencies`` list get an
    empty one; dependencies without a ``code`` block keep ``code=None``.
    """
    modules: List[GraphModule] = []
    for raw_mod in data.get("modules") or []:
        if not isinstance(raw_mod, dict):
            continue
        deps: List[Dependency] = []
        for raw_dep in raw_mod.get("dependencies") or []:
            if not isinstance(raw_dep, dict) or not isinstance(raw_dep.get("specifier"), str):
                continue
            deps.append(Dependency(
                specifier=raw_dep["specifier"],
                code=_parse_resolution(raw_dep.get("code")),
            ))
        modules.append(GraphModule(
            specifier=str(raw_mod.get("specifier", "")),
            kind=str(raw_mod.get("kind", "")),
            dependencies=deps,
        ))

    redirects = data.get("redirects")
    return ModuleGraph(
        roots=[r for r in data.get("roots") or [] if isinstance(r, str)],
        modules=modules,
        redirects=dict(redirects) if isinstance(redirects, dict) else {},
    )


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class DenoGraphLoader:
    """Resolve module graphs by running ``deno info --json`` per entry point."""

    def __init__(self, deno: str = "deno", cwd: Optional[str] = None):
        self.deno = deno
        self.cwd = cwd

    def load(self, entrypoints: Sequence[str]) -> ModuleGraph:
        """
        Return the merged graph for all *entrypoints*.

        Raises GraphResolutionError when deno fails or prints something that
        is not a JSON object.
        """
        graph = ModuleGraph()
        for entry in entrypoints:
            out = run_deno(self.deno, ["info", "--json", entry], GraphResolutionError, cwd=self.cwd)
            try:
                data = json.loads(out)
            except json.JSONDecodeError as exc:
                raise GraphResolutionError(
                    f"deno info returned invalid JSON for {entry}: {exc}",
                ) from exc
            if not isinstance(data, dict):
                raise GraphResolutionError(f"deno info returned no graph for {entry}")
            graph.merge(parse_graph(data))
        return graph
