"""
rewrite.py — Text rewriting of bundled output.

Two passes over every emitted file, always in this order:

1. Literal replacements: each ``search -> replacement`` pair is a single
   replace-all over the running text, in insertion order.
2. Specifier rewrite: for each external ``bare -> resolved`` pair, the bare
   specifier is swapped for the resolved one, but only where it sits in an
   import/export ``from "..."`` clause or a dynamic ``import("...")`` call.

The second pass is a regex heuristic over generated code, not a parse.  A
string that happens to look exactly like ``import("h3")`` inside a template
literal will be rewritten too; that is an accepted limitation.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, Pattern, Set, Tuple

# ---------------------------------------------------------------------------
# Patterns
# Built per bare specifier; the specifier is escaped so it always matches
# literally.
# ---------------------------------------------------------------------------

# import { x } from "h3" | export * from 'h3' | import"h3"... (minified)
_STATIC_TEMPLATE = (
    r"""(?P<head>(?:import|export)[^"']*?from\s*(?P<q>["']))"""
    r"""{bare}"""
    r"""(?P<tail>(?P=q))"""
)

# import("h3") | import ( 'h3' )
_DYNAMIC_TEMPLATE = (
    r"""(?P<head>import\s*\(\s*(?P<q>["']))"""
    r"""{bare}"""
    r"""(?P<tail>(?P=q)\s*\))"""
)


def static_import_pattern(bare: str) -> Pattern[str]:
    return re.compile(_STATIC_TEMPLATE.replace("{bare}", re.escape(bare)))


def dynamic_import_pattern(bare: str) -> Pattern[str]:
    return re.compile(_DYNAMIC_TEMPLATE.replace("{bare}", re.escape(bare)))


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------

def apply_replacements(text: str, replacements: Mapping[str, str]) -> str:
    """Literal find/replace, one pass per pair, in the mapping's order."""
    for search, replacement in replacements.items():
        if not search:
            continue
        text = text.replace(search, replacement)
    return text


def rewrite_specifiers(text: str, mappings: Mapping[str, str]) -> Tuple[str, Set[str]]:
    """
    Replace bare specifiers in import/export positions.

    Returns the new text and the set of bare specifiers that matched at
    least once.
    """
    matched: Set[str] = set()

    for bare, resolved in mappings.items():
        def _swap(m: "re.Match[str]", resolved: str = resolved) -> str:
            return m.group("head") + resolved + m.group("tail")

        text, n_static = static_import_pattern(bare).subn(_swap, text)
        text, n_dynamic = dynamic_import_pattern(bare).subn(_swap, text)
        if n_static or n_dynamic:
            matched.add(bare)

    return text, matched


def rewrite(
    text: str,
    replacements: Mapping[str, str],
    mappings: Optional[Mapping[str, str]],
    hits: Optional[Set[str]] = None,
) -> str:
    """
    Run both passes over *text*.

    *mappings* of ``None`` skips the specifier pass entirely.  When *hits* is
    given, the bare specifiers that were rewritten are added to it.
    """
    text = apply_replacements(text, replacements)
    if mappings is None:
        return text

    text, matched = rewrite_specifiers(text, mappings)
    if hits is not None:
        hits.update(matched)
    return text
