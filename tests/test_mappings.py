import pytest

from conftest import DENO_INFO, FakeLoader

from denobundle.errors import GraphResolutionError
from denobundle.graph import parse_graph
from denobundle.mappings import (
    build_mappings,
    is_external_protocol,
    mappings_from_graph,
    normalize_specifier,
)


def _graph(deps, redirects=None, kind="esm"):
    return parse_graph({
        "modules": [{"kind": kind, "specifier": "file:///main.ts", "dependencies": deps}],
        "redirects": redirects or {},
    })


def test_empty_external_skips_loader(log, messages):
    loader = FakeLoader(error=GraphResolutionError("loader must not run"))

    assert build_mappings([], ["./main.ts"], loader=loader, log=log) is None
    assert build_mappings(None, ["./main.ts"], loader=loader, log=log) is None
    assert loader.calls == []
    assert messages == []


def test_external_name_maps_to_jsr_specifier():
    graph = _graph([{"specifier": "h3", "code": {"specifier": "jsr:@hono/h3@1.0.0"}}])

    assert dict(mappings_from_graph(graph, ["h3"])) == {"h3": "jsr:@hono/h3@1.0.0"}
    assert dict(mappings_from_graph(graph, ["other"])) == {}


def test_prefix_match_covers_subpaths():
    graph = _graph([{"specifier": "h3/router", "code": {"specifier": "npm:h3@1.0.0/router"}}])

    assert dict(mappings_from_graph(graph, ["h3"])) == {"h3/router": "npm:h3@1.0.0/router"}


def test_local_files_never_mapped():
    graph = _graph([
        {"specifier": "h3", "code": {"specifier": "file:///vendor/h3/mod.ts"}},
        {"specifier": "h3/node", "code": {"specifier": "node:http"}},
        {"specifier": "h3/http", "code": {"specifier": "http://example.com/h3.js"}},
    ])

    assert dict(mappings_from_graph(graph, ["h3"])) == {}


def test_redirect_followed_and_normalized():
    graph = _graph(
        [{"specifier": "h3", "code": {"specifier": "npm:h3@^1"}}],
        redirects={"npm:h3@^1": "npm:/h3@1.15.1"},
    )

    assert dict(mappings_from_graph(graph, ["h3"])) == {"h3": "npm:h3@1.15.1"}


def test_degraded_resolution_is_skipped():
    graph = _graph([
        {"specifier": "h3"},
        {"specifier": "h3/a", "code": {"error": "not found"}},
        {"specifier": "h3/b", "code": {"specifier": 42}},
        {"specifier": "h3/c", "code": {"specifier": "npm:h3@^1"}},
    ], redirects={"npm:h3@^1": None})

    assert dict(mappings_from_graph(graph, ["h3"])) == {}


def test_only_esm_modules_are_walked():
    graph = _graph([{"specifier": "h3", "code": {"specifier": "npm:h3@1"}}], kind="npm")

    assert dict(mappings_from_graph(graph, ["h3"])) == {}


def test_build_mappings_from_loader_output(log, messages):
    loader = FakeLoader(DENO_INFO)

    mappings = build_mappings(["h3", "rendu", "std-"], ["./main.ts"], loader=loader, log=log)

    assert loader.calls == [["./main.ts"]]
    assert dict(mappings) == {
        "h3": "npm:h3@1.15.1",
        "h3/router": "npm:h3@1.15.1/router",
        "rendu": "jsr:@hono/rendu@0.2.3",
        "std-path": "https://deno.land/std@0.224.0/path/mod.ts",
    }
    assert messages == [
        "External mappings:\n"
        "\th3 => npm:h3@1.15.1\n"
        "\th3/router => npm:h3@1.15.1/router\n"
        "\trendu => jsr:@hono/rendu@0.2.3\n"
        "\tstd-path => https://deno.land/std@0.224.0/path/mod.ts"
    ]


def test_no_diagnostic_when_nothing_matches(log, messages):
    mappings = build_mappings(["nope"], ["./main.ts"], loader=FakeLoader(), log=log)

    assert mappings is not None
    assert len(mappings) == 0
    assert messages == []


def test_mapping_is_read_only():
    mappings = build_mappings(["h3"], ["./main.ts"], loader=FakeLoader(), log=lambda msg: None)

    with pytest.raises(TypeError):
        mappings["h3"] = "npm:other"


def test_loader_failure_propagates():
    loader = FakeLoader(error=GraphResolutionError("Module not found"))

    with pytest.raises(GraphResolutionError, match="Module not found"):
        build_mappings(["h3"], ["./main.ts"], loader=loader, log=lambda msg: None)


@pytest.mark.parametrize("raw, expected", [
    ("npm:/h3@1.0.0", "npm:h3@1.0.0"),
    ("jsr:/@std/path@1.0.0", "jsr:@std/path@1.0.0"),
    ("npm:h3@1.0.0", "npm:h3@1.0.0"),
    ("https://deno.land/x/mod.ts", "https://deno.land/x/mod.ts"),
    ("file:///npm:/x", "file:///npm:/x"),
])
def test_normalize_specifier(raw, expected):
    assert normalize_specifier(raw) == expected


def test_is_external_protocol():
    assert is_external_protocol("npm:h3")
    assert is_external_protocol("jsr:@std/path")
    assert is_external_protocol("https://esm.sh/h3")
    assert not is_external_protocol("http://esm.sh/h3")
    assert not is_external_protocol("file:///main.ts")
    assert not is_external_protocol("node:fs")
