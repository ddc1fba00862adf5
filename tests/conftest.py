import os
import shutil

import pytest

from denobundle.bundler import OutputArtifact
from denobundle.graph import parse_graph

# Trimmed output of `deno info --json main.ts` for a project importing
# h3 from npm, a jsr router and a local helper.
DENO_INFO = {
    "version": 1,
    "roots": ["file:///work/main.ts"],
    "modules": [
        {
            "kind": "esm",
            "specifier": "file:///work/main.ts",
            "mediaType": "TypeScript",
            "size": 210,
            "dependencies": [
                {
                    "specifier": "h3",
                    "code": {
                        "specifier": "npm:h3@^1.15.0",
                        "resolutionMode": "import",
                        "span": {"start": {"line": 0, "character": 24}, "end": {"line": 0, "character": 28}},
                    },
                },
                {
                    "specifier": "h3/router",
                    "code": {"specifier": "npm:/h3@1.15.1/router", "span": {}},
                },
                {
                    "specifier": "rendu",
                    "code": {"specifier": "jsr:@hono/rendu@^0.2"},
                },
                {
                    "specifier": "./util.ts",
                    "code": {"specifier": "file:///work/util.ts"},
                },
                {
                    "specifier": "missing",
                    "code": {"error": "Relative import path \"missing\" not prefixed with / or ./ or ../"},
                },
                {
                    "specifier": "types-only",
                },
            ],
        },
        {
            "kind": "esm",
            "specifier": "file:///work/util.ts",
            "mediaType": "TypeScript",
            "size": 40,
            "dependencies": [
                {
                    "specifier": "std-path",
                    "code": {"specifier": "https://deno.land/std@0.224.0/path/mod.ts"},
                },
            ],
        },
        {
            "kind": "npm",
            "specifier": "npm:/h3@1.15.1",
            "npmPackage": "h3@1.15.1",
        },
    ],
    "redirects": {
        "npm:h3@^1.15.0": "npm:/h3@1.15.1",
        "jsr:@hono/rendu@^0.2": "jsr:@hono/rendu@0.2.3",
    },
    "packages": {},
}


class FakeLoader:
    """Stands in for DenoGraphLoader; records every load() call."""

    def __init__(self, data=None, error=None):
        self.data = data if data is not None else DENO_INFO
        self.error = error
        self.calls = []

    def load(self, entrypoints):
        self.calls.append(list(entrypoints))
        if self.error is not None:
            raise self.error
        return parse_graph(self.data)


class FakeBundler:
    """Stands in for DenoBundler; returns canned artifacts under the destination."""

    def __init__(self, files=None, error=None):
        self.files = files if files is not None else {"main.js": 'export const message = "Hello, World!";\n'}
        self.error = error
        self.calls = []

    def bundle(self, entrypoints, external, packages="bundle", output_dir=None, output_path=None, minify=True):
        self.calls.append({
            "entrypoints": list(entrypoints),
            "external": list(external),
            "packages": packages,
            "output_dir": output_dir,
            "output_path": output_path,
            "minify": minify,
        })
        if self.error is not None:
            raise self.error
        if output_path:
            (text,) = self.files.values()
            return [OutputArtifact(path=output_path, text=text)]
        return [
            OutputArtifact(path=os.path.join(output_dir, name), text=text)
            for name, text in sorted(self.files.items())
        ]


@pytest.fixture
def messages():
    return []


@pytest.fixture
def log(messages):
    return messages.append


requires_deno = pytest.mark.skipif(shutil.which("deno") is None, reason="deno not installed")
