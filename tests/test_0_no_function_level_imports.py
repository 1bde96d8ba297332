"""Guard: no function-level imports of mcp_console inside src/.

A function-level `import mcp_console.x.y` rebinds `mcp_console` as a local
for the whole enclosing function, so any earlier `mcp_console.` reference in
that function raises UnboundLocalError. `from mcp_console... import` inside
a function hides a dependency the module graph should show, so it is
flagged too.

This file is named with `test_0_` so it runs first.
"""

import ast
import os


_SRC_ROOT = os.path.join(os.path.dirname(__file__), "..", "src", "mcp_console")
_PACKAGE = "mcp_console"


def _imported_names(node):
    if isinstance(node, ast.Import):
        return [alias.name for alias in node.names]
    if isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
        return [node.module]
    return []


def _find_function_level_imports():
    """Walk all .py files and flag package imports inside functions/methods."""
    violations = []
    for dirpath, _dirs, files in os.walk(_SRC_ROOT):
        for fname in sorted(files):
            if not fname.endswith(".py"):
                continue
            path = os.path.join(dirpath, fname)
            with open(path, encoding="utf-8") as f:
                tree = ast.parse(f.read(), filename=path)

            rel = os.path.relpath(path, _SRC_ROOT)
            for node in ast.walk(tree):
                if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    continue
                for child in ast.walk(node):
                    for name in _imported_names(child):
                        if name == _PACKAGE or name.startswith(_PACKAGE + "."):
                            violations.append(f"{rel}:{child.lineno} function-level import of {name}")
    return violations


def test_sources_parse_and_have_no_function_level_imports():
    violations = _find_function_level_imports()
    assert violations == [], (
        "Move these imports to module level:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
