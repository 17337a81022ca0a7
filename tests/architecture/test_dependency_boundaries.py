"""依存境界（core < canvas < export < graph）の破りを検出するテスト。"""

from __future__ import annotations

import ast
from pathlib import Path

_SRC = Path(__file__).resolve().parents[2] / "src" / "grafplot"


def _imports(path: Path) -> tuple[set[str], int]:
    """(絶対 import のモジュール名集合, 相対 import の数) を返す。"""
    tree = ast.parse(path.read_text(encoding="utf-8"))
    modules: set[str] = set()
    relative = 0
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                relative += 1
            elif node.module is not None:
                modules.add(node.module)
                modules.update(f"{node.module}.{alias.name}" for alias in node.names if alias.name != "*")
    return modules, relative


def _violations(root: Path, forbidden_prefixes: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for path in sorted(root.rglob("*.py")):
        modules, _ = _imports(path)
        bad = sorted(m for m in modules if m.startswith(forbidden_prefixes))
        if bad:
            found.append(f"{path.relative_to(_SRC)}: {', '.join(bad)}")
    return found


def test_package_uses_absolute_imports_only() -> None:
    # 層の判定はモジュール名の前方一致で行うため、相対 import を許さない。
    relative = [str(p.relative_to(_SRC)) for p in sorted(_SRC.rglob("*.py")) if _imports(p)[1]]
    assert relative == []


def test_core_does_not_depend_on_upper_layers() -> None:
    assert _violations(_SRC / "core", ("grafplot.canvas", "grafplot.export", "grafplot.graph")) == []


def test_canvas_does_not_depend_on_export_or_graph() -> None:
    assert _violations(_SRC / "canvas", ("grafplot.export", "grafplot.graph")) == []


def test_export_does_not_depend_on_graph() -> None:
    assert _violations(_SRC / "export", ("grafplot.graph",)) == []


def test_library_does_not_import_optional_stacks() -> None:
    assert _violations(_SRC, ("pyglet", "moderngl", "imgui", "matplotlib")) == []


def test_import_collection_expands_from_imports(tmp_path: Path) -> None:
    path = tmp_path / "sample.py"
    path.write_text("import numpy as np\nfrom grafplot.export import svg\nfrom . import x\n", encoding="utf-8")

    modules, relative = _imports(path)

    assert {"numpy", "grafplot.export", "grafplot.export.svg"} <= modules
    assert relative == 1
