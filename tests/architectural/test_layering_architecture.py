"""Architectural tests: static import layering.

All checks are AST-based to avoid runtime side effects.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, List

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
PKG_DIR = PROJECT_ROOT / "survey_relay"
CLIENT_DIR = PKG_DIR / "client"
ROUTES_DIR = PKG_DIR / "routes"


def py_files_under(root: Path) -> list[Path]:
    return [p for p in root.rglob("*.py") if "__pycache__" not in p.parts]


def imported_modules(path: Path) -> List[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    names: List[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.append(node.module)
    return names


def _offenders(files: Iterable[Path], forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in files:
        for module in imported_modules(path):
            if module.startswith(forbidden):
                found.append(f"{path.relative_to(PROJECT_ROOT)} imports {module}")
    return found


def test_package_layout_exists():
    for sub in ("client", "logic", "routes", "models", "http", "db"):
        assert (PKG_DIR / sub / "__init__.py").exists(), sub


def test_routes_do_not_touch_the_database_layer():
    assert _offenders(py_files_under(ROUTES_DIR), ("sqlalchemy", "survey_relay.db")) == []


def test_client_is_independent_of_server_side_modules():
    forbidden = ("survey_relay.logic", "survey_relay.routes", "survey_relay.db", "fastapi", "sqlalchemy", "google")
    assert _offenders(py_files_under(CLIENT_DIR), forbidden) == []


@pytest.mark.parametrize("path", py_files_under(PKG_DIR), ids=lambda p: str(p.relative_to(PKG_DIR)))
def test_modules_use_module_level_loggers_not_print(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8"))
    prints = [
        node.lineno
        for node in ast.walk(tree)
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "print"
    ]
    assert prints == []
