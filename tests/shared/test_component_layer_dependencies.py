"""System-level static checks for cross-component layer dependency direction.

Component dependencies may only point to the same layer or downward:

    intake_core -> action services -> state services -> resources -> intake_shared
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[2]

# Module prefix -> layer. Longest matching prefix wins.
_LAYERS: dict[str, int] = {
    "packages.intake_shared": 0,
    "resources": 1,
    "services.state": 2,
    "services.action": 3,
    "packages.intake_core": 4,
}
_SCAN_ROOTS = ("packages", "resources", "services")


@dataclass(frozen=True)
class _Violation:
    """One layer-direction violation with stable source location."""

    file_path: Path
    line: int
    message: str

    def format(self) -> str:
        return f"{self.file_path}:{self.line}: {self.message}"


def test_components_do_not_import_higher_layer_components() -> None:
    """Reject static import edges from lower-layer to higher-layer components."""
    violations: list[_Violation] = []
    for file_path in _runtime_files():
        caller = _module_name_for_file(file_path)
        caller_layer = _layer_for(caller)
        if caller_layer is None:
            continue
        tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
        for target, line in _imports_for_tree(tree, caller_module=caller):
            target_layer = _layer_for(target)
            if target_layer is not None and target_layer > caller_layer:
                violations.append(
                    _Violation(
                        file_path=file_path.relative_to(_REPO_ROOT),
                        line=line,
                        message=f"'{caller}' (layer {caller_layer}) imports "
                        f"'{target}' (layer {target_layer})",
                    )
                )

    assert not violations, "\n".join(v.format() for v in violations)


def test_layer_map_detects_upward_import() -> None:
    tree = ast.parse("from services.action.delivery import DeliveryService\n")

    imports = _imports_for_tree(tree, caller_module="services.state.quota_authority.x")

    assert [(target, _layer_for(target)) for target, _ in imports] == [
        ("services.action.delivery", 3)
    ]
    assert _layer_for("services.state.quota_authority.x") == 2


def _runtime_files() -> list[Path]:
    files: list[Path] = []
    for root_name in _SCAN_ROOTS:
        for file_path in (_REPO_ROOT / root_name).rglob("*.py"):
            rel = file_path.relative_to(_REPO_ROOT)
            if "__pycache__" in rel.parts or "tests" in rel.parts:
                continue
            files.append(file_path)
    return sorted(files)


def _imports_for_tree(tree: ast.Module, *, caller_module: str) -> list[tuple[str, int]]:
    imports: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend((alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            base = node.module or ""
            if node.level:
                parts = caller_module.split(".")[: -node.level]
                base = ".".join([*parts, base] if base else parts)
            if base:
                imports.append((base, node.lineno))
    return imports


def _layer_for(module_name: str) -> int | None:
    matches = [
        prefix
        for prefix in _LAYERS
        if module_name == prefix or module_name.startswith(f"{prefix}.")
    ]
    if not matches:
        return None
    return _LAYERS[max(matches, key=len)]


def _module_name_for_file(file_path: Path) -> str:
    rel = file_path.relative_to(_REPO_ROOT)
    if rel.name == "__init__.py":
        return ".".join(rel.parent.parts)
    return ".".join(rel.with_suffix("").parts)
