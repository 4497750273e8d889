"""Trust-zone dependency rules between the tillscan packages.

Pure code (parsing, domain models, image transforms) never reaches into the
runtime layer that owns environment variables, config files, OCR engines and
the HTTP server.
"""

from __future__ import annotations

import ast
import importlib.util
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
_ZONES: dict[tuple[str, ...], str] = {
    ("runtime",): "Privileged",
    ("application",): "Orchestrator",
    ("cli",): "Orchestrator",
    ("domain",): "Pure",
    ("receipt",): "Pure",
}
_ALLOWED_TARGET_ZONES = {
    "Privileged": {"Privileged", "Pure"},
    "Orchestrator": {"Privileged", "Orchestrator", "Pure"},
    "Pure": {"Pure"},
}
# Libraries that do I/O on behalf of the runtime layer
_RUNTIME_ONLY_LIBRARIES = {"httpx", "fastapi", "starlette", "uvicorn", "pytesseract"}


def _zone_for_parts(parts: tuple[str, ...]) -> str | None:
    for prefix, zone in _ZONES.items():
        if parts[: len(prefix)] == prefix:
            return zone
    return None


def _module_name_for_file(path: Path) -> str:
    parts = list(path.relative_to(_ROOT).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(["tillscan", *parts])


def _imported_modules(path: Path) -> list[str]:
    module_name = _module_name_for_file(path)
    current_package = module_name if path.name == "__init__.py" else module_name.rsplit(".", 1)[0]
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))

    imports: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level == 0:
                if node.module:
                    imports.append(node.module)
                continue

            rel_name = "." * node.level + (node.module or "")
            try:
                imports.append(importlib.util.resolve_name(rel_name, current_package))
            except ImportError:
                continue
    return imports


def _zone_files() -> list[tuple[Path, str]]:
    files: list[tuple[Path, str]] = []
    for prefix, zone in _ZONES.items():
        files.extend((path, zone) for path in sorted((_ROOT / Path(*prefix)).rglob("*.py")))
    return files


def test_trust_zone_paths_exist() -> None:
    missing = [str(Path(*prefix)) for prefix in _ZONES if not (_ROOT / Path(*prefix)).is_dir()]

    assert not missing, "Trust-zone directories do not exist:\n" + "\n".join(missing)


def test_trust_zone_import_boundaries() -> None:
    violations: list[str] = []

    for path, source_zone in _zone_files():
        rel = path.relative_to(_ROOT)
        for module in _imported_modules(path):
            if not module.startswith("tillscan."):
                continue
            target_zone = _zone_for_parts(tuple(module.split(".")[1:]))
            if target_zone is None:
                continue
            if target_zone not in _ALLOWED_TARGET_ZONES[source_zone]:
                violations.append(f"{rel}: {source_zone} imports {module} ({target_zone})")

    assert not violations, "Trust-zone import violations:\n" + "\n".join(violations)


def test_pure_zone_does_not_import_io_libraries() -> None:
    violations: list[str] = []

    for path, zone in _zone_files():
        if zone != "Pure":
            continue
        for module in _imported_modules(path):
            if module.split(".")[0] in _RUNTIME_ONLY_LIBRARIES:
                violations.append(f"{path.relative_to(_ROOT)}: {module}")

    assert not violations, "Pure modules importing runtime libraries:\n" + "\n".join(violations)
