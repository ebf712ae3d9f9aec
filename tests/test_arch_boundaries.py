from __future__ import annotations

import ast
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

# Orchestrators: they wire files, threads and reports together.
# LOW-level code (core/engine/errors/run_spec/pack_report) must NEVER import these.
ORCH_PREFIXES: tuple[str, ...] = (
    "plzw.cli",
    "plzw.archive",
    "plzw.verify",
)

# core/ is the algorithm: it may only see itself and the error types.
CORE_PREFIX = "plzw.core"
CORE_ALLOWED: tuple[str, ...] = ("plzw.core", "plzw.errors")

PACKAGE_ROOT = "plzw"


@dataclass(frozen=True)
class ImportEdge:
    src: str
    dst: str
    file: Path
    lineno: int


def _has_prefix(mod: str, prefixes: Iterable[str]) -> bool:
    return any(mod == p or mod.startswith(p + ".") for p in prefixes)


def _module_name(src_dir: Path, py_file: Path) -> str | None:
    try:
        rel = py_file.relative_to(src_dir)
    except ValueError:
        return None
    parts = list(rel.with_suffix("").parts)
    if not parts or parts[0] != PACKAGE_ROOT:
        return None
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts) or None


def _resolve_relative(current_mod: str, level: int, module: str | None) -> str | None:
    if level <= 0:
        return module
    base = current_mod.split(".")[:-1]
    if level - 1 > len(base):
        return None
    base = base[: len(base) - (level - 1)]
    return ".".join(base + module.split(".")) if module else ".".join(base)


def _iter_import_edges(src_dir: Path) -> Iterable[ImportEdge]:
    for py in sorted(src_dir.rglob("*.py")):
        mod = _module_name(src_dir, py)
        if not mod:
            continue
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
        for node in ast.walk(tree):
            targets: list[str] = []
            if isinstance(node, ast.Import):
                targets = [a.name for a in node.names]
            elif isinstance(node, ast.ImportFrom):
                abs_mod = _resolve_relative(mod, node.level, node.module)
                if abs_mod:
                    targets = [abs_mod]
            for dst in targets:
                if _has_prefix(dst, (PACKAGE_ROOT,)) and dst != mod:
                    yield ImportEdge(src=mod, dst=dst, file=py, lineno=getattr(node, "lineno", 0))


def _src_dir() -> Path:
    src_dir = Path(__file__).resolve().parents[1] / "src"
    if not src_dir.is_dir():
        raise AssertionError(f"Expected src/ directory at: {src_dir}")
    return src_dir


def _fail(title: str, violations: list[ImportEdge], hint: str) -> None:
    lines = [title]
    for v in sorted(violations, key=lambda e: (str(e.file), e.lineno, e.src, e.dst)):
        lines.append(f"  {v.file}:{v.lineno}  {v.src}  ->  {v.dst}")
    lines.append("")
    lines.append(hint)
    raise AssertionError("\n".join(lines))


def test_no_low_level_imports_orchestrator() -> None:
    """
    Hard dependency direction:
      ORCH -> may depend on LOW
      LOW  -> must NOT depend on ORCH
    """
    violations = [
        e
        for e in _iter_import_edges(_src_dir())
        if not _has_prefix(e.src, ORCH_PREFIXES) and _has_prefix(e.dst, ORCH_PREFIXES)
    ]
    if violations:
        _fail(
            "Forbidden imports detected (LOW -> ORCH):",
            violations,
            "Fix: move high-level logic out of LOW modules, or invert the dependency.",
        )


def test_core_stays_self_contained() -> None:
    violations = [
        e
        for e in _iter_import_edges(_src_dir())
        if _has_prefix(e.src, (CORE_PREFIX,)) and not _has_prefix(e.dst, CORE_ALLOWED)
    ]
    if violations:
        _fail(
            "Forbidden imports detected (core -> outside core):",
            violations,
            "Fix: core/ only knows codes, bytes and errors; threads and files live above it.",
        )


def test_edges_are_found() -> None:
    edges = list(_iter_import_edges(_src_dir()))
    assert any(e.src == "plzw.archive" and e.dst == "plzw.core.lzw" for e in edges)


def test_boundary_tool_runs_outside_pytest() -> None:
    import subprocess
    import sys

    repo_root = Path(__file__).resolve().parents[1]
    r = subprocess.run(
        [sys.executable, str(repo_root / "tools" / "check_arch_boundaries.py")],
        cwd=str(repo_root),
        text=True,
        capture_output=True,
    )
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout.startswith("OK: architecture boundaries respected")
