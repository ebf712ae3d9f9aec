"""Run config (v1) for plzw.

Goal: make compress/decompress settings reproducible (CLI, CI, bench).

This module intentionally stays *small* and strict:
  - JSON only
  - explicit schema id
  - unknown keys are rejected
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from plzw.core.artifact import BYTEORDER_DEFAULT, validate_byteorder
from plzw.engine.dispatch import validate_workers
from plzw.errors import ConfigurationError, UnsupportedVersion

SPEC_ID_V1 = "plzw.run.v1"


class RunSpecError(ConfigurationError):
    pass


def _load_json_arg(spec_arg: str) -> dict[str, Any]:
    s = spec_arg.strip()
    if not s:
        raise RunSpecError("config: argomento vuoto")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.exists() or not p.is_file():
            raise RunSpecError(f"config: file non trovato: {p}")
        raw = p.read_text(encoding="utf-8")
        try:
            obj = json.loads(raw)
        except Exception as e:
            raise RunSpecError(f"config: JSON non valido in {p}: {e}") from e
        if not isinstance(obj, dict):
            raise RunSpecError(f"config: il JSON in {p} deve essere un oggetto")
        return obj

    try:
        obj = json.loads(s)
    except Exception as e:
        raise RunSpecError(f"config: JSON inline non valido: {e}") from e
    if not isinstance(obj, dict):
        raise RunSpecError("config: il JSON inline deve essere un oggetto")
    return obj


@dataclass(frozen=True)
class RunSpecV1:
    """Settings for one compress/decompress run."""

    name: str = "run"
    workers: int = 1
    # None: not set; compress falls back to native, decompress to the pack report
    byteorder: str | None = None

    def resolve(self, *, workers: int | None = None, byteorder: str | None = None) -> RunSpecV1:
        """Apply CLI overrides (CLI > config > defaults) and re-validate."""
        bo = self.byteorder if byteorder is None else byteorder
        return RunSpecV1(
            name=self.name,
            workers=validate_workers(self.workers if workers is None else workers),
            byteorder=validate_byteorder(bo) if bo is not None else None,
        )

    def compress_byteorder(self) -> str:
        return self.byteorder or BYTEORDER_DEFAULT


def load_run_spec(spec_arg: str) -> RunSpecV1:
    """Load and validate a run config.

    spec_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(spec_arg)

    allowed = {"spec", "name", "workers", "byteorder"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise RunSpecError(f"config: chiavi non supportate: {', '.join(extra)}")

    spec_id = obj.get("spec")
    if spec_id != SPEC_ID_V1:
        raise UnsupportedVersion(f"config: spec non supportata: {spec_id!r} (attesa {SPEC_ID_V1!r})")

    name = obj.get("name", "run")
    if not isinstance(name, str) or not name.strip():
        raise RunSpecError("config: campo 'name' deve essere stringa")

    workers = obj.get("workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise RunSpecError("config: campo 'workers' deve essere intero")

    byteorder = obj.get("byteorder")
    if byteorder is not None and not isinstance(byteorder, str):
        raise RunSpecError("config: campo 'byteorder' deve essere stringa")

    return RunSpecV1(
        name=name.strip(),
        workers=validate_workers(workers),
        byteorder=validate_byteorder(byteorder) if byteorder is not None else None,
    )
