"""Typed errors for plzw.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
- Per-chunk failures are collected after the worker join and raised together
  as ChunkFailures; they never turn into empty output.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_UNSUPPORTED_VERSION = 11
EXIT_ARTIFACT_IO = 12
EXIT_CORRUPT_STREAM = 13


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid thread count, byte order, run config)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (mixed chunk failures, unexpected error)"),
    ExitCodeInfo(EXIT_UNSUPPORTED_VERSION, "UNSUPPORTED_VERSION", "Unsupported pack report / run config schema"),
    ExitCodeInfo(EXIT_ARTIFACT_IO, "ARTIFACT_IO", "Unreadable input, unwritable output, missing or empty artifact"),
    ExitCodeInfo(EXIT_CORRUPT_STREAM, "CORRUPT_STREAM", "Invalid code stream (bad code, truncated artifact, length mismatch)"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE, do not edit manually.\n")
    lines.append("> Source of truth: `src/plzw/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Every internal error extends `PLZWError` and carries an `exit_code`.\n")
    lines.append(
        "- When several chunks fail, the exit code is the one shared by all failures, "
        "or `GENERIC` if they differ.\n"
    )
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class PLZWError(Exception):
    """Base error for plzw."""

    exit_code: int = EXIT_GENERIC


class UsageError(PLZWError):
    exit_code = EXIT_USAGE


class ConfigurationError(UsageError):
    """Unsupported settings (thread count, byte order). Raised before any chunk work."""


class UnsupportedVersion(PLZWError):
    exit_code = EXIT_UNSUPPORTED_VERSION


class ArtifactIOError(PLZWError):
    exit_code = EXIT_ARTIFACT_IO


class MissingArtifact(ArtifactIOError):
    pass


class EmptyArtifact(ArtifactIOError):
    pass


class CorruptStream(PLZWError):
    exit_code = EXIT_CORRUPT_STREAM


class TruncatedArtifact(CorruptStream):
    pass


@dataclass(frozen=True, slots=True)
class ChunkFailure:
    """One chunk that did not make it, with enough context to report it."""

    index: int
    kind: str
    message: str
    exit_code: int = EXIT_GENERIC

    @classmethod
    def from_exc(cls, index: int, exc: BaseException) -> ChunkFailure:
        code = int(getattr(exc, "exit_code", EXIT_ARTIFACT_IO if isinstance(exc, OSError) else EXIT_GENERIC))
        return cls(index=int(index), kind=type(exc).__name__, message=str(exc), exit_code=code)

    def __str__(self) -> str:
        return f"chunk {self.index}: {self.kind}: {self.message}"


class ChunkFailures(PLZWError):
    """One or more chunks failed. Siblings completed; their results are not returned."""

    def __init__(self, failures: Sequence[ChunkFailure], *, summary: Sequence[str] = ()):
        # per-chunk status lines (ok/empty/FAILED) when the caller has them
        self.summary: tuple[str, ...] = tuple(summary)
        self.failures: tuple[ChunkFailure, ...] = tuple(sorted(failures, key=lambda f: f.index))
        codes = {f.exit_code for f in self.failures}
        self.exit_code = codes.pop() if len(codes) == 1 else EXIT_GENERIC
        n = len(self.failures)
        head = "; ".join(str(f) for f in self.failures[:3])
        more = f" (+{n - 3} more)" if n > 3 else ""
        super().__init__(f"{n} chunk(s) failed: {head}{more}")

    @property
    def indexes(self) -> list[int]:
        return [f.index for f in self.failures]
