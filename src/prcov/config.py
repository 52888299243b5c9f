"""Settings for a prcov run, read from ``[tool.prcov]`` and overridden by the CLI."""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from prcov import logger as _package_logger
from prcov.errors import ConfigError
from prcov.model.types import FULL_COVERAGE

if TYPE_CHECKING:
    from collections.abc import Mapping

LOG_FORMAT = "%(levelname)s: %(message)s"

PYPROJECT = "pyproject.toml"

_PATH_KEYS = frozenset({"coverage-report", "diff-file", "source-dir"})
_STR_KEYS = frozenset({"base-ref", "report-url", "commit-sha"})
_FLOAT_KEYS = frozenset({"fail-under"})
_INT_KEYS = frozenset({"max-uncovered"})
_BOOL_KEYS = frozenset({"strict"})
KNOWN_KEYS = _PATH_KEYS | _STR_KEYS | _FLOAT_KEYS | _INT_KEYS | _BOOL_KEYS


@dataclasses.dataclass(frozen=True, slots=True)
class Settings:
    """Resolved inputs for one run. ``None`` means "not configured"."""

    coverage_report: Path | None = None
    base_ref: str | None = None
    diff_file: Path | None = None
    source_dir: Path | None = None
    report_url: str | None = None
    commit_sha: str | None = None
    fail_under: float | None = None
    max_uncovered: int | None = None
    strict: bool = False

    def merged(self, **overrides: object) -> Settings:
        """Return a copy where every non-``None`` override replaces the current value."""
        unknown = set(overrides) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            msg = f"unknown setting(s): {', '.join(sorted(unknown))}"
            raise ConfigError(msg)
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _coerce(key: str, value: object, *, root: Path) -> object:
    if key in _BOOL_KEYS:
        if not isinstance(value, bool):
            msg = f"[tool.prcov] {key} must be a boolean"
            raise ConfigError(msg)
        return value
    if key in _INT_KEYS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            msg = f"[tool.prcov] {key} must be a non-negative integer"
            raise ConfigError(msg)
        return value
    if key in _FLOAT_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= FULL_COVERAGE:
            msg = f"[tool.prcov] {key} must be a number between 0 and 100"
            raise ConfigError(msg)
        return float(value)
    if not isinstance(value, str) or not value.strip():
        msg = f"[tool.prcov] {key} must be a non-empty string"
        raise ConfigError(msg)
    if key in _PATH_KEYS:
        path = Path(value)
        return path if path.is_absolute() else root / path
    return value


def settings_from_table(table: Mapping[str, object], *, root: Path) -> Settings:
    """Build :class:`Settings` from a ``[tool.prcov]`` table; relative paths resolve against *root*."""
    unknown = sorted(set(table) - KNOWN_KEYS)
    if unknown:
        msg = f"unknown key(s) in [tool.prcov]: {', '.join(unknown)}"
        raise ConfigError(msg)
    values = {key.replace("-", "_"): _coerce(key, value, root=root) for key, value in table.items()}
    return Settings(**values)  # type: ignore[arg-type]


def load_pyproject_settings(root: Path, *, logger: logging.Logger | None = None) -> Settings:
    """Read ``[tool.prcov]`` from ``root / pyproject.toml``.

    A missing or unparsable file yields default settings; an invalid table raises
    :class:`~prcov.errors.ConfigError`.
    """
    log = logger or _package_logger.getChild("config")
    pyproject = root / PYPROJECT
    if not pyproject.is_file():
        return Settings()
    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        log.warning("Failed to parse %s: %s", pyproject, e)
        return Settings()

    table = data.get("tool", {}).get("prcov")
    if table is None:
        return Settings()
    if not isinstance(table, dict):
        msg = f"[tool.prcov] in {pyproject} must be a table"
        raise ConfigError(msg)
    log.debug("using [tool.prcov] from %s", pyproject)
    return settings_from_table(table, root=root)


__all__ = [
    "KNOWN_KEYS",
    "LOG_FORMAT",
    "PYPROJECT",
    "Settings",
    "load_pyproject_settings",
    "settings_from_table",
]
