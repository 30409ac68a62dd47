"""Typed access to ``MEDIA_ANALYZER_*`` environment variables.

Tests hand EnvReader a plain dict instead of patching ``os.environ``.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

ENV_PREFIX = "MEDIA_ANALYZER_"

_TRUTHY = frozenset({"true", "1", "yes", "on"})

T = TypeVar("T")


def _finite_float(value: str) -> float:
    parsed = float(value)
    if not math.isfinite(parsed):
        raise ValueError("NaN/infinity not allowed")
    return parsed


class EnvReader:
    """Read environment variables, converting and validating their values.

    A value that fails conversion is logged and replaced by the default,
    unless the getter is called with ``strict=True``.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _convert(
        self,
        var: str,
        convert: Callable[[str], T],
        kind: str,
        default: T | None,
        strict: bool,
    ) -> T | None:
        raw = self._env.get(var)
        if raw is None:
            return default
        try:
            return convert(raw)
        except ValueError:
            message = f"Invalid {kind} value for {var}: {raw!r}"
            if strict:
                raise ValueError(message) from None
            logger.warning(message)
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        return self._env.get(var, default)

    def get_int(
        self, var: str, default: int | None = None, *, strict: bool = False
    ) -> int | None:
        return self._convert(var, int, "integer", default, strict)

    def get_float(
        self, var: str, default: float | None = None, *, strict: bool = False
    ) -> float | None:
        """Like get_int, but NaN and infinity are rejected as invalid."""
        return self._convert(var, _finite_float, "float", default, strict)

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Read a flag; true/1/yes/on in any case is True, empty is unset."""
        raw = self._env.get(var)
        if not raw:
            return default
        return raw.strip().casefold() in _TRUTHY

    def get_path(
        self, var: str, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Read a path with ``~`` expanded.

        With ``must_exist`` a path that is not on disk is logged and the
        default returned instead.
        """
        raw = self._env.get(var)
        if not raw:
            return default
        path = Path(raw).expanduser()
        if must_exist and not path.exists():
            logger.warning("%s points to non-existent path: %s", var, raw)
            return default
        return path
