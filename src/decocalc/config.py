"""Engine configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_MAX_DEPTH = "DECOCALC_MAX_DEPTH"
ENV_EXTENSION_TIMEOUT = "DECOCALC_EXTENSION_TIMEOUT"
ENV_DEBUG_PY_TRACE = "DECOCALC_DEBUG_PY_TRACE"


@dataclass(frozen=True)
class EngineConfig:
    """Limits applied while evaluating scripts.

    Attributes:
        max_depth: User-function nesting at which calls fail with a stack
            overflow error.
        extension_timeout: Seconds an extension callable may run before it is
            reported as a script error. ``None`` disables the bound.
    """

    max_depth: int = 50
    extension_timeout: Optional[float] = 5.0

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if self.extension_timeout is not None and self.extension_timeout <= 0:
            raise ValueError("extension_timeout must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        env = os.environ if environ is None else environ
        config = cls()

        if ENV_MAX_DEPTH in env:
            config = replace(config, max_depth=int(env[ENV_MAX_DEPTH]))
        if ENV_EXTENSION_TIMEOUT in env:
            raw = env[ENV_EXTENSION_TIMEOUT]
            config = replace(config, extension_timeout=float(raw) if raw else None)

        return config


DEFAULT_CONFIG = EngineConfig()


def debug_py_trace_enabled() -> bool:
    return bool(os.getenv(ENV_DEBUG_PY_TRACE))
