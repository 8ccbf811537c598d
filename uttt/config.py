"""Engine settings.

Defaults match the reference bots (depth 3 alpha-beta, 100 rollouts per
candidate, exploration 1.414). Every field can be overridden from the
environment, e.g. ``UTTT_SEARCH_DEPTH=4`` or ``UTTT_MOVE_TIME=1.5``.
"""
import os
from dataclasses import dataclass, fields
from typing import Optional

ENV_PREFIX = 'UTTT_'

DEFAULT_MOVE_TIME = 3.0


@dataclass
class EngineConfig:
    search_depth: int = 3
    rollouts: Optional[int] = 100
    exploration: float = 1.414
    move_time: Optional[float] = None      # seconds for a whole select_move
    rollout_time: Optional[float] = None   # seconds per Monte-Carlo candidate
    seed: Optional[int] = None

    def __post_init__(self):
        if self.search_depth < 1:
            raise ValueError(f"search_depth must be positive, got {self.search_depth}")
        if self.rollouts is not None and self.rollouts < 0:
            raise ValueError(f"rollouts must not be negative, got {self.rollouts}")
        if self.rollouts is None and self.rollout_time is None:
            raise ValueError("set rollouts, rollout_time or both")
        if self.exploration < 0:
            raise ValueError(f"exploration must not be negative, got {self.exploration}")

    @classmethod
    def from_env(cls, environ=None):
        """Build a config from ``UTTT_*`` variables; unset ones keep their defaults."""
        environ = os.environ if environ is None else environ
        kwargs = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw.strip() == '':
                continue
            kwargs[f.name] = _parse(f.name, raw.strip())
        return cls(**kwargs)


_INT_FIELDS = {'search_depth', 'rollouts', 'seed'}
_OPTIONAL_FIELDS = {'rollouts', 'move_time', 'rollout_time', 'seed'}


def _parse(name, raw):
    if raw.lower() == 'none' and name in _OPTIONAL_FIELDS:
        return None
    try:
        return int(raw) if name in _INT_FIELDS else float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name.upper()}={raw!r} is not a valid number") from None


def time_budget(move_timeout):
    """Seconds the engine may think when the orchestrator allows ``move_timeout`` per move.

    Uses 40% of the orchestrator's limit, clamped to [0.05, 12] seconds, so the
    answer is back well before the external clock runs out.
    """
    if not move_timeout or move_timeout <= 0:
        return DEFAULT_MOVE_TIME
    return max(0.05, min(move_timeout * 0.40, 12.0))
