"""Bots: the two calls a match orchestrator makes, ``name()`` and ``select_move(state)``.

Each bot checks the incoming state once, returns ``None`` when there is nothing
left to play, and otherwise hands the position to one search engine. Bots keep
no game state between calls.
"""
import logging
import random
import time
from typing import Optional, Protocol, Tuple

from .ai import alphabeta_move, minimax, monte_carlo_move, EXPLORATION
from .config import EngineConfig, time_budget
from .logic import GameState

logger = logging.getLogger(__name__)

Move = Tuple[int, int]


class Bot(Protocol):
    def name(self) -> str: ...
    def select_move(self, state: GameState) -> Optional[Move]: ...


def _open_moves(state):
    state.validate()
    return state.legal_moves()


def _deadline(move_time):
    return None if move_time is None else time.monotonic() + move_time


def _budget(config, move_timeout):
    if config.move_time is None and move_timeout is not None:
        return time_budget(move_timeout)
    return config.move_time


class AlphaBetaBot:
    def __init__(self, depth=3, move_time=None):
        if depth < 1:
            raise ValueError(f"depth must be positive, got {depth}")
        self.depth = depth
        self.move_time = move_time

    @classmethod
    def from_config(cls, config: EngineConfig, move_timeout=None):
        return cls(config.search_depth, _budget(config, move_timeout))

    def name(self):
        return "Alpha Beta Bot"

    def select_move(self, state):
        if not _open_moves(state):
            return None
        return alphabeta_move(state, self.depth, _deadline(self.move_time))


class MinimaxBot:
    """Unpruned minimax. Slow, but handy as a reference opponent."""

    def __init__(self, depth=2):
        if depth < 1:
            raise ValueError(f"depth must be positive, got {depth}")
        self.depth = depth

    @classmethod
    def from_config(cls, config: EngineConfig):
        return cls(config.search_depth)

    def name(self):
        return "Minimax Bot"

    def select_move(self, state):
        if not _open_moves(state):
            return None
        _, move = minimax(state, self.depth)
        return move


class MonteCarloBot:
    def __init__(self, rollouts=100, rollout_time=None, move_time=None,
                 exploration=EXPLORATION, seed=None):
        if rollouts is None and rollout_time is None:
            raise ValueError("set rollouts, rollout_time or both")
        self.rollouts = rollouts
        self.rollout_time = rollout_time
        self.move_time = move_time
        self.exploration = exploration
        self.rng = random.Random(seed)

    @classmethod
    def from_config(cls, config: EngineConfig, move_timeout=None):
        return cls(config.rollouts, config.rollout_time, _budget(config, move_timeout),
                   config.exploration, config.seed)

    def name(self):
        return "Monte Carlo Bot"

    def select_move(self, state):
        if not _open_moves(state):
            return None
        return monte_carlo_move(state, self.rollouts, self.rollout_time,
                                _deadline(self.move_time), self.exploration, self.rng)


class RandomBot:
    def __init__(self, seed=None):
        self.rng = random.Random(seed)

    def name(self):
        return "Random Bot"

    def select_move(self, state):
        moves = _open_moves(state)
        if not moves:
            return None
        move = self.rng.choice(moves)
        logger.debug("random bot picked %s of %d", move, len(moves))
        return move
