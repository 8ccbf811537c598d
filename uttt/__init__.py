"""Move selection engine for Ultimate Tic Tac Toe: alpha-beta and Monte-Carlo search."""
from .logic import (
    DRAW, IN_PLAY, O, UNAVAILABLE, WIN_LINES, X,
    GameState, InvalidMoveError, InvalidStateError,
    block_index, block_winner, line_winner, local_index, opponent,
)
from .ai import (
    WIN_SCORE, CandidateStats, SearchTimeout,
    alphabeta, alphabeta_move, evaluate, immediate_win, minimax,
    monte_carlo_move, monte_carlo_scores, rollout, ucb1,
)
from .bots import AlphaBetaBot, Bot, MinimaxBot, MonteCarloBot, RandomBot
from .config import EngineConfig, time_budget

__version__ = "0.1.0"
__all__ = [
    "X", "O", "DRAW", "IN_PLAY", "UNAVAILABLE", "WIN_LINES",
    "GameState", "InvalidMoveError", "InvalidStateError",
    "block_index", "local_index", "block_winner", "line_winner", "opponent",
    "WIN_SCORE", "CandidateStats", "SearchTimeout",
    "evaluate", "immediate_win", "alphabeta", "alphabeta_move", "minimax",
    "rollout", "ucb1", "monte_carlo_scores", "monte_carlo_move",
    "Bot", "AlphaBetaBot", "MinimaxBot", "MonteCarloBot", "RandomBot",
    "EngineConfig", "time_budget",
]
