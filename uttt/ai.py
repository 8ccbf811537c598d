"""Search engines for Ultimate Tic Tac Toe.

ALPHA-BETA
──────────
Depth-bounded minimax with alpha-beta cuts. Every node is scored from the
point of view of the player who is to move at the root: that player
maximises, the opponent minimises. Leaves are scored by ``evaluate``:

  * decided match        → ±WIN_SCORE (dominates every positional score)
  * otherwise            → Σ block value over blocks we own − blocks they own
                           with CENTER (4) > CORNERS (0,2,6,8) > EDGES (1,3,5,7)

Ties go to the move the generator produced first, so a fixed position always
gives the same answer. With a deadline the search deepens one ply at a time
and the deepest completed iteration wins.

MONTE-CARLO
───────────
Flat rollouts: every root candidate gets its own batch of uniformly random
playouts (+1 win / −1 loss / 0 draw for the root mover). Batches are compared
by UCB1, ``Q + C·sqrt(ln N / n)``. There is no tree below the root.

Both engines play a move that wins the match outright before searching.
"""
import logging
import math
import random
import time

from .logic import X, O, DRAW, opponent

logger = logging.getLogger(__name__)


# ── Heuristic evaluation ──────────────────────────────────────────────────────
WIN_SCORE = 10_000

# How valuable is it to OWN each macroboard position? Center >> corners >> edges
CENTER_VALUE, CORNER_VALUE, EDGE_VALUE = 15, 8, 3

_CENTER_BLOCK  = 4
_CORNER_BLOCKS = frozenset({0, 2, 6, 8})
_BLOCK_VALUE = [
    CENTER_VALUE if b == _CENTER_BLOCK else CORNER_VALUE if b in _CORNER_BLOCKS else EDGE_VALUE
    for b in range(9)
]


def evaluate(state, player):
    """Static score of ``state`` for ``player``. Positive = good for player."""
    opp = opponent(player)
    if state.winner == player: return  WIN_SCORE
    if state.winner == opp:    return -WIN_SCORE
    if state.winner == DRAW:   return 0

    score = 0
    for b, owner in enumerate(state.blocks):
        if owner == player:
            score += _BLOCK_VALUE[b]
        elif owner == opp:
            score -= _BLOCK_VALUE[b]
    return score


def immediate_win(state, moves=None):
    """First move (generator order) that wins the match for the side to move, else ``None``."""
    player = state.to_move
    for move in (state.legal_moves() if moves is None else moves):
        if state.play(move).winner == player:
            return move
    return None


# ── Alpha-Beta ────────────────────────────────────────────────────────────────
class SearchTimeout(Exception):
    """Raised inside the recursion once the deadline has passed."""


def _alphabeta(state, depth, alpha, beta, ai, deadline):
    if deadline is not None and time.monotonic() >= deadline:
        raise SearchTimeout
    if state.winner or depth == 0:
        return evaluate(state, ai)
    moves = state.legal_moves()
    if not moves: return evaluate(state, ai)

    if state.to_move == ai:
        best_val = -math.inf
        for move in moves:
            val = _alphabeta(state.play(move), depth-1, alpha, beta, ai, deadline)
            if val > best_val: best_val = val
            alpha = max(alpha, best_val)
            if beta <= alpha: break
        return best_val
    else:
        best_val = math.inf
        for move in moves:
            val = _alphabeta(state.play(move), depth-1, alpha, beta, ai, deadline)
            if val < best_val: best_val = val
            beta = min(beta, best_val)
            if beta <= alpha: break
        return best_val


def alphabeta(state, depth, deadline=None):
    """Search ``depth`` plies below ``state``; return ``(value, move)``.

    ``move`` is ``None`` when there is nothing to play. Raises
    :class:`SearchTimeout` if ``deadline`` (a ``time.monotonic()`` instant)
    passes before the search completes.
    """
    if depth < 1:
        raise ValueError(f"search depth must be positive, got {depth}")
    ai = state.to_move
    alpha, best_val, best_move = -math.inf, -math.inf, None
    for move in state.legal_moves():
        val = _alphabeta(state.play(move), depth-1, alpha, math.inf, ai, deadline)
        if val > best_val: best_val, best_move = val, move
        alpha = max(alpha, best_val)
    return best_val, best_move


def alphabeta_move(state, depth=3, deadline=None):
    """Best move for the side to move, or ``None`` in a terminal state.

    Without a deadline this is a single fixed-depth search. With one, depths
    1..``depth`` are searched in turn and the move from the deepest completed
    iteration is kept, so an answer is always ready when time runs out.
    """
    if depth < 1:
        raise ValueError(f"search depth must be positive, got {depth}")
    moves = state.legal_moves()
    if not moves: return None

    win = immediate_win(state, moves)
    if win is not None:
        logger.debug("alpha-beta: %s wins immediately with %s", state.to_move, win)
        return win

    if deadline is None:
        val, move = alphabeta(state, depth)
        logger.debug("alpha-beta depth %d: %s scores %s", depth, move, val)
        return move

    best_move, reached = moves[0], 0
    for d in range(1, depth + 1):
        try:
            val, move = alphabeta(state, d, deadline)
        except SearchTimeout:
            break
        best_move, reached = move, d
        if abs(val) >= WIN_SCORE: break   # forced result
    logger.debug("alpha-beta reached depth %d of %d: %s", reached, depth, best_move)
    return best_move


# ── Exhaustive minimax ────────────────────────────────────────────────────────
def _minimax(state, depth, ai):
    if state.winner or depth == 0:
        return evaluate(state, ai)
    values = [_minimax(state.play(m), depth-1, ai) for m in state.legal_moves()]
    if not values: return evaluate(state, ai)
    return max(values) if state.to_move == ai else min(values)


def minimax(state, depth):
    """Plain minimax, no pruning. Same scoring and tie-break as :func:`alphabeta`."""
    if depth < 1:
        raise ValueError(f"search depth must be positive, got {depth}")
    ai = state.to_move
    best_val, best_move = -math.inf, None
    for move in state.legal_moves():
        val = _minimax(state.play(move), depth-1, ai)
        if val > best_val: best_val, best_move = val, move
    return best_val, best_move


# ── Monte-Carlo ───────────────────────────────────────────────────────────────
EXPLORATION = 1.414


class CandidateStats:
    __slots__ = ('move', 'reward', 'visits')

    def __init__(self, move):
        self.move = move; self.reward = 0.0; self.visits = 0

    @property
    def mean(self):
        return self.reward / self.visits if self.visits else 0.0

    def score(self, total, c=EXPLORATION):
        return ucb1(self.mean, self.visits, total, c)

    def __repr__(self):
        return f"CandidateStats({self.move}, reward={self.reward}, visits={self.visits})"


def ucb1(mean, visits, total, c=EXPLORATION):
    if visits == 0: return math.inf
    return mean + c * math.sqrt(math.log(total) / visits)


def rollout(state, player, rng=random):
    """Play random moves until the match ends; +1 / −1 / 0 from ``player``'s side."""
    s = state
    moves = s.legal_moves()
    while moves:
        s = s.play(rng.choice(moves))
        moves = s.legal_moves()
    if s.winner == player: return 1
    if s.winner in (X, O): return -1
    return 0


def _expired(deadline):
    return deadline is not None and time.monotonic() >= deadline


def monte_carlo_scores(state, rollouts=100, rollout_time=None, deadline=None, rng=None):
    """Roll out every legal move of ``state``; return a ``CandidateStats`` per move.

    Playouts go round-robin, one per candidate per pass, so a batch cut short
    by ``deadline`` still leaves every candidate within one visit of the
    others. ``rollouts`` caps the playouts per candidate (``None`` = no cap)
    and ``rollout_time`` caps the wall-clock seconds spent on each candidate;
    when both are set whichever runs out first retires the candidate.
    ``deadline`` bounds the whole call and is polled before every playout.
    """
    if rollouts is None and rollout_time is None:
        raise ValueError("Monte-Carlo search needs a rollout count or a time slice")
    rng = rng or random.Random()
    player = state.to_move
    stats = [CandidateStats(move) for move in state.legal_moves()]
    children = [state.play(c.move) for c in stats]
    spent = [0.0] * len(stats)

    def _open(i):
        if rollouts is not None and stats[i].visits >= rollouts: return False
        return rollout_time is None or spent[i] < rollout_time

    pending = [i for i in range(len(stats)) if _open(i)]
    while pending:
        for i in pending:
            if _expired(deadline):
                return stats
            started = time.monotonic()
            stats[i].reward += rollout(children[i], player, rng)
            stats[i].visits += 1
            spent[i] += time.monotonic() - started
        pending = [i for i in pending if _open(i)]
    return stats


def monte_carlo_move(state, rollouts=100, rollout_time=None, deadline=None,
                     exploration=EXPLORATION, rng=None):
    """Best move by flat Monte-Carlo rollouts, or ``None`` in a terminal state."""
    moves = state.legal_moves()
    if not moves: return None

    win = immediate_win(state, moves)
    if win is not None:
        logger.debug("monte-carlo: %s wins immediately with %s", state.to_move, win)
        return win

    stats = monte_carlo_scores(state, rollouts, rollout_time, deadline, rng)
    total = sum(c.visits for c in stats)
    if total == 0:
        logger.debug("monte-carlo: no rollout finished, falling back to %s", moves[0])
        return moves[0]

    best, best_score = None, -math.inf
    for cand in stats:
        if cand.visits == 0: continue   # unsampled, nothing to compare
        s = cand.score(total, exploration)
        if s > best_score: best, best_score = cand, s
    logger.debug("monte-carlo: %d rollouts, %s scores %.3f (mean %.3f over %d)",
                 total, best.move, best_score, best.mean, best.visits)
    return best.move
