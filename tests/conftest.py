import random

import pytest

from uttt import GameState

# X owns blocks 0 and 1; (2, 7) completes column 1 of block 2 and the top row of the macroboard.
MACRO_WIN = """
X X X | X X X | . X .
. . . | . . . | . X .
. . . | . . . | . . .
------+-------+------
. . O | . . . | . . .
. . . | . O . | . O .
O . . | . . . | . . .
------+-------+------
O . . | . O . | . . O
. . . | . . . | . . .
. . . | . . . | . . O
"""

# Center block: X on (3, 3) and (5, 5), O's last move at (1, 1) sends X there.
LOCAL_WIN = """
. . . | . . . | . . .
. O . | . . . | . . .
. . . | . . . | . . .
------+-------+------
. . . | X . . | . . .
. . . | . . . | . . .
. . . | . . X | . . .
------+-------+------
. . . | . . . | . . .
. . . | . . . | . . .
. . . | . . . | . . O
"""

# X has taken the top row of the macroboard.
DECIDED = """
X X X | X X X | X X X
. . . | . . . | . . .
. . . | . . . | . . .
------+-------+------
. . O | . . . | . . .
. . . | . O . | . O .
O . . | . . . | . . .
------+-------+------
O . . | . O . | . . O
. . . | . . . | . . .
. . . | . . . | . . O
"""

# Only block 8 is open. X needs it for column 2,5,8, O for row 6,7,8.
ENDGAME = """
X O X | O X O | X X X
X O O | O X X | O O .
O X X | X O O | . . .
------+-------+------
X O X | O X O | X X X
X O O | O X X | O O .
O X X | X O O | . . .
------+-------+------
O O O | O O O | X O .
X X . | X X . | . . .
. . . | . . . | O X .
"""


@pytest.fixture
def empty_state():
    return GameState()


@pytest.fixture
def macro_win_state():
    return GameState.from_rows(MACRO_WIN, last_move=(3, 2))


@pytest.fixture
def local_win_state():
    return GameState.from_rows(LOCAL_WIN, last_move=(1, 1))


@pytest.fixture
def decided_state():
    return GameState.from_rows(DECIDED)


@pytest.fixture
def endgame_state():
    return GameState.from_rows(ENDGAME)


def random_states(seed, max_moves=81):
    """Every state along one random playout, starting from the empty board."""
    rng = random.Random(seed)
    state = GameState()
    states = [state]
    while state.legal_moves() and len(states) <= max_moves:
        state = state.play(rng.choice(state.legal_moves()))
        states.append(state)
    return states
