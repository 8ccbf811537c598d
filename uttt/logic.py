"""Board model for Ultimate Tic Tac Toe.

The 9x9 grid is stored row-major as a flat 81-tuple of cells (``None``, ``'X'``
or ``'O'``). Block outcomes live in a 9-tuple (``None`` while in play, ``'X'``,
``'O'`` or ``'D'`` once closed). ``'X'`` always moves on an even move counter.

A ``GameState`` is a value: ``play()`` hands back a new state and never touches
the one it was called on, so sibling branches of a search cannot leak into each
other.
"""
WIN_LINES = (
    (0,1,2),(3,4,5),(6,7,8),
    (0,3,6),(1,4,7),(2,5,8),
    (0,4,8),(2,4,6)
)

X, O = 'X', 'O'
DRAW = 'D'
IN_PLAY = None
UNAVAILABLE = '-'   # open block the active-block rule rules out this turn

EMPTY_MARK = '.'


class InvalidMoveError(ValueError):
    """Raised when a move breaks the placement rules."""


class InvalidStateError(ValueError):
    """Raised when a state does not satisfy the board invariants."""


# ── Geometry ──────────────────────────────────────────────────────────────────
_BLOCK_OF = tuple((i // 27) * 3 + (i % 9) // 3 for i in range(81))
_BLOCK_INDICES = tuple(
    tuple(i for i in range(81) if _BLOCK_OF[i] == b) for b in range(9)
)


def opponent(player):
    return O if player == X else X


def block_index(row, col):
    """Block (0..8, row-major) that grid square ``(row, col)`` belongs to."""
    return (row // 3) * 3 + col // 3


def local_index(row, col):
    """Position of ``(row, col)`` inside its own block; also the block it sends the opponent to."""
    return (row % 3) * 3 + col % 3


# ── Win detection ─────────────────────────────────────────────────────────────
def block_winner(cells, player):
    """True if ``player`` holds all three cells of any line of a 3x3 grid.

    Works on a block's nine cells and on the nine block outcomes alike; a
    drawn block (``'D'``) never matches a player so it blocks every line
    through it.
    """
    return any(cells[a] == player and cells[b] == player and cells[c] == player
               for a, b, c in WIN_LINES)


def line_winner(cells):
    """Outcome of a 3x3 grid: ``'X'``/``'O'`` if won, ``'D'`` if full, else ``None``."""
    for a, b, c in WIN_LINES:
        if cells[a] in (X, O) and cells[a] == cells[b] == cells[c]:
            return cells[a]
    return DRAW if all(cells) else None


# ── State ─────────────────────────────────────────────────────────────────────
class GameState:
    __slots__ = ('cells', 'blocks', 'move_count', 'last_move', 'winner')

    def __init__(self, cells=None, blocks=None, move_count=None, last_move=None):
        self.cells = tuple(cells) if cells is not None else (None,) * 81
        if blocks is None:
            blocks = [line_winner(self._block(b)) for b in range(9)] if len(self.cells) == 81 else ()
        self.blocks = tuple(blocks)
        if move_count is None:
            move_count = sum(1 for c in self.cells if c)
        self.move_count = move_count
        self.last_move = tuple(last_move) if last_move is not None else None
        self.winner = line_winner(self.blocks) if len(self.blocks) == 9 else None
        self.validate()

    @classmethod
    def from_rows(cls, rows, last_move=None):
        """Build a state from a text grid of ``X``, ``O`` and ``.``.

        ``rows`` is either a multi-line string or a sequence of lines. Spaces,
        ``|`` separators and ruler lines made of ``-``/``+`` are ignored, so the
        output of :meth:`render` reads back in. Block outcomes, the move
        counter and the winner are derived from the cells.
        """
        if isinstance(rows, str):
            rows = rows.splitlines()
        grid = []
        for line in rows:
            line = line.replace(' ', '').replace('|', '')
            if not line or set(line) <= {'-', '+'}:
                continue
            grid.append(line)
        if len(grid) != 9 or any(len(line) != 9 for line in grid):
            raise InvalidStateError(f"expected a 9x9 grid, got {[len(l) for l in grid]}")
        cells = []
        for line in grid:
            for ch in line:
                if ch == EMPTY_MARK:
                    cells.append(None)
                elif ch in (X, O):
                    cells.append(ch)
                else:
                    raise InvalidStateError(f"unknown mark {ch!r}")
        return cls(cells, last_move=last_move)

    def _block(self, b, cells=None):
        cells = self.cells if cells is None else cells
        return tuple(cells[i] for i in _BLOCK_INDICES[b])

    # ── Queries ───────────────────────────────────────────────────────────────
    @property
    def to_move(self):
        return X if self.move_count % 2 == 0 else O

    def cell(self, row, col):
        return self.cells[row * 9 + col]

    def active_block(self):
        """Block the side to move is confined to, or ``None`` for a free move."""
        if self.last_move is None:
            return None
        target = local_index(*self.last_move)
        return target if self.blocks[target] is None else None

    def block_status(self, b):
        outcome = self.blocks[b]
        if outcome is not None:
            return outcome
        active = self.active_block()
        if self.winner is not None or (active is not None and active != b):
            return UNAVAILABLE
        return IN_PLAY

    def macroboard(self):
        return [[self.block_status(r * 3 + c) for c in range(3)] for r in range(3)]

    def is_terminal(self):
        return self.winner is not None

    def is_legal(self, move):
        row, col = move
        if not (0 <= row < 9 and 0 <= col < 9) or self.winner is not None:
            return False
        b = block_index(row, col)
        if self.cells[row * 9 + col] is not None or self.blocks[b] is not None:
            return False
        active = self.active_block()
        return active is None or active == b

    def legal_moves(self):
        """Legal moves in row-major order over the 9x9 grid."""
        if self.winner is not None:
            return []
        active = self.active_block()
        if active is not None:
            return [divmod(i, 9) for i in _BLOCK_INDICES[active] if self.cells[i] is None]
        return [divmod(i, 9) for i in range(81)
                if self.cells[i] is None and self.blocks[_BLOCK_OF[i]] is None]

    # ── Transitions ───────────────────────────────────────────────────────────
    def clone(self):
        s = GameState.__new__(GameState)
        s.cells      = self.cells
        s.blocks     = self.blocks
        s.move_count = self.move_count
        s.last_move  = self.last_move
        s.winner     = self.winner
        return s

    def play(self, move):
        """Return the state after the side to move plays ``move``."""
        if not self.is_legal(move):
            raise InvalidMoveError(self._why_illegal(move))
        row, col = move
        i = row * 9 + col
        b = _BLOCK_OF[i]
        cells = list(self.cells)
        cells[i] = self.to_move
        s = self.clone()
        s.cells = tuple(cells)
        outcome = line_winner(s._block(b))
        if outcome:
            blocks = list(self.blocks)
            blocks[b] = outcome
            s.blocks = tuple(blocks)
            s.winner = line_winner(s.blocks)
        s.move_count = self.move_count + 1
        s.last_move = (row, col)
        return s

    def _why_illegal(self, move):
        row, col = move
        if not (0 <= row < 9 and 0 <= col < 9):
            return f"move {move} is off the board"
        if self.winner is not None:
            return f"game is already decided ({self.winner})"
        if self.cells[row * 9 + col] is not None:
            return f"cell {move} is taken"
        b = block_index(row, col)
        if self.blocks[b] is not None:
            return f"block {b} is closed ({self.blocks[b]})"
        return f"move {move} is outside active block {self.active_block()}"

    # ── Invariants ────────────────────────────────────────────────────────────
    def validate(self):
        """Raise :class:`InvalidStateError` unless the state is internally consistent."""
        if len(self.cells) != 81 or any(c not in (None, X, O) for c in self.cells):
            raise InvalidStateError("cells must be 81 entries of None, 'X' or 'O'")
        if len(self.blocks) != 9 or any(b not in (None, X, O, DRAW) for b in self.blocks):
            raise InvalidStateError("blocks must be 9 entries of None, 'X', 'O' or 'D'")
        x_count, o_count = self.cells.count(X), self.cells.count(O)
        if self.move_count != x_count + o_count:
            raise InvalidStateError(
                f"move counter {self.move_count} does not match {x_count + o_count} marks")
        if x_count - o_count not in (0, 1):
            raise InvalidStateError(f"{x_count} X marks against {o_count} O marks")
        for b in range(9):
            grid = self._block(b)
            if block_winner(grid, X) and block_winner(grid, O):
                raise InvalidStateError(f"block {b} is won by both players")
            if self.blocks[b] != line_winner(grid):
                raise InvalidStateError(
                    f"block {b} is recorded as {self.blocks[b]!r} but its cells say {line_winner(grid)!r}")
        if self.winner != line_winner(self.blocks):
            raise InvalidStateError(f"recorded winner {self.winner!r} does not match the blocks")
        if self.last_move is not None:
            self._check_last_move()

    def _check_last_move(self):
        row, col = self.last_move
        if not (0 <= row < 9 and 0 <= col < 9):
            raise InvalidStateError(f"last move {self.last_move} is off the board")
        mover = X if (self.move_count - 1) % 2 == 0 else O
        i = row * 9 + col
        if self.cells[i] != mover:
            raise InvalidStateError(f"last move {self.last_move} does not hold a {mover} mark")
        before = list(self.cells)
        before[i] = None
        b = _BLOCK_OF[i]
        if line_winner(self._block(b, before)) is not None:
            raise InvalidStateError(f"last move {self.last_move} landed in closed block {b}")
        blocks = list(self.blocks)
        blocks[b] = None
        if line_winner(blocks) is not None:
            raise InvalidStateError(f"last move {self.last_move} was played after the game ended")

    # ── Value semantics ───────────────────────────────────────────────────────
    def _key(self):
        return self.cells, self.blocks, self.move_count, self.last_move

    def __eq__(self, other):
        if not isinstance(other, GameState):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def render(self):
        lines = []
        for r in range(9):
            if r and r % 3 == 0:
                lines.append('------+-------+------')
            row = [self.cells[r * 9 + c] or EMPTY_MARK for c in range(9)]
            lines.append(' | '.join(' '.join(row[k:k + 3]) for k in (0, 3, 6)))
        return '\n'.join(lines)

    def __repr__(self):
        return (f"GameState(move_count={self.move_count}, to_move={self.to_move!r}, "
                f"last_move={self.last_move}, winner={self.winner!r})")
