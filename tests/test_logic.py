import pytest

from conftest import random_states
from uttt import (
    DRAW, IN_PLAY, O, UNAVAILABLE, WIN_LINES, X,
    GameState, InvalidMoveError, InvalidStateError,
    block_index, block_winner, line_winner, local_index,
)


def _grid_with(line, marks):
    cells = [None] * 9
    for i, m in zip(line, marks):
        cells[i] = m
    return cells


def _is_valid(state, row, col):
    """Move-validity predicate written out independently of legal_moves()."""
    if state.winner is not None or state.cell(row, col) is not None:
        return False
    b = block_index(row, col)
    if state.blocks[b] is not None:
        return False
    if state.last_move is None:
        return True
    target = local_index(*state.last_move)
    return state.blocks[target] is not None or target == b


# ── Win detection ─────────────────────────────────────────────────────────────
@pytest.mark.parametrize("line", WIN_LINES)
@pytest.mark.parametrize("player", [X, O])
def test_full_line_wins(line, player):
    cells = _grid_with(line, [player] * 3)
    assert block_winner(cells, player)
    assert not block_winner(cells, X if player == O else O)
    assert line_winner(cells) == player


@pytest.mark.parametrize("line", WIN_LINES)
def test_mixed_line_does_not_win(line):
    cells = _grid_with(line, [X, X, O])
    assert not block_winner(cells, X)
    assert not block_winner(cells, O)


def test_empty_grid_has_no_winner():
    cells = [None] * 9
    assert not block_winner(cells, X)
    assert not block_winner(cells, O)
    assert line_winner(cells) is None


def test_full_grid_without_line_is_drawn():
    cells = [X, O, X,
             X, O, O,
             O, X, X]
    assert line_winner(cells) == DRAW


def test_drawn_block_breaks_macro_line():
    assert not block_winner([X, DRAW, X, None, None, None, None, None, None], X)


# ── State construction ───────────────────────────────────────────────────────
def test_empty_state(empty_state):
    assert empty_state.move_count == 0
    assert empty_state.to_move == X
    assert empty_state.winner is None
    assert len(empty_state.legal_moves()) == 81
    assert empty_state.macroboard() == [[IN_PLAY] * 3 for _ in range(3)]


def test_render_reads_back(macro_win_state):
    again = GameState.from_rows(macro_win_state.render(), last_move=macro_win_state.last_move)
    assert again == macro_win_state


def test_from_rows_derives_blocks(macro_win_state, decided_state):
    assert macro_win_state.blocks[:3] == (X, X, None)
    assert macro_win_state.move_count == 16
    assert macro_win_state.to_move == X
    assert decided_state.winner == X
    assert decided_state.to_move == O


def test_macroboard_marks_inactive_blocks(macro_win_state):
    assert macro_win_state.macroboard() == [
        [X, X, IN_PLAY],
        [UNAVAILABLE] * 3,
        [UNAVAILABLE] * 3,
    ]


def test_endgame_blocks(endgame_state):
    assert endgame_state.blocks == (DRAW, DRAW, X, DRAW, DRAW, X, O, O, None)
    assert endgame_state.winner is None
    assert endgame_state.legal_moves() == [(6, 8), (7, 6), (7, 7), (7, 8), (8, 8)]


# ── Invariants ───────────────────────────────────────────────────────────────
def test_too_many_x_marks():
    rows = ["XX.......", "X........"] + ["........."] * 7
    with pytest.raises(InvalidStateError, match="X marks"):
        GameState.from_rows(rows)


def test_counter_must_match_marks():
    cells = [None] * 81
    cells[0] = X
    with pytest.raises(InvalidStateError, match="move counter"):
        GameState(cells, move_count=3)


def test_stored_block_outcome_must_match_cells():
    with pytest.raises(InvalidStateError, match="block 4"):
        GameState(blocks=[None, None, None, None, X, None, None, None, None])


def test_block_won_by_both_players():
    rows = ["XXX......", "OOO......", "........."] + ["........."] * 6
    with pytest.raises(InvalidStateError, match="both players"):
        GameState.from_rows(rows)


def test_last_move_into_closed_block():
    rows = ["XXX......", "O........", ".........",
            "....O....", ".........", ".........",
            ".........", ".........", "........O"]
    GameState.from_rows(rows)
    with pytest.raises(InvalidStateError, match="closed block"):
        GameState.from_rows(rows, last_move=(1, 0))


def test_last_move_must_hold_the_last_movers_mark(local_win_state):
    with pytest.raises(InvalidStateError, match="does not hold a O mark"):
        GameState.from_rows(local_win_state.render(), last_move=(3, 3))


def test_bad_grid_shape():
    with pytest.raises(InvalidStateError, match="9x9"):
        GameState.from_rows(["........."] * 8)
    with pytest.raises(InvalidStateError, match="unknown mark"):
        GameState.from_rows(["Z........"] + ["........."] * 8)


# ── Move generation ──────────────────────────────────────────────────────────
def test_active_block_confines_moves(local_win_state):
    assert local_win_state.active_block() == 4
    assert local_win_state.legal_moves() == [
        (3, 4), (3, 5), (4, 3), (4, 4), (4, 5), (5, 3), (5, 4)]


def test_closed_target_block_frees_the_move(macro_win_state):
    # (0, 6) points at block 0, which X already owns
    state = macro_win_state.play((0, 6))
    assert state.active_block() is None
    assert len(state.legal_moves()) > 9
    assert all(state.blocks[block_index(*m)] is None for m in state.legal_moves())


def test_decided_game_has_no_moves(decided_state):
    assert decided_state.legal_moves() == []
    assert decided_state.is_terminal()


@pytest.mark.parametrize("seed", range(5))
def test_legal_moves_match_validity_predicate(seed):
    for state in random_states(seed):
        expected = [(r, c) for r in range(9) for c in range(9) if _is_valid(state, r, c)]
        assert state.legal_moves() == expected
        assert (not expected) == state.is_terminal()


@pytest.mark.parametrize("seed", range(3))
def test_playouts_keep_invariants(seed):
    for state in random_states(seed):
        state.validate()
        assert state.move_count == sum(1 for c in state.cells if c)


def test_block_outcomes_never_change():
    states = random_states(7)
    for prev, nxt in zip(states, states[1:]):
        for before, after in zip(prev.blocks, nxt.blocks):
            if before is not None:
                assert after == before


# ── Playing moves ────────────────────────────────────────────────────────────
def test_play_returns_new_state(empty_state):
    after = empty_state.play((4, 4))
    assert after.cell(4, 4) == X
    assert after.to_move == O
    assert after.last_move == (4, 4)
    assert after.active_block() == 4
    assert empty_state.cell(4, 4) is None
    assert empty_state.move_count == 0


def test_play_closes_block(local_win_state):
    after = local_win_state.play((4, 4))
    assert after.blocks[4] == X
    assert after.active_block() is None


@pytest.mark.parametrize("move, reason", [
    ((3, 3), "taken"),
    ((0, 0), "active block"),
    ((9, 0), "off the board"),
])
def test_illegal_moves_raise(local_win_state, move, reason):
    with pytest.raises(InvalidMoveError, match=reason):
        local_win_state.play(move)


def test_no_moves_after_the_game_ends(decided_state):
    with pytest.raises(InvalidMoveError, match="decided"):
        decided_state.play((1, 0))


def test_cannot_play_into_closed_block():
    state = GameState.from_rows(
        ["XXX......", "OO.......", "........."] + ["........."] * 6)
    with pytest.raises(InvalidMoveError, match="closed"):
        state.play((2, 2))


# ── Cloning ──────────────────────────────────────────────────────────────────
def test_clone_is_equal_but_separate(macro_win_state):
    copy = macro_win_state.clone()
    assert copy == macro_win_state
    assert copy is not macro_win_state
    assert hash(copy) == hash(macro_win_state)


def test_mutating_clone_leaves_source_alone(macro_win_state):
    snapshot = (macro_win_state.cells, macro_win_state.blocks, macro_win_state.move_count,
                macro_win_state.last_move, macro_win_state.winner)
    copy = macro_win_state.clone()
    copy.cells = (O,) * 81
    copy.blocks = (O,) * 9
    copy.move_count = 99
    copy.last_move = (0, 0)
    copy.winner = O
    assert (macro_win_state.cells, macro_win_state.blocks, macro_win_state.move_count,
            macro_win_state.last_move, macro_win_state.winner) == snapshot


def test_sibling_branches_do_not_leak(local_win_state):
    a = local_win_state.play((4, 4))
    b = local_win_state.play((3, 4))
    assert a.cell(3, 4) is None
    assert b.cell(4, 4) is None
    assert b.blocks[4] is None
