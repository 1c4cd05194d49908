import dataclasses
import random

import numpy as np
import pytest

from blockfall.config import EngineConfig
from blockfall.game.board import is_valid_move
from blockfall.game.engine import (
    Command,
    GameEngine,
    GameState,
    apply,
    move_down,
    move_left,
    move_right,
    new_game,
    resolve_turn,
    rotate,
    tick,
)
from blockfall.game.pieces import (
    EMPTY,
    PIECES_BY_NAME,
    Piece,
    RandomPieceSource,
    ScriptedPieceSource,
    rotate_matrix,
)
from blockfall.game.rules import speed_curve
from tests.helpers import make_board, make_piece, make_state


def _with_piece(state, piece):
    return dataclasses.replace(state, piece=piece)


def test_new_game_starting_state():
    state = new_game(ScriptedPieceSource(["I", "O", "T"]))
    assert state.score == 0
    assert state.level == 1
    assert state.lines == 0
    assert state.gravity == 60
    assert not state.game_over
    assert np.all(state.board == EMPTY)
    assert state.piece == make_piece("I", -1, 3)
    assert state.next_piece == make_piece("O", 0, 1)


def test_new_game_defaults_to_random_source():
    state = new_game()
    assert is_valid_move(state.board, state.piece.matrix, state.piece.row, state.piece.col)
    assert state.next_piece is not None


def test_every_piece_type_spawns_in_a_valid_position():
    for name in PIECES_BY_NAME:
        state = new_game(ScriptedPieceSource([name]))
        assert is_valid_move(state.board, state.piece.matrix, -1, 3)


def test_moves_shift_the_anchor():
    state = make_state("T", row=5, col=4)
    assert move_left(state).piece.col == 3
    assert move_right(state).piece.col == 5
    assert move_down(state).piece.row == 6
    # input state untouched
    assert (state.piece.row, state.piece.col) == (5, 4)


def test_move_left_at_wall_is_a_no_op():
    state = make_state("O", row=5, col=0)
    assert move_left(state) is state


def test_move_left_into_filled_cell_is_a_no_op():
    state = make_state("O", row=5, col=3, board=make_board({6: [2]}))
    assert move_left(state) is state
    assert apply(state, Command.MOVE_LEFT) == state


def test_move_right_boundary_for_horizontal_i():
    at_six = make_state("I", row=5, col=6)
    assert move_right(at_six) is at_six

    at_five = make_state("I", row=5, col=5)
    moved = move_right(at_five)
    assert moved.piece.col == 6
    assert moved.piece.row == 5


def test_move_down_onto_floor_is_a_no_op():
    state = make_state("O", row=18, col=4)
    assert move_down(state) is state


def test_rotate_round_trip_in_open_space():
    state = make_state("I", row=5, col=3)
    rotated = state
    for _ in range(4):
        previous = rotated
        rotated = rotate(rotated)
        assert rotated is not previous
    assert rotated.piece == state.piece


def test_rotate_keeps_anchor():
    state = make_state("T", row=7, col=2)
    rotated = rotate(state)
    assert (rotated.piece.row, rotated.piece.col) == (7, 2)
    assert np.array_equal(rotated.piece.matrix, rotate_matrix(state.piece.matrix))


def test_rotate_against_wall_is_rejected_whole():
    base = make_state("I", row=5, col=3)
    vertical = Piece(rotate_matrix(base.piece.matrix), 5, -2)
    state = _with_piece(base, vertical)
    assert rotate(state) is state


def test_tick_counts_down_before_dropping():
    state = new_game(ScriptedPieceSource(["O"]))
    for _ in range(59):
        state = tick(state)
    assert state.piece.row == -1
    assert state.drop_counter == 59
    state = tick(state)
    assert state.piece.row == 0
    assert state.drop_counter == 0


def test_lock_on_rest_after_countdown():
    source = ScriptedPieceSource(["Z"])
    state = make_state("O", row=17, col=4, board=make_board({19: [4, 5]}), next_name="T")
    resting_piece = state.piece
    for _ in range(59):
        state = apply(state, Command.TICK, source)
    assert state.piece == resting_piece

    state = apply(state, Command.TICK, source)
    o_id = PIECES_BY_NAME["O"]["id"]
    assert state.board[17, 4] == state.board[17, 5] == o_id
    assert state.board[18, 4] == state.board[18, 5] == o_id
    assert state.piece == make_piece("T", -1, 3)
    assert state.next_piece == make_piece("Z", 0, 1)
    assert state.drop_counter == 0
    assert state.score == 0


def test_resolve_turn_clears_a_single_line():
    board = make_board({19: [0, 1, 2, 3, 4, 5, 8, 9], 10: [0]})
    state = make_state("O", row=18, col=6, board=board)
    result = resolve_turn(state, ScriptedPieceSource(["I"]))
    o_id = PIECES_BY_NAME["O"]["id"]
    assert result.lines == 1
    assert result.score == 40
    assert result.level == 1
    assert result.board[19, 6] == result.board[19, 7] == o_id
    assert result.board[11, 0] == 1
    assert int((result.board != EMPTY).sum()) == 3


def test_resolve_turn_four_lines():
    board = make_board({r: list(range(9)) for r in range(16, 20)})
    base = make_state("I", row=0, col=3, board=board)
    vertical = Piece(rotate_matrix(base.piece.matrix), 16, 7)
    result = resolve_turn(_with_piece(base, vertical), ScriptedPieceSource(["O"]))
    assert result.lines == 4
    assert result.score == 1200
    assert np.all(result.board == EMPTY)


def test_level_up_recomputes_gravity():
    board = make_board({19: list(range(8))})
    state = make_state("O", row=18, col=8, board=board, lines=9)
    result = resolve_turn(state, ScriptedPieceSource(["O"]))
    assert result.lines == 10
    assert result.level == 2
    # scored at the level in effect when the line cleared
    assert result.score == 40
    assert result.gravity == pytest.approx(speed_curve(2))
    assert result.gravity < state.gravity


def test_gravity_unchanged_without_level_change():
    state = make_state("O", row=18, col=0)
    result = resolve_turn(state, ScriptedPieceSource(["O"]))
    assert result.level == 1
    assert result.gravity == state.gravity


def test_score_multiplies_by_level():
    board = make_board({19: list(range(8))})
    state = make_state("O", row=18, col=8, board=board, level=3, lines=20, score=500)
    result = resolve_turn(state, ScriptedPieceSource(["O"]))
    assert result.score == 500 + 40 * 3


def test_blocked_spawn_is_game_over():
    board = make_board({0: [3, 4, 5, 6]})
    state = make_state("O", row=18, col=0, board=board, next_name="I")
    result = resolve_turn(state, ScriptedPieceSource(["T"]))
    assert result.game_over
    for command in Command:
        assert apply(result, command) is result


def test_unknown_command_fails_fast():
    state = make_state()
    with pytest.raises(ValueError):
        apply(state, 99)
    with pytest.raises(ValueError):
        GameEngine(source=ScriptedPieceSource(["O"])).apply(state, "drop")


def test_commands_accept_plain_ints():
    state = make_state("T", row=5, col=4)
    assert apply(state, int(Command.MOVE_RIGHT)).piece.col == 5


def test_state_is_immutable():
    state = make_state()
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.score = 10
    with pytest.raises(ValueError):
        state.board[0, 0] = 1


def test_state_rejects_invalid_structure():
    with pytest.raises(ValueError):
        make_state(board=np.zeros((19, 10), dtype=np.int8))
    with pytest.raises(ValueError):
        make_state(level=0)
    with pytest.raises(ValueError):
        make_state("O", row=5, col=4, board=make_board({5: [4]}))


def test_engine_binds_config_and_source():
    engine = GameEngine(EngineConfig(fps=30, spawn_col=4), ScriptedPieceSource(["J", "L"]))
    state = engine.new_game()
    assert state.gravity == 30
    assert state.piece == make_piece("J", -1, 4)
    assert state.next_piece == make_piece("L", 0, 1)


def test_reachable_states_stay_valid():
    engine = GameEngine(EngineConfig(fps=3), RandomPieceSource(seed=7))
    rng = random.Random(11)
    commands = [Command.MOVE_LEFT, Command.MOVE_RIGHT, Command.MOVE_DOWN,
                Command.ROTATE, Command.TICK, Command.TICK, Command.TICK]
    state = engine.new_game()
    locks = 0
    for _ in range(3000):
        previous = state
        state = engine.apply(state, rng.choice(commands))
        assert state.board.shape == (20, 10)
        if state.next_piece is not previous.next_piece:
            locks += 1
        if state.game_over:
            state = engine.new_game()
            continue
        assert is_valid_move(state.board, state.piece.matrix, state.piece.row, state.piece.col)
    assert locks > 0


def _previews_at_locks(state, config, ticks=2000):
    previews = []
    for _ in range(ticks):
        previous = state
        state = apply(state, Command.TICK, config=config)
        if state.game_over:
            break
        if state.next_piece is not previous.next_piece:
            previews.append(state.next_piece.color)
    return previews


def test_seeded_config_keeps_one_piece_stream():
    config = EngineConfig(fps=1, seed=5)
    previews = _previews_at_locks(new_game(config=config), config)
    assert len(previews) >= 5
    assert len(set(previews)) > 1


def test_state_without_source_continues_first_stream():
    config = EngineConfig(fps=1, seed=5)
    previews = _previews_at_locks(make_state("O", row=0, col=0), config)
    assert len(previews) >= 5
    assert len(set(previews)) > 1


def test_state_carries_its_source():
    source = ScriptedPieceSource(["I", "O", "T", "S"])
    state = new_game(source)
    assert state.source is source
    assert move_left(state).source is source
    resting = dataclasses.replace(state, piece=make_piece("O", 18, 0))
    result = resolve_turn(resting)
    assert result.source is source
    assert result.next_piece == make_piece("T", 0, 1)


def test_same_seed_gives_same_game():
    config = EngineConfig(fps=1, seed=9)
    assert _previews_at_locks(new_game(config=config), config) == \
        _previews_at_locks(new_game(config=config), config)
