import numpy as np
import pytest

import AddRowGreedy_algorithm as ar
from AddRowGreedy_algorithm import AddRowGreedy, run_add_row_greedy
from clean_utils import InvariantViolationError
from presence_matrix import PresenceMatrix

# rows 0 and 1 tie on alpha; row 1's missing column is shared by more rows
TIE_MATRIX = [
    [0, 1, 1, 1],
    [1, 1, 1, 0],
    [0, 1, 0, 0],
    [1, 0, 1, 0],
]


def _random_matrix(seed, shape=(20, 15), p_missing=0.15):
    rng = np.random.default_rng(seed)
    return PresenceMatrix(rng.random(shape) < p_missing)


def test_all_present_keeps_everything():
    solver = AddRowGreedy(PresenceMatrix.from_array(np.ones((3, 3))))
    rows, cols = solver.solve()
    assert rows.all() and cols.all()
    assert solver.best_obj_value == 9
    assert solver.best_num_rows == 3


def test_tie_break_prefers_row_clearing_more_similar_rows():
    solver = AddRowGreedy(PresenceMatrix.from_array(TIE_MATRIX))
    s = solver.state
    assert s.alphas.tolist() == [3, 3, 1, 2]
    assert ar.tie_break_score(s, solver.missing, 0, 3) == (2, 4)
    assert ar.tie_break_score(s, solver.missing, 1, 3) == (3, 6)
    assert ar.select_next_row(s, solver.missing) == 1


def test_tie_matrix_full_solve():
    solver = AddRowGreedy(PresenceMatrix.from_array(TIE_MATRIX))
    rows, cols = solver.solve()
    assert solver.inclusion_order == [1, 0, 2, 3]
    assert [inc.objective for inc in solver.history] == [3, 4, 3, 0]
    assert solver.best_num_rows == 2
    assert rows.tolist() == [True, True, False, False]
    assert cols.tolist() == [False, True, True, False]
    assert solver.best_obj_value == 4


def test_alpha_window_ignores_distant_rows():
    M = PresenceMatrix.from_array([
        [0, 1, 1, 1, 1, 1],
        [1, 1, 1, 1, 1, 0],
        [1, 0, 0, 0, 0, 0],
        [0, 1, 1, 1, 0, 1],
        [1, 0, 0, 0, 0, 0],
    ])
    solver = AddRowGreedy(M)
    s = solver.state
    # rows 2 and 4 are also missing column 5, but trail the best alpha by 4
    assert ar.tie_break_score(s, solver.missing, 1, 5) == (1, 5)
    assert ar.tie_break_score(s, solver.missing, 0, 5) == (2, 9)
    assert ar.select_next_row(s, solver.missing) == 0
    assert ar.ALPHA_WINDOW == 3


def test_unique_best_alpha_is_taken_directly():
    solver = AddRowGreedy(PresenceMatrix.from_array([[1, 0, 1], [1, 1, 1], [0, 0, 1]]))
    assert ar.select_next_row(solver.state, solver.missing) == 1


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_invariants_along_trajectory(seed):
    M = _random_matrix(seed)
    solver = AddRowGreedy(M)
    s, miss = solver.state, solver.missing
    prev_cols = s.num_included_cols
    while s.excluded_rows:
        n_before = len(s.included_rows)
        inc = ar.step(s, miss)
        assert len(s.included_rows) == n_before + 1
        assert s.num_included_cols <= prev_cols
        assert s.num_included_cols == s.included_cols.sum()
        prev_cols = s.num_included_cols
        # pruned columns are exactly the included ones missing in the new row
        assert not miss[inc.row, s.included_cols].any()
        for i in s.excluded_rows:
            assert s.alphas[i] == (~miss[i] & s.included_cols).sum()


@pytest.mark.parametrize("seed", [0, 4, 5])
def test_columns_rebuilt_from_kept_rows(seed):
    M = _random_matrix(seed)
    solver = AddRowGreedy(M)
    rows, cols = solver.solve()
    kept_rows = np.flatnonzero(rows)
    for j in range(M.num_cols()):
        assert cols[j] == all(not M.is_missing(i, j) for i in kept_rows)
    assert not M.missing[np.ix_(rows, cols)].any()
    assert solver.best_obj_value == rows.sum() * cols.sum()
    assert M.num_valid_kept(rows, cols) == solver.best_obj_value


def test_best_snapshot_keeps_first_maximum():
    # objective trajectory 2, 2, ... : the one-row prefix is returned
    M = PresenceMatrix.from_array([[1, 1], [1, 0]])
    solver = AddRowGreedy(M)
    solver.solve()
    assert [inc.objective for inc in solver.history] == [2, 2]
    assert solver.best_num_rows == 1
    assert solver.rows_to_keep.tolist() == [True, False]


def test_floors_are_informative_only():
    solver = AddRowGreedy(PresenceMatrix.from_array(TIE_MATRIX), min_rows=3, min_cols=1)
    solver.solve()
    assert solver.num_rows_to_keep == 2
    assert solver.num_cols_to_keep == 2
    assert not solver.meets_floors()


def test_run_add_row_greedy_is_deterministic():
    M = _random_matrix(9)
    a = run_add_row_greedy(M)
    b = run_add_row_greedy(M)
    assert np.array_equal(a[0], b[0]) and np.array_equal(a[1], b[1])


def test_select_next_row_with_nothing_left_to_include():
    solver = AddRowGreedy(PresenceMatrix.from_array(TIE_MATRIX))
    solver.solve()
    assert solver.state.excluded_rows == []
    with pytest.raises(InvariantViolationError):
        ar.select_next_row(solver.state, solver.missing)


def test_including_a_row_twice_is_an_invariant_violation():
    solver = AddRowGreedy(PresenceMatrix.from_array(TIE_MATRIX))
    inc = ar.step(solver.state, solver.missing)
    with pytest.raises(InvariantViolationError):
        ar.include_row(solver.state, inc.row)
    assert solver.state.included_rows == [inc.row]
