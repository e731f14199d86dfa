import numpy as np
import pytest

import nufx.math.cluster as nxm_cl


class TestCellSort:
    @pytest.mark.parametrize("n_cells", [1, 5, 64])
    @pytest.mark.parametrize("size", [0, 1, 17, 1_000])
    def test_matches_stable_argsort(self, n_cells, size):
        rng = np.random.default_rng(0)
        cell = rng.integers(0, n_cells, size=size)

        idx, count = nxm_cl.cell_sort(cell, n_cells)
        assert np.array_equal(idx, np.argsort(cell, kind="stable"))
        assert np.array_equal(count, np.bincount(cell, minlength=n_cells))

    def test_permutation(self):
        cell = np.array([3, 0, 3, 1, 0])
        idx, _ = nxm_cl.cell_sort(cell, 4)
        assert np.array_equal(np.sort(idx), np.arange(5))
        assert np.array_equal(idx, [1, 4, 3, 0, 2])


class TestBlockBounds:
    @pytest.mark.parametrize(
        ["N_point", "N_min", "N_max"],
        [
            (0, 1, 1),
            (0, 4, 10),
            (1, 4, 10),
            (3, 4, 10),
            (100, 4, 10),
            (100, 2, 10_000),
            (10_001, 2, 10_000),
            (12_345, 8, 1_000),
        ],
    )
    def test_invariants(self, N_point, N_min, N_max):
        bound = nxm_cl.block_bounds(N_point, N_min, N_max)
        size = np.diff(bound)

        assert bound[0] == 0
        assert bound[-1] == N_point
        assert np.all(size > 0)  # no empty blocks
        assert np.all(size <= N_max)
        assert len(size) >= min(N_min, N_point)
        if N_point > 0:  # balanced
            assert size.max() - size.min() <= 1
