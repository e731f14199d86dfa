import numpy as np
import pytest

import nufx
import nufx.nufft.kernel as nxk
import nufx_tests.conftest as ct

N = 256  # logical mode count
N_point = 2 * N


def error_bound(kernel: type, M: int, sigma: float) -> float:
    # Empirical relative-L2 error bounds of float64 transforms.
    if kernel in (nxk.KaiserBessel, nxk.BackwardsKaiserBessel) and np.isclose(sigma, 2):
        return max(6 * 10.0 ** (-1.9 * M), 3e-14)  # plateaus at ~2e-14 for M >= 8
    elif kernel is nxk.KaiserBessel and np.isclose(sigma, 1.25):
        return max(10.0 ** (-1.16 * M) * 1.05, 4e-12)  # minimum at ~2e-12 for M = 10
    elif kernel is nxk.BackwardsKaiserBessel and np.isclose(sigma, 1.25):
        return max(10.0 ** (-1.20 * M), 4e-12)
    elif kernel is nxk.Gaussian and np.isclose(sigma, 2):
        return 10.0 ** (-0.95 * M) * 0.8
    elif kernel is nxk.BSpline and np.isclose(sigma, 2):
        return 10.0 ** (-0.98 * M) * 0.4
    else:
        raise NotImplementedError


class TestAccuracy:
    # Fixtures ----------------------------------------------------------------
    @pytest.fixture(
        params=[
            (nxk.KaiserBessel, 1.25),
            (nxk.BackwardsKaiserBessel, 1.25),
            (nxk.KaiserBessel, 2.0),
            (nxk.BackwardsKaiserBessel, 2.0),
            (nxk.Gaussian, 2.0),
            (nxk.BSpline, 2.0),
        ],
        ids=lambda p: f"{p[0].__name__}-sigma={p[1]}",
    )
    def config(self, request) -> tuple[type, float]:
        return request.param

    @pytest.fixture(params=range(4, 11))
    def M(self, request) -> int:
        return request.param

    @pytest.fixture
    def plan(self, config, M) -> nufx.Plan:
        kernel, sigma = config
        return nufx.Plan(np.float64, N, M, sigma=sigma, kernel=kernel)

    @pytest.fixture
    def bound(self, config, M) -> float:
        kernel, sigma = config
        return error_bound(kernel, M, sigma)

    # Tests -------------------------------------------------------------------
    def test_type1(self, plan, bound):
        rng = np.random.default_rng(42)
        x = rng.uniform(0, 2 * np.pi, size=N_point)
        v = rng.standard_normal(N_point)

        plan.set_points(x)
        u = plan.exec_type1(np.empty(plan.spectrum_shape, dtype=np.cdouble), v)

        err = ct.rel_error(u, ct.direct_type1(x, v, N, real=True))
        assert err < bound

    def test_type2(self, plan, bound):
        rng = np.random.default_rng(42)
        u = rng.standard_normal(plan.spectrum_shape) + 1j * rng.standard_normal(plan.spectrum_shape)
        x = rng.uniform(0, 2 * np.pi, size=N_point)

        plan.set_points(x)
        v = plan.exec_type2(np.empty(N_point, dtype=np.double), u)

        err = ct.rel_error(v, ct.direct_type2(x, u, N, real=True))
        assert err < bound


class TestAccuracyComplex:
    # The complex-valued convention covers modes -N/2..N/2-1: same error profile as the real-valued one.
    @pytest.mark.parametrize("M", [4, 6, 8])
    @pytest.mark.parametrize("kernel", [nxk.KaiserBessel, nxk.BackwardsKaiserBessel])
    def test_roundtrip_pair(self, kernel, M):
        rng = np.random.default_rng(42)
        x = rng.uniform(0, 2 * np.pi, size=N_point)
        v = rng.standard_normal(N_point) + 1j * rng.standard_normal(N_point)
        u = rng.standard_normal(N) + 1j * rng.standard_normal(N)

        plan = nufx.Plan(np.complex128, N, M, sigma=1.25, kernel=kernel)
        plan.set_points(x)
        y1 = plan.exec_type1(np.empty(N, dtype=np.cdouble), v)
        y2 = plan.exec_type2(np.empty(N_point, dtype=np.cdouble), u)

        bound = 2 * error_bound(kernel, M, 1.25)
        assert ct.rel_error(y1, ct.direct_type1(x, v, N, real=False)) < bound
        assert ct.rel_error(y2, ct.direct_type2(x, u, N, real=False)) < bound


class TestAccuracySingle:
    @pytest.mark.parametrize("T", [np.float32, np.complex64])
    def test_type1(self, T):
        rng = np.random.default_rng(42)
        x = rng.uniform(0, 2 * np.pi, size=N_point)
        v = rng.standard_normal(N_point).astype(T)

        plan = nufx.Plan(T, N, 4, sigma=2)
        plan.set_points(x)
        u = plan.exec_type1(np.empty(plan.spectrum_shape, dtype=np.csingle), v)
        assert u.dtype == np.csingle

        # Error dominated by the float32 representation of coordinates (|k| |dx| ~ 128 * 2.4e-7.)
        err = ct.rel_error(u, ct.direct_type1(x, v, N, real=plan.is_real))
        assert err < 1e-4


class TestConvergence:
    @pytest.mark.parametrize(
        ["kernel", "sigma"],
        [
            (nxk.KaiserBessel, 1.25),
            (nxk.BackwardsKaiserBessel, 1.25),
            (nxk.KaiserBessel, 2.0),
            (nxk.Gaussian, 2.0),
            (nxk.BSpline, 2.0),
        ],
    )
    def test_monotone(self, kernel, sigma):
        # Error decreases with M until it reaches the round-off floor.
        rng = np.random.default_rng(0)
        x = rng.uniform(0, 2 * np.pi, size=N_point)
        v = rng.standard_normal(N_point)
        gt = ct.direct_type1(x, v, N, real=True)

        err = []
        for M in range(4, 11):
            plan = nufx.Plan(np.float64, N, M, sigma=sigma, kernel=kernel)
            plan.set_points(x)
            u = plan.exec_type1(np.empty(plan.spectrum_shape, dtype=np.cdouble), v)
            err.append(ct.rel_error(u, gt))

        floor = 1e-11
        for e0, e1 in zip(err, err[1:]):
            assert (e1 < e0) or (e1 < floor)
