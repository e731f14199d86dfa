import numpy as np
import pytest

import nufx.info.ptype as nxt
import nufx.runtime as nxrt


@pytest.fixture(params=nxrt.Width)
def width(request) -> nxrt.Width:
    return request.param


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


def isclose(
    a: nxt.NDArray,
    b: nxt.NDArray,
    as_dtype: nxt.DType,
) -> nxt.NDArray:
    """
    Equivalent of `np.isclose`, but where atol is automatically chosen based on `as_dtype`.
    """
    atol = {
        nxrt.Width.SINGLE.value: 2e-4,
        nxrt.CWidth.SINGLE.value: 2e-4,
        nxrt.Width.DOUBLE.value: 1e-8,
        nxrt.CWidth.DOUBLE.value: 1e-8,
    }
    # Numbers obtained by:
    # * \sum_{k >= (p+1)//2} 2^{-k}, where p=<number of mantissa bits>; then
    # * round up value to 3 significant decimal digits.
    # N_mantissa = [23, 52] for [single, double] respectively.

    prec = atol.get(np.dtype(as_dtype), nxrt.Width.DOUBLE.value)
    eq = np.isclose(a, b, atol=prec)
    return eq


def allclose(
    a: nxt.NDArray,
    b: nxt.NDArray,
    as_dtype: nxt.DType,
) -> bool:
    """
    Equivalent of `all(isclose)`, but where atol is automatically chosen based on `as_dtype`.
    """
    return bool(np.all(isclose(a, b, as_dtype)))


def rel_error(a: nxt.NDArray, b: nxt.NDArray) -> float:
    """
    Relative L2 error of `a` w.r.t. reference `b`.
    """
    a = np.asarray(a, dtype=np.cdouble)
    b = np.asarray(b, dtype=np.cdouble)
    return float(np.linalg.norm(a - b) / np.linalg.norm(b))


def modes(N: int, real: bool) -> nxt.NDArray:
    # Logical modes in storage order.
    if real:
        k = np.fft.rfftfreq(N, 1 / N)
    else:
        k = np.fft.fftfreq(N, 1 / N)
    return np.around(k).astype(int)


def direct_type1(x: nxt.NDArray, v: nxt.NDArray, N: int, real: bool) -> nxt.NDArray:
    """
    Type-1 transform by direct summation.

    u[k] = \\sum_{j} v[j] \\exp(-i k x[j])
    """
    x = np.asarray(x, dtype=np.double)
    k = modes(N, real)
    A = np.exp(-1j * np.outer(k, x))
    return A @ np.asarray(v, dtype=np.cdouble)


def direct_type2(x: nxt.NDArray, u: nxt.NDArray, N: int, real: bool) -> nxt.NDArray:
    """
    Type-2 transform by direct summation.

    * complex-valued: v[j] = \\sum_{k} u[k] \\exp(i k x[j])
    * real-valued:    v[j] = \\sum_{k >= 0} c[k] Re(u[k] \\exp(i k x[j])), with c[0] = 1, c[k > 0] = 2.
    """
    x = np.asarray(x, dtype=np.double)
    k = modes(N, real)
    terms = np.exp(1j * np.outer(x, k)) * np.asarray(u, dtype=np.cdouble)
    if real:
        c = np.full(len(k), 2.0)
        c[0] = 1
        v = (terms.real * c).sum(axis=1)
    else:
        v = terms.sum(axis=1)
    return v
