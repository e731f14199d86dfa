import numpy as np
import pytest
import scipy.fft as spf

import nufx.info.error as nxe
import nufx.nufft.fft as nxfft
import nufx.runtime as nxrt
import nufx_tests.conftest as ct


class TestFFT:
    # Fixtures ----------------------------------------------------------------
    @pytest.fixture(params=[1, 7, 16, 45])
    def n(self, request) -> int:
        return request.param

    @pytest.fixture(params=[True, False])
    def real(self, request) -> bool:
        return request.param

    @pytest.fixture
    def dtype(self, width, real) -> np.dtype:
        return width.value if real else width.complex.value

    @pytest.fixture
    def op(self, n, dtype) -> nxfft.FFT:
        return nxfft.FFT(n, dtype, workers=1)

    @pytest.fixture
    def x(self, n, dtype, real, rng) -> np.ndarray:
        x = rng.standard_normal(n)
        if not real:
            x = x + 1j * rng.standard_normal(n)
        return x.astype(dtype)

    # Tests -------------------------------------------------------------------
    def test_shape(self, op, n, real):
        assert op.dim_shape == n
        assert op.codim_shape == (n // 2 + 1 if real else n)

    def test_forward(self, op, x, real, dtype):
        y = op.forward(x)
        gt = np.fft.rfft(x.astype(np.double)) if real else np.fft.fft(x.astype(np.cdouble))
        assert y.dtype == op.cdtype
        assert ct.allclose(y, gt, as_dtype=dtype)

    def test_backward_unnormalized(self, op, x, n, dtype):
        y = op.backward(op.forward(x))
        assert y.dtype == dtype
        assert ct.allclose(y, n * x, as_dtype=dtype)

    def test_inverse(self, op, x, dtype):
        y = op.inverse(op.forward(x))
        assert ct.allclose(y, x, as_dtype=dtype)

    def test_size_mismatch(self, op, n, dtype):
        with pytest.raises(nxe.ShapeMismatchError):
            op.forward(np.zeros(n + 1, dtype=dtype))
        with pytest.raises(nxe.ShapeMismatchError):
            op.forward(np.zeros((1, n), dtype=dtype))

    def test_dtype_mismatch(self, op, n, width, real):
        other = nxrt.Width.DOUBLE if width == nxrt.Width.SINGLE else nxrt.Width.SINGLE
        with pytest.raises(TypeError):
            op.forward(np.zeros(n, dtype=other.value))
        with pytest.raises(TypeError):
            op.backward(np.zeros(op.codim_shape, dtype=other.complex.value))


class TestNextFastLen:
    @pytest.mark.parametrize("target", [1, 17, 100, 257, 1021])
    @pytest.mark.parametrize("real", [True, False])
    def test_value(self, target, real):
        n = nxfft.FFT.next_fast_len(target, real=real)
        assert n >= target
        assert n == spf.next_fast_len(target, real=real)
