import numpy as np
import pytest

import nufx.info.error as nxe
import nufx.runtime as nxrt


class TestWidth:
    @pytest.mark.parametrize("w", nxrt.Width)
    def test_eps(self, w: nxrt.Width):
        assert w.eps() == np.finfo(w.value).eps

    @pytest.mark.parametrize("w", nxrt.Width)
    def test_complex_roundtrip(self, w: nxrt.Width):
        cw = w.complex
        assert isinstance(cw, nxrt.CWidth)
        assert cw.real == w
        assert np.dtype(np.result_type(w.value, 1j)) == cw.value


class TestResolve:
    @pytest.mark.parametrize(
        ["dtype", "width", "is_real"],
        [
            (np.float32, nxrt.Width.SINGLE, True),
            (np.float64, nxrt.Width.DOUBLE, True),
            ("float64", nxrt.Width.DOUBLE, True),
            (float, nxrt.Width.DOUBLE, True),
            (np.complex64, nxrt.Width.SINGLE, False),
            (np.complex128, nxrt.Width.DOUBLE, False),
            (complex, nxrt.Width.DOUBLE, False),
        ],
    )
    def test_supported(self, dtype, width, is_real):
        assert nxrt.resolve(dtype) == (width, is_real)

    @pytest.mark.parametrize(
        "dtype",
        [
            np.float16,
            np.int64,
            np.uint8,
            bool,
            "not-a-dtype",
        ],
    )
    def test_unsupported(self, dtype):
        with pytest.raises(nxe.ConfigurationError):
            nxrt.resolve(dtype)
