import numpy as np
import scipy.fft as spf

import nufx.info.ptype as nxt
import nufx.runtime as nxrt
import nufx.util as nxu

__all__ = [
    "FFT",
]


class FFT:
    r"""
    Size-`n` 1D Discrete Fourier Transform, bound to one element type.

    The forward transform is the unnormalized DFT

    .. math::

       G_{k} = \sum_{l=0}^{n-1} g_{l} e^{-j 2 \pi k l / n},

    and the backward transform its unnormalized adjoint

    .. math::

       g_{l} = \sum_{k} G_{k} e^{j 2 \pi k l / n}.

    Real-valued element types use the half-spectrum transforms :py:func:`scipy.fft.rfft` / :py:func:`scipy.fft.irfft`,
    i.e. `G` has length :math:`n // 2 + 1` and the backward transform assumes Hermitian symmetry.  Complex-valued element
    types use :py:func:`scipy.fft.fft` / :py:func:`scipy.fft.ifft`.

    Notes
    -----
    * ``backward(forward(x)) == n * x``: use :py:meth:`~nufx.nufft.fft.FFT.inverse` for an exact round trip.
    * Transforms preserve the precision of the element type.
    """

    def __init__(self, n: nxt.Integer, dtype: nxt.DType, workers: nxt.Integer = None):
        """
        Parameters
        ----------
        n: Integer
            Transform length.
        dtype: DType
            Element type of the spatial-domain input. (float32/64, complex64/128)
        workers: Integer
            Number of threads :py:mod:`scipy.fft` may use.
        """
        self._n = int(n)
        assert self._n >= 1, "[FFT] Transform length must be positive."
        self._width, self._real = nxrt.resolve(dtype)
        self._workers = workers

    @property
    def dim_shape(self) -> int:
        return self._n

    @property
    def codim_shape(self) -> int:
        return self._n // 2 + 1 if self._real else self._n

    @property
    def dtype(self) -> np.dtype:
        # spatial-domain dtype
        return self._width.value if self._real else self._width.complex.value

    @property
    def cdtype(self) -> np.dtype:
        # frequency-domain dtype
        return self._width.complex.value

    def forward(self, x: nxt.NDArray) -> nxt.NDArray:
        """
        Parameters
        ----------
        x: NDArray
            (n,) spatial samples.

        Returns
        -------
        y: NDArray
            (n,) or (n//2+1,) DFT coefficients, depending on the element type.
        """
        self._check(x, self.dim_shape, self.dtype)
        if self._real:
            y = spf.rfft(x, workers=self._workers)
        else:
            y = spf.fft(x, workers=self._workers)
        return y

    def backward(self, y: nxt.NDArray) -> nxt.NDArray:
        """
        Parameters
        ----------
        y: NDArray
            (n,) or (n//2+1,) DFT coefficients, depending on the element type.

        Returns
        -------
        x: NDArray
            (n,) spatial samples.
        """
        self._check(y, self.codim_shape, self.cdtype)
        if self._real:
            x = spf.irfft(y, n=self._n, norm="forward", workers=self._workers)
        else:
            x = spf.ifft(y, norm="forward", workers=self._workers)
        return x

    def inverse(self, y: nxt.NDArray) -> nxt.NDArray:
        """
        Exact inverse of :py:meth:`~nufx.nufft.fft.FFT.forward`.
        """
        x = self.backward(y)
        x /= self._n
        return x

    @staticmethod
    def next_fast_len(target: nxt.Integer, real: bool = False) -> int:
        """
        Smallest composite of FFT-friendly primes >= `target`.

        (See :py:func:`scipy.fft.next_fast_len`.)
        """
        return spf.next_fast_len(int(target), real=real)

    def _check(self, arr: nxt.NDArray, size: int, dtype: np.dtype):
        nxu.check_vector(arr, "FFT", size)
        if arr.dtype != dtype:
            raise TypeError(f"[FFT] Expected dtype {dtype}, got {arr.dtype}.")
