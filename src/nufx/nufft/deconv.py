import numpy as np

import nufx.info.error as nxe
import nufx.info.ptype as nxt
import nufx.runtime as nxrt

__all__ = [
    "Deconvolver",
    "modes",
]


def modes(N: nxt.Integer, real: bool) -> nxt.NDArray:
    """
    Logical Fourier modes of a size-`N` spectrum, in storage order.

    Parameters
    ----------
    N: Integer
        Number of logical modes.
    real: bool
        If True, return the half-spectrum modes ``[0, ..., N//2]`` (as :py:func:`numpy.fft.rfftfreq`.)
        Otherwise return all `N` modes in FFT order ``[0, ..., (N-1)//2, -N//2, ..., -1]`` (as
        :py:func:`numpy.fft.fftfreq`.)

    Returns
    -------
    k: NDArray
        (L,) int64 mode indices.
    """
    if real:
        k = np.arange(N // 2 + 1, dtype=np.int64)
    else:
        k = (np.arange(N, dtype=np.int64) + N // 2) % N - N // 2
    return k


class Deconvolver:
    r"""
    Map between the logical size-`N` spectrum and the oversampled size-`n` spectrum of a spread grid.

    Mode :math:`k` of the oversampled spectrum is attenuated by :math:`\psi_{k} = \phi^{\mathcal{F}}(2 \pi k / n)`
    during spreading/interpolation.  The deconvolver undoes this attenuation:

    * :py:meth:`truncate`: :math:`\hat{u}_{k} = G_{k \bmod n} / \psi_{k}` (type-1);
    * :py:meth:`pad`: :math:`G_{k \bmod n} = \hat{u}_{k} / \psi_{k}`, other modes zeroed (type-2).

    In the real-valued convention the half-spectrum layout of :py:func:`scipy.fft.rfft` implies the Hermitian
    extension, hence only non-negative modes are stored.
    """

    def __init__(
        self,
        kernel: nxt.KernelT,
        N: nxt.Integer,
        n: nxt.Integer,
        width: nxrt.Width,
        real: bool,
    ):
        """
        Parameters
        ----------
        kernel: Kernel
            Spreading kernel.
        N: Integer
            Number of logical modes.
        n: Integer
            Oversampled grid size.
        width: Width
            Precision of the correction factors.
        real: bool
            Spectrum convention.

        Raises
        ------
        ConfigurationError
            If a retained mode is not representable by `kernel`, i.e. its correction is zero or non-finite.
        """
        k = modes(N, real)
        psi = kernel.correction(k, n)

        tiny = np.finfo(width.value).tiny
        bad = ~(np.isfinite(psi) & (np.fabs(psi) > tiny))
        if np.any(bad):
            raise nxe.ConfigurationError(
                f"{kernel} cannot resolve mode {k[bad][0]} on a size-{n} grid: "
                "increase the oversampling factor or pick another kernel."
            )

        self._idx = k % n
        self._scale = (1 / psi).astype(width.value)

    @property
    def idx(self) -> nxt.NDArray:
        """
        (L,) positions of the logical modes in the oversampled spectrum.
        """
        return self._idx

    @property
    def scale(self) -> nxt.NDArray:
        """
        (L,) reciprocal correction factors.
        """
        return self._scale

    def truncate(self, G: nxt.NDArray) -> nxt.NDArray:
        """
        Parameters
        ----------
        G: NDArray
            Oversampled spectrum.

        Returns
        -------
        u: NDArray
            (L,) corrected logical spectrum.
        """
        return G[self._idx] * self._scale

    def pad(self, u: nxt.NDArray, G: nxt.NDArray) -> nxt.NDArray:
        """
        Parameters
        ----------
        u: NDArray
            (L,) logical spectrum.
        G: NDArray
            Oversampled spectrum to overwrite.

        Returns
        -------
        G: NDArray
        """
        G.fill(0)
        G[self._idx] = u * self._scale
        return G
