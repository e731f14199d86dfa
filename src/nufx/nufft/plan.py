import collections
import logging
import math

import numpy as np

import nufx.info.config as nxcfg
import nufx.info.error as nxe
import nufx.info.ptype as nxt
import nufx.info.warning as nxw
import nufx.nufft.deconv as nxdc
import nufx.nufft.fft as nxfft
import nufx.nufft.kernel as nxk
import nufx.nufft.points as nxpts
import nufx.nufft.spread as nxs
import nufx.nufft.table as nxtab
import nufx.runtime as nxrt
import nufx.util as nxu

__all__ = [
    "Plan",
    "set_points",
    "exec_type1",
    "exec_type2",
]

logger = logging.getLogger(__name__)


class Plan:
    r"""
    1D Non-Uniform Fast Fourier Transform (NUFFT) of type 1 and 2.

    Given non-uniform points :math:`\{x_{j}\}_{j=1}^{M} \subset [0, 2\pi)`, a plan computes

    * type-1 (non-uniform to uniform):

      .. math::

         \hat{u}_{k} = \sum_{j=1}^{M} v_{j} e^{-j k x_{j}}, \qquad k \in \mathcal{K}_{N};

    * type-2 (uniform to non-uniform):

      .. math::

         v_{j} = \sum_{k \in \mathcal{K}_{N}} \hat{u}_{k} e^{j k x_{j}}.

    The set of modes :math:`\mathcal{K}_{N}` and the storage of :math:`\hat{u}` depend on the element type `T`:

    * complex-valued `T`: :math:`\mathcal{K}_{N} = \{-\lfloor N/2 \rfloor, \ldots, \lfloor (N-1)/2 \rfloor\}`, stored
      in FFT order (as :py:func:`numpy.fft.fftfreq`);
    * real-valued `T`: :math:`\hat{u}` is Hermitian-symmetric, hence only modes :math:`\{0, \ldots, \lfloor N/2
      \rfloor\}` are stored (as :py:func:`numpy.fft.rfftfreq`.) The type-2 transform then computes

      .. math::

         v_{j} = \sum_{k=0}^{\lfloor N/2 \rfloor} c_{k} \Re\left(\hat{u}_{k} e^{j k x_{j}}\right),
         \qquad c_{0} = 1, \; c_{k > 0} = 2.

    Transforms are evaluated in three steps:

    1. spread (interpolate) point values onto (from) an oversampled periodic grid of size :math:`n \ge \sigma N` using
       a compactly-supported kernel :math:`\phi` of half-width :math:`M` grid cells;
    2. FFT of size :math:`n`;
    3. truncate (zero-pad) the spectrum and deconvolve by :math:`\phi^{\mathcal{F}}`.

    Accuracy is driven by the half-support `M` and the oversampling factor :math:`\sigma`: the relative error decays
    roughly like :math:`10^{-M}` for the Kaiser-Bessel kernels at :math:`\sigma = 1.25`.

    Examples
    --------

    .. code-block:: python3

       import numpy as np
       import nufx

       rng = np.random.default_rng(0)
       x = rng.uniform(0, 2 * np.pi, size=1_000)
       v = rng.standard_normal(x.size) + 1j * rng.standard_normal(x.size)

       plan = nufx.Plan(np.complex128, N=256, M=8)
       plan.set_points(x)
       u = plan.exec_type1(np.empty(plan.spectrum_shape, dtype=np.complex128), v)

    Notes
    -----
    * A plan owns scratch buffers: it must not be executed concurrently from several threads.  Use one plan per
      thread instead.
    * Blocks of sorted points are spread/interpolated by a thread pool; results are deterministic.
    * In the real-valued convention with even `N`, a grid of size :math:`n = N` (e.g. ``sigma=1``) folds mode
      :math:`N/2` onto the real-only Nyquist bin of :py:func:`scipy.fft.rfft`: that mode is then inaccurate, and a
      :py:class:`~nufx.info.warning.PrecisionWarning` is emitted at construction.
    """

    def __init__(
        self,
        T: nxt.DType,
        N: nxt.Integer,
        M: nxt.Integer,
        *,
        sigma: nxt.Real = 1.25,
        kernel: nxt.KernelSpec = "kaiser_bessel",
        workers: nxt.Integer = None,
        max_block_size: nxt.Integer = None,
        enable_warnings: bool = True,
    ):
        r"""
        Parameters
        ----------
        T: DType
            Element type of point values: float32/64 (real-valued convention) or complex64/128 (complex-valued
            convention.)
        N: Integer
            Number of logical Fourier modes.
        M: Integer
            Kernel half-support, in oversampled grid cells.
        sigma: Real
            Oversampling factor :math:`\sigma \ge 1`.
        kernel: str, Kernel class, Kernel
            Spreading kernel.  (See :py:func:`~nufx.nufft.kernel.get_kernel`.)
        workers: Integer
            Number of threads.  Defaults to :py:func:`nufx.info.config.workers`.
        max_block_size: Integer
            Maximum number of points spread/interpolated per task.  Defaults to
            :py:func:`nufx.info.config.max_block_size`.
        enable_warnings: bool
            If ``True``, emit warnings in case of precision/auto-inference issues.

        Raises
        ------
        ConfigurationError
        """
        width, is_real = nxrt.resolve(T)
        self._enable_warnings = bool(enable_warnings)
        self._workers = self._as_positive_int(workers, "workers", nxcfg.workers)
        self._max_block_size = self._as_positive_int(max_block_size, "max_block_size", nxcfg.max_block_size)

        self.cfg = self._init_metadata(N, M, sigma, is_real)
        if self.cfg.bumped and self._enable_warnings:
            msg = (
                f"Grid size raised to n={self.cfg.n} to fit the kernel footprint: "
                f"effective oversampling is {self.cfg.sigma_eff:.3g} > {self.cfg.sigma:.3g}."
            )
            nxw.warn_context(msg, nxw.AutoInferenceWarning)
        if is_real and (2 * (self.cfg.L - 1) >= self.cfg.n) and self._enable_warnings:
            msg = (
                f"Mode k={self.cfg.L - 1} lands on the Nyquist bin of the size-{self.cfg.n} grid: "
                "its imaginary part is lost.  Use sigma > 1 for an exact half-spectrum."
            )
            nxw.warn_context(msg, nxw.PrecisionWarning)

        self._width = width
        self._real = is_real
        self._kernel = nxk.get_kernel(kernel, self.cfg.M, self.cfg.sigma_eff)
        if width not in self._kernel.widths:
            raise nxe.ConfigurationError(f"{self._kernel} does not support {width.value} precision.")

        self._table = nxtab.tabulate(self._kernel, width)
        self._fft = nxfft.FFT(self.cfg.n, self.dtype, workers=self._workers)
        self._deconv = nxdc.Deconvolver(self._kernel, self.cfg.N, self.cfg.n, width, is_real)
        self._spreader = nxs.Spreader(self._table, self.cfg.n, self._workers)
        self._interpolator = nxs.Interpolator(self._table, self.cfg.n, self._workers)

        # Re-usable buffers
        self._grid = np.zeros(self.cfg.n, dtype=self.dtype)
        self._spectrum = np.zeros(self._fft.codim_shape, dtype=width.complex.value)

        self._points = None
        logger.debug(
            "Plan(N=%d, n=%d, M=%d, sigma=%g, kernel=%s, dtype=%s, degree=%d)",
            self.cfg.N,
            self.cfg.n,
            self.cfg.M,
            self.cfg.sigma_eff,
            self._kernel.name,
            self.dtype,
            self._table.shape[-1] - 1,
        )

    # Properties --------------------------------------------------------------
    @property
    def dtype(self) -> np.dtype:
        """
        Element type of point values.
        """
        return self._width.value if self._real else self._width.complex.value

    @property
    def width(self) -> nxrt.Width:
        return self._width

    @property
    def N(self) -> int:
        return self.cfg.N

    @property
    def M(self) -> int:
        return self.cfg.M

    @property
    def sigma(self) -> float:
        """
        Effective oversampling factor :math:`n / N`.
        """
        return self.cfg.sigma_eff

    @property
    def n(self) -> int:
        """
        Oversampled grid size.
        """
        return self.cfg.n

    @property
    def kernel(self) -> nxt.KernelT:
        return self._kernel

    @property
    def is_real(self) -> bool:
        return self._real

    @property
    def spectrum_shape(self) -> int:
        """
        Length of the logical spectrum: :math:`N // 2 + 1` (real-valued convention) or :math:`N`.
        """
        return self.cfg.L

    @property
    def npoints(self) -> int:
        """
        Number of non-uniform points currently set.  (0 if none.)
        """
        return 0 if (self._points is None) else self._points.size

    @property
    def modes(self) -> nxt.NDArray:
        """
        (L,) logical Fourier modes, in storage order.
        """
        return nxdc.modes(self.cfg.N, self._real)

    def __repr__(self) -> str:
        return (
            f"Plan({self.dtype}, N={self.cfg.N}, M={self.cfg.M}, n={self.cfg.n}, "
            f"sigma={self.cfg.sigma_eff:.4g}, kernel={self._kernel}, npoints={self.npoints})"
        )

    # Transforms --------------------------------------------------------------
    def set_points(self, x: nxt.NDArray) -> None:
        r"""
        Set (or replace) the non-uniform points.

        Parameters
        ----------
        x: NDArray
            (Q,) coordinates in :math:`[0, 2\pi)`.

        Raises
        ------
        ShapeMismatchError
            If `x` is not 1D.
        DomainError
            If some coordinates are not real-valued finite numbers in :math:`[0, 2\pi)`.
        """
        pts = nxpts.PointSet(
            x=x,
            n=self.cfg.n,
            width=self._width,
            workers=self._workers,
            max_block_size=self._max_block_size,
        )
        self._points = pts
        logger.debug("set_points: %d points in %d blocks.", pts.size, pts.nblocks)

    def exec_type1(self, out: nxt.NDArray, values: nxt.NDArray) -> nxt.NDArray:
        """
        Type-1 transform (non-uniform to uniform.)

        Parameters
        ----------
        out: NDArray
            (L,) complex-valued output buffer.
        values: NDArray
            (Q,) values at the non-uniform points.  Must be real-valued for real-valued plans.

        Returns
        -------
        out: NDArray
            (L,) Fourier coefficients.
        """
        pts = self._require_points()
        values = nxu.as_vector(values, "values", pts.size)
        values = self._cast_warn(values, self.dtype)
        self._check_out(out, self.cfg.L, complex_only=True)
        logger.debug("exec_type1: %d points.", pts.size)

        w = values[pts.idx]
        g = self._spreader.apply(pts, w, self._grid)
        G = self._fft.forward(g)
        u = self._deconv.truncate(G)

        out[:] = u
        return out

    def exec_type2(self, out: nxt.NDArray, spectrum: nxt.NDArray) -> nxt.NDArray:
        """
        Type-2 transform (uniform to non-uniform.)

        Parameters
        ----------
        out: NDArray
            (Q,) output buffer.  Must be complex-valued for complex-valued plans.
        spectrum: NDArray
            (L,) Fourier coefficients.

        Returns
        -------
        out: NDArray
            (Q,) values at the non-uniform points.
        """
        pts = self._require_points()
        spectrum = nxu.as_vector(spectrum, "spectrum", self.cfg.L)
        spectrum = self._cast_warn(spectrum, self._width.complex.value)
        self._check_out(out, pts.size, complex_only=not self._real)
        logger.debug("exec_type2: %d points.", pts.size)

        G = self._deconv.pad(spectrum, self._spectrum)
        g = self._fft.backward(G)
        v = self._interpolator.apply(pts, g)

        out[pts.idx] = v
        return out

    # Helper routines (internal) ----------------------------------------------
    @staticmethod
    def _init_metadata(N, M, sigma, is_real) -> collections.namedtuple:
        # Compute all plan parameters & store in namedtuple with (sub-)fields:
        #
        # * N: int                    [Logical mode count]
        # * M: int                    [Kernel half-support]
        # * L: int                    [Logical spectrum length]
        # * sigma: float              [Requested oversampling factor]
        # * n: int                    [Oversampled grid size]
        # * sigma_eff: float          [Effective oversampling factor n / N]
        # * bumped: bool              [n was raised to fit the kernel footprint]
        if not (isinstance(N, nxt.Integer) and N >= 1):
            raise nxe.ConfigurationError(f"N: expected a positive integer, got {N!r}.")
        if not (isinstance(M, nxt.Integer) and M >= 1):
            raise nxe.ConfigurationError(f"M: expected a positive integer, got {M!r}.")
        if not (isinstance(sigma, nxt.Real) and math.isfinite(sigma) and sigma >= 1):
            raise nxe.ConfigurationError(f"sigma: expected a finite real >= 1, got {sigma!r}.")
        N, M, sigma = int(N), int(M), float(sigma)

        L = N // 2 + 1 if is_real else N
        Ns = math.ceil(round(sigma * N, 8))  # N^{\sigma}
        n_min = 2 * M + 2  # folding assumes n > 2M
        n = nxfft.FFT.next_fast_len(max(Ns, n_min), real=is_real)

        CONFIG = collections.namedtuple(
            "CONFIG",
            field_names=[
                "N",
                "M",
                "L",
                "sigma",
                "n",
                "sigma_eff",
                "bumped",
            ],
        )
        return CONFIG(
            N=N,
            M=M,
            L=L,
            sigma=sigma,
            n=n,
            sigma_eff=n / N,
            bumped=n_min > Ns,
        )

    @staticmethod
    def _as_positive_int(value, name: str, default) -> int:
        if value is None:
            return default()
        if not (isinstance(value, nxt.Integer) and value >= 1):
            raise nxe.ConfigurationError(f"{name}: expected a positive integer, got {value!r}.")
        return int(value)

    def _require_points(self) -> nxpts.PointSet:
        if self._points is None:
            raise nxe.PointsNotSetError("No points set: call set_points() first.")
        return self._points

    def _cast_warn(self, arr: nxt.NDArray, dtype: np.dtype) -> nxt.NDArray:
        if arr.dtype == dtype:
            out = arr
        else:
            if np.iscomplexobj(arr) and not np.issubdtype(dtype, np.complexfloating):
                raise TypeError(f"Complex-valued input not supported by real-valued plans, got {arr.dtype}.")
            if not np.issubdtype(arr.dtype, np.number):
                raise TypeError(f"Expected a numeric array, got {arr.dtype}.")
            # Byte-order swaps and real-valued input to complex-valued plans lose nothing.
            lossless = np.can_cast(arr.dtype, dtype, "equiv") or np.can_cast(arr.dtype, self._width.value, "equiv")
            if self._enable_warnings and not lossless:
                msg = "Computation may not be performed at the requested precision."
                nxw.warn_context(msg, nxw.PrecisionWarning)
            out = arr.astype(dtype=dtype)
        return out

    def _check_out(self, out: nxt.NDArray, size: int, complex_only: bool):
        if not isinstance(out, np.ndarray):
            raise TypeError(f"out: expected a NumPy array, got {type(out)}.")
        nxu.check_vector(out, "out", size)
        if complex_only and not np.issubdtype(out.dtype, np.complexfloating):
            raise TypeError(f"out: expected a complex-valued array, got {out.dtype}.")
        if not np.issubdtype(out.dtype, np.inexact):
            raise TypeError(f"out: expected a floating-point array, got {out.dtype}.")


def set_points(plan: nxt.PlanT, x: nxt.NDArray) -> nxt.PlanT:
    """
    Functional form of :py:meth:`~nufx.nufft.plan.Plan.set_points`.

    Returns
    -------
    plan: Plan
        The input plan, for chaining.
    """
    plan.set_points(x)
    return plan


def exec_type1(out: nxt.NDArray, plan: nxt.PlanT, values: nxt.NDArray) -> nxt.NDArray:
    """
    Functional form of :py:meth:`~nufx.nufft.plan.Plan.exec_type1`.
    """
    return plan.exec_type1(out, values)


def exec_type2(out: nxt.NDArray, plan: nxt.PlanT, spectrum: nxt.NDArray) -> nxt.NDArray:
    """
    Functional form of :py:meth:`~nufx.nufft.plan.Plan.exec_type2`.
    """
    return plan.exec_type2(out, spectrum)
