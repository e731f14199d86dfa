import numpy as np
import scipy.interpolate as spi
import scipy.special as sps

import nufx.info.error as nxe
import nufx.info.ptype as nxt
import nufx.runtime as nxrt

__all__ = [
    "Kernel",
    "KaiserBessel",
    "BackwardsKaiserBessel",
    "Gaussian",
    "BSpline",
    "get_kernel",
]


class Kernel:
    r"""
    1D finite-support symmetric spreading kernel :math:`\phi: [-M, M] \to \mathbb{R}`.

    Kernels are expressed in oversampled grid units, i.e. :math:`\phi(u)` is the weight given to a grid cell located
    :math:`u` cells away from a non-uniform point.  :math:`\phi(u) = 0` for :math:`|u| > M`.

    Every kernel ships the matching pair (:py:meth:`~nufx.nufft.kernel.Kernel.apply`,
    :py:meth:`~nufx.nufft.kernel.Kernel.applyF`).  The two are never mixed across kernels.

    Sub-classes must define `name` (registry key) and overwrite :py:meth:`apply` / :py:meth:`applyF`.
    """

    #: Registry key, see :py:func:`~nufx.nufft.kernel.get_kernel`.
    name: str = None
    #: Alternative registry keys.
    aliases: tuple[str] = ()
    #: Floating-point precisions the kernel can be tabulated at.
    widths: frozenset = frozenset(nxrt.Width)

    def __init__(self, M: nxt.Integer, sigma: nxt.Real):
        r"""
        Parameters
        ----------
        M: Integer
            Half-support :math:`M \ge 1`, in grid cells.
        sigma: Real
            Oversampling factor :math:`\sigma \ge 1` of the grid the kernel is used on.
        """
        self._M = int(M)
        self._sigma = float(sigma)
        assert self._M >= 1, "[Kernel] Half-support must be positive."
        assert self._sigma >= 1, "[Kernel] Oversampling factor must be >= 1."

    @property
    def M(self) -> int:
        return self._M

    @property
    def sigma(self) -> float:
        return self._sigma

    def support(self) -> nxt.Integer:
        r"""
        Returns
        -------
        M: Integer
            Value :math:`M > 0` such that :math:`\phi(u) = 0, \; \forall |u| > M`.
        """
        return self._M

    def apply(self, arr: nxt.NDArray) -> nxt.NDArray:
        r"""
        Evaluate :math:`\phi(u)`, element-wise.

        Parameters
        ----------
        arr: NDArray
            (...,) offsets :math:`u`, in grid units.

        Returns
        -------
        out: NDArray
            (...,) float64 kernel values.
        """
        raise NotImplementedError

    def applyF(self, arr: nxt.NDArray) -> nxt.NDArray:
        r"""
        Evaluate :math:`\phi^{\mathcal{F}}(\omega)`, element-wise.

        The Fourier convention used is

        .. math::

           \phi^{\mathcal{F}}(\omega) = \int \phi(u) e^{-j \omega u} du,

        with :math:`\omega` expressed in radians per grid cell.
        """
        raise NotImplementedError

    def correction(self, k: nxt.NDArray, n: nxt.Integer) -> nxt.NDArray:
        r"""
        Fourier-space attenuation of logical mode(s) `k` when spreading onto a size-`n` periodic grid.

        Parameters
        ----------
        k: NDArray
            (...,) integer mode indices.
        n: Integer
            Oversampled grid size.

        Returns
        -------
        psi: NDArray
            (...,) float64 factors :math:`\phi^{\mathcal{F}}(2 \pi k / n)`.
        """
        w = (2 * np.pi / n) * np.asarray(k, dtype=np.double)
        return self.applyF(w)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(M={self._M}, sigma={self._sigma:g})"

    # Helper routines (internal) ----------------------------------------------
    def _normalize(self, arr: nxt.NDArray) -> tuple[nxt.NDArray, nxt.NDArray]:
        # Returns
        # -------
        # s: NDArray
        #     (...,) offsets rescaled to the unit support [-1, 1].
        # mask: NDArray[bool]
        #     (...,) True where |s| <= 1.
        s = np.asarray(arr, dtype=np.double) / self._M
        mask = np.fabs(s) <= 1
        return s, mask


class KaiserBessel(Kernel):
    r"""
    Kaiser-Bessel kernel.

    Notes
    -----
    * :math:`\phi(u) = \frac{I_{0}(\beta \sqrt{1 - (u/M)^{2}})}{I_{0}(\beta)} 1_{[-M, M]}(u)`
    * :math:`\phi^{\mathcal{F}}(\omega) =
      \frac{2 M}{I_{0}(\beta)}
      \frac
      {\sinh\left[\sqrt{\beta^{2} - (M \omega)^{2}} \right]}
      {\sqrt{\beta^{2} - (M \omega)^{2}}}`, which is exact since the truncation is part of :math:`\phi`.
    * :math:`\beta = \gamma \pi M (2 - 1/\sigma)`, :math:`\gamma = 0.98`.
    """

    name = "kaiser_bessel"
    aliases = ("kb",)
    gamma = 0.98

    def __init__(self, M: nxt.Integer, sigma: nxt.Real):
        super().__init__(M=M, sigma=sigma)
        self._beta = self.gamma * np.pi * self._M * (2 - 1 / self._sigma)

    @property
    def beta(self) -> float:
        return self._beta

    def apply(self, arr: nxt.NDArray) -> nxt.NDArray:
        s, mask = self._normalize(arr)
        y = np.zeros_like(s)

        # I0(b q) / I0(b) = i0e(b q) / i0e(b) * exp(b (q - 1)): overflow-free.
        b = self._beta
        q = np.sqrt(1 - s[mask] ** 2)
        y[mask] = (sps.i0e(b * q) / sps.i0e(b)) * np.exp(b * (q - 1))
        return y

    def applyF(self, arr: nxt.NDArray) -> nxt.NDArray:
        w = np.asarray(arr, dtype=np.double)
        b = self._beta

        a = b**2 - (self._M * w) ** 2
        mask = a > 0
        r = np.sqrt(np.fabs(a))

        # sinh(r) / (r I0(b)), written to avoid overflow for large `b`.
        y = np.zeros_like(w)
        _r = r[mask]
        y[mask] = (-np.expm1(-2 * _r) / (2 * _r)) * np.exp(_r - b) / sps.i0e(b)
        y[~mask] = np.sinc(r[~mask] / np.pi) * np.exp(-b) / sps.i0e(b)

        y *= 2 * self._M
        return y


class BackwardsKaiserBessel(Kernel):
    r"""
    "Backwards" Kaiser-Bessel kernel.

    The roles of the Kaiser-Bessel pair are swapped: the real-space kernel is built from :math:`\sinh` only (no
    Bessel evaluation on the hot path), and :math:`I_{0}` appears in Fourier space.

    Notes
    -----
    * :math:`\phi(u) = \frac{\sinh(\beta \sqrt{1 - (u/M)^{2}})}{\sqrt{1 - (u/M)^{2}} \sinh(\beta)}
      1_{[-M, M]}(u)`
    * :math:`\phi^{\mathcal{F}}(\omega) =
      \frac{\pi M}{\sinh(\beta)}
      \begin{cases}
      I_{0}\left(\sqrt{\beta^{2} - (M \omega)^{2}}\right) & M |\omega| \le \beta \\
      J_{0}\left(\sqrt{(M \omega)^{2} - \beta^{2}}\right) & M |\omega| > \beta
      \end{cases}`.
      This is the exact transform of :math:`\cosh(\beta \sqrt{1 - s^{2}}) / \sqrt{1 - s^{2}}`, which differs from
      :math:`\phi` by a term of relative magnitude :math:`O(e^{-\beta})`.
    * :math:`\beta = \gamma \pi M (2 - 1/\sigma)`, :math:`\gamma = 0.995`.
    """

    name = "backwards_kaiser_bessel"
    aliases = ("bkb",)
    gamma = 0.995

    def __init__(self, M: nxt.Integer, sigma: nxt.Real):
        super().__init__(M=M, sigma=sigma)
        self._beta = self.gamma * np.pi * self._M * (2 - 1 / self._sigma)

    @property
    def beta(self) -> float:
        return self._beta

    def apply(self, arr: nxt.NDArray) -> nxt.NDArray:
        s, mask = self._normalize(arr)
        y = np.zeros_like(s)

        # sinh(b q) / (q sinh(b)) = [(1 - e^{-2bq}) / q] / (1 - e^{-2b}) * exp(b (q - 1))
        b = self._beta
        q = np.sqrt(1 - s[mask] ** 2)
        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = np.where(q > 0, -np.expm1(-2 * b * q) / q, 2 * b)
        y[mask] = ratio * np.exp(b * (q - 1)) / (-np.expm1(-2 * b))
        return y

    def applyF(self, arr: nxt.NDArray) -> nxt.NDArray:
        w = np.asarray(arr, dtype=np.double)
        b = self._beta

        a = b**2 - (self._M * w) ** 2
        mask = a >= 0
        r = np.sqrt(np.fabs(a))

        # I0(r) / sinh(b) = 2 i0e(r) exp(r - b) / (1 - e^{-2b})
        y = np.zeros_like(w)
        _r = r[mask]
        y[mask] = 2 * sps.i0e(_r) * np.exp(_r - b) / (-np.expm1(-2 * b))
        y[~mask] = 2 * sps.j0(r[~mask]) * np.exp(-b) / (-np.expm1(-2 * b))

        y *= np.pi * self._M
        return y


class Gaussian(Kernel):
    r"""
    Truncated Gaussian kernel.

    Notes
    -----
    * :math:`\phi(u) = \exp\left[-\frac{1}{2} \left(\frac{u}{\ell}\right)^{2}\right] 1_{[-M, M]}(u)`
    * :math:`\phi^{\mathcal{F}}(\omega) = \sqrt{2 \pi} \ell \exp\left[-\frac{1}{2} (\ell \omega)^{2}\right]`.
      This is the transform of the non-truncated kernel.
    * :math:`\ell^{2} = \frac{M \sigma}{\pi (2 \sigma - 1)}`, which balances truncation and aliasing errors.
    """

    name = "gaussian"

    def __init__(self, M: nxt.Integer, sigma: nxt.Real):
        super().__init__(M=M, sigma=sigma)
        self._ell = np.sqrt(self._M * self._sigma / (np.pi * (2 * self._sigma - 1)))

    @property
    def ell(self) -> float:
        return self._ell

    def apply(self, arr: nxt.NDArray) -> nxt.NDArray:
        s, mask = self._normalize(arr)
        u = s * self._M
        y = np.zeros_like(s)
        y[mask] = np.exp(-0.5 * (u[mask] / self._ell) ** 2)
        return y

    def applyF(self, arr: nxt.NDArray) -> nxt.NDArray:
        w = np.asarray(arr, dtype=np.double)
        y = np.sqrt(2 * np.pi) * self._ell * np.exp(-0.5 * (self._ell * w) ** 2)
        return y


class BSpline(Kernel):
    r"""
    Centered cardinal B-spline kernel of order :math:`2M`.

    Notes
    -----
    * :math:`\phi = \underbrace{\beta_{0} * \cdots * \beta_{0}}_{2M}`, with :math:`\beta_{0} = 1_{[-1/2, 1/2]}`,
      i.e. a piecewise polynomial of degree :math:`2M-1` with integer knots :math:`\{-M, \ldots, M\}`.
    * :math:`\phi^{\mathcal{F}}(\omega) = \left[\frac{\sin(\omega / 2)}{\omega / 2}\right]^{2M}`.

    Both expressions are exact: the kernel is compactly supported by construction.
    """

    name = "bspline"

    def __init__(self, M: nxt.Integer, sigma: nxt.Real):
        super().__init__(M=M, sigma=sigma)
        knots = np.arange(-self._M, self._M + 1, dtype=np.double)
        self._spline = spi.BSpline.basis_element(knots, extrapolate=False)

    def apply(self, arr: nxt.NDArray) -> nxt.NDArray:
        s, mask = self._normalize(arr)
        u = s * self._M
        y = np.zeros_like(s)
        y[mask] = self._spline(u[mask])
        return np.nan_to_num(y, nan=0)

    def applyF(self, arr: nxt.NDArray) -> nxt.NDArray:
        w = np.asarray(arr, dtype=np.double)
        y = np.sinc(w / (2 * np.pi)) ** (2 * self._M)
        return y


_registry: dict[str, nxt.KernelC] = dict()
for _cls in (KaiserBessel, BackwardsKaiserBessel, Gaussian, BSpline):
    for _key in (_cls.name, *_cls.aliases):
        _registry[_key] = _cls


def get_kernel(
    kernel: nxt.KernelSpec,
    M: nxt.Integer,
    sigma: nxt.Real,
) -> nxt.KernelT:
    """
    Resolve a kernel specifier to a kernel instance.

    Parameters
    ----------
    kernel: str, Kernel class, Kernel
        * str: registry name (case-insensitive), ex: "kaiser_bessel", "kb", "backwards_kaiser_bessel", "bkb",
          "gaussian", "bspline";
        * Kernel sub-class: instantiated with (M, sigma);
        * Kernel instance: returned as-is if its half-support is `M`.
    M: Integer
        Half-support.
    sigma: Real
        Oversampling factor.

    Returns
    -------
    k: Kernel

    Raises
    ------
    ConfigurationError
        If the specifier cannot be resolved.
    """
    if isinstance(kernel, str):
        key = kernel.lower()
        if key not in _registry:
            raise nxe.ConfigurationError(f"Unknown kernel {kernel!r}: choose from {sorted(_registry)}.")
        k = _registry[key](M=M, sigma=sigma)
    elif isinstance(kernel, type) and issubclass(kernel, Kernel):
        k = kernel(M=M, sigma=sigma)
    elif isinstance(kernel, Kernel):
        if kernel.support() != M:
            raise nxe.ConfigurationError(f"Kernel half-support {kernel.support()} does not match M={M}.")
        k = kernel
    else:
        raise nxe.ConfigurationError(f"Unsupported kernel specifier {kernel!r}.")
    return k
