import numbers as nb
import typing as typ

import numpy as np
import numpy.typing as npt

if typ.TYPE_CHECKING:
    import nufx.nufft.kernel as nxk
    import nufx.nufft.plan as nxp

#: Supported dense array type.
NDArray = np.ndarray

#: Top-level kernel interface exposed to users.
KernelT = typ.TypeVar("KernelT", bound="nxk.Kernel")

#: Kernel class type.
KernelC = typ.Type[KernelT]

#: Kernel specifier accepted by :py:class:`~nufx.Plan`: registry name, class or instance.
KernelSpec = typ.Union[str, KernelC, KernelT]

#: :py:class:`~nufx.Plan` instance type.
PlanT = typ.TypeVar("PlanT", bound="nxp.Plan")

Integer = nb.Integral
Real = nb.Real  #: Alias of :py:class:`numbers.Real`.
DType = npt.DTypeLike  #: :py:attr:`~nufx.info.ptype.NDArray` dtype specifier.
NDArrayShape = typ.Union[Integer, tuple[Integer, ...]]  #: :py:attr:`~nufx.info.ptype.NDArray` shape specifier.
