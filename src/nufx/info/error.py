# Custom errors used inside nufx.
#
# All errors are raised synchronously by the call which detected them; no partial results are written.


class NufxError(Exception):
    """
    Parent class of all errors raised in nufx.
    """


class ConfigurationError(NufxError, ValueError):
    """
    Invalid plan configuration: grid size, half-support, oversampling factor, precision or kernel.

    Raised at :py:class:`~nufx.Plan` construction time.
    """


class DomainError(NufxError, ValueError):
    """
    Non-uniform coordinate outside the periodic domain :math:`[0, 2\\pi)`.
    """


class ShapeMismatchError(NufxError, ValueError):
    """
    Array rank/length incompatible with the plan or its active point set.
    """


class PointsNotSetError(NufxError, RuntimeError):
    """
    Transform executed before :py:meth:`~nufx.Plan.set_points`.
    """
