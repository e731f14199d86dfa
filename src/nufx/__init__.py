import logging

from nufx.info.error import (
    ConfigurationError as ConfigurationError,
    DomainError as DomainError,
    NufxError as NufxError,
    PointsNotSetError as PointsNotSetError,
    ShapeMismatchError as ShapeMismatchError,
)
from nufx.nufft import (
    BackwardsKaiserBessel as BackwardsKaiserBessel,
    BSpline as BSpline,
    Gaussian as Gaussian,
    KaiserBessel as KaiserBessel,
    Kernel as Kernel,
    Plan as Plan,
    exec_type1 as exec_type1,
    exec_type2 as exec_type2,
    set_points as set_points,
)

# Records are dropped unless the application configures logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())
