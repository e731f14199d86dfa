from .kernel import (
    BackwardsKaiserBessel as BackwardsKaiserBessel,
    BSpline as BSpline,
    Gaussian as Gaussian,
    KaiserBessel as KaiserBessel,
    Kernel as Kernel,
    get_kernel as get_kernel,
)
from .plan import (
    Plan as Plan,
    exec_type1 as exec_type1,
    exec_type2 as exec_type2,
    set_points as set_points,
)
