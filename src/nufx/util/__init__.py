from .misc import (
    as_vector as as_vector,
    check_vector as check_vector,
)
