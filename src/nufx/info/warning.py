# Custom warnings used inside nufx.
import inspect
import warnings


class NufxWarning(UserWarning):
    """
    Parent class of all warnings raised in nufx.
    """


class AutoInferenceWarning(NufxWarning):
    """
    Use when a quantity was auto-inferenced with possible caveats.
    """


class PrecisionWarning(NufxWarning):
    """
    Use for precision-related warnings.
    """


def warn_context(msg: str, category: type[NufxWarning] = NufxWarning):
    """
    Issue a warning prefixed by the location of its emitter.

    This method is aware of its context and prints the name of the enclosing function/method which invoked it.

    Parameters
    ----------
    msg: str
        Custom warning message.
    category: type[NufxWarning]
        Warning class to emit.
    """
    # Get context
    my_frame = inspect.currentframe()
    up_frame = inspect.getouterframes(my_frame)[1]
    header = f"{up_frame.function}"

    msg = f"[{header}] {msg}"
    warnings.warn(msg, category, stacklevel=3)
