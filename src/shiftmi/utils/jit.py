"""JIT compilation utilities for shiftmi.

Provides conditional JIT compilation based on environment settings.
"""

import os

from numba import njit

# Check if Numba should be disabled
SHIFTMI_DISABLE_NUMBA = os.getenv("SHIFTMI_DISABLE_NUMBA", "False").lower() in (
    "true",
    "1",
    "yes",
)


def conditional_njit(*args, **kwargs):
    """Conditionally apply numba JIT compilation based on environment settings.

    If the SHIFTMI_DISABLE_NUMBA environment variable is set to 'true', '1'
    or 'yes', this returns the original function without JIT compilation.
    Otherwise, applies numba.njit with the given parameters.

    Parameters
    ----------
    *args
        Positional arguments passed to numba.njit. If a single function is
        passed, it will be decorated directly.
    **kwargs
        Keyword arguments passed to numba.njit (e.g., nogil=True, cache=True).

    Returns
    -------
    decorator or function
        If called with arguments: returns a decorator function.
        If called on a function directly: returns the (possibly JIT-compiled) function.

    Notes
    -----
    The undecorated functions are valid Python and produce the same results,
    only slower. Disabling JIT is mostly useful for debugging the kernels
    with a regular debugger or for coverage measurements.

    Examples
    --------
    >>> @conditional_njit
    ... def fast_computation(x):
    ...     return x ** 2

    With numba parameters::

        @conditional_njit(nogil=True)
        def kernel(x):
            return x ** 2
    """
    if SHIFTMI_DISABLE_NUMBA:

        def decorator(func):
            """Identity decorator that returns function unchanged."""
            return func

        return decorator if not (len(args) == 1 and callable(args[0])) else args[0]

    return njit(*args, **kwargs)


def is_jit_enabled():
    """Check if JIT compilation is enabled.

    Returns
    -------
    bool
        False if the SHIFTMI_DISABLE_NUMBA environment variable is set to
        'true', '1' or 'yes' (case insensitive), True otherwise.

    See Also
    --------
    ~shiftmi.utils.jit.jit_info :
        Print detailed JIT status information.
    """
    return not SHIFTMI_DISABLE_NUMBA


def jit_info():
    """Print information about JIT compilation status.

    Examples
    --------
    >>> jit_info()  # doctest: +SKIP
    JIT disabled by environment: False
    JIT enabled: True
    Numba version: 0.60.0
    """
    import numba

    print(f"JIT disabled by environment: {SHIFTMI_DISABLE_NUMBA}")
    print(f"JIT enabled: {is_jit_enabled()}")
    print(f"Numba version: {numba.__version__}")
