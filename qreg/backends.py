# qreg/backends.py
from .config import DEFAULT_BACKEND


def get_backend(name: str = DEFAULT_BACKEND):
    """Return the in-place `apply_matrix(psi, U, targets)` kernel for a backend."""
    if name == "serial":
        from .apply_serial import apply_matrix
        return apply_matrix
    if name == "numba":
        try:
            from .apply_numba import apply_matrix
        except ImportError as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        return apply_matrix
    raise NotImplementedError(f"Unknown backend: {name}")


def set_threads(n: int):
    """Set the numba thread count."""
    try:
        from .apply_numba import set_threads as _set
    except ImportError as e:
        raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
    _set(int(n))
