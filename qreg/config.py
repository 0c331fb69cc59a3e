# qreg/config.py
"""
Defaults for registers and kernels.

Values can be overridden per register through RegisterConfig, or for a
whole process through the QREG_* environment variables (see from_env).
"""
import os
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from .errors import InvalidArgument

DEFAULT_BACKEND = "serial"
BACKENDS = ("serial", "numba")

DEFAULT_DTYPE = np.complex128
DTYPES = {
    "complex64": np.complex64,
    "complex128": np.complex128,
}

# tolerance for ||psi||^2 == 1 checks
NORM_TOL = 1e-6
# tolerance for U^dagger U == I checks
UNITARY_TOL = 1e-8


@dataclass(frozen=True)
class RegisterConfig:
    backend: str = DEFAULT_BACKEND
    dtype: type = DEFAULT_DTYPE
    seed: Optional[int] = None
    check_norm: bool = False
    norm_tol: float = NORM_TOL

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise InvalidArgument(f"unknown backend {self.backend!r}; expected one of {BACKENDS}")
        if np.dtype(self.dtype).kind != "c":
            raise InvalidArgument(f"dtype must be complex, got {np.dtype(self.dtype)}")

    @staticmethod
    def from_env(environ=None) -> "RegisterConfig":
        env = os.environ if environ is None else environ
        dtype_name = env.get("QREG_DTYPE", np.dtype(DEFAULT_DTYPE).name)
        if dtype_name not in DTYPES:
            raise InvalidArgument(f"QREG_DTYPE must be one of {sorted(DTYPES)}, got {dtype_name!r}")
        seed = env.get("QREG_SEED")
        return RegisterConfig(
            backend=env.get("QREG_BACKEND", DEFAULT_BACKEND),
            dtype=DTYPES[dtype_name],
            seed=int(seed) if seed not in (None, "") else None,
            check_norm=env.get("QREG_CHECK_NORM", "false").lower() == "true",
        )

    def with_overrides(self, **changes) -> "RegisterConfig":
        """Copy with the given non-None fields replaced."""
        fields = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **fields)
