# qreg/state.py
import threading
from dataclasses import dataclass, field

import numpy as np

from .backends import get_backend
from .config import DEFAULT_BACKEND, DEFAULT_DTYPE, NORM_TOL
from .errors import InvalidArgument, NonPhysicalState
from .indexing import bit_mask
from .operators import Operator


@dataclass(eq=False)
class QubitContainer:
    """Dense joint state of n qubits; local position p is bit p of the index."""
    n: int
    psi: np.ndarray  # shape (2**n,), dtype complex64/128
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @staticmethod
    def zero(n: int, dtype=DEFAULT_DTYPE) -> "QubitContainer":
        if n < 1:
            raise InvalidArgument(f"container needs at least one qubit, got {n}")
        N = 1 << n
        psi = np.zeros(N, dtype=dtype)
        psi[0] = 1.0 + 0.0j
        return QubitContainer(n=n, psi=psi)

    @staticmethod
    def ones(n: int, dtype=DEFAULT_DTYPE) -> "QubitContainer":
        """All-ones seed for multiplicative accumulation."""
        if n < 1:
            raise InvalidArgument(f"container needs at least one qubit, got {n}")
        return QubitContainer(n=n, psi=np.ones(1 << n, dtype=dtype))

    @property
    def dtype(self):
        return self.psi.dtype

    def get_numbits(self) -> int:
        return self.n

    def get_amps(self) -> np.ndarray:
        return self.psi.copy()

    def set_amps(self, amps):
        amps = np.asarray(amps)
        if amps.shape != (1 << self.n,):
            raise InvalidArgument(f"expected {1 << self.n} amplitudes, got shape {amps.shape}")
        with self._lock:
            self.psi = amps.astype(self.dtype, copy=True)

    def do_op(self, op: Operator, *positions: int, backend: str = DEFAULT_BACKEND):
        """
        Apply `op` with its space position i bound to local position positions[i].
        """
        if len(positions) != op.nbits:
            raise InvalidArgument(f"operator spans {op.nbits} qubits, got {len(positions)} positions")
        if len(set(positions)) != len(positions):
            raise InvalidArgument(f"duplicate positions: {positions}")
        if any(p < 0 or p >= self.n for p in positions):
            raise InvalidArgument(f"positions {positions} out of range for {self.n} qubits")
        targets = [positions[t] for t in op.targets]
        kernel = get_backend(backend)
        with self._lock:
            kernel(self.psi, op.matrix, targets)

    def measure(self, position: int, rng: np.random.Generator) -> bool:
        """Measure local bit `position`, collapsing and renormalizing the state."""
        one = bit_mask(self.n, position, 1)
        with self._lock:
            probs = np.abs(self.psi) ** 2
            p1 = float(probs[one].sum())
            p0 = float(probs[~one].sum())
            outcome = bool(rng.random() < p1)
            p = p1 if outcome else p0
            if p == 0.0:
                raise NonPhysicalState(f"measured bit {position} on a zero-probability branch")
            self.psi[~one if outcome else one] = 0
            self.psi /= np.sqrt(p)
        return outcome

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=NORM_TOL):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise NonPhysicalState(f"Normalization failed: ||psi||^2={n2}")
