# qreg/operators.py
"""
Unitary operators bound to positions of an enclosing qubit space.

An Operator is (matrix, targets, nbits): a 2^k x 2^k matrix whose index
bit i acts on position targets[i] of an nbits-qubit space, identity on the
other positions. Combinators never mutate; they return new Operators.
"""
from typing import Optional, Sequence

import numpy as np

from .backends import get_backend
from .config import DEFAULT_BACKEND, UNITARY_TOL
from .errors import InvalidArgument


class Operator:
    __slots__ = ("_matrix", "_targets", "_nbits")

    def __init__(self, matrix, targets: Optional[Sequence[int]] = None, nbits: Optional[int] = None):
        mat = np.array(matrix, dtype=np.complex128)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise InvalidArgument(f"operator matrix must be square, got shape {mat.shape}")
        dim = mat.shape[0]
        k = dim.bit_length() - 1
        if k < 1 or dim != 1 << k:
            raise InvalidArgument(f"operator size must be 2^k with k >= 1, got {dim}")
        if targets is None:
            targets = range(k)
        targets = tuple(int(t) for t in targets)
        if nbits is None:
            nbits = k
        if len(targets) != k:
            raise InvalidArgument(f"{k}-qubit matrix given {len(targets)} targets")
        if len(set(targets)) != k:
            raise InvalidArgument(f"duplicate targets: {targets}")
        if any(t < 0 or t >= nbits for t in targets):
            raise InvalidArgument(f"targets {targets} out of range for {nbits} qubits")
        mat.setflags(write=False)
        self._matrix = mat
        self._targets = targets
        self._nbits = int(nbits)

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def targets(self) -> tuple:
        return self._targets

    @property
    def nbits(self) -> int:
        """Size of the space this operator acts in."""
        return self._nbits

    @property
    def num_targets(self) -> int:
        return len(self._targets)

    def __repr__(self):
        return f"Operator(k={self.num_targets}, targets={self._targets}, nbits={self._nbits})"

    def extend(self, total_bits: int, *positions: int) -> "Operator":
        """
        Embed into a total_bits-qubit space.

        Position i of this operator's space lands on positions[i]; all
        other positions of the new space see the identity.
        """
        if len(positions) != self._nbits:
            raise InvalidArgument(f"extend needs {self._nbits} positions, got {len(positions)}")
        if len(set(positions)) != len(positions):
            raise InvalidArgument(f"duplicate positions: {positions}")
        if any(p < 0 or p >= total_bits for p in positions):
            raise InvalidArgument(f"positions {positions} out of range for {total_bits} qubits")
        targets = tuple(positions[t] for t in self._targets)
        return Operator(self._matrix, targets, total_bits)

    def curry_before(self, other: "Operator") -> "Operator":
        """Apply self, then other, as a single operator (matrix other @ self)."""
        if not isinstance(other, Operator):
            raise InvalidArgument(f"cannot compose with {type(other).__name__}")
        if other.nbits != self._nbits:
            raise InvalidArgument(
                f"cannot compose operators over {self._nbits} and {other.nbits} qubits")
        if other.targets == self._targets:
            return Operator(other.matrix @ self._matrix, self._targets, self._nbits)
        return Operator(other.to_matrix() @ self.to_matrix(), None, self._nbits)

    def dagger(self) -> "Operator":
        """Conjugate transpose on the same targets."""
        return Operator(self._matrix.conj().T, self._targets, self._nbits)

    def apply(self, psi: np.ndarray, backend: str = DEFAULT_BACKEND) -> np.ndarray:
        """Transform a 2^nbits vector; returns a new vector."""
        psi = np.array(psi, dtype=np.complex128)
        if psi.shape != (1 << self._nbits,):
            raise InvalidArgument(f"expected vector of length {1 << self._nbits}, got {psi.shape}")
        get_backend(backend)(psi, self._matrix, self._targets)
        return psi

    def to_matrix(self) -> np.ndarray:
        """Dense 2^nbits x 2^nbits matrix."""
        if self._targets == tuple(range(self._nbits)):
            return self._matrix.copy()
        dim = 1 << self._nbits
        # column j is the image of basis vector |j>
        return np.stack([self.apply(np.eye(dim, dtype=np.complex128)[j]) for j in range(dim)], axis=1)

    def is_unitary(self, tol: float = UNITARY_TOL) -> bool:
        m = self._matrix
        return bool(np.allclose(m.conj().T @ m, np.eye(m.shape[0]), atol=tol, rtol=0))
