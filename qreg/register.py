# qreg/register.py
"""
Factored qubit register.

The state of N qubits is kept as a partition into QubitContainers, each a
dense amplitude vector over the qubits it holds. Containers are merged
(coupled) when an operator spans more than one of them; they are never
split again.

Bookkeeping is an arena of containers keyed by integer handle:

    _containers[h] -> QubitContainer
    _members[h]    -> global qubits held by h, index = local position
    _where[q]      -> (h, local position of q)
"""
import itertools
import threading
from typing import Dict, List, Tuple

import numpy as np

from .backends import get_backend
from .config import RegisterConfig
from .errors import InvalidArgument, InvariantViolation, Unsupported
from .indexing import index_multiply_in, index_set, make_start_len, translate_indices
from .log import get_logger
from .operators import Operator
from .state import QubitContainer

logger = get_logger(__name__)


class QubitRegister:

    def __init__(self, numbits: int, backend=None, dtype=None, seed=None, config: RegisterConfig = None):
        if isinstance(numbits, bool) or not isinstance(numbits, (int, np.integer)) or numbits <= 0:
            raise InvalidArgument(f"numbits must be a positive integer, got {numbits!r}")
        base = config if config is not None else RegisterConfig()
        self.config = base.with_overrides(backend=backend, dtype=dtype, seed=seed)
        self.numbits = int(numbits)
        get_backend(self.config.backend)  # fail early if the backend is unavailable
        self._rng = np.random.default_rng(self.config.seed)
        self._lock = threading.RLock()
        self._handles = itertools.count()
        self._containers: Dict[int, QubitContainer] = {}
        self._members: Dict[int, List[int]] = {}
        self._where: List[Tuple[int, int]] = []
        for q in range(self.numbits):
            h = next(self._handles)
            self._containers[h] = QubitContainer.zero(1, dtype=self.config.dtype)
            self._members[h] = [q]
            self._where.append((h, 0))
        logger.debug("register of %d qubits (backend=%s, dtype=%s)",
                     self.numbits, self.config.backend, np.dtype(self.config.dtype).name)

    def get_numbits(self) -> int:
        return self.numbits

    # ---------------------------------------------------------------------
    # argument checks and lookups

    def _check_qubits(self, qubits, distinct=True) -> List[int]:
        if len(qubits) == 0:
            raise InvalidArgument("no qubits given")
        out = []
        for q in qubits:
            if isinstance(q, bool) or not isinstance(q, (int, np.integer)):
                raise InvalidArgument(f"bad qubit: {q!r}")
            if q < 0 or q >= self.numbits:
                raise InvalidArgument(f"bad qubit: {q}")
            out.append(int(q))
        if distinct and len(set(out)) != len(out):
            raise InvalidArgument(f"duplicate qubits: {out}")
        return out

    def _handles_holding(self, qubits) -> List[int]:
        # distinct handles, in order of first appearance
        return list(dict.fromkeys(self._where[q][0] for q in qubits))

    def get_containers_holding(self, *qubits: int) -> List[QubitContainer]:
        """Distinct containers currently holding the given qubits."""
        qubits = self._check_qubits(qubits, distinct=False)
        with self._lock:
            return [self._containers[h] for h in self._handles_holding(qubits)]

    def locate(self, qubit: int) -> Tuple[QubitContainer, int]:
        """(container, local position) of a qubit."""
        (qubit,) = self._check_qubits((qubit,))
        with self._lock:
            h, pos = self._where[qubit]
            return self._containers[h], pos

    def qubits_in(self, container: QubitContainer) -> List[int]:
        """Global qubits held by a container, in local order."""
        with self._lock:
            for h, qc in self._containers.items():
                if qc is container:
                    return list(self._members[h])
        raise InvalidArgument("container does not belong to this register")

    def containers(self) -> List[Tuple[QubitContainer, List[int]]]:
        """Snapshot of (container, qubits) pairs."""
        with self._lock:
            return [(self._containers[h], list(self._members[h])) for h in self._containers]

    # ---------------------------------------------------------------------
    # coupling

    def couple(self, *qubits: int) -> "QubitRegister":
        """
        Bring the named qubits into one container.

        Whole containers are merged: any other qubits they hold come along.
        The merged vector is the tensor product of the source vectors, with
        the source local orders concatenated in first-appearance order.
        """
        qubits = self._check_qubits(qubits)
        with self._lock:
            handles = self._handles_holding(qubits)
            if len(handles) == 1:
                return self
            self._merge(handles)
        return self

    def _merge(self, handles: List[int]):
        total = sum(len(self._members[h]) for h in handles)
        merged = QubitContainer.ones(total, dtype=self.config.dtype)
        new_members: List[int] = []
        offset = 0
        for h in handles:
            moving = self._members[h]
            positions = make_start_len(offset, len(moving))
            index_multiply_in(merged.psi, translate_indices(total, positions), self._containers[h].psi)
            new_members.extend(moving)
            offset += len(moving)
        if offset != total:
            raise InvariantViolation(f"merged {offset} qubits into a container of {total}")

        # mapping update: retire sources, install merged container, repoint qubits
        new_h = next(self._handles)
        for h in handles:
            del self._containers[h]
            del self._members[h]
        self._containers[new_h] = merged
        self._members[new_h] = new_members
        for pos, q in enumerate(new_members):
            self._where[q] = (new_h, pos)
        logger.debug("coupled %d containers into %d qubits: %s", len(handles), total, new_members)

    # ---------------------------------------------------------------------
    # state access

    def set_amps(self, amps, *qubits: int) -> "QubitRegister":
        """
        Overwrite the joint state of the named qubits.

        amps[j] is the amplitude where qubits[i] has bit i of j. The qubits
        must be exactly the contents of one container.
        """
        qubits = self._check_qubits(qubits)
        try:
            amps = np.asarray(amps, dtype=self.config.dtype)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"amplitudes must be complex numbers: {e}") from e
        if amps.shape != (1 << len(qubits),):
            raise InvalidArgument(
                f"expected {1 << len(qubits)} amplitudes for {len(qubits)} qubits, got shape {amps.shape}")
        with self._lock:
            handles = self._handles_holding(qubits)
            if len(handles) > 1:
                raise Unsupported(f"set_amps across {len(handles)} containers")
            (h,) = handles
            qc = self._containers[h]
            if len(qubits) != qc.get_numbits():
                raise InvalidArgument(
                    f"provided {len(qubits)} qubits but they are in a container of size {qc.get_numbits()}")
            positions = []
            for q in qubits:
                qh, pos = self._where[q]
                if qh != h:
                    raise InvariantViolation(f"qubit {q} is recorded in container {qh}, expected {h}")
                positions.append(pos)
            (indices,) = translate_indices(len(qubits), positions)
            reordered = np.zeros(1 << len(qubits), dtype=qc.dtype)
            index_set(reordered, indices, amps)
            qc.set_amps(reordered)
        return self

    def measure(self, qubit: int) -> bool:
        """Measure one qubit: False for |0>, True for |1>. Collapses the state."""
        (qubit,) = self._check_qubits((qubit,))
        with self._lock:
            h, pos = self._where[qubit]
            outcome = self._containers[h].measure(pos, self._rng)
        logger.debug("measured qubit %d -> %d", qubit, int(outcome))
        return outcome

    def measure_all(self) -> List[bool]:
        return [self.measure(q) for q in range(self.numbits)]

    def do_op(self, op: Operator, *qubits: int) -> "QubitRegister":
        """
        Apply `op` to the named qubits; qubits[i] binds to the operator's
        position i. The qubits are coupled first if needed.
        With config.check_norm, the container norm is checked after the
        transform; NonPhysicalState then reports an already-modified state.
        """
        if not isinstance(op, Operator):
            raise InvalidArgument(f"expected an Operator, got {type(op).__name__}")
        qubits = self._check_qubits(qubits)
        if len(qubits) != op.nbits:
            raise InvalidArgument(f"operator spans {op.nbits} qubits, got {len(qubits)}")
        with self._lock:
            self.couple(*qubits)
            h = self._where[qubits[0]][0]
            positions = []
            for q in qubits:
                qh, pos = self._where[q]
                if qh != h:
                    raise InvariantViolation(f"qubit {q} not coupled with qubit {qubits[0]}")
                positions.append(pos)
            qc = self._containers[h]
            qc.do_op(op, *positions, backend=self.config.backend)
            if self.config.check_norm:
                qc.check_normalized(tol=self.config.norm_tol)
        return self

    # ---------------------------------------------------------------------
    # inspection

    def check_invariants(self):
        """Raise InvariantViolation if the partition bookkeeping is inconsistent."""
        with self._lock:
            if set(self._containers) != set(self._members):
                raise InvariantViolation("container arena and member map disagree")
            seen = []
            for h, members in self._members.items():
                qc = self._containers[h]
                if qc.psi.shape != (1 << len(members),):
                    raise InvariantViolation(
                        f"container {h} holds {len(members)} qubits but {qc.psi.shape[0]} amplitudes")
                for pos, q in enumerate(members):
                    if self._where[q] != (h, pos):
                        raise InvariantViolation(f"qubit {q}: forward {self._where[q]} != inverse {(h, pos)}")
                seen.extend(members)
            if sorted(seen) != list(range(self.numbits)):
                raise InvariantViolation(f"containers do not partition the register: {sorted(seen)}")

    def state_vector(self) -> np.ndarray:
        """Dense 2^N state in global order (bit q of the index is qubit q)."""
        with self._lock:
            out = np.ones(1 << self.numbits, dtype=self.config.dtype)
            for h, members in self._members.items():
                index_multiply_in(out, translate_indices(self.numbits, members), self._containers[h].psi)
        return out

    def probabilities(self) -> np.ndarray:
        return np.abs(self.state_vector()) ** 2
