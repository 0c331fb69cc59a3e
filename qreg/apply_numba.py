# qreg/apply_numba.py
import numpy as np
from numba import njit, prange, set_num_threads, get_num_threads
from .indexing import translate_indices

# ---------- low-level kernels (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _single_qubit_kernel(psi, U2, k):
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    nblocks = N // block
    for b in prange(nblocks):
        base = b * block
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

@njit(parallel=True, fastmath=True)
def _matrix_kernel(psi, U, rows):
    # each row of `rows` is an independent sub-vector; rows are disjoint
    nrows = rows.shape[0]
    d = rows.shape[1]
    for r in prange(nrows):
        sub = np.empty(d, dtype=psi.dtype)
        for j in range(d):
            sub[j] = psi[rows[r, j]]
        for i in range(d):
            acc = sub[0] * 0
            for j in range(d):
                acc += U[i, j] * sub[j]
            psi[rows[r, i]] = acc

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    set_num_threads(n)

def get_threads() -> int:
    return get_num_threads()

def apply_single_qubit(psi: np.ndarray, U2: np.ndarray, k: int):
    _single_qubit_kernel(psi, U2.astype(psi.dtype), k)

def apply_matrix(psi: np.ndarray, U: np.ndarray, targets):
    targets = tuple(targets)
    k = len(targets)
    assert U.shape == (1 << k, 1 << k)
    if k == 1:
        apply_single_qubit(psi, U, targets[0])
        return
    n = psi.shape[0].bit_length() - 1
    _matrix_kernel(psi, np.ascontiguousarray(U, dtype=psi.dtype), translate_indices(n, targets))
