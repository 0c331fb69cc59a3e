# qreg/apply_serial.py
import numpy as np
from .indexing import translate_indices


def apply_single_qubit(psi: np.ndarray, U2: np.ndarray, k: int):
    """Apply 2x2 gate U2 to bit k of psi (little-endian: bit k)."""
    assert U2.shape == (2,2)
    N = psi.shape[0]
    step = 1 << k
    block = step << 1
    # iterate blocks of size 2^(k+1), update pairs (i0, i1=i0+step)
    for base in range(0, N, block):
        for off in range(step):
            i0 = base + off
            i1 = i0 + step
            a0 = psi[i0]
            a1 = psi[i1]
            psi[i0] = U2[0,0]*a0 + U2[0,1]*a1
            psi[i1] = U2[1,0]*a0 + U2[1,1]*a1

def apply_two_qubit_4x4(psi: np.ndarray, U4: np.ndarray, k: int, l: int):
    """Apply 4x4 gate U4 to bits (k, l); matrix index bit 0 is k, bit 1 is l."""
    if k == l:
        raise ValueError("k and l must differ")
    assert U4.shape == (4,4)
    N = psi.shape[0]
    mk = 1 << k
    ml = 1 << l
    lo, hi = min(k, l), max(k, l)
    # loop over indices where bits k and l are 0
    # pattern repeats every 2^(hi+1); within that, scan chunks that zero bit lo
    for base in range(0, N, 1 << (hi+1)):
        for chunk in range(0, 1 << hi, 1 << (lo+1)):
            for off in range(1 << lo):
                i00 = base + chunk + off
                i01 = i00 | mk
                i10 = i00 | ml
                i11 = i00 | mk | ml
                a00, a01, a10, a11 = psi[i00], psi[i01], psi[i10], psi[i11]
                psi[i00] = U4[0,0]*a00 + U4[0,1]*a01 + U4[0,2]*a10 + U4[0,3]*a11
                psi[i01] = U4[1,0]*a00 + U4[1,1]*a01 + U4[1,2]*a10 + U4[1,3]*a11
                psi[i10] = U4[2,0]*a00 + U4[2,1]*a01 + U4[2,2]*a10 + U4[2,3]*a11
                psi[i11] = U4[3,0]*a00 + U4[3,1]*a01 + U4[3,2]*a10 + U4[3,3]*a11

def apply_matrix(psi: np.ndarray, U: np.ndarray, targets):
    """
    Apply a 2^k x 2^k matrix U to bits `targets` of psi, in place.

    Every setting of the untouched bits selects an independent 2^k
    sub-vector; U multiplies each of them the same way.
    """
    targets = tuple(targets)
    n = psi.shape[0].bit_length() - 1
    k = len(targets)
    assert U.shape == (1 << k, 1 << k)
    U = U.astype(psi.dtype, copy=False)
    if k == 1:
        apply_single_qubit(psi, U, targets[0])
        return
    if k == 2:
        apply_two_qubit_4x4(psi, U, targets[0], targets[1])
        return
    for idx in translate_indices(n, targets):
        psi[idx] = U @ psi[idx]
