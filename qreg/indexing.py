# qreg/indexing.py
"""
Index translation between a k-bit sub-space and an n-bit container.

All helpers are little-endian: bit p of a basis index is local position p.
"""
import numpy as np

from .errors import InvalidArgument


def make_start_len(start: int, length: int) -> np.ndarray:
    """[start, start+1, ..., start+length-1]"""
    return np.arange(start, start + length, dtype=np.int64)


def _check_targets(nbits: int, targets) -> tuple:
    if nbits < 0:
        raise InvalidArgument(f"nbits must be >= 0, got {nbits}")
    targets = tuple(int(t) for t in targets)
    if len(set(targets)) != len(targets):
        raise InvalidArgument(f"duplicate target bits: {targets}")
    for t in targets:
        if t < 0 or t >= nbits:
            raise InvalidArgument(f"target bit {t} out of range for {nbits} bits")
    return targets


def _scatter(values: np.ndarray, positions) -> np.ndarray:
    # place bit i of each value at bit positions[i]
    out = np.zeros(values.shape[0], dtype=np.int64)
    for i, p in enumerate(positions):
        out |= ((values >> i) & 1) << p
    return out


def translate_indices(nbits: int, targets) -> np.ndarray:
    """
    Full indices for every setting of the target bits, grouped by the
    setting of the remaining bits.

    Returns an int array of shape (2**(nbits-k), 2**k). Row r fixes the
    untouched bits to the value r; column j sets targets[i] to bit i of j.
    """
    targets = _check_targets(nbits, targets)
    k = len(targets)
    others = [b for b in range(nbits) if b not in targets]
    tmask = _scatter(np.arange(1 << k, dtype=np.int64), targets)
    omask = _scatter(np.arange(1 << (nbits - k), dtype=np.int64), others)
    return omask[:, None] | tmask[None, :]


def index_multiply_in(amps: np.ndarray, indices: np.ndarray, values: np.ndarray):
    """amps[indices[j]] *= values[j]"""
    if indices.shape[-1] != values.shape[0]:
        raise InvalidArgument(f"{indices.shape[-1]} indices for {values.shape[0]} values")
    amps[indices] *= values


def index_set(amps: np.ndarray, indices: np.ndarray, values: np.ndarray):
    """amps[indices[j]] = values[j]"""
    if indices.shape[-1] != values.shape[0]:
        raise InvalidArgument(f"{indices.shape[-1]} indices for {values.shape[0]} values")
    amps[indices] = values


def bit_mask(nbits: int, position: int, value: int = 1) -> np.ndarray:
    """Boolean mask over 2**nbits indices where bit `position` == value."""
    (position,) = _check_targets(nbits, (position,))
    idx = np.arange(1 << nbits, dtype=np.int64)
    return ((idx >> position) & 1) == (1 if value else 0)
