# qreg/gates.py
"""
Gate matrices and Operators.

Multi-qubit matrices are little-endian in their arguments: for a gate
applied as (a, b), matrix index bit 0 is a and bit 1 is b.
"""
import numpy as np
from .operators import Operator

def H(dtype=np.complex128) -> np.ndarray:
    s = np.sqrt(0.5)
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def X(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Z(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1]], dtype=dtype)

def S(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, 1j]], dtype=dtype)

def CNOT(dtype=np.complex128) -> np.ndarray:
    # applied as (control, target): index bit 0 = control, bit 1 = target
    mat = np.eye(4, dtype=dtype)
    # swap |c=1,t=0> (index 1) <-> |c=1,t=1> (index 3)
    mat[1,1] = 0; mat[3,3] = 0
    mat[1,3] = 1; mat[3,1] = 1
    return mat

def CPHASE(theta: float, dtype=np.complex128) -> np.ndarray:
    mat = np.eye(4, dtype=dtype)
    mat[3,3] = np.exp(1j*theta)
    return mat

def CV(dtype=np.complex128) -> np.ndarray:
    """Controlled-V with V = S = sqrt(Z); V^2 = Z."""
    return CPHASE(np.pi/2, dtype=dtype)

def RZ(theta: float, dtype=np.complex128) -> np.ndarray:
    return np.array([[np.exp(-0.5j*theta), 0],
                     [0, np.exp(+0.5j*theta)]], dtype=dtype)

def RX(theta: float, dtype=np.complex128) -> np.ndarray:
    c = np.cos(theta/2.0)
    s = -1j*np.sin(theta/2.0)
    return np.array([[c, s],
                     [s, c]], dtype=dtype)

# ---------------------------------------------------------------------
# Operators

def toffoli() -> Operator:
    """
    3-qubit Toffoli, controls on positions 0 and 1, target 2.

    H on the target turns the doubly-controlled Z built from controlled-S
    gates into a doubly-controlled X.
    """
    H2 = Operator(H()).extend(3, 2)
    CV12 = Operator(CV()).extend(3, 1, 2)
    CV02 = Operator(CV()).extend(3, 0, 2)
    CNOT01 = Operator(CNOT()).extend(3, 0, 1)
    return (H2.curry_before(CV02)
              .curry_before(CNOT01)
              .curry_before(CV12)
              .curry_before(CV12)
              .curry_before(CV12)
              .curry_before(CNOT01)
              .curry_before(CV12)
              .curry_before(H2))
