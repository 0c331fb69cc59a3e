# qreg/circuit.py
from dataclasses import dataclass
from typing import List, Tuple, Optional
import numpy as np
from .config import NORM_TOL
from .operators import Operator
from .register import QubitRegister
from . import gates as G

Op = Tuple[str, Tuple]  # e.g., ("H",(k,)) or ("CNOT",(c,t)) or ("OP",(operator, q0, q1, ...))

@dataclass
class Circuit:
    n: int
    ops: List[Op]

    @staticmethod
    def empty(n:int) -> "Circuit":
        return Circuit(n, [])

    def h(self, k:int): self.ops.append(("H",(k,))); return self
    def x(self, k:int): self.ops.append(("X",(k,))); return self
    def z(self, k:int): self.ops.append(("Z",(k,))); return self
    def cnot(self, c:int, t:int): self.ops.append(("CNOT",(c,t))); return self
    def cv(self, c:int, t:int): self.ops.append(("CV",(c,t))); return self
    def rz(self, k:int, theta:float): self.ops.append(("RZ",(k,theta))); return self
    def rx(self, k:int, theta:float): self.ops.append(("RX",(k,theta))); return self
    def toffoli(self, a:int, b:int, t:int): self.ops.append(("TOFFOLI",(a,b,t))); return self
    def op(self, operator:Operator, *qubits:int): self.ops.append(("OP",(operator,)+qubits)); return self

    def to_operators(self) -> List[Tuple[Operator, Tuple[int, ...]]]:
        """Resolve recorded gates into (Operator, qubits) pairs."""
        out = []
        for name, args in self.ops:
            if name == "H":
                out.append((Operator(G.H()), args))
            elif name == "X":
                out.append((Operator(G.X()), args))
            elif name == "Z":
                out.append((Operator(G.Z()), args))
            elif name == "CNOT":
                out.append((Operator(G.CNOT()), args))
            elif name == "CV":
                out.append((Operator(G.CV()), args))
            elif name == "RZ":
                k,theta = args; out.append((Operator(G.RZ(theta)), (k,)))
            elif name == "RX":
                k,theta = args; out.append((Operator(G.RX(theta)), (k,)))
            elif name == "TOFFOLI":
                out.append((G.toffoli(), args))
            elif name == "OP":
                out.append((args[0], args[1:]))
            else:
                raise ValueError(f"Unknown gate {name}")
        return out

    def run(self, backend:str="serial", dtype=np.complex128, seed:Optional[int]=None,
            check_norm=True, num_threads=None, check_norm_tol=None) -> QubitRegister:
        if backend == "numba" and num_threads is not None:
            from .backends import set_threads
            set_threads(int(num_threads))
        reg = QubitRegister(self.n, backend=backend, dtype=dtype, seed=seed)
        for operator, qubits in self.to_operators():
            reg.do_op(operator, *qubits)

        if check_norm:
            tol = NORM_TOL if check_norm_tol is None else check_norm_tol
            for qc, _ in reg.containers():
                qc.check_normalized(tol=tol)
        return reg
