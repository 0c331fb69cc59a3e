# qreg/__init__.py
from .errors import InvalidArgument, InvariantViolation, NonPhysicalState, QRegError, Unsupported
from .operators import Operator
from .register import QubitRegister
from .state import QubitContainer
from .circuit import Circuit

__version__ = "0.1.0"
