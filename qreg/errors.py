# qreg/errors.py

class QRegError(Exception):
    """Base class for register errors."""


class InvalidArgument(QRegError, ValueError):
    """Bad qubit index, mismatched lengths or non-conforming operators."""


class Unsupported(QRegError, NotImplementedError):
    """Operation is deliberately left unimplemented."""


class InvariantViolation(QRegError, AssertionError):
    """Internal bookkeeping disagrees with itself. Never recoverable."""


class NonPhysicalState(QRegError, ArithmeticError):
    """State is not normalized, or measurement selected a zero-probability branch."""
