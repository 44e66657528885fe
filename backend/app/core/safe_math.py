"""
Checked arithmetic over unsigned fixed-width integers.

All helpers take an optional ``bits`` width (256 by default). Operands outside
``[0, 2**bits - 1]`` and results that leave that range raise ``Overflow``;
division and modulo by zero raise ``DivideByZero``. Nothing saturates or wraps.
"""

from app.core.errors import DivideByZero, Overflow


def max_uint(bits: int = 256) -> int:
    return (1 << bits) - 1


def _require_uint(bits: int, *values: int) -> None:
    limit = max_uint(bits)
    for value in values:
        if value < 0 or value > limit:
            raise Overflow(f"Operand {value} out of range for uint{bits}")


def add(a: int, b: int, bits: int = 256) -> int:
    """Checked add: raises Overflow when a + b exceeds uint max."""
    _require_uint(bits, a, b)
    result = a + b
    if result > max_uint(bits):
        raise Overflow(f"uint{bits} addition overflow")
    return result


def sub(a: int, b: int, bits: int = 256) -> int:
    """Checked sub: raises Overflow when b > a."""
    _require_uint(bits, a, b)
    if b > a:
        raise Overflow(f"uint{bits} subtraction underflow")
    return a - b


def mul(a: int, b: int, bits: int = 256) -> int:
    _require_uint(bits, a, b)
    result = a * b
    if result > max_uint(bits):
        raise Overflow(f"uint{bits} multiplication overflow")
    return result


def div(a: int, b: int, bits: int = 256) -> int:
    """Checked floor division."""
    _require_uint(bits, a, b)
    if b == 0:
        raise DivideByZero()
    return a // b


def mod(a: int, b: int, bits: int = 256) -> int:
    _require_uint(bits, a, b)
    if b == 0:
        raise DivideByZero()
    return a % b
