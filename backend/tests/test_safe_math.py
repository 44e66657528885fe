import pytest

from app.core import safe_math
from app.core.constants import UINT8_MAX, UINT256_MAX
from app.core.errors import DivideByZero, Overflow


def test_add_within_range() -> None:
    assert safe_math.add(2, 3) == 5
    assert safe_math.add(UINT256_MAX - 1, 1) == UINT256_MAX


def test_add_overflows_at_max() -> None:
    with pytest.raises(Overflow):
        safe_math.add(UINT256_MAX, 1)


def test_add_respects_narrow_width() -> None:
    assert safe_math.add(200, 55, bits=8) == UINT8_MAX
    with pytest.raises(Overflow):
        safe_math.add(200, 56, bits=8)


def test_sub_underflow() -> None:
    assert safe_math.sub(5, 5) == 0
    with pytest.raises(Overflow):
        safe_math.sub(4, 5)


def test_mul_overflow() -> None:
    assert safe_math.mul(0, UINT256_MAX) == 0
    assert safe_math.mul(2**128 - 1, 2**128 + 1) == UINT256_MAX
    with pytest.raises(Overflow):
        safe_math.mul(2**128, 2**128)


def test_div_and_mod_by_zero() -> None:
    assert safe_math.div(7, 2) == 3
    assert safe_math.mod(7, 2) == 1
    with pytest.raises(DivideByZero):
        safe_math.div(1, 0)
    with pytest.raises(DivideByZero):
        safe_math.mod(1, 0)


@pytest.mark.parametrize("a,b", [(-1, 1), (1, -1), (UINT256_MAX + 1, 0)])
def test_operands_out_of_range(a: int, b: int) -> None:
    with pytest.raises(Overflow):
        safe_math.add(a, b)
