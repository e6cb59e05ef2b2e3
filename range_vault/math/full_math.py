"""
Full Math - 넓은 정수 고정소수점 연산

Solidity의 FullMath / UnsafeMath에 해당하는 연산들.
Python int는 임의 정밀도이므로 512비트 중간값 처리가 필요 없지만,
온체인 값 범위를 벗어나는 결과는 명시적으로 검사합니다.

스케일 규약:
    sqrtPriceX96  : Q64.96  (2^96)
    feeGrowthX128 : Q128.128 (2^128)
"""

from ..constants import UINT256_MAX


def checked_uint(value: int, bits: int = 256) -> int:
    """부호 없는 정수 범위 검사

    Args:
        value: 검사할 값
        bits: 비트 폭 (예: 128, 256)

    Returns:
        value (범위 내인 경우 그대로)

    Raises:
        OverflowError: 0 미만 또는 2^bits 이상인 경우
    """
    if value < 0 or value >> bits:
        raise OverflowError(f"uint{bits} 범위 초과: {value}")
    return value


def wrapping_sub(a: int, b: int) -> int:
    """uint256 랩어라운드 뺄셈 (Solidity unchecked 블록과 동일)"""
    return (a - b) & UINT256_MAX


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)

    Raises:
        ZeroDivisionError: denominator가 0인 경우
        OverflowError: 결과가 uint256을 넘는 경우
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div: denominator = 0")
    return checked_uint(a * b // denominator)


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)"""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        result = checked_uint(result + 1)
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """ceil(numerator / denominator)"""
    if denominator == 0:
        raise ZeroDivisionError("div_rounding_up: denominator = 0")
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result
