from decimal import ROUND_HALF_UP, Decimal

_WON = Decimal("1")
_HOURS = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    # float는 repr 문자열을 거쳐야 0.03545 같은 요율이 그대로 들어간다
    return value if isinstance(value, Decimal) else Decimal(str(value))


def won(*factors) -> int:
    """
    인자들을 모두 곱한 뒤 원 단위로 반올림(사사오입)한 정수를 반환.
    각 계산 단계마다 이 함수로 반올림하고, 합계는 반올림된 정수끼리 더한다.

    >>> won(10000, 1.5, 10)
    150000
    """
    product = Decimal(1)
    for factor in factors:
        product *= _to_decimal(factor)
    return int(product.quantize(_WON, rounding=ROUND_HALF_UP))


def round_hours(value) -> float:
    """시간 값을 소수점 둘째 자리까지 반올림"""
    return float(_to_decimal(value).quantize(_HOURS, rounding=ROUND_HALF_UP))
