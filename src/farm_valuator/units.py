from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from .errors import MalformedNumberError
from .logger import get_logger

logger = get_logger(__name__)

# Enough digits for a uint256 amount times any realistic price.
PRECISION = 120
USD_FRACTION_DIGITS = 6
RATIO_FRACTION_DIGITS = 16


def _to_decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    # str() keeps the shortest float repr, so 0.3334 stays 0.3334
    return Decimal(str(value).strip())


def plain_decimal(value: Decimal) -> str:
    """Render a Decimal in fixed notation without trailing zeros."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_units(raw: int, decimals: int) -> str:
    """Render a raw on-chain amount as an exact decimal string.

    No exponent notation and no trailing zeros: ``format_units(1500, 3)``
    gives ``"1.5"`` and ``format_units(0, 18)`` gives ``"0"``.
    """
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return plain_decimal(Decimal(raw).scaleb(-decimals))


def rescale(raw: int, from_decimals: int, to_decimals: int) -> int:
    """Re-express a raw amount with a different number of decimals.

    Notes:
        - Scaling up multiplies by a power of ten and is exact.
        - Scaling down uses integer division (truncates toward zero).
    """
    if from_decimals == to_decimals:
        return raw
    if from_decimals < to_decimals:
        return raw * (10 ** (to_decimals - from_decimals))
    shift = 10 ** (from_decimals - to_decimals)
    quotient = abs(raw) // shift
    return quotient if raw >= 0 else -quotient


def truncate_decimal(
    value: Decimal | str, places: int = USD_FRACTION_DIGITS
) -> Decimal:
    """Drop every fractional digit beyond ``places`` without rounding.

    The sign is preserved and exponent notation is expanded first, so
    ``"123.1234569"`` gives ``123.123456`` and ``"-1.9999999"`` gives
    ``-1.999999``.

    Raises:
        MalformedNumberError: If ``value`` is not a finite plain number.
    """
    try:
        number = _to_decimal(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise MalformedNumberError(value) from exc
    if not number.is_finite():
        raise MalformedNumberError(value)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        try:
            return number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN)
        except InvalidOperation as exc:
            raise MalformedNumberError(value) from exc


def multiply(amount: int, factor: Decimal | float | int | str) -> int:
    """Multiply a raw amount by a decimal factor, staying in raw units.

    The product is truncated toward zero since fractional raw units do not
    exist: ``multiply(1_000_000, 0.3334) == 333400``.

    If the product cannot be computed (unparseable factor, NaN, infinity),
    the failure is logged and 99% of ``amount`` is returned instead, so a
    single bad price never aborts a batch: ``multiply(1000, nan) == 990``.
    """
    try:
        with localcontext() as ctx:
            ctx.prec = PRECISION
            product = Decimal(amount) * _to_decimal(factor)
            return int(product.to_integral_value(rounding=ROUND_DOWN))
    except (InvalidOperation, ValueError, TypeError, OverflowError) as exc:
        fallback = amount - amount // 100
        logger.warning(
            "Could not multiply %s by %r (%s); using 99%% estimate %s",
            amount,
            factor,
            exc,
            fallback,
        )
        return fallback


def multiply_by_ratio(amount: int, ratio_numerator: int, ratio_decimals: int) -> int:
    """Multiply a raw amount by a ratio given as a raw fixed-point integer.

    The ratio is truncated to 16 fractional digits before multiplying.
    """
    ratio = truncate_decimal(
        format_units(ratio_numerator, ratio_decimals), RATIO_FRACTION_DIGITS
    )
    return multiply(amount, ratio)
