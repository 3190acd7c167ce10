"""Display-unit conversion for the presentation edge.

The ledger stores integers in the smallest currency unit. Callers that show
or accept human amounts (e.g. "1.25" ETH) convert here. Both directions work
on integer digits, so no value is ever rounded on the way in or out.
"""

from __future__ import annotations

from decimal import Decimal, DecimalException

DEFAULT_DECIMALS = 18
# Python refuses str()/int() on integers beyond 4300 digits
MAX_DIGITS = 4000


def to_display(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render a smallest-unit integer as a plain decimal string ("1.25", "0")."""
    amount = int(amount)
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10 ** decimals)
    frac_text = str(frac).zfill(decimals).rstrip("0") if decimals else ""
    if frac_text:
        return f"{sign}{whole}.{frac_text}"
    return f"{sign}{whole}"


def from_display(text: str, decimals: int = DEFAULT_DECIMALS) -> int:
    """Parse a human decimal string into smallest units.

    Raises ValueError for non-numeric input, more fractional digits than the
    unit can represent, or amounts longer than MAX_DIGITS.
    """
    try:
        value = Decimal(str(text).strip())
    except DecimalException:
        raise ValueError(f"not a decimal amount: {text!r}") from None
    if not value.is_finite():
        raise ValueError(f"not a finite amount: {text!r}")

    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits)))
    if coefficient == 0:
        return 0
    shift = exponent + decimals
    if shift >= 0:
        if len(digits) + shift > MAX_DIGITS:
            raise ValueError(f"{text!r} is too large")
        scaled = coefficient * 10 ** shift
    else:
        trailing_zeros = len(digits) - len("".join(map(str, digits)).rstrip("0"))
        if trailing_zeros < -shift:
            raise ValueError(f"{text!r} has more than {decimals} fractional digits")
        scaled = coefficient // 10 ** -shift
    return -scaled if sign else scaled
