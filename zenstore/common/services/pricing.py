"""USD cost to marked-up MNT sale price.

The calculator is a pure function of the base price. Rounding the MNT
result for display (nearest 100) and deriving the crossed-out "original"
price are decisions of the caller; the helpers for those live at the bottom
of this module so the admin form and the product page share them.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from ..errors import InvalidInput


CA_TAX_RATE = 0.0925
RECYCLE_FEE = 5
COMMISSION_RATE = 0.10
SHIPPING_FEE = 20
EXCHANGE_RATE = 3602.00  # 1 USD in MNT
# marketing label shown next to the price, not derived from the markup
DISCOUNT_PERCENTAGE = 10
ORIGINAL_PRICE_MARKUP = 1.1

Number = Union[int, float]


@dataclass(frozen=True)
class PriceCalculation:
    base_price: float
    tax_amount: float
    subtotal_with_tax: float
    recycle_fee: float
    commission_fee: float
    shipping_fee: float
    total_usd: float
    total_mnt: int
    discount_percentage: int
    final_price_mnt: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_base_price(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidInput("base price must be a number")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidInput(f"base price is not a number: {value!r}") from None
    if not isinstance(value, (int, float, Decimal)):
        raise InvalidInput("base price must be a number")
    price = float(value)
    if not math.isfinite(price) or price <= 0:
        raise InvalidInput("base price must be greater than 0")
    return price


def _round_half_up(value: float) -> int:
    # JS Math.round semantics for the positive totals produced here
    return int(math.floor(value + 0.5))


def calculate_price_from_usd(base_price_usd: Any) -> PriceCalculation:
    base = _coerce_base_price(base_price_usd)
    tax_amount = base * CA_TAX_RATE
    commission_fee = base * COMMISSION_RATE
    subtotal_with_tax = base + tax_amount + RECYCLE_FEE
    total_usd = subtotal_with_tax + commission_fee + SHIPPING_FEE
    total_mnt = _round_half_up(total_usd * EXCHANGE_RATE)
    return PriceCalculation(
        base_price=base,
        tax_amount=tax_amount,
        subtotal_with_tax=subtotal_with_tax,
        recycle_fee=RECYCLE_FEE,
        commission_fee=commission_fee,
        shipping_fee=SHIPPING_FEE,
        total_usd=total_usd,
        total_mnt=total_mnt,
        discount_percentage=DISCOUNT_PERCENTAGE,
        final_price_mnt=total_mnt,
    )


# Caller-side presentation helpers -------------------------------------------


def round_to_nearest(value: Number, step: int = 100) -> int:
    if step <= 0:
        raise InvalidInput("step must be positive")
    return _round_half_up(value / step) * step


def original_price_for(price: Number, markup: float = ORIGINAL_PRICE_MARKUP) -> int:
    return round_to_nearest(price * markup)


def has_percentage(text: Optional[str]) -> bool:
    return bool(text) and "%" in text


def original_price_from_discount(price: Number, discount: Optional[str]) -> float:
    """Undo a discount label to get the pre-discount price.

    ``"15%"`` means the sale price is 85% of the original; ``"$50"`` or
    ``"50"`` is a fixed amount off. Unparseable labels leave the price as is.
    """
    value = Decimal(str(price))
    label = (discount or "").strip()
    result = value
    if has_percentage(label):
        try:
            pct = Decimal(label.replace("%", "").strip())
        except InvalidOperation:
            pct = None
        if pct is not None and pct.is_finite() and 0 < pct < 100:
            result = value / (1 - pct / 100)
    elif label:
        amount_str = label[1:].strip() if label.startswith("$") else label
        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            amount = None
        if amount is not None and amount.is_finite() and amount > 0:
            result = value + amount
    return float(result.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
