"""
Booklet pricing and commission calculations.

Two flows use two different platform rates and they are kept apart on purpose:

- Author-priced products: the author picks what they want to earn per copy and
  the platform adds a fixed fee, the printing cost and a commission on top
  (AUTHOR_PRICING_COMMISSION_RATE, 30% by default).
- Sales arriving by webhook: the store already charged the buyer, so the sale
  price is split into platform commission and author earnings
  (WEBHOOK_COMMISSION_RATE, 15% by default).

All money is Decimal. Values are rounded to cents (half up) only when a
breakdown is built for storage, never in between.
"""

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Optional, Union

from upleer.core.config import get_settings
from upleer.core.exceptions import PricingError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_money(value: Any, field: str = "value") -> Decimal:
    """
    Parse a money value into a Decimal.

    Accepts numbers and numeric strings, including the Brazilian decimal comma
    ("50,00", "1.234,56"). Negative, non-numeric and non-finite values raise
    PricingError.
    """
    if value is None or isinstance(value, bool):
        raise PricingError(f"{field} must be a number, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace("R$", "").strip()
        if "," in text:
            # "1.234,56" -> "1234.56", "50,00" -> "50.00"
            text = text.replace(".", "").replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise PricingError(f"{field} must be a number, got {value!r}")
    else:
        raise PricingError(f"{field} must be a number, got {value!r}")

    if not amount.is_finite():
        raise PricingError(f"{field} must be a finite number, got {value!r}")
    if amount < 0:
        raise PricingError(f"{field} cannot be negative, got {value!r}")
    return amount


def to_page_count(value: Any) -> int:
    if value is None or isinstance(value, bool):
        raise PricingError(f"page_count must be a whole number, got {value!r}")
    try:
        count = Decimal(str(value).strip())
    except InvalidOperation:
        raise PricingError(f"page_count must be a whole number, got {value!r}")
    if not count.is_finite() or count != count.to_integral_value():
        raise PricingError(f"page_count must be a whole number, got {value!r}")
    if count < 0:
        raise PricingError(f"page_count cannot be negative, got {value!r}")
    return int(count)


def quantize(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _rate(value: Any, field: str = "commission_rate", upper: Optional[Decimal] = None) -> Decimal:
    rate = to_money(value, field)
    if upper is not None and rate > upper:
        raise PricingError(f"{field} must be between 0 and {upper}, got {value!r}")
    return rate


def get_author_pricing_commission_rate() -> Decimal:
    return Decimal(str(get_settings().AUTHOR_PRICING_COMMISSION_RATE))


def get_webhook_commission_rate() -> Decimal:
    return Decimal(str(get_settings().WEBHOOK_COMMISSION_RATE))


def _pricing_defaults(fixed_fee, printing_cost_per_page, commission_rate):
    settings = get_settings()
    if fixed_fee is None:
        fixed_fee = Decimal(str(settings.DEFAULT_FIXED_FEE))
    if printing_cost_per_page is None:
        printing_cost_per_page = Decimal(str(settings.DEFAULT_PRINTING_COST_PER_PAGE))
    if commission_rate is None:
        commission_rate = get_author_pricing_commission_rate()
    return (
        to_money(fixed_fee, "fixed_fee"),
        to_money(printing_cost_per_page, "printing_cost_per_page"),
        _rate(commission_rate),
    )


@dataclass(frozen=True)
class PricingBreakdown:
    page_count: int
    author_earnings: Decimal
    fixed_fee: Decimal
    printing_cost_per_page: Decimal
    commission_rate: Decimal
    printing_cost: Decimal
    commission_amount: Decimal
    platform_commission: Decimal
    sale_price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_response(self) -> Dict[str, Any]:
        """camelCase floats, the shape the dashboard forms expect."""
        return {
            "pageCount": self.page_count,
            "authorEarnings": float(self.author_earnings),
            "fixedFee": float(self.fixed_fee),
            "printingCostPerPage": float(self.printing_cost_per_page),
            "commissionRate": float(self.commission_rate),
            "printingCost": float(self.printing_cost),
            "commissionAmount": float(self.commission_amount),
            "platformCommission": float(self.platform_commission),
            "salePrice": float(self.sale_price),
        }


@dataclass(frozen=True)
class CommissionSplit:
    sale_price: Decimal
    commission_rate: Decimal
    commission: Decimal
    author_earnings: Decimal


def calculate_pricing(
    page_count: Any,
    author_earnings: Number,
    fixed_fee: Optional[Number] = None,
    printing_cost_per_page: Optional[Number] = None,
    commission_rate: Optional[Number] = None,
) -> PricingBreakdown:
    """
    Price a booklet from what the author wants to earn per copy.

        printing_cost       = page_count * printing_cost_per_page
        commission_amount   = author_earnings * commission_rate / 100
        platform_commission = fixed_fee + printing_cost + commission_amount
        sale_price          = author_earnings + platform_commission

    The stored sale price is the sum of the rounded author earnings and the
    rounded platform commission, so the two always add up to it exactly.
    """
    pages = to_page_count(page_count)
    earnings = to_money(author_earnings, "author_earnings")
    fee, per_page, rate = _pricing_defaults(fixed_fee, printing_cost_per_page, commission_rate)

    printing_cost = pages * per_page
    commission_amount = earnings * rate / HUNDRED
    platform_commission = fee + printing_cost + commission_amount

    stored_earnings = quantize(earnings)
    stored_commission = quantize(platform_commission)

    return PricingBreakdown(
        page_count=pages,
        author_earnings=stored_earnings,
        fixed_fee=quantize(fee),
        printing_cost_per_page=quantize(per_page),
        commission_rate=rate,
        printing_cost=quantize(printing_cost),
        commission_amount=quantize(commission_amount),
        platform_commission=stored_commission,
        sale_price=stored_earnings + stored_commission,
    )


def compute_sale_price(
    page_count: Any,
    author_earnings: Number,
    fixed_fee: Optional[Number] = None,
    printing_cost_per_page: Optional[Number] = None,
    commission_rate: Optional[Number] = None,
) -> Decimal:
    return calculate_pricing(
        page_count, author_earnings, fixed_fee, printing_cost_per_page, commission_rate
    ).sale_price


def solve_author_earnings(
    sale_price: Number,
    page_count: Any,
    fixed_fee: Optional[Number] = None,
    printing_cost_per_page: Optional[Number] = None,
    commission_rate: Optional[Number] = None,
) -> Decimal:
    """Unrounded inverse of calculate_pricing, clamped at zero."""
    price = to_money(sale_price, "sale_price")
    pages = to_page_count(page_count)
    fee, per_page, rate = _pricing_defaults(fixed_fee, printing_cost_per_page, commission_rate)

    remainder = price - fee - pages * per_page
    if remainder <= 0:
        return ZERO
    return remainder / (1 + rate / HUNDRED)


def reverse_pricing(
    sale_price: Number,
    page_count: Any,
    fixed_fee: Optional[Number] = None,
    printing_cost_per_page: Optional[Number] = None,
    commission_rate: Optional[Number] = None,
) -> PricingBreakdown:
    """
    Rebuild a full breakdown from an existing sale price.

    Used for products created before the financial columns existed. The
    platform commission is whatever the author does not keep, so the product
    still satisfies sale_price == author_earnings + platform_commission.
    """
    price = quantize(to_money(sale_price, "sale_price"))
    pages = to_page_count(page_count)
    fee, per_page, rate = _pricing_defaults(fixed_fee, printing_cost_per_page, commission_rate)

    earnings = quantize(solve_author_earnings(price, pages, fee, per_page, rate))
    if earnings > price:
        earnings = price

    return PricingBreakdown(
        page_count=pages,
        author_earnings=earnings,
        fixed_fee=quantize(fee),
        printing_cost_per_page=quantize(per_page),
        commission_rate=rate,
        printing_cost=quantize(pages * per_page),
        commission_amount=quantize(earnings * rate / HUNDRED),
        platform_commission=price - earnings,
        sale_price=price,
    )


def split_commission(sale_price: Number, commission_rate: Number) -> CommissionSplit:
    """
    Split a sale price between the platform and the author.

        commission      = round(sale_price * rate / 100, 2)
        author_earnings = round(sale_price, 2) - commission
    """
    raw = to_money(sale_price, "sale_price")
    rate = _rate(commission_rate, upper=HUNDRED)

    # commission is taken on the unrounded price
    commission = quantize(raw * rate / HUNDRED)
    price = quantize(raw)
    return CommissionSplit(
        sale_price=price,
        commission_rate=rate,
        commission=commission,
        author_earnings=price - commission,
    )
