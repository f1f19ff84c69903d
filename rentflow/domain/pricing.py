"""Rental pricing.

A booking's price is computed from the product's per-period price:

- base = unit_price * quantity * days
- discount = base * discount_percent / 100
- tax = (base - discount) * tax_percent / 100
- total = base - discount + tax
- deposit = unit_price * quantity * deposit_rate

All amounts are Decimals rounded half-up to cents, each step working on the
already rounded amounts before it. The rates come from a single
PricingConfig built from settings.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from rentflow.config import settings

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PricingConfig:
    """Rates applied to every booking."""

    discount_percent: Decimal = Decimal("10")
    tax_percent: Decimal = Decimal("9")
    deposit_rate: Decimal = Decimal("0.5")


@dataclass(frozen=True)
class PriceBreakdown:
    """Computed booking amounts."""

    base: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    deposit: Decimal

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "base": self.base,
            "discount": self.discount,
            "tax": self.tax,
            "total": self.total,
            "deposit": self.deposit,
        }


def get_pricing_config() -> PricingConfig:
    """Pricing rates from application settings."""
    return PricingConfig(
        discount_percent=_to_decimal(settings.pricing_discount_percent),
        tax_percent=_to_decimal(settings.pricing_tax_percent),
        deposit_rate=_to_decimal(settings.pricing_deposit_rate),
    )


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def rental_days(start_date: date, end_date: date) -> int:
    """Number of billable days; a same-day rental counts as one day."""
    return max(1, (end_date - start_date).days)


def compute_pricing(
    unit_price: Decimal | int | float,
    quantity: int,
    days: int,
    discount_percent: Decimal | int | float | None = None,
    tax_percent: Decimal | int | float | None = None,
    config: PricingConfig | None = None,
) -> PriceBreakdown:
    """Compute the price breakdown for a rental.

    Args:
        unit_price: Price of one unit for one rental period
        quantity: Number of units
        days: Rental length, already clamped to at least 1 by the caller
        discount_percent: Overrides the configured discount rate
        tax_percent: Overrides the configured tax rate
        config: Rates to use; defaults to PricingConfig()

    Returns:
        PriceBreakdown: base, discount, tax, total and deposit
    """
    config = config or PricingConfig()
    price = _to_decimal(unit_price)
    discount_rate = _to_decimal(
        config.discount_percent if discount_percent is None else discount_percent
    )
    tax_rate = _to_decimal(config.tax_percent if tax_percent is None else tax_percent)

    # Tax is charged on the rounded net amount and the total is summed from
    # the rounded parts, so a stored breakdown always adds up
    base = _round(price * quantity * days)
    discount = _round(base * discount_rate / HUNDRED)
    tax = _round((base - discount) * tax_rate / HUNDRED)
    deposit = _round(price * quantity * config.deposit_rate)

    return PriceBreakdown(
        base=base,
        discount=discount,
        tax=tax,
        total=base - discount + tax,
        deposit=deposit,
    )
