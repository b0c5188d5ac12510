"""
Pricing Engine - Tiered unit pricing with stacked percentage discounts.

Resolution order:
1. Resolve unit price (first matching quantity tier, else base price)
2. Subtotal = unit price x quantity x term months
3. Volume, multi-year and customer-tier discounts, each taken off the
   original subtotal and summed (never compounded)
4. Final, annual and monthly prices rounded to cents (half up)
"""
import math
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Optional

from ..errors import InvalidRequestError
from .catalog import Catalog
from .models import Product, PricingResult

DEFAULT_TERM_MONTHS = 12

# (minimum annual value, percent, description), highest threshold first
VOLUME_DISCOUNTS = (
    (100000, 30.0, "Volume discount: 30% off for $100K+ annual value"),
    (50000, 20.0, "Volume discount: 20% off for $50K+ annual value"),
)

# (minimum term in months, percent, description), longest term first
MULTI_YEAR_DISCOUNTS = (
    (36, 25.0, "Multi-year discount: 25% off for 3+ year terms"),
    (24, 15.0, "Multi-year discount: 15% off for 2+ year terms"),
)

STARTUP_DISCOUNT = (10.0, "Startup discount: 10% off")

_CENT = Decimal("0.01")

# Enough digits to quantize any finite float (max ~1.8e308) to cents
_MONEY_CONTEXT = Context(prec=320)


def round_money(value: float) -> float:
    """
    Round to 2 decimal places, half up.

    Works on the shortest decimal repr of the float, so 1.005 -> 1.01
    and 2.675 -> 2.68 (the builtin round() gives 1.0 and 2.67).
    """
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP, context=_MONEY_CONTEXT))


def resolve_unit_price(product: Product, quantity: int) -> float:
    """Unit price for a quantity: first tier containing it, else base price."""
    if product.is_tiered:
        for tier in product.tiers:
            if tier.contains(quantity):
                return tier.price
    return product.base_price


def volume_discount(annual_value: float) -> Optional[tuple[float, str]]:
    """Return (percent, description) for the highest volume tier reached."""
    for threshold, percent, description in VOLUME_DISCOUNTS:
        if annual_value >= threshold:
            return percent, description
    return None


def multi_year_discount(term_months: int) -> Optional[tuple[float, str]]:
    """Return (percent, description) for the longest term bracket reached."""
    for threshold, percent, description in MULTI_YEAR_DISCOUNTS:
        if term_months >= threshold:
            return percent, description
    return None


class PricingEngine:
    """Computes PricingResults against a read-only Catalog."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def calculate(
        self,
        sku_id: str,
        quantity: int,
        term_months: int = DEFAULT_TERM_MONTHS,
        customer_id: Optional[str] = None,
    ) -> Optional[PricingResult]:
        """
        Price a SKU for a quantity and term.

        Args:
            sku_id: Catalog product id (e.g. "sku-3")
            quantity: Number of users, must be positive
            term_months: Contract length, must be positive
            customer_id: Optional customer for tier discounts; unknown ids
                are ignored

        Returns:
            PricingResult, or None if the SKU is not in the catalog
        """
        if quantity <= 0:
            raise InvalidRequestError("quantity must be a positive integer")
        if term_months <= 0:
            raise InvalidRequestError("term_months must be a positive integer")

        product = self.catalog.get_product(sku_id)
        if product is None:
            return None

        unit_price = resolve_unit_price(product, quantity)
        result = PricingResult(
            sku_id=sku_id,
            product_name=product.name,
            quantity=quantity,
            term_months=term_months,
            base_price=unit_price,
            subtotal=unit_price * quantity * term_months,
        )
        if not math.isfinite(result.subtotal):
            raise InvalidRequestError("quantity and term_months are too large to price")

        # Volume eligibility always looks at a 12 month year, whatever the term
        volume = volume_discount(unit_price * quantity * 12)
        if volume:
            result.add_discount("volume", volume[1], volume[0])

        multi_year = multi_year_discount(term_months)
        if multi_year:
            result.add_discount("multi_year", multi_year[1], multi_year[0])

        if customer_id:
            customer = self.catalog.get_customer(customer_id)
            if customer is not None and customer.is_startup:
                percent, description = STARTUP_DISCOUNT
                result.add_discount("customer_tier", description, percent)

        final_price = result.subtotal - result.total_discount
        monthly_price = final_price / term_months

        result.final_price = round_money(final_price)
        result.monthly_price = round_money(monthly_price)
        result.annual_price = round_money(monthly_price * 12)

        return result
