"""
Quote Service - Creates and lists draft quotes held in process memory.

Quotes are lost on restart. One lock guards the quote map and the id
counter, so concurrent requests never share or skip an id.
"""
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..engine.catalog import Catalog
from ..engine.models import Customer, PricingResult, Quote, QuoteItem
from ..engine.pricing_engine import DEFAULT_TERM_MONTHS, PricingEngine
from ..errors import CustomerNotFoundError, ProductNotFoundError

logger = logging.getLogger(__name__)

DRAFT_STATUS = "draft"
DEFAULT_QUOTE_TTL_DAYS = 30


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuoteStore:
    """In-memory quote store owned by one application instance."""

    def __init__(
        self,
        catalog: Catalog,
        engine: Optional[PricingEngine] = None,
        ttl_days: int = DEFAULT_QUOTE_TTL_DAYS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.catalog = catalog
        self.engine = engine or PricingEngine(catalog)
        self.ttl = timedelta(days=ttl_days)
        self.clock = clock

        self._lock = threading.Lock()
        self._quotes: dict[str, Quote] = {}
        self._next_id = 1

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._quotes)

    def create(
        self,
        customer_id: str,
        sku_id: str,
        quantity: int,
        term_months: int = DEFAULT_TERM_MONTHS,
    ) -> tuple[Quote, PricingResult, Customer]:
        """
        Price a SKU for a customer and store the result as a draft quote.

        Returns (quote, pricing, customer). Raises CustomerNotFoundError or
        ProductNotFoundError without allocating an id.
        """
        customer = self.catalog.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)

        pricing = self.engine.calculate(sku_id, quantity, term_months, customer_id)
        if pricing is None:
            raise ProductNotFoundError(sku_id)

        created_at = self.clock()
        item = QuoteItem.from_pricing(pricing)

        with self._lock:
            quote_id = f"quote-{self._next_id}"
            self._next_id += 1

            quote = Quote(
                id=quote_id,
                customer_id=customer_id,
                status=DRAFT_STATUS,
                created_at=created_at,
                expires_at=created_at + self.ttl,
                items=[item],
                subtotal=pricing.subtotal,
                total_discount=pricing.total_discount,
                total=pricing.final_price,
            )
            self._quotes[quote_id] = quote

        logger.info(
            "Created %s for %s: %s x%d for %d months, total %.2f",
            quote_id, customer_id, sku_id, quantity, term_months, quote.total,
        )
        return quote, pricing, customer

    def get(self, quote_id: str) -> Optional[Quote]:
        with self._lock:
            return self._quotes.get(quote_id)

    def list(self, customer_id: Optional[str] = None) -> list[Quote]:
        """All quotes in creation order, optionally only one customer's."""
        with self._lock:
            quotes = list(self._quotes.values())
        if customer_id:
            quotes = [q for q in quotes if q.customer_id == customer_id]
        return quotes
