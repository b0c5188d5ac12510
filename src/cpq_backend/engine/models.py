"""
Data models for the CPQ engine.

Uses dataclasses for structured, type-safe data representation.
Catalog entries are frozen; pricing results and quotes are built once
and handed out as snapshots.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime

# Sentinel for "no upper bound" on a tier's quantity range
UNBOUNDED = -1

TIERED_PRICING = "concurrent_users"
FLAT_PRICING = "per_user"

STARTUP_TIER = "startup"


@dataclass(frozen=True)
class Tier:
    """A quantity range mapped to a per-user, per-month unit price."""
    name: str
    min_quantity: int
    max_quantity: int
    price: float

    @property
    def unbounded(self) -> bool:
        return self.max_quantity == UNBOUNDED

    def contains(self, quantity: int) -> bool:
        """True when quantity falls inside [min_quantity, max_quantity]."""
        if quantity < self.min_quantity:
            return False
        return self.unbounded or quantity <= self.max_quantity


@dataclass(frozen=True)
class Product:
    """A catalog entry (enterprise license or AI add-on)."""
    id: str
    sku: str
    name: str
    description: str
    category: str
    base_price: float
    pricing_type: str
    tiers: tuple[Tier, ...] = ()

    @property
    def is_tiered(self) -> bool:
        return self.pricing_type == TIERED_PRICING and len(self.tiers) > 0

    def to_dict(self) -> dict:
        """Wire format; products without tiers omit the key."""
        data = {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "base_price": self.base_price,
            "pricing_type": self.pricing_type,
        }
        if self.tiers:
            data["tiers"] = [
                {
                    "name": t.name,
                    "min_quantity": t.min_quantity,
                    "max_quantity": t.max_quantity,
                    "price": t.price,
                }
                for t in self.tiers
            ]
        return data


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str
    company: str
    tier: str  # "enterprise", "startup", ...

    @property
    def is_startup(self) -> bool:
        return self.tier == STARTUP_TIER


@dataclass
class DiscountApplied:
    """One discount line, always computed off the original subtotal."""
    type: str  # "volume", "multi_year" or "customer_tier"
    description: str
    percentage: float
    amount: float


@dataclass
class PricingResult:
    """Complete result of a pricing calculation."""
    sku_id: str
    product_name: str
    quantity: int
    term_months: int
    base_price: float  # resolved unit price
    subtotal: float
    discounts: list[DiscountApplied] = field(default_factory=list)
    total_discount: float = 0.0
    final_price: float = 0.0
    annual_price: float = 0.0
    monthly_price: float = 0.0

    def add_discount(self, type: str, description: str, percentage: float):
        """Record a discount of `percentage` off the subtotal."""
        amount = self.subtotal * percentage / 100.0
        self.discounts.append(DiscountApplied(
            type=type,
            description=description,
            percentage=percentage,
            amount=amount,
        ))
        self.total_discount += amount


@dataclass(frozen=True)
class QuoteItem:
    """Pricing snapshot captured when the quote was created."""
    sku_id: str
    product_name: str
    quantity: int
    term_months: int
    unit_price: float
    subtotal: float
    discount: float
    total: float

    @classmethod
    def from_pricing(cls, pricing: PricingResult) -> 'QuoteItem':
        return cls(
            sku_id=pricing.sku_id,
            product_name=pricing.product_name,
            quantity=pricing.quantity,
            term_months=pricing.term_months,
            unit_price=pricing.base_price,
            subtotal=pricing.subtotal,
            discount=pricing.total_discount,
            total=pricing.final_price,
        )


@dataclass
class Quote:
    id: str
    customer_id: str
    status: str
    created_at: datetime
    expires_at: datetime
    items: list[QuoteItem]
    subtotal: float
    total_discount: float
    total: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "items": [asdict(item) for item in self.items],
            "subtotal": self.subtotal,
            "total_discount": self.total_discount,
            "total": self.total,
        }
