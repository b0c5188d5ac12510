"""Engine subpackage - catalog, models and pricing logic."""
from .catalog import Catalog
from .pricing_engine import PricingEngine, round_money
from .models import Customer, Product, PricingResult, Quote, QuoteItem, Tier

__all__ = [
    'Catalog', 'PricingEngine', 'round_money',
    'Customer', 'Product', 'PricingResult', 'Quote', 'QuoteItem', 'Tier',
]
