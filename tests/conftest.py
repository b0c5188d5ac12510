import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from cpq_backend.config.settings import Settings
from cpq_backend.engine import Catalog, Customer, PricingEngine, Product, Tier


@pytest.fixture(autouse=True)
def clear_cpq_env(monkeypatch):
    for key in ["CPQ_HOST", "CPQ_PORT", "CPQ_DATA_DIR", "CPQ_LOG_LEVEL", "CPQ_QUOTE_TTL_DAYS"]:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    return Settings.load()


@pytest.fixture
def catalog(settings):
    """The seeded demo catalog."""
    return Catalog.load(settings)


@pytest.fixture
def engine(catalog):
    return PricingEngine(catalog)


@pytest.fixture
def laddered_catalog():
    """A catalog with a multi-tier product, a partial-coverage product and a flat product."""
    products = [
        Product(
            id="ladder", sku="LADDER", name="Laddered License", description="",
            category="enterprise_license", base_price=60.0, pricing_type="concurrent_users",
            tiers=(
                Tier(name="Small", min_quantity=1, max_quantity=10, price=50.0),
                Tier(name="Medium", min_quantity=11, max_quantity=50, price=40.0),
                Tier(name="Large", min_quantity=51, max_quantity=-1, price=30.0),
            ),
        ),
        Product(
            id="gap", sku="GAP", name="Gapped License", description="",
            category="enterprise_license", base_price=45.0, pricing_type="concurrent_users",
            tiers=(Tier(name="Mid", min_quantity=20, max_quantity=30, price=20.0),),
        ),
        Product(
            id="flat", sku="FLAT", name="Flat Add-on", description="",
            category="ai_addon", base_price=12.0, pricing_type="per_user",
            tiers=(Tier(name="Ignored", min_quantity=1, max_quantity=-1, price=1.0),),
        ),
        Product(
            id="cents", sku="CENTS", name="Cents Add-on", description="",
            category="ai_addon", base_price=0.99, pricing_type="per_user",
        ),
    ]
    customers = [
        Customer(id="c-startup", name="S", email="s@example.com", company="S Co", tier="startup"),
        Customer(id="c-ent", name="E", email="e@example.com", company="E Co", tier="enterprise"),
    ]
    return Catalog(products, customers)
