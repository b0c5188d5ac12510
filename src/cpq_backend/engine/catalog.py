"""
Catalog - Read-only product and customer stores.

Seed data lives in CSV files next to the package and is loaded once
at startup. Nothing mutates a Catalog after construction.
"""
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..errors import CatalogError
from .models import Customer, Product, Tier

logger = logging.getLogger(__name__)


def validate_tiers(product: Product):
    """
    Check that a product's tiers are well formed and never overlap.

    Raises CatalogError on the first violation.
    """
    for tier in product.tiers:
        if tier.min_quantity < 1:
            raise CatalogError(
                f"{product.id}: tier '{tier.name}' starts below 1 ({tier.min_quantity})"
            )
        if not tier.unbounded and tier.max_quantity < tier.min_quantity:
            raise CatalogError(
                f"{product.id}: tier '{tier.name}' has max {tier.max_quantity} < min {tier.min_quantity}"
            )

    ordered = sorted(product.tiers, key=lambda t: t.min_quantity)
    for lower, upper in zip(ordered, ordered[1:]):
        if lower.unbounded or upper.min_quantity <= lower.max_quantity:
            raise CatalogError(
                f"{product.id}: tiers '{lower.name}' and '{upper.name}' overlap"
            )


def _read_seed(path: Path, dtype) -> pd.DataFrame:
    """Read one seed CSV; blank or non-numeric cells in typed columns are CatalogErrors."""
    try:
        return pd.read_csv(path, dtype=dtype)
    except ValueError as e:
        raise CatalogError(f"Invalid seed file {path}: {e}") from e


class Catalog:
    """Product and customer lookup by id."""

    def __init__(self, products: Iterable[Product], customers: Iterable[Customer]):
        self.products = list(products)
        self.customers = list(customers)

        for product in self.products:
            validate_tiers(product)

        self._products_by_id = {p.id: p for p in self.products}
        self._customers_by_id = {c.id: c for c in self.customers}

        if len(self._products_by_id) != len(self.products):
            raise CatalogError("Duplicate product ids in catalog")
        if len(self._customers_by_id) != len(self.customers):
            raise CatalogError("Duplicate customer ids in catalog")

    @classmethod
    def from_csv(cls, products_path: Path, tiers_path: Path, customers_path: Path) -> 'Catalog':
        """Build a catalog from the three seed CSV files."""
        for path in (products_path, tiers_path, customers_path):
            if not path.exists():
                raise CatalogError(f"Seed file not found at {path}")

        products_df = _read_seed(
            products_path,
            dtype={'id': str, 'sku': str, 'name': str, 'description': str,
                   'category': str, 'pricing_type': str, 'base_price': float},
        )
        if products_df['base_price'].isna().any():
            raise CatalogError(f"Invalid seed file {products_path}: blank base_price")
        products_df = products_df.fillna('')

        tiers_df = _read_seed(
            tiers_path,
            dtype={'product_id': str, 'name': str, 'min_quantity': int,
                   'max_quantity': int, 'price': float},
        )
        customers_df = _read_seed(customers_path, dtype=str).fillna('')

        # Strip stray whitespace from identifiers
        for df, col in ((products_df, 'id'), (tiers_df, 'product_id'), (customers_df, 'id')):
            df[col] = df[col].astype(str).str.strip()

        unknown = set(tiers_df['product_id']) - set(products_df['id'])
        if unknown:
            raise CatalogError(f"Tiers reference unknown products: {', '.join(sorted(unknown))}")

        # Tier order within a product is declaration order in the CSV
        tiers_by_product: dict[str, list[Tier]] = {}
        for row in tiers_df.to_dict(orient='records'):
            tiers_by_product.setdefault(row['product_id'], []).append(Tier(
                name=row['name'],
                min_quantity=int(row['min_quantity']),
                max_quantity=int(row['max_quantity']),
                price=float(row['price']),
            ))

        products = [
            Product(
                id=row['id'],
                sku=row['sku'],
                name=row['name'],
                description=row['description'],
                category=row['category'],
                base_price=float(row['base_price']),
                pricing_type=row['pricing_type'],
                tiers=tuple(tiers_by_product.get(row['id'], [])),
            )
            for row in products_df.to_dict(orient='records')
        ]

        customers = [
            Customer(
                id=row['id'],
                name=row['name'],
                email=row['email'],
                company=row['company'],
                tier=row['tier'].strip(),
            )
            for row in customers_df.to_dict(orient='records')
        ]

        return cls(products, customers)

    @classmethod
    def load(cls, settings: Optional[Settings] = None) -> 'Catalog':
        """Load the seed catalog named by settings."""
        settings = settings or get_settings()
        catalog = cls.from_csv(settings.products_csv, settings.tiers_csv, settings.customers_csv)
        logger.info(
            "Loaded catalog: %d products, %d customers from %s",
            len(catalog.products), len(catalog.customers), settings.data_dir,
        )
        return catalog

    def get_product(self, sku_id: str) -> Optional[Product]:
        return self._products_by_id.get(sku_id)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self._customers_by_id.get(customer_id)
