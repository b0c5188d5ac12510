"""
Demo API - FastAPI router for catalog, pricing and quote endpoints.
"""
import logging
import re
from typing import Annotated, Optional

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field, StrictInt

from ..engine.catalog import Catalog
from ..engine.pricing_engine import PricingEngine
from ..errors import InvalidRequestError, ProductNotFoundError
from ..services.quote_service import QuoteStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/demo", tags=["demo"])

# Numeric inputs must fit a signed 64-bit integer
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")

# JSON integers only: no strings, booleans or floats
BoundedInt = Annotated[StrictInt, Field(ge=INT64_MIN, le=INT64_MAX)]


class QuoteRequest(BaseModel):
    """Request body for quote creation."""
    customer_id: Optional[str] = None
    sku_id: Optional[str] = None
    quantity: BoundedInt = 0
    term_months: BoundedInt = 0  # 0 or absent means the default term


def _parse_int(value: str, name: str) -> int:
    """Parse a plain decimal integer (no spaces, underscores or fractions)."""
    if not _INTEGER.fullmatch(value):
        raise InvalidRequestError(f"Invalid {name}")
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise InvalidRequestError(f"Invalid {name}")
    return number


def _catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def _engine(request: Request) -> PricingEngine:
    return request.app.state.engine


def _quotes(request: Request) -> QuoteStore:
    return request.app.state.quotes


# Endpoints

@router.get("/products")
async def get_products(request: Request):
    """List the product catalog and the demo customers."""
    catalog = _catalog(request)
    return {
        "products": [p.to_dict() for p in catalog.products],
        "customers": jsonable_encoder(catalog.customers),
        "success": True,
    }


@router.get("/pricing")
async def calculate_pricing(
    request: Request,
    sku_id: Optional[str] = None,
    quantity: Optional[str] = None,
    term_months: Optional[str] = None,
    customer_id: Optional[str] = None,
):
    """Price a SKU for a quantity, term and optional customer."""
    if not sku_id or not quantity:
        raise InvalidRequestError("sku_id and quantity are required")

    qty = _parse_int(quantity, "quantity")
    term = request.app.state.settings.default_term_months
    if term_months:
        term = _parse_int(term_months, "term_months")

    if qty <= 0:
        raise InvalidRequestError("Invalid quantity")
    if term <= 0:
        raise InvalidRequestError("Invalid term_months")

    pricing = _engine(request).calculate(sku_id, qty, term, customer_id or None)
    if pricing is None:
        raise ProductNotFoundError(sku_id)

    return jsonable_encoder(pricing)


@router.post("/quote")
async def create_quote(request: Request, body: QuoteRequest):
    """Create a draft quote for one SKU line."""
    if not body.customer_id or not body.sku_id or body.quantity <= 0:
        raise InvalidRequestError("customer_id, sku_id, and quantity are required")
    if body.term_months < 0:
        raise InvalidRequestError("Invalid term_months")

    term = body.term_months or request.app.state.settings.default_term_months

    quote, pricing, customer = _quotes(request).create(
        customer_id=body.customer_id,
        sku_id=body.sku_id,
        quantity=body.quantity,
        term_months=term,
    )
    return {
        "quote": quote.to_dict(),
        "pricing": jsonable_encoder(pricing),
        "customer": jsonable_encoder(customer),
        "success": True,
    }


@router.get("/quotes")
async def list_quotes(request: Request, customer_id: Optional[str] = None):
    """List stored quotes in creation order, optionally for one customer."""
    quotes = _quotes(request).list(customer_id or None)
    return {
        "quotes": [q.to_dict() for q in quotes],
        "success": True,
        "count": len(quotes),
    }
