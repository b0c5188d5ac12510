"""Error taxonomy shared by the engine, the quote store and the API layer."""


class CPQError(Exception):
    """Base class for all CPQ domain exceptions."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(CPQError):
    """Malformed, missing or out-of-range input."""

    status_code = 400


class NotFoundError(CPQError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    def __init__(self, sku_id: str):
        self.sku_id = sku_id
        super().__init__("Product not found")


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__("Customer not found")


class CatalogError(CPQError):
    """Seed data violates a catalog invariant (raised while loading)."""


class ConfigurationError(CPQError):
    """An environment setting could not be parsed."""
