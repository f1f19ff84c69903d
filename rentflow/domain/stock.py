"""Stock ledger for rental products."""

import logging
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class StockOperation(str, Enum):
    """Ways to change a product's available stock."""

    ADD = "add"
    SUBTRACT = "subtract"
    SET = "set"


class Stocked(Protocol):
    """Anything with an available count bounded by a total count."""

    stock: int
    total_stock: int


def adjust_stock(product: Stocked, quantity: int, operation: str | StockOperation) -> int:
    """Apply a stock change, clamped to [0, total_stock].

    The new value is written onto ``product``; persisting it is up to the
    caller's session so it commits together with whatever caused it.

    Returns:
        int: The new stock value

    Raises:
        ValueError: If quantity is negative or the operation is unknown
    """
    if quantity < 0:
        raise ValueError("Stock quantity cannot be negative")
    operation = StockOperation(operation)

    previous = product.stock
    if operation is StockOperation.SUBTRACT:
        product.stock = max(0, product.stock - quantity)
    elif operation is StockOperation.ADD:
        product.stock = min(product.total_stock, product.stock + quantity)
    else:
        product.stock = min(product.total_stock, max(0, quantity))

    logger.debug(
        "Stock %s %s: %s -> %s (total %s)",
        operation.value,
        quantity,
        previous,
        product.stock,
        product.total_stock,
    )
    return product.stock
