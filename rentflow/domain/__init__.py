"""Pure business rules: pricing, stock and status transitions."""
