import unittest
from types import SimpleNamespace

from rentflow.domain.stock import StockOperation, adjust_stock


def product(stock: int, total_stock: int = 10) -> SimpleNamespace:
    return SimpleNamespace(stock=stock, total_stock=total_stock)


class AdjustStockTests(unittest.TestCase):
    def test_subtract_never_goes_below_zero(self):
        item = product(3)

        self.assertEqual(adjust_stock(item, 5, StockOperation.SUBTRACT), 0)
        self.assertEqual(item.stock, 0)

    def test_subtract_within_range(self):
        item = product(7)
        self.assertEqual(adjust_stock(item, 2, "subtract"), 5)

    def test_add_never_exceeds_total(self):
        item = product(8)
        self.assertEqual(adjust_stock(item, 5, StockOperation.ADD), 10)

    def test_set_clamps_to_total(self):
        self.assertEqual(adjust_stock(product(2), 25, StockOperation.SET), 10)
        self.assertEqual(adjust_stock(product(2), 0, StockOperation.SET), 0)

    def test_set_is_idempotent(self):
        item = product(2)
        first = adjust_stock(item, 6, StockOperation.SET)
        second = adjust_stock(item, 6, StockOperation.SET)

        self.assertEqual(first, 6)
        self.assertEqual(second, 6)

    def test_negative_quantity_is_rejected(self):
        item = product(4)
        with self.assertRaises(ValueError):
            adjust_stock(item, -1, StockOperation.ADD)
        self.assertEqual(item.stock, 4)

    def test_unknown_operation_is_rejected(self):
        with self.assertRaises(ValueError):
            adjust_stock(product(4), 1, "multiply")


if __name__ == "__main__":
    unittest.main()
