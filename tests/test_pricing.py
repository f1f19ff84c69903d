import unittest
from datetime import date
from decimal import Decimal

from rentflow.domain.pricing import PricingConfig, compute_pricing, get_pricing_config, rental_days


class ComputePricingTests(unittest.TestCase):
    def test_three_day_rental_of_one_unit(self):
        price = compute_pricing(150, 1, 3)

        self.assertEqual(price.base, Decimal("450.00"))
        self.assertEqual(price.discount, Decimal("45.00"))
        self.assertEqual(price.tax, Decimal("36.45"))
        self.assertEqual(price.total, Decimal("441.45"))
        self.assertEqual(price.deposit, Decimal("75.00"))

    def test_default_rates_relate_amounts(self):
        for unit_price, quantity, days in [(99.99, 2, 5), (10, 1, 1), (1234.5, 3, 7)]:
            with self.subTest(unit_price=unit_price, quantity=quantity, days=days):
                price = compute_pricing(unit_price, quantity, days)
                base = Decimal(str(unit_price)) * quantity * days

                self.assertEqual(price.base, base.quantize(Decimal("0.01")))
                self.assertEqual(price.discount, (base * Decimal("0.10")).quantize(Decimal("0.01")))
                self.assertEqual(
                    price.tax,
                    ((price.base - price.discount) * Decimal("0.09")).quantize(Decimal("0.01")),
                )
                self.assertEqual(price.total, price.base - price.discount + price.tax)
                self.assertEqual(
                    price.deposit,
                    (Decimal(str(unit_price)) * quantity / 2).quantize(Decimal("0.01")),
                )

    def test_explicit_rates_override_config(self):
        price = compute_pricing(100, 1, 1, discount_percent=0, tax_percent=0)

        self.assertEqual(price.discount, Decimal("0.00"))
        self.assertEqual(price.tax, Decimal("0.00"))
        self.assertEqual(price.total, Decimal("100.00"))

    def test_custom_config(self):
        config = PricingConfig(
            discount_percent=Decimal("0"), tax_percent=Decimal("20"), deposit_rate=Decimal("1")
        )
        price = compute_pricing(Decimal("50"), 2, 2, config=config)

        self.assertEqual(price.base, Decimal("200.00"))
        self.assertEqual(price.tax, Decimal("40.00"))
        self.assertEqual(price.total, Decimal("240.00"))
        self.assertEqual(price.deposit, Decimal("100.00"))

    def test_amounts_round_half_up_to_cents(self):
        # 100.05 discounted 10% = 10.005 -> 10.01; 9% of 90.04 = 8.1036 -> 8.10
        price = compute_pricing(Decimal("100.05"), 1, 1)

        self.assertEqual(price.base, Decimal("100.05"))
        self.assertEqual(price.discount, Decimal("10.01"))
        self.assertEqual(price.tax, Decimal("8.10"))
        self.assertEqual(price.total, Decimal("98.14"))

    def test_rounded_parts_always_add_up_to_total(self):
        for cents in range(1, 5001):
            unit_price = Decimal(cents) / 100
            for quantity, days in ((1, 1), (3, 7)):
                with self.subTest(unit_price=unit_price, quantity=quantity, days=days):
                    price = compute_pricing(unit_price, quantity, days)
                    self.assertEqual(price.total, price.base - price.discount + price.tax)
                    self.assertEqual(price.total, price.total.quantize(Decimal("0.01")))

    def test_settings_drive_default_config(self):
        config = get_pricing_config()

        self.assertEqual(config.discount_percent, Decimal("10.0"))
        self.assertEqual(config.tax_percent, Decimal("9.0"))
        self.assertEqual(config.deposit_rate, Decimal("0.5"))


class RentalDaysTests(unittest.TestCase):
    def test_same_day_counts_as_one_day(self):
        self.assertEqual(rental_days(date(2025, 3, 1), date(2025, 3, 1)), 1)

    def test_counts_whole_days_between_dates(self):
        self.assertEqual(rental_days(date(2025, 3, 1), date(2025, 3, 4)), 3)

    def test_reversed_range_is_clamped(self):
        self.assertEqual(rental_days(date(2025, 3, 4), date(2025, 3, 1)), 1)


if __name__ == "__main__":
    unittest.main()
