import unittest
from decimal import Decimal

from tests.helpers import API, ApiTestCase

NEW_PRODUCT = {
    "name": "Concrete Mixer",
    "description": "Electric 120L concrete mixer for small jobs",
    "category": "Construction",
    "base_price": "80.00",
    "unit": "day",
    "stock": 3,
    "total_stock": 4,
    "amenities": [" Drum cover ", ""],
    "tags": ["Mixer", " heavy "],
    "specifications": {"Power": " 650W ", "Weight": ""},
}


class ProductCatalogTests(ApiTestCase):
    async def test_admin_creates_product_with_cleaned_lists(self):
        admin = await self.create_user(role="admin")

        response = await self.client.post(
            f"{API}/products/", json=NEW_PRODUCT, headers=self.auth(admin)
        )

        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual(Decimal(body["base_price"]), Decimal("80.00"))
        self.assertEqual(body["amenities"], ["Drum cover"])
        self.assertEqual(body["tags"], ["mixer", "heavy"])
        self.assertEqual(body["specifications"], {"Power": "650W"})
        self.assertTrue(body["is_available"])
        self.assertEqual(body["stock_percentage"], 75)

    async def test_stock_above_total_is_rejected(self):
        admin = await self.create_user(role="admin")

        response = await self.client.post(
            f"{API}/products/", json={**NEW_PRODUCT, "stock": 9}, headers=self.auth(admin)
        )
        self.assertEqual(response.status_code, 422)

    async def test_customer_cannot_create_product(self):
        customer = await self.create_user()
        response = await self.client.post(
            f"{API}/products/", json=NEW_PRODUCT, headers=self.auth(customer)
        )
        self.assertEqual(response.status_code, 403)

    async def test_public_listing_hides_inactive_products(self):
        await self.create_product(name="Visible Saw")
        await self.create_product(name="Retired Saw", is_active=False)

        response = await self.client.get(f"{API}/products/")

        self.assertEqual(response.status_code, 200)
        names = [p["name"] for p in response.json()["products"]]
        self.assertEqual(names, ["Visible Saw"])

    async def test_listing_filters(self):
        await self.create_product(name="Tile Cutter", category="Tiling", base_price=Decimal("40"))
        await self.create_product(name="Laser Level", category="Measuring", base_price=Decimal("25"))
        await self.create_product(name="Empty Level", category="Measuring", stock=0)

        by_category = await self.client.get(f"{API}/products/", params={"category": "Measuring"})
        self.assertEqual(by_category.json()["total"], 2)

        available = await self.client.get(
            f"{API}/products/", params={"category": "Measuring", "available_only": True}
        )
        self.assertEqual([p["name"] for p in available.json()["products"]], ["Laser Level"])

        search = await self.client.get(f"{API}/products/", params={"search": "tile"})
        self.assertEqual([p["name"] for p in search.json()["products"]], ["Tile Cutter"])

        cheap = await self.client.get(f"{API}/products/", params={"max_price": "30"})
        self.assertEqual([p["name"] for p in cheap.json()["products"]], ["Laser Level"])

    async def test_get_unknown_product_is_404(self):
        response = await self.client.get(f"{API}/products/00000000-0000-0000-0000-000000000000")
        self.assertEqual(response.status_code, 404)

    async def test_update_cannot_push_stock_over_total(self):
        admin = await self.create_user(role="admin")
        product = await self.create_product(stock=2, total_stock=5)

        too_much = await self.client.put(
            f"{API}/products/{product.id}", json={"stock": 6}, headers=self.auth(admin)
        )
        self.assertEqual(too_much.status_code, 422)

        shrink = await self.client.put(
            f"{API}/products/{product.id}",
            json={"total_stock": 3, "name": "Drill v2"},
            headers=self.auth(admin),
        )
        self.assertEqual(shrink.status_code, 200, shrink.text)
        self.assertEqual(shrink.json()["total_stock"], 3)
        self.assertEqual(shrink.json()["name"], "Drill v2")

    async def test_delete_product_without_bookings(self):
        admin = await self.create_user(role="admin")
        product = await self.create_product()

        response = await self.client.delete(
            f"{API}/products/{product.id}", headers=self.auth(admin)
        )

        self.assertEqual(response.status_code, 204)
        self.assertIsNone(await self.get_product(product.id))

    async def test_delete_product_with_bookings_is_refused(self):
        admin = await self.create_user(role="admin")
        product = await self.create_product()
        await self.book(product)

        response = await self.client.delete(
            f"{API}/products/{product.id}", headers=self.auth(admin)
        )
        self.assertEqual(response.status_code, 400)

    async def test_availability_reports_stock(self):
        product = await self.create_product(stock=2, total_stock=5)

        ok = await self.client.get(
            f"{API}/products/{product.id}/availability", params={"quantity": 2}
        )
        self.assertEqual(ok.json(), {
            "available": True, "stock": 2, "total_stock": 5, "requested_quantity": 2,
        })

        too_many = await self.client.get(
            f"{API}/products/{product.id}/availability", params={"quantity": 3}
        )
        self.assertFalse(too_many.json()["available"])


class StockEndpointTests(ApiTestCase):
    async def test_staff_adjusts_stock_with_clamping(self):
        staff = await self.create_user(role="staff")
        product = await self.create_product(stock=3, total_stock=5)
        url = f"{API}/products/{product.id}/stock"

        add = await self.client.patch(
            url, json={"quantity": 10, "operation": "add"}, headers=self.auth(staff)
        )
        self.assertEqual(add.status_code, 200, add.text)
        self.assertEqual(add.json()["stock"], 5)

        subtract = await self.client.patch(
            url, json={"quantity": 7, "operation": "subtract"}, headers=self.auth(staff)
        )
        self.assertEqual(subtract.json()["stock"], 0)

        set_default = await self.client.patch(url, json={"quantity": 4}, headers=self.auth(staff))
        self.assertEqual(set_default.json()["stock"], 4)
        self.assertEqual((await self.get_product(product.id)).stock, 4)

    async def test_customer_cannot_adjust_stock(self):
        customer = await self.create_user()
        product = await self.create_product()

        response = await self.client.patch(
            f"{API}/products/{product.id}/stock", json={"quantity": 1}, headers=self.auth(customer)
        )
        self.assertEqual(response.status_code, 403)

    async def test_bad_stock_requests_are_rejected(self):
        admin = await self.create_user(role="admin")
        product = await self.create_product()
        url = f"{API}/products/{product.id}/stock"

        negative = await self.client.patch(url, json={"quantity": -1}, headers=self.auth(admin))
        self.assertEqual(negative.status_code, 422)

        unknown = await self.client.patch(
            url, json={"quantity": 1, "operation": "double"}, headers=self.auth(admin)
        )
        self.assertEqual(unknown.status_code, 422)

    async def test_product_stats(self):
        admin = await self.create_user(role="admin")
        await self.create_product(name="A", stock=0, total_stock=4, rating=4.8)
        await self.create_product(name="B", stock=4, total_stock=4, rating=3.0)
        await self.create_product(name="C", stock=1, total_stock=10, is_rentable=False)

        response = await self.client.get(f"{API}/products/admin/stats", headers=self.auth(admin))

        self.assertEqual(response.status_code, 200, response.text)
        stats = response.json()
        self.assertEqual(stats["total_products"], 3)
        self.assertEqual(stats["active_products"], 2)
        self.assertEqual(stats["out_of_stock"], 1)
        self.assertEqual(stats["low_stock"], 2)
        self.assertEqual([p["name"] for p in stats["top_rated_products"]], ["A"])


if __name__ == "__main__":
    unittest.main()
