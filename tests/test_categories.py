import unittest

from tests.helpers import API, ApiTestCase


class CategoryTests(ApiTestCase):
    async def create_category(self, admin, name, parent_id=None, **extra):
        payload = {"name": name, **extra}
        if parent_id:
            payload["parent_id"] = str(parent_id)
        response = await self.client.post(
            f"{API}/categories/", json=payload, headers=self.auth(admin)
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    async def test_create_generates_unique_slugs(self):
        admin = await self.create_user(role="admin")

        first = await self.create_category(admin, "Power Tools & Drills")
        self.assertEqual(first["slug"], "power-tools-drills")

        second = await self.create_category(admin, "Power Tools Drills")
        self.assertEqual(second["slug"], "power-tools-drills-2")

    async def test_duplicate_name_is_rejected(self):
        admin = await self.create_user(role="admin")
        await self.create_category(admin, "Ladders")

        response = await self.client.post(
            f"{API}/categories/", json={"name": "ladders"}, headers=self.auth(admin)
        )
        self.assertEqual(response.status_code, 422)

    async def test_unknown_parent_is_rejected(self):
        admin = await self.create_user(role="admin")

        response = await self.client.post(
            f"{API}/categories/",
            json={"name": "Orphan", "parent_id": "00000000-0000-0000-0000-000000000000"},
            headers=self.auth(admin),
        )
        self.assertEqual(response.status_code, 400)

    async def test_tree_nests_children(self):
        admin = await self.create_user(role="admin")
        tools = await self.create_category(admin, "Tools", sort_order=1)
        await self.create_category(admin, "Saws", parent_id=tools["id"])
        await self.create_category(admin, "Garden", sort_order=2)

        response = await self.client.get(f"{API}/categories/tree")

        self.assertEqual(response.status_code, 200)
        tree = response.json()
        self.assertEqual([node["name"] for node in tree], ["Tools", "Garden"])
        self.assertEqual([child["name"] for child in tree[0]["children"]], ["Saws"])

    async def test_list_children_of_parent(self):
        admin = await self.create_user(role="admin")
        tools = await self.create_category(admin, "Tools")
        await self.create_category(admin, "Saws", parent_id=tools["id"])

        roots = await self.client.get(f"{API}/categories/", params={"root_only": True})
        self.assertEqual([c["name"] for c in roots.json()], ["Tools"])

        children = await self.client.get(f"{API}/categories/", params={"parent_id": tools["id"]})
        self.assertEqual([c["name"] for c in children.json()], ["Saws"])

    async def test_category_cannot_be_its_own_parent(self):
        admin = await self.create_user(role="admin")
        tools = await self.create_category(admin, "Tools")

        response = await self.client.put(
            f"{API}/categories/{tools['id']}",
            json={"parent_id": tools["id"]},
            headers=self.auth(admin),
        )
        self.assertEqual(response.status_code, 400)

    async def test_rename_refreshes_slug(self):
        admin = await self.create_user(role="admin")
        tools = await self.create_category(admin, "Tools")

        response = await self.client.put(
            f"{API}/categories/{tools['id']}", json={"name": "Hand Tools"}, headers=self.auth(admin)
        )

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["slug"], "hand-tools")

    async def test_delete_blocked_by_subcategories_and_products(self):
        admin = await self.create_user(role="admin")
        tools = await self.create_category(admin, "Tools")
        saws = await self.create_category(admin, "Saws", parent_id=tools["id"])
        await self.create_product(category="Saws")

        parent = await self.client.delete(
            f"{API}/categories/{tools['id']}", headers=self.auth(admin)
        )
        self.assertEqual(parent.status_code, 400)

        with_products = await self.client.delete(
            f"{API}/categories/{saws['id']}", headers=self.auth(admin)
        )
        self.assertEqual(with_products.status_code, 400)

    async def test_delete_empty_category(self):
        admin = await self.create_user(role="admin")
        garden = await self.create_category(admin, "Garden")

        response = await self.client.delete(
            f"{API}/categories/{garden['id']}", headers=self.auth(admin)
        )
        self.assertEqual(response.status_code, 204)

        missing = await self.client.get(f"{API}/categories/{garden['id']}")
        self.assertEqual(missing.status_code, 404)

    async def test_customer_cannot_create_category(self):
        customer = await self.create_user()
        response = await self.client.post(
            f"{API}/categories/", json={"name": "Nope"}, headers=self.auth(customer)
        )
        self.assertEqual(response.status_code, 403)


if __name__ == "__main__":
    unittest.main()
