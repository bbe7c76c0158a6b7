import base64
import os
import tempfile
import unittest
from datetime import datetime, timezone
from unittest import mock

from wandermart.db.errors import UploadError
from wandermart.db.models import (
    AttractionUpdate,
    CartItem,
    NewAttraction,
    NewOrder,
    NewPost,
    NewProduct,
    Registration,
)
from wandermart.db.queries import AttractionFilters
from wandermart.db.repositories import Repositories
from wandermart.db.service import LOGIN_HINT, MarketService, build_service
from wandermart.db.store import MemoryStore
from wandermart.utils.config import Settings

FIXED_NOW = datetime(2025, 11, 1, 12, 0, 0, tzinfo=timezone.utc)


def new_attraction(**overrides) -> NewAttraction:
    values = dict(
        title="Leshan Giant Buddha",
        description="A 71 m stone statue carved into a cliff face.",
        address="Lingyun Rd, Shizhong District, Leshan",
        province="四川省",
        city="乐山市",
        county="市中区",
        tags=["History", "Culture"],
    )
    values.update(overrides)
    return NewAttraction(**values)


class ServiceTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.service = MarketService(Repositories.in_memory(), clock=lambda: FIXED_NOW)

    async def _post(self, attraction_id="1", content="Loved it", rating=5):
        res = await self.service.create_post(
            NewPost(
                attraction_id=attraction_id,
                user_id="u1",
                username="Traveler User",
                content=content,
                rating=rating,
            )
        )
        self.assertTrue(res.success)
        return res.data

    async def _order(self, quantity=2):
        product = (await self.service.get_product_by_id("p1")).data
        item = CartItem.of(product, quantity)
        res = await self.service.create_order(
            NewOrder(user_id="u1", items=[item], total=item.line_total)
        )
        self.assertTrue(res.success)
        return res.data

    # ---------- Auth & registration ----------

    async def test_login_matches_email_case_insensitively(self):
        res = await self.service.login("USER@test.com", "anything")
        self.assertTrue(res.success)
        self.assertEqual(res.data.id, "u1")
        self.assertEqual(res.data.token, "mock-jwt-u1")

        res = await self.service.login("nobody@test.com", "pw")
        self.assertFalse(res.success)
        self.assertIsNone(res.data)
        self.assertEqual(res.message, LOGIN_HINT)

    async def test_register_rejects_duplicate_email_ignoring_case(self):
        first = await self.service.register(Registration(email="new@test.com"), "pw")
        self.assertTrue(first.success)

        second = await self.service.register(Registration(email="NEW@Test.com"), "pw")
        self.assertFalse(second.success)
        self.assertEqual(second.message, "Email already exists")

        # seeded accounts count too
        third = await self.service.register({"email": "Merchant@Test.com"}, "pw")
        self.assertFalse(third.success)

    async def test_register_gates_merchants_as_pending(self):
        merchant = await self.service.register(
            Registration(
                email="shop@test.com",
                username="Tea House",
                role="merchant",
                qualification_url="data:image/png;base64,AAAA",
            ),
            "pw",
        )
        self.assertEqual(merchant.data.status, "pending")
        self.assertEqual(merchant.data.qualification_url, "data:image/png;base64,AAAA")
        self.assertTrue(merchant.data.token.startswith("mock-jwt-"))

        traveler = await self.service.register(Registration(email="walker@test.com"), "pw")
        self.assertEqual(traveler.data.status, "active")
        self.assertEqual(traveler.data.role, "traveler")
        # username falls back to the local part of the email
        self.assertEqual(traveler.data.username, "walker")

        pending = (await self.service.get_pending_merchants()).data
        self.assertEqual([u.id for u in pending], [merchant.data.id])

    async def test_register_rejects_bad_payloads(self):
        res = await self.service.register({"email": "x@test.com", "is_admin": True}, "pw")
        self.assertFalse(res.success)
        self.assertIn("is_admin", res.message)

        res = await self.service.register({"email": "x@test.com", "role": "wizard"}, "pw")
        self.assertFalse(res.success)

        res = await self.service.register({"username": "nomail"}, "pw")
        self.assertFalse(res.success)
        self.assertIn("email", res.message)

    async def test_register_strips_email_before_storing(self):
        res = await self.service.register(Registration(email=" trim@test.com "), "pw")
        self.assertTrue(res.success)
        self.assertEqual(res.data.email, "trim@test.com")

        login = await self.service.login(" trim@test.com", "pw")
        self.assertTrue(login.success)
        self.assertEqual(login.data.id, res.data.id)

        again = await self.service.register({"email": "trim@test.com"}, "pw")
        self.assertFalse(again.success)
        self.assertEqual(again.message, "Email already exists")

    async def test_update_user_status(self):
        merchant = (
            await self.service.register(
                Registration(email="shop@test.com", role="merchant"), "pw"
            )
        ).data
        res = await self.service.update_user_status(merchant.id, "active")
        self.assertTrue(res.success)
        self.assertTrue(res.data)
        self.assertEqual((await self.service.get_pending_merchants()).data, [])

        user = (await self.service.login("shop@test.com", "pw")).data
        self.assertEqual(user.status, "active")

        missing = await self.service.update_user_status("u-nope", "active")
        self.assertFalse(missing.success)
        self.assertEqual(missing.message, "User not found")

        bad = await self.service.update_user_status(merchant.id, "banned")
        self.assertFalse(bad.success)

    # ---------- Attractions ----------

    async def test_reads_are_idempotent(self):
        for op in (
            self.service.get_attractions,
            self.service.get_posts,
            self.service.get_products,
            self.service.get_orders,
            self.service.get_reported_content,
            self.service.get_pending_merchants,
        ):
            first = await op()
            second = await op()
            self.assertEqual(first, second, op.__name__)

    async def test_create_attraction_round_trip(self):
        created = await self.service.create_attraction(new_attraction())
        self.assertTrue(created.success)
        attraction = created.data
        self.assertTrue(attraction.id.startswith("attr-"))
        self.assertEqual(attraction.region, "四川省 乐山市")
        self.assertTrue(attraction.image_url)
        self.assertEqual(attraction.gallery, [])

        fetched = await self.service.get_attraction_by_id(attraction.id)
        self.assertTrue(fetched.success)
        self.assertEqual(fetched.data, attraction)

        # newest first
        listing = (await self.service.get_attractions()).data
        self.assertEqual(listing[0].id, attraction.id)
        self.assertEqual(len(listing), 6)

    async def test_create_attraction_requires_fields(self):
        res = await self.service.create_attraction({"title": "Half a record"})
        self.assertFalse(res.success)
        self.assertIn("description", res.message)

    async def test_get_attraction_by_id_not_found(self):
        res = await self.service.get_attraction_by_id("does-not-exist")
        self.assertFalse(res.success)
        self.assertEqual(res.message, "Attraction not found")

    async def test_get_attractions_with_filters(self):
        res = await self.service.get_attractions(
            AttractionFilters(province="四川省", tag="Hiking")
        )
        self.assertEqual(sorted(a.id for a in res.data), ["4", "5"])

    async def test_update_attraction(self):
        res = await self.service.update_attraction(
            "1", AttractionUpdate(title="Panda Base", city="都江堰市")
        )
        self.assertTrue(res.success)
        self.assertEqual(res.data.title, "Panda Base")
        self.assertEqual(res.data.region, "四川省 都江堰市")
        # untouched fields stay
        self.assertEqual(res.data.tags, ["Nature", "Animals", "Family"])
        self.assertEqual((await self.service.get_attraction_by_id("1")).data, res.data)

        missing = await self.service.update_attraction("nope", {"title": "x"})
        self.assertFalse(missing.success)
        self.assertEqual(missing.message, "Attraction not found")

        unknown = await self.service.update_attraction("1", {"id": "hijack"})
        self.assertFalse(unknown.success)
        self.assertEqual((await self.service.get_attraction_by_id("1")).data.id, "1")

    async def test_delete_attraction_does_not_cascade(self):
        await self._post(attraction_id="1")
        res = await self.service.delete_attraction("1")
        self.assertTrue(res.success)
        self.assertFalse((await self.service.get_attraction_by_id("1")).success)

        products = (await self.service.get_products(attraction_id="1")).data
        self.assertEqual([p.id for p in products], ["p1"])
        posts = (await self.service.get_posts("1")).data
        self.assertEqual(len(posts), 1)

        again = await self.service.delete_attraction("1")
        self.assertFalse(again.success)
        self.assertEqual(again.message, "Attraction not found")

    # ---------- Posts & moderation ----------

    async def test_create_post_defaults(self):
        post = await self._post(content="Pandas everywhere")
        self.assertTrue(post.id.startswith("post-"))
        self.assertEqual(post.status, "active")
        self.assertEqual(post.likes, 0)
        self.assertEqual(post.comments, [])
        self.assertEqual(post.created_at, FIXED_NOW.isoformat())

        newer = await self._post(content="Second visit")
        posts = (await self.service.get_posts("1")).data
        self.assertEqual([p.id for p in posts], [newer.id, post.id])
        self.assertEqual((await self.service.get_posts("2")).data, [])

    async def test_report_then_approve(self):
        post = await self._post()

        self.assertTrue((await self.service.report_post(post.id)).success)
        visible = (await self.service.get_posts()).data
        reported = (await self.service.get_reported_content()).data
        self.assertNotIn(post.id, [p.id for p in visible])
        self.assertEqual([p.id for p in reported], [post.id])
        self.assertTrue(all(p.status == "reported" for p in reported))

        self.assertTrue((await self.service.moderate_content(post.id, "approve")).success)
        visible = (await self.service.get_posts()).data
        reported = (await self.service.get_reported_content()).data
        self.assertIn(post.id, [p.id for p in visible])
        self.assertEqual(reported, [])
        self.assertTrue(all(p.status == "active" for p in visible))

    async def test_report_then_delete(self):
        post = await self._post()
        await self.service.report_post(post.id)
        res = await self.service.moderate_content(post.id, "delete")
        self.assertTrue(res.success)
        self.assertEqual((await self.service.get_posts()).data, [])
        self.assertEqual((await self.service.get_reported_content()).data, [])

    async def test_post_operations_on_missing_ids(self):
        res = await self.service.report_post("post-123")
        self.assertFalse(res.success)
        self.assertEqual(res.message, "Post not found")

        res = await self.service.moderate_content("post-123", "approve")
        self.assertFalse(res.success)

        post = await self._post()
        res = await self.service.moderate_content(post.id, "shred")
        self.assertFalse(res.success)
        self.assertEqual(len((await self.service.get_posts()).data), 1)

    # ---------- Products ----------

    async def test_create_product_snapshots_attraction_title(self):
        res = await self.service.create_product(
            NewProduct(
                merchant_id="m1",
                name="Panda Mug",
                description="Ceramic mug.",
                price=9.5,
                stock=20,
                attraction_id="1",
            )
        )
        self.assertTrue(res.success)
        product = res.data
        self.assertEqual(product.attraction_name, "Chengdu Research Base of Giant Panda Breeding")
        self.assertEqual(product.merchant_name, "My Store")
        self.assertIn(product.id, product.image_url)

        await self.service.update_attraction("1", AttractionUpdate(title="Renamed"))
        stored = (await self.service.get_product_by_id(product.id)).data
        self.assertEqual(stored.attraction_name, "Chengdu Research Base of Giant Panda Breeding")

        # appended, not prepended
        listing = (await self.service.get_products()).data
        self.assertEqual(listing[-1].id, product.id)

    async def test_create_product_with_unknown_attraction(self):
        res = await self.service.create_product(
            {
                "merchant_id": "m1",
                "merchant_name": "Panda Souvenirs",
                "name": "Postcard",
                "description": "",
                "price": 1,
                "stock": 0,
                "attraction_id": "nope",
            }
        )
        self.assertTrue(res.success)
        self.assertIsNone(res.data.attraction_name)
        self.assertEqual(res.data.merchant_name, "Panda Souvenirs")

    async def test_create_product_validates_price_and_stock(self):
        base = dict(merchant_id="m1", name="Fan", description="", price=3.0, stock=1)
        for bad in ({"price": -1}, {"stock": -2}, {"stock": 1.5}):
            res = await self.service.create_product({**base, **bad})
            self.assertFalse(res.success, bad)
        self.assertEqual(len((await self.service.get_products()).data), 2)

    async def test_wrongly_typed_payloads_return_failures(self):
        product = dict(merchant_id="m1", name="Fan", description="", price=3.0, stock=1)
        attraction = new_attraction().model_dump()
        item = {**(await self.service.get_product_by_id("p1")).data.to_dict(), "quantity": 1}
        post = dict(attraction_id="1", user_id="u1", username="Traveler User", content="ok")
        cases = {
            "string price": self.service.create_product({**product, "price": "3"}),
            "non-numeric stock": self.service.create_product({**product, "stock": "abc"}),
            "missing price": self.service.create_product({**product, "price": None}),
            "tags not a list": self.service.create_attraction({**attraction, "tags": "History"}),
            "patch tags not a list": self.service.update_attraction("1", {"tags": "Nature"}),
            "numeric content": self.service.create_post({**post, "content": 42}),
            "items not a list": self.service.create_order(
                {"user_id": "u1", "items": item, "total": 25.0}
            ),
            "string total": self.service.create_order(
                {"user_id": "u1", "items": [item], "total": "25"}
            ),
            "email not a string": self.service.register({"email": ["a@test.com"]}, "pw"),
        }
        for label, call in cases.items():
            res = await call
            self.assertFalse(res.success, label)
            self.assertTrue(res.message, label)

        # nothing was written
        self.assertEqual(len((await self.service.get_products()).data), 2)
        attraction_one = (await self.service.get_attraction_by_id("1")).data
        self.assertEqual(attraction_one.tags, ["Nature", "Animals", "Family"])
        self.assertEqual(len((await self.service.get_attractions()).data), 5)
        self.assertEqual((await self.service.get_posts()).data, [])
        self.assertEqual((await self.service.get_orders()).data, [])

    async def test_get_products_filters(self):
        self.assertEqual(
            [p.id for p in (await self.service.get_products(merchant_id="m1")).data],
            ["p1", "p2"],
        )
        self.assertEqual(
            [p.id for p in (await self.service.get_products(attraction_id="5")).data],
            ["p2"],
        )
        self.assertEqual((await self.service.get_products(merchant_id="m9")).data, [])
        missing = await self.service.get_product_by_id("p9")
        self.assertFalse(missing.success)
        self.assertEqual(missing.message, "Product not found")

    # ---------- Orders ----------

    async def test_create_order_keeps_client_total(self):
        product = (await self.service.get_product_by_id("p1")).data
        res = await self.service.create_order(
            {
                "user_id": "u1",
                "items": [{**product.to_dict(), "quantity": 3}],
                "total": 1.0,
            }
        )
        self.assertTrue(res.success)
        order = res.data
        self.assertEqual(order.total, 1.0)
        self.assertEqual(order.status, "pending")
        self.assertIsNone(order.tracking_number)
        self.assertIsInstance(order.items[0], CartItem)
        self.assertEqual(order.items[0].quantity, 3)

        # snapshot: later product changes never reach the order
        self.assertEqual(order.items[0].price, 25.0)

    async def test_orders_are_newest_first_and_filterable(self):
        first = await self._order()
        second = await self._order(quantity=1)
        mine = (await self.service.get_orders(user_id="u1")).data
        self.assertEqual([o.id for o in mine], [second.id, first.id])

        self.assertEqual(len((await self.service.get_orders(merchant_id="m1")).data), 2)
        self.assertEqual((await self.service.get_orders(merchant_id="m9")).data, [])
        self.assertEqual(
            (await self.service.get_orders(user_id="u1", merchant_id="m9")).data, []
        )
        self.assertEqual((await self.service.get_orders(user_id="u2")).data, [])

    async def test_ship_order_keeps_tracking_number(self):
        order = await self._order()

        res = await self.service.update_order_status(order.id, "shipped", "TRACK99")
        self.assertTrue(res.success)
        self.assertEqual(res.data.status, "shipped")
        self.assertEqual(res.data.tracking_number, "TRACK99")

        again = await self.service.update_order_status(order.id, "shipped")
        self.assertEqual(again.data.tracking_number, "TRACK99")

        stored = (await self.service.get_orders(user_id="u1")).data[0]
        self.assertEqual(stored.tracking_number, "TRACK99")

    async def test_update_order_status_failures(self):
        missing = await self.service.update_order_status("ord-1", "shipped", "X")
        self.assertFalse(missing.success)
        self.assertEqual(missing.message, "Order not found")

        order = await self._order()
        bad = await self.service.update_order_status(order.id, "lost")
        self.assertFalse(bad.success)

    # ---------- Files ----------

    async def test_upload_file_returns_data_uri(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "license.png")
            with open(path, "wb") as f:
                f.write(b"\x89PNG fake")
            uri = await self.service.upload_file(path)

        prefix = "data:image/png;base64,"
        self.assertTrue(uri.startswith(prefix))
        self.assertEqual(base64.b64decode(uri[len(prefix):]), b"\x89PNG fake")

    async def test_upload_file_unknown_type_and_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "blob")
            with open(path, "wb") as f:
                f.write(b"abc")
            uri = await self.service.upload_file(path)
            self.assertTrue(uri.startswith("data:application/octet-stream;base64,"))

            with self.assertRaises(UploadError):
                await self.service.upload_file(os.path.join(tmp, "missing.jpg"))

    # ---------- Envelope & wiring ----------

    async def test_operations_wait_for_the_configured_delay(self):
        service = MarketService(Repositories.in_memory(), delay=0.25)
        with mock.patch(
            "wandermart.db.service.asyncio.sleep", new_callable=mock.AsyncMock
        ) as sleep:
            await service.get_attractions()
            await service.report_post("missing")
        self.assertEqual([c.args for c in sleep.await_args_list], [(0.25,), (0.25,)])

    async def test_envelope_shape(self):
        ok = await self.service.get_pending_merchants()
        self.assertEqual(ok.to_dict(), {"success": True, "data": []})

        failed = await self.service.report_post("post-123")
        self.assertEqual(failed.to_dict(), {"success": False, "message": "Post not found"})

        user = (await self.service.login("admin@test.com", "pw")).to_dict()
        self.assertEqual(user["data"]["role"], "admin")
        self.assertNotIn("message", user)

    def test_build_service_in_memory(self):
        service = build_service(Settings(in_memory=True, delay_ms=0))
        self.assertEqual(service.delay, 0)
        self.assertIsInstance(service.repos.users.store, MemoryStore)


if __name__ == "__main__":
    unittest.main()
