import json
import os
import tempfile
import unittest

from wandermart.db.models import Registration
from wandermart.db.repositories import Repositories
from wandermart.db.service import MarketService
from wandermart.db.store import MemoryStore, SqliteStore


class MemoryStoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_get_set_overwrite(self):
        store = MemoryStore({"users": "[]"})
        self.assertEqual(await store.get("users"), "[]")
        self.assertIsNone(await store.get("orders"))

        await store.set("orders", "[1]")
        await store.set("orders", "[2]")
        self.assertEqual(await store.get("orders"), "[2]")
        self.assertEqual(sorted(store.keys()), ["orders", "users"])


class SqliteStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        # nested dir that does not exist yet
        self.db_path = os.path.join(self.temp_dir.name, "data", "test.sqlite")

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_creates_table_and_parent_dir_lazily(self):
        store = SqliteStore(self.db_path)
        self.assertFalse(os.path.exists(self.db_path))

        self.assertIsNone(await store.get("users"))
        self.assertTrue(os.path.exists(self.db_path))

        async with store.connect() as conn:
            cur = await conn.execute("SELECT name FROM sqlite_master WHERE type='table';")
            tables = [row[0] for row in await cur.fetchall()]
            await cur.close()
        self.assertEqual(tables, ["kv"])

    async def test_last_write_wins_and_survives_reopen(self):
        store = SqliteStore(self.db_path)
        await store.set("posts", "[]")
        await store.set("posts", '[{"id": "post-1"}]')

        reopened = SqliteStore(self.db_path)
        self.assertEqual(await reopened.get("posts"), '[{"id": "post-1"}]')

        async with reopened.connect() as conn:
            cur = await conn.execute("SELECT COUNT(*) FROM kv;")
            (count,) = await cur.fetchone()
            await cur.close()
        self.assertEqual(count, 1)


class RepositoryTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_unwritten_slices_fall_back_to_fixtures(self):
        store = MemoryStore()
        repos = Repositories.over(store)

        self.assertEqual([u.id for u in await repos.users.all()], ["admin1", "m1", "u1"])
        self.assertEqual(len(await repos.attractions.all()), 5)
        self.assertEqual([p.id for p in await repos.products.all()], ["p1", "p2"])
        self.assertEqual(await repos.posts.all(), [])
        self.assertEqual(await repos.orders.all(), [])
        # reading never writes the defaults back
        self.assertEqual(list(store.keys()), [])

    async def test_saved_slice_is_a_json_array(self):
        store = MemoryStore()
        repos = Repositories.over(store)
        attractions = await repos.attractions.all()
        await repos.attractions.save(attractions[:2])

        rows = json.loads(await store.get("attractions"))
        self.assertEqual([r["id"] for r in rows], ["1", "2"])
        self.assertEqual(rows[0]["province"], "四川省")
        self.assertEqual(await repos.attractions.all(), attractions[:2])
        self.assertIsNone(await repos.attractions.find("3"))

    async def test_service_state_persists_across_sqlite_reopen(self):
        service = MarketService(Repositories.over(SqliteStore(self.db_path)))
        created = await service.register(
            Registration(email="shop@test.com", username="Tea House", role="merchant"), "pw"
        )
        self.assertTrue(created.success)

        reopened = MarketService(Repositories.over(SqliteStore(self.db_path)))
        pending = (await reopened.get_pending_merchants()).data
        self.assertEqual([u.username for u in pending], ["Tea House"])
        # the session token is not persisted
        self.assertIsNone(pending[0].token)

        duplicate = await reopened.register(Registration(email="SHOP@test.com"), "pw")
        self.assertFalse(duplicate.success)


if __name__ == "__main__":
    unittest.main()
