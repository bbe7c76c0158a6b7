import unittest
from dataclasses import replace

from wandermart.db import fixtures, queries
from wandermart.db.models import CartItem, Order, Post
from wandermart.db.queries import AttractionFilters


def make_post(post_id, status="active", attraction_id="1"):
    return Post(
        id=post_id,
        attraction_id=attraction_id,
        user_id="u1",
        username="Traveler User",
        content="...",
        created_at="2025-11-01T12:00:00+00:00",
        status=status,
    )


def make_order(order_id, user_id, *merchant_ids):
    product = fixtures.default_products()[0]
    items = [
        CartItem.of(replace(product, merchant_id=m), 1)
        for m in merchant_ids
    ]
    return Order(
        id=order_id,
        user_id=user_id,
        items=items,
        total=25.0 * len(items),
        created_at="2025-11-01T12:00:00+00:00",
    )


class AttractionFilterTestCase(unittest.TestCase):
    def setUp(self):
        self.attractions = fixtures.default_attractions()

    def ids(self, **kwargs):
        return [a.id for a in queries.filter_attractions(self.attractions, AttractionFilters(**kwargs))]

    def test_no_filters_returns_everything(self):
        self.assertEqual(len(queries.filter_attractions(self.attractions)), 5)
        self.assertEqual(self.ids(), ["1", "2", "3", "4", "5"])

    def test_fields_combine_with_and(self):
        self.assertEqual(self.ids(province="四川省"), ["1", "4", "5"])
        self.assertEqual(self.ids(province="四川省", city="成都市"), ["1", "5"])
        self.assertEqual(self.ids(province="四川省", city="成都市", county="都江堰市"), ["5"])
        self.assertEqual(self.ids(province="北京市", tag="Hiking"), [])

    def test_tag_is_containment(self):
        self.assertEqual(self.ids(tag="History"), ["2", "3"])
        # exact tag, not substring
        self.assertEqual(self.ids(tag="Hist"), [])

    def test_query_is_case_insensitive_over_title_or_description(self):
        # "pandas" only occurs in the description of #1, "Panda" in its title
        self.assertEqual(self.ids(query="PANDAS"), ["1"])
        self.assertEqual(self.ids(query="palace"), ["2"])
        self.assertEqual(self.ids(query="no such place"), [])

    def test_empty_strings_are_ignored(self):
        self.assertEqual(self.ids(province="", city="", tag="", query=""), ["1", "2", "3", "4", "5"])

    def test_picker_options(self):
        self.assertEqual(queries.province_options(self.attractions), ["北京市", "四川省", "浙江省"])
        self.assertIn("Hiking", queries.tag_options(self.attractions))
        tags = queries.tag_options(self.attractions)
        self.assertEqual(tags, sorted(set(tags)))


class SliceQueryTestCase(unittest.TestCase):
    def test_lookup_helpers(self):
        users = fixtures.default_users()
        self.assertEqual(queries.by_id(users, "m1").email, "merchant@test.com")
        self.assertIsNone(queries.by_id(users, "zz"))
        self.assertEqual(queries.index_of(users, "u1"), 2)
        self.assertEqual(queries.index_of(users, "zz"), -1)
        self.assertEqual(queries.find_user_by_email(users, "  Admin@Test.COM ").id, "admin1")
        self.assertEqual(queries.pending_merchants(users), [])

    def test_post_visibility_partitions_by_status(self):
        posts = [
            make_post("a"),
            make_post("b", status="reported"),
            make_post("c", attraction_id="2"),
            make_post("d", status="hidden"),
        ]
        self.assertEqual([p.id for p in queries.visible_posts(posts)], ["a", "c"])
        self.assertEqual([p.id for p in queries.visible_posts(posts, "2")], ["c"])
        self.assertEqual([p.id for p in queries.reported_posts(posts)], ["b"])

    def test_product_filters(self):
        products = fixtures.default_products()
        self.assertEqual([p.id for p in queries.filter_products(products, "m1", "1")], ["p1"])
        self.assertEqual(queries.filter_products(products, "m2"), [])

    def test_order_filters(self):
        orders = [
            make_order("o1", "u1", "m1"),
            make_order("o2", "u2", "m2", "m1"),
            make_order("o3", "u1", "m2"),
        ]
        self.assertEqual([o.id for o in queries.filter_orders(orders, user_id="u1")], ["o1", "o3"])
        self.assertEqual([o.id for o in queries.filter_orders(orders, merchant_id="m1")], ["o1", "o2"])
        self.assertEqual(
            [o.id for o in queries.filter_orders(orders, user_id="u1", merchant_id="m2")], ["o3"]
        )
        self.assertEqual(len(queries.filter_orders(orders)), 3)


if __name__ == "__main__":
    unittest.main()
