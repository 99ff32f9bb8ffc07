import random

from lydia.services.cart_engine import CartEngine


def _snapshot(items):
    return [(item.product_id, item.variant_id, item.quantity) for item in items]


def test_add_merges_same_product(engine: CartEngine):
    engine.add("p1", 2)
    items = engine.add("p1", 3)

    assert _snapshot(items) == [("p1", None, 5)]


def test_add_clamps_non_positive_quantity_to_one(engine: CartEngine):
    engine.add("p1", 0)
    items = engine.add("p1", -7)

    assert _snapshot(items) == [("p1", None, 2)]


def test_add_ignores_blank_product_id(engine: CartEngine, kv):
    engine.add("p1")
    persisted = kv.get("lydia_cart")

    items = engine.add("   ", 2)

    assert _snapshot(items) == [("p1", None, 1)]
    assert kv.get("lydia_cart") == persisted


def test_add_keeps_variants_apart(engine: CartEngine):
    engine.add("p1")
    engine.add("p1", variant_id="m-pink")
    items = engine.add("p1", variant_id="s-pink")

    assert _snapshot(items) == [
        ("p1", None, 1),
        ("p1", "m-pink", 1),
        ("p1", "s-pink", 1),
    ]


def test_add_appends_in_order_and_sets_added_at_once(engine: CartEngine):
    first = engine.add("p1")[0]
    engine.add("p2")
    items = engine.add("p1")

    assert [item.product_id for item in items] == ["p1", "p2"]
    assert items[0].added_at == first.added_at
    assert items[1].added_at > first.added_at


def test_update_quantity_sets_floored_value(engine: CartEngine):
    engine.add("p1", 4)

    assert _snapshot(engine.update_quantity("p1", 2.9)) == [("p1", None, 2)]
    assert _snapshot(engine.update_quantity("p1", 0.5)) == [("p1", None, 1)]


def test_update_quantity_to_zero_or_below_removes(engine: CartEngine):
    engine.add("p1", 2)
    engine.add("p2", 1)

    assert _snapshot(engine.update_quantity("p1", 0)) == [("p2", None, 1)]
    assert engine.update_quantity("p2", -5) == []


def test_update_quantity_on_missing_item_is_noop(engine: CartEngine, store):
    engine.add("p1", 2)
    received = []
    store.notifier.subscribe(received.append)

    items = engine.update_quantity("p9", 3)

    assert _snapshot(items) == [("p1", None, 2)]
    assert received == []


def test_update_quantity_matches_exact_variant(engine: CartEngine):
    engine.add("p1", 1, "m")
    engine.add("p1", 1)

    items = engine.update_quantity("p1", 6, "m")

    assert _snapshot(items) == [("p1", "m", 6), ("p1", None, 1)]


def test_adjust_quantity_steps_and_removes(engine: CartEngine):
    engine.add("p1", 1)

    assert _snapshot(engine.adjust_quantity("p1", 1)) == [("p1", None, 2)]
    assert _snapshot(engine.adjust_quantity("p1", -1)) == [("p1", None, 1)]
    assert engine.adjust_quantity("p1", -1) == []
    assert engine.adjust_quantity("p1", 1) == []


def test_remove_filters_identity(engine: CartEngine):
    engine.add("p1", 1, "m")
    engine.add("p1", 1)

    assert _snapshot(engine.remove("p1")) == [("p1", "m", 1)]


def test_remove_missing_item_keeps_store_unchanged(engine: CartEngine):
    engine.add("p1", 2)
    engine.add("p2", 1)
    before = engine.items()

    after = engine.remove("nonexistent")

    assert len(after) == len(before)
    assert after == before


def test_clear_is_absolute(engine: CartEngine, store):
    engine.add("p1", 3)
    engine.add("p2", 1, "xl")
    received = []
    store.notifier.subscribe(received.append)

    assert engine.clear() == []
    assert store.read() == []
    assert received == [[]]


def test_merge_folds_incoming_items(engine: CartEngine):
    engine.add("p1", 1)

    items = engine.merge([
        {"productId": "p1", "quantity": 2},
        {"productId": "p2", "variantId": "s", "quantity": 1},
        {"productId": "p2", "variantId": "s", "quantity": 1},
        "garbage",
    ])

    assert _snapshot(items) == [("p1", None, 3), ("p2", "s", 2)]


def test_item_count_sums_quantities(engine: CartEngine):
    assert engine.item_count() == 0
    engine.add("p1", 2)
    engine.add("p2", 3)

    assert engine.item_count() == 5


def test_random_operation_sequences_preserve_invariants(engine: CartEngine):
    rng = random.Random(20240501)
    products = ["p1", "p2", "p3"]
    variants = [None, "s", "m"]

    for _ in range(300):
        op = rng.choice(["add", "update", "adjust", "remove"])
        product_id = rng.choice(products)
        variant_id = rng.choice(variants)
        if op == "add":
            engine.add(product_id, rng.randint(-2, 4), variant_id)
        elif op == "update":
            engine.update_quantity(product_id, rng.randint(-2, 5), variant_id)
        elif op == "adjust":
            engine.adjust_quantity(product_id, rng.choice([-1, 1]), variant_id)
        else:
            engine.remove(product_id, variant_id)

        items = engine.items()
        keys = [item.identity_key for item in items]
        assert len(keys) == len(set(keys))
        assert all(item.quantity >= 1 for item in items)
