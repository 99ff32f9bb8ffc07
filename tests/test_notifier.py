from lydia.services.cart_engine import CartEngine
from lydia.services.notifier import ChangeNotifier


def test_publish_reaches_every_listener_in_order():
    notifier = ChangeNotifier()
    calls = []
    notifier.subscribe(lambda items: calls.append(("header", items)))
    notifier.subscribe(lambda items: calls.append(("summary", items)))

    notifier.publish([])

    assert calls == [("header", []), ("summary", [])]


def test_unsubscribe_handle_detaches_listener():
    notifier = ChangeNotifier()
    calls = []
    unsubscribe = notifier.subscribe(calls.append)

    unsubscribe()
    notifier.publish([])

    assert calls == []
    assert notifier.listener_count == 0
    # Detaching twice is harmless.
    unsubscribe()


def test_same_listener_is_registered_once():
    notifier = ChangeNotifier()
    calls = []

    notifier.subscribe(calls.append)
    notifier.subscribe(calls.append)
    notifier.publish([])

    assert calls == [[]]


def test_publish_without_listeners_is_dropped():
    ChangeNotifier().publish([])


def test_failing_listener_does_not_block_others_or_the_write(engine: CartEngine, store):
    seen = []

    def broken(items):
        raise RuntimeError("render failed")

    store.notifier.subscribe(broken)
    store.notifier.subscribe(seen.append)

    items = engine.add("p1", 2)

    assert seen == [items]
    assert store.read() == items


def test_listeners_receive_a_copy_of_the_items(engine: CartEngine, store):
    def greedy(items):
        items.clear()

    seen = []
    store.notifier.subscribe(greedy)
    store.notifier.subscribe(seen.append)

    items = engine.add("p1")

    assert len(items) == 1
    assert len(seen[0]) == 1
