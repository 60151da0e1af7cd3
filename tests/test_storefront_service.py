import logging

import pytest

from svcframe.service_manager import ServiceManager
from svcframe.storefront_service import StorefrontService, StoreProduct


class FakeStore:
    def __init__(self, name="Fake"):
        self.name = name
        self.listener = None
        self.requests = []

    def set_listener(self, listener):
        self.listener = listener

    def get_products(self, product_ids):
        self.requests.append(product_ids)


@pytest.fixture
def setup():
    manager = ServiceManager()
    store = FakeStore()
    return manager, store, StorefrontService(manager, store)


def _record(signal):
    calls = []
    signal.connect(lambda *args: calls.append(args))
    return calls


def test_constructor_registers_listener(setup):
    _, store, service = setup
    assert store.listener is service


def test_refresh_products_forwards_ids(setup):
    _, store, service = setup
    service.refresh_products(("coins", "gems"))
    assert store.requests == [["coins", "gems"]]


def test_refresh_without_store_raises():
    service = StorefrontService(ServiceManager())
    with pytest.raises(RuntimeError):
        service.refresh_products(["coins"])


def test_products_event_stores_products_and_signals(setup):
    manager, _, service = setup
    calls = _record(manager.signals.storefront_get_products_succeeded_event)
    coins = StoreProduct("coins", title="Coins", price=0.99)
    service.get_products_event([coins, StoreProduct("gems")], ["bad"])
    assert calls == [()]
    assert service.get_product("coins") == coins
    assert service.is_product_valid("gems") is True
    assert service.is_product_valid("bad") is False
    assert len(service.products) == 2


def test_new_products_replace_old(setup):
    _, _, service = setup
    service.get_products_event([StoreProduct("coins")], [])
    service.get_products_event([StoreProduct("gems")], [])
    assert service.get_product("coins") is None
    assert service.get_product("gems") == StoreProduct("gems")


def test_get_product_of_none_or_empty(setup):
    _, _, service = setup
    service.get_products_event([StoreProduct("coins")], [])
    assert service.get_product(None) is None
    assert service.get_product("") is None
    assert service.is_product_valid(None) is False


def test_products_failed_event(setup, caplog):
    manager, _, service = setup
    calls = _record(manager.signals.storefront_get_products_failed_event)
    with caplog.at_level(logging.WARNING):
        service.get_products_failed_event(5, "offline")
    assert calls == [(5, "offline")]
    assert "Can't get products information: 5 offline" in caplog.text


def test_transaction_events_are_forwarded(setup):
    manager, _, service = setup
    signals = manager.signals
    in_process = _record(signals.storefront_transaction_in_process_event)
    succeeded = _record(signals.storefront_transaction_succeeded_event)
    failed = _record(signals.storefront_transaction_failed_event)
    restored = _record(signals.storefront_transaction_restored_event)
    marker = object()

    service.payment_transaction_in_process_event("coins", 1)
    service.payment_transaction_succeeded_event("coins", 2, 10.5, "t1", marker)
    service.payment_transaction_failed_event("coins", 3, 7, "declined")
    service.payment_transaction_restored_event("gems", 1, 11.0, "t2", marker)

    assert in_process == [("coins", 1)]
    assert succeeded == [("coins", 2, 10.5, "t1", marker)]
    assert failed == [("coins", 3, 7, "declined")]
    assert restored == [("gems", 1, 11.0, "t2", marker)]


def test_receipt_requested(setup, caplog):
    manager, _, service = setup
    calls = _record(manager.signals.storefront_receipt_requested_event)
    with caplog.at_level(logging.WARNING):
        service.receipt_requested(b"receipt", 0, "")
    assert caplog.text == ""
    with caplog.at_level(logging.WARNING):
        service.receipt_requested(None, 3, "failed")
    assert calls == [(b"receipt", 0, ""), (None, 3, "failed")]
    assert "Refresh receipt failed: 3" in caplog.text


def test_lifecycle_hooks(setup):
    _, _, service = setup
    assert (service.on_pre_init(), service.on_init(), service.on_tick(), service.on_shutdown()) == (
        True,
        True,
        False,
        True,
    )