"""In-app purchase service relaying store events to signals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Sequence

from .service import Service

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreProduct:
    """A product as reported by the store."""

    id: str
    title: str = ""
    description: str = ""
    price: float = 0.0
    currency: str = ""


class StoreFront(Protocol):
    """The store backend the service talks to."""

    name: str

    def set_listener(self, listener: Any) -> None: ...

    def get_products(self, product_ids: list[str]) -> None: ...


class StorefrontService(Service):
    """Keeps the product list and forwards store events as signals."""

    def __init__(self, manager: Any, store_front: StoreFront | None = None) -> None:
        super().__init__(manager)
        self._store_front = store_front
        self._products: list[StoreProduct] = []
        if store_front is not None:
            store_front.set_listener(self)

    @property
    def products(self) -> tuple[StoreProduct, ...]:
        """Products received by the last successful refresh."""
        return tuple(self._products)

    def on_pre_init(self) -> bool:
        return True

    def on_init(self) -> bool:
        return True

    def on_tick(self) -> bool:
        return False

    def on_shutdown(self) -> bool:
        return True

    def refresh_products(self, products: Iterable[str]) -> None:
        """Ask the store for information on the given product ids."""
        if self._store_front is None:
            raise RuntimeError("no store front is attached")
        self._store_front.get_products(list(products))

    def is_product_valid(self, product: str | None) -> bool:
        """Whether the store knows the product; invalid ones should not be shown."""
        return self.get_product(product) is not None

    def get_product(self, product: str | None) -> StoreProduct | None:
        """Return the product with the given id, or None if unknown."""
        if not product:
            return None
        return next((p for p in self._products if p.id == product), None)

    def get_products_event(
        self, products: Sequence[StoreProduct], invalid_products: Sequence[str]
    ) -> None:
        self._products = list(products)
        if getattr(self._store_front, "name", "") != "Null":
            for invalid in invalid_products:
                log.debug("Invalid product: %s", invalid)
        self._signals.storefront_get_products_succeeded_event()

    def get_products_failed_event(self, error_code: int, error: str) -> None:
        log.warning("Can't get products information: %d %s", error_code, error)
        self._signals.storefront_get_products_failed_event(error_code, error)

    def payment_transaction_in_process_event(self, product_id: str, quantity: int) -> None:
        self._signals.storefront_transaction_in_process_event(product_id, quantity)

    def payment_transaction_succeeded_event(
        self,
        product_id: str,
        quantity: int,
        timestamp: float,
        transaction_id: str,
        transaction_object: Any,
    ) -> None:
        self._signals.storefront_transaction_succeeded_event(
            product_id, quantity, timestamp, transaction_id, transaction_object
        )

    def payment_transaction_failed_event(
        self, product_id: str, quantity: int, error_code: int, error: str
    ) -> None:
        log.warning("Transaction failed: %d", error_code)
        self._signals.storefront_transaction_failed_event(product_id, quantity, error_code, error)

    def payment_transaction_restored_event(
        self,
        product_id: str,
        quantity: int,
        timestamp: float,
        transaction_id: str,
        transaction_object: Any,
    ) -> None:
        self._signals.storefront_transaction_restored_event(
            product_id, quantity, timestamp, transaction_id, transaction_object
        )

    def receipt_requested(self, receipt_data: Any, error_code: int, error: str) -> None:
        if error_code != 0:
            log.warning("Refresh receipt failed: %d", error_code)
        self._signals.storefront_receipt_requested_event(receipt_data, error_code, error)

    @property
    def _signals(self) -> Any:
        return self._manager.signals