"""Per-key change subscriptions layered on :attr:`ConfigStore.changed`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List

if TYPE_CHECKING:  # pragma: no cover
    from confstore.core.config_store import ConfigStore

log = logging.getLogger(__name__)

ChangeCallback = Callable[[Any, Any], None]
Unsubscribe = Callable[[], None]


class _Subscription:
    """One listener connected to the store's ``changed`` signal."""

    def __init__(self, store: "ConfigStore", callback: ChangeCallback) -> None:
        self._store = store
        self._callback = callback
        self.baseline = self.current()

    def current(self) -> Any:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def on_store_changed(self) -> None:
        old_value = self.baseline
        new_value = self.current()
        if new_value == old_value:
            return
        self.baseline = new_value
        # PyQt aborts the process on exceptions escaping a slot, so the
        # failure is reported here instead of propagating.
        try:
            self._callback(new_value, old_value)
        except Exception:
            log.exception("Change callback for %s raised", self.describe())


class KeySubscription(_Subscription):
    def __init__(self, store: "ConfigStore", key: str, callback: ChangeCallback) -> None:
        self.key = key
        super().__init__(store, callback)

    def current(self) -> Any:
        return self._store.get(self.key)

    def describe(self) -> str:
        return f"key {self.key!r}"


class AnySubscription(_Subscription):
    def current(self) -> Dict[str, Any]:
        return self._store.store

    def describe(self) -> str:
        return "any key"


class ChangeNotifier:
    """Keeps the active subscriptions of one store.

    Subscriptions are referenced here for as long as they are active; PyQt
    only holds weak references to bound-method slots.
    """

    def __init__(self, store: "ConfigStore") -> None:
        self._store = store
        self._subscriptions: List[_Subscription] = []

    @property
    def subscriptions(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        """Call ``callback(new_value, old_value)`` whenever *key*'s value changes."""

        if not isinstance(key, str):
            raise TypeError(
                f"Expected `key` to be of type `str`, got {type(key).__name__}"
            )
        _check_callback(callback)
        return self._attach(KeySubscription(self._store, key, callback))

    def subscribe_any(self, callback: ChangeCallback) -> Unsubscribe:
        """Call ``callback(new_store, old_store)`` whenever the mapping changes."""

        _check_callback(callback)
        return self._attach(AnySubscription(self._store, callback))

    def _attach(self, subscription: _Subscription) -> Unsubscribe:
        self._subscriptions.append(subscription)
        self._store.changed.connect(subscription.on_store_changed)
        log.debug("Subscribed to %s on %s", subscription.describe(), self._store.path)

        def unsubscribe() -> None:
            if subscription not in self._subscriptions:
                return
            self._subscriptions.remove(subscription)
            self._store.changed.disconnect(subscription.on_store_changed)

        return unsubscribe


def _check_callback(callback: object) -> None:
    if not callable(callback):
        raise TypeError(
            f"Expected `callback` to be callable, got {type(callback).__name__}"
        )


__all__ = ["AnySubscription", "ChangeNotifier", "KeySubscription"]
