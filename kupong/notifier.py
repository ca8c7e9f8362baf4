"""Results-changed signal.

Admin pages call ``notify(coupon_id)`` after the answer key or winners
change; result and stats views subscribe and reload. Delivery is best
effort and there is no replay, so a late subscriber must load the full
state itself.
"""
import json
import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from kupong.storage import MemoryStore

logger = logging.getLogger(__name__)

RESULTS_UPDATE_KEY = "results_last_update"
RESULTS_UPDATED_EVENT = "resultsUpdated"

Listener = Callable[[int], None]


class LocalEventBus:
    """Same-session publish/subscribe."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Callable) -> Callable[[], None]:
        with self._lock:
            self._subscribers.setdefault(topic, []).append(handler)

        def unsubscribe():
            with self._lock:
                handlers = self._subscribers.get(topic, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def publish(self, topic: str, payload) -> None:
        with self._lock:
            handlers = list(self._subscribers.get(topic, []))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Event handler failed for %s", topic)


class ChangeNotifier:
    def __init__(self, bus: Optional[LocalEventBus] = None, shared_store: Optional[MemoryStore] = None, clock=time.time):
        self.bus = bus or LocalEventBus()
        self.shared_store = shared_store or MemoryStore()
        self._clock = clock

    def notify(self, coupon_id: int) -> dict:
        signal = {"coupon_id": coupon_id, "timestamp": int(self._clock() * 1000)}
        try:
            self.shared_store.set(RESULTS_UPDATE_KEY, json.dumps(signal), origin=self)
            self.bus.publish(RESULTS_UPDATED_EVENT, signal)
        except Exception:
            logger.exception("Could not send results update for coupon %s", coupon_id)
        else:
            logger.info("Results update sent for coupon %s", coupon_id)
        return signal

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        def on_event(signal):
            callback(signal["coupon_id"])

        def on_storage(key, value, origin):
            # a notifier never hears its own storage writes, only other sessions'
            if key != RESULTS_UPDATE_KEY or not value or origin is self:
                return
            try:
                data = json.loads(value)
            except ValueError:
                logger.error("Could not parse results update signal: %r", value)
                return
            callback(data["coupon_id"])

        remove_event = self.bus.subscribe(RESULTS_UPDATED_EVENT, on_event)
        remove_storage = self.shared_store.add_listener(on_storage)

        def unsubscribe():
            remove_event()
            remove_storage()

        return unsubscribe

    def changed_since(self, seen: Optional[dict]) -> Optional[dict]:
        """The latest signal if it differs from `seen`, else None.

        Polling this keeps no listener on the shared store, so sessions that
        go away leave nothing behind.
        """
        signal = self.last_signal()
        if signal is None or signal == seen:
            return None
        return signal

    def last_signal(self) -> Optional[dict]:
        raw = self.shared_store.get(RESULTS_UPDATE_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None
