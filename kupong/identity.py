"""Per-installation participant identity.

The device id is generated and kept by the client. It is an opaque token
with no server-side trust behind it, only good enough to keep one coupon
per device.
"""
import uuid

from kupong.storage import KeyValueStore, load_from_storage, save_to_storage

DEVICE_ID_KEY = "device_id"
PLAYER_NAME_KEY = "playerName"
SUBMITTED_COUPONS_KEY = "submittedCoupons"


def get_device_id(store: KeyValueStore) -> str:
    device_id = store.get(DEVICE_ID_KEY)
    if not device_id:
        device_id = str(uuid.uuid4())
        store.set(DEVICE_ID_KEY, device_id)
    return device_id


def short_device_id(device_id: str) -> str:
    if len(device_id) > 12:
        return f"{device_id[:8]}...{device_id[-4:]}"
    return device_id


def remember_player_name(store: KeyValueStore, name: str):
    save_to_storage(store, PLAYER_NAME_KEY, name.strip())


def load_player_name(store: KeyValueStore) -> str:
    return load_from_storage(store, PLAYER_NAME_KEY, "")


def submitted_coupons(store: KeyValueStore) -> list:
    return load_from_storage(store, SUBMITTED_COUPONS_KEY, [])


def mark_submitted(store: KeyValueStore, coupon_id: int):
    coupons = submitted_coupons(store)
    if coupon_id not in coupons:
        save_to_storage(store, SUBMITTED_COUPONS_KEY, coupons + [coupon_id])


def unmark_submitted(store: KeyValueStore, coupon_id: int):
    save_to_storage(store, SUBMITTED_COUPONS_KEY, [c for c in submitted_coupons(store) if c != coupon_id])
