import streamlit as st

from kupong.logging_config import setup_logging

from kupong.db import init_db
from kupong.identity import DEVICE_ID_KEY, get_device_id
from kupong.notifier import ChangeNotifier, LocalEventBus
from kupong.storage import MappingStore, MemoryStore


@st.cache_resource
def get_shared_store() -> MemoryStore:
    """One store for all sessions; carries the results-changed signal between tabs."""
    return MemoryStore()


@st.cache_resource
def _bootstrap_db():
    init_db()
    return True


def init_app():
    setup_logging()
    _bootstrap_db()

    if "local_store" not in st.session_state:
        st.session_state.local_store = MappingStore(st.session_state)

    store = st.session_state.local_store
    # the device id rides along in the URL so a reload keeps the same identity
    url_device = st.query_params.get("device")
    if url_device and not store.get(DEVICE_ID_KEY):
        store.set(DEVICE_ID_KEY, url_device)
    device_id = get_device_id(store)
    if st.query_params.get("device") != device_id:
        st.query_params["device"] = device_id

    if "notifier" not in st.session_state:
        st.session_state.notifier = ChangeNotifier(LocalEventBus(), get_shared_store())

    if "results_seen" not in st.session_state:
        st.session_state.results_seen = st.session_state.notifier.last_signal()

    if "is_admin" not in st.session_state:
        st.session_state.is_admin = False


def get_local_store():
    return st.session_state.local_store


def get_notifier() -> ChangeNotifier:
    return st.session_state.notifier


def current_device_id() -> str:
    return get_device_id(get_local_store())


def take_result_update():
    """The newest results signal this session has not acted on, if any."""
    signal = get_notifier().changed_since(st.session_state.get("results_seen"))
    if signal is not None:
        st.session_state.results_seen = signal
    return signal
