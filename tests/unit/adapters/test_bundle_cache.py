import streamlit as st

from src.dailymix.adapters.bundle_cache import StateBundleCache
from src.dailymix.presentation.state_provider import StreamlitStateProvider


def make_cache() -> StateBundleCache:
    return StateBundleCache(StreamlitStateProvider())


def test_missing_key_reads_as_none():
    assert make_cache().get("daily-questions:u:2026-10-18:v1") is None


def test_stores_and_retrieves_values_by_key():
    cache = make_cache()
    value = {"a": 1, "b": "x", "ids": ["E1", "M2"]}

    cache.set("test:key:1", value)

    assert cache.get("test:key:1") == value
    # Stored serialized, the way a browser key/value store would hold it
    assert isinstance(st.session_state["test:key:1"], str)


def test_unreadable_entry_reads_as_none_and_is_dropped():
    st.session_state["test:key:2"] = "{not json"
    cache = make_cache()

    assert cache.get("test:key:2") is None
    assert "test:key:2" not in st.session_state


def test_unserializable_value_is_skipped():
    cache = make_cache()

    cache.set("test:key:3", {"when": object()})

    assert cache.get("test:key:3") is None
