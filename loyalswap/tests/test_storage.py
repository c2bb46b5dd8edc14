import json

import pytest

from drivers.json_store import MemoryStore
from loyalswap.storage import (
    CUSTOM_TOKEN_CACHE_TTL_MS,
    DEFAULT_FAVORITE_MINTS,
    DEFAULT_SETTINGS,
    MAX_HISTORY_ENTRIES,
    BoundedLog,
    add_custom_token,
    add_custom_tokens,
    add_favorite_token,
    add_swap_record,
    clear_swap_history,
    get_app_settings,
    get_custom_tokens,
    get_favorite_tokens,
    get_item,
    get_swap_history,
    make_swap_record,
    remove_favorite_token,
    reset_app_settings,
    set_item,
    update_app_settings,
)


class ExplodingStore:
    def get_item(self, key):
        raise OSError("unavailable")

    def set_item(self, key, value):
        raise OSError("unavailable")

    def remove_item(self, key):
        raise OSError("unavailable")


@pytest.fixture
def store():
    return MemoryStore()


def token(address, symbol=None):
    return {"address": address, "symbol": symbol or address.upper(), "decimals": 6}


# ── BoundedLog ───────────────────────────────────────────────────────────────
def test_bounded_log_newest_first():
    log = BoundedLog(max_entries=3)
    for i in range(5):
        log.push(i)
    assert log.to_list() == [4, 3, 2]
    assert len(log) == 3
    assert list(log) == [4, 3, 2]


def test_bounded_log_truncates_initial_items():
    log = BoundedLog(range(10), max_entries=4)
    assert log.to_list() == [0, 1, 2, 3]
    log.push("new")
    assert log.to_list() == ["new", 0, 1, 2]


def test_bounded_log_rejects_bad_capacity():
    with pytest.raises(ValueError):
        BoundedLog(max_entries=0)


# ── JSON helpers ─────────────────────────────────────────────────────────────
def test_get_set_roundtrip(store):
    assert set_item(store, "k", {"a": [1, 2]}) is True
    assert get_item(store, "k") == {"a": [1, 2]}
    assert json.loads(store.get_item("k")) == {"a": [1, 2]}


def test_unreachable_store_degrades():
    broken = ExplodingStore()
    assert get_item(broken, "k") is None
    assert set_item(broken, "k", 1) is False
    assert get_swap_history(broken) == []
    assert get_app_settings(broken) == DEFAULT_SETTINGS


def test_corrupt_value_reads_none():
    assert get_item(MemoryStore({"k": "{oops"}), "k") is None


# ── Swap history ─────────────────────────────────────────────────────────────
def test_swap_record_shape():
    rec = make_swap_record("in", "out", 10, 20, "sig", "success", now_ms=5)
    assert rec == {
        "id": "sig",
        "timestamp": 5,
        "inputMint": "in",
        "outputMint": "out",
        "inputAmount": "10",
        "outputAmount": "20",
        "signature": "sig",
        "status": "success",
    }


def test_failed_swap_record_uses_timestamp_id():
    rec = make_swap_record("in", "out", "10", "0", None, "failed", now_ms=77)
    assert rec["id"] == "77"
    assert rec["signature"] is None


def test_history_cap(store):
    for i in range(MAX_HISTORY_ENTRIES + 5):
        add_swap_record(store, make_swap_record("in", "out", i, i, f"s{i}", "success", now_ms=i))
    history = get_swap_history(store)
    assert len(history) == MAX_HISTORY_ENTRIES
    assert history[0]["id"] == f"s{MAX_HISTORY_ENTRIES + 4}"


def test_clear_history(store):
    add_swap_record(store, make_swap_record("in", "out", 1, 1, "s", "success", now_ms=1))
    assert clear_swap_history(store)
    assert get_swap_history(store) == []


# ── Favorites ────────────────────────────────────────────────────────────────
def test_favorites_default(store):
    assert get_favorite_tokens(store) == list(DEFAULT_FAVORITE_MINTS)


def test_add_and_remove_favorite(store):
    add_favorite_token(store, "NewMint")
    add_favorite_token(store, "NewMint")
    favorites = get_favorite_tokens(store)
    assert favorites[-1] == "NewMint"
    assert favorites.count("NewMint") == 1

    remove_favorite_token(store, DEFAULT_FAVORITE_MINTS[0])
    assert DEFAULT_FAVORITE_MINTS[0] not in get_favorite_tokens(store)


# ── Custom tokens ────────────────────────────────────────────────────────────
def test_custom_tokens_empty(store):
    assert get_custom_tokens(store, now_ms=0) == []


def test_custom_tokens_dedupe_and_order(store):
    add_custom_tokens(store, [token("a"), token("b")], now_ms=1_000)
    add_custom_tokens(store, [token("b"), token("c")], now_ms=2_000)
    assert [t["address"] for t in get_custom_tokens(store, now_ms=2_000)] == ["c", "a", "b"]


def test_custom_tokens_expire(store):
    add_custom_token(store, token("a"), now_ms=0)
    assert get_custom_tokens(store, now_ms=CUSTOM_TOKEN_CACHE_TTL_MS) != []
    assert get_custom_tokens(store, now_ms=CUSTOM_TOKEN_CACHE_TTL_MS + 1) == []


@pytest.mark.parametrize("updated_at", ["x", None, True, [1]])
def test_custom_tokens_bad_timestamp_reads_expired(updated_at):
    store = MemoryStore({"@custom_tokens": json.dumps({"tokens": [token("a")], "updatedAt": updated_at})})
    assert get_custom_tokens(store, now_ms=5) == []
    assert add_custom_token(store, token("b"), now_ms=5)
    assert [t["address"] for t in get_custom_tokens(store, now_ms=5)] == ["b"]


def test_custom_tokens_skip_non_dict_items():
    cached = {"tokens": ["junk", 3, {"symbol": "NOADDR"}, token("a")], "updatedAt": 0}
    store = MemoryStore({"@custom_tokens": json.dumps(cached)})
    assert [t["address"] for t in get_custom_tokens(store, now_ms=0)] == ["a"]
    assert add_custom_token(store, token("b"), now_ms=0)
    assert [t["address"] for t in get_custom_tokens(store, now_ms=0)] == ["b", "a"]


def test_custom_tokens_bad_list_reads_empty():
    store = MemoryStore({"@custom_tokens": json.dumps({"tokens": "nope", "updatedAt": 0})})
    assert get_custom_tokens(store, now_ms=0) == []


def test_custom_tokens_cap(store):
    add_custom_tokens(store, [token(f"t{i}") for i in range(8)], now_ms=0, max_entries=5)
    assert [t["address"] for t in get_custom_tokens(store, now_ms=0)] == ["t0", "t1", "t2", "t3", "t4"]


# ── Settings ─────────────────────────────────────────────────────────────────
def test_settings_defaults(store):
    assert get_app_settings(store) == DEFAULT_SETTINGS


def test_update_settings_merges(store):
    update_app_settings(store, preferredSlippage=100)
    settings = get_app_settings(store)
    assert settings["preferredSlippage"] == 100
    assert settings["confettiEnabled"] is True


def test_update_unknown_setting(store):
    with pytest.raises(KeyError):
        update_app_settings(store, darkMode=True)


def test_reset_settings(store):
    update_app_settings(store, confettiEnabled=False)
    reset_app_settings(store)
    assert get_app_settings(store) == DEFAULT_SETTINGS
