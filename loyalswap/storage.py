"""
storage.py

JSON persistence helpers over a Store collaborator.

A Store is anything exposing get_item/set_item/remove_item on raw strings
(see drivers/json_store.py). Everything here degrades to a default value
instead of raising: a corrupt or unreachable store reads as "no data" and a
failed write returns False.
"""

import json
import logging
import time
from collections import deque
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

KEYS = {
    "swap_history": "@swap_history",
    "swap_audit": "@swap_audit",
    "favorite_tokens": "@favorite_tokens",
    "custom_tokens": "@custom_tokens",
    "app_settings": "@app_settings",
}

MAX_HISTORY_ENTRIES = 50
MAX_CUSTOM_TOKENS = 100
CUSTOM_TOKEN_CACHE_TTL_MS = 24 * 60 * 60 * 1000

DEFAULT_FAVORITE_MINTS = (
    "So11111111111111111111111111111111111111112",  # SOL
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",  # USDC
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",  # USDT
    "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",  # BONK
    "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",  # JUP
    "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",  # WIF
    "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",  # RAY
)

DEFAULT_SETTINGS = {
    "confettiEnabled": True,
    "hapticFeedbackEnabled": True,
    "autoRefreshQuotes": True,
    "preferredSlippage": 50,  # bps
}


class Store(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class BoundedLog:
    """
    Newest-first buffer with a fixed capacity. Adding past capacity evicts
    the oldest item by insertion order.
    """

    def __init__(self, items=(), max_entries=MAX_HISTORY_ENTRIES):
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._items = deque(list(items)[:max_entries], maxlen=max_entries)

    def push(self, item):
        self._items.appendleft(item)
        return item

    def to_list(self):
        return list(self._items)

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)


def _now_ms():
    return int(time.time() * 1000)


def get_item(store, key):
    try:
        value = store.get_item(key)
        if value is None:
            return None
        return json.loads(value)
    except Exception as e:
        logger.warning(f"Read failed, treating as empty: {e}", extra={'section': key})
        return None


def set_item(store, key, value):
    try:
        store.set_item(key, json.dumps(value))
        return True
    except Exception as e:
        logger.error(f"Write failed: {e}", extra={'section': key})
        return False


def remove_item(store, key):
    try:
        store.remove_item(key)
        return True
    except Exception as e:
        logger.error(f"Remove failed: {e}", extra={'section': key})
        return False


def get_list(store, key):
    value = get_item(store, key)
    if not isinstance(value, list):
        if value is not None:
            logger.warning(f"Expected a list, got {type(value).__name__}", extra={'section': key})
        return []
    return value


# ── Swap history ─────────────────────────────────────────────────────────────
def make_swap_record(input_mint, output_mint, input_amount, output_amount, signature, status, now_ms=None):
    ts = now_ms if now_ms is not None else _now_ms()
    return {
        "id": signature or f"{ts}",
        "timestamp": ts,
        "inputMint": input_mint,
        "outputMint": output_mint,
        "inputAmount": str(input_amount),
        "outputAmount": str(output_amount),
        "signature": signature,
        "status": status,
    }


def get_swap_history(store):
    return get_list(store, KEYS["swap_history"])


def add_swap_record(store, record, max_entries=MAX_HISTORY_ENTRIES):
    history = BoundedLog(get_swap_history(store), max_entries)
    history.push(record)
    return set_item(store, KEYS["swap_history"], history.to_list())


def clear_swap_history(store):
    return set_item(store, KEYS["swap_history"], [])


# ── Favorite tokens ──────────────────────────────────────────────────────────
def get_favorite_tokens(store):
    favorites = get_item(store, KEYS["favorite_tokens"])
    if isinstance(favorites, dict) and isinstance(favorites.get("mints"), list):
        return favorites["mints"]
    return list(DEFAULT_FAVORITE_MINTS)


def add_favorite_token(store, mint):
    mints = get_favorite_tokens(store)
    if mint in mints:
        return True
    return set_item(store, KEYS["favorite_tokens"], {"mints": mints + [mint]})


def remove_favorite_token(store, mint):
    mints = [m for m in get_favorite_tokens(store) if m != mint]
    return set_item(store, KEYS["favorite_tokens"], {"mints": mints})


# ── Custom token cache ───────────────────────────────────────────────────────
def get_custom_tokens(store, now_ms=None, ttl_ms=CUSTOM_TOKEN_CACHE_TTL_MS):
    cache = get_item(store, KEYS["custom_tokens"])
    if not isinstance(cache, dict):
        return []
    now_ms = now_ms if now_ms is not None else _now_ms()
    updated_at = cache.get("updatedAt")
    if not isinstance(updated_at, int) or isinstance(updated_at, bool) or now_ms - updated_at > ttl_ms:
        logger.debug("Custom token cache expired", extra={'section': KEYS["custom_tokens"]})
        return []
    tokens = cache.get("tokens")
    if not isinstance(tokens, list):
        return []
    return [t for t in tokens if isinstance(t, dict) and isinstance(t.get("address"), str)]


def add_custom_tokens(store, tokens, now_ms=None, max_entries=MAX_CUSTOM_TOKENS):
    """Prepend unseen tokens (by address) to the cache, keeping the newest max_entries."""
    now_ms = now_ms if now_ms is not None else _now_ms()
    existing = get_custom_tokens(store, now_ms=now_ms)
    seen = {t.get("address") for t in existing}

    fresh = []
    for token in tokens:
        if token.get("address") not in seen:
            fresh.append(token)
            seen.add(token.get("address"))
    if not fresh:
        return True

    cache = BoundedLog(existing, max_entries)
    for token in reversed(fresh):
        cache.push(token)
    return set_item(store, KEYS["custom_tokens"], {"tokens": cache.to_list(), "updatedAt": now_ms})


def add_custom_token(store, token, now_ms=None, max_entries=MAX_CUSTOM_TOKENS):
    return add_custom_tokens(store, [token], now_ms=now_ms, max_entries=max_entries)


# ── App settings ─────────────────────────────────────────────────────────────
def get_app_settings(store):
    settings = get_item(store, KEYS["app_settings"])
    if not isinstance(settings, dict):
        return dict(DEFAULT_SETTINGS)
    merged = dict(DEFAULT_SETTINGS)
    merged.update(settings)
    return merged


def update_app_settings(store, **updates):
    unknown = set(updates) - set(DEFAULT_SETTINGS)
    if unknown:
        raise KeyError(f"Unknown settings: {sorted(unknown)}")
    current = get_app_settings(store)
    current.update(updates)
    return set_item(store, KEYS["app_settings"], current)


def reset_app_settings(store):
    return set_item(store, KEYS["app_settings"], dict(DEFAULT_SETTINGS))
