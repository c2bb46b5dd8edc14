"""
swap_audit.py

Append-only, capacity-bounded ledger of swap attempts.

Each attempt records the fee the calculator said the user should pay
(expected_fee_bps) next to the fee actually embedded in the submitted quote
(actual_fee_bps), along with the balance and NFT flag that justified it.
The log lives in the Store as one JSON list under a single key, newest
first, capped at max_entries.
"""

import json
import logging
import random
import string
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from loyalswap.anomalies import DEFAULT_THRESHOLDS, detect_anomalies, get_audit_stats
from loyalswap.storage import KEYS, BoundedLog, get_list, set_item

logger = logging.getLogger(__name__)

MAX_AUDIT_ENTRIES = 200
ID_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase

_FIELD_MAP = (
    ("id", "id"),
    ("timestamp", "timestamp"),
    ("wallet", "wallet"),
    ("input_mint", "inputMint"),
    ("output_mint", "outputMint"),
    ("input_amount", "inputAmount"),
    ("expected_fee_bps", "expectedFeeBps"),
    ("actual_fee_bps", "actualFeeBps"),
    ("skr_balance", "skrBalance"),
    ("has_seeker_nft", "hasSeekerNft"),
    ("tx_signature", "txSignature"),
)


@dataclass(frozen=True)
class SwapAuditEntry:
    id: str
    timestamp: int  # epoch ms
    wallet: str
    input_mint: str
    output_mint: str
    input_amount: str
    expected_fee_bps: int
    actual_fee_bps: int
    skr_balance: float
    has_seeker_nft: bool
    tx_signature: Optional[str]

    def to_dict(self):
        return {key: getattr(self, attr) for attr, key in _FIELD_MAP}

    @classmethod
    def from_dict(cls, data):
        fields = {attr: data[key] for attr, key in _FIELD_MAP}
        validate_entry_fields(fields)
        return cls(**fields)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_entry_fields(fields):
    """Raise ValueError if a stored entry has a value of the wrong type."""
    for name in ("id", "wallet", "input_mint", "output_mint", "input_amount"):
        if not isinstance(fields[name], str):
            raise ValueError(f"{name} must be a string, got {fields[name]!r}")
    for name in ("timestamp", "expected_fee_bps", "actual_fee_bps"):
        if not _is_int(fields[name]):
            raise ValueError(f"{name} must be an integer, got {fields[name]!r}")
    if not (_is_int(fields["skr_balance"]) or isinstance(fields["skr_balance"], float)):
        raise ValueError(f"skr_balance must be a number, got {fields['skr_balance']!r}")
    if not isinstance(fields["has_seeker_nft"], bool):
        raise ValueError(f"has_seeker_nft must be a bool, got {fields['has_seeker_nft']!r}")
    if fields["tx_signature"] is not None and not isinstance(fields["tx_signature"], str):
        raise ValueError(f"tx_signature must be a string or null, got {fields['tx_signature']!r}")
    return True


def generate_entry_id(now_ms):
    suffix = "".join(random.choices(ID_SUFFIX_ALPHABET, k=7))
    return f"{now_ms}-{suffix}"


class SwapAuditLog:
    def __init__(self, store, max_entries=MAX_AUDIT_ENTRIES, clock=time.time, thresholds=DEFAULT_THRESHOLDS):
        self.store = store
        self.max_entries = max_entries
        self.clock = clock
        self.thresholds = thresholds
        self.key = KEYS["swap_audit"]
        # One read-modify-write at a time; later appends queue behind the lock
        self._append_lock = threading.Lock()

    def read(self):
        """All entries, newest first. Missing or corrupt data reads as []."""
        entries = []
        for raw in get_list(self.store, self.key):
            try:
                entries.append(SwapAuditEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed audit entry: {e}", extra={'section': self.key})
        return entries

    def append(
        self,
        wallet,
        input_mint,
        output_mint,
        input_amount,
        expected_fee_bps,
        actual_fee_bps,
        skr_balance,
        has_seeker_nft,
        tx_signature=None,
    ):
        """
        Record one swap attempt. Returns the stored entry, or None if the
        store rejected the write. Never raises on persistence failure.
        """
        with self._append_lock:
            now_ms = int(self.clock() * 1000)
            entry = SwapAuditEntry(
                id=generate_entry_id(now_ms),
                timestamp=now_ms,
                wallet=wallet,
                input_mint=input_mint,
                output_mint=output_mint,
                input_amount=str(input_amount),
                expected_fee_bps=int(expected_fee_bps),
                actual_fee_bps=int(actual_fee_bps),
                skr_balance=skr_balance,
                has_seeker_nft=bool(has_seeker_nft),
                tx_signature=tx_signature,
            )

            log = BoundedLog((e.to_dict() for e in self.read()), self.max_entries)
            log.push(entry.to_dict())

            if not set_item(self.store, self.key, log.to_list()):
                logger.error(f"Audit entry {entry.id} not persisted", extra={'section': wallet})
                return None

        if entry.actual_fee_bps < entry.expected_fee_bps:
            logger.warning(
                f"Audit {entry.id}: actual fee {entry.actual_fee_bps} below expected {entry.expected_fee_bps}",
                extra={'section': wallet},
            )
        else:
            logger.debug(f"Audit {entry.id} recorded", extra={'section': wallet})
        return entry

    def clear(self):
        with self._append_lock:
            ok = set_item(self.store, self.key, [])
        logger.info(f"Audit log cleared: {ok}", extra={'section': self.key})
        return ok

    def anomalies(self):
        return detect_anomalies(self.read(), self.thresholds)

    def stats(self):
        return get_audit_stats(self.read(), self.thresholds)

    def export(self, now=None):
        """JSON snapshot {exportedAt, stats, anomalies, entries}; read-only."""
        now = now or datetime.now(timezone.utc)
        entries = self.read()
        return json.dumps(
            {
                "exportedAt": now.isoformat(),
                "stats": get_audit_stats(entries, self.thresholds),
                "anomalies": [a.to_dict() for a in detect_anomalies(entries, self.thresholds)],
                "entries": [e.to_dict() for e in entries],
            },
            indent=2,
        )
