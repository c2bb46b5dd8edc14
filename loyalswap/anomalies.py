"""
anomalies.py

Fee-manipulation detection over swap audit entries.

Pure functions only: nothing here touches storage or mutates the entries it
is given. An anomaly is a forensic finding for later review; it never
blocks a swap.

Checks:
  fee_mismatch          actual fee below the fee the tier/bonus system entitles
  zero_fee_low_balance  0 bps without a top-tier balance or the NFT bonus
  repeated_zero_fee     one wallet hitting zero_fee_low_balance repeatedly
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class AnomalyType(str, Enum):
    FEE_MISMATCH = "fee_mismatch"
    ZERO_FEE_LOW_BALANCE = "zero_fee_low_balance"
    REPEATED_ZERO_FEE = "repeated_zero_fee"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AnomalyThresholds:
    # Balance below which a 0 bps swap without the NFT is suspicious
    zero_fee_balance: float = 100_000
    # Qualifying zero-fee swaps per wallet before the pattern is flagged
    repeated_zero_fee_count: int = 3


DEFAULT_THRESHOLDS = AnomalyThresholds()


@dataclass(frozen=True)
class AuditAnomaly:
    entry_id: str
    type: AnomalyType
    description: str
    severity: Severity

    def to_dict(self):
        return {
            "entryId": self.entry_id,
            "type": self.type.value,
            "description": self.description,
            "severity": self.severity.value,
        }


def is_zero_fee_low_balance(entry, thresholds=DEFAULT_THRESHOLDS):
    return (
        entry.actual_fee_bps == 0
        and entry.skr_balance < thresholds.zero_fee_balance
        and not entry.has_seeker_nft
    )


def _earliest(indexed_entries):
    # Oldest timestamp wins; on a tie the entry further down a newest-first log is older
    return min(indexed_entries, key=lambda pair: (pair[1].timestamp, -pair[0]))[1]


def detect_anomalies(entries, thresholds=DEFAULT_THRESHOLDS):
    anomalies = []
    zero_fee_by_wallet = defaultdict(list)

    for i, entry in enumerate(entries):
        if entry.actual_fee_bps < entry.expected_fee_bps:
            anomalies.append(
                AuditAnomaly(
                    entry_id=entry.id,
                    type=AnomalyType.FEE_MISMATCH,
                    description=(
                        f"Fee mismatch: expected {entry.expected_fee_bps}bps, "
                        f"actual {entry.actual_fee_bps}bps"
                    ),
                    severity=Severity.HIGH if entry.actual_fee_bps == 0 else Severity.MEDIUM,
                )
            )

        if is_zero_fee_low_balance(entry, thresholds):
            anomalies.append(
                AuditAnomaly(
                    entry_id=entry.id,
                    type=AnomalyType.ZERO_FEE_LOW_BALANCE,
                    description=f"Zero fee with only {entry.skr_balance:,} SKR and no NFT",
                    severity=Severity.HIGH,
                )
            )
            zero_fee_by_wallet[entry.wallet].append((i, entry))

    for wallet, flagged in zero_fee_by_wallet.items():
        if len(flagged) >= thresholds.repeated_zero_fee_count:
            # Oldest qualifying swap, not the newest-first head of the log
            earliest = _earliest(flagged)
            anomalies.append(
                AuditAnomaly(
                    entry_id=earliest.id,
                    type=AnomalyType.REPEATED_ZERO_FEE,
                    description=(
                        f"Wallet {wallet[:8]}... has {len(flagged)} zero-fee swaps with low SKR balance"
                    ),
                    severity=Severity.HIGH,
                )
            )
            logger.warning(
                f"Repeated zero-fee pattern: {len(flagged)} entries",
                extra={'section': wallet},
            )

    if anomalies:
        logger.info(f"Detected {len(anomalies)} anomalies across {len(entries)} entries")
    return anomalies


def round_half_up(value):
    return int(math.floor(value + 0.5))


def get_audit_stats(entries, thresholds=DEFAULT_THRESHOLDS):
    if not entries:
        return {
            "totalSwaps": 0,
            "anomalyCount": 0,
            "averageFeeBps": 0,
            "zeroFeeCount": 0,
        }

    total_fees = sum(e.actual_fee_bps for e in entries)
    return {
        "totalSwaps": len(entries),
        "anomalyCount": len(detect_anomalies(entries, thresholds)),
        "averageFeeBps": round_half_up(total_fees / len(entries)),
        "zeroFeeCount": sum(1 for e in entries if e.actual_fee_bps == 0),
    }


def anomalies_by_severity(anomalies):
    counts = {s.value: 0 for s in Severity}
    for anomaly in anomalies:
        counts[anomaly.severity.value] += 1
    return counts
