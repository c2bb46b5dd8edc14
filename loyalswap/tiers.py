# tiers.py
import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class CampaignConfigError(ValueError):
    """Raised when a campaign or tier ladder is malformed."""


@dataclass(frozen=True)
class FeeTier:
    level: int
    name: str
    min_balance: float
    fee_bps: int
    icon: str = ""


def validate_tiers(tiers, section="global"):
    """
    Check the ladder invariants: non-empty, starts at 0, thresholds strictly
    ascending, fees non-increasing and non-negative.
    Raises CampaignConfigError on the first violation.
    """
    if not tiers:
        raise CampaignConfigError(f"[{section}] tier ladder is empty")
    if tiers[0].min_balance != 0:
        raise CampaignConfigError(
            f"[{section}] first tier must start at 0, got {tiers[0].min_balance}"
        )

    prev = None
    for tier in tiers:
        if tier.level <= 0:
            raise CampaignConfigError(f"[{section}] tier {tier.name} has level {tier.level}")
        if tier.fee_bps < 0:
            raise CampaignConfigError(f"[{section}] tier {tier.name} has negative fee")
        if tier.min_balance < 0:
            raise CampaignConfigError(f"[{section}] tier {tier.name} has negative min_balance")
        if prev is not None:
            if tier.min_balance <= prev.min_balance:
                raise CampaignConfigError(
                    f"[{section}] tier {tier.name} min_balance {tier.min_balance} "
                    f"not above {prev.name} ({prev.min_balance})"
                )
            if tier.fee_bps > prev.fee_bps:
                raise CampaignConfigError(
                    f"[{section}] tier {tier.name} fee {tier.fee_bps} above {prev.name} ({prev.fee_bps})"
                )
        prev = tier

    logger.debug(f"Ladder OK: {len(tiers)} tiers", extra={'section': section})
    return True


def _tier_index(tiers, balance):
    if not tiers:
        raise CampaignConfigError("Cannot resolve a tier from an empty ladder")
    # NaN compares False against everything, so it falls through to tier 0
    for i in range(len(tiers) - 1, -1, -1):
        if balance >= tiers[i].min_balance:
            return i
    return 0


def get_tier_for_balance(tiers, balance):
    return tiers[_tier_index(tiers, balance)]


def get_next_tier(tiers, balance):
    idx = _tier_index(tiers, balance)
    if idx < len(tiers) - 1:
        return tiers[idx + 1]
    return None


def get_progress_to_next_tier(tiers, balance):
    """Percentage [0, 100] of the way from the current tier to the next."""
    idx = _tier_index(tiers, balance)
    if idx >= len(tiers) - 1:
        return 100.0
    if math.isnan(balance):
        return 0.0

    current = tiers[idx]
    nxt = tiers[idx + 1]
    progress = (balance - current.min_balance) / (nxt.min_balance - current.min_balance) * 100
    return max(0.0, min(100.0, progress))


def get_tokens_to_next_tier(tiers, balance):
    nxt = get_next_tier(tiers, balance)
    if nxt is None:
        return 0
    if math.isnan(balance):
        return nxt.min_balance
    return max(0, nxt.min_balance - balance)


def format_fee(fee_bps):
    if fee_bps == 0:
        return "FREE"
    return f"{fee_bps / 100:.2f}%"


def calculate_savings(swap_amount, fee_bps, tiers):
    """Fee saved on swap_amount compared to paying the base tier fee."""
    base_fee = swap_amount * (tiers[0].fee_bps / 10_000)
    actual_fee = swap_amount * (fee_bps / 10_000)
    return base_fee - actual_fee
