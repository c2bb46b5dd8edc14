# ─── fee_calculator.py ────────────────────────────────────────────────────────
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from loyalswap.campaigns import BonusCondition, Campaign, CheckType
from loyalswap.tiers import (
    FeeTier,
    get_next_tier,
    get_progress_to_next_tier,
    get_tier_for_balance,
    get_tokens_to_next_tier,
)

logger = logging.getLogger(__name__)

BonusPredicate = Callable[[BonusCondition], bool]


@dataclass(frozen=True)
class FeeSnapshot:
    campaign_id: str
    balance: float
    tier: FeeTier
    next_tier: Optional[FeeTier]
    tokens_to_next_tier: float
    progress: float
    bonus_bps: int
    effective_fee_bps: int


def no_bonus(bonus):
    return False


def nft_bonus_predicate(has_nft):
    """Adapt a resolved NFT-ownership flag into a bonus predicate."""

    def predicate(bonus):
        return has_nft and bonus.check_type == CheckType.NFT

    return predicate


def calculate_bonuses(campaign: Campaign, has_bonus: BonusPredicate) -> int:
    total = 0
    for bonus in campaign.bonuses:
        if has_bonus(bonus):
            logger.debug(
                f"Bonus {bonus.id} applies: -{bonus.bonus_bps} bps",
                extra={'section': campaign.id},
            )
            total += bonus.bonus_bps
    return total


def get_effective_fee(campaign: Campaign, balance: float, has_bonus: BonusPredicate) -> int:
    """
    Fee in bps the holder of `balance` pays under `campaign`.

    Tier fee minus every bonus the predicate grants, clamped at 0. This is
    the value that must be recorded as expected_fee_bps in the audit log.
    """
    tier = get_tier_for_balance(campaign.tiers, balance)
    bonus = calculate_bonuses(campaign, has_bonus)
    fee = max(0, tier.fee_bps - bonus)
    logger.debug(
        f"Effective fee: tier={tier.name} ({tier.fee_bps} bps), bonus={bonus}, fee={fee}",
        extra={'section': campaign.id},
    )
    return fee


def compute_fee_snapshot(campaign: Campaign, balance: float, has_bonus: BonusPredicate) -> FeeSnapshot:
    tier = get_tier_for_balance(campaign.tiers, balance)
    bonus = calculate_bonuses(campaign, has_bonus)
    return FeeSnapshot(
        campaign_id=campaign.id,
        balance=balance,
        tier=tier,
        next_tier=get_next_tier(campaign.tiers, balance),
        tokens_to_next_tier=get_tokens_to_next_tier(campaign.tiers, balance),
        progress=get_progress_to_next_tier(campaign.tiers, balance),
        bonus_bps=bonus,
        effective_fee_bps=max(0, tier.fee_bps - bonus),
    )
