"""
campaigns.py

Campaign model and date-driven resolution.

A campaign bundles a fee-tier ladder, bonus rules and a validity window for
one sponsor token. Several campaigns may be defined at once; which one is
active is derived from the clock, never stored. Every function here takes
``now`` explicitly so resolution is deterministic under test.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Tuple

from loyalswap.tiers import CampaignConfigError, FeeTier, validate_tiers

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


class CampaignStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"


class CheckType(str, Enum):
    NFT = "nft"
    TOKEN = "token"
    ACTIVITY = "activity"


class RewardType(str, Enum):
    FEE_DISCOUNT = "fee_discount"
    AIRDROP = "airdrop"
    NFT = "nft"
    MULTIPLIER = "multiplier"


@dataclass(frozen=True)
class BonusCondition:
    id: str
    name: str
    description: str
    bonus_bps: int
    check_type: CheckType
    check_value: str


@dataclass(frozen=True)
class CampaignReward:
    type: RewardType
    name: str
    description: str
    requirement: Optional[str] = None
    value: Optional[str] = None


@dataclass(frozen=True)
class ColorScheme:
    primary: str
    secondary: str


@dataclass(frozen=True)
class TimeRemaining:
    days: int
    hours: int
    minutes: int
    total: int  # milliseconds


@dataclass(frozen=True)
class Campaign:
    id: str
    name: str
    description: str
    sponsor_name: str
    token_mint: str
    token_symbol: str
    token_decimals: int
    tiers: Tuple[FeeTier, ...]
    start_date: datetime
    end_date: Optional[datetime] = None  # None = perpetual
    rewards: Tuple[CampaignReward, ...] = ()
    bonuses: Tuple[BonusCondition, ...] = ()
    colors: ColorScheme = field(default_factory=lambda: ColorScheme("#9945FF", "#14F195"))
    sponsor_logo: Optional[str] = None

    def __post_init__(self):
        # Lists from config become tuples
        object.__setattr__(self, "tiers", tuple(self.tiers))
        object.__setattr__(self, "rewards", tuple(self.rewards))
        object.__setattr__(self, "bonuses", tuple(self.bonuses))
        validate_campaign(self)

    @property
    def is_perpetual(self):
        return self.end_date is None


def validate_campaign(campaign):
    validate_tiers(campaign.tiers, section=campaign.id)

    seen = set()
    for bonus in campaign.bonuses:
        if bonus.id in seen:
            raise CampaignConfigError(f"[{campaign.id}] duplicate bonus id '{bonus.id}'")
        if bonus.bonus_bps < 0:
            raise CampaignConfigError(f"[{campaign.id}] bonus '{bonus.id}' has negative bonus_bps")
        seen.add(bonus.id)

    if campaign.start_date.tzinfo is None:
        raise CampaignConfigError(f"[{campaign.id}] start_date must be timezone-aware")
    if campaign.end_date is not None:
        if campaign.end_date.tzinfo is None:
            raise CampaignConfigError(f"[{campaign.id}] end_date must be timezone-aware")
        if campaign.end_date < campaign.start_date:
            raise CampaignConfigError(f"[{campaign.id}] end_date before start_date")
    return True


def get_campaign_status(campaign, now):
    if now < campaign.start_date:
        return CampaignStatus.UPCOMING
    # Still active at the exact end instant
    if campaign.end_date is not None and now > campaign.end_date:
        return CampaignStatus.ENDED
    return CampaignStatus.ACTIVE


def get_active_campaign(registry, now):
    for campaign in registry:
        if get_campaign_status(campaign, now) == CampaignStatus.ACTIVE:
            return campaign
    logger.warning(f"No active campaign among {len(registry)} at {now.isoformat()}")
    return None


def resolve_campaign(registry, now, fallback):
    """Active campaign, or fallback when none is active."""
    active = get_active_campaign(registry, now)
    if active is None:
        logger.info(f"Falling back to campaign {fallback.id}", extra={'section': fallback.id})
        return fallback
    return active


def get_time_remaining(campaign, now):
    if campaign.end_date is None:
        return None

    delta = campaign.end_date - now
    total = delta // timedelta(milliseconds=1)
    if total <= 0:
        return TimeRemaining(days=0, hours=0, minutes=0, total=0)

    days = total // MS_PER_DAY
    hours = (total % MS_PER_DAY) // MS_PER_HOUR
    minutes = (total % MS_PER_HOUR) // MS_PER_MINUTE
    return TimeRemaining(days=days, hours=hours, minutes=minutes, total=total)


def format_time_remaining(campaign, now):
    remaining = get_time_remaining(campaign, now)
    if remaining is None:
        return "Ongoing"
    if remaining.total == 0:
        return "Ended"
    if remaining.days > 0:
        return f"{remaining.days}d {remaining.hours}h remaining"
    if remaining.hours > 0:
        return f"{remaining.hours}h {remaining.minutes}m remaining"
    return f"{remaining.minutes}m remaining"
