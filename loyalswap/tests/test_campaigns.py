from datetime import datetime, timedelta, timezone

import pytest

from loyalswap.campaigns import (
    Campaign,
    CampaignStatus,
    TimeRemaining,
    format_time_remaining,
    get_active_campaign,
    get_campaign_status,
    get_time_remaining,
    resolve_campaign,
)
from loyalswap.quote import is_valid_mint_address
from loyalswap.registry import (
    ALL_CAMPAIGNS,
    CAMPAIGN_IDEAS,
    EXAMPLE_LAUNCH_CAMPAIGN,
    OTD_PERPETUAL,
    SKR_SEASON_1,
    find_campaign,
)
from loyalswap.tiers import CampaignConfigError, FeeTier

START = datetime(2026, 6, 1, tzinfo=timezone.utc)
END = datetime(2026, 6, 30, 23, 59, 59, tzinfo=timezone.utc)


def make_campaign(id="test", start=START, end=END, tiers=None):
    return Campaign(
        id=id,
        name=id,
        description="",
        sponsor_name="",
        token_mint="mint",
        token_symbol="TKN",
        token_decimals=6,
        tiers=tiers if tiers is not None else (FeeTier(1, "base", 0, 25),),
        start_date=start,
        end_date=end,
    )


def test_status_upcoming_active_ended():
    c = make_campaign()
    assert get_campaign_status(c, START - timedelta(seconds=1)) == CampaignStatus.UPCOMING
    assert get_campaign_status(c, START) == CampaignStatus.ACTIVE
    assert get_campaign_status(c, END + timedelta(days=1)) == CampaignStatus.ENDED


def test_status_end_boundary():
    c = make_campaign()
    assert get_campaign_status(c, END) == CampaignStatus.ACTIVE
    assert get_campaign_status(c, END + timedelta(milliseconds=1)) == CampaignStatus.ENDED


def test_perpetual_never_ends():
    c = make_campaign(end=None)
    assert get_campaign_status(c, datetime(2999, 1, 1, tzinfo=timezone.utc)) == CampaignStatus.ACTIVE
    assert c.is_perpetual


def test_active_campaign_first_match():
    a = make_campaign("a", end=START + timedelta(days=1))
    b = make_campaign("b")
    registry = (a, b)
    assert get_active_campaign(registry, START) is a
    assert get_active_campaign(registry, START + timedelta(days=2)) is b
    assert get_active_campaign(registry, END + timedelta(days=1)) is None


def test_active_campaign_empty_registry():
    assert get_active_campaign((), START) is None


def test_resolve_campaign_fallback():
    assert resolve_campaign((), START, SKR_SEASON_1) is SKR_SEASON_1


def test_builtin_registry_always_resolves():
    now = datetime(2026, 10, 19, tzinfo=timezone.utc)
    assert get_active_campaign(ALL_CAMPAIGNS, now) is SKR_SEASON_1


def test_time_remaining_perpetual():
    assert get_time_remaining(make_campaign(end=None), START) is None


def test_time_remaining_after_end():
    c = make_campaign()
    assert get_time_remaining(c, END) == TimeRemaining(0, 0, 0, 0)
    assert get_time_remaining(c, END + timedelta(hours=5)) == TimeRemaining(0, 0, 0, 0)


def test_time_remaining_truncates():
    c = make_campaign()
    now = END - timedelta(days=2, hours=3, minutes=4, seconds=59)
    remaining = get_time_remaining(c, now)
    assert (remaining.days, remaining.hours, remaining.minutes) == (2, 3, 4)
    assert remaining.total == ((2 * 24 + 3) * 60 + 4) * 60_000 + 59_000


def test_format_time_remaining():
    c = make_campaign()
    assert format_time_remaining(make_campaign(end=None), START) == "Ongoing"
    assert format_time_remaining(c, END) == "Ended"
    assert format_time_remaining(c, END - timedelta(days=1, hours=2)) == "1d 2h remaining"
    assert format_time_remaining(c, END - timedelta(hours=2, minutes=5)) == "2h 5m remaining"
    assert format_time_remaining(c, END - timedelta(minutes=7)) == "7m remaining"


def test_campaign_requires_tiers():
    with pytest.raises(CampaignConfigError):
        make_campaign(tiers=())


def test_campaign_requires_aware_dates():
    with pytest.raises(CampaignConfigError):
        make_campaign(start=datetime(2026, 1, 1))


def test_campaign_rejects_inverted_window():
    with pytest.raises(CampaignConfigError):
        make_campaign(start=END, end=START)


def test_campaign_is_immutable():
    c = make_campaign(tiers=[FeeTier(1, "base", 0, 25)])
    assert isinstance(c.tiers, tuple)
    with pytest.raises(Exception):
        c.name = "changed"


def test_registry_contents():
    assert SKR_SEASON_1.tiers[0].fee_bps == 25
    assert SKR_SEASON_1.tiers[-1].fee_bps == 0
    assert OTD_PERPETUAL.is_perpetual
    assert EXAMPLE_LAUNCH_CAMPAIGN in CAMPAIGN_IDEAS
    assert find_campaign("otd-perpetual") is OTD_PERPETUAL
    assert find_campaign("nope") is None


@pytest.mark.parametrize("campaign", (OTD_PERPETUAL,) + ALL_CAMPAIGNS + CAMPAIGN_IDEAS, ids=lambda c: c.id)
def test_builtin_mints_are_valid_addresses(campaign):
    assert is_valid_mint_address(campaign.token_mint)
