import logging
from datetime import datetime

import tomli

from loyalswap.anomalies import AnomalyThresholds
from loyalswap.campaigns import (
    BonusCondition,
    Campaign,
    CampaignReward,
    CheckType,
    ColorScheme,
    RewardType,
)
from loyalswap.tiers import CampaignConfigError, FeeTier

logger = logging.getLogger(__name__)

DEFAULTS = {
    "audit": {"max_entries": 200},
    "anomalies": {"zero_fee_balance": 100_000, "repeated_zero_fee_count": 3},
    "history": {"max_entries": 50},
    "tokens": {"max_custom": 100, "cache_ttl_secs": 86_400},
    "swap": {"default_slippage_bps": 50},
    "paths": {"store_file": "/app/data/loyalswap_store.json"},
}


class Settings:
    def __init__(self, data):
        self._data = data

    def __getattr__(self, key):
        if key.startswith("_"):
            raise AttributeError(key)
        if key not in self._data:
            raise AttributeError(f"Settings key '{key}' not found")
        val = self._data[key]
        return Settings(val) if isinstance(val, dict) else val

    def __getitem__(self, key):
        return self._data[key]

    def __contains__(self, key):
        return key in self._data

    def __repr__(self):
        return repr(self._data)

    def get(self, key, default=None):
        val = self._data.get(key, default)
        return Settings(val) if isinstance(val, dict) else val

    def to_dict(self):
        return self._data

    @property
    def thresholds(self):
        return AnomalyThresholds(
            zero_fee_balance=self.anomalies.zero_fee_balance,
            repeated_zero_fee_count=self.anomalies.repeated_zero_fee_count,
        )


def merge_defaults(data):
    merged = {section: dict(values) for section, values in DEFAULTS.items()}
    for section, values in data.items():
        if isinstance(values, dict) and section in merged:
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def load_settings(path=None):
    if path is None:
        return Settings(merge_defaults({}))
    with open(path, "rb") as f:
        return Settings(merge_defaults(tomli.load(f)))


def _parse_date(value, field, campaign_id, required=False):
    if value is None:
        if required:
            raise CampaignConfigError(f"[{campaign_id}] missing {field}")
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise CampaignConfigError(f"[{campaign_id}] bad {field}: {value!r}") from e
    raise CampaignConfigError(f"[{campaign_id}] {field} must be a datetime, got {type(value).__name__}")


def campaign_from_dict(data):
    """Build a validated Campaign from a [[campaigns]] TOML table."""
    campaign_id = data.get("id", "<unnamed>")
    try:
        tiers = [
            FeeTier(
                level=t["level"],
                name=t["name"],
                min_balance=t["min_balance"],
                fee_bps=t["fee_bps"],
                icon=t.get("icon", ""),
            )
            for t in data.get("tiers", [])
        ]
        bonuses = [
            BonusCondition(
                id=b["id"],
                name=b["name"],
                description=b.get("description", ""),
                bonus_bps=b["bonus_bps"],
                check_type=CheckType(b["check_type"]),
                check_value=b["check_value"],
            )
            for b in data.get("bonuses", [])
        ]
        rewards = [
            CampaignReward(
                type=RewardType(r["type"]),
                name=r["name"],
                description=r.get("description", ""),
                requirement=r.get("requirement"),
                value=r.get("value"),
            )
            for r in data.get("rewards", [])
        ]
        colors = data.get("colors", {})
        return Campaign(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            sponsor_name=data.get("sponsor_name", ""),
            token_mint=data["token_mint"],
            token_symbol=data["token_symbol"],
            token_decimals=data.get("token_decimals", 0),
            tiers=tiers,
            start_date=_parse_date(data.get("start_date"), "start_date", campaign_id, required=True),
            end_date=_parse_date(data.get("end_date"), "end_date", campaign_id),
            rewards=rewards,
            bonuses=bonuses,
            colors=ColorScheme(colors.get("primary", "#9945FF"), colors.get("secondary", "#14F195")),
            sponsor_logo=data.get("sponsor_logo"),
        )
    except CampaignConfigError:
        raise
    except KeyError as e:
        raise CampaignConfigError(f"[{campaign_id}] missing key {e}") from e
    except (TypeError, ValueError) as e:
        raise CampaignConfigError(f"[{campaign_id}] invalid campaign: {e}") from e


def load_campaigns(path):
    """
    Campaign registry from the [[campaigns]] tables of a TOML file.
    Returns an empty tuple when the file defines none.
    """
    with open(path, "rb") as f:
        data = tomli.load(f)

    campaigns = tuple(campaign_from_dict(c) for c in data.get("campaigns", []))
    ids = [c.id for c in campaigns]
    if len(ids) != len(set(ids)):
        raise CampaignConfigError(f"Duplicate campaign ids in {path}: {ids}")
    logger.info(f"Loaded {len(campaigns)} campaigns from {path}")
    return campaigns
