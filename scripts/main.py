import argparse
import sys
import json
import logging
from datetime import datetime, timezone

from loyalswap.campaigns import format_time_remaining, get_campaign_status, resolve_campaign
from loyalswap.config_loader import load_campaigns, load_settings
from loyalswap.fee_calculator import compute_fee_snapshot, nft_bonus_predicate
from loyalswap.registry import ALL_CAMPAIGNS, DEFAULT_CAMPAIGN
from loyalswap.swap_audit import SwapAuditLog
from loyalswap.swap_manager import health_check
from loyalswap.tiers import format_fee
from drivers.json_store import JsonFileStore

logging.basicConfig(
    stream=sys.stdout,
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def list_campaigns(registry, now):
    for campaign in registry:
        status = get_campaign_status(campaign, now)
        logger.info(
            f"{campaign.id}: {campaign.name} [{status.value}] "
            f"{campaign.token_symbol}, {len(campaign.tiers)} tiers, "
            f"{format_time_remaining(campaign, now)}"
        )


def show_fee(registry, balance, has_nft, now):
    campaign = resolve_campaign(registry, now, DEFAULT_CAMPAIGN)
    snap = compute_fee_snapshot(campaign, balance, nft_bonus_predicate(has_nft))
    logger.info(f"Campaign: {campaign.name} ({campaign.id})")
    logger.info(f"Tier: {snap.tier.icon} {snap.tier.name} (level {snap.tier.level}, {snap.tier.fee_bps} bps)")
    logger.info(f"Bonus: -{snap.bonus_bps} bps")
    logger.info(f"Effective fee: {format_fee(snap.effective_fee_bps)}")
    if snap.next_tier:
        logger.info(
            f"Next: {snap.next_tier.name} in {snap.tokens_to_next_tier:,} "
            f"{campaign.token_symbol} ({snap.progress:.1f}%)"
        )
    else:
        logger.info("Max tier reached")
    return snap


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="loyalswap: campaign fee tiers and swap fee audit"
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Parameters TOML (optional [[campaigns]])"
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="Store JSON file (defaults to [paths] store_file)",
    )
    parser.add_argument("--campaigns", action="store_true", help="List campaigns and status")
    parser.add_argument("--fee", type=float, help="Show fee tier for a token balance")
    parser.add_argument("--nft", action="store_true", help="Holder owns the Seeker Genesis NFT")
    parser.add_argument("--audit-stats", action="store_true", help="Print audit log statistics")
    parser.add_argument("--anomalies", action="store_true", help="Run anomaly detection")
    parser.add_argument("--export", action="store_true", help="Print audit log export JSON")
    parser.add_argument("--clear-audit", action="store_true", help="Delete all audit entries")
    parser.add_argument("--health", action="store_true", help="Run health check and exit")

    args = parser.parse_args(argv)
    settings = load_settings(args.config)
    registry = (load_campaigns(args.config) if args.config else ()) or ALL_CAMPAIGNS
    store_path = args.store or settings.paths.store_file
    now = datetime.now(timezone.utc)

    if args.health:
        return health_check(args.config, store_path)

    audit = SwapAuditLog(
        JsonFileStore(store_path),
        max_entries=settings.audit.max_entries,
        thresholds=settings.thresholds,
    )

    if args.campaigns:
        list_campaigns(registry, now)
    elif args.fee is not None:
        show_fee(registry, args.fee, args.nft, now)
    elif args.audit_stats:
        logger.info(json.dumps(audit.stats()))
    elif args.anomalies:
        found = audit.anomalies()
        for anomaly in found:
            logger.info(f"[{anomaly.severity.value}] {anomaly.type.value} {anomaly.entry_id}: {anomaly.description}")
        logger.info(f"{len(found)} anomalies")
    elif args.export:
        print(audit.export(now))
    elif args.clear_audit:
        if not audit.clear():
            return 1
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
