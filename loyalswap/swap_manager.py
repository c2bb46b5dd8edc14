"""
swap_manager.py

Swap execution around the fee-tier engine.
Resolves the active campaign, prices the user's fee, requests a quote with
that fee, hands the transaction to the signer and records exactly one audit
entry per submission attempt, successful or not.
"""

import os
import time
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from loyalswap.campaigns import resolve_campaign
from loyalswap.config_loader import load_campaigns, load_settings
from loyalswap.fee_calculator import compute_fee_snapshot, nft_bonus_predicate
from loyalswap.quote import SwapParams, embedded_fee_bps, validate_swap_params
from loyalswap.registry import ALL_CAMPAIGNS, DEFAULT_CAMPAIGN
from loyalswap.storage import add_swap_record, get_item, make_swap_record
from loyalswap.swap_audit import SwapAuditEntry, SwapAuditLog
from drivers.json_store import JsonFileStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapResult:
    signature: str
    campaign_id: str
    expected_fee_bps: int
    actual_fee_bps: int
    out_amount: str
    quote: Mapping[str, Any]
    audit_entry: Optional[SwapAuditEntry]


class SwapManager:
    def __init__(
        self,
        quote_provider,
        signer,
        store,
        registry=ALL_CAMPAIGNS,
        fallback=DEFAULT_CAMPAIGN,
        settings=None,
        clock=time.time,
    ):
        self.quote_provider = quote_provider
        self.signer = signer
        self.store = store
        self.registry = registry
        self.fallback = fallback
        self.settings = settings or load_settings()
        self.clock = clock
        self.audit_log = SwapAuditLog(
            store,
            max_entries=self.settings.audit.max_entries,
            clock=clock,
            thresholds=self.settings.thresholds,
        )

    def _now(self):
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc)

    def active_campaign(self, now=None):
        return resolve_campaign(self.registry, now or self._now(), self.fallback)

    def fee_snapshot(self, balance, has_seeker_nft, now=None):
        campaign = self.active_campaign(now)
        return compute_fee_snapshot(campaign, balance, nft_bonus_predicate(has_seeker_nft))

    def execute_swap(
        self,
        input_mint,
        output_mint,
        amount,
        balance,
        has_seeker_nft,
        slippage_bps=None,
        now=None,
    ):
        """
        Quote, sign and submit one swap at the holder's effective fee.

        Quote and validation errors propagate before anything is recorded.
        Once a transaction reaches the signer the attempt is audited whatever
        the outcome; signer errors are re-raised after the audit write.
        """
        wallet = self.signer.public_key
        if not wallet:
            raise ValueError("Wallet not connected")

        campaign = self.active_campaign(now)
        snapshot = compute_fee_snapshot(campaign, balance, nft_bonus_predicate(has_seeker_nft))
        expected_fee = snapshot.effective_fee_bps
        logger.info(
            f"Swap {amount} {input_mint} -> {output_mint}: tier={snapshot.tier.name}, fee={expected_fee} bps",
            extra={'section': wallet},
        )

        if slippage_bps is None:
            slippage_bps = self.settings.swap.default_slippage_bps
        params = validate_swap_params(
            SwapParams(
                input_mint=input_mint,
                output_mint=output_mint,
                amount=str(amount),
                slippage_bps=slippage_bps,
                platform_fee_bps=expected_fee,
            )
        )

        quote = self.quote_provider.get_quote(params)
        actual_fee = embedded_fee_bps(quote, expected_fee)
        out_amount = str(quote.get("outAmount", "0"))
        transaction = self.quote_provider.get_swap_transaction(quote, wallet)

        audit_fields = dict(
            wallet=wallet,
            input_mint=input_mint,
            output_mint=output_mint,
            input_amount=str(amount),
            expected_fee_bps=expected_fee,
            actual_fee_bps=actual_fee,
            skr_balance=balance,
            has_seeker_nft=has_seeker_nft,
        )

        try:
            signature = self.signer.sign_and_send(transaction)
        except Exception as e:
            logger.error(f"Submission failed: {e}", extra={'section': wallet})
            self.audit_log.append(tx_signature=None, **audit_fields)
            self._record_history(input_mint, output_mint, amount, out_amount, None, "failed")
            raise

        entry = self.audit_log.append(tx_signature=signature, **audit_fields)
        self._record_history(input_mint, output_mint, amount, out_amount, signature, "success")
        logger.info(f"Swap submitted: {signature}", extra={'section': wallet})

        return SwapResult(
            signature=signature,
            campaign_id=campaign.id,
            expected_fee_bps=expected_fee,
            actual_fee_bps=actual_fee,
            out_amount=out_amount,
            quote=quote,
            audit_entry=entry,
        )

    def _record_history(self, input_mint, output_mint, amount, out_amount, signature, status):
        record = make_swap_record(
            input_mint,
            output_mint,
            amount,
            out_amount,
            signature,
            status,
            now_ms=int(self.clock() * 1000),
        )
        if not add_swap_record(self.store, record, max_entries=self.settings.history.max_entries):
            logger.warning(f"History record not saved ({status})", extra={'section': 'history'})


def health_check(config_path, store_path):
    try:
        if config_path is not None:
            if not os.path.exists(config_path):
                logger.error(f"FAIL: Config not found: {config_path}")
                return 2
            settings = load_settings(config_path)
            campaigns = load_campaigns(config_path) or ALL_CAMPAIGNS
            logger.info(f"Config OK: {len(campaigns)} campaigns, audit cap {settings.audit.max_entries}")

        store = JsonFileStore(store_path)
        try:
            store.set_item("@health", "true")
            store.remove_item("@health")
        except OSError as e:
            logger.error(f"FAIL: Cannot write store: {store_path} - {e}")
            return 4

        audit = get_item(store, SwapAuditLog(store).key)
        if audit is not None and not isinstance(audit, list):
            logger.error("FAIL: Audit log is not a list")
            return 3

        logger.info("OK: config, campaigns and store healthy")
        return 0

    except Exception as e:
        logger.exception(f"FAIL: Health check exception: {e}")
        return 5
