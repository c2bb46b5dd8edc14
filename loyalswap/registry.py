# registry.py
# Built-in campaign definitions. Constructed once at import; read-only afterwards.
import os
from datetime import datetime, timezone

from loyalswap.campaigns import (
    BonusCondition,
    Campaign,
    CampaignReward,
    CheckType,
    ColorScheme,
    RewardType,
)
from loyalswap.tiers import FeeTier


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


SEEKER_SGT_MINT_AUTHORITY = "GT2zuHVaZQYZSyQMgJPLzvkmyztfyXg2NJunqFp4p3A4"
SEEKER_SGT_GROUP = os.environ.get(
    "LOYALSWAP_SEEKER_NFT", "GT22s89nU4iWFkNXj1Bw6uYhJJWDRPpShHt4Bk8f99Te"
)

SEEKER_SGT_BONUS = BonusCondition(
    id="sgt-holder",
    name="Seeker Genesis",
    description="Seeker device owners get an extra discount",
    bonus_bps=5,
    check_type=CheckType.NFT,
    check_value=SEEKER_SGT_GROUP,
)

SKR_TIERS = (
    FeeTier(1, "Explorer", 0, 25, "🔍"),
    FeeTier(2, "Initiate", 1_000, 23, "🌱"),
    FeeTier(3, "Seeker", 5_000, 21, "🎯"),
    FeeTier(4, "Holder", 10_000, 19, "💎"),
    FeeTier(5, "Believer", 25_000, 17, "🌟"),
    FeeTier(6, "Supporter", 50_000, 15, "⭐"),
    FeeTier(7, "Advocate", 100_000, 13, "🚀"),
    FeeTier(8, "Guardian", 150_000, 11, "🛡️"),
    FeeTier(9, "Champion", 250_000, 9, "🏆"),
    FeeTier(10, "Elite", 400_000, 7, "💫"),
    FeeTier(11, "Master", 550_000, 5, "🎖️"),
    FeeTier(12, "Legend", 750_000, 3, "👑"),
    FeeTier(13, "Titan", 1_000_000, 2, "⚡"),
    FeeTier(14, "Immortal", 1_500_000, 1, "🔱"),
    FeeTier(15, "Mythic", 2_000_000, 0, "🌈"),
)

# Placeholder until the OTD mint is live; set LOYALSWAP_OTD_MINT to the real address
OTD_MINT = os.environ.get("LOYALSWAP_OTD_MINT", "otdMint1111111111111111111111111111111111111")

OTD_PERPETUAL = Campaign(
    id="otd-perpetual",
    name="OTD Rewards",
    description="Hold OTD tokens for permanent fee discounts. The more you hold, the less you pay - forever.",
    sponsor_name="Smart Swap",
    token_mint=OTD_MINT,
    token_symbol="OTD",
    token_decimals=9,
    tiers=(
        FeeTier(1, "Tapper", 0, 25, "👆"),
        FeeTier(2, "Swapper", 100, 20, "🔄"),
        FeeTier(3, "Trader", 1_000, 15, "📈"),
        FeeTier(4, "Pro", 10_000, 10, "💎"),
        FeeTier(5, "Whale", 100_000, 5, "🐋"),
        FeeTier(6, "Legend", 1_000_000, 0, "👑"),
    ),
    start_date=_utc(2026, 1, 1),
    rewards=(
        CampaignReward(RewardType.FEE_DISCOUNT, "Permanent Discounts", "Lower fees for life"),
        CampaignReward(
            RewardType.AIRDROP, "OTD Staking Rewards", "Earn more OTD by staking",
            requirement="Stake OTD tokens",
        ),
        CampaignReward(
            RewardType.MULTIPLIER, "Governance Power", "Vote on platform decisions",
            requirement="Hold 1000+ OTD",
        ),
    ),
    bonuses=(SEEKER_SGT_BONUS,),
)

SKR_SEASON_1 = Campaign(
    id="skr-season-1",
    name="SKR Season 1",
    description="Hold SKR tokens to unlock lower trading fees. The more you hold, the less you pay.",
    sponsor_name="Seeker Community",
    token_mint=os.environ.get("LOYALSWAP_SKR_MINT", "ExQRYF7ha2C7dgJ9f1keMXwHpnJWub1A7jNJTQKDpump"),
    token_symbol="SKR",
    token_decimals=6,
    tiers=SKR_TIERS,
    start_date=_utc(2026, 1, 1),
    rewards=(
        CampaignReward(RewardType.FEE_DISCOUNT, "Reduced Fees", "Lower platform fees on every swap"),
        CampaignReward(
            RewardType.AIRDROP, "Season 1 Airdrop", "Top traders eligible for SKR airdrops",
            requirement="Top 100 volume traders", value="Share of 1M SKR pool",
        ),
    ),
    bonuses=(SEEKER_SGT_BONUS,),
)

# Partner campaign templates. Not registered; kept as ready-made configurations.
EXAMPLE_LAUNCH_CAMPAIGN = Campaign(
    id="bonk-summer-2026",
    name="BONK Summer",
    description="Hold BONK to unlock trading fee discounts. Trade more, earn more BONK airdrops!",
    sponsor_name="BONK Community",
    token_mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    token_symbol="BONK",
    token_decimals=5,
    tiers=(
        FeeTier(1, "Pup", 0, 20, "🐕"),
        FeeTier(2, "Good Boy", 1_000_000, 15, "🦴"),
        FeeTier(3, "Alpha", 10_000_000, 10, "🐺"),
        FeeTier(4, "Doge Lord", 100_000_000, 5, "👑"),
        FeeTier(5, "BONK King", 1_000_000_000, 0, "🔥"),
    ),
    start_date=_utc(2026, 6, 1),
    end_date=_utc(2026, 8, 31, 23, 59, 59),
    rewards=(
        CampaignReward(RewardType.FEE_DISCOUNT, "Fee Reduction", "Up to 100% fee reduction"),
        CampaignReward(
            RewardType.AIRDROP, "BONK Airdrop", "Weekly BONK airdrops to top traders",
            requirement="Top 500 by volume", value="Share of 10B BONK pool",
        ),
        CampaignReward(
            RewardType.NFT, "BONK Summer NFT", "Limited edition commemorative NFT",
            requirement="Trade $500+ during campaign",
        ),
    ),
    colors=ColorScheme("#F9A825", "#FF6F00"),
)

EXAMPLE_DEFI_CAMPAIGN = Campaign(
    id="jupiter-rewards",
    name="Jupiter Rewards",
    description="Hold JUP tokens for exclusive fee discounts on Jupiter-powered swaps.",
    sponsor_name="Jupiter Exchange",
    token_mint="JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
    token_symbol="JUP",
    token_decimals=6,
    tiers=(
        FeeTier(1, "Astronaut", 0, 20, "🚀"),
        FeeTier(2, "Pilot", 100, 15, "👨‍🚀"),
        FeeTier(3, "Captain", 1_000, 10, "🎖️"),
        FeeTier(4, "Commander", 10_000, 5, "⭐"),
        FeeTier(5, "Jupiter Elite", 50_000, 0, "🪐"),
    ),
    start_date=_utc(2026, 7, 1),
    end_date=_utc(2026, 9, 30, 23, 59, 59),
    rewards=(
        CampaignReward(RewardType.FEE_DISCOUNT, "Priority Routing", "Best Jupiter routes with reduced fees"),
        CampaignReward(
            RewardType.AIRDROP, "JUP Rewards", "Monthly JUP distribution to active traders",
            requirement="Minimum 50 swaps/month",
        ),
    ),
    colors=ColorScheme("#1E90FF", "#00CED1"),
)

EXAMPLE_STABLE_CAMPAIGN = Campaign(
    id="usdc-adoption",
    name="USDC Adoption Month",
    description="Trade with USDC for zero fees! Plus earn bonus rewards.",
    sponsor_name="Circle",
    token_mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    token_symbol="USDC",
    token_decimals=6,
    tiers=(
        FeeTier(1, "Starter", 0, 15, "💵"),
        FeeTier(2, "Holder", 100, 10, "💰"),
        FeeTier(3, "Whale", 10_000, 5, "🐋"),
        FeeTier(4, "Mega", 100_000, 0, "🏦"),
    ),
    start_date=_utc(2026, 9, 1),
    end_date=_utc(2026, 9, 30, 23, 59, 59),
    rewards=(
        CampaignReward(RewardType.FEE_DISCOUNT, "USDC Zero Fees", "Zero fees on all USDC swaps"),
    ),
    colors=ColorScheme("#2775CA", "#00D4AA"),
)

EXAMPLE_MEME_CAMPAIGN = Campaign(
    id="meme-madness",
    name="Meme Madness",
    description="Hold any supported meme token for fee discounts. The dankest traders win!",
    sponsor_name="Meme DAO",
    token_mint="MEMETokenMint11111111111111111111111111111",
    token_symbol="MEME",
    token_decimals=9,
    tiers=(
        FeeTier(1, "Normie", 0, 25, "😐"),
        FeeTier(2, "Degen", 100, 15, "🤪"),
        FeeTier(3, "Chad", 10_000, 5, "💪"),
        FeeTier(4, "Gigachad", 1_000_000, 0, "🗿"),
    ),
    start_date=_utc(2026, 4, 1),
    end_date=_utc(2026, 4, 30, 23, 59, 59),
    colors=ColorScheme("#FF4500", "#00FF00"),
)

CAMPAIGN_IDEAS = (
    EXAMPLE_LAUNCH_CAMPAIGN,
    EXAMPLE_DEFI_CAMPAIGN,
    EXAMPLE_STABLE_CAMPAIGN,
    EXAMPLE_MEME_CAMPAIGN,
)

ALL_CAMPAIGNS = (SKR_SEASON_1,)

DEFAULT_CAMPAIGN = SKR_SEASON_1


def find_campaign(campaign_id, registry=ALL_CAMPAIGNS + (OTD_PERPETUAL,) + CAMPAIGN_IDEAS):
    for campaign in registry:
        if campaign.id == campaign_id:
            return campaign
    return None
