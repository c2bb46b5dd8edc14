# quote.py
import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SLIPPAGE_BPS = 50
MAX_SLIPPAGE_BPS = 10_000
MINT_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")  # base58
AMOUNT_RE = re.compile(r"^[0-9]+$")


class QuoteError(Exception):
    """Base for quote provider failures."""


class ValidationError(QuoteError):
    def __init__(self, field, reason):
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class ApiError(QuoteError):
    def __init__(self, status, message):
        super().__init__(f"API error {status}: {message}")
        self.status = status
        self.message = message


class NetworkError(QuoteError):
    pass


class RateLimitedError(QuoteError):
    def __init__(self, retry_after=None):
        super().__init__("Rate limited")
        self.retry_after = retry_after


class NoRouteError(QuoteError):
    pass


class SignerError(Exception):
    """Raised by a Signer when authorization, signing or submission fails."""


@dataclass(frozen=True)
class SwapParams:
    input_mint: str
    output_mint: str
    amount: str
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    platform_fee_bps: Optional[int] = None


class QuoteProvider(Protocol):
    def get_quote(self, params: SwapParams) -> Mapping[str, Any]: ...

    def get_swap_transaction(self, quote: Mapping[str, Any], user_public_key: str) -> Any: ...


class Signer(Protocol):
    public_key: Optional[str]

    def sign_and_send(self, transaction: Any) -> str: ...


def is_valid_mint_address(address):
    return isinstance(address, str) and bool(MINT_ADDRESS_RE.match(address))


def validate_swap_params(params):
    """Raise ValidationError on the first bad field, otherwise return params."""
    if not is_valid_mint_address(params.input_mint):
        raise ValidationError("inputMint", f"not a mint address: {params.input_mint!r}")
    if not is_valid_mint_address(params.output_mint):
        raise ValidationError("outputMint", f"not a mint address: {params.output_mint!r}")
    if params.input_mint == params.output_mint:
        raise ValidationError("outputMint", "input and output mints are identical")
    if not isinstance(params.amount, str) or not AMOUNT_RE.match(params.amount) or int(params.amount) <= 0:
        raise ValidationError("amount", f"must be a positive integer string, got {params.amount!r}")
    if not 0 <= params.slippage_bps <= MAX_SLIPPAGE_BPS:
        raise ValidationError("slippageBps", f"out of range 0-{MAX_SLIPPAGE_BPS}: {params.slippage_bps}")
    if params.platform_fee_bps is not None and params.platform_fee_bps < 0:
        raise ValidationError("platformFeeBps", f"negative fee: {params.platform_fee_bps}")
    return params


def embedded_fee_bps(quote, fallback):
    """
    Fee the provider actually embedded in the quote (platformFee.feeBps).
    Falls back to the requested fee when the quote carries none.
    """
    platform_fee = (quote or {}).get("platformFee") or {}
    fee = platform_fee.get("feeBps")
    if fee is None:
        logger.debug(f"Quote has no platformFee, using requested {fallback} bps")
        return fallback
    try:
        return int(fee)
    except (TypeError, ValueError):
        logger.warning(f"Unparseable platformFee.feeBps={fee!r}, using requested {fallback} bps")
        return fallback


def format_quote_error(error):
    if isinstance(error, ValidationError):
        return f"Invalid {error.field}: {error.reason}"
    if isinstance(error, RateLimitedError):
        return "Rate limited. Please try again."
    if isinstance(error, ApiError):
        return f"Quote API Error: {error.message}"
    if isinstance(error, NetworkError):
        return f"Network Error: {error}"
    if isinstance(error, NoRouteError):
        return f"No swap route found: {error}"
    return str(error)
