# memetrader/wallet/client.py
from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal
from typing import Any, Dict, Optional

import requests

from memetrader.wallet.models import BuyQuote, SellQuote, SwapFailure, SwapResult, SwapSuccess

log = logging.getLogger("memetrader.wallet")

NATIVE_TOKEN = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
WEI = Decimal(10) ** 18

BUY_QUOTE_SLIPPAGE_BPS = 100
SELL_QUOTE_SLIPPAGE_BPS = 200
SWAP_SLIPPAGE_BPS = 200

SIMULATED_TX_HASH = "0x_simulated_hash"


class WalletApiError(RuntimeError):
    pass


def to_wei(amount: float) -> str:
    """18-decimal integer string, truncated toward zero."""
    return str(int((Decimal(str(amount)) * WEI).to_integral_value(rounding=ROUND_DOWN)))


def from_wei(raw: Any) -> float:
    return float(Decimal(str(raw)) / WEI)


class WalletClient:
    """
    HTTP client for the EVM wallet skill API (swap preview / execute, address, balances).

    Public methods never raise on transport or API errors: quotes return None,
    execute_swap returns SwapFailure. Nothing here retries; the next cycle does.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://heyvincent.ai",
        chain_id: int = 8453,
        dry_run: bool = True,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("Missing API_KEY for the wallet service")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.chain_id = int(chain_id)
        self.dry_run = dry_run
        self.timeout = timeout
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # request helper
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, *, params=None, json_body=None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise WalletApiError(f"{method} {path} failed: {e}") from e

        if r.status_code >= 400:
            raise WalletApiError(f"Wallet HTTP {r.status_code} on {path}: {r.text[:300]}")

        try:
            return r.json() if r.content else None
        except ValueError as e:
            raise WalletApiError(f"{method} {path} returned non-JSON body") from e

    def _swap_body(self, sell_token: str, buy_token: str, sell_amount_wei: str, slippage_bps: int) -> dict:
        return {
            "sellToken": sell_token,
            "buyToken": buy_token,
            "sellAmount": sell_amount_wei,
            "chainId": self.chain_id,
            "slippageBps": slippage_bps,
        }

    # ---------------- ACCOUNT ----------------

    def get_address(self) -> str:
        try:
            data = self._request("GET", "/api/skills/evm-wallet/address")
        except WalletApiError as e:
            log.error("Error getting address: %s", e)
            return ""
        return str((data or {}).get("address") or "")

    def get_balances(self) -> Optional[dict]:
        try:
            return self._request(
                "GET",
                "/api/skills/evm-wallet/balances",
                params={"chainIds": self.chain_id},
            )
        except WalletApiError as e:
            log.error("Error getting balances: %s", e)
            return None

    # ---------------- QUOTES ----------------

    def quote_buy(self, token_address: str, native_in: float) -> Optional[BuyQuote]:
        """Exact-in preview: native -> token."""
        if native_in <= 0:
            return None
        body = self._swap_body(NATIVE_TOKEN, token_address, to_wei(native_in), BUY_QUOTE_SLIPPAGE_BPS)
        try:
            data = self._request("POST", "/api/skills/evm-wallet/swap/preview", json_body=body)
            tokens_out = from_wei(data["buyAmount"])
        except (WalletApiError, KeyError, TypeError, ArithmeticError) as e:
            log.debug("Buy quote failed for %s: %s", token_address, e)
            return None

        if tokens_out <= 0:
            return None
        return BuyQuote(tokens_out=tokens_out, unit_price=native_in / tokens_out)

    def quote_sell(self, token_address: str, token_amount_in: float) -> Optional[SellQuote]:
        """Exact-in preview: token -> native."""
        amount_wei = to_wei(token_amount_in)
        amount_in = from_wei(amount_wei)
        if amount_in <= 0:
            return None

        body = self._swap_body(token_address, NATIVE_TOKEN, amount_wei, SELL_QUOTE_SLIPPAGE_BPS)
        try:
            data = self._request("POST", "/api/skills/evm-wallet/swap/preview", json_body=body)
            native_out = from_wei(data["buyAmount"])
        except (WalletApiError, KeyError, TypeError, ArithmeticError) as e:
            log.debug("Sell quote failed for %s: %s", token_address, e)
            return None

        if native_out <= 0:
            return None
        return SellQuote(native_out=native_out, unit_price=native_out / amount_in)

    # ---------------- EXECUTION ----------------

    def execute_swap(self, token_address: str, native_in: float) -> SwapResult:
        if self.dry_run:
            log.info("[DRY RUN] Getting quote for %s native -> %s", native_in, token_address)
            quote = self.quote_buy(token_address, native_in)
            if quote is None:
                log.warning("[DRY RUN] Quote failed for %s", token_address)
                return SwapSuccess(status="simulated", transaction_id=SIMULATED_TX_HASH)

            log.info("[DRY RUN] Quote: %.2f tokens @ %.9f native", quote.tokens_out, quote.unit_price)
            return SwapSuccess(
                status="simulated",
                transaction_id=SIMULATED_TX_HASH,
                tokens_out=quote.tokens_out,
                unit_price=quote.unit_price,
            )

        log.info("Attempting to swap %s native for %s", native_in, token_address)
        body = self._swap_body(NATIVE_TOKEN, token_address, to_wei(native_in), SWAP_SLIPPAGE_BPS)
        try:
            data = self._request("POST", "/api/skills/evm-wallet/swap/execute", json_body=body)
        except WalletApiError as e:
            log.error("Swap failed for %s: %s", token_address, e)
            return SwapFailure(reason=str(e))

        return self._parse_execute_response(data or {}, native_in)

    @staticmethod
    def _parse_execute_response(data: dict, native_in: float) -> SwapSuccess:
        tx = data.get("txHash") or data.get("transactionHash") or data.get("hash")

        tokens_out: Optional[float] = None
        unit_price: Optional[float] = None
        raw_out = data.get("buyAmount")
        if raw_out is not None:
            try:
                tokens_out = from_wei(raw_out)
            except ArithmeticError:
                tokens_out = None
        if tokens_out and tokens_out > 0:
            unit_price = native_in / tokens_out

        log.info("Swap executed: tx=%s", tx)
        return SwapSuccess(
            status="executed",
            transaction_id=str(tx) if tx else None,
            tokens_out=tokens_out,
            unit_price=unit_price,
        )
