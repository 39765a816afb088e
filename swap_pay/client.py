"""
SwapPayClient - entry point for swap-and-pay

Resolves token symbols, validates user input, previews prices, fetches
executable 0x quotes and runs the orchestrator.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Tuple, Union

from decimal import Decimal

from web3 import AsyncWeb3

from .config import Config
from .errors import ConfigError, UnauthenticatedError, ValidationError
from .infra.chain import ChainReader, create_web3
from .infra.evm_signer import SigningCapability, create_signer
from .infra.network import NetworkSwitcher, ProviderSwitcher, WalletRpcSwitcher
from .modules.orchestrator import StatusCallback, SwapAndPayOrchestrator, SwapPayContext
from .protocols.zeroex import ZeroExAPI
from .types import (
    AutoApprove,
    Price,
    Quote,
    QuoteRequest,
    SwapAndPayParams,
    SwapAndPayResult,
    SwapPayProgress,
    is_hex_address,
    resolve_token,
    resolve_token_address,
)

logger = logging.getLogger(__name__)

UiAmount = Union[str, Decimal, int]


class SwapPayClient:
    """
    Swap one token and forward the proceeds to a receiver

    Usage:
        config = Config.from_env()
        async with SwapPayClient.from_config(config) as client:
            price = await client.preview("WMON", "0.01", "USDC")
            result = await client.execute("WMON", "0.01", receiver, "USDC")
            print(result.swap_hash, result.transfer_hash)

    After execute() returns or raises, ``client.last_progress`` holds every
    transaction hash submitted by that run.
    """

    def __init__(
        self,
        config: Config,
        web3: Optional[AsyncWeb3] = None,
        signer: Optional[SigningCapability] = None,
        api: Optional[ZeroExAPI] = None,
        switchers: Optional[List[NetworkSwitcher]] = None,
    ):
        """
        Initialize SwapPayClient

        Args:
            config: Explicit configuration (see Config.from_env)
            web3: AsyncWeb3 instance (created from config.chain.rpc_url if None)
            signer: Signing capability (local key from config if None)
            api: 0x client (created from config.zeroex if None)
            switchers: Network switchers (provider switcher when
                config.chain.switch_rpc_urls is set, then wallet RPC, if None)
        """
        self._config = config

        if web3 is None:
            if not config.chain.rpc_url:
                raise ConfigError.missing("CHAIN_RPC_URL")
            web3 = create_web3(config.chain.rpc_url, config.chain.request_timeout)
        self._web3 = web3
        self._reader = ChainReader(web3, receipt_timeout=config.chain.receipt_timeout)

        if signer is None:
            signer = create_signer(
                web3,
                private_key=config.signer.private_key or None,
                gas_limit_multiplier=config.chain.gas_limit_multiplier,
            )
        self._signer = signer

        self._api = api or ZeroExAPI.from_config(config.zeroex)

        if switchers is None:
            switchers = []
            # Provider switching needs endpoints other than rpc_url
            if config.chain.switch_rpc_urls:
                switchers.append(
                    ProviderSwitcher(web3, config.chain.switch_rpc_urls, config.chain.request_timeout)
                )
            switchers.append(WalletRpcSwitcher(web3))
        self._switchers = switchers

        self.last_progress: Optional[SwapPayProgress] = None

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "SwapPayClient":
        """Build a client with every collaborator derived from config"""
        return cls(config or Config.from_env())

    @property
    def config(self) -> Config:
        return self._config

    @property
    def reader(self) -> ChainReader:
        return self._reader

    @property
    def signer(self) -> Optional[SigningCapability]:
        return self._signer

    @property
    def api(self) -> ZeroExAPI:
        return self._api

    @property
    def account(self) -> Optional[str]:
        """Connected account, if any"""
        return self._signer.address if self._signer is not None else None

    @property
    def context(self) -> SwapPayContext:
        """Orchestration context built from the client's collaborators"""
        return SwapPayContext(
            reader=self._reader,
            signer=self._signer,
            required_chain_id=self._config.chain.chain_id,
            switchers=list(self._switchers),
            confirm_attempts=self._config.confirm.attempts,
            confirm_delay=self._config.confirm.delay,
        )

    def _require_account(self) -> str:
        account = self.account
        if not account:
            raise UnauthenticatedError()
        return account

    def _build_request(
        self,
        sell_symbol: str,
        ui_amount: UiAmount,
        buy_token: str,
        slippage_bps: Optional[int],
    ) -> Tuple[QuoteRequest, str, int]:
        taker = self._require_account()
        sell = resolve_token(sell_symbol)
        sell_amount = sell.raw_amount(ui_amount)
        buy_address = resolve_token_address(buy_token)

        if slippage_bps is None:
            slippage_bps = self._config.zeroex.default_slippage_bps

        request = QuoteRequest(
            sell_token=sell.address,
            buy_token=buy_address,
            sell_amount=sell_amount,
            taker=taker,
            slippage_bps=slippage_bps,
            chain_id=self._config.chain.chain_id,
        )
        return request, sell.address, sell_amount

    async def preview(
        self,
        sell_symbol: str,
        ui_amount: UiAmount,
        buy_token: str,
        slippage_bps: Optional[int] = None,
    ) -> Price:
        """
        Indicative price for selling ui_amount of sell_symbol

        Args:
            sell_symbol: Registry symbol (MON resolves to WMON)
            ui_amount: Human amount, e.g. "0.01"
            buy_token: Registry symbol or token address
            slippage_bps: Override the configured default slippage
        """
        request, _, _ = self._build_request(sell_symbol, ui_amount, buy_token, slippage_bps)
        return await self._api.get_price(request)

    async def quote(
        self,
        sell_symbol: str,
        ui_amount: UiAmount,
        buy_token: str,
        slippage_bps: Optional[int] = None,
    ) -> Tuple[Quote, str, int]:
        """
        Executable quote

        Returns:
            (quote, sell token address, sell amount in base units)
        """
        request, sell_address, sell_amount = self._build_request(
            sell_symbol, ui_amount, buy_token, slippage_bps
        )
        quote = await self._api.get_quote(request)
        return quote, sell_address, sell_amount

    def validate(
        self,
        sell_symbol: str,
        ui_amount: UiAmount,
        receiver: str,
        buy_token: str,
    ) -> None:
        """
        Check user input before any network call

        Raises:
            UnauthenticatedError: No connected account
            ValidationError: Bad receiver, non-positive amount or sell == buy
            ConfigError: Unknown token symbol
        """
        self._require_account()

        if not is_hex_address(receiver):
            raise ValidationError(f"Invalid receiver address: {receiver!r}", field="receiver")

        sell = resolve_token(sell_symbol)
        if sell.raw_amount(ui_amount) <= 0:
            raise ValidationError("Amount must be greater than zero", field="amount")

        if sell.address.lower() == resolve_token_address(buy_token).lower():
            raise ValidationError("Sell and buy tokens must differ", field="buy_token")

    async def execute(
        self,
        sell_symbol: str,
        ui_amount: UiAmount,
        receiver: str,
        buy_token: str,
        slippage_bps: Optional[int] = None,
        on_status: Optional[StatusCallback] = None,
        use_exact_approval: bool = False,
    ) -> SwapAndPayResult:
        """
        Quote, approve if needed, swap, and forward the output to receiver

        Args:
            sell_symbol: Registry symbol of the token to sell
            ui_amount: Human amount to sell
            receiver: Account that receives the bought tokens
            buy_token: Registry symbol or address of the token to buy
            slippage_bps: Override the configured default slippage
            on_status: Called with the progress record on every transition
            use_exact_approval: Approve exactly the sell amount instead of
                an unlimited allowance

        Returns:
            SwapAndPayResult with swap and transfer hashes
        """
        self.validate(sell_symbol, ui_amount, receiver, buy_token)

        quote, sell_address, sell_amount = await self.quote(
            sell_symbol, ui_amount, buy_token, slippage_bps
        )
        params = SwapAndPayParams(
            quote=quote,
            receiver=receiver,
            buy_token_address=resolve_token_address(buy_token),
            auto_approve=AutoApprove(sell_token=sell_address, sell_amount=sell_amount),
        )

        context = dataclasses.replace(self.context, use_exact_approval=use_exact_approval)
        orchestrator = SwapAndPayOrchestrator(context)
        try:
            return await orchestrator.run(params, on_status=on_status)
        finally:
            self.last_progress = orchestrator.progress

    async def aclose(self):
        """Close the HTTP client"""
        await self._api.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"SwapPayClient(account={self.account}, chain_id={self._config.chain.chain_id})"
