"""
Unit tests for SwapPayClient (collaborators faked)
"""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from swap_pay.client import SwapPayClient
from swap_pay.config import ChainConfig, Config, ConfirmConfig, SignerConfig, ZeroExConfig
from swap_pay.errors import ConfigError, UnauthenticatedError, ValidationError
from swap_pay.infra.evm_signer import LocalSigner, RawSubmitOnly
from swap_pay.infra.network import ProviderSwitcher, WalletRpcSwitcher
from swap_pay.protocols.zeroex import ZeroExAPI
from swap_pay.types import Price, Quote, SwapAndPayResult, SwapPayProgress

WMON = "0x760AfE86e5de5fa0Ee542fc7B7B713e1c5425701"
USDC = "0xf817257fed379853cDe0fa4F97AB987181B1E5Ea"
ACCOUNT = "0x" + "11" * 20
RECEIVER = "0x" + "22" * 20
PROXY_URL = "https://proxy.example/quote"


class FakeSigner(RawSubmitOnly):
    def __init__(self, address=ACCOUNT):
        self._address = address

    @property
    def address(self):
        return self._address

    async def send_transaction(self, to, data, value=0):
        return "0xhash"


def _config(**chain) -> Config:
    return Config(
        zeroex=ZeroExConfig(proxy_url=PROXY_URL, quote_path="quote", timeout=5.0, default_slippage_bps=50),
        chain=ChainConfig(rpc_url="http://localhost:8545", chain_id=10143, receipt_timeout=None, **chain),
        confirm=ConfirmConfig(attempts=6, delay=0.25),
        signer=SignerConfig(private_key=""),
    )


def _api() -> MagicMock:
    api = MagicMock(spec=ZeroExAPI)
    api.get_price = AsyncMock(return_value=Price("500", "5000000", "10000000000000000"))
    api.get_quote = AsyncMock(return_value=Quote(
        to="0x" + "5e" * 20,
        data="0xdeadbeef",
        buy_amount="5000000",
        allowance_target="0x" + "aa" * 20,
    ))
    api.aclose = AsyncMock()
    return api


def _client(signer=None, api=None) -> SwapPayClient:
    return SwapPayClient(
        _config(),
        web3=MagicMock(),
        signer=signer if signer is not None else FakeSigner(),
        api=api or _api(),
        switchers=[],
    )


class TestConstruction(unittest.TestCase):
    def test_missing_rpc_url(self):
        config = _config()
        config.chain.rpc_url = ""
        with self.assertRaises(ConfigError):
            SwapPayClient(config, signer=FakeSigner(), api=_api())

    def test_default_collaborators(self):
        config = _config(switch_rpc_urls={10143: "https://testnet-rpc.monad.xyz"})
        config.signer.private_key = "0x" + "11" * 32

        client = SwapPayClient(config)

        self.assertIsInstance(client.signer, LocalSigner)
        self.assertIsInstance(client.api, ZeroExAPI)
        self.assertEqual(client.api.price_url, "https://proxy.example/price")
        context = client.context
        self.assertIsInstance(context.switchers[0], ProviderSwitcher)
        self.assertIsInstance(context.switchers[1], WalletRpcSwitcher)
        self.assertEqual(context.required_chain_id, 10143)
        self.assertEqual(context.confirm_attempts, 6)
        self.assertFalse(context.use_exact_approval)

    def test_provider_switcher_targets_alternate_endpoint(self):
        config = _config(switch_rpc_urls={10143: "https://testnet-rpc.monad.xyz"})

        client = SwapPayClient(config, signer=FakeSigner(), api=_api())

        primary = client.context.switchers[0]
        self.assertIsInstance(primary, ProviderSwitcher)
        self.assertEqual(primary.rpc_urls, {10143: "https://testnet-rpc.monad.xyz"})
        self.assertNotEqual(primary.rpc_urls[10143], config.chain.rpc_url)

    def test_no_switch_endpoints_leaves_wallet_switcher_only(self):
        client = SwapPayClient(_config(switch_rpc_urls={}), signer=FakeSigner(), api=_api())

        switchers = client.context.switchers
        self.assertEqual(len(switchers), 1)
        self.assertIsInstance(switchers[0], WalletRpcSwitcher)

    def test_bad_proxy_url(self):
        config = _config()
        config.zeroex.proxy_url = "https://proxy.example/price"
        with self.assertRaises(ConfigError):
            SwapPayClient(config, web3=MagicMock(), signer=FakeSigner())


class TestValidation(unittest.TestCase):
    def test_valid_input(self):
        _client().validate("WMON", "0.01", RECEIVER, "USDC")

    def test_no_account(self):
        client = _client(signer=FakeSigner(address=None))
        with self.assertRaises(UnauthenticatedError):
            client.validate("WMON", "0.01", RECEIVER, "USDC")

    def test_bad_receiver(self):
        with self.assertRaises(ValidationError) as ctx:
            _client().validate("WMON", "0.01", "0x1234", "USDC")
        self.assertEqual(ctx.exception.field, "receiver")

    def test_zero_amount(self):
        with self.assertRaises(ValidationError) as ctx:
            _client().validate("WMON", "0", RECEIVER, "USDC")
        self.assertEqual(ctx.exception.field, "amount")

    def test_negative_amount(self):
        with self.assertRaises(ValidationError):
            _client().validate("WMON", "-1", RECEIVER, "USDC")

    def test_same_token(self):
        with self.assertRaises(ValidationError) as ctx:
            _client().validate("WMON", "1", RECEIVER, WMON)
        self.assertEqual(ctx.exception.field, "buy_token")

    def test_native_and_wrapped_are_same_token(self):
        with self.assertRaises(ValidationError):
            _client().validate("MON", "1", RECEIVER, "WMON")

    def test_unknown_symbol(self):
        with self.assertRaises(ConfigError):
            _client().validate("DOGE", "1", RECEIVER, "USDC")


class TestQuoting(unittest.IsolatedAsyncioTestCase):
    async def test_preview_builds_request(self):
        api = _api()
        client = _client(api=api)

        price = await client.preview("WMON", "0.01", "USDC")

        self.assertEqual(price.buy_amount, "5000000")
        request = api.get_price.await_args.args[0]
        self.assertEqual(request.sell_token, WMON)
        self.assertEqual(request.buy_token, USDC)
        self.assertEqual(request.sell_amount, 10 ** 16)
        self.assertEqual(request.taker, ACCOUNT)
        self.assertEqual(request.slippage_bps, 50)
        self.assertEqual(request.chain_id, 10143)

    async def test_native_symbol_quotes_wrapped(self):
        api = _api()
        client = _client(api=api)

        quote, sell_address, sell_amount = await client.quote("MON", "1", "USDC", slippage_bps=200)

        self.assertEqual(sell_address, WMON)
        self.assertEqual(sell_amount, 10 ** 18)
        self.assertEqual(quote.buy_amount, "5000000")
        self.assertEqual(api.get_quote.await_args.args[0].slippage_bps, 200)

    async def test_quote_requires_account(self):
        client = _client(signer=FakeSigner(address=None))
        with self.assertRaises(UnauthenticatedError):
            await client.quote("WMON", "1", "USDC")


class TestExecute(unittest.IsolatedAsyncioTestCase):
    async def test_execute_runs_orchestrator(self):
        client = _client()
        result = SwapAndPayResult("0xswap", "0xtransfer")

        with patch("swap_pay.client.SwapAndPayOrchestrator") as orchestrator_cls:
            orchestrator = orchestrator_cls.return_value
            orchestrator.run = AsyncMock(return_value=result)
            orchestrator.progress = SwapPayProgress()

            returned = await client.execute("WMON", "0.01", RECEIVER, "USDC")

        self.assertIs(returned, result)
        params = orchestrator.run.await_args.args[0]
        self.assertEqual(params.receiver, RECEIVER)
        self.assertEqual(params.buy_token_address, USDC)
        self.assertEqual(params.auto_approve.sell_token, WMON)
        self.assertEqual(params.auto_approve.sell_amount, 10 ** 16)
        self.assertIs(client.last_progress, orchestrator.progress)
        self.assertFalse(orchestrator_cls.call_args.args[0].use_exact_approval)

    async def test_execute_exact_approval(self):
        client = _client()

        with patch("swap_pay.client.SwapAndPayOrchestrator") as orchestrator_cls:
            orchestrator = orchestrator_cls.return_value
            orchestrator.run = AsyncMock(return_value=SwapAndPayResult("0xswap", "0xtransfer"))
            orchestrator.progress = SwapPayProgress()

            await client.execute("WMON", "0.01", RECEIVER, "USDC", use_exact_approval=True)

        self.assertTrue(orchestrator_cls.call_args.args[0].use_exact_approval)
        self.assertFalse(client.context.use_exact_approval)

    async def test_invalid_input_never_quotes(self):
        api = _api()
        client = _client(api=api)

        with self.assertRaises(ValidationError):
            await client.execute("WMON", "0", RECEIVER, "USDC")

        api.get_quote.assert_not_awaited()

    async def test_context_manager_closes_api(self):
        api = _api()
        async with _client(api=api):
            pass
        api.aclose.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
