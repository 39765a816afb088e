"""
Unit tests for network alignment and switchers
"""

import unittest
from unittest.mock import AsyncMock, MagicMock

from swap_pay.errors import NetworkSwitchError
from swap_pay.infra.network import (
    NetworkSwitcher,
    ProviderSwitcher,
    WalletRpcSwitcher,
    align_network,
)

MONAD_TESTNET = 10143


class FakeEth:
    def __init__(self, chain_ids):
        self._chain_ids = list(chain_ids)
        self.calls = 0

    @property
    def chain_id(self):
        value = self._chain_ids[min(self.calls, len(self._chain_ids) - 1)]
        self.calls += 1

        async def _read():
            if isinstance(value, Exception):
                raise value
            return value

        return _read()


class FakeWeb3:
    def __init__(self, *chain_ids):
        self.eth = FakeEth(chain_ids)
        self.provider = MagicMock()
        self.provider.make_request = AsyncMock(return_value={"jsonrpc": "2.0", "id": 1, "result": None})


class ScriptedSwitcher(NetworkSwitcher):
    def __init__(self, name, error=None):
        self.name = name
        self.error = error
        self.calls = []

    async def switch(self, chain_id):
        self.calls.append(chain_id)
        if self.error is not None:
            raise self.error


class TestAlignNetwork(unittest.IsolatedAsyncioTestCase):
    async def test_matching_chain_skips_switchers(self):
        primary = ScriptedSwitcher("primary")

        aligned = await align_network(FakeWeb3(MONAD_TESTNET), MONAD_TESTNET, [primary])

        self.assertTrue(aligned)
        self.assertEqual(primary.calls, [])

    async def test_primary_switch(self):
        primary = ScriptedSwitcher("primary")
        secondary = ScriptedSwitcher("secondary")

        aligned = await align_network(FakeWeb3(1), MONAD_TESTNET, [primary, secondary])

        self.assertTrue(aligned)
        self.assertEqual(primary.calls, [MONAD_TESTNET])
        self.assertEqual(secondary.calls, [])

    async def test_falls_back_to_secondary(self):
        primary = ScriptedSwitcher("primary", NetworkSwitchError("no rpc"))
        secondary = ScriptedSwitcher("secondary")

        aligned = await align_network(FakeWeb3(1), MONAD_TESTNET, [primary, secondary])

        self.assertTrue(aligned)
        self.assertEqual(secondary.calls, [MONAD_TESTNET])

    async def test_all_switchers_fail_is_not_fatal(self):
        primary = ScriptedSwitcher("primary", NetworkSwitchError("no rpc"))
        secondary = ScriptedSwitcher("secondary", NetworkSwitchError("rejected"))

        with self.assertLogs("swap_pay.infra.network", level="WARNING"):
            aligned = await align_network(FakeWeb3(1), MONAD_TESTNET, [primary, secondary])

        self.assertFalse(aligned)

    async def test_unreadable_chain_id_still_tries_switchers(self):
        primary = ScriptedSwitcher("primary")

        aligned = await align_network(FakeWeb3(RuntimeError("rpc down")), MONAD_TESTNET, [primary])

        self.assertTrue(aligned)
        self.assertEqual(primary.calls, [MONAD_TESTNET])


class TestProviderSwitcher(unittest.IsolatedAsyncioTestCase):
    async def test_switch_repoints_provider(self):
        web3 = FakeWeb3(MONAD_TESTNET)
        switcher = ProviderSwitcher(web3, {MONAD_TESTNET: "https://testnet-rpc.monad.xyz"})

        await switcher.switch(MONAD_TESTNET)

        self.assertEqual(str(web3.provider.endpoint_uri), "https://testnet-rpc.monad.xyz")

    async def test_unknown_chain(self):
        web3 = FakeWeb3(1)
        previous = web3.provider
        switcher = ProviderSwitcher(web3, {})

        with self.assertRaises(NetworkSwitchError) as ctx:
            await switcher.switch(MONAD_TESTNET)

        self.assertEqual(ctx.exception.target_chain_id, MONAD_TESTNET)
        self.assertIs(web3.provider, previous)

    async def test_wrong_chain_restores_provider(self):
        web3 = FakeWeb3(1)
        previous = web3.provider
        switcher = ProviderSwitcher(web3, {MONAD_TESTNET: "https://wrong.example"})

        with self.assertRaises(NetworkSwitchError):
            await switcher.switch(MONAD_TESTNET)

        self.assertIs(web3.provider, previous)

    async def test_unreachable_rpc(self):
        web3 = FakeWeb3(ConnectionRefusedError("refused"))
        switcher = ProviderSwitcher(web3, {MONAD_TESTNET: "https://down.example"})

        with self.assertRaises(NetworkSwitchError) as ctx:
            await switcher.switch(MONAD_TESTNET)

        self.assertIsInstance(ctx.exception.original_error, ConnectionRefusedError)


class TestWalletRpcSwitcher(unittest.IsolatedAsyncioTestCase):
    async def test_switch(self):
        web3 = FakeWeb3(MONAD_TESTNET)

        await WalletRpcSwitcher(web3).switch(MONAD_TESTNET)

        web3.provider.make_request.assert_awaited_once_with(
            "wallet_switchEthereumChain", [{"chainId": "0x279f"}]
        )

    async def test_wallet_error_response(self):
        web3 = FakeWeb3(1)
        web3.provider.make_request.return_value = {
            "error": {"code": 4902, "message": "Unrecognized chain ID"},
        }

        with self.assertRaises(NetworkSwitchError) as ctx:
            await WalletRpcSwitcher(web3).switch(MONAD_TESTNET)

        self.assertIn("Unrecognized chain ID", ctx.exception.message)

    async def test_request_failure(self):
        web3 = FakeWeb3(1)
        web3.provider.make_request.side_effect = RuntimeError("method not supported")

        with self.assertRaises(NetworkSwitchError):
            await WalletRpcSwitcher(web3).switch(MONAD_TESTNET)


if __name__ == "__main__":
    unittest.main()
