"""
Unit tests for chain reads and balance confirmation (web3 mocked)
"""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from swap_pay.infra.chain import ChainReader
from swap_pay.infra.erc20 import TRANSFER_TOPIC
from swap_pay.modules.balance import confirm_balance, log_transfer_diagnostics

TOKEN = "0xf817257fed379853cDe0fa4F97AB987181B1E5Ea"
ACCOUNT = "0x" + "11" * 20
SPENDER = "0x" + "aa" * 20


def _web3_with_call(result):
    call = AsyncMock(return_value=result)
    function = MagicMock(return_value=MagicMock(call=call))
    contract = MagicMock()
    contract.functions.allowance = function
    contract.functions.balanceOf = function
    web3 = MagicMock()
    web3.eth.contract.return_value = contract
    return web3, function


class TestChainReader(unittest.IsolatedAsyncioTestCase):
    async def test_allowance(self):
        web3, function = _web3_with_call(42)

        value = await ChainReader(web3).allowance(TOKEN, ACCOUNT, SPENDER)

        self.assertEqual(value, 42)
        owner, spender = function.call_args.args
        self.assertEqual(owner.lower(), ACCOUNT)
        self.assertEqual(spender.lower(), SPENDER)

    async def test_balance_of(self):
        web3, function = _web3_with_call(5_000_000)

        self.assertEqual(await ChainReader(web3).balance_of(TOKEN, ACCOUNT), 5_000_000)
        self.assertEqual(web3.eth.contract.call_args.kwargs["address"].lower(), TOKEN.lower())

    async def test_transfer_logs_filter(self):
        web3 = MagicMock()
        web3.eth.get_logs = AsyncMock(return_value=[{"transactionHash": "0xswap", "data": "0x01"}])

        logs = await ChainReader(web3).transfer_logs(TOKEN, ACCOUNT, 100, 100)

        self.assertEqual(logs, [{"transactionHash": "0xswap", "data": "0x01"}])
        log_filter = web3.eth.get_logs.await_args.args[0]
        self.assertEqual(log_filter["topics"], [TRANSFER_TOPIC, None, "0x" + "0" * 24 + "11" * 20])
        self.assertEqual(log_filter["fromBlock"], 100)
        self.assertEqual(log_filter["toBlock"], 100)

    async def test_receipt_default_timeout(self):
        web3 = MagicMock()
        web3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1})

        receipt = await ChainReader(web3).wait_for_receipt("0xswap")

        self.assertEqual(receipt, {"status": 1})
        web3.eth.wait_for_transaction_receipt.assert_awaited_once_with("0xswap")

    async def test_receipt_configured_timeout(self):
        web3 = MagicMock()
        web3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1})

        await ChainReader(web3, receipt_timeout=90).wait_for_receipt("0xswap")

        web3.eth.wait_for_transaction_receipt.assert_awaited_once_with("0xswap", timeout=90)


class TestBalanceConfirmation(unittest.IsolatedAsyncioTestCase):
    async def test_confirm_balance_stops_on_nonzero(self):
        reader = MagicMock(spec=ChainReader)
        reader.balance_of = AsyncMock(side_effect=[0, 7])

        with patch("swap_pay.infra.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            balance = await confirm_balance(reader, TOKEN, ACCOUNT)

        self.assertEqual(balance, 7)
        sleep.assert_awaited_once_with(0.25)

    async def test_confirm_balance_exhausted(self):
        reader = MagicMock(spec=ChainReader)
        reader.balance_of = AsyncMock(return_value=0)

        with patch("swap_pay.infra.retry.asyncio.sleep", new_callable=AsyncMock):
            balance = await confirm_balance(reader, TOKEN, ACCOUNT)

        self.assertEqual(balance, 0)
        self.assertEqual(reader.balance_of.await_count, 6)

    async def test_diagnostics_logs_found_events(self):
        reader = MagicMock(spec=ChainReader)
        reader.transfer_logs = AsyncMock(return_value=[{"transactionHash": "0xswap", "data": "0x01"}])

        with self.assertLogs("swap_pay", level="WARNING") as captured:
            found = await log_transfer_diagnostics(reader, TOKEN, ACCOUNT, 1234)

        self.assertEqual(found, 1)
        self.assertTrue(any("0xswap" in line for line in captured.output))

    async def test_diagnostics_swallow_errors(self):
        reader = MagicMock(spec=ChainReader)
        reader.transfer_logs = AsyncMock(side_effect=RuntimeError("range too large"))

        self.assertEqual(await log_transfer_diagnostics(reader, TOKEN, ACCOUNT, 1234), 0)

    async def test_diagnostics_without_block(self):
        reader = MagicMock(spec=ChainReader)

        self.assertEqual(await log_transfer_diagnostics(reader, TOKEN, ACCOUNT, None), 0)
        reader.transfer_logs.assert_not_called()


if __name__ == "__main__":
    unittest.main()
