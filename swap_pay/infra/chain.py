"""
Chain read access over web3.py's AsyncWeb3
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from web3 import AsyncWeb3
from eth_utils import to_checksum_address

from .erc20 import ERC20_ABI, TRANSFER_TOPIC, address_topic

logger = logging.getLogger(__name__)


def create_web3(rpc_url: str, timeout: float = 30.0) -> AsyncWeb3:
    """
    Create AsyncWeb3 instance for a chain

    Args:
        rpc_url: RPC endpoint URL
        timeout: Request timeout in seconds

    Returns:
        Configured AsyncWeb3 instance
    """
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(
        rpc_url,
        request_kwargs={"timeout": timeout},
    ))


class ChainReader:
    """
    Read-side chain access used by the orchestrator

    Wraps an AsyncWeb3 instance; never submits transactions.

    Usage:
        reader = ChainReader(create_web3("https://testnet-rpc.monad.xyz"))
        balance = await reader.balance_of(usdc, account)
    """

    def __init__(self, web3: AsyncWeb3, receipt_timeout: Optional[float] = None):
        """
        Args:
            web3: AsyncWeb3 instance connected to RPC
            receipt_timeout: Seconds to wait for receipts; None uses web3's default
        """
        self._web3 = web3
        self._receipt_timeout = receipt_timeout

    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    def _erc20(self, token: str):
        return self._web3.eth.contract(address=to_checksum_address(token), abi=ERC20_ABI)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        """Current allowance of spender over owner's token"""
        value = await self._erc20(token).functions.allowance(
            to_checksum_address(owner),
            to_checksum_address(spender),
        ).call()
        return int(value)

    async def balance_of(self, token: str, account: str) -> int:
        """ERC-20 balance in base units"""
        value = await self._erc20(token).functions.balanceOf(to_checksum_address(account)).call()
        return int(value)

    async def transfer_logs(
        self,
        token: str,
        to: str,
        from_block: int,
        to_block: int,
    ) -> List[Dict[str, Any]]:
        """Transfer events of token addressed to ``to`` within a block range"""
        logs = await self._web3.eth.get_logs({
            "address": to_checksum_address(token),
            "topics": [TRANSFER_TOPIC, None, address_topic(to)],
            "fromBlock": from_block,
            "toBlock": to_block,
        })
        return [dict(log) for log in logs]

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """Block until the transaction is mined"""
        if self._receipt_timeout is None:
            receipt = await self._web3.eth.wait_for_transaction_receipt(tx_hash)
        else:
            receipt = await self._web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        return dict(receipt)

    def __repr__(self) -> str:
        return f"ChainReader(provider={self._web3.provider!r})"
