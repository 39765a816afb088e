"""
EVM signing capabilities

Two explicit variants:

- ContractWriteCapable: can perform a high-level contract write
  (function name + args) in addition to raw submission
- RawSubmitOnly: can only submit to/data/value transactions

ERC-20 helpers dispatch on the variant (see infra.erc20). LocalSigner
(private key + AsyncWeb3 raw send) is the RawSubmitOnly implementation;
NodeAccountSigner (account managed by the RPC node) is ContractWriteCapable.
"""

from __future__ import annotations

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address
from web3 import AsyncWeb3

from ..errors import ConfigError

logger = logging.getLogger(__name__)


class SigningCapability(ABC):
    """Externally supplied ability to submit transactions from one account"""

    @property
    @abstractmethod
    def address(self) -> Optional[str]:
        """Connected account, or None if no account is connected"""

    @abstractmethod
    async def send_transaction(self, to: str, data: str, value: int = 0) -> str:
        """Submit a transaction and return its hash (hex)"""


class RawSubmitOnly(SigningCapability):
    """Signer that only submits raw to/data/value transactions"""


class ContractWriteCapable(SigningCapability):
    """Signer that can also encode and submit a contract function call"""

    @abstractmethod
    async def write_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: List[Any],
    ) -> str:
        """Call ``function_name(*args)`` on ``address`` and return the tx hash"""


class NonceManager:
    """
    Nonce manager for EVM transactions.

    Prevents nonce collisions when several orchestrations share one local
    signer by:
    1. Keeping track of pending nonces locally
    2. Using an asyncio lock to serialize assignment
    3. Syncing with the chain on every assignment

    Usage:
        nonce = await nonce_mgr.get_nonce(web3, address)
        # ... send transaction ...
        nonce_mgr.confirm_nonce(address, nonce)  # On success
        # or
        nonce_mgr.release_nonce(address, nonce)  # On failure
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        # {address: next_nonce}
        self._pending_nonces: Dict[str, int] = {}
        # {address: set of in-flight nonces}
        self._in_flight: Dict[str, set] = {}

    async def get_nonce(self, web3: AsyncWeb3, address: str) -> int:
        """
        Get the next available nonce for an address

        Args:
            web3: AsyncWeb3 instance
            address: Wallet address

        Returns:
            Next nonce to use
        """
        key = address.lower()

        async with self._lock:
            # On-chain count includes pending mempool transactions
            chain_nonce = await web3.eth.get_transaction_count(to_checksum_address(address), "pending")
            tracked_nonce = self._pending_nonces.get(key, chain_nonce)

            # Higher of the two handles transactions sent outside this manager
            next_nonce = max(chain_nonce, tracked_nonce)
            self._pending_nonces[key] = next_nonce + 1
            self._in_flight.setdefault(key, set()).add(next_nonce)

            logger.debug(
                f"NonceManager: address={key[:10]}... "
                f"chain={chain_nonce} tracked={tracked_nonce} assigned={next_nonce}"
            )
            return next_nonce

    def confirm_nonce(self, address: str, nonce: int) -> None:
        """Mark a nonce as used (transaction broadcast)"""
        key = address.lower()
        if key in self._in_flight:
            self._in_flight[key].discard(nonce)

    def release_nonce(self, address: str, nonce: int) -> None:
        """
        Release a nonce that was never broadcast so it can be reused

        Args:
            address: Wallet address
            nonce: Nonce to release
        """
        key = address.lower()
        if key in self._in_flight:
            self._in_flight[key].discard(nonce)

        if nonce == self._pending_nonces.get(key, 0) - 1:
            self._pending_nonces[key] = nonce
            logger.debug(f"NonceManager: released nonce {nonce} for {key[:10]}...")

    def reset(self, address: Optional[str] = None) -> None:
        """Reset nonce tracking, forcing re-sync with chain"""
        if address:
            key = address.lower()
            self._pending_nonces.pop(key, None)
            self._in_flight.pop(key, None)
        else:
            self._pending_nonces.clear()
            self._in_flight.clear()


class LocalSigner(RawSubmitOnly):
    """
    Local EVM signer using an eth_account key

    Signs locally and broadcasts through AsyncWeb3. Gas limit comes from
    the node's estimate times ``gas_limit_multiplier``; gas price is the
    node's suggestion.

    Usage:
        signer = LocalSigner.from_private_key("0x...", web3)
        tx_hash = await signer.send_transaction(to, data)
    """

    def __init__(
        self,
        account: LocalAccount,
        web3: AsyncWeb3,
        gas_limit_multiplier: float = 1.2,
        nonce_manager: Optional[NonceManager] = None,
    ):
        self._account = account
        self._web3 = web3
        self._gas_limit_multiplier = gas_limit_multiplier
        self._nonces = nonce_manager or NonceManager()

    @property
    def address(self) -> str:
        """Wallet address (checksummed)"""
        return self._account.address

    async def send_transaction(self, to: str, data: str, value: int = 0) -> str:
        """
        Sign and broadcast a transaction

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        tx: Dict[str, Any] = {
            "from": self.address,
            "to": to_checksum_address(to),
            "data": data,
            "value": int(value),
        }

        estimated = await self._web3.eth.estimate_gas(tx)
        tx["gas"] = int(estimated * self._gas_limit_multiplier)
        tx["gasPrice"] = await self._web3.eth.gas_price
        tx["chainId"] = await self._web3.eth.chain_id

        nonce = await self._nonces.get_nonce(self._web3, self.address)
        tx["nonce"] = nonce

        try:
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            # Nonce is still free if the node rejected the transaction
            self._nonces.release_nonce(self.address, nonce)
            logger.error(f"Transaction to {to} failed before broadcast: {e}")
            raise

        self._nonces.confirm_nonce(self.address, nonce)
        return AsyncWeb3.to_hex(tx_hash)

    @classmethod
    def from_private_key(
        cls,
        private_key: str,
        web3: AsyncWeb3,
        gas_limit_multiplier: float = 1.2,
    ) -> "LocalSigner":
        """
        Create signer from private key

        Args:
            private_key: Hex-encoded private key (with or without 0x prefix)
            web3: AsyncWeb3 instance used for broadcasting
        """
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        return cls(Account.from_key(private_key), web3, gas_limit_multiplier)

    @classmethod
    def from_env(cls, web3: AsyncWeb3, env_var: str = "EVM_PRIVATE_KEY") -> "LocalSigner":
        """
        Create signer from environment variable

        Raises:
            ConfigError: If environment variable is not set
        """
        private_key = os.getenv(env_var, "")
        if not private_key:
            raise ConfigError.missing(env_var)
        return cls.from_private_key(private_key, web3)

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address})"


class NodeAccountSigner(ContractWriteCapable):
    """
    Signer for an account unlocked on the RPC node (dev nodes, remote signers)

    The node signs; this class only asks it to.
    """

    def __init__(self, web3: AsyncWeb3, address: Optional[str] = None):
        self._web3 = web3
        self._address = to_checksum_address(address) if address else None

    @property
    def address(self) -> Optional[str]:
        return self._address

    async def send_transaction(self, to: str, data: str, value: int = 0) -> str:
        tx_hash = await self._web3.eth.send_transaction({
            "from": self._address,
            "to": to_checksum_address(to),
            "data": data,
            "value": int(value),
        })
        return AsyncWeb3.to_hex(tx_hash)

    async def write_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: List[Any],
    ) -> str:
        contract = self._web3.eth.contract(address=to_checksum_address(address), abi=abi)
        tx_hash = await contract.functions[function_name](*args).transact({"from": self._address})
        return AsyncWeb3.to_hex(tx_hash)

    def __repr__(self) -> str:
        return f"NodeAccountSigner(address={self._address})"


def create_signer(
    web3: AsyncWeb3,
    private_key: Optional[str] = None,
    gas_limit_multiplier: float = 1.2,
) -> Optional[SigningCapability]:
    """
    Create a signer based on configuration

    Priority:
    1. private_key: LocalSigner from the provided key
    2. EVM_PRIVATE_KEY environment variable

    Returns:
        Signer, or None if no key is configured (the orchestrator reports
        that as a connection error)
    """
    key = private_key or os.getenv("EVM_PRIVATE_KEY", "")
    if not key:
        logger.info("No EVM private key configured; running without a signer")
        return None
    return LocalSigner.from_private_key(key, web3, gas_limit_multiplier)
