"""
Network alignment

The orchestrator requires a specific chain. When the connected chain client
reports a different chain id it tries each configured switcher in order;
the first one that lands on the target chain wins. Alignment is
best-effort: failures are logged and the flow continues.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

from web3 import AsyncWeb3

from ..errors import NetworkSwitchError

logger = logging.getLogger(__name__)


class NetworkSwitcher(ABC):
    """Capability to move a chain client to another chain"""

    name: str = "switcher"

    @abstractmethod
    async def switch(self, chain_id: int) -> None:
        """
        Switch to chain_id

        Raises:
            NetworkSwitchError: If the switch failed or did not take effect
        """


async def _verify_chain(web3: AsyncWeb3, chain_id: int) -> None:
    actual = int(await web3.eth.chain_id)
    if actual != chain_id:
        raise NetworkSwitchError(
            f"Still connected to chain {actual} after switching",
            target_chain_id=chain_id,
        )


class ProviderSwitcher(NetworkSwitcher):
    """
    Primary switcher: re-point the AsyncWeb3 provider at the RPC URL
    configured for the target chain

    Usage:
        switcher = ProviderSwitcher(web3, {10143: "https://testnet-rpc.monad.xyz"})
        await switcher.switch(10143)
    """

    name = "provider"

    def __init__(self, web3: AsyncWeb3, rpc_urls: Dict[int, str], timeout: float = 30.0):
        self._web3 = web3
        self._rpc_urls = dict(rpc_urls)
        self._timeout = timeout

    @property
    def rpc_urls(self) -> Dict[int, str]:
        return dict(self._rpc_urls)

    async def switch(self, chain_id: int) -> None:
        rpc_url = self._rpc_urls.get(chain_id)
        if not rpc_url:
            raise NetworkSwitchError(
                f"No RPC URL configured for chain {chain_id}",
                target_chain_id=chain_id,
            )

        previous = self._web3.provider
        self._web3.provider = AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": self._timeout},
        )
        try:
            await _verify_chain(self._web3, chain_id)
        except NetworkSwitchError:
            self._web3.provider = previous
            raise
        except Exception as e:
            self._web3.provider = previous
            raise NetworkSwitchError(
                f"RPC for chain {chain_id} unreachable: {e}",
                target_chain_id=chain_id,
                original_error=e,
            )


class WalletRpcSwitcher(NetworkSwitcher):
    """
    Secondary switcher: ask the wallet behind the provider to change chains
    via ``wallet_switchEthereumChain``
    """

    name = "wallet"

    def __init__(self, web3: AsyncWeb3):
        self._web3 = web3

    async def switch(self, chain_id: int) -> None:
        try:
            response = await self._web3.provider.make_request(
                "wallet_switchEthereumChain",
                [{"chainId": hex(chain_id)}],
            )
        except Exception as e:
            raise NetworkSwitchError(
                f"wallet_switchEthereumChain failed: {e}",
                target_chain_id=chain_id,
                original_error=e,
            )

        if isinstance(response, dict) and response.get("error"):
            error = response["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise NetworkSwitchError(
                f"Wallet refused to switch chain: {message}",
                target_chain_id=chain_id,
            )

        await _verify_chain(self._web3, chain_id)


async def align_network(
    web3: AsyncWeb3,
    required_chain_id: int,
    switchers: Sequence[NetworkSwitcher],
) -> bool:
    """
    Make sure the chain client is on required_chain_id

    Returns:
        True if the client ends up on the required chain, False otherwise.
        Never raises for switch failures.
    """
    try:
        current: Optional[int] = int(await web3.eth.chain_id)
    except Exception as e:
        logger.warning(f"Could not read chain id: {e}")
        current = None

    if current == required_chain_id:
        return True

    logger.info(f"Connected to chain {current}, required {required_chain_id}; switching")

    for switcher in switchers:
        try:
            await switcher.switch(required_chain_id)
            logger.info(f"Switched to chain {required_chain_id} via {switcher.name}")
            return True
        except NetworkSwitchError as e:
            logger.warning(f"Network switch via {switcher.name} failed: {e}")

    logger.warning(f"Could not switch to chain {required_chain_id}; continuing anyway")
    return False
