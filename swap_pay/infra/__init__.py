"""
Infrastructure layer for swap_pay

Provides:
- ChainReader: allowance/balance/log reads and receipt waits over AsyncWeb3
- Signing capabilities: ContractWriteCapable / RawSubmitOnly, LocalSigner
- ERC-20 calldata encoding and approve/transfer submission
- Network switchers and best-effort network alignment
- poll_until: bounded polling combinator with correlation-aware logging
"""

from .chain import ChainReader, create_web3
from .evm_signer import (
    SigningCapability,
    ContractWriteCapable,
    RawSubmitOnly,
    NonceManager,
    LocalSigner,
    NodeAccountSigner,
    create_signer,
)
from .erc20 import (
    ERC20_ABI,
    MAX_UINT256,
    TRANSFER_TOPIC,
    encode_approve,
    encode_transfer,
    send_approve,
    send_transfer,
)
from .network import (
    NetworkSwitcher,
    ProviderSwitcher,
    WalletRpcSwitcher,
    align_network,
)
from .retry import CorrelationContext, get_correlation_id, poll_until

__all__ = [
    # Chain access
    "ChainReader",
    "create_web3",
    # Signing
    "SigningCapability",
    "ContractWriteCapable",
    "RawSubmitOnly",
    "NonceManager",
    "LocalSigner",
    "NodeAccountSigner",
    "create_signer",
    # ERC-20
    "ERC20_ABI",
    "MAX_UINT256",
    "TRANSFER_TOPIC",
    "encode_approve",
    "encode_transfer",
    "send_approve",
    "send_transfer",
    # Network
    "NetworkSwitcher",
    "ProviderSwitcher",
    "WalletRpcSwitcher",
    "align_network",
    # Polling
    "CorrelationContext",
    "get_correlation_id",
    "poll_until",
]
