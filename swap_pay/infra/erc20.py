"""
ERC-20 helpers

Minimal ABI (allowance/approve, balanceOf/transfer), calldata encoding,
and approve/transfer submission dispatched on the signer variant:
ContractWriteCapable signers get a high-level contract write, RawSubmitOnly
signers get pre-encoded calldata.
"""

import logging
from typing import Any, Dict, List

from eth_abi import encode
from eth_utils import to_checksum_address

from .evm_signer import ContractWriteCapable, SigningCapability

logger = logging.getLogger(__name__)


ERC20_ABI: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "allowance",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "approve",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

# keccak256("approve(address,uint256)")[:4]
APPROVE_SELECTOR = bytes.fromhex("095ea7b3")
# keccak256("transfer(address,uint256)")[:4]
TRANSFER_SELECTOR = bytes.fromhex("a9059cbb")
# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

MAX_UINT256 = (1 << 256) - 1


def _encode_call(selector: bytes, recipient: str, amount: int) -> str:
    args = encode(["address", "uint256"], [to_checksum_address(recipient), amount])
    return "0x" + (selector + args).hex()


def encode_approve(spender: str, amount: int) -> str:
    """Calldata for approve(spender, amount)"""
    return _encode_call(APPROVE_SELECTOR, spender, amount)


def encode_transfer(to: str, amount: int) -> str:
    """Calldata for transfer(to, amount)"""
    return _encode_call(TRANSFER_SELECTOR, to, amount)


def address_topic(address: str) -> str:
    """Left-pad an address to a 32-byte log topic"""
    return "0x" + "0" * 24 + address[2:].lower()


async def send_approve(
    signer: SigningCapability,
    token: str,
    spender: str,
    amount: int,
) -> str:
    """
    Submit approve(spender, amount) on token

    Returns:
        Transaction hash (hex)
    """
    if isinstance(signer, ContractWriteCapable):
        return await signer.write_contract(
            token, ERC20_ABI, "approve", [to_checksum_address(spender), amount]
        )
    return await signer.send_transaction(token, encode_approve(spender, amount))


async def send_transfer(
    signer: SigningCapability,
    token: str,
    to: str,
    amount: int,
) -> str:
    """
    Submit transfer(to, amount) on token

    Returns:
        Transaction hash (hex)
    """
    if isinstance(signer, ContractWriteCapable):
        return await signer.write_contract(
            token, ERC20_ABI, "transfer", [to_checksum_address(to), amount]
        )
    return await signer.send_transaction(token, encode_transfer(to, amount))
