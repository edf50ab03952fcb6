"""Node access: the ChainClient interface and its web3.py implementation."""

from chainagent.chain.base import ChainClient, Receipt
from chainagent.chain.web3_client import Web3ChainClient

__all__ = [
    "ChainClient",
    "Receipt",
    "Web3ChainClient",
]
