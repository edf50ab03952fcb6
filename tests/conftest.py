"""Pytest configuration and fixtures."""

import os
from typing import Any, Optional

import pytest

# Set test environment
os.environ["ETH_RPC"] = "http://127.0.0.1:8545"
os.environ["BRAVE_API_KEY"] = "test-brave-key"
os.environ["ZERO_X_API_KEY"] = "test-0x-key"
os.environ["DEBUG"] = "true"

from chainagent.chain.base import ChainClient, Receipt
from chainagent.config import ANVIL_MNEMONIC, Settings
from chainagent.errors import ChainError, SubmissionError
from chainagent.hdwallet.keyring import Keyring

# First accounts of the Anvil / Hardhat development mnemonic
ANVIL_ADDRESS_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ANVIL_ADDRESS_1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ANVIL_ADDRESS_2 = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
TOKEN = "0x6B175474E89094C44Da98b954EedcdeCB5BE3830"
RECEIVER = "0x000000000000000000000000000000000000dEaD"

ETHER = 10**18
GWEI = 10**9


class FakeChainClient(ChainClient):
    """In-memory node for executor tests.

    Records every submitted raw transaction and every transaction sent for
    gas estimation so tests can inspect what would have been broadcast.
    """

    def __init__(self, gas_price: int = GWEI, chain_id: int = 31337):
        self.balances: dict[str, int] = {}
        self.code: dict[str, bytes] = {}
        self.call_results: dict[tuple[str, bytes], bytes] = {}
        self.nonces: dict[str, int] = {}
        self.gas_price = gas_price
        self.chain_id = chain_id
        self.gas_estimate = 150_000
        self.gas_used = 21_000
        self.receipt_status = 1
        self.drop_receipts = False
        self.submit_error: Optional[Exception] = None
        self.estimate_error: Optional[Exception] = None

        self.submitted: list[bytes] = []
        self.estimated: list[dict[str, Any]] = []
        self.gas_price_calls = 0

    def set_balance(self, address: str, wei: int) -> None:
        self.balances[address.lower()] = wei

    def set_call_result(self, to: str, data: bytes, result: bytes) -> None:
        self.call_results[(to.lower(), bytes(data))] = result

    async def get_balance(self, address: str) -> int:
        return self.balances.get(address.lower(), 0)

    async def get_code(self, address: str) -> bytes:
        return self.code.get(address.lower(), b"")

    async def get_gas_price(self) -> int:
        self.gas_price_calls += 1
        return self.gas_price

    async def get_transaction_count(self, address: str) -> int:
        return self.nonces.get(address.lower(), 0)

    async def get_chain_id(self) -> int:
        return self.chain_id

    async def call(self, to: str, data: bytes) -> bytes:
        try:
            return self.call_results[(to.lower(), bytes(data))]
        except KeyError:
            raise ChainError(f"execution reverted: no result for call to {to}") from None

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        self.estimated.append(dict(tx))
        if self.estimate_error is not None:
            raise self.estimate_error
        return self.gas_estimate

    async def submit(self, raw_tx: bytes) -> str:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(bytes(raw_tx))
        return f"0x{len(self.submitted):064x}"

    async def await_receipt(self, tx_hash: str) -> Optional[Receipt]:
        if self.drop_receipts:
            return None
        return Receipt(
            tx_hash=tx_hash,
            gas_used=self.gas_used,
            status=self.receipt_status,
            block_number=1,
        )


@pytest.fixture(scope="session")
def anvil_keyring() -> Keyring:
    """Keyring of the ten default development accounts (derived once)."""
    return Keyring.derive(ANVIL_MNEMONIC, 10)


@pytest.fixture
def chain() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        eth_rpc="http://127.0.0.1:8545",
        brave_api_key="test-brave-key",
        zero_x_api_key="test-0x-key",
        account_count=3,
    )


@pytest.fixture
def rejecting_chain() -> FakeChainClient:
    """Chain whose node rejects every broadcast."""
    fake = FakeChainClient()
    fake.submit_error = SubmissionError("node rejected transaction: nonce too low")
    return fake
