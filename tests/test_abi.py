"""Tests for router and ERC20 calldata built from the contract ABIs."""

import pytest
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError

from chainagent.chain.abi import (
    ERC20_ABI,
    UNISWAP_V2_ROUTER_ABI,
    decode_output,
    encode_balance_of,
    encode_decimals,
    encode_swap_exact_eth_for_tokens,
    encode_swap_exact_tokens_for_eth,
)
from chainagent.config import WETH_MAINNET

from conftest import ANVIL_ADDRESS_0, TOKEN


class TestSelectors:
    """Known 4-byte selectors."""

    def test_swap_exact_eth_for_tokens(self):
        data = encode_swap_exact_eth_for_tokens(1, [WETH_MAINNET, TOKEN], ANVIL_ADDRESS_0, 2)
        assert data[:4].hex() == "7ff36ab5"

    def test_swap_exact_tokens_for_eth(self):
        data = encode_swap_exact_tokens_for_eth(1, 1, [TOKEN, WETH_MAINNET], ANVIL_ADDRESS_0, 2)
        assert data[:4].hex() == "18cbafe5"

    def test_balance_of(self):
        assert encode_balance_of(ANVIL_ADDRESS_0)[:4].hex() == "70a08231"

    def test_decimals(self):
        assert encode_decimals().hex() == "313ce567"


class TestArguments:
    """Encoded arguments decode back to the call's inputs."""

    def test_swap_exact_eth_for_tokens_args(self):
        data = encode_swap_exact_eth_for_tokens(
            900_000, [WETH_MAINNET, TOKEN], ANVIL_ADDRESS_0, 1_700_000_300
        )
        min_out, path, to, deadline = decode(
            ["uint256", "address[]", "address", "uint256"], data[4:]
        )

        assert min_out == 900_000
        assert [p.lower() for p in path] == [WETH_MAINNET.lower(), TOKEN.lower()]
        assert to.lower() == ANVIL_ADDRESS_0.lower()
        assert deadline == 1_700_000_300

    def test_swap_exact_tokens_for_eth_args(self):
        data = encode_swap_exact_tokens_for_eth(
            5_000, 4_500, [TOKEN, WETH_MAINNET], ANVIL_ADDRESS_0, 99
        )
        amount_in, min_out, path, _, deadline = decode(
            ["uint256", "uint256", "address[]", "address", "uint256"], data[4:]
        )

        assert amount_in == 5_000
        assert min_out == 4_500
        assert path[0].lower() == TOKEN.lower()
        assert deadline == 99

    def test_lowercase_addresses_accepted(self):
        """Addresses are checksummed before encoding."""
        data = encode_swap_exact_eth_for_tokens(
            1, [WETH_MAINNET.lower(), TOKEN.lower()], ANVIL_ADDRESS_0.lower(), 2
        )
        assert data == encode_swap_exact_eth_for_tokens(
            1, [WETH_MAINNET, TOKEN], ANVIL_ADDRESS_0, 2
        )


class TestDecodeOutput:
    """Return data is decoded through the declared outputs."""

    def test_balance_of(self):
        result = decode_output(ERC20_ABI, "balanceOf", encode(["uint256"], [12345]))
        assert result == (12345,)

    def test_decimals(self):
        assert decode_output(ERC20_ABI, "decimals", encode(["uint8"], [18])) == (18,)

    def test_router_amounts(self):
        data = encode(["uint256[]"], [[10**18, 2_000_000]])
        assert decode_output(UNISWAP_V2_ROUTER_ABI, "swapExactETHForTokens", data) == (
            (10**18, 2_000_000),
        )

    def test_empty_return_data(self):
        """Calls to non-contracts return nothing, which does not decode."""
        with pytest.raises(DecodingError):
            decode_output(ERC20_ABI, "balanceOf", b"")

    def test_undeclared_function(self):
        with pytest.raises(ValueError):
            decode_output(ERC20_ABI, "allowance", b"")
