"""Router and ERC20 contract ABIs, with calldata helpers built on them.

Calldata is produced through web3 contract objects so it can be handed to
any ChainClient (and inspected in tests) without a live provider.
"""

from typing import Any

from web3 import Web3

# Uniswap V2 Router02
UNISWAP_V2_ROUTER_ABI = [
    {
        "inputs": [
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactETHForTokens",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactTokensForETH",
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

ERC20_ABI = [
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]

# Offline instance: only the ABI codec is used, no provider is contacted
_w3 = Web3()

router_contract = _w3.eth.contract(abi=UNISWAP_V2_ROUTER_ABI)
erc20_contract = _w3.eth.contract(abi=ERC20_ABI)


def _encode(contract, fn_name: str, args: list[Any]) -> bytes:
    return Web3.to_bytes(hexstr=contract.encode_abi(fn_name, args=args))


def _checksum_all(addresses) -> list[str]:
    return [Web3.to_checksum_address(a) for a in addresses]


def encode_swap_exact_eth_for_tokens(
    amount_out_min: int, path: list[str], to: str, deadline: int
) -> bytes:
    return _encode(
        router_contract,
        "swapExactETHForTokens",
        [amount_out_min, _checksum_all(path), Web3.to_checksum_address(to), deadline],
    )


def encode_swap_exact_tokens_for_eth(
    amount_in: int, amount_out_min: int, path: list[str], to: str, deadline: int
) -> bytes:
    return _encode(
        router_contract,
        "swapExactTokensForETH",
        [amount_in, amount_out_min, _checksum_all(path), Web3.to_checksum_address(to), deadline],
    )


def encode_balance_of(owner: str) -> bytes:
    return _encode(erc20_contract, "balanceOf", [Web3.to_checksum_address(owner)])


def encode_decimals() -> bytes:
    return _encode(erc20_contract, "decimals", [])


def decode_output(abi: list[dict], fn_name: str, data: bytes) -> tuple:
    """Decode the return data of `fn_name` using its declared outputs.

    Raises:
        eth_abi.exceptions.DecodingError: If data does not match the outputs
    """
    fn_abi = next(
        (item for item in abi if item.get("type") == "function" and item.get("name") == fn_name),
        None,
    )
    if fn_abi is None:
        raise ValueError(f"{fn_name} is not declared in the ABI")

    output_types = [output["type"] for output in fn_abi["outputs"]]
    return tuple(_w3.codec.decode(output_types, bytes(data)))
