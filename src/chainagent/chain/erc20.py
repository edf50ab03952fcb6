"""Read-only ERC20 queries through a ChainClient."""

from eth_abi.exceptions import DecodingError

from chainagent.chain.abi import ERC20_ABI, decode_output, encode_balance_of, encode_decimals
from chainagent.chain.base import ChainClient
from chainagent.errors import ChainError


async def _call_view(chain: ChainClient, token: str, fn_name: str, data: bytes) -> int:
    result = await chain.call(token, data)
    try:
        return decode_output(ERC20_ABI, fn_name, result)[0]
    except DecodingError as e:
        raise ChainError(f"{token} returned invalid {fn_name} data; is it an ERC20 contract?") from e


async def erc20_balance(chain: ChainClient, token: str, owner: str) -> int:
    """Token balance of owner in base units."""
    return await _call_view(chain, token, "balanceOf", encode_balance_of(owner))


async def erc20_decimals(chain: ChainClient, token: str) -> int:
    return await _call_view(chain, token, "decimals", encode_decimals())
