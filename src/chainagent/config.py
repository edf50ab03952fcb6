"""Application configuration using pydantic-settings.

Node endpoint, API keys and trade parameters are read from the environment
(or a local .env file). The node endpoint and both API keys are required;
startup fails fast when any of them is missing.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Anvil / Hardhat default development mnemonic
ANVIL_MNEMONIC = "test test test test test test test test test test test junk"

WETH_MAINNET = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # External services
    # ======================
    eth_rpc: str = Field(..., description="Ethereum node RPC endpoint")
    brave_api_key: str = Field(..., description="Brave Search API subscription token")
    zero_x_api_key: str = Field(..., description="0x API key")

    # ======================
    # MCP server
    # ======================
    mcp_server_address: str = Field(default="127.0.0.1", description="MCP server bind host")
    mcp_server_port: int = Field(default=8000, description="MCP server bind port")

    # ======================
    # Keyring
    # ======================
    wallet_seed_phrase: str = Field(
        default=ANVIL_MNEMONIC, description="BIP-39 mnemonic the signing accounts derive from"
    )
    account_count: int = Field(default=10, ge=0, description="Number of accounts to derive")

    # ======================
    # Trading
    # ======================
    slippage_percent: int = Field(
        default=10, ge=0, le=100, description="Slippage margin shaved off expected output"
    )
    deadline_seconds: int = Field(default=300, gt=0, description="Swap deadline window")
    swap_gas_estimate: int = Field(
        default=200_000, gt=0, description="Gas units reserved for a router swap"
    )
    receipt_timeout: int = Field(default=300, gt=0, description="Seconds to wait for a receipt")
    weth_address: str = Field(default=WETH_MAINNET, description="Wrapped native currency")
    quote_chain_id: int = Field(default=1, description="Chain id sent to the 0x API")

    # ======================
    # Environment
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def bind_address(self) -> str:
        """host:port the MCP server listens on."""
        return f"{self.mcp_server_address}:{self.mcp_server_port}"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "eth_rpc": self.eth_rpc,
            "brave_api_key": "***" if self.brave_api_key else "(not set)",
            "zero_x_api_key": "***" if self.zero_x_api_key else "(not set)",
            "bind_address": self.bind_address,
            "wallet_seed_phrase": "***" if self.wallet_seed_phrase else "(not set)",
            "account_count": self.account_count,
            "trading": {
                "slippage_percent": self.slippage_percent,
                "deadline_seconds": self.deadline_seconds,
                "swap_gas_estimate": self.swap_gas_estimate,
                "receipt_timeout": self.receipt_timeout,
                "weth_address": self.weth_address,
            },
            "debug": self.debug,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
