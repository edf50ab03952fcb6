"""Tests for the MCP tool server wiring."""

from types import SimpleNamespace

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from chainagent.tools import server as tool_server
from chainagent.tools.server import TOOLS, ServerContext, create_server
from chainagent.tools.toolkit import Toolkit

from conftest import ANVIL_ADDRESS_0, ETHER, RECEIVER
from test_toolkit import FakeQuotes, FakeSearch


@pytest.fixture
def toolkit(chain, anvil_keyring, settings):
    chain.set_balance(ANVIL_ADDRESS_0, 3 * ETHER)
    return Toolkit(chain, anvil_keyring, FakeQuotes(1), FakeSearch(), settings)


@pytest.fixture
def ctx(toolkit):
    """Stand-in for the MCP request context."""
    return SimpleNamespace(
        request_context=SimpleNamespace(lifespan_context=ServerContext(toolkit=toolkit))
    )


class TestToolTable:
    """Tests for tool registration."""

    def test_tool_names(self):
        assert set(TOOLS) == {
            "balance",
            "send",
            "get_contract",
            "get_erc20_balance",
            "web_search",
            "get_quote",
            "swap_eth_for_tokens",
            "swap_tokens_for_eth",
        }

    @pytest.mark.asyncio
    async def test_all_tools_registered(self, settings, toolkit):
        server = create_server(settings, toolkit=toolkit)
        tools = await server.list_tools()

        assert {tool.name for tool in tools} == set(TOOLS)
        for tool in tools:
            assert tool.description == TOOLS[tool.name][1]

    @pytest.mark.asyncio
    async def test_context_not_in_schema(self, settings, toolkit):
        """The MCP context argument is injected, not exposed to agents."""
        server = create_server(settings, toolkit=toolkit)
        tools = {tool.name: tool for tool in await server.list_tools()}

        properties = tools["balance"].inputSchema["properties"]
        assert set(properties) == {"addr"}


class TestHandlers:
    """Tests for tool handlers and error mapping."""

    @pytest.mark.asyncio
    async def test_balance(self, ctx):
        assert await tool_server.balance(ctx, ANVIL_ADDRESS_0) == str(3 * ETHER)

    @pytest.mark.asyncio
    async def test_send(self, ctx, chain):
        reply = await tool_server.send(ctx, RECEIVER, "0.25")

        assert reply.startswith("Transaction successful!")
        assert len(chain.submitted) == 1

    @pytest.mark.asyncio
    async def test_parse_failure_is_tool_error(self, ctx):
        with pytest.raises(ToolError, match="^server failed to get balance: Invalid address"):
            await tool_server.balance(ctx, "0xnope")

    @pytest.mark.asyncio
    async def test_insufficient_funds_is_tool_error(self, ctx):
        with pytest.raises(ToolError, match="^server failed to send: Insufficient balance"):
            await tool_server.send(ctx, RECEIVER, "100")

    @pytest.mark.asyncio
    async def test_swap_failure_prefix(self, ctx, chain):
        chain.drop_receipts = True

        with pytest.raises(ToolError, match="^token swap failed: Transaction failed: no receipt"):
            await tool_server.swap_eth_for_tokens(
                ctx,
                "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D",
                "1",
                "0x6B175474E89094C44Da98b954EedcdeCB5BE3830",
            )
