from components.api_app.main import create_app as create_source_app
from components.memory_service import MemoryService
from fastapi import FastAPI
from fastapi_mcp import FastApiMCP  # type: ignore

MCP_TOOL_TAGS = ["search", "related", "index"]


def create_mcp_app(service: MemoryService) -> FastAPI:
    """
    Creates and configures the MCP-compliant FastAPI application.

    Args:
        service: The fully initialized MemoryService instance.

    Returns:
        The configured MCP FastAPI app instance.
    """
    # 1. Create the source API app in-memory for introspection.
    source_app = create_source_app(service)

    # 2. Create the MCP wrapper, filtering for agent-relevant tools.
    mcp = FastApiMCP(
        source_app,
        name="Memory Index MCP",
        include_tags=MCP_TOOL_TAGS,
    )

    # 3. Create a new, clean FastAPI app for the MCP server.
    mcp_app = FastAPI(title="Memory Index MCP Server")

    # 4. Mount the MCP routes onto the new app.
    mcp.mount_http(mcp_app)

    return mcp_app
