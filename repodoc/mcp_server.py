"""MCP stdio server exposing documentation generation as a tool."""

from __future__ import annotations

from typing import Annotated, Callable, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from .config import Settings
from .logging import get_logger
from .orchestrator import Orchestrator
from .tool import DEFAULT_TARGET_LANGUAGE, generate_documentation

logger = get_logger("mcp")

SERVER_NAME = "repodoc"
TOOL_NAME = "generateDocumentation"


def create_server(orchestrator_factory: Callable[[], Orchestrator]) -> FastMCP:
    """Create the MCP server with the ``generateDocumentation`` tool registered."""

    server = FastMCP(SERVER_NAME)

    # Argument names are the tool's published input schema.
    @server.tool(
        name=TOOL_NAME,
        description="Analyzes a local git repository and generates documentation",
    )
    async def generate(
        projectPath: Annotated[str, Field(description="The absolute path to the local repository to analyze")],
        includeTests: Annotated[
            bool, Field(description="Whether to include test files in analysis (default: false)")
        ] = False,
        targetLanguage: Annotated[
            Optional[str],
            Field(description="The target language for the generated documentation (e.g., 'English', 'Polish')"),
        ] = DEFAULT_TARGET_LANGUAGE,
        outputDir: Annotated[
            Optional[str],
            Field(
                description="Directory to write generated documentation to (relative to projectPath, or absolute). "
                "If provided, files will be written to disk."
            ),
        ] = None,
    ) -> CallToolResult:
        logger.info("Tool call %s for %s", TOOL_NAME, projectPath)
        result = await generate_documentation(
            orchestrator_factory(),
            projectPath,
            include_tests=includeTests,
            target_language=targetLanguage,
            output_dir=outputDir,
        )
        return CallToolResult(
            content=[TextContent(type="text", text=result.text)],
            isError=result.is_error,
        )

    return server


def run_mcp_server(settings: Settings) -> None:  # pragma: no cover - integration path
    # stdout is the protocol channel; logging is configured for stderr only.
    logger.info("Starting %s MCP server on stdio", SERVER_NAME)
    create_server(lambda: Orchestrator.from_settings(settings)).run(transport="stdio")


__all__ = ["SERVER_NAME", "TOOL_NAME", "create_server", "run_mcp_server"]
