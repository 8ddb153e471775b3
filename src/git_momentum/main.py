from logging import Logger
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import get_logger

from git_momentum.clients.generation import GenerationClient
from git_momentum.clients.github import get_github_token
from git_momentum.servers.dashboard import DashboardServer
from git_momentum.servers.generator import GeneratorServer
from git_momentum.servers.repository import RepositoryServer
from git_momentum.servers.session import SessionServer
from git_momentum.servers.streaks import StreakServer
from git_momentum.session import Session

logger: Logger = get_logger(name=__name__)

mcp: FastMCP[None] = FastMCP[None](name="Git Momentum MCP")

mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

session: Session = Session(initial_token=get_github_token(), logger=logger)
generation_client: GenerationClient = GenerationClient(logger=logger)

_ = SessionServer(session=session, logger=logger).register_tools(fastmcp=mcp)
_ = DashboardServer(session=session, logger=logger).register_tools(fastmcp=mcp)
_ = RepositoryServer(session=session, generation_client=generation_client, logger=logger).register_tools(fastmcp=mcp)
_ = StreakServer(session=session, logger=logger).register_tools(fastmcp=mcp)
_ = GeneratorServer(session=session, generation_client=generation_client, logger=logger).register_tools(fastmcp=mcp)


@click.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
def run_mcp(mcp_transport: Literal["stdio", "streamable-http"]):
    mcp.run(transport=mcp_transport)


if __name__ == "__main__":
    run_mcp()
