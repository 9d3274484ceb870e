"""ayga-mcp command line entry point."""

import click

from ayga_mcp.app import SERVER_VERSION, build_app
from ayga_mcp.foundation.config import get_settings
from ayga_mcp.runtime.observability import configure_logging


@click.command()
@click.version_option(version=SERVER_VERSION, prog_name="ayga-mcp")
@click.option(
    "--transport", "-t",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    show_default=True,
    help="stdio for MCP clients, http for the REST adapter",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address for --transport http")
@click.option("--port", default=8000, show_default=True, type=int, help="Port for --transport http")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(transport: str, host: str, port: int, verbose: bool) -> None:
    """Serve ayga scraping parsers as MCP tools.

    Configuration comes from the environment: REDIS_API_KEY, API_URL,
    DYNAMIC_PARSERS, DEBUG and the AYGA_* tuning variables.
    """
    settings = get_settings()
    configure_logging(settings.logging.format, "DEBUG" if verbose else settings.log_level)
    app = build_app(settings)

    if transport == "http":
        from ayga_mcp.ext.mcp import serve_http
        serve_http(app, host=host, port=port)
    else:
        from ayga_mcp.ext.mcp import serve_mcp
        serve_mcp(app)


if __name__ == "__main__":
    main()
