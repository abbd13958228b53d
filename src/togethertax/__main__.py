"""TOGETHER TAX entry point.

Examples:
  togethertax serve                  Start the web server on 127.0.0.1:8000
  togethertax serve --port 9000      Start on another port
  togethertax sitemap                Print sitemap.xml to stdout
"""

import argparse
import asyncio
import logging

from togethertax.config import get_settings

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def run_server(host: str, port: int, dev: bool = False) -> None:
    import uvicorn

    logger.info("Starting web server on http://%s:%d", host, port)
    uvicorn.run(
        "togethertax.web:create_app",
        factory=True,
        host=host,
        port=port,
        reload=dev,
        log_level="info",
    )


async def print_sitemap() -> None:
    from togethertax.api.client import ApiClient
    from togethertax.sitemap import collect_sitemap_urls, generate_sitemap

    async with ApiClient() as client:
        urls = await collect_sitemap_urls(client, get_settings().site_url)
    print(generate_sitemap(urls))


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="TOGETHER TAX website backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the web server")
    serve.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    serve.add_argument("--dev", action="store_true", help="Auto-reload on code changes")

    sub.add_parser("sitemap", help="Print sitemap.xml to stdout")

    args = parser.parse_args()
    _setup_logging(get_settings().log_level)

    if args.command == "serve":
        run_server(args.host, args.port, dev=args.dev)
    elif args.command == "sitemap":
        asyncio.run(print_sitemap())
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
