"""Entry point for the demolsp language server."""

import asyncio
import sys


def main():
    """Run the language server on stdin/stdout."""
    from .server.server import run_server
    from .utils.config import ConfigError

    log_level = None
    if len(sys.argv) > 1:
        log_level = sys.argv[1]

    try:
        exit_code = asyncio.run(run_server(log_level=log_level))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
