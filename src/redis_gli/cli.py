"""CLI entry point for redis-gli."""

import argparse
import logging
import sys

import redis_gli.io.logging_setup
import redis_gli.io.settings
from redis_gli.store.redis_store import RedisStoreClient
from redis_gli.tui.app import RedisGliApp
from redis_gli.tui.key_bindings import KeyBindingRegistry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redis-gli",
        description="Terminal browser for Redis-compatible key-value stores",
    )
    parser.add_argument("--host", type=str, default=None, help="Server host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Server port (default: 6379)")
    parser.add_argument("--db", type=int, default=None, help="Database index (default: 0)")
    parser.add_argument(
        "--password", type=str, default=None, help="Server password. Env: REDIS_GLI_PASSWORD"
    )
    parser.add_argument(
        "--max-keys",
        dest="max_key_limit",
        type=int,
        default=None,
        help="Maximum keys listed by the initial scan (default: 1000)",
    )
    parser.add_argument(
        "--refresh",
        dest="status_refresh_seconds",
        type=float,
        default=None,
        help="Server status refresh interval in seconds (default: 30)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Echo every key press to the output panel",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {redis_gli.io.settings.package_version()}",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_runtime = redis_gli.io.logging_setup.configure()
    logger.info("Logging to %s (level %s)", log_runtime.file_path, log_runtime.level_name)

    try:
        config = redis_gli.io.settings.resolve_config(vars(args))
        bindings = KeyBindingRegistry.with_overrides(config.key_bindings)
    except ValueError as e:
        # ConfigError is a ValueError, as are invalid key bindings.
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    client = RedisStoreClient(
        host=config.host, port=config.port, db=config.db, password=config.password
    )
    app = RedisGliApp(client, config, bindings=bindings)

    try:
        with log_runtime.stderr_muted():
            app.run()
    finally:
        # Dump buffered errors to stderr (TUI is gone, terminal is restored)
        if app.error_log:
            logger.error("[redis-gli] Errors during session:")
            for line in app.error_log:
                logger.error("  %s", line)
        client.close()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
