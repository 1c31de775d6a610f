"""Command-line entry point that assembles and runs the server."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Optional, Sequence

from gedis.app import App
from gedis.config import DEFAULT_PATH, Config, load_config
from gedis.database import Database
from gedis.handler import RespHandler
from gedis.tcp import must_listen

logger = logging.getLogger(__name__)


def build_app(config: Config) -> App:
    """Wire the database, the RESP handler and the listener into an app."""
    database = Database(
        count=config.database.count,
        append_only=config.database.append_only,
        aof_filename=config.database.aof_filename or None,
    )
    handler = RespHandler(database)
    try:
        listener = must_listen(config)
    except Exception:
        database.close()
        raise
    return App(handler, listener)


def _run(application: App) -> None:
    try:
        application.run()
    except OSError as exc:
        logger.error("%s", exc)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the server and block until it is told to stop."""
    parser = argparse.ArgumentParser(prog="gedis", description="In-memory key-value server.")
    parser.add_argument(
        "-c", "--config", default=DEFAULT_PATH, help="path of the YAML configuration file"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    try:
        application = build_app(load_config(args.config))
    except (OSError, ValueError) as exc:
        print(f"gedis: {exc}", file=sys.stderr)
        return 1
    runner = threading.Thread(target=_run, args=(application,), daemon=True)
    runner.start()
    application.listen_and_quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())