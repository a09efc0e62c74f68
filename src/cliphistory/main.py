#!/usr/bin/env python3

import argparse
import logging
import os
import signal
import sys
import time
from typing import Optional

from cliphistory.clipboard import ClipboardPort, get_clipboard
from cliphistory.config import HistoryConfig, RedisConfig
from cliphistory.database import InMemoryStore, Store
from cliphistory.exceptions import StoreError
from cliphistory.services import ActionDispatcher, HistoryEngine, SelectionPolicy
from cliphistory.utils import render_menu

logger = logging.getLogger(__name__)


class ClipHistoryApp:

    def __init__(
        self,
        config: Optional[HistoryConfig] = None,
        redis_config: Optional[RedisConfig] = None,
        serve: bool = False,
        host: str = "127.0.0.1",
        port: int = 3001,
        clipboard: Optional[ClipboardPort] = None,
        store: Optional[Store] = None,
        quiet: bool = False,
    ):
        self.config = config or HistoryConfig()
        self.redis_config = redis_config
        self.serve = serve
        self.host = host
        self.port = port
        self.quiet = quiet
        self.clipboard = clipboard
        self.store = store
        self.engine: Optional[HistoryEngine] = None
        self.policy: Optional[SelectionPolicy] = None
        self.dispatcher: Optional[ActionDispatcher] = None
        self.running = False

    def _create_store(self) -> Store:
        if self.config.use_redis:
            redis_config = self.redis_config or RedisConfig.from_env()
            try:
                store = redis_config.create_store()
                logger.info(f"Redis connected - {redis_config.host}:{redis_config.port}/{redis_config.db}")
                return store
            except StoreError as e:
                logger.warning(f"Redis unavailable, continuing without persistence: {e}")
        return InMemoryStore()

    def _on_history_changed(self):
        if self.quiet or self.policy is None:
            return
        print(render_menu(self.policy.recent(), self.policy.favourites()))
        print()

    def start(self):
        if self.running:
            return

        if self.store is None:
            self.store = self._create_store()
        if self.clipboard is None:
            self.clipboard = get_clipboard()

        self.policy = SelectionPolicy(self.store, recent_limit=self.config.recent_limit)
        self.engine = HistoryEngine(
            self.store,
            self.clipboard,
            poll_interval=self.config.poll_interval,
            suppression_delay=self.config.effective_suppression_delay,
            on_history_changed=self._on_history_changed,
        )
        self.dispatcher = ActionDispatcher(self.store, self.engine)

        self.running = True
        self.engine.start()
        print(f"cliphistory running ({type(self.store).__name__}). Press Ctrl+C to stop")

    def stop(self):
        if not self.running:
            return

        self.running = False

        if self.engine:
            self.engine.stop()

        if self.store:
            try:
                self.store.close()
            except Exception as e:
                logger.warning(f"Could not close store: {e}")

        print("cliphistory stopped")

    def run_forever(self):
        self.start()

        try:
            if self.serve:
                import uvicorn
                from cliphistory.api import create_app

                app = create_app(self.store, self.policy, self.dispatcher)
                uvicorn.run(app, host=self.host, port=self.port)
            else:
                while self.running:
                    time.sleep(1.0)
        except KeyboardInterrupt:
            print("\nStopping...")
        finally:
            self.stop()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="cliphistory - deduplicated clipboard history with favourites"
    )

    parser.add_argument(
        "-i", "--poll-interval",
        type=float,
        default=None,
        help="Clipboard polling interval in seconds (default: 1.0)"
    )

    parser.add_argument(
        "-l", "--recent-limit",
        type=int,
        default=None,
        help="Number of entries in the recent list (default: 20)"
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Expose the history over HTTP"
    )

    parser.add_argument(
        "-p", "--port",
        type=int,
        default=int(os.getenv("CLIPHISTORY_PORT", "3001")),
        help="HTTP port used with --serve (default: 3001)"
    )

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="HTTP host used with --serve (default: 127.0.0.1)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--no-redis",
        action="store_true",
        help="Keep history in memory instead of Redis"
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> HistoryConfig:
    base = HistoryConfig.from_env()
    poll_interval = args.poll_interval if args.poll_interval is not None else base.poll_interval
    suppression_delay = base.suppression_delay
    if suppression_delay is not None and suppression_delay <= poll_interval:
        # an overridden interval invalidates the configured window
        suppression_delay = None

    return HistoryConfig(
        poll_interval=poll_interval,
        recent_limit=args.recent_limit if args.recent_limit is not None else base.recent_limit,
        suppression_delay=suppression_delay,
        use_redis=base.use_redis and not args.no_redis,
    )


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    app = ClipHistoryApp(
        config=config,
        serve=args.serve,
        host=args.host,
        port=args.port,
    )

    def signal_handler(signum, frame):
        app.stop()
        sys.exit(0)

    if not args.serve:
        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run_forever()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
