import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from announcement_monitor.config.loader import MonitorConfig, parse_exchange_intervals, parse_exchange_list
from announcement_monitor.core.proxy_manager import ProxyRotator
from announcement_monitor.exchanges.factory import ExchangeFactory
from announcement_monitor.supervisor import Supervisor
from announcement_monitor.utils.logger import setup_logging

DEFAULT_CONFIG = "config/general.yaml"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Monitor cryptocurrency exchanges for new listing announcements",
        epilog=f"Available exchanges: {', '.join(ExchangeFactory.available())}",
    )
    parser.add_argument(
        "--exchanges",
        help="Comma-separated list of exchanges to monitor (default: all)",
    )
    parser.add_argument(
        "--interval",
        type=int,
        help="Default polling interval in seconds (default: 300)",
    )
    parser.add_argument(
        "--exchange-intervals",
        help="Per-exchange polling intervals, e.g. binance:60,okx:120",
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-dir",
        help="Also write rotating log files into this directory",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file (default: .env in the working directory)",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"YAML settings file (default: {DEFAULT_CONFIG})",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> MonitorConfig:
    """YAML settings first, command line flags on top"""
    # A missing default file is normal, a missing explicit one is warned about
    if args.config == DEFAULT_CONFIG and not Path(DEFAULT_CONFIG).exists():
        config = MonitorConfig()
    else:
        config = MonitorConfig.load(args.config)

    exchanges = parse_exchange_list(args.exchanges)
    return config.merge(
        default_poll_interval=args.interval,
        exchange_intervals=parse_exchange_intervals(args.exchange_intervals) or None,
        enabled_exchanges=exchanges or None,
        log_level=args.log_level,
    )


async def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    config = build_config(args)
    setup_logging(config.log_level, args.log_dir)
    logger.info("🚀 Starting Exchange Announcement Monitor")

    rotator = ProxyRotator.from_env()
    supervisor = Supervisor(config, rotator)

    try:
        await supervisor.run()
    except asyncio.CancelledError:
        logger.info("Interrupted by user")
    finally:
        await supervisor.cleanup()
        logger.info("✅ Shutdown complete")


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
