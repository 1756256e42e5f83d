"""
Logging for the auction ledger.

All loggers live under the "auctionledger" namespace. Records emitted for a
specific auction carry its identifier, which the handlers render as an
"auction=<id>" tag so one auction's history can be grepped out of the log.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import colorlog

ROOT = "auctionledger"
LOG_FILE = "auctionledger.log"

_configured = False


class AuctionContextFilter(logging.Filter):
    """Render the optional `auction` attribute as a `context` field."""

    def filter(self, record: logging.LogRecord) -> bool:
        auction = getattr(record, "auction", None)
        record.context = f" auction={auction}" if auction is not None else ""
        return True


def _console_handler(level: int) -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stderr)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s%(context)s %(message)s",
            datefmt="%H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )
    return handler


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(exist_ok=True, parents=True)
    handler = logging.FileHandler(log_dir / LOG_FILE)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s%(context)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    log_to_file: bool = False,
) -> None:
    """
    (Re)configure the auctionledger loggers.

    Args:
        level: Logging level for every handler
        log_dir: Directory of the log file, ./logs if None
        log_to_file: Also append to <log_dir>/auctionledger.log
    """
    global _configured

    handlers = [_console_handler(level)]
    if log_to_file:
        handlers.append(_file_handler(Path(log_dir) if log_dir else Path("logs")))

    root = logging.getLogger(ROOT)
    root.setLevel(level)
    for old in root.handlers:
        old.close()
    root.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(AuctionContextFilter())
        root.addHandler(handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a subsystem, e.g. get_logger("host") -> auctionledger.host"""
    if not _configured:
        setup_logging()
    return logging.getLogger(f"{ROOT}.{name}")


def auction_logger(logger: logging.Logger, auction_id: int) -> logging.LoggerAdapter:
    """Adapter tagging every record with the auction it concerns."""
    return logging.LoggerAdapter(logger, {"auction": auction_id})
