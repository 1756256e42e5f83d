"""
Tests for logging setup and per-auction context.
"""

import logging

from auctionledger.utils.logger import (
    LOG_FILE,
    AuctionContextFilter,
    auction_logger,
    get_logger,
    setup_logging,
)


def make_record(**extra):
    record = logging.LogRecord("auctionledger.test", logging.INFO, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


class TestAuctionContext:

    def test_tagged_record(self):
        record = make_record(auction=42)
        assert AuctionContextFilter().filter(record)
        assert record.context == " auction=42"

    def test_untagged_record(self):
        record = make_record()
        assert AuctionContextFilter().filter(record)
        assert record.context == ""

    def test_adapter_attaches_auction(self, caplog):
        caplog.set_level(logging.INFO, logger="auctionledger")
        auction_logger(get_logger("test"), 7).info("started")

        record = caplog.records[-1]
        assert record.name == "auctionledger.test"
        assert record.auction == 7
        assert record.getMessage() == "started"


class TestSetup:

    def test_file_log_carries_context(self, tmp_path):
        setup_logging(level=logging.INFO, log_dir=tmp_path, log_to_file=True)
        try:
            auction_logger(get_logger("test"), 99).info("closed without sale")
            get_logger("test").info("plain line")
            for handler in logging.getLogger("auctionledger").handlers:
                handler.flush()

            text = (tmp_path / LOG_FILE).read_text()
            assert "[auctionledger.test] INFO auction=99 closed without sale" in text
            assert "[auctionledger.test] INFO plain line" in text
        finally:
            setup_logging()
