"""
CLI tests: a whole auction driven through click commands.
"""

import re

import pytest
from click.testing import CliRunner

from auctionledger.cli.main import cli
from auctionledger.core.auction import create_commitment
from auctionledger.crypto import bytes_to_hex

PASSWORD = "hunter2"


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--data-dir", str(tmp_path), *map(str, args)])
    return invoke


@pytest.fixture
def wallets(run):
    for name in ("admin", "seller", "alice"):
        result = run("keys", "create", "--name", name, "--password", PASSWORD)
        assert result.exit_code == 0, result.output
    return run


def lines(result):
    return result.output.splitlines()


def test_key_management(wallets):
    result = wallets("keys", "list")
    assert result.exit_code == 0
    assert [line.split()[0] for line in lines(result)] == ["admin", "alice", "seller"]

    duplicate = wallets("keys", "create", "--name", "admin", "--password", PASSWORD)
    assert duplicate.exit_code != 0
    assert "already exists" in duplicate.output


def test_wrong_password(wallets):
    result = wallets("init", "--key", "admin", "--password", "nope")
    assert result.exit_code != 0
    assert "wrong password" in result.output


def test_clock(run):
    now = int(lines(run("clock", "show"))[-1])
    assert int(lines(run("clock", "advance", 30))[-1]) == now + 30


def test_commit_with_fixed_salt(run):
    salt = bytes(range(32))
    result = run("commit", 25, "--salt", bytes_to_hex(salt))
    assert result.exit_code == 0
    assert f"commitment: {bytes_to_hex(create_commitment(25, salt))}" in lines(result)


def test_full_auction(wallets):
    run = wallets
    assert run("mint", "ART-0001", "seller", 1).exit_code == 0
    assert run("mint", "native", "alice", 100).exit_code == 0

    result = run("init", "--key", "admin", "--password", PASSWORD, "--commission", 5, "--extendable")
    assert result.exit_code == 0, result.output

    result = run(
        "start", "--key", "seller", "--password", PASSWORD,
        "--item", "ART-0001", "--price", 10, "--duration", 3600,
    )
    assert result.exit_code == 0, result.output
    auction_id = re.search(r"Auction started: (\d+)", result.output).group(1)

    result = run("bid", auction_id, 20, "--key", "alice", "--password", PASSWORD)
    assert result.exit_code == 0, result.output

    result = run("extend", auction_id, 60, "--key", "seller", "--password", PASSWORD)
    assert result.exit_code == 0, result.output

    result = run("show", auction_id)
    assert result.exit_code == 0
    assert '"current_price": 20' in result.output
    assert '"phase": "RUNNING"' in result.output

    result = run("resolve", auction_id)
    assert result.exit_code != 0
    assert "StateConflict" in result.output

    run("clock", "advance", 3660)
    result = run("resolve", auction_id)
    assert result.exit_code == 0, result.output
    assert "  Commission: 1" in lines(result)
    assert "  Seller receives: 19" in lines(result)

    assert "19" in lines(run("balance", "native", "seller"))
    assert "1" in lines(run("balance", "ART-0001", "alice"))

    result = run("bid", auction_id, 50, "--key", "alice", "--password", PASSWORD)
    assert result.exit_code != 0
    assert "AuctionEnded" in result.output


def test_show_missing_auction(run):
    result = run("show", 42)
    assert result.exit_code != 0
    assert "no auction 42" in result.output


def test_sealed_auction(wallets):
    run = wallets
    run("mint", "ART-0001", "seller", 1)
    run("mint", "native", "alice", 100)
    run("init", "--key", "admin", "--password", PASSWORD)

    result = run(
        "start", "--key", "seller", "--password", PASSWORD,
        "--item", "ART-0001", "--price", 10, "--duration", 3600, "--sealed", 600,
    )
    auction_id = re.search(r"Auction started: (\d+)", result.output).group(1)

    salt = bytes_to_hex(bytes(32))
    result = run("commit", 30, "--salt", salt)
    commitment = re.search(r"commitment: (0x[0-9a-f]+)", result.output).group(1)

    result = run("seal", auction_id, commitment, "--key", "alice", "--password", PASSWORD)
    assert result.exit_code == 0, result.output

    result = run("bid", auction_id, 30, "--key", "alice", "--password", PASSWORD, "--salt", salt)
    assert result.exit_code != 0
    assert "StateConflict" in result.output

    run("clock", "advance", 600)
    result = run("bid", auction_id, 30, "--key", "alice", "--password", PASSWORD, "--salt", salt)
    assert result.exit_code == 0, result.output

    run("clock", "advance", 3000)
    result = run("resolve", auction_id)
    assert result.exit_code == 0, result.output
    assert "  Amount: 30" in lines(result)
