"""
Auction Ledger CLI

Drives a SQLite-backed host from the command line: key management,
faucet, ledger clock and every contract entry point.
"""

import base64
import hashlib
import json
from pathlib import Path
from typing import Optional

import click

from auctionledger.utils.logger import setup_logging


def _fernet(key_name: str, password: str):
    from cryptography.fernet import Fernet

    salt = key_name.encode()
    key = base64.urlsafe_b64encode(
        hashlib.pbkdf2_hmac("sha256", password.encode(), salt, 100000)
    )
    return Fernet(key)


def load_keypair(ctx, name: str, password: str):
    """Decrypt a stored keypair, exiting with a message on failure."""
    from cryptography.fernet import InvalidToken
    from auctionledger.crypto import keypair_from_private_key

    key_path = ctx.obj["data_dir"] / "keys" / f"{name}.json"
    if not key_path.exists():
        raise click.ClickException(f"no key named {name}")

    key_data = json.loads(key_path.read_text())
    try:
        private_key = _fernet(name, password).decrypt(key_data["encrypted_private_key"].encode())
    except InvalidToken:
        raise click.ClickException(f"wrong password for key {name}")
    return keypair_from_private_key(private_key)


def resolve_address(ctx, who: str) -> str:
    """Accept either an address or the name of a stored key."""
    from auctionledger.crypto import is_valid_address

    if is_valid_address(who):
        return who
    key_path = ctx.obj["data_dir"] / "keys" / f"{who}.json"
    if not key_path.exists():
        raise click.ClickException(f"{who} is neither an address nor a stored key")
    return json.loads(key_path.read_text())["address"]


def open_host(ctx):
    from auctionledger.host import Host

    return Host.open(ctx.obj["config"])


def run_contract(ctx, call):
    """Run a contract call, turning aborts into CLI errors."""
    from auctionledger.core.errors import AuctionError

    host = open_host(ctx)
    try:
        return call(host)
    except AuctionError as exc:
        raise click.ClickException(f"{type(exc).__name__}: {exc}")
    finally:
        host.close()


def password_option(func):
    return click.option(
        "--password", prompt=True, hide_input=True, help="Key password"
    )(func)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", default=None, help="JSON or TOML config file")
@click.option("--data-dir", default=None, help="Data directory")
@click.version_option(version="0.1.4")
@click.pass_context
def cli(ctx, debug, config_path, data_dir):
    """Auction Ledger - on-ledger auctions for digital property"""
    import logging
    from auctionledger.core.config import load_config

    config = load_config(config_path)
    if data_dir:
        config = config.model_copy(update={"data_dir": Path(data_dir).expanduser()})

    level = logging.DEBUG if debug else config.level
    setup_logging(level=level, log_dir=str(config.log_dir), log_to_file=config.log_to_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["data_dir"] = config.data_dir
    ctx.obj["data_dir"].mkdir(parents=True, exist_ok=True)


# =============================================================================
# Keys
# =============================================================================

@cli.group()
def keys():
    """Key management commands"""
    pass


@keys.command("create")
@click.option("--name", default="default", help="Key name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Encryption password")
@click.pass_context
def keys_create(ctx, name, password):
    """Create a new encrypted keypair"""
    from auctionledger.crypto import bytes_to_hex, generate_keypair

    key_path = ctx.obj["data_dir"] / "keys" / f"{name}.json"
    if key_path.exists():
        raise click.ClickException(f"key {name} already exists")

    kp = generate_keypair()
    key_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_text(json.dumps({
        "name": name,
        "address": kp.address,
        "public_key": bytes_to_hex(kp.public_key),
        "encrypted_private_key": _fernet(name, password).encrypt(kp.private_key).decode("utf-8"),
    }, indent=2))

    click.echo(f"✓ Key created: {name}")
    click.echo(f"  Address: {kp.address}")


@keys.command("list")
@click.pass_context
def keys_list(ctx):
    """List stored keys"""
    key_dir = ctx.obj["data_dir"] / "keys"
    if not key_dir.exists():
        click.echo("No keys found")
        return
    for key_path in sorted(key_dir.glob("*.json")):
        key_data = json.loads(key_path.read_text())
        click.echo(f"{key_data['name']:<16} {key_data['address']}")


# =============================================================================
# Host administration
# =============================================================================

@cli.command()
@click.argument("asset")
@click.argument("owner")
@click.argument("amount", type=int)
@click.pass_context
def mint(ctx, asset, owner, amount):
    """Credit AMOUNT of ASSET to OWNER (faucet)"""
    address = resolve_address(ctx, owner)
    host = open_host(ctx)
    try:
        host.mint(asset, address, amount)
        click.echo(f"✓ {address} now holds {host.balance(asset, address)} {asset}")
    finally:
        host.close()


@cli.command()
@click.argument("asset")
@click.argument("owner")
@click.pass_context
def balance(ctx, asset, owner):
    """Show OWNER's balance of ASSET"""
    address = resolve_address(ctx, owner)
    host = open_host(ctx)
    try:
        click.echo(host.balance(asset, address))
    finally:
        host.close()


@cli.group()
def clock():
    """Ledger clock commands"""
    pass


@clock.command("show")
@click.pass_context
def clock_show(ctx):
    """Show the ledger timestamp"""
    host = open_host(ctx)
    try:
        click.echo(host.clock.now())
    finally:
        host.close()


@clock.command("advance")
@click.argument("seconds", type=int)
@click.pass_context
def clock_advance(ctx, seconds):
    """Move the ledger clock forward"""
    host = open_host(ctx)
    try:
        click.echo(host.clock.advance(seconds))
    finally:
        host.close()


# =============================================================================
# Contract
# =============================================================================

@cli.command()
@click.option("--key", "key_name", required=True, help="Admin key")
@password_option
@click.option("--anti-snipe", default=0, type=int, help="Anti-snipe window (seconds)")
@click.option("--commission", default=0, type=int, help="Commission rate (percent)")
@click.option("--extendable/--no-extendable", default=False, help="Allow sellers to extend auctions")
@click.pass_context
def init(ctx, key_name, password, anti_snipe, commission, extendable):
    """Initialize the auction contract"""
    from auctionledger.client import AuctionClient

    admin = load_keypair(ctx, key_name, password)
    run_contract(ctx, lambda host: AuctionClient(host).initialize(
        admin, anti_snipe, commission, extendable
    ))
    click.echo(f"✓ Contract initialized, admin {admin.address}")


@cli.command()
@click.option("--key", "key_name", required=True, help="Seller key")
@password_option
@click.option("--item", required=True, help="Property asset identifier")
@click.option("--price", required=True, type=int, help="Starting price")
@click.option("--duration", required=True, type=int, help="Duration (seconds)")
@click.option("--market", default="native", help="Payment asset")
@click.option("--sealed", default=0, type=int, help="Sealed phase length (seconds)")
@click.option("--discount-percent", default=0, type=int, help="Dutch discount per period")
@click.option("--discount-frequency", default=0, type=int, help="Dutch period (seconds)")
@click.option("--compounded", is_flag=True, help="Compound the Dutch discount")
@click.option("--reserve", default=0, type=int, help="Dutch price floor")
@click.option("--min-commission", default=0, type=int)
@click.option("--max-commission", default=0, type=int)
@click.pass_context
def start(ctx, key_name, password, item, price, duration, market, sealed,
          discount_percent, discount_frequency, compounded, reserve,
          min_commission, max_commission):
    """Start an auction"""
    from auctionledger.client import AuctionClient
    from auctionledger.core.auction import AuctionSettings

    seller = load_keypair(ctx, key_name, password)
    settings = AuctionSettings(
        seller=seller.address,
        item=item,
        market=market,
        starting_price=price,
        duration=duration,
        sealed_phase_time=sealed,
        discount_percent=discount_percent,
        discount_frequency=discount_frequency,
        compounded_discount=compounded,
        reserve_price=reserve,
        min_commission=min_commission,
        max_commission=max_commission,
    )
    auction_id = run_contract(ctx, lambda host: AuctionClient(host).start(settings, [seller]))
    click.echo(f"✓ Auction started: {auction_id}")


@cli.command()
@click.argument("amount", type=int)
@click.option("--salt", default=None, help="32-byte hex salt (random if omitted)")
def commit(amount, salt):
    """Compute a sealed-bid commitment for AMOUNT"""
    from auctionledger.core.auction import create_commitment
    from auctionledger.crypto import bytes_to_hex, hex_to_bytes, random_salt

    salt_bytes = hex_to_bytes(salt) if salt else random_salt()
    try:
        commitment = create_commitment(amount, salt_bytes)
    except ValueError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"commitment: {bytes_to_hex(commitment)}")
    click.echo(f"salt:       {bytes_to_hex(salt_bytes)}")


@cli.command()
@click.argument("auction_id", type=int)
@click.argument("commitment")
@click.option("--key", "key_name", required=True, help="Buyer key")
@password_option
@click.pass_context
def seal(ctx, auction_id, commitment, key_name, password):
    """Submit a sealed bid COMMITMENT"""
    from auctionledger.client import AuctionClient
    from auctionledger.crypto import hex_to_bytes

    buyer = load_keypair(ctx, key_name, password)
    run_contract(ctx, lambda host: AuctionClient(host).place_sealed_bid(
        auction_id, buyer, hex_to_bytes(commitment)
    ))
    click.echo(f"✓ Sealed bid placed on auction {auction_id}")


@cli.command()
@click.argument("auction_id", type=int)
@click.argument("amount", type=int)
@click.option("--key", "key_name", required=True, help="Buyer key")
@password_option
@click.option("--salt", default=None, help="Salt revealing a sealed bid (hex)")
@click.pass_context
def bid(ctx, auction_id, amount, key_name, password, salt):
    """Bid AMOUNT on an auction (or reveal a sealed bid)"""
    from auctionledger.client import AuctionClient
    from auctionledger.crypto import hex_to_bytes

    buyer = load_keypair(ctx, key_name, password)
    salt_bytes: Optional[bytes] = hex_to_bytes(salt) if salt else None
    settlement = run_contract(ctx, lambda host: AuctionClient(host).place_bid(
        auction_id, buyer, amount, salt_bytes
    ))
    click.echo(f"✓ Bid of {amount} accepted")
    if settlement:
        click.echo(f"✓ Auction {auction_id} won for {settlement.amount}")


@cli.command()
@click.argument("auction_id", type=int)
@click.argument("seconds", type=int)
@click.option("--key", "key_name", required=True, help="Seller key")
@password_option
@click.pass_context
def extend(ctx, auction_id, seconds, key_name, password):
    """Extend an auction by SECONDS"""
    from auctionledger.client import AuctionClient

    seller = load_keypair(ctx, key_name, password)
    extended = run_contract(ctx, lambda host: AuctionClient(host).extend(auction_id, seconds, [seller]))
    if not extended:
        raise click.ClickException("auction extension is disabled")
    click.echo(f"✓ Auction {auction_id} extended by {seconds}s")


@cli.command()
@click.argument("auction_id", type=int)
@click.pass_context
def resolve(ctx, auction_id):
    """Resolve an auction"""
    from auctionledger.client import AuctionClient

    settlement = run_contract(ctx, lambda host: AuctionClient(host).resolve(auction_id))
    if settlement is None:
        click.echo(f"✓ Auction {auction_id} closed without sale")
    else:
        click.echo(f"✓ Auction {auction_id} sold to {settlement.winner}")
        click.echo(f"  Amount: {settlement.amount}")
        click.echo(f"  Commission: {settlement.commission}")
        click.echo(f"  Seller receives: {settlement.seller_proceeds}")


@cli.command()
@click.argument("auction_id", type=int)
@click.pass_context
def show(ctx, auction_id):
    """Show an auction as JSON"""
    from auctionledger.client import AuctionClient

    def describe(host):
        client = AuctionClient(host)
        auction = client.get_auction(auction_id)
        if auction is None:
            return None
        info = auction.to_dict()
        info["phase"] = client.get_phase(auction_id).name
        info["current_price"] = client.current_price(auction_id)
        info["deadline"] = auction.deadline
        return info

    info = run_contract(ctx, describe)
    if info is None:
        raise click.ClickException(f"no auction {auction_id}")
    click.echo(json.dumps(info, indent=2))


if __name__ == "__main__":
    cli()
