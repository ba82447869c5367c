"""
Builders for provider-shaped transaction dicts used across the tests.
"""

# Wallets / accounts (real base58 public keys)
WHALE = "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
OTHER_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
POOL = "58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2"
RELAYER = "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"

SIGNATURE = "5h6xBEauJ3PK6SWCZ1PGjBvj8vDdWG3KpwATGy1ARAXFSDwt8GFXM7W5Ncn16wmqokgpiKRLuS83KUxyZyv2sUYv"
TIMESTAMP = 1718000000

# Mints
SOL = "So11111111111111111111111111111111111111112"
NATIVE_SOL = "So11111111111111111111111111111111111111111"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
MSOL = "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"
BONK = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WIF = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"
JUP = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"

DECIMALS = {SOL: 9, USDC: 6, USDT: 6, MSOL: 9, BONK: 5, WIF: 6, JUP: 6}


def balance_change(owner, mint, change, decimals=None, symbol=None, pre_balance=None):
    if decimals is None:
        decimals = DECIMALS[mint]
    entry = {
        "owner": owner,
        "mint": mint,
        "decimals": decimals,
        "change_amount": change,
    }
    if pre_balance is not None:
        entry["pre_balance"] = pre_balance
        entry["post_balance"] = pre_balance + change
    if symbol is not None:
        entry["symbol"] = symbol
    return entry


def sol_transfer(sender, receiver, amount):
    """``amount`` in SOL."""
    return {
        "type": "SOL_TRANSFER",
        "info": {"sender": sender, "receiver": receiver, "amount": amount},
    }


def token_transfer(sender, receiver, mint, amount=None, amount_raw=None, decimals=None):
    info = {"sender": sender, "receiver": receiver, "token_address": mint}
    if amount is not None:
        info["amount"] = amount
    if amount_raw is not None:
        info["amount_raw"] = amount_raw
    if decimals is not None:
        info["decimals"] = decimals
    return {"type": "TOKEN_TRANSFER", "info": info}


def swap_action(swapper, token_in, token_out, protocol="JUPITER"):
    return {
        "type": "SWAP",
        "info": {
            "swapper": swapper,
            "tokens_swapped": {
                "in": {"token_address": token_in},
                "out": {"token_address": token_out},
            },
        },
        "source_protocol": {"name": protocol},
    }


def make_tx(
    changes=(),
    actions=(),
    status="Success",
    fee=5000,
    fee_payer=WHALE,
    signers=None,
    signature=SIGNATURE,
    protocol=None,
):
    tx = {
        "signature": signature,
        "timestamp": TIMESTAMP,
        "status": status,
        "fee": fee,
        "fee_payer": fee_payer,
        "signers": [fee_payer] if signers is None and fee_payer else list(signers or []),
        "token_balance_changes": list(changes),
        "actions": list(actions),
    }
    if protocol is not None:
        tx["protocol"] = {"name": protocol}
    return tx
