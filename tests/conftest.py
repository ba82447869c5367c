"""
Pytest fixtures for whale-swaps tests
"""
import logging

import pytest

from factories import (
    BONK,
    JUP,
    OTHER_WALLET,
    POOL,
    SOL,
    USDC,
    USDT,
    WHALE,
    WIF,
    balance_change,
    make_tx,
    sol_transfer,
)
from whale_swaps.config import ClassifierConfig
from whale_swaps.utils.logger import EVENTS_LOGGER


@pytest.fixture
def config():
    """Default classifier configuration"""
    return ClassifierConfig()


@pytest.fixture
def unsuppressed_config():
    """Classify both-core pairs instead of suppressing them"""
    return ClassifierConfig(suppress_core_to_core=False)


@pytest.fixture
def sol_buy_tx():
    """Whale spends 1 SOL for 50 WIF"""
    return make_tx([
        balance_change(WHALE, SOL, -1_000_000_000),
        balance_change(WHALE, WIF, 50_000_000),
        balance_change(POOL, SOL, 1_000_000_000),
        balance_change(POOL, WIF, -50_000_000),
    ])


@pytest.fixture
def sol_sell_tx():
    """Whale sells 50 WIF for 1 SOL"""
    return make_tx(
        [
            balance_change(WHALE, WIF, -50_000_000),
            balance_change(WHALE, SOL, 1_000_000_000),
        ],
        protocol="RAYDIUM_AMM",
    )


@pytest.fixture
def doubled_sol_tx():
    """The same -1 SOL reported as a balance change and as a SOL_TRANSFER"""
    return make_tx(
        [
            balance_change(WHALE, SOL, -1_000_000_000),
            balance_change(WHALE, WIF, 50_000_000),
        ],
        actions=[sol_transfer(WHALE, POOL, 1)],
    )


@pytest.fixture
def stable_arb_tx():
    """USDC -100 -> USDT +99.5"""
    return make_tx([
        balance_change(WHALE, USDC, -100_000_000),
        balance_change(WHALE, USDT, 99_500_000),
    ])


@pytest.fixture
def token_to_token_tx():
    """BONK -500 -> JUP +1,000,000, no core leg"""
    return make_tx([
        balance_change(WHALE, BONK, -50_000_000),
        balance_change(WHALE, JUP, 1_000_000_000_000),
    ])


@pytest.fixture
def multi_hop_tx():
    """SOL -> USDC -> WIF where USDC nets to zero for the whale"""
    return make_tx([
        balance_change(WHALE, SOL, -1_000_000_000),
        balance_change(WHALE, USDC, 150_000_000),
        balance_change(WHALE, USDC, -150_000_000),
        balance_change(WHALE, WIF, 50_000_000),
    ])


@pytest.fixture
def relayed_tx():
    """Fee paid by a relayer; only OTHER_WALLET moves funds"""
    return make_tx(
        [
            balance_change(OTHER_WALLET, SOL, -1_000_000_000),
            balance_change(OTHER_WALLET, WIF, 50_000_000),
        ],
        fee_payer=WHALE,
    )


@pytest.fixture
def events_logger():
    """Detach any JSON handlers added during a test"""
    yield logging.getLogger(EVENTS_LOGGER)
    json_logger = logging.getLogger(EVENTS_LOGGER)
    for handler in json_logger.handlers[:]:
        handler.close()
        json_logger.removeHandler(handler)
    json_logger.propagate = True
