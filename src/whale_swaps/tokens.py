"""
Core asset registry - the quote-eligible "liquidity" assets.

Every module asks the registry injected through ClassifierConfig; nothing
re-declares its own copy of these mints.
"""

from dataclasses import dataclass
from typing import Iterable

# Native SOL as some providers report it, folded into the WSOL mint.
NATIVE_SOL_MINT = "So11111111111111111111111111111111111111111"
SOL_MINT = "So11111111111111111111111111111111111111112"
SOL_DECIMALS = 9

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"


# --- SOL (native / wrapped) ---
_SOL = {
    SOL_MINT,
}

# --- Liquid staking derivatives ---
_LIQUID_STAKING = {
    # mSOL (Marinade staked SOL)
    "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So",
    # stSOL (Lido staked SOL)
    "7dHbWXmci3dT8UFYWYZweBLXgycu7Y3iL6trKn1Y7ARj",
    # jitoSOL (Jito staked SOL)
    "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn",
    # bSOL (BlazeStake staked SOL)
    "bSo13r4TkiE4KumL71LsHTPpL2euBYLFx6h9HP3piy1",
    # JupSOL (Jupiter staked SOL)
    "jupSoLaHXQiZZTSfEWMTRRgpnyFm8f6sZdosWBjx93v",
}

# --- Stablecoins ---
_STABLECOINS = {
    USDC_MINT,
    USDT_MINT,
    # PYUSD (PayPal USD)
    "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo",
    # USDS (Sky, ex-DAI successor)
    "USDSwr9ApdHk5bvJKMjzff41FfuX8bSxdKcR81vTwcA",
    # DAI (Wormhole bridged)
    "EjmyN6qEC1Tf1JxiG1ae7UTJhUxSwk1TCWNWqxWV4J6o",
    # USDG (Global Dollar, Paxos)
    "2u1tszSeqZ3qBWF3uNGPFc8TzMk2tdiwknnRMWGWjGWH",
    # UXD
    "7kbnvuGBxxj8AG9qp8Scn56muWGaRaFqxg1FsRp3PaFT",
    # USD1 (World Liberty Financial)
    "USD1ttGY1N17NEEHLmELoaybftRBUSErhqYiQzvEmuB",
    # EURC (Circle EUR stablecoin)
    "HzwqbKZw8HxMN6bF2yFZNrht3c2iXXzpKcFu7uBEDKtr",
    # jupUSD (Jupiter USD)
    "JuprjznTrTSp2UFa3ZBUFgwdAmtZCq4MQCwysN55USD",
}

DEFAULT_CORE_ASSETS: frozenset[str] = frozenset(_SOL | _LIQUID_STAKING | _STABLECOINS)
DEFAULT_STABLE_ASSETS: frozenset[str] = frozenset(_STABLECOINS)

# Fallback symbols when the provider omits one.
KNOWN_SYMBOLS: dict[str, str] = {
    SOL_MINT: "SOL",
    USDC_MINT: "USDC",
    USDT_MINT: "USDT",
}


def canonical_mint(mint: str) -> str:
    """Fold the native SOL alias into the WSOL mint."""
    if mint == NATIVE_SOL_MINT:
        return SOL_MINT
    return mint


def is_sol(mint: str) -> bool:
    return canonical_mint(mint) == SOL_MINT


def fallback_symbol(mint: str) -> str:
    """Known symbol, or a shortened mint like ``DezX...B263``."""
    mint = canonical_mint(mint)
    if mint in KNOWN_SYMBOLS:
        return KNOWN_SYMBOLS[mint]
    return f"{mint[:4]}...{mint[-4:]}"


@dataclass(frozen=True)
class CoreAssetRegistry:
    """
    Immutable allow-list of core assets.

    ``stable_mints`` ranks quote candidates: SOL first, then these, then the
    remaining core assets. Safe to share between threads: it is never mutated
    after construction, ``with_extra``/``replace``/``with_stables`` return new
    registries.
    """

    mints: frozenset[str] = DEFAULT_CORE_ASSETS
    stable_mints: frozenset[str] = DEFAULT_STABLE_ASSETS

    def is_core(self, mint: str) -> bool:
        return canonical_mint(mint) in self.mints

    def with_extra(self, extra: Iterable[str]) -> "CoreAssetRegistry":
        return CoreAssetRegistry(
            self.mints | frozenset(canonical_mint(m) for m in extra), self.stable_mints
        )

    def with_stables(self, stables: Iterable[str]) -> "CoreAssetRegistry":
        return CoreAssetRegistry(self.mints, frozenset(canonical_mint(m) for m in stables))

    @classmethod
    def replace(cls, mints: Iterable[str]) -> "CoreAssetRegistry":
        """New registry of ``mints``; known stablecoins among them keep their rank."""
        mints = frozenset(canonical_mint(m) for m in mints)
        return cls(mints, mints & DEFAULT_STABLE_ASSETS)

    def quote_preference(self, mint: str) -> int:
        """Lower is preferred: SOL first, then stablecoins, then the rest."""
        mint = canonical_mint(mint)
        if mint == SOL_MINT:
            return 0
        if mint in self.stable_mints:
            return 1
        return 2

    def __len__(self) -> int:
        return len(self.mints)


DEFAULT_REGISTRY = CoreAssetRegistry()
