"""
Classifier configuration.

Loaded from YAML (path argument or $WHALE_SWAPS_CONFIG, .env honoured).
The classifier itself never reads the environment; it gets a ClassifierConfig.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from dotenv import load_dotenv

from .deltas import DEFAULT_DUST_THRESHOLD, DEFAULT_RENT_NOISE_THRESHOLD_SOL
from .erasure import is_valid_address
from .errors import ConfigError
from .roles import DEFAULT_ROUTE_TOLERANCE
from .tokens import DEFAULT_REGISTRY, CoreAssetRegistry

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "WHALE_SWAPS_CONFIG"

_DECIMAL_KEYS = ("dust_threshold", "route_tolerance", "rent_noise_threshold_sol")
_BOOL_KEYS = ("suppress_core_to_core", "filter_rent_refunds", "strict_amounts")
_MINT_LIST_KEYS = ("core_assets", "extra_core_assets", "stable_assets")
KNOWN_KEYS = frozenset(_DECIMAL_KEYS + _BOOL_KEYS + _MINT_LIST_KEYS)


@dataclass(frozen=True)
class ClassifierConfig:
    """Immutable settings shared by every classification call."""
    core_assets: CoreAssetRegistry = DEFAULT_REGISTRY
    dust_threshold: Decimal = DEFAULT_DUST_THRESHOLD
    route_tolerance: Decimal = DEFAULT_ROUTE_TOLERANCE

    # Both-core pairs are stable/SOL arbitrage noise unless explicitly wanted
    suppress_core_to_core: bool = True

    filter_rent_refunds: bool = False
    rent_noise_threshold_sol: Decimal = DEFAULT_RENT_NOISE_THRESHOLD_SOL

    # Raise AmountConsistencyError instead of flooring a negative SELL net
    strict_amounts: bool = False

    def __post_init__(self):
        for key in _DECIMAL_KEYS:
            if getattr(self, key) < 0:
                raise ConfigError(f"{key} must be >= 0, got {getattr(self, key)}")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ClassifierConfig":
        """Build from a parsed YAML mapping. Unknown keys are rejected."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"config must be a mapping, got {type(data).__name__}")

        unknown = sorted(set(data) - KNOWN_KEYS)
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in _DECIMAL_KEYS:
            if key in data:
                kwargs[key] = _decimal(data[key], key)
        for key in _BOOL_KEYS:
            if key in data:
                if not isinstance(data[key], bool):
                    raise ConfigError(f"{key} must be true/false, got {data[key]!r}")
                kwargs[key] = data[key]

        registry = DEFAULT_REGISTRY
        if "core_assets" in data:
            registry = CoreAssetRegistry.replace(_mints(data["core_assets"], "core_assets"))
        if "extra_core_assets" in data:
            registry = registry.with_extra(_mints(data["extra_core_assets"], "extra_core_assets"))
        if "stable_assets" in data:
            registry = registry.with_stables(_mints(data["stable_assets"], "stable_assets"))
        kwargs["core_assets"] = registry

        return cls(**kwargs)


def _decimal(value: Any, key: str) -> Decimal:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    try:
        # str() first so YAML floats like 0.001 keep their written value
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e


def _mints(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list of mint addresses")
    bad = [m for m in value if not isinstance(m, str) or not is_valid_address(m)]
    if bad:
        raise ConfigError(f"{key} has invalid mint addresses: {bad}")
    return value


def load_config(path: Union[str, Path, None] = None) -> ClassifierConfig:
    """
    Load a ClassifierConfig from YAML.

    Without ``path`` the file named by $WHALE_SWAPS_CONFIG is used (after
    load_dotenv()); with neither, the defaults are returned.

    Raises:
        ConfigError: missing file, bad YAML or invalid values.
    """
    if path is None:
        load_dotenv()
        path = os.environ.get(CONFIG_ENV_VAR) or None
        if path is None:
            logger.debug("[CONFIG] No config file, using defaults")
            return ClassifierConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"config file not found: {config_path}")

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {config_path}: {e}") from e

    config = ClassifierConfig.from_dict(raw)
    logger.info(
        f"[CONFIG] Loaded {config_path}: {len(config.core_assets)} core assets, "
        f"dust={config.dust_threshold}, suppress_core_to_core={config.suppress_core_to_core}"
    )
    return config
