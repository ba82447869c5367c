"""whale-swaps: classify Solana transactions into canonical swap records."""

from .amounts import Fee, FeeBreakdown, SwapAmounts, calculate_amounts
from .classifier import (
    ClassificationTally,
    SwapClassifier,
    classify,
    classify_batch,
    classify_batch_async,
)
from .config import ClassifierConfig, load_config
from .confidence import Confidence, Direction
from .deltas import AssetDelta
from .erasure import EraseReason, ErasureResult
from .errors import (
    AmountConsistencyError,
    ClassifierError,
    ConfigError,
    InvalidTransactionError,
)
from .models import RawTransaction
from .records import StorageRecord, to_storage_records
from .results import AssetRef, ClassificationResult, ClassifiedSwap, SplitSwapPair
from .swapper import SwapperMethod
from .tokens import DEFAULT_REGISTRY, CoreAssetRegistry

__version__ = "0.1.0"

__all__ = [
    'AmountConsistencyError',
    'AssetDelta',
    'AssetRef',
    'ClassificationResult',
    'ClassificationTally',
    'ClassifiedSwap',
    'ClassifierConfig',
    'ClassifierError',
    'Confidence',
    'ConfigError',
    'CoreAssetRegistry',
    'DEFAULT_REGISTRY',
    'Direction',
    'EraseReason',
    'ErasureResult',
    'Fee',
    'FeeBreakdown',
    'InvalidTransactionError',
    'RawTransaction',
    'SplitSwapPair',
    'StorageRecord',
    'SwapAmounts',
    'SwapClassifier',
    'SwapperMethod',
    'calculate_amounts',
    'classify',
    'classify_batch',
    'classify_batch_async',
    'load_config',
    'to_storage_records',
]
