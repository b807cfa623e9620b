from .hash_calculator import HashCalculator
from .name_filter import matches, passes, filter_names, to_filter, to_filter_set
from .batching import chunk
from .progress_manager import ProgressManager
from .asset_scanner import AssetScanner

__all__ = [
    'HashCalculator',
    'matches',
    'passes',
    'filter_names',
    'to_filter',
    'to_filter_set',
    'chunk',
    'ProgressManager',
    'AssetScanner',
]
