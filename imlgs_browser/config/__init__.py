from .loader import load_dataset_registry, load_global_config
from .model import DatasetConfig, FilterDefinition, GlobalConfig

__all__ = [
    "DatasetConfig",
    "FilterDefinition",
    "GlobalConfig",
    "load_dataset_registry",
    "load_global_config",
]
