from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Tuple

from imlgs_browser.config.model import DatasetConfig, GlobalConfig
from imlgs_browser.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            datasets/
                imlgs.json
                ...

    Each file in 'datasets/' is parsed into a DatasetConfig. A dataset file
    that is not valid JSON is logged and skipped.

    :param root: Directory containing 'global.json' and optionally 'datasets/'.
    :return: A GlobalConfig instance.
    :raises ConfigError: if global.json is missing or not valid JSON.
    """
    logger.info(
        "Loading global config",
        extra={"config_root": str(root)},
    )

    global_path = root / "global.json"
    if not global_path.is_file():
        raise ConfigError(f"File not found at {global_path}")

    try:
        with global_path.open() as f:
            raw_global = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {global_path}: {e}") from e

    datasets_dir = root / "datasets"
    datasets: List[DatasetConfig] = []

    if datasets_dir.is_dir():
        logger.info(f"Scanning for dataset configurations in: {datasets_dir}")

        files = sorted(datasets_dir.glob("*.json"))
        if not files:
            logger.warning(f"No .json files found in {datasets_dir}")

        for idx, config_file in enumerate(files):
            logger.info(f"Loading dataset config: {config_file.name}")
            try:
                with config_file.open() as f:
                    raw = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load {config_file.name}: {e}")
                continue
            datasets.append(
                DatasetConfig.from_raw(raw, source_path=config_file, index=idx)
            )
    else:
        logger.warning(f"Datasets directory not found at: {datasets_dir}")

    defaults = GlobalConfig()
    return GlobalConfig(
        ui_title=raw_global.get("ui_title", defaults.ui_title),
        subtitle=raw_global.get("subtitle", defaults.subtitle),
        default_dataset=raw_global.get("default_dataset"),
        debounce_ms=int(raw_global.get("debounce_ms", defaults.debounce_ms)),
        datasets=datasets,
    )


def load_dataset_registry(path: Path) -> Tuple[GlobalConfig, Dict[str, DatasetConfig]]:
    """
    Load global config + dataset config objects only (no views are opened).
    Returns mapping of dataset name -> DatasetConfig.
    """
    global_config = load_global_config(path)

    cfg_by_name: Dict[str, DatasetConfig] = {}
    duplicates: List[str] = []

    for ds_cfg in global_config.datasets:
        if ds_cfg.name in cfg_by_name:
            duplicates.append(ds_cfg.name)
            continue
        cfg_by_name[ds_cfg.name] = ds_cfg

    if duplicates:
        raise ConfigError(f"Duplicate dataset names in config: {sorted(set(duplicates))}")

    if not cfg_by_name:
        logger.warning(f"No datasets configured under: {path}")

    logger.info(
        "Dataset registry loaded (lazy mode; views not opened)",
        extra={
            "config_root": str(path),
            "n_dataset_configs": len(cfg_by_name),
            "dataset_names": sorted(cfg_by_name.keys()),
        },
    )

    return global_config, cfg_by_name
