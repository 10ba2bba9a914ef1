from __future__ import annotations

import asyncio
import logging
import threading
from typing import Dict, Iterator, Mapping

from imlgs_browser.config.model import DatasetConfig
from imlgs_browser.core.dataset import DatasetView
from imlgs_browser.core.dataset_loader import from_config
from imlgs_browser.core.exceptions import ConfigError, DatasetConnectionError

logger = logging.getLogger(__name__)


class DatasetManager(Mapping[str, DatasetView]):
    """
    Central service for managing dataset views.
    Implements the Mapping interface (dict-like); views are built and
    initialized on first access, once per process.
    """

    def __init__(self, cfg_by_name: Dict[str, DatasetConfig]):
        self._cfg_by_name = cfg_by_name
        self._loaded: Dict[str, DatasetView] = {}
        self._lock = threading.Lock()

    def __getitem__(self, name: str) -> DatasetView:
        # 1. Fast path: already initialized
        if name in self._loaded:
            return self._loaded[name]

        # 2. Check config existence
        cfg = self._cfg_by_name.get(name)
        if cfg is None:
            raise KeyError(f"Unknown dataset '{name}'")

        # 3. Lazy load (Dash serves callbacks from several threads)
        with self._lock:
            if name in self._loaded:
                return self._loaded[name]
            try:
                logger.info("Lazy-loading dataset", extra={"dataset": cfg.name})
                view = from_config(cfg)
                asyncio.run(view.initialize())
            except (ConfigError, DatasetConnectionError) as e:
                logger.error(
                    "Dataset failed to load",
                    extra={"dataset": cfg.name, "error": str(e)},
                )
                raise
            except Exception:
                logger.exception(
                    "Unexpected error while loading dataset",
                    extra={"dataset": cfg.name},
                )
                raise

            self._loaded[name] = view
            return view

    def __iter__(self) -> Iterator[str]:
        return iter(self._cfg_by_name)

    def __len__(self) -> int:
        return len(self._cfg_by_name)

    def get(self, name: str, default=None) -> DatasetView | None:
        try:
            return self[name]
        except KeyError:
            return default

    def config(self, name: str) -> DatasetConfig:
        return self._cfg_by_name[name]

    def is_loaded(self, name: str) -> bool:
        return name in self._loaded

    def close(self) -> None:
        for view in self._loaded.values():
            view.close()
        self._loaded.clear()
