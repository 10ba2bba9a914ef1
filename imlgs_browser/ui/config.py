from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from imlgs_browser.config.model import FilterDefinition, GlobalConfig
from imlgs_browser.core.dataset import DatasetView
from imlgs_browser.core.inputs import InputControl
from imlgs_browser.services.dataset_service import DatasetManager


@dataclass
class AppConfig:
    config_root: Path
    global_config: GlobalConfig
    datasets: Optional[DatasetManager] = None
    dataset_name: Optional[str] = None
    total_rows: int = 0

    # Sidebar filters of the active dataset, in display order
    filters: List[FilterDefinition] = field(default_factory=list)
    # column -> control built once at startup (candidates already enumerated)
    widgets: Dict[str, InputControl] = field(default_factory=dict)

    @property
    def view(self) -> DatasetView:
        if self.datasets is None or self.dataset_name is None:
            raise RuntimeError("AppConfig has no active dataset.")
        return self.datasets[self.dataset_name]

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.datasets is None:
            raise RuntimeError("AppConfig.datasets must be initialized.")
        if self.dataset_name is None:
            raise RuntimeError("AppConfig.dataset_name must be set.")
        missing = [f.column for f in self.filters if f.column not in self.widgets]
        if missing:
            raise RuntimeError(f"No widget built for filter column(s): {missing}")
