import logging
from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..core.models import SyncOptions

if TYPE_CHECKING:
    from ..backend.base_backend import RemoteBackend
    from ..utils.progress_manager import ProgressManager


@dataclass
class StageResult:
    """Result from a pipeline stage"""
    stage_name: str
    success: bool
    skipped: bool = False
    data_processed: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    duration_ms: Optional[float] = None


class PipelineStage(ABC):
    """Base class for all pipeline stages"""

    def __init__(self, name: str, options: SyncOptions,
                 backend: Optional['RemoteBackend'] = None,
                 progress_manager: Optional['ProgressManager'] = None,
                 logger: Optional[logging.Logger] = None):
        self.name = name
        self.options = options
        self.backend = backend
        self.progress_manager = progress_manager
        self.logger = logger or logging.getLogger(f"{__name__}.{name}")

    @property
    def enabled(self) -> bool:
        """Whether the options turn this stage on (override for optional stages)"""
        return True

    def should_process(self) -> bool:
        """Determine if this stage runs in the current pipeline"""
        if not self.enabled:
            self.logger.info(f"Stage {self.name} disabled, skipping")
            return False
        return True

    def _update_progress(self, **counts: int) -> None:
        if self.progress_manager:
            self.progress_manager.update_progress(**counts)
