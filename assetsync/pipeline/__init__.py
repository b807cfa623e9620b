# Pipeline package initialization
from .base import PipelineStage, StageResult
from .stages import ChangeDetectionStage, UploadStage, DeleteStage, RefreshStage

__all__ = [
    'PipelineStage',
    'StageResult',
    'ChangeDetectionStage',
    'UploadStage',
    'DeleteStage',
    'RefreshStage',
]
