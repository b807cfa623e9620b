from .change_detection import ChangeDetectionStage, HASH_CONCURRENCY
from .upload import UploadStage, UploadReport
from .delete import DeleteStage, compute_stale_keys, MAX_DELETE_BATCH
from .refresh import RefreshStage, MAX_REFRESH_BATCH

__all__ = [
    'ChangeDetectionStage',
    'HASH_CONCURRENCY',
    'UploadStage',
    'UploadReport',
    'DeleteStage',
    'compute_stale_keys',
    'MAX_DELETE_BATCH',
    'RefreshStage',
    'MAX_REFRESH_BATCH',
]
