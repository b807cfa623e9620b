from .base_backend import RemoteBackend, RemoteResponse
from .qiniu import QiniuBackend, ZONE_HOSTS

__all__ = ['RemoteBackend', 'RemoteResponse', 'QiniuBackend', 'ZONE_HOSTS']
