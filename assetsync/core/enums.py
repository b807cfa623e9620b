from enum import Enum


class SyncState(str, Enum):
    IDLE = "idle"
    DETECTING = "detecting"
    UPLOADING = "uploading"
    DELETING = "deleting"
    REFRESHING = "refreshing"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class Zone(str, Enum):
    """Regional endpoints of the object store"""
    Z0 = "z0"
    CN_EAST_2 = "cn-east-2"
    Z1 = "z1"
    Z2 = "z2"
    NA0 = "na0"
    AS0 = "as0"
