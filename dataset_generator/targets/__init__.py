"""
Dataset target families.

Each module describes one in-memory dataset component the generated code
can build.
"""

from .base import BASE_USES, DatasetTarget
from .firedac import FIREDAC_TARGET
from .clientdataset import CLIENT_DATASET_TARGET

BUILTIN_TARGETS = (FIREDAC_TARGET, CLIENT_DATASET_TARGET)

__all__ = [
    "BASE_USES",
    "DatasetTarget",
    "FIREDAC_TARGET",
    "CLIENT_DATASET_TARGET",
    "BUILTIN_TARGETS",
]
