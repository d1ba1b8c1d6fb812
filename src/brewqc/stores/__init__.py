"""Record stores backing the quality service."""

from brewqc.stores.base import BatchStore, CheckFilter, QualityCheckStore, UserStore
from brewqc.stores.sql import SqlBatchStore, SqlQualityCheckStore, SqlUserStore

__all__ = [
    "BatchStore",
    "UserStore",
    "QualityCheckStore",
    "CheckFilter",
    "SqlBatchStore",
    "SqlUserStore",
    "SqlQualityCheckStore",
]
