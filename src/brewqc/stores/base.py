"""Abstract record stores consumed by the quality service."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from brewqc.models.batch import Batch
from brewqc.models.quality import QualityCheck
from brewqc.models.user import User


@dataclass
class CheckFilter:
    """Criteria for selecting quality checks. Unset fields do not filter."""

    batch_id: str | None = None
    recipe_id: str | None = None
    check_type: str | None = None
    passed: bool | None = None
    since: datetime | None = None


class BatchStore(ABC):
    """Read-only lookup of batches together with their recipe."""

    @abstractmethod
    async def find_by_id(self, batch_id: str) -> Batch | None:
        """Return the batch with its recipe loaded, or None."""


class UserStore(ABC):
    """Read-only lookup of users."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> User | None:
        """Return the user, or None."""

    @abstractmethod
    async def find_by_ids(self, user_ids: Sequence[str]) -> list[User]:
        """Return every user whose id is listed. Unknown ids are skipped."""


class QualityCheckStore(ABC):
    """Persisted quality check records keyed by id."""

    @abstractmethod
    async def create(self, **values: Any) -> QualityCheck:
        """Persist a new check and return it."""

    @abstractmethod
    async def find_many(
        self,
        filters: CheckFilter | None = None,
        skip: int = 0,
        limit: int | None = None,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
    ) -> list[QualityCheck]:
        """Return checks matching the filter in the requested order."""

    @abstractmethod
    async def find_by_id(self, check_id: str) -> QualityCheck | None:
        """Return the check, or None."""

    @abstractmethod
    async def update(self, check: QualityCheck, values: dict[str, Any]) -> QualityCheck:
        """Overwrite the given fields of an existing check."""

    @abstractmethod
    async def delete(self, check: QualityCheck) -> None:
        """Remove an existing check."""

    @abstractmethod
    async def count(self, filters: CheckFilter | None = None) -> int:
        """Count checks matching the filter."""
