"""Batch import and batch delete models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..core.exceptions import IdAdminError
from .field_maps import HASH_FIELDS
from .user import kwargs_from_mapping


@dataclass(frozen=True)
class HashConfig:
    """Password hashing parameters shared by one import call.

    ``key`` and ``salt_separator`` are raw bytes. For ``STANDARD_SCRYPT``,
    ``memory_cost`` is the CPU/memory cost factor.
    """

    algorithm: Any = None
    key: Any = None
    salt_separator: Any = None
    rounds: Any = None
    memory_cost: Any = None
    parallelization: Any = None
    block_size: Any = None
    derived_key_length: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HashConfig":
        """Build from caller names; byte parameters must already be decoded."""
        return cls(**kwargs_from_mapping(data, HASH_FIELDS, "hash"))


@dataclass(frozen=True)
class IndexedError:
    """Failure of one record of a batch, at its original input position."""

    index: int
    error: IdAdminError

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, **self.error.to_dict()}


@dataclass
class ImportResult:
    """Outcome of a batch import; errors are sorted by ascending index."""

    success_count: int = 0
    failure_count: int = 0
    errors: list[IndexedError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class DeleteUsersResult(ImportResult):
    """Outcome of a batch delete; same shape as an import result."""
