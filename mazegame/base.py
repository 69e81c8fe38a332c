"""Abstract interfaces for game persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Union

if TYPE_CHECKING:
    from .storage import GameRecord

PathLike = Union[str, Path]


class AbstractGameStore(ABC):
    """Key-value store of finished games keyed by seed.

    Implementations must not raise on I/O or decoding failures: ``save``
    degrades to a no-op and lookups to ``None`` / ``{}``.
    """

    @abstractmethod
    def save(self, record: "GameRecord") -> None:
        """Store ``record``, replacing any earlier game with the same seed."""

    @abstractmethod
    def all_records(self) -> Dict[int, "GameRecord"]:
        """Return every stored game keyed by seed."""

    def load_by_seed(self, seed: int) -> Optional["GameRecord"]:
        return self.all_records().get(int(seed))


__all__ = [
    "AbstractGameStore",
    "PathLike",
]
