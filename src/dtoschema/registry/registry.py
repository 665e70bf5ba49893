"""Metadata registry mapping DTO identities to their field maps."""

from __future__ import annotations

import logging
import threading
from typing import Iterator

from dtoschema.errors import DtoAlreadyRegisteredError, DtoNotFoundError, InvalidInputError
from dtoschema.schema.types import DtoMeta

logger = logging.getLogger(__name__)

__all__ = ["DtoRegistry"]


class DtoRegistry:
    """Write-once store of ``DtoMeta`` keyed by DTO identity (the class object).

    Entries are added while DTOs are declared and only read afterwards, so
    request-time lookups never contend with writers. Create one registry per
    application, or a fresh one per test.
    """

    def __init__(self) -> None:
        self._entries: dict[type, DtoMeta] = {}
        self._write_lock = threading.RLock()

    # ----- Registration -----

    def register(self, dto: type, meta: DtoMeta) -> None:
        """Register metadata for a DTO identity.

        Raises:
            InvalidInputError: If dto is not a class or meta is not a DtoMeta.
            DtoAlreadyRegisteredError: If dto already has an entry.
        """
        if not isinstance(dto, type):
            raise InvalidInputError(message=f"DTO identity must be a class, got {type(dto).__name__}")
        if not isinstance(meta, DtoMeta):
            raise InvalidInputError(message=f"DTO metadata must be a DtoMeta, got {type(meta).__name__}")

        with self._write_lock:
            if dto in self._entries:
                raise DtoAlreadyRegisteredError(dto)
            self._entries[dto] = meta

        logger.debug("Registered DTO '%s' with %d field(s)", meta.name, len(meta.fields))

    # ----- Query Methods -----

    def get(self, dto: type) -> DtoMeta | None:
        """Look up a DTO's metadata. Returns None if unknown."""
        try:
            return self._entries.get(dto)
        except TypeError:
            return None

    def require(self, dto: type) -> DtoMeta:
        """Look up a DTO's metadata.

        Raises:
            DtoNotFoundError: If dto has no entry.
        """
        meta = self.get(dto)
        if meta is None:
            raise DtoNotFoundError(dto)
        return meta

    def has(self, dto: type) -> bool:
        return self.get(dto) is not None

    def find_by_name(self, name: str) -> list[type]:
        """All identities whose metadata carries the given name, in registration order."""
        return [dto for dto, meta in self.iter() if meta.name == name]

    def iter(self) -> Iterator[tuple[type, DtoMeta]]:
        """Return an iterator of (dto, meta) tuples (snapshot-based)."""
        with self._write_lock:
            items = list(self._entries.items())
        return iter(items)

    @property
    def dtos(self) -> list[type]:
        """Registered identities in registration order."""
        with self._write_lock:
            return list(self._entries.keys())

    @property
    def count(self) -> int:
        """Number of registered DTOs."""
        with self._write_lock:
            return len(self._entries)

    def __contains__(self, dto: object) -> bool:
        return self.has(dto)  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self.count
