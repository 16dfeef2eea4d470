"""JSON-file-backed implementation of ActorRepository.

Older records keep whatever permission shape they were written with;
``normalize_permission`` translates them on the way in, and ``save``
always writes the current ``{"capabilities": [...]}`` shape.
"""

from __future__ import annotations

from pathlib import Path

from ims.domain.model.actor import Actor, normalize_permission, serialize_capabilities
from ims.domain.repository.actor_repository import ActorRepository
from ims.infrastructure.persistence.json_file import JsonFile


class JsonActorRepository(ActorRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ActorRepository interface --------------------------------------------

    def get_by_id(self, actor_id: str) -> Actor | None:
        for raw in self._file.read():
            if raw["id"] == actor_id:
                return self._to_domain(raw)
        return None

    def save(self, actor: Actor) -> None:
        with self._file.locked():
            records = self._file.load()
            replaced = False
            for i, raw in enumerate(records):
                if raw["id"] == actor.id:
                    records[i] = self._to_raw(actor)
                    replaced = True
                    break
            if not replaced:
                records.append(self._to_raw(actor))
            self._file.persist(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(actor: Actor) -> dict:
        return {
            "id": actor.id,
            "display_name": actor.display_name,
            "permission": serialize_capabilities(actor.capabilities),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Actor:
        return Actor(
            id=raw["id"],
            display_name=raw.get("display_name") or raw.get("username") or raw["id"],
            capabilities=normalize_permission(raw.get("permission")),
        )
