"""Material registry persisted to materials.txt."""

from __future__ import annotations

from typing import List, Optional, Sequence

from core.record_codec import parse_float, parse_int
from models.material import Material
from persistence.base import FileBackedRegistry


class MaterialRegistry(FileBackedRegistry[Material]):
    """Materials keyed by name."""

    FILENAME = "materials.txt"
    TITLE = "Material Data Export"
    FORMAT_SPEC = "name|costPerGram|printTemp|color"
    MIN_FIELDS = 4

    def key_of(self, entity: Material) -> str:
        return entity.name

    def validate(self, entity: Material) -> bool:
        return bool(entity.name and entity.name.strip())

    def serialize(self, entity: Material) -> Sequence[object]:
        return [entity.name, repr(float(entity.cost_per_gram)), entity.print_temp, entity.color]

    def deserialize(self, fields: List[str], line: str) -> Material:
        return Material(
            name=fields[0],
            cost_per_gram=parse_float(fields[1], "costPerGram", line),
            print_temp=parse_int(fields[2], "printTemp", line),
            color=fields[3],
        )

    def get_by_name(self, name: Optional[str]) -> Optional[Material]:
        if name is None:
            return None
        return self.get(name)
