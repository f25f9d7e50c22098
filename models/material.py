"""
Printable material.

The material name is its identity: the stock ledger, the material store
and persisted orders all refer to a material by name. Renaming a material
in place does NOT move its stock entry; use AdminService.rename_material
for that.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class Material:
    """A filament or resin that can be printed."""

    name: str
    """Natural key, e.g. 'PLA'."""

    cost_per_gram: float
    """Material cost per gram."""

    print_temp: int
    """Recommended print temperature in Celsius."""

    color: str = ""

    @property
    def display_name(self) -> str:
        if self.color:
            return f"{self.name} ({self.color})"
        return self.name

    def material_info(self) -> str:
        return (
            f"Name: {self.name}\n"
            f"Cost per gram: ${self.cost_per_gram:.2f}\n"
            f"Print temperature: {self.print_temp}°C\n"
            f"Color: {self.color}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
