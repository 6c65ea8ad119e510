from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Role:
    id_role: int
    name: str

    def to_dict(self) -> dict:
        return {"id_role": self.id_role, "name": self.name}


@dataclass(frozen=True)
class Department:
    id_departement: int
    name: str

    def to_dict(self) -> dict:
        return {"id_departement": self.id_departement, "name": self.name}
