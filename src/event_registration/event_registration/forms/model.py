from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import FieldTypeName


@dataclass(frozen=True)
class FieldType:
    id_type: int
    field_name: str

    @property
    def kind(self) -> Optional[FieldTypeName]:
        return FieldTypeName.parse(self.field_name)

    @property
    def has_options(self) -> bool:
        return bool(self.kind and self.kind.has_options)

    @property
    def is_file(self) -> bool:
        return self.kind == FieldTypeName.FILE

    def to_dict(self) -> dict:
        return {"id_type": self.id_type, "field_name": self.field_name}


@dataclass(frozen=True)
class DropdownOption:
    id_option: int
    id_field: int
    value: str
    is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "id_option": self.id_option,
            "id_field": self.id_field,
            "value": self.value,
            "is_default": self.is_default,
        }


@dataclass(frozen=True)
class FormField:
    """One input of an event's registration form."""

    id_field: int
    id_event: int
    label: str
    field_type: FieldType
    is_required: bool
    sequence: int
    accepted_file_types: Optional[str] = None
    options: tuple[DropdownOption, ...] = field(default_factory=tuple)

    @property
    def option_values(self) -> list[str]:
        return [o.value for o in self.options]

    def accepted_extensions(self) -> set[str]:
        """".pdf, png ,image/jpeg" -> {".pdf", ".png"}; MIME entries are ignored."""
        out: set[str] = set()
        for raw in (self.accepted_file_types or "").split(","):
            item = raw.strip().lower()
            if not item or "/" in item:
                continue
            out.add(item if item.startswith(".") else f".{item}")
        return out

    def to_dict(self) -> dict:
        return {
            "id_field": self.id_field,
            "id_event": self.id_event,
            "label": self.label,
            "type": self.field_type.to_dict(),
            "is_required": self.is_required,
            "sequence": self.sequence,
            "accepted_file_types": self.accepted_file_types,
            "options": self.option_values,
        }


@dataclass(frozen=True)
class NewFormField:
    """A validated field definition ready to be written."""

    label: str
    id_type: int
    is_required: bool
    sequence: int
    accepted_file_types: Optional[str] = None
    options: tuple[str, ...] = ()
