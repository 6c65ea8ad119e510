from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DropdownOption, FieldType, FormField, NewFormField


class FormRepository(Protocol):
    """Storage for field types, form fields and their dropdown options."""

    # Field types
    def list_types(self) -> Sequence[FieldType]:
        raise NotImplementedError

    def create_type(self, field_name: str) -> int:
        raise NotImplementedError

    # Fields
    def list_fields(self, event_id: int) -> Sequence[FormField]:
        """Fields of one event with their options, ordered by sequence."""
        raise NotImplementedError

    def get_field(self, field_id: int) -> Optional[FormField]:
        raise NotImplementedError

    def replace_fields(self, event_id: int, fields: Sequence[NewFormField]) -> None:
        """Delete every option and field of the event, then insert `fields`.

        Must run as a single transaction.
        """
        raise NotImplementedError

    def add_field(self, event_id: int, new_field: NewFormField) -> int:
        raise NotImplementedError

    def update_field(
        self,
        field_id: int,
        *,
        label: str,
        id_type: int,
        is_required: bool,
        accepted_file_types: Optional[str],
        options: Optional[Sequence[str]],
    ) -> None:
        """`options=None` keeps the current options; a sequence replaces them."""
        raise NotImplementedError

    def delete_field(self, field_id: int) -> bool:
        """Delete options then the field, and close the gap in sequences."""
        raise NotImplementedError

    # Options
    def list_options(self, field_id: int) -> Sequence[DropdownOption]:
        raise NotImplementedError

    def get_option(self, option_id: int) -> Optional[DropdownOption]:
        raise NotImplementedError

    def add_option(self, field_id: int, *, value: str, is_default: bool) -> int:
        raise NotImplementedError

    def update_option(self, option_id: int, *, value: str, is_default: bool) -> bool:
        raise NotImplementedError

    def delete_option(self, option_id: int) -> bool:
        raise NotImplementedError
