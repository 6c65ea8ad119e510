from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import optional_text, parse_bool, require_non_empty
from ..core.enums import FieldTypeName
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..events.repository import EventRepository
from .model import DropdownOption, FieldType, FormField, NewFormField
from .repository import FormRepository

logger = logging.getLogger(__name__)


class _TypeCatalog:
    """Look up field types by id or by (case-insensitive) name."""

    def __init__(self, types: Sequence[FieldType]):
        self._by_id = {t.id_type: t for t in types}
        self._by_name = {t.field_name.lower(): t for t in types}

    def resolve(self, ref: Any) -> Optional[FieldType]:
        if isinstance(ref, Mapping):
            ref = ref.get("id_type") or ref.get("field_name")
        if ref is None or isinstance(ref, bool):
            return None
        if isinstance(ref, int):
            return self._by_id.get(ref)
        text = str(ref).strip()
        if text.isdigit():
            return self._by_id.get(int(text))
        return self._by_name.get(text.lower())


def _type_ref(raw: Mapping[str, Any]) -> Any:
    for key in ("id_type", "id_form_field_type", "type", "field_type", "type_name"):
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def _clean_options(raw: Any) -> tuple[str, ...]:
    if not raw:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("options must be an array of strings")
    values = []
    for item in raw:
        value = item.get("value") if isinstance(item, Mapping) else item
        if isinstance(value, str) and value.strip():
            values.append(value.strip())
    return tuple(values)


def _clean_file_types(raw: Any) -> Optional[str]:
    if isinstance(raw, (list, tuple)):
        raw = ",".join(str(x).strip() for x in raw if str(x).strip())
    return optional_text(raw)


class FormService:
    """Use case: per-event registration form schema."""

    def __init__(self, forms: FormRepository, events: EventRepository):
        self._forms = forms
        self._events = events

    def _require_event(self, event_id: int) -> None:
        if not self._events.get(int(event_id)):
            raise NotFoundError("Event not found")

    def _require_field(self, field_id: int) -> FormField:
        form_field = self._forms.get_field(int(field_id))
        if not form_field:
            raise NotFoundError("Form field not found")
        return form_field

    def _build(self, raw: Any, *, sequence: int, catalog: _TypeCatalog) -> NewFormField:
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Field definition #{sequence + 1} must be an object")

        label = require_non_empty(raw.get("label"), f"Label of field #{sequence + 1}")
        ref = _type_ref(raw)
        field_type = catalog.resolve(ref)
        if field_type is None:
            raise ValidationError(f"Invalid form field type '{ref}' for field '{label}'")

        return NewFormField(
            label=label,
            id_type=field_type.id_type,
            is_required=parse_bool(raw.get("is_required", raw.get("isRequired"))),
            sequence=sequence,
            accepted_file_types=(
                _clean_file_types(raw.get("accepted_file_types", raw.get("acceptedFileTypes")))
                if field_type.is_file
                else None
            ),
            options=_clean_options(raw.get("options")) if field_type.has_options else (),
        )

    # Field types
    def list_types(self) -> Sequence[FieldType]:
        return self._forms.list_types()

    def create_type(self, *, field_name: str) -> FieldType:
        name = require_non_empty(field_name, "Field type name").lower()
        if FieldTypeName.parse(name) is None:
            allowed = ", ".join(t.value for t in FieldTypeName)
            raise ValidationError(f"Field type must be one of: {allowed}")
        if _TypeCatalog(self._forms.list_types()).resolve(name):
            raise ConflictError("Form field type already exists")
        return FieldType(id_type=self._forms.create_type(name), field_name=name)

    # Fields
    def list_fields(self, event_id: int) -> Sequence[FormField]:
        self._require_event(event_id)
        return self._forms.list_fields(int(event_id))

    def set_fields(self, event_id: int, definitions: Any) -> Sequence[FormField]:
        """Replace the whole form of an event.

        Every definition is validated before anything is written, and the
        write itself is one transaction, so a bad definition leaves the
        previous form untouched.
        """
        self._require_event(event_id)
        if not isinstance(definitions, (list, tuple)):
            raise ValidationError("Form fields must be provided as an array")

        catalog = _TypeCatalog(self._forms.list_types())
        new_fields = [self._build(raw, sequence=index, catalog=catalog) for index, raw in enumerate(definitions)]
        self._forms.replace_fields(int(event_id), new_fields)
        logger.info("Event %s form replaced with %s field(s)", event_id, len(new_fields))
        return self._forms.list_fields(int(event_id))

    def create_field(self, event_id: int, raw: Mapping[str, Any]) -> FormField:
        self._require_event(event_id)
        catalog = _TypeCatalog(self._forms.list_types())
        sequence = len(self._forms.list_fields(int(event_id)))
        new_id = self._forms.add_field(int(event_id), self._build(raw, sequence=sequence, catalog=catalog))
        return self._require_field(new_id)

    def get_field(self, field_id: int) -> FormField:
        return self._require_field(field_id)

    def update_field(self, field_id: int, raw: Mapping[str, Any]) -> FormField:
        current = self._require_field(field_id)

        field_type = current.field_type
        ref = _type_ref(raw)
        if ref is not None:
            field_type = _TypeCatalog(self._forms.list_types()).resolve(ref)
            if field_type is None:
                raise ValidationError(f"Invalid form field type '{ref}' for field '{current.label}'")

        label = require_non_empty(raw["label"], "Label") if "label" in raw else current.label
        is_required = (
            parse_bool(raw.get("is_required", raw.get("isRequired")))
            if "is_required" in raw or "isRequired" in raw
            else current.is_required
        )

        accepted = None
        if field_type.is_file:
            accepted = current.accepted_file_types
            if "accepted_file_types" in raw or "acceptedFileTypes" in raw:
                accepted = _clean_file_types(raw.get("accepted_file_types", raw.get("acceptedFileTypes")))

        options: Optional[tuple[str, ...]] = None
        if not field_type.has_options:
            options = () if current.options else None
        elif "options" in raw and raw.get("options") is not None:
            options = _clean_options(raw.get("options"))

        self._forms.update_field(
            current.id_field,
            label=label,
            id_type=field_type.id_type,
            is_required=is_required,
            accepted_file_types=accepted,
            options=options,
        )
        return self._require_field(current.id_field)

    def delete_field(self, field_id: int) -> None:
        if not self._forms.delete_field(int(field_id)):
            raise NotFoundError("Form field not found")

    # Dropdown options
    def list_options(self, field_id: int) -> Sequence[DropdownOption]:
        self._require_field(field_id)
        return self._forms.list_options(int(field_id))

    def create_option(self, field_id: int, *, value: Any, is_default: Any = False) -> DropdownOption:
        form_field = self._require_field(field_id)
        if not form_field.field_type.has_options:
            raise ValidationError("Options are only allowed on checkbox or radio fields")
        value = require_non_empty(value, "Option value")
        new_id = self._forms.add_option(form_field.id_field, value=value, is_default=parse_bool(is_default))
        return DropdownOption(id_option=new_id, id_field=form_field.id_field, value=value, is_default=parse_bool(is_default))

    def update_option(self, option_id: int, raw: Mapping[str, Any]) -> DropdownOption:
        option = self._forms.get_option(int(option_id))
        if not option:
            raise NotFoundError("Dropdown option not found")
        value = require_non_empty(raw["value"], "Option value") if "value" in raw else option.value
        is_default = parse_bool(raw["is_default"]) if "is_default" in raw else option.is_default
        self._forms.update_option(option.id_option, value=value, is_default=is_default)
        return DropdownOption(id_option=option.id_option, id_field=option.id_field, value=value, is_default=is_default)

    def delete_option(self, option_id: int) -> None:
        if not self._forms.delete_option(int(option_id)):
            raise NotFoundError("Dropdown option not found")
