"""Turning `field_<id>` form data into per-field answers and checking them."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..core.constants import FIELD_KEY_PREFIX
from ..core.enums import FieldTypeName
from ..core.exceptions import ValidationError
from ..forms.model import FormField
from ..uploads.storage import UploadedFile, file_extension

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "/uploads/"
_TRUE_VALUES = {"true", "1", "on", "yes"}
_BOOL_VALUES = _TRUE_VALUES | {"false", "0", "off", "no"}


@dataclass(frozen=True)
class Answer:
    field: FormField
    text: Optional[str] = None
    file: Optional[UploadedFile] = None

    @property
    def is_blank(self) -> bool:
        if self.file is not None:
            return False
        text = (self.text or "").strip()
        if not text:
            return True
        kind = self.field.field_type.kind
        if kind == FieldTypeName.CHECKBOX:
            if self.field.options:
                return not checkbox_selection(text)
            return text.lower() not in _TRUE_VALUES
        return False


def parse_field_key(key: str) -> Optional[int]:
    if not key.startswith(FIELD_KEY_PREFIX):
        return None
    raw = key[len(FIELD_KEY_PREFIX) :]
    return int(raw) if raw.isdigit() else None


def _text_value(form: Mapping[str, Any], key: str) -> Optional[str]:
    values = form.getlist(key) if hasattr(form, "getlist") else [form.get(key)]
    if len(values) > 1:
        return json.dumps([str(v) for v in values])
    value = values[0] if values else None
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return json.dumps([str(v) for v in value])
    return str(value)


def collect_answers(
    fields: Sequence[FormField],
    form: Optional[Mapping[str, Any]],
    files: Optional[Mapping[str, Any]] = None,
) -> dict[int, Answer]:
    """Map `field_<id>` entries onto the event's fields.

    Malformed keys and ids that are not part of this form are skipped with a
    warning. A file for a field replaces any text sent for the same field.
    """
    by_id = {f.id_field: f for f in fields}
    answers: dict[int, Answer] = {}

    def lookup(key: str) -> Optional[FormField]:
        field_id = parse_field_key(key)
        if field_id is None:
            logger.warning("Skipping malformed answer key %r", key)
            return None
        form_field = by_id.get(field_id)
        if form_field is None:
            logger.warning("Skipping answer for field %s: not part of this event's form", field_id)
        return form_field

    for key in list((form or {}).keys()):
        form_field = lookup(key)
        if form_field is not None:
            answers[form_field.id_field] = Answer(form_field, text=_text_value(form, key))

    for key in list((files or {}).keys()):
        upload = files.get(key)
        if upload is None or not (getattr(upload, "filename", None) or "").strip():
            continue
        form_field = lookup(key)
        if form_field is not None:
            answers[form_field.id_field] = Answer(form_field, file=upload)

    return answers


def checkbox_selection(text: str) -> list[str]:
    text = (text or "").strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except ValueError:
            raise ValidationError("Checkbox answer is not a valid list")
        return [str(v).strip() for v in parsed if str(v).strip()]
    return [part.strip() for part in text.split(",") if part.strip()]


def check_value(form_field: FormField, *, text: Optional[str], file_name: Optional[str] = None) -> Optional[str]:
    """Return a problem description, or None when the value fits the field."""
    kind = form_field.field_type.kind
    label = form_field.label

    if kind == FieldTypeName.FILE or file_name is not None:
        # A file answer wins over text whatever the field type.
        if file_name is None:
            if text and text.startswith(UPLOADS_PREFIX):
                file_name = text
            else:
                return f'"{label}" expects an uploaded file'
        allowed = form_field.accepted_extensions() if kind == FieldTypeName.FILE else set()
        if allowed and file_extension(file_name) not in allowed:
            return f'"{label}" only accepts {", ".join(sorted(allowed))} files'
        return None

    value = (text or "").strip()
    if not value:
        return None

    if kind == FieldTypeName.NUMBER:
        try:
            float(value)
        except ValueError:
            return f'"{label}" must be a number'
    elif kind == FieldTypeName.DATE:
        try:
            parse_iso_date(value)
        except ValueError:
            return f'"{label}" must be a date (YYYY-MM-DD)'
    elif kind == FieldTypeName.RADIO and form_field.options:
        if value not in form_field.option_values:
            return f'"{label}" must be one of: {", ".join(form_field.option_values)}'
    elif kind == FieldTypeName.CHECKBOX:
        if form_field.options:
            try:
                chosen = checkbox_selection(value)
            except ValidationError as exc:
                return f'"{label}": {exc}'
            unknown = [c for c in chosen if c not in form_field.option_values]
            if unknown:
                return f'"{label}" has unknown option(s): {", ".join(unknown)}'
        elif value.lower() not in _BOOL_VALUES:
            return f'"{label}" must be true or false'
    return None


def validate_answers(fields: Sequence[FormField], answers: Mapping[int, Answer]) -> None:
    """Raise ValidationError listing every missing required field or bad value."""
    problems: list[str] = []
    for form_field in sorted(fields, key=lambda f: f.sequence):
        answer = answers.get(form_field.id_field)
        if answer is None or answer.is_blank:
            if form_field.is_required:
                problems.append(f'The field "{form_field.label}" is required')
            continue
        file_name = answer.file.filename if answer.file is not None else None
        problem = check_value(form_field, text=answer.text, file_name=file_name)
        if problem:
            problems.append(problem)
    if problems:
        raise ValidationError("; ".join(problems))
