"""
Typed view over ``Assignment.audit``.

The blob is stored as JSON; older rows were written with camelCase keys
(``tripStarted``, ``lastUpdated``, ``status``) and are read transparently.
Keys this module does not know about are carried along in ``extra`` so that a
merge never loses information written by someone else.
"""
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, Optional

from django.utils.dateparse import parse_datetime

from logistics_core.exceptions import ValidationError

AUDIT_VERSION = 1

LOGICAL_IN_TRANSIT = 'en_transito'
LOGICAL_COMPLETED = 'completado'
LOGICAL_STATUSES = (LOGICAL_IN_TRANSIT, LOGICAL_COMPLETED)

# legacy key -> field name
LEGACY_KEYS = {
    'tripStarted': 'trip_started_at',
    'lastUpdated': 'last_updated_at',
    'status': 'logical_status',
}

DATETIME_FIELDS = ('trip_started_at', 'last_updated_at', 'completed_at')


def _parse_timestamp(value):
    if value is None or isinstance(value, datetime):
        return value
    try:
        parsed = parse_datetime(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid audit timestamp: {value!r}")
    return parsed


@dataclass(frozen=True)
class AssignmentAudit:
    version: int = AUDIT_VERSION
    logical_status: Optional[str] = None
    trip_started_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    auto_completed: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def field_names(cls):
        return tuple(f.name for f in fields(cls) if f.name not in ('version', 'extra'))

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'AssignmentAudit':
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValidationError("Assignment audit must be a JSON object")

        known = cls.field_names()
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}

        for key, value in data.items():
            if key in known:
                values[key] = value
            elif key in LEGACY_KEYS:
                # a current key wins over its legacy spelling
                values.setdefault(LEGACY_KEYS[key], value)
            elif key != 'version':
                extra[key] = value

        for name in DATETIME_FIELDS:
            if name in values:
                values[name] = _parse_timestamp(values[name])
        values['auto_completed'] = bool(values.get('auto_completed', False))

        return cls(version=data.get('version', AUDIT_VERSION), extra=extra, **values)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.extra)
        data['version'] = self.version
        for name in self.field_names():
            value = getattr(self, name)
            if value is None:
                continue
            if name == 'auto_completed' and not value:
                continue
            data[name] = value.isoformat() if isinstance(value, datetime) else value
        return data

    def merge(self, **changes) -> 'AssignmentAudit':
        """
        Return a copy with ``changes`` applied.

        Only known fields may be set, and none of them may be cleared; the
        previous values of every other key survive untouched.
        """
        known = self.field_names()
        for name, value in changes.items():
            if name not in known:
                raise ValidationError(f"Unknown audit field '{name}'")
            if value is None:
                raise ValidationError(f"Audit field '{name}' cannot be cleared")
            if name in DATETIME_FIELDS and not isinstance(value, datetime):
                raise ValidationError(f"Audit field '{name}' must be a datetime")
            if name == 'logical_status' and value not in LOGICAL_STATUSES:
                raise ValidationError(f"Unknown logical status '{value}'")
            if name == 'auto_completed' and not isinstance(value, bool):
                raise ValidationError("Audit field 'auto_completed' must be a boolean")
        return replace(self, version=AUDIT_VERSION, **changes)
