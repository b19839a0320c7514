from datetime import datetime, timezone as dt_timezone

from django.test import SimpleTestCase

from assignment.audit import AssignmentAudit, AUDIT_VERSION, LOGICAL_IN_TRANSIT, LOGICAL_COMPLETED
from logistics_core.exceptions import ValidationError

STARTED = datetime(2026, 3, 1, 13, 0, tzinfo=dt_timezone.utc)
LATER = datetime(2026, 3, 1, 18, 30, tzinfo=dt_timezone.utc)


class AssignmentAuditTest(SimpleTestCase):

    def test_empty_blob_gives_defaults(self):
        audit = AssignmentAudit.from_dict({})
        self.assertEqual(audit.version, AUDIT_VERSION)
        self.assertIsNone(audit.logical_status)
        self.assertFalse(audit.auto_completed)
        self.assertEqual(audit.to_dict(), {'version': AUDIT_VERSION})

    def test_reads_legacy_keys(self):
        audit = AssignmentAudit.from_dict({
            'tripStarted': '2026-03-01T13:00:00+00:00',
            'status': LOGICAL_IN_TRANSIT,
            'gps': {'lat': -12.04},
        })
        self.assertEqual(audit.trip_started_at, STARTED)
        self.assertEqual(audit.logical_status, LOGICAL_IN_TRANSIT)
        self.assertEqual(audit.extra, {'gps': {'lat': -12.04}})

    def test_current_key_wins_over_legacy_key(self):
        audit = AssignmentAudit.from_dict({
            'lastUpdated': '2020-01-01T00:00:00+00:00',
            'last_updated_at': LATER.isoformat(),
        })
        self.assertEqual(audit.last_updated_at, LATER)

    def test_merge_keeps_previous_and_unknown_keys(self):
        audit = AssignmentAudit.from_dict({'tripStarted': STARTED.isoformat(), 'signature': 'abc'})
        merged = audit.merge(logical_status=LOGICAL_COMPLETED, completed_at=LATER)

        data = merged.to_dict()
        self.assertEqual(data['signature'], 'abc')
        self.assertEqual(data['trip_started_at'], STARTED.isoformat())
        self.assertEqual(data['completed_at'], LATER.isoformat())
        self.assertEqual(data['logical_status'], LOGICAL_COMPLETED)
        # merge returns a copy
        self.assertIsNone(audit.completed_at)

    def test_round_trip_through_json_dict(self):
        audit = AssignmentAudit().merge(trip_started_at=STARTED, auto_completed=True)
        self.assertEqual(AssignmentAudit.from_dict(audit.to_dict()), audit)

    def test_merge_rejects_unknown_field(self):
        with self.assertRaises(ValidationError):
            AssignmentAudit().merge(speed=90)

    def test_merge_rejects_unknown_logical_status(self):
        with self.assertRaises(ValidationError):
            AssignmentAudit().merge(logical_status='perdido')

    def test_merge_rejects_non_datetime(self):
        with self.assertRaises(ValidationError):
            AssignmentAudit().merge(trip_started_at='yesterday')

    def test_merge_cannot_clear_a_field(self):
        audit = AssignmentAudit().merge(trip_started_at=STARTED)
        with self.assertRaises(ValidationError):
            audit.merge(trip_started_at=None)

    def test_invalid_stored_timestamp(self):
        with self.assertRaises(ValidationError):
            AssignmentAudit.from_dict({'completed_at': 'not a date'})
