from datetime import datetime, timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import override_settings
from django.utils import timezone

from assignment.models import Assignment, AssignmentStatus, DischargeStatus, Trip, TripStatus
from assignment.services.assignment_service import create_assignment
from assignment.services.fuel_ledger import create_discharge, finalize_discharge
from assignment.services.trip_lifecycle import (
    start_trip, complete_assignment, complete_if_all_discharged, expire_stale_assignments, stale_cutoff,
)
from fleet.models import Truck, TruckState, DriverState
from logistics_core.exceptions import InvalidState, NotFound
from .base import LedgerTestCase


class StartTripTest(LedgerTestCase):

    def test_owner_starts_trip(self):
        now = timezone.now()
        assignment = start_trip(self.assignment.id, self.driver.id, now=now)
        self.reload()

        self.assertEqual(assignment.status, AssignmentStatus.IN_PROGRESS)
        self.assertEqual(self.assignment.trip_started_at, now)
        self.assertEqual(self.assignment.audit['logical_status'], 'en_transito')
        self.assertEqual(self.assignment.audit['trip_started_at'], now.isoformat())
        self.assertEqual(self.truck.state, TruckState.IN_TRANSIT)
        self.assertEqual(self.assignment.total_remaining, Decimal('1000.00'))

        trip = Trip.objects.get(assignment=self.assignment)
        self.assertEqual(trip.driver, self.driver)
        self.assertEqual(trip.status, TripStatus.IN_PROGRESS)

    def test_non_owner_gets_not_found_and_audit_is_unchanged(self):
        audit_before = dict(self.assignment.audit)
        with self.assertRaises(NotFound):
            start_trip(self.assignment.id, self.other_driver.id)
        self.reload()
        self.assertEqual(self.assignment.audit, audit_before)
        self.assertEqual(self.assignment.status, AssignmentStatus.CREATED)
        self.assertFalse(Trip.objects.exists())

    def test_unknown_assignment(self):
        with self.assertRaises(NotFound):
            start_trip(999999, self.driver.id)
        with self.assertRaises(NotFound):
            start_trip('abc', self.driver.id)

    def test_cannot_start_twice(self):
        start_trip(self.assignment.id, self.driver.id)
        with self.assertRaises(InvalidState):
            start_trip(self.assignment.id, self.driver.id)
        self.assertEqual(Trip.objects.count(), 1)

    def test_unknown_audit_keys_survive(self):
        Assignment.objects.filter(pk=self.assignment.pk).update(
            audit={'lastUpdated': '2026-01-05T10:00:00-05:00', 'evidence': ['photo-1.jpg']}
        )
        start_trip(self.assignment.id, self.driver.id)
        self.reload()
        self.assertEqual(self.assignment.audit['evidence'], ['photo-1.jpg'])
        self.assertEqual(self.assignment.audit['version'], 1)


class CompleteAssignmentTest(LedgerTestCase):

    def test_complete_without_discharges(self):
        start_trip(self.assignment.id, self.driver.id)
        complete_assignment(self.assignment.id)
        self.reload()

        self.assertTrue(self.assignment.is_completed)
        self.assertIsNotNone(self.assignment.completed_at)
        self.assertEqual(self.assignment.audit['logical_status'], 'completado')
        self.assertEqual(self.truck.state, TruckState.ACTIVE)
        self.assertEqual(self.driver.state, DriverState.ACTIVE)
        self.assertEqual(self.truck.last_remaining, Decimal('1000.00'))

        trip = Trip.objects.get(assignment=self.assignment)
        self.assertEqual(trip.status, TripStatus.COMPLETED)
        self.assertIsNotNone(trip.end_time)

    def test_open_discharge_blocks_completion(self):
        create_discharge(self.assignment.id, self.customer.id, Decimal('100'))
        with self.assertRaises(InvalidState):
            complete_assignment(self.assignment.id)

    def test_already_completed(self):
        complete_assignment(self.assignment.id)
        with self.assertRaises(InvalidState):
            complete_assignment(self.assignment.id)

    def test_complete_if_all_discharged_needs_discharges(self):
        self.assertFalse(complete_if_all_discharged(self.assignment))
        self.reload()
        self.assertFalse(self.assignment.is_completed)

    def test_next_assignment_absorbs_leftover(self):
        discharge = create_discharge(self.assignment.id, self.customer.id, Decimal('600'))
        finalize_discharge(discharge.id, Decimal('600'))
        self.reload()
        self.assertTrue(self.assignment.is_completed)

        follow_up = create_assignment(self.truck.id, self.driver.id, Decimal('500'))
        self.truck.refresh_from_db()
        self.assertEqual(follow_up.total_loaded, Decimal('900.00'))
        self.assertEqual(self.truck.last_remaining, Decimal('900.00'))


@override_settings(ASSIGNMENT_AUTO_COMPLETE_AFTER_HOURS=24)
class ExpireStaleAssignmentsTest(LedgerTestCase):

    def setUp(self):
        super().setUp()
        self.now = timezone.make_aware(datetime(2026, 3, 10, 9, 0))
        Assignment.objects.filter(pk=self.assignment.pk).update(created_at=self.now - timedelta(days=2))
        self.discharge = create_discharge(self.assignment.id, self.customer.id, Decimal('200'))

    def test_cutoff_counts_hours_back_from_local_midnight(self):
        self.assertEqual(stale_cutoff(self.now), timezone.make_aware(datetime(2026, 3, 9, 0, 0)))
        with self.settings(ASSIGNMENT_AUTO_COMPLETE_AFTER_HOURS=2):
            self.assertEqual(stale_cutoff(self.now), timezone.make_aware(datetime(2026, 3, 9, 22, 0)))

    def test_assignment_from_yesterday_morning_is_not_yet_stale(self):
        Assignment.objects.filter(pk=self.assignment.pk).update(
            created_at=timezone.make_aware(datetime(2026, 3, 9, 10, 0))
        )
        sweep_at = timezone.make_aware(datetime(2026, 3, 10, 11, 0))

        self.assertEqual(expire_stale_assignments(now=sweep_at), [])
        self.reload()
        self.assertFalse(self.assignment.is_completed)

    def test_stale_assignment_is_completed_and_discharges_expired(self):
        completed = expire_stale_assignments(now=self.now)
        self.reload()
        self.discharge.refresh_from_db()

        self.assertEqual(completed, [self.assignment.id])
        self.assertTrue(self.assignment.is_completed)
        self.assertTrue(self.assignment.audit['auto_completed'])
        self.assertEqual(self.discharge.status, DischargeStatus.EXPIRED)
        # expiry has no ledger effect
        self.assertEqual(self.assignment.total_remaining, Decimal('1000.00'))
        self.assertEqual(self.truck.last_remaining, Decimal('1000.00'))
        self.assertEqual(self.truck.state, TruckState.ACTIVE)

    def test_recent_assignment_is_left_alone(self):
        other_truck = Truck.objects.create(plate="NEW-001", capacity=Decimal('2000'))
        fresh = create_assignment(other_truck.id, self.other_driver.id, Decimal('500'))
        Assignment.objects.filter(pk=fresh.pk).update(created_at=self.now - timedelta(hours=3))

        completed = expire_stale_assignments(now=self.now)
        fresh.refresh_from_db()
        self.assertEqual(completed, [self.assignment.id])
        self.assertFalse(fresh.is_completed)

    def test_driver_filter(self):
        self.assertEqual(expire_stale_assignments(driver_id=self.other_driver.id, now=self.now), [])
        self.assertEqual(expire_stale_assignments(driver_id=self.driver.id, now=self.now), [self.assignment.id])

    def test_management_command(self):
        Assignment.objects.filter(pk=self.assignment.pk).update(
            created_at=timezone.now() - timedelta(days=3)
        )
        out = StringIO()
        call_command('autocomplete_assignments', stdout=out)
        self.assertIn('Auto-completed 1 assignment(s)', out.getvalue())

        out = StringIO()
        call_command('autocomplete_assignments', stdout=out)
        self.assertIn('No stale assignments.', out.getvalue())
