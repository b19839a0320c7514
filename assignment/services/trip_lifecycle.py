"""
Assignment state machine: created -> in_progress -> completed.

Completion happens explicitly, automatically once every discharge is terminal,
or through the stale-assignment sweep.
"""
import logging
from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from assignment.audit import AssignmentAudit, LOGICAL_IN_TRANSIT, LOGICAL_COMPLETED
from assignment.models import (
    Assignment, AssignmentStatus, DischargeStatus, TERMINAL_DISCHARGE_STATUSES, Trip, TripStatus,
)
from assignment.services.common import get_or_not_found
from fleet.services.status_services import mark_truck_in_transit, mark_truck_active, mark_driver_active
from logistics_core.exceptions import InvalidState, StoreFailure

logger = logging.getLogger(__name__)


def start_trip(assignment_id, driver_id, now=None) -> Assignment:
    """
    Put an assignment on the road.

    Only the assigned driver may start the trip; for anyone else the
    assignment does not exist.
    """
    now = now or timezone.now()
    try:
        with transaction.atomic():
            assignment = get_or_not_found(
                Assignment.objects.select_for_update().filter(driver_id=driver_id),
                assignment_id, 'Assignment'
            )
            if assignment.status != AssignmentStatus.CREATED:
                raise InvalidState(
                    f"Assignment {assignment.id} cannot start a trip from status '{assignment.status}'"
                )

            audit = AssignmentAudit.from_dict(assignment.audit).merge(
                logical_status=LOGICAL_IN_TRANSIT,
                trip_started_at=now,
                last_updated_at=now,
            )
            assignment.status = AssignmentStatus.IN_PROGRESS
            assignment.trip_started_at = now
            assignment.audit = audit.to_dict()
            assignment.save(update_fields=['status', 'trip_started_at', 'audit', 'updated_at'])

            Trip.objects.create(assignment=assignment, driver_id=assignment.driver_id, start_time=now)
            mark_truck_in_transit(assignment.truck)
    except DatabaseError as exc:
        logger.error(f"Starting trip for assignment {assignment_id} failed: {exc}")
        raise StoreFailure(f"Could not start trip for assignment {assignment_id}") from exc

    logger.info(f"Trip started for assignment {assignment.id} by driver {driver_id}")
    return assignment


def _complete(assignment: Assignment, now, auto_completed=False):
    changes = dict(logical_status=LOGICAL_COMPLETED, completed_at=now, last_updated_at=now)
    if auto_completed:
        changes['auto_completed'] = True
    audit = AssignmentAudit.from_dict(assignment.audit).merge(**changes)

    assignment.status = AssignmentStatus.COMPLETED
    assignment.is_completed = True
    assignment.completed_at = now
    assignment.audit = audit.to_dict()
    assignment.save(update_fields=['status', 'is_completed', 'completed_at', 'audit', 'updated_at'])

    assignment.trips.filter(status=TripStatus.IN_PROGRESS).update(
        status=TripStatus.COMPLETED, end_time=now, updated_at=now
    )
    mark_truck_active(assignment.truck)
    mark_driver_active(assignment.driver)
    logger.info(
        f"Assignment {assignment.id} completed{' automatically' if auto_completed else ''}, "
        f"{assignment.total_remaining} gal stay on truck {assignment.truck.plate}"
    )


def complete_assignment(assignment_id, now=None) -> Assignment:
    now = now or timezone.now()
    try:
        with transaction.atomic():
            assignment = get_or_not_found(Assignment.objects.select_for_update(), assignment_id, 'Assignment')
            if assignment.is_completed:
                raise InvalidState(f"Assignment {assignment.id} is already completed")
            open_count = assignment.discharges.exclude(status__in=TERMINAL_DISCHARGE_STATUSES).count()
            if open_count:
                raise InvalidState(f"Assignment {assignment.id} still has {open_count} open discharge(s)")
            _complete(assignment, now)
    except DatabaseError as exc:
        logger.error(f"Completing assignment {assignment_id} failed: {exc}")
        raise StoreFailure(f"Could not complete assignment {assignment_id}") from exc
    return assignment


def complete_if_all_discharged(assignment: Assignment, now=None) -> bool:
    """
    Complete the assignment when it has discharges and all of them are terminal.

    Must run inside the caller's transaction with the assignment row locked.
    """
    if assignment.is_completed:
        return False
    discharges = assignment.discharges.all()
    if not discharges.exists():
        return False
    if discharges.exclude(status__in=TERMINAL_DISCHARGE_STATUSES).exists():
        return False
    _complete(assignment, now or timezone.now())
    return True


def stale_cutoff(now):
    """
    Assignments created before this instant are eligible for auto-completion.

    Age is measured from today's local midnight, so nothing created today is
    ever swept.
    """
    midnight = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(hours=settings.ASSIGNMENT_AUTO_COMPLETE_AFTER_HOURS)


def expire_stale_assignments(driver_id: Optional[int] = None, now=None) -> List[int]:
    """
    Close assignments left open from a previous day.

    Their unfinished discharges are marked expired without touching the
    ledger. Returns the ids of the assignments completed.
    """
    now = now or timezone.now()
    candidates = Assignment.objects.filter(is_completed=False, created_at__lt=stale_cutoff(now))
    if driver_id is not None:
        candidates = candidates.filter(driver_id=driver_id)

    completed = []
    for assignment_id in list(candidates.values_list('id', flat=True)):
        try:
            with transaction.atomic():
                try:
                    assignment = Assignment.objects.select_for_update().get(pk=assignment_id)
                except Assignment.DoesNotExist:
                    continue
                if assignment.is_completed:
                    continue
                expired = assignment.discharges.exclude(status__in=TERMINAL_DISCHARGE_STATUSES).update(
                    status=DischargeStatus.EXPIRED, end_time=now, updated_at=now
                )
                if expired:
                    logger.info(f"Expired {expired} open discharge(s) of assignment {assignment_id}")
                _complete(assignment, now, auto_completed=True)
        except DatabaseError as exc:
            logger.error(f"Auto-completing assignment {assignment_id} failed: {exc}")
            raise StoreFailure(f"Could not auto-complete assignment {assignment_id}") from exc
        completed.append(assignment_id)

    logger.info(f"Auto-completed {len(completed)} stale assignment(s)")
    return completed
