"""
Fuel ledger: the only place where an assignment's remaining fuel goes down.

A discharge is applied to its assignment exactly once, when it is finalized.
The remaining balance is clamped at zero; anything poured beyond it is
recorded as an overrun on the discharge.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from assignment.audit import AssignmentAudit
from assignment.models import Assignment, Discharge, DischargeStatus
from assignment.services.carry_forward import reconcile_truck_remaining
from assignment.services.common import MAX_METER_READING, ZERO, get_or_not_found, to_quantity
from assignment.services.trip_lifecycle import complete_if_all_discharged
from customers.models import Customer
from fleet.models import Truck
from logistics_core.exceptions import InvalidState, StoreFailure, ValidationError

logger = logging.getLogger(__name__)

# statuses a client may set through update_discharge
OPEN_STATUSES = (DischargeStatus.PENDING, DischargeStatus.IN_PROGRESS)


@dataclass(frozen=True)
class FinalizationResult:
    discharge_id: int
    assignment_id: int
    cantidad_real: Decimal
    remaining_before: Decimal
    remaining_after: Decimal
    overrun: Decimal = ZERO
    meter_delta: Optional[Decimal] = None
    assignment_completed: bool = False

    @property
    def has_overrun(self):
        return self.overrun > 0

    @property
    def meter_mismatch(self):
        return self.meter_delta is not None and self.meter_delta != self.cantidad_real


def _parse_meters(marcador_inicial, marcador_final):
    inicial = None if marcador_inicial is None else to_quantity(
        marcador_inicial, 'marcador_inicial', max_value=MAX_METER_READING
    )
    final = None if marcador_final is None else to_quantity(
        marcador_final, 'marcador_final', max_value=MAX_METER_READING
    )
    if inicial is not None and inicial < 0:
        raise ValidationError("marcador_inicial cannot be negative")
    if inicial is not None and final is not None and final < inicial:
        raise ValidationError(f"marcador_final ({final}) is below marcador_inicial ({inicial})")
    return inicial, final


def finalize_discharge(discharge_id, actual_quantity, marcador_inicial=None, marcador_final=None,
                       now=None) -> FinalizationResult:
    """
    Apply a discharge's actual quantity to its assignment.

    Discharge, assignment and truck are updated in one transaction with all
    three rows locked. When this was the last open discharge the assignment
    is completed as well.
    """
    actual = to_quantity(actual_quantity, 'cantidad_real')
    if actual < 0:
        raise ValidationError("cantidad_real cannot be negative")
    inicial, final = _parse_meters(marcador_inicial, marcador_final)
    now = now or timezone.now()

    try:
        with transaction.atomic():
            discharge = get_or_not_found(Discharge.objects.select_for_update(), discharge_id, 'Discharge')
            assignment = get_or_not_found(
                Assignment.objects.select_for_update(), discharge.assignment_id, 'Assignment'
            )
            truck = get_or_not_found(Truck.objects.select_for_update(), assignment.truck_id, 'Truck')

            if discharge.is_terminal:
                raise InvalidState(f"Discharge {discharge.id} is already {discharge.status}")
            if assignment.is_completed:
                raise InvalidState(f"Assignment {assignment.id} is completed")

            before = assignment.total_remaining
            after = max(ZERO, before - actual)
            overrun = max(ZERO, actual - before)
            if overrun:
                logger.warning(
                    f"Discharge {discharge.id} poured {actual} gal with only {before} gal left on "
                    f"assignment {assignment.id}; overrun of {overrun} gal"
                )

            meter_delta = None
            if inicial is not None and final is not None:
                meter_delta = final - inicial
                if meter_delta != actual:
                    logger.warning(
                        f"Discharge {discharge.id}: meters read {meter_delta} gal but cantidad_real is {actual}"
                    )

            discharge.status = DischargeStatus.FINALIZED
            discharge.cantidad_real = actual
            discharge.overrun_quantity = overrun
            discharge.end_time = now
            update_fields = ['status', 'cantidad_real', 'overrun_quantity', 'end_time', 'updated_at']
            if inicial is not None:
                discharge.marcador_inicial = inicial
                update_fields.append('marcador_inicial')
            if final is not None:
                discharge.marcador_final = final
                update_fields.append('marcador_final')
            discharge.save(update_fields=update_fields)

            assignment.total_remaining = after
            assignment.audit = AssignmentAudit.from_dict(assignment.audit).merge(last_updated_at=now).to_dict()
            assignment.save(update_fields=['total_remaining', 'audit', 'updated_at'])

            reconcile_truck_remaining(truck, assignment)
            completed = complete_if_all_discharged(assignment, now)
    except DatabaseError as exc:
        logger.error(f"Finalizing discharge {discharge_id} failed: {exc}")
        raise StoreFailure(f"Could not finalize discharge {discharge_id}") from exc

    logger.info(
        f"Discharge {discharge.id} finalized: {actual} gal, assignment {assignment.id} {before} -> {after}"
    )
    return FinalizationResult(
        discharge_id=discharge.id,
        assignment_id=assignment.id,
        cantidad_real=actual,
        remaining_before=before,
        remaining_after=after,
        overrun=overrun,
        meter_delta=meter_delta,
        assignment_completed=completed,
    )


def update_discharge(discharge_id, status, marcador_inicial=None, marcador_final=None,
                     cantidad_real=None, now=None) -> Discharge:
    """
    Client-facing discharge update.

    ``finalized`` goes through the ledger and needs both meters and the
    actual quantity; ``pending`` and ``in_progress`` only record readings.
    """
    if status == DischargeStatus.FINALIZED:
        missing = [
            name for name, value in (
                ('marcador_inicial', marcador_inicial),
                ('marcador_final', marcador_final),
                ('cantidad_real', cantidad_real),
            ) if value is None
        ]
        if missing:
            raise ValidationError(f"Finalizing a discharge requires {', '.join(missing)}")
        finalize_discharge(discharge_id, cantidad_real, marcador_inicial, marcador_final, now=now)
        return Discharge.objects.select_related('customer').get(pk=discharge_id)

    if status not in OPEN_STATUSES:
        raise ValidationError(f"Status '{status}' cannot be set on a discharge")

    inicial, final = _parse_meters(marcador_inicial, marcador_final)
    try:
        with transaction.atomic():
            discharge = get_or_not_found(Discharge.objects.select_for_update(), discharge_id, 'Discharge')
            if discharge.is_terminal:
                raise InvalidState(f"Discharge {discharge.id} is already {discharge.status}")

            if inicial is not None:
                discharge.marcador_inicial = inicial
            if final is not None:
                discharge.marcador_final = final
            if (discharge.marcador_inicial is not None and discharge.marcador_final is not None
                    and discharge.marcador_final < discharge.marcador_inicial):
                raise ValidationError("marcador_final is below marcador_inicial")

            discharge.status = status
            discharge.save(update_fields=['status', 'marcador_inicial', 'marcador_final', 'updated_at'])
    except DatabaseError as exc:
        logger.error(f"Updating discharge {discharge_id} failed: {exc}")
        raise StoreFailure(f"Could not update discharge {discharge_id}") from exc

    logger.info(f"Discharge {discharge.id} is {status}")
    return discharge


def create_discharge(assignment_id, customer_id, total_discharged, notes='') -> Discharge:
    """Plan a delivery against an assignment. Balances are not touched."""
    planned = to_quantity(total_discharged, 'total_discharged')
    if planned <= 0:
        raise ValidationError("total_discharged must be positive")

    try:
        with transaction.atomic():
            assignment = get_or_not_found(Assignment.objects.select_for_update(), assignment_id, 'Assignment')
            customer = get_or_not_found(Customer.objects.all(), customer_id, 'Customer')
            if assignment.is_completed:
                raise InvalidState(f"Assignment {assignment.id} is completed")
            if planned > assignment.total_remaining:
                raise ValidationError(
                    f"Planned {planned} gal exceeds the {assignment.total_remaining} gal remaining "
                    f"on assignment {assignment.id}"
                )
            discharge = Discharge.objects.create(
                assignment=assignment,
                customer=customer,
                total_discharged=planned,
                notes=notes or '',
            )
    except DatabaseError as exc:
        logger.error(f"Creating discharge for assignment {assignment_id} failed: {exc}")
        raise StoreFailure(f"Could not create discharge for assignment {assignment_id}") from exc

    logger.info(f"Discharge {discharge.id} planned: {planned} gal to {customer.company_name}")
    return discharge
