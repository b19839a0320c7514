from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from customers.models import Customer
from .assignment import Assignment


class DischargeStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    FINALIZED = 'finalized', 'Finalized'
    EXPIRED = 'expired', 'Expired'


TERMINAL_DISCHARGE_STATUSES = (DischargeStatus.FINALIZED, DischargeStatus.EXPIRED)


class Discharge(models.Model):
    """
    One delivery of fuel from an assignment to a customer.

    The meter readings (marcador inicial/final) bracket the actual pour;
    ``cantidad_real`` is the dispensed quantity reported by the operator.
    """
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name='discharges')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='discharges')

    total_discharged = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Planned gallons for this delivery"
    )
    status = models.CharField(max_length=20, choices=DischargeStatus.choices, default=DischargeStatus.PENDING)

    marcador_inicial = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    marcador_final = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    cantidad_real = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    overrun_quantity = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal('0'),
        help_text="Gallons dispensed beyond the assignment's remaining balance"
    )

    end_time = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Discharge #{self.id} to {self.customer.company_name} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_DISCHARGE_STATUSES

    @property
    def meter_delta(self):
        """Quantity implied by the meter readings, if both are known."""
        if self.marcador_inicial is None or self.marcador_final is None:
            return None
        return self.marcador_final - self.marcador_inicial
