from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from fleet.models import Truck, Driver, FuelType


class AssignmentStatus(models.TextChoices):
    CREATED = 'created', 'Created'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'


class Assignment(models.Model):
    """
    A truck and a driver paired for one loaded batch of fuel.

    ``total_remaining`` only ever goes down, and only through the fuel ledger.
    """
    truck = models.ForeignKey(Truck, on_delete=models.PROTECT, related_name='assignments')
    driver = models.ForeignKey(Driver, on_delete=models.PROTECT, related_name='assignments')

    total_loaded = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))]
    )
    total_remaining = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))]
    )
    fuel_type = models.CharField(max_length=20, choices=FuelType.choices)

    status = models.CharField(max_length=20, choices=AssignmentStatus.choices, default=AssignmentStatus.CREATED)
    is_completed = models.BooleanField(default=False)
    trip_started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True)
    # Trip lifecycle metadata, see assignment.audit.AssignmentAudit
    audit = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-id']
        indexes = [
            models.Index(fields=['driver', 'is_completed']),
            models.Index(fields=['truck', 'is_completed']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_remaining__gte=0) & models.Q(total_remaining__lte=models.F('total_loaded')),
                name='assignment_remaining_within_loaded',
            ),
        ]

    def __str__(self):
        return f"Assignment #{self.id} to Truck {self.truck.plate}"

    @property
    def dispensed(self):
        return self.total_loaded - self.total_remaining
