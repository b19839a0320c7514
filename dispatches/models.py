from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from customers.models import Customer
from fleet.models import Truck, Driver, FuelType


class DispatchSequence(models.Model):
    """
    Per-year counter behind the dispatch numbers.

    ``last_number`` is the last sequence handed out for ``year``; it is only
    ever changed through dispatches.services.numbering.
    """
    year = models.PositiveIntegerField(unique=True)
    last_number = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year']

    def __str__(self):
        return f"{self.year}: {self.last_number}"


class DispatchStatus(models.TextChoices):
    PROGRAMADO = 'PROGRAMADO', 'Programado'
    EN_RUTA = 'EN_RUTA', 'En ruta'
    COMPLETADO = 'COMPLETADO', 'Completado'
    CANCELADO = 'CANCELADO', 'Cancelado'


class Dispatch(models.Model):
    """
    A scheduled fuel delivery, identified by its guide number.

    ``number`` is reserved from ``DispatchSequence`` in the same transaction
    that creates the row.
    """
    number = models.CharField(max_length=32, unique=True)
    year = models.PositiveIntegerField()
    sequence = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=DispatchStatus.choices, default=DispatchStatus.PROGRAMADO)

    truck = models.ForeignKey(Truck, on_delete=models.PROTECT, related_name='dispatches')
    driver = models.ForeignKey(Driver, on_delete=models.PROTECT, related_name='dispatches')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='dispatches')

    fuel_type = models.CharField(max_length=20, choices=FuelType.choices)
    total_quantity = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    remaining_quantity = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))]
    )
    price_per_gallon = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    scheduled_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year', '-sequence']
        indexes = [
            models.Index(fields=['status']),
            models.Index(fields=['driver', 'status']),
        ]
        constraints = [
            models.UniqueConstraint(fields=['year', 'sequence'], name='dispatch_unique_year_sequence'),
        ]

    def __str__(self):
        return f"{self.number} ({self.status})"
