from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class FuelType(models.TextChoices):
    DIESEL_B5 = 'DIESEL_B5', 'Diesel B5'
    GASOLINA_90 = 'GASOLINA_90', 'Gasolina 90'
    GASOLINA_95 = 'GASOLINA_95', 'Gasolina 95'
    GLP = 'GLP', 'GLP'
    ELECTRICA = 'ELECTRICA', 'Eléctrica'


class TruckState(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    MAINTENANCE = 'maintenance', 'Maintenance'
    IN_TRANSIT = 'in_transit', 'In Transit'
    DISCHARGING = 'discharging', 'Discharging'
    ASSIGNED = 'assigned', 'Assigned'


class Truck(models.Model):
    """
    A tanker truck in the fleet.

    ``last_remaining`` is the fuel left in the tank by the most recent
    assignment; it becomes the opening balance of the next one.
    """
    plate = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100, blank=True)
    fuel_type = models.CharField(max_length=20, choices=FuelType.choices, default=FuelType.DIESEL_B5)
    capacity = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Tank capacity in gallons"
    )
    last_remaining = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Gallons carried over from the last assignment"
    )
    state = models.CharField(max_length=20, choices=TruckState.choices, default=TruckState.ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.plate} ({self.state})"

    def clean(self):
        super().clean()
        if self.capacity is not None and self.last_remaining is not None and self.last_remaining > self.capacity:
            raise ValidationError({'last_remaining': "Carried-over fuel cannot exceed the tank capacity."})

    @property
    def is_available(self):
        """Check if the truck can take a new assignment."""
        return self.state == TruckState.ACTIVE

    @property
    def free_capacity(self):
        """Gallons that can still be loaded on top of the carried-over fuel."""
        return self.capacity - self.last_remaining

    class Meta:
        indexes = [
            models.Index(fields=['state']),
            models.Index(fields=['plate']),
        ]
