from django.db import models


class DriverState(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    SUSPENDED = 'suspended', 'Suspended'
    ASSIGNED = 'assigned', 'Assigned'


class Driver(models.Model):
    """
    Operator who drives a truck through an assignment.

    The primary key is the caller id the auth gateway forwards for the driver.
    """
    dni = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100)
    lastname = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True)
    state = models.CharField(max_length=20, choices=DriverState.choices, default=DriverState.ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.full_name} ({self.dni})"

    @property
    def full_name(self):
        return f"{self.name} {self.lastname}".strip()

    @property
    def is_available(self):
        return self.state == DriverState.ACTIVE
