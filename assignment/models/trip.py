from django.db import models

from fleet.models import Driver
from .assignment import Assignment


class TripStatus(models.TextChoices):
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'


class Trip(models.Model):
    """
    The drive opened when a driver starts an assignment's trip.
    """
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name='trips')
    driver = models.ForeignKey(Driver, on_delete=models.PROTECT, related_name='trips')

    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=TripStatus.choices, default=TripStatus.IN_PROGRESS)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_time']

    def __str__(self):
        return f"Trip for Assignment #{self.assignment_id} - {self.start_time.strftime('%Y-%m-%d')}"

    @property
    def duration(self):
        """Calculate the trip duration in minutes."""
        if self.end_time and self.start_time:
            delta = self.end_time - self.start_time
            return delta.total_seconds() / 60
        return None
