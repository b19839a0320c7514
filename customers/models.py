from django.core.validators import RegexValidator
from django.db import models


class Customer(models.Model):
    """
    Destination of a fuel discharge.
    """
    company_name = models.CharField(max_length=200)
    ruc = models.CharField(
        max_length=11,
        unique=True,
        validators=[RegexValidator(r'^\d{11}$', "RUC must be 11 digits.")],
        help_text="Taxpayer registry number"
    )
    address = models.CharField(max_length=255, blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['company_name']

    def __str__(self):
        return f"{self.company_name} ({self.ruc})"
