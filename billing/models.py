from django.core.validators import MinValueValidator
from django.db import models


class Tax(models.Model):
    """A tax added on top of a reservation's charges when it is invoiced."""
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'
    TYPE_CHOICES = [
        (PERCENTAGE, 'Percentage'),
        (FIXED, 'Fixed amount'),
    ]

    ROOM = 'room'
    INVOICE = 'invoice'
    BOTH = 'both'
    APPLIES_TO_CHOICES = [
        (ROOM, 'Room charges'),
        (INVOICE, 'Whole invoice'),
        (BOTH, 'Room charges and extras'),
    ]

    name = models.CharField(max_length=100)
    rate = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=PERCENTAGE)
    applies_to = models.CharField(max_length=20, choices=APPLIES_TO_CHOICES, default=INVOICE)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Taxes'

    def __str__(self):
        if self.type == self.PERCENTAGE:
            return f"{self.name} ({self.rate}%)"
        return f"{self.name} ({self.rate})"
