from django.db import models
from django.core.validators import MinValueValidator
from booking import entities, stay
from rooms.models import Room


class Customer(models.Model):
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    nationality = models.CharField(max_length=100, blank=True)
    identification_number = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class MealPlan(models.Model):
    """Optional board add-on billed per night (BB, HB, FB, AI)."""
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=10, unique=True)
    description = models.TextField(blank=True)
    per_person_rate = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    per_room_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Meal plan'
        verbose_name_plural = 'Meal plans'

    def __str__(self):
        return f"{self.name} ({self.code})"

    def to_entity(self):
        return entities.MealPlan(
            id=self.pk,
            name=self.name,
            code=self.code,
            per_person_rate=self.per_person_rate,
            per_room_rate=self.per_room_rate,
            is_active=self.is_active,
        )


class Reservation(models.Model):
    """Reservation model representing a room booking."""
    STATUS_CHOICES = [
        (entities.CONFIRMED, 'Confirmed'),
        (entities.CHECKED_IN, 'Checked in'),
        (entities.CHECKED_OUT, 'Checked out'),
        (entities.CANCELED, 'Canceled'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='reservations')
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='reservations')
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    adults = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    children = models.PositiveSmallIntegerField(default=0)
    channel = models.CharField(max_length=50, default='direct')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=entities.CONFIRMED)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    meal_plan = models.ForeignKey(MealPlan, on_delete=models.PROTECT, null=True, blank=True, related_name='reservations')
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Reservation'
        verbose_name_plural = 'Reservations'
        indexes = [
            models.Index(fields=['check_in_date', 'check_out_date'], name='reservation_dates_idx'),
            models.Index(fields=['status'], name='reservation_status_idx'),
        ]

    def __str__(self):
        return f"{self.customer.name} - Room {self.room.room_number} ({self.check_in_date} to {self.check_out_date})"

    def clean(self):
        """Validate that check-out date is after check-in date."""
        from django.core.exceptions import ValidationError
        if self.check_in_date and self.check_out_date and self.check_out_date <= self.check_in_date:
            raise ValidationError('Check-out date must be after check-in date.')

    @property
    def nights(self):
        return stay.nights(self.check_in_date, self.check_out_date)

    @property
    def is_active(self):
        return self.status in entities.ACTIVE_STATUSES

    def to_entity(self):
        return entities.Reservation(
            id=self.pk,
            customer_id=self.customer_id,
            room_id=self.room_id,
            check_in=self.check_in_date,
            check_out=self.check_out_date,
            adults=self.adults,
            children=self.children,
            channel_id=self.channel,
            status=self.status,
            total_amount=self.total_amount,
            created_at=self.created_at,
            notes=self.notes,
            meal_plan_id=self.meal_plan_id,
        )


class ReservationCharge(models.Model):
    """One priced line of a reservation's bill; the lines always add up to total_amount."""
    KIND_CHOICES = [
        (entities.ROOM_CHARGE, 'Room'),
        (entities.MEAL_CHARGE, 'Meal plan'),
    ]

    reservation = models.ForeignKey(Reservation, on_delete=models.CASCADE, related_name='charges')
    kind = models.CharField(max_length=10, choices=KIND_CHOICES)
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.description}: {self.amount}"
