from django.core.validators import MinValueValidator
from django.db import models

from booking import entities


class ViewType(models.Model):
    """What a room looks out on (sea, garden, city)."""
    name = models.CharField(max_length=100, unique=True)
    price_difference = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Amenity(models.Model):
    name = models.CharField(max_length=100, unique=True)
    icon = models.CharField(max_length=50, blank=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Amenities'

    def __str__(self):
        return self.name


class RoomType(models.Model):
    """Pricing and capacity class of rooms (Standard, Deluxe...)."""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    base_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    view_type = models.ForeignKey(ViewType, on_delete=models.SET_NULL, null=True, blank=True, related_name='room_types')

    class Meta:
        ordering = ['name']
        verbose_name = 'Room type'
        verbose_name_plural = 'Room types'

    def __str__(self):
        return f"{self.name} (up to {self.capacity})"

    def to_entity(self):
        return entities.RoomType(
            id=self.pk,
            name=self.name,
            capacity=self.capacity,
            base_price=self.base_price,
            view_type_id=self.view_type_id,
        )


class Room(models.Model):
    """Room model representing a hotel room."""
    STATUS_CHOICES = [
        (entities.AVAILABLE, 'Available'),
        (entities.OCCUPIED, 'Occupied'),
        (entities.MAINTENANCE, 'Maintenance'),
        (entities.CLEANED, 'Cleaned'),
        (entities.TO_CLEAN, 'To clean'),
    ]

    room_number = models.CharField(max_length=10, unique=True)
    room_type = models.ForeignKey(RoomType, on_delete=models.PROTECT, related_name='rooms')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=entities.AVAILABLE)
    amenities = models.ManyToManyField(Amenity, blank=True, related_name='rooms')
    floor = models.IntegerField(null=True, blank=True)
    size = models.PositiveIntegerField(null=True, blank=True, help_text='Square metres')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['room_number']
        verbose_name = 'Room'
        verbose_name_plural = 'Rooms'

    def __str__(self):
        return f"Room {self.room_number} ({self.room_type.name})"

    def to_entity(self):
        return entities.Room(
            id=self.pk,
            room_number=self.room_number,
            room_type_id=self.room_type_id,
            status=self.status,
            amenities=tuple(a.pk for a in self.amenities.all()),
            floor=self.floor,
            size=self.size,
        )
