from django.contrib import admin

from .models import Amenity, Room, RoomType, ViewType


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('room_number', 'room_type', 'status', 'floor', 'is_active')
    list_filter = ('status', 'room_type', 'is_active')
    search_fields = ('room_number',)


@admin.register(RoomType)
class RoomTypeAdmin(admin.ModelAdmin):
    list_display = ('name', 'capacity', 'base_price', 'view_type')


admin.site.register(ViewType)
admin.site.register(Amenity)
