from django.contrib import admin

from .models import Customer, MealPlan, Reservation, ReservationCharge


class ReservationChargeInline(admin.TabularInline):
    model = ReservationCharge
    extra = 0
    readonly_fields = ('kind', 'description', 'quantity', 'unit_price', 'amount', 'created_at')
    can_delete = False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ('id', 'customer', 'room', 'check_in_date', 'check_out_date', 'status', 'total_amount')
    list_filter = ('status', 'channel')
    search_fields = ('customer__name', 'customer__email', 'room__room_number')
    # Totals only move through lifecycle transitions.
    readonly_fields = ('status', 'total_amount', 'created_at', 'updated_at')
    inlines = [ReservationChargeInline]


@admin.register(MealPlan)
class MealPlanAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'per_person_rate', 'per_room_rate', 'is_active')


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone', 'nationality')
    search_fields = ('name', 'email')
