from django.contrib import admin

from .models import Tax


@admin.register(Tax)
class TaxAdmin(admin.ModelAdmin):
    list_display = ('name', 'rate', 'type', 'applies_to', 'is_active')
    list_filter = ('is_active', 'type')
