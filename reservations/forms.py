from django import forms
from django.utils import timezone

from booking import entities
from rooms.models import Room, RoomType, ViewType
from .models import MealPlan
from .services import check_room_availability


class AvailabilitySearchForm(forms.Form):
    """Dates and occupancy used to look for free rooms."""
    check_in_date = forms.DateField(widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))
    check_out_date = forms.DateField(widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))
    adults = forms.IntegerField(min_value=1, initial=1, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    children = forms.IntegerField(min_value=0, initial=0, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    room_type = forms.ModelChoiceField(queryset=RoomType.objects.all(), required=False,
                                       empty_label='Any room type',
                                       widget=forms.Select(attrs={'class': 'form-control'}))
    view_type = forms.ModelChoiceField(queryset=ViewType.objects.all(), required=False,
                                       empty_label='Any view',
                                       widget=forms.Select(attrs={'class': 'form-control'}))

    def clean(self):
        cleaned_data = super().clean()
        check_in = cleaned_data.get('check_in_date')
        check_out = cleaned_data.get('check_out_date')
        if check_in and check_out and check_out <= check_in:
            raise forms.ValidationError('Check-out date must be after check-in date.')
        return cleaned_data


class ReservationForm(AvailabilitySearchForm):
    """Form for booking a room."""
    guest_name = forms.CharField(max_length=200, widget=forms.TextInput(attrs={'class': 'form-control'}))
    guest_email = forms.EmailField(required=False, widget=forms.EmailInput(attrs={'class': 'form-control'}))
    guest_phone = forms.CharField(max_length=50, required=False, widget=forms.TextInput(attrs={'class': 'form-control'}))
    room = forms.ModelChoiceField(queryset=Room.objects.none(), empty_label='-- Select a room --',
                                  widget=forms.Select(attrs={'class': 'form-control'}))
    meal_plan = forms.ModelChoiceField(queryset=MealPlan.objects.filter(is_active=True), required=False,
                                       empty_label='No meal plan',
                                       widget=forms.Select(attrs={'class': 'form-control'}))
    channel = forms.CharField(max_length=50, initial='direct', widget=forms.TextInput(attrs={'class': 'form-control'}))
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3}))
    check_in_now = forms.BooleanField(required=False, label='Check the guest in now')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['room'].queryset = Room.objects.filter(
            is_active=True, status=entities.AVAILABLE,
        ).select_related('room_type')

    def clean(self):
        cleaned_data = super().clean()
        check_in = cleaned_data.get('check_in_date')
        check_out = cleaned_data.get('check_out_date')
        room = cleaned_data.get('room')

        if check_in and check_out and check_out > check_in and room:
            occupants = (cleaned_data.get('adults') or 0) + (cleaned_data.get('children') or 0)
            if room.room_type.capacity < occupants:
                raise forms.ValidationError(
                    f'Room {room.room_number} holds at most {room.room_type.capacity} guests.'
                )
            if not check_room_availability(room, check_in, check_out):
                raise forms.ValidationError(f'Room {room.room_number} is not available for the selected dates.')

        if cleaned_data.get('check_in_now') and check_in and check_in != timezone.localdate():
            self.add_error('check_in_now', 'Only stays starting today can be checked in straight away.')

        return cleaned_data


class CheckInForm(forms.Form):
    """Room and occupancy re-confirmation at the desk."""
    room = forms.ModelChoiceField(queryset=Room.objects.none(), required=False,
                                  empty_label='Keep the booked room',
                                  widget=forms.Select(attrs={'class': 'form-control'}))
    adults = forms.IntegerField(min_value=1, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    children = forms.IntegerField(min_value=0, widget=forms.NumberInput(attrs={'class': 'form-control'}))
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3}))

    def __init__(self, *args, rooms=None, **kwargs):
        super().__init__(*args, **kwargs)
        if rooms is not None:
            self.fields['room'].queryset = Room.objects.filter(pk__in=[room.pk for room in rooms])


class ExtendStayForm(CheckInForm):
    new_check_out_date = forms.DateField(widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}))

    field_order = ['new_check_out_date', 'room', 'adults', 'children', 'notes']

