import logging

from django.shortcuts import render, redirect, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib import messages
from django.core.paginator import Paginator
from django.views.decorators.http import require_http_methods
from django.utils import timezone
from datetime import datetime, timedelta

from booking import entities
from booking.exceptions import BookingError, RoomConflict
from rooms.models import Room
from .forms import AvailabilitySearchForm, CheckInForm, ExtendStayForm, ReservationForm
from .models import Reservation
from .services import (
    cancel_reservation as cancel_booking,
    check_in_reservation,
    check_out_reservation,
    create_reservation,
    extend_reservation,
    find_or_create_customer,
    get_available_rooms,
    get_room_status_for_date,
)

logger = logging.getLogger(__name__)


def _conflict(request, reservation, error):
    # Someone else claimed the room since the page was rendered: start over from fresh state.
    logger.error('Room conflict on reservation %s: %s', reservation.pk, error)
    messages.error(request, f'{error} The room list has changed, please try again.')
    return redirect('reservations:reservation_detail', pk=reservation.pk)


@login_required
def dashboard(request):
    """Dashboard view showing today's arrivals, departures and occupancy."""
    today = timezone.localdate()
    rooms = Room.objects.filter(is_active=True).select_related('room_type').order_by('room_number')
    total_rooms = rooms.count()
    available_count = len(get_available_rooms(today, today + timedelta(days=1)))
    arrivals = Reservation.objects.filter(check_in_date=today, status=entities.CONFIRMED).select_related('room', 'customer').order_by('room__room_number')
    departures = Reservation.objects.filter(check_out_date=today, status=entities.CHECKED_IN).select_related('room', 'customer').order_by('room__room_number')
    in_house = Reservation.objects.filter(status=entities.CHECKED_IN).values('room').distinct().count()
    occupancy_rate = (in_house / total_rooms * 100) if total_rooms > 0 else 0
    room_board = [{'room': room, 'booking': get_room_status_for_date(room, today)} for room in rooms]
    context = {
        'today': today,
        'total_rooms': total_rooms,
        'available_count': available_count,
        'in_house': in_house,
        'arrivals': arrivals,
        'departures': departures,
        'occupancy_rate': round(occupancy_rate, 1),
        'room_board': room_board,
    }
    return render(request, 'reservations/dashboard.html', context)


@login_required
def room_availability(request):
    """Search free rooms for a date range and party size."""
    available_rooms = None
    form = AvailabilitySearchForm(request.GET or None)
    if form.is_valid():
        cd = form.cleaned_data
        available_rooms = get_available_rooms(
            cd['check_in_date'],
            cd['check_out_date'],
            occupants=cd['adults'] + cd['children'],
            room_type=cd.get('room_type'),
            view_type=cd.get('view_type'),
        )
    return render(request, 'reservations/room_availability.html', {
        'form': form,
        'available_rooms': available_rooms,
    })


@login_required
@require_http_methods(["GET", "POST"])
def new_reservation(request):
    """New reservation view - handles both GET and POST requests."""
    if request.method == 'POST':
        form = ReservationForm(request.POST)
        if form.is_valid():
            cd = form.cleaned_data
            customer = find_or_create_customer(cd['guest_name'], cd.get('guest_email'), cd.get('guest_phone'))
            try:
                reservation = create_reservation(
                    customer=customer,
                    room=cd['room'],
                    check_in_date=cd['check_in_date'],
                    check_out_date=cd['check_out_date'],
                    adults=cd['adults'],
                    children=cd['children'],
                    channel=cd.get('channel') or 'direct',
                    meal_plan=cd.get('meal_plan'),
                    notes=cd.get('notes') or '',
                    check_in_now=cd.get('check_in_now', False),
                )
            except BookingError as e:
                logger.warning('Booking rejected for %s: %s', customer, e)
                messages.error(request, str(e))
            else:
                messages.success(request, f'Reservation {reservation.get_status_display().lower()} for {customer.name} in Room {reservation.room.room_number}.')
                return redirect('reservations:reservation_detail', pk=reservation.pk)
    else:
        form = ReservationForm(initial={
            'check_in_date': request.GET.get('check_in_date', ''),
            'check_out_date': request.GET.get('check_out_date', ''),
        })
    return render(request, 'reservations/new_reservation.html', {'form': form})


@login_required
def reservation_list(request):
    """List all reservations with search functionality."""
    reservations = Reservation.objects.select_related('room', 'customer').order_by('-created_at')
    search_name = request.GET.get('name', '')
    status = request.GET.get('status', '')
    start_date = request.GET.get('start_date', '')
    end_date = request.GET.get('end_date', '')
    if search_name:
        reservations = reservations.filter(customer__name__icontains=search_name)
    if status:
        reservations = reservations.filter(status=status)
    if start_date:
        try:
            start_date_obj = datetime.strptime(start_date, '%Y-%m-%d').date()
            reservations = reservations.filter(check_in_date__gte=start_date_obj)
        except ValueError:
            messages.error(request, f'Invalid start date: {start_date}')
    if end_date:
        try:
            end_date_obj = datetime.strptime(end_date, '%Y-%m-%d').date()
            reservations = reservations.filter(check_out_date__lte=end_date_obj)
        except ValueError:
            messages.error(request, f'Invalid end date: {end_date}')
    paginator = Paginator(reservations, 20)
    page_obj = paginator.get_page(request.GET.get('page'))
    context = {
        'page_obj': page_obj,
        'search_name': search_name,
        'status': status,
        'status_choices': Reservation.STATUS_CHOICES,
        'start_date': start_date,
        'end_date': end_date,
    }
    return render(request, 'reservations/reservation_list.html', context)


@login_required
def reservation_detail(request, pk):
    reservation = get_object_or_404(Reservation.objects.select_related('room__room_type', 'customer', 'meal_plan'), pk=pk)
    return render(request, 'reservations/reservation_detail.html', {
        'reservation': reservation,
        'charges': reservation.charges.all(),
    })


@login_required
@require_http_methods(["GET", "POST"])
def check_in(request, pk):
    """Check-in: confirm details, optionally change room, then occupy it."""
    reservation = get_object_or_404(Reservation, pk=pk)
    rooms = get_available_rooms(
        reservation.check_in_date,
        reservation.check_out_date,
        occupants=reservation.adults + reservation.children,
        exclude_reservation=reservation,
    )
    if request.method == 'POST':
        form = CheckInForm(request.POST, rooms=rooms)
        if form.is_valid():
            cd = form.cleaned_data
            try:
                reservation, notices = check_in_reservation(
                    reservation,
                    room=cd.get('room'),
                    adults=cd['adults'],
                    children=cd['children'],
                    notes=cd.get('notes'),
                )
            except RoomConflict as e:
                return _conflict(request, reservation, e)
            except BookingError as e:
                logger.warning('Check-in rejected for reservation %s: %s', pk, e)
                messages.error(request, str(e))
            else:
                for notice in notices:
                    messages.warning(request, notice)
                messages.success(request, f'{reservation.customer.name} checked in to Room {reservation.room.room_number}.')
                return redirect('reservations:reservation_detail', pk=reservation.pk)
    else:
        form = CheckInForm(rooms=rooms, initial={
            'adults': reservation.adults,
            'children': reservation.children,
            'notes': reservation.notes,
        })
    return render(request, 'reservations/check_in.html', {'form': form, 'reservation': reservation})


@login_required
@require_http_methods(["GET", "POST"])
def check_out(request, pk):
    reservation = get_object_or_404(Reservation, pk=pk)
    if request.method == 'POST':
        try:
            reservation = check_out_reservation(reservation)
        except BookingError as e:
            logger.warning('Check-out rejected for reservation %s: %s', pk, e)
            messages.error(request, str(e))
            return redirect('reservations:reservation_detail', pk=pk)
        messages.success(request, f'{reservation.customer.name} checked out. Room {reservation.room.room_number} is waiting for housekeeping.')
        return redirect('billing:invoice', pk=reservation.pk)
    return render(request, 'reservations/check_out.html', {'reservation': reservation})


@login_required
@require_http_methods(["GET", "POST"])
def extend_stay(request, pk):
    """Push the check-out date forward, optionally into another room."""
    reservation = get_object_or_404(Reservation, pk=pk)
    next_night = reservation.check_out_date + timedelta(days=1)
    rooms = get_available_rooms(
        reservation.check_in_date,
        next_night,
        occupants=reservation.adults + reservation.children,
        exclude_reservation=reservation,
    )
    if request.method == 'POST':
        form = ExtendStayForm(request.POST, rooms=rooms)
        if form.is_valid():
            cd = form.cleaned_data
            try:
                reservation = extend_reservation(
                    reservation,
                    cd['new_check_out_date'],
                    room=cd.get('room'),
                    adults=cd['adults'],
                    children=cd['children'],
                    notes=cd.get('notes'),
                )
            except RoomConflict as e:
                return _conflict(request, reservation, e)
            except BookingError as e:
                logger.warning('Extension rejected for reservation %s: %s', pk, e)
                messages.error(request, str(e))
            else:
                messages.success(request, f'Stay extended to {reservation.check_out_date:%b %d, %Y}.')
                return redirect('reservations:reservation_detail', pk=reservation.pk)
    else:
        form = ExtendStayForm(rooms=rooms, initial={
            'new_check_out_date': next_night,
            'adults': reservation.adults,
            'children': reservation.children,
            'notes': reservation.notes,
        })
    return render(request, 'reservations/extend_stay.html', {'form': form, 'reservation': reservation})


@login_required
@require_http_methods(["GET", "POST"])
def cancel_reservation(request, pk):
    """Cancel a reservation."""
    reservation = get_object_or_404(Reservation, pk=pk)
    if request.method == 'POST':
        try:
            reservation = cancel_booking(reservation)
        except BookingError as e:
            logger.warning('Cancellation rejected for reservation %s: %s', pk, e)
            messages.error(request, str(e))
            return redirect('reservations:reservation_detail', pk=pk)
        messages.success(request, f'Reservation for {reservation.customer.name} has been canceled.')
        return redirect('reservations:reservation_list')
    return render(request, 'reservations/cancel_reservation.html', {'reservation': reservation})
