from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, render

from reservations.models import Reservation
from .services import build_invoice, generate_invoice_excel, generate_invoice_pdf


@login_required
def invoice(request, pk):
    """Invoice for a reservation; ?export=pdf or ?export=excel downloads it."""
    reservation = get_object_or_404(Reservation.objects.select_related('room', 'customer'), pk=pk)
    invoice = build_invoice(reservation)

    export_format = request.GET.get('export')
    if export_format == 'pdf':
        return generate_invoice_pdf(invoice)
    elif export_format == 'excel':
        return generate_invoice_excel(invoice)

    return render(request, 'billing/invoice.html', {'invoice': invoice, 'reservation': reservation})
