import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from booking.entities import ROOM_CHARGE
from .models import Tax

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


@dataclass
class TaxLine:
    name: str
    base: Decimal
    amount: Decimal


@dataclass
class Invoice:
    number: str
    reservation: object
    lines: list
    tax_lines: list = field(default_factory=list)
    issued_on: date = field(default_factory=date.today)

    @property
    def subtotal(self):
        return sum((line.amount for line in self.lines), ZERO)

    @property
    def tax_total(self):
        return sum((line.amount for line in self.tax_lines), ZERO)

    @property
    def total(self):
        return self.subtotal + self.tax_total


def compute_taxes(lines, taxes):
    """
    One TaxLine per active tax.

    'room' taxes are levied on room charges only; 'invoice' and 'both' on the
    whole subtotal. Percentages are rounded half-up to cents, fixed taxes are
    added as they are.
    """
    room_base = sum((line.amount for line in lines if line.kind == ROOM_CHARGE), ZERO)
    invoice_base = sum((line.amount for line in lines), ZERO)
    tax_lines = []
    for tax in taxes:
        if not tax.is_active:
            continue
        base = room_base if tax.applies_to == Tax.ROOM else invoice_base
        if tax.type == Tax.FIXED:
            amount = Decimal(tax.rate)
        else:
            amount = (base * Decimal(tax.rate) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)
        tax_lines.append(TaxLine(name=str(tax), base=base, amount=amount))
    return tax_lines


def build_invoice(reservation):
    """
    Invoice for a reservation from its recorded charge lines plus active taxes.

    The stored total is never recomputed here; the charge lines are the bill.
    """
    lines = list(reservation.charges.all())
    invoice = Invoice(
        number=f'INV-{reservation.pk:06d}',
        reservation=reservation,
        lines=lines,
        tax_lines=compute_taxes(lines, Tax.objects.filter(is_active=True)),
        issued_on=timezone.localdate(),
    )
    if invoice.subtotal != reservation.total_amount:
        logger.error(
            'Charge lines of reservation %s add up to %s but its total is %s',
            reservation.pk, invoice.subtotal, reservation.total_amount,
        )
    return invoice


def _money(amount):
    return f'{settings.HOTEL_CURRENCY} {amount:,.2f}'


def _letterhead():
    details = [settings.HOTEL_ADDRESS, settings.HOTEL_PHONE, settings.HOTEL_EMAIL]
    lines = [f'<b><font size="18">{settings.HOTEL_NAME}</font></b>']
    lines.extend(f'<font size="11" color="#555555">{line}</font>' for line in details if line)
    return '<br/>'.join(lines)


def generate_invoice_pdf(invoice):
    """Generate the invoice PDF using reportlab."""
    reservation = invoice.reservation
    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{invoice.number}.pdf"'

    doc = SimpleDocTemplate(
        response,
        pagesize=letter,
        leftMargin=0.75*inch,
        rightMargin=0.75*inch,
        topMargin=0.5*inch,
        bottomMargin=0.75*inch,
    )
    elements = []
    styles = getSampleStyleSheet()

    header_style = ParagraphStyle(
        'Letterhead',
        parent=styles['Normal'],
        alignment=1,  # TA_CENTER
        leading=16,
        spaceAfter=2,
    )
    elements.append(Paragraph(_letterhead(), header_style))
    elements.append(Spacer(1, 0.25*inch))

    title_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading1'],
        fontSize=18,
        textColor=colors.HexColor('#C77A1A'),
        spaceAfter=20,
    )
    elements.append(Paragraph(f'Invoice {invoice.number}', title_style))
    elements.append(Paragraph(f'<b>Guest:</b> {reservation.customer.name}', styles['Normal']))
    elements.append(Paragraph(f'<b>Room:</b> {reservation.room.room_number}', styles['Normal']))
    elements.append(Paragraph(
        f'<b>Stay:</b> {reservation.check_in_date:%Y-%m-%d} to {reservation.check_out_date:%Y-%m-%d}',
        styles['Normal'],
    ))
    elements.append(Paragraph(f'<b>Issued:</b> {invoice.issued_on:%Y-%m-%d}', styles['Normal']))
    elements.append(Spacer(1, 0.3*inch))

    line_data = [['Description', 'Qty', 'Unit price', 'Amount']]
    for line in invoice.lines:
        line_data.append([line.description, str(line.quantity), _money(line.unit_price), _money(line.amount)])
    table = Table(line_data, colWidths=[3.4*inch, 0.6*inch, 1.5*inch, 1.5*inch])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#0F0F0F')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (0, -1), 'LEFT'),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    elements.append(table)
    elements.append(Spacer(1, 0.3*inch))

    summary_data = [['Subtotal', _money(invoice.subtotal)]]
    for tax_line in invoice.tax_lines:
        summary_data.append([tax_line.name, _money(tax_line.amount)])
    summary_data.append(['Total', _money(invoice.total)])
    summary = Table(summary_data, colWidths=[3*inch, 2*inch])
    summary.setStyle(TableStyle([
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#C77A1A')),
        ('TEXTCOLOR', (0, -1), (-1, -1), colors.whitesmoke),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    elements.append(summary)

    doc.build(elements)
    return response


def generate_invoice_excel(invoice):
    """Generate the invoice workbook using openpyxl."""
    reservation = invoice.reservation
    wb = Workbook()
    ws = wb.active
    ws.title = 'Invoice'

    header_fill = PatternFill(start_color='C77A1A', end_color='C77A1A', fill_type='solid')
    header_font = Font(bold=True, color='FFFFFF', size=12)

    ws['A1'] = f'Invoice {invoice.number}'
    ws['A1'].font = Font(bold=True, size=14, color='C77A1A')

    details = [
        ('Guest', reservation.customer.name),
        ('Room', reservation.room.room_number),
        ('Check-in', reservation.check_in_date.strftime('%Y-%m-%d')),
        ('Check-out', reservation.check_out_date.strftime('%Y-%m-%d')),
        ('Issued', invoice.issued_on.strftime('%Y-%m-%d')),
    ]
    row = 3
    for label, value in details:
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=row, column=2, value=value)
        row += 1

    row += 1
    for col, header in enumerate(['Description', 'Qty', 'Unit price', 'Amount'], 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center')
    row += 1
    for line in invoice.lines:
        ws.cell(row=row, column=1, value=line.description)
        ws.cell(row=row, column=2, value=line.quantity)
        ws.cell(row=row, column=3, value=float(line.unit_price)).number_format = '#,##0.00'
        ws.cell(row=row, column=4, value=float(line.amount)).number_format = '#,##0.00'
        row += 1

    row += 1
    totals = [('Subtotal', invoice.subtotal)]
    totals.extend((tax_line.name, tax_line.amount) for tax_line in invoice.tax_lines)
    totals.append(('Total', invoice.total))
    for label, amount in totals:
        ws.cell(row=row, column=3, value=label).font = Font(bold=True)
        ws.cell(row=row, column=4, value=float(amount)).number_format = '#,##0.00'
        row += 1

    # Auto-adjust column widths
    for index, column in enumerate(ws.columns, 1):
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[get_column_letter(index)].width = min(max_length + 2, 50)

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{invoice.number}.xlsx"'
    wb.save(response)
    return response
