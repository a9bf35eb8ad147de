from datetime import date
from html import escape
from typing import Optional

from config import settings
from services import ADD_ON_PRICING, SERVICE_PRICING

TAX_RATE = 0.0


def invoice_number(booking: dict, issued_on: Optional[date] = None) -> str:
    issued_on = issued_on or date.today()
    return f"INV-{issued_on.strftime('%Y%m%d')}-{booking['id'][:6].upper()}"


def invoice_lines(booking: dict) -> list[dict]:
    service = SERVICE_PRICING.get(booking["serviceType"])
    lines = [{
        "description": booking["serviceType"],
        "duration": booking["duration"],
        "amount": service["basePrice"] if service else 0,
    }]
    for add_on in booking["addOns"]:
        lines.append({
            "description": f"{add_on} (Add-on)",
            "duration": None,
            "amount": ADD_ON_PRICING.get(add_on, 0),
        })
    return lines


def invoice_totals(booking: dict) -> dict:
    subtotal = sum(line["amount"] for line in invoice_lines(booking))
    tax = round(subtotal * TAX_RATE, 2)
    return {"subtotal": subtotal, "tax": tax, "total": booking["price"] + tax}


def _money(amount) -> str:
    return f"${amount:.2f}"


def render_invoice(booking: dict, issued_on: Optional[date] = None) -> str:
    issued_on = issued_on or date.today()
    car = booking["carDetails"]
    totals = invoice_totals(booking)
    rows = "".join(
        f"<tr><td>{escape(line['description'])}</td>"
        f"<td>{str(line['duration']) + ' min' if line['duration'] else '-'}</td>"
        f"<td style=\"text-align:right\">{_money(line['amount'])}</td></tr>"
        for line in invoice_lines(booking)
    )
    business = escape(settings.BUSINESS_NAME)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Invoice {invoice_number(booking, issued_on)}</title>
    <style>
        body {{ font-family: Arial, sans-serif; max-width: 794px; margin: 0 auto; padding: 32px; color: #111827; }}
        h1 {{ color: #2563eb; }}
        table {{ width: 100%; border-collapse: collapse; }}
        td, th {{ padding: 8px; border-bottom: 1px solid #e5e7eb; text-align: left; }}
        @media print {{ body {{ padding: 0; }} }}
    </style>
</head>
<body>
    <h1>{business}</h1>
    <p>Professional Car Washing Services</p>
    <h2>INVOICE</h2>
    <p>Invoice #: {invoice_number(booking, issued_on)}<br>
    Date: {issued_on.strftime('%B %d, %Y')}<br>
    Status: {escape(booking['status'])}</p>
    <h3>Bill To</h3>
    <p>{escape(booking['customerName'])}<br>
    {car['year']} {escape(car['make'])} {escape(car['model'])} ({escape(car['type'])})</p>
    <h3>Service Details</h3>
    <p>Date: {booking['date']}<br>Time: {booking['timeSlot']}</p>
    <table>
        <thead><tr><th>Description</th><th>Duration</th><th style="text-align:right">Amount</th></tr></thead>
        <tbody>{rows}</tbody>
    </table>
    <p style="text-align:right">
        Subtotal: {_money(totals['subtotal'])}<br>
        Tax ({TAX_RATE:.0%}): {_money(totals['tax'])}<br>
        <b>Total: {_money(totals['total'])}</b>
    </p>
    <hr>
    <p style="text-align:center">Thank you for choosing {business}!</p>
</body>
</html>
"""
