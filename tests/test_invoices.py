from datetime import date

from invoices import invoice_lines, invoice_number, invoice_totals, render_invoice

BOOKING = {
    "id": "65a1f0c2b4e5d6f7a8b9c0d1",
    "customerName": "Michael Brown",
    "carDetails": {"make": "BMW", "model": "X5", "year": 2021, "type": "luxury"},
    "serviceType": "Full Detailing",
    "date": "2030-05-02",
    "timeSlot": "14:00-15:00",
    "duration": 120,
    "price": 88,
    "status": "Completed",
    "rating": 5,
    "addOns": ["Polishing", "Wax Protection", "Air Freshener"],
}


def test_invoice_number():
    assert invoice_number(BOOKING, date(2030, 5, 2)) == "INV-20300502-65A1F0"


def test_invoice_lines():
    lines = invoice_lines(BOOKING)
    assert lines[0] == {"description": "Full Detailing", "duration": 120, "amount": 50}
    assert [line["amount"] for line in lines[1:]] == [15, 20, 3]
    assert lines[1]["description"] == "Polishing (Add-on)"


def test_invoice_totals_match_booking_price():
    assert invoice_totals(BOOKING) == {"subtotal": 88, "tax": 0, "total": 88}


def test_render_invoice():
    html = render_invoice(BOOKING, date(2030, 5, 2))
    assert "INV-20300502-65A1F0" in html
    assert "May 02, 2030" in html
    assert "2021 BMW X5 (luxury)" in html
    assert "120 min" in html
    assert "Tax (0%): $0.00" in html
    assert "Total: $88.00" in html
