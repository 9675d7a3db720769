"""Test receipt_service -- receipt content, colour sanitizing and PDF export."""
from datetime import datetime
from decimal import Decimal

import pytest

from models import Payment, PaymentMethod, PaymentStatus
from services.errors import ValidationError
from services.receipt_service import (
    PdfReceiptRenderer,
    build_receipt,
    format_amount,
    format_month,
    receipt_filename,
    receipt_rows,
    sanitize_color,
    sanitize_palette,
    summary_rows,
)


@pytest.fixture
def paid_cash(db, rental):
    payment = Payment(
        rental_id=rental.id,
        amount=Decimal("15000.00"),
        method=PaymentMethod.CASH,
        month="2025-11",
        status=PaymentStatus.SUCCESSFUL,
        payment_date=datetime(2025, 11, 3, 9, 15),
    )
    db.add(payment)
    db.commit()
    return payment


@pytest.fixture
def paid_mpesa(db, rental):
    payment = Payment(
        rental_id=rental.id,
        amount=Decimal("15000.00"),
        method=PaymentMethod.MPESA,
        phone_number="0712345678",
        transaction_id="TXN-1762161300000",
        month="2025-10",
        status=PaymentStatus.SUCCESSFUL,
        payment_date=datetime(2025, 10, 4, 8, 0),
    )
    db.add(payment)
    db.commit()
    return payment


class TestFormatting:

    def test_format_month(self):
        assert format_month("2025-11") == "November 2025"
        assert format_month("2025-1x") == "N/A"

    def test_format_amount(self):
        assert format_amount(Decimal("15000.00")) == "Ksh 15,000"
        assert format_amount(Decimal("15000.50")) == "Ksh 15,000.50"


class TestSanitizeColor:

    @pytest.mark.parametrize("value,role,hint,expected", [
        ("oklch(0.278 0.033 256.848)", "text", "", "#000000"),
        ("lab(50% 40 59.5)", "background", "", "#ffffff"),
        ("oklch(0.967 0.003 264.542)", "background", "summary_gray_background", "#f3f4f6"),
        ("color(display-p3 1 0 0)", "border", "", "#cccccc"),
        ("#1f2937", "text", "", "#1f2937"),
    ])
    def test_fallbacks(self, value, role, hint, expected):
        assert sanitize_color(value, role, hint) == expected

    def test_palette_has_no_screen_only_colors(self):
        palette = sanitize_palette({"title_text": "oklch(0.2 0.1 250)", "divider_border": "lch(80 10 250)"})
        assert palette == {"title_text": "#000000", "divider_border": "#cccccc"}


class TestBuildReceipt:

    def test_cash_rows(self, paid_cash):
        receipt = build_receipt(paid_cash)
        assert receipt_rows(receipt) == [
            ("Tenant Name:", "Jane Wanjiku"),
            ("House:", "A12"),
            ("Payment Month:", "November 2025"),
            ("Payment Method:", "cash"),
        ]
        assert summary_rows(receipt) == [("Amount Paid:", "Ksh 15,000"), ("Status:", "SUCCESSFUL")]

    def test_mpesa_rows_include_phone_and_transaction(self, paid_mpesa):
        rows = dict(receipt_rows(build_receipt(paid_mpesa)))
        assert rows["Phone Number:"] == "0712345678"
        assert rows["Transaction ID:"] == "TXN-1762161300000"

    def test_pending_payment_has_no_receipt(self, paid_cash):
        paid_cash.status = PaymentStatus.PENDING
        with pytest.raises(ValidationError):
            build_receipt(paid_cash)

    def test_filename(self, paid_cash):
        assert receipt_filename(build_receipt(paid_cash)) == "Rent_Receipt_Jane_Wanjiku_2025-11.pdf"


class TestPdfReceiptRenderer:

    def test_render_is_deterministic(self, paid_cash):
        receipt = build_receipt(paid_cash)
        first = PdfReceiptRenderer().render(receipt)
        second = PdfReceiptRenderer().render(receipt)
        assert first.startswith(b"%PDF")
        assert first == second
