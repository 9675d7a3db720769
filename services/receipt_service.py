# services/receipt_service.py
"""
Receipt Materializer - renders a successful payment as a PDF receipt.

The receipt is a one-way snapshot: same payment in, same bytes out.
No wall-clock values are used (the issue date is the payment date) and
reportlab runs in invariant mode so document ids and timestamps are fixed.

Screen palettes may use colour functions (oklch, lab, ...) that static
document renderers do not understand; every colour goes through
sanitize_color before it reaches reportlab.
"""
import io
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models import Payment, PaymentMethod, PaymentStatus
from services.errors import ValidationError

MONTH_NAMES = (
     "January", "February", "March", "April", "May", "June",
     "July", "August", "September", "October", "November", "December",
)

CURRENCY = "Ksh"

NON_PORTABLE_COLOR = re.compile(r"^\s*(oklch|oklab|lab|lch|color|hwb)\(", re.IGNORECASE)

FALLBACK_TEXT = "#000000"
FALLBACK_BACKGROUND = "#ffffff"
FALLBACK_GRAY_BACKGROUND = "#f3f4f6"
FALLBACK_BORDER = "#cccccc"

# Mirrors the on-screen receipt theme, which is defined in oklch
DEFAULT_PALETTE = {
     "title_text": "oklch(0.278 0.033 256.848)",
     "muted_text": "oklch(0.446 0.03 256.802)",
     "body_text": "oklch(0.373 0.034 259.733)",
     "page_background": "#ffffff",
     "summary_gray_background": "oklch(0.967 0.003 264.542)",
     "divider_border": "oklch(0.872 0.01 258.338)",
}


@dataclass(frozen=True)
class ReceiptData:
     """Structured receipt content handed to the document renderer."""
     payment_id: int
     tenant_name: str
     house_no: str
     month: str
     method: str
     amount: Decimal
     status: str
     issue_date: date
     phone_number: Optional[str] = None
     transaction_id: Optional[str] = None

     @property
     def month_label(self) -> str:
          return format_month(self.month)

     @property
     def amount_label(self) -> str:
          return format_amount(self.amount)


def format_month(month: str) -> str:
     """Long month label, e.g. 2025-11 -> November 2025. Unparseable input gives N/A."""
     try:
          year, mon = (int(part) for part in month.split("-"))
          return f"{MONTH_NAMES[mon - 1]} {year}"
     except (AttributeError, ValueError, IndexError):
          return "N/A"


def format_amount(amount: Decimal) -> str:
     """Decimal("15000.00") -> "Ksh 15,000"; cents kept only when present."""
     amount = Decimal(amount)
     if amount == amount.to_integral_value():
          return f"{CURRENCY} {amount:,.0f}"
     return f"{CURRENCY} {amount:,.2f}"


def sanitize_color(value: Optional[str], role: str, hint: str = "") -> str:
     """
     Return a colour every static renderer accepts.

     Non-portable values fall back by role: text -> black, background ->
     light gray when the hint names a gray surface (white otherwise),
     border -> #cccccc.
     """
     if value and not NON_PORTABLE_COLOR.match(value):
          try:
               colors.toColor(value)
               return value.strip()
          except ValueError:
               pass
     if role == "text":
          return FALLBACK_TEXT
     if role == "background":
          return FALLBACK_GRAY_BACKGROUND if "gray" in hint.lower() else FALLBACK_BACKGROUND
     return FALLBACK_BORDER


def sanitize_palette(palette: dict) -> dict:
     """Sanitize a palette whose keys end in _text, _background or _border."""
     sanitized = {}
     for name, value in palette.items():
          role = name.rsplit("_", 1)[-1]
          sanitized[name] = sanitize_color(value, role, hint=name)
     return sanitized


def build_receipt(payment: Payment) -> ReceiptData:
     """
     Project a successful payment onto receipt content.

     Raises:
          ValidationError: If the payment has not settled successfully
     """
     if payment.status != PaymentStatus.SUCCESSFUL:
          raise ValidationError("Receipt is only available for successful payments.")

     rental = payment.rental
     tenant = rental.tenant if rental else None
     house = rental.house if rental else None
     method = PaymentMethod(payment.method)

     return ReceiptData(
          payment_id=payment.id,
          tenant_name=tenant.name if tenant else "N/A",
          house_no=house.house_no if house else "N/A",
          month=payment.month,
          method=method.value,
          amount=Decimal(payment.amount),
          status=PaymentStatus(payment.status).value,
          issue_date=payment.payment_date.date(),
          phone_number=(payment.phone_number or "N/A") if method == PaymentMethod.MPESA else None,
          transaction_id=payment.transaction_id if method != PaymentMethod.CASH else None,
     )


def receipt_rows(receipt: ReceiptData) -> list[tuple[str, str]]:
     """Label/value pairs of the tenant details block, in display order."""
     rows = [
          ("Tenant Name:", receipt.tenant_name),
          ("House:", receipt.house_no),
          ("Payment Month:", receipt.month_label),
          ("Payment Method:", receipt.method),
     ]
     if receipt.phone_number is not None:
          rows.append(("Phone Number:", receipt.phone_number))
     if receipt.transaction_id:
          rows.append(("Transaction ID:", receipt.transaction_id))
     return rows


def summary_rows(receipt: ReceiptData) -> list[tuple[str, str]]:
     return [
          ("Amount Paid:", receipt.amount_label),
          ("Status:", receipt.status.upper()),
     ]


def receipt_filename(receipt: ReceiptData) -> str:
     tenant = re.sub(r"[^A-Za-z0-9]+", "_", receipt.tenant_name).strip("_") or "Tenant"
     return f"Rent_Receipt_{tenant}_{receipt.month}.pdf"


class PdfReceiptRenderer:
     """Document-export collaborator: ReceiptData -> PDF bytes."""

     def __init__(self, palette: Optional[dict] = None):
          self.palette = sanitize_palette(palette or DEFAULT_PALETTE)

     def _color(self, name: str):
          return colors.toColor(self.palette[name])

     def _styles(self) -> dict:
          base = getSampleStyleSheet()
          return {
               "title": ParagraphStyle(
                    "ReceiptTitle", parent=base["Heading1"], fontSize=18,
                    textColor=self._color("title_text"), alignment=TA_CENTER,
               ),
               "subtitle": ParagraphStyle(
                    "ReceiptSubtitle", parent=base["Normal"], fontSize=10,
                    textColor=self._color("muted_text"), alignment=TA_CENTER,
               ),
               "heading": ParagraphStyle(
                    "ReceiptHeading", parent=base["Heading3"],
                    textColor=self._color("title_text"),
               ),
               "body": ParagraphStyle(
                    "ReceiptBody", parent=base["Normal"], fontSize=11,
                    textColor=self._color("body_text"),
               ),
          }

     def _table(self, rows: list[tuple[str, str]], style: ParagraphStyle, background: Optional[str] = None) -> Table:
          data = [
               [Paragraph(f"<b>{escape(label)}</b>", style), Paragraph(escape(value), style)]
               for label, value in rows
          ]
          table = Table(data, colWidths=[55 * mm, 105 * mm])
          commands = [
               ("VALIGN", (0, 0), (-1, -1), "TOP"),
               ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
          ]
          if background:
               commands += [
                    ("BACKGROUND", (0, 0), (-1, -1), self._color(background)),
                    ("BOX", (0, 0), (-1, -1), 0.5, self._color("divider_border")),
               ]
          table.setStyle(TableStyle(commands))
          return table

     def _paint_background(self, canvas, doc) -> None:
          width, height = doc.pagesize
          canvas.saveState()
          canvas.setFillColor(self._color("page_background"))
          canvas.rect(0, 0, width, height, stroke=0, fill=1)
          canvas.restoreState()

     def render(self, receipt: ReceiptData) -> bytes:
          buffer = io.BytesIO()
          doc = SimpleDocTemplate(
               buffer,
               pagesize=A4,
               topMargin=20 * mm,
               bottomMargin=20 * mm,
               title=f"Rent Receipt {receipt.payment_id}",
               author="Tenant Portal",
               subject=f"Rent payment for {receipt.month_label}",
               creator="Tenant Portal",
               invariant=1,
          )
          styles = self._styles()
          divider = Table([[""]], colWidths=[160 * mm], rowHeights=[1])
          divider.setStyle(TableStyle([
               ("LINEBELOW", (0, 0), (-1, -1), 0.75, self._color("divider_border")),
          ]))

          story = [
               Paragraph("Tenant Rent Receipt", styles["title"]),
               Paragraph("Official Payment Confirmation", styles["subtitle"]),
               Spacer(1, 4 * mm),
               Paragraph(f"Receipt Date: {receipt.issue_date.isoformat()}", styles["subtitle"]),
               Spacer(1, 4 * mm),
               divider,
               Spacer(1, 6 * mm),
               self._table(receipt_rows(receipt), styles["body"]),
               Spacer(1, 8 * mm),
               Paragraph("Payment Summary", styles["heading"]),
               self._table(summary_rows(receipt), styles["body"], background="summary_gray_background"),
               Spacer(1, 10 * mm),
               Paragraph("Thank you for your payment.", styles["subtitle"]),
          ]
          doc.build(story, onFirstPage=self._paint_background, onLaterPages=self._paint_background)
          return buffer.getvalue()


renderer = PdfReceiptRenderer()
