import io
import logging
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..core.config import settings

logger = logging.getLogger(__name__)

_BOX_STYLE = TableStyle([
    ("BOX", (0, 0), (-1, -1), 0.25, colors.black),
    ("INNERGRID", (0, 0), (-1, -1), 0.25, colors.grey),
    ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
])


def _amount(n) -> str:
    return f"{settings.CURRENCY_SYMBOL} {float(n or 0):.2f}"


def _qty(n) -> str:
    n = float(n or 0)
    return str(int(n)) if n.is_integer() else f"{n:g}"


def generate_bill_pdf(dispense) -> bytes:
    """
    Render a dispense as an A4 pharmacy bill and return the PDF bytes.
    """
    styles = getSampleStyleSheet()
    story = []
    buf = io.BytesIO()

    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=20 * mm,
        title=f"Bill {dispense.bill_number or dispense.id}",
    )

    # ---------------- Header ----------------
    story.append(Paragraph(f"<b>{escape(settings.CLINIC_NAME)}</b>", styles["Title"]))
    if settings.CLINIC_ADDRESS:
        story.append(Paragraph(escape(settings.CLINIC_ADDRESS), styles["Normal"]))
    story.append(Spacer(1, 8))

    # ---------------- Bill Info ----------------
    created = dispense.created_at or datetime.now()
    info = [
        ["Bill No", dispense.bill_number or "Not issued"],
        ["Date", created.strftime("%d-%b-%Y %H:%M")],
        ["Payment Status", (dispense.payment_status or "pending").title()],
    ]
    if dispense.daily_token is not None and dispense.appointment_day is not None:
        info.append(["Token", f"#{dispense.daily_token} ({dispense.appointment_day:%d-%b-%Y})"])
    t = Table(info, colWidths=[100, 300])
    t.setStyle(_BOX_STYLE)
    story.append(t)
    story.append(Spacer(1, 10))

    # ---------------- Patient Info ----------------
    patient = dispense.patient
    if patient:
        pinfo = [
            ["Patient Name", patient.full_name or "-"],
            ["Phone", patient.phone or "-"],
        ]
        if patient.patient_uid:
            pinfo.append(["Patient UID", patient.patient_uid])
        pt = Table(pinfo, colWidths=[100, 300])
        pt.setStyle(_BOX_STYLE)
        story.append(pt)
        story.append(Spacer(1, 10))

    # ---------------- Items ----------------
    data = [["#", "Item", "Notes", "Qty", "Rate", "Amount"]]
    for i, it in enumerate(dispense.items, 1):
        label = " ".join(p for p in (it.get("name"), it.get("strength"), it.get("form")) if p)
        qty = float(it.get("quantity") or 0)
        rate = float(it.get("unit_price") or 0)
        data.append([
            i,
            Paragraph(escape(label or "-"), styles["Normal"]),
            Paragraph(escape(it.get("notes") or ""), styles["Normal"]),
            _qty(qty),
            f"{rate:.2f}",
            f"{qty * rate:.2f}",
        ])

    items_table = Table(data, repeatRows=1, colWidths=[20, 150, 140, 40, 60, 60])
    items_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightblue),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (3, 0), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    story.append(items_table)
    story.append(Spacer(1, 10))

    # ---------------- Totals ----------------
    totals = [
        ["Subtotal", _amount(dispense.subtotal)],
        ["Tax", _amount(dispense.tax)],
        ["Total", _amount(dispense.total)],
        ["Paid", _amount(dispense.paid_amount)],
        ["Balance Due", _amount(dispense.balance_due)],
    ]
    totals_table = Table(totals, colWidths=[120, 100])
    totals_table.setStyle(TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ]))
    story.append(totals_table)
    story.append(Spacer(1, 15))

    story.append(Paragraph("Thank you for visiting!", styles["Normal"]))
    story.append(Spacer(1, 10))
    story.append(Paragraph("Authorized Signatory ___________________", styles["Normal"]))

    doc.build(story)
    logger.info("Bill PDF rendered for dispense %s", dispense.id)
    return buf.getvalue()
