from io import BytesIO
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from .. import models
from ..core.config import settings


def _payment_line(order: models.Order) -> str:
    if order.payment_method == "card":
        brand = (order.card_brand or "card").upper()
        return f"Paid with {brand} ending in {order.card_last4 or '----'}"
    bank = order.bank_name or "bank"
    if not order.account_last4 and order.branch_code:
        return f"Paid by bank transfer ({bank}, branch {order.branch_code})"
    return f"Paid by bank transfer ({bank}) from account ending in {order.account_last4 or '----'}"


def generate_pdf(order: models.Order) -> bytes:
    """Render the booking receipt for an order.

    Brand header, order summary grid, one row per booked service, then the
    subtotal, tips, platform fee and total. Only masked payment details are
    ever printed.
    """
    currency = order.currency or settings.DEFAULT_CURRENCY
    fee_pct = f"{(settings.PLATFORM_FEE_RATE * 100).normalize():f}"

    def _money(v):
        return f"{currency} {float(v or 0):,.2f}"

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=16 * mm,
        bottomMargin=16 * mm,
        title=f"Receipt {order.order_number}",
        author="Berry Events",
    )
    brand = colors.HexColor("#7C3AED")
    success = colors.HexColor("#16a34a")
    muted = colors.HexColor("#6b7280")
    border = colors.HexColor("#e5e7eb")

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="TitleBrand", parent=styles["Heading1"], fontName="Helvetica-Bold", fontSize=18, textColor=brand, spaceAfter=6))
    styles.add(ParagraphStyle(name="Muted", parent=styles["Normal"], fontName="Helvetica", fontSize=9, textColor=muted))
    styles.add(ParagraphStyle(name="Strong", parent=styles["Normal"], fontName="Helvetica-Bold", fontSize=10))
    styles.add(ParagraphStyle(name="NormalSmall", parent=styles["Normal"], fontName="Helvetica", fontSize=10))

    story = []

    status_text = (order.payment_status or "paid").upper()
    header_tbl = Table(
        [[
            Paragraph("<b>Berry Events</b>", styles["TitleBrand"]),
            Paragraph(status_text, ParagraphStyle(name="StatusBadge", parent=styles["Normal"], textColor=success, backColor=colors.whitesmoke, leading=12, fontName="Helvetica-Bold", alignment=1)),
        ]],
        colWidths=[doc.width * 0.75, doc.width * 0.25],
        hAlign="LEFT",
    )
    header_tbl.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "MIDDLE"), ("ALIGN", (1, 0), (1, 0), "RIGHT")]))
    story.append(header_tbl)
    story.append(Spacer(1, 6))

    created = f"{order.created_at:%Y-%m-%d}" if order.created_at else "-"
    status_value = getattr(order.status, "value", order.status)
    summary_data = [
        [Paragraph("<font color='#6b7280'>Order #</font>", styles["NormalSmall"]), Paragraph(order.order_number, styles["Strong"]),
         Paragraph("<font color='#6b7280'>Date</font>", styles["NormalSmall"]), Paragraph(created, styles["NormalSmall"])],
        [Paragraph("<font color='#6b7280'>Status</font>", styles["NormalSmall"]), Paragraph(str(status_value).replace("_", " ").title(), styles["NormalSmall"]),
         Paragraph("<font color='#6b7280'>Total</font>", styles["NormalSmall"]), Paragraph(_money(order.total_amount), styles["Strong"])],
    ]
    summary_tbl = Table(summary_data, colWidths=[doc.width * 0.15, doc.width * 0.35, doc.width * 0.15, doc.width * 0.35])
    summary_tbl.setStyle(TableStyle([
        ("INNERGRID", (0, 0), (-1, -1), 0.25, border),
        ("BOX", (0, 0), (-1, -1), 0.25, border),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BACKGROUND", (0, 0), (-1, -1), colors.whitesmoke),
        ("LEFTPADDING", (0, 0), (-1, -1), 6), ("RIGHTPADDING", (0, 0), (-1, -1), 6),
    ]))
    story.append(summary_tbl)
    story.append(Spacer(1, 10))

    rows = [[Paragraph(h, styles["Strong"]) for h in ("Service", "Scheduled", "Base", "Add-ons", "Tip", "Amount")]]
    for item in order.items:
        when = " ".join(
            p for p in (
                f"{item.scheduled_date:%Y-%m-%d}" if item.scheduled_date else "",
                item.scheduled_time or "",
            ) if p
        ) or "TBC"
        rows.append([
            Paragraph(item.service_name, styles["NormalSmall"]),
            Paragraph(when, styles["NormalSmall"]),
            Paragraph(_money(item.base_price), styles["NormalSmall"]),
            Paragraph(_money(item.add_ons_price), styles["NormalSmall"]),
            Paragraph(_money(item.tip_amount), styles["NormalSmall"]),
            Paragraph(_money(item.subtotal), styles["NormalSmall"]),
        ])
    items_tbl = Table(rows, colWidths=[doc.width * w for w in (0.26, 0.18, 0.14, 0.14, 0.12, 0.16)])
    items_tbl.setStyle(TableStyle([
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, border),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.append(items_tbl)
    story.append(Spacer(1, 10))

    totals = [
        ["Subtotal", _money(order.subtotal)],
        ["Tips", _money(order.total_tips)],
        [f"Platform fee ({fee_pct}%)", _money(order.platform_fee)],
        ["Total", _money(order.total_amount)],
    ]
    totals_tbl = Table(
        [[Paragraph(k, styles["Strong"] if k == "Total" else styles["NormalSmall"]), Paragraph(v, styles["Strong"] if k == "Total" else styles["NormalSmall"])] for k, v in totals],
        colWidths=[doc.width * 0.35, doc.width * 0.25],
        hAlign="RIGHT",
    )
    totals_tbl.setStyle(TableStyle([
        ("LINEABOVE", (0, -1), (-1, -1), 0.75, brand),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ]))
    story.append(totals_tbl)
    story.append(Spacer(1, 12))
    story.append(Paragraph(_payment_line(order), styles["Muted"]))
    story.append(Paragraph("Thank you for booking with Berry Events.", styles["Muted"]))

    doc.build(story)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
