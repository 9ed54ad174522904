import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from procurement.models.purchase_order import PurchaseOrderView


def _money(value: float) -> str:
    return f"{value:,.2f}"


def render_order_pdf(order: PurchaseOrderView) -> bytes:
    """
    Printable purchase order: header, one row per line, totals block.
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"Purchase Order {order.order_no}")
    styles = getSampleStyleSheet()
    story = []

    story.append(Paragraph("Purchase Order", styles["Title"]))
    story.append(Paragraph(f"Order No: {order.order_no}", styles["Normal"]))
    story.append(Paragraph(f"Date: {order.order_date.strftime('%d/%m/%Y')}", styles["Normal"]))
    story.append(Paragraph(f"Supplier: {escape(order.supplier_display_name)}", styles["Normal"]))
    if order.supplier and order.supplier.address:
        story.append(Paragraph(f"Address: {escape(order.supplier.address)}", styles["Normal"]))
    story.append(Spacer(1, 12))

    data = [["#", "Item No", "Item Name", "Unit", "Qty", "Price", "Amount", "Discount", "Net"]]
    for index, line in enumerate(order.items, start=1):
        data.append([
            index,
            line.item.item_no if line.item else line.item_id,
            line.item.item_name if line.item else "(removed item)",
            line.packing_unit or "",
            line.order_qty,
            _money(line.unit_price),
            _money(line.item_amount),
            _money(line.discount),
            _money(line.net_amount),
        ])

    t = Table(data, colWidths=[20, 65, 130, 35, 35, 55, 60, 55, 60], repeatRows=1)
    t.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#f4f4f4")),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (4, 1), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor("#dddddd")),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
    ]))
    story.append(t)
    story.append(Spacer(1, 12))

    totals = Table([
        ["Item Total", _money(order.item_total)],
        ["Discount", _money(order.discount)],
        ["Net Amount", _money(order.net_amount)],
    ], colWidths=[100, 80], hAlign="RIGHT")
    totals.setStyle(TableStyle([
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, 2), (-1, 2), 'Helvetica-Bold'),
    ]))
    story.append(totals)

    doc.build(story)
    return buffer.getvalue()
