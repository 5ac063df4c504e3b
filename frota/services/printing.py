"""
Impressão da ordem de serviço (PDF A4 com ReportLab)
"""

import io
from datetime import datetime
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from frota.models.maintenance import WorkOrder
from frota.services.work_orders import derive_status

SUBJECT_TYPE_LABELS = {
    "vehicle": "Veículo",
    "equipment": "Equipamento",
    "generator": "Gerador",
}

STATUS_LABELS = {
    "aberta": "Aberta",
    "pendente": "Pendente",
    "concluida": "Concluída",
}

_GRID_STYLE = [
    ("TEXTCOLOR", (0, 0), (-1, -1), colors.black),
    ("FONTSIZE", (0, 0), (-1, -1), 10),
    ("BOTTOMPADDING", (0, 0), (-1, -1), 12),
    ("GRID", (0, 0), (-1, -1), 1, colors.black),
]

_HEADER_ROW_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
]


def _fmt(value: Optional[datetime], pattern: str = "%d/%m/%Y") -> str:
    return value.strftime(pattern) if value else "-"


def render_work_order_pdf(order: WorkOrder, now: Optional[datetime] = None) -> bytes:
    now = now or datetime.now()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        rightMargin=2 * cm, leftMargin=2 * cm, topMargin=2 * cm, bottomMargin=2 * cm,
        title=f"OS {order.number}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "CustomTitle",
        parent=styles["Heading1"],
        fontSize=16,
        spaceAfter=30,
        alignment=TA_CENTER,
        textColor=colors.black,
    )
    heading_style = ParagraphStyle(
        "CustomHeading",
        parent=styles["Heading2"],
        fontSize=12,
        spaceAfter=12,
        textColor=colors.black,
    )
    normal_style = styles["Normal"]

    status = derive_status(order.status, order.scheduled_for, now)
    story = [Paragraph("ORDEM DE SERVIÇO", title_style), Spacer(1, 12)]

    info_table = Table(
        [
            ["Nº:", order.number, "Abertura:", _fmt(order.created_at)],
            ["Tipo:", (order.maintenance_type or "").capitalize(), "Status:", STATUS_LABELS.get(status, status)],
            ["Agendada:", _fmt(order.scheduled_for), "Conclusão:", _fmt(order.completed_at)],
        ],
        colWidths=[3 * cm, 6 * cm, 3 * cm, 4 * cm],
    )
    info_table.setStyle(TableStyle(_GRID_STYLE + [
        ("ALIGN", (0, 0), (-1, -1), "LEFT"),
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
    ]))
    story += [info_table, Spacer(1, 20)]

    story.append(Paragraph("Identificação", heading_style))
    subject_table = Table(
        [
            ["TIPO", "IDENTIFICAÇÃO", "PLACA", "FROTA"],
            [
                SUBJECT_TYPE_LABELS.get(order.subject_type, order.subject_type),
                order.subject_label or "-",
                order.plate_snapshot or "-",
                order.fleet_number_snapshot or "-",
            ],
        ],
        colWidths=[3 * cm, 7 * cm, 3 * cm, 3 * cm],
    )
    subject_table.setStyle(TableStyle(_GRID_STYLE + _HEADER_ROW_STYLE))
    story += [subject_table, Spacer(1, 20)]

    story.append(Paragraph("Serviço Solicitado", heading_style))
    story.append(Paragraph(f"<b>Descrição:</b> {escape(order.description or '')}", normal_style))
    if order.linked_problem_label:
        story.append(Paragraph(f"<b>Problema vinculado:</b> {escape(order.linked_problem_label)}", normal_style))
    story.append(Paragraph(f"<b>Aberta por:</b> {escape(order.created_by or '-')}", normal_style))
    story.append(Spacer(1, 30))

    signature_table = Table(
        [
            ["EXECUTANTE", "RESPONSÁVEL FROTA", "MOTORISTA / OPERADOR"],
            ["", "", ""],
            ["(Assinatura)", "(Assinatura)", "(Assinatura)"],
            ["___/___/______", "___/___/______", "___/___/______"],
        ],
        colWidths=[5.3 * cm, 5.3 * cm, 5.3 * cm],
    )
    signature_table.setStyle(TableStyle(_GRID_STYLE + _HEADER_ROW_STYLE))
    story.append(signature_table)

    doc.build(story)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes
