"""
Export formats for admin downloads.

Produces three output-only formats from the row dicts returned by the
remote procedures:
- CSV: pandas `to_csv` with minimal quoting (only fields containing a
  comma, quote or line break are quoted; inner quotes are doubled)
- JSON: pretty-printed, 2-space indent
- PDF: landscape table rendered with reportlab

None of the writers raise on an empty row list: CSV yields the header
line, the bulk CSV writes "No data" per section and the PDF renders a
single "No data" row.
"""
import io
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape as xml_escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

NO_DATA = "No data"


@dataclass(frozen=True)
class PdfColumn:
    """One column of a PDF table. Width is in points before scaling."""
    key: str
    label: str
    width: float
    align: str = "left"


ANNADANAM_CSV_HEADERS = [
    "date", "session", "name", "email", "phone", "qty", "status", "user_id", "created_at",
]
DONATION_CSV_HEADERS = ["created_at", "name", "email", "phone", "amount", "address", "status"]
CONTACT_CSV_HEADERS = [
    "created_at", "first_name", "last_name", "email", "phone", "subject", "message", "status",
]
BOOKING_CSV_HEADERS = ["date", "session", "name", "email", "phone", "status", "user_id", "created_at"]

ANNADANAM_PDF_COLUMNS = [
    PdfColumn("date", "Date", 90),
    PdfColumn("session", "Session", 120, "center"),
    PdfColumn("name", "Name", 180),
    PdfColumn("email", "Email", 220),
    PdfColumn("phone", "Phone", 120),
]
DONATION_PDF_COLUMNS = [
    PdfColumn("created_at", "Created", 130),
    PdfColumn("name", "Name", 170),
    PdfColumn("email", "Email", 200),
    PdfColumn("phone", "Phone", 110),
    PdfColumn("amount", "Amount", 90, "right"),
    PdfColumn("status", "Status", 90),
]
CONTACT_PDF_COLUMNS = [
    PdfColumn("created_at", "Created", 130),
    PdfColumn("first_name", "First Name", 120),
    PdfColumn("last_name", "Last Name", 120),
    PdfColumn("email", "Email", 220),
    PdfColumn("phone", "Phone", 120),
    PdfColumn("subject", "Subject", 160),
    PdfColumn("status", "Status", 100),
]
BOOKING_PDF_COLUMNS = [
    PdfColumn("date", "Date", 90),
    PdfColumn("session", "Session", 120, "center"),
    PdfColumn("name", "Name", 180),
    PdfColumn("email", "Email", 220),
    PdfColumn("phone", "Phone", 120),
    PdfColumn("status", "Status", 90),
]

# Bulk export sections: (payload key, CSV heading)
BULK_SECTIONS: List[Tuple[str, str]] = [
    ("users", "Users"),
    ("profiles", "Profiles"),
    ("pooja_bookings", "Pooja Bookings"),
    ("annadanam_bookings", "Annadanam Bookings"),
    ("donations", "Donations"),
    ("contact_messages", "Contact Messages"),
    ("volunteer_bookings", "Volunteer Bookings"),
]


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, separators=(",", ":"))
    return str(value)


def escape_csv_field(value: Any) -> str:
    """Serialize one value as a CSV field, quoted only when it must be."""
    text = _stringify(value)
    if not text:
        return ""
    line = pd.DataFrame([[text]]).to_csv(index=False, header=False, lineterminator="\n")
    return line[:-1]


def rows_to_csv(rows: Iterable[Dict[str, Any]], headers: Sequence[str]) -> str:
    """Render rows under fixed headers. Missing keys become empty fields.

    Example:
        >>> rows_to_csv([{"name": "Ravi", "city": "Miyapur, Hyderabad"}], ["name", "city"])
        'name,city\nRavi,"Miyapur, Hyderabad"\n'
    """
    frame = pd.DataFrame(
        [[_stringify(row.get(h)) for h in headers] for row in rows],
        columns=list(headers),
    )
    return frame.to_csv(index=False, lineterminator="\n")


def rows_to_json(data: Any) -> str:
    """Pretty-print rows (or any payload) as JSON."""
    return json.dumps(data, indent=2, default=str, ensure_ascii=False)


def _iso(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def bulk_export_csv(
    payload: Dict[str, List[Dict[str, Any]]],
    start: Any = None,
    end: Any = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the multi-section admin export.

    Each section's header is taken from the keys of its first row, since
    sections do not share a schema.
    """
    generated_at = generated_at or datetime.now()
    out = [
        f"Admin Data Export - {generated_at.isoformat()}\n",
        f"Date Range: {_iso(start) if start else 'all'} to {_iso(end) if end else 'all'}\n\n",
    ]
    for key, heading in BULK_SECTIONS:
        out.append(f"\n{heading}\n")
        rows = payload.get(key) or []
        if rows:
            out.append(rows_to_csv(rows, list(rows[0].keys())))
        else:
            out.append(f"{NO_DATA}\n")
    return "".join(out)


def format_timestamp(value: Any) -> str:
    """Render an ISO timestamp as "YYYY-MM-DD HH:MM"."""
    if not value:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    text = str(value)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return text[:19].replace("T", " ")


def export_filename(stem: str, ext: str, start: Any = None, end: Any = None) -> str:
    """Build "stem[-start][-end].ext".

    Missing sides are left out and a single day is named once.

    Example:
        >>> export_filename("annadanam-bookings", "csv", date(2025, 12, 1), date(2025, 12, 1))
        'annadanam-bookings-2025-12-01.csv'
    """
    parts = [stem]
    if start:
        parts.append(_iso(start))
    if end and end != start:
        parts.append(_iso(end))
    return "-".join(parts) + f".{ext}"


_ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT}


def rows_to_pdf(
    title: str,
    columns: Sequence[PdfColumn],
    rows: Sequence[Dict[str, Any]],
    subtitle: Optional[str] = None,
) -> bytes:
    """Render rows as a landscape A4 table.

    Column widths are scaled to the printable width; the header row
    repeats on every page.
    """
    buffer = io.BytesIO()
    page_size = landscape(A4)
    margin = 12 * mm
    doc = SimpleDocTemplate(
        buffer,
        pagesize=page_size,
        leftMargin=margin,
        rightMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=title,
    )

    styles = getSampleStyleSheet()
    story = [Paragraph(xml_escape(title), styles["Title"])]
    if subtitle:
        story.append(Paragraph(xml_escape(subtitle), styles["Normal"]))
    story.append(Spacer(1, 6 * mm))

    available = page_size[0] - 2 * margin
    total = sum(c.width for c in columns) or 1
    widths = [c.width * available / total for c in columns]

    cell_styles = [
        ParagraphStyle(f"cell-{c.key}", parent=styles["BodyText"], fontSize=8, leading=10,
                       alignment=_ALIGNMENTS.get(c.align, TA_LEFT))
        for c in columns
    ]
    header_styles = [
        ParagraphStyle(f"head-{c.key}", parent=style, fontName="Helvetica-Bold")
        for c, style in zip(columns, cell_styles)
    ]

    data = [[Paragraph(xml_escape(c.label), s) for c, s in zip(columns, header_styles)]]
    if rows:
        for row in rows:
            data.append([
                Paragraph(xml_escape(_stringify(row.get(c.key))), s)
                for c, s in zip(columns, cell_styles)
            ])
    else:
        data.append([Paragraph(NO_DATA, cell_styles[0])] + [""] * (len(columns) - 1))

    table = Table(data, colWidths=widths, repeatRows=1)
    table_style = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEEEEE")),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#BBBBBB")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    if not rows:
        table_style.append(("SPAN", (0, 1), (-1, 1)))
    table.setStyle(TableStyle(table_style))
    story.append(table)

    doc.build(story)
    logger.debug(f"Rendered PDF '{title}' with {len(rows)} rows")
    return buffer.getvalue()
