"""PDF and print rendering for solar quotations."""

import base64
import html
import logging
import re
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, Image, PageBreak
)
from reportlab.lib.enums import TA_CENTER, TA_RIGHT

from constants import STATUS_PENDING
from exceptions import RenderError

logger = logging.getLogger(__name__)

BRAND = colors.HexColor('#2E86AB')
PANEL = colors.HexColor('#f5f5f5')
ACCENT = colors.HexColor('#4CAF50')

CONTENT_WIDTH = 170*mm


def slugify(text: str) -> str:
    """Replace whitespace runs with underscores."""
    return re.sub(r"\s+", "_", (text or "").strip())


def pdf_filename(quotation: dict) -> str:
    if quotation.get("status") == STATUS_PENDING:
        return f"{slugify(quotation.get('system_description'))}.pdf"
    return f"{slugify(quotation.get('customer_name'))}_{quotation.get('id')}.pdf"


def _text(value) -> str:
    # Base-14 fonts have no rupee glyph
    return escape(str(value if value is not None else "")).replace("₹", "Rs.")


def _decode_image(data_url: str, max_width: float, max_height: float):
    """Flowable for a base64 data URL image, or None when absent or unreadable."""
    if not data_url:
        return None
    try:
        payload = data_url.split(",", 1)[1] if data_url.startswith("data:") else data_url
        raw = base64.b64decode(payload)
        width, height = ImageReader(BytesIO(raw)).getSize()
    except Exception as exc:  # reportlab re-raises Pillow errors under varying types
        logger.warning("Skipping unreadable image: %s", exc)
        return None
    scale = min(max_width / width, max_height / height, 1)
    return Image(BytesIO(raw), width=width * scale, height=height * scale)


def _build_styles():
    styles = getSampleStyleSheet()

    # Custom styles
    styles.add(ParagraphStyle(
        name='CompanyName',
        parent=styles['Heading1'],
        fontSize=18,
        textColor=BRAND,
        spaceAfter=2*mm
    ))
    styles.add(ParagraphStyle(
        name='Tagline',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.HexColor('#1a1a1a'),
        fontName='Helvetica-Bold'
    ))
    styles.add(ParagraphStyle(
        name='SectionHeader',
        parent=styles['Heading2'],
        fontSize=12,
        textColor=BRAND,
        spaceBefore=5*mm,
        spaceAfter=3*mm
    ))
    styles.add(ParagraphStyle(
        name='BodyTextRight',
        parent=styles['Normal'],
        alignment=TA_RIGHT
    ))
    styles.add(ParagraphStyle(
        name='Small',
        parent=styles['Normal'],
        fontSize=8,
        leading=10
    ))
    styles.add(ParagraphStyle(
        name='BannerText',
        parent=styles['Normal'],
        fontSize=12,
        textColor=colors.white,
        fontName='Helvetica-Bold',
        alignment=TA_CENTER
    ))
    styles.add(ParagraphStyle(
        name='Draft',
        parent=styles['Normal'],
        fontSize=14,
        textColor=colors.red,
        fontName='Helvetica-Bold',
        alignment=TA_RIGHT
    ))
    styles.add(ParagraphStyle(
        name='Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey
    ))
    styles.add(ParagraphStyle(
        name='FooterRight',
        parent=styles['Footer'],
        alignment=TA_RIGHT
    ))
    return styles


def _boxed(table: Table, background=PANEL) -> Table:
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), background),
        ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
        ('INNERGRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('PADDING', (0, 0), (-1, -1), 6),
    ]))
    return table


def _company_header(section, styles):
    logo = _decode_image(section['logo'], 40*mm, 20*mm)
    brand = [logo] if logo else []
    brand.append(Paragraph(f"<b>{_text(section['name'])}</b>", styles['CompanyName']))
    brand.append(Paragraph(_text(section['tagline']), styles['Tagline']))

    offices = "<br/>".join(
        f"<b>{_text(label)}:</b> {_text(address)}" for label, address in section['offices']
    )
    header = Table(
        [[brand, Paragraph(offices, styles['Small'])]],
        colWidths=[85*mm, 85*mm]
    )
    header.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LINEBELOW', (0, 0), (-1, -1), 1, BRAND),
    ]))
    return [
        header,
        Spacer(1, 2*mm),
        Paragraph(_text(section['contact']), styles['Small']),
    ]


def _reference(section, styles):
    right = f"Date: {_text(section['date'])}"
    table = Table(
        [[Paragraph(f"<b>Quotation No:</b> {_text(section['quotation_no'])}", styles['Normal']),
          Paragraph(right, styles['BodyTextRight'])]],
        colWidths=[100*mm, 70*mm]
    )
    table.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    elements = [Spacer(1, 4*mm)]
    if section['draft']:
        elements.append(Paragraph("DRAFT", styles['Draft']))
    elements.extend([table, Paragraph(_text(section['sales_line']), styles['Small'])])
    return elements


def _key_values(section, styles):
    rows = [[f"{label}:", Paragraph(_text(value), styles['Normal'])]
            for label, value in section['rows']]
    table = _boxed(Table(rows, colWidths=[45*mm, 125*mm]))
    table.setStyle(TableStyle([('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold')]))
    return [Paragraph(_text(section['title']), styles['SectionHeader']), table]


def _banner(section, styles):
    cells = [
        [Paragraph(_text(section['title']), styles['BannerText'])],
        [Paragraph(_text(section['text']), styles['BannerText'])],
        [Paragraph(_text(section['classification']), styles['Small'])],
    ]
    if section.get('disclaimer'):
        cells.append([Paragraph(f"<i>{_text(section['disclaimer'])}</i>", styles['Small'])])
    banner = Table(cells, colWidths=[CONTENT_WIDTH])
    banner.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 1), BRAND),
        ('BACKGROUND', (0, 2), (-1, -1), PANEL),
        ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('PADDING', (0, 0), (-1, -1), 4),
    ]))
    return [Spacer(1, 4*mm), banner]


def _table(section, styles):
    columns = section['columns']
    if len(columns) == 3:
        widths = [15*mm, 115*mm, 40*mm]
    else:
        widths = [10*mm, 45*mm, 15*mm, 15*mm, 50*mm, 35*mm]

    data = [[str(column).replace("₹", "Rs.") for column in columns]]
    for row in section['rows']:
        data.append([Paragraph(_text(cell), styles['Small']) for cell in row])

    table = Table(data, colWidths=widths, repeatRows=1)
    style = [
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BACKGROUND', (0, 0), (-1, 0), BRAND),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
        ('INNERGRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('PADDING', (0, 0), (-1, -1), 5),
    ]
    for index in section.get('emphasis', []):
        style.append(('BACKGROUND', (0, index + 1), (-1, index + 1), PANEL))
    table.setStyle(TableStyle(style))

    elements = [Paragraph(_text(section['title']), styles['SectionHeader']), table]
    if not section['rows']:
        elements.append(Paragraph("<i>No items listed.</i>", styles['Small']))
    return elements


def _total(section, styles):
    rows = [
        [Paragraph(_text(section['heading']), styles['Small']), ""],
        [Paragraph(f"<b>{_text(section['label'])}</b>", styles['BannerText']),
         Paragraph(f"<b>Rs. {_text(section['amount'])}</b>", styles['BannerText'])],
    ]
    for note in section['notes']:
        rows.append([Paragraph(_text(note), styles['Small']), ""])
    total = Table(rows, colWidths=[110*mm, 60*mm])
    total.setStyle(TableStyle([
        ('SPAN', (0, 0), (-1, 0)),
        ('BACKGROUND', (0, 1), (-1, 1), BRAND),
        ('BOX', (0, 0), (-1, -1), 0.5, BRAND),
        ('PADDING', (0, 0), (-1, -1), 6),
    ] + [('SPAN', (0, i), (-1, i)) for i in range(2, len(rows))]))
    return [Spacer(1, 5*mm), total]


def _note(section, styles):
    return [Spacer(1, 3*mm), Paragraph(f"<i>{_text(section['text'])}</i>", styles['Small'])]


def _grid(section, styles):
    labels = [Paragraph(f"<b>{_text(label)}</b>", styles['Small']) for label, _ in section['cells']]
    values = [Paragraph(_text(value), styles['Small']) for _, value in section['cells']]
    width = CONTENT_WIDTH / len(section['cells'])
    grid = Table([labels, values], colWidths=[width] * len(section['cells']))
    grid.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#e8f5e9')),
        ('BOX', (0, 0), (-1, -1), 0.5, ACCENT),
        ('INNERGRID', (0, 0), (-1, -1), 0.25, ACCENT),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('PADDING', (0, 0), (-1, -1), 6),
    ]))
    return [Paragraph(_text(section['title']), styles['SectionHeader']), grid]


def _numbered_list(section, styles):
    elements = [Paragraph(_text(section['title']), styles['SectionHeader'])]
    if not section['items']:
        elements.append(Paragraph("<i>No terms configured for this system.</i>", styles['Normal']))
    for number, text in enumerate(section['items'], start=1):
        elements.append(Paragraph(f"{number}. {_text(text)}", styles['Normal']))
        elements.append(Spacer(1, 2*mm))
    return elements


def _roadmap(section, styles):
    rows = [[step['step'], step['title'], Paragraph(_text(step['detail']), styles['Normal'])]
            for step in section['steps']]
    table = _boxed(Table(rows, colWidths=[15*mm, 35*mm, 120*mm]))
    table.setStyle(TableStyle([('FONTNAME', (0, 0), (1, -1), 'Helvetica-Bold')]))
    return [Paragraph(_text(section['title']), styles['SectionHeader']), table]


def _checklist(section, styles):
    elements = [Paragraph(_text(section['title']), styles['SectionHeader'])]
    for item in section['items']:
        elements.append(Paragraph(f"[ ] {_text(item)}", styles['Normal']))
    return elements


def _signature(section, styles):
    seal = _decode_image(section.get('seal', ""), 35*mm, 35*mm)
    block = [
        Paragraph(f"<b>{_text(section['company'])}</b>", styles['BodyTextRight']),
        Spacer(1, 3*mm),
        seal or Paragraph(f"<i>{_text(section['seal_placeholder'])}</i>", styles['BodyTextRight']),
        Spacer(1, 3*mm),
        Paragraph(_text(section['label']), styles['BodyTextRight']),
    ]
    table = Table([["", block]], colWidths=[100*mm, 70*mm])
    table.setStyle(TableStyle([('ALIGN', (1, 0), (1, 0), 'RIGHT')]))
    return [Spacer(1, 10*mm), table]


SECTION_RENDERERS = {
    "company_header": _company_header,
    "reference": _reference,
    "key_values": _key_values,
    "banner": _banner,
    "table": _table,
    "total": _total,
    "note": _note,
    "grid": _grid,
    "numbered_list": _numbered_list,
    "roadmap": _roadmap,
    "checklist": _checklist,
    "signature": _signature,
}


def render_quotation_pdf(document: dict, company: dict = None) -> bytes:
    """Render an assembled quotation document to PDF.

    Returns PDF as bytes. Any failure is raised as RenderError.
    """
    try:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20*mm,
            leftMargin=20*mm,
            topMargin=15*mm,
            bottomMargin=15*mm,
            title=f"Quotation {document['quotation_id']}",
            author=(company or {}).get("name", "")
        )
        styles = _build_styles()

        elements = []
        for page in document['pages']:
            for section in page['sections']:
                elements.extend(SECTION_RENDERERS[section["kind"]](section, styles))

            # --- Footer ---
            elements.append(Spacer(1, 8*mm))
            footer = Table(
                [[Paragraph(_text(page['footer']['left']), styles['Footer']),
                  Paragraph(_text(page['footer']['right']), styles['FooterRight'])]],
                colWidths=[120*mm, 50*mm]
            )
            footer.setStyle(TableStyle([('LINEABOVE', (0, 0), (-1, 0), 0.5, colors.grey)]))
            elements.append(footer)
            if page['number'] < len(document['pages']):
                elements.append(PageBreak())

        doc.build(elements)
    except Exception as exc:
        logger.exception("PDF rendering failed for %s", document.get('quotation_id'))
        raise RenderError() from exc

    return buffer.getvalue()


# Print view

PRINT_CSS = """
<style>
    body { font-family: Helvetica, Arial, sans-serif; color: #1a1a1a; font-size: 12px; }
    .page { padding: 16px 24px; page-break-after: always; }
    .page:last-child { page-break-after: auto; }
    h1 { color: #2E86AB; margin: 0; }
    h2 { color: #2E86AB; font-size: 15px; margin: 16px 0 6px; }
    table { width: 100%; border-collapse: collapse; margin-bottom: 6px; }
    td, th { border: 1px solid #ccc; padding: 5px; vertical-align: top; }
    th { background: #2E86AB; color: #fff; text-align: left; }
    .emphasis td { background: #f5f5f5; font-weight: bold; }
    .banner { background: #2E86AB; color: #fff; text-align: center; padding: 8px; font-weight: bold; }
    .total { border: 1px solid #2E86AB; padding: 8px; margin-top: 10px; }
    .total .amount { background: #2E86AB; color: #fff; padding: 8px; font-size: 16px; font-weight: bold; }
    .small { font-size: 10px; }
    .draft { color: red; font-weight: bold; float: right; font-size: 16px; }
    .footer { border-top: 1px solid #999; color: #777; font-size: 10px; margin-top: 20px; display: flex; justify-content: space-between; }
    .signature { text-align: right; margin-top: 30px; }
    @media print { .no-print { display: none; } }
</style>
"""


def _h(value) -> str:
    return html.escape(str(value if value is not None else ""))


def _html_section(section: dict) -> str:
    kind = section['kind']
    if kind == "company_header":
        logo = f'<img src="{_h(section["logo"])}" style="max-height:60px"/>' if section['logo'] else ""
        offices = "<br/>".join(f"<b>{_h(label)}:</b> {_h(address)}" for label, address in section["offices"])
        return (
            f'<table><tr><td style="border:none">{logo}<h1>{_h(section["name"])}</h1>'
            f'<div class="small"><b>{_h(section["tagline"])}</b></div></td>'
            f'<td style="border:none" class="small">{offices}</td></tr></table>'
            f'<div class="small">{_h(section["contact"])}</div>'
        )
    if kind == "reference":
        draft = '<span class="draft">DRAFT</span>' if section['draft'] else ""
        return (
            f'{draft}<p><b>Quotation No:</b> {_h(section["quotation_no"])} &nbsp; '
            f'<b>Date:</b> {_h(section["date"])}</p><p class="small">{_h(section["sales_line"])}</p>'
        )
    if kind == "key_values":
        rows = "".join(f"<tr><td><b>{_h(k)}</b></td><td>{_h(v)}</td></tr>" for k, v in section['rows'])
        return f"<h2>{_h(section['title'])}</h2><table>{rows}</table>"
    if kind == "banner":
        disclaimer = f'<p class="small"><i>{_h(section["disclaimer"])}</i></p>' if section.get('disclaimer') else ""
        return (
            f'<div class="banner">{_h(section["title"])}<br/>{_h(section["text"])}</div>'
            f'<p class="small">{_h(section["classification"])}</p>{disclaimer}'
        )
    if kind == "table":
        head = "".join(f"<th>{_h(c)}</th>" for c in section['columns'])
        body = "".join(
            f'<tr class="{"emphasis" if i in section.get("emphasis", []) else ""}">'
            + "".join(f"<td>{_h(c)}</td>" for c in row) + "</tr>"
            for i, row in enumerate(section['rows'])
        )
        return f"<h2>{_h(section['title'])}</h2><table><tr>{head}</tr>{body}</table>"
    if kind == "total":
        notes = "".join(f'<div class="small">{_h(n)}</div>' for n in section['notes'])
        return (
            f'<div class="total"><div class="small">{_h(section["heading"])}</div>'
            f'<div class="amount">{_h(section["label"])}: ₹ {_h(section["amount"])}</div>{notes}</div>'
        )
    if kind == "note":
        return f'<p class="small"><i>{_h(section["text"])}</i></p>'
    if kind == "grid":
        head = "".join(f"<th>{_h(label)}</th>" for label, _ in section['cells'])
        body = "".join(f"<td>{_h(value)}</td>" for _, value in section['cells'])
        return f"<h2>{_h(section['title'])}</h2><table><tr>{head}</tr><tr>{body}</tr></table>"
    if kind == "numbered_list":
        items = "".join(f"<li>{_h(t)}</li>" for t in section['items'])
        return f"<h2>{_h(section['title'])}</h2><ol>{items}</ol>"
    if kind == "roadmap":
        rows = "".join(
            f"<tr><td><b>{_h(s['step'])}</b></td><td><b>{_h(s['title'])}</b></td><td>{_h(s['detail'])}</td></tr>"
            for s in section['steps']
        )
        return f"<h2>{_h(section['title'])}</h2><table>{rows}</table>"
    if kind == "checklist":
        items = "".join(f"<li>&#9744; {_h(t)}</li>" for t in section['items'])
        return f'<h2>{_h(section["title"])}</h2><ul style="list-style:none">{items}</ul>'
    if kind == "signature":
        seal = (f'<img src="{_h(section["seal"])}" style="max-height:90px"/>' if section['seal']
                else f"<p><i>{_h(section['seal_placeholder'])}</i></p>")
        return (
            f'<div class="signature"><b>{_h(section["company"])}</b>{seal}'
            f'<p>{_h(section["label"])}</p></div>'
        )
    raise ValueError(f"Unknown section kind: {kind}")


def render_quotation_html(document: dict, auto_print: bool = False) -> str:
    """Printable HTML for the browser print path."""
    pages = []
    for page in document['pages']:
        body = "".join(_html_section(section) for section in page['sections'])
        footer = (
            f'<div class="footer"><span>{_h(page["footer"]["left"])}</span>'
            f'<span>{_h(page["footer"]["right"])}</span></div>'
        )
        pages.append(f'<div class="page">{body}{footer}</div>')

    script = "<script>window.print();</script>" if auto_print else ""
    button = '<button class="no-print" onclick="window.print()">Print</button>'
    return f"<html><head>{PRINT_CSS}</head><body>{button}{''.join(pages)}{script}</body></html>"
