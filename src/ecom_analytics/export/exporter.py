from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from ecom_analytics.exceptions.errors import ExportError
from ecom_analytics.logging.logger import get_logger
from ecom_analytics.reports.runner import ReportResult

log = get_logger("export.exporter")

MAX_PDF_ROWS = 200

@dataclass(frozen=True)
class ExportPaths:
    csv_path: Optional[str] = None
    xml_path: Optional[str] = None
    pdf_path: Optional[str] = None

def export_report(result: ReportResult, out_dir: str) -> ExportPaths:
    """Write a report result as CSV, XML and PDF under ``out_dir``.

    CSV is the primary output and raises ExportError on failure; XML and PDF
    are best effort and come back as None when they cannot be written.
    """
    rep = result.report
    df = result.df
    base_name = f"{rep.number:02d}_{rep.name}"
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    csv_path = str(Path(out_dir) / f"{base_name}.csv")
    xml_path: Optional[str] = str(Path(out_dir) / f"{base_name}.xml")
    pdf_path: Optional[str] = str(Path(out_dir) / f"{base_name}.pdf")

    try:
        df.to_csv(csv_path, index=False, encoding="utf-8")
        log.info("Exported CSV", extra={"path": csv_path})
    except OSError as e:
        log.exception("CSV export failed")
        raise ExportError(f"CSV export failed for {rep.name}") from e

    try:
        df.to_xml(xml_path, index=False, root_name="Report", row_name="Row", parser="etree")
        log.info("Exported XML", extra={"path": xml_path})
    except (OSError, ValueError):
        log.exception("XML export failed")
        xml_path = None

    try:
        styles = getSampleStyleSheet()
        doc = SimpleDocTemplate(pdf_path, pagesize=letter)
        elements = [
            Paragraph(f"{rep.number}. {rep.title}", styles["Title"]),
            Paragraph(rep.description, styles["Normal"]),
            Paragraph(f"As of {result.as_of:%Y-%m-%d %H:%M} | {len(df)} row(s)", styles["Italic"]),
            Spacer(1, 12),
        ]
        table_data = [list(df.columns)] + df.head(MAX_PDF_ROWS).astype(str).values.tolist()
        t = Table(table_data, repeatRows=1)
        t.setStyle(TableStyle([
            ("BACKGROUND", (0,0), (-1,0), colors.lightgrey),
            ("GRID", (0,0), (-1,-1), 0.25, colors.grey),
            ("FONTSIZE", (0,0), (-1,-1), 8),
            ("ALIGN", (0,0), (-1,-1), "LEFT"),
        ]))
        elements.append(t)
        doc.build(elements)
        log.info("Exported PDF", extra={"path": pdf_path})
    except (OSError, ValueError):
        log.exception("PDF export failed")
        pdf_path = None

    return ExportPaths(csv_path=csv_path, xml_path=xml_path, pdf_path=pdf_path)
