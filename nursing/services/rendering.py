"""
PDF layouts for prescriptions and lab reports (reportlab canvas).

Both documents share the same frame: title, prescriber block, rule,
patient block, the record's own sections, then a footer line and a
signature block. Long text wraps and continues on a new page.
"""
import io
from typing import List, Optional

from django.utils import timezone
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from nursing.models import LabReport, Patient, Prescription

DEFAULT_PRESCRIBER = ('Dr. Doctor', 'Medical Professional')

MARGIN = 2 * cm
BODY_FONT = 'Helvetica'
BOLD_FONT = 'Helvetica-Bold'
BODY_SIZE = 11
LINE_HEIGHT = 0.55 * cm


def wrap_to_width(text: str, font: str, size: float, width: float) -> List[str]:
    """Split one paragraph into lines no wider than ``width`` points.

    Words longer than a whole line are cut where they reach the edge.
    """
    lines = []
    for line in simpleSplit(text, font, size, width) or ['']:
        while len(line) > 1 and stringWidth(line, font, size) > width:
            cut = len(line) - 1
            while cut > 1 and stringWidth(line[:cut], font, size) > width:
                cut -= 1
            lines.append(line[:cut])
            line = line[cut:]
        lines.append(line)
    return lines


class _Sheet:
    """Canvas plus a y cursor that starts a new page when it runs out."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.width, self.height = A4
        self.usable_width = self.width - 2 * MARGIN
        self.y = self.height - MARGIN

    def _need(self, amount: float) -> None:
        if self.y - amount < MARGIN:
            self.c.showPage()
            self.y = self.height - MARGIN

    def gap(self, amount: float = LINE_HEIGHT) -> None:
        self.y -= amount
        self._need(0)

    def title(self, text: str) -> None:
        self._need(1.2 * cm)
        self.c.setFont(BOLD_FONT, 18)
        self.c.drawCentredString(self.width / 2, self.y, text)
        self.y -= 1.2 * cm

    def right(self, text: str, bold: bool = False) -> None:
        self._need(LINE_HEIGHT)
        self.c.setFont(BOLD_FONT if bold else BODY_FONT, BODY_SIZE)
        self.c.drawRightString(self.width - MARGIN, self.y, text)
        self.y -= LINE_HEIGHT

    def rule(self) -> None:
        self._need(LINE_HEIGHT)
        self.c.line(MARGIN, self.y, self.width - MARGIN, self.y)
        self.y -= LINE_HEIGHT

    def heading(self, text: str) -> None:
        self._need(2 * LINE_HEIGHT)
        self.c.setFont(BOLD_FONT, 12)
        self.c.drawString(MARGIN, self.y, text)
        self.y -= LINE_HEIGHT

    def text(self, text, indent: float = 0, bold: bool = False) -> None:
        font = BOLD_FONT if bold else BODY_FONT
        if text is None or str(text).strip() == '':
            text = '-'
        for raw in str(text).splitlines():
            for line in wrap_to_width(raw.rstrip(), font, BODY_SIZE, self.usable_width - indent):
                self._need(LINE_HEIGHT)
                self.c.setFont(font, BODY_SIZE)
                self.c.drawString(MARGIN + indent, self.y, line)
                self.y -= LINE_HEIGHT

    def section(self, label: str, value) -> None:
        self.heading(f'{label}:')
        self.text(value)
        self.gap(0.2 * cm)

    def signature(self) -> None:
        self._need(3 * LINE_HEIGHT)
        self.y -= LINE_HEIGHT
        self.c.setFont(BODY_FONT, BODY_SIZE)
        self.c.drawString(MARGIN, self.y, "Doctor's Signature:")
        self.c.line(MARGIN + 4.2 * cm, self.y - 2, MARGIN + 10 * cm, self.y - 2)
        self.y -= LINE_HEIGHT


def _format_date(value) -> str:
    if value is None:
        return '-'
    if hasattr(value, 'tzinfo') and value.tzinfo is not None:
        value = timezone.localtime(value)
    return value.strftime('%d/%m/%Y')


def _header(sheet: _Sheet, title: str, prescriber: Optional[tuple], patient: Patient) -> None:
    name, subtitle = prescriber or DEFAULT_PRESCRIBER
    sheet.title(title)
    sheet.right(name, bold=True)
    sheet.right(subtitle)
    sheet.rule()
    sheet.text(f'Patient: {patient.name}', bold=True)
    sheet.text(f'ID: {patient.patient_id}')
    sheet.text(f'Age/Gender: {patient.age} years / {patient.gender}')
    sheet.gap()


def _finish(c: canvas.Canvas, buffer: io.BytesIO) -> bytes:
    c.showPage()
    c.save()
    return buffer.getvalue()


def render_prescription(prescription: Prescription, patient: Patient, prescriber: Optional[tuple] = None) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f'Prescription {prescription.prescription_id}')
    sheet = _Sheet(c)
    _header(sheet, 'Medical Prescription', prescriber, patient)

    sheet.section('Diagnosis', prescription.diagnosis)
    if prescription.clinical_notes:
        sheet.section('Clinical Notes', prescription.clinical_notes)

    sheet.heading('Medications:')
    medications = list(prescription.medications.all())
    if not medications:
        sheet.text('-')
    for i, med in enumerate(medications, start=1):
        sheet.text(f'{i}. {med.medicine}', bold=True)
        sheet.text(f'Dosage: {med.dosage}', indent=0.6 * cm)
        sheet.text(f'Duration: {med.duration}', indent=0.6 * cm)
        if med.notes:
            sheet.text(f'Instructions: {med.notes}', indent=0.6 * cm)
    sheet.gap(0.2 * cm)

    if prescription.special_instructions:
        sheet.section('Special Instructions', prescription.special_instructions)
    if prescription.follow_up:
        sheet.text(f'Follow-up: After {prescription.follow_up}')

    sheet.gap()
    sheet.text(f'Date: {_format_date(prescription.date)}')
    sheet.signature()
    return _finish(c, buffer)


def render_lab_report(report: LabReport, patient: Patient, prescriber: Optional[tuple] = None) -> bytes:
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f'Lab report {report.report_id or report.pk}')
    sheet = _Sheet(c)
    _header(sheet, 'Laboratory Test Report', prescriber, patient)

    sheet.text(report.name or report.test_type or 'Laboratory Test', bold=True)
    sheet.text(f'Date: {_format_date(report.date)}')
    sheet.gap(0.2 * cm)
    sheet.section('Findings/Results', report.findings or report.test_results)
    sheet.section('Instructions/Recommendations', report.instructions or report.recommendations)
    if report.normal_range:
        sheet.section('Normal Range', report.normal_range)
    if report.interpretation:
        sheet.section('Interpretation', report.interpretation)

    sheet.gap()
    sheet.text(f'Report ID: {report.report_id or report.pk}')
    sheet.signature()
    return _finish(c, buffer)


def render_record(record, patient: Patient, prescriber: Optional[tuple] = None) -> bytes:
    if isinstance(record, Prescription):
        return render_prescription(record, patient, prescriber)
    if isinstance(record, LabReport):
        return render_lab_report(record, patient, prescriber)
    raise TypeError(f'cannot render {type(record).__name__}')
