"""PDF documents: production calendars and actor resumes (reportlab platypus)."""

from __future__ import annotations

import datetime
import functools
import io
import logging
import re
from collections.abc import Iterable
from typing import Any, Optional
from xml.sax.saxutils import escape

import httpx
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    CondPageBreak,
    HRFlowable,
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .models import CalendarEvent, CastingCredit, ResumeData, ShowDetails, WatermarkSettings
from .timeutils import DEFAULT_CALENDAR_TIMEZONE, get_zone, now_utc, to_epoch_millis

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DEFAULT_BRANDING = "Generated via Callboard"

HEADER_BLUE = colors.Color(107 / 255, 141 / 255, 214 / 255)
ALT_ROW = colors.Color(245 / 255, 247 / 255, 250 / 255)
FOOTER_GRAY = colors.Color(128 / 255, 128 / 255, 128 / 255)

TYPE_COLORS = {
    "Audition": colors.Color(90 / 255, 143 / 255, 245 / 255),
    "Callback": colors.Color(155 / 255, 135 / 255, 245 / 255),
    "Rehearsal": colors.Color(249 / 255, 115 / 255, 22 / 255),
    "Performance": colors.Color(239 / 255, 68 / 255, 68 / 255),
    "Agenda Item": colors.Color(245 / 255, 158 / 255, 11 / 255),
}
DEFAULT_TYPE_COLOR = colors.Color(52 / 255, 211 / 255, 153 / 255)

AUDIENCES = ("actor", "production")

# Standard fonts lack U+2713; ZapfDingbats "4" is a check mark
CHECK_MARK = '<font name="ZapfDingbats">4</font> '


def type_color(type_label: Optional[str]) -> colors.Color:
    """Badge colour for an event type label."""
    return TYPE_COLORS.get(type_label or "", DEFAULT_TYPE_COLOR)


def fetch_logo(url: str, timeout: float = 10.0) -> Optional[bytes]:
    """Download a watermark logo; None (with a warning) on any HTTP failure."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("Failed to fetch watermark logo from %s: %s", url, e)
        return None

    logger.debug("Fetched watermark logo from %s (%d bytes)", url, len(response.content))
    return response.content


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers footers until the page count is known."""

    def __init__(self, *args: Any, footer_left: str = "", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict[str, Any]] = []
        self._footer_left = footer_left

    def showPage(self) -> None:  # noqa: N802 - reportlab API
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        width, _ = self._pagesize
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(FOOTER_GRAY)
        self.drawString(0.6 * inch, 0.4 * inch, self._footer_left)
        self.drawRightString(width - 0.6 * inch, 0.4 * inch, f"Page {self._pageNumber} of {total}")
        self.restoreState()


class CalendarPdfBuilder:
    """Production calendar listing: one table per month, colour-coded by type.

    The ``production`` audience adds a details column with event descriptions.
    """

    def __init__(
        self,
        show: ShowDetails,
        actor_name: str = "",
        audience: str = "actor",
        tz_name: str = DEFAULT_CALENDAR_TIMEZONE,
    ):
        if audience not in AUDIENCES:
            raise ValueError(f"audience must be one of {AUDIENCES}, got {audience!r}")
        self.show = show
        self.actor_name = actor_name
        self.audience = audience
        self.zone = get_zone(tz_name)

        self.page_width, self.page_height = landscape(letter)
        self.margin = 0.6 * inch
        self.header_height = 0.9 * inch

        styles = getSampleStyleSheet()
        self.month_style = ParagraphStyle(
            "MonthHeading",
            parent=styles["Heading2"],
            fontSize=16,
            textColor=HEADER_BLUE,
            spaceBefore=10,
            spaceAfter=6,
        )
        self.cell_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=9, leading=11)

    def _local(self, value: datetime.datetime) -> datetime.datetime:
        return value.astimezone(self.zone) if value.tzinfo is not None else value

    def _time_text(self, event: CalendarEvent) -> str:
        if event.all_day:
            return "All Day"
        start = self._local(event.start)
        text = start.strftime("%I:%M %p").lstrip("0")
        if event.end is not None:
            text += " - " + self._local(event.end).strftime("%I:%M %p").lstrip("0")
        return text

    def group_by_month(self, events: Iterable[CalendarEvent]) -> dict[str, list[CalendarEvent]]:
        """Chronological events keyed by "Month YYYY", months in order."""
        grouped: dict[str, list[CalendarEvent]] = {}
        for event in sorted(events, key=lambda e: to_epoch_millis(e.start)):
            grouped.setdefault(self._local(event.start).strftime("%B %Y"), []).append(event)
        return grouped

    def _month_table(self, events: list[CalendarEvent]) -> Table:
        production = self.audience == "production"
        header = ["Date", "Time", "Event", "Type", "Location"]
        widths = [1.0 * inch, 1.5 * inch, 3.2 * inch, 1.1 * inch, 2.5 * inch]
        if production:
            header.append("Details")
            widths = [1.0 * inch, 1.3 * inch, 2.1 * inch, 1.0 * inch, 1.7 * inch, 2.7 * inch]

        rows: list[list[Any]] = [header]
        for event in events:
            row: list[Any] = [
                self._local(event.start).strftime("%m/%d/%Y"),
                self._time_text(event),
                Paragraph(escape(event.title), self.cell_style),
                event.type_label or "Event",
                Paragraph(escape(event.location or "TBD"), self.cell_style),
            ]
            if production:
                row.append(Paragraph(escape(event.description or ""), self.cell_style))
            rows.append(row)

        commands: list[tuple] = [
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONT", (0, 0), (-1, 0), "Helvetica-Bold", 10),
            ("FONT", (0, 1), (-1, -1), "Helvetica", 9),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ALT_ROW]),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ]
        for index, event in enumerate(events, start=1):
            commands.extend(
                [
                    ("BACKGROUND", (3, index), (3, index), type_color(event.type_label)),
                    ("TEXTCOLOR", (3, index), (3, index), colors.white),
                    ("FONT", (3, index), (3, index), "Helvetica-Bold", 9),
                ]
            )

        table = Table(rows, colWidths=widths, repeatRows=1)
        table.setStyle(TableStyle(commands))
        return table

    def _draw_header(self, canvas_obj: canvas.Canvas, doc: Any) -> None:
        canvas_obj.saveState()
        top = self.page_height
        canvas_obj.setFillColor(HEADER_BLUE)
        canvas_obj.rect(0, top - self.header_height, self.page_width, self.header_height, stroke=0, fill=1)

        canvas_obj.setFillColor(colors.white)
        canvas_obj.setFont("Helvetica-Bold", 20)
        canvas_obj.drawString(self.margin, top - 0.45 * inch, self.show.title)
        if self.show.author:
            canvas_obj.setFont("Helvetica", 12)
            canvas_obj.drawString(self.margin, top - 0.72 * inch, f"by {self.show.author}")

        if self.audience == "actor" and self.show.role_name:
            role_text = (
                f"Understudy - {self.show.role_name}" if self.show.is_understudy else self.show.role_name
            )
            canvas_obj.setFont("Helvetica-Bold", 14)
            canvas_obj.drawRightString(self.page_width - self.margin, top - 0.45 * inch, role_text)
            canvas_obj.setFont("Helvetica", 10)
            canvas_obj.drawRightString(self.page_width - self.margin, top - 0.68 * inch, self.actor_name)
        canvas_obj.restoreState()

    def generate(self, events: Iterable[CalendarEvent]) -> bytes:
        """Render the calendar and return PDF bytes."""
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(letter),
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"{self.show.title} Calendar",
        )

        story: list[Any] = [Spacer(1, self.header_height)]
        months = self.group_by_month(events)
        for month, month_events in months.items():
            story.append(KeepTogether([Paragraph(escape(month), self.month_style), self._month_table(month_events)]))
            story.append(Spacer(1, 0.2 * inch))

        generated = now_utc().astimezone(self.zone).strftime("%a %b %d %Y")
        doc.build(
            story,
            onFirstPage=self._draw_header,
            canvasmaker=functools.partial(NumberedCanvas, footer_left=f"Generated on {generated}"),
        )

        pdf_bytes = buffer.getvalue()
        buffer.close()
        logger.info("Generated calendar PDF for %r: %d months, %d bytes", self.show.title, len(months), len(pdf_bytes))
        return pdf_bytes


class ResumePdfBuilder:
    """One-column actor resume with optional watermark and branding footer."""

    def __init__(
        self,
        branding: str = DEFAULT_BRANDING,
        watermark: Optional[WatermarkSettings] = None,
        logo_timeout: float = 10.0,
    ):
        self.branding = branding
        self.watermark = watermark
        self.logo_timeout = logo_timeout

        self.page_width, self.page_height = letter
        self.margin = 0.75 * inch
        self._logo: Optional[ImageReader] = None

        styles = getSampleStyleSheet()
        self.name_style = ParagraphStyle(
            "ResumeName", parent=styles["Title"], fontSize=24, alignment=TA_CENTER, spaceAfter=4
        )
        self.contact_style = ParagraphStyle(
            "ResumeContact", parent=styles["Normal"], fontSize=10, alignment=TA_CENTER, spaceAfter=8
        )
        self.section_style = ParagraphStyle(
            "ResumeSection", parent=styles["Heading3"], fontSize=11, spaceBefore=10, spaceAfter=4
        )
        self.body_style = ParagraphStyle("ResumeBody", parent=styles["Normal"], fontSize=10, leading=13)
        self.credit_title_style = ParagraphStyle(
            "CreditTitle", parent=self.body_style, fontName="Helvetica-Bold"
        )
        self.credit_detail_style = ParagraphStyle(
            "CreditDetail", parent=self.body_style, fontSize=9, leftIndent=0.15 * inch
        )

    def _load_logo(self) -> Optional[ImageReader]:
        if self.watermark is None:
            return None
        data = self.watermark.logo_bytes
        if data is None and self.watermark.logo_url:
            data = fetch_logo(self.watermark.logo_url, self.logo_timeout)
        if not data:
            return None
        try:
            return ImageReader(io.BytesIO(data))
        except OSError as e:
            logger.warning("Watermark logo could not be decoded: %s", e)
            return None

    def _draw_watermark(self, canvas_obj: canvas.Canvas) -> None:
        watermark = self.watermark
        if watermark is None:
            return

        canvas_obj.saveState()
        canvas_obj.setFillAlpha(watermark.opacity)
        if self._logo is not None:
            image_width, image_height = self._logo.getSize()
            width = self.page_width * 0.5
            height = width * image_height / image_width
            canvas_obj.drawImage(
                self._logo,
                (self.page_width - width) / 2,
                (self.page_height - height) / 2,
                width=width,
                height=height,
                mask="auto",
            )
        elif watermark.text:
            canvas_obj.setFillColor(colors.grey)
            canvas_obj.setFont("Helvetica-Bold", 28)
            canvas_obj.translate(self.page_width / 2, self.page_height / 2)
            canvas_obj.rotate(45)
            step_x, step_y = 3.2 * inch, 1.6 * inch
            for row in range(-5, 6):
                for col in range(-3, 4):
                    canvas_obj.drawCentredString(col * step_x, row * step_y, watermark.text)
        canvas_obj.restoreState()

    def _decorate_page(self, canvas_obj: canvas.Canvas, doc: Any) -> None:
        self._draw_watermark(canvas_obj)
        canvas_obj.saveState()
        canvas_obj.setFont("Helvetica-Oblique", 8)
        canvas_obj.setFillColor(FOOTER_GRAY)
        canvas_obj.drawCentredString(self.page_width / 2, 0.4 * inch, self.branding)
        canvas_obj.restoreState()

    def _credit(self, credit: CastingCredit, verified: bool) -> KeepTogether:
        title = credit.show_name or "Untitled Production"
        role = credit.role or "Role not specified"
        if credit.is_understudy:
            role = f"{role} (Understudy)"
        details = " • ".join(d for d in (credit.company_name, credit.date_of_production) if d)

        flowables: list[Any] = [
            Paragraph((CHECK_MARK if verified else "") + escape(title), self.credit_title_style),
            Paragraph(f"<i>{escape(role)}</i>", self.credit_detail_style),
        ]
        if details:
            flowables.append(Paragraph(escape(details), self.credit_detail_style))
        flowables.append(Spacer(1, 0.1 * inch))
        return KeepTogether(flowables)

    def _section(self, heading: str, body: list[Any]) -> list[Any]:
        # Heading always travels with the first entry
        return [
            CondPageBreak(0.5 * inch),
            KeepTogether([Paragraph(heading, self.section_style), body[0]]),
            *body[1:],
        ]

    def generate(self, resume: ResumeData) -> bytes:
        """Render the resume and return PDF bytes."""
        self._logo = self._load_logo()
        profile = resume.profile

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=f"{profile.full_name} Resume",
        )

        story: list[Any] = [Paragraph(escape(profile.full_name), self.name_style)]
        contact = [c for c in (profile.email, profile.location) if c]
        if contact:
            story.append(Paragraph(escape(" • ".join(contact)), self.contact_style))
        story.append(HRFlowable(width="100%", thickness=0.75, color=colors.black, spaceAfter=6))

        if profile.description:
            story.extend(self._section("ABOUT", [Paragraph(escape(profile.description), self.body_style)]))
        if profile.skills:
            story.extend(
                self._section("SKILLS", [Paragraph(escape(" • ".join(profile.skills)), self.body_style)])
            )
        if resume.casting_history:
            story.extend(
                self._section(
                    "CASTING HISTORY", [self._credit(credit, verified=True) for credit in resume.casting_history]
                )
            )
        if resume.manual_credits:
            story.extend(
                self._section(
                    "ADDITIONAL CREDITS",
                    [self._credit(credit, verified=False) for credit in resume.manual_credits],
                )
            )

        doc.build(story, onFirstPage=self._decorate_page, onLaterPages=self._decorate_page)

        pdf_bytes = buffer.getvalue()
        buffer.close()
        logger.info("Generated resume PDF for %r (%d bytes)", profile.full_name, len(pdf_bytes))
        return pdf_bytes


def build_calendar_pdf(
    events: Iterable[CalendarEvent],
    show: ShowDetails,
    actor_name: str = "",
    audience: str = "actor",
    tz_name: str = DEFAULT_CALENDAR_TIMEZONE,
) -> bytes:
    return CalendarPdfBuilder(show, actor_name, audience, tz_name).generate(events)


def build_resume_pdf(
    resume: ResumeData,
    branding: str = DEFAULT_BRANDING,
    watermark: Optional[WatermarkSettings] = None,
    logo_timeout: float = 10.0,
) -> bytes:
    return ResumePdfBuilder(branding, watermark, logo_timeout).generate(resume)


def resume_filename(full_name: str) -> str:
    return re.sub(r"\s+", "_", full_name.strip()) + "_Resume.pdf"


def calendar_pdf_filename(title: str) -> str:
    sanitized = re.sub(r"[^A-Za-z0-9]+", "_", title).strip("_") or "calendar"
    return f"{sanitized}_calendar.pdf"
