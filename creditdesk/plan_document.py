"""Payment plan ("plan de pagos") document for CreditDesk.

This module turns a credit's terms and the client/product metadata into a
presentation model, then renders it as HTML, prints it to PDF through a Qt
web view (falling back to HTML) or writes it to an Excel workbook.
"""
import html
import os
import re
from datetime import date, datetime

import pandas as pd
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from creditdesk.amortization import build_schedule
from creditdesk.config import (
    DEFAULT_MONTHLY_RATE, DEFAULT_ANNUAL_RATE, DEFAULT_TERM_MONTHS,
    DEFAULT_CITY, DEFAULT_PRODUCT_NAME, NOT_DELIVERED_LABEL,
    UNKNOWN_PLACEHOLDER, MISSING_CODE_PLACEHOLDER, PDF_MARGIN_MM, DATE_FORMAT_DISPLAY
)
from creditdesk.data_structures import (
    CreditInput, PlanDocumentInput, PlanPresentation, PlanRow, PlanConfig
)
from creditdesk.exceptions import (
    CreditDeskError, DocumentGenerationError, InvalidCreditInputError
)
from creditdesk.logger import get_logger
from creditdesk.money import format_cop, format_percent
from creditdesk.result import Result, ErrorType

logger = get_logger(__name__)

SCHEDULE_COLUMNS = [
    "Periodo", "Fecha", "Saldo inicial", "Intereses",
    "Abono a capital", "Cuota", "Saldo final"
]


class PlanDocumentProjector:
    """Generates payment plan documents from amortization schedules.

    The projector does not validate the client or product metadata: absent
    values are shown with a placeholder.
    """

    def __init__(self, printer_view_getter=None):
        """Initialize PlanDocumentProjector.

        Args:
            printer_view_getter: Optional callable that returns a QWebEngineView
                for PDF generation. If None, HTML fallback is used.
        """
        self._get_printer_view = printer_view_getter

    @staticmethod
    def _text(value, placeholder=UNKNOWN_PLACEHOLDER):
        """Display value for optional metadata; empty values use the placeholder."""
        if value is None:
            return placeholder
        text = str(value).strip()
        return text or placeholder

    @staticmethod
    def _parse_date(value, date_format=DATE_FORMAT_DISPLAY, field="start_date"):
        """Accept a date, a datetime or a string. None stays None.

        Strings are tried in the display format, then ISO 8601, then read
        day-first by dateutil ("05/02/2026" is 5 February).

        Raises:
            InvalidCreditInputError: If the string is not a date.
        """
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        text = str(value).strip()
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            pass
        try:
            return date_parser.isoparse(text).date()
        except ValueError:
            pass
        try:
            return date_parser.parse(text, dayfirst=True).date()
        except (ValueError, OverflowError):
            raise InvalidCreditInputError(field, value, "is not a valid date")

    @staticmethod
    def _sanitize_filename(name):
        """Sanitize filename to prevent OS issues."""
        if not name:
            name = "credito"

        safe = "".join(c for c in str(name) if c.isalnum() or c in (' ', '-', '_'))
        safe = safe.strip()

        if not safe:
            safe = "credito"

        return safe[:100]

    @classmethod
    def default_filename(cls, code=None, extension="pdf"):
        """File name used for downloads: plan_pagos_<code>.pdf."""
        stem = cls._sanitize_filename(code) if code not in (None, "") else "credito"
        return f"plan_pagos_{stem}.{extension}"

    def _format_delivery(self, value, config: PlanConfig):
        if value is None:
            return NOT_DELIVERED_LABEL
        if isinstance(value, (date, datetime)):
            return value.strftime(config.date_format)
        return self._text(value)

    def prepare_presentation(self, doc_input: PlanDocumentInput, config: PlanConfig = None,
                             today: date = None) -> PlanPresentation:
        """Prepare presentation data model from the raw plan input.

        Args:
            doc_input: Client, product and credit terms.
            config: Optional PlanConfig (date format).
            today: Document date. Defaults to the current date.

        Raises:
            InvalidCreditInputError: If the credit terms cannot be amortized
                or the start date cannot be read.
        """
        if config is None:
            config = PlanConfig()
        today = today or date.today()

        credit = doc_input.credit
        product = doc_input.product
        client = doc_input.client

        product_value = float(product.value if product.value is not None else 0)
        down_payment = float(credit.down_payment if credit.down_payment is not None else 0)
        term_months = credit.term_months if credit.term_months is not None else DEFAULT_TERM_MONTHS
        monthly_rate = float(credit.monthly_rate if credit.monthly_rate is not None else DEFAULT_MONTHLY_RATE)
        annual_rate = float(credit.annual_rate if credit.annual_rate is not None else DEFAULT_ANNUAL_RATE)

        schedule = build_schedule(CreditInput(
            product_value=product_value,
            down_payment=down_payment,
            term_months=term_months,
            monthly_rate=monthly_rate
        ))

        start = self._parse_date(credit.start_date, config.date_format) or today
        rows = [
            PlanRow(
                period=row.period,
                due_date=(start + relativedelta(months=row.period)).strftime(config.date_format),
                opening_balance=row.opening_balance,
                interest=row.interest,
                principal_paid=row.principal_paid,
                installment=row.installment,
                closing_balance=row.closing_balance
            )
            for row in schedule.rows
        ]

        code = doc_input.code
        return PlanPresentation(
            code=str(code) if code is not None else MISSING_CODE_PLACEHOLDER,
            city=doc_input.city or DEFAULT_CITY,
            document_date=today.strftime(config.date_format),
            logo_path=doc_input.logo_path,
            client_name=self._text(client.name),
            client_document=self._text(client.document),
            client_address=self._text(client.address),
            client_phone=self._text(client.phone),
            product_name=product.name or DEFAULT_PRODUCT_NAME,
            product_value=product_value,
            down_payment=down_payment,
            financed_amount=schedule.financed_amount,
            term_months=term_months,
            monthly_rate=monthly_rate,
            annual_rate=annual_rate,
            installment=schedule.installment,
            delivery_date=self._format_delivery(credit.delivery_date, config),
            rows=rows,
            total_interest=schedule.total_interest,
            total_paid=schedule.total_paid
        )

    def schedule_dataframe(self, presentation: PlanPresentation) -> pd.DataFrame:
        """Amortization table of a presentation, with display column names."""
        return pd.DataFrame(
            [[r.period, r.due_date, r.opening_balance, r.interest,
              r.principal_paid, r.installment, r.closing_balance]
             for r in presentation.rows],
            columns=SCHEDULE_COLUMNS
        )

    def render_html(self, presentation: PlanPresentation, config: PlanConfig = None) -> str:
        """Generate HTML content for the payment plan.

        Returns:
            HTML content string.
        """
        if config is None:
            config = PlanConfig()
        esc = html.escape
        p = presentation

        doc = """<!DOCTYPE html>
<html><head><meta charset="utf-8">
<style>
    @page { size: A4; margin: 12mm; }
    body { font-family: Helvetica, Arial, sans-serif; font-size: 9.5px; color: #111; }
    .header { display: flex; align-items: center; margin-bottom: 16px; }
    .logo { width: 72px; height: 72px; object-fit: contain; margin-right: 16px; }
    .header h1 { font-size: 22px; margin: 0; letter-spacing: 0.2px; }
    .meta { font-size: 9px; margin-top: 2px; }
    hr { border: 0; height: 1px; background: #E5E7EB; margin: 8px 0 12px 0; }
    table { width: 100%; border-collapse: collapse; margin-bottom: 12px; }
    th { background: #F3F4F6; text-align: left; }
    th, td { border: 1px solid #E5E7EB; padding: 5px 8px; }
    td.num { text-align: right; }
    .info td { width: 33%; }
    .foot { margin-top: 18px; font-size: 9px; line-height: 1.4; }
</style>
</head><body>"""

        logo_html = f'<img src="{esc(p.logo_path)}" class="logo">' if p.logo_path else ''
        doc += f"""<div class="header">
    {logo_html}
    <div>
        <h1>{esc(config.custom_title)}</h1>
        <div class="meta">Código: {esc(p.code)}</div>
        <div class="meta">Fecha: {esc(p.document_date)}</div>
        <div class="meta">Ciudad: {esc(p.city)}</div>
    </div>
</div>
<hr>
<table class="info">
<tr><td colspan="2">Nombre: {esc(p.client_name)}</td><td>Cédula/Nit: {esc(p.client_document)}</td></tr>
<tr><td colspan="2">Dirección: {esc(p.client_address)}</td><td>Teléfono: {esc(p.client_phone)}</td></tr>
<tr><td colspan="2">Producto: {esc(p.product_name)}</td><td>Valor: {format_cop(p.product_value)}</td></tr>
<tr><td>Cuota inicial: {format_cop(p.down_payment)}</td><td>Valor a financiar: {format_cop(p.financed_amount)}</td><td>Plazo(Meses): {p.term_months}</td></tr>
<tr><td>TASA mensual efectiva: {format_percent(p.monthly_rate)}</td><td>TASA efectiva anual: {format_percent(p.annual_rate)}</td><td>Cuota mensual: {format_cop(p.installment)}</td></tr>
<tr><td>Fecha entrega: {esc(p.delivery_date)}</td><td colspan="2"></td></tr>
</table>"""

        date_header = "<th>Fecha</th>" if config.show_due_dates else ""
        doc += f"""<table class="schedule"><thead><tr><th>Periodo</th>{date_header}<th>Saldo inicial</th><th>Intereses</th>
<th>Abono a capital</th><th>Cuota</th><th>Saldo final</th></tr></thead><tbody>"""
        for row in p.rows:
            date_cell = f"<td>{esc(row.due_date)}</td>" if config.show_due_dates else ""
            doc += (f"<tr><td>{row.period}</td>{date_cell}"
                    f"<td class='num'>{format_cop(row.opening_balance)}</td>"
                    f"<td class='num'>{format_cop(row.interest)}</td>"
                    f"<td class='num'>{format_cop(row.principal_paid)}</td>"
                    f"<td class='num'>{format_cop(row.installment)}</td>"
                    f"<td class='num'>{format_cop(row.closing_balance)}</td></tr>")
        doc += "</tbody></table>"

        doc += f"""<table><tr><th>Total intereses</th><th>Total pagado</th></tr>
<tr><td class="num">{format_cop(p.total_interest)}</td><td class="num">{format_cop(p.total_paid)}</td></tr></table>
<div class="foot">
    <div>Firma del cliente: _____________________________</div>
    <div style="margin-top:10px;">{esc(config.custom_footer)}</div>
</div>
</body></html>"""

        return doc

    def _print_to_pdf(self, html_content, filepath):
        """Print HTML to a PDF file through the injected QWebEngineView.

        Raises:
            DocumentGenerationError: If no web view is available or printing fails.
        """
        from PyQt6.QtCore import QMarginsF, QEventLoop
        from PyQt6.QtGui import QPageLayout, QPageSize

        web_view = self._get_printer_view() if self._get_printer_view else None
        if web_view is None:
            raise DocumentGenerationError("QWebEngineView not available")

        loop = QEventLoop()
        try:
            web_view.loadFinished.disconnect()
        except TypeError:
            pass  # nothing connected yet
        web_view.loadFinished.connect(loop.quit)
        web_view.setHtml(html_content)
        loop.exec()

        page_layout = QPageLayout(
            QPageSize(QPageSize.PageSizeId.A4),
            QPageLayout.Orientation.Portrait,
            QMarginsF(PDF_MARGIN_MM, PDF_MARGIN_MM, PDF_MARGIN_MM, PDF_MARGIN_MM)
        )

        outcome = {"success": False}

        def on_pdf_done(filepath_out, success):
            outcome["success"] = success
            loop.quit()

        try:
            web_view.page().pdfPrintingFinished.disconnect()
        except TypeError:
            pass
        web_view.page().pdfPrintingFinished.connect(on_pdf_done)
        web_view.page().printToPdf(filepath, page_layout)
        loop.exec()

        if not outcome["success"]:
            raise DocumentGenerationError("PDF printing failed", {"path": filepath})

    def generate_pdf(self, doc_input: PlanDocumentInput, folder, config: PlanConfig = None,
                     filename: str = None) -> Result:
        """Generate and save the payment plan as a PDF file.

        Args:
            doc_input: Client, product and credit terms.
            folder: Output folder path.
            config: Optional PlanConfig.
            filename: Optional file name. Defaults to plan_pagos_<code>.pdf.

        Returns:
            Result with the written path; mode is "pdf" or "html" when the
            HTML fallback was used.
        """
        if config is None:
            config = PlanConfig()

        try:
            presentation = self.prepare_presentation(doc_input, config)
        except CreditDeskError as e:
            logger.warning(f"Payment plan validation failed: {e}")
            return Result.fail(str(e), ErrorType.VALIDATION)

        content = self.render_html(presentation, config)
        filepath = os.path.join(folder, filename or self.default_filename(doc_input.code))

        try:
            self._print_to_pdf(content, filepath)
        except Exception as e:
            if not config.allow_html_fallback:
                logger.warning(f"PDF generation failed: {e}. Fallback disabled.")
                return Result.fail(f"PDF generation failed: {e}", ErrorType.RENDER)

            logger.warning(f"PDF generation failed: {e}, falling back to HTML")
            filepath = re.sub(r"\.pdf$", "", filepath) + ".html"
            try:
                with open(filepath, 'w', encoding='utf-8') as f:
                    f.write(content)
            except OSError as io_error:
                return Result.fail(f"Could not write {filepath}: {io_error}", ErrorType.IO)
            return Result.ok(filepath, mode="html")

        logger.info(f"Payment plan saved to {filepath}")
        return Result.ok(filepath, mode="pdf")

    def generate_excel(self, doc_input: PlanDocumentInput, folder, config: PlanConfig = None,
                       filename: str = None) -> Result:
        """Generate and save the payment plan as an Excel file.

        Returns:
            Result with the written path.
        """
        if config is None:
            config = PlanConfig()

        try:
            presentation = self.prepare_presentation(doc_input, config)
        except CreditDeskError as e:
            logger.warning(f"Payment plan validation failed: {e}")
            return Result.fail(str(e), ErrorType.VALIDATION)

        path = os.path.join(folder, filename or self.default_filename(doc_input.code, "xlsx"))
        df = self.schedule_dataframe(presentation)
        if not config.show_due_dates:
            df = df.drop(columns=["Fecha"])

        try:
            with pd.ExcelWriter(path, engine='xlsxwriter') as writer:
                workbook = writer.book
                worksheet = workbook.add_worksheet("Plan de pagos")

                header_fmt = workbook.add_format({
                    'bold': True, 'font_size': 14, 'align': 'center',
                    'bg_color': '#1f2937', 'font_color': 'white'
                })
                label_fmt = workbook.add_format({'bold': True, 'border': 1, 'bg_color': '#f3f4f6'})
                cell_fmt = workbook.add_format({'border': 1})
                col_header_fmt = workbook.add_format({'bold': True, 'bg_color': '#f0f0f0', 'border': 1})
                currency_fmt = workbook.add_format({'border': 1, 'num_format': '"$" #,##0'})
                percent_fmt = workbook.add_format({'border': 1, 'num_format': '0.00%'})

                last_col = len(df.columns) - 1
                worksheet.merge_range(0, 0, 0, last_col,
                                      f"{config.custom_title} - {presentation.code}", header_fmt)
                worksheet.set_column(0, last_col, 16)

                info = [
                    ("Fecha", presentation.document_date, cell_fmt),
                    ("Ciudad", presentation.city, cell_fmt),
                    ("Nombre", presentation.client_name, cell_fmt),
                    ("Cédula/Nit", presentation.client_document, cell_fmt),
                    ("Dirección", presentation.client_address, cell_fmt),
                    ("Teléfono", presentation.client_phone, cell_fmt),
                    ("Producto", presentation.product_name, cell_fmt),
                    ("Valor", presentation.product_value, currency_fmt),
                    ("Cuota inicial", presentation.down_payment, currency_fmt),
                    ("Valor a financiar", presentation.financed_amount, currency_fmt),
                    ("Plazo (meses)", presentation.term_months, cell_fmt),
                    ("Tasa mensual", presentation.monthly_rate, percent_fmt),
                    ("Tasa anual", presentation.annual_rate, percent_fmt),
                    ("Cuota mensual", presentation.installment, currency_fmt),
                    ("Fecha entrega", presentation.delivery_date, cell_fmt),
                ]
                row_idx = 2
                for label, value, fmt in info:
                    worksheet.write(row_idx, 0, label, label_fmt)
                    worksheet.write(row_idx, 1, value, fmt)
                    row_idx += 1

                row_idx += 1
                for col, header in enumerate(df.columns):
                    worksheet.write(row_idx, col, header, col_header_fmt)
                row_idx += 1

                money_columns = {"Saldo inicial", "Intereses", "Abono a capital", "Cuota", "Saldo final"}
                for record in df.itertuples(index=False):
                    for col, header in enumerate(df.columns):
                        fmt = currency_fmt if header in money_columns else cell_fmt
                        worksheet.write(row_idx, col, record[col], fmt)
                    row_idx += 1

        except Exception as e:
            logger.warning(f"Excel generation failed: {e}")
            return Result.fail(f"Excel generation failed: {e}", ErrorType.IO)

        logger.info(f"Payment plan workbook saved to {path}")
        return Result.ok(path, mode="xlsx")
