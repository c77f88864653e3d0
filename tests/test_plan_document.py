import os
import sys
import shutil
import tempfile
import unittest
from datetime import date
from unittest.mock import MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from creditdesk.data_structures import (
    ClientInfo, ProductInfo, CreditTerms, PlanDocumentInput, PlanConfig
)
from creditdesk.exceptions import InvalidCreditInputError
from creditdesk.plan_document import PlanDocumentProjector, SCHEDULE_COLUMNS
from creditdesk.result import ErrorType

TODAY = date(2026, 3, 10)


class TestPlanPresentation(unittest.TestCase):

    def setUp(self):
        self.projector = PlanDocumentProjector()
        self.doc_input = PlanDocumentInput(
            client=ClientInfo(name="Ana Gómez", document="1.144.000", address="Cra 1 # 2-3", phone="3001234567"),
            product=ProductInfo(name="Moto 125", value=1_000_000),
            credit=CreditTerms(down_payment=0, term_months=3, monthly_rate=0.0196,
                               start_date="2026-01-15", delivery_date=date(2026, 1, 20)),
            code="SOL-77",
            city="Palmira"
        )

    def test_schedule_matches_engine(self):
        p = self.projector.prepare_presentation(self.doc_input, today=TODAY)
        self.assertEqual(p.installment, 346_485)
        self.assertEqual(p.financed_amount, 1_000_000)
        self.assertEqual([r.interest for r in p.rows], [19_600, 13_193, 6_661])
        self.assertEqual(p.rows[-1].closing_balance, 0)

    def test_due_dates_one_month_apart(self):
        p = self.projector.prepare_presentation(self.doc_input, today=TODAY)
        self.assertEqual([r.due_date for r in p.rows], ["15/02/2026", "15/03/2026", "15/04/2026"])

    def test_metadata_passthrough(self):
        p = self.projector.prepare_presentation(self.doc_input, today=TODAY)
        self.assertEqual(p.code, "SOL-77")
        self.assertEqual(p.city, "Palmira")
        self.assertEqual(p.client_name, "Ana Gómez")
        self.assertEqual(p.product_name, "Moto 125")
        self.assertEqual(p.delivery_date, "20/01/2026")
        self.assertEqual(p.document_date, "10/03/2026")

    def test_defaults(self):
        """Missing terms fall back to the standard plan values."""
        doc_input = PlanDocumentInput(product=ProductInfo(value=500_000))
        p = self.projector.prepare_presentation(doc_input, today=TODAY)
        self.assertEqual(p.monthly_rate, 0.0196)
        self.assertEqual(p.annual_rate, 0.2352)
        self.assertEqual(p.term_months, 1)
        self.assertEqual(len(p.rows), 1)
        self.assertEqual(p.rows[0].principal_paid, 500_000)
        self.assertEqual(p.city, "Cali")
        self.assertEqual(p.product_name, "Motocicleta")
        self.assertEqual(p.code, "-")
        self.assertEqual(p.client_name, "—")
        self.assertEqual(p.client_phone, "—")
        self.assertEqual(p.delivery_date, "No entregado")
        self.assertEqual(p.rows[0].due_date, "10/04/2026")

    def test_start_date_is_day_first(self):
        """Day-first strings: "05/02/2026" is 5 February, as the plan prints it."""
        self.doc_input.credit.start_date = "05/02/2026"
        self.doc_input.credit.term_months = 2
        p = self.projector.prepare_presentation(self.doc_input, today=TODAY)
        self.assertEqual([r.due_date for r in p.rows], ["05/03/2026", "05/04/2026"])

    def test_start_date_formats(self):
        self.doc_input.credit.term_months = 1
        for value in ("2026-02-05", "5 feb 2026", date(2026, 2, 5)):
            with self.subTest(value=value):
                self.doc_input.credit.start_date = value
                p = self.projector.prepare_presentation(self.doc_input, today=TODAY)
                self.assertEqual(p.rows[0].due_date, "05/03/2026")

    def test_unreadable_start_date_rejected(self):
        self.doc_input.credit.start_date = "pendiente"
        with self.assertRaises(InvalidCreditInputError) as ctx:
            self.projector.prepare_presentation(self.doc_input, today=TODAY)
        self.assertEqual(ctx.exception.details["field"], "start_date")

    def test_empty_delivery_date(self):
        doc_input = PlanDocumentInput(credit=CreditTerms(delivery_date=""))
        p = self.projector.prepare_presentation(doc_input, today=TODAY)
        self.assertEqual(p.delivery_date, "—")

    def test_schedule_dataframe(self):
        p = self.projector.prepare_presentation(self.doc_input, today=TODAY)
        df = self.projector.schedule_dataframe(p)
        self.assertEqual(list(df.columns), SCHEDULE_COLUMNS)
        self.assertEqual(len(df), 3)
        self.assertEqual(df["Cuota"].iloc[0], 346_485)


class TestRenderHtml(unittest.TestCase):

    def setUp(self):
        self.projector = PlanDocumentProjector()

    def test_contains_header_and_client(self):
        doc_input = PlanDocumentInput(client=ClientInfo(name="Luis Pérez"),
                                      product=ProductInfo(value=2_000_000),
                                      credit=CreditTerms(term_months=6))
        content = self.projector.render_html(self.projector.prepare_presentation(doc_input, today=TODAY))
        self.assertIn("PLAN DE PAGOS", content)
        self.assertIn("Luis Pérez", content)
        self.assertIn("$ 2.000.000", content)
        self.assertIn("1.96%", content)
        self.assertIn("NIT. 901155548-8", content)

    def test_escapes_metadata(self):
        doc_input = PlanDocumentInput(client=ClientInfo(name="<script>x</script>"))
        content = self.projector.render_html(self.projector.prepare_presentation(doc_input, today=TODAY))
        self.assertNotIn("<script>", content)
        self.assertIn("&lt;script&gt;", content)

    def test_custom_title_and_no_dates(self):
        config = PlanConfig(custom_title="Simulación", show_due_dates=False)
        p = self.projector.prepare_presentation(PlanDocumentInput(), config, today=TODAY)
        content = self.projector.render_html(p, config)
        self.assertIn("Simulación", content)
        self.assertNotIn("<th>Fecha</th>", content)


class TestFilenames(unittest.TestCase):

    def test_default_filename(self):
        self.assertEqual(PlanDocumentProjector.default_filename("SOL-77"), "plan_pagos_SOL-77.pdf")
        self.assertEqual(PlanDocumentProjector.default_filename(None), "plan_pagos_credito.pdf")
        self.assertEqual(PlanDocumentProjector.default_filename(""), "plan_pagos_credito.pdf")
        self.assertEqual(PlanDocumentProjector.default_filename(42, "xlsx"), "plan_pagos_42.xlsx")

    def test_sanitize_filename(self):
        self.assertEqual(PlanDocumentProjector._sanitize_filename("a/b*c?"), "abc")
        self.assertEqual(PlanDocumentProjector._sanitize_filename("///"), "credito")
        self.assertEqual(len(PlanDocumentProjector._sanitize_filename("A" * 300)), 100)


class TestDocumentGeneration(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.mkdtemp()
        self.doc_input = PlanDocumentInput(
            product=ProductInfo(value=3_000_000),
            credit=CreditTerms(down_payment=500_000, term_months=12),
            code="ABC-1"
        )

    def tearDown(self):
        shutil.rmtree(self.folder, ignore_errors=True)

    def test_html_fallback_without_printer(self):
        """No web view available: the plan is saved as HTML."""
        projector = PlanDocumentProjector(printer_view_getter=None)
        result = projector.generate_pdf(self.doc_input, self.folder)

        self.assertTrue(result)
        self.assertEqual(result.mode, "html")
        self.assertEqual(os.path.basename(result.value), "plan_pagos_ABC-1.html")
        self.assertTrue(os.path.exists(result.unwrap()))
        with open(result.value, encoding='utf-8') as f:
            self.assertIn("PLAN DE PAGOS", f.read())

    def test_printer_getter_returning_none(self):
        getter = MagicMock(return_value=None)
        result = PlanDocumentProjector(getter).generate_pdf(self.doc_input, self.folder)
        self.assertEqual(result.mode, "html")

    def test_fallback_disabled(self):
        config = PlanConfig(allow_html_fallback=False)
        result = PlanDocumentProjector().generate_pdf(self.doc_input, self.folder, config)

        self.assertFalse(result)
        self.assertEqual(result.error_type, ErrorType.RENDER)
        self.assertIsNone(result.unwrap_or(None))
        with self.assertRaises(ValueError):
            result.unwrap()
        self.assertEqual(os.listdir(self.folder), [])

    def test_invalid_term(self):
        self.doc_input.credit.term_months = 0
        result = PlanDocumentProjector().generate_pdf(self.doc_input, self.folder)
        self.assertFalse(result)
        self.assertEqual(result.error_type, ErrorType.VALIDATION)
        self.assertIn("term_months", result.error)

    def test_generate_excel(self):
        result = PlanDocumentProjector().generate_excel(self.doc_input, self.folder)
        self.assertTrue(result)
        self.assertEqual(result.mode, "xlsx")
        self.assertTrue(result.value.endswith("plan_pagos_ABC-1.xlsx"))
        self.assertGreater(os.path.getsize(result.value), 0)

    def test_generate_excel_invalid_term(self):
        self.doc_input.credit.term_months = -1
        result = PlanDocumentProjector().generate_excel(self.doc_input, self.folder)
        self.assertEqual(result.error_type, ErrorType.VALIDATION)

    def test_unreadable_start_date_is_validation_failure(self):
        """A bad start date is reported through the Result, never raised."""
        self.doc_input.credit.start_date = "pendiente"
        projector = PlanDocumentProjector()
        for generate in (projector.generate_pdf, projector.generate_excel):
            with self.subTest(generate=generate.__name__):
                result = generate(self.doc_input, self.folder)
                self.assertFalse(result)
                self.assertEqual(result.error_type, ErrorType.VALIDATION)
                self.assertIn("start_date", result.error)
        self.assertEqual(os.listdir(self.folder), [])


if __name__ == "__main__":
    unittest.main()
