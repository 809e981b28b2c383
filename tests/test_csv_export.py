from datetime import date, datetime

from nexus.core import csv_export
from nexus.models.enums import PaymentMethod


class TestFormatting:
    def test_money_and_percent(self):
        assert csv_export.format_money(12) == "12.00"
        assert csv_export.format_money(0.005) == "0.01"
        assert csv_export.format_percent(33.333) == "33.3"

    def test_dates(self):
        assert csv_export.format_date(date(2025, 3, 7)) == "03/07/2025"
        assert csv_export.format_date(datetime(2025, 12, 31, 23, 59)) == "12/31/2025"
        assert csv_export.format_date(None) == ""

    def test_humanize(self):
        assert csv_export.humanize(PaymentMethod.MOBILE_MONEY) == "Mobile Money"
        assert csv_export.humanize("out_of_stock") == "Out Of Stock"
        assert csv_export.humanize(None) == ""

    def test_money_header_uses_currency(self):
        assert csv_export.money_header("Amount") == "Amount (R)"

    def test_export_filename(self):
        assert csv_export.export_filename("inventory", on=date(2025, 1, 9)) == "inventory-export-2025-01-09.csv"


class TestRenderCsv:
    def test_quoting_and_line_endings(self):
        text = csv_export.render_csv(
            ["Name", "Notes"],
            [["Plain", None], ["Comma, here", 'He said "hi"'], ["Multi\nline", 3]],
        )

        assert text == (
            "Name,Notes\n"
            "Plain,\n"
            '"Comma, here","He said ""hi"""\n'
            '"Multi\nline",3\n'
        )

    def test_header_only(self):
        assert csv_export.render_csv(["A", "B"], []) == "A,B\n"
