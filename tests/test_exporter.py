import unittest

from piggy_core.exporter import CSV_HEADER, export_csv, format_amount
from piggy_core.models import Expense


def make_expense(**overrides):
    fields = {
        "id": 1,
        "description": "Test expense",
        "amount": 25.50,
        "category": "Food",
        "date": "2024-01-15",
        "payment_method": "Card",
        "recurring": 1,
    }
    fields.update(overrides)
    return Expense(**fields)


class TestExportCsv(unittest.TestCase):
    def test_single_record(self):
        text = export_csv([make_expense()])
        self.assertEqual(
            text.split("\n"),
            ["id,description,amount,category,date,payment_method",
             '1,"Test expense",25.5,Food,2024-01-15,Card'],
        )

    def test_empty_export_is_header_only(self):
        self.assertEqual(export_csv([]), CSV_HEADER)

    def test_rows_follow_given_order(self):
        rows = export_csv([make_expense(id=3), make_expense(id=1), make_expense(id=2)]).split("\n")[1:]
        self.assertEqual([row.split(",")[0] for row in rows], ["3", "1", "2"])

    def test_description_with_comma_is_quoted(self):
        row = export_csv([make_expense(description="Pizza, drinks")]).split("\n")[1]
        self.assertEqual(row, '1,"Pizza, drinks",25.5,Food,2024-01-15,Card')

    def test_embedded_quotes_left_unescaped(self):
        row = export_csv([make_expense(description='The "big" shop')]).split("\n")[1]
        self.assertEqual(row, '1,"The "big" shop",25.5,Food,2024-01-15,Card')

    def test_recurring_not_exported(self):
        self.assertNotIn("recurring", export_csv([make_expense()]))

    def test_payment_method_with_space(self):
        row = export_csv([make_expense(payment_method="Bank Transfer")]).split("\n")[1]
        self.assertTrue(row.endswith(",Bank Transfer"))


class TestFormatAmount(unittest.TestCase):
    def test_shortest_form(self):
        self.assertEqual(format_amount(25.5), "25.5")
        self.assertEqual(format_amount(40.0), "40")
        self.assertEqual(format_amount(0.1), "0.1")
        self.assertEqual(format_amount(1234.56), "1234.56")

    def test_small_amounts_not_in_exponent_form(self):
        self.assertEqual(format_amount(0.00001), "0.00001")
        self.assertEqual(format_amount(1e-07), "0.0000001")
        self.assertEqual(format_amount(2.5e-05), "0.000025")


if __name__ == "__main__":
    unittest.main()
