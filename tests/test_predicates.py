import unittest

from piggy_core.exceptions import ValidationError
from piggy_core.models import Expense
from piggy_core.predicates import (
    CategoryIs,
    DateOnOrAfter,
    DateOnOrBefore,
    FilterSpec,
    Predicate,
    SortOrder,
    build_predicate,
)


def make_expense(expense_id, category="Food", date="2024-01-15", amount=10.0):
    return Expense(
        id=expense_id,
        description=f"Expense {expense_id}",
        amount=amount,
        category=category,
        date=date,
        payment_method="Card",
    )


class TestBuildPredicate(unittest.TestCase):
    def test_empty_predicate_matches_everything(self):
        predicate = build_predicate()
        self.assertEqual(predicate.clauses, ())
        self.assertTrue(predicate.matches(make_expense(1)))

    def test_clauses_are_typed(self):
        predicate = build_predicate("Food", "2024-01-01", "2024-01-31")
        self.assertEqual(
            predicate.clauses,
            (CategoryIs("Food"), DateOnOrAfter("2024-01-01"), DateOnOrBefore("2024-01-31")),
        )

    def test_category_clause(self):
        predicate = build_predicate(category="Food")
        self.assertTrue(predicate(make_expense(1, category="Food")))
        self.assertFalse(predicate(make_expense(2, category="Transport")))

    def test_date_bounds_are_inclusive(self):
        predicate = build_predicate(start_date="2024-01-01", end_date="2024-01-31")
        self.assertTrue(predicate(make_expense(1, date="2024-01-01")))
        self.assertTrue(predicate(make_expense(2, date="2024-01-31")))
        self.assertFalse(predicate(make_expense(3, date="2023-12-31")))
        self.assertFalse(predicate(make_expense(4, date="2024-02-01")))

    def test_open_ended_ranges(self):
        self.assertTrue(build_predicate(start_date="2024-01-01")(make_expense(1, date="2030-06-01")))
        self.assertTrue(build_predicate(end_date="2024-01-01")(make_expense(1, date="1999-06-01")))

    def test_predicates_combine(self):
        combined = build_predicate(category="Food") & build_predicate(end_date="2024-01-31")
        self.assertIsInstance(combined, Predicate)
        self.assertTrue(combined(make_expense(1, date="2024-01-15")))
        self.assertFalse(combined(make_expense(2, date="2024-02-15")))
        self.assertFalse(combined(make_expense(3, category="Bills", date="2024-01-15")))


class TestSortOrder(unittest.TestCase):
    def test_parse_defaults_to_date(self):
        self.assertIs(SortOrder.parse("amount"), SortOrder.AMOUNT)
        self.assertIs(SortOrder.parse("date"), SortOrder.DATE)
        self.assertIs(SortOrder.parse(None), SortOrder.DATE)
        self.assertIs(SortOrder.parse("bogus"), SortOrder.DATE)

    def test_date_order_newest_first_with_id_tiebreak(self):
        expenses = [
            make_expense(1, date="2024-01-15"),
            make_expense(2, date="2024-02-01"),
            make_expense(3, date="2024-01-15"),
        ]
        ordered = SortOrder.DATE.sort(expenses)
        self.assertEqual([expense.id for expense in ordered], [2, 3, 1])

    def test_amount_order_descending(self):
        expenses = [
            make_expense(1, amount=5.0),
            make_expense(2, amount=50.0),
            make_expense(3, amount=15.5),
        ]
        ordered = SortOrder.AMOUNT.sort(expenses)
        self.assertEqual([expense.amount for expense in ordered], [50.0, 15.5, 5.0])


class TestFilterSpec(unittest.TestCase):
    def test_blank_parameters_are_ignored(self):
        spec = FilterSpec.from_params({"category": "", "startDate": None, "endDate": "", "sortBy": ""})
        self.assertEqual(spec, FilterSpec())
        self.assertEqual(spec.predicate(), Predicate())

    def test_parameters_map_to_predicate(self):
        spec = FilterSpec.from_params(
            {"category": "Food", "startDate": "2024-01-01", "endDate": "2024-01-31", "sortBy": "amount"}
        )
        self.assertEqual(spec.sort_by, SortOrder.AMOUNT)
        self.assertEqual(spec.predicate(), build_predicate("Food", "2024-01-01", "2024-01-31"))

    def test_invalid_dates_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            FilterSpec.from_params({"startDate": "yesterday", "endDate": "2024-99-01"})
        self.assertEqual(ctx.exception.errors, ["Invalid startDate.", "Invalid endDate."])


if __name__ == "__main__":
    unittest.main()
