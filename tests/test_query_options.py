import unittest
from unittest.mock import patch

from pydantic import ValidationError

from docgate.models.user import User
from docgate.schemas.query import QueryOptions, SortClause
from docgate.services.query_errors import InvalidBetweenValueError, InvalidOperatorError
from docgate.services.query_options import build_query_options, group_query_params, parse_pagination
from tests.query_entities import Person


class GroupQueryParamsTests(unittest.TestCase):
    def test_repeated_names_keep_order(self):
        grouped = group_query_params([("sort", "-birthdate"), ("name", "ann"), ("sort", "username")])
        self.assertEqual(grouped, {"sort": ["-birthdate", "username"], "name": ["ann"]})


class SortTests(unittest.TestCase):
    def test_direction_prefix_and_order(self):
        options = build_query_options({"sort": ["-birthdate", "username"]}, User)
        self.assertEqual(
            options.sort,
            (SortClause(field="birthdate", dir="desc"), SortClause(field="username", dir="asc")),
        )

    def test_wire_names_map_to_storage_names(self):
        options = build_query_options({"sort": ["-birthdate", "displayName"]}, Person)
        self.assertEqual([(s.field, s.dir) for s in options.sort], [("birth_date", "desc"), ("display", "asc")])

    def test_unknown_names_pass_through_and_blanks_are_skipped(self):
        options = build_query_options({"sort": ["score", "-", ""]}, Person)
        self.assertEqual([(s.field, s.dir) for s in options.sort], [("score", "asc")])


class PaginationTests(unittest.TestCase):
    def test_page_and_size_become_skip_and_limit(self):
        options = build_query_options({"pageSize": ["5"], "page": ["3"]}, User)
        self.assertEqual(options.skip, 10)
        self.assertEqual(options.limit, 5)

    def test_malformed_values_fall_back_without_error(self):
        page = parse_pagination({"pageSize": ["abc"]})
        self.assertEqual((page.page, page.page_size), (1, 10))

        options = build_query_options({"pageSize": ["abc"], "page": ["x"]}, User)
        self.assertEqual((options.skip, options.limit), (0, 10))

    def test_each_value_falls_back_independently(self):
        page = parse_pagination({"pageSize": ["abc"], "page": ["4"]})
        self.assertEqual((page.page, page.page_size), (4, 10))
        page = parse_pagination({"pageSize": ["20"], "page": ["0"]})
        self.assertEqual((page.page, page.page_size), (1, 20))
        page = parse_pagination({"pageSize": ["-3"]})
        self.assertEqual(page.page_size, 10)

    def test_out_of_range_values_fall_back(self):
        options = build_query_options({"pageSize": ["99999999999999999999"]}, User)
        self.assertEqual((options.skip, options.limit), (0, 10))

        options = build_query_options({"page": ["9999999999999999999"], "pageSize": ["5"]}, User)
        self.assertEqual((options.skip, options.limit), (0, 5))

        page = parse_pagination({"page": [str(2**31 - 1)], "pageSize": [str(2**31 - 1)]})
        self.assertLess(page.skip, 2**63)

    def test_only_plain_digits_are_accepted(self):
        for raw in ("1_0", "+5", " 5", "5 ", "٣", "2.0"):
            with self.subTest(raw=raw):
                page = parse_pagination({"page": [raw], "pageSize": [raw]})
                self.assertEqual((page.page, page.page_size), (1, 10))


class BuildQueryOptionsTests(unittest.TestCase):
    def test_empty_query_returns_defaults_without_introspection(self):
        with patch("docgate.services.query_options.describe_entity") as describe:
            options = build_query_options({}, User)
        describe.assert_not_called()
        self.assertEqual(options, QueryOptions())
        self.assertEqual(options.conditions, ())
        self.assertEqual(options.sort, ())
        self.assertEqual((options.skip, options.limit), (0, 10))

    def test_filter_sort_and_pagination_together(self):
        params = group_query_params(
            [("username_startswith", "an"), ("sort", "-birthdate"), ("page", "2"), ("pageSize", "25")]
        )
        options = build_query_options(params, User)
        self.assertEqual(list(options.filter), ["username"])
        self.assertEqual(options.filter["username"].predicates[0].op, "startswith")
        self.assertEqual(options.sort, (SortClause(field="birthdate", dir="desc"),))
        self.assertEqual((options.skip, options.limit), (25, 25))

    def test_filter_errors_propagate(self):
        with self.assertRaises(InvalidOperatorError):
            build_query_options({"username_xyz": ["foo"], "pageSize": ["abc"]}, User)
        with self.assertRaises(InvalidBetweenValueError):
            build_query_options({"birthdate_between": ["onlyone"]}, User)

    def test_options_are_immutable(self):
        options = build_query_options({"username": ["ann"]}, User)
        with self.assertRaises(ValidationError):
            options.limit = 100
        with self.assertRaises(TypeError):
            options.filter["email"] = options.filter["username"]


if __name__ == "__main__":
    unittest.main()
