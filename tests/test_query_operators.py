import unittest

from docgate.services.field_descriptors import describe_entity
from docgate.services.query_errors import InvalidOperatorError
from docgate.services.query_operators import OPERATOR_SUFFIXES, match_parameter, parse_operator
from tests.query_entities import Person


class ParseOperatorTests(unittest.TestCase):
    def test_bare_wire_name_is_equality(self):
        self.assertEqual(parse_operator("name", "name"), "eq")

    def test_every_suffix_maps_to_its_operator(self):
        for suffix, expected in OPERATOR_SUFFIXES.items():
            with self.subTest(suffix=suffix):
                self.assertEqual(parse_operator(f"name_{suffix}", "name"), expected)

    def test_after_and_before_are_aliases(self):
        self.assertEqual(parse_operator("created_after", "created"), "gt")
        self.assertEqual(parse_operator("created_before", "created"), "lt")

    def test_other_parameters_do_not_target_the_field(self):
        self.assertIsNone(parse_operator("email", "name"))
        self.assertIsNone(parse_operator("names", "name"))
        self.assertIsNone(parse_operator("nam_eq", "name"))

    def test_unknown_suffix_raises_with_operator(self):
        with self.assertRaises(InvalidOperatorError) as ctx:
            parse_operator("name_xyz", "name")
        self.assertEqual(ctx.exception.operator, "xyz")
        self.assertEqual(ctx.exception.kind, "InvalidOperator")
        self.assertIn("xyz", str(ctx.exception))

    def test_empty_suffix_is_invalid(self):
        with self.assertRaises(InvalidOperatorError) as ctx:
            parse_operator("name_", "name")
        self.assertEqual(ctx.exception.operator, "")


class MatchParameterTests(unittest.TestCase):
    def setUp(self):
        self.descriptor = describe_entity(Person)

    def test_longest_wire_name_wins(self):
        field, op = match_parameter("created_at_gte", self.descriptor)
        self.assertEqual(field.wire_name, "created_at")
        self.assertEqual(op, "gte")

        field, op = match_parameter("created_at", self.descriptor)
        self.assertEqual(field.wire_name, "created_at")
        self.assertEqual(op, "eq")

        field, op = match_parameter("created_lt", self.descriptor)
        self.assertEqual(field.wire_name, "created")
        self.assertEqual(op, "lt")

    def test_reserved_and_unknown_parameters_are_ignored(self):
        for param in ("sort", "page", "pageSize", "unknown", "nickname"):
            with self.subTest(param=param):
                self.assertIsNone(match_parameter(param, self.descriptor))

    def test_unknown_operator_on_known_field_raises(self):
        with self.assertRaises(InvalidOperatorError) as ctx:
            match_parameter("name_like", self.descriptor)
        self.assertEqual(ctx.exception.operator, "like")
        self.assertEqual(ctx.exception.param, "name_like")


if __name__ == "__main__":
    unittest.main()
