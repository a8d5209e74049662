from __future__ import annotations

import unittest

from orders.domain.draft import OrderDraft, OrderType, ProjectType
from orders.domain.validation import (
    EMAIL_INVALID,
    ORDER_ID_TAKEN,
    contact_details_complete,
    email_error,
    is_valid_email,
    is_valid_order_id,
    site_details_complete,
    step_gate,
    validate_field,
)


def make_contact_draft(**overrides: object) -> OrderDraft:
    draft = OrderDraft(full_name="Jeanne Martin", email="jeanne@example.com", order_id="12345678")
    for name, value in overrides.items():
        setattr(draft, name, value)
    return draft


class FieldRuleTests(unittest.TestCase):
    def test_validate_field_reports_required_min_and_max(self) -> None:
        self.assertEqual(validate_field("site_name", "   "), "order.validation.site_name_required")
        self.assertEqual(validate_field("site_name", "a"), "order.validation.site_name_min")
        self.assertEqual(validate_field("site_name", "a" * 101), "order.validation.site_name_max")
        self.assertIsNone(validate_field("site_name", "ab"))

    def test_validate_field_uses_trimmed_length(self) -> None:
        self.assertEqual(validate_field("full_name", " a "), "order.validation.name_min")
        self.assertIsNone(validate_field("full_name", "  Jo  "))

    def test_description_bounds(self) -> None:
        self.assertEqual(
            validate_field("description", "too short"), "order.validation.description_min"
        )
        self.assertIsNone(validate_field("description", "x" * 20))
        self.assertIsNone(validate_field("description", "x" * 2000))
        self.assertEqual(
            validate_field("description", "x" * 2001), "order.validation.description_max"
        )

    def test_validate_field_rejects_unknown_field(self) -> None:
        with self.assertRaises(ValueError):
            validate_field("budget_text", "anything")


class FormatTests(unittest.TestCase):
    def test_email_pattern(self) -> None:
        self.assertTrue(is_valid_email("a@b.co"))
        self.assertFalse(is_valid_email("a@b"))
        self.assertFalse(is_valid_email("a b@c.de"))
        self.assertFalse(is_valid_email(""))

    def test_email_error_is_silent_while_empty(self) -> None:
        self.assertIsNone(email_error(""))
        self.assertEqual(email_error("not-an-email"), EMAIL_INVALID)
        self.assertIsNone(email_error("x@y.fr"))

    def test_order_id_must_be_exactly_eight_digits(self) -> None:
        self.assertTrue(is_valid_order_id("00000001"))
        self.assertFalse(is_valid_order_id("1234567"))
        self.assertFalse(is_valid_order_id("123456789"))
        self.assertFalse(is_valid_order_id("1234567a"))
        self.assertFalse(is_valid_order_id("１２３４５６７８"))


class StepGateTests(unittest.TestCase):
    def test_first_two_steps_need_a_selection(self) -> None:
        draft = OrderDraft()
        self.assertFalse(step_gate(1, draft))
        draft.order_type = OrderType.ADVANCED
        self.assertTrue(step_gate(1, draft))

        self.assertFalse(step_gate(2, draft))
        draft.project_type = ProjectType.WEBSITE
        self.assertTrue(step_gate(2, draft))

    def test_site_details_gate_accepts_short_description(self) -> None:
        draft = OrderDraft(site_type="vitrine", site_name="Shop", description="short")
        self.assertTrue(site_details_complete(draft))
        self.assertTrue(step_gate(3, draft))

    def test_site_details_gate_needs_type_name_and_description(self) -> None:
        self.assertFalse(site_details_complete(OrderDraft(site_name="Shop", description="d")))
        self.assertFalse(
            site_details_complete(OrderDraft(site_type="vitrine", site_name=" ", description="d"))
        )
        self.assertFalse(
            site_details_complete(OrderDraft(site_type="vitrine", site_name="Shop"))
        )

    def test_site_type_other_does_not_require_other_text(self) -> None:
        draft = OrderDraft(site_type="other", site_name="Shop", description="d")
        self.assertTrue(step_gate(3, draft))

    def test_contact_gate(self) -> None:
        self.assertTrue(contact_details_complete(make_contact_draft(), order_id_error=None))
        self.assertFalse(
            contact_details_complete(make_contact_draft(full_name=" "), order_id_error=None)
        )
        self.assertFalse(
            contact_details_complete(make_contact_draft(email="nope"), order_id_error=None)
        )
        self.assertFalse(
            contact_details_complete(make_contact_draft(order_id="1234567"), order_id_error=None)
        )
        self.assertFalse(
            contact_details_complete(make_contact_draft(order_id="1234567x"), order_id_error=None)
        )
        self.assertFalse(
            contact_details_complete(make_contact_draft(), order_id_error=ORDER_ID_TAKEN)
        )

    def test_recap_always_passes(self) -> None:
        self.assertTrue(step_gate(5, OrderDraft()))


if __name__ == "__main__":
    unittest.main()
