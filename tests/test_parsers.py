from datetime import date

import pytest

from app.schemas import OrderTypeEnum
from app.services.whatsapp import parsers
from app.services.whatsapp.session import FlowType


class TestParseIndex:
    def test_first_entry_is_zero(self):
        assert parsers.parse_index("1", 5) == 0

    def test_last_entry(self):
        assert parsers.parse_index("5", 5) == 4

    def test_surrounding_whitespace_is_ignored(self):
        assert parsers.parse_index("  2 ", 5) == 1

    @pytest.mark.parametrize("text", ["0", "6", "-1", "1.5", "two", "", "   ", "1 2"])
    def test_rejects_out_of_range_and_non_integers(self, text):
        assert parsers.parse_index(text, 5) is None


class TestParseQuantity:
    def test_accepts_bounds(self):
        assert parsers.parse_quantity("1") == 1
        assert parsers.parse_quantity("99") == 99

    @pytest.mark.parametrize("text", ["0", "100", "two", "2.0", "+3"])
    def test_rejects_without_coercion(self, text):
        assert parsers.parse_quantity(text) is None


class TestParseBookingRequest:
    def test_parses_date_time_and_guests(self):
        request = parsers.parse_booking_request("2025-04-20 19:30 4")

        assert request.date == date(2025, 4, 20)
        assert request.time == "19:30"
        assert request.guests == 4

    def test_single_digit_hour(self):
        request = parsers.parse_booking_request("2025-04-20 9:05 2")

        assert request.time == "9:05"

    @pytest.mark.parametrize(
        "text",
        [
            "2025-02-30 19:30 4",  # no such day
            "2025-04-20 24:00 2",
            "2025-04-20 19:60 2",
            "2025-04-20 19:30 0",
            "2025-04-20 19:30 100",
            "20-04-2025 19:30 4",
            "2025-04-20 19:30",
            "tomorrow at 7",
        ],
    )
    def test_rejects_malformed_or_impossible_values(self, text):
        assert parsers.parse_booking_request(text) is None


class TestParseFeedback:
    def test_rating_and_comment(self):
        entry = parsers.parse_feedback("5 great")

        assert entry.rating == 5
        assert entry.comment == "great"

    def test_multiline_comment(self):
        entry = parsers.parse_feedback("3 ok food\nslow service")

        assert entry.comment == "ok food\nslow service"

    @pytest.mark.parametrize("text", ["6 great", "0 bad", "5", "5great", "great 5", "10 wow"])
    def test_rejects_out_of_range_or_missing_comment(self, text):
        assert parsers.parse_feedback(text) is None


class TestKeywords:
    @pytest.mark.parametrize("text", ["hi", "Hello!", " hey ", "START", "menu."])
    def test_greetings_reset(self, text):
        assert parsers.is_reset_keyword(text, in_flow=False)
        assert parsers.is_reset_keyword(text, in_flow=True)

    @pytest.mark.parametrize("text", ["history", "hi there", "high", "menus"])
    def test_greeting_must_be_the_whole_message(self, text):
        assert not parsers.is_reset_keyword(text, in_flow=True)

    def test_order_resets_only_inside_a_flow(self):
        assert not parsers.is_reset_keyword("order", in_flow=False)
        assert parsers.is_reset_keyword("order", in_flow=True)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("order", FlowType.ORDER),
            ("Book", FlowType.BOOKING),
            ("feedback", FlowType.FEEDBACK),
            ("complaint!", FlowType.COMPLAINT),
            ("3", FlowType.FEEDBACK),
            ("pizza", None),
        ],
    )
    def test_flow_choice(self, text, expected):
        assert parsers.parse_flow_choice(text) == expected

    def test_order_type(self):
        assert parsers.parse_order_type("1") == OrderTypeEnum.DELIVERY
        assert parsers.parse_order_type("Pickup") == OrderTypeEnum.PICKUP
        assert parsers.parse_order_type("3") is None

    def test_confirm_and_cancel(self):
        assert parsers.is_confirm("Confirm")
        assert parsers.is_confirm("yes")
        assert parsers.is_cancel("cancel")
        assert parsers.is_cancel("NO")
        assert not parsers.is_confirm("y")

    def test_free_text(self):
        assert parsers.parse_free_text("  Jane Doe ") == "Jane Doe"
        assert parsers.parse_free_text(" \t ") is None
        assert parsers.parse_free_text("") is None
