from datetime import date

import pytest

from app.schemas import NAME_MAX_LENGTH, PHONE_MAX_LENGTH, BookingStatusEnum
from app.services.whatsapp import messages
from app.services.whatsapp.session import BookingStep


class TestBookingFlow:
    @pytest.mark.asyncio
    async def test_reservation_is_committed_once(self, converse, persistence, store, phone):
        await converse("hi", "book", "2025-04-20 19:30 4", "Jane Doe", "555-1234")

        confirmation = await converse("none")
        assert "Date: 2025-04-20" in confirmation.reply
        assert "Guests: 4" in confirmation.reply
        assert "Notes:" not in confirmation.reply

        result = await converse("confirm")

        assert len(persistence.bookings) == 1
        booking_id, booking = next(iter(persistence.bookings.items()))
        assert result.reply == messages.BOOKING_PLACED.format(
            reference=booking_id[-6:], date="2025-04-20", time="19:30"
        )
        assert booking.date == date(2025, 4, 20)
        assert booking.time == "19:30"
        assert booking.guests == 4
        assert booking.notes == ""
        assert booking.status == BookingStatusEnum.PENDING
        assert booking.customer.name == "Jane Doe"
        assert booking.customer.phone == "555-1234"
        assert await store.get(phone) is None

    @pytest.mark.asyncio
    async def test_notes_are_kept(self, converse, persistence):
        await converse("hi", "book", "2025-04-20 19:30 4", "Jane Doe", "555-1234")

        confirmation = await converse("Window seat please")
        await converse("yes")

        assert "Notes: Window seat please" in confirmation.reply
        assert next(iter(persistence.bookings.values())).notes == "Window seat please"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text",
        ["tomorrow 7pm", "2025-04-20 19:30", "2025-02-30 19:30 4", "2025-04-20 19:30 0"],
    )
    async def test_bad_details_are_rejected(self, converse, store, phone, text):
        await converse("hi", "book")

        result = await converse(text)

        assert result.reply == messages.INVALID_BOOKING
        session = await store.get(phone)
        assert session.step == BookingStep.DETAILS
        assert session.draft.date is None

    @pytest.mark.asyncio
    async def test_steps_advance_one_at_a_time(self, converse, store, phone):
        await converse("hi", "book")
        steps = []
        for text in ("2025-04-20 19:30 4", "Jane Doe", "555-1234", "none"):
            await converse(text)
            steps.append((await store.get(phone)).step)

        assert steps == [
            BookingStep.CUSTOMER_NAME,
            BookingStep.CUSTOMER_PHONE,
            BookingStep.NOTES,
            BookingStep.CONFIRM,
        ]

    @pytest.mark.asyncio
    async def test_blank_notes_are_rejected(self, converse, store, phone):
        await converse("hi", "book", "2025-04-20 19:30 4", "Jane Doe", "555-1234")

        result = await converse("  ")

        assert result.reply == messages.EMPTY_TEXT.format(prompt=messages.ASK_NOTES)
        assert (await store.get(phone)).step == BookingStep.NOTES

    @pytest.mark.asyncio
    async def test_cancel(self, converse, persistence, store, phone):
        await converse("hi", "book", "2025-04-20 19:30 4", "Jane Doe", "555-1234", "none")

        result = await converse("no")

        assert result.reply == messages.BOOKING_CANCELLED
        assert persistence.bookings == {}
        assert await store.get(phone) is None

    @pytest.mark.asyncio
    async def test_overlong_name_is_rejected(self, converse, store, phone):
        await converse("hi", "book", "2025-04-20 19:30 4")

        result = await converse("J" * (NAME_MAX_LENGTH + 1))

        assert result.reply == messages.TEXT_TOO_LONG.format(
            maximum=NAME_MAX_LENGTH, prompt=messages.ASK_BOOKING_NAME
        )
        assert (await store.get(phone)).step == BookingStep.CUSTOMER_NAME

    @pytest.mark.asyncio
    async def test_overlong_phone_is_rejected(self, converse, store, phone):
        await converse("hi", "book", "2025-04-20 19:30 4", "Jane Doe")

        result = await converse("5" * (PHONE_MAX_LENGTH + 1))

        assert result.reply == messages.TEXT_TOO_LONG.format(
            maximum=PHONE_MAX_LENGTH, prompt=messages.ASK_BOOKING_PHONE
        )
        session = await store.get(phone)
        assert session.step == BookingStep.CUSTOMER_PHONE
        assert session.draft.customer_phone is None
