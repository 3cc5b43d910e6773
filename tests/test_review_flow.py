"""Tests for review_flow.py - grouping, gates and per-task reset."""
from datetime import datetime

import pytest

from boomerang.client.review_flow import (
    BackToSummary, ChooseContact, ChooseCreateNew, ChooseTiming, Continue, EditMessage,
    EnterContactDetails, GroupCategory, InvalidReviewEvent, ReviewGateError, ReviewStep,
    ReviewTiming, Selection, SelectGroup, TaskResolved, approval_overrides, build_preview,
    build_review_state, recipient_name, reduce,
)
from boomerang.services.scheduling import LOCAL_TZ
from boomerang.utils.messages import MSG

NOW = datetime(2025, 6, 2, 10, 0, tzinfo=LOCAL_TZ)

CONTACTS = [
    {"id": "c1", "name": "Sarah Johnson", "phone": "+15551234567", "email": "sarah@example.com"},
    {"id": "c2", "name": "Mike Davis", "phone": "+15559876543"},
    {"id": "c3", "name": "Sara Jonson"},
]


def wire_task(task_id, task_type, contact_name, message="Hello", phone=None, email=None, contact_id=None):
    return {
        "id": task_id,
        "type": task_type,
        "contactName": contact_name,
        "contactPhone": phone,
        "contactEmail": email,
        "contactId": contact_id,
        "message": message,
    }


TASKS = [
    wire_task("t1", "follow_up_sms", "Sarah J", message="Estimate is ready"),
    wire_task("t2", "follow_up_sms", "Mike Davis", message="Deck timeline"),
    wire_task("t3", "email_send_reply", "Sarah Johnson", message="Thanks!"),
    wire_task("t4", "reminder", "Business Owner", message="Order drywall"),
]


def run(state, *events):
    for event in events:
        state = reduce(state, event)
    return state


def to_preview(state, timing=ReviewTiming.TOMORROW_AM):
    """Walk the current task from wherever it is to the message preview."""
    if state.step is ReviewStep.CONTACT_DISAMBIGUATION:
        state = reduce(state, Continue())
    return run(state, Continue(), ChooseTiming(timing), Continue())


@pytest.fixture
def state():
    return build_review_state(TASKS, CONTACTS)


class TestGrouping:
    def test_three_groups_in_order(self, state):
        assert [g.category for g in state.groups] == [GroupCategory.FOLLOW_UP, GroupCategory.REMINDER, GroupCategory.NOTE]
        assert [t.id for t in state.groups[0].tasks] == ["t1", "t2", "t3"]
        assert [t.id for t in state.groups[1].tasks] == ["t4"]
        assert state.groups[2].tasks == ()

    def test_ambiguity(self, state):
        t1, t2, t3 = state.groups[0].tasks
        assert t1.is_ambiguous
        assert [c["id"] for c in t1.candidates] == ["c1", "c3"]
        assert not t2.is_ambiguous and t2.resolved_contact["id"] == "c2"
        assert not t3.is_ambiguous and t3.resolved_contact["id"] == "c1"

    def test_internal_task_never_ambiguous(self, state):
        assert not state.groups[1].tasks[0].is_ambiguous

    def test_display_names(self):
        assert GroupCategory.FOLLOW_UP.display_name == MSG.GROUP_FOLLOW_UP


class TestEnterTask:
    def test_preselects_reachable_candidate(self, state):
        state = reduce(state, SelectGroup(GroupCategory.FOLLOW_UP))
        assert state.step is ReviewStep.CONTACT_DISAMBIGUATION
        assert state.selection.selected_contact["id"] == "c1"

    def test_bare_candidate_not_preselected(self):
        state = build_review_state([wire_task("t9", "follow_up_sms", "Sara J")], [CONTACTS[2]])
        state = reduce(state, SelectGroup(GroupCategory.FOLLOW_UP))
        assert state.selection.selected_contact is None
        with pytest.raises(ReviewGateError):
            reduce(state, Continue())

    def test_empty_group_rejected(self, state):
        with pytest.raises(InvalidReviewEvent):
            reduce(state, SelectGroup(GroupCategory.NOTE))

    def test_events_outside_their_step(self, state):
        with pytest.raises(InvalidReviewEvent):
            reduce(state, ChooseTiming(ReviewTiming.TOMORROW_AM))


class TestGates:
    def test_contact_method_required(self, state):
        state = run(state, SelectGroup(GroupCategory.FOLLOW_UP), ChooseContact("c3"), Continue())
        assert state.step is ReviewStep.CONTACT_DETAILS
        with pytest.raises(ReviewGateError):
            reduce(state, Continue())
        assert state.step is ReviewStep.CONTACT_DETAILS

        state = run(state, EnterContactDetails(phone="+15550001111"), Continue())
        assert state.step is ReviewStep.TIMING_SELECTION

    def test_timing_required(self, state):
        state = run(state, SelectGroup(GroupCategory.FOLLOW_UP), Continue(), Continue())
        with pytest.raises(ReviewGateError):
            reduce(state, Continue())

    def test_internal_task_skips_contact_gate(self, state):
        state = run(state, SelectGroup(GroupCategory.REMINDER), Continue())
        assert state.step is ReviewStep.TIMING_SELECTION

    def test_candidate_must_be_offered(self, state):
        state = reduce(state, SelectGroup(GroupCategory.FOLLOW_UP))
        with pytest.raises(InvalidReviewEvent):
            reduce(state, ChooseContact("c2"))


class TestResetBetweenTasks:
    def test_nothing_leaks_into_next_task(self, state):
        state = run(
            state,
            SelectGroup(GroupCategory.FOLLOW_UP),
            ChooseContact("c3"),
            Continue(),
            EnterContactDetails(phone="+15550001111", email="custom@example.com"),
            Continue(),
            ChooseTiming(ReviewTiming.TOMORROW_PM),
            Continue(),
            EditMessage("Custom wording"),
        )
        assert state.selection.phone == "+15550001111"

        state = reduce(state, TaskResolved("t1"))

        assert state.current_task.id == "t2"
        assert state.step is ReviewStep.CONTACT_DETAILS
        assert state.selection == Selection()
        assert approval_overrides(to_preview(state))["contactPhone"] == "+15559876543"

    def test_advances_through_groups_then_summary(self, state):
        state = reduce(state, SelectGroup(GroupCategory.FOLLOW_UP))
        for expected in ("t1", "t2", "t3", "t4"):
            assert state.current_task.id == expected
            state = reduce(to_preview(state), TaskResolved(expected))

        assert state.step is ReviewStep.GROUP_SUMMARY
        assert state.cursor is None
        assert state.is_complete

    def test_resolved_tasks_not_revisited(self, state):
        state = run(to_preview(reduce(state, SelectGroup(GroupCategory.FOLLOW_UP))), TaskResolved("t1"), BackToSummary())
        assert [t.id for t in state.remaining(GroupCategory.FOLLOW_UP)] == ["t2", "t3"]

        state = reduce(state, SelectGroup(GroupCategory.FOLLOW_UP))
        assert state.current_task.id == "t2"

    def test_wrong_task_resolved(self, state):
        state = to_preview(reduce(state, SelectGroup(GroupCategory.FOLLOW_UP)))
        with pytest.raises(InvalidReviewEvent):
            reduce(state, TaskResolved("t3"))


class TestPreviewAndOverrides:
    def test_overrides_from_selection(self, state):
        state = run(
            state,
            SelectGroup(GroupCategory.FOLLOW_UP),
            ChooseContact("c3"),
            Continue(),
            EnterContactDetails(phone="+15550001111"),
            Continue(),
            ChooseTiming(ReviewTiming.TOMORROW_PM),
            Continue(),
            EditMessage("Custom wording"),
        )
        assert approval_overrides(state) == {
            "contactPhone": "+15550001111",
            "contactEmail": None,
            "message": "Custom wording",
            "timing": "tomorrow_afternoon",
            "contactId": "c3",
        }

    def test_unedited_message_not_sent(self, state):
        state = to_preview(reduce(state, SelectGroup(GroupCategory.FOLLOW_UP)))
        overrides = approval_overrides(state)
        assert overrides["message"] is None
        assert overrides["contactId"] == "c1"
        assert overrides["timing"] == "tomorrow"

    def test_create_new_contact(self, state):
        state = run(state, SelectGroup(GroupCategory.FOLLOW_UP), ChooseCreateNew(), Continue())
        state = run(state, EnterContactDetails(email="new@example.com"), Continue(),
                    ChooseTiming(ReviewTiming.IN_TWO_DAYS), Continue())
        overrides = approval_overrides(state)
        assert overrides["contactId"] is None
        assert overrides["contactEmail"] == "new@example.com"
        assert recipient_name(state) == "Sarah J"

    def test_preview(self, state):
        state = to_preview(reduce(state, SelectGroup(GroupCategory.FOLLOW_UP)), ReviewTiming.TOMORROW_PM)
        preview = build_preview(state, NOW)
        assert preview.recipient == "Sarah Johnson"
        assert preview.phone == "+15551234567"
        assert preview.send_at == datetime(2025, 6, 3, 14, 0, tzinfo=LOCAL_TZ)
        assert preview.send_at_display == "Tuesday, Jun 3 at 2:00 PM"
        assert preview.timing_label == MSG.TIMING_TOMORROW_PM

    def test_reminder_recipient_is_owner(self, state):
        state = to_preview(reduce(state, SelectGroup(GroupCategory.REMINDER)))
        assert recipient_name(state) == MSG.RECIPIENT_SELF
