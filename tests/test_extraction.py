"""Tests for keyword-based task extraction."""
from affairs_core.models import TaskPriority
from affairs_core.schemas import TaskCreate
from affairs_mcp.extraction import (
    extract_action_items,
    extract_assignee,
    extract_deadline,
    extract_speakers,
    extract_tasks,
    infer_priority,
    is_transcript,
    review_task,
)

from .conftest import FIXED_NOW

EMAIL = """Hi team,

Action item: Send the draft NDA to the Acme legal team by 2025-03-14
Please review the indemnity clause before our call.
Thanks
"""

TRANSCRIPT = """Sarah: I will send the revised term sheet by Friday
Tom: Action: review indemnity clause urgently
Tom: Dana will circulate the signed NDA
"""


class TestInputDetection:
    """Test transcript detection and speaker extraction."""

    def test_transcript_detected(self):
        assert is_transcript(TRANSCRIPT)

    def test_email_is_not_transcript(self):
        assert not is_transcript("hi team, please send the NDA today")

    def test_speakers_in_order_of_appearance(self):
        assert extract_speakers(TRANSCRIPT) == ["Sarah", "Tom"]


class TestActionItems:
    """Test action item extraction."""

    def test_email_action_items(self):
        items = extract_action_items(EMAIL)

        assert items == [
            "Send the draft NDA to the Acme legal team by 2025-03-14",
            "review the indemnity clause before our call",
        ]

    def test_transcript_action_items(self):
        items = extract_action_items(TRANSCRIPT)

        assert "review indemnity clause urgently" in items
        assert "send the revised term sheet by Friday" in items
        assert "Dana will circulate the signed NDA" in items

    def test_fragments_of_longer_items_are_dropped(self):
        items = extract_action_items(TRANSCRIPT)

        assert "circulate the signed NDA" not in items

    def test_short_fragments_ignored(self):
        assert extract_action_items("todo: call") == []

    def test_no_action_items(self):
        assert extract_action_items("The weather was lovely.") == []


class TestFieldInference:
    """Test priority, deadline and assignee inference."""

    def test_urgent_wins_over_everything(self):
        assert infer_priority("important and urgent") == TaskPriority.URGENT

    def test_low_priority_phrase_is_low(self):
        assert infer_priority("low priority: tidy the data room") == TaskPriority.LOW

    def test_high_priority(self):
        assert infer_priority("important: sign before the board meeting") == TaskPriority.HIGH

    def test_no_priority_words(self):
        assert infer_priority("file the paperwork") is None

    def test_iso_deadline(self):
        assert extract_deadline("send it by 2025-03-14 please") == "2025-03-14"

    def test_relative_deadline(self):
        assert extract_deadline("send it by tomorrow") == "tomorrow"

    def test_explicit_assignee(self):
        assert extract_assignee("send the NDA, assigned to Dana Lee") == "Dana Lee"
        assert extract_assignee("send the NDA @Dana") == "Dana"

    def test_commitment_assignee_only_in_transcripts(self):
        assert extract_assignee("Dana will circulate the NDA", transcript=True) == "Dana"
        assert extract_assignee("Dana will circulate the NDA") is None


class TestExtractTasks:
    """Test end-to-end extraction into task records."""

    def test_email_tasks(self):
        tasks = extract_tasks(EMAIL)

        assert len(tasks) == 2
        assert tasks[0].deadline == "2025-03-14"
        assert all(t.priority == TaskPriority.NORMAL for t in tasks)

    def test_default_priority_applies_when_wording_is_neutral(self):
        tasks = extract_tasks(EMAIL, default_priority=TaskPriority.HIGH)

        assert all(t.priority == TaskPriority.HIGH for t in tasks)

    def test_transcript_tasks(self):
        tasks = {t.description: t for t in extract_tasks(TRANSCRIPT)}

        assert tasks["review indemnity clause urgently"].priority == TaskPriority.URGENT
        assert tasks["send the revised term sheet by Friday"].deadline == "Friday"
        assert tasks["Dana will circulate the signed NDA"].assignee == "Dana"


class TestReviewTask:
    """Test review warnings on extracted tasks."""

    def test_past_deadline_and_no_assignee(self):
        task = TaskCreate(description="Send the NDA", deadline="2025-01-01")

        assert review_task(task, FIXED_NOW) == ["Deadline is in the past", "No assignee specified"]

    def test_complete_task_has_no_warnings(self):
        task = TaskCreate(description="Send the NDA", deadline="2025-04-01", assignee="Dana")

        assert review_task(task, FIXED_NOW) == []

    def test_relative_deadline_is_not_flagged(self):
        task = TaskCreate(description="Send the NDA", deadline="Friday", assignee="Dana")

        assert review_task(task, FIXED_NOW) == []
