"""Pattern-based task extraction from free text.

Handles two kinds of input:
- Transcripts ("Sarah: I will send the draft NDA by 2025-03-01")
- Anything else (emails, notes), where action items are introduced by
  phrases such as "todo:", "need to", "please"

This is keyword matching only; it does not try to understand the text.
"""
import re
from datetime import datetime
from typing import Optional

from affairs_core.dates import parse_due_date
from affairs_core.models import TaskPriority
from affairs_core.schemas import TaskCreate

MIN_ITEM_LENGTH = 10

TRANSCRIPT_PATTERN = re.compile(r"^[A-Z][a-z]+:", re.MULTILINE)

TEXT_ACTION_PATTERNS = [
    re.compile(r"(?:action item|todo|task)[:\s]+([^\n]+)", re.IGNORECASE),
    re.compile(r"(?:need to|must|should|will)[:\s]+([^\n.]+)", re.IGNORECASE),
    re.compile(r"(?:please|kindly)[:\s]+([^\n.]+)", re.IGNORECASE),
]

TRANSCRIPT_ACTION_PATTERNS = [
    re.compile(r"action[:\s]+([^\n]+)", re.IGNORECASE),
    re.compile(r"\b[A-Z][a-z]+\s+(?:will|to)\s+[^\n.]+"),
    re.compile(r"(?:agreed to|committed to|will)\s+([^\n.]+)", re.IGNORECASE),
]

SPEAKER_PATTERN = re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?):", re.MULTILINE)

PRIORITY_PATTERNS = [
    (TaskPriority.URGENT, re.compile(r"urgent|asap|immediately|critical|emergency", re.IGNORECASE)),
    (TaskPriority.LOW, re.compile(r"low priority|when possible|eventually", re.IGNORECASE)),
    (TaskPriority.HIGH, re.compile(r"important|priority|soon|this week", re.IGNORECASE)),
]

DEADLINE_PATTERNS = [
    re.compile(r"by\s+(\d{4}-\d{2}-\d{2})", re.IGNORECASE),
    re.compile(r"due\s+(\d{4}-\d{2}-\d{2})", re.IGNORECASE),
    re.compile(r"deadline[:\s]+(\d{4}-\d{2}-\d{2})", re.IGNORECASE),
    re.compile(r"by\s+(Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)", re.IGNORECASE),
    re.compile(r"by\s+(today|tomorrow|next week)", re.IGNORECASE),
]

ASSIGNEE_PATTERN = re.compile(r"(?:@|assigned to|owner:)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)")
COMMITMENT_PATTERN = re.compile(r"([A-Z][a-z]+)\s+(?:will|to)\s")


def is_transcript(text: str) -> bool:
    """Text looks like a transcript when some line starts with 'Name:'."""
    return bool(TRANSCRIPT_PATTERN.search(text))


def _dedupe(items: list[str]) -> list[str]:
    """Drop repeats and items fully contained in a longer item, keeping order."""
    unique = list(dict.fromkeys(items))
    return [
        item for item in unique
        if not any(item != other and item in other for other in unique)
    ]


def extract_action_items(text: str) -> list[str]:
    """Pull action-item phrases out of free text."""
    patterns = TRANSCRIPT_ACTION_PATTERNS if is_transcript(text) else TEXT_ACTION_PATTERNS
    items = []
    for pattern in patterns:
        for match in pattern.finditer(text):
            item = (match.group(1) if match.groups() else match.group(0)).strip()
            if len(item) > MIN_ITEM_LENGTH:
                items.append(item)
    return _dedupe(items)


def extract_speakers(text: str) -> list[str]:
    """Names that open a transcript line, in order of first appearance."""
    return list(dict.fromkeys(m.group(1).strip() for m in SPEAKER_PATTERN.finditer(text)))


def infer_priority(text: str) -> Optional[TaskPriority]:
    """Priority implied by the wording, or None."""
    for priority, pattern in PRIORITY_PATTERNS:
        if pattern.search(text):
            return priority
    return None


def extract_deadline(text: str) -> Optional[str]:
    """Deadline phrase ("2025-03-01", "Friday", "tomorrow"), or None."""
    for pattern in DEADLINE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_assignee(text: str, transcript: bool = False) -> Optional[str]:
    """Person named as owner ("@Dana", "assigned to Dana Lee").

    In transcripts an item opening with "<Name> will ..." is assigned to Name.
    """
    match = ASSIGNEE_PATTERN.search(text)
    if match:
        return match.group(1)
    if transcript:
        match = COMMITMENT_PATTERN.match(text)
        if match:
            return match.group(1)
    return None


def extract_tasks(text: str, default_priority: TaskPriority = TaskPriority.NORMAL) -> list[TaskCreate]:
    """
    Turn free text into task records.

    Args:
        text: Transcript, email or notes
        default_priority: Priority when the wording implies none

    Returns:
        One pending task per action item, in order of appearance
    """
    transcript = is_transcript(text)
    return [
        TaskCreate(
            description=item,
            priority=infer_priority(item) or default_priority,
            deadline=extract_deadline(item),
            assignee=extract_assignee(item, transcript),
        )
        for item in extract_action_items(text)
    ]


def review_task(task: TaskCreate, now: datetime) -> list[str]:
    """
    List problems worth flagging on an extracted task.

    Returns:
        Human-readable warnings (empty when the task looks complete)
    """
    warnings = []
    if task.deadline:
        due = parse_due_date(task.deadline)
        if due is not None and due < now:
            warnings.append("Deadline is in the past")
    if not task.assignee:
        warnings.append("No assignee specified")
    return warnings
