"""Build a complete draft task from nothing but its title.

Each step is an ordered table of ``(keywords, outcome)`` rules evaluated
first-match-wins against the lower-cased title with its date text removed.
Matching is by substring, so ``meet`` also hits ``meeting``.
"""
from __future__ import annotations

import random
import re
import string
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from core import priorities
from core.log import get_logger
from core.recurrence import DEFAULT_RECURRENCE
from core.settings import INFERENCE
from helpers.date_parsing import extract_due_date
from models.draft import TaskDraft
from services.tags import MAX_TAG_LENGTH, TAG_DELIMITER
from utils.datetime_utils import local_now


logger = get_logger("inference")

Rule = Tuple[Tuple[str, ...], str]

DuePolicy = Callable[[datetime], datetime]
EstimatePolicy = Callable[[], int]


DESCRIPTION_RULES: Sequence[Rule] = (
    (
        ("meet", "call", "discussion"),
        'Prepare for the "{title}" by creating a detailed agenda, sending calendar invitations '
        "to all required participants, and gathering any necessary pre-meeting materials. "
        "During the meeting, take comprehensive notes and identify action items. Follow up "
        "with a summary and track progress on assigned tasks.",
    ),
    (
        ("report", "document", "write"),
        'Create a comprehensive report on "{title}". Begin with an outline of key sections, '
        "gather all relevant data and references, and organize content logically. Include an "
        "executive summary, detailed analysis, and clear recommendations. Format professionally "
        "with appropriate graphs or visuals, and proofread thoroughly before submission.",
    ),
    (
        ("review", "feedback", "assess"),
        'Conduct a thorough review of "{title}". Create a structured evaluation framework with '
        "clear criteria. Examine all aspects critically, noting both strengths and areas for "
        "improvement. Provide specific, actionable feedback supported by examples, and "
        "prioritize recommendations based on impact.",
    ),
    (
        ("present", "speech", "talk"),
        'Prepare and deliver a compelling presentation on "{title}". Develop a clear narrative '
        "structure with a strong opening and conclusion. Create visually engaging slides that "
        "support your key points without overwhelming them. Practice your delivery focusing on "
        "timing, clarity, and engagement. Prepare responses for anticipated questions and test "
        "all technical equipment beforehand.",
    ),
    (
        ("research", "study", "investigate"),
        'Conduct comprehensive research on "{title}". Define specific questions or hypotheses '
        "to investigate, identify reliable information sources, and document your methodology. "
        "Analyze findings critically, looking for patterns and insights. Create a structured "
        "summary of key findings with supporting evidence and identify areas for further "
        "investigation.",
    ),
    (
        ("plan", "strategy", "roadmap"),
        'Develop a detailed plan for "{title}". Begin by defining clear, measurable objectives '
        "and success criteria. Break down the implementation into specific phases with "
        "milestones, required resources, and owners. Identify potential risks and mitigation "
        "strategies. Create a timeline with dependencies and critical path analysis. Include a "
        "process for monitoring progress and making adjustments.",
    ),
    (
        ("design", "create", "develop"),
        'Design and develop "{title}" with a user-centered approach. Begin with requirements '
        "gathering and user research to understand needs and constraints. Create conceptual "
        "designs or prototypes for early feedback. Develop iteratively, incorporating "
        "stakeholder input at each stage. Test thoroughly before finalizing, and document your "
        "process and decisions for future reference.",
    ),
    (
        ("email", "message", "contact"),
        'Compose a clear and effective communication regarding "{title}". Outline the key '
        "messages you need to convey, considering your audience and desired outcome. Draft your "
        "message with a logical structure, beginning with the main purpose, followed by "
        "supporting details. Include specific actions required from recipients, relevant "
        "deadlines, and your contact information for follow-up questions. Review for clarity, "
        "tone, and completeness before sending.",
    ),
    (
        ("update", "upgrade", "improve"),
        'Update or improve "{title}" by first assessing its current state and identifying '
        "specific areas for enhancement. Research best practices and gather input from "
        "stakeholders or users. Develop a prioritized list of changes based on impact and effort "
        "required. Implement improvements systematically, testing each change to ensure it "
        "achieves the desired outcome. Document all modifications for future reference.",
    ),
    (
        ("organize", "arrange", "schedule"),
        'Organize "{title}" by establishing clear objectives and defining the scope. Create a '
        "comprehensive checklist of all required elements and tasks. Develop a logical structure "
        "or timeline, assign responsibilities if others are involved, and secure necessary "
        "resources. Set up tracking systems to monitor progress, and build in contingency plans "
        "for potential complications. Communicate relevant information to all parties involved.",
    ),
    (
        ("learn", "study", "course"),
        'Create a structured learning plan for "{title}". Identify specific topics to master '
        "and learning objectives. Gather recommended resources such as books, courses, tutorials "
        "or documentation. Break down the material into manageable sections and establish a "
        "realistic study schedule. Include practical exercises to reinforce concepts, and set "
        "up a system to track your progress and test your understanding.",
    ),
    (
        ("fix", "repair", "solve"),
        'Address the issues with "{title}" by first thoroughly diagnosing the root causes. '
        "Document the specific symptoms and when they occur. Research potential solutions and "
        "best practices. Develop a systematic approach to implementing repairs, testing each "
        "change incrementally. Verify that all problems have been resolved through "
        "comprehensive testing, and document the solution for future reference.",
    ),
    (
        ("analyze", "evaluate", "examine"),
        'Conduct a detailed analysis of "{title}". Define the specific aspects to evaluate and '
        "establish appropriate analytical methods. Gather all necessary data from reliable "
        "sources, ensuring it's complete and accurate. Apply structured analytical techniques "
        "to identify patterns, trends, and insights. Document your methodology, findings, and "
        "recommendations in a clear, logical format.",
    ),
)

GENERIC_DESCRIPTION = (
    'Complete "{title}" by first breaking it down into specific, actionable steps. Prioritize '
    "these components based on importance and dependencies. Identify any resources, "
    "information, or assistance you'll need. Set interim milestones to track progress, "
    "allocate appropriate time for each phase, and build in review points to ensure quality. "
    "Document your process and any decisions made for future reference."
)

PRIORITY_RULES: Sequence[Rule] = (
    (("urgent", "asap", "emergency", "immediately"), priorities.URGENT),
    (("important", "high", "critical", "priority"), priorities.HIGH),
    (("low", "whenever", "if time"), priorities.LOW),
)

CATEGORY_RULES: Sequence[Rule] = (
    (("meet", "call", "discussion"), "Meetings"),
    (("research", "study", "learn"), "Research"),
    (("project", "develop", "build"), "Projects"),
    (("document", "report", "write"), "Documentation"),
    (("personal", "my", "self"), "Personal"),
    (("learn", "course", "study"), "Learning"),
    (("admin", "organize", "manage"), "Admin"),
    (("email", "call", "message"), "Communication"),
)
DEFAULT_CATEGORY = "Work"

STOP_WORDS = frozenset(
    ("a", "an", "the", "and", "or", "but", "for", "with", "to", "in", "on", "at", "by")
)
_TOKEN_SPLIT_RE = re.compile(rf"[\s{re.escape(TAG_DELIMITER)}]+")


def first_match(text: str, rules: Sequence[Rule], default: Optional[str] = None) -> Optional[str]:
    lowered = text.lower()
    for keywords, outcome in rules:
        if any(keyword in lowered for keyword in keywords):
            return outcome
    return default


def synthesize_description(title: str) -> str:
    template = first_match(title, DESCRIPTION_RULES, GENERIC_DESCRIPTION)
    return template.format(title=title)


def infer_priority(title: str) -> str:
    return first_match(title, PRIORITY_RULES, priorities.DEFAULT_PRIORITY)


def infer_category(title: str) -> str:
    return first_match(title, CATEGORY_RULES, DEFAULT_CATEGORY)


def synthesize_tags(title: str, limit: Optional[int] = None) -> Tuple[str, ...]:
    cap = INFERENCE.max_tags if limit is None else limit
    tags: List[str] = []
    for token in _TOKEN_SPLIT_RE.split(title.lower()):
        word = token.strip(string.punctuation)
        if len(word) > MAX_TAG_LENGTH:
            continue
        if len(word) <= 2 or word in STOP_WORDS or word in tags:
            continue
        tags.append(word)
        if len(tags) >= cap:
            break
    return tuple(tags)


# ---------- fallback policies ----------
def random_days_ahead(
    rng: Optional[random.Random] = None,
    *,
    low: Optional[int] = None,
    high: Optional[int] = None,
) -> DuePolicy:
    """Pick a due date 1..7 days out (bounds from settings)."""
    source = rng or random.Random()
    lo = INFERENCE.min_random_days if low is None else low
    hi = INFERENCE.max_random_days if high is None else high

    def policy(now: datetime) -> datetime:
        return now + timedelta(days=source.randint(lo, hi))

    return policy


def fixed_days_ahead(days: int) -> DuePolicy:
    def policy(now: datetime) -> datetime:
        return now + timedelta(days=days)

    return policy


def random_estimate(rng: Optional[random.Random] = None) -> EstimatePolicy:
    source = rng or random.Random()

    def policy() -> int:
        return source.randint(INFERENCE.min_estimate_minutes, INFERENCE.max_estimate_minutes)

    return policy


def fixed_estimate(minutes: int) -> EstimatePolicy:
    def policy() -> int:
        return minutes

    return policy


def default_due_policy() -> DuePolicy:
    if INFERENCE.fallback_due_days is not None:
        return fixed_days_ahead(INFERENCE.fallback_due_days)
    return random_days_ahead()


@dataclass
class InferredDraft(TaskDraft):
    """Draft plus the title with its date text removed."""

    cleaned_title: str = ""


def infer_task(
    title: str,
    *,
    now: Optional[datetime] = None,
    due_policy: Optional[DuePolicy] = None,
    estimate_policy: Optional[EstimatePolicy] = None,
) -> InferredDraft:
    """Derive due date, description, priority, category and tags from ``title``."""

    if not title or not title.strip():
        raise ValueError("Task title is required")
    text = title.strip()
    current = local_now(now)

    found = extract_due_date(text, current)
    if found is not None:
        cleaned = found.cleaned_title or text
        due = found.due
        logger.debug("Date %r found in title %r", found.matched, text)
    else:
        cleaned = text
        due = (due_policy or default_due_policy())(current)

    draft = InferredDraft(
        title=text,
        description=synthesize_description(cleaned),
        due_date=due,
        priority=infer_priority(cleaned),
        recurrence=DEFAULT_RECURRENCE,
        estimated_minutes=(estimate_policy or random_estimate())(),
        tags=synthesize_tags(cleaned),
        category=infer_category(cleaned),
        cleaned_title=cleaned,
    )
    return draft


__all__ = [
    "CATEGORY_RULES",
    "DESCRIPTION_RULES",
    "PRIORITY_RULES",
    "DuePolicy",
    "EstimatePolicy",
    "InferredDraft",
    "default_due_policy",
    "first_match",
    "fixed_days_ahead",
    "fixed_estimate",
    "infer_category",
    "infer_priority",
    "infer_task",
    "random_days_ahead",
    "random_estimate",
    "synthesize_description",
    "synthesize_tags",
]
