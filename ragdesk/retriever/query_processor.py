"""
Query Processor

Classifies user questions as document questions or tracker questions and
pulls the identifying token (version, project key) out of tracker questions.

Classification is a pure function of the question text: no I/O, no state.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Pattern, Tuple, Union


class QueryIntent(str, Enum):
    """Types of query intent"""
    GENERAL = "general"  # "Summarize the document"
    VERSION_BUGS = "version_bugs"  # "How many bugs in version 1.4.0?"
    VERSION_TASKS = "version_tasks"  # "Which tasks are in 2.0.1?"
    PROJECT_TASKS = "project_tasks"  # "Show tasks for project CORE"
    UNRESOLVED_TRACKER = "unresolved_tracker"  # "Any open Jira tickets for me?"


@dataclass(frozen=True)
class Intent:
    """Classified purpose of a question.

    ``value`` holds the version for version intents, the project key for
    project intents, the raw question for unresolved tracker intents, and
    is None for general questions.
    """
    kind: QueryIntent
    value: Optional[str] = None

    @classmethod
    def general(cls) -> "Intent":
        return cls(QueryIntent.GENERAL)

    @classmethod
    def version_bugs(cls, version: str) -> "Intent":
        return cls(QueryIntent.VERSION_BUGS, version)

    @classmethod
    def version_tasks(cls, version: str) -> "Intent":
        return cls(QueryIntent.VERSION_TASKS, version)

    @classmethod
    def project_tasks(cls, project: str) -> "Intent":
        return cls(QueryIntent.PROJECT_TASKS, project)

    @classmethod
    def unresolved_tracker(cls, question: str) -> "Intent":
        return cls(QueryIntent.UNRESOLVED_TRACKER, question)

    @property
    def is_tracker(self) -> bool:
        return self.kind != QueryIntent.GENERAL

    def __str__(self) -> str:
        if self.value is None or self.kind == QueryIntent.UNRESOLVED_TRACKER:
            return self.kind.value
        return f"{self.kind.value}:{self.value}"


def extract_token(pattern: Union[str, Pattern], question: str) -> Optional[str]:
    """
    Return the first capture group of the first match, or None.

    String patterns are matched case-insensitively.
    """
    if isinstance(pattern, str):
        pattern = re.compile(pattern, re.IGNORECASE)

    match = pattern.search(question)
    if not match:
        return None

    token = match.group(1)
    return token or None


IntentRule = Tuple[Pattern, Callable[[str], Intent]]


class IntentClassifier:
    """
    Decides which data-gathering path a question takes.

    Step 1: a question is tracker-oriented if it mentions any trigger word
    or a four-part version token (v1.2.3.4); otherwise it is GENERAL.

    Step 2: tracker questions are matched against INTENT_RULES top to
    bottom, first match wins. Nothing matching means UNRESOLVED_TRACKER.
    """

    TRIGGER_WORDS = ("jira", "issue", "bug", "task", "story", "ticket", "version")

    VERSION_TOKEN_PATTERN = re.compile(r"\bv\d+\.\d+\.\d+\.\d+\b", re.IGNORECASE)

    VERSION_BUGS_PATTERN = re.compile(
        r"\bbugs? (?:in|for) (?:version )?([\w.-]+)", re.IGNORECASE
    )
    # "tasks for project X" belongs to the project rule below
    VERSION_TASKS_PATTERN = re.compile(
        r"\btasks? (?:in|for) (?!project\b)(?:version )?([\w.-]+)", re.IGNORECASE
    )
    PROJECT_TASKS_PATTERN = re.compile(
        r"\btasks? (?:in|for) (?:project )?([\w-]+)", re.IGNORECASE
    )

    # Order is priority: version tasks must be tried before project tasks
    INTENT_RULES: List[IntentRule] = [
        (VERSION_BUGS_PATTERN, Intent.version_bugs),
        (VERSION_TASKS_PATTERN, Intent.version_tasks),
        (PROJECT_TASKS_PATTERN, Intent.project_tasks),
    ]

    def is_tracker_query(self, question: str) -> bool:
        """Check whether a question should be answered from the tracker"""
        normalized = question.casefold()
        if any(word in normalized for word in self.TRIGGER_WORDS):
            return True
        return self.VERSION_TOKEN_PATTERN.search(question) is not None

    def classify(self, question: str) -> Intent:
        """
        Classify a question. Never fails.

        Args:
            question: Raw user question

        Returns:
            Exactly one Intent
        """
        if not question or not self.is_tracker_query(question):
            return Intent.general()

        for pattern, make_intent in self.INTENT_RULES:
            token = _normalize_token(extract_token(pattern, question))
            if token:
                return make_intent(token)

        return Intent.unresolved_tracker(question)


def _normalize_token(token: Optional[str]) -> Optional[str]:
    """Drop sentence punctuation captured after a token ("1.4.0." -> "1.4.0")"""
    if token is None:
        return None
    return token.rstrip(".") or None


_default_classifier = IntentClassifier()


def classify(question: str) -> Intent:
    """Classify a question with the default classifier"""
    return _default_classifier.classify(question)
