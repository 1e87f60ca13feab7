"""
Prompt Composer

Builds the final instruction string sent to the language model from the
assembled context and the user's question.

Composition is deterministic: same (context, question, mode) in, same
prompt out.
"""

from enum import Enum
from typing import Optional


class PromptMode(str, Enum):
    """How the context should be presented to the model"""
    DOCUMENT = "document"  # Context is document excerpts
    TRACKER_AUGMENTED = "tracker_augmented"  # Context is tracker data or an error note
    PLAIN = "plain"  # No context, question goes through as-is


DOCUMENT_PROMPT = """Your task is to answer questions about the document, using the following document context:

CONTEXT:
{context}

QUESTION:
{question}"""


# The model may ignore context that does not fit the question
TRACKER_AUGMENTED_PROMPT = """You are an assistant that helps with both general questions and queries about Jira. Please use the following context data when answering the question.

CONTEXT:
{context}

QUESTION:
{question}

Based on the context, provide a helpful response. If the context doesn't have relevant information, respond naturally as if having a conversation."""


JQL_PROMPT = """Convert this question about Jira into a JQL query. Respond with ONLY the JQL query, nothing else.

Question: {question}"""


def compose(context: Optional[str], question: str, mode: PromptMode) -> str:
    """
    Compose the prompt for the language model.

    Args:
        context: Assembled context text (may be None or empty)
        question: The user's question
        mode: Presentation mode

    Returns:
        Prompt string
    """
    if mode == PromptMode.DOCUMENT:
        return DOCUMENT_PROMPT.format(context=context or "", question=question)

    if mode == PromptMode.TRACKER_AUGMENTED and context:
        return TRACKER_AUGMENTED_PROMPT.format(context=context, question=question)

    return question


def compose_jql_request(question: str) -> str:
    """Prompt asking the model for a bare JQL query"""
    return JQL_PROMPT.format(question=question)
