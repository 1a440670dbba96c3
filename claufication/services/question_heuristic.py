"""Heuristic for spotting assistant text that waits on an answer."""

QUESTION_PHRASES: tuple[str, ...] = (
    "(y/n)",
    "(yes/no)",
    "do you want",
    "would you like",
    "should i",
    "shall i",
    "can i",
    "may i",
    "please confirm",
    "proceed?",
    "which option",
    "what would you",
    "approve",
    "permission",
)

ASK_USER_MARKER = "askuserquestion"


def _last_non_blank_line(text: str) -> str:
    for line in reversed(text.split("\n")):
        if line.strip():
            return line
    return ""


def looks_like_question(text: str) -> bool:
    """Classify text as awaiting a yes/no or clarifying answer.

    Only the last non-blank line is checked for phrases and a trailing
    question mark; the AskUserQuestion marker counts anywhere in the text.

    Args:
        text: Assistant text to classify.

    Returns:
        True if the text looks like it is waiting on the user.
    """
    last_line = _last_non_blank_line(text).strip()
    last_line_lower = last_line.lower()

    if any(phrase in last_line_lower for phrase in QUESTION_PHRASES):
        return True

    if last_line.endswith("?"):
        return True

    return ASK_USER_MARKER in text.lower()
