"""Classify diagnostic messages of CI runs by severity."""

import re

from psap.ci_dashboard.models.test_result import MessageType, TestResult

MESSAGE_TYPES_DISPLAY_ORDER: tuple[MessageType, ...] = (
    MessageType.FLAKE,
    MessageType.INFO,
    MessageType.WARNING,
    MessageType.ERROR,
)

_MARKER_PATTERN = re.compile(
    r"^\s*(?P<marker>"
    + "|".join(re.escape(t.marker) for t in MessageType)
    + r")\s*:\s*(?P<text>.+?)\s*$"
)
_TYPES_BY_MARKER = {t.marker: t for t in MessageType}


def messages_of(result: TestResult, message_type: MessageType) -> dict[str, str]:
    """Messages of one category, empty when the run has none."""
    return result.messages.get(message_type, {})


def flake_messages(result: TestResult) -> list[str]:
    """Texts of the known-flake messages of a run."""
    return list(messages_of(result, MessageType.FLAKE).values())


def is_known_flake(result: TestResult) -> bool:
    """Whether the run failed because of a recognized flake.

    Only the flake messages count, the ``flake_failure`` flag reported by the
    CI is not enough on its own.
    """
    return len(messages_of(result, MessageType.FLAKE)) != 0


def classify_line(line: str) -> tuple[MessageType, str] | None:
    """Recognize a ``_FLAKE: text`` style marker line.

    Args:
        line: One line of a step log

    Returns:
        The message category and text, or None for an ordinary line

    """
    match = _MARKER_PATTERN.match(line)
    if match is None:
        return None
    return _TYPES_BY_MARKER[match.group("marker")], match.group("text")


def classify_log(text: str, source: str) -> dict[MessageType, dict[str, str]]:
    """Group the marker lines of a log by category.

    Args:
        text: Content of the log
        source: Name of the log, used to build unique message keys

    Returns:
        Category to {"source:line_number": message text}

    """
    messages: dict[MessageType, dict[str, str]] = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        classified = classify_line(line)
        if classified is None:
            continue
        message_type, message = classified
        messages.setdefault(message_type, {})[f"{source}:{line_number}"] = message
    return messages
