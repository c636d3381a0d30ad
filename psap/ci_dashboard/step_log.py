"""Extract toolbox step counters from CI step logs."""

import re

from psap.ci_dashboard.messages import classify_line
from psap.ci_dashboard.models.test_result import MessageType, ToolboxStepResult

_PLAY_PATTERN = re.compile(r"^PLAY \[(?P<name>[^\]]*)\]")
_RECAP_PATTERN = re.compile(
    r"^\S+\s*:\s*ok=(?P<ok>\d+)\b.*?\bfailed=(?P<failed>\d+)\b"
    r"(?:.*?\bignored=(?P<ignored>\d+)\b)?"
)


def parse_toolbox_steps(text: str) -> list[ToolboxStepResult]:
    """Collect the Ansible ``PLAY RECAP`` counters of each toolbox step.

    A toolbox step is an Ansible play; its counters are summed over the hosts
    of its recap. A ``_FLAKE`` marker printed by any play the recap closes
    flags the step as a known flake; the recapped play's own marker wins.

    Args:
        text: Content of the step log

    Returns:
        One result per play, in execution order

    """
    steps: dict[str, ToolboxStepResult] = {}
    current_play: str | None = None
    # flake reasons of the plays run since the last recap, by play name
    flakes: dict[str, str] = {}
    recap_seen = False

    for line in text.splitlines():
        play = _PLAY_PATTERN.match(line)
        if play is not None:
            if recap_seen:
                flakes = {}
                recap_seen = False
            current_play = play.group("name")
            continue

        classified = classify_line(line)
        if classified is not None:
            message_type, message = classified
            if message_type is MessageType.FLAKE and current_play is not None:
                flakes[current_play] = message
            continue

        recap = _RECAP_PATTERN.match(line)
        if recap is None or current_play is None:
            continue

        recap_seen = True
        flake = flakes.get(current_play) or next(iter(flakes.values()), "")
        previous = steps.get(current_play)
        steps[current_play] = ToolboxStepResult(
            name=current_play,
            ok=int(recap.group("ok")) + (previous.ok if previous else 0),
            failures=int(recap.group("failed"))
            + (previous.failures if previous else 0),
            ignored=int(recap.group("ignored") or 0)
            + (previous.ignored if previous else 0),
            flake_failure=flake or (previous.flake_failure if previous else ""),
        )

    return list(steps.values())
