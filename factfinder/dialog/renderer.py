"""Render completion state as the tracking block of the next prompt."""

from typing import Any

from factfinder.dialog.models import (
    CompletionReport,
    FieldStatus,
    GroupCompletion,
    MatchResult,
)

_GROUP_TITLES = {
    "essential": "ESSENTIAL INFORMATION",
    "important": "IMPORTANT INFORMATION",
    "optional": "OPTIONAL INFORMATION",
}


class TrackingStatusRenderer:
    """Formats a CompletionReport for the model.

    Example output:
        ESSENTIAL INFORMATION (1/2 complete):
        - companyName: PROVIDED ✓ (Acme)
        - announcementType: MISSING (needs attention)
        ...
        COMPLETION STATUS: 35% complete
        READY TO SUGGEST GENERATION: NO
    """

    def __init__(self, preview_length: int = 30) -> None:
        self._preview_length = preview_length

    def preview(self, value: Any) -> str:
        if isinstance(value, str):
            if len(value) > self._preview_length:
                return value[: self._preview_length] + "..."
            return value
        if isinstance(value, list):
            return f"[{len(value)} items]"
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def render_field(self, match: MatchResult) -> str:
        status = match.status
        if status == FieldStatus.PROVIDED:
            return f"- {match.field}: {status.value} ✓ ({self.preview(match.value)})"
        if status == FieldStatus.LIKELY_PROVIDED:
            return (
                f"- {match.field}: {status.value} ✓ "
                f'(as "{match.key}": {self.preview(match.value)})'
            )
        if status == FieldStatus.UNAVAILABLE:
            return f"- {match.field}: {status.value} (user doesn't know)"
        return f"- {match.field}: {status.value} (needs attention)"

    def render_group(self, group: GroupCompletion) -> str:
        header = f"{_GROUP_TITLES[group.group.value]} ({group.complete}/{group.total} complete):"
        if not group.matches:
            return f"{header}\nNone defined"
        lines = [self.render_field(match) for match in group.matches]
        return "\n".join([header, *lines])

    def render(self, report: CompletionReport) -> str:
        sections = [self.render_group(group) for group in report.groups]
        ready = "YES" if report.is_ready else "NO"
        footer = (
            f"COMPLETION STATUS: {report.percentage}% complete\n"
            f"READY TO SUGGEST GENERATION: {ready}"
        )
        return "\n\n".join([*sections, footer])
