# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Display payload for providing ancestors.

Pure functions turning AncestorRecords into the markdown an editor shows
as a first-line indicator with a hover explanation. UI lifecycle (creating
decorations, attaching hovers) belongs to the host.

Hover layout:
    **Ancestors provide values 💉:**

    ---

    **Provides:**
    - **theme**: dark

    Root.vue
    *(at /ws/src/Root.vue)*
"""

from typing import Any, Dict, List, Optional, Sequence

from provide_seeker.models import NON_VALID_PROVIDE_TEXT, AncestorRecord
from provide_seeker.text_scanner import parse_provide_argument

INDICATOR_TEXT = "Ancestors provide values 💉"
HOVER_HEADER = f"**{INDICATOR_TEXT}:**\n"
SECTION_SEPARATOR = "\n\n---\n\n"
NON_VALID_LINE = f"- *{NON_VALID_PROVIDE_TEXT}*"


def format_provide_call(call_text: str) -> str:
    """Render one provide call as markdown bullets, one per entry."""
    lines: List[str] = []
    for entry in parse_provide_argument(call_text):
        if entry.is_valid:
            lines.append(f"- **{entry.key}**: {entry.value}")
        else:
            lines.append(NON_VALID_LINE)
    return "\n\n".join(lines)


def format_record(record: AncestorRecord) -> str:
    parsed = "\n\n".join(format_provide_call(call) for call in record.provides)
    return f"**Provides:**\n{parsed or '(no values)'}\n\n{record.name}\n*(at {record.source})*"


def format_hover_markdown(records: Sequence[AncestorRecord]) -> str:
    """Render the full hover text for a list of providing ancestors."""
    sections = [HOVER_HEADER] + [format_record(record) for record in records]
    return SECTION_SEPARATOR.join(sections)


def build_display_payload(records: Sequence[AncestorRecord]) -> Optional[Dict[str, Any]]:
    """Build the indicator payload, or None when nothing is provided.

    The indicator is anchored to the first line of the document.
    """
    if not records:
        return None
    return {
        "indicator": INDICATOR_TEXT,
        "line": 0,
        "hover": format_hover_markdown(records),
        "ancestor_count": len(records),
    }
