from __future__ import annotations

from typing import List


def split_command_line(text: str, max_parts: int = 3) -> List[str]:
    """Split on runs of whitespace into at most `max_parts` parts.

    The last part keeps the rest of the line verbatim (inner spacing and case
    preserved apart from the trimmed ends).
    """
    raw = str(text or "").strip()
    if not raw:
        return []
    return raw.split(None, max_parts - 1)
