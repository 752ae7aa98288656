# planner/services/tags.py
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple


TAG_DELIMITER = ","
MAX_TAG_LENGTH = 40
NAME_RE = re.compile(rf"^.{{1,{MAX_TAG_LENGTH}}}$")


def parse_tags(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a delimited tag string into an ordered, de-duplicated tuple."""
    if not raw:
        return ()
    seen: List[str] = []
    for part in str(raw).split(TAG_DELIMITER):
        name = part.strip()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def join_tags(tags: Iterable[str] | str | None) -> Optional[str]:
    """Serialize tags for storage and the wire. Empty input becomes ``None``."""
    if tags is None:
        return None
    if isinstance(tags, str):
        tags = parse_tags(tags)
    names: List[str] = []
    for tag in tags:
        name = (tag or "").strip()
        if not name:
            continue
        _validate_name(name)
        if name not in names:
            names.append(name)
    return TAG_DELIMITER.join(names) or None


def _validate_name(name: str) -> None:
    if not NAME_RE.match(name):
        raise ValueError(f"Tag name must be between 1 and {MAX_TAG_LENGTH} characters")
    if TAG_DELIMITER in name:
        raise ValueError(f"Tag name cannot contain {TAG_DELIMITER!r}")


__all__ = ["MAX_TAG_LENGTH", "TAG_DELIMITER", "join_tags", "parse_tags"]
