import hashlib
from collections.abc import Sequence

DEFAULT_CATEGORY_COLORS = (
    "#e99537",
    "#4da568",
    "#6471eb",
    "#db5a54",
    "#df4e92",
    "#c44fe9",
    "#eb5429",
    "#61c9ea",
    "#805dee",
    "#6ad28a",
)

DEFAULT_UNCATEGORIZED_COLOR = "#737373"

SUCCESS_COLOR = "var(--color-success)"


def pick_color(
    key: str,
    palette: Sequence[str] = DEFAULT_CATEGORY_COLORS,
    fallback: str = DEFAULT_UNCATEGORIZED_COLOR,
) -> str:
    """Map ``key`` to a palette entry, stable across processes and runs."""
    if not palette:
        return fallback
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return palette[int.from_bytes(digest[:8], "big") % len(palette)]
