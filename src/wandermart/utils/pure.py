from datetime import datetime
from typing import Iterable, List, Literal, Optional, Sequence

_ALIGN_RULES = {"l": ":---", "c": ":---:", "r": "---:"}


def generate_markdown_table(
    headers: Optional[Sequence[object]],
    rows: Sequence[Sequence[object]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Render rows as a Markdown table.

    When ``headers`` is None the first row is used as the header.
    ``aligns`` defaults to left for every column. Pipes inside cells are
    escaped so free-text review content cannot break the table.
    """
    if not rows:
        return ""
    if not headers:
        headers, rows = rows[0], rows[1:]

    def cell(value: object) -> str:
        return ("" if value is None else str(value)).replace("|", "\\|").replace("\n", " ")

    aligns = aligns or ["l"] * len(headers)
    if len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    lines = [
        "| " + " | ".join(cell(h) for h in headers) + " |",
        "| " + " | ".join(_ALIGN_RULES[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(cell(c) for c in row) + " |" for row in rows]
    return "\n".join(lines)


def format_price(amount: float) -> str:
    return f"${amount:,.2f}"


def stars(rating: Optional[int]) -> str:
    """'★★★☆☆' for 3; empty when unrated. Ratings outside 1-5 are clamped."""
    if rating is None:
        return ""
    filled = max(0, min(5, int(rating)))
    return "★" * filled + "☆" * (5 - filled)


def short_date(iso_ts: str) -> str:
    try:
        return datetime.fromisoformat(iso_ts).strftime("%Y-%m-%d %H:%M")
    except (TypeError, ValueError):
        return iso_ts or ""


def join_tags(tags: Iterable[str]) -> str:
    return ", ".join(tags)


def split_tags(text: str) -> List[str]:
    """Comma separated input -> tag list, blanks dropped."""
    return [t.strip() for t in (text or "").split(",") if t.strip()]
