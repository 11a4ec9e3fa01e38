"""Keyword blocklist for unwanted content."""

# Stems matched as case-insensitive substrings of "title summary".
# Death and violence, crime, politics, disasters.
BLOCKLIST = (
    "morte",
    "morto",
    "assassin",
    "homic",
    "crime",
    "violên",
    "tirote",
    "trág",
    "trag",
    "estupro",
    "roubo",
    "furto",
    "sequestro",
    "corpo",
    "política",
    "eleição",
    "partido",
    "corrup",
    "escând",
    "acidente grave",
    "desastre",
    "catástro",
    "explos",
)


def is_blocked(title: str, summary: str = "", blocklist=BLOCKLIST) -> bool:
    """True when any blocklisted stem occurs in the title or summary."""
    haystack = f"{title} {summary}".casefold()
    return any(term.casefold() in haystack for term in blocklist)
