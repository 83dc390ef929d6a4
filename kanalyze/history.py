"""
Session History

Past analyses for one browser session, most recent first. Entries are never
evicted; the whole history disappears with the session.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import AnalysisResponse


@dataclass(frozen=True)
class HistoryItem:
    """
    One stored analysis.

    Attributes:
        key: Stable unique key for this entry (list key, lookup id)
        analysis_id: Identifier reported by the analysis
        timestamp: When the result was received (epoch milliseconds)
        image_src: Data URL of the analyzed image
        analysis: The AnalysisResponse itself
    """
    key: str
    analysis_id: str
    timestamp: float
    image_src: str
    analysis: AnalysisResponse


History = Tuple[HistoryItem, ...]


def unique_key(history: History, analysis_id: str) -> str:
    """
    Derive a key for a new entry that no existing entry uses.

    The model picks analysis ids itself and may repeat them, so collisions
    get a numeric suffix: "abc", "abc-2", "abc-3", ...
    """
    taken = {item.key for item in history}
    if analysis_id not in taken:
        return analysis_id
    n = 2
    while f"{analysis_id}-{n}" in taken:
        n += 1
    return f"{analysis_id}-{n}"


def add_item(
    history: History,
    analysis: AnalysisResponse,
    image_src: str,
    timestamp: float
) -> History:
    """Return a new history with the result prepended."""
    analysis_id = analysis.analysis_id or str(int(timestamp))
    item = HistoryItem(
        key=unique_key(history, analysis_id),
        analysis_id=analysis_id,
        timestamp=timestamp,
        image_src=image_src,
        analysis=analysis,
    )
    return (item,) + history


def find_item(history: History, key: str) -> Optional[HistoryItem]:
    for item in history:
        if item.key == key:
            return item
    return None
