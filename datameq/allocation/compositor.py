"""
Insertion Compositor - Merge drawn lines with caller-supplied inserts.

Position k places an insert before the line that would otherwise be the
k-th line of output; len(combined) + 1 appends it at the end. Positions
beyond that are clamped to the end. Inserts at position <= 0 or with blank
text are dropped and never counted.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence

from datameq.allocation.types import InsertSpec


def group_inserts(inserts: Iterable[InsertSpec], line_count: int) -> Dict[int, List[str]]:
    """
    Map output position -> insert texts, keeping input order per position.

    Positions past the end are clamped to line_count + 1.
    """
    end = line_count + 1
    grouped: Dict[int, List[str]] = defaultdict(list)
    for insert in inserts:
        if insert.position <= 0 or not insert.text.strip():
            continue
        grouped[min(insert.position, end)].append(insert.text)
    return grouped


def compose(combined: Sequence[str], inserts: Iterable[InsertSpec]) -> List[str]:
    """
    Build the output line sequence.

    Example:
        >>> compose(["a", "b", "c"], [InsertSpec(1, "X"), InsertSpec(2, "Y"), InsertSpec(4, "Z")])
        ['X', 'a', 'Y', 'b', 'c', 'Z']
    """
    grouped = group_inserts(inserts, len(combined))

    output: List[str] = list(grouped.get(1, []))
    for index, line in enumerate(combined, start=1):
        output.append(line)
        output.extend(grouped.get(index + 1, []))
    return output
