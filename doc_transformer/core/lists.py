"""
Reconstruction of nested lists from a flat stream of leveled items.

Word-processor formats store a list as consecutive paragraphs, each tagged with
a numbering reference and a 0-based level. ListBuilder turns that stream back
into nested ListElement trees using a stack of open lists indexed by level.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from doc_transformer.core.document import Element, ListElement, ListItem

FLUSH_DECREASE = "decrease"
FLUSH_FLAVOR = "flavor"
FLUSH_END = "end"


@dataclass
class FlushEvent:
    """Record of one open list being closed."""
    reason: str
    level: int
    numbered: bool


@dataclass
class _Frame:
    level: int
    numbered: bool
    items: List[ListItem] = field(default_factory=list)

    def to_list(self) -> ListElement:
        return ListElement(elements=self.items, numbered=self.numbered)


class ListBuilder:
    """
    Accumulates list items and emits completed top-level lists.

    A closed list always keeps the flavor (numbered or bulleted) recorded when
    it was opened, regardless of the flavor of the item that closed it.

    Usage:
        builder = ListBuilder()
        for element, level, numbered in items:
            result.extend(builder.push(element, level, numbered))
        finished = builder.finish()
    """

    def __init__(self):
        self._stack: List[_Frame] = []
        self.flushes: List[FlushEvent] = []

    @property
    def is_open(self) -> bool:
        return bool(self._stack)

    @property
    def current_level(self) -> Optional[int]:
        return self._stack[-1].level if self._stack else None

    def push(self, element: Element, level: int, numbered: bool) -> List[ListElement]:
        """
        Add one item at the given level.

        Returns the top-level lists completed by this item (at most one, when a
        flavor change at the root level splits the run).
        """
        if level < 0:
            raise ValueError(f"List level must be non-negative, got {level}")

        finished: List[ListElement] = []
        if not self._stack:
            self._stack.append(_Frame(level, numbered))
        else:
            while self._stack[-1].level > level:
                closed = self._pop(FLUSH_DECREASE)
                if not self._stack:
                    # The run started deeper than this item; re-root under it.
                    self._stack.append(_Frame(level, numbered, [ListItem(closed)]))

            top = self._stack[-1]
            if top.level < level:
                for nested_level in range(top.level + 1, level + 1):
                    self._stack.append(_Frame(nested_level, numbered))
            elif top.numbered != numbered:
                closed = self._pop(FLUSH_FLAVOR)
                if not self._stack:
                    finished.append(closed)
                self._stack.append(_Frame(level, numbered))

        self._stack[-1].items.append(ListItem(element))
        return finished

    def finish(self) -> Optional[ListElement]:
        """Close every open list and return the completed top-level list."""
        closed = None
        while self._stack:
            closed = self._pop(FLUSH_END)
        return closed

    def _pop(self, reason: str) -> ListElement:
        frame = self._stack.pop()
        self.flushes.append(FlushEvent(reason, frame.level, frame.numbered))
        closed = frame.to_list()
        if self._stack:
            self._stack[-1].items.append(ListItem(closed))
        return closed


def build_lists(items) -> List[ListElement]:
    """Build the lists for an iterable of (element, level, numbered) tuples."""
    builder = ListBuilder()
    result: List[ListElement] = []
    for element, level, numbered in items:
        result.extend(builder.push(element, level, numbered))
    last = builder.finish()
    if last is not None:
        result.append(last)
    return result
