"""Source files, locations and spans produced by the template parser."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field


@dataclass
class ParseSourceFile:
    """The full text of a template plus the path it was read from."""

    content: str
    url: str = ""
    _line_starts: list[int] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self._line_starts = [0]
        for i, ch in enumerate(self.content):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def location_at(self, offset: int) -> ParseLocation:
        """Return the location of ``offset``; line and col are 0-based."""
        offset = max(0, min(offset, len(self.content)))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return ParseLocation(
            file=self,
            offset=offset,
            line=line,
            col=offset - self._line_starts[line],
        )

    def span(self, start: int, end: int) -> ParseSourceSpan:
        return ParseSourceSpan(self.location_at(start), self.location_at(end))


@dataclass
class ParseLocation:
    file: ParseSourceFile = field(repr=False)
    offset: int
    line: int
    col: int


@dataclass
class ParseSourceSpan:
    """A half-open ``[start, end)`` interval of the source file."""

    start: ParseLocation
    end: ParseLocation

    @property
    def text(self) -> str:
        return self.start.file.content[self.start.offset : self.end.offset]


@dataclass
class AbsoluteSourceSpan:
    """Offset-only span used by binding expression nodes."""

    start: int
    end: int
