"""Exceptions raised by tplast.

Template parse failures are raised by the template parser and propagate out
of ``parse_for_analysis`` unmodified. Malformed nodes are reported by the
normalizer when a child field named in the visitor key table holds no value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class TplastError(ValueError):
    """Base class for all tplast errors."""


@dataclass
class ParseIssue:
    """A single problem found while parsing a template."""

    message: str
    span: Any = None  # ParseSourceSpan, when the problem has a location

    def __str__(self) -> str:
        if self.span is None:
            return self.message
        start = self.span.start
        return f"{self.message} ({start.file.url}@{start.line + 1}:{start.col})"


class TemplateParseError(TplastError):
    """The template could not be parsed."""

    def __init__(self, issues: list[ParseIssue]):
        self.issues = issues
        super().__init__(self.summary())

    def summary(self) -> str:
        if len(self.issues) == 1:
            return f"Template parse error: {self.issues[0]}"
        lines = [f"Template parse errors ({len(self.issues)}):"]
        lines.extend(f"  - {issue}" for issue in self.issues)
        return "\n".join(lines)


class MalformedNodeError(TplastError):
    """A child field declared for a node kind holds no value."""

    def __init__(self, kind: str, field: str):
        self.kind = kind
        self.field = field
        super().__init__(f"Node of kind '{kind}' has no value for child field '{field}'")


class ConfigError(TplastError):
    """Invalid normalizer configuration."""
