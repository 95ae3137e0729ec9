"""tplast — normalize template parse trees for generic analysis tools.

Parses Angular-style HTML templates and rewrites the parser's heterogeneous
node tree into one where every node carries a string ``kind``, children are
reachable through a published visitor-key table, comments are a sorted token
stream and the root carries the document range.
"""

__version__ = "0.1.0"

from tplast.parser import parse, parse_for_analysis  # noqa: E402

__all__ = ["__version__", "parse", "parse_for_analysis"]
