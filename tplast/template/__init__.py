"""Template parser producing the raw node tree that tplast normalizes.

The nodes it builds follow the template grammar's own conventions: no
string ``kind`` discriminator, and ``kind`` reused for binding and event
classification codes on ``BoundAttribute`` and ``BoundEvent``.
"""

from tplast.template.parser import ParsedTemplate, parse_template

__all__ = ["ParsedTemplate", "parse_template"]
