"""Minimal scope container for scope-aware analysis consumers.

Templates declare no bindings the normalizer tracks, so the manager holds a
single empty module scope attached to the ``Program`` root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ScopeManager:
    scopes: list[Scope] = field(default_factory=list)

    @property
    def global_scope(self) -> Scope | None:
        return self.scopes[0] if self.scopes else None

    def add_scope(self, scope: Scope) -> None:
        self.scopes.append(scope)

    def acquire(self, block) -> Scope | None:
        """The innermost scope created for ``block``."""
        for scope in reversed(self.scopes):
            if scope.block is block:
                return scope
        return None


@dataclass(eq=False)
class Scope:
    scope_manager: ScopeManager = field(repr=False)
    type: str
    upper: Scope | None
    block: Any = field(repr=False)
    is_strict: bool = False
    variables: list = field(default_factory=list)
    references: list = field(default_factory=list)
    through: list = field(default_factory=list)
    child_scopes: list[Scope] = field(default_factory=list, repr=False)

    def __post_init__(self):
        self.scope_manager.add_scope(self)
        if self.upper is not None:
            self.upper.child_scopes.append(self)
