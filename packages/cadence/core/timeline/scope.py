"""Hierarchical variable scopes handed to moment callbacks.

Each scheduling branch works on its own scope pushed from its parent's, so
a write is visible to the writer and its descendants but never to siblings.
"""

from __future__ import annotations

from typing import Any

from cadence.core.timeline.errors import ScopeLookupError

_MISSING = object()


class Scope:
    """A frame of name/value bindings with a link to its parent frame.

    Example:
        >>> root = Scope(user="alice")
        >>> child = root.push()
        >>> child.write("session", 1)
        1
        >>> child.read("user")
        'alice'
        >>> "session" in root
        False
    """

    def __init__(self, parent: Scope | None = None, **initial: Any) -> None:
        self._parent = parent
        self._values: dict[str, Any] = dict(initial)

    @property
    def parent(self) -> Scope | None:
        return self._parent

    @property
    def depth(self) -> int:
        """Number of frames in the chain, this one included."""
        depth = 0
        scope: Scope | None = self
        while scope is not None:
            depth += 1
            scope = scope._parent
        return depth

    def push(self) -> Scope:
        """Create a child scope that inherits from this one."""
        return type(self)(self)

    def read(self, name: str) -> Any:
        """Look a name up through this scope and its ancestors.

        Args:
            name: Variable name

        Returns:
            The value bound in the nearest frame defining ``name``

        Raises:
            ScopeLookupError: If no frame in the chain defines ``name``
        """
        value = self._lookup(name)
        if value is _MISSING:
            raise ScopeLookupError(name)
        return value

    def get(self, name: str, default: Any = None) -> Any:
        """Like ``read`` but returns ``default`` for undefined names."""
        value = self._lookup(name)
        return default if value is _MISSING else value

    def write(self, name: str, value: Any) -> Any:
        """Bind ``name`` in this frame only, shadowing any ancestor binding."""
        self._values[name] = value
        return value

    def local_names(self) -> list[str]:
        return sorted(self._values)

    def _lookup(self, name: str) -> Any:
        scope: Scope | None = self
        while scope is not None:
            if name in scope._values:
                return scope._values[name]
            scope = scope._parent
        return _MISSING

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._lookup(name) is not _MISSING

    def __repr__(self) -> str:
        return f"Scope(depth={self.depth}, names={self.local_names()})"


__all__ = [
    "Scope",
]
