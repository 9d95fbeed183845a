"""Hierarchical attach-point transform stack.

Each body part is drawn in its own character's native pixel space.  To
hang a child part (say, a Moth arm) on a parent part (a Heather torso),
the stack pushes a matrix that maps the child's attach-point coordinate
onto the parent's, rescaled for both characters' local and global scale.
Nested pushes mirror the skeleton: torso -> limbs / head -> hair.

Prefer :meth:`TransformStack.attached` over manual push/pop pairs; the
context manager always pops what it pushed, even on error.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from dollforge.geometry import Matrix
from dollforge.models import OVERSIZED_HAIR_CHARACTER, AttachPoint, Character
from dollforge.registry import CharacterRegistry


def attach_matrix(
    registry: CharacterRegistry,
    parent: Character,
    child: Character,
    point: AttachPoint,
) -> Matrix:
    """Alignment matrix placing *child*'s *point* on *parent*'s *point*.

    Order: translate to the parent's point, scale by the local-scale ratio
    (skipped for the oversized-hair parent's ``HAIR`` point), scale by the
    global scale-factor ratio, translate by minus the child's point.
    ``GHOST_TAIL`` is delegated to :func:`ghost_tail_matrix`.
    """
    if point is AttachPoint.GHOST_TAIL:
        return ghost_tail_matrix(registry, parent, child)

    parent_info = registry.attach_point(parent, point)
    child_info = registry.attach_point(child, point)

    mtx = Matrix().translate_vector(parent_info.position)
    if parent != OVERSIZED_HAIR_CHARACTER or point is not AttachPoint.HAIR:
        mtx = mtx.scale_uniform(parent_info.scale / child_info.scale)
    mtx = mtx.scale_uniform(
        registry.scale_factor(parent) / registry.scale_factor(child)
    )
    return mtx.translate_vector(child_info.position.negative())


def ghost_tail_matrix(
    registry: CharacterRegistry, parent: Character, child: Character
) -> Matrix:
    """Stretch a tail drawn between the child's legs across the parent's legs.

    Horizontal scale is the ratio of leg spans.  Vertical scale averages
    that with the global scale-factor ratio, a tuned compromise that keeps
    the tail from looking squashed.  Local attach-point scales are unused.
    """
    parent_front = registry.attach_point(parent, AttachPoint.LEG_FRONT).position
    parent_back = registry.attach_point(parent, AttachPoint.LEG_BACK).position
    child_front = registry.attach_point(child, AttachPoint.LEG_FRONT).position
    child_back = registry.attach_point(child, AttachPoint.LEG_BACK).position

    tail_span = child_back.x - child_front.x
    legs_span = parent_back.x - parent_front.x
    scale_x = legs_span / tail_span
    factor_ratio = registry.scale_factor(parent) / registry.scale_factor(child)
    scale_y = (factor_ratio + scale_x) / 2

    return (
        Matrix()
        .translate_vector(parent_front)
        .scale(scale_x, scale_y)
        .translate_vector(child_front.negative())
    )


class TransformStack:
    """Stack of composed matrices; index 0 is the root and is never popped.

    Args:
        registry: Source of attach points and scale factors.
        root: Bottom-of-stack transform (identity by default).
    """

    def __init__(self, registry: CharacterRegistry, root: Matrix | None = None) -> None:
        self._registry = registry
        self._stack: list[Matrix] = [root if root is not None else Matrix()]
        # total pushes since construction, for instrumentation
        self.push_count = 0

    @property
    def top(self) -> Matrix:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        """Number of matrices above the root."""
        return len(self._stack) - 1

    def push(self, mtx: Matrix) -> Matrix:
        """Push ``top x mtx`` and return it."""
        composed = self.top.transform_matrix(mtx)
        self._stack.append(composed)
        self.push_count += 1
        return composed

    def push_attach(
        self, parent: Character, child: Character, point: AttachPoint
    ) -> Matrix:
        """Push the alignment of *child* onto *parent* at *point*."""
        return self.push(attach_matrix(self._registry, parent, child, point))

    def pop(self) -> Matrix:
        """Remove and return the most recent push.

        Raises:
            IndexError: If only the root remains.
        """
        if len(self._stack) == 1:
            raise IndexError("cannot pop the root transform")
        return self._stack.pop()

    @contextmanager
    def pushed(self, mtx: Matrix) -> Iterator[Matrix]:
        """Scope a raw push: ``with stack.pushed(m): ...``."""
        depth = len(self._stack)
        composed = self.push(mtx)
        try:
            yield composed
        finally:
            del self._stack[depth:]

    @contextmanager
    def attached(
        self, parent: Character, child: Character, point: AttachPoint
    ) -> Iterator[Matrix]:
        """Scope an attach push: ``with stack.attached(torso, arms, ARM_BACK): ...``."""
        with self.pushed(attach_matrix(self._registry, parent, child, point)) as mtx:
            yield mtx
