"""Core lens abstractions: the lens value, composition, and the verbs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from framelens.containers import map_elements

S = TypeVar("S")
A = TypeVar("A")
B = TypeVar("B")


@dataclass(frozen=True, repr=False)
class BaseLens(Generic[S, A]):
    """A (view, set) pair focusing on a part A of a structure S.

    ``view`` reads the focus. ``set`` returns a new structure with the focus
    replaced and must leave its input untouched. Nothing checks the lens laws;
    use :class:`Lens` for lenses that satisfy them and :class:`IllegalLens`
    for those that do not.
    """

    view: Callable[[S], A]
    set: Callable[[S, A], S]
    name: str = "lens"

    def compose(self, inner: BaseLens[A, B]) -> BaseLens[S, B]:
        return compose(self, inner)

    def __rshift__(self, inner: BaseLens[A, B]) -> BaseLens[S, B]:
        return compose(self, inner)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class Lens(BaseLens[S, A]):
    """Well-behaved lens: View-Set, Set-View and Set-Set hold."""


class IllegalLens(BaseLens[S, A]):
    """Lens-shaped pair that violates Set-View.

    Typically the focus is chosen by a predicate re-evaluated on the current
    structure, so a write can change which elements a later view selects.
    """


def lens(view: Callable[[S], A], set: Callable[[S, A], S], name: str | None = None) -> Lens[S, A]:
    """Build a lens from a view function and a set function."""
    return Lens(view, set, name or "lens")


def illegal_lens(
    view: Callable[[S], A], set: Callable[[S, A], S], name: str | None = None
) -> IllegalLens[S, A]:
    """Build a lens that is known not to satisfy the lens laws."""
    return IllegalLens(view, set, name or "illegal_lens")


id_l: Lens[Any, Any] = Lens(lambda s: s, lambda s, a: a, "id_l")


def _compose2(outer: BaseLens[S, A], inner: BaseLens[A, B]) -> BaseLens[S, B]:
    for part in (outer, inner):
        if not isinstance(part, BaseLens):
            raise TypeError(f"compose expects lenses, got {type(part).__name__}")

    def view_fn(s: S) -> B:
        return inner.view(outer.view(s))

    def set_fn(s: S, c: B) -> S:
        return outer.set(s, inner.set(outer.view(s), c))

    kind = IllegalLens if isinstance(outer, IllegalLens) or isinstance(inner, IllegalLens) else Lens
    return kind(view_fn, set_fn, f"{outer.name} >> {inner.name}")


def compose(*lenses: BaseLens) -> BaseLens:
    """Compose lenses left to right: outermost first.

    ``compose(a, b, c)`` focuses through ``a``, then ``b``, then ``c``; with
    no arguments the identity lens is returned. The result is illegal when
    any component is.
    """
    if not lenses:
        return id_l
    result = lenses[0]
    for inner in lenses[1:]:
        result = _compose2(result, inner)
    return result


def view(data: S, lens: BaseLens[S, A]) -> A:
    """Return the focus of ``lens`` in ``data``."""
    return lens.view(data)


def set_(data: S, lens: BaseLens[S, A], value: A) -> S:
    """Return a copy of ``data`` with the focus of ``lens`` replaced by ``value``."""
    return lens.set(data, value)


def over(data: S, lens: BaseLens[S, A], fn: Callable[[A], A]) -> S:
    """Apply ``fn`` to the focus and write the result back."""
    return lens.set(data, fn(lens.view(data)))


def over_map(data: S, lens: BaseLens[S, Any], fn: Callable[[Any], Any]) -> S:
    """Apply ``fn`` to every element of a sequence-valued focus.

    Usually ``lens`` ends in :func:`framelens.traversal.map_l`. Each element
    is updated independently and the focus keeps its container kind.
    """
    return over(data, lens, lambda focus: map_elements(focus, fn))
