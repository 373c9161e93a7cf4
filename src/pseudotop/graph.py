"""Parent/child linking of the ten pseudo-top particles.

Links are integer positions inside the output tuple itself:

    0 (t1) -> 2 (W1), 3 (b1)      2 (W1) -> 4, 5
    1 (t2) -> 6 (W2), 7 (b2)      6 (W2) -> 8, 9
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from .models import GenParticle

PSEUDO_TOP_SIZE = 10

DECAY_TREE_EDGES: tuple[tuple[int, int], ...] = (
    (0, 2),
    (0, 3),
    (2, 4),
    (2, 5),
    (1, 6),
    (1, 7),
    (6, 8),
    (6, 9),
)


def link_decay_tree(particles: Sequence[GenParticle]) -> tuple[GenParticle, ...]:
    """Return copies of the ten particles with mother/daughter links set.

    Any other multiplicity means the reconstruction did not complete, and an
    empty tuple is returned.
    """
    if len(particles) != PSEUDO_TOP_SIZE:
        return ()
    mothers: list[list[int]] = [[] for _ in particles]
    daughters: list[list[int]] = [[] for _ in particles]
    for parent, child in DECAY_TREE_EDGES:
        daughters[parent].append(child)
        mothers[child].append(parent)
    return tuple(
        replace(p, mothers=tuple(mothers[i]), daughters=tuple(daughters[i]))
        for i, p in enumerate(particles)
    )


def children_of(index: int, particles: Sequence[GenParticle]) -> tuple[GenParticle, ...]:
    """Direct daughters of `particles[index]` in the same collection."""
    return tuple(particles[i] for i in particles[index].daughters)


def parents_of(index: int, particles: Sequence[GenParticle]) -> tuple[GenParticle, ...]:
    """Direct mothers of `particles[index]` in the same collection."""
    return tuple(particles[i] for i in particles[index].mothers)
