"""Classification of generator particles ahead of clustering.

Two passes per event:
- the full history is scanned for b hadrons (used later as jet-flavour ghosts);
- the final state is split into dressing candidates (charged leptons and
  photons) and neutrinos, after dropping orphans, beam remnants and anything
  descending from a hadron.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .models import STATUS_BEAM, STATUS_STABLE, EventInput, GenParticle
from .pdg import DRESSING_CANDIDATES, NEUTRINOS, is_b_hadron_code, is_hadron
from .physics import has_valid_pt

logger = logging.getLogger(__name__)

MAX_ANCESTRY_DEPTH = 1000


@dataclass(frozen=True)
class ClassifiedParticles:
    """Index sets and neutrino copies produced by `classify_particles`."""

    b_hadron_indices: tuple[int, ...]
    lepton_candidates: tuple[int, ...]
    neutrinos: tuple[GenParticle, ...]
    n_stables: int


def is_b_hadron(index: int, particles: Sequence[GenParticle]) -> bool:
    """Return True for the last b hadron of a decay chain.

    A particle whose direct daughters include another b hadron is skipped,
    e.g. for B* -> B0 gamma only the B0 is kept.
    """
    particle = particles[index]
    if not is_b_hadron_code(particle.pdg_id):
        return False
    return not any(is_b_hadron_code(particles[d].pdg_id) for d in particle.daughters)


def is_from_hadron(index: int, particles: Sequence[GenParticle]) -> bool:
    """Return True if any ancestor below the incident beam is a hadron.

    Mothers without mothers of their own are beam particles and are not
    followed. Raises `ValueError` when the history is deeper than
    `MAX_ANCESTRY_DEPTH`.
    """
    stack = [(index, 0)]
    visited = {index}
    while stack:
        current, depth = stack.pop()
        if depth > MAX_ANCESTRY_DEPTH:
            raise ValueError(
                f"Particle history of index {index} exceeds {MAX_ANCESTRY_DEPTH} generations."
            )
        # Reverse so mothers are visited in their listed order.
        for mother_index in reversed(particles[current].mothers):
            mother = particles[mother_index]
            if not mother.mothers:
                continue
            if is_hadron(mother.pdg_id):
                return True
            if mother_index not in visited:
                visited.add(mother_index)
                stack.append((mother_index, depth + 1))
    return False


def find_b_hadrons(particles: Sequence[GenParticle]) -> tuple[int, ...]:
    """Indices of unstable, lowest-generation b hadrons in the history."""
    return tuple(
        i
        for i, p in enumerate(particles)
        if p.status != STATUS_STABLE and is_b_hadron(i, particles)
    )


def classify_particles(event: EventInput) -> ClassifiedParticles:
    """Split the event's final state into dressing candidates and neutrinos.

    Neutrinos with a non-finite or non-positive pT are dropped so the output
    ordering stays well defined.
    """
    particles = event.gen_particles
    b_hadrons = find_b_hadrons(particles)

    n_stables = 0
    lepton_candidates: list[int] = []
    neutrinos: list[GenParticle] = []
    for index in event.final_state:
        p = particles[index]
        if p.status != STATUS_STABLE:
            continue
        n_stables += 1
        if not p.mothers:
            continue
        if particles[p.mothers[0]].status == STATUS_BEAM:
            continue
        if is_from_hadron(index, particles):
            continue
        if p.abs_pdg_id in DRESSING_CANDIDATES:
            lepton_candidates.append(index)
        elif p.abs_pdg_id in NEUTRINOS and has_valid_pt(p.p4):
            neutrinos.append(p.detached(status=STATUS_STABLE))

    neutrinos.sort(key=lambda nu: nu.pt, reverse=True)
    logger.debug(
        "Event %s: %d stable, %d b hadrons, %d dressing candidates, %d neutrinos",
        event.event_id,
        n_stables,
        len(b_hadrons),
        len(lepton_candidates),
        len(neutrinos),
    )
    return ClassifiedParticles(
        b_hadron_indices=b_hadrons,
        lepton_candidates=tuple(lepton_candidates),
        neutrinos=tuple(neutrinos),
        n_stables=n_stables,
    )
