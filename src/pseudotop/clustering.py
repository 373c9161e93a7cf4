"""Sequential-recombination clustering through FastJet.

Inputs are `(index, LorentzVector)` pairs; each index is attached to its
`PseudoJet` as the user index so cluster membership can be mapped back to
particle records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import fastjet

from .models import CLUSTERING_ALGORITHMS, LorentzVector

_ALGORITHMS = {
    "antikt": fastjet.antikt_algorithm,
    "kt": fastjet.kt_algorithm,
    "cambridge": fastjet.cambridge_algorithm,
}


@dataclass(frozen=True)
class Cluster:
    """One clustered jet with constituent indices ordered by decreasing pT."""

    p4: LorentzVector
    constituents: tuple[int, ...]
    area: float = 0.0

    @property
    def pt(self) -> float:
        """Transverse momentum of `p4`."""
        return self.p4.pt

    @property
    def eta(self) -> float:
        """Pseudorapidity of `p4`."""
        return self.p4.eta


@dataclass(frozen=True)
class JetClusterer:
    """Stateless wrapper around one FastJet jet definition.

    Every `cluster` call owns a fresh `ClusterSequence`, so one instance can
    serve concurrent events.
    """

    radius: float
    algorithm: str = "antikt"
    _definition: object = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.algorithm not in CLUSTERING_ALGORITHMS:
            supported = ", ".join(CLUSTERING_ALGORITHMS)
            raise ValueError(
                f"Unknown clustering algorithm '{self.algorithm}'. Supported: {supported}"
            )
        if self.radius <= 0.0:
            raise ValueError(f"Cone radius must be positive, got {self.radius!r}.")
        definition = fastjet.JetDefinition(_ALGORITHMS[self.algorithm], self.radius)
        object.__setattr__(self, "_definition", definition)

    def cluster(
        self,
        inputs: Iterable[tuple[int, LorentzVector]],
        min_pt: float = 0.0,
    ) -> list[Cluster]:
        """Cluster inputs and return inclusive jets above `min_pt`, hardest first."""
        pseudojets = []
        for index, p4 in inputs:
            pj = fastjet.PseudoJet(p4.px, p4.py, p4.pz, p4.e)
            pj.set_user_index(index)
            pseudojets.append(pj)
        if not pseudojets:
            return []

        sequence = fastjet.ClusterSequence(pseudojets, self._definition)
        clusters: list[Cluster] = []
        # Constituents are only reachable while `sequence` is alive.
        for jet in fastjet.sorted_by_pt(sequence.inclusive_jets(min_pt)):
            constituents = fastjet.sorted_by_pt(jet.constituents())
            clusters.append(
                Cluster(
                    p4=LorentzVector(jet.px(), jet.py(), jet.pz(), jet.E()),
                    constituents=tuple(c.user_index() for c in constituents),
                    area=jet.area() if jet.has_area() else 0.0,
                )
            )
        return clusters
