"""Hadronic jet building with ghost-associated b tagging."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Sequence

from .clustering import JetClusterer
from .models import STATUS_STABLE, EventInput, GenJet, LorentzVector, PseudoTopConfig
from .pdg import B_QUARK, is_neutrino
from .physics import ghost_p4, has_valid_pt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JetCollection:
    """Selected jets plus their split into b-tagged and light positions."""

    jets: tuple[GenJet, ...]
    b_jet_indices: tuple[int, ...]
    light_jet_indices: tuple[int, ...]

    @property
    def b_jets(self) -> tuple[GenJet, ...]:
        """Jets holding at least one b-hadron ghost."""
        return tuple(self.jets[i] for i in self.b_jet_indices)

    @property
    def light_jets(self) -> tuple[GenJet, ...]:
        """Jets without b-hadron ghosts."""
        return tuple(self.jets[i] for i in self.light_jet_indices)


@dataclass(frozen=True)
class JetBuilder:
    """Cluster the remaining final state together with b-hadron ghosts."""

    min_pt: float
    max_eta: float
    clusterer: JetClusterer

    @classmethod
    def from_config(cls, config: PseudoTopConfig) -> "JetBuilder":
        """Build a jet builder from the jet thresholds and cone size."""
        return cls(
            min_pt=config.jet_min_pt,
            max_eta=config.jet_max_eta,
            clusterer=JetClusterer(radius=config.jet_cone_size, algorithm=config.algorithm),
        )

    def jet_inputs(
        self,
        event: EventInput,
        consumed: AbstractSet[int],
        b_hadrons: Sequence[int],
    ) -> list[tuple[int, LorentzVector]]:
        """Collect clustering inputs: visible stable particles, then ghosts."""
        particles = event.gen_particles
        inputs: list[tuple[int, LorentzVector]] = []
        for index in event.final_state:
            p = particles[index]
            if p.status != STATUS_STABLE or not has_valid_pt(p.p4):
                continue
            if is_neutrino(p.pdg_id) or index in consumed:
                continue
            inputs.append((index, p.p4))
        for index in b_hadrons:
            p4 = particles[index].p4
            if not has_valid_pt(p4):
                continue
            inputs.append((index, ghost_p4(p4)))
        return inputs

    def build(
        self,
        event: EventInput,
        consumed: AbstractSet[int],
        b_hadrons: Sequence[int],
    ) -> JetCollection:
        """Cluster jets and tag those containing at least one b-hadron ghost."""
        ghosts = set(b_hadrons)
        clusters = self.clusterer.cluster(
            self.jet_inputs(event, consumed, b_hadrons),
            min_pt=self.min_pt,
        )

        jets: list[GenJet] = []
        b_jet_indices: list[int] = []
        light_jet_indices: list[int] = []
        for cluster in clusters:
            if abs(cluster.eta) > self.max_eta:
                continue
            tagged = tuple(i for i in cluster.constituents if i in ghosts)
            if tagged:
                b_jet_indices.append(len(jets))
            else:
                light_jet_indices.append(len(jets))
            jets.append(
                GenJet(
                    p4=cluster.p4,
                    constituents=tuple(i for i in cluster.constituents if i not in ghosts),
                    pdg_id=B_QUARK if tagged else 0,
                    area=cluster.area,
                    b_hadrons=tagged,
                )
            )

        logger.debug(
            "Event %s: %d jets (%d b-tagged)",
            event.event_id,
            len(jets),
            len(b_jet_indices),
        )
        return JetCollection(
            jets=tuple(jets),
            b_jet_indices=tuple(b_jet_indices),
            light_jet_indices=tuple(light_jet_indices),
        )
