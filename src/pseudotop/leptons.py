"""Dressed-lepton building: charged leptons clustered with nearby photons."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .clustering import JetClusterer
from .models import EventInput, GenJet, PseudoTopConfig
from .pdg import is_charged_lepton
from .physics import has_valid_pt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DressedLeptons:
    """Accepted dressed leptons and every final-state index they consumed."""

    leptons: tuple[GenJet, ...]
    consumed: frozenset[int]


@dataclass(frozen=True)
class LeptonDresser:
    """Cluster lepton/photon candidates and keep clusters seeded by a lepton."""

    min_pt: float
    max_eta: float
    clusterer: JetClusterer

    @classmethod
    def from_config(cls, config: PseudoTopConfig) -> "LeptonDresser":
        """Build a dresser from the lepton thresholds and cone size."""
        return cls(
            min_pt=config.lepton_min_pt,
            max_eta=config.lepton_max_eta,
            clusterer=JetClusterer(radius=config.lepton_cone_size, algorithm=config.algorithm),
        )

    def dress(self, event: EventInput, candidates: Sequence[int]) -> DressedLeptons:
        """Build dressed leptons from candidate final-state indices.

        Photon-only clusters are discarded. The representative lepton (which
        sets the jet's pdg id and charge) is the hardest electron or muon in
        the cluster; on equal pT the first one seen is kept.
        """
        particles = event.gen_particles
        inputs = [
            (index, particles[index].p4)
            for index in candidates
            if has_valid_pt(particles[index].p4)
        ]
        clusters = self.clusterer.cluster(inputs, min_pt=self.min_pt)

        leptons: list[GenJet] = []
        consumed: set[int] = set()
        for cluster in clusters:
            if abs(cluster.eta) > self.max_eta:
                continue
            representative = None
            for index in cluster.constituents:
                cand = particles[index]
                if not is_charged_lepton(cand.pdg_id):
                    continue
                if representative is not None and representative.pt >= cand.pt:
                    continue
                representative = cand
            if representative is None:
                continue

            leptons.append(
                GenJet(
                    p4=cluster.p4,
                    constituents=cluster.constituents,
                    pdg_id=representative.pdg_id,
                    charge=representative.charge,
                    area=cluster.area,
                )
            )
            consumed.update(cluster.constituents)

        logger.debug(
            "Event %s: %d lepton clusters, %d dressed leptons",
            event.event_id,
            len(clusters),
            len(leptons),
        )
        return DressedLeptons(leptons=tuple(leptons), consumed=frozenset(consumed))
