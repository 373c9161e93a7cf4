"""Per-event pseudo-top reconstruction pipeline."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Sequence

from .classifier import classify_particles
from .combiner import PseudoTopCombiner
from .graph import link_decay_tree
from .jets import JetBuilder
from .leptons import LeptonDresser
from .models import EventInput, PseudoTopConfig, PseudoTopResult

logger = logging.getLogger(__name__)


@dataclass
class PseudoTopProducer:
    """Run classification, dressing, jet building, combination and linking.

    The producer keeps no per-event state: the same instance can process
    events one after another or from several worker threads.
    """

    config: PseudoTopConfig = field(default_factory=PseudoTopConfig)

    def __post_init__(self) -> None:
        self.config.validate()
        self.lepton_dresser = LeptonDresser.from_config(self.config)
        self.jet_builder = JetBuilder.from_config(self.config)
        self.combiner = PseudoTopCombiner.from_config(self.config)

    def produce(self, event: EventInput) -> PseudoTopResult:
        """Reconstruct all output collections for one event.

        Workflow:
        1. Classify final-state particles and find b hadrons.
        2. Dress leptons; their constituents are removed from jet inputs.
        3. Cluster jets with b-hadron ghosts and split b/light jets.
        4. Search the dilepton or semileptonic assignment.
        5. Link the ten particles into two decay trees.

        A history deeper than `MAX_ANCESTRY_DEPTH` generations is malformed
        input: the `ValueError` from classification is not caught here.
        """
        classified = classify_particles(event)
        dressed = self.lepton_dresser.dress(event, classified.lepton_candidates)
        jets = self.jet_builder.build(event, dressed.consumed, classified.b_hadron_indices)

        choice = self.combiner.select(
            leptons=dressed.leptons,
            neutrinos=classified.neutrinos,
            jets=jets.jets,
            b_jet_indices=jets.b_jet_indices,
            light_jet_indices=jets.light_jet_indices,
        )
        pseudo_top = ()
        if choice is not None:
            pseudo_top = link_decay_tree(
                self.combiner.build_particles(
                    choice, dressed.leptons, classified.neutrinos, jets.jets
                )
            )
        logger.debug(
            "Event %s: %d leptons, %d neutrinos, %d jets, channel=%s",
            event.event_id,
            len(dressed.leptons),
            len(classified.neutrinos),
            len(jets.jets),
            None if choice is None else choice.channel,
        )
        return PseudoTopResult(
            event_id=event.event_id,
            neutrinos=classified.neutrinos,
            leptons=dressed.leptons,
            jets=jets.jets,
            b_jet_indices=jets.b_jet_indices,
            light_jet_indices=jets.light_jet_indices,
            pseudo_top=pseudo_top,
            choice=choice,
            n_stables=classified.n_stables,
        )

    def produce_events(
        self,
        events: Sequence[EventInput],
        max_workers: int | None = None,
    ) -> list[PseudoTopResult]:
        """Run `produce` on a list of events, keeping the input order.

        With `max_workers` above one, events are dispatched to a thread pool.
        A `ValueError` from any event aborts the batch and is re-raised.
        """
        if max_workers is None or max_workers <= 1:
            results = [self.produce(event) for event in events]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(self.produce, events))
        n_reco = sum(1 for r in results if r.is_reconstructed)
        logger.info("Reconstructed pseudo-tops in %d/%d events", n_reco, len(results))
        return results
