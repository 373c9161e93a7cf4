"""Least-mass-deviation assignment of W and top candidates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Sequence

from .models import (
    STATUS_INTERMEDIATE,
    STATUS_STABLE,
    CombinationChoice,
    GenJet,
    GenParticle,
    LorentzVector,
    PseudoTopConfig,
)
from .pdg import B_QUARK, TOP_QUARK, W_BOSON
from .physics import mass_deviation

logger = logging.getLogger(__name__)

DILEPTON = "dilepton"
SEMILEPTONIC = "semileptonic"

# Running-minimum start value; a search that never beats it selects nothing.
_NO_CANDIDATE = 1e9


@dataclass
class PseudoTopCombiner:
    """Pair leptons, neutrinos and jets into a t tbar decay hypothesis.

    Only the dilepton (two opposite-sign leptons) and semileptonic (one
    lepton) channels are handled; anything else yields no candidate.
    """

    w_mass: float = 80.4
    t_mass: float = 172.5

    @classmethod
    def from_config(cls, config: PseudoTopConfig) -> "PseudoTopCombiner":
        """Take the reference W and top masses from `config`."""
        return cls(w_mass=config.w_mass, t_mass=config.t_mass)

    def select(
        self,
        leptons: Sequence[GenJet],
        neutrinos: Sequence[GenParticle],
        jets: Sequence[GenJet],
        b_jet_indices: Sequence[int],
        light_jet_indices: Sequence[int],
    ) -> CombinationChoice | None:
        """Run the combinatorial search and return the selected indices.

        Workflow:
        1. Require at least two b jets.
        2. Dilepton: pick the ordered neutrino pair closest to two W masses.
           Semileptonic: pick the neutrino and light-jet pair closest to two
           W masses.
        3. Pick the ordered b-jet pair closest to two top masses.

        All minimisations keep the first combination reaching the minimum
        in enumeration order.
        """
        if len(b_jet_indices) < 2:
            return None
        if len(leptons) == 2 and len(neutrinos) >= 2:
            return self._select_dilepton(leptons, neutrinos, jets, b_jet_indices)
        if len(leptons) == 1 and len(neutrinos) >= 1:
            return self._select_semileptonic(
                leptons[0], neutrinos, jets, b_jet_indices, light_jet_indices
            )
        return None

    def combine(
        self,
        leptons: Sequence[GenJet],
        neutrinos: Sequence[GenParticle],
        jets: Sequence[GenJet],
        b_jet_indices: Sequence[int],
        light_jet_indices: Sequence[int],
    ) -> tuple[GenParticle, ...]:
        """Return the ten pseudo-top particles, or an empty tuple."""
        choice = self.select(leptons, neutrinos, jets, b_jet_indices, light_jet_indices)
        if choice is None:
            return ()
        return self.build_particles(choice, leptons, neutrinos, jets)

    def build_particles(
        self,
        choice: CombinationChoice,
        leptons: Sequence[GenJet],
        neutrinos: Sequence[GenParticle],
        jets: Sequence[GenJet],
    ) -> tuple[GenParticle, ...]:
        """Materialise the decay products of a selection, without links.

        Output order is t1, t2, W1, b1, leg, leg, W2, b2, leg, leg.
        """
        if choice.channel == DILEPTON:
            lepton1, lepton2 = self._order_by_charge(leptons)
            nu1 = neutrinos[choice.neutrinos[0]]
            nu2 = neutrinos[choice.neutrinos[1]]
            bjet1 = jets[choice.b_jets[0]]
            bjet2 = jets[choice.b_jets[1]]
            w1 = lepton1.p4 + nu1.p4
            w2 = lepton2.p4 + nu2.p4
            q1 = int(lepton1.charge)
            q2 = int(lepton2.charge)
            return (
                _particle(w1 + bjet1.p4, q1 * TOP_QUARK, q1 * 2 / 3.0, STATUS_INTERMEDIATE),
                _particle(w2 + bjet2.p4, q2 * TOP_QUARK, q2 * 2 / 3.0, STATUS_INTERMEDIATE),
                _particle(w1, q1 * W_BOSON, q1, STATUS_INTERMEDIATE),
                _particle(bjet1.p4, q1 * B_QUARK, -q1 / 3.0),
                _particle(lepton1.p4, lepton1.pdg_id, q1),
                _particle(nu1.p4, nu1.pdg_id, 0),
                _particle(w2, q2 * W_BOSON, q2, STATUS_INTERMEDIATE),
                # Both b-quark charges follow the positive-lepton side.
                _particle(bjet2.p4, q2 * B_QUARK, -q1 / 3.0),
                _particle(lepton2.p4, lepton2.pdg_id, q2),
                _particle(nu2.p4, nu2.pdg_id, 0),
            )

        lepton = leptons[0]
        nu = neutrinos[choice.neutrinos[0]]
        wjet1 = jets[choice.w2_jets[0]]
        wjet2 = jets[choice.w2_jets[1]]
        bjet1 = jets[choice.b_jets[0]]
        bjet2 = jets[choice.b_jets[1]]
        w1 = lepton.p4 + nu.p4
        w2 = wjet1.p4 + wjet2.p4
        q = int(lepton.charge)
        return (
            _particle(w1 + bjet1.p4, q * TOP_QUARK, q * 2 / 3.0, STATUS_INTERMEDIATE),
            _particle(w2 + bjet2.p4, -q * TOP_QUARK, -q * 2 / 3.0, STATUS_INTERMEDIATE),
            _particle(w1, q * W_BOSON, q, STATUS_INTERMEDIATE),
            _particle(bjet1.p4, q * B_QUARK, -q / 3.0),
            _particle(lepton.p4, lepton.pdg_id, q),
            _particle(nu.p4, nu.pdg_id, 0),
            _particle(w2, -q * W_BOSON, -q, STATUS_INTERMEDIATE),
            _particle(bjet2.p4, -q * B_QUARK, 0),
            _particle(wjet1.p4, -2 * q, 0),
            _particle(wjet2.p4, q, 0),
        )

    def _select_dilepton(
        self,
        leptons: Sequence[GenJet],
        neutrinos: Sequence[GenParticle],
        jets: Sequence[GenJet],
        b_jet_indices: Sequence[int],
    ) -> CombinationChoice | None:
        if int(leptons[0].charge) * int(leptons[1].charge) > 0:
            logger.debug("Same-sign dilepton pair, no pseudo-top built.")
            return None
        lepton1, lepton2 = self._order_by_charge(leptons)

        best_dm = _NO_CANDIDATE
        selected: tuple[int, int] | None = None
        for i, nu1 in enumerate(neutrinos):
            dm1 = mass_deviation(self.w_mass, lepton1.p4, nu1.p4)
            for j, nu2 in enumerate(neutrinos):
                if i == j:
                    continue
                dm = dm1 + mass_deviation(self.w_mass, lepton2.p4, nu2.p4)
                if dm < best_dm:
                    best_dm = dm
                    selected = (i, j)
        if selected is None:
            return None

        w1 = lepton1.p4 + neutrinos[selected[0]].p4
        w2 = lepton2.p4 + neutrinos[selected[1]].p4
        b_pair = self._select_b_jets(w1, w2, jets, b_jet_indices)
        if b_pair is None:
            return None
        return CombinationChoice(
            channel=DILEPTON,
            neutrinos=selected,
            w2_jets=(),
            b_jets=b_pair[0],
            w_deviation=best_dm,
            top_deviation=b_pair[1],
        )

    def _select_semileptonic(
        self,
        lepton: GenJet,
        neutrinos: Sequence[GenParticle],
        jets: Sequence[GenJet],
        b_jet_indices: Sequence[int],
        light_jet_indices: Sequence[int],
    ) -> CombinationChoice | None:
        best_dm = _NO_CANDIDATE
        selected: tuple[int, int, int] | None = None
        for i, nu in enumerate(neutrinos):
            dm1 = mass_deviation(self.w_mass, lepton.p4, nu.p4)
            for j1, j2 in combinations(light_jet_indices, 2):
                dm = dm1 + mass_deviation(self.w_mass, jets[j1].p4, jets[j2].p4)
                if dm < best_dm:
                    best_dm = dm
                    selected = (i, j1, j2)
        if selected is None:
            return None

        i, j1, j2 = selected
        w1 = lepton.p4 + neutrinos[i].p4
        w2 = jets[j1].p4 + jets[j2].p4
        b_pair = self._select_b_jets(w1, w2, jets, b_jet_indices)
        if b_pair is None:
            return None
        return CombinationChoice(
            channel=SEMILEPTONIC,
            neutrinos=(i,),
            w2_jets=(j1, j2),
            b_jets=b_pair[0],
            w_deviation=best_dm,
            top_deviation=b_pair[1],
        )

    def _select_b_jets(
        self,
        w1: LorentzVector,
        w2: LorentzVector,
        jets: Sequence[GenJet],
        b_jet_indices: Sequence[int],
    ) -> tuple[tuple[int, int], float] | None:
        """Pick the ordered b-jet pair closest to two top masses."""
        best_dm = _NO_CANDIDATE
        selected: tuple[int, int] | None = None
        for k in b_jet_indices:
            dm1 = mass_deviation(self.t_mass, w1, jets[k].p4)
            for m in b_jet_indices:
                if k == m:
                    continue
                dm = dm1 + mass_deviation(self.t_mass, w2, jets[m].p4)
                if dm < best_dm:
                    best_dm = dm
                    selected = (k, m)
        if selected is None:
            return None
        return selected, best_dm

    @staticmethod
    def _order_by_charge(leptons: Sequence[GenJet]) -> tuple[GenJet, GenJet]:
        """Return the lepton pair as (positive, negative)."""
        if int(leptons[0].charge) > 0:
            return leptons[0], leptons[1]
        return leptons[1], leptons[0]


def _particle(
    p4: LorentzVector,
    pdg_id: int,
    charge: float,
    status: int = STATUS_STABLE,
) -> GenParticle:
    return GenParticle(p4=p4, pdg_id=pdg_id, status=status, charge=float(charge))
