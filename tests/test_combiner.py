"""Unit tests for the W/top assignment search and particle building."""

from __future__ import annotations

import random
import unittest
from itertools import combinations, permutations, product

from event_factory import lepton_jet, neutrino, plain_jet
from pseudotop import DILEPTON, SEMILEPTONIC, PseudoTopCombiner, PseudoTopConfig
from pseudotop.physics import mass_deviation

W_MASS = 80.4
T_MASS = 172.5


def _random_jets(rng: random.Random, n: int, b_tagged: bool):
    return [
        plain_jet(rng.uniform(30.0, 120.0), rng.uniform(-2.0, 2.0), rng.uniform(-3.0, 3.0), b_tagged=b_tagged)
        for _ in range(n)
    ]


def _random_neutrinos(rng: random.Random, n: int):
    return sorted(
        (neutrino(rng.uniform(10.0, 90.0), rng.uniform(-2.5, 2.5), rng.uniform(-3.0, 3.0)) for _ in range(n)),
        key=lambda nu: nu.pt,
        reverse=True,
    )


def _brute_force_b_pair(w1, w2, jets, b_idx):
    return min(
        permutations(b_idx, 2),
        key=lambda km: mass_deviation(T_MASS, w1, jets[km[0]].p4) + mass_deviation(T_MASS, w2, jets[km[1]].p4),
    )


class TestDileptonSelection(unittest.TestCase):
    """Two opposite-sign leptons: neutrino pair, then b-jet pair."""

    def setUp(self) -> None:
        rng = random.Random(7)
        self.leptons = [
            lepton_jet(50.0, 0.3, 1.0, -11, 1.0),
            lepton_jet(40.0, -0.7, -2.0, 13, -1.0),
        ]
        self.neutrinos = _random_neutrinos(rng, 4)
        self.jets = _random_jets(rng, 3, b_tagged=True)
        self.b_idx = [0, 1, 2]
        self.combiner = PseudoTopCombiner()

    def test_matches_brute_force_minimum(self) -> None:
        """The chosen indices reach the minimum over all ordered pairs."""
        choice = self.combiner.select(self.leptons, self.neutrinos, self.jets, self.b_idx, [])
        self.assertIsNotNone(choice)
        self.assertEqual(choice.channel, DILEPTON)

        positive, negative = self.leptons
        nu_pair = min(
            permutations(range(len(self.neutrinos)), 2),
            key=lambda ij: mass_deviation(W_MASS, positive.p4, self.neutrinos[ij[0]].p4)
            + mass_deviation(W_MASS, negative.p4, self.neutrinos[ij[1]].p4),
        )
        self.assertEqual(choice.neutrinos, nu_pair)
        w1 = positive.p4 + self.neutrinos[nu_pair[0]].p4
        w2 = negative.p4 + self.neutrinos[nu_pair[1]].p4
        self.assertEqual(choice.b_jets, _brute_force_b_pair(w1, w2, self.jets, self.b_idx))
        self.assertEqual(choice.w2_jets, ())

    def test_lepton_order_does_not_change_the_result(self) -> None:
        """The positive lepton always seeds the first top."""
        forward = self.combiner.combine(self.leptons, self.neutrinos, self.jets, self.b_idx, [])
        swapped = self.combiner.combine(self.leptons[::-1], self.neutrinos, self.jets, self.b_idx, [])
        self.assertEqual(forward, swapped)

    def test_built_particles(self) -> None:
        particles = self.combiner.combine(self.leptons, self.neutrinos, self.jets, self.b_idx, [])
        self.assertEqual(len(particles), 10)
        self.assertEqual(
            [p.pdg_id for p in particles],
            [6, -6, 24, 5, -11, self.neutrinos[0].pdg_id, -24, -5, 13, self.neutrinos[0].pdg_id],
        )
        self.assertEqual([p.status for p in particles], [3, 3, 3, 1, 1, 1, 3, 1, 1, 1])
        self.assertAlmostEqual(particles[0].charge, 2 / 3.0)
        self.assertAlmostEqual(particles[1].charge, -2 / 3.0)
        self.assertEqual(particles[2].charge, 1.0)
        self.assertAlmostEqual(particles[3].charge, -1 / 3.0)
        self.assertAlmostEqual(particles[7].charge, -1 / 3.0)
        self.assertEqual(particles[5].charge, 0.0)
        self.assertEqual(particles[6].charge, -1.0)

        top1 = particles[2].p4 + particles[3].p4
        self.assertAlmostEqual(particles[0].p4.e, top1.e, places=9)
        w1 = particles[4].p4 + particles[5].p4
        self.assertAlmostEqual(particles[2].p4.px, w1.px, places=9)
        for p in particles:
            self.assertEqual(p.mothers, ())
            self.assertEqual(p.daughters, ())

    def test_same_sign_leptons_give_nothing(self) -> None:
        leptons = [lepton_jet(50.0, 0.3, 1.0, 13, -1.0), lepton_jet(40.0, -0.7, -2.0, 11, -1.0)]
        self.assertIsNone(self.combiner.select(leptons, self.neutrinos, self.jets, self.b_idx, []))
        self.assertEqual(self.combiner.combine(leptons, self.neutrinos, self.jets, self.b_idx, []), ())

    def test_single_neutrino_gives_nothing(self) -> None:
        self.assertEqual(
            self.combiner.combine(self.leptons, self.neutrinos[:1], self.jets, self.b_idx, []),
            (),
        )


class TestSemileptonicSelection(unittest.TestCase):
    """One lepton: neutrino plus light-jet pair, then b-jet pair."""

    def setUp(self) -> None:
        rng = random.Random(11)
        self.lepton = lepton_jet(45.0, 0.1, 0.4, 13, -1.0)
        self.neutrinos = _random_neutrinos(rng, 2)
        self.jets = _random_jets(rng, 4, b_tagged=False) + _random_jets(rng, 2, b_tagged=True)
        self.light_idx = [0, 1, 2, 3]
        self.b_idx = [4, 5]
        self.combiner = PseudoTopCombiner()

    def test_matches_brute_force_minimum(self) -> None:
        choice = self.combiner.select([self.lepton], self.neutrinos, self.jets, self.b_idx, self.light_idx)
        self.assertIsNotNone(choice)
        self.assertEqual(choice.channel, SEMILEPTONIC)

        i, (j1, j2) = min(
            product(range(len(self.neutrinos)), combinations(self.light_idx, 2)),
            key=lambda c: mass_deviation(W_MASS, self.lepton.p4, self.neutrinos[c[0]].p4)
            + mass_deviation(W_MASS, self.jets[c[1][0]].p4, self.jets[c[1][1]].p4),
        )
        self.assertEqual(choice.neutrinos, (i,))
        self.assertEqual(choice.w2_jets, (j1, j2))
        w1 = self.lepton.p4 + self.neutrinos[i].p4
        w2 = self.jets[j1].p4 + self.jets[j2].p4
        self.assertEqual(choice.b_jets, _brute_force_b_pair(w1, w2, self.jets, self.b_idx))

    def test_built_particles_for_negative_lepton(self) -> None:
        particles = self.combiner.combine([self.lepton], self.neutrinos, self.jets, self.b_idx, self.light_idx)
        self.assertEqual([p.pdg_id for p in particles][:4], [-6, 6, -24, -5])
        self.assertEqual(particles[4].pdg_id, 13)
        self.assertEqual(particles[6].pdg_id, 24)
        self.assertEqual(particles[7].pdg_id, 5)
        self.assertEqual(particles[8].pdg_id, 2)
        self.assertEqual(particles[9].pdg_id, -1)
        self.assertEqual(particles[7].charge, 0.0)
        self.assertEqual(particles[8].charge, 0.0)
        self.assertEqual(particles[9].charge, 0.0)
        self.assertAlmostEqual(particles[1].charge, 2 / 3.0)

    def test_equal_neutrinos_keep_first(self) -> None:
        """Ties are resolved in favour of the first combination enumerated."""
        neutrinos = [self.neutrinos[0], self.neutrinos[0]]
        choice = self.combiner.select([self.lepton], neutrinos, self.jets, self.b_idx, self.light_idx)
        self.assertEqual(choice.neutrinos, (0,))

    def test_single_b_jet_gives_nothing(self) -> None:
        self.assertEqual(
            self.combiner.combine([self.lepton], self.neutrinos, self.jets, self.b_idx[:1], self.light_idx),
            (),
        )

    def test_single_light_jet_gives_nothing(self) -> None:
        self.assertIsNone(
            self.combiner.select([self.lepton], self.neutrinos, self.jets, self.b_idx, self.light_idx[:1])
        )

    def test_three_leptons_give_nothing(self) -> None:
        leptons = [self.lepton, self.lepton, self.lepton]
        self.assertIsNone(self.combiner.select(leptons, self.neutrinos, self.jets, self.b_idx, self.light_idx))

    def test_reference_masses_come_from_config(self) -> None:
        combiner = PseudoTopCombiner.from_config(PseudoTopConfig(w_mass=81.0, t_mass=173.0))
        self.assertEqual((combiner.w_mass, combiner.t_mass), (81.0, 173.0))


if __name__ == "__main__":
    unittest.main()
