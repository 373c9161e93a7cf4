"""Core data models used by the pseudo-top reconstruction.

This module defines:
- immutable physics objects (`LorentzVector`, `GenParticle`, `GenJet`)
- the per-event input container (`EventInput`)
- run configuration (`PseudoTopConfig`)
- reconstruction outputs (`CombinationChoice`, `PseudoTopResult`)
- generator status codes shared by all stages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

Point3 = tuple[float, float, float]

ORIGIN: Point3 = (0.0, 0.0, 0.0)

STATUS_STABLE = 1
STATUS_DECAYED = 2
STATUS_INTERMEDIATE = 3
STATUS_BEAM = 4

CLUSTERING_ALGORITHMS = ("antikt", "kt", "cambridge")


@dataclass(frozen=True)
class LorentzVector:
    """Simple 4-vector with convenience properties and addition."""

    px: float
    py: float
    pz: float
    e: float

    def __add__(self, other: "LorentzVector") -> "LorentzVector":
        """Component-wise 4-vector addition."""
        return LorentzVector(
            self.px + other.px,
            self.py + other.py,
            self.pz + other.pz,
            self.e + other.e,
        )

    def scaled(self, factor: float) -> "LorentzVector":
        """Return all four components multiplied by `factor`."""
        return LorentzVector(
            self.px * factor,
            self.py * factor,
            self.pz * factor,
            self.e * factor,
        )

    @property
    def p2(self) -> float:
        """Squared 3-momentum magnitude."""
        return self.px * self.px + self.py * self.py + self.pz * self.pz

    @property
    def p(self) -> float:
        """3-momentum magnitude."""
        return self.p2**0.5

    @property
    def pt(self) -> float:
        """Transverse momentum."""
        return (self.px * self.px + self.py * self.py) ** 0.5

    @property
    def eta(self) -> float:
        """Pseudorapidity, with a large signed sentinel along the beam axis."""
        p = self.p
        if p == abs(self.pz):
            return 1e9 if self.pz >= 0 else -1e9
        return 0.5 * math.log((p + self.pz) / (p - self.pz))

    @property
    def phi(self) -> float:
        """Azimuthal angle in (-pi, pi]."""
        if self.px == 0.0 and self.py == 0.0:
            return 0.0
        return math.atan2(self.py, self.px)

    @property
    def mass2(self) -> float:
        """Invariant mass squared."""
        return self.e * self.e - self.p2

    @property
    def mass(self) -> float:
        """Invariant mass with signed handling for small negative mass2 values."""
        m2 = self.mass2
        return m2**0.5 if m2 >= 0.0 else -((-m2) ** 0.5)


@dataclass(frozen=True)
class GenParticle:
    """One generator-level particle record.

    `mothers` and `daughters` hold integer indices into the collection that
    owns this record (the event history for inputs, the output collection
    for reconstructed objects).
    """

    p4: LorentzVector
    pdg_id: int
    status: int
    charge: float = 0.0
    vertex: Point3 = ORIGIN
    mothers: tuple[int, ...] = ()
    daughters: tuple[int, ...] = ()

    @property
    def pt(self) -> float:
        """Transverse momentum of `p4`."""
        return self.p4.pt

    @property
    def eta(self) -> float:
        """Pseudorapidity of `p4`."""
        return self.p4.eta

    @property
    def abs_pdg_id(self) -> int:
        """Unsigned species code."""
        return abs(self.pdg_id)

    def detached(self, status: int | None = None) -> "GenParticle":
        """Copy without parent/child links, optionally overriding the status."""
        return GenParticle(
            p4=self.p4,
            pdg_id=self.pdg_id,
            status=self.status if status is None else status,
            charge=self.charge,
            vertex=self.vertex,
        )


@dataclass(frozen=True)
class GenJet:
    """Clustered jet-like object (dressed lepton or hadronic jet).

    `constituents` are final-state indices ordered by decreasing pT.
    `b_hadrons` lists the ghost b-hadron indices found in the cluster.
    """

    p4: LorentzVector
    constituents: tuple[int, ...]
    pdg_id: int = 0
    charge: float = 0.0
    area: float = 0.0
    b_hadrons: tuple[int, ...] = ()
    vertex: Point3 = ORIGIN

    @property
    def pt(self) -> float:
        """Transverse momentum of `p4`."""
        return self.p4.pt

    @property
    def eta(self) -> float:
        """Pseudorapidity of `p4`."""
        return self.p4.eta

    @property
    def is_b_tagged(self) -> bool:
        """True when at least one b-hadron ghost was clustered in."""
        return bool(self.b_hadrons)


@dataclass(frozen=True)
class EventInput:
    """One event: the full particle history plus the final-state index set.

    Every final-state index points into `gen_particles`, so both sets share a
    single index space.
    """

    event_id: str
    gen_particles: tuple[GenParticle, ...]
    final_state: tuple[int, ...]

    @classmethod
    def from_particles(
        cls,
        event_id: str,
        particles: Sequence[GenParticle],
        final_state: Sequence[int] | None = None,
    ) -> "EventInput":
        """Build an event, defaulting the final state to every stable particle."""
        gen_particles = tuple(particles)
        if final_state is None:
            final_state = [i for i, p in enumerate(gen_particles) if p.status == STATUS_STABLE]
        return cls(event_id=event_id, gen_particles=gen_particles, final_state=tuple(final_state))


@dataclass(frozen=True)
class PseudoTopConfig:
    """Run-wide reconstruction thresholds, reference masses and cone sizes."""

    lepton_min_pt: float = 20.0
    lepton_max_eta: float = 2.4
    jet_min_pt: float = 30.0
    jet_max_eta: float = 2.4
    w_mass: float = 80.4
    t_mass: float = 172.5
    lepton_cone_size: float = 0.1
    jet_cone_size: float = 0.4
    algorithm: str = "antikt"

    def validate(self) -> "PseudoTopConfig":
        """Check value ranges and return `self` for chaining."""
        for name in ("lepton_min_pt", "jet_min_pt", "lepton_max_eta", "jet_max_eta"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise ValueError(f"{name} must be a finite non-negative number, got {value!r}.")
        for name in ("w_mass", "t_mass", "lepton_cone_size", "jet_cone_size"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be a finite positive number, got {value!r}.")
        if self.algorithm not in CLUSTERING_ALGORITHMS:
            supported = ", ".join(CLUSTERING_ALGORITHMS)
            raise ValueError(
                f"Unknown clustering algorithm '{self.algorithm}'. Supported: {supported}"
            )
        return self


@dataclass(frozen=True)
class CombinationChoice:
    """Indices picked by the mass-deviation search for one event.

    `neutrinos` holds one index per leptonic W (two for dilepton, one for
    semileptonic); `w2_jets` holds the light-jet pair of the hadronic W and
    stays empty in the dilepton channel.
    """

    channel: str
    neutrinos: tuple[int, ...]
    w2_jets: tuple[int, ...]
    b_jets: tuple[int, int]
    w_deviation: float
    top_deviation: float


@dataclass(frozen=True)
class PseudoTopResult:
    """All collections reconstructed for one event."""

    event_id: str
    neutrinos: tuple[GenParticle, ...]
    leptons: tuple[GenJet, ...]
    jets: tuple[GenJet, ...]
    b_jet_indices: tuple[int, ...]
    light_jet_indices: tuple[int, ...]
    pseudo_top: tuple[GenParticle, ...]
    choice: CombinationChoice | None = None
    n_stables: int = 0

    @property
    def channel(self) -> str | None:
        """Selected decay channel, or None without a candidate."""
        return None if self.choice is None else self.choice.channel

    @property
    def is_reconstructed(self) -> bool:
        """True when the ten pseudo-top particles were built."""
        return len(self.pseudo_top) == 10

