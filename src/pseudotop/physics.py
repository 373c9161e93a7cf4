"""Four-vector helpers shared by the clustering and combination stages."""

from __future__ import annotations

import math
from typing import Iterable

from .models import LorentzVector

# Momentum magnitude given to ghost particles before clustering.
GHOST_SCALE = 1e-20


def sum_lorentz(vectors: Iterable[LorentzVector]) -> LorentzVector:
    """Sum an iterable of Lorentz vectors."""
    total = LorentzVector(0.0, 0.0, 0.0, 0.0)
    for vec in vectors:
        total = total + vec
    return total


def mass_deviation(reference_mass: float, *vectors: LorentzVector) -> float:
    """Absolute difference between the summed invariant mass and a reference."""
    return abs(sum_lorentz(vectors).mass - reference_mass)


def has_valid_pt(p4: LorentzVector) -> bool:
    """Reject non-finite and non-positive transverse momenta before clustering."""
    pt = p4.pt
    return math.isfinite(pt) and pt > 0.0


def ghost_p4(p4: LorentzVector, scale: float = GHOST_SCALE) -> LorentzVector:
    """Rescale a 4-vector so its 3-momentum magnitude equals `scale`.

    The direction is preserved, which is all the clustering needs to decide
    membership, while the contribution to the jet kinematics is negligible.
    """
    return p4.scaled(scale / p4.p)
