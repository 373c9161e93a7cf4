"""PDG species-code helpers used by particle classification.

Codes follow the Monte Carlo particle numbering scheme: the sign separates
particles from antiparticles, the magnitude encodes the quark content.
"""

from __future__ import annotations

ELECTRON = 11
NU_E = 12
MUON = 13
NU_MU = 14
TAU = 15
NU_TAU = 16
PHOTON = 22
B_QUARK = 5
TOP_QUARK = 6
W_BOSON = 24

CHARGED_LEPTONS = frozenset({ELECTRON, MUON})
NEUTRINOS = frozenset({NU_E, NU_MU, NU_TAU})
DRESSING_CANDIDATES = CHARGED_LEPTONS | {PHOTON}

# Codes up to here are fundamental particles and generator internals.
MAX_ELEMENTARY_CODE = 100
# Nuclear codes are written as +-10LZZZAAAI.
MIN_NUCLEUS_CODE = 1_000_000_000

_CODE_TO_NAME: dict[int, str] = {
    1: "d",
    2: "u",
    3: "s",
    4: "c",
    B_QUARK: "b",
    TOP_QUARK: "t",
    ELECTRON: "e",
    NU_E: "nu_e",
    MUON: "mu",
    NU_MU: "nu_mu",
    TAU: "tau",
    NU_TAU: "nu_tau",
    PHOTON: "gamma",
    W_BOSON: "W",
}


def is_charged_lepton(pdg_id: int) -> bool:
    """Return True for electrons and muons of either charge."""
    return abs(pdg_id) in CHARGED_LEPTONS


def is_neutrino(pdg_id: int) -> bool:
    """Return True for any neutrino flavour."""
    return abs(pdg_id) in NEUTRINOS


def is_hadron(pdg_id: int) -> bool:
    """Return True for composite codes (mesons, baryons and nuclei)."""
    return abs(pdg_id) > MAX_ELEMENTARY_CODE


def is_b_hadron_code(pdg_id: int) -> bool:
    """Return True if the code describes a meson or baryon carrying a b quark.

    Digits 2-4 counted from the units digit are the quark content
    `nq1 nq2 nq3`. A B meson has `nq1 == 0` and `nq2 == 5`; a B baryon has
    `nq1 == 5`. `nq3 == 0` marks a diquark.
    """
    code = abs(pdg_id)
    if code <= MAX_ELEMENTARY_CODE:
        return False
    if code >= MIN_NUCLEUS_CODE:
        return False
    nq3 = (code // 10) % 10
    nq2 = (code // 100) % 10
    nq1 = (code // 1000) % 10
    if nq3 == 0:
        return False
    if nq1 == 0 and nq2 == 5:
        return True
    return nq1 == 5


def particle_name(pdg_id: int) -> str:
    """Short human-readable name, with a `~` suffix for antiparticles.

    Codes without a registered name are rendered as `pdg<code>`.
    """
    name = _CODE_TO_NAME.get(abs(pdg_id))
    if name is None:
        return f"pdg{pdg_id}"
    if pdg_id < 0 and abs(pdg_id) != PHOTON:
        return f"{name}~"
    return name
