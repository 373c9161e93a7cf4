"""Public package exports for pseudo-top reconstruction."""

from .classifier import classify_particles, is_b_hadron, is_from_hadron
from .clustering import Cluster, JetClusterer
from .combiner import DILEPTON, SEMILEPTONIC, PseudoTopCombiner
from .graph import DECAY_TREE_EDGES, link_decay_tree
from .jets import JetBuilder, JetCollection
from .leptons import DressedLeptons, LeptonDresser
from .models import (
    CombinationChoice,
    EventInput,
    GenJet,
    GenParticle,
    LorentzVector,
    PseudoTopConfig,
    PseudoTopResult,
)
from .pdg import is_b_hadron_code
from .producer import PseudoTopProducer

__all__ = [
    "PseudoTopProducer",
    "PseudoTopConfig",
    "PseudoTopResult",
    "PseudoTopCombiner",
    "CombinationChoice",
    "DILEPTON",
    "SEMILEPTONIC",
    "EventInput",
    "GenParticle",
    "GenJet",
    "LorentzVector",
    "LeptonDresser",
    "DressedLeptons",
    "JetBuilder",
    "JetCollection",
    "JetClusterer",
    "Cluster",
    "classify_particles",
    "is_b_hadron",
    "is_b_hadron_code",
    "is_from_hadron",
    "link_decay_tree",
    "DECAY_TREE_EDGES",
]
