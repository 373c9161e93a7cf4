"""Input/output helpers for JSON inputs and tabular result export."""

from __future__ import annotations

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Sequence

from .models import (
    EventInput,
    GenJet,
    GenParticle,
    LorentzVector,
    PseudoTopConfig,
    PseudoTopResult,
)
from .pdg import particle_name

# camelCase spellings accepted in configuration files.
_CONFIG_ALIASES = {
    "leptonMinPt": "lepton_min_pt",
    "leptonMaxEta": "lepton_max_eta",
    "jetMinPt": "jet_min_pt",
    "jetMaxEta": "jet_max_eta",
    "wMass": "w_mass",
    "tMass": "t_mass",
    "leptonConeSize": "lepton_cone_size",
    "jetConeSize": "jet_cone_size",
}


def load_events_json(path: str | Path) -> list[EventInput]:
    """Load multi-event input JSON into `EventInput` objects.

    Expected shape:
    {
      "events": [
        {"event_id": "...", "particles": [...], "final_state": [...]},
        ...
      ]
    }
    `final_state` is optional and defaults to every status-1 particle.
    A particle without a `daughters` key gets the inverse of the mother links.
    """
    data = _load_json(path)
    events_data = data.get("events")
    if not isinstance(events_data, list):
        raise ValueError("Events JSON must contain a list under key 'events'.")
    return [parse_event(item, idx) for idx, item in enumerate(events_data)]


def parse_event(event: Any, idx: int = 0) -> EventInput:
    """Parse one event dictionary and validate its particle links."""
    if not isinstance(event, dict):
        raise ValueError(f"Event entry at index {idx} must be an object.")
    event_id = str(event.get("event_id", f"evt{idx}"))
    particles_data = event.get("particles")
    if not isinstance(particles_data, list):
        raise ValueError(f"Event '{event_id}' must contain a list under key 'particles'.")
    particles = [
        _parse_particle_item(item=item, idx=pidx, context=f"event '{event_id}'")
        for pidx, item in enumerate(particles_data)
    ]
    # Daughter links are optional per particle; missing ones come from mothers.
    missing = [i for i, item in enumerate(particles_data) if "daughters" not in item]
    if missing:
        particles = _with_derived_daughters(particles, missing)
    _check_links(particles, event_id)

    final_state = event.get("final_state")
    if final_state is not None:
        if not isinstance(final_state, list):
            raise ValueError(f"Event '{event_id}' key 'final_state' must be a list of indices.")
        final_state = [int(i) for i in final_state]
        for i in final_state:
            if not 0 <= i < len(particles):
                raise ValueError(
                    f"Event '{event_id}' final-state index {i} is outside the particle list."
                )
    return EventInput.from_particles(event_id, particles, final_state)


def load_config_json(path: str | Path) -> PseudoTopConfig:
    """Load a `PseudoTopConfig` from JSON (optionally under key 'pseudo_top')."""
    data = _load_json(path)
    payload = data.get("pseudo_top", data)
    if not isinstance(payload, dict):
        raise ValueError("Config key 'pseudo_top' must be an object.")
    return config_from_dict(payload)


def config_from_dict(
    payload: dict[str, Any],
    base: PseudoTopConfig | None = None,
) -> PseudoTopConfig:
    """Apply snake_case or camelCase overrides on top of `base` and validate."""
    known = {f.name for f in fields(PseudoTopConfig)}
    values: dict[str, Any] = {}
    for key, value in payload.items():
        name = _CONFIG_ALIASES.get(key, key)
        if name not in known:
            supported = ", ".join(sorted(known))
            raise ValueError(f"Unknown config key '{key}'. Supported keys: {supported}")
        values[name] = str(value) if name == "algorithm" else float(value)
    base = base or PseudoTopConfig()
    merged = {f.name: getattr(base, f.name) for f in fields(PseudoTopConfig)}
    merged.update(values)
    return PseudoTopConfig(**merged).validate()


def write_results_table(path: str | Path, results: Sequence[PseudoTopResult]) -> None:
    """Write reconstructed collections into a Parquet/CSV/Pickle table."""
    pd = _require_pandas()
    df = pd.DataFrame(result_rows(results))
    out = Path(path)
    suffix = out.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(out, index=False)
    elif suffix in (".pkl", ".pickle"):
        df.to_pickle(out)
    elif suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError(
            f"Unsupported output format '{suffix}'. Use .parquet, .csv, or .pkl"
        )


def result_rows(results: Sequence[PseudoTopResult]) -> list[dict[str, Any]]:
    """Flatten results into one DataFrame-ready row per output object."""
    rows: list[dict[str, Any]] = []
    for res in results:
        collections: list[tuple[str, Sequence[GenParticle | GenJet]]] = [
            ("neutrinos", res.neutrinos),
            ("leptons", res.leptons),
            ("jets", res.jets),
            ("pseudo_top", res.pseudo_top),
        ]
        for collection, items in collections:
            for idx, item in enumerate(items):
                rows.append(_object_row(res, collection, idx, item))
    return rows


def _object_row(
    res: PseudoTopResult,
    collection: str,
    idx: int,
    item: GenParticle | GenJet,
) -> dict[str, Any]:
    """Build one table row for a particle or jet."""
    p4 = item.p4
    row: dict[str, Any] = {
        "event_id": res.event_id,
        "channel": res.channel,
        "collection": collection,
        "index": idx,
        "pdg_id": item.pdg_id,
        "name": particle_name(item.pdg_id),
        "charge": item.charge,
        "px": p4.px,
        "py": p4.py,
        "pz": p4.pz,
        "energy": p4.e,
        "pt": p4.pt,
        "eta": p4.eta,
        "phi": p4.phi,
        "mass": p4.mass,
    }
    if isinstance(item, GenJet):
        row["status"] = None
        row["area"] = item.area
        row["n_constituents"] = len(item.constituents)
        row["mothers"] = ""
        row["daughters"] = ""
    else:
        row["status"] = item.status
        row["area"] = None
        row["n_constituents"] = None
        row["mothers"] = ",".join(str(i) for i in item.mothers)
        row["daughters"] = ",".join(str(i) for i in item.daughters)
    return row


def _require_pandas():
    """Import pandas lazily and provide a clear installation hint on failure."""
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "pandas is required to write output tables. Install pandas and pyarrow."
        ) from exc
    return pd


def _parse_particle_item(item: Any, idx: int, context: str) -> GenParticle:
    """Parse one particle dictionary into a `GenParticle`."""
    if not isinstance(item, dict):
        raise ValueError(f"Particle entry at index {idx} in {context} must be an object.")
    try:
        pdg_id = int(item["pdg_id"] if "pdg_id" in item else item["pid"])
        energy = float(item["e"] if "e" in item else item["energy"])
        p4 = LorentzVector(float(item["px"]), float(item["py"]), float(item["pz"]), energy)
        status = int(item["status"])
    except KeyError as exc:
        raise ValueError(
            f"Particle at index {idx} in {context} is missing field {exc.args[0]!r}."
        ) from exc
    return GenParticle(
        p4=p4,
        pdg_id=pdg_id,
        status=status,
        charge=float(item.get("charge", 0.0)),
        vertex=_parse_vertex(item.get("vertex"), idx, context),
        mothers=_parse_links(item.get("mothers", []), "mothers", idx, context),
        daughters=_parse_links(item.get("daughters", []), "daughters", idx, context),
    )


def _parse_vertex(value: Any, idx: int, context: str) -> tuple[float, float, float]:
    """Validate and convert an optional `[x, y, z]` production vertex."""
    if value is None:
        return (0.0, 0.0, 0.0)
    if not isinstance(value, list) or len(value) != 3:
        raise ValueError(f"Particle vertex at index {idx} in {context} must be a 3-element list.")
    return (float(value[0]), float(value[1]), float(value[2]))


def _parse_links(value: Any, key: str, idx: int, context: str) -> tuple[int, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Particle field '{key}' at index {idx} in {context} must be a list.")
    return tuple(int(x) for x in value)


def _with_derived_daughters(
    particles: list[GenParticle], targets: Sequence[int]
) -> list[GenParticle]:
    """Fill daughter links of `targets` as the inverse of mother links."""
    daughters: list[list[int]] = [[] for _ in particles]
    for i, p in enumerate(particles):
        for m in p.mothers:
            if 0 <= m < len(particles):
                daughters[m].append(i)
    result = list(particles)
    for i in targets:
        result[i] = replace(particles[i], daughters=tuple(daughters[i]))
    return result


def _check_links(particles: Sequence[GenParticle], event_id: str) -> None:
    """Reject mother/daughter links pointing outside the particle list."""
    n = len(particles)
    for i, p in enumerate(particles):
        for link in p.mothers + p.daughters:
            if not 0 <= link < n:
                raise ValueError(
                    f"Particle {i} in event '{event_id}' links to index {link}, "
                    f"outside the {n}-particle history."
                )


def _load_json(path: str | Path) -> dict[str, Any]:
    """Read and validate a JSON object document from disk."""
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"JSON document at {path} must be an object.")
    return data
