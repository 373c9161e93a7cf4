"""Example custom callback: keep semileptonic events and dump their b jets."""

from __future__ import annotations

import json
from pathlib import Path


def process(results, context):
    """Filter by channel and leading b-jet pT, then write a compact JSON report."""
    selected = [
        r
        for r in results
        if r.channel == "semileptonic" and r.b_jet_indices and r.jets[r.b_jet_indices[0]].pt > 40.0
    ]
    payload = {
        "n_selected": len(selected),
        "selected": [
            {
                "event_id": r.event_id,
                "b_jets": [
                    {
                        "pt": r.jets[i].pt,
                        "eta": r.jets[i].eta,
                        "n_constituents": len(r.jets[i].constituents),
                        "b_hadrons": list(r.jets[i].b_hadrons),
                    }
                    for i in r.b_jet_indices
                ],
            }
            for r in selected
        ],
    }
    out = Path(context["output_path"]).with_name("selected_events.json")
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Wrote {out}")
