"""Example custom callback: rank reconstructed events and persist a top-N summary."""

from __future__ import annotations

import json
from pathlib import Path


def process(results, context):
    """Sort reconstructed events by total mass deviation and save the best ones."""
    reconstructed = [r for r in results if r.is_reconstructed]
    ranked = sorted(
        reconstructed,
        key=lambda r: r.choice.w_deviation + r.choice.top_deviation,
    )
    payload = {
        "n_total": len(results),
        "n_reconstructed": len(reconstructed),
        "top_candidates": [
            {
                "event_id": r.event_id,
                "channel": r.channel,
                "w_deviation": r.choice.w_deviation,
                "top_deviation": r.choice.top_deviation,
                "t1_mass": r.pseudo_top[0].p4.mass,
                "t2_mass": r.pseudo_top[1].p4.mass,
                "b_jets": list(r.choice.b_jets),
            }
            for r in ranked[:3]
        ],
    }
    out = Path(context["output_path"]).with_name("top_candidates.json")
    out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"Wrote {out}")
