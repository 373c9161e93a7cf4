"""Multi-event API example: reconstruct pseudo-tops and print a summary.

Run from repository root without installation:
    PYTHONPATH=src python examples/multi_event_api.py
"""

from __future__ import annotations

import logging
from pathlib import Path

from pseudotop import PseudoTopConfig, PseudoTopProducer
from pseudotop.io import load_events_json, write_results_table


def main() -> int:
    """Load events, run the reconstruction, and write a CSV table."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)-8s | %(message)s")
    events = load_events_json("examples/events.json")
    producer = PseudoTopProducer(PseudoTopConfig(jet_min_pt=25.0))
    results = producer.produce_events(events, max_workers=2)

    for res in results:
        print(
            f"{res.event_id}: channel={res.channel} leptons={len(res.leptons)} "
            f"jets={len(res.jets)} b-jets={len(res.b_jet_indices)}"
        )
        if res.is_reconstructed:
            t1, t2 = res.pseudo_top[0], res.pseudo_top[1]
            print(f"  m(t1)={t1.p4.mass:.1f} m(t2)={t2.p4.mass:.1f}")

    out_path = Path("examples/multi_event_output.csv")
    write_results_table(out_path, results)
    print(f"Wrote {len(results)} events to {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
