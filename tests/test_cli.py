"""Tests for the command-line entry point and custom-script hook."""

from __future__ import annotations

import json
import tempfile
import textwrap
import unittest
from pathlib import Path

from event_factory import event_to_dict, make_ttbar_event
from pseudotop.cli import build_parser, main, resolve_config


class TestCli(unittest.TestCase):
    """Run the CLI on temporary inputs."""

    def test_resolve_config_merges_file_and_flags(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = Path(tmpdir) / "config.json"
            cfg.write_text(json.dumps({"jetMinPt": 35, "tMass": 173.0}), encoding="utf-8")
            args = build_parser().parse_args(
                ["--events", "e.json", "--out", "o.csv", "--config", str(cfg), "--jet-min-pt", "25"]
            )
            config = resolve_config(args)
        self.assertEqual(config.jet_min_pt, 25.0)
        self.assertEqual(config.t_mass, 173.0)
        self.assertEqual(config.algorithm, "antikt")

    def test_main_writes_table_and_runs_custom_script(self) -> None:
        events = [event_to_dict(make_ttbar_event("semileptonic", "s1"))]
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            events_path = tmp / "events.json"
            events_path.write_text(json.dumps({"events": events}), encoding="utf-8")
            marker = tmp / "marker.json"
            script = tmp / "hook.py"
            script.write_text(
                textwrap.dedent(
                    f"""
                    import json

                    def process(results, context):
                        payload = {{
                            "channels": [r.channel for r in results],
                            "output": context["output_path"],
                        }}
                        with open({str(marker)!r}, "w", encoding="utf-8") as fh:
                            json.dump(payload, fh)
                    """
                ),
                encoding="utf-8",
            )
            out = tmp / "out.csv"

            code = main(
                [
                    "--events",
                    str(events_path),
                    "--out",
                    str(out),
                    "--workers",
                    "2",
                    "--custom-script",
                    str(script),
                ]
            )

            self.assertEqual(code, 0)
            self.assertTrue(out.exists())
            recorded = json.loads(marker.read_text(encoding="utf-8"))
        self.assertEqual(recorded["channels"], ["semileptonic"])
        self.assertEqual(recorded["output"], str(out))

    def test_custom_script_without_process_is_rejected(self) -> None:
        events = [event_to_dict(make_ttbar_event("dilepton", "d1"))]
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            events_path = tmp / "events.json"
            events_path.write_text(json.dumps({"events": events}), encoding="utf-8")
            script = tmp / "empty_hook.py"
            script.write_text("VALUE = 1\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                main(
                    [
                        "--events",
                        str(events_path),
                        "--out",
                        str(tmp / "out.csv"),
                        "--custom-script",
                        str(script),
                    ]
                )


if __name__ == "__main__":
    unittest.main()
