"""Summarize dumped JSON traces into CSV and JSON tables."""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path

import numpy as np

from protosim.sampling import edge_count


LINES = ("level", "sda", "scl", "cs", "sck", "mosi", "miso")


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--indir", default="artifacts", help="Directory holding dumped traces")
    args = ap.parse_args()

    outdir = Path(args.indir)
    rows = []

    for path in sorted(outdir.glob("*.json")):
        if path.name in {"traces.json", "summary.json"}:
            continue
        data = json.loads(path.read_text())
        if not isinstance(data, dict) or "frames" not in data:
            continue

        frames = data["frames"]
        edges = {}
        for line in LINES:
            if frames and line in frames[0]:
                edges[line] = edge_count(np.array([f[line] for f in frames]))

        rows.append(
            {
                "file": path.name,
                "protocol": data.get("protocol", "?"),
                "frames": len(frames),
                "duration": data.get("total_duration"),
                "edges": " ".join(f"{k}={v}" for k, v in edges.items()),
            }
        )

    (outdir / "traces.json").write_text(json.dumps(rows, indent=2))

    with (outdir / "traces.csv").open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=["file", "protocol", "frames", "duration", "edges"])
        w.writeheader()
        w.writerows(rows)

    counts: dict[str, int] = {}
    for r in rows:
        counts[r["protocol"]] = counts.get(r["protocol"], 0) + 1

    summary = {
        "total_traces": len(rows),
        "protocol_counts": counts,
    }
    (outdir / "summary.json").write_text(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
