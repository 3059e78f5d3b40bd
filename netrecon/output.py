from __future__ import annotations

import csv
import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from .config import ScanConfig
from .models import ProbeResult, ScanSummary, ScanTarget

SEPARATOR = "-" * 40


def first_line(banner: Optional[str]) -> Optional[str]:
    if not banner:
        return None
    return banner.split("\n")[0]


def format_row(r: ProbeResult) -> str:
    row = f"{r.port}\topen\t{r.service or '-'}"
    line = first_line(r.banner)
    if line:
        row += f"\t{line}"
    return row


def print_result(r: ProbeResult) -> None:
    print(format_row(r), flush=True)


def print_header(target: ScanTarget, port_count: int, config: ScanConfig) -> None:
    print(
        f"Scanning {target.host} ({target.address}) - {port_count} ports, "
        f"concurrency={config.concurrency}, timeout={config.timeout_ms}ms"
    )
    if target.reverse_name:
        print(f"Reverse DNS: {target.reverse_name}")
    print(SEPARATOR)


def print_footer(summary: ScanSummary) -> None:
    print(SEPARATOR)
    print(f"Scan complete. {len(summary.open_results)} open port(s) found.")


def result_to_dict(r: ProbeResult) -> Dict[str, Any]:
    return {
        "port": r.port,
        "open": r.is_open,
        "service": r.service,
        "banner": r.banner,
    }


def summary_to_dict(summary: ScanSummary) -> Dict[str, Any]:
    return {
        "target": summary.target,
        "ip": summary.address,
        "rdns": summary.reverse_name,
        "scanned_ports": summary.ports_scanned,
        "open_ports": [result_to_dict(r) for r in summary.open_results],
    }


def print_json(summary: ScanSummary) -> None:
    print(json.dumps(summary_to_dict(summary), indent=2, ensure_ascii=False))


def save_results(summary: ScanSummary, fmt: str, out_dir: str = "SCANS") -> str:
    os.makedirs(out_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(out_dir, f"{ts}_port_scan.{fmt}")

    results: List[ProbeResult] = list(summary.open_results)

    if fmt == "txt":
        with open(path, "w", encoding="utf-8") as f:
            f.write(f"Target: {summary.target} ({summary.address})\n")
            if summary.reverse_name:
                f.write(f"Reverse DNS: {summary.reverse_name}\n")
            f.write(f"Scanned {summary.ports_scanned} ports, found {len(results)} open\n")
            for r in results:
                f.write(format_row(r) + "\n")

    elif fmt == "csv":
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["target", "ip", "port", "service", "banner"])
            for r in results:
                w.writerow([
                    summary.target,
                    summary.address,
                    r.port,
                    r.service or "",
                    r.banner or "",
                ])

    elif fmt == "json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(summary_to_dict(summary), f, indent=2, ensure_ascii=False)

    else:
        raise ValueError(f"Unsupported format: {fmt}")

    return path
