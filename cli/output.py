from __future__ import annotations

from typing import List

from core.models import ScanReport


def format_text(report: ScanReport) -> str:
    lines: List[str] = ["", "=== Open Ports ==="]
    for r in report.open_results:
        line = f"{r.target}:{r.port}"
        if r.banner:
            line += f" - Banner: {r.banner}"
        lines.append(line)

    s = report.summary
    lines += [
        "",
        "=== Scan Summary ===",
        f"Targets: {', '.join(s.targets)}",
        f"Port range: {s.port_range}",
        f"Total ports scanned: {s.total_ports}",
        f"Open ports found: {s.open_ports}",
        f"Worker count: {s.worker_count}",
        f"Time taken: {s.time_taken:.3f}s",
    ]
    return "\n".join(lines)


def format_json(report: ScanReport) -> str:
    return report.to_json(indent=2)
