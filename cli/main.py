import argparse
import logging
import sys
from typing import List, Optional

from cli.output import format_json, format_text
from core.config import settings
from core.models import ScanConfig, validation_message
from pipeline.orchestrator import Orchestrator

log = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_port_list(value: str) -> List[int]:
    ports: List[int] = []
    for token in _split(value):
        try:
            ports.append(int(token))
        except ValueError:
            log.warning("ignoring non-numeric port %r", token)
    return ports


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Concurrent TCP connect port scanner")
    p.add_argument("--target", default=settings.default_target, help="single target to scan")
    p.add_argument("--targets", default="", help="comma-separated targets (overrides --target)")
    p.add_argument("--start-port", type=int, default=settings.default_start_port, help="first port of the range")
    p.add_argument("--end-port", type=int, default=settings.default_end_port, help="last port of the range")
    p.add_argument("--ports", default="", help="comma-separated specific ports (overrides the range)")
    p.add_argument("--workers", type=int, default=settings.default_workers, help="concurrent workers")
    p.add_argument("--timeout", type=int, default=settings.default_timeout, help="timeout in seconds")
    p.add_argument("--json", action="store_true", default=False, help="print results as JSON")
    p.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="log verbosity (logs go to stderr)",
    )
    return p


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    targets = _split(args.targets) if args.targets else [args.target]
    return ScanConfig(
        targets=targets,
        start_port=args.start_port,
        end_port=args.end_port,
        ports=parse_port_list(args.ports),
        workers=args.workers,
        timeout=args.timeout,
    )


def main(argv: Optional[List[str]] = None, orchestrator: Optional[Orchestrator] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
    except ValueError as exc:
        print(f"Error: {validation_message(exc)}", file=sys.stderr)
        return 1

    report = (orchestrator or Orchestrator()).scan(config)

    if args.json:
        try:
            print(format_json(report))
        except (TypeError, ValueError) as exc:
            print(f"Error generating JSON output: {exc}", file=sys.stderr)
            return 1
    else:
        print(format_text(report))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
