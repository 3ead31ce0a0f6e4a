"""
Shared data models for the scan engine.
ScanConfig -> Probe -> ScanResult -> ScanSummary, bundled into a ScanReport
for the CLI/API renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.config import settings

MIN_PORT = 1
MAX_PORT = 65535


def _valid_port(port: int) -> bool:
    return MIN_PORT <= port <= MAX_PORT


class ScanConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    targets: Tuple[str, ...]
    start_port: int = Field(default_factory=lambda: settings.default_start_port)
    end_port: int = Field(default_factory=lambda: settings.default_end_port)
    ports: Tuple[int, ...] = ()  # specific ports; win over the range when non-empty
    workers: int = Field(default_factory=lambda: settings.default_workers)
    timeout: int = Field(default_factory=lambda: settings.default_timeout)

    @field_validator("targets")
    @classmethod
    def validate_targets(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        targets = tuple(t.strip() for t in v if t.strip())
        if not targets:
            raise ValueError("no targets specified")
        return targets

    @field_validator("ports")
    @classmethod
    def validate_ports(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        for port in v:
            if not _valid_port(port):
                raise ValueError(f"invalid port in specific ports list: {port}")
        # keep first occurrence, drop repeats
        return tuple(dict.fromkeys(v))

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("worker count must be at least 1")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("timeout must be at least 1 second")
        return v

    @model_validator(mode="after")
    def validate_range(self) -> "ScanConfig":
        if self.ports:
            return self
        if not _valid_port(self.start_port):
            raise ValueError(f"invalid start port: {self.start_port}")
        if not _valid_port(self.end_port):
            raise ValueError(f"invalid end port: {self.end_port}")
        if self.start_port > self.end_port:
            raise ValueError("start port cannot be greater than end port")
        return self

    @property
    def specific(self) -> bool:
        return bool(self.ports)

    @property
    def port_list(self) -> Tuple[int, ...]:
        if self.specific:
            return self.ports
        return tuple(range(self.start_port, self.end_port + 1))

    @property
    def port_count(self) -> int:
        if self.specific:
            return len(self.ports)
        return self.end_port - self.start_port + 1

    @property
    def total_probes(self) -> int:
        return len(self.targets) * self.port_count

    @property
    def port_range(self) -> str:
        if self.specific:
            return "specific ports: " + ",".join(str(p) for p in self.ports)
        return f"{self.start_port}-{self.end_port}"


@dataclass(frozen=True)
class Probe:
    target: str
    port: int

    @property
    def address(self) -> Tuple[str, int]:
        return (self.target, self.port)


class ScanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str
    port: int
    open: bool
    banner: Optional[str] = None

    @model_validator(mode="after")
    def banner_requires_open(self) -> "ScanResult":
        if self.banner is not None and not self.open:
            raise ValueError("closed port cannot carry a banner")
        return self

    @classmethod
    def closed(cls, probe: Probe) -> "ScanResult":
        return cls(target=probe.target, port=probe.port, open=False)


class ScanSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_ports: int
    open_ports: int
    time_taken: float  # seconds
    targets: List[str]
    port_range: str
    worker_count: int


class ScanReport(BaseModel):
    results: List[ScanResult] = Field(default_factory=list)
    summary: ScanSummary

    @property
    def open_results(self) -> List[ScanResult]:
        return [r for r in self.results if r.open]

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent, exclude_none=True)


def validation_message(exc: ValueError) -> str:
    """
    Flatten a config error into a single human readable line.
    pydantic prefixes custom errors with "Value error, "; drop that noise.
    """
    if isinstance(exc, ValidationError):
        parts = []
        for err in exc.errors():
            msg = err.get("msg", "")
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            loc = ".".join(str(x) for x in err.get("loc", ()))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return "; ".join(parts)
    return str(exc)
