"""
FastAPI surface exposing the scanner. Request bodies are validated into a
ScanConfig; the response is the same document the CLI prints with --json.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from core.config import settings
from core.models import ScanConfig, validation_message
from pipeline.orchestrator import Orchestrator

log = logging.getLogger(__name__)

app = FastAPI(title="Port Sweep API", version="1.0")
orch = Orchestrator()


class ScanPayload(BaseModel):
    targets: List[str]
    start_port: Optional[int] = None
    end_port: Optional[int] = None
    ports: List[int] = Field(default_factory=list)
    workers: Optional[int] = None
    timeout: Optional[int] = None

    def to_config(self) -> ScanConfig:
        # unset fields fall back to ScanConfig's settings-driven defaults
        fields = self.model_dump(exclude_none=True)
        config = ScanConfig(**fields)
        if config.workers > settings.api_max_workers:
            raise ValueError(f"worker count must be at most {settings.api_max_workers}")
        return config


@app.post("/api/scan")
def api_scan(payload: ScanPayload):
    try:
        config = payload.to_config()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=validation_message(exc)) from exc
    try:
        report = orch.scan(config)
    except Exception as exc:  # noqa: BLE001
        log.exception("scan failed")
        raise HTTPException(status_code=500, detail="scan failed") from exc
    return report.model_dump(mode="json", exclude_none=True)


@app.get("/api/health")
def api_health():
    return {
        "status": "ok",
        "defaults": {
            "target": settings.default_target,
            "start_port": settings.default_start_port,
            "end_port": settings.default_end_port,
            "workers": settings.default_workers,
            "timeout": settings.default_timeout,
        },
    }
