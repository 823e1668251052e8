#!/usr/bin/env python3

from pydantic import BaseModel

# Pydantic Models


class DocumentResult(BaseModel):
    """Outcome of processing one IVR script file."""

    filename: str
    status: str  # 'success' or 'failed'
    outputs: dict[str, str] = {}  # format → written file path
    error: str | None = None
    error_stage: str | None = None  # 'read', 'compile', 'write', 'render', 'timeout'
    node_count: int | None = None
    edge_count: int | None = None


class BatchReport(BaseModel):
    """Results of a batch, in input order."""

    results: list[DocumentResult] = []
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0
