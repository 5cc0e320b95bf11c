"""摘要流程 API."""

from typing import Any

from fastapi import APIRouter, Depends

from feeddigest.api.deps import get_pipeline
from feeddigest.core.pipeline import DigestPipeline

router = APIRouter(prefix="/api/digest", tags=["digest"])


@router.post("/run")
async def run_digest(
    pipeline: DigestPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """立即执行一次摘要流程."""
    report = await pipeline.run_tick()
    return report.to_dict()


@router.get("/status")
async def get_status(
    pipeline: DigestPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """获取流水线状态和最近一次执行报告."""
    return {
        "state": pipeline.state,
        "running": pipeline.is_running,
        "last_report": pipeline.last_report.to_dict()
        if pipeline.last_report
        else None,
    }
