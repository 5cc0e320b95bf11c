"""定时任务."""

from feeddigest.scheduler.tasks import (
    build_scheduler,
    create_scheduler,
    digest_task,
    shutdown_scheduler,
)

__all__ = [
    "build_scheduler",
    "create_scheduler",
    "digest_task",
    "shutdown_scheduler",
]
