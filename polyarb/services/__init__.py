"""
Services module - Pipeline and cross-cutting capabilities

Contains:
- Snapshot persistence
- HTML report rendering
- Pipeline orchestration
- Scheduling
"""

from polyarb.services.persistence import (
    JsonFilePersistence,
    PersistenceService,
    create_persistence_service,
)
from polyarb.services.pipeline import (
    ArbPipeline,
    PipelineConfig,
    create_pipeline,
    load_pipeline_config,
)
from polyarb.services.report import generate_html
from polyarb.services.scheduler import SchedulerService, create_scheduler_service

__all__ = [
    "JsonFilePersistence",
    "PersistenceService",
    "create_persistence_service",
    "ArbPipeline",
    "PipelineConfig",
    "create_pipeline",
    "load_pipeline_config",
    "generate_html",
    "SchedulerService",
    "create_scheduler_service",
]
