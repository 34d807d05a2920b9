"""Pydantic request/response schemas for the task extraction API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from task_pipeline.extraction.models import Confidence, Priority, UnassignedReason
from task_pipeline.pipeline_config import ExtractionMode


class ExtractRequest(BaseModel):
    """Request body for the /api/extract endpoint."""

    notes: str
    mode: ExtractionMode | None = None
    team_id: str | None = None


class TaskPayload(BaseModel):
    """A task as returned by extraction and sent back after review."""

    title: str
    description: str = ""
    assignee: str | None = None
    priority: Priority = Priority.MEDIUM
    due_date: str | None = Field(default=None, alias="dueDate")
    optional: bool = False
    inferred: bool = False
    confidence: Confidence = Confidence.HIGH
    source_text: str | None = Field(default=None, alias="sourceText")
    member_id: str | None = Field(default=None, alias="memberId")

    model_config = {"populate_by_name": True}


class ExtractMetadata(BaseModel):
    processed_at: datetime = Field(alias="processedAt")
    model: str
    transcript_length: int = Field(alias="transcriptLength")
    fallback_used: bool = Field(default=False, alias="fallbackUsed")

    model_config = {"populate_by_name": True}


class ExtractResponse(BaseModel):
    """Response body for the /api/extract endpoint."""

    tasks: list[TaskPayload]
    metadata: ExtractMetadata


class CreateTasksRequest(BaseModel):
    """Request body for the /api/teams/{team_id}/tasks endpoint."""

    tasks: list[TaskPayload] = Field(min_length=1)
    assigned_by: str
    owner_id: str | None = None


class CreatedTask(BaseModel):
    title: str
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    unassigned_reason: UnassignedReason | None = None


class CreateTasksResponse(BaseModel):
    """Response body for the /api/teams/{team_id}/tasks endpoint."""

    team_id: str
    tasks_created: int
    assigned: int
    tasks: list[CreatedTask]
