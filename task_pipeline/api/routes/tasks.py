"""Task creation endpoint: resolve reviewed tasks against a team and store them."""

from __future__ import annotations

from fastapi import APIRouter

from task_pipeline.api.models import CreatedTask, CreateTasksRequest, CreateTasksResponse
from task_pipeline.assignment.resolver import build_task_records
from task_pipeline.assignment.storage import (
    fetch_roster,
    fetch_team_owner,
    get_supabase_client,
    store_task_records,
)
from task_pipeline.extraction.normalizer import normalize_task

router = APIRouter()


@router.post("/api/teams/{team_id}/tasks", response_model=CreateTasksResponse)
async def create_tasks(team_id: str, request: CreateTasksRequest) -> CreateTasksResponse:
    """Assign reviewed tasks to team members and persist them.

    Tasks that cannot be assigned are still stored, with the reason recorded
    so reviewers can tell "nobody was named" from "not on this team" from
    "membership not accepted yet".
    """
    client = get_supabase_client()
    roster = fetch_roster(client, team_id)
    owner_id = request.owner_id or fetch_team_owner(client, team_id)

    tasks = [normalize_task(payload.model_dump()) for payload in request.tasks]
    records = build_task_records(tasks, roster, owner_id=owner_id)
    store_task_records(client, team_id, request.assigned_by, records)

    return CreateTasksResponse(
        team_id=team_id,
        tasks_created=len(records),
        assigned=sum(1 for r in records if r.disposition.is_assigned),
        tasks=[
            CreatedTask(
                title=r.task.title,
                assigned_to=r.disposition.resolved_member_id,
                assigned_to_name=r.disposition.resolved_display_name,
                unassigned_reason=r.disposition.unassigned_reason,
            )
            for r in records
        ],
    )
