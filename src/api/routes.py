"""
Session API routes

GET  /api/members               - Roster listing, optionally filtered by role
GET  /api/member/{key}          - One member with its detail scores
GET  /api/admin/members         - Scored members ranked by score, with online state
GET  /api/admin/visitors        - Online visitors
GET  /api/criteria/{evalKey}    - Criteria and rating levels for an evaluation
POST /api/evaluate              - Record one evaluator's scores for a target
POST /api/evaluate/finalize     - Recompute every member's final score
POST /api/admin/reset           - Back up the dataset and restore the seed
POST /api/join                  - Claim an admin/member/visitor slot
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from src.api.services import SessionServices, get_services
from src.evaluator import Role
from src.evaluator.exceptions import InputValidationError, MemberNotFoundError
from src.store.backup import reset_dataset

router = APIRouter(prefix="/api")

DEFAULT_AVATAR = "👤"


class EvaluationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    evaluator_key: str | None = Field(default=None, alias="evaluatorKey")
    evaluator_role: str | None = Field(default=None, alias="evaluatorRole")
    target_key: str | None = Field(default=None, alias="targetKey")
    scores: Any = None


class JoinRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: str | None = None
    name: str | None = None
    group_key: str | None = Field(default=None, alias="groupKey")


@router.get("/members")
async def list_members(
    role: str | None = None,
    services: SessionServices = Depends(get_services),
) -> list[dict[str, Any]]:
    roster = await services.store.load()
    members = roster.members
    role = (role or "").strip()
    if role:
        members = [m for m in members if m.role.value == role]
    return [{"id": m.id, "key": m.key, "name": m.name, "role": m.role.value} for m in members]


@router.get("/member/{key}")
async def get_member(key: str, services: SessionServices = Depends(get_services)) -> dict[str, Any]:
    key = key.strip()
    if not key:
        raise InputValidationError("key required", context={"field": "key"})
    roster = await services.store.load()
    member = roster.find(key)
    if member is None:
        raise MemberNotFoundError("Member not found", context={"key": key})
    extra = member.model_extra or {}
    return {
        "id": member.id,
        "key": member.key,
        "name": member.name,
        "role": member.role.value,
        "score": member.score,
        "detail_score": {k: v.model_dump() for k, v in member.detail_score.items()},
        "avatar": extra.get("avatar") or DEFAULT_AVATAR,
    }


@router.get("/admin/members")
async def admin_members(services: SessionServices = Depends(get_services)) -> list[dict[str, Any]]:
    roster = await services.store.load()
    online = services.presence.online_keys()
    result = [
        {
            "id": m.id,
            "key": m.key,
            "name": m.name,
            "score": m.score,
            "isOnline": m.key in online,
        }
        for m in roster.by_role(Role.MEMBER)
    ]
    result.sort(key=lambda row: row["score"], reverse=True)
    return result


@router.get("/admin/visitors")
async def admin_visitors(services: SessionServices = Depends(get_services)) -> list[dict[str, Any]]:
    roster = await services.store.load()
    online = services.presence.online_keys()
    members = roster.by_role(Role.MEMBER)
    return [
        {
            "id": v.id,
            "key": v.key,
            "name": v.name,
            "hasEvaluated": any(v.key in m.detail_score for m in members),
        }
        for v in roster.by_role(Role.VISITOR)
        if v.key in online
    ]


@router.get("/criteria/{evaluation_key}")
async def get_criteria(
    evaluation_key: str, services: SessionServices = Depends(get_services)
) -> dict[str, Any]:
    evaluation_key = evaluation_key.strip()
    if not evaluation_key:
        raise InputValidationError("evaluationKey required", context={"field": "evaluationKey"})
    return services.criteria.get(evaluation_key).to_response()


@router.post("/evaluate")
async def submit_evaluation(
    body: EvaluationRequest, services: SessionServices = Depends(get_services)
) -> dict[str, Any]:
    result = await services.recorder.record(
        body.evaluator_key or "",
        body.evaluator_role or "",
        body.target_key or "",
        body.scores,
    )
    return {
        "ok": True,
        "message": "Evaluation saved",
        "storageKey": result.storage_key,
        "score": result.entry.score,
    }


@router.post("/evaluate/finalize")
async def finalize_evaluation(services: SessionServices = Depends(get_services)) -> dict[str, Any]:
    scores = await services.finalizer.finalize()
    return {"ok": True, "message": "Scores finalized", "scores": scores}


@router.post("/admin/reset")
async def reset_data(services: SessionServices = Depends(get_services)) -> dict[str, Any]:
    backup_file = await reset_dataset(services.store, services.settings.members_default_path)
    return {"ok": True, "backupFile": backup_file, "message": "Data reset"}


@router.post("/join")
async def join(body: JoinRequest, services: SessionServices = Depends(get_services)) -> dict[str, Any]:
    result = await services.joins.join(
        body.role or "", name=body.name or "", group_key=body.group_key or ""
    )
    return {"ok": True, "key": result.key, "role": result.role.value, "name": result.name}
