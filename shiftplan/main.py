from __future__ import annotations

import csv
import io
import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from shiftplan import service
from shiftplan.db import get_db, init_db
from shiftplan.errors import (
    AlreadyExists,
    InsufficientInputData,
    NotFound,
    PersistenceFailure,
    ScheduleNotEditable,
    SchedulingError,
)
from shiftplan.repository import ScheduleRepository
from shiftplan.schemas import (
    AssignmentCreatePayload,
    GenerateRequest,
    GenerateResponse,
    Schedule,
    ScheduleCoverageOut,
    ScheduleDetail,
    StoredAssignment,
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    AlreadyExists: status.HTTP_409_CONFLICT,
    ScheduleNotEditable: status.HTTP_409_CONFLICT,
    InsufficientInputData: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    PersistenceFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(title="Shift Planner", lifespan=lifespan)


@app.middleware("http")
async def disable_cache_for_api(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store, no-cache, max-age=0, must-revalidate"
        response.headers["Pragma"] = "no-cache"
    return response


def get_repository(db: Session = Depends(get_db)) -> ScheduleRepository:
    return ScheduleRepository(db)


def raise_http(exc: SchedulingError) -> None:
    code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if code >= 500:
        logger.error("Schedule operation failed: %s", exc)
    raise HTTPException(status_code=code, detail=str(exc)) from exc


@app.post("/api/schedules/generate", response_model=GenerateResponse, status_code=status.HTTP_201_CREATED)
def generate(payload: GenerateRequest, repo: ScheduleRepository = Depends(get_repository)) -> GenerateResponse:
    try:
        return service.generate_schedule(repo, payload.week_start_date, payload.requesting_user_id)
    except SchedulingError as exc:
        raise_http(exc)


@app.get("/api/schedules", response_model=list[Schedule])
def list_schedules(repo: ScheduleRepository = Depends(get_repository)) -> list[Schedule]:
    return service.list_schedules(repo)


@app.get("/api/schedules/{schedule_id}", response_model=ScheduleDetail)
def get_schedule(schedule_id: str, repo: ScheduleRepository = Depends(get_repository)) -> ScheduleDetail:
    try:
        return service.get_schedule(repo, schedule_id)
    except SchedulingError as exc:
        raise_http(exc)


@app.get("/api/schedules/{schedule_id}/coverage", response_model=ScheduleCoverageOut)
def get_schedule_coverage(schedule_id: str, repo: ScheduleRepository = Depends(get_repository)) -> ScheduleCoverageOut:
    try:
        return service.schedule_coverage(repo, schedule_id)
    except SchedulingError as exc:
        raise_http(exc)


@app.post("/api/schedules/{schedule_id}/publish", response_model=Schedule)
def publish_schedule(schedule_id: str, repo: ScheduleRepository = Depends(get_repository)) -> Schedule:
    try:
        return service.publish_schedule(repo, schedule_id)
    except SchedulingError as exc:
        raise_http(exc)


@app.delete("/api/schedules/{schedule_id}")
def delete_schedule(schedule_id: str, repo: ScheduleRepository = Depends(get_repository)) -> dict[str, bool]:
    try:
        service.delete_schedule(repo, schedule_id)
    except SchedulingError as exc:
        raise_http(exc)
    return {"ok": True}


@app.post(
    "/api/schedules/{schedule_id}/assignments",
    response_model=StoredAssignment,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    schedule_id: str,
    payload: AssignmentCreatePayload,
    repo: ScheduleRepository = Depends(get_repository),
) -> StoredAssignment:
    try:
        return service.add_assignment(repo, schedule_id, payload.employee_id, payload.shift_id, payload.date)
    except SchedulingError as exc:
        raise_http(exc)


@app.delete("/api/schedules/{schedule_id}/assignments/{assignment_id}")
def delete_assignment(
    schedule_id: str,
    assignment_id: str,
    repo: ScheduleRepository = Depends(get_repository),
) -> dict[str, bool]:
    try:
        service.remove_assignment(repo, schedule_id, assignment_id)
    except SchedulingError as exc:
        raise_http(exc)
    return {"ok": True}


@app.get("/api/schedules/{schedule_id}/export.csv")
def export_csv(schedule_id: str, repo: ScheduleRepository = Depends(get_repository)) -> Response:
    try:
        schedule = service.get_schedule(repo, schedule_id)
    except SchedulingError as exc:
        raise_http(exc)
    shifts = {shift.id: shift for shift in repo.load_shifts()}
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(["date", "shift", "start", "end", "employee_id", "employee_name"])
    for assignment in schedule.assignments:
        shift = shifts.get(assignment.shift_id)
        employee = repo.get_employee(assignment.employee_id)
        writer.writerow([
            assignment.date.isoformat(),
            shift.name if shift else assignment.shift_id,
            shift.start_time if shift else "",
            shift.end_time if shift else "",
            assignment.employee_id,
            employee.name if employee else "",
        ])
    return Response(content=out.getvalue(), media_type="text/csv")


@app.get("/health")
def health() -> dict[str, bool | str]:
    return {"ok": True, "env": os.getenv("ENVIRONMENT", "local")}
