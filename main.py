import hashlib
import hmac
import logging
import os
import secrets
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Dict, Any

from fastapi import (FastAPI, HTTPException, Depends, Header, Cookie, Query, Request,
                     Response, WebSocket, WebSocketDisconnect, status)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from bson import ObjectId
from pymongo.errors import PyMongoError

import aggregation
from database import db, create_document, get_documents, insert_work_log, utc_naive, DatabaseUnavailable
from logger import setup_logging
from schemas import (Role, ProjectStatus, TaskStatus, Timeframe, User, UserPublic, Project, Task, StatusHistory,
                     SignupRequest, LoginRequest, ProjectCreate, ProjectUpdate, TaskCreate, TaskUpdate,
                     TimerStartRequest, TimerConfirmRequest)
from timer import TimerRegistry, TimerError, NoActiveSession, InvalidTransition

setup_logging()
logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"
SESSION_TTL = timedelta(hours=int(os.getenv("SESSION_TTL_HOURS", "24")))
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "").lower() in ("1", "true", "yes")
WORK_LOG_PAGE_SIZE = 10
# fields a PATCH may clear by sending null
NULLABLE_PROJECT_FIELDS = {"deadline"}
NULLABLE_TASK_FIELDS = {"type", "estimate_hours", "assigned_user_id"}

app = FastAPI(title="Project Tracker API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

timers = TimerRegistry()

# -----------------------------
# Helpers
# -----------------------------

def oid(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid id")


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    for k, v in list(d.items()):
        if isinstance(v, datetime):
            d[k] = aggregation.as_utc(v).isoformat()
        if isinstance(v, ObjectId):
            d[k] = str(v)
    return d


def _changes(body, nullable) -> Dict[str, Any]:
    """Fields sent in a PATCH body; null only counts for clearable fields."""
    fields = body.model_dump(exclude_unset=True, mode="json")
    return {k: v for k, v in fields.items() if v is not None or k in nullable}


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    return UserPublic(**serialize(doc)).model_dump()


def hash_password(pw: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", pw.encode(), salt.encode(), 200_000).hex()
    return f"{salt}${digest}"


def verify_password(pw: str, stored: str) -> bool:
    salt = stored.partition("$")[0]
    return hmac.compare_digest(hash_password(pw, salt), stored)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def is_admin(user: Dict[str, Any]) -> bool:
    try:
        role = Role.parse(user["role"])
    except ValueError:
        logger.warning("User %s has unknown role %r", user.get("id"), user["role"])
        raise HTTPException(status_code=403, detail="Not authorized")
    if role == Role.ADMIN:
        return True
    if role == Role.USER:
        return False
    raise HTTPException(status_code=403, detail="Not authorized")


def record_status_change(entity_type: str, entity_id: ObjectId, new_status: str, user_id: str):
    entry = StatusHistory(entity_type=entity_type, entity_id=str(entity_id),
                          status=new_status, updated_by=user_id)
    doc = entry.model_dump()
    doc["entity_id"] = entity_id
    doc["updated_by"] = ObjectId(user_id)
    create_document("status_history", doc)


# -----------------------------
# Auth utilities
# -----------------------------
def _user_for_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    session = db["session"].find_one({"token": token})
    if not session:
        return None
    if session.get("expires_at") and session["expires_at"] < utc_naive(now_utc()):
        db["session"].delete_one({"_id": session["_id"]})
        return None
    return db["user"].find_one({"_id": session["user_id"]})


def _request_tokens(authorization: Optional[str], session_token: Optional[str]) -> List[str]:
    """Session tokens sent with a request: cookie first, then bearer header."""
    tokens = []
    if session_token:
        tokens.append(session_token)
    if authorization and authorization.lower().startswith("bearer "):
        bearer = authorization.split(" ", 1)[1].strip()
        if bearer and bearer not in tokens:
            tokens.append(bearer)
    return tokens


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Dict[str, Any]:
    tokens = _request_tokens(authorization, session_token)
    if not tokens:
        raise HTTPException(status_code=401, detail="Not authenticated")
    for token in tokens:
        user = _user_for_token(token)
        if user:
            return public_user(user)
    raise HTTPException(status_code=401, detail="Session expired or invalid")


async def require_admin(user=Depends(get_current_user)) -> Dict[str, Any]:
    if not is_admin(user):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def _open_session(response: Response, user_id: ObjectId) -> str:
    token = secrets.token_urlsafe(32)
    db["session"].insert_one({
        "token": token,
        "user_id": user_id,
        "created_at": utc_naive(now_utc()),
        "expires_at": utc_naive(now_utc() + SESSION_TTL),
    })
    response.set_cookie(
        SESSION_COOKIE, token,
        max_age=int(SESSION_TTL.total_seconds()),
        httponly=True, secure=COOKIE_SECURE, samesite="lax",
    )
    return token


# -----------------------------
# Auth endpoints
# -----------------------------
@app.post("/api/auth/signup", status_code=201)
def signup(body: SignupRequest, response: Response):
    if db["user"].find_one({"email": body.email}):
        raise HTTPException(status_code=400, detail="User already exists")
    user = User(**body.model_dump(exclude={"confirm_password"}))
    payload = user.model_dump()
    payload["password"] = hash_password(user.password)
    user_id = create_document("user", payload)
    token = _open_session(response, ObjectId(user_id))
    logger.info("New %s account %s", user.role.value, user.email)
    return {"user": public_user(db["user"].find_one({"_id": ObjectId(user_id)})), "token": token}


@app.post("/api/auth/login")
def login(body: LoginRequest, response: Response):
    user = db["user"].find_one({"email": body.email})
    if not user or not verify_password(body.password, user.get("password", "")):
        logger.info("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = _open_session(response, user["_id"])
    return {"user": public_user(user), "token": token}


@app.post("/api/auth/logout")
def logout(
    response: Response,
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
):
    tokens = _request_tokens(authorization, session_token)
    if tokens:
        db["session"].delete_many({"token": {"$in": tokens}})
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "Logged out successfully"}


@app.get("/api/auth/me")
async def me(user=Depends(get_current_user)):
    return {"user": user}


@app.get("/api/users", response_model=List[UserPublic])
async def list_users(admin=Depends(require_admin)):
    cursor = db["user"].find({}).sort("name", 1)
    return [public_user(u) for u in cursor]


# -----------------------------
# Project endpoints
# -----------------------------
def _load_project(project_id: str) -> Dict[str, Any]:
    p = db["project"].find_one({"_id": oid(project_id)})
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    return p


def _can_view_project(user: Dict[str, Any], project: Dict[str, Any]) -> bool:
    if is_admin(user):
        return str(project.get("admin_id")) == user["id"]
    return db["task"].find_one({"project_id": project["_id"],
                                "assigned_user_id": ObjectId(user["id"])}) is not None


def _owned_project(project_id: str, admin: Dict[str, Any]) -> Dict[str, Any]:
    p = _load_project(project_id)
    if str(p.get("admin_id")) != admin["id"]:
        raise HTTPException(status_code=403, detail="Only the owning admin can change this project")
    return p


def _admin_project_ids(admin: Dict[str, Any]) -> List[ObjectId]:
    return [p["_id"] for p in db["project"].find({"admin_id": ObjectId(admin["id"])}, {"_id": 1})]


@app.get("/api/projects")
async def list_projects(status_filter: Optional[ProjectStatus] = Query(default=None, alias="status"),
                        user=Depends(get_current_user)):
    if is_admin(user):
        query: Dict[str, Any] = {"admin_id": ObjectId(user["id"])}
    else:
        ids = db["task"].distinct("project_id", {"assigned_user_id": ObjectId(user["id"])})
        query = {"_id": {"$in": ids}}
    if status_filter is not None:
        query["status"] = status_filter.value
    cursor = db["project"].find(query).sort("created_at", -1)
    return [serialize(p) for p in cursor]


@app.post("/api/projects", status_code=201)
async def create_project(body: ProjectCreate, admin=Depends(require_admin)):
    project = Project(admin_id=admin["id"], **body.model_dump())
    doc = project.model_dump()
    doc["admin_id"] = ObjectId(admin["id"])
    project_id = create_document("project", doc)
    logger.info("Admin %s created project %s", admin["id"], project_id)
    return serialize(db["project"].find_one({"_id": ObjectId(project_id)}))


@app.get("/api/projects/{project_id}")
async def get_project(project_id: str, user=Depends(get_current_user)):
    p = _load_project(project_id)
    if not _can_view_project(user, p):
        raise HTTPException(status_code=403, detail="Access denied")
    return serialize(p)


def _apply_project_update(p: Dict[str, Any], update: Dict[str, Any], admin: Dict[str, Any]) -> Dict[str, Any]:
    if not update:
        return serialize(p)
    update["updated_at"] = utc_naive(now_utc())
    db["project"].update_one({"_id": p["_id"]}, {"$set": update})
    if "status" in update and update["status"] != p.get("status"):
        record_status_change("project", p["_id"], update["status"], admin["id"])
    return serialize(db["project"].find_one({"_id": p["_id"]}))


@app.patch("/api/projects/{project_id}")
async def update_project(project_id: str, body: ProjectUpdate, admin=Depends(require_admin)):
    p = _owned_project(project_id, admin)
    update = _changes(body, NULLABLE_PROJECT_FIELDS)
    return _apply_project_update(p, update, admin)


@app.post("/api/projects/{project_id}/archive")
async def archive_project(project_id: str, admin=Depends(require_admin)):
    p = _owned_project(project_id, admin)
    return _apply_project_update(p, {"status": ProjectStatus.ARCHIVED.value}, admin)


@app.get("/api/projects/{project_id}/tasks")
async def list_tasks(project_id: str, user=Depends(get_current_user)):
    p = _load_project(project_id)
    if not _can_view_project(user, p):
        raise HTTPException(status_code=403, detail="Access denied")
    cursor = db["task"].find({"project_id": p["_id"]}).sort("created_at", 1)
    return [serialize(t) for t in cursor]


@app.get("/api/projects/{project_id}/summary")
async def project_summary(project_id: str, user=Depends(get_current_user)):
    p = _load_project(project_id)
    if not _can_view_project(user, p):
        raise HTTPException(status_code=403, detail="Access denied")
    tasks = list(db["task"].find({"project_id": p["_id"]}))
    logs = list(db["work_log"].find({"project_id": p["_id"]}))
    return {
        "project_id": str(p["_id"]),
        "total_hours": aggregation.total_hours(logs, p["_id"]),
        "hours_by_day": aggregation.hours_by_day(logs),
        "tasks": aggregation.project_task_counts(tasks),
    }


# -----------------------------
# Task endpoints
# -----------------------------
def _check_assignee(user_id: Optional[str]) -> Optional[ObjectId]:
    if not user_id:
        return None
    assignee = oid(user_id)
    if not db["user"].find_one({"_id": assignee}):
        raise HTTPException(status_code=400, detail="Assigned user does not exist")
    return assignee


@app.post("/api/tasks", status_code=201)
async def create_task(body: TaskCreate, admin=Depends(require_admin)):
    p = _owned_project(body.project_id, admin)
    task = Task(**body.model_dump())
    doc = task.model_dump(mode="json")
    doc["project_id"] = p["_id"]
    doc["assigned_user_id"] = _check_assignee(body.assigned_user_id)
    task_id = create_document("task", doc)
    created = serialize(db["task"].find_one({"_id": ObjectId(task_id)}))
    await broadcast_project(str(p["_id"]), {"type": "task_created", "task": created})
    return created


@app.get("/api/tasks/assigned")
async def assigned_tasks(status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
                         user=Depends(get_current_user)):
    query: Dict[str, Any] = {"assigned_user_id": ObjectId(user["id"])}
    if status_filter is not None:
        query["status"] = status_filter.value
    cursor = db["task"].find(query).sort("created_at", -1)
    return [serialize(t) for t in cursor]


@app.patch("/api/tasks/{task_id}")
async def update_task(task_id: str, body: TaskUpdate, user=Depends(get_current_user)):
    task = db["task"].find_one({"_id": oid(task_id)})
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    project = db["project"].find_one({"_id": task["project_id"]})
    fields = _changes(body, NULLABLE_TASK_FIELDS)

    owner = is_admin(user) and project is not None and str(project.get("admin_id")) == user["id"]
    assignee = str(task.get("assigned_user_id")) == user["id"]
    if not owner:
        if not assignee:
            raise HTTPException(status_code=403, detail="Access denied")
        if set(fields) - {"status"}:
            raise HTTPException(status_code=403, detail="Assignees may only change the status")

    update: Dict[str, Any] = {k: v for k, v in fields.items() if k != "assigned_user_id"}
    if "assigned_user_id" in fields:
        update["assigned_user_id"] = _check_assignee(fields["assigned_user_id"])
    if not update:
        return serialize(task)
    update["updated_at"] = utc_naive(now_utc())
    db["task"].update_one({"_id": task["_id"]}, {"$set": update})
    if "status" in update and update["status"] != task.get("status"):
        record_status_change("task", task["_id"], update["status"], user["id"])
    updated = serialize(db["task"].find_one({"_id": task["_id"]}))
    await broadcast_project(str(task["project_id"]), {"type": "task_updated", "task": updated})
    return updated


@app.delete("/api/tasks/{task_id}")
async def delete_task(task_id: str, admin=Depends(require_admin)):
    task = db["task"].find_one({"_id": oid(task_id)})
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    _owned_project(str(task["project_id"]), admin)
    db["task"].delete_one({"_id": task["_id"]})
    await broadcast_project(str(task["project_id"]), {"type": "task_deleted", "task_id": task_id})
    return {"deleted": True}


@app.get("/api/status-history/{entity_id}")
async def status_history(entity_id: str, admin=Depends(require_admin)):
    cursor = db["status_history"].find({"entity_id": oid(entity_id)}).sort("created_at", 1)
    return [serialize(h) for h in cursor]


# -----------------------------
# Timer endpoints
# -----------------------------
@app.exception_handler(NoActiveSession)
async def _no_session_handler(request: Request, exc: NoActiveSession):
    return JSONResponse(status_code=404, content={"detail": "No active timer"})


@app.exception_handler(InvalidTransition)
async def _invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc), "state": exc.state.value})


@app.exception_handler(TimerError)
async def _timer_error_handler(request: Request, exc: TimerError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/api/timer")
async def get_timer(user=Depends(get_current_user)):
    return timers.snapshot(user["id"])


@app.post("/api/timer/start")
async def start_timer(body: TimerStartRequest, user=Depends(get_current_user)):
    task = db["task"].find_one({"_id": oid(body.task_id)})
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if str(task.get("assigned_user_id")) != user["id"]:
        raise HTTPException(status_code=403, detail="Only the assignee can time this task")
    session = timers.start(user["id"], serialize(task))
    snapshot = timers.snapshot(user["id"])
    snapshot["started"] = session.task_id == body.task_id
    return snapshot


@app.post("/api/timer/pause")
async def pause_timer(user=Depends(get_current_user)):
    timers.pause(user["id"])
    return timers.snapshot(user["id"])


@app.post("/api/timer/stop")
async def stop_timer(user=Depends(get_current_user)):
    timers.stop(user["id"])
    return timers.snapshot(user["id"])


@app.post("/api/timer/cancel")
async def cancel_stop(user=Depends(get_current_user)):
    timers.cancel_stop(user["id"])
    return timers.snapshot(user["id"])


@app.post("/api/timer/confirm", status_code=201)
async def confirm_stop(body: TimerConfirmRequest, user=Depends(get_current_user)):
    def persist(log: Dict[str, Any]) -> Dict[str, Any]:
        return serialize(insert_work_log(log))

    try:
        work_log = timers.confirm_stop(user["id"], body.note, persist)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=f"Work log rejected: {e}")
    except (DatabaseUnavailable, PyMongoError):
        logger.exception("Could not save work log for user %s", user["id"])
        raise HTTPException(status_code=503,
                            detail="Could not save work log; the timer was kept, confirm again to retry")
    work_log["duration_seconds"] = aggregation.duration_seconds(work_log)
    await broadcast_project(work_log["project_id"], {"type": "work_log_created", "work_log": work_log})
    return work_log


# -----------------------------
# Work logs
# -----------------------------
@app.get("/api/work-logs")
async def my_work_logs(page: int = Query(default=0, ge=0), user=Depends(get_current_user)):
    cursor = (db["work_log"].find({"user_id": ObjectId(user["id"])})
              .sort("start_time", -1)
              .skip(page * WORK_LOG_PAGE_SIZE)
              .limit(WORK_LOG_PAGE_SIZE))
    items = []
    for log in cursor:
        item = serialize(log)
        item["duration_seconds"] = aggregation.duration_seconds(log)
        items.append(item)
    return {"page": page, "page_size": WORK_LOG_PAGE_SIZE, "items": items}


# -----------------------------
# Reports (admin)
# -----------------------------
@app.get("/api/reports/projects")
async def report_projects(status_filter: Optional[ProjectStatus] = Query(default=None, alias="status"),
                          admin=Depends(require_admin)):
    query: Dict[str, Any] = {"admin_id": ObjectId(admin["id"])}
    if status_filter is not None:
        query["status"] = status_filter.value
    projects = [serialize(p) for p in db["project"].find(query).sort("created_at", -1)]
    ids = [ObjectId(p["id"]) for p in projects]
    tasks = get_documents("task", {"project_id": {"$in": ids}})
    logs = get_documents("work_log", {"project_id": {"$in": ids}})
    return aggregation.project_overview(projects, tasks, logs)


@app.get("/api/reports/productivity")
async def report_productivity(timeframe: Timeframe = Timeframe.WEEK, admin=Depends(require_admin)):
    now = now_utc()
    start = aggregation.timeframe_start(timeframe, now)
    project_ids = _admin_project_ids(admin)
    users = list(db["user"].find({}).sort("name", 1))
    logs = get_documents("work_log", {
        "project_id": {"$in": project_ids},
        "start_time": {"$gte": utc_naive(start)},
        "end_time": {"$lte": utc_naive(now)},
    })
    tasks = get_documents("task", {"project_id": {"$in": project_ids}})
    rows = aggregation.team_productivity(users, logs, tasks, now)
    return {"timeframe": timeframe.value, "since": start.isoformat(), "users": rows}


@app.get("/api/reports/tasks")
async def report_tasks(admin=Depends(require_admin)):
    tasks = get_documents("task", {"project_id": {"$in": _admin_project_ids(admin)}})
    return {
        "status_counts": aggregation.status_counts(tasks),
        "completed_trend": aggregation.completion_trend(tasks, now_utc()),
    }


def _time_report_rows(admin: Dict[str, Any], date_from: Optional[date], date_to: Optional[date]):
    date_to = date_to or now_utc().date()
    date_from = date_from or date_to - timedelta(days=7)
    if date_from > date_to:
        raise HTTPException(status_code=400, detail="date_from must not be after date_to")
    start = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    end = datetime.combine(date_to, time.max, tzinfo=timezone.utc)
    logs = list(db["work_log"].find({
        "project_id": {"$in": _admin_project_ids(admin)},
        "start_time": {"$gte": utc_naive(start)},
        "end_time": {"$lte": utc_naive(end)},
    }).sort("start_time", -1))
    return date_from, date_to, logs


@app.get("/api/reports/time")
async def report_time(date_from: Optional[date] = None, date_to: Optional[date] = None,
                      admin=Depends(require_admin)):
    date_from, date_to, logs = _time_report_rows(admin, date_from, date_to)
    return {
        "date_from": date_from.isoformat(),
        "date_to": date_to.isoformat(),
        "total_hours": aggregation.total_hours(logs),
        "hours_by_day": aggregation.hours_by_day(logs),
        "rows": [serialize(log) for log in logs],
    }


@app.get("/api/reports/time.csv")
async def report_time_csv(date_from: Optional[date] = None, date_to: Optional[date] = None,
                          admin=Depends(require_admin)):
    date_from, date_to, logs = _time_report_rows(admin, date_from, date_to)
    filename = f"time-report_{date_from.isoformat()}_to_{date_to.isoformat()}.csv"
    return Response(
        content=aggregation.logs_to_csv(logs),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# -----------------------------
# WebSocket manager per project
# -----------------------------
class ConnectionManager:
    def __init__(self):
        self.project_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, project_id: str, websocket: WebSocket):
        await websocket.accept()
        self.project_connections.setdefault(project_id, []).append(websocket)

    def disconnect(self, project_id: str, websocket: WebSocket):
        conns = self.project_connections.get(project_id, [])
        if websocket in conns:
            conns.remove(websocket)
        if not conns and project_id in self.project_connections:
            del self.project_connections[project_id]

    async def broadcast(self, project_id: str, message: Dict[str, Any]):
        for ws in list(self.project_connections.get(project_id, [])):
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping dead websocket on project %s", project_id)
                self.disconnect(project_id, ws)


manager = ConnectionManager()


async def broadcast_project(project_id: str, message: Dict[str, Any]):
    await manager.broadcast(project_id, message)


@app.websocket("/ws/projects/{project_id}")
async def project_ws(websocket: WebSocket, project_id: str):
    token = websocket.cookies.get(SESSION_COOKIE) or websocket.query_params.get("token")
    user = _user_for_token(token)
    project = db["project"].find_one({"_id": ObjectId(project_id)}) if ObjectId.is_valid(project_id) else None
    if not user or not project or not _can_view_project(public_user(user), project):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await manager.connect(project_id, websocket)
    try:
        while True:
            # keep alive; clients may ping
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(project_id, websocket)


# -----------------------------
# Health
# -----------------------------
@app.get("/")
def read_root():
    return {"message": "Project Tracker API running"}


@app.get("/api/health")
def health():
    response = {
        "backend": "running",
        "database": "unavailable",
        "database_url": "set" if os.getenv("DATABASE_URL") else "not set",
        "database_name": "set" if os.getenv("DATABASE_NAME") else "not set",
        "collections": [],
    }
    if db is not None:
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "connected"
        except PyMongoError as e:
            response["database"] = f"error: {str(e)[:50]}"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
