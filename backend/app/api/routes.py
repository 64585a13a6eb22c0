from __future__ import annotations

import logging
import math
import random
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from ..core.config import Settings
from ..core.security import (
    create_access_token,
    hash_password,
    resolve_authenticated_user,
    verify_password,
)
from ..db.models import User
from ..insights import (
    AdviceService,
    compute_activity_analysis,
    compute_daily_patterns,
    compute_distribution,
    compute_trigger_analysis,
    compute_wellness_insights,
)
from ..insights.advice import ADVICE_FAILED, NO_RECENT_LOGS
from ..metrics import USER_API_COUNTER
from ..schemas.advice import AdviceBasis, AdviceResponse, DateRange
from ..schemas.analytics import (
    ActivityStats,
    DailyPatternsResponse,
    DistributionResponse,
    SampleDataResponse,
    TimeRange,
    TriggerAnalysisResponse,
    WellnessResponse,
    range_start,
)
from ..schemas.auth import LoginRequest, LoginResponse
from ..schemas.emotion import (
    EmotionLogCreate,
    EmotionLogListResponse,
    EmotionLogModel,
    EmotionLogUpdate,
    Pagination,
)
from ..schemas.user import UserCreate, UserModel, UserUpdate
from ..services.ratelimit import RateLimiter
from ..services.sample_data import generate_sample_logs
from ..services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["core"])

LOG_NOT_FOUND = "Emotion log not found"
USER_NOT_FOUND = "User not found"
INVALID_CREDENTIALS = "Invalid username or password"


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_advice_service(request: Request) -> AdviceService:
    return request.app.state.advice_service


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _as_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


# -- users -----------------------------------------------------------------


@router.post("/users", response_model=UserModel, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
) -> UserModel:
    user = await storage.create_user(
        username=payload.username,
        name=payload.name,
        password_hash=hash_password(payload.password, settings.bcrypt_rounds),
        profile_picture=payload.profile_picture,
        bio=payload.bio,
    )
    logger.info("user registered", extra={"extra_fields": {"user_id": user.id}})
    USER_API_COUNTER.labels(endpoint="users_post").inc()
    return UserModel.model_validate(user)


@router.get("/users/{user_id}", response_model=UserModel)
async def read_user(
    user_id: int,
    storage: StorageService = Depends(get_storage_service),
) -> UserModel:
    user = await storage.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    USER_API_COUNTER.labels(endpoint="users_get").inc()
    return UserModel.model_validate(user)


@router.put("/users/{user_id}", response_model=UserModel)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
    current_user: User = Depends(resolve_authenticated_user),
) -> UserModel:
    if current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    # bio is the only user field that may be cleared
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "bio"
    }
    password = changes.pop("password", None)
    if password is not None:
        changes["password_hash"] = hash_password(password, settings.bcrypt_rounds)
    user = await storage.update_user(user_id, changes)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    USER_API_COUNTER.labels(endpoint="users_put").inc()
    return UserModel.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> Response:
    if current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
    if not await storage.delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    USER_API_COUNTER.labels(endpoint="users_delete").inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> LoginResponse:
    limiter_key = f"login:{payload.username}"
    if not limiter.allow(limiter_key, limit=10, window_seconds=60):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")
    user = await storage.get_user_by_username(payload.username)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    limiter.reset(limiter_key)
    USER_API_COUNTER.labels(endpoint="login").inc()
    return LoginResponse(
        token=create_access_token(user, settings),
        username=user.username,
        name=user.name,
        id=str(user.id),
    )


# -- emotion logs ----------------------------------------------------------


@router.get("/emotionlogs", response_model=EmotionLogListResponse)
async def list_emotion_logs(
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
    limit: int = Query(default=10, ge=1, le=100),
    page: int = Query(default=1, ge=1),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> EmotionLogListResponse:
    logs, total = await storage.list_emotion_logs(
        user_id=current_user.id,
        limit=limit,
        page=page,
        start=_as_naive_utc(start_date),
        end=_as_naive_utc(end_date),
    )
    USER_API_COUNTER.labels(endpoint="emotionlogs_get").inc()
    return EmotionLogListResponse(
        logs=[EmotionLogModel.model_validate(log) for log in logs],
        pagination=Pagination(
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_logs=total,
            has_more=(page - 1) * limit + len(logs) < total,
            limit=limit,
        ),
    )


@router.get("/emotionlogs/{log_id}", response_model=EmotionLogModel)
async def read_emotion_log(
    log_id: int,
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> EmotionLogModel:
    entry = await storage.get_emotion_log(user_id=current_user.id, log_id=log_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOG_NOT_FOUND)
    USER_API_COUNTER.labels(endpoint="emotionlog_get").inc()
    return EmotionLogModel.model_validate(entry)


@router.post(
    "/emotionlogs",
    response_model=EmotionLogModel,
    status_code=status.HTTP_201_CREATED,
)
async def create_emotion_log(
    payload: EmotionLogCreate,
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> EmotionLogModel:
    if not limiter.allow(f"emotionlog:{current_user.id}", limit=40, window_seconds=60):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")
    entry = await storage.add_emotion_log(user_id=current_user.id, fields=payload.model_dump())
    USER_API_COUNTER.labels(endpoint="emotionlogs_post").inc()
    return EmotionLogModel.model_validate(entry)


@router.put("/emotionlogs/{log_id}", response_model=EmotionLogModel)
async def update_emotion_log(
    log_id: int,
    payload: EmotionLogUpdate,
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> EmotionLogModel:
    entry = await storage.update_emotion_log(
        user_id=current_user.id,
        log_id=log_id,
        changes=payload.changes(),
    )
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOG_NOT_FOUND)
    USER_API_COUNTER.labels(endpoint="emotionlog_put").inc()
    return EmotionLogModel.model_validate(entry)


@router.delete("/emotionlogs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_emotion_log(
    log_id: int,
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> Response:
    if not await storage.delete_emotion_log(user_id=current_user.id, log_id=log_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LOG_NOT_FOUND)
    USER_API_COUNTER.labels(endpoint="emotionlog_delete").inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- analytics -------------------------------------------------------------


@router.get("/analytics/distribution", response_model=DistributionResponse)
async def analytics_distribution(
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
    time_range: TimeRange = Query(default="month", alias="timeRange"),
) -> dict:
    now = _utcnow()
    logs = await storage.fetch_logs(current_user.id, start=range_start(time_range, now), end=now)
    USER_API_COUNTER.labels(endpoint="analytics_distribution").inc()
    return compute_distribution(logs)


@router.get("/analytics/triggers", response_model=TriggerAnalysisResponse)
async def analytics_triggers(
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> dict:
    logs = await storage.fetch_logs(current_user.id)
    USER_API_COUNTER.labels(endpoint="analytics_triggers").inc()
    return compute_trigger_analysis(logs)


@router.get("/analytics/patterns", response_model=DailyPatternsResponse)
async def analytics_patterns(
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> dict:
    now = _utcnow()
    logs = await storage.fetch_logs(current_user.id, start=range_start("week", now), end=now)
    USER_API_COUNTER.labels(endpoint="analytics_patterns").inc()
    return compute_daily_patterns(logs)


@router.get("/analytics/wellness", response_model=WellnessResponse)
async def analytics_wellness(
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> dict:
    logs = await storage.fetch_logs(current_user.id)
    USER_API_COUNTER.labels(endpoint="analytics_wellness").inc()
    return compute_wellness_insights(logs)


@router.get("/analytics/activities", response_model=dict[str, ActivityStats])
async def analytics_activities(
    storage: StorageService = Depends(get_storage_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> dict:
    logs = await storage.fetch_logs(current_user.id)
    USER_API_COUNTER.labels(endpoint="analytics_activities").inc()
    return compute_activity_analysis(logs)


@router.post("/analytics/generate-test-data", response_model=SampleDataResponse)
async def analytics_generate_test_data(
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_settings_from_app),
    current_user: User = Depends(resolve_authenticated_user),
) -> SampleDataResponse:
    if settings.is_production:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    entries = generate_sample_logs(_utcnow(), random.Random())
    generated = await storage.replace_emotion_logs(current_user.id, entries)
    logger.info(
        "sample logs generated",
        extra={"extra_fields": {"user_id": current_user.id, "generated": generated}},
    )
    USER_API_COUNTER.labels(endpoint="analytics_generate").inc()
    return SampleDataResponse(message="Test data generated successfully", generated=generated)


# -- advice ----------------------------------------------------------------


@router.get("/advice", response_model=AdviceResponse)
async def get_advice(
    storage: StorageService = Depends(get_storage_service),
    advice_service: AdviceService = Depends(get_advice_service),
    current_user: User = Depends(resolve_authenticated_user),
) -> AdviceResponse | JSONResponse:
    start, end = advice_service.window(_utcnow())
    logs = await storage.fetch_logs(current_user.id, start=start, end=end, newest_first=True)
    if not logs:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": NO_RECENT_LOGS})

    try:
        result = await advice_service.generate(logs)
    except Exception as exc:
        logger.exception("advice generation failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ADVICE_FAILED,
        ) from exc

    USER_API_COUNTER.labels(endpoint="advice_get").inc()
    return AdviceResponse(
        advice=result.text,
        based_on=AdviceBasis(
            logs_analyzed=len(logs),
            date_range=DateRange(
                from_=start.replace(tzinfo=UTC),
                to=end.replace(tzinfo=UTC),
            ),
        ),
    )


__all__ = ["router"]
