import logging
from typing import Any
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, HTTPException, Depends, Body, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from prometheus_fastapi_instrumentator.metrics import Info
from prometheus_client import Counter

from blog_posts.config import ALLOWED_ORIGINS, LOG_LEVEL, PORT, REQUEST_LATENCY_BUCKETS
from blog_posts.database import BlogDatabase, db
from blog_posts.cache import BlogCache, cache
from blog_posts.errors import BlogServiceError, ValidationError, log_and_sanitize_error
from blog_posts.models import to_view, from_create_request, from_update_request
from blog_posts.models.mapper import describe_errors

# --- 기본 로깅 ---
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger('BlogServiceApp')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    await db.initialize()
    await cache.initialize()
    logger.info("Blog service initialized: database and cache ready")
    yield
    await db.close()
    await cache.close()
    logger.info("Blog service shutdown: database and cache closed")


app = FastAPI(title="Blog Posts Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
)

# Prometheus 메트릭 설정
# status 레이블은 2xx, 4xx, 5xx 형식으로 집계
http_requests_total_custom = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ("method", "status"),
)


def http_requests_total_custom_metric(info: Info) -> None:
    status_code = info.response.status_code if info.response is not None else 500
    status_group = "unknown"
    if 200 <= status_code < 300:
        status_group = "2xx"
    elif 300 <= status_code < 400:
        status_group = "3xx"
    elif 400 <= status_code < 500:
        status_group = "4xx"
    elif 500 <= status_code < 600:
        status_group = "5xx"

    http_requests_total_custom.labels(info.method, status_group).inc()


def configure_metrics(application: FastAPI) -> None:
    """Configure Prometheus request latency and status-group metrics."""
    instrumentator = Instrumentator()
    instrumentator.add(metrics.latency(buckets=REQUEST_LATENCY_BUCKETS))
    instrumentator.add(http_requests_total_custom_metric)
    instrumentator.instrument(application).expose(application, include_in_schema=False)


configure_metrics(app)


# --- 의존성 ---
def get_db() -> BlogDatabase:
    return db


def get_cache() -> BlogCache:
    return cache


@app.exception_handler(BlogServiceError)
async def handle_blog_service_error(request: Request, exc: BlogServiceError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Missing, null or malformed request bodies are answered with 400 and a string detail."""
    problems = []
    for err in exc.errors():
        loc = tuple(err["loc"])
        if loc[:1] == ("body",):
            loc = loc[1:]
        if err["type"] == "json_invalid":
            problems.append("Request body is not valid JSON")
        elif err["type"] == "missing" and not loc:
            problems.append("Request body is required")
        else:
            problems.append(describe_errors([{**err, "loc": loc}]))
    message = "; ".join(problems)
    logger.info(f"{request.method} {request.url.path} -> 400: {message}")
    return JSONResponse(status_code=400, content={"detail": message})


def server_error(error: Exception, context: str) -> HTTPException:
    message, _ = log_and_sanitize_error(error, context, user_message="Internal server error")
    return HTTPException(status_code=500, detail=message)


# --- API 핸들러 함수 ---
@app.get("/posts")
async def handle_get_posts(database: BlogDatabase = Depends(get_db), posts_cache: BlogCache = Depends(get_cache)):
    """모든 블로그 게시물 목록을 반환합니다."""
    version = await posts_cache.get_version()
    cached = await posts_cache.get_posts(version)
    if cached is not None:
        return JSONResponse(content=cached)

    try:
        docs = await database.posts.get_all()
    except Exception as e:
        raise server_error(e, "List posts")

    views = [to_view(doc).model_dump(mode="json") for doc in docs]
    await posts_cache.set_posts(version, views)
    return JSONResponse(content=views)


@app.get("/posts/{post_id}")
async def handle_get_post_by_id(post_id: str, database: BlogDatabase = Depends(get_db), posts_cache: BlogCache = Depends(get_cache)):
    """ID로 특정 게시물을 찾아 반환합니다."""
    version = await posts_cache.get_version()
    cached = await posts_cache.get_post(post_id, version)
    if cached is not None:
        return JSONResponse(content=cached)

    try:
        doc = await database.posts.get_by_id(post_id)
    except Exception as e:
        raise server_error(e, "Fetch post")

    if doc is None:
        raise HTTPException(status_code=404, detail=f"Post {post_id} not found")

    view = to_view(doc).model_dump(mode="json")
    await posts_cache.set_post(post_id, version, view)
    return JSONResponse(content=view)


@app.post("/posts", status_code=201)
async def create_post(payload: Any = Body(...), database: BlogDatabase = Depends(get_db), posts_cache: BlogCache = Depends(get_cache)):
    document = from_create_request(payload)
    try:
        created = await database.posts.create(document)
    except BlogServiceError:
        raise
    except Exception as e:
        raise server_error(e, "Create post")

    await posts_cache.invalidate_posts()
    return JSONResponse(content=to_view(created).model_dump(mode="json"), status_code=201)


@app.put("/posts/{post_id}", status_code=204)
async def update_post(post_id: str, payload: Any = Body(...), database: BlogDatabase = Depends(get_db), posts_cache: BlogCache = Depends(get_cache)):
    body_id = payload.get("id") if isinstance(payload, dict) else None
    if body_id != post_id:
        raise ValidationError(
            f"Request path id ({post_id}) and request body id ({body_id}) must match"
        )

    fields = from_update_request(payload)
    try:
        await database.posts.update(post_id, fields)
    except BlogServiceError:
        raise
    except Exception as e:
        raise server_error(e, "Update post")

    await posts_cache.invalidate_posts()
    return Response(status_code=204)


@app.delete("/posts/{post_id}", status_code=204)
async def delete_post(post_id: str, database: BlogDatabase = Depends(get_db), posts_cache: BlogCache = Depends(get_cache)):
    try:
        deleted = await database.posts.delete(post_id)
    except Exception as e:
        raise server_error(e, "Delete post")

    if not deleted:
        logger.info(f"Delete of absent post {post_id} ignored")
    await posts_cache.invalidate_posts()
    return Response(status_code=204)


@app.get("/health")
async def handle_health(database: BlogDatabase = Depends(get_db)):
    """Kubernetes를 위한 헬스 체크 엔드포인트"""
    database_ok = await database.health_check()
    return {
        "status": "ok",
        "service": "blog-service",
        "database": "ok" if database_ok else "unavailable",
    }


@app.get("/stats")
async def handle_stats(database: BlogDatabase = Depends(get_db)):
    """대시보드를 위한 통계 엔드포인트"""
    try:
        post_count = await database.posts.count()
    except Exception as e:
        logger.error(f"Failed to get post count: {e}", exc_info=True)
        post_count = 0

    return {
        "blog_service": {
            "service_status": "online",
            "post_count": post_count
        }
    }


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Blog Service starting on http://0.0.0.0:{PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
