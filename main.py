# main.py
import uuid
from time import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from app.scripts.logging_config import setup_logging, get_logger, set_request_id

# 1) logging first
# set LOG_JSON=true for JSON lines in production
setup_logging(json_fmt=settings.LOG_JSON)
logger = get_logger(__name__)

# 2) Firebase
from app.services import ingress
from app.services.firebase_init import init_firebase

try:
    init_firebase()
except (ValueError, OSError) as e:
    logger.exception("Firebase initialization failed: %s", e)

# 3) FastAPI app
app = FastAPI(title="Finder Match API")

# 4) request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    set_request_id(rid)

    start = time()
    path = request.url.path
    method = request.method
    client_ip = getattr(request.client, 'host', '-') if request.client else '-'
    ua = request.headers.get('user-agent', '')[:120]
    logger.info("REQ start %s %s ip=%s ua=%r", method, path, client_ip, ua)

    status = 'NA'
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        duration = (time() - start) * 1000
        logger.info("REQ end %s %s status=%s %.1fms", method, path, status, duration)

# malformed / non-JSON bodies share the {"error": ...} shape
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": ingress.schema_error_message(exc.errors())})

# 5) CORS
allowed_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS middleware configured for %s", allowed_origins)

# 6) routers
from app.api import matching

app.include_router(matching.router)

# 7) endpoints
@app.get("/")
def root():
    return {"message": "Finder match backend", "routes": [
        "/ai/image-description",
        "/ai/text-embedding",
        "/ai/image-embedding",
    ]}
