import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from linkshare.config import settings
from linkshare.core.exceptions import SyncError
from linkshare.core.state import get_chat_state
from linkshare.database.supabase_client import get_document_store, get_supabase
from linkshare.modules.auth import routes as session_routes
from linkshare.modules.auth.service import AuthService
from linkshare.modules.auth.session import SupabaseSession
from linkshare.modules.users import routes as users_routes
from linkshare.modules.groups import routes as groups_routes
from linkshare.modules.links import routes as links_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.state.unsubscribe_session = None
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SyncError)
async def sync_error_handler(request: Request, exc: SyncError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(session_routes.router, prefix="/api/v1")
app.include_router(users_routes.router, prefix="/api/v1")
app.include_router(groups_routes.router, prefix="/api/v1")
app.include_router(links_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if not settings.supabase_url:
        logger.warning("SUPABASE_URL not set; session hydration disabled")
        get_chat_state().set(loading=False)
        return
    supabase = get_supabase()
    auth_service = AuthService(supabase, get_document_store(), get_chat_state())
    app.state.unsubscribe_session = auth_service.init(SupabaseSession(supabase))


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
    if app.state.unsubscribe_session:
        app.state.unsubscribe_session()


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness: the session has finished hydrating."""
    state = get_chat_state()
    return {"status": "loading" if state.loading else "ready"}
