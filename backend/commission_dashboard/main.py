from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from commission_dashboard.core.config import settings
from commission_dashboard.core.errors import DashboardError
from commission_dashboard.core.logging import RequestLoggingMiddleware, configure_logging
from commission_dashboard.dashboard.state import SessionRegistry

from commission_dashboard.api.routes.auth import router as auth_router
from commission_dashboard.api.routes.commission import router as commission_router
from commission_dashboard.web.pages import router as pages_router, templates


def _is_api_request(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DashboardError)
    async def handle_dashboard_error(_request: Request, exc: DashboardError):
        response = JSONResponse(status_code=exc.status_code, content=exc.to_payload())
        response.headers["X-Error-Code"] = exc.code
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # missing/ill-typed input is a 400 everywhere
        if not _is_api_request(request):
            return templates.TemplateResponse(
                request,
                "error.html",
                {"message": "The request could not be understood. Please check the link and try again."},
                status_code=400,
            )
        if request.url.path.startswith("/api/auth"):
            content = {"success": False, "message": "Username and password are required"}
        else:
            content = {"error": "Invalid request", "detail": jsonable_errors(exc)}
        response = JSONResponse(status_code=400, content=content)
        response.headers["X-Error-Code"] = "VALIDATION_ERROR"
        return response

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if _is_api_request(request):
            return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
        template = "not_found.html" if exc.status_code == 404 else "error.html"
        return templates.TemplateResponse(
            request,
            template,
            {"message": exc.detail},
            status_code=exc.status_code,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, _exc: Exception):
        if _is_api_request(request):
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
        return templates.TemplateResponse(request, "error.html", {"message": None}, status_code=500)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


def create_application() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Commission Dashboard")
    app.state.session_registry = SessionRegistry()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    _register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "commission-dashboard"}

    # Routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(commission_router, prefix="/api")
    app.include_router(pages_router)

    return app


app = create_application()
