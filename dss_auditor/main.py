import logging
from typing import Optional

from fastapi import FastAPI, Request

from dss_auditor.core.config import Settings, settings as default_settings
from dss_auditor.core.logging import setup_logging
from dss_auditor.core.middleware import RequestLoggingMiddleware

# Routers
from dss_auditor.routers.health import router as health_router
from dss_auditor.routers.policy import router as policy_router
from dss_auditor.routers.audit import router as audit_router
from dss_auditor.routers.triggers import router as triggers_router

# Policy bootstrap
from dss_auditor.services.policy.loader import load_policy_table_from_file
from dss_auditor.services.policy.schema import PolicyTable
from dss_auditor.services.audit.audit_service import AuditService

# Collaborators
from dss_auditor.infra.clients import build_analyzer, build_context_builder, build_sheets_writer

logger = logging.getLogger("dss.boot")


def create_app(
    *,
    settings: Optional[Settings] = None,
    policy_table: Optional[PolicyTable] = None,
    audit_service: Optional[AuditService] = None,
) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title="DSS Refund Auditor")
    app.state.settings = settings
    app.state.policy_table = policy_table
    app.state.audit_service = audit_service
    app.state.owns_audit_service = False

    app.add_middleware(RequestLoggingMiddleware)

    @app.middleware("http")
    async def inject_request_context(request: Request, call_next):
        request.state.policy_table = request.app.state.policy_table
        request.state.audit_service = request.app.state.audit_service
        return await call_next(request)

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    def startup():
        # 1) DSS grid (fail fast)
        if app.state.policy_table is None:
            app.state.policy_table = load_policy_table_from_file(settings.DSS_GRID_PATH)

        table = app.state.policy_table
        logger.info(
            "[BOOT] DSS grid loaded: %s rows (%s quarantined)",
            len(table.rows), len(table.quarantined),
        )

        # 2) Collaborators (optional; missing credentials only disable them)
        for problem in settings.validate_credentials():
            logger.warning("[BOOT] %s", problem)

        if app.state.audit_service is None:
            context_builder = build_context_builder(settings)
            if context_builder is not None:
                app.state.audit_service = AuditService(
                    table=table,
                    context_builder=context_builder,
                    sheets_writer=build_sheets_writer(settings),
                    analyzer=build_analyzer(settings),
                )
                app.state.owns_audit_service = True

    @app.on_event("shutdown")
    def shutdown():
        # injected services belong to the caller
        if app.state.owns_audit_service and app.state.audit_service is not None:
            app.state.audit_service.close()
            logger.info("[SHUTDOWN] collaborator clients closed")

    # -------------------------------------------------
    # Routers
    # -------------------------------------------------
    app.include_router(health_router, prefix="/api/v1/health", tags=["health"])
    app.include_router(policy_router, prefix="/api/v1/policy", tags=["policy"])
    app.include_router(audit_router, prefix="/api/v1/audit", tags=["audit"])
    app.include_router(triggers_router, prefix="/api/v1/triggers", tags=["triggers"])

    return app


app = create_app()
