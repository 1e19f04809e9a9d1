"""Main FastAPI application entry point."""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.database import init_db
from app.api.routes import router
from app.logging_config import configure_logging
from app.services.errors import WorkflowError

configure_logging()
logger = logging.getLogger(__name__)

# Create database tables
init_db()

app = FastAPI(
    title="Back-office Deletion Approvals",
    description="Deletion-approval workflow and audit trail for protected back-office records.",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api", tags=["Approvals"])


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    """Every refusal becomes its own status code with a uniform body."""
    logger.info("%s %s refused: %s (%s)", request.method, request.url.path, exc.message, type(exc).__name__)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__}
    )


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "Deletion Approvals"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
