import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import assignments, auth, notifications, submissions, users
from config.settings import CORS_ORIGINS, ENV, configure_logging
from db import init_db
from utils.errors import register_exception_handlers
from utils.response import send_response

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(title="AssignmentHub API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(assignments.router)
app.include_router(submissions.router)
app.include_router(notifications.router)


# Create tables in the database
@app.on_event("startup")
def startup_db_client():
    configure_logging()
    init_db()
    logger.info(f"AssignmentHub API started ({ENV})")


@app.get("/")
def root():
    return send_response(message="AssignmentHub API is running", data={"service": "AssignmentHub API"})


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": "AssignmentHub API",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)
