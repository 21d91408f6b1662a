"""Classroom - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ServerSelectionTimeoutError

from classroom.api import assignments, attendance, auth, classes, dashboard, staff, students, users
from classroom.config import settings
from classroom.db import db_shutdown, db_startup
from classroom.errors import IdentityError, NotFoundError, RemoteOperationError, ValidationError
from classroom.seed import seed_admin

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

IDENTITY_STATUS = {
    "email-already-exists": status.HTTP_409_CONFLICT,
    "invalid-password": status.HTTP_400_BAD_REQUEST,
    "invalid-credentials": status.HTTP_401_UNAUTHORIZED,
    "invalid-token": status.HTTP_401_UNAUTHORIZED,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
        await seed_admin()
    except ServerSelectionTimeoutError as e:
        logger.error("MongoDB is not reachable at %s", settings.mongodb_url)
        raise RuntimeError("MongoDB connection failed. Start MongoDB and check MONGODB_URL.") from e
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Classes, rosters, attendance and assignments for admins, staff and students",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})


@app.exception_handler(IdentityError)
async def identity_handler(request: Request, exc: IdentityError):
    return JSONResponse(
        status_code=IDENTITY_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RemoteOperationError)
async def remote_error_handler(request: Request, exc: RemoteOperationError):
    logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"{exc.message}. Please try again."},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(students.router, prefix="/api/students", tags=["Students"])
app.include_router(staff.router, prefix="/api/staff", tags=["Staff"])
app.include_router(classes.router, prefix="/api/classes", tags=["Classes"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(assignments.router, prefix="/api/assignments", tags=["Assignments"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
