"""Shared dependencies: JWT auth, role checks and service wiring."""
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from classroom.errors import IdentityError
from classroom.models.user import User, UserRole
from classroom.repositories import (
    AssignmentRepository,
    AttendanceRepository,
    ClassRepository,
    SubmissionRepository,
    UserRepository,
)
from classroom.services.aggregation import AttendanceAggregator
from classroom.services.assignments import AssignmentService
from classroom.services.classes import ClassService
from classroom.services.identity import IdentityService, decode_token
from classroom.services.people import DirectoryService
from classroom.services.roll_call import RollCallService
from classroom.services.roster import RosterService
from classroom.services.s3 import S3Storage

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user_id = decode_token(credentials.credentials, "access")
    except IdentityError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user = await UserRepository().get(user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def require_roles(*allowed: UserRole):
    allowed_values = [role.value for role in allowed]

    async def checker(user: Annotated[User, Depends(get_current_user)]):
        if user.role not in allowed_values:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def ensure_class_access(user: User, school_class) -> None:
    """Admins see every class; staff only those they are assigned to."""
    if user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.STAFF and user.staff_id in school_class.staff:
        return
    raise HTTPException(status_code=403, detail="You are not assigned to this class")


def ensure_student_access(user: User, enrollment_number: str, student_classes) -> None:
    """Students see themselves; staff only students of classes they teach."""
    if user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.STUDENT and user.enrollment_number == enrollment_number:
        return
    if user.role == UserRole.STAFF and any(user.staff_id in c.staff for c in student_classes):
        return
    raise HTTPException(status_code=403, detail="Not authorized for this student")


def get_identity_service() -> IdentityService:
    return IdentityService(UserRepository())


def get_directory_service() -> DirectoryService:
    return DirectoryService(UserRepository(), ClassRepository())


def get_class_service() -> ClassService:
    return ClassService(ClassRepository(), UserRepository())


def get_roster_service() -> RosterService:
    return RosterService(ClassRepository(), UserRepository())


def get_roll_call_service() -> RollCallService:
    return RollCallService(ClassRepository(), AttendanceRepository())


def get_aggregator() -> AttendanceAggregator:
    return AttendanceAggregator(ClassRepository(), AttendanceRepository(), UserRepository())


def get_assignment_service() -> AssignmentService:
    return AssignmentService(
        ClassRepository(), AssignmentRepository(), SubmissionRepository(), S3Storage()
    )


# Type aliases for route injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminOnly = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
StaffOrAdmin = Annotated[User, Depends(require_roles(UserRole.STAFF, UserRole.ADMIN))]
StudentOnly = Annotated[User, Depends(require_roles(UserRole.STUDENT))]

Identity = Annotated[IdentityService, Depends(get_identity_service)]
Directory = Annotated[DirectoryService, Depends(get_directory_service)]
Classes = Annotated[ClassService, Depends(get_class_service)]
Roster = Annotated[RosterService, Depends(get_roster_service)]
RollCall = Annotated[RollCallService, Depends(get_roll_call_service)]
Aggregator = Annotated[AttendanceAggregator, Depends(get_aggregator)]
Assignments = Annotated[AssignmentService, Depends(get_assignment_service)]
