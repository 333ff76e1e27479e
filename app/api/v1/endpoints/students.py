"""Student management endpoints."""

from fastapi import APIRouter, Query

from app.core.dependencies import Registry
from app.schemas.common import MessageResponse
from app.schemas.transcript import (
    PaginatedStudentResponse,
    Student,
    StudentCreate,
    StudentUpdate,
    Transcript,
)

router = APIRouter()


@router.post("", response_model=Student, status_code=201)
def create_student(request: StudentCreate, registry: Registry):
    """Create a new student together with an empty transcript."""
    return registry.create_student(request)


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    registry: Registry,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    search: str | None = None,
):
    """List students, optionally searching name, admission number and course."""
    return registry.list_students(search, page, page_size)


@router.get("/{student_id}", response_model=Student)
def get_student(student_id: str, registry: Registry):
    """Get a student by ID."""
    return registry.get_student(student_id)


@router.get("/{student_id}/transcript", response_model=Transcript)
def get_student_transcript(student_id: str, registry: Registry):
    """Get the transcript linked to a student."""
    return registry.get_student_transcript(student_id)


@router.patch("/{student_id}", response_model=Student)
def update_student(student_id: str, request: StudentUpdate, registry: Registry):
    """Update a student; the transcript's copy is kept in sync."""
    return registry.update_student(student_id, request)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(student_id: str, registry: Registry):
    """Delete a student and its transcript."""
    registry.delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")
