import uuid

from fastapi import HTTPException

from cleverbadge.core.errors import AssessmentError


def parse_uuid(value: str, label: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")


def http_error(exc: AssessmentError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())
