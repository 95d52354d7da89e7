"""
Domain errors raised by the services layer.

Each error carries a stable ``code`` that clients branch on, and the HTTP
status the routers translate it to.
"""


class AssessmentError(Exception):
    code = "ASSESSMENT_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"error": self.message, "code": self.code}


class TestNotFound(AssessmentError):
    code = "TEST_NOT_FOUND"
    status_code = 404


class TestDisabled(AssessmentError):
    code = "TEST_DISABLED"
    status_code = 403


class ProtectedTest(AssessmentError):
    code = "PROTECTED_TEST"
    status_code = 403


class AssessmentNotFound(AssessmentError):
    code = "ASSESSMENT_NOT_FOUND"
    status_code = 404


class AssessmentExpired(AssessmentError):
    code = "ASSESSMENT_EXPIRED"
    status_code = 410


class AssessmentAbandoned(AssessmentError):
    code = "ASSESSMENT_ABANDONED"
    status_code = 410


class AssessmentCompleted(AssessmentError):
    code = "ASSESSMENT_COMPLETED"
    status_code = 409


class AssessmentNotCompleted(AssessmentError):
    code = "ASSESSMENT_NOT_COMPLETED"
    status_code = 409


class QuestionNotInTest(AssessmentError):
    code = "QUESTION_NOT_IN_TEST"
    status_code = 400


class InvalidOptions(AssessmentError):
    code = "INVALID_OPTIONS"
    status_code = 400

    def __init__(self, errors):
        super().__init__("; ".join(errors))
        self.errors = list(errors)

    def to_detail(self) -> dict:
        return dict(super().to_detail(), errors=self.errors)


class QuestionNotFound(AssessmentError):
    code = "QUESTION_NOT_FOUND"
    status_code = 404


class SlugTaken(AssessmentError):
    code = "SLUG_EXISTS"
    status_code = 409
