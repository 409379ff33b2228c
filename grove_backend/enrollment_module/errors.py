class EnrollmentError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingAssessmentIdError(EnrollmentError):
    status_code = 400

    def __init__(self, message: str = "Assessment ID is required."):
        super().__init__(message)


class InvalidRequestError(EnrollmentError):
    status_code = 400


class AssessmentNotFoundError(EnrollmentError):
    status_code = 404

    def __init__(self, assessment_id: str):
        super().__init__(f"Assessment {assessment_id} not found")
        self.assessment_id = assessment_id


class StoreError(EnrollmentError):
    status_code = 502


class PersistError(StoreError):
    pass
