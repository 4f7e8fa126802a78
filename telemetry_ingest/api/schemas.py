from pydantic import BaseModel


class IngestedResponse(BaseModel):
    status: str = "Event ingested"

class UnauthorizedResponse(BaseModel):
    error: str = "Unauthorized"

class ErrorMessageResponse(BaseModel):
    errorMessage: str
