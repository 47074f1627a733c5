from pydantic import BaseModel

"""
Pydantic models for request/response validation
"""


class HealthResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    backend: str = "local"


# Code generation models
class GenerateRequest(BaseModel):
    query: str
    language: str


class GenerateResponse(BaseModel):
    code: str


class GenerateErrorResponse(BaseModel):
    output: str
