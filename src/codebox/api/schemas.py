"""HTTP schemas for the execution endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class ExecuteRequest(BaseModel):
    """Submission body; presence of code/language is checked by the handler"""
    code: str | None = None
    language: str | None = None
    input: str | None = None


class ExecuteResponse(BaseModel):
    """Uniform execution response"""
    model_config = ConfigDict(populate_by_name=True)

    output: str
    error: str | None = None
    execution_time: int = Field(default=0, alias="executionTime")


class ToolchainResponse(BaseModel):
    language: str
    label: str
    extension: str
    commands: list[str]
    missing: list[str]
    available: bool


class HealthResponse(BaseModel):
    ok: bool = True
