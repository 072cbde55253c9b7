from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CompileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    latex: Optional[str] = Field(None, description="Complete LaTeX document source")
    auto_fix: bool = Field(True, alias="autoFix", description="Retry with LLM-repaired source on failure")


class CompileErrorResponse(BaseModel):
    error: str
    details: str
    jobId: str
    attempts: Optional[int] = None
    logExcerpt: Optional[str] = None
    suggestion: Optional[str] = None


class RejectionResponse(BaseModel):
    error: str
    details: Optional[str] = None


class ServiceInfo(BaseModel):
    message: str
    status: str
    version: str
    endpoints: Dict[str, str]
