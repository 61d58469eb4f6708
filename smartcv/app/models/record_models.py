#smartcv/app/models/record_models.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List, Union
from enum import Enum

from smartcv.app.models.platform_models import Identity


class AnalysisRecord(BaseModel):
    """Resume submission plus the AI feedback, stored under `record:<id>`.
    JSON keys are camelCase so records from the browser client read back unchanged."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    resume_path: str = Field(..., alias="resumePath")
    image_path: str = Field(..., alias="imagePath")
    company_name: str = Field(default="", alias="companyName")
    job_title: str = Field(default="", alias="jobTitle")
    job_description: str = Field(default="", alias="jobDescription")
    # "" until inference completes, then the parsed feedback object
    feedback: Union[str, Dict[str, Any]] = ""

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "AnalysisRecord":
        return cls.model_validate_json(raw)


class AnalysisStage(str, Enum):
    UPLOAD_DOCUMENT = "UPLOAD_DOCUMENT"
    CONVERT = "CONVERT"
    UPLOAD_IMAGE = "UPLOAD_IMAGE"
    SAVE_DRAFT = "SAVE_DRAFT"
    INFERENCE = "INFERENCE"
    PARSE = "PARSE"
    SAVE_FINAL = "SAVE_FINAL"


# ---------- API payloads ----------

class HealthResponse(BaseModel):
    status: str = "ok"
    capabilities_ready: bool


class SessionResponse(BaseModel):
    status: str
    is_loading: bool
    capabilities_ready: bool
    error: Optional[str] = None
    identity: Optional[Identity] = None


class AnalysisFailureResponse(BaseModel):
    stage: AnalysisStage
    status: str


class RecordListResponse(BaseModel):
    records: List[AnalysisRecord]
