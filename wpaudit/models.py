# wpaudit/models.py
from datetime import datetime
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .references import SecurityReference, SeverityScore

HeaderStatus = Literal["secure", "warning", "vulnerable"]
EndpointStatus = Literal["accessible", "blocked"]
EnumerationStatus = Literal["found", "protected", "not-found"]
DetectionStatus = Literal["detected", "not_detected", "blocked"]
Risk = Literal["critical", "high", "medium", "low", "info"]


class AuditRequest(BaseModel):
    url: str


class AuditProgress(BaseModel):
    step: str
    current: int
    total: int
    percentage: int


class AuditStatus(BaseModel):
    audit_id: str
    status: str
    progress: Optional[AuditProgress] = None
    error: Optional[str] = None


class HeaderFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: Optional[str] = None
    status: HeaderStatus
    description: str
    reference: Optional[SecurityReference] = None


class EndpointFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    url: str
    status: EndpointStatus
    status_code: int = 0
    risk: Risk
    description: str
    reference: Optional[SecurityReference] = None


class WordPressUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str


class UserEnumeration(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: EnumerationStatus = "not-found"
    users: Tuple[WordPressUser, ...] = ()
    method: str = ""
    description: str = ""
    reference: Optional[SecurityReference] = None

    @computed_field
    @property
    def found(self) -> bool:
        return self.status == "found"


class WordPressDetection(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: DetectionStatus
    subdirectory: Optional[str] = None
    detail: str = ""
    strong_matches: Tuple[str, ...] = ()
    weak_matches: Tuple[str, ...] = ()


class SiteMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: Optional[str] = None
    theme: Optional[str] = None
    generator: bool = False
    readme: bool = False
    waf: Optional[str] = None
    tls: bool = False


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: Literal["critical", "warning", "info"]
    title: str
    description: str


class AuditResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    timestamp: datetime
    wordpress: WordPressDetection
    security_headers: Tuple[HeaderFinding, ...] = ()
    endpoints: Tuple[EndpointFinding, ...] = ()
    user_enumeration: UserEnumeration = Field(default_factory=UserEnumeration)
    metadata: SiteMetadata = Field(default_factory=SiteMetadata)
    overall_score: int
    severity: SeverityScore
    recommendations: Tuple[Recommendation, ...] = ()

    @computed_field
    @property
    def is_wordpress(self) -> bool:
        return self.wordpress.status == "detected"


class HistoryEntry(BaseModel):
    url: str
    timestamp: str
    score: int
    is_wordpress: bool
