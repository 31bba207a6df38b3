from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(BaseModel):
    lat: float
    lng: float


class Trial(CamelModel):
    id: str = Field(..., description="NCT identifier")
    title: str = Field("No title available", description="Brief (or official) title")
    phase: str = Field("Not specified", description="Comma-joined study phases")
    condition: str = Field("Not specified", description="Comma-joined conditions")
    location: str = Field("Location not specified", description="First listed site")
    status: str = Field("Unknown", description="Overall recruitment status")
    participants: str = Field("Not specified", description="Enrollment count and type")
    description: str = Field("No description available", description="Brief summary")
    eligibility: str = Field("Eligibility criteria not specified", description="Raw eligibility text")
    sponsor: str = Field("Not specified", description="Lead sponsor name")
    treatment_type: str = Field("Not specified", description="Distinct intervention types")
    trial_size: str = Field("Unknown", description="Enrollment size bucket")
    zip_code: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    eligibility_criteria: List[str] = Field(default_factory=list, description="Eligibility text split into lines")
    start_date: str = "Not specified"
    completion_date: str = "Not specified"
    study_type: str = "Not specified"


class ContactInfo(BaseModel):
    phone: str = "1-800-CLINICAL"
    email: str = "trials@clinicalcenter.gov"
    website: str = "https://clinicaltrials.gov"


class TrialDetail(Trial):
    """Trial as returned by the detail endpoint: eligibility is a list of lines."""

    eligibility: List[str] = Field(default_factory=list)  # type: ignore[assignment]
    eligibility_count: int = 0
    last_updated: str
    contact_info: ContactInfo = Field(default_factory=ContactInfo)


class TrialDetailResponse(BaseModel):
    success: bool = True
    data: TrialDetail


class TrialStats(CamelModel):
    total_trials: int = 0
    active_trials: int = 0
    recruiting_trials: int = 0
    research_locations: int = 0


class TrialStatsResponse(CamelModel):
    success: bool = True
    statistics: TrialStats
    last_updated: str


class FilterOptions(CamelModel):
    cancer_types: List[str] = Field(default_factory=list)
    phases: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    statuses: List[str] = Field(default_factory=list)
    treatment_types: List[str] = Field(default_factory=list)


class FilterOptionsResponse(CamelModel):
    success: bool = True
    filters: FilterOptions
    last_updated: str
