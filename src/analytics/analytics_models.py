from typing import Dict, List

from pydantic import Field

from src.registry.registry_models import CamelModel, Coordinates, Trial


class CancerTypeStat(CamelModel):
    count: int = 0
    phases: Dict[str, int] = Field(default_factory=dict)
    statuses: Dict[str, int] = Field(default_factory=dict)
    treatment_types: Dict[str, int] = Field(default_factory=dict)
    locations: List[str] = Field(default_factory=list, description="Distinct first-site cities")
    total_participants: int = 0


class CancerTypeStatsResponse(CamelModel):
    success: bool = True
    total_cancer_types: int = 0
    cancer_type_stats: Dict[str, CancerTypeStat] = Field(default_factory=dict)
    last_updated: str


class NearbyTrial(Trial):
    distance: float = Field(..., description="Geodesic miles from the user")


class NearbyTrialsResponse(CamelModel):
    success: bool = True
    user_location: Coordinates
    radius: int
    total_nearby: int = 0
    trials: List[NearbyTrial] = Field(default_factory=list)
    distance_groups: Dict[str, List[NearbyTrial]] = Field(default_factory=dict)
    last_updated: str
