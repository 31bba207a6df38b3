from typing import Any, Dict, List, Optional

from pydantic import Field

from src.registry.registry_models import CamelModel, Trial


class SearchFilters(CamelModel):
    cancer_type: str = Field("all", description="Cancer type, forwarded as the registry text query")
    location: str = Field("", description="City, state, country or ZIP fragment")
    phase: str = "all"
    age_range: str = Field("all", description="18-30, 31-50, 51-70 or 70+")
    search_text: str = ""
    status: str = "all"
    sponsor: str = "all"
    treatment_type: str = "all"
    trial_size: str = "all"
    page: int = Field(1, ge=1)
    limit: int = Field(100, ge=1)
    sort_by: str = "relevance"
    sort_order: str = "desc"


class SearchResponse(CamelModel):
    trials: List[Trial] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 100
    total_pages: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False
    filters: Dict[str, Any] = Field(default_factory=dict)
    sort_by: str = "relevance"


class Suggestion(CamelModel):
    type: str
    value: str
    display: str
    category: str
    trial_id: Optional[str] = None


class SuggestionsResponse(CamelModel):
    query: str = ""
    type: str = "all"
    suggestions: List[Suggestion] = Field(default_factory=list)
    total: int = 0
