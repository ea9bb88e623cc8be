"""
Route selection analysis models.
"""

from typing import List
from pydantic import BaseModel, Field

from .enums import RouteClassification
from .rotation import RotationModel


class RouteAnalysisModel(BaseModel):
    """Classification of a selection against one rotation."""
    route_id: str
    rotation: RotationModel
    classification: RouteClassification
    selected_leg_sequences: List[int] = Field(default_factory=list, description="Touched sequences, ascending")
    all_leg_sequences: List[int] = Field(default_factory=list)
    is_full_route: bool = False


class RecommendedOptionModel(BaseModel):
    """Suggested set of legs to move for a partial selection."""
    label: str
    description: str
    moved_sequences: List[int] = Field(..., description="Leg sequences that would actually move")
