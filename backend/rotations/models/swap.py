"""
Swap validation result model.
"""

from pydantic import BaseModel, Field

from .enums import SwapSeverity, SwapSide, SwapWarningType


class SwapWarningModel(BaseModel):
    """One graded finding about a hypothetical swap."""
    side: SwapSide
    reg: str = Field(..., description="Registration whose row the finding is on")
    type: SwapWarningType
    severity: SwapSeverity
    message: str
