"""
Rotation reassignment Pydantic models package.

This package contains the Pydantic v2 models used throughout the engine
for data validation, serialization, and type safety.
"""

# Enums
from .enums import (
    FlightSource,
    FlightStatus,
    RouteClassification,
    ClipboardMode,
    ClipboardPhase,
    SwapSide,
    SwapSeverity,
    SwapWarningType,
)

# Flight models
from .flight import (
    ScheduledFlightModel,
    ClipboardFlightModel,
    SwapFlightModel,
    FlightDateItemModel,
    TailAssignmentModel,
)

# Rotation models
from .rotation import (
    RotationLegModel,
    RotationModel,
)

# Selection analysis
from .analysis import (
    RouteAnalysisModel,
    RecommendedOptionModel,
)

# Undo payloads
from .undo import (
    RevertMovePayload,
    RevertSplitPayload,
    DeleteCopiesPayload,
    UndoPayload,
    OperationResultModel,
)

from .swap import SwapWarningModel

__all__ = [
    # Enums
    "FlightSource",
    "FlightStatus",
    "RouteClassification",
    "ClipboardMode",
    "ClipboardPhase",
    "SwapSide",
    "SwapSeverity",
    "SwapWarningType",

    # Flight models
    "ScheduledFlightModel",
    "ClipboardFlightModel",
    "SwapFlightModel",
    "FlightDateItemModel",
    "TailAssignmentModel",

    # Rotation models
    "RotationLegModel",
    "RotationModel",

    # Analysis models
    "RouteAnalysisModel",
    "RecommendedOptionModel",

    # Undo models
    "RevertMovePayload",
    "RevertSplitPayload",
    "DeleteCopiesPayload",
    "UndoPayload",
    "OperationResultModel",

    "SwapWarningModel",
]
