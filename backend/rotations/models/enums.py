"""
Enums for the rotation reassignment engine.

This module contains all enumeration types used throughout the engine
for consistent data validation and type safety.
"""

from enum import Enum


class FlightSource(str, Enum):
    """Provenance of a scheduled flight record."""
    MANUAL = "manual"
    BUILDER = "builder"    # Created by the rotation builder (copies included)
    IMPORT = "import"


class FlightStatus(str, Enum):
    """Lifecycle status shared by flights and rotations."""
    DRAFT = "draft"
    READY = "ready"
    PUBLISHED = "published"


class RouteClassification(str, Enum):
    """Shape of a selection relative to its rotation's legs."""
    FULL_ROUTE = "FULL_ROUTE"
    TAIL_SPLIT = "TAIL_SPLIT"
    HEAD_SPLIT = "HEAD_SPLIT"
    MIDDLE_EXTRACT = "MIDDLE_EXTRACT"
    SCATTERED = "SCATTERED"
    NO_ROUTE = "NO_ROUTE"


class ClipboardMode(str, Enum):
    """Clipboard mode."""
    CUT = "cut"
    COPY = "copy"


class ClipboardPhase(str, Enum):
    """Orchestration state of a clipboard session."""
    IDLE = "idle"
    CUT_PENDING = "cut-pending"
    COPY_PENDING = "copy-pending"
    TARGET_BOUND = "target-bound"
    PASTING = "pasting"


class SwapSide(str, Enum):
    """Side of a hypothetical swap a warning belongs to."""
    A = "A"
    B = "B"


class SwapSeverity(str, Enum):
    """Severity of a swap validation entry."""
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class SwapWarningType(str, Enum):
    """Kind of swap validation finding."""
    CHAIN_BREAK = "chain-break"
    TIME_OVERLAP = "time-overlap"
    TAT_INSUFFICIENT = "tat-insufficient"
    AC_TYPE_MISMATCH = "ac-type-mismatch"
    CLEAN = "clean"
