"""
Undo payload and operation result models.

Each payload variant carries exactly what its inverse needs. The ``type``
literal discriminates the union so a payload survives a round trip through
JSON (``OperationResultModel.model_validate``) with its variant intact.
"""

from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class RevertMovePayload(BaseModel):
    """Inverse of a full move: restore every flight's prior registration."""
    type: Literal["revert_move"] = "revert_move"
    flight_ids: List[str]
    original_regs: Dict[str, Optional[str]] = Field(..., description="flight id -> registration before the move")


class RevertSplitPayload(BaseModel):
    """Inverse of a split: fold the new rotation back into its source."""
    type: Literal["revert_split"] = "revert_split"
    new_rotation_id: str
    source_rotation_id: str
    moved_leg_flight_ids: List[str]
    original_regs: Dict[str, Optional[str]]


class DeleteCopiesPayload(BaseModel):
    """Inverse of a copy: delete the cloned rotation and flights."""
    type: Literal["delete_copies"] = "delete_copies"
    new_rotation_id: Optional[str] = None
    new_flight_ids: List[str]


UndoPayload = Annotated[
    Union[RevertMovePayload, RevertSplitPayload, DeleteCopiesPayload],
    Field(discriminator="type"),
]


class OperationResultModel(BaseModel):
    """
    Outcome of one engine operation.

    Exactly one of ``undo_payload`` and ``error`` is meaningful: mutating
    operations fill ``undo_payload`` on success, every failure fills
    ``error``. ``undo_paste`` succeeds with neither set.
    """
    undo_payload: Optional[UndoPayload] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
