"""
Services package for the rotation reassignment engine.

- route_analysis: classify a selection against a rotation's legs
- movement_paste: atomic move, split and copy with undo
- rotation_queries: rotation, assignment and aircraft row queries
- swap_validation: graded warnings for a proposed swap
- clipboard: session-scoped cut/copy/paste/undo orchestration
"""

from .route_analysis import classify_route_selection, get_recommended_option, recommend_for
from .movement_paste import MovementPasteService
from .rotation_queries import RotationRepository
from .swap_validation import TatLookup, validate_swap, build_post_swap_row, has_blocking_errors
from .clipboard import (
    Notifier,
    LoggingNotifier,
    PasteOptions,
    ClipboardState,
    UndoState,
    MovementClipboard,
    KeyEvent,
    KeyCommandDispatcher,
)

__all__ = [
    'classify_route_selection',
    'get_recommended_option',
    'recommend_for',
    'MovementPasteService',
    'RotationRepository',
    'TatLookup',
    'validate_swap',
    'build_post_swap_row',
    'has_blocking_errors',
    'Notifier',
    'LoggingNotifier',
    'PasteOptions',
    'ClipboardState',
    'UndoState',
    'MovementClipboard',
    'KeyEvent',
    'KeyCommandDispatcher',
]
