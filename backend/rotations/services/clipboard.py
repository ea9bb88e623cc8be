"""
Clipboard orchestration for cut, copy, paste and undo on the schedule timeline.

A ``MovementClipboard`` is one planner session's clipboard. It owns the
clipboard contents, the armed undo payload and the just-pasted highlight,
and drives the transaction engine:

- cut/copy populate the clipboard and pre-classify every touched rotation
- bind_target attaches the registration to paste onto
- execute_paste runs move, split or copy and arms undo for a short window
- execute_undo reverses the last paste while the window is open
- escape drops an unpasted clipboard

Store calls run in a worker thread so the event loop stays responsive.
Timers are evaluated lazily against an injectable clock and vanish with
the object; nothing here is persisted.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from ..models.analysis import RouteAnalysisModel
from ..models.enums import ClipboardMode, ClipboardPhase
from ..models.flight import ClipboardFlightModel
from ..models.undo import OperationResultModel, UndoPayload
from ..utils.config import ReassignmentConfig
from ..utils.errors import friendly_error
from .movement_paste import MovementPasteService
from .route_analysis import classify_route_selection
from .rotation_queries import RotationRepository

logger = logging.getLogger(__name__)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


class Notifier:
    """Port through which the clipboard reports outcomes to the planner."""

    def success(self, message: str) -> None:
        raise NotImplementedError

    def error(self, message: str) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Notifier that writes to the log; the default when no UI is attached."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)


@dataclass
class PasteOptions:
    """Caller overrides for a paste."""
    moved_leg_sequences: Optional[List[int]] = None  # explicit legs: the cut is a split
    source_route_id: Optional[str] = None
    expected_version: Optional[int] = None


@dataclass
class ClipboardState:
    """Contents of a populated clipboard."""
    flights: List[ClipboardFlightModel]
    flight_ids: List[str]  # deduplicated underlying flight ids
    mode: ClipboardMode
    source_routes: Dict[str, RouteAnalysisModel] = field(default_factory=dict)
    target_reg: Optional[str] = None

    def single_source_route_id(self) -> Optional[str]:
        """The rotation id when every selected flight comes from exactly one rotation."""
        if len(self.source_routes) == 1:
            return next(iter(self.source_routes))
        return None


@dataclass
class UndoState:
    """An armed undo payload and its window."""
    description: str
    payload: UndoPayload
    armed_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def remaining_seconds(self, now: datetime) -> float:
        return max(0.0, (self.expires_at - now).total_seconds())


class MovementClipboard:
    """
    Session-scoped cut/copy/paste state machine.

    States: idle, cut-pending / copy-pending (clipboard populated),
    target-bound (registration attached) and pasting (transaction in
    flight). Undo is armed in parallel for ``undo_window_seconds`` after
    each successful paste.
    """

    def __init__(
        self,
        paste_service: MovementPasteService,
        repository: RotationRepository,
        notifier: Optional[Notifier] = None,
        clear_selection: Optional[Callable[[], None]] = None,
        refresh: Optional[Callable[[], Any]] = None,
        clock: Callable[[], datetime] = datetime.now,
        undo_window_seconds: float = 10.0,
        highlight_seconds: float = 1.5
    ):
        """
        Initialize a clipboard session.

        Args:
            paste_service: Transaction engine
            repository: Source of rotations for pre-classification
            notifier: Where success and error messages go
            clear_selection: Clears the timeline selection after a paste
            refresh: Reloads the timeline after a paste or undo (sync or async)
            clock: Current time, for the undo and highlight windows
            undo_window_seconds: How long a paste stays undoable
            highlight_seconds: How long pasted flights stay highlighted
        """
        self.paste_service = paste_service
        self.repository = repository
        self.notifier = notifier or LoggingNotifier()
        self.clear_selection = clear_selection
        self.refresh = refresh
        self.clock = clock
        self.undo_window = timedelta(seconds=undo_window_seconds)
        self.highlight_window = timedelta(seconds=highlight_seconds)

        self.pasting = False
        self._clipboard: Optional[ClipboardState] = None
        self._undo: Optional[UndoState] = None
        self._just_pasted_ids: Set[str] = set()
        self._just_pasted_until: Optional[datetime] = None

    @classmethod
    def from_config(
        cls,
        config: ReassignmentConfig,
        paste_service: MovementPasteService,
        repository: RotationRepository,
        **kwargs
    ) -> 'MovementClipboard':
        """Build a clipboard whose windows come from configuration."""
        return cls(
            paste_service,
            repository,
            undo_window_seconds=config.undo_window_seconds,
            highlight_seconds=config.just_pasted_highlight_seconds,
            **kwargs
        )

    # ─── State exposed to the UI ────────────────────────────────

    @property
    def clipboard(self) -> Optional[ClipboardState]:
        return self._clipboard

    @property
    def undo(self) -> Optional[UndoState]:
        """The armed undo, or None once consumed or expired."""
        if self._undo is not None and self._undo.is_expired(self.clock()):
            logger.debug("Undo window expired")
            self._undo = None
        return self._undo

    @property
    def undo_armed(self) -> bool:
        return self.undo is not None

    @property
    def just_pasted_ids(self) -> Set[str]:
        if self._just_pasted_until is not None and self.clock() >= self._just_pasted_until:
            self._just_pasted_ids = set()
            self._just_pasted_until = None
        return set(self._just_pasted_ids)

    @property
    def phase(self) -> ClipboardPhase:
        if self.pasting:
            return ClipboardPhase.PASTING
        if self._clipboard is None:
            return ClipboardPhase.IDLE
        if self._clipboard.target_reg:
            return ClipboardPhase.TARGET_BOUND
        if self._clipboard.mode == ClipboardMode.CUT:
            return ClipboardPhase.CUT_PENDING
        return ClipboardPhase.COPY_PENDING

    def is_ghosted(self, entry_id: str, flight_id: Optional[str] = None) -> bool:
        """
        Whether a timeline entry should be dimmed as pending a move.

        True only while the entry's underlying flight sits in a cut-mode
        clipboard. ``flight_id`` identifies the underlying flight; without
        it the entry is looked up among the clipped entries.
        """
        clip = self._clipboard
        if clip is None or clip.mode != ClipboardMode.CUT:
            return False
        if flight_id is None:
            flight_id = next((f.flight_id for f in clip.flights if f.id == entry_id), None)
        return flight_id is not None and flight_id in clip.flight_ids

    # ─── Cut / Copy ─────────────────────────────────────────────

    async def cut(self, selection: List[ClipboardFlightModel]) -> Optional[ClipboardState]:
        return await self._init_clipboard(ClipboardMode.CUT, selection)

    async def copy(self, selection: List[ClipboardFlightModel]) -> Optional[ClipboardState]:
        return await self._init_clipboard(ClipboardMode.COPY, selection)

    async def _init_clipboard(
        self,
        mode: ClipboardMode,
        selection: List[ClipboardFlightModel]
    ) -> Optional[ClipboardState]:
        if not selection:
            return None

        flights = list(selection)
        # One scheduled flight can appear on many dates
        flight_ids = list(dict.fromkeys(f.flight_id for f in flights))

        source_routes: Dict[str, RouteAnalysisModel] = {}
        try:
            rotations = await asyncio.to_thread(self.repository.get_rotations_for_flights, flight_ids)
        except SQLAlchemyError as e:
            # Flights may simply not be in any rotation; the clipboard still works
            logger.warning(f"Could not load rotations for clipboard: {e}")
        else:
            selected = set(flight_ids)
            for rotation in rotations:
                source_routes[rotation.id] = classify_route_selection(rotation, selected)

        self._clipboard = ClipboardState(
            flights=flights,
            flight_ids=flight_ids,
            mode=mode,
            source_routes=source_routes,
        )

        verb = "cut" if mode == ClipboardMode.CUT else "copied"
        self.notifier.success(f"{_plural(len(flight_ids), 'flight')} {verb}")
        return self._clipboard

    # ─── Target / Clear ─────────────────────────────────────────

    def bind_target(self, registration: str) -> bool:
        """Attach the registration to paste onto. Does not mutate anything."""
        if self._clipboard is None:
            return False
        self._clipboard.target_reg = registration
        return True

    def clear_clipboard(self) -> None:
        self._clipboard = None

    def handle_escape(self) -> bool:
        """Drop an unpasted clipboard. Returns False when there was nothing to drop."""
        if self._clipboard is None:
            return False
        self.clear_clipboard()
        logger.debug("Clipboard cleared")
        return True

    # ─── Paste ──────────────────────────────────────────────────

    async def execute_paste(self, options: Optional[PasteOptions] = None) -> Optional[OperationResultModel]:
        """
        Paste the clipboard onto its bound registration.

        Copy mode copies the flights, cloning their rotation when they all
        come from one. Cut mode splits when ``options`` name the legs to
        move and otherwise moves the flights outright.

        Returns:
            The engine result, or None when there was nothing to paste or
            a paste was already in flight
        """
        clip = self._clipboard
        if clip is None or not clip.target_reg:
            logger.debug("Paste ignored: no clipboard or no target")
            return None
        if self.pasting:
            logger.warning("Paste ignored: another paste is still in flight")
            return None

        self.pasting = True
        try:
            target_reg = clip.target_reg
            count = len(clip.flight_ids)

            if clip.mode == ClipboardMode.COPY:
                result = await asyncio.to_thread(
                    self.paste_service.copy_flights,
                    clip.flight_ids, target_reg, clip.single_source_route_id()
                )
                description = f"Copied {_plural(count, 'flight')} to {target_reg}"
                highlighted = result.undo_payload.new_flight_ids if result.ok else []

            elif options and options.moved_leg_sequences and (options.source_route_id or clip.single_source_route_id()):
                route_id = options.source_route_id or clip.single_source_route_id()
                expected_version = options.expected_version
                if expected_version is None and route_id in clip.source_routes:
                    # Sequences refer to the rotation as classified at cut time
                    expected_version = clip.source_routes[route_id].rotation.version
                result = await asyncio.to_thread(
                    self.paste_service.split_and_move_route,
                    route_id, options.moved_leg_sequences, target_reg, expected_version
                )
                description = f"Split & moved {_plural(len(options.moved_leg_sequences), 'leg')} to {target_reg}"
                highlighted = clip.flight_ids

            else:
                result = await asyncio.to_thread(
                    self.paste_service.move_full_route, clip.flight_ids, target_reg
                )
                description = f"Moved {_plural(count, 'flight')} to {target_reg}"
                highlighted = clip.flight_ids

            if not result.ok:
                # Clipboard stays so the planner can retry
                self.notifier.error(friendly_error(result.error))
                return result

            self._mark_just_pasted(highlighted)
            self._arm_undo(description, result.undo_payload)
            self.notifier.success(description)

            self._clipboard = None
            if self.clear_selection is not None:
                self.clear_selection()
            await self._refresh()
            return result

        finally:
            self.pasting = False

    def _mark_just_pasted(self, flight_ids: List[str]) -> None:
        self._just_pasted_ids = set(flight_ids)
        self._just_pasted_until = self.clock() + self.highlight_window

    def _arm_undo(self, description: str, payload: UndoPayload) -> None:
        now = self.clock()
        self._undo = UndoState(
            description=description,
            payload=payload,
            armed_at=now,
            expires_at=now + self.undo_window,
        )

    # ─── Undo ───────────────────────────────────────────────────

    async def execute_undo(self) -> Optional[OperationResultModel]:
        """
        Reverse the last paste while its undo window is open.

        The payload is taken off the session before the store call so it
        cannot be applied twice. A failed undo re-arms it for whatever is
        left of its window.

        Returns:
            The engine result, or None when nothing was armed
        """
        undo = self.undo
        if undo is None or self.pasting:
            logger.debug("Undo ignored: nothing armed")
            return None

        self._undo = None
        result = await asyncio.to_thread(self.paste_service.undo_paste, undo.payload)

        if not result.ok:
            self.notifier.error(friendly_error(result.error))
            if not undo.is_expired(self.clock()) and self._undo is None:
                self._undo = undo
            return result

        self.notifier.success("Paste undone")
        await self._refresh()
        return result

    async def _refresh(self) -> None:
        if self.refresh is None:
            return
        outcome = self.refresh()
        if inspect.isawaitable(outcome):
            await outcome


@dataclass
class KeyEvent:
    """A key press as delivered by the UI."""
    key: str
    ctrl: bool = False
    meta: bool = False
    target_tag: Optional[str] = None  # tag name of the focused element


class KeyCommandDispatcher:
    """
    Maps keyboard shortcuts to clipboard commands.

    Ctrl/Cmd+X cut, Ctrl/Cmd+C copy, Ctrl/Cmd+V paste, Ctrl/Cmd+Z undo,
    Escape clears the clipboard. Nothing is dispatched while focus is in
    an editable element or ``is_input_intercepted()`` is true (a dialog
    owns the keyboard).
    """

    EDITABLE_TAGS = frozenset({"INPUT", "SELECT", "TEXTAREA"})

    def __init__(
        self,
        clipboard: MovementClipboard,
        get_selection: Callable[[], List[ClipboardFlightModel]],
        is_input_intercepted: Callable[[], bool] = lambda: False,
        on_request_target: Optional[Callable[[], None]] = None,
        on_request_paste: Optional[Callable[[ClipboardState], None]] = None
    ):
        """
        Args:
            clipboard: Session clipboard to drive
            get_selection: Current timeline selection
            is_input_intercepted: True while another component owns the keyboard
            on_request_target: Asks the planner for a target registration
            on_request_paste: Asks the planner to confirm a paste; when None
                the paste runs straight away
        """
        self.clipboard = clipboard
        self.get_selection = get_selection
        self.is_input_intercepted = is_input_intercepted
        self.on_request_target = on_request_target
        self.on_request_paste = on_request_paste

    async def dispatch(self, event: KeyEvent) -> bool:
        """
        Handle one key press.

        Returns:
            True when the key was consumed, False to let other consumers see it
        """
        if event.target_tag and event.target_tag.upper() in self.EDITABLE_TAGS:
            return False
        if self.is_input_intercepted():
            return False

        if event.key == "Escape":
            return self.clipboard.handle_escape()

        if not (event.ctrl or event.meta):
            return False

        key = event.key.lower()

        if key in ("x", "c"):
            selection = self.get_selection()
            if not selection:
                return False
            if key == "x":
                await self.clipboard.cut(selection)
            else:
                await self.clipboard.copy(selection)
            return True

        if key == "v":
            clip = self.clipboard.clipboard
            if clip is None:
                return False
            if not clip.target_reg:
                if self.on_request_target is not None:
                    self.on_request_target()
            elif self.on_request_paste is not None:
                self.on_request_paste(clip)
            else:
                await self.clipboard.execute_paste()
            return True

        if key == "z":
            if not self.clipboard.undo_armed:
                return False
            await self.clipboard.execute_undo()
            return True

        return False
