"""Shelf placement state machine.

One controller drives one shelf. Mouse and touch go through the same
transitions; which gestures are available is a matter of PlacementSettings:

    IDLE --press(handle)--> PRESSED --> CROSS_TRANSFER_DRAGGING --release--> IDLE
    IDLE --press(body)----> PRESSED --> VERTICAL_DRAGGING ---------release--> IDLE
    IDLE --drag_over------> PRODUCT_DROP_ARMED ---------------------drop----> IDLE

Moves only touch local state (shelf position, FeedbackState). The repository
is called at most once per gesture, on release or drop. A failed commit puts
the local state back to the last value the repository confirmed.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional
import copy

from ..layout.capacity_packer import CapacityCandidate, CapacityPacker
from ..layout.hole_grid import HoleGrid
from ..models.fixture import Fixture, Section
from ..models.product import Status
from ..models.segment import Layer, Segment
from ..models.shelf import Shelf
from ..persistence.repository import LayoutRepository
from ..utils.constants import (
    DRAG_LEAVE_DELAY_SECONDS, NEW_SEGMENT_QUANTITY, NEW_SEGMENT_SPACING,
    POSITION_NOISE_THRESHOLD, PRIMARY_BUTTON, SHELF_DIRECTIONS, SNAP_DELAY_SECONDS,
)
from ..utils.error_handler import (
    CapacityExceeded, ConfigurationError, InvalidGeometry, MalformedPayload,
    PersistenceFailure, PlanogramError, TargetUnavailable,
)
from ..utils.logger import get_logger
from .notifier import Notifier
from .payloads import LayerPayload, ProductPayload, parse_payload
from .scheduler import PollingScheduler
from .selection import SelectionContext


class GestureState(Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    VERTICAL_DRAGGING = "vertical_dragging"
    CROSS_TRANSFER_DRAGGING = "cross_transfer_dragging"
    PRODUCT_DROP_ARMED = "product_drop_armed"


class PressOrigin(Enum):
    HANDLE = "handle"
    BODY = "body"
    SEGMENT = "segment"


class InputDevice(Enum):
    MOUSE = "mouse"
    TOUCH = "touch"


class IntentKind(Enum):
    MOVE_SHELF = "move_shelf"
    SNAP_SHELF = "snap_shelf"
    TRANSFER_SHELF = "transfer_shelf"
    CREATE_SEGMENT = "create_segment"
    TRANSFER_SEGMENT = "transfer_segment"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer or touch sample in display coordinates"""
    x: float
    y: float
    device: InputDevice = InputDevice.MOUSE
    origin: PressOrigin = PressOrigin.BODY
    button: int = PRIMARY_BUTTON
    layer_id: Optional[str] = None  # set when the press lands on a segment


@dataclass
class FeedbackState:
    """Transient visual state for a UI adapter to render"""
    dragging: bool = False
    handle_dragging: bool = False
    highlighted_section_id: Optional[str] = None
    offset_x: float = 0.0
    drop_target: bool = False

    def clear(self):
        self.dragging = False
        self.handle_dragging = False
        self.highlighted_section_id = None
        self.offset_x = 0.0
        self.drop_target = False


@dataclass(frozen=True)
class CommitIntent:
    kind: IntentKind
    shelf_id: str
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GestureOutcome:
    committed: bool = False
    intent: Optional[CommitIntent] = None
    error: Optional[PlanogramError] = None


@dataclass
class PlacementSettings:
    shelf_direction: str = 'top'
    handle_transfer: bool = True   # dragging the handle moves the shelf to another section
    body_reposition: bool = True   # dragging the body moves the shelf vertically
    noise_threshold: float = POSITION_NOISE_THRESHOLD
    snap_delay: float = SNAP_DELAY_SECONDS
    drag_leave_delay: float = DRAG_LEAVE_DELAY_SECONDS

    def __post_init__(self):
        if self.shelf_direction not in SHELF_DIRECTIONS:
            raise ConfigurationError(
                f"shelf_direction must be one of {SHELF_DIRECTIONS}, got {self.shelf_direction!r}"
            )


@dataclass
class _Gesture:
    device: InputDevice
    origin_x: float
    origin_y: float
    original_position: float
    target_section_id: Optional[str] = None


class PlacementController:
    """Turn press/move/release and drag/drop sequences into layout commits"""

    def __init__(self, fixture: Fixture, shelf_id: str, repository: LayoutRepository,
                 section_at: Optional[Callable[[float, float], Optional[str]]] = None,
                 scheduler=None,
                 settings: Optional[PlacementSettings] = None,
                 notifier: Optional[Notifier] = None,
                 selection: Optional[SelectionContext] = None,
                 modal_open: Optional[Callable[[], bool]] = None,
                 packer: Optional[CapacityPacker] = None):
        if fixture.scale_factor <= 0:
            raise InvalidGeometry(f"Scale factor must be positive, got {fixture.scale_factor}")
        _, shelf = fixture.locate_shelf(shelf_id)
        if shelf is None:
            raise ConfigurationError(f"Shelf {shelf_id} is not part of fixture {fixture.name}")

        self.fixture = fixture
        self.shelf: Shelf = shelf
        self.repository = repository
        self.section_at = section_at
        self.scheduler = scheduler if scheduler is not None else PollingScheduler()
        self.settings = settings or PlacementSettings()
        self.notifier = notifier or Notifier()
        self.selection = selection or SelectionContext()
        self.modal_open = modal_open or (lambda: False)
        self.packer = packer or CapacityPacker()
        self.logger = get_logger()

        self.state = GestureState.IDLE
        self.feedback = FeedbackState()
        self.last_committed_position = shelf.position
        self._gesture: Optional[_Gesture] = None
        self._pending_snap = None
        self._pending_leave = None
        self._generation = 0

    @property
    def section(self) -> Section:
        return self.fixture.find_section(self.shelf.section_id)

    @property
    def is_idle(self) -> bool:
        return self.state is GestureState.IDLE

    @property
    def snap_pending(self) -> bool:
        return self._pending_snap is not None

    # Pointer gestures

    def press(self, event: PointerEvent) -> bool:
        """Start a shelf gesture; returns False when the press is ignored"""
        if not self.is_idle:
            self.logger.debug(f"Shelf {self.shelf.id}: press ignored while {self.state.value}")
            return False

        if event.origin is PressOrigin.SEGMENT:
            if event.layer_id is not None:
                self.selection.select(event.layer_id)
            return False

        if event.origin is PressOrigin.HANDLE:
            if not self.settings.handle_transfer:
                return False
            mode = GestureState.CROSS_TRANSFER_DRAGGING
        else:
            if not self.settings.body_reposition or self.modal_open():
                return False
            if event.device is InputDevice.MOUSE and event.button != PRIMARY_BUTTON:
                return False
            mode = GestureState.VERTICAL_DRAGGING

        self._generation += 1
        self._cancel_pending_snap()
        self._transition(GestureState.PRESSED)
        self._gesture = _Gesture(
            device=event.device,
            origin_x=event.x,
            origin_y=event.y,
            original_position=self.shelf.position,
        )
        self.feedback.dragging = True
        self.feedback.handle_dragging = mode is GestureState.CROSS_TRANSFER_DRAGGING
        self._transition(mode)
        return True

    def move(self, event: PointerEvent):
        gesture = self._gesture
        if gesture is None or event.device is not gesture.device:
            return

        if self.state is GestureState.VERTICAL_DRAGGING:
            delta = (event.y - gesture.origin_y) / self.fixture.scale_factor
            # The only place the growth direction is resolved
            if self.settings.shelf_direction == 'top':
                position = gesture.original_position + delta
            else:
                position = gesture.original_position - delta
            self.shelf.position = self._clamp(position)

        elif self.state is GestureState.CROSS_TRANSFER_DRAGGING:
            self.feedback.offset_x = event.x - gesture.origin_x
            self.feedback.highlighted_section_id = None
            gesture.target_section_id = self._transfer_target(event.x, event.y)
            self.feedback.highlighted_section_id = gesture.target_section_id

    def release(self, event: Optional[PointerEvent] = None) -> GestureOutcome:
        gesture = self._gesture
        if gesture is None:
            return GestureOutcome()
        if event is not None and event.device is not gesture.device:
            return GestureOutcome()

        state = self.state
        try:
            if state is GestureState.VERTICAL_DRAGGING:
                return self._finish_vertical()
            if state is GestureState.CROSS_TRANSFER_DRAGGING:
                return self._finish_transfer(gesture.target_section_id)
            return GestureOutcome()
        finally:
            self._reset()

    def cancel(self):
        """Abort whatever is in progress without committing anything"""
        self._generation += 1
        self._cancel_pending_snap()
        self._cancel_pending_leave()
        if self._gesture is not None and self.state is GestureState.VERTICAL_DRAGGING:
            self.shelf.position = self._gesture.original_position
        if not self.is_idle:
            self.logger.debug(f"Shelf {self.shelf.id}: gesture cancelled")
        self._reset()

    # Native drag and drop

    def drag_over(self) -> bool:
        if self.state is GestureState.PRODUCT_DROP_ARMED:
            self._generation += 1
            self._cancel_pending_leave()
            return True
        if not self.is_idle:
            return False
        self._generation += 1
        self._cancel_pending_snap()
        self.feedback.drop_target = True
        self._transition(GestureState.PRODUCT_DROP_ARMED)
        return True

    def drag_leave(self):
        if self.state is not GestureState.PRODUCT_DROP_ARMED:
            return
        self._cancel_pending_leave()
        self._pending_leave = self.scheduler.call_later(self.settings.drag_leave_delay,
                                                   self._guarded(self._disarm_drop))

    def drop(self, raw_payload) -> GestureOutcome:
        if self.state not in (GestureState.IDLE, GestureState.PRODUCT_DROP_ARMED):
            return GestureOutcome()
        self._generation += 1
        self._cancel_pending_leave()
        self._cancel_pending_snap()

        try:
            try:
                payload = parse_payload(raw_payload)
            except MalformedPayload as e:
                self.logger.error(f"Shelf {self.shelf.id}: ignoring malformed drop payload: {e}")
                return GestureOutcome(error=e)

            if isinstance(payload, ProductPayload):
                return self._drop_product(payload)
            if isinstance(payload, LayerPayload):
                return self._drop_layer(payload)
            return GestureOutcome(error=TargetUnavailable("Shelves cannot be dropped onto a shelf"))
        finally:
            self._reset()

    # Hole alignment

    def align_to_nearest_hole(self) -> GestureOutcome:
        """Snap the shelf to the closest hole and persist it if it moved"""
        self._pending_snap = None
        if not self.is_idle:
            return GestureOutcome()

        try:
            hole = HoleGrid.from_fixture(self.fixture).nearest(self.shelf.position)
        except InvalidGeometry as e:
            self.logger.error(f"Shelf {self.shelf.id}: cannot snap: {e}")
            return GestureOutcome(error=e)
        if hole is None:
            return GestureOutcome()

        self.shelf.position = hole
        if abs(hole - self.last_committed_position) < 1e-9:
            return GestureOutcome()
        return self._commit_position(hole, IntentKind.SNAP_SHELF)

    # Internals

    def _transition(self, state: GestureState):
        self.logger.debug(f"Shelf {self.shelf.id}: {self.state.value} -> {state.value}")
        self.state = state

    def _reset(self):
        self._gesture = None
        self.feedback.clear()
        if not self.is_idle:
            self._transition(GestureState.IDLE)

    def _clamp(self, position: float) -> float:
        return max(self.fixture.base_height, min(position, self.fixture.max_shelf_position))

    def _transfer_target(self, x: float, y: float) -> Optional[str]:
        if self.section_at is None:
            return None
        section_id = self.section_at(x, y)
        if section_id is None or section_id == self.shelf.section_id:
            return None
        if self.fixture.find_section(section_id) is None:
            return None
        return section_id

    def _finish_vertical(self) -> GestureOutcome:
        position = self.shelf.position
        outcome = GestureOutcome()
        if abs(self.last_committed_position - position) > self.settings.noise_threshold:
            outcome = self._commit_position(position, IntentKind.MOVE_SHELF)
        else:
            self.logger.debug(f"Shelf {self.shelf.id}: movement within noise threshold, nothing to commit")
        self._schedule_snap()
        return outcome

    def _commit_position(self, position: float, kind: IntentKind) -> GestureOutcome:
        intent = CommitIntent(kind, self.shelf.id, {'position': position})
        try:
            stored = self.repository.update_shelf(self.shelf.id, position=position)
        except PersistenceFailure as e:
            self.shelf.position = self.last_committed_position
            return self._persistence_failed(e)

        self.shelf.position = stored.position
        self.last_committed_position = stored.position
        self.logger.info(f"Shelf {self.shelf.id}: position committed at {stored.position:.2f}")
        return GestureOutcome(committed=True, intent=intent)

    def _finish_transfer(self, target_section_id: Optional[str]) -> GestureOutcome:
        if target_section_id is None:
            # Expected outcome of a "changed my mind" drag; nobody is told
            self.logger.debug(f"Shelf {self.shelf.id}: transfer released without a target")
            return GestureOutcome(error=TargetUnavailable("No section under the pointer"))

        source = self.section
        destination = self.fixture.find_section(target_section_id)
        ordering = destination.shelf_count
        # Destination capacity is deliberately not re-checked here
        intent = CommitIntent(IntentKind.TRANSFER_SHELF, self.shelf.id, {
            'new_section_id': destination.id,
            'position': self.shelf.position,
            'ordering': ordering,
        })
        try:
            stored = self.repository.transfer_shelf(
                self.shelf.id, destination.id, position=self.shelf.position, ordering=ordering
            )
        except PersistenceFailure as e:
            return self._persistence_failed(e)

        source.remove_shelf(self.shelf.id)
        self.shelf.ordering = stored.ordering
        destination.add_shelf(self.shelf)
        self.logger.info(f"Shelf {self.shelf.id}: transferred from section {source.id} to {destination.id}")
        return GestureOutcome(committed=True, intent=intent)

    def _drop_product(self, payload: ProductPayload) -> GestureOutcome:
        candidate = CapacityCandidate(
            product_width=payload.product.width,
            quantity=NEW_SEGMENT_QUANTITY,
            spacing=NEW_SEGMENT_SPACING,
        )
        try:
            self.packer.ensure_fits(self.shelf.segments, self.section.width, candidate)
        except CapacityExceeded as e:
            return self._capacity_rejected(e)

        segment = Segment(
            layer=Layer(
                product=payload.product,
                quantity=NEW_SEGMENT_QUANTITY,
                spacing=NEW_SEGMENT_SPACING,
                status=Status.PUBLISHED,
            ),
            ordering=self.shelf.segment_count + 1,
            quantity=NEW_SEGMENT_QUANTITY,
            spacing=NEW_SEGMENT_SPACING,
            status=Status.PUBLISHED,
            shelf_id=self.shelf.id,
        )
        intent = CommitIntent(IntentKind.CREATE_SEGMENT, self.shelf.id, {'segment': segment.to_dict()})
        try:
            stored = self.repository.update_shelf(self.shelf.id, segment=segment)
        except PersistenceFailure as e:
            return self._persistence_failed(e)

        created = stored.find_segment(segment.id)
        self.shelf.add_segment(copy.deepcopy(created) if created is not None else segment)
        self.logger.info(f"Shelf {self.shelf.id}: product {payload.product.id} dropped as segment {segment.id}")
        return GestureOutcome(committed=True, intent=intent)

    def _drop_layer(self, payload: LayerPayload) -> GestureOutcome:
        if payload.shelf_id == self.shelf.id:
            self.logger.debug(f"Shelf {self.shelf.id}: layer dropped back onto its own shelf")
            return GestureOutcome(error=TargetUnavailable("Segment is already on this shelf"))

        source_shelf, segment = self.fixture.locate_segment(payload.segment_id)
        if segment is None:
            error = MalformedPayload(f"Unknown segment {payload.segment_id}")
            self.logger.error(f"Shelf {self.shelf.id}: ignoring layer drop: {error}")
            return GestureOutcome(error=error)
        if source_shelf.id == self.shelf.id:
            return GestureOutcome(error=TargetUnavailable("Segment is already on this shelf"))

        try:
            self.packer.ensure_fits(self.shelf.segments, self.section.width,
                                    CapacityCandidate.from_segment(segment))
        except CapacityExceeded as e:
            return self._capacity_rejected(e)

        ordering = self.shelf.segment_count + 1
        intent = CommitIntent(IntentKind.TRANSFER_SEGMENT, self.shelf.id, {
            'segment_id': segment.id,
            'from_shelf_id': source_shelf.id,
            'ordering': ordering,
        })
        try:
            self.repository.update_segment(segment.id, shelf_id=self.shelf.id, ordering=ordering)
        except PersistenceFailure as e:
            return self._persistence_failed(e)

        source_shelf.remove_segment(segment.id)
        segment.ordering = ordering
        self.shelf.add_segment(segment)
        self.logger.info(f"Segment {segment.id}: moved from shelf {source_shelf.id} to {self.shelf.id}")
        return GestureOutcome(committed=True, intent=intent)

    def _capacity_rejected(self, error: CapacityExceeded) -> GestureOutcome:
        self.logger.warning(
            f"Shelf {self.shelf.id}: drop rejected, occupied {error.occupied:.1f} > available {error.available:.1f}"
        )
        self.notifier.show(str(error), level='warning')
        return GestureOutcome(error=error)

    def _persistence_failed(self, error: PersistenceFailure) -> GestureOutcome:
        self.logger.error(f"Shelf {self.shelf.id}: commit failed: {error}")
        self.notifier.show(f"Could not save the change: {error}", level='error')
        return GestureOutcome(error=error)

    def _schedule_snap(self):
        self._cancel_pending_snap()
        self._pending_snap = self.scheduler.call_later(self.settings.snap_delay,
                                                  self._guarded(self.align_to_nearest_hole))

    def _guarded(self, callback):
        """Wrap a timer callback so it does nothing once a newer gesture has started"""
        generation = self._generation

        def run():
            if generation != self._generation:
                self.logger.debug(f"Shelf {self.shelf.id}: stale timer skipped")
                return None
            return callback()
        return run

    def _cancel_pending_snap(self):
        if self._pending_snap is not None:
            self._pending_snap.cancel()
            self._pending_snap = None

    def _cancel_pending_leave(self):
        if self._pending_leave is not None:
            self._pending_leave.cancel()
            self._pending_leave = None

    def _disarm_drop(self):
        self._pending_leave = None
        if self.state is GestureState.PRODUCT_DROP_ARMED:
            self.feedback.drop_target = False
            self._transition(GestureState.IDLE)
