from .payloads import PayloadType, ProductPayload, LayerPayload, ShelfPayload, parse_payload
from .selection import SelectionContext
from .scheduler import PollingScheduler
from .notifier import Notifier, Notification
from .placement_controller import (
    PlacementController, PlacementSettings, GestureState, GestureOutcome,
    PointerEvent, PressOrigin, InputDevice, FeedbackState, CommitIntent, IntentKind,
)

__all__ = [
    'PayloadType', 'ProductPayload', 'LayerPayload', 'ShelfPayload', 'parse_payload',
    'SelectionContext', 'PollingScheduler', 'Notifier', 'Notification',
    'PlacementController', 'PlacementSettings', 'GestureState', 'GestureOutcome',
    'PointerEvent', 'PressOrigin', 'InputDevice', 'FeedbackState', 'CommitIntent', 'IntentKind',
]
