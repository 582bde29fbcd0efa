from typing import Optional


class SelectionContext:
    """Which layer is currently selected for highlighting.

    Owned by the top-level UI controller and handed to whoever needs it.
    Anyone may query; only select() and clear() change it. Last writer wins.
    """

    def __init__(self):
        self._selected_layer_id: Optional[str] = None

    @property
    def selected_layer_id(self) -> Optional[str]:
        return self._selected_layer_id

    def select(self, layer_id: str):
        self._selected_layer_id = layer_id

    def is_selected(self, layer_id: str) -> bool:
        return self._selected_layer_id is not None and self._selected_layer_id == layer_id

    def clear(self):
        self._selected_layer_id = None
