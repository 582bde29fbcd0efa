"""Drag payloads.

Drags carry a JSON document tagged by ``type``. Each tag maps to one frozen
variant; anything that does not parse into one of them is a MalformedPayload.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union
import json

from ..models.product import Product
from ..utils.error_handler import MalformedPayload

class PayloadType(Enum):
    PRODUCT = "product"
    LAYER = "layer"
    SHELF = "shelf"

@dataclass(frozen=True)
class ProductPayload:
    product: Product
    type: PayloadType = PayloadType.PRODUCT

@dataclass(frozen=True)
class LayerPayload:
    layer_id: str
    segment_id: str
    shelf_id: str
    quantity: int
    product: Optional[Product] = None
    type: PayloadType = PayloadType.LAYER

@dataclass(frozen=True)
class ShelfPayload:
    shelf_id: str
    section_id: str
    type: PayloadType = PayloadType.SHELF

DragPayload = Union[ProductPayload, LayerPayload, ShelfPayload]


def _field(data: Dict, *names: str, required: bool = True) -> Any:
    # Browser adapters send camelCase keys; accept both spellings
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    if required:
        raise MalformedPayload(f"Missing field '{names[0]}'")
    return None


def _product(data: Any) -> Product:
    if not isinstance(data, dict):
        raise MalformedPayload("Product must be an object")
    try:
        product = Product.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedPayload(f"Invalid product: {e}") from e
    if product.width <= 0:
        raise MalformedPayload(f"Product {product.id} has no width")
    return product


def parse_payload(raw: Union[str, bytes, Dict]) -> DragPayload:
    """Parse a drag payload into its tagged variant"""
    if isinstance(raw, (str, bytes)):
        if not raw:
            raise MalformedPayload("Empty payload")
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPayload(f"Payload is not valid JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, dict):
        raise MalformedPayload("Payload must be an object")

    try:
        kind = PayloadType(data.get('type'))
    except ValueError:
        raise MalformedPayload(f"Unknown payload type: {data.get('type')!r}")

    if kind is PayloadType.PRODUCT:
        # Either {"type": "product", "product": {...}} or the product fields inline
        product_data = data.get('product', data)
        return ProductPayload(product=_product(product_data))

    if kind is PayloadType.LAYER:
        try:
            quantity = int(_field(data, 'quantity'))
        except (TypeError, ValueError) as e:
            raise MalformedPayload(f"Invalid layer quantity: {e}") from e
        product_data = data.get('product')
        return LayerPayload(
            layer_id=str(_field(data, 'layer_id', 'layerId')),
            segment_id=str(_field(data, 'segment_id', 'segmentId')),
            shelf_id=str(_field(data, 'shelf_id', 'shelfId')),
            quantity=quantity,
            product=_product(product_data) if product_data is not None else None,
        )

    return ShelfPayload(
        shelf_id=str(_field(data, 'shelf_id', 'shelfId')),
        section_id=str(_field(data, 'section_id', 'sectionId')),
    )
