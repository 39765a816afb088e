"""
0x response shape adapters

The 0x quote payload has carried the settlement target and calldata in
more than one place over API revisions (and proxies sometimes rewrap it).
Each known shape is an adapter tried in a fixed priority order; the name
of the adapter that supplied the target/calldata is kept on the Quote.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ...errors import InvalidQuoteError
from ...types.quote import Price, Quote, normalize_address, parse_base_units

logger = logging.getLogger(__name__)


def _nested(payload: Dict[str, Any], *keys: str) -> Optional[Dict[str, Any]]:
    node: Any = payload
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node if isinstance(node, dict) else None


def _non_empty_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class ShapeAdapter:
    """
    One known location of the executable call inside a quote payload

    Attributes:
        name: Adapter name recorded on the Quote
        locate: Returns the object holding to/data/value, or None
    """
    name: str
    locate: Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]

    def field(self, payload: Dict[str, Any], key: str) -> Optional[Any]:
        node = self.locate(payload)
        if node is None:
            return None
        return node.get(key)

    def matches(self, payload: Dict[str, Any]) -> bool:
        """Both target and calldata present as non-empty strings"""
        return (
            _non_empty_str(self.field(payload, "to")) is not None
            and _non_empty_str(self.field(payload, "data")) is not None
        )


# Priority order matters: the first adapter that yields a field wins
SHAPE_ADAPTERS: List[ShapeAdapter] = [
    ShapeAdapter("flat", lambda p: p),
    ShapeAdapter("transaction", lambda p: _nested(p, "transaction")),
    ShapeAdapter("tx", lambda p: _nested(p, "tx")),
]


def _first_field(payload: Dict[str, Any], key: str) -> Optional[ShapeAdapter]:
    for adapter in SHAPE_ADAPTERS:
        if _non_empty_str(adapter.field(payload, key)) is not None:
            return adapter
    return None


def _parse_value(value: Any) -> Optional[int]:
    """Native value: int, decimal string or 0x hex string; empty means none"""
    if value is None or value == "":
        return None
    if isinstance(value, str) and value.lower().startswith("0x"):
        try:
            return int(value, 16)
        except ValueError:
            raise InvalidQuoteError.bad_amount("value", value)
    return parse_base_units(value, "value")


def _allowance_target(payload: Dict[str, Any]) -> Optional[str]:
    target = _non_empty_str(payload.get("allowanceTarget"))
    if target is None:
        spender = _nested(payload, "issues", "allowance")
        target = _non_empty_str(spender.get("spender")) if spender else None
    if target is None:
        return None
    return normalize_address(target, "allowanceTarget")


def _amount_str(payload: Dict[str, Any], key: str, required: bool) -> Optional[str]:
    raw = payload.get(key)
    if raw is None or raw == "":
        if required:
            raise InvalidQuoteError.missing_field(key)
        return None
    return str(parse_base_units(raw, key))


def normalize_quote(payload: Any) -> Quote:
    """
    Build a Quote from a raw 0x quote response

    Target and calldata come from the first adapter that has both; failing
    that, each field is taken from the first adapter that has it and the
    shape is reported as ``partial:<to adapter>+<data adapter>``.

    Raises:
        InvalidQuoteError: Missing target/calldata/buyAmount, or an address
            or amount field that cannot be normalized
    """
    if not isinstance(payload, dict):
        raise InvalidQuoteError(f"Quote response is not a JSON object: {type(payload).__name__}")

    matched = next((a for a in SHAPE_ADAPTERS if a.matches(payload)), None)
    if matched is not None:
        to_adapter = data_adapter = matched
        shape = matched.name
    else:
        to_adapter = _first_field(payload, "to")
        data_adapter = _first_field(payload, "data")
        if to_adapter is None:
            raise InvalidQuoteError.missing_field("to")
        if data_adapter is None:
            raise InvalidQuoteError.missing_field("data")
        shape = f"partial:{to_adapter.name}+{data_adapter.name}"
        logger.debug(f"Quote target/calldata split across shapes: {shape}")

    to = normalize_address(to_adapter.field(payload, "to"), "to")
    data = data_adapter.field(payload, "data")

    value = _parse_value(to_adapter.field(payload, "value"))
    if value is None:
        value = _parse_value(payload.get("value"))

    return Quote(
        to=to,
        data=data,
        buy_amount=_amount_str(payload, "buyAmount", required=True),
        value=value,
        allowance_target=_allowance_target(payload),
        sell_amount=_amount_str(payload, "sellAmount", required=False),
        shape=shape,
    )


def normalize_price(payload: Any) -> Price:
    """
    Build a Price preview from a raw 0x price response

    Raises:
        InvalidQuoteError: If buyAmount is missing or not base units
    """
    if not isinstance(payload, dict):
        raise InvalidQuoteError(f"Price response is not a JSON object: {type(payload).__name__}")

    value = payload.get("value")
    return Price(
        price=str(payload.get("price", "")),
        buy_amount=_amount_str(payload, "buyAmount", required=True),
        sell_amount=_amount_str(payload, "sellAmount", required=False) or "",
        value=str(value) if value not in (None, "") else None,
    )
