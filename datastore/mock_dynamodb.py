from __future__ import annotations
import copy
import json
from decimal import Decimal
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Sequence, Tuple

from boto3.dynamodb.conditions import AttributeBase, ConditionBase

Item = Dict[str, Any]
ItemKey = Tuple[Any, ...]


class MockDynamoDBTable:
    """Local stand-in for a boto3 ``Table`` resource.

    Implements the ``put_item``/``get_item``/``scan`` calls used by the weather
    table accessor, including ``FilterExpression`` conditions built with
    :mod:`boto3.dynamodb.conditions`, ``Limit`` and ``ExclusiveStartKey``
    pagination. Numbers must be ``Decimal`` on write, as with the real service.
    """

    def __init__(
        self,
        name: str,
        persistence_path: Optional[Path] = None,
        key_attributes: Sequence[str] = ("id", "timestamp"),
        page_size: int = 100,
    ) -> None:
        self.name = name
        self.key_attributes = tuple(key_attributes)
        self.page_size = page_size
        self._items: Dict[ItemKey, Item] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, *, Item: Item, **_: Any) -> Dict[str, Any]:
        _reject_floats(Item)
        key = self._key_of(Item)
        with self._lock:
            self._items[key] = copy.deepcopy(Item)
            self._persist()
        return {}

    def get_item(self, *, Key: Item, **_: Any) -> Dict[str, Any]:
        key = self._key_of(Key)
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return {}
            return {"Item": copy.deepcopy(item)}

    def scan(
        self,
        *,
        FilterExpression: Optional[ConditionBase] = None,
        Limit: Optional[int] = None,
        ExclusiveStartKey: Optional[Item] = None,
        **_: Any,
    ) -> Dict[str, Any]:
        """Return one page of items; ``Limit`` bounds items examined, not returned."""

        with self._lock:
            ordered = sorted(self._items.items(), key=lambda pair: pair[0])

        if ExclusiveStartKey is not None:
            start_key = self._key_of(ExclusiveStartKey)
            ordered = [pair for pair in ordered if pair[0] > start_key]

        limit = Limit or self.page_size
        page, remaining = ordered[:limit], ordered[limit:]

        items = [
            copy.deepcopy(item)
            for _, item in page
            if FilterExpression is None or _evaluate(FilterExpression, item)
        ]
        response: Dict[str, Any] = {
            "Items": items,
            "Count": len(items),
            "ScannedCount": len(page),
        }
        if remaining and page:
            last_item = page[-1][1]
            response["LastEvaluatedKey"] = {
                name: last_item[name] for name in self.key_attributes
            }
        return response

    def _key_of(self, item: Item) -> ItemKey:
        try:
            return tuple(item[name] for name in self.key_attributes)
        except KeyError as exc:
            raise ValueError(
                f"Item is missing key attribute {exc.args[0]!r} for table {self.name!r}."
            ) from exc

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [self._items[key] for key in sorted(self._items)]
        self.persistence_path.write_text(
            json.dumps(payload, indent=2, sort_keys=True, default=_encode_decimal)
        )

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "[]"
            data = json.loads(raw, parse_float=Decimal, parse_int=Decimal)
        except (OSError, json.JSONDecodeError):
            data = []

        for item in data:
            self._items[self._key_of(item)] = item


def _encode_decimal(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _reject_floats(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("Float types are not supported. Use Decimal types instead.")
    if isinstance(value, dict):
        for nested in value.values():
            _reject_floats(nested)
    elif isinstance(value, (list, tuple, set)):
        for nested in value:
            _reject_floats(nested)


def _resolve(value: Any, item: Item) -> Any:
    if isinstance(value, AttributeBase):
        return item.get(value.name)
    return value


def _evaluate(condition: ConditionBase, item: Item) -> bool:
    expression = condition.get_expression()
    operator = expression["operator"]
    values = expression["values"]

    if operator == "AND":
        return all(_evaluate(value, item) for value in values)
    if operator == "OR":
        return any(_evaluate(value, item) for value in values)
    if operator == "NOT":
        return not _evaluate(values[0], item)
    if operator == "attribute_exists":
        return values[0].name in item
    if operator == "attribute_not_exists":
        return values[0].name not in item

    resolved = [_resolve(value, item) for value in values]
    if resolved[0] is None:
        return False
    try:
        if operator == "=":
            return resolved[0] == resolved[1]
        if operator == "<>":
            return resolved[0] != resolved[1]
        if operator == "<":
            return resolved[0] < resolved[1]
        if operator == "<=":
            return resolved[0] <= resolved[1]
        if operator == ">":
            return resolved[0] > resolved[1]
        if operator == ">=":
            return resolved[0] >= resolved[1]
        if operator == "BETWEEN":
            return resolved[1] <= resolved[0] <= resolved[2]
        if operator == "begins_with":
            return str(resolved[0]).startswith(str(resolved[1]))
    except TypeError:
        return False
    raise NotImplementedError(f"Condition operator {operator!r} is not supported by the mock table.")
