"""Payload builders for the SimpleRelevance API.

Callers describe users, items and actions either with the spec models below or
with plain mappings. Every recognized field is declared on its model; anything
else is kept in the model's ``model_extra`` and is carried through to the
request. Optional attributes are untyped so values reach the wire exactly as
given.

Builders return plain dicts shaped the way the API expects. They validate
required fields up front and raise PayloadValidationError before any request
is made.
"""

from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .action_type import ActionType
from .errors import PayloadValidationError

DEFAULT_ITEM_TYPE = "product"

Identifier = Union[int, str]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PayloadSpec(BaseModel):
    # unknown keys (even one called "extra") are kept verbatim in model_extra
    model_config = ConfigDict(extra="allow")

    required: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*", mode="before")
    @classmethod
    def _reject_blank_required(cls, value: Any, info) -> Any:
        if info.field_name in cls.required and _is_blank(value):
            raise PydanticCustomError("missing", "Field required")
        return value

    def attributes(self, *exclude: str) -> Dict[str, Any]:
        """Fields the caller set, minus ``exclude``, followed by the unknown keys."""
        return self.model_dump(exclude=set(exclude), exclude_unset=True)


class UserSpec(PayloadSpec):
    required: ClassVar[Tuple[str, ...]] = ("email", "user_id")

    email: str
    user_id: Identifier
    first_name: Optional[Any] = None
    last_name: Optional[Any] = None
    twitter_handle: Optional[Any] = None
    image_url: Optional[Any] = None


class VariantSpec(PayloadSpec):
    name: Optional[Any] = None
    external_id: Optional[Any] = None
    sku: Optional[Any] = None
    price: Optional[Any] = None
    starts: Optional[Any] = None
    expires: Optional[Any] = None
    discount: Optional[Any] = None


class ItemSpec(PayloadSpec):
    required: ClassVar[Tuple[str, ...]] = ("item_id", "item_name", "item_url", "image_url")

    item_id: Identifier
    item_name: str
    item_url: str
    image_url: str
    item_type: Optional[Any] = None
    variants: Optional[List[VariantSpec]] = None

    latitude: Optional[Any] = None
    longitude: Optional[Any] = None
    # matters a lot for business items, the service ranks on it
    business_name: Optional[Any] = None
    market: Optional[Any] = None
    neighborhood: Optional[Any] = None
    zipcode: Optional[Any] = None
    sku: Optional[Any] = None
    image_url_small: Optional[Any] = None
    price: Optional[Any] = None
    starts: Optional[Any] = None
    expires: Optional[Any] = None
    description: Optional[Any] = None
    in_stock: Optional[Any] = None
    # "2%", 20, .2 and ".2" are all accepted; anything above 1 is an amount off
    discount: Optional[Any] = None


class ActionSpec(PayloadSpec):
    required: ClassVar[Tuple[str, ...]] = ("item_id", "user_id", "action_type")

    item_id: Identifier
    user_id: Identifier
    action_type: ActionType
    timestamp: Optional[Any] = None
    price: Optional[Any] = None
    zipcode: Optional[Any] = None
    item_type: Optional[Any] = None
    item_name: Optional[Any] = None
    email: Optional[Any] = None


def _validation_error(e: ValidationError) -> PayloadValidationError:
    err = e.errors()[0]
    field = ".".join(str(p) for p in err["loc"]) or "payload"
    if err["type"] == "missing":
        return PayloadValidationError(field)
    return PayloadValidationError(field, err["msg"])


def _coerce(model, spec: Any):
    if isinstance(spec, model):
        return spec
    if spec is None:
        spec = {}
    if not isinstance(spec, Mapping):
        raise PayloadValidationError(
            "payload", f"expected a mapping or {model.__name__}, got {type(spec).__name__}"
        )
    try:
        return model.model_validate(spec)
    except ValidationError as e:
        raise _validation_error(e) from None


def require(params: Mapping[str, Any], *fields: str) -> None:
    for field in fields:
        if _is_blank(params.get(field)):
            raise PayloadValidationError(field)


def user_payload(spec: Union[UserSpec, Mapping[str, Any]]) -> Dict[str, Any]:
    user = _coerce(UserSpec, spec)
    return {
        "email": user.email,
        "user_id": user.user_id,
        "data_dict": user.attributes("email", "user_id"),
    }


def item_payload(spec: Union[ItemSpec, Mapping[str, Any]]) -> Dict[str, Any]:
    item = _coerce(ItemSpec, spec)
    payload: Dict[str, Any] = {
        "item_id": item.item_id,
        "item_name": item.item_name,
        "item_type": item.item_type or DEFAULT_ITEM_TYPE,
    }
    if item.variants is not None:
        payload["variants"] = [variant.attributes() for variant in item.variants]
    # item_url and image_url are validated above but travel inside data_dict
    payload["data_dict"] = item.attributes("item_id", "item_name", "item_type", "variants")
    return payload


def action_payload(
    spec: Union[ActionSpec, Mapping[str, Any]],
    action_type: Optional[ActionType] = None,
) -> Dict[str, Any]:
    """Flat action payload; ``action_type`` stamps a code onto the spec without mutating it."""
    if action_type is not None:
        if isinstance(spec, ActionSpec):
            spec = spec.model_copy(update={"action_type": ActionType(action_type)})
        else:
            spec = {**(spec or {}), "action_type": action_type}
    action = _coerce(ActionSpec, spec)
    payload = action.attributes("action_type")
    payload["action_type"] = int(action.action_type)
    return payload


def batch_payload(
    name: str,
    specs: Optional[Sequence[Any]],
    build: Callable[[Any], Dict[str, Any]],
) -> Dict[str, List[Dict[str, Any]]]:
    if specs is None:
        raise PayloadValidationError(name)
    if not isinstance(specs, (list, tuple)):
        raise PayloadValidationError(name, f"expected a list, got {type(specs).__name__}")
    batch = []
    for i, spec in enumerate(specs):
        try:
            batch.append(build(spec))
        except PayloadValidationError as e:
            raise PayloadValidationError(f"{name}[{i}].{e.field}", e.reason) from None
    return {"batch": batch}
