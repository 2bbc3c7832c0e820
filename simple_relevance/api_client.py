# api_client.py - SimpleRelevance API wrapper around requests
#
# One method per API operation. Each call validates its input, builds the
# payload, sends a single request and hands back the raw requests.Response.
# Status codes are not interpreted and nothing is retried.
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

import requests
from requests import Request

from .action_type import ActionType
from .config import ClientConfig
from .encoding import escape_values
from .payloads import PayloadSpec, action_payload, batch_payload, item_payload, require, user_payload
from .utils.log import get_logger

logger = get_logger("simple_relevance")
_base_level = logger.level
_debug = False

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


def set_debug(enabled: bool = True) -> None:
    """Trace every request and response to stdout, process-wide."""
    global _debug
    _debug = bool(enabled)
    logger.setLevel(logging.DEBUG if _debug else _base_level)


def debug_enabled() -> bool:
    return _debug


def _redact(headers: Mapping[str, str]) -> Dict[str, str]:
    safe = dict(headers)
    if "Authorization" in safe:
        safe["Authorization"] = safe["Authorization"].split(" ", 1)[0] + " [REDACTED]"
    return safe


def _text(body: Any) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="ignore")
    return "" if body is None else str(body)


def _trace_request(prepared: requests.PreparedRequest) -> None:
    logger.debug("=== PREPARED REQUEST ===")
    logger.debug("%s %s", prepared.method, prepared.url)
    for k, v in _redact(prepared.headers).items():
        logger.debug("REQ-HEADER %s: %s", k, v)
    logger.debug("REQ-BODY: %s", _text(prepared.body))
    logger.debug("========================")


def _trace_response(resp: requests.Response) -> None:
    logger.debug("=== RESPONSE ===")
    logger.debug("status %s (elapsed %.3fs)", resp.status_code, resp.elapsed.total_seconds())
    for k, v in resp.headers.items():
        logger.debug("RESP-HEADER %s: %s", k, v)
    logger.debug("RESP-BODY: %s", resp.text)
    logger.debug("================")


def _merge(spec: Any, fields: Dict[str, Any]) -> Any:
    if not fields:
        return spec
    if isinstance(spec, PayloadSpec):
        spec = spec.attributes()
    return {**(spec or {}), **fields}


class SimpleRelevanceClient:
    def __init__(self, config: ClientConfig):
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.timeout = config.timeout
        self.session = requests.Session()
        self.session.auth = config.auth

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        self.session.close()

    def _url(self, endpoint):
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    # ---------- transport ----------
    def post(self, endpoint: str, payload: Dict[str, Any]) -> requests.Response:
        body = escape_values(payload)
        body["async"] = self.config.async_mode
        req = Request("POST", self._url(endpoint), json=body, headers=JSON_HEADERS)
        return self._send(req)

    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> requests.Response:
        query = dict(params or {})
        query["async"] = self.config.async_mode
        req = Request("GET", self._url(endpoint), params=query, headers={"Accept": "application/json"})
        return self._send(req)

    def _send(self, req: Request) -> requests.Response:
        prepared = self.session.prepare_request(req)
        logger.debug("%s %s", prepared.method, prepared.url)
        if _debug:
            _trace_request(prepared)
        resp = self.session.send(prepared, timeout=self.timeout)
        if _debug:
            _trace_response(resp)
        return resp

    # ---------- users ----------
    def add_user(self, user=None, **fields) -> requests.Response:
        """Upsert one user.

        Required: email, user_id. Reserved attributes: first_name, last_name,
        twitter_handle, image_url. Everything else goes into data_dict.
        """
        return self.post("users/", user_payload(_merge(user, fields)))

    def batch_add_users(self, users: Sequence[Any]) -> requests.Response:
        return self.post("users/", batch_payload("users", users, user_payload))

    def get_user(self, params: Optional[Mapping[str, Any]] = None, **filters) -> requests.Response:
        return self.get("users", {**(params or {}), **filters})

    # ---------- items ----------
    def add_item(self, item=None, **fields) -> requests.Response:
        """Upsert one catalog item.

        Required: item_id, item_name, item_url (must be reachable from the
        internet) and image_url. item_type defaults to "product".
        """
        return self.post("items/", item_payload(_merge(item, fields)))

    def batch_add_items(self, items: Sequence[Any]) -> requests.Response:
        return self.post("items/", batch_payload("items", items, item_payload))

    def get_predictions(self, email: Optional[str] = None, **params) -> requests.Response:
        query = {"email": email, **params}
        require(query, "email")
        return self.get("items/", query)

    # ---------- actions ----------
    def add_action(self, action=None, **fields) -> requests.Response:
        """Record one event; action_type must be in the input."""
        return self.post("actions/", action_payload(_merge(action, fields)))

    def _add_event(self, action: Any, action_type: ActionType, fields: Dict[str, Any]) -> requests.Response:
        # the method's own code wins over any action_type the caller passed along
        fields.pop("action_type", None)
        return self.post("actions/", action_payload(_merge(action, fields), action_type))

    def batch_add_actions(
        self, name: str, actions: Sequence[Any], action_type: Optional[ActionType] = None
    ) -> requests.Response:
        payload = batch_payload(name, actions, lambda spec: action_payload(spec, action_type))
        return self.post("actions/", payload)

    def add_click(self, action=None, **fields) -> requests.Response:
        return self._add_event(action, ActionType.CLICK, fields)

    def batch_add_clicks(self, clicks: Sequence[Any]) -> requests.Response:
        return self.batch_add_actions("clicks", clicks, ActionType.CLICK)

    def add_purchase(self, action=None, **fields) -> requests.Response:
        return self._add_event(action, ActionType.PURCHASE, fields)

    def batch_add_purchases(self, purchases: Sequence[Any]) -> requests.Response:
        return self.batch_add_actions("purchases", purchases, ActionType.PURCHASE)

    def add_email_open(self, action=None, **fields) -> requests.Response:
        return self._add_event(action, ActionType.EMAIL_OPEN, fields)

    def batch_add_email_opens(self, email_opens: Sequence[Any]) -> requests.Response:
        return self.batch_add_actions("email_opens", email_opens, ActionType.EMAIL_OPEN)

    def add_email_click(self, action=None, **fields) -> requests.Response:
        return self._add_event(action, ActionType.EMAIL_CLICK, fields)

    def batch_add_email_clicks(self, email_clicks: Sequence[Any]) -> requests.Response:
        return self.batch_add_actions("email_clicks", email_clicks, ActionType.EMAIL_CLICK)

    def add_item_view(self, action=None, **fields) -> requests.Response:
        return self._add_event(action, ActionType.ITEM_VIEW, fields)

    def batch_add_item_views(self, item_views: Sequence[Any]) -> requests.Response:
        return self.batch_add_actions("item_views", item_views, ActionType.ITEM_VIEW)
