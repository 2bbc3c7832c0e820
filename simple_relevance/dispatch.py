"""Single entry point for invoking any client operation by name.

Meant for job queues: the operation name and its arguments are plain data,
so a worker can rebuild the call on the other side, e.g.

    call_api(config, Operation.GET_USER, email="foo@bar.com")
    call_api(config, "batch_add_purchases", purchases=[...])
"""

from enum import Enum
from typing import Any, Callable, Dict, Union

import requests

from .api_client import SimpleRelevanceClient
from .config import ClientConfig
from .errors import UnknownOperationError


class Operation(str, Enum):
    ADD_USER = "add_user"
    BATCH_ADD_USERS = "batch_add_users"
    GET_USER = "get_user"
    ADD_ITEM = "add_item"
    BATCH_ADD_ITEMS = "batch_add_items"
    GET_PREDICTIONS = "get_predictions"
    ADD_CLICK = "add_click"
    BATCH_ADD_CLICKS = "batch_add_clicks"
    ADD_PURCHASE = "add_purchase"
    BATCH_ADD_PURCHASES = "batch_add_purchases"
    ADD_EMAIL_OPEN = "add_email_open"
    BATCH_ADD_EMAIL_OPENS = "batch_add_email_opens"
    ADD_EMAIL_CLICK = "add_email_click"
    BATCH_ADD_EMAIL_CLICKS = "batch_add_email_clicks"
    ADD_ITEM_VIEW = "add_item_view"
    BATCH_ADD_ITEM_VIEWS = "batch_add_item_views"


HANDLERS: Dict[Operation, Callable[..., requests.Response]] = {
    Operation.ADD_USER: SimpleRelevanceClient.add_user,
    Operation.BATCH_ADD_USERS: SimpleRelevanceClient.batch_add_users,
    Operation.GET_USER: SimpleRelevanceClient.get_user,
    Operation.ADD_ITEM: SimpleRelevanceClient.add_item,
    Operation.BATCH_ADD_ITEMS: SimpleRelevanceClient.batch_add_items,
    Operation.GET_PREDICTIONS: SimpleRelevanceClient.get_predictions,
    Operation.ADD_CLICK: SimpleRelevanceClient.add_click,
    Operation.BATCH_ADD_CLICKS: SimpleRelevanceClient.batch_add_clicks,
    Operation.ADD_PURCHASE: SimpleRelevanceClient.add_purchase,
    Operation.BATCH_ADD_PURCHASES: SimpleRelevanceClient.batch_add_purchases,
    Operation.ADD_EMAIL_OPEN: SimpleRelevanceClient.add_email_open,
    Operation.BATCH_ADD_EMAIL_OPENS: SimpleRelevanceClient.batch_add_email_opens,
    Operation.ADD_EMAIL_CLICK: SimpleRelevanceClient.add_email_click,
    Operation.BATCH_ADD_EMAIL_CLICKS: SimpleRelevanceClient.batch_add_email_clicks,
    Operation.ADD_ITEM_VIEW: SimpleRelevanceClient.add_item_view,
    Operation.BATCH_ADD_ITEM_VIEWS: SimpleRelevanceClient.batch_add_item_views,
}


def to_operation(operation: Union[Operation, str]) -> Operation:
    try:
        return Operation(operation)
    except ValueError:
        raise UnknownOperationError(operation) from None


def call_api(
    config: ClientConfig,
    operation: Union[Operation, str],
    *args: Any,
    **kwargs: Any,
) -> requests.Response:
    handler = HANDLERS[to_operation(operation)]
    with SimpleRelevanceClient(config) as client:
        return handler(client, *args, **kwargs)
