# action_type.py - integer codes the API uses for recorded events
from enum import IntEnum


class ActionType(IntEnum):
    CLICK = 0
    PURCHASE = 1
    EMAIL_OPEN = 5
    EMAIL_CLICK = 6
    ITEM_VIEW = 7
