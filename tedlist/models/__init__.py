# Importing this package registers every table on db.metadata.
from tedlist.models.user import User
from tedlist.models.item import Item, ITEM_CONDITIONS, ITEM_TYPES, ITEM_STATUSES
from tedlist.models.swipe import Swipe
from tedlist.models.match import Match, MATCH_STATUSES
from tedlist.models.deal import Deal, DEAL_STATUSES, deal_sender_items, deal_receiver_items
from tedlist.models.notification import Notification, NOTIFICATION_TITLES
from tedlist.models.teddy_transaction import TeddyTransaction

__all__ = [
    "User",
    "Item", "ITEM_CONDITIONS", "ITEM_TYPES", "ITEM_STATUSES",
    "Swipe",
    "Match", "MATCH_STATUSES",
    "Deal", "DEAL_STATUSES", "deal_sender_items", "deal_receiver_items",
    "Notification", "NOTIFICATION_TITLES",
    "TeddyTransaction",
]
