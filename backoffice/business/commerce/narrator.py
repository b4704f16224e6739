"""
ActivityNarrator - description composer for client activity entries

Every workflow step that appends to the activity log takes its wording from
here, so the feed reads consistently regardless of which path wrote it.
"""


class ActivityNarrator:
    """
    Composes machine-generated descriptions for the client activity feed.
    """

    ORDER = 'order'
    ORDER_STATUS = 'order_status'
    REGISTRATION = 'registration'
    PROFILE = 'profile'
    REVIEW = 'review'

    @staticmethod
    def order_placed(order_number: str, item_count: int, total: float) -> str:
        noun = 'item' if item_count == 1 else 'items'
        return f"Placed order #{order_number} ({item_count} {noun}, ${total:,.2f})"

    @staticmethod
    def order_status_changed(order_number: str, from_status: str, to_status: str) -> str:
        return f"Order #{order_number} status changed: {from_status} → {to_status}"

    @staticmethod
    def client_registered(name: str) -> str:
        return f"{name} registered as a client"
