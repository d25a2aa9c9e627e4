from nfcforge.db.database import (
    build_engine,
    get_session,
    get_session_factory,
    init_db,
    transaction,
)
from nfcforge.db.operations import (
    count_orders,
    get_order,
    insert_order,
    list_orders_for_user,
    order_to_model,
    order_to_row,
    update_order_status,
)

__all__ = [
    "build_engine",
    "count_orders",
    "get_order",
    "get_session",
    "get_session_factory",
    "init_db",
    "insert_order",
    "list_orders_for_user",
    "order_to_model",
    "order_to_row",
    "transaction",
    "update_order_status",
]
