"""
Sales reports over the Order collection.

Every report reads orders with start <= created_at <= end, is admin only and
never writes. Cancelled orders count towards status breakdowns but not towards
revenue or quantities.
"""
import logging
from datetime import datetime

import pandas as pd
from sqlalchemy.orm import Session, selectinload

from core.auth_service import require_role
from core.utils import day_key
from models.menu_item import MenuItem
from models.order import Order, ORDER_STATUSES
from models.user import User

logger = logging.getLogger(__name__)

ORDER_COLUMNS = ["order_id", "user_id", "status", "total_amount", "created_at", "date"]
LINE_COLUMNS = ["order_id", "user_id", "date", "menu_item_id", "name", "category", "price", "quantity", "revenue"]


def _fetch_orders(db: Session, start: datetime, end: datetime, include_cancelled: bool = True):
    query = (
        db.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.created_at >= start, Order.created_at <= end)
    )
    if not include_cancelled:
        query = query.filter(Order.status != "cancelled")
    return query.order_by(Order.created_at).all()


def _order_frame(orders) -> pd.DataFrame:
    rows = [
        {
            "order_id": o.id,
            "user_id": o.user_id,
            "status": o.status,
            "total_amount": float(o.total_amount),
            "created_at": o.created_at,
            "date": day_key(o.created_at),
        }
        for o in orders
    ]
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


def _line_frame(orders) -> pd.DataFrame:
    rows = [
        {
            "order_id": o.id,
            "user_id": o.user_id,
            "date": day_key(o.created_at),
            "menu_item_id": line.menu_item_id,
            "name": line.name,
            "category": line.category,
            "price": float(line.price),
            "quantity": int(line.quantity),
            "revenue": float(line.price) * int(line.quantity),
        }
        for o in orders
        for line in o.items
    ]
    return pd.DataFrame(rows, columns=LINE_COLUMNS)


def _daily(frame: pd.DataFrame, value_columns: dict) -> list:
    """
    Group a frame by calendar day.
    value_columns maps output key -> (column, aggregation).
    """
    grouped = frame.groupby("date").agg(**value_columns).reset_index().sort_values("date")
    return grouped.to_dict("records")


# ---------------------------------------------------------------- revenue

def revenue_summary(db: Session, actor, start: datetime, end: datetime) -> dict:
    """Returns total_revenue, total_orders and average_order_value (0 when there are no orders)."""
    require_role(actor, "admin")
    orders = _fetch_orders(db, start, end, include_cancelled=False)

    total_revenue = float(sum(o.total_amount for o in orders))
    total_orders = len(orders)
    return {
        "total_revenue": total_revenue,
        "total_orders": total_orders,
        "average_order_value": total_revenue / total_orders if total_orders else 0.0,
    }


def orders_by_status(db: Session, actor, start: datetime, end: datetime) -> dict:
    """Status label -> count, cancelled orders included."""
    require_role(actor, "admin")
    frame = _order_frame(_fetch_orders(db, start, end))
    if frame.empty:
        return {}
    return {status: int(count) for status, count in frame["status"].value_counts().sort_index().items()}


def daily_revenue_series(db: Session, actor, start: datetime, end: datetime) -> list:
    require_role(actor, "admin")
    frame = _order_frame(_fetch_orders(db, start, end, include_cancelled=False))
    if frame.empty:
        return []
    rows = _daily(frame, {"revenue": ("total_amount", "sum"), "orders": ("order_id", "count")})
    return [{"date": r["date"], "revenue": float(r["revenue"]), "orders": int(r["orders"])} for r in rows]


# ---------------------------------------------------------------- items

def popular_items(db: Session, actor, start: datetime, end: datetime, limit: int = 5) -> list:
    """
    Top menu items by units sold.

    Lines whose menu item has since been deleted are skipped.
    """
    require_role(actor, "admin")
    lines = _line_frame(_fetch_orders(db, start, end, include_cancelled=False))
    if lines.empty:
        return []

    grouped = (
        lines.groupby("menu_item_id")
        .agg(total_quantity=("quantity", "sum"), total_revenue=("revenue", "sum"))
        .reset_index()
    )
    ids = [int(i) for i in grouped["menu_item_id"]]
    names = {item.id: item.name for item in db.query(MenuItem).filter(MenuItem.id.in_(ids)).all()}

    skipped = set(ids) - set(names)
    if skipped:
        logger.warning("popular_items: skipping %d deleted menu item(s): %s", len(skipped), sorted(skipped))

    grouped = grouped[grouped["menu_item_id"].isin(list(names))]
    grouped = grouped.sort_values(["total_quantity", "menu_item_id"], ascending=[False, True]).head(limit)
    return [
        {
            "menu_item_id": int(row["menu_item_id"]),
            "name": names[int(row["menu_item_id"])],
            "total_quantity": int(row["total_quantity"]),
            "total_revenue": float(row["total_revenue"]),
        }
        for row in grouped.to_dict("records")
    ]


def popular_items_all_time(db: Session, actor, limit: int = 10) -> list:
    """All non-cancelled orders ever, named by the snapshot taken at order time."""
    require_role(actor, "admin")
    orders = db.query(Order).options(selectinload(Order.items)).filter(Order.status != "cancelled").all()
    lines = _line_frame(orders)
    if lines.empty:
        return []

    grouped = (
        lines.groupby("menu_item_id")
        .agg(name=("name", "first"), total_orders=("quantity", "sum"))
        .reset_index()
        .sort_values(["total_orders", "menu_item_id"], ascending=[False, True])
        .head(limit)
    )
    return [
        {"menu_item_id": int(r["menu_item_id"]), "name": r["name"], "total_orders": int(r["total_orders"])}
        for r in grouped.to_dict("records")
    ]


# ---------------------------------------------------------------- categories

def category_analysis(db: Session, actor, start: datetime, end: datetime) -> list:
    """
    Per category: total_revenue, total_orders (units), average_order_value and top_items.

    Categories come from the snapshot stored on each order line.
    average_order_value is the mean unit price of the category's lines.
    """
    require_role(actor, "admin")
    lines = _line_frame(_fetch_orders(db, start, end, include_cancelled=False))
    if lines.empty:
        return []

    result = []
    for category, group in lines.groupby("category"):
        top = (
            group.groupby("name")
            .agg(quantity=("quantity", "sum"), revenue=("revenue", "sum"))
            .reset_index()
            .sort_values(["revenue", "name"], ascending=[False, True])
            .head(5)
        )
        result.append({
            "category": category,
            "total_revenue": float(group["revenue"].sum()),
            "total_orders": int(group["quantity"].sum()),
            "average_order_value": float(group["price"].mean()),
            "top_items": [
                {"name": r["name"], "quantity": int(r["quantity"]), "revenue": float(r["revenue"])}
                for r in top.to_dict("records")
            ],
        })

    result.sort(key=lambda c: (-c["total_revenue"], c["category"]))
    return result


def category_trends(db: Session, actor, start: datetime, end: datetime) -> list:
    """Daily revenue and units per category, categories in alphabetical order."""
    require_role(actor, "admin")
    lines = _line_frame(_fetch_orders(db, start, end, include_cancelled=False))
    if lines.empty:
        return []

    trends = []
    for category, group in lines.groupby("category"):
        rows = _daily(group, {"revenue": ("revenue", "sum"), "orders": ("quantity", "sum")})
        trends.append({
            "category": category,
            "trends": [
                {"date": r["date"], "revenue": float(r["revenue"]), "orders": int(r["orders"])}
                for r in rows
            ],
        })
    return trends


# ---------------------------------------------------------------- users

def _resolve_users(db: Session, user_ids) -> dict:
    ids = [int(i) for i in user_ids]
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}


def user_order_analysis(db: Session, actor, start: datetime, end: datetime) -> dict:
    """
    Per-user order statistics, biggest spenders first.

    total_orders and status_counts cover every order; total_spent and
    average_order_value leave cancelled orders out. Orders whose user no
    longer resolves are dropped; how many users that hit is returned as
    `unresolved_users`.
    """
    require_role(actor, "admin")
    frame = _order_frame(_fetch_orders(db, start, end))
    if frame.empty:
        return {"users": [], "unresolved_users": 0}

    users = _resolve_users(db, frame["user_id"].unique())
    rows = []
    unresolved = 0
    for user_id, group in frame.groupby("user_id"):
        user = users.get(int(user_id))
        if user is None:
            unresolved += 1
            continue
        paid = group[group["status"] != "cancelled"]
        total_spent = float(paid["total_amount"].sum())
        counts = group["status"].value_counts()
        rows.append({
            "user_id": int(user_id),
            "user_name": user.name,
            "email": user.email,
            "total_orders": int(len(group)),
            "total_spent": total_spent,
            "average_order_value": total_spent / len(paid) if len(paid) else 0.0,
            "last_order_date": group["created_at"].max().isoformat(),
            "status_counts": {status: int(counts.get(status, 0)) for status in ORDER_STATUSES},
        })

    if unresolved:
        logger.warning("user_order_analysis: dropped %d user(s) that no longer exist", unresolved)
    rows.sort(key=lambda r: (-r["total_spent"], r["user_id"]))
    return {"users": rows, "unresolved_users": unresolved}


def user_activity_trends(db: Session, actor, start: datetime, end: datetime) -> list:
    """Per user, daily order count (all statuses) and spend (cancelled excluded)."""
    require_role(actor, "admin")
    frame = _order_frame(_fetch_orders(db, start, end))
    if frame.empty:
        return []

    frame["spent"] = frame["total_amount"].where(frame["status"] != "cancelled", 0.0)
    users = _resolve_users(db, frame["user_id"].unique())
    trends = []
    for user_id, group in frame.groupby("user_id"):
        user = users.get(int(user_id))
        if user is None:
            continue
        rows = _daily(group, {"orders": ("order_id", "count"), "spent": ("spent", "sum")})
        trends.append({
            "user_id": int(user_id),
            "user_name": user.name,
            "activity_trend": [
                {"date": r["date"], "orders": int(r["orders"]), "spent": float(r["spent"])}
                for r in rows
            ],
        })
    return trends


# ---------------------------------------------------------------- bundles

def get_dashboard_summary(db: Session, actor, start: datetime, end: datetime) -> dict:
    """Everything the stats report shows, in one object."""
    return {
        "revenue": revenue_summary(db, actor, start, end),
        "orders_by_status": orders_by_status(db, actor, start, end),
        "popular_items": popular_items(db, actor, start, end),
        "daily_revenue": daily_revenue_series(db, actor, start, end),
    }


def get_category_report(db: Session, actor, start: datetime, end: datetime) -> dict:
    return {
        "category_analysis": category_analysis(db, actor, start, end),
        "category_trends": category_trends(db, actor, start, end),
    }


def get_user_report(db: Session, actor, start: datetime, end: datetime) -> dict:
    analysis = user_order_analysis(db, actor, start, end)
    return {
        "user_order_analysis": analysis["users"],
        "unresolved_users": analysis["unresolved_users"],
        "user_activity_trends": user_activity_trends(db, actor, start, end),
    }
