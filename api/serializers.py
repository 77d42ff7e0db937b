"""ORM rows -> JSON-ready dicts."""


def _iso(moment):
    return moment.isoformat() if moment else None


def user_to_dict(user):
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "created_at": _iso(user.created_at),
    }


def menu_item_to_dict(item):
    if item is None:
        return None
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": item.price,
        "category": item.category,
        "image": item.image,
        "available": item.available,
        "created_at": _iso(item.created_at),
    }


def cart_items_to_list(lines):
    return [
        {
            "menu_item_id": line.menu_item_id,
            "quantity": line.quantity,
            "subtotal": line.subtotal,
            "menu_item": menu_item_to_dict(line.menu_item),
        }
        for line in lines
    ]


def order_to_dict(order):
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total_amount": order.total_amount,
        "created_at": _iso(order.created_at),
        "items": [
            {
                "menu_item_id": line.menu_item_id,
                "name": line.name,
                "category": line.category,
                "price": line.price,
                "quantity": line.quantity,
                "subtotal": line.subtotal,
                # Current menu entry for display; None once deleted
                "menu_item": menu_item_to_dict(line.menu_item),
            }
            for line in order.items
        ],
    }
