"""Item lookups used when pricing orders."""

from .models import Item


def resolve_items(owner, item_ids):
    """Return ``{item_id: Item}`` for the owner's active items.

    Ids that are unknown, inactive or owned by someone else are simply
    absent from the result; callers compare against what they asked for.
    """
    wanted = {int(i) for i in item_ids}
    if not wanted:
        return {}
    items = Item.objects.filter(owner=owner, is_active=True, id__in=wanted).only('id', 'name', 'price')
    return {item.id: item for item in items}
