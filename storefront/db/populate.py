"""
storefront/db/populate.py

Purpose: Reference resolution across collections

- Replaces ObjectId references with the referenced documents
- One batched $in query per reference path
- Missing references resolve to None
"""

from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId


def _projection(fields: Optional[Iterable[str]]) -> Optional[Dict[str, int]]:
    if not fields:
        return None
    return {field: 1 for field in fields}


async def _fetch_by_ids(collection, ids: List[ObjectId], fields) -> Dict[ObjectId, Dict[str, Any]]:
    if not ids:
        return {}
    cursor = collection.find({"_id": {"$in": ids}}, _projection(fields))
    return {doc["_id"]: doc async for doc in cursor}


async def populate(docs: List[Dict[str, Any]], field: str, collection, fields=None) -> List[Dict[str, Any]]:
    """
    Resolves a top-level reference field in place, e.g. ``order.user``.
    """
    ids = list({doc[field] for doc in docs if isinstance(doc.get(field), ObjectId)})
    found = await _fetch_by_ids(collection, ids, fields)

    for doc in docs:
        ref = doc.get(field)
        if isinstance(ref, ObjectId):
            doc[field] = found.get(ref)
    return docs


async def populate_list(docs: List[Dict[str, Any]], field: str, collection, fields=None) -> List[Dict[str, Any]]:
    """
    Resolves a list of references, e.g. ``wishlist.products``. Dangling
    references are dropped from the list.
    """
    ids = list({ref for doc in docs for ref in doc.get(field) or [] if isinstance(ref, ObjectId)})
    found = await _fetch_by_ids(collection, ids, fields)

    for doc in docs:
        doc[field] = [found[ref] for ref in doc.get(field) or [] if ref in found]
    return docs


async def populate_items(docs: List[Dict[str, Any]], collection, fields=None, items_key: str = "items", ref_key: str = "product") -> List[Dict[str, Any]]:
    """
    Resolves references embedded in line items, e.g. ``cart.items.product``.
    """
    ids = list({
        item.get(ref_key)
        for doc in docs
        for item in doc.get(items_key) or []
        if isinstance(item.get(ref_key), ObjectId)
    })
    found = await _fetch_by_ids(collection, ids, fields)

    for doc in docs:
        for item in doc.get(items_key) or []:
            ref = item.get(ref_key)
            if isinstance(ref, ObjectId):
                item[ref_key] = found.get(ref)
    return docs
