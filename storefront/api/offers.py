"""
storefront/api/offers.py

Purpose: Offer banner endpoints
"""

from fastapi import APIRouter, Depends, Request, Response, status

from storefront.api.deps import require_admin
from storefront.core.config import settings
from storefront.schemas.content import OfferCreateRequest, OfferUpdateRequest
from storefront.services import offer_service
from storefront.services.cache_service import api_cache
from utils.serialization import serialize_doc

router = APIRouter()

CACHE_PREFIX = f"{settings.API_PREFIX}/offers"


@router.get("")
async def active_offers(request: Request, response: Response):
    cached = api_cache.lookup(request, response)
    if cached is not None:
        return cached

    data = serialize_doc(await offer_service.list_active_offers())
    api_cache.store(request, response, data, settings.CACHE_TTL_OFFERS)
    return data


@router.get("/admin/all", dependencies=[Depends(require_admin)])
async def all_offers():
    return serialize_doc(await offer_service.list_all_offers())


@router.post("/seed", dependencies=[Depends(require_admin)])
async def seed_offers():
    seeded = await offer_service.seed_default_offers()
    api_cache.clear(CACHE_PREFIX)
    return {"message": "Offers seeded successfully" if seeded else "Offers already exist"}


@router.get("/{offer_id}")
async def get_offer(offer_id: str):
    return serialize_doc(await offer_service.get_offer(offer_id))


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_offer(payload: OfferCreateRequest):
    offer = await offer_service.create_offer(payload.model_dump(by_alias=True))
    api_cache.clear(CACHE_PREFIX)
    return serialize_doc(offer)


@router.put("/{offer_id}", dependencies=[Depends(require_admin)])
async def update_offer(offer_id: str, payload: OfferUpdateRequest):
    offer = await offer_service.update_offer(offer_id, payload.model_dump(by_alias=True))
    api_cache.clear(CACHE_PREFIX)
    return serialize_doc(offer)


@router.delete("/{offer_id}", dependencies=[Depends(require_admin)])
async def delete_offer(offer_id: str):
    await offer_service.delete_offer(offer_id)
    api_cache.clear(CACHE_PREFIX)
    return {"message": "Offer deleted successfully"}
