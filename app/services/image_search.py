"""
Stock image search against Unsplash and Pexels.

Responses are normalized to one shape and cached in Redis. Provider
errors are logged and yield an empty result; there is no retry.
"""
from typing import Any, Dict, List, Optional

import httpx
import structlog

from app.core.config import settings
from app.core.redis import RedisClient, redis_client

logger = structlog.get_logger(__name__)

def _empty_result(page: int) -> Dict[str, Any]:
    return {"images": [], "total": 0, "total_pages": 0, "current_page": page}


def _unsplash_image(photo: Dict[str, Any]) -> Dict[str, Any]:
    urls = photo.get("urls") or {}
    user = photo.get("user") or {}
    return {
        "id": photo.get("id"),
        "url": urls.get("regular"),
        "thumbnail": urls.get("thumb"),
        "description": photo.get("description") or photo.get("alt_description"),
        "photographer": user.get("name", "Unknown"),
        "source": "unsplash",
    }


def _pexels_image(photo: Dict[str, Any]) -> Dict[str, Any]:
    src = photo.get("src") or {}
    return {
        "id": photo.get("id"),
        "url": src.get("large"),
        "thumbnail": src.get("small"),
        "description": photo.get("alt"),
        "photographer": photo.get("photographer"),
        "source": "pexels",
    }


class ImageSearchService:
    """Thin async client over the two providers."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[RedisClient] = None,
    ):
        self.client = client or httpx.AsyncClient(timeout=settings.IMAGE_API_TIMEOUT)
        self.cache = cache or redis_client

    async def close(self):
        await self.client.aclose()

    async def _get_json(self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None):
        response = await self.client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()

    async def _cached(self, key: str, fetch) -> Optional[Any]:
        """Cache-aside lookup; a fetch returning None is not cached."""
        cached = await self.cache.get(key)
        if cached is not None:
            return cached
        result = await fetch()
        if result is not None:
            await self.cache.set(key, result, expire=settings.IMAGE_CACHE_TTL)
        return result

    async def search_unsplash(self, query: str, page: int = 1, per_page: int = 20) -> Dict[str, Any]:
        async def fetch():
            try:
                body = await self._get_json(
                    f"{settings.UNSPLASH_API_URL}/search/photos",
                    params={"query": query, "page": page, "per_page": per_page},
                    headers={"Authorization": f"Client-ID {settings.UNSPLASH_ACCESS_KEY}"},
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.error("unsplash_search_failed", query=query, error=str(e))
                return None

            return {
                "images": [_unsplash_image(photo) for photo in body.get("results", [])],
                "total": body.get("total", 0),
                "total_pages": body.get("total_pages", 0),
                "current_page": page,
            }

        result = await self._cached(f"images:unsplash:{query}:{page}:{per_page}", fetch)
        return result if result is not None else _empty_result(page)

    async def search_pexels(self, query: str, page: int = 1, per_page: int = 20) -> Dict[str, Any]:
        async def fetch():
            try:
                body = await self._get_json(
                    f"{settings.PEXELS_API_URL}/search",
                    params={"query": query, "page": page, "per_page": per_page},
                    headers={"Authorization": settings.PEXELS_API_KEY},
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.error("pexels_search_failed", query=query, error=str(e))
                return None

            total = body.get("total_results", 0)
            return {
                "images": [_pexels_image(photo) for photo in body.get("photos", [])],
                "total": total,
                "total_pages": -(-total // per_page),
                "current_page": page,
            }

        result = await self._cached(f"images:pexels:{query}:{page}:{per_page}", fetch)
        return result if result is not None else _empty_result(page)

    async def random_images(self, count: int = 10) -> List[Dict[str, Any]]:
        """Random Unsplash photos; never cached."""
        try:
            photos = await self._get_json(
                f"{settings.UNSPLASH_API_URL}/photos/random",
                params={"count": count},
                headers={"Authorization": f"Client-ID {settings.UNSPLASH_ACCESS_KEY}"},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error("unsplash_random_failed", count=count, error=str(e))
            return []
        return [_unsplash_image(photo) for photo in photos or []]


image_search_service: Optional[ImageSearchService] = None


async def get_image_search_service() -> ImageSearchService:
    """Dependency returning the shared image search client."""
    global image_search_service
    if image_search_service is None:
        image_search_service = ImageSearchService()
    return image_search_service


async def close_image_search_service() -> None:
    global image_search_service
    if image_search_service is not None:
        await image_search_service.close()
        image_search_service = None
