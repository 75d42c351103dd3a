"""Cache debug routes — inspect entry ages and drop entries by hand."""

from fastapi import APIRouter, Depends, Query

from routes.deps import get_repository, get_viewer
from services.repository import RequestRepository

router = APIRouter(dependencies=[Depends(get_viewer)])


@router.get("/cache")
async def cache_info(repository: RequestRepository = Depends(get_repository)) -> dict:
    return {
        "ttl_seconds": repository.cache.ttl_seconds,
        "size": len(repository.cache),
        "entries": repository.cache_info(),
    }


@router.delete("/cache")
async def invalidate_cache(
    key: list[str] | None = Query(None),
    repository: RequestRepository = Depends(get_repository),
) -> dict:
    """Drop the given keys (?key=requests&key=notifications), or everything."""
    repository.invalidate(key)
    return {"invalidated": key if key is not None else "all", "size": len(repository.cache)}
