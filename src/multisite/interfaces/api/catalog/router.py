"""Catalog API endpoints (sites, browse, search, load, links)."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from multisite.domain.entities import DetailRecord, ListingRecord
from multisite.domain.exceptions import SiteNotFoundError, SiteRegistryUnavailableError
from multisite.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["catalog"])


class LinksRequest(BaseModel):
    """Playback payload as handed out by ``/load``."""

    data: str | None = None


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


def _domain_error(exc: Exception) -> JSONResponse:
    if isinstance(exc, SiteNotFoundError):
        return _error(404, f"unknown site: {exc}")
    return _error(503, "site registry unavailable")


def _listing(record: ListingRecord) -> dict[str, Any]:
    return jsonable_encoder(record)


def _detail(record: DetailRecord) -> dict[str, Any]:
    payload = jsonable_encoder(record)
    if record.is_movie:
        payload["data"] = record.link_payload
    else:
        for episode, encoded in zip(record.episodes, payload["episodes"]):
            encoded["data"] = episode.link_payload
    return payload


@router.get("/sites")
async def list_sites(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        sites = await state.catalog_uc.sites()
    except SiteRegistryUnavailableError as exc:
        return _domain_error(exc)
    return JSONResponse(content={"sites": jsonable_encoder(sites)})


@router.get("/sites/{site}/sections")
async def list_sections(site: str, request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        sections = await state.catalog_uc.sections(site)
    except (SiteNotFoundError, SiteRegistryUnavailableError) as exc:
        return _domain_error(exc)
    return JSONResponse(content={"sections": jsonable_encoder(sections)})


@router.get("/sites/{site}/browse")
async def browse(
    site: str,
    request: Request,
    section: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        home = await state.catalog_uc.browse(site, section, page)
    except (SiteNotFoundError, SiteRegistryUnavailableError) as exc:
        return _domain_error(exc)
    return JSONResponse(
        content={
            "name": home.name,
            "has_next": home.has_next,
            "items": [_listing(item) for item in home.items],
        }
    )


@router.get("/search")
async def search(
    request: Request,
    q: str = Query(min_length=1),
    site: str | None = Query(default=None),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        results = await state.catalog_uc.search(q, site=site)
    except (SiteNotFoundError, SiteRegistryUnavailableError) as exc:
        return _domain_error(exc)
    log.debug("api_search", query=q, site=site, results=len(results))
    return JSONResponse(content={"results": [_listing(r) for r in results]})


@router.get("/sites/{site}/load")
async def load(
    site: str,
    request: Request,
    url: str = Query(min_length=1),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        record = await state.catalog_uc.load(site, url)
    except (SiteNotFoundError, SiteRegistryUnavailableError) as exc:
        return _domain_error(exc)
    if record is None:
        return _error(404, "could not load")
    return JSONResponse(content=_detail(record))


@router.post("/sites/{site}/links")
async def links(site: str, body: LinksRequest, request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        resolved = await state.catalog_uc.resolve(site, body.data)
    except (SiteNotFoundError, SiteRegistryUnavailableError) as exc:
        return _domain_error(exc)
    return JSONResponse(
        content={
            "found": resolved.found,
            "links": jsonable_encoder(resolved.links),
            "subtitles": jsonable_encoder(resolved.subtitles),
        }
    )
