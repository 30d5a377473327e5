"""Setlist lookup by id or setlist.fm URL."""

from fastapi import APIRouter, Depends

from ...models import Setlist
from ...pipeline import Pipeline
from ..dependencies import get_pipeline
from ..schemas import SetlistUrlRequest

router = APIRouter()


@router.get("/{setlist_id}", response_model=Setlist)
def get_setlist(setlist_id: str, pipeline: Pipeline = Depends(get_pipeline)) -> Setlist:
    return pipeline.source.get_setlist(setlist_id)


@router.post("/from-url", response_model=Setlist)
def get_setlist_from_url(body: SetlistUrlRequest, pipeline: Pipeline = Depends(get_pipeline)) -> Setlist:
    return pipeline.source.get_setlist_from_url(body.url)
