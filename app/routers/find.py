from __future__ import annotations

from fastapi import APIRouter, HTTPException  # type: ignore

from app.services import finder
from app.services.modalities import normalize_lang

router = APIRouter(prefix="/api/find")


def _filters(body: dict) -> finder.SearchFilters:
    try:
        return finder.SearchFilters.from_dict(body)
    except (TypeError, ValueError) as exc:
        raise HTTPException(400, detail=f"Bad Request: {exc}")


@router.get("/options")
def options():
    return {
        "modalities": list(finder.MODALITY_OPTIONS),
        "specialties": list(finder.SPECIALTY_OPTIONS),
        "languages": list(finder.LANGUAGE_OPTIONS),
        "directories": [domain for domain, _, _ in finder.DIRECTORIES],
    }


@router.post("/search")
def search(body: dict):
    filters = _filters(body)
    lang = normalize_lang(body.get("lang"))
    return {
        "terms": finder.build_terms(filters),
        "results": finder.directory_searches(filters, lang),
    }


@router.post("/outreach")
def outreach(body: dict):
    filters = _filters(body)
    return {"text": finder.outreach_email(filters, normalize_lang(body.get("lang")))}
