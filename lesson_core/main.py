from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .alignment import AlignmentReconciler, timings_from_payload
from .dictionary import DictionaryStore
from .errors import AlignmentPayloadError, DictionaryLoadError, EmptyTimingInput
from .logging_utils import get_logger, setup_logging
from .models import (
    DictionaryEntry,
    DictionaryStats,
    ExpandRequest,
    ExtractRequest,
    ReconcileRequest,
)
from .vocabulary import ExtractionResult, VocabularyExtractor, VocabularyReport

logger = get_logger(__name__)


def get_store(request: Request) -> DictionaryStore:
    """The app's dictionary, loaded on first use."""
    store: DictionaryStore = request.app.state.store
    try:
        store.load()
    except DictionaryLoadError as e:
        logger.error(f"Dictionary unavailable: {e}")
        raise HTTPException(503, detail="Dictionary is not available")
    return store


def get_extractor(store: DictionaryStore = Depends(get_store)) -> VocabularyExtractor:
    return VocabularyExtractor(store)


def create_app(store: Optional[DictionaryStore] = None) -> FastAPI:
    app = FastAPI(title="Chinese lesson tools")
    app.state.store = store or DictionaryStore(config.CEDICT_PATH)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health(request: Request):
        store: DictionaryStore = request.app.state.store
        return {
            "ok": True,
            "data_dir": str(config.DATA_DIR),
            "dict_path": str(store.path),
            "dict_exists": store.path.exists(),
            "dictionary": store.stats().model_dump(),
        }

    @app.get("/dict/stats", response_model=DictionaryStats)
    def dict_stats(store: DictionaryStore = Depends(get_store)):
        return store.stats()

    @app.get("/dict/{headword}", response_model=DictionaryEntry)
    def dict_lookup(headword: str, store: DictionaryStore = Depends(get_store)):
        entry = store.lookup(headword)
        if entry is None:
            raise HTTPException(404, detail=f"headword not found: {headword}")
        return entry

    @app.post("/vocabulary/extract", response_model=ExtractionResult, response_model_exclude_none=True)
    def vocabulary_extract(body: ExtractRequest, extractor: VocabularyExtractor = Depends(get_extractor)):
        return extractor.extract(body.text)

    @app.post("/vocabulary/expand", response_model=VocabularyReport, response_model_exclude_none=True)
    def vocabulary_expand(body: ExpandRequest, extractor: VocabularyExtractor = Depends(get_extractor)):
        report = extractor.expand_report(body.content, body.vocabulary)
        logger.info(
            f"Expanded vocabulary {report.original_count} -> {report.expanded_count} items "
            f"({report.enhanced_count} enhanced, {report.new_items_count} new)"
        )
        return report

    # sentences keep caller nulls, so no response_model_exclude_none here
    @app.post("/alignment/reconcile")
    def alignment_reconcile(body: ReconcileRequest):
        try:
            timings = timings_from_payload(body.alignment)
            result = AlignmentReconciler(body.strategy).reconcile_content(body.content, timings)
        except (EmptyTimingInput, AlignmentPayloadError) as e:
            raise HTTPException(400, detail=str(e))
        return result.to_dict()

    return app


setup_logging(config.LOG_LEVEL)
app = create_app()
