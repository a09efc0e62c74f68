"""HTTP presentation layer over the clipboard history."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from pydantic import ValidationError

from cliphistory.api.schemas import ActionRequest, ActionResult, Entry, Selection
from cliphistory.database import Store
from cliphistory.exceptions import StoreError
from cliphistory.models import Action, action_for
from cliphistory.services import ActionDispatcher, SelectionPolicy

logger = logging.getLogger(__name__)


def create_app(store: Store, policy: SelectionPolicy, dispatcher: ActionDispatcher) -> FastAPI:
    app = FastAPI(title="cliphistory")

    def _apply(action: Action) -> Dict[str, Any]:
        ok = dispatcher.dispatch(action)
        try:
            entry = store.get(action.entry_id)
        except StoreError as e:
            logger.error(f"Failed to reload entry {action.entry_id}: {e}")
            entry = None
        result = ActionResult(ok=ok, entry=Entry.from_entry(entry) if entry else None)
        return result.model_dump(mode="json")

    @app.get("/")
    def root():
        return "running"

    @app.get("/health")
    def health():
        try:
            entries = store.count()
        except StoreError as e:
            return {"status": "degraded", "store": type(store).__name__, "error": str(e)}
        return {"status": "ok", "store": type(store).__name__, "entries": entries}

    @app.get("/entries/recent")
    def recent(limit: Optional[int] = None) -> List[Entry]:
        return [Entry.from_entry(e) for e in policy.recent(limit)]

    @app.get("/entries/favourites")
    def favourites() -> List[Entry]:
        return [Entry.from_entry(e) for e in policy.favourites()]

    @app.post("/entries/{entry_id}/select")
    async def select(entry_id: str, request: Request):
        try:
            payload = await request.json()
            selection = Selection.model_validate(payload)
        except ValidationError as e:
            return {"ok": False, "error": str(e)}
        except ValueError:
            return {"ok": False, "error": "request body must be JSON"}

        return _apply(action_for(entry_id, selection.modifierPressed, selection.sourceList))

    @app.post("/actions")
    async def actions(request: Request):
        try:
            payload = await request.json()
            model = ActionRequest.model_validate(payload)
        except ValidationError as e:
            return {"ok": False, "error": str(e)}
        except ValueError:
            return {"ok": False, "error": "request body must be JSON"}

        return _apply(model.to_action())

    return app
