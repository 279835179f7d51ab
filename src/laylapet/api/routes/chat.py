"""FastAPI route for chat turns."""

import re
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from laylapet.agents.assistant import ChatAssistant, get_chat_assistant
from laylapet.agents.prompts import MISSING_INPUT_REPLY, PROVIDER_ERROR_REPLY
from laylapet.logging import log_error, set_request_context
from laylapet.tools.errors import ProviderError
from laylapet.tools.shopify_client import ShopifyCatalogProvider, get_catalog_provider

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["chat"])

SHOP_DOMAIN_PATTERN = re.compile(r"^[a-z0-9][a-z0-9.-]*$")


class ChatRequest(BaseModel):
    """Incoming chat message."""

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    shop_domain: Optional[str] = Field(default=None, alias="shopDomain")
    session_id: Optional[str] = Field(default=None, alias="sessionId")


def _error(status_code: int, reply: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"reply": reply, "products": []})


def resolve_session_id(
    body: ChatRequest,
    header_session_id: Optional[str],
    shop_domain: str,
    client_host: Optional[str],
) -> str:
    """Pick the session key: body, then X-Session-ID header, then shop + client address."""
    for candidate in (body.session_id, header_session_id):
        if candidate and candidate.strip():
            return candidate.strip()
    return f"{shop_domain}:{client_host or 'unknown'}"


@router.post("/chat")
async def chat(
    body: ChatRequest,
    request: Request,
    x_session_id: Optional[str] = Header(None),
    assistant: ChatAssistant = Depends(get_chat_assistant),
    catalog_provider: ShopifyCatalogProvider = Depends(get_catalog_provider),
):
    """Answer a customer message with a reply and up to three products."""
    message = (body.message or "").strip()
    shop_domain = (body.shop_domain or "").strip().lower()

    if not message or not shop_domain or not SHOP_DOMAIN_PATTERN.match(shop_domain):
        logger.warning(
            "Rejected chat request",
            has_message=bool(message),
            shop_domain=shop_domain or None,
        )
        return _error(400, MISSING_INPUT_REPLY)

    client_host = request.client.host if request.client else None
    session_id = resolve_session_id(body, x_session_id, shop_domain, client_host)
    set_request_context(session_id=session_id)

    try:
        catalog = await catalog_provider.fetch_products(shop_domain)
        result = await assistant.handle_chat_turn(
            message, session_id, catalog, shop_domain=shop_domain
        )
    except ProviderError as e:
        log_error(
            type(e).__name__,
            str(e),
            context={"shop_domain": shop_domain, "provider": e.provider},
        )
        return _error(500, PROVIDER_ERROR_REPLY)

    return {
        "reply": result.reply,
        "products": [p.model_dump(by_alias=True) for p in result.recommended],
    }
