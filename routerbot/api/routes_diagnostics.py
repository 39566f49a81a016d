import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from routerbot.config import AppConfig
from routerbot.api.deps import get_app_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["diagnostics"])

_MIN_KEY_LENGTH = 10


@router.get("/test-openai")
async def test_openai(request: Request, config: AppConfig = Depends(get_app_config)):
    """Check the OpenAI key is present and a provider handle can be built."""
    key = config.openai_api_key
    has_key = bool(key)
    key_length = len(key)

    if not has_key or key_length < _MIN_KEY_LENGTH:
        return JSONResponse(
            {
                "error": "Missing or invalid OpenAI API key",
                "hasKey": has_key,
                "keyLength": key_length,
            },
            status_code=400,
        )

    try:
        provider = request.app.state.provider_factory(config)
        await provider.close()
    except Exception as e:
        logger.error("Failed to initialize OpenAI model: %s", e)
        return JSONResponse(
            {
                "error": "Failed to initialize OpenAI model",
                "message": str(e),
                "hasKey": has_key,
                "keyLength": key_length,
            },
            status_code=500,
        )

    return {
        "success": True,
        "message": "OpenAI model initialized successfully",
        "hasKey": has_key,
        "keyLength": key_length,
    }
