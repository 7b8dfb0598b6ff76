import logging
from typing import Any, Dict, List, Optional

# LangChain Imports
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage, SystemMessage

from neuraladapt import config
from neuraladapt.exceptions import LLMServiceError

logger = logging.getLogger(__name__)

# If LLM_MODEL is set in env, it overrides everything.
DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "openrouter": "openai/gpt-4o-mini",
    "ollama": "llama3.1",
}

# Base URLs for paid providers
PROVIDER_URLS = {
    "openrouter": "https://openrouter.ai/api/v1",
    "openai": None  # Uses default OpenAI URL
}


def get_model_name() -> str:
    return config.LLM_MODEL or DEFAULT_MODELS.get(config.LLM_PROVIDER, DEFAULT_MODELS["openai"])


def get_llm(temperature: float = 0.2, max_tokens: int = 16000, response_format: Optional[Dict[str, Any]] = None):
    """
    Factory function to get a configured LangChain Chat Model instance.
    Supports: OpenAI, OpenRouter, Ollama (Local)

    response_format is an OpenAI-style {"type": "json_schema", ...} block;
    Ollama receives the bare schema as its `format`.
    """
    provider = config.LLM_PROVIDER
    model_name = get_model_name()

    if provider == "ollama":
        format_val = ""
        if response_format:
            format_val = response_format.get("json_schema", {}).get("schema") or "json"
        return ChatOllama(
            base_url=config.OLLAMA_URL,
            model=model_name,
            temperature=temperature,
            num_predict=max_tokens,
            format=format_val,
        )

    if provider not in PROVIDER_URLS:
        raise LLMServiceError(f"Unknown LLM provider '{provider}'. Use openai, openrouter or ollama.")

    if not config.LLM_API_KEY:
        raise LLMServiceError(
            "LLM_API_KEY is not configured. Set it (or OPENAI_API_KEY) in your .env file before invoking AI workloads."
        )

    model_kwargs = {}
    if response_format:
        model_kwargs["response_format"] = response_format

    return ChatOpenAI(
        model=model_name,
        api_key=config.LLM_API_KEY,
        base_url=PROVIDER_URLS.get(provider),
        temperature=temperature,
        max_tokens=max_tokens,
        model_kwargs=model_kwargs,
        timeout=config.LLM_TIMEOUT_SECONDS,
    )


def _tracing_callbacks() -> List[Any]:
    """Langfuse handler for LangChain runs, only when credentials are configured."""
    if not config.LANGFUSE_ENABLED:
        return []
    from langfuse.langchain import CallbackHandler
    return [CallbackHandler()]


def _log_token_usage(response) -> None:
    metadata = getattr(response, "response_metadata", None) or {}
    if not metadata:
        return

    # Ollama returns tokens directly in metadata, not in nested 'usage'
    input_tokens = metadata.get("prompt_eval_count") or 0
    output_tokens = metadata.get("eval_count") or 0

    # OpenAI-compatible providers nest them under token_usage
    if input_tokens == 0 and output_tokens == 0:
        usage = metadata.get("token_usage") or metadata.get("usage") or {}
        input_tokens = usage.get("prompt_tokens") or usage.get("input_tokens") or 0
        output_tokens = usage.get("completion_tokens") or usage.get("output_tokens") or 0

    logger.info(f"[LLM Stats] Input: {input_tokens}, Output: {output_tokens}, Total: {input_tokens + output_tokens}")


def call_llm_structured(
    system_prompt: str,
    user_prompt: str,
    response_format: Dict[str, Any],
    temperature: Optional[float] = None,
    max_tokens: int = 16000
) -> str:
    """
    Executes a schema-constrained request and returns the raw JSON text.
    Raises LLMServiceError on provider failure or empty output; parsing and
    validation are left to the caller.
    """
    temperature = config.LLM_TEMPERATURE if temperature is None else temperature
    logger.info(f"[LLM Service] Calling Model (JSON schema): {get_model_name()}")

    llm = get_llm(temperature=temperature, max_tokens=max_tokens, response_format=response_format)
    messages = [
        SystemMessage(content=system_prompt),
        HumanMessage(content=user_prompt)
    ]

    try:
        response = llm.invoke(messages, config={"callbacks": _tracing_callbacks()})
    except Exception as e:
        logger.error(f"[LLM Service] Structured call failed: {e}")
        raise LLMServiceError(f"LLM request failed: {e}") from e

    content = response.content
    if isinstance(content, list):
        # Some providers return content blocks
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in content
        )

    if not content or not content.strip():
        raise LLMServiceError("LLM response did not contain JSON output")

    _log_token_usage(response)
    return content
