"""Structuring backend configuration constants."""

# =============================================================================
# Provider settings
# =============================================================================

DEFAULT_TEMPERATURE = 0.2  # Low, but not fully greedy for small local models

# Backend names (ENRICH_BACKEND)
BACKEND_OPENAI = "openai"
BACKEND_ANTHROPIC = "anthropic"
BACKEND_HUGGINGFACE = "huggingface"
BACKEND_LOCAL = "local"

DEFAULT_BACKEND = BACKEND_OPENAI

DEFAULT_MODEL_OPENAI = "gpt-4o-mini"
DEFAULT_MODEL_ANTHROPIC = "claude-3-5-haiku-20241022"
DEFAULT_MODEL_HUGGINGFACE = "meta-llama/Llama-3.2-3B-Instruct"
DEFAULT_MODEL_LOCAL = "local-model"

HUGGINGFACE_API_URL = "https://api-inference.huggingface.co/models/{model}"
DEFAULT_LOCAL_URL = "http://localhost:1234/v1/chat/completions"  # LM Studio

# =============================================================================
# Request limits
# =============================================================================

SINGLE_MAX_TOKENS = 500
BATCH_MAX_TOKENS = 3000

SINGLE_TIMEOUT_SECONDS = 60.0
BATCH_TIMEOUT_SECONDS = 120.0
