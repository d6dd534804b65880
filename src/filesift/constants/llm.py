"""LLM backend configuration.

Default parameters for backend calls. These can be overridden through the
[llm] config section.
"""

# =============================================================================
# Provider Defaults
# =============================================================================
# Ollama on localhost is the default so nothing leaves the machine unless a
# cloud provider is configured explicitly.

DEFAULT_PROVIDER = "ollama"
DEFAULT_MODEL = "wizardlm2:7b"
DEFAULT_ENDPOINT = "http://localhost:11434"

# =============================================================================
# Generation Defaults
# =============================================================================
# Analysis wants focused, repeatable answers, hence the low temperature.
# REQUEST_TIMEOUT (seconds) is enforced by the transport layer per call.

DEFAULT_TEMPERATURE = 0.1
MAX_TOKENS = 8192
REQUEST_TIMEOUT = 120
