"""Default configuration values."""

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODEL = "claude-sonnet-4-20250514"

# Server
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001
DEFAULT_CORS_ORIGINS = ["*"]

# Per-connection outbound queue; a full queue drops the observer
DEFAULT_OBSERVER_QUEUE_SIZE = 1000

# Config file names
CONFIG_FILENAME = "swarm.jsonc"
CONFIG_JSON_FILENAME = "swarm.json"
GLOBAL_CONFIG_DIR = ".pi/swarm"

# Available models configuration
AVAILABLE_MODELS = [
    {
        "provider": "anthropic",
        "id": "claude-opus-4-5-20251101",
        "name": "Claude Opus 4.5",
        "context_window": 200000,
    },
    {
        "provider": "anthropic",
        "id": "claude-sonnet-4-20250514",
        "name": "Claude Sonnet 4",
        "context_window": 200000,
    },
    {
        "provider": "anthropic",
        "id": "claude-haiku-3-5-20241022",
        "name": "Claude Haiku 3.5",
        "context_window": 200000,
    },
    {
        "provider": "openai",
        "id": "gpt-4o",
        "name": "GPT-4o",
        "context_window": 128000,
    },
    {
        "provider": "ollama",
        "id": "llama3.2",
        "name": "Llama 3.2 (Local)",
        "context_window": 128000,
    },
]

# Model provider configurations
DEFAULT_MODEL_PROVIDERS = {
    "anthropic": {
        "name": "Anthropic",
        "base_url": "https://api.anthropic.com/v1",
        "env_key": "ANTHROPIC_API_KEY",
    },
    "openai": {
        "name": "OpenAI",
        "base_url": "https://api.openai.com/v1",
        "env_key": "OPENAI_API_KEY",
    },
    "ollama": {
        "name": "Ollama (Local)",
        "base_url": "http://localhost:11434/v1",
        "env_key": None,  # No API key needed
    },
}

# Agent session
MAX_OUTPUT_TOKENS = 64000
MAX_TOOL_OUTPUT_LENGTH = 30000
SHELL_TIMEOUT_SECONDS = 120
