"""LLM Configuration entity for GitFolio.

Defines the configuration for the text-generation provider used to analyze
repositories. Gemini is called directly over REST; Claude, Ollama and
Bedrock are reached through LiteLLM.
"""

from dataclasses import dataclass, field

from gitfolio.errors import ConfigError

# Valid LLM providers
VALID_PROVIDERS = frozenset({"gemini", "claude", "ollama", "bedrock"})

# Providers that need an API key on every request
KEYED_PROVIDERS = frozenset({"gemini", "claude"})

DEFAULT_API_BASES = {
    "gemini": "https://generativelanguage.googleapis.com/v1",
    "ollama": "http://localhost:11434",
}

DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash",
    "claude": "claude-3-5-haiku-20241022",
    "ollama": "llama3.2",
    "bedrock": "anthropic.claude-3-haiku-20240307-v1:0",
}


@dataclass
class LLMConfig:
    """Configuration for the text-generation provider.

    Attributes:
        provider: LLM provider (gemini, claude, ollama, bedrock)
        model: Model identifier (e.g., "gemini-2.0-flash")
        api_key: API key (may also be supplied per batch run)
        api_base: API base URL (provider default when omitted)
        temperature: Sampling temperature
        top_k: Top-k sampling cutoff
        top_p: Nucleus sampling cutoff
        max_tokens: Maximum response tokens
        timeout: Request timeout in seconds
    """

    provider: str = "gemini"
    model: str = ""
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = field(default=0.2)
    top_k: int = field(default=40)
    top_p: float = field(default=0.95)
    max_tokens: int = field(default=1024)
    timeout: int = field(default=60)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.provider = (self.provider or "").lower().strip()

        if self.provider not in VALID_PROVIDERS:
            raise ConfigError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        self.model = (self.model or "").strip() or DEFAULT_MODELS[self.provider]

        if not self.api_base:
            self.api_base = DEFAULT_API_BASES.get(self.provider)

        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigError(f"temperature must be between 0 and 2. Got: {self.temperature}")

        if self.top_k <= 0:
            raise ConfigError(f"top_k must be positive. Got: {self.top_k}")

        if not 0.0 < self.top_p <= 1.0:
            raise ConfigError(f"top_p must be in (0, 1]. Got: {self.top_p}")

        if self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive. Got: {self.timeout}")

    @property
    def requires_api_key(self) -> bool:
        """Return True if the provider rejects unauthenticated requests."""
        return self.provider in KEYED_PROVIDERS

    def validate(self) -> list[str]:
        """Validate configuration and return warnings.

        Returns:
            List of warning messages (empty if no warnings)
        """
        warnings: list[str] = []

        if self.max_tokens < 256:
            warnings.append(
                f"max_tokens is set to {self.max_tokens}, which may truncate responses"
            )

        if self.requires_api_key and not self.api_key:
            warnings.append(f"No API key configured for {self.provider}")

        if self.api_base and not self.api_base.startswith(("http://", "https://")):
            warnings.append(
                f"api_base '{self.api_base}' does not start with http:// or https://"
            )

        return warnings

    def to_dict(self) -> dict[str, str | int | float | None]:
        """Convert to dictionary for serialization.

        The API key is masked.
        """
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": "***" if self.api_key else None,
            "api_base": self.api_base,
            "temperature": self.temperature,
            "top_k": self.top_k,
            "top_p": self.top_p,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LLMConfig":
        """Create LLMConfig from dictionary.

        Args:
            data: Dictionary with configuration values

        Returns:
            LLMConfig instance
        """
        try:
            return cls(
                provider=str(data.get("provider") or "gemini"),
                model=str(data.get("model") or ""),
                api_key=data.get("api_key") or None,
                api_base=data.get("api_base") or None,
                temperature=float(data.get("temperature", 0.2)),
                top_k=int(data.get("top_k", 40)),
                top_p=float(data.get("top_p", 0.95)),
                max_tokens=int(data.get("max_tokens", 1024)),
                timeout=int(data.get("timeout", 60)),
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigError(f"Invalid llm configuration: {e}") from e

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM format."""
        if self.provider == "ollama":
            return f"ollama/{self.model}"
        elif self.provider == "bedrock":
            return f"bedrock/{self.model}"
        else:
            return f"anthropic/{self.model}"
