"""Configuration management for the code agent backend."""

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables
load_dotenv()


class Config(BaseSettings):
    """Main configuration with all settings flattened."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    # LLM Configuration
    llm_provider: str = Field(default="anthropic", alias="LLM_PROVIDER")  # anthropic, openai or azure
    model_name: str = Field(default="claude-sonnet-4-5-20250929", alias="MODEL_NAME")
    max_tokens: int = Field(default=8192, alias="MAX_TOKENS")
    temperature: float = Field(default=0.1, alias="TEMPERATURE")
    summary_temperature: float = Field(default=0.5, alias="SUMMARY_TEMPERATURE")

    # Anthropic Configuration
    api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")

    # OpenAI Configuration
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")

    # Azure OpenAI Configuration
    azure_openai_api_key: str = Field(default="", alias="AZURE_OPENAI_API_KEY")
    azure_openai_endpoint: str = Field(default="", alias="AZURE_OPENAI_ENDPOINT")
    azure_openai_deployment: str = Field(default="", alias="AZURE_OPENAI_DEPLOYMENT")
    azure_api_version: str = Field(default="2024-02-15-preview", alias="AZURE_API_VERSION")

    # Sandbox Configuration
    sandbox_template: str = Field(default="codeagent-nextjs:latest", alias="SANDBOX_TEMPLATE")
    sandbox_timeout: int = Field(default=60 * 30, alias="SANDBOX_TIMEOUT")
    sandbox_port: int = Field(default=3000, alias="SANDBOX_PORT")
    sandbox_public_host: str = Field(default="localhost", alias="SANDBOX_PUBLIC_HOST")
    sandbox_workdir: str = Field(default="/home/user", alias="SANDBOX_WORKDIR")
    sandbox_memory_limit: Optional[str] = Field(default="2g", alias="SANDBOX_MEMORY_LIMIT")

    # Agent Configuration
    max_iterations: int = Field(default=15, alias="MAX_ITERATIONS")
    previous_messages_limit: int = Field(default=5, alias="PREVIOUS_MESSAGES_LIMIT")

    # Security Configuration
    enable_command_validation: bool = Field(
        default=True, alias="ENABLE_COMMAND_VALIDATION"
    )

    # Persistence Configuration
    database_url: str = Field(default="sqlite:///codeagent.db", alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # General Configuration
    debug: bool = Field(default=False, alias="DEBUG")


# Global configuration instance
config = Config()
