from pathlib import Path
from typing import Optional, List
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database Configuration
    neo4j_uri: str = Field(
        default="bolt://localhost:7687",
        validation_alias=AliasChoices("NEO4J_URI", "REACT_APP_NEO4J_URI", "neo4j_uri"),
    )
    neo4j_username: str = Field(
        default="neo4j",
        validation_alias=AliasChoices("NEO4J_USERNAME", "REACT_APP_NEO4J_USERNAME", "neo4j_username"),
    )
    neo4j_password: str = Field(
        default="neo4j",
        validation_alias=AliasChoices("NEO4J_PASSWORD", "REACT_APP_NEO4J_PASSWORD", "neo4j_password"),
    )
    neo4j_database: Optional[str] = Field(default=None)
    neo4j_connection_timeout: float = Field(default=30.0)

    # Graph Backend Configuration
    graph_backend: str = Field(default="neo4j")
    json_graph_path: str = Field(default="graph_data.json")

    # Source Tree Configuration
    project_root: str = Field(default=".")
    source_dir: str = Field(default="src")
    supported_extensions: str = Field(default=".js,.jsx,.ts,.tsx")
    max_workers: int = Field(default=4)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/app.log")

    @property
    def supported_extensions_list(self) -> List[str]:
        """Get supported extensions as a list."""
        return [ext.strip() for ext in self.supported_extensions.split(",") if ext.strip()]

    @property
    def project_root_path(self) -> Path:
        return Path(self.project_root).resolve()

    @property
    def source_root_path(self) -> Path:
        """Absolute directory the walker starts from."""
        return (self.project_root_path / self.source_dir).resolve()

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        return Path(self.log_file).parent

    def ensure_directories(self):
        """Ensure necessary directories exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_directories()
