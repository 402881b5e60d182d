"""
Configuration for the bookshelf GraphQL server
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings, overridable with BOOKSHELF_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="BOOKSHELF_")

    host: str = "0.0.0.0"
    port: int = 4000
    graphql_path: str = "/"

    # deepest field allowed below the root fields of an operation
    max_query_depth: int = 10

    debug: bool = False
    log_level: str = "info"

    @property
    def public_url(self) -> str:
        host = "localhost" if self.host in ("0.0.0.0", "::") else self.host
        return f"http://{host}:{self.port}{self.graphql_path}"


settings = Settings()
