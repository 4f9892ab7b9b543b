from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    debug: bool = False

    # LLM enrichment of match insights (best-effort, never affects scores)
    enrichment_enabled: bool = True
    enrichment_timeout_seconds: float = 12.0
    enrichment_concurrency: int = 5

    # External store
    database_url: str = "sqlite:///data/matching.db"

    # Empty string means the taxonomy.yaml shipped with services.matching
    taxonomy_path: str = ""

    # Pool ceiling = multiplier x tier max results, never above hard cap
    pool_ceiling_multiplier: int = 3
    pool_hard_cap: int = 150

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


settings = Settings()
