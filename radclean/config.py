from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RADCLEAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Logging ---
    log_level: str = "INFO"

    # --- Brain output caps ---
    brain_ddx_limit: int = 6
    brain_recommendation_limit: int = 6

    # --- Pancreas output caps (depend on output style) ---
    pancreas_ddx_limit_detailed: int = 14
    pancreas_ddx_limit_brief: int = 8

    # --- Narrative recommendation sentence ---
    narrative_recommendations_detailed: int = 5
    narrative_recommendations_brief: int = 3

    # --- Pattern support box ---
    pattern_hint_limit: int = 4

    # --- Copy feedback (seconds the message stays visible) ---
    copy_ok_seconds: float = 1.2
    copy_failed_seconds: float = 1.5

    def pancreas_ddx_limit(self, detailed: bool) -> int:
        return self.pancreas_ddx_limit_detailed if detailed else self.pancreas_ddx_limit_brief

    def narrative_recommendation_limit(self, detailed: bool) -> int:
        return self.narrative_recommendations_detailed if detailed else self.narrative_recommendations_brief


settings = Settings()
