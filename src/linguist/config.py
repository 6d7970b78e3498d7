class Settings:
    PROJECT_NAME: str = "linguist"
    DEBUG: bool = False
    LOG_DIR: str = "log"
    LOG_FILE: str = "linguist.log"
    REDIS_URL: str = "redis://localhost:6379/0"
    VOCAB_DIR: str = "vocabulary"
    SESSION_COOKIE_NAME: str = "learn_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    # Latency gates for counting a correct answer as known.
    RECOGNITION_THRESHOLD_MS: int = 6000
    RECALL_THRESHOLD_MS: int = 12000
    DEFAULT_ORDER: str = "randomized"
    DEFAULT_LANG_SOURCE: str = "Source"
    DEFAULT_LANG_TARGET: str = "Target"
    STATS_HISTORY_LIMIT: int = 50
    STATS_KEY_PREFIX: str = "stats"


settings = Settings()
