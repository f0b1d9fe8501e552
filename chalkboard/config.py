from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Groq
    groq_api_key: str = "gsk_placeholder"
    chat_model: str = "llama-3.3-70b-versatile"
    vision_model: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    tts_model: str = "playai-tts"
    tts_voice: str = "Fritz-PlayAI"

    # Step generation
    history_limit: int = 12
    board_fallback_min_chars: int = 40

    # Storage
    database_path: str = "chalkboard.db"

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Client
    server_url: str = "http://127.0.0.1:3000"
    sessions_path: str = "chalkboard_chats.json"
    request_timeout_seconds: float = 120.0

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
