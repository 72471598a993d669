"""
Configuration settings management
Centralized configuration using environment variables
"""
import os
from pathlib import Path
from functools import lru_cache
from dotenv import load_dotenv


class Settings:
    """Application settings loaded from environment variables"""

    # LLM configuration
    llm_base_url: str = ""
    llm_api_key: str
    llm_model: str = "gpt-4.1-mini"
    classifier_model: str = "gpt-4.1"
    embedding_model: str = "text-embedding-3-small"
    llm_timeout: float = 120.0
    llm_max_retries: int = 2
    llm_max_tokens: int = 4096

    # Knowledge store configuration
    vector_store_path: str = "./vector_store"
    chunk_size: int = 1000
    chunk_overlap: int = 200
    retrieval_top_k: int = 4

    # Pipeline configuration
    content_char_limit: int = 3000
    scraper_timeout_ms: int = 90000
    scraper_max_retries: int = 3
    fetch_concurrency: int = 1
    enrich_concurrency: int = 1

    log_level: str = "INFO"

    def __init__(self):
        """Load settings from environment variables"""
        # Load .env file from project root
        env_path = Path(__file__).parent.parent.parent / '.env'
        if env_path.exists():
            load_dotenv(env_path)
        else:
            load_dotenv()

        # LLM settings
        self.llm_base_url = os.getenv('BASE_URL', '')
        self.llm_api_key = os.getenv('OPENAI_API_KEY', '')
        self.llm_model = os.getenv('LLM_MODEL', 'gpt-4.1-mini')
        self.classifier_model = os.getenv('CLASSIFIER_MODEL', 'gpt-4.1')
        self.embedding_model = os.getenv('EMBEDDING_MODEL', 'text-embedding-3-small')
        self.llm_timeout = float(os.getenv('LLM_TIMEOUT', '120.0'))
        self.llm_max_retries = int(os.getenv('LLM_MAX_RETRIES', '2'))
        self.llm_max_tokens = int(os.getenv('LLM_MAX_TOKENS', '4096'))

        # Normalize base_url - OpenAI-compatible endpoints are served under /v1
        if self.llm_base_url:
            self.llm_base_url = self.llm_base_url.rstrip('/')
            if not self.llm_base_url.endswith('/v1'):
                self.llm_base_url = f"{self.llm_base_url}/v1"

        # Knowledge store settings
        self.vector_store_path = os.getenv('VECTOR_STORE_PATH', str(Path.cwd() / 'vector_store'))
        self.chunk_size = int(os.getenv('CHUNK_SIZE', '1000'))
        self.chunk_overlap = int(os.getenv('CHUNK_OVERLAP', '200'))
        self.retrieval_top_k = int(os.getenv('RETRIEVAL_TOP_K', '4'))

        # Pipeline settings
        self.content_char_limit = int(os.getenv('CONTENT_CHAR_LIMIT', '3000'))
        self.scraper_timeout_ms = int(os.getenv('SCRAPER_TIMEOUT_MS', '90000'))
        self.scraper_max_retries = int(os.getenv('SCRAPER_MAX_RETRIES', '3'))
        self.fetch_concurrency = max(1, int(os.getenv('FETCH_CONCURRENCY', '1')))
        self.enrich_concurrency = max(1, int(os.getenv('ENRICH_CONCURRENCY', '1')))

        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()

    def validate(self):
        """
        Validate required settings

        Raises:
            ValueError: If a required environment variable is missing
        """
        required = {
            'OPENAI_API_KEY': self.llm_api_key,
        }

        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                f"Please set them in .env file or environment variables"
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
