from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class SearchConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    text_model: str = "llama-3.3-70b-versatile"
    vision_model: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    timeout: float = 20.0
    max_tokens: int = 1024
    default_limit: int = 10
    upload_dir: Path = Path(os.getenv("UPLOAD_DIR", tempfile.gettempdir()))
    enabled: bool = True


DEFAULT_SEARCH_CONFIG = SearchConfig()
