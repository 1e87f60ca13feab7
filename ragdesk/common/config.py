"""
Configuration Management for ragdesk

Loads configuration from ~/.ragdesk/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger("ragdesk.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".ragdesk"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_QUESTION = "Summarize the document"


@dataclass
class LLMConfig:
    """Language model provider configuration"""
    provider: str = "ollama"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash-exp"
    max_tokens: int = 1024
    timeout: float = 60.0


@dataclass
class TrackerConfig:
    """Jira tracker configuration"""
    base_url: str = ""
    email: str = ""
    api_token: str = ""
    timeout: float = 30.0
    max_results: int = 100


@dataclass
class EmbeddingConfig:
    """Embedding model configuration (fastembed, on-device)"""
    model: str = "sentence-transformers/all-MiniLM-L6-v2"


@dataclass
class DocumentConfig:
    """Document ingestion and retrieval configuration"""
    default_pdf_path: Optional[str] = None
    chunk_size: int = 800
    chunk_overlap: int = 0
    min_chunk_chars: int = 350
    topk: int = 4


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class RagdeskConfig:
    """Main ragdesk configuration"""
    llm: LLMConfig = field(default_factory=LLMConfig)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    documents: DocumentConfig = field(default_factory=DocumentConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    _env_sourced_keys: set = field(default_factory=set, repr=False)


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    defaults = LLMConfig()
    return LLMConfig(
        provider=llm_data.get("provider", defaults.provider),
        ollama_base_url=llm_data.get("ollama_base_url", defaults.ollama_base_url),
        ollama_model=llm_data.get("ollama_model", defaults.ollama_model),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", defaults.anthropic_model),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", defaults.openai_model),
        google_api_key=llm_data.get("google_api_key", ""),
        google_model=llm_data.get("google_model", defaults.google_model),
        max_tokens=llm_data.get("max_tokens", defaults.max_tokens),
        timeout=llm_data.get("timeout", defaults.timeout),
    )


def _parse_tracker_config(data: dict) -> TrackerConfig:
    """Parse tracker section from config dict"""
    tracker_data = data.get("tracker", {})
    return TrackerConfig(
        base_url=tracker_data.get("base_url", ""),
        email=tracker_data.get("email", ""),
        api_token=tracker_data.get("api_token", ""),
        timeout=tracker_data.get("timeout", 30.0),
        max_results=tracker_data.get("max_results", 100),
    )


def _parse_embedding_config(data: dict) -> EmbeddingConfig:
    """Parse embedding section from config dict"""
    embedding_data = data.get("embedding", {})
    return EmbeddingConfig(
        model=embedding_data.get("model", EmbeddingConfig.model),
    )


def _parse_document_config(data: dict) -> DocumentConfig:
    """Parse documents section from config dict"""
    doc_data = data.get("documents", {})
    return DocumentConfig(
        default_pdf_path=doc_data.get("default_pdf_path"),
        chunk_size=doc_data.get("chunk_size", 800),
        chunk_overlap=doc_data.get("chunk_overlap", 0),
        min_chunk_chars=doc_data.get("min_chunk_chars", 350),
        topk=doc_data.get("topk", 4),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=server_data.get("port", 8080),
    )


def _env_int(name: str, current: int) -> int:
    """Integer env override; a non-integer value is logged and ignored"""
    raw = os.getenv(name)
    if not raw:
        return current
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return current


def load_config() -> RagdeskConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (a .env file in the working directory is loaded first)
    2. Config file (~/.ragdesk/config.json)
    3. Default values
    """
    load_dotenv()
    config = RagdeskConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            sections = (
                _parse_llm_config(data),
                _parse_tracker_config(data),
                _parse_embedding_config(data),
                _parse_document_config(data),
                _parse_server_config(data),
            )
            config.llm, config.tracker, config.embedding, config.documents, config.server = sections
        except (json.JSONDecodeError, IOError, AttributeError, TypeError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # LLM env var overrides (track env-sourced keys so secrets are not saved)
    _env_llm_map = {
        "RAGDESK_LLM_PROVIDER": "provider",
        "OLLAMA_BASE_URL": "ollama_base_url",
        "OLLAMA_MODEL": "ollama_model",
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "GOOGLE_MODEL": "google_model",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)
            config._env_sourced_keys.add(attr)

    _env_tracker_map = {
        "JIRA_BASE_URL": "base_url",
        "JIRA_EMAIL": "email",
        "JIRA_API_TOKEN": "api_token",
    }
    for env_var, attr in _env_tracker_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.tracker, attr, val)
            config._env_sourced_keys.add(f"tracker.{attr}")

    if os.getenv("EMBEDDING_MODEL"):
        config.embedding.model = os.getenv("EMBEDDING_MODEL")

    if os.getenv("RAGDESK_DEFAULT_PDF"):
        config.documents.default_pdf_path = os.getenv("RAGDESK_DEFAULT_PDF")
    config.documents.topk = _env_int("RAGDESK_TOPK", config.documents.topk)

    if os.getenv("RAGDESK_HOST"):
        config.server.host = os.getenv("RAGDESK_HOST")
    config.server.port = _env_int("RAGDESK_PORT", config.server.port)

    return config


def save_config(config: RagdeskConfig) -> None:
    """Save configuration to file.

    Secrets that were sourced from environment variables are written
    as empty strings so they are not persisted to disk.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    env_sourced = getattr(config, "_env_sourced_keys", set())

    llm_section = {
        "provider": config.llm.provider,
        "ollama_base_url": config.llm.ollama_base_url,
        "ollama_model": config.llm.ollama_model,
        "anthropic_api_key": config.llm.anthropic_api_key,
        "anthropic_model": config.llm.anthropic_model,
        "openai_api_key": config.llm.openai_api_key,
        "openai_model": config.llm.openai_model,
        "google_api_key": config.llm.google_api_key,
        "google_model": config.llm.google_model,
        "max_tokens": config.llm.max_tokens,
        "timeout": config.llm.timeout,
    }
    for key in ("anthropic_api_key", "openai_api_key", "google_api_key"):
        if key in env_sourced:
            llm_section[key] = ""

    tracker_section = {
        "base_url": config.tracker.base_url,
        "email": config.tracker.email,
        "api_token": config.tracker.api_token,
        "timeout": config.tracker.timeout,
        "max_results": config.tracker.max_results,
    }
    if "tracker.api_token" in env_sourced:
        tracker_section["api_token"] = ""

    data = {
        "llm": llm_section,
        "tracker": tracker_section,
        "embedding": {
            "model": config.embedding.model,
        },
        "documents": {
            "default_pdf_path": config.documents.default_pdf_path,
            "chunk_size": config.documents.chunk_size,
            "chunk_overlap": config.documents.chunk_overlap,
            "min_chunk_chars": config.documents.min_chunk_chars,
            "topk": config.documents.topk,
        },
        "server": {
            "host": config.server.host,
            "port": config.server.port,
        },
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)
