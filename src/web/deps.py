"""Dependency injection for FastAPI routes."""

from functools import lru_cache, partial
from pathlib import Path

from cli.config import load_config_model
from cli.config_models import OracleConfig
from cli.retry import retry_from_config
from llm import LLMProvider, create_cheap_provider, create_llm_provider
from memory import MemoryExtractor, SQLiteReadingStore
from oracle import AnonymousSessionCache, ChatOrchestrator, FixedDelay
from oracle.context_evaluator import ContextEvaluator
from oracle.decider import IntentClassifier
from oracle.followup import FollowUpResponder
from oracle.interpreter import Interpreter
from oracle.titler import TitleGenerator
from web.conversation_store import record_reading


@lru_cache
def get_config() -> OracleConfig:
    """Load shared config from ./config.yaml or ~/.oracle/config.yaml."""
    return load_config_model()


def get_db_path() -> Path:
    return get_config().paths.db_path


@lru_cache
def get_provider() -> LLMProvider:
    config = get_config()
    return create_llm_provider(
        provider=config.llm.provider, api_key=config.llm.api_key, model=config.llm.model
    )


@lru_cache
def get_cheap_provider() -> LLMProvider:
    """Cheap tier for classification, titles and memory extraction."""
    config = get_config()
    return create_cheap_provider(provider=config.llm.provider, api_key=config.llm.api_key)


@lru_cache
def get_reading_store() -> SQLiteReadingStore:
    return SQLiteReadingStore(get_db_path())


@lru_cache
def get_session_cache() -> AnonymousSessionCache:
    return AnonymousSessionCache(ttl_seconds=get_config().cache.ttl_minutes * 60)


def build_orchestrator(
    config: OracleConfig,
    provider: LLMProvider,
    cheap_provider: LLMProvider,
    store,
    cache: AnonymousSessionCache,
    db_path: Path | None = None,
    pacer=None,
) -> ChatOrchestrator:
    """Wire every stage of the reading pipeline from config."""
    retry = retry_from_config(config.retry)
    llm = config.llm
    return ChatOrchestrator(
        classifier=IntentClassifier(cheap_provider, max_tokens=llm.classifier_max_tokens, retry=retry),
        evaluator=ContextEvaluator(cheap_provider, max_tokens=llm.classifier_max_tokens, retry=retry),
        interpreter=Interpreter(provider, max_tokens=llm.max_tokens, retry=retry),
        followup=FollowUpResponder(provider, max_tokens=llm.max_tokens, retry=retry),
        titler=TitleGenerator(
            cheap_provider,
            max_tokens=llm.title_max_tokens,
            fallback_chars=config.limits.title_fallback_chars,
        ),
        extractor=MemoryExtractor(
            cheap_provider, store, reply_chars=config.limits.memory_reply_chars
        ),
        store=store,
        cache=cache,
        pacer=pacer or FixedDelay(config.streaming.section_delay_ms / 1000),
        reading_sink=partial(record_reading, db_path=db_path) if db_path else None,
        server_side_draw=config.streaming.server_side_draw,
        cards_per_reading=config.streaming.cards_per_reading,
        title_wait_seconds=config.streaming.title_wait_seconds,
        history_max_chars=config.limits.history_max_chars,
        anonymous_cta=config.paywall.anonymous_cta,
        premium_cta=config.paywall.premium_cta,
    )


@lru_cache
def get_orchestrator() -> ChatOrchestrator:
    config = get_config()
    return build_orchestrator(
        config,
        get_provider(),
        get_cheap_provider(),
        get_reading_store(),
        get_session_cache(),
        db_path=get_db_path(),
    )
