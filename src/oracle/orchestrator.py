"""Two-phase chat flow: decide and gather context, then interpret and stream.

Phase 1 (``handle_message``) never streams. It classifies the question and
either answers directly, asks one context question, or reports that the
consultant is ready for a reading. Phase 2 (``stream_interpretation``) draws or
accepts the cards, generates the reading and yields ``(event, data)`` pairs
for the transport to write as server-sent events.
"""

import asyncio
import time
from typing import AsyncIterator, Callable

import structlog

from observability import metrics

from .context_evaluator import ContextEvaluator
from .deck import CardPool, DrawnCard
from .decider import IntentClassifier
from .errors import GenerationFailure, OracleError
from .followup import FollowUpResponder
from .interpreter import Interpreter
from .models import ChatRequest, ConversationTurn, Intent, ReadingPermissions
from .pacing import FixedDelay, SectionPacer
from .sections import (
    TEASER_SECTION,
    filter_for_paywall,
    parse_sections,
    to_full_content,
    visible_text,
)
from .session_cache import AnonymousSessionCache
from .tasks import spawn_background
from .titler import TitleGenerator

logger = structlog.get_logger()

ANONYMOUS_CTA = "Para revelar tu futuro, reclama tu identidad espiritual"
PREMIUM_CTA = "Desbloquea tu futuro completo con un plan premium"
STREAM_ERROR = "Error al generar la interpretación."

# (conversation_id, user_id, question, stored_content, cards, title)
ReadingSink = Callable[[str, str, str, str, list[DrawnCard], str | None], None]


def trim_history(history: list[ConversationTurn], max_chars: int) -> list[ConversationTurn]:
    """Keep the most recent turns whose combined content fits in ``max_chars``."""
    kept: list[ConversationTurn] = []
    total = 0
    for turn in reversed(history):
        total += len(turn.content)
        if total > max_chars and kept:
            break
        kept.append(turn)
    return list(reversed(kept))


class ChatOrchestrator:
    def __init__(
        self,
        classifier: IntentClassifier,
        evaluator: ContextEvaluator,
        interpreter: Interpreter,
        followup: FollowUpResponder,
        titler: TitleGenerator | None = None,
        extractor=None,
        store=None,
        cache: AnonymousSessionCache | None = None,
        pool: CardPool | None = None,
        pacer: SectionPacer | None = None,
        reading_sink: ReadingSink | None = None,
        *,
        server_side_draw: bool = True,
        cards_per_reading: int = 3,
        title_wait_seconds: float = 5.0,
        history_max_chars: int = 24_000,
        anonymous_cta: str = ANONYMOUS_CTA,
        premium_cta: str = PREMIUM_CTA,
    ):
        self.classifier = classifier
        self.evaluator = evaluator
        self.interpreter = interpreter
        self.followup = followup
        self.titler = titler
        self.extractor = extractor
        self.store = store
        self.cache = cache if cache is not None else AnonymousSessionCache()
        self.pool = pool or CardPool()
        self.pacer = pacer or FixedDelay()
        self.reading_sink = reading_sink
        self.server_side_draw = server_side_draw
        self.cards_per_reading = cards_per_reading
        self.title_wait_seconds = title_wait_seconds
        self.history_max_chars = history_max_chars
        self.anonymous_cta = anonymous_cta
        self.premium_cta = premium_cta

    # --- Collaborators ---

    async def permissions_for(self, request: ChatRequest) -> ReadingPermissions | None:
        """Stored permissions, or None when anonymous or the lookup failed."""
        if request.is_anonymous or self.store is None:
            return None
        try:
            raw = await asyncio.to_thread(self.store.get_reading_permissions, request.user_id)
        except Exception as e:
            logger.warning(
                "permissions_lookup_failed",
                conversation_id=request.conversation_id,
                error=str(e),
            )
            return None
        if not raw:
            return ReadingPermissions()
        return ReadingPermissions(
            can_see_future=bool(raw.get("can_see_future")),
            is_premium=bool(raw.get("is_premium")),
        )

    async def future_hidden(self, request: ChatRequest) -> bool:
        if request.is_anonymous:
            return True
        permissions = await self.permissions_for(request)
        # Lookup failure: keep the future hidden
        return permissions is None or not permissions.future_visible

    def cta_message(self, request: ChatRequest, future_hidden: bool) -> str | None:
        if request.is_anonymous:
            return self.anonymous_cta
        return self.premium_cta if future_hidden else None

    async def _memory_context(self, request: ChatRequest) -> str | None:
        if request.is_anonymous or self.store is None:
            return None
        try:
            return await asyncio.to_thread(self.store.get_memory_context, request.user_id)
        except Exception as e:
            logger.warning(
                "memory_lookup_failed", conversation_id=request.conversation_id, error=str(e)
            )
            return None

    def _extract_memory(self, request: ChatRequest, reply: str) -> None:
        if self.extractor is None or request.is_anonymous:
            return
        spawn_background(
            asyncio.to_thread(
                self.extractor.extract_and_store,
                request.user_id,
                request.conversation_id,
                request.question,
                reply,
            ),
            name=f"memory:{request.conversation_id}",
        )

    # --- Phase 1 ---

    async def handle_message(self, request: ChatRequest) -> dict:
        """Decide what to do with a message. Raises OracleError on failure."""
        log = logger.bind(conversation_id=request.conversation_id)
        history = trim_history(request.history, self.history_max_chars)

        if request.answers_context_question:
            log.info("chat.context_answer")
            metrics.counter("decision_context_answer")
            return await self._ready(request, context_summary=None)

        decision = await self.classifier.classify(request.question, history)
        log.info("decider.decision", intent=decision.intent.value)
        metrics.counter(f"decision_{decision.intent.value}")

        if decision.intent is Intent.IS_INADEQUATE:
            return {"type": "message", "text": decision.canned, "role": "assistant"}

        if decision.intent is Intent.IS_FOLLOW_UP:
            text = await self.followup.respond(request.question, history, request.personal_context)
            self._extract_memory(request, text)
            return {"type": "message", "text": text, "role": "assistant"}

        evaluation = await self.evaluator.evaluate(
            request.question, history, request.personal_context
        )
        if not evaluation.proceed:
            log.info("context.question", missing_dimension=evaluation.missing_dimension.value)
            metrics.counter("context_questions")
            return {
                "type": "context_question",
                "text": evaluation.oracle_question,
                "missingDimension": evaluation.missing_dimension.value,
                "missing_dimension": evaluation.missing_dimension.value,
                "role": "assistant",
                "_isContextQuestion": True,
            }

        return await self._ready(request, context_summary=evaluation.summary)

    async def _ready(self, request: ChatRequest, context_summary: str | None) -> dict:
        memory_context = await self._memory_context(request)
        hidden = await self.future_hidden(request)
        return {
            "type": "ready_for_reading",
            "contextSummary": context_summary,
            "memoryContext": memory_context,
            "futureHidden": hidden,
            "ctaMessage": self.cta_message(request, hidden),
            "isAnonymous": request.is_anonymous,
        }

    # --- Phase 2 ---

    def _cards_for(self, request: ChatRequest) -> list[DrawnCard]:
        if request.drawn_cards:
            return list(request.drawn_cards)
        if not self.server_side_draw:
            raise GenerationFailure("no cards supplied and server-side drawing is disabled")
        cards = self.pool.draw(self.cards_per_reading)
        logger.info(
            "deck.drawn",
            conversation_id=request.conversation_id,
            cards=[c.name for c in cards],
        )
        return cards

    async def _await_title(self, task: asyncio.Task | None) -> str | None:
        if task is None:
            return None
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.title_wait_seconds)
        except asyncio.TimeoutError:
            logger.info("title.timed_out")
        except Exception as e:
            logger.warning("title.failed", error=str(e))
        return None

    async def stream_interpretation(self, request: ChatRequest) -> AsyncIterator[tuple[str, dict]]:
        """Yield the reading as ``(event, data)`` pairs, ending in ``done`` or ``error``."""
        started = time.monotonic()
        log = logger.bind(conversation_id=request.conversation_id)
        history = trim_history(request.history, self.history_max_chars)

        title_task = None
        if not history and self.titler is not None:
            title_task = spawn_background(
                self.titler.generate(request.question),
                name=f"title:{request.conversation_id}",
            )

        try:
            hidden = await self.future_hidden(request)
            cards = self._cards_for(request)
            with metrics.timer("interpretation"):
                text = await self.interpreter.interpret(
                    request.question,
                    cards,
                    personal_context=request.personal_context,
                    memory_context=request.memory_context,
                    history=history,
                    context_summary=request.context_summary,
                )
        except OracleError as e:
            log.error("stream.failed", error=str(e))
            metrics.counter("streams_failed")
            yield "error", {"error": STREAM_ERROR}
            return

        sections = parse_sections(text)
        shown = filter_for_paywall(sections, hidden)
        stored = to_full_content(sections) if sections.sectioned else text

        if request.is_anonymous and sections.sectioned and request.conversation_id:
            self.cache.append(
                request.conversation_id,
                ConversationTurn("user", request.question).to_cache_message(),
            )
            self.cache.append(
                request.conversation_id,
                ConversationTurn("assistant", stored, cards=cards).to_cache_message(),
            )
            log.info("session_cache.stored", messages=2)

        self._extract_memory(request, text)

        log.info(
            "stream.sending",
            future_hidden=hidden,
            sectioned=sections.sectioned,
            sections=len(shown.parts),
        )
        for index, (key, body) in enumerate(shown.visible()):
            if index == 0:
                metrics.observe("time_to_first_section", time.monotonic() - started)
            await self.pacer.pause(index)
            yield "section", {
                "section": key,
                "text": body,
                "isTeaser": shown.future_hidden and key == TEASER_SECTION,
            }

        yield "interpretation", {
            "text": visible_text(shown),
            "sectioned": sections.sectioned,
            "cards": [c.to_dict() for c in cards],
        }

        title = await self._await_title(title_task)
        if title:
            yield "title", {"title": title}

        if self.reading_sink is not None and not request.is_anonymous and request.conversation_id:
            spawn_background(
                asyncio.to_thread(
                    self.reading_sink,
                    request.conversation_id,
                    request.user_id,
                    request.question,
                    stored,
                    cards,
                    title,
                ),
                name=f"persist:{request.conversation_id}",
            )

        metrics.counter("streams_completed")
        yield "done", {"complete": True}
