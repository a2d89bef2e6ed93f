"""LLM-powered extraction of durable facts from a reading exchange."""

import structlog

from llm import DETERMINISTIC
from oracle.generation import parse_json_object

from .models import MemoryCategory, MemoryEntry, MemoryLayer, default_ttl

logger = structlog.get_logger()

_EXTRACTION_SYSTEM = """Eres un agente de extracción de memoria silencioso. Analizas un intercambio entre un consultante y un oráculo de tarot y extraes SOLO información explícitamente declarada por el consultante.

Reglas estrictas:
1. SOLO hechos EXPLÍCITAMENTE declarados por el consultante. Nunca inferencias.
2. No extraigas estados emocionales momentáneos ("hoy estoy cansado").
3. No extraigas información sensible innecesaria (datos médicos, cuentas, contraseñas).
4. No extraigas nada que haya dicho el oráculo.
5. Si no hay nada nuevo relevante, devuelve una lista vacía.
6. Cada entrada lleva una categoría, una clave descriptiva en snake_case y el valor como frase.
7. Sé conservador: mejor extraer menos que extraer información dudosa.

Categorías válidas:
- recurring_theme: temas de la consulta ("inseguridad laboral", "búsqueda de pareja")
- life_event: eventos de vida ("se divorció recientemente", "cambió de trabajo")
- relationship: personas por nombre o rol ("pareja se llama Carlos", "tiene una hija")
- preference: preferencias sobre las lecturas ("prefiere consejos directos")
- identity: datos identitarios explícitos ("es artista", "vive en Barcelona")

Capas:
- identity: datos permanentes. ttl_days: null.
- emotional: situaciones actuales que pueden evolucionar. ttl_days: 30.

Formato de respuesta (JSON):
{"entries": [
  {"category": "relationship", "key": "pareja_nombre", "value": "Su pareja se llama María",
   "confidence": 0.95, "layer": "identity", "ttl_days": null}
]}

Si no hay nada relevante: {"entries": []}"""

VALID_CATEGORIES = {c.value for c in MemoryCategory}
VALID_LAYERS = {layer.value for layer in MemoryLayer}


class MemoryExtractor:
    """Extracts memory entries after a reading and upserts them into the store.

    Runs in the background for authenticated users only. Never raises.
    """

    def __init__(self, provider, store, reply_chars: int = 500, max_tokens: int = 800):
        self._provider = provider
        self._store = store
        self.reply_chars = reply_chars
        self.max_tokens = max_tokens

    def extract(self, question: str, interpretation: str) -> list[MemoryEntry]:
        prompt = (
            f'Mensaje del consultante: "{question}"\n\n'
            f'Respuesta del oráculo (resumen): "{interpretation[: self.reply_chars]}"'
        )
        response = self._provider.generate(
            messages=[{"role": "user", "content": prompt}],
            system=_EXTRACTION_SYSTEM,
            max_tokens=self.max_tokens,
            temperature=DETERMINISTIC,
            json_mode=True,
        )
        return self._parse_response(response)

    def extract_and_store(
        self,
        user_id: str | None,
        conversation_id: str | None,
        question: str,
        interpretation: str,
    ) -> int:
        """Extract and persist. Returns the number of entries saved."""
        if not user_id or user_id == "anonymous":
            return 0
        try:
            entries = self.extract(question, interpretation)
            for entry in entries:
                self._store.save_memory_entry(user_id, entry, conversation_id)
        except Exception as e:
            logger.warning(
                "memory_extraction_failed", conversation_id=conversation_id, error=str(e)
            )
            return 0

        logger.info("memory_extracted", conversation_id=conversation_id, entries=len(entries))
        return len(entries)

    def _parse_response(self, response: str) -> list[MemoryEntry]:
        """Parse the JSON reply into entries, dropping anything malformed."""
        try:
            payload = parse_json_object(response)
        except ValueError:
            logger.warning("memory_parse_failed", response=(response or "")[:200])
            return []

        items = payload.get("entries")
        if not isinstance(items, list):
            return []

        entries = []
        for item in items:
            if not isinstance(item, dict):
                continue
            category = str(item.get("category") or "").strip()
            key = str(item.get("key") or "").strip()
            value = str(item.get("value") or "").strip()
            layer = str(item.get("layer") or MemoryLayer.EMOTIONAL.value).strip()
            if not key or not value or category not in VALID_CATEGORIES or layer not in VALID_LAYERS:
                continue

            confidence = item.get("confidence")
            if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
                confidence = 1.0
            ttl_days = item.get("ttl_days")
            if layer == MemoryLayer.IDENTITY.value:
                ttl_days = None
            elif not isinstance(ttl_days, int) or isinstance(ttl_days, bool) or ttl_days <= 0:
                ttl_days = default_ttl(MemoryLayer(layer))

            entries.append(
                MemoryEntry(
                    category=MemoryCategory(category),
                    key=key,
                    value=value,
                    confidence=confidence,
                    layer=MemoryLayer(layer),
                    ttl_days=ttl_days,
                )
            )
        return entries
