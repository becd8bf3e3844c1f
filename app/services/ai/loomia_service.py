# app/services/ai/loomia_service.py
"""Loomia, the platform assistant, backed by OpenAI chat completions"""
from openai import OpenAI
from typing import Dict, List, Optional
import logging

from app.config.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

LANGUAGE_NAMES = {
    "es": "español",
    "en": "inglés (English)",
    "ca": "catalán (català)",
}

ROLE_CONTEXT = {
    "guest": "El usuario es un cliente que busca expertos y reserva videollamadas.",
    "host": "El usuario es un Host: un experto que ofrece videollamadas, gestiona su disponibilidad, precios y cobros con Stripe Connect.",
    "admin": "El usuario es administrador de la plataforma.",
}

FALLBACK_RESPONSES = {
    "es": "Lo siento, ahora mismo no puedo responder. Por favor, inténtalo de nuevo en unos minutos.",
    "en": "Sorry, I can't answer right now. Please try again in a few minutes.",
    "ca": "Ho sento, ara mateix no puc respondre. Si us plau, torna-ho a provar d'aquí a uns minuts.",
}

CHAT_PROMPT = """Eres Loomia, el asistente inteligente de Dialoom, una plataforma de videollamadas profesionales que conecta expertos (Hosts) con clientes.

Tu personalidad:
- Profesional pero cercano y amigable
- Eficiente y directo en tus respuestas
- Capaz de ayudar con perfiles, reservas, pagos y uso general

Funciones de Dialoom que conoces:
- Reserva de videollamadas con Hosts expertos, en franjas de 15 minutos
- Servicios adicionales: compartir pantalla, traducción, grabación y transcripción
- Pagos con Stripe; los Hosts cobran mediante Stripe Connect
- Soporte multiidioma (ES, EN, CA)

{role_context}

Responde siempre en {language} y mantén las respuestas concisas pero útiles."""

DESCRIPTION_PROMPT = """Eres Loomia, el asistente inteligente de Dialoom. Tu tarea es mejorar las descripciones profesionales de los Hosts para que sean más atractivas y completas.

Instrucciones:
- Mejora la descripción manteniendo la información original
- Hazla más profesional y atractiva
- Mantén un tono profesional pero cercano
- Limita la respuesta a un máximo de 300 palabras
- Responde ÚNICAMENTE con la descripción mejorada, sin explicaciones adicionales"""


class LoomiaError(Exception):
    """OpenAI could not produce an answer"""


class LoomiaService:
    """Handles Loomia chat operations"""

    def __init__(self, client: Optional[OpenAI] = None):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = settings.OPENAI_MODEL

    @staticmethod
    def build_messages(
            message: str,
            user_role: str = "guest",
            history: Optional[List[Dict]] = None,
            language: str = "es"
    ) -> List[Dict]:
        """System prompt, the last N user/assistant turns, then the new message"""
        system = CHAT_PROMPT.format(
            role_context=ROLE_CONTEXT.get(user_role, ROLE_CONTEXT["guest"]),
            language=LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["es"]),
        )
        messages = [{"role": "system", "content": system}]

        turns = [
            {"role": t["role"], "content": t["content"]}
            for t in (history or [])
            if t.get("role") in ("user", "assistant") and t.get("content")
        ]
        if settings.LOOMIA_HISTORY_LIMIT:
            turns = turns[-settings.LOOMIA_HISTORY_LIMIT:]
        messages.extend(turns)

        messages.append({"role": "user", "content": message})
        return messages

    def chat(
            self,
            message: str,
            user_role: str = "guest",
            history: Optional[List[Dict]] = None,
            language: str = "es"
    ) -> str:
        """Never raises on provider failure; returns an apology instead"""
        messages = self.build_messages(message, user_role, history, language)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=settings.OPENAI_MAX_TOKENS,
                temperature=0.7,
            )
            content = response.choices[0].message.content
            if content:
                return content.strip()
            logger.warning("Loomia got an empty completion")
        except Exception as e:
            logger.error(f"Loomia chat failed: {e}")

        return FALLBACK_RESPONSES.get(language, FALLBACK_RESPONSES["es"])

    def improve_description(self, description: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": DESCRIPTION_PROMPT},
                    {"role": "user", "content": f'Mejora esta descripción profesional: "{description}"'},
                ],
                max_tokens=400,
                temperature=0.7,
            )
        except Exception as e:
            logger.error(f"Loomia description improvement failed: {e}")
            raise LoomiaError("No se pudo mejorar la descripción en este momento") from e

        content = response.choices[0].message.content
        return content.strip() if content else description
