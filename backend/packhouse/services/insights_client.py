"""LLM production insights via the Gemini REST API.

The client never raises: every failure becomes a user-visible message.
"""

from __future__ import annotations

import logging
from typing import Iterable

import requests

from ..schemas import ProductionRecord

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "Aucune donnée disponible pour l'analyse."
MISSING_KEY_MESSAGE = "Clé API manquante. Veuillez configurer GEMINI_API_KEY dans l'environnement."
UNAVAILABLE_MESSAGE = (
    "Le service d'analyse IA est momentanément indisponible. "
    "Vérifiez votre clé API ou votre connexion."
)
EMPTY_ANSWER_MESSAGE = "Analyse indisponible pour le moment."

PROMPT_INTRO = "Voici les dernières données de production des serres :"
PROMPT_QUESTION = (
    "Analyse la corrélation entre le nombre d'employés et la production, "
    "et identifie les anomalies de pertes."
)


def build_persona(company_name: str) -> str:
    return (
        "Tu es un ingénieur agronome expert en gestion de production pour "
        f"{company_name}. Tes réponses doivent être en français, stratégiques, "
        "concises (max 3 points clés), et orientées vers l'optimisation des coûts "
        "et du rendement par employé."
    )


def latest_records(records: Iterable[ProductionRecord], limit: int) -> list[ProductionRecord]:
    """The ``limit`` most recent records, oldest first."""
    ordered = sorted(records, key=lambda r: (r.date, r.timestamp))
    return ordered[-limit:] if limit > 0 else []


def format_production_summary(records: Iterable[ProductionRecord]) -> str:
    return "\n".join(
        f"- Date: {r.date.isoformat()}, Lot: {r.lot_number}, Produit: {r.product_name}, "
        f"Prod: {r.total_weight_kg:g}kg, Emp: {r.employee_count}, Pertes: {r.waste_kg:g}kg"
        for r in records
    )


def _extract_text(data: dict) -> str:
    parts = []
    for candidate in data.get("candidates") or []:
        for part in (candidate.get("content") or {}).get("parts") or []:
            text = part.get("text")
            if isinstance(text, str):
                parts.append(text)
        if parts:
            break
    return "".join(parts).strip()


def analyze_production_data(
    records: Iterable[ProductionRecord],
    *,
    api_key: str | None,
    model: str,
    api_url: str,
    company_name: str,
    limit: int = 15,
    timeout: int = 30,
) -> str:
    """Ask the model for a short analysis of the latest production records."""
    selected = latest_records(records, limit)
    if not selected:
        return NO_DATA_MESSAGE
    if not api_key:
        return MISSING_KEY_MESSAGE

    url = f"{api_url.rstrip('/')}/models/{model}:generateContent"
    body = {
        "systemInstruction": {"parts": [{"text": build_persona(company_name)}]},
        "contents": [
            {
                "role": "user",
                "parts": [{"text": f"{PROMPT_INTRO}\n{format_production_summary(selected)}\n\n{PROMPT_QUESTION}"}],
            }
        ],
        "generationConfig": {"temperature": 0.7},
    }

    try:
        response = requests.post(
            url,
            json=body,
            headers={"x-goog-api-key": api_key},
            timeout=timeout,
        )
    except requests.RequestException:
        logger.exception("Gemini request failed")
        return UNAVAILABLE_MESSAGE

    if response.status_code != 200:
        logger.warning("Gemini returned HTTP_%s: %s", response.status_code, response.text[:200])
        return UNAVAILABLE_MESSAGE

    try:
        text = _extract_text(response.json())
    except ValueError:
        logger.warning("Gemini returned a non-JSON body")
        return UNAVAILABLE_MESSAGE
    return text or EMPTY_ANSWER_MESSAGE
