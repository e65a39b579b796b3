"""
Language-model helpers for sync analysis, lyric analysis and contract drafting.

Talks to an OpenAI-compatible chat-completions endpoint over httpx.
"""

import json
import logging
from typing import Any, Optional

import httpx

from .. import config

logger = logging.getLogger(__name__)

SYNC_EXPERT_PROMPT = (
    "You are an expert music supervisor with 20+ years of experience in sync licensing. "
    "Provide detailed, actionable analysis for sync opportunities."
)
LYRICS_EXPERT_PROMPT = "You are a music industry expert specializing in sync licensing and commercial music placement."
CONTRACT_EXPERT_PROMPT = (
    "You are a music industry lawyer specializing in sync licensing contracts. "
    "Generate professional, legally sound agreements."
)

SYNC_LIST_FIELDS = (
    "sceneMatches",
    "emotionalTones",
    "narrativeElements",
    "recommendedUsage",
    "targetDemographics",
    "similarReferences",
    "themes",
    "seasonality",
    "occasions",
)


class AIUnavailableError(Exception):
    """No API key is configured for the completion service."""


class AIServiceError(Exception):
    """The completion service failed or returned something unusable."""


async def _chat(messages: list[dict], temperature: float, json_mode: bool = False) -> str:
    """Send one chat-completions request and return the first choice's text."""
    if not config.OPENAI_API_KEY:
        raise AIUnavailableError("OPENAI_API_KEY is not configured")

    payload: dict[str, Any] = {
        "model": config.OPENAI_MODEL,
        "messages": messages,
        "temperature": temperature,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    async with httpx.AsyncClient(timeout=config.OPENAI_TIMEOUT_SECONDS) as client:
        response = await client.post(
            f"{config.OPENAI_BASE_URL.rstrip('/')}/chat/completions",
            json=payload,
            headers={
                "Authorization": f"Bearer {config.OPENAI_API_KEY}",
                "Content-Type": "application/json",
            },
        )

    if response.status_code != 200:
        logger.error(f"❌ Completion request failed: HTTP {response.status_code} {response.text[:300]}")
        raise AIServiceError(f"Completion service returned HTTP {response.status_code}")

    try:
        return response.json()["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, ValueError) as e:
        raise AIServiceError(f"Unexpected completion response: {e}") from e


async def _chat_json(system: str, prompt: str, temperature: float = 0.7) -> dict:
    content = await _chat(
        [{"role": "system", "content": system}, {"role": "user", "content": prompt}],
        temperature=temperature,
        json_mode=True,
    )
    try:
        parsed = json.loads(content or "{}")
    except json.JSONDecodeError as e:
        raise AIServiceError(f"Completion was not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise AIServiceError("Completion JSON was not an object")
    return parsed


def _or(value: Any, fallback: str = "Not specified") -> Any:
    return value if value not in (None, "") else fallback


async def analyze_for_sync(song: dict, brief: dict) -> dict:
    """Score how well one song fits a project brief (suitability 1-10 plus descriptive lists)."""
    prompt = f"""
You are a music sync licensing expert. Analyze how well this song matches the project brief for sync licensing.

SONG DETAILS:
- Title: {song.get('title')}
- Artist: {song.get('artist')}
- Genre: {_or(song.get('genre'))}
- Mood: {_or(song.get('mood'))}
- Tempo: {_or(song.get('tempo'))} BPM
- Key: {_or(song.get('key'))}
- Energy: {_or(song.get('energy'))}
- Instrumental Description: {_or(song.get('instrumentalDescription'))}
- Lyrics: {_or(song.get('lyrics'), 'Instrumental/No lyrics provided')}

PROJECT BRIEF:
- Project: {brief.get('title')}
- Type: {brief.get('projectType')}
- Description: {brief.get('description')}
- Scene Description: {_or(brief.get('sceneDescription'))}
- Target Audience: {_or(brief.get('targetAudience'))}
- Desired Mood: {_or(brief.get('desiredMood'))}
- Target Demographics: {_or(brief.get('targetDemographics'))}

Respond in JSON with: suitability (number 1-10), reasoning (string), and string lists
sceneMatches, emotionalTones, narrativeElements, recommendedUsage, targetDemographics,
similarReferences, themes (e.g. Christmas, Mother's Day, Siblings), seasonality
(e.g. Holiday, Summer, Back-to-school) and occasions (e.g. Wedding, Graduation, Birthday).
"""
    analysis = await _chat_json(SYNC_EXPERT_PROMPT, prompt)

    result: dict[str, Any] = {
        "suitability": analysis.get("suitability") or 0,
        "reasoning": analysis.get("reasoning") or "",
    }
    for field in SYNC_LIST_FIELDS:
        result[field] = analysis.get(field) or []
    return result


async def generate_pitch_recommendations(songs: list[dict], brief: dict) -> list[dict]:
    """
    Analyze every song against the brief and rank them by match score.

    A song whose analysis fails is logged and left out; the rest still rank.
    """
    recommendations = []
    for song in songs:
        try:
            analysis = await analyze_for_sync(song, brief)
        except AIUnavailableError:
            raise
        except (AIServiceError, httpx.HTTPError) as e:
            logger.error(f"❌ Error analyzing song {song.get('title')}: {e}")
            continue

        recommendations.append(
            {
                "songId": song.get("id"),
                "songTitle": song.get("title"),
                "matchScore": analysis["suitability"],
                "analysis": analysis,
            }
        )

    recommendations.sort(key=lambda r: r["matchScore"] or 0, reverse=True)
    return recommendations


async def analyze_lyrics(lyrics: str) -> dict:
    """Themes, emotions, narrative, marketability (1-10) and sync potential of a lyric."""
    prompt = f"""
Analyze these song lyrics for sync licensing potential:

LYRICS:
{lyrics}

Respond in JSON with: themes (list), emotions (list), narrative (string),
marketability (number 1-10 for commercial appeal) and syncPotential (list of
media/scene types this would work well in). Consider commercial viability,
emotional resonance, narrative coherence and brand safety.
"""
    analysis = await _chat_json(LYRICS_EXPERT_PROMPT, prompt)
    return {
        "themes": analysis.get("themes") or [],
        "emotions": analysis.get("emotions") or [],
        "narrative": analysis.get("narrative") or "",
        "marketability": analysis.get("marketability") or 0,
        "syncPotential": analysis.get("syncPotential") or [],
    }


async def generate_contract(deal_data: dict, template_type: Optional[str] = "standard") -> str:
    """Draft a sync licensing agreement from deal terms."""
    prompt = f"""
Generate a professional sync licensing contract based on this information:

DEAL DETAILS:
- Song: "{deal_data.get('songTitle')}" by {deal_data.get('artist')}
- License Type: {deal_data.get('licenseType')}
- Territory: {deal_data.get('territory')}
- Term: {deal_data.get('term')}
- Fee: ${deal_data.get('fee')}
- Usage: {deal_data.get('usage')}
- Client: {deal_data.get('clientName')}
- Project: {deal_data.get('projectTitle')}
- Template Type: {template_type or 'standard'}

Include parties and definitions, grant of rights, territory and term,
compensation, usage restrictions, delivery requirements, warranties and
representations, and termination clauses. Keep it industry-standard and readable.
"""
    return await _chat(
        [{"role": "system", "content": CONTRACT_EXPERT_PROMPT}, {"role": "user", "content": prompt}],
        temperature=0.3,
    )
