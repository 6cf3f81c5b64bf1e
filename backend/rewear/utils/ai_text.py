"""
AI-generated listing text using an OpenAI-compatible chat model.

Everything here is best effort: without an API key, or when the provider
fails, each helper falls back to static text or an empty result and logs a
warning. Nothing in this module raises into the exchange core.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from openai import OpenAI, RateLimitError, APIError

from ..config import settings
from ..enums.item import ItemCategory

logger = logging.getLogger(__name__)

# Initialize OpenAI client
_openai_client = None

MAX_SWAP_SUGGESTIONS = 5
MAX_COMPATIBLE_SUGGESTIONS = 3

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def get_openai_client() -> Optional[OpenAI]:
    """
    Get LLM client instance (supports OpenAI, Groq, Together, Fireworks, DeepInfra)
    All providers use OpenAI-compatible API
    """
    global _openai_client
    if not settings.openai_api_key:
        logger.warning("LLM API key not configured. AI text features will use fallbacks.")
        return None

    provider = settings.llm_provider.lower()

    base_urls = {
        'openai': None,  # OpenAI uses default (api.openai.com)
        'groq': settings.groq_base_url,
        'together': settings.together_base_url,
        'fireworks': settings.fireworks_base_url,
        'deepinfra': settings.deepinfra_base_url,
    }

    base_url = base_urls.get(provider)

    if _openai_client is None:
        if base_url:
            _openai_client = OpenAI(
                api_key=settings.openai_api_key,
                base_url=base_url,
                timeout=30.0,
                max_retries=2
            )
            logger.info(f"Initialized {provider.upper()} client with base URL: {base_url}")
        else:
            _openai_client = OpenAI(
                api_key=settings.openai_api_key,
                timeout=30.0,
                max_retries=2
            )
            logger.info("Initialized OpenAI client")

    return _openai_client


def _complete(system_prompt: str, user_prompt: str, temperature: float = 0.7) -> Optional[str]:
    """Run one chat completion; None when the model is unavailable."""
    client = get_openai_client()
    if client is None:
        return None

    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
        )
    except RateLimitError as e:
        logger.warning(f"LLM rate limit reached: {e}")
        return None
    except APIError as e:
        logger.warning(f"LLM API error: {e}")
        return None

    content = response.choices[0].message.content
    return content.strip() if content else None


def _parse_json(text: str) -> Any:
    """Parse model output as JSON, tolerating markdown code fences."""
    return json.loads(_FENCE_RE.sub("", text.strip()))


def _join(values: Optional[Iterable[Any]]) -> str:
    values = [getattr(v, "value", v) for v in (values or [])]
    return ", ".join(str(v) for v in values) if values else "None"


def _describe_item(item) -> str:
    return (
        f"- id={item.id}: {item.title} "
        f"({item.category.value}, {item.size.value}, {item.condition.value})"
    )


def _filter_suggestions(raw: str, candidate_ids: set, limit: int) -> List[Dict[str, Any]]:
    """Keep well-formed suggestions that point at one of the candidates."""
    try:
        parsed = _parse_json(raw)
    except json.JSONDecodeError:
        logger.warning(f"AI suggestions response was not valid JSON: {raw[:200]}")
        return []
    if not isinstance(parsed, list):
        logger.warning("AI suggestions response was not a JSON array")
        return []

    suggestions = []
    for entry in parsed:
        if not isinstance(entry, dict):
            continue
        item_id = entry.get("item_id", entry.get("itemId"))
        try:
            item_id = int(item_id)
        except (TypeError, ValueError):
            continue
        if item_id not in candidate_ids:
            continue
        suggestions.append({"item_id": item_id, "reason": str(entry.get("reason") or "")})
        if len(suggestions) >= limit:
            break
    return suggestions


def generate_description(attrs: Dict[str, Any]) -> str:
    """
    Write a listing description from item attributes.

    ``attrs`` carries title, category, condition, size and optionally tags
    and notes. Falls back to a plain summary of the attributes.
    """
    title = attrs.get("title", "")
    category = getattr(attrs.get("category"), "value", attrs.get("category"))
    condition = getattr(attrs.get("condition"), "value", attrs.get("condition"))
    size = getattr(attrs.get("size"), "value", attrs.get("size"))

    prompt = f"""Generate a detailed and appealing product description for a clothing item based on the following details:
Title: {title}
Category: {category}
Condition: {condition}
Size: {size}
Tags: {_join(attrs.get("tags"))}
Additional Notes: {attrs.get("notes") or "None"}

Focus on highlighting key features, style, and potential uses. Keep it concise but informative."""

    text = _complete("You write product listings for a second-hand clothing exchange.", prompt)
    if text:
        return text
    return f"{title}: {condition} {category} in size {size}."


def auto_tag(text_input: Optional[str] = None, image_url: Optional[str] = None) -> Dict[str, Any]:
    """
    Suggest categories and tags for an item described by text or an image URL.

    Returns the model's JSON object, or ``{"raw_response": text}`` when the
    output does not parse.
    """
    categories = ", ".join(c.value for c in ItemCategory)
    prompt = (
        "Analyze the following clothing item and suggest relevant categories and tags. "
        'Provide output as a JSON object with "categories" (array of strings) and '
        f'"tags" (array of strings). Categories should be from: {categories}.'
    )
    if text_input:
        prompt += f"\nText Description: {text_input}"
    elif image_url:
        prompt += f"\nImage URL: {image_url}\nAnalyze the image to determine categories and tags."
    else:
        raise ValueError("Either text_input or image_url is required")

    text = _complete("You classify clothing listings. Respond with JSON only.", prompt, temperature=0.2)
    if text is None:
        return {"categories": [], "tags": []}

    try:
        parsed = _parse_json(text)
    except json.JSONDecodeError:
        logger.warning(f"AI auto-tag response was not valid JSON: {text[:200]}")
        return {"raw_response": text}
    if not isinstance(parsed, dict):
        return {"raw_response": text}
    return parsed


def suggest_swaps(user, own_items: List[Any], candidates: List[Any]) -> List[Dict[str, Any]]:
    """Pick up to five candidate listings the user may want to swap for."""
    if not candidates:
        return []

    own = "\n".join(_describe_item(i) for i in own_items) or "None"
    available = "\n".join(_describe_item(i) for i in candidates)
    prompt = f"""Given the user's preferences and their listed items, suggest other available clothing items they might be interested in swapping for.
User Preferences:
Categories: {_join(user.preferred_categories)}
Sizes: {_join(user.preferred_sizes)}
Brands: {_join(user.preferred_brands)}

User's Listed Items:
{own}

Available Items (to suggest from):
{available}

Provide a list of up to {MAX_SWAP_SUGGESTIONS} suggested item ids from the "Available Items" list, along with a brief reason for each suggestion.
Format the output as a JSON array of objects, each with "item_id" and "reason"."""

    text = _complete("You recommend clothing swaps. Respond with JSON only.", prompt, temperature=0.3)
    if text is None:
        return []
    return _filter_suggestions(text, {i.id for i in candidates}, MAX_SWAP_SUGGESTIONS)


def suggest_compatible(item, candidates: List[Any]) -> List[Dict[str, Any]]:
    """Pick up to three candidate listings that pair well with ``item``."""
    if not candidates:
        return []

    available = "\n".join(_describe_item(i) for i in candidates)
    prompt = f"""Given the following item, suggest other available clothing items that would be compatible for bundling or swapping. Consider style, category, size (if complementary), and overall aesthetic.
Target Item:
Title: {item.title}
Description: {item.description or "N/A"}
Category: {item.category.value}
Condition: {item.condition.value}
Size: {item.size.value}
Tags: {_join(item.tags)}

Other Available Items (to suggest from):
{available}

Provide a list of up to {MAX_COMPATIBLE_SUGGESTIONS} suggested item ids from the "Other Available Items" list, along with a brief reason for each suggestion (e.g., "matches style", "completes an outfit").
Format the output as a JSON array of objects, each with "item_id" and "reason"."""

    text = _complete("You recommend clothing combinations. Respond with JSON only.", prompt, temperature=0.3)
    if text is None:
        return []
    return _filter_suggestions(text, {i.id for i in candidates}, MAX_COMPATIBLE_SUGGESTIONS)


def impact_message(completed_swaps: int, completed_redemptions: int) -> str:
    total = completed_swaps + completed_redemptions
    message = f"You have completed {total} clothing exchanges on ReWear."
    if total == 0:
        return message + " Keep swapping and redeeming to make a positive impact!"

    prompt = (
        f"Based on a user completing {completed_swaps} swaps and {completed_redemptions} redemptions "
        "on a clothing exchange platform, generate a short, encouraging message about their positive "
        "environmental impact. Focus on reducing waste and extending clothing life."
    )
    text = _complete("You write short, upbeat sustainability notes.", prompt)
    return text or message + " Every exchange keeps clothing in use and out of landfill."
