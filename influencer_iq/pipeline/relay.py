# influencer_iq/pipeline/relay.py
"""
Prompt relay: forward a prompt to the completion API, walking the configured
model list until one answers, and degrade to a success-shaped fallback when
none does.

relay_prompt() returns a tagged result (RelayOk / RelayDegraded /
RelayInputError); to_completion_payload() turns it into the wire shape the
HTTP layer sends back.
"""
import json
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

import requests

from influencer_iq.schemas.analysis import CategoryAssessment, StructuredAnalysis
from influencer_iq.tools.groq_client import UpstreamError, completion_text, groq_chat
from influencer_iq.tools.json_extract import extract_json_object
from influencer_iq.tools.logger import make_logger
from influencer_iq.tools.scores import validate_score

log = make_logger("relay")

SYSTEM_TEXT = "You are an expert influencer marketing analyst. Provide detailed analysis."
SYSTEM_STRUCTURED = (
    "You are an expert influencer marketing analyst. Provide detailed analysis "
    "and always respond in valid JSON format when requested."
)

STRUCTURED_INSTRUCTIONS = """
Please provide your response in the following JSON format:
{
  "credibilityScore": (number between 1-10),
  "audienceAuthenticity": {
    "score": (number between 1-10),
    "analysis": "(text summary)"
  },
  "contentQuality": {
    "score": (number between 1-10),
    "analysis": "(text summary)"
  },
  "brandAlignmentPotential": {
    "score": (number between 1-10),
    "analysis": "(text summary)"
  },
  "engagementMetrics": {
    "score": (number between 1-10),
    "analysis": "(text summary)"
  },
  "overallAnalysis": "(detailed text summary)"
}

If you don't have specific information about this influencer, set scores to null and provide general information in the analysis fields."""

UNAVAILABLE_CATEGORY = "Data currently unavailable due to technical issues."
UNAVAILABLE_STRUCTURED = (
    "I'm sorry, I couldn't analyze this influencer at the moment. Our service is "
    "experiencing technical difficulties. Please try again later."
)
UNAVAILABLE_TEXT = (
    "I'm sorry, I couldn't analyze this influencer at the moment. Our analysis service is "
    "experiencing technical difficulties. Please try again later or search for another influencer."
)

# Keys models use instead of the ones we asked for
_CATEGORY_ALIASES = {
    "audienceAuthenticity": ["audience_authenticity", "audienceAuthenticityScore"],
    "contentQuality": ["content_quality", "contentQualityScore"],
    "brandAlignmentPotential": ["brandAlignment", "brand_alignment_potential", "brandAlignmentScore"],
    "engagementMetrics": ["engagement", "engagement_metrics", "engagementScore"],
}
_OVERALL_ALIASES = ["overall_analysis", "summary", "analysis", "overall"]
_CREDIBILITY_ALIASES = ["credibility_score", "credibility"]

ChatFn = Callable[..., dict]


@dataclass
class ModelFailure:
    model: str
    message: str
    status: Optional[int] = None


@dataclass
class RelayOk:
    content: str
    model: str
    structured: bool = False
    analysis: Optional[StructuredAnalysis] = None
    parse_error: Optional[str] = None
    failures: List[ModelFailure] = field(default_factory=list)


@dataclass
class RelayDegraded:
    content: str
    structured: bool = False
    analysis: Optional[StructuredAnalysis] = None
    failures: List[ModelFailure] = field(default_factory=list)


@dataclass
class RelayInputError:
    reason: str


RelayResult = Union[RelayOk, RelayDegraded, RelayInputError]


def build_prompt(prompt: str, structured: bool) -> str:
    if not structured:
        return prompt
    return f"{prompt}\n{STRUCTURED_INSTRUCTIONS}"


def _normalize(data: dict) -> dict:
    data = dict(data or {})

    if "credibilityScore" not in data:
        for k in _CREDIBILITY_ALIASES:
            if k in data:
                data["credibilityScore"] = data[k]
                break

    for key, aliases in _CATEGORY_ALIASES.items():
        value = data.get(key)
        if value is None:
            for alias in aliases:
                if alias in data:
                    value = data[alias]
                    break
        # Prose is commentary without a score; a bare number is a score without commentary
        if isinstance(value, str) and validate_score(value) is None:
            value = {"score": None, "analysis": value.strip()}
        elif value is not None and not isinstance(value, dict):
            value = {"score": value, "analysis": ""}
        data[key] = value or {}

    if not isinstance(data.get("overallAnalysis"), str):
        for k in _OVERALL_ALIASES:
            if isinstance(data.get(k), str) and data[k].strip():
                data["overallAnalysis"] = data[k].strip()
                break
    if not isinstance(data.get("overallAnalysis"), str):
        data["overallAnalysis"] = ""

    return data


def parse_structured_analysis(text: str) -> StructuredAnalysis:
    """Completion text -> StructuredAnalysis. Raises ValueError when it isn't a JSON object."""
    return StructuredAnalysis.model_validate(_normalize(extract_json_object(text)))


def unstructured_analysis(text: str) -> StructuredAnalysis:
    """Model answered in prose: keep the text, leave every score unknown."""
    return StructuredAnalysis(overall_analysis=text)


def fallback_analysis() -> StructuredAnalysis:
    unavailable = CategoryAssessment(score=None, analysis=UNAVAILABLE_CATEGORY)
    return StructuredAnalysis(
        credibility_score=None,
        audience_authenticity=unavailable.model_copy(),
        content_quality=unavailable.model_copy(),
        brand_alignment_potential=unavailable.model_copy(),
        engagement_metrics=unavailable.model_copy(),
        overall_analysis=UNAVAILABLE_STRUCTURED,
    )


def relay_prompt(
    prompt,
    structured: bool,
    groq_cfg: dict,
    api_key: str | None = None,
    chat: ChatFn = groq_chat,
) -> RelayResult:
    """
    Try each model in groq_cfg["models"] in order; first usable completion wins.
    Only an invalid prompt is reported as an error.
    """
    if not isinstance(prompt, str) or not prompt.strip():
        return RelayInputError("A valid prompt is required")

    structured = bool(structured)
    user = build_prompt(prompt, structured)
    system = SYSTEM_STRUCTURED if structured else SYSTEM_TEXT
    failures: List[ModelFailure] = []

    for model in groq_cfg.get("models") or []:
        log.info(f"Attempting request with model: {model}")
        try:
            resp_json = chat(
                base_url=groq_cfg["base_url"],
                api_key=api_key,
                model=model,
                system=system,
                user=user,
                temperature=groq_cfg.get("temperature", 0.5),
                force_json=structured,
                timeout_sec=groq_cfg.get("timeout_sec", 30),
                max_tokens=groq_cfg.get("max_tokens", 1500),
            )
            content = completion_text(resp_json)
        except requests.exceptions.Timeout as e:
            failures.append(ModelFailure(model=model, message=f"timeout: {e}"))
            log.warning(f"Model {model} timed out")
            continue
        except requests.exceptions.RequestException as e:
            failures.append(ModelFailure(model=model, message=f"{type(e).__name__}: {e}"))
            log.warning(f"Model {model} transport error: {type(e).__name__}: {e}")
            continue
        except UpstreamError as e:
            failures.append(ModelFailure(model=model, message=str(e), status=e.status))
            log.warning(f"Model {model} failed: {e} {e.body or ''}".rstrip())
            continue

        if not structured:
            return RelayOk(content=content, model=model, failures=failures)

        try:
            analysis = parse_structured_analysis(content)
            parse_error = None
        except ValueError as e:
            log.warning(f"Model {model} returned unparseable structured output: {e}")
            analysis = unstructured_analysis(content)
            parse_error = str(e)
        return RelayOk(
            content=json.dumps(analysis.to_wire(), ensure_ascii=False),
            model=model,
            structured=True,
            analysis=analysis,
            parse_error=parse_error,
            failures=failures,
        )

    last = failures[-1].message if failures else "no models configured"
    log.error(f"All models failed ({len(failures)} attempts). Last error: {last}")
    if structured:
        analysis = fallback_analysis()
        return RelayDegraded(
            content=json.dumps(analysis.to_wire(), ensure_ascii=False),
            structured=True,
            analysis=analysis,
            failures=failures,
        )
    return RelayDegraded(content=UNAVAILABLE_TEXT, failures=failures)


def to_completion_payload(result: RelayOk | RelayDegraded) -> dict:
    """Completion-shaped body; callers read choices[0].message.content either way."""
    model = result.model if isinstance(result, RelayOk) else "fallback"
    return {
        "object": "chat.completion",
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": result.content},
                "finish_reason": "stop",
            }
        ],
    }
