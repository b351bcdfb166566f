"""
Clinical narrative generation through an external language model.

Only measurements and issues are sent to the model, never raw landmarks.
"""

import logging
import re
from typing import Optional

import requests

from app_config.settings import NarrativeConfig
from models.schemas import NarrativeReport, PostureAnalysisResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional physiotherapy assistant providing clinical "
    "assessments and exercise recommendations."
)

SUMMARY_FALLBACK = "Unable to generate summary. Please check the analysis data."
EXERCISES_FALLBACK = "Unable to generate exercise recommendations."

_SUMMARY_PATTERN = re.compile(r"SUMMARY:\s*(.*?)\s*EXERCISES:", re.DOTALL)
_EXERCISES_PATTERN = re.compile(r"EXERCISES:\s*(.*)", re.DOTALL)


class NarrativeError(Exception):
    """Raised when the narrative service is unavailable or fails."""


def format_analysis_data(result: PostureAnalysisResult) -> str:
    """Measurements and distinct issues of all views as plain text."""
    lines = ["Clinical Posture Analysis Data:", "", "Measurements:"]
    for view_result in result.view_results():
        if not view_result.analyzed:
            continue
        view_label = view_result.view.value
        if view_result.side is not None:
            view_label = f"{view_label} ({view_result.side.value.lower()})"
        for key, value in view_result.measurements.items():
            if value is None:
                lines.append(f"- {view_label} {key}: unavailable")
            elif key.endswith('_cm'):
                lines.append(f"- {view_label} {key}: {value} cm")
            elif key == 'gluteal_fold_asymmetry':
                lines.append(f"- {view_label} {key}: {value}%")
            else:
                lines.append(f"- {view_label} {key}: {value}°")

    lines.extend(["", "Identified Issues:"])
    issues = []
    for view_result in result.view_results():
        for issue in view_result.issues:
            if issue not in issues:
                issues.append(issue)

    if not issues:
        lines.append("- No significant postural deviations detected")
    else:
        lines.extend(f"- {issue}" for issue in issues)
    return "\n".join(lines)


def build_analysis_prompt(result: PostureAnalysisResult) -> str:
    """User prompt asking for a clinical summary and exercise recommendations."""
    return (
        "You are a clinical physiotherapy assistant. Based on the following posture "
        "analysis data, provide a professional clinical summary in exactly 200-250 words, "
        "followed by exercise recommendations in exactly 200-250 words.\n\n"
        f"Data:\n{format_analysis_data(result)}\n\n"
        "Please respond in this exact format without any bold or italic text:\n"
        "SUMMARY: [200-250 words about the clinical findings and their implications]\n\n"
        "EXERCISES: [200-250 words of specific exercise recommendations with repetitions/duration]\n\n"
        "Keep the language professional. Focus on actionable insights and "
        "evidence-based recommendations."
    )


def parse_narrative_response(text: str) -> NarrativeReport:
    """Split a model response into its SUMMARY and EXERCISES sections."""
    text = text or ""
    summary_match = _SUMMARY_PATTERN.search(text)
    exercises_match = _EXERCISES_PATTERN.search(text)
    return NarrativeReport(
        summary=summary_match.group(1).strip() if summary_match else SUMMARY_FALLBACK,
        exercises=exercises_match.group(1).strip() if exercises_match else EXERCISES_FALLBACK,
    )


class NarrativeGenerator:
    """Client for the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = NarrativeConfig.MODEL,
        api_url: str = NarrativeConfig.API_URL,
        timeout: float = NarrativeConfig.TIMEOUT_SECONDS,
    ):
        self.api_key = api_key if api_key is not None else NarrativeConfig.API_KEY
        self.model = model
        self.api_url = api_url
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, result: PostureAnalysisResult) -> NarrativeReport:
        """Generate the clinical summary and exercise narrative.

        Raises:
            NarrativeError: If no API key is configured or the request fails
        """
        if not self.configured:
            raise NarrativeError("OpenAI API key not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_analysis_prompt(result)},
            ],
            "max_tokens": NarrativeConfig.MAX_TOKENS,
            "temperature": NarrativeConfig.TEMPERATURE,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info("Requesting narrative from %s", self.model)
        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Narrative request failed: %s", e)
            raise NarrativeError(f"Narrative generation failed: {e}") from e

        if not isinstance(data, dict):
            raise NarrativeError("Narrative generation failed: unexpected response body")
        choices = data.get("choices")
        choice = choices[0] if isinstance(choices, list) and choices else {}
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        return parse_narrative_response(content if isinstance(content, str) else "")
