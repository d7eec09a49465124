# ai_scientist/agents/assistant_client.py
"""
Client for the external text-generation service.

The service is reached through an OpenAI-compatible chat-completions endpoint
(Groq by default). Whatever goes wrong on the way there or back, ``ask`` returns
a well-formed ``ChatExchange``; failures never reach the caller.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import requests
from jinja2 import Template
from pydantic import BaseModel, ValidationError, field_validator

from ai_scientist.config import AssistantConfig, get_config
from ai_scientist.schemas import AnalysisReport, Chart, ChatExchange

logger = logging.getLogger(__name__)

MAX_LABEL_POINTS = 20
MAX_SCATTER_POINTS = 50

ERROR_MESSAGE = "I encountered an error processing your request. Please try again."
MISSING_KEY_MESSAGE = (
    "System Error: GROQ_API_KEY is not configured in the environment. "
    "Please add it to your environment or configuration file."
)

SYSTEM_PROMPT = Template("""You are an expert data science assistant embedded in a research platform called "Autonomous AI Scientist".
Your role is to help the user interpret their dataset, understand the analysis results, explore the data, and provide machine learning code and explanations.

CONTEXT:
Dataset Headers: {{ headers }}
Sample Data (first {{ sample_size }} rows): {{ sample }}
Analysis Summary (Metadata): {{ analysis }}

INSTRUCTIONS:
1. Answer the user's question based strictly on the provided context.
2. Be concise, professional, and scientific in your tone.
3. Use Markdown formatting and code blocks for readability.
4. For machine learning requests, provide scikit-learn code that references the actual column names, explain the model choice for the target type and refer to the benchmark results when available.
5. If a chart would best explain the answer, include a chart configuration.

RESPONSE FORMAT:
Respond with a valid JSON object:
{"content": "<markdown answer>", "chart": {"type": "bar" | "pie" | "scatter" | "radar", "title": "<title>", "data": [...]}}
The "chart" key is optional.

CHART RULES:
- bar, pie, radar: data items are {"label": string, "value": number}; at most {{ max_label_points }} items.
- scatter: data items are {"x": number, "y": number, "label": string}; at most {{ max_scatter_points }} items.
""")


class AssistantReply(BaseModel):
    """Expected JSON body of the model's answer"""
    content: str
    chart: Optional[Chart] = None

    @field_validator('chart', mode='before')
    @classmethod
    def _bound_chart_points(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get('data'), list):
            limit = MAX_SCATTER_POINTS if value.get('type') == 'scatter' else MAX_LABEL_POINTS
            value = {**value, 'data': value['data'][:limit]}
        return value


class AssistantError(Exception):
    """Raised internally when the service answer can not be used"""


def build_messages(question: str, report: Optional[AnalysisReport], headers: Sequence[str],
                   rows: Sequence[Sequence[str]], sample_size: int) -> List[Dict[str, str]]:
    analysis = report.model_dump(mode='json', by_alias=True, exclude_none=True) if report else None
    system_prompt = SYSTEM_PROMPT.render(
        headers=json.dumps(list(headers)),
        sample=json.dumps([list(row) for row in rows[:sample_size]]),
        sample_size=sample_size,
        analysis=json.dumps(analysis, ensure_ascii=False),
        max_label_points=MAX_LABEL_POINTS,
        max_scatter_points=MAX_SCATTER_POINTS,
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": question},
    ]


def parse_reply(body: Union[Dict[str, Any], Any]) -> AssistantReply:
    """Extract and validate the JSON answer from a chat-completions response body"""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise AssistantError(f"Malformed completion envelope: {e}") from e

    if not content:
        raise AssistantError("Empty completion content")

    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        text = text.rsplit("```", 1)[0]

    return AssistantReply.model_validate_json(text)


class AssistantClient:
    """Blocking request/response client for the text-generation service"""

    def __init__(self, config: Optional[AssistantConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or get_config().assistant
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.config.BASE_URL.rstrip('/')}/chat/completions"

    def ask(self, question: str, report: Optional[AnalysisReport], headers: Sequence[str],
            rows: Sequence[Sequence[str]]) -> ChatExchange:
        if not self.config.API_KEY:
            logger.warning("Text-generation service requested but no API key is configured")
            return ChatExchange(question=question, answer=MISSING_KEY_MESSAGE, intent='assistant')

        payload = {
            "model": self.config.MODEL,
            "messages": build_messages(question, report, headers, rows, self.config.SAMPLE_ROWS),
            "temperature": self.config.TEMPERATURE,
            "max_tokens": self.config.MAX_TOKENS,
            "response_format": {"type": "json_object"},
        }

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.API_KEY}"},
                timeout=self.config.TIMEOUT,
            )
            response.raise_for_status()
            reply = parse_reply(response.json())
        except requests.RequestException as e:
            logger.error(f"Text-generation service unreachable: {str(e)}")
            return ChatExchange(question=question, answer=ERROR_MESSAGE, intent='assistant')
        except (ValueError, ValidationError, AssistantError) as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            logger.error(f"Malformed text-generation response: {str(e)}")
            return ChatExchange(question=question, answer=ERROR_MESSAGE, intent='assistant')

        return ChatExchange(question=question, answer=reply.content, chart=reply.chart, intent='assistant')
