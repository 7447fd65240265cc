"""자동 평가: 프롬프트 구성 → 평가 모델 호출 → 점수 해석/검증/파생."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from llm_evaluator.models import EvaluationScores
from llm_evaluator.repositories import EvaluationPromptRepository, EvaluatorConfigRepository
from llm_evaluator.services.shared.completions import extract_completion, post_chat_completion
from llm_evaluator.services.shared.errors import (
    ConfigurationError,
    InputValidationError,
    ReferenceNotFoundError,
)
from llm_evaluator.utils.logger import get_logger

from .parsing import extract_comments, parse_grading_text, validate_scores

logger = get_logger(__name__)

GRADING_TEMPERATURE = 0.1
GRADING_MAX_TOKENS = 1000


@dataclass
class AutoEvaluationResult:
    scores: EvaluationScores
    comments: dict[str, Any] = field(default_factory=dict)
    prompt_used: str = ""


def render_grading_prompt(template: str, question: str, response: str) -> str:
    """템플릿의 `{question}`, `{response}`를 각각 첫 번째 위치에서만 치환한다.

    `{question}`을 먼저 치환하므로 질문 본문에 `{response}`가 있으면 그 자리가
    응답으로 치환된다.
    """

    return template.replace("{question}", question, 1).replace("{response}", response, 1)


def build_grading_body(model_name: str, prompt: str) -> dict[str, Any]:
    return {
        "model": model_name,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": GRADING_TEMPERATURE,
        "max_tokens": GRADING_MAX_TOKENS,
    }


async def auto_evaluate(
    question_content: str,
    llm_response: str,
    prompt_id: str | None,
    *,
    prompts: EvaluationPromptRepository,
    config_repo: EvaluatorConfigRepository,
    http_client: httpx.AsyncClient,
) -> AutoEvaluationResult:
    """질문/답변 한 쌍을 평가 모델로 채점한다. 실패해도 재시도하지 않는다.

    Args:
        question_content: 질문 본문.
        llm_response: 채점할 후보 답변.
        prompt_id: 사용할 평가 프롬프트 id. 생략 시 첫 번째(최신) 프롬프트.

    Raises:
        InputValidationError: 질문/답변이 비어 있음.
        ConfigurationError: 평가 서비스 설정 또는 API 키가 없음.
        ReferenceNotFoundError: 프롬프트 템플릿이 없음.
        UpstreamError: 평가 서비스가 실패 상태를 반환함.
        ParseError: 응답이 JSON 객체가 아님.
        InvalidScoreError: 점수 누락/비숫자/범위 밖.
    """

    if not question_content or not question_content.strip():
        raise InputValidationError("questionContent is required", stage="input")
    if not llm_response or not llm_response.strip():
        raise InputValidationError("llmResponse is required", stage="input")

    config = await config_repo.get()
    if config is None or not config.api_key:
        raise ConfigurationError("evaluator configuration not found or API key missing", stage="config")
    if not config.endpoint or not config.model:
        raise ConfigurationError("evaluator endpoint and model must be configured", stage="config")

    prompt = await prompts.get_by_id(prompt_id) if prompt_id else await prompts.get_default()
    if prompt is None:
        raise ReferenceNotFoundError(
            f"evaluation prompt not found: {prompt_id}" if prompt_id else "no evaluation prompt available",
            stage="prompt",
        )

    logger.debug("auto_evaluate:시작 prompt=%s grader=%s", prompt.name, config.model)
    started = time.perf_counter()
    rendered = render_grading_prompt(prompt.prompt, question_content, llm_response)
    data = await post_chat_completion(
        http_client,
        config.endpoint,
        build_grading_body(config.model, rendered),
        api_key=config.api_key,
        label="grader",
    )
    text = extract_completion(data) or ""
    logger.debug("auto_evaluate:raw_response grader=%s body=%s", config.model, text)

    try:
        parsed = parse_grading_text(text)
        scores = validate_scores(parsed, raw_text=text)
    except Exception as exc:
        logger.warning("auto_evaluate:평가 응답 해석 실패 grader=%s err=%s", config.model, exc)
        raise

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "auto_evaluate:성공 grader=%s prompt=%s overall=%s elapsed_ms=%s",
        config.model,
        prompt.name,
        scores.overall,
        elapsed_ms,
    )
    return AutoEvaluationResult(scores=scores, comments=extract_comments(parsed), prompt_used=prompt.name)


__all__ = [
    "GRADING_MAX_TOKENS",
    "GRADING_TEMPERATURE",
    "AutoEvaluationResult",
    "auto_evaluate",
    "build_grading_body",
    "render_grading_prompt",
]
