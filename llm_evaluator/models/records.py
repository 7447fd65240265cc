"""저장소에 보관되는 레코드 모델.

JSON 표현은 camelCase(`createdAt`, `questionId` ...)이고 파이썬 속성은 snake_case다.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

SCORE_FIELDS: tuple[str, ...] = ("accuracy", "completeness", "logic", "japanese")
ALL_SCORE_FIELDS: tuple[str, ...] = (*SCORE_FIELDS, "overall")


class CamelModel(BaseModel):
    """camelCase 별칭으로 직렬화되는 공통 베이스."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def round_half_up(value: float, digits: int = 1) -> float:
    """사사오입(0.5 올림) 반올림. 내장 `round`의 은행가 반올림을 피한다."""

    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def derive_overall(accuracy: float, completeness: float, logic: float, japanese: float) -> float:
    """네 세부 점수의 산술 평균을 소수 첫째 자리로 반올림한다."""

    return round_half_up((accuracy + completeness + logic + japanese) / 4, 1)


class LLMModel(CamelModel):
    id: str
    name: str = Field(..., min_length=1)
    endpoint: str | None = None
    api_key: str | None = None
    size: str | None = None
    description: str | None = None
    created_at: datetime


class Question(CamelModel):
    id: str
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: str | None = None
    created_at: datetime


class EvaluationEnvironment(CamelModel):
    id: str
    name: str
    processing_spec: str
    execution_app: str
    description: str | None = None
    created_at: datetime


class Evaluator(CamelModel):
    id: str
    name: str
    organization: str | None = None
    email: str | None = None
    description: str | None = None
    created_at: datetime


class EvaluationPrompt(CamelModel):
    """`{question}`, `{response}` 자리표시자를 포함하는 채점 프롬프트 템플릿."""

    id: str
    name: str
    prompt: str
    description: str | None = None
    created_at: datetime


class EvaluationScores(CamelModel):
    """루브릭 네 항목(1~5)과 파생 총점.

    `overall`은 입력값과 관계없이 항상 네 항목의 평균으로 다시 계산된다.
    """

    accuracy: float = Field(..., ge=1, le=5)
    completeness: float = Field(..., ge=1, le=5)
    logic: float = Field(..., ge=1, le=5)
    japanese: float = Field(..., ge=1, le=5)
    overall: float | None = None

    @model_validator(mode="after")
    def _derive_overall(self) -> "EvaluationScores":
        self.overall = derive_overall(self.accuracy, self.completeness, self.logic, self.japanese)
        return self


class EvaluationComments(CamelModel):
    accuracy: str | None = None
    completeness: str | None = None
    logic: str | None = None
    japanese: str | None = None
    overall: str | None = None


class Evaluation(CamelModel):
    id: str
    question_id: str
    model_id: str
    response: str
    scores: EvaluationScores
    comments: EvaluationComments = Field(default_factory=EvaluationComments)
    environment_id: str | None = None
    evaluator: str | None = None
    processing_time: float | None = None
    evaluated_at: datetime


class EvaluatorConfig(CamelModel):
    """채점 서비스 연결 설정 (단일 문서)."""

    id: str = "openai-gpt4o"
    name: str = "OpenAI GPT-4o"
    endpoint: str = ""
    api_key: str | None = None
    model: str = ""
    created_at: datetime | None = None


class DetailedEvaluation(Evaluation):
    """질문/모델/환경을 조인한 평가. 참조 대상이 삭제됐으면 None."""

    question: Question | None = None
    model: LLMModel | None = None
    environment: EvaluationEnvironment | None = None


__all__ = [
    "SCORE_FIELDS",
    "ALL_SCORE_FIELDS",
    "CamelModel",
    "round_half_up",
    "derive_overall",
    "LLMModel",
    "Question",
    "EvaluationEnvironment",
    "Evaluator",
    "EvaluationPrompt",
    "EvaluationScores",
    "EvaluationComments",
    "Evaluation",
    "EvaluatorConfig",
    "DetailedEvaluation",
]
