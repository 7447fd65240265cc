"""Streamlit UI 엔트리포인트.

FastAPI 백엔드를 HTTP로만 호출하는 얇은 클라이언트다.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import requests
import streamlit as st
from dotenv import load_dotenv

from llm_evaluator.utils.logger import get_logger

load_dotenv()
logger = get_logger(__name__)

FASTAPI_URL_FILE = Path(__file__).resolve().parents[2] / ".fastapi_url"
DEFAULT_FASTAPI_BASE = FASTAPI_URL_FILE.read_text().strip() if FASTAPI_URL_FILE.exists() else ""
REQUEST_TIMEOUT = 15
LLM_REQUEST_TIMEOUT = 180
SCORE_LABELS = {
    "accuracy": "正確性",
    "completeness": "網羅性",
    "logic": "論理性",
    "japanese": "日本語",
}

st.set_page_config(page_title="LLM Evaluator", page_icon="🧪", layout="wide")


def _load_base_url() -> str:
    saved = (
        st.session_state.get("fastapi_base_url")
        or DEFAULT_FASTAPI_BASE
        or os.getenv("FASTAPI_URL", "")
        or "http://127.0.0.1:8000"
    )
    return saved.rstrip("/")


def _error_detail(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        return str(data.get("detail") or data)
    return str(data)


def _api(method: str, base_url: str, path: str, *, timeout: int = REQUEST_TIMEOUT, **kwargs: Any) -> Any | None:
    """백엔드 호출. 실패하면 화면에 에러를 표시하고 None을 반환한다."""

    url = f"{base_url}{path}"
    logger.debug("_api:시작 method=%s url=%s", method, url)
    try:
        resp = requests.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        logger.error("_api:요청 실패 url=%s err=%s", url, exc)
        st.error(f"백엔드 요청 중 오류가 발생했습니다: {exc}")
        return None
    if not resp.ok:
        detail = _error_detail(resp)
        logger.warning("_api:실패 status=%s url=%s detail=%s", resp.status_code, url, detail)
        st.error(f"HTTP {resp.status_code}: {detail}")
        return None
    if resp.headers.get("content-type", "").startswith("text/csv"):
        return resp.content
    return resp.json()


def _render_sidebar() -> str:
    with st.sidebar:
        st.header("설정")
        base_url = st.text_input("FastAPI Base URL", value=_load_base_url())
        st.session_state["fastapi_base_url"] = base_url
        status = _api("GET", base_url.rstrip("/"), "/storage/status")
        if status:
            st.caption(f"저장소: {status['backend']}")
            st.json(status["collections"], expanded=False)
    return base_url.rstrip("/")


def _render_catalog(base_url: str) -> None:
    """모델/질문/평가 환경/평가자 등록과 목록."""

    col_models, col_questions = st.columns(2)
    with col_models:
        st.subheader("LLM 모델")
        with st.form("create_model", clear_on_submit=True):
            name = st.text_input("모델 이름 (요청의 model 값)")
            endpoint = st.text_input("엔드포인트", placeholder="http://localhost:11434/v1/chat/completions")
            api_key = st.text_input("API 키 (선택)", type="password")
            size = st.text_input("크기 (선택)", placeholder="7B")
            if st.form_submit_button("모델 등록"):
                body = {"name": name, "endpoint": endpoint or None, "apiKey": api_key or None, "size": size or None}
                if _api("POST", base_url, "/models", json=body):
                    st.success("등록했습니다.")
        models = _api("GET", base_url, "/models") or []
        st.dataframe(
            [{"id": m["id"], "name": m["name"], "endpoint": m.get("endpoint"), "size": m.get("size")} for m in models],
            use_container_width=True,
        )

    with col_questions:
        st.subheader("질문")
        with st.form("create_question", clear_on_submit=True):
            title = st.text_input("제목")
            content = st.text_area("본문")
            category = st.text_input("카테고리 (선택)")
            if st.form_submit_button("질문 등록"):
                body = {"title": title, "content": content, "category": category or None}
                if _api("POST", base_url, "/questions", json=body):
                    st.success("등록했습니다.")
        questions = _api("GET", base_url, "/questions") or []
        st.dataframe(
            [{"id": q["id"], "title": q["title"], "category": q.get("category")} for q in questions],
            use_container_width=True,
        )

    col_envs, col_evaluators = st.columns(2)
    with col_envs:
        st.subheader("평가 환경")
        with st.form("create_environment", clear_on_submit=True):
            name = st.text_input("환경 이름")
            processing_spec = st.text_input("처리 사양", placeholder="GPU A100 x1")
            execution_app = st.text_input("실행 앱", placeholder="vLLM")
            description = st.text_input("설명 (선택)")
            if st.form_submit_button("환경 등록"):
                body = {
                    "name": name,
                    "processingSpec": processing_spec,
                    "executionApp": execution_app,
                    "description": description or None,
                }
                if _api("POST", base_url, "/evaluation-environments", json=body):
                    st.success("등록했습니다.")
        environments = _api("GET", base_url, "/evaluation-environments") or []
        st.dataframe(
            [
                {"id": e["id"], "name": e["name"], "spec": e["processingSpec"], "app": e["executionApp"]}
                for e in environments
            ],
            use_container_width=True,
        )

    with col_evaluators:
        st.subheader("평가자")
        with st.form("create_evaluator", clear_on_submit=True):
            name = st.text_input("평가자 이름")
            organization = st.text_input("소속 (선택)")
            email = st.text_input("이메일 (선택)")
            if st.form_submit_button("평가자 등록"):
                body = {"name": name, "organization": organization or None, "email": email or None}
                if _api("POST", base_url, "/evaluators", json=body):
                    st.success("등록했습니다.")
        evaluators = _api("GET", base_url, "/evaluators") or []
        st.dataframe(
            [{"id": e["id"], "name": e["name"], "organization": e.get("organization")} for e in evaluators],
            use_container_width=True,
        )


def _render_evaluate(base_url: str) -> None:
    """질문 전송 → 자동 평가 → 저장."""

    models = _api("GET", base_url, "/models") or []
    questions = _api("GET", base_url, "/questions") or []
    prompts = _api("GET", base_url, "/evaluator/prompts") or []
    environments = _api("GET", base_url, "/evaluation-environments") or []
    evaluators = _api("GET", base_url, "/evaluators") or []
    if not models or not questions:
        st.info("먼저 모델과 질문을 등록하세요.")
        return

    model = st.selectbox("모델", models, format_func=lambda m: m["name"])
    question = st.selectbox("질문", questions, format_func=lambda q: q["title"])
    prompt = st.selectbox("평가 프롬프트", [None, *prompts], format_func=lambda p: "(기본)" if p is None else p["name"])
    environment = st.selectbox(
        "평가 환경", [None, *environments], format_func=lambda e: "(미지정)" if e is None else e["name"]
    )
    st.caption(question["content"])

    if st.button("모델에 질문 보내기", type="primary"):
        with st.spinner("응답 대기 중..."):
            data = _api(
                "POST",
                base_url,
                "/llm/chat",
                json={"modelId": model["id"], "message": question["content"]},
                timeout=LLM_REQUEST_TIMEOUT,
            )
        if data:
            st.session_state["chat_result"] = {**data, "modelId": model["id"], "questionId": question["id"]}
            st.session_state.pop("auto_result", None)

    chat_result = st.session_state.get("chat_result")
    if not chat_result:
        return
    st.text_area("모델 응답", value=chat_result["response"], height=240, disabled=True)
    st.caption(f"{chat_result['modelName']} / {chat_result.get('processingTime', 0):.2f}s")

    if st.button("자동 평가"):
        with st.spinner("평가 모델 호출 중..."):
            body = {
                "questionContent": question["content"],
                "llmResponse": chat_result["response"],
                "promptId": prompt["id"] if prompt else None,
            }
            auto = _api("POST", base_url, "/evaluator/auto-evaluate", json=body, timeout=LLM_REQUEST_TIMEOUT)
        if auto:
            st.session_state["auto_result"] = auto

    auto = st.session_state.get("auto_result") or {}
    auto_scores = auto.get("scores") or {}
    auto_comments = auto.get("comments") or {}
    with st.form("save_evaluation"):
        cols = st.columns(len(SCORE_LABELS))
        scores: dict[str, float] = {}
        for col, (field, label) in zip(cols, SCORE_LABELS.items()):
            with col:
                scores[field] = st.slider(label, 1.0, 5.0, float(auto_scores.get(field, 3)), step=0.5)
        comment = st.text_area("총평", value=str(auto_comments.get("overall", "")))
        evaluator = st.selectbox(
            "평가자", [None, *evaluators], format_func=lambda e: "(미지정)" if e is None else e["name"]
        )
        if st.form_submit_button("평가 저장"):
            body = {
                "questionId": chat_result["questionId"],
                "modelId": chat_result["modelId"],
                "response": chat_result["response"],
                "scores": scores,
                "comments": {**{k: v for k, v in auto_comments.items() if isinstance(v, str)}, "overall": comment},
                "environmentId": environment["id"] if environment else None,
                "evaluator": evaluator["name"] if evaluator else None,
                "processingTime": chat_result.get("processingTime"),
            }
            saved = _api("POST", base_url, "/evaluations", json=body)
            if saved:
                st.success(f"저장했습니다. overall={saved['scores']['overall']}")


def _render_analytics(base_url: str) -> None:
    data = _api("GET", base_url, "/analytics")
    if not data:
        return
    summary = data["summary"]
    cols = st.columns(3)
    cols[0].metric("평가 수", summary.get("totalEvaluations", 0))
    cols[1].metric("모델 수", summary.get("modelCount", 0))
    cols[2].metric("질문 수", summary.get("questionCount", 0))

    st.subheader("모델별")
    st.dataframe(
        [{"model": s["modelName"], "count": s["count"], **s["averageScores"]} for s in data["modelStats"]],
        use_container_width=True,
    )
    st.subheader("질문별")
    st.dataframe(
        [{"question": s["questionTitle"], "count": s["count"], **s["averageScores"]} for s in data["questionStats"]],
        use_container_width=True,
    )
    st.subheader("총점 분포")
    st.bar_chart({str(item["score"]): item["count"] for item in data["distribution"]})
    if data["timeSeries"]:
        st.subheader("월별 추이")
        st.line_chart({item["month"]: item["averageOverall"] for item in data["timeSeries"]})

    csv_bytes = _api("GET", base_url, "/evaluations/export")
    if csv_bytes:
        st.download_button("CSV 다운로드", data=csv_bytes, file_name="evaluation_results.csv", mime="text/csv")


def main() -> None:
    logger.debug("main:시작")
    st.title("🧪 LLM Evaluator")
    base_url = _render_sidebar()
    tab_catalog, tab_evaluate, tab_analytics = st.tabs(["등록", "평가", "분석"])
    with tab_catalog:
        _render_catalog(base_url)
    with tab_evaluate:
        _render_evaluate(base_url)
    with tab_analytics:
        _render_analytics(base_url)


main()
