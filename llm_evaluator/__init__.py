"""LLM 평가 백엔드 패키지."""
