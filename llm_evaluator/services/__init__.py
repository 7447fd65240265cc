"""도메인 서비스 패키지."""
