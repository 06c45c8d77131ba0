"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- transactions: 거래 CRUD
- capital: 자본 조회 및 정합 점검
"""
