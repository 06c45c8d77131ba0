"""
어댑터 레이어

외부 저장소(SQLite)와의 연동 및 백엔드별 세션 생성을 담당.
"""
