"""
서버 측 도메인 로직 패키지
- submission: 회수 요청 접수 파이프라인
- request_list: 관리자 목록 필터/검색/정렬
- backfill: 주소 백필 작업
- geocoder / storage: 외부 연동 (역지오코딩, 사진 저장소)
"""
