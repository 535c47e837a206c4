"""
creatives 패키지 — 크리에이티브 라이브러리 데이터 접근 코어

흐름:
    필터 선택값
        └─► creatives.query.build_listing_query()   (조인 방식 전환 + IS NULL / = 조건)
                └─► DB ─► creatives.assembler        (중첩 관계 정규화 → VideoCard)
    facets.build_facet_catalog()                     (필터 후보 + has_null)

    제출 폼
        └─► creatives.upsert.UpsertCoordinator
                ├─ identifiers.require_youtube_id()
                ├─ videos UPSERT (youtube_id)
                └─ 종속 4테이블 단계별 저장 (부분 실패 기록)

진입점은 creatives.service 의 apply_filter / submit_record 입니다.
"""
