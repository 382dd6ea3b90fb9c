"""
Root pytest configuration for backend tests.

Provides:
- Backend directory on sys.path (flat imports: `from services.x import ...`)
- Sample raw rows for both sources
- A pipeline config pinned to a fixed run date
"""

import sys
from datetime import date
from pathlib import Path

# Add backend directory to Python path so imports like
# `from services.pipeline import ...` and `from utils.normalize import ...` work
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest

from services.pipeline_config import PipelineConfig

# Cutoff for FIXED_TODAY + 30 days
FIXED_TODAY = date(2024, 6, 1)
FIXED_CUTOFF = '2024-07-01'


@pytest.fixture
def fixed_config():
    """Default settings with the run date pinned (cutoff 2024-07-01)."""
    return PipelineConfig(today=FIXED_TODAY)


@pytest.fixture
def whobuilds_row():
    """A Whobuilds row that passes every filter."""
    return {
        '공종': '아파트',
        '공사명': '역삼동 공동주택 신축공사',
        '착공일/준공일': '2024.01.15~2025.12.31',
        '전화/팩스': 'h:02-1234-5678/02-1234-5679',
        '공사개요': '대지면적: 5,000㎡, 건축면적: 1,234.5㎡, 지하2층 지상25층, 300세대',
        '주소': '서울특별시 강남구 역삼동 일원',
        '발주처': '역삼지역주택조합',
        '시공사': '한빛건설',
        '등록일': '2024.05.20',
    }


@pytest.fixture
def narajang_row():
    """A Narajang row that passes every filter."""
    return {
        '공공조달분류': '건축공사',
        '계약명': '[긴급]행정복지센터 신축공사',
        '착수일자': '20240301',
        '총완수일자': '2025-06-30',
        '기준일자': '2024.05.01',
        '최초계약일자': '2024-02-20',
        '현장지역': '경기도 광주시',
        '수요기관': '경기도 광주시청',
        '계약시점 업체명': '나라종합건설',
        '계약변경차수': 1,
        '계약금액': 250000000,
        '공동수급구성방식': '단독계약',
        '계약시점 기업형태구분': '중소기업',
        '계약시점 업체지역': '경기도',
        '업체사업자등록번호': '123-45-67890',
    }
