"""
Centralized Constants - SINGLE SOURCE OF TRUTH

Canonical export schema, construction-type codes, region codes and the
default exclusion lists should be defined here and imported elsewhere.

DO NOT duplicate these definitions in other files.

Region tables are ORDERED lists of (substring, code) pairs. Lookups are
first-match, not longest-match, so the declaration order is part of the
contract:
- "경기" must come before "광주" ("경기도 광주시" is in Gyeonggi, not Gwangju)
- ambiguous district names ("중구", "강서구", ...) only appear with a city
  prefix
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple


# =============================================================================
# CANONICAL EXPORT SCHEMA
# =============================================================================

COL_NO = 'No.'
COL_PROVINCE = '시도'
COL_SUB_REGION = '시군구'
COL_TYPE = '공종'
COL_NAME = '공사명'
COL_START_DATE = '착공일'
COL_COMPLETION_DATE = '준공(승인)일'
COL_ADDRESS = '주소'
COL_AGENCY = '발주(수요처)'
COL_CONTRACTOR = '시공사'
COL_CONTRACTOR_CONTACT = '시공사연락처'
COL_BUILDING_AREA = '건축면적(㎡)'
COL_BASEMENT_FLOORS = '지하층수'
COL_GROUND_FLOORS = '지상층수'
COL_HOUSEHOLDS = '세대수'
COL_SOURCE = '출처'
COL_REGISTERED_DATE = '등록일'
COL_DETAIL_TYPE = '상세공종'
COL_OVERVIEW = '공사개요'
COL_FIRST_CONTRACT_DATE = '최초계약일'
COL_CONTRACT_REVISION = '계약변경차수'
COL_CONTRACT_AMOUNT = '계약금액'
COL_JOINT_CONTRACT = '공동계약여부'
COL_COMPANY_TYPE = '업체구분'
COL_MAIN_BUSINESS = '주업종'
COL_BUSINESS_NUMBER = '사업자번호'
COL_SITE_AREA = '대지면적(㎡)'
COL_STRUCTURE = '주구조'
COL_MAIN_USE = '주용도'
COL_HEIGHT = '높이'

# Export column order. "No." + 29 named fields.
COLUMNS = [
    COL_NO,
    COL_PROVINCE,
    COL_SUB_REGION,
    COL_TYPE,
    COL_NAME,
    COL_START_DATE,
    COL_COMPLETION_DATE,
    COL_ADDRESS,
    COL_AGENCY,
    COL_CONTRACTOR,
    COL_CONTRACTOR_CONTACT,
    COL_BUILDING_AREA,
    COL_BASEMENT_FLOORS,
    COL_GROUND_FLOORS,
    COL_HOUSEHOLDS,
    COL_SOURCE,
    COL_REGISTERED_DATE,
    COL_DETAIL_TYPE,
    COL_OVERVIEW,
    COL_FIRST_CONTRACT_DATE,
    COL_CONTRACT_REVISION,
    COL_CONTRACT_AMOUNT,
    COL_JOINT_CONTRACT,
    COL_COMPANY_TYPE,
    COL_MAIN_BUSINESS,
    COL_BUSINESS_NUMBER,
    COL_SITE_AREA,
    COL_STRUCTURE,
    COL_MAIN_USE,
    COL_HEIGHT,
]

# Composite business key used for master-set deduplication
DEDUP_KEY_FIELDS = [COL_NAME, COL_AGENCY, COL_CONTRACTOR, COL_ADDRESS]

SOURCE_WHOBUILDS = '01'
SOURCE_NARAJANG = '02'


# =============================================================================
# RAW SOURCE COLUMNS
# =============================================================================

# Whobuilds (field-log export)
WB_TYPE = '공종'
WB_NAME = '공사명'
WB_DATE_RANGE = '착공일/준공일'
WB_CONTACT = '전화/팩스'
WB_OVERVIEW = '공사개요'
WB_ADDRESS = '주소'
WB_AGENCY = '발주처'
WB_CONTRACTOR = '시공사'
WB_REGISTERED_DATE = '등록일'

# Narajang (G2B procurement contract export)
NJ_TYPE = '공공조달분류'
NJ_NAME = '계약명'
NJ_START_DATE = '착수일자'
NJ_COMPLETION_DATE = '총완수일자'
NJ_REFERENCE_DATE = '기준일자'
NJ_FIRST_CONTRACT_DATE = '최초계약일자'
NJ_SITE_REGION = '현장지역'
NJ_AGENCY = '수요기관'
NJ_CONTRACTOR = '계약시점 업체명'
NJ_CONTRACT_REVISION = '계약변경차수'
NJ_CONTRACT_AMOUNT = '계약금액'
NJ_JOINT_METHOD = '공동수급구성방식'
NJ_COMPANY_TYPE = '계약시점 기업형태구분'
NJ_COMPANY_REGION = '계약시점 업체지역'
NJ_BUSINESS_NUMBER = '업체사업자등록번호'

NJ_SOLE_CONTRACT = '단독계약'

# Whobuilds literals stripped during normalization
WB_ADDRESS_VICINITY = '일원'
WB_PHONE_PREFIX = 'h:'

# Ordering agency excluded from Whobuilds
DEFENSE_AGENCY = '방위사업청'


# =============================================================================
# CONSTRUCTION TYPE CODES
# =============================================================================
# A0 building, B0 civil, C0 plant/industrial, D0 landscape, E0 other

CONSTR_MAPPING: Dict[str, str] = {
    # Whobuilds labels
    '아파트': 'A0',
    '주상복합': 'A0',
    '오피스텔': 'A0',
    '연립/다세대': 'A0',
    '업무시설': 'A0',
    '근린생활시설': 'A0',
    '판매시설': 'A0',
    '공장': 'A0',
    '물류창고': 'A0',
    '교육연구시설': 'A0',
    '의료시설': 'A0',
    '숙박시설': 'A0',
    '지식산업센터': 'A0',
    '도로': 'B0',
    '교량': 'B0',
    '터널': 'B0',
    '단지조성': 'B0',
    '상하수도': 'B0',
    '하천': 'B0',
    '플랜트': 'C0',
    '조경': 'D0',
    # Narajang procurement classes
    '건축공사': 'A0',
    '토목공사': 'B0',
    '산업환경설비공사': 'C0',
    '조경공사': 'D0',
}

DETAIL_CONSTR_MAPPING: Dict[str, str] = {
    '아파트': 'A01',
    '주상복합': 'A01',
    '오피스텔': 'A01',
    '연립/다세대': 'A01',
    '업무시설': 'A02',
    '근린생활시설': 'A02',
    '판매시설': 'A02',
    '공장': 'A03',
    '물류창고': 'A03',
    '지식산업센터': 'A03',
    '교육연구시설': 'A04',
    '의료시설': 'A04',
    '숙박시설': 'A05',
    '도로': 'B01',
    '교량': 'B02',
    '터널': 'B02',
    '단지조성': 'B03',
    '상하수도': 'B04',
    '하천': 'B04',
    '플랜트': 'C01',
    '조경': 'D01',
    '건축공사': 'A09',
    '토목공사': 'B09',
    '산업환경설비공사': 'C09',
    '조경공사': 'D09',
}

# Narajang rows with an unmapped procurement class fall back to "other"
NARAJANG_DEFAULT_CONSTR_CODE = 'E0'


# =============================================================================
# REGION CODES (ordered, first match wins)
# =============================================================================

REGION_MAPPING: List[Tuple[str, int]] = [
    ('서울', 11),
    ('부산', 26),
    ('대구', 27),
    ('인천', 28),
    ('경기', 41),
    ('광주', 29),
    ('대전', 30),
    ('울산', 31),
    ('세종', 36),
    ('강원', 51),
    ('충청북도', 43),
    ('충북', 43),
    ('충청남도', 44),
    ('충남', 44),
    ('전라북도', 52),
    ('전북', 52),
    ('전라남도', 46),
    ('전남', 46),
    ('경상북도', 47),
    ('경북', 47),
    ('경상남도', 48),
    ('경남', 48),
    ('제주', 50),
]

REGION_MAPPING2: List[Tuple[str, int]] = [
    # Seoul
    ('서울특별시 중구', 11140),
    ('서울 중구', 11140),
    ('서울특별시 강서구', 11500),
    ('서울 강서구', 11500),
    ('종로구', 11110),
    ('용산구', 11170),
    ('성동구', 11200),
    ('광진구', 11215),
    ('동대문구', 11230),
    ('중랑구', 11260),
    ('성북구', 11290),
    ('강북구', 11305),
    ('도봉구', 11320),
    ('노원구', 11350),
    ('은평구', 11380),
    ('서대문구', 11410),
    ('마포구', 11440),
    ('양천구', 11470),
    ('구로구', 11530),
    ('금천구', 11545),
    ('영등포구', 11560),
    ('동작구', 11590),
    ('관악구', 11620),
    ('서초구', 11650),
    ('강남구', 11680),
    ('송파구', 11710),
    ('강동구', 11740),
    # Busan
    ('부산광역시 중구', 26110),
    ('부산 중구', 26110),
    ('부산광역시 강서구', 26440),
    ('부산 강서구', 26440),
    ('부산진구', 26230),
    ('해운대구', 26350),
    ('기장군', 26710),
    # Daegu
    ('대구광역시 중구', 27110),
    ('대구 중구', 27110),
    ('수성구', 27260),
    ('달서구', 27290),
    ('달성군', 27710),
    # Incheon
    ('인천광역시 중구', 28110),
    ('인천 중구', 28110),
    ('연수구', 28185),
    ('남동구', 28200),
    ('부평구', 28237),
    ('계양구', 28245),
    # Gyeonggi
    ('수원시', 41110),
    ('성남시', 41130),
    ('의정부시', 41150),
    ('안양시', 41170),
    ('부천시', 41190),
    ('광명시', 41210),
    ('평택시', 41220),
    ('안산시', 41270),
    ('고양시', 41280),
    ('과천시', 41290),
    ('남양주시', 41360),
    ('시흥시', 41390),
    ('군포시', 41410),
    ('하남시', 41450),
    ('용인시', 41460),
    ('파주시', 41480),
    ('이천시', 41500),
    ('김포시', 41570),
    ('화성시', 41590),
    ('광주시', 41610),
    ('양주시', 41630),
    # Other metros and major cities
    ('유성구', 30200),
    ('울주군', 31710),
    ('세종특별자치시', 36110),
    ('춘천시', 51110),
    ('원주시', 51130),
    ('청주시', 43110),
    ('천안시', 44130),
    ('아산시', 44200),
    ('전주시', 52110),
    ('여수시', 46130),
    ('순천시', 46150),
    ('포항시', 47110),
    ('구미시', 47190),
    ('창원시', 48120),
    ('김해시', 48250),
    ('양산시', 48330),
    ('제주시', 50110),
    ('서귀포시', 50130),
]


# =============================================================================
# DEFAULT EXCLUSIONS
# =============================================================================

EXCLUDED_CONSTR_TYPES = [
    '전기공사',
    '정보통신공사',
    '소방시설공사',
    '문화재수리공사',
]

EXCLUDED_KEYWORDS = [
    '유지보수',
    '보수공사',
    '철거',
    '도색',
    '방수',
    '석면',
    '단가계약',
    'CCTV',
]


# =============================================================================
# EXPORT FILE NAMES
# =============================================================================

EXPORT_DUPLICATES_NAME = '잠재기회_중복데이터_{date_tag}.xlsx'
EXPORT_RESULT_NAME = '잠재기회_업로드양식_{date_tag}.xlsx'
EXPORT_MASTER_NAME = '잠재기회_통합파일_{date_tag}.xlsx'
EXPORT_CHUNK_NAME = '잠재기회_데이터_{index:02d}.xlsx'


# =============================================================================
# LOOKUP TABLE BUNDLE
# =============================================================================

@dataclass(frozen=True)
class LookupTables:
    """
    Read-only lookup data consumed by the record normalizer.

    Defaults to the tables above; callers may inject their own (e.g. a
    refreshed region list) without touching this module.
    """
    construction_types: Dict[str, str] = field(default_factory=lambda: dict(CONSTR_MAPPING))
    detail_types: Dict[str, str] = field(default_factory=lambda: dict(DETAIL_CONSTR_MAPPING))
    provinces: Tuple[Tuple[str, int], ...] = tuple(REGION_MAPPING)
    sub_regions: Tuple[Tuple[str, int], ...] = tuple(REGION_MAPPING2)


def get_default_lookup_tables() -> LookupTables:
    """Get the lookup tables defined in this module."""
    return LookupTables()
