"""
Tests for Record Normalizer

Tests mapping of Whobuilds and Narajang rows onto the canonical record.
"""

import pytest

from constants import (
    COLUMNS,
    COL_PROVINCE, COL_SUB_REGION, COL_TYPE, COL_DETAIL_TYPE, COL_NAME,
    COL_START_DATE, COL_COMPLETION_DATE, COL_ADDRESS, COL_AGENCY,
    COL_CONTRACTOR, COL_CONTRACTOR_CONTACT, COL_BUILDING_AREA,
    COL_BASEMENT_FLOORS, COL_GROUND_FLOORS, COL_HOUSEHOLDS, COL_SOURCE,
    COL_REGISTERED_DATE, COL_OVERVIEW, COL_CONTRACT_AMOUNT, COL_SITE_AREA,
    COL_FIRST_CONTRACT_DATE, COL_CONTRACT_REVISION, COL_JOINT_CONTRACT,
    COL_COMPANY_TYPE, COL_MAIN_BUSINESS, COL_BUSINESS_NUMBER, COL_NO,
    LookupTables,
)
from services.record_normalizer import (
    RecordNormalizer,
    NormalizedRecord,
    empty_record,
    normalize_whobuilds_row,
    normalize_narajang_row,
)


@pytest.fixture
def normalizer():
    """Create a fresh normalizer."""
    return RecordNormalizer()


def test_empty_record_has_every_column():
    record = empty_record()
    assert list(record.keys()) == COLUMNS
    assert all(value == "" for value in record.values())


# =============================================================================
# Whobuilds
# =============================================================================

class TestWhobuildsMapping:
    """Tests for normalize_whobuilds_row()."""

    def test_full_row(self, normalizer, whobuilds_row):
        """All derived fields from a complete row."""
        item = normalizer.normalize_whobuilds_row(whobuilds_row)
        record = item.record

        assert isinstance(item, NormalizedRecord)
        assert item.source == '01'
        assert item.original_type == '아파트'

        assert record[COL_PROVINCE] == 11
        assert record[COL_SUB_REGION] == 11680
        assert record[COL_TYPE] == 'A0'
        assert record[COL_DETAIL_TYPE] == 'A01'
        assert record[COL_NAME] == '역삼동 공동주택 신축공사'
        assert record[COL_START_DATE] == '2024-01-15'
        assert record[COL_COMPLETION_DATE] == '2025-12-31'
        assert record[COL_ADDRESS] == '서울특별시 강남구 역삼동 '
        assert record[COL_AGENCY] == '역삼지역주택조합'
        assert record[COL_CONTRACTOR] == '한빛건설'
        assert record[COL_CONTRACTOR_CONTACT] == '02-1234-5678'
        assert record[COL_BUILDING_AREA] == '1234.5'
        assert record[COL_SITE_AREA] == '5000'
        assert record[COL_BASEMENT_FLOORS] == 2
        assert record[COL_GROUND_FLOORS] == 25
        assert record[COL_HOUSEHOLDS] == '300'
        assert record[COL_SOURCE] == '01'
        assert record[COL_REGISTERED_DATE] == '2024-05-20'
        assert record[COL_OVERVIEW] == whobuilds_row['공사개요']
        assert record[COL_CONTRACT_AMOUNT] == ''

    def test_all_columns_present(self, normalizer, whobuilds_row):
        record = normalizer.normalize_whobuilds_row(whobuilds_row).record
        assert list(record.keys()) == COLUMNS
        assert record[COL_NO] == ''

    def test_original_type_not_in_record(self, normalizer, whobuilds_row):
        record = normalizer.normalize_whobuilds_row(whobuilds_row).record
        assert '_originalConstr' not in record
        assert 'original_type' not in record

    def test_unmapped_type_blank(self, normalizer, whobuilds_row):
        whobuilds_row['공종'] = '전기공사'
        item = normalizer.normalize_whobuilds_row(whobuilds_row)
        assert item.record[COL_TYPE] == ''
        assert item.record[COL_DETAIL_TYPE] == ''
        assert item.original_type == '전기공사'

    def test_single_date_in_range(self, normalizer, whobuilds_row):
        """No '~' means no completion date."""
        whobuilds_row['착공일/준공일'] = '2024.01.15'
        record = normalizer.normalize_whobuilds_row(whobuilds_row).record
        assert record[COL_START_DATE] == '2024-01-15'
        assert record[COL_COMPLETION_DATE] == ''

    def test_missing_cells(self, normalizer):
        """A row with nothing in it still maps to a full record."""
        item = normalizer.normalize_whobuilds_row({})
        record = item.record
        assert item.original_type == ''
        assert record[COL_PROVINCE] == ''
        assert record[COL_SUB_REGION] == ''
        assert record[COL_NAME] == ''
        assert record[COL_START_DATE] == ''
        assert record[COL_CONTRACTOR_CONTACT] == ''
        assert record[COL_BASEMENT_FLOORS] == ''
        assert record[COL_SOURCE] == '01'

    def test_zero_floors_blank(self, normalizer, whobuilds_row):
        whobuilds_row['공사개요'] = '지하0층 지상3층'
        record = normalizer.normalize_whobuilds_row(whobuilds_row).record
        assert record[COL_BASEMENT_FLOORS] == ''
        assert record[COL_GROUND_FLOORS] == 3

    def test_zero_ground_floors_blank(self, normalizer, whobuilds_row):
        whobuilds_row['공사개요'] = '지하1층 지상0층'
        record = normalizer.normalize_whobuilds_row(whobuilds_row).record
        assert record[COL_BASEMENT_FLOORS] == 1
        assert record[COL_GROUND_FLOORS] == ''

    def test_vicinity_removed_once(self, normalizer, whobuilds_row):
        whobuilds_row['주소'] = '경기도 화성시 일원 일원'
        record = normalizer.normalize_whobuilds_row(whobuilds_row).record
        assert record[COL_ADDRESS] == '경기도 화성시  일원'


# =============================================================================
# Narajang
# =============================================================================

class TestNarajangMapping:
    """Tests for normalize_narajang_row()."""

    def test_full_row(self, normalizer, narajang_row):
        item = normalizer.normalize_narajang_row(narajang_row)
        record = item.record

        assert item.source == '02'
        assert item.original_type == '건축공사'

        assert record[COL_PROVINCE] == 41
        assert record[COL_SUB_REGION] == 41610
        assert record[COL_TYPE] == 'A0'
        assert record[COL_DETAIL_TYPE] == 'A09'
        assert record[COL_NAME] == '행정복지센터 신축공사'
        assert record[COL_START_DATE] == '2024-03-01'
        assert record[COL_COMPLETION_DATE] == '2025-06-30'
        assert record[COL_ADDRESS] == '경기도 광주시'
        assert record[COL_AGENCY] == '경기도 광주시청'
        assert record[COL_CONTRACTOR] == '나라종합건설'
        assert record[COL_REGISTERED_DATE] == '2024-05-01'
        assert record[COL_FIRST_CONTRACT_DATE] == '2024-02-20'
        assert record[COL_CONTRACT_REVISION] == 1
        assert record[COL_CONTRACT_AMOUNT] == 250000000
        assert record[COL_JOINT_CONTRACT] == 'N'
        assert record[COL_COMPANY_TYPE] == '중소기업'
        assert record[COL_MAIN_BUSINESS] == '경기도'
        assert record[COL_BUSINESS_NUMBER] == '123-45-67890'
        assert record[COL_SOURCE] == '02'

    def test_unmapped_type_defaults_to_other(self, normalizer, narajang_row):
        narajang_row['공공조달분류'] = '기타공사'
        record = normalizer.normalize_narajang_row(narajang_row).record
        assert record[COL_TYPE] == 'E0'
        assert record[COL_DETAIL_TYPE] == ''

    def test_joint_contract(self, normalizer, narajang_row):
        narajang_row['공동수급구성방식'] = '공동이행방식'
        record = normalizer.normalize_narajang_row(narajang_row).record
        assert record[COL_JOINT_CONTRACT] == 'Y'

    def test_missing_joint_method_is_joint(self, normalizer, narajang_row):
        del narajang_row['공동수급구성방식']
        record = normalizer.normalize_narajang_row(narajang_row).record
        assert record[COL_JOINT_CONTRACT] == 'Y'

    def test_missing_amount_is_zero(self, normalizer, narajang_row):
        narajang_row['계약금액'] = None
        record = normalizer.normalize_narajang_row(narajang_row).record
        assert record[COL_CONTRACT_AMOUNT] == 0

    @pytest.mark.parametrize("revision", [0, None])
    def test_unrevised_contract_blank(self, normalizer, narajang_row, revision):
        narajang_row['계약변경차수'] = revision
        record = normalizer.normalize_narajang_row(narajang_row).record
        assert record[COL_CONTRACT_REVISION] == ''

    def test_whobuilds_only_fields_blank(self, normalizer, narajang_row):
        record = normalizer.normalize_narajang_row(narajang_row).record
        assert record[COL_CONTRACTOR_CONTACT] == ''
        assert record[COL_BASEMENT_FLOORS] == ''
        assert record[COL_HOUSEHOLDS] == ''
        assert record[COL_OVERVIEW] == ''


# =============================================================================
# Batch + statistics
# =============================================================================

class TestBatchNormalization:
    """Tests for batch helpers and statistics."""

    def test_order_preserved(self, normalizer, whobuilds_row):
        rows = [dict(whobuilds_row, 공사명=f'현장 {i}') for i in range(5)]
        items = normalizer.normalize_whobuilds(rows)
        assert [item.record[COL_NAME] for item in items] == [f'현장 {i}' for i in range(5)]

    def test_stats_track_misses(self, normalizer, whobuilds_row):
        rows = [whobuilds_row, dict(whobuilds_row, 공종='미분류', 주소='해외')]
        normalizer.normalize_whobuilds(rows)
        stats = normalizer.get_stats()
        assert stats['whobuilds_rows'] == 2
        assert stats['unmapped_type'] == 1
        assert stats['missing_region'] == 1
        assert stats['missing_completion_date'] == 0

    def test_stats_reset_per_batch(self, normalizer, narajang_row):
        normalizer.normalize_narajang([narajang_row, narajang_row])
        normalizer.normalize_narajang([narajang_row])
        assert normalizer.get_stats()['narajang_rows'] == 1

    def test_inputs_not_modified(self, normalizer, narajang_row):
        before = dict(narajang_row)
        normalizer.normalize_narajang([narajang_row])
        assert narajang_row == before


class TestInjectedTables:
    """Lookup tables can be replaced per normalizer."""

    def test_custom_province_table(self, whobuilds_row):
        tables = LookupTables(provinces=(('강남', 99),))
        item = normalize_whobuilds_row(whobuilds_row, tables)
        assert item.record[COL_PROVINCE] == 99

    def test_custom_type_table(self, narajang_row):
        tables = LookupTables(construction_types={'건축공사': 'Z9'})
        item = normalize_narajang_row(narajang_row, tables)
        assert item.record[COL_TYPE] == 'Z9'
