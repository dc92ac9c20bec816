"""
Tests for the crop candidate set: region lookup, bounds and normalization
"""
import pytest

from app.models.advisory import Region
from app.services.candidate_guard import (
    MAX_CANDIDATES,
    get_crop_candidates,
    normalize_crop_name,
    region_display_name,
    resolve_region,
)


# =============================================================================
# Region gazetteer
# =============================================================================
class TestResolveRegion:

    @pytest.mark.parametrize("province,region", [
        ("Hà Nội", Region.NORTH),
        ("Thành phố Hải Phòng", Region.NORTH),
        ("Thừa Thiên Huế", Region.CENTRAL),
        ("Đà Nẵng", Region.CENTRAL),
        ("Cần Thơ", Region.SOUTH),
        ("TP. Hồ Chí Minh", Region.SOUTH),
        ("Lâm Đồng", Region.HIGHLANDS),
        ("Đắk Lắk", Region.HIGHLANDS),
        ("Atlantis", Region.UNKNOWN),
        ("", Region.UNKNOWN),
    ])
    def test_known_and_unknown_provinces(self, province, region):
        assert resolve_region(province) == region

    def test_display_name_falls_back_to_generic_area(self):
        assert region_display_name(Region.NORTH) == "miền Bắc"
        assert region_display_name(Region.HIGHLANDS) == "khu vực"
        assert region_display_name(Region.UNKNOWN) == "khu vực"


# =============================================================================
# Candidate bounds
# =============================================================================
class TestCandidateBounds:

    @pytest.mark.parametrize("province", ["Hà Nội", "Đà Nẵng", "Cần Thơ", "Lâm Đồng"])
    @pytest.mark.parametrize("month", range(1, 13))
    def test_static_table_is_bounded_and_unique(self, province, month):
        candidates = get_crop_candidates(province, month)
        for names in (candidates.planting, candidates.harvesting):
            assert len(names) <= MAX_CANDIDATES
            assert len(set(names)) == len(names)
            assert all(name == normalize_crop_name(name) for name in names)
        assert candidates.has_authoritative_data is False
        assert candidates.planting

    def test_unknown_region_has_no_candidates(self):
        candidates = get_crop_candidates("Atlantis", 3)
        assert candidates.planting == ()
        assert candidates.harvesting == ()
        assert candidates.region == Region.UNKNOWN

    def test_unknown_month_has_no_candidates(self):
        candidates = get_crop_candidates("Hà Nội", 13)
        assert candidates.planting == ()


# =============================================================================
# Authoritative calendar data
# =============================================================================
class TestAuthoritativeData:

    def test_database_calendar_replaces_static_table(self):
        candidates = get_crop_candidates(
            "Hà Nội", 3, db_planting=["Lúa xuân", "Ngô"], db_harvesting=[]
        )
        assert candidates.planting == ("lúa xuân", "ngô")
        # Harvesting has no stored data, so the static table is used for it.
        assert candidates.harvesting == ("cải bắp", "cải thìa", "hành tây")
        assert candidates.has_authoritative_data is True

    def test_names_are_normalized_and_deduplicated(self):
        candidates = get_crop_candidates(
            "Hà Nội",
            3,
            db_planting=["  Cà   Chua ", "cà chua", "CÀ CHUA", "Dưa hấu", "", None],
        )
        assert candidates.planting == ("cà chua", "dưa hấu")

    def test_database_calendar_is_bounded(self):
        many = [f"cây số {i}" for i in range(12)]
        candidates = get_crop_candidates("Hà Nội", 3, db_planting=many)
        assert len(candidates.planting) == MAX_CANDIDATES
        assert candidates.planting[0] == "cây số 0"

    def test_candidate_building_is_idempotent(self):
        first = get_crop_candidates("Cần Thơ", 5, db_harvesting=["Xoài", "Sầu riêng"])
        second = get_crop_candidates(
            "Cần Thơ", 5, db_harvesting=list(first.harvesting)
        )
        assert first == second
