"""Province codes with their centre coordinates, used for weather lookups."""

from typing import Dict, NamedTuple, Optional


class ProvinceLocation(NamedTuple):
    code: str
    name: str
    lat: float
    lon: float


_LOCATIONS = [
    ProvinceLocation("HN", "Hà Nội", 21.0285, 105.8542),
    ProvinceLocation("HCM", "Hồ Chí Minh", 10.8231, 106.6297),
    ProvinceLocation("HP", "Hải Phòng", 20.8449, 106.6881),
    ProvinceLocation("DN", "Đà Nẵng", 16.0544, 108.2022),
    ProvinceLocation("CT", "Cần Thơ", 10.0452, 105.7469),
    ProvinceLocation("AG", "An Giang", 10.5216, 105.1259),
    ProvinceLocation("BR-VT", "Bà Rịa - Vũng Tàu", 10.3460, 107.0843),
    ProvinceLocation("BL", "Bạc Liêu", 9.2942, 105.7278),
    ProvinceLocation("BK", "Bắc Kạn", 22.1470, 105.8342),
    ProvinceLocation("BG", "Bắc Giang", 21.2810, 106.1970),
    ProvinceLocation("BN", "Bắc Ninh", 21.1861, 106.0763),
    ProvinceLocation("BT", "Bến Tre", 10.2434, 106.3759),
    ProvinceLocation("BD", "Bình Định", 13.7750, 109.2233),
    ProvinceLocation("BP", "Bình Phước", 11.6471, 106.6056),
    ProvinceLocation("BU", "Bình Thuận", 10.9287, 108.1021),
    ProvinceLocation("CM", "Cà Mau", 9.1776, 105.1527),
    ProvinceLocation("CB", "Cao Bằng", 22.6657, 106.2577),
    ProvinceLocation("DL", "Đắk Lắk", 12.6662, 108.0500),
    ProvinceLocation("DG", "Đắk Nông", 12.0046, 107.6877),
    ProvinceLocation("DB", "Điện Biên", 21.3924, 103.0230),
    ProvinceLocation("DNA", "Đồng Nai", 10.9574, 106.8429),
    ProvinceLocation("DT", "Đồng Tháp", 10.4930, 105.6882),
    ProvinceLocation("GL", "Gia Lai", 13.9700, 108.0147),
    ProvinceLocation("HG", "Hà Giang", 22.8026, 104.9784),
    ProvinceLocation("HNA", "Hà Nam", 20.5433, 105.9220),
    ProvinceLocation("HT", "Hà Tĩnh", 18.3330, 105.9000),
    ProvinceLocation("HD", "Hải Dương", 20.9373, 106.3146),
    ProvinceLocation("HB", "Hòa Bình", 20.8136, 105.3383),
    ProvinceLocation("HY", "Hưng Yên", 20.6464, 106.0513),
    ProvinceLocation("KH", "Khánh Hòa", 12.2388, 109.1967),
    ProvinceLocation("KG", "Kiên Giang", 9.9580, 105.1322),
    ProvinceLocation("LC", "Lào Cai", 22.4862, 103.9750),
    ProvinceLocation("LD", "Lâm Đồng", 11.9404, 108.4583),
    ProvinceLocation("LS", "Lạng Sơn", 21.8537, 106.7613),
    ProvinceLocation("LB", "Lai Châu", 22.3864, 103.4703),
    ProvinceLocation("LA", "Long An", 10.6086, 106.6714),
    ProvinceLocation("ND", "Nam Định", 20.4200, 106.1683),
    ProvinceLocation("NA", "Nghệ An", 18.6796, 105.6813),
    ProvinceLocation("NB", "Ninh Bình", 20.2537, 105.9750),
    ProvinceLocation("NT", "Ninh Thuận", 11.5646, 108.9881),
    ProvinceLocation("PT", "Phú Thọ", 21.3081, 105.3131),
    ProvinceLocation("PY", "Phú Yên", 13.0880, 109.0927),
    ProvinceLocation("QB", "Quảng Bình", 17.4683, 106.6227),
    ProvinceLocation("QNA", "Quảng Nam", 15.8801, 108.3380),
    ProvinceLocation("QG", "Quảng Ngãi", 15.1167, 108.8000),
    ProvinceLocation("QN", "Quảng Ninh", 21.0064, 107.2925),
    ProvinceLocation("QT", "Quảng Trị", 16.7500, 107.2000),
    ProvinceLocation("ST", "Sóc Trăng", 9.6025, 105.9739),
    ProvinceLocation("SL", "Sơn La", 21.3257, 103.9167),
    ProvinceLocation("TN", "Tây Ninh", 11.3131, 106.0963),
    ProvinceLocation("TB", "Thái Bình", 20.4465, 106.3367),
    ProvinceLocation("TY", "Thái Nguyên", 21.5942, 105.8481),
    ProvinceLocation("TH", "Thanh Hóa", 19.8067, 105.7843),
    ProvinceLocation("HU", "Thừa Thiên Huế", 16.4637, 107.5908),
    ProvinceLocation("TG", "Tiền Giang", 10.3600, 106.3600),
    ProvinceLocation("TV", "Trà Vinh", 9.9347, 106.3453),
    ProvinceLocation("TQ", "Tuyên Quang", 21.8183, 105.2117),
    ProvinceLocation("VL", "Vĩnh Long", 10.2537, 105.9750),
    ProvinceLocation("VP", "Vĩnh Phúc", 21.3081, 105.5972),
    ProvinceLocation("YB", "Yên Bái", 21.7051, 104.8694),
]

PROVINCE_LOCATIONS: Dict[str, ProvinceLocation] = {loc.code: loc for loc in _LOCATIONS}


def get_province_location(province_code: str) -> Optional[ProvinceLocation]:
    return PROVINCE_LOCATIONS.get(province_code.upper())
