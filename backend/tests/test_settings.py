from decimal import Decimal

from berry_events.core.config import Settings


def test_cors_allow_all_overrides_origins():
    s = Settings(_env_file=None, CORS_ALLOW_ALL=True, CORS_ORIGINS="http://a.test")
    assert s.CORS_ORIGINS == ["*"]


def test_cors_origins_parse_from_csv_and_json():
    assert Settings(_env_file=None, CORS_ORIGINS="http://a.test, http://b.test").CORS_ORIGINS == [
        "http://a.test",
        "http://b.test",
    ]
    assert Settings(_env_file=None, CORS_ORIGINS='["http://c.test"]').CORS_ORIGINS == ["http://c.test"]


def test_env_file_values(tmp_path):
    env_file = tmp_path / "booking.env"
    env_file.write_text("PLATFORM_FEE_RATE=0.2\nCART_MAX_ITEMS=5\nDEFAULT_CURRENCY=USD\n")
    s = Settings(_env_file=str(env_file))
    assert s.PLATFORM_FEE_RATE == Decimal("0.2")
    assert s.CART_MAX_ITEMS == 5
    assert s.DEFAULT_CURRENCY == "USD"
