import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_client_secret_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "client_secret=EHx9-zz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "EHx9-zz" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_bearer_header_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "Authorization: Bearer A21AAxyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "A21AAxyz" not in result["header"]
        assert result["header"] == "Authorization: Bearer ***MASKED***"

    def test_basic_header_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "authorization=Basic dGVzdDpzZWNyZXQ="}
        result = mask_sensitive_data(None, None, event_dict)
        assert "dGVzdDpzZWNyZXQ=" not in result["header"]

    def test_non_string_values_untouched(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "status_code": 401, "attempt": 2}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["status_code"] == 401
        assert result["attempt"] == 2
