import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_card_number_key_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "card_number": "4111 1111 1111 1111"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["card_number"] == "***MASKED***"

    def test_cvv_key_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "card_cvv": "123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["card_cvv"] == "***MASKED***"

    def test_cvv_inside_text_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "payload cvv=987 method=card"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "987" not in result["data"]
        assert "method=card" in result["data"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]

    def test_isbn_and_last4_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {
            "event": "checkout.committed",
            "isbn": "9780141439518",
            "card_last4": "1111",
        }
        result = mask_sensitive_data(None, None, event_dict)
        assert result["isbn"] == "9780141439518"
        assert result["card_last4"] == "1111"
        assert result["event"] == "checkout.committed"
