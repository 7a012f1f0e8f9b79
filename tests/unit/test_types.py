"""
alpacabridge Unit Tests - Shared Types

Unit tests for alpacabridge/types.py (ClientContext URL building and
ClientID selection).

Run:
    pytest tests/unit/test_types.py -v
"""

import pytest


class TestClientContext:
    """Unit tests for ClientContext."""

    def test_device_url(self):
        from alpacabridge.types import ClientContext

        context = ClientContext.create("http://192.168.1.100:11111/", "Telescope", 1)
        assert context.base_url == "http://192.168.1.100:11111"
        assert context.device_type == "telescope"
        assert context.device_url("rightascension") == (
            "http://192.168.1.100:11111/api/v1/telescope/1/rightascension"
        )

    def test_member_lowercased(self):
        from alpacabridge.types import ClientContext

        context = ClientContext.create("http://host:11111", "camera")
        assert context.device_url("ImageArray").endswith("/api/v1/camera/0/imagearray")

    def test_existing_api_prefix_replaced(self):
        """A base URL already pointing into /api/v1/ (reverse proxy) is rebased."""
        from alpacabridge.types import ClientContext

        context = ClientContext.create("https://proxy.example/obs/API/V1/focuser/0", "focuser")
        assert context.device_url("position") == "https://proxy.example/obs/api/v1/focuser/0/position"

    def test_proxy_prefix_preserved(self):
        from alpacabridge.types import ClientContext

        context = ClientContext.create("https://proxy.example/alpaca", "dome")
        assert context.device_url("shutterstatus") == "https://proxy.example/alpaca/api/v1/dome/0/shutterstatus"

    def test_random_client_id_in_range(self):
        from alpacabridge.types import MAX_CLIENT_ID, ClientContext

        for _ in range(50):
            context = ClientContext.create("http://host", "camera")
            assert 0 <= context.client_id <= MAX_CLIENT_ID

    def test_explicit_client_id(self):
        from alpacabridge.types import ClientContext

        assert ClientContext.create("http://host", "camera", client_id=42).client_id == 42

    @pytest.mark.parametrize("client_id", [-1, 65536])
    def test_client_id_out_of_range(self, client_id):
        from alpacabridge.types import ClientContext

        with pytest.raises(ValueError):
            ClientContext.create("http://host", "camera", client_id=client_id)

    def test_frozen(self):
        from dataclasses import FrozenInstanceError

        from alpacabridge.types import ClientContext

        context = ClientContext.create("http://host", "camera")
        with pytest.raises(FrozenInstanceError):
            context.client_id = 7


class TestResponseEvent:
    def test_ok(self):
        from alpacabridge.exceptions import AlpacaNetworkError
        from alpacabridge.types import ResponseEvent

        assert ResponseEvent("http://x", 1, response=3).ok
        assert not ResponseEvent("http://x", 1, error=AlpacaNetworkError("down", "http://x")).ok
