"""Tests for endpoint derivation and the instance bootstrap script."""

from app.domain.billing import get_plan
from app.domain.live.channel.bootstrap import generate_bootstrap_script
from app.domain.live.channel.endpoints import derive_endpoints


class TestDeriveEndpoints:
    def test_endpoint_conventions(self):
        endpoints = derive_endpoints("54.1.2.3", "ch_abc")

        assert endpoints.hls_url == "http://54.1.2.3:8000/hls/ch_abc/playlist.m3u8"
        assert endpoints.rtmp_url == "rtmp://54.1.2.3:1935/live/ch_abc"
        assert endpoints.transcoding_url == "http://54.1.2.3:8000/api/status"
        assert endpoints.health_check_url == "http://54.1.2.3:8000/health"
        assert endpoints.status_server_url == "http://54.1.2.3:8080/health"


class TestBootstrapScript:
    def test_script_configures_channel_services(self):
        settings = get_plan("pro").default_hls_settings()

        script = generate_bootstrap_script("ch_abc", settings, "https://git.example.com/transcoder.git")

        assert script.startswith("#!/bin/bash")
        assert "ch_abc" in script
        assert "listen 1935" in script
        assert "listen 8000" in script
        assert "https://git.example.com/transcoder.git" in script
        assert "1080p" in script

    def test_script_carries_no_credentials(self):
        settings = get_plan("basic").default_hls_settings()

        script = generate_bootstrap_script("ch_abc", settings, "https://git.example.com/transcoder.git")

        assert "AWS_SECRET_ACCESS_KEY" not in script
        assert "AWS_ACCESS_KEY_ID" not in script
