"""
Tests for the offline message flow demo script.
"""

import json

from scripts.demo_flow import MessageFlowDemo, main


class TestMessageFlowDemo:
    """Test cases for the demo script."""

    def test_complete_flow(self):
        """Test that every demo step completes."""
        demo = MessageFlowDemo(
            "https://auth.example.com", "demo-client", "com.example.app:/oauth2redirect", "openid"
        )
        results = demo.run_complete_flow("refresh-token", "id-token")

        assert results["success"] is True
        assert results["errors"] == []
        assert results["steps_completed"][-1] == "end_session"
        assert results["logout_uri"].startswith("https://auth.example.com/logout?")

    def test_main_writes_output(self, tmp_path):
        """Test the command line entry point."""
        output = tmp_path / "results.json"

        assert main(["--output", str(output)]) == 0
        assert json.loads(output.read_text())["success"] is True

    def test_main_reports_failure(self):
        """Test that a relative redirect URI fails the demo."""
        assert main(["--redirect-uri", "/callback"]) == 1
