#!/usr/bin/env python3
"""
OAuth Message Demo Flow Script

This script walks through the life of the OAuth messages a mobile client
handles, without any network or browser: it builds an authorization request,
simulates the redirect back from the authorization server, persists and
restores the request through the dispatcher, and prepares a token revocation
call followed by a logout request.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Make the project root importable when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.messages import management
from src.messages.authorization import AuthorizationRequest
from src.messages.end_session import EndSessionRequest
from src.messages.service_configuration import AuthorizationServiceConfiguration
from src.messages.token_revocation import TokenRevocationRequest, TokenRevocationResponse
from src.shared.exceptions import OAuthMessageError
from src.shared.logging_utils import OAuthLogger
from src.shared.oauth_models import ResponseType


class MessageFlowDemo:
    """Offline walk-through of authorization, revocation and logout messages"""

    def __init__(self, issuer: str, client_id: str, redirect_uri: str, scope: str):
        self.logger = OAuthLogger("HOST-APP")
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.scope = scope

        self.configuration = AuthorizationServiceConfiguration(
            authorization_endpoint=f"{issuer}/authorize",
            token_endpoint=f"{issuer}/token",
            end_session_endpoint=f"{issuer}/logout",
            revocation_endpoint=f"{issuer}/revoke",
        )

    def step1_build_authorization_request(self) -> AuthorizationRequest:
        """Build the authorization request and show the browser URL"""
        print("\n📝 Step 1: Build authorization request")
        request = (
            AuthorizationRequest.Builder(
                self.configuration, self.client_id, ResponseType.CODE.value, self.redirect_uri
            )
            .set_scope(self.scope)
            .build()
        )
        print(f"   🌐 Authorization URL: {request.to_uri()}")
        return request

    def step2_persist_and_restore(self, request: AuthorizationRequest) -> AuthorizationRequest:
        """Persist the pending request as JSON and restore it through the dispatcher"""
        print("\n💾 Step 2: Persist pending request and restore it")
        stored = request.json_serialize_string()
        print(f"   📦 Stored {len(stored)} bytes of JSON")

        restored = management.request_from(stored)
        print(f"   🔁 Restored as {type(restored).__name__} ({restored.kind.value})")
        return restored

    def step3_handle_redirect(self, request: AuthorizationRequest, code: str) -> Dict[str, Any]:
        """Simulate the redirect back from the authorization server"""
        print("\n↩️  Step 3: Handle redirect")
        redirect = f"{self.redirect_uri}?code={code}&state={request.state}&session_state=demo"
        response = management.response_with(request, redirect)
        print(f"   ✅ Authorization code: {response.authorization_code}")
        print(f"   ➕ Additional parameters: {dict(response.additional_parameters)}")

        intent = response.to_intent()
        delivered = management.response_from(intent)
        print(f"   📨 Delivered to host app as {type(delivered).__name__}")
        return delivered.json_serialize()

    def step4_revoke_token(self, token: str) -> Dict[str, Any]:
        """Prepare a token revocation call and record its response"""
        print("\n🗑️  Step 4: Prepare token revocation")
        request = (
            TokenRevocationRequest.Builder(self.configuration, self.client_id)
            .set_token(token)
            .set_additional_parameters({"token_type_hint": "refresh_token"})
            .build()
        )
        print(f"   🎯 POST {request.to_uri()}")
        print(f"   📋 Form parameters: {request.get_request_parameters()}")

        response = TokenRevocationResponse.Builder(request).from_response_json_string("{}").build()
        restored = TokenRevocationResponse.json_deserialize_string(response.json_serialize_string())
        print(f"   🔁 Response round-trip equal: {restored == response}")
        return response.json_serialize()

    def step5_end_session(self, id_token: str) -> str:
        """Build the logout request"""
        print("\n🚪 Step 5: Build end session request")
        request = (
            EndSessionRequest.Builder(self.configuration)
            .set_id_token_hint(id_token)
            .set_post_logout_redirect_uri(self.redirect_uri)
            .build()
        )
        logout_uri = request.to_uri()
        print(f"   🌐 Logout URL: {logout_uri}")
        return logout_uri

    def run_complete_flow(self, token: str, id_token: str) -> Dict[str, Any]:
        """
        Run every step of the demo.

        Returns:
            Dictionary with the JSON forms produced along the way
        """
        print("🚀 OAuth Message Flow Demo")
        print("=" * 60)
        print(f"🏢 Client ID: {self.client_id}")
        print(f"🎯 Scope: {self.scope}")
        print(f"🔄 Redirect URI: {self.redirect_uri}")
        print("=" * 60)

        results: Dict[str, Any] = {"success": False, "steps_completed": [], "errors": []}

        try:
            request = self.step1_build_authorization_request()
            results["steps_completed"].append("build_authorization_request")

            request = self.step2_persist_and_restore(request)
            results["steps_completed"].append("persist_and_restore")

            results["authorization_response"] = self.step3_handle_redirect(request, "demo-code")
            results["steps_completed"].append("handle_redirect")

            results["revocation_response"] = self.step4_revoke_token(token)
            results["steps_completed"].append("revoke_token")

            results["logout_uri"] = self.step5_end_session(id_token)
            results["steps_completed"].append("end_session")

            results["success"] = True
            print("\n🎉 Demo completed successfully!")

        except OAuthMessageError as e:
            results["errors"].append(str(e))
            print(f"\n❌ Demo failed: {e}")
            self.logger.log_error(type(e).__name__, str(e), {
                "last_step": results["steps_completed"][-1] if results["steps_completed"] else "none"
            })

        return results


def main(argv: Optional[list] = None) -> int:
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Offline demonstration of OAuth message construction and dispatch"
    )
    parser.add_argument("--issuer", default="https://auth.example.com", help="Provider base URL")
    parser.add_argument("--client-id", default="demo-client", help="OAuth client ID")
    parser.add_argument(
        "--redirect-uri",
        default="com.example.app:/oauth2redirect",
        help="Client redirect URI"
    )
    parser.add_argument("--scope", default="openid profile", help="Requested scope")
    parser.add_argument("--token", default="demo-refresh-token", help="Token to revoke")
    parser.add_argument("--id-token", default="demo-id-token", help="ID token hint for logout")
    parser.add_argument("--output", help="Save results to JSON file")

    args = parser.parse_args(argv)

    # Route the library's oauth.* records to the console
    logging.basicConfig(format="%(message)s")

    demo = MessageFlowDemo(args.issuer, args.client_id, args.redirect_uri, args.scope)
    results = demo.run_complete_flow(args.token, args.id_token)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(results, f, indent=2, default=str)
        print(f"\n💾 Results saved to: {args.output}")

    return 0 if results["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
