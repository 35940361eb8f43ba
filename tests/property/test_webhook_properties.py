"""
Property-based tests for webhook dispatch.
"""

import json
from unittest.mock import Mock

from hypothesis import given, settings, strategies as st

from pr_review_bot.webhook.app import create_app
from pr_review_bot.webhook.payload import SUPPORTED_ACTIONS
from pr_review_bot.webhook.signature import WebhookSignatureVerifier


def build_payload(action):
    return {
        'action': action,
        'pull_request': {'number': 3, 'head': {'ref': 'dev', 'sha': 'abc'}},
        'repository': {'name': 'repo', 'owner': {'login': 'org'}},
    }


class TestWebhookDispatchProperties:
    """Property tests for the webhook dispatch gate."""

    @settings(max_examples=50)
    @given(
        event=st.sampled_from(["pull_request", "push", "issues", "ping"]),
        action=st.one_of(st.sampled_from(sorted(SUPPORTED_ACTIONS) + ["closed", "labeled"]), st.text(max_size=10)),
        signed=st.booleans(),
    )
    def test_dispatch_only_for_signed_supported_pr_events(self, event, action, signed):
        """
        Property: a review is dispatched iff the signature is valid, the event is
        pull_request and the action is supported.
        """
        verifier = WebhookSignatureVerifier("secret")
        dispatcher = Mock()
        client = create_app(verifier=verifier, dispatcher=dispatcher).test_client()

        body = json.dumps(build_payload(action)).encode()
        signature = verifier.compute_signature(body) if signed else "sha256=" + "f" * 64
        response = client.post('/webhook/github', data=body, headers={
            'X-GitHub-Event': event,
            'X-Hub-Signature-256': signature,
        })

        should_dispatch = signed and event == "pull_request" and action in SUPPORTED_ACTIONS
        assert dispatcher.dispatch.called is should_dispatch
        if not signed:
            assert response.status_code == 401
        elif should_dispatch:
            assert response.status_code == 202
        else:
            assert response.status_code == 200
