"""
Webhook Server

Flask application receiving GitHub webhook deliveries. Reviews are
dispatched to a background pool and the request is answered right
away with ``202 Accepted``.
"""

import asyncio
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request
from pydantic import ValidationError

from .payload import PullRequestEvent, SUPPORTED_ACTIONS
from .signature import WebhookSignatureVerifier


logger = logging.getLogger(__name__)

webhook_bp = Blueprint('webhook', __name__, url_prefix='/webhook')


class ReviewDispatcher:
    """
    Runs reviews in the background.

    Each job gets its own event loop on a pool thread. Jobs cannot be
    cancelled; ``shutdown`` waits for the ones in flight.
    """

    def __init__(self, orchestrator, max_workers: int = 4):
        self.orchestrator = orchestrator
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="review")

    def dispatch(self, event: PullRequestEvent) -> Future:
        """Queue a review of the event's pull request."""
        return self.executor.submit(self._run_review, event)

    def _run_review(self, event: PullRequestEvent):
        return asyncio.run(self.orchestrator.process_pull_request(event))

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)


@webhook_bp.route('/github', methods=['POST'])
def handle_github_webhook():
    """Receive a GitHub webhook delivery."""
    verifier: WebhookSignatureVerifier = current_app.extensions['signature_verifier']
    dispatcher: ReviewDispatcher = current_app.extensions['review_dispatcher']

    payload = request.get_data()
    signature = request.headers.get('X-Hub-Signature-256')
    event_type = request.headers.get('X-GitHub-Event', '')
    delivery_id = request.headers.get('X-GitHub-Delivery', 'unknown')

    logger.info(f"Received GitHub webhook event: {event_type} (delivery: {delivery_id})")

    if not verifier.verify_signature(payload, signature):
        logger.warning(f"Invalid webhook signature for delivery: {delivery_id}")
        return "Invalid signature", 401

    if event_type != 'pull_request':
        logger.debug(f"Ignoring non-PR event: {event_type}")
        return "Event ignored", 200

    try:
        data = json.loads(payload)
        action = data.get('action') if isinstance(data, dict) else None

        if action not in SUPPORTED_ACTIONS:
            logger.debug(f"Ignoring PR action: {action}")
            return "Event ignored", 200

        event = PullRequestEvent.model_validate(data)
        logger.info(f"Processing PR action: {action} for {event.repository.owner.login}/{event.repository.name}#{event.pull_request.number}")
        dispatcher.dispatch(event)
        return "Processing started", 202

    except (ValueError, ValidationError) as e:
        logger.error(f"Error processing webhook {delivery_id}: {e}")
        return "Error processing webhook", 500


@webhook_bp.route('/health', methods=['GET'])
def health():
    """Liveness check."""
    return "OK", 200


@webhook_bp.route('/health/details', methods=['GET'])
def health_details():
    """Component status, including LLM availability."""
    llm_client = current_app.extensions.get('llm_client')
    llm_available = llm_client.is_available() if llm_client is not None else None

    return jsonify({
        'status': 'healthy',
        'service': 'pr-review-bot',
        'components': {
            'llm': {
                'status': 'disabled' if llm_available is None else ('healthy' if llm_available else 'unhealthy')
            }
        }
    })


def create_app(
    config=None,
    orchestrator=None,
    verifier: Optional[WebhookSignatureVerifier] = None,
    dispatcher: Optional[ReviewDispatcher] = None,
    llm_client=None
) -> Flask:
    """
    Build the Flask application.

    Collaborators not passed in are built from ``config`` (default:
    ``get_config()``), which also validates the configuration and loads
    the GitHub App key.

    Args:
        config: AppConfig
        orchestrator: ReviewOrchestrator
        verifier: Signature verifier
        dispatcher: Background dispatcher
        llm_client: Client used by the detailed health check
    """
    if verifier is None or dispatcher is None:
        from ..config import get_config
        from ..orchestrator import build_orchestrator

        config = config or get_config()
        config.validate()
        if verifier is None:
            verifier = WebhookSignatureVerifier(config.github.app.webhook_secret)
        if dispatcher is None:
            orchestrator = orchestrator or build_orchestrator(config)
            dispatcher = ReviewDispatcher(orchestrator, max_workers=config.server.review_workers)
            llm_client = llm_client or getattr(orchestrator.llm_engine, 'client', None)

    app = Flask(__name__)
    app.extensions['signature_verifier'] = verifier
    app.extensions['review_dispatcher'] = dispatcher
    app.extensions['llm_client'] = llm_client
    app.register_blueprint(webhook_bp)

    logger.info("Webhook application initialized")
    return app
