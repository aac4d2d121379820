"""finishline.integrations: outbound service gateways.

All outbound HTTP calls to third-party APIs go through a gateway in this
package, never via bare `requests` calls in services or blueprints.

Current gateways:
  slack_gateway.SlackGateway: Slack Web API (chat.postMessage)
"""
