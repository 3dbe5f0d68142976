"""
Slack session credentials.

The server talks to Slack's private web API with a browser session rather
than a bot token, so both halves of the session are required.
"""
from .base import CredentialSpec

SLACK_CREDENTIALS = {
    "slack_xoxc": CredentialSpec(
        env_var="SLACK_MCP_XOXC_TOKEN",
        tools=[
            "conversations_history",
            "channels_list",
        ],
        required=True,
        help_url="https://github.com/korotovsky/slack-mcp-server#authentication-setup",
        description="Slack browser session token (xoxc-...). "
                    "Copy it from the web client's localStorage.",
    ),
    "slack_xoxd": CredentialSpec(
        env_var="SLACK_MCP_XOXD_TOKEN",
        tools=[
            "conversations_history",
            "channels_list",
        ],
        required=True,
        help_url="https://github.com/korotovsky/slack-mcp-server#authentication-setup",
        description="Value of the 'd' cookie (xoxd-...) belonging to the same "
                    "browser session as the xoxc token.",
    ),
    "slack_ds_cookie": CredentialSpec(
        env_var="SLACK_MCP_DS_COOKIE",
        tools=[
            "conversations_history",
            "channels_list",
        ],
        required=False,
        default="1744415074",
        description="Value of the secondary 'd-s' cookie sent alongside 'd'.",
    ),
    "sse_api_key": CredentialSpec(
        env_var="SLACK_MCP_SSE_API_KEY",
        required=False,  # Optional - SSE connections are open when unset
        description="Shared secret clients must send as 'Authorization: Bearer <key>' "
                    "when connecting over the SSE transport.",
    ),
}
