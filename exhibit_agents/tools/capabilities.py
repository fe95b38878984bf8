"""Tier-gated function tools offered to Vapi assistants.

`end_call` is always present. Tier 3 agents additionally get one tool per
enabled capability, executed server-side at `{base_url}/api/tools/<kind>`.
"""

from ..models.schemas import Capabilities, FunctionDefinition, FunctionTool, ToolServer

END_CALL = FunctionDefinition(
    name="end_call",
    description="Politely end the conversation and terminate the session.",
    parameters={
        "type": "object",
        "properties": {
            "reason": {"type": "string"},
        },
    },
)

# (capability flag, callback path, definition) in the fixed check order
CAPABILITY_TOOLS: list[tuple[str, str, FunctionDefinition]] = [
    (
        "can_send_email",
        "email",
        FunctionDefinition(
            name="send_promotional_email",
            description="Send a follow-up email with exhibit highlights and links.",
            parameters={
                "type": "object",
                "properties": {
                    "toEmail": {"type": "string", "format": "email"},
                    "subject": {"type": "string"},
                    "bodyText": {"type": "string"},
                },
                "required": ["toEmail", "subject", "bodyText"],
            },
        ),
    ),
    (
        "can_send_sms",
        "sms",
        FunctionDefinition(
            name="send_sms",
            description="Send an SMS with a promo code or link.",
            parameters={
                "type": "object",
                "properties": {
                    "toPhoneE164": {"type": "string", "description": "+1XXXXXXXXXX"},
                    "message": {"type": "string"},
                },
                "required": ["toPhoneE164", "message"],
            },
        ),
    ),
    (
        "can_take_orders",
        "order",
        FunctionDefinition(
            name="place_order",
            description="Place a gift-shop order or hold an item for pickup.",
            parameters={
                "type": "object",
                "properties": {
                    "sku": {"type": "string"},
                    "quantity": {"type": "integer", "minimum": 1},
                    "pickupName": {"type": "string"},
                },
                "required": ["sku", "quantity", "pickupName"],
            },
        ),
    ),
    (
        "can_post_social",
        "social",
        FunctionDefinition(
            name="post_to_social",
            description="Draft a social post about the exhibit.",
            parameters={
                "type": "object",
                "properties": {
                    "network": {"type": "string", "enum": ["instagram", "facebook", "x"]},
                    "caption": {"type": "string", "maxLength": 280},
                },
                "required": ["network", "caption"],
            },
        ),
    ),
]


def resolve_tools(
    tier: int,
    capabilities: Capabilities | None = None,
    *,
    base_url: str = "",
    secret: str | None = None,
) -> list[FunctionTool]:
    """Return the ordered tool list for an agent. Pure; never fails."""
    tools = [FunctionTool(function=END_CALL.model_copy(deep=True))]
    if tier != 3:
        return tools

    capabilities = capabilities or Capabilities()
    for flag, path, definition in CAPABILITY_TOOLS:
        if getattr(capabilities, flag):
            tools.append(
                FunctionTool(
                    function=definition.model_copy(deep=True),
                    server=ToolServer(url=f"{base_url}/api/tools/{path}", secret=secret),
                )
            )
    return tools
