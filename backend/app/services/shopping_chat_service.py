"""
Shopping Assistant Chat Service

This module integrates with Claude AI (Anthropic) to answer shoppers'
questions about the marketplace catalog.

Features:
- Marketplace system prompt
- 3 catalog tools (search, categories, listing)
- Tool use loop, capped at MAX_TOOL_ITERATIONS rounds
- Whole-turn timeout (AGENT_TIMEOUT_SECONDS)
- Conversation history support with trimming

Author: MinkenWorld
Date: 2025-11-03
"""
import asyncio
import logging
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

import anthropic

from app.core.config import settings
from app.services.shopping_chat_tools import TOOLS, execute_tool, extract_products

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = "Sorry, I couldn't come up with an answer. Could you rephrase your question?"
ITERATION_LIMIT_RESPONSE = (
    "I looked through the marketplace several times but couldn't finish your request. "
    "Here is what I found so far; try narrowing down what you're looking for."
)


class ShoppingAssistantTimeout(Exception):
    """Raised when a chat turn exceeds AGENT_TIMEOUT_SECONDS"""


def estimate_tokens(text: str) -> int:
    """Rough token estimation: ~4 chars per token."""
    return len(text) // 4


def limit_history(history: List[Dict[str, str]]) -> tuple[List[Dict[str, str]], int]:
    """
    Limit conversation history to prevent context explosion.

    Strategy:
    1. Drop anything that is not a user or assistant turn
    2. Keep at most MAX_HISTORY_MESSAGES recent messages
    3. Further trim if estimated tokens exceed MAX_HISTORY_TOKENS (keeping at least 2)
    4. Start on a user turn

    Returns:
        Tuple of (limited_history, estimated_tokens)
    """
    if not history:
        return [], 0

    turns = [
        msg for msg in history
        if msg.get("role") in ("user", "assistant") and msg.get("content")
    ]

    max_messages = settings.MAX_HISTORY_MESSAGES
    limited = turns[-max_messages:] if len(turns) > max_messages else turns.copy()

    total_tokens = sum(estimate_tokens(msg["content"]) for msg in limited)

    while total_tokens > settings.MAX_HISTORY_TOKENS and len(limited) > 2:
        removed = limited.pop(0)
        total_tokens -= estimate_tokens(removed["content"])

    while limited and limited[0]["role"] != "user":
        removed = limited.pop(0)
        total_tokens -= estimate_tokens(removed["content"])

    messages_trimmed = len(history) - len(limited)
    if messages_trimmed > 0:
        logger.info(f"History trimmed: {len(history)} -> {len(limited)} messages (~{total_tokens} tokens)")

    return limited, total_tokens


def get_system_prompt() -> str:
    """System prompt for the marketplace shopping assistant."""
    site_name = settings.SITE_NAME
    currency = settings.DEFAULT_CURRENCY

    return f"""You are a helpful shopping assistant for {site_name}, a marketplace where users can buy and sell anything - from houses and cars to electronics and everyday items.

Your role is to:
1. Have natural conversations and remember context from earlier in the conversation
2. Understand what the user is looking for based on their messages
3. Search the marketplace using the available tools
4. Recommend MULTIPLE products that match their needs (show all relevant options, not just 1-2)
5. Compare prices and highlight good deals
6. Answer questions about products, pricing, and availability
7. Help users narrow down choices by comparing features and prices

Be friendly, conversational, and helpful. When recommending products:
- Show MULTIPLE options (3-10 products) so users can compare
- Highlight key details like price and unique features
- Compare prices between products when showing multiple items
- Suggest alternatives at different price points
- Remember what they asked for earlier in the conversation

When users ask for products:
- Use search_products to find items (set limit to 10 to show more options)
- Use list_all_products when they say "show me everything" or "what do you have"
- Use get_categories when they want to browse categories

NEVER invent products, prices or availability. Only mention what the tools return.

Always format prices clearly in {currency} with thousand separators."""


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class ChatResult:
    """Result of processing a chat query"""
    content: str
    products: List[Dict[str, Any]] = field(default_factory=list)
    tools_used: List[str] = field(default_factory=list)
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    iterations: int = 0


# ============================================================================
# MAIN SERVICE CLASS
# ============================================================================

class ShoppingChatService:
    """
    Service for answering shopping questions using Claude AI.
    """

    def __init__(self, client: Optional[anthropic.AsyncAnthropic] = None):
        """Initialize the Claude client"""
        if client is None:
            api_key = settings.ANTHROPIC_API_KEY
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY environment variable not set")
            client = anthropic.AsyncAnthropic(api_key=api_key)

        self.client = client
        self.model = settings.CLAUDE_MODEL
        self.max_iterations = settings.MAX_TOOL_ITERATIONS
        self.timeout = settings.AGENT_TIMEOUT_SECONDS
        logger.info(f"ShoppingChatService initialized with model: {self.model}")

    async def _call_model(self, messages: List[Dict[str, Any]]):
        return await self.client.messages.create(
            model=self.model,
            max_tokens=settings.MAX_TOKENS,
            system=get_system_prompt(),
            tools=TOOLS,
            messages=messages
        )

    async def process_query(
        self,
        message: str,
        history: Optional[List[Dict[str, str]]] = None
    ) -> ChatResult:
        """
        Answer a shopper's message.

        Args:
            message: User's message in natural language
            history: Optional conversation history (list of {"role": "user"|"assistant", "content": "..."})

        Returns:
            ChatResult with response text and the products surfaced by tools

        Raises:
            ShoppingAssistantTimeout: if the turn takes longer than AGENT_TIMEOUT_SECONDS
        """
        try:
            return await asyncio.wait_for(self._run(message, history), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Chat turn timed out after {self.timeout}s")
            raise ShoppingAssistantTimeout(f"Chat turn exceeded {self.timeout} seconds")

    async def _run(
        self,
        message: str,
        history: Optional[List[Dict[str, str]]]
    ) -> ChatResult:
        tools_used = []
        products = []
        total_input_tokens = 0
        total_output_tokens = 0
        history_tokens = 0

        # Build messages array with LIMITED history
        messages = []

        if history:
            limited_history, history_tokens = limit_history(history)
            for msg in limited_history:
                messages.append({
                    "role": msg["role"],
                    "content": msg["content"]
                })

        messages.append({
            "role": "user",
            "content": message
        })

        logger.info(f"Context: {len(messages)} messages, ~{history_tokens + estimate_tokens(message)} tokens")
        logger.info(f"Processing query: {message[:100]}...")

        response = await self._call_model(messages)
        total_input_tokens += response.usage.input_tokens
        total_output_tokens += response.usage.output_tokens

        # Tool use loop: one model call per round of tool results
        iterations = 0
        while response.stop_reason == "tool_use" and iterations < self.max_iterations:
            iterations += 1

            tool_use_blocks = [
                block for block in response.content
                if block.type == "tool_use"
            ]

            tool_results = []
            for tool_use in tool_use_blocks:
                tool_name = tool_use.name
                tool_input = tool_use.input

                logger.info(f"Executing tool: {tool_name} with input: {tool_input}")
                tools_used.append(tool_name)

                result = await execute_tool(tool_name, tool_input)
                products.extend(extract_products(result))

                tool_results.append({
                    "type": "tool_result",
                    "tool_use_id": tool_use.id,
                    "content": result
                })

            messages.append({
                "role": "assistant",
                "content": response.content
            })
            messages.append({
                "role": "user",
                "content": tool_results
            })

            response = await self._call_model(messages)
            total_input_tokens += response.usage.input_tokens
            total_output_tokens += response.usage.output_tokens

        if response.stop_reason == "tool_use":
            logger.warning(f"Tool loop stopped after {iterations} rounds; model still requested tools")
            text_content = ITERATION_LIMIT_RESPONSE
        else:
            text_content = "".join(
                block.text for block in response.content
                if getattr(block, "type", None) == "text"
            ).strip()

        if not text_content:
            text_content = FALLBACK_RESPONSE

        logger.info(
            f"Query completed. Tools used: {tools_used}, products: {len(products)}, "
            f"Tokens: {total_input_tokens}/{total_output_tokens}"
        )

        return ChatResult(
            content=text_content,
            products=products,
            tools_used=tools_used,
            model=self.model,
            input_tokens=total_input_tokens,
            output_tokens=total_output_tokens,
            iterations=iterations
        )


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_service_instance: Optional[ShoppingChatService] = None


def get_chat_service() -> ShoppingChatService:
    """
    Get the singleton chat service instance.

    Returns:
        ShoppingChatService instance

    Raises:
        ValueError: if ANTHROPIC_API_KEY is not configured
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = ShoppingChatService()
    return _service_instance
