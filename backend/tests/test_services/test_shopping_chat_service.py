"""
Unit tests for the shopping assistant tool loop

The Anthropic client is replaced with an AsyncMock that plays back a
scripted sequence of responses.

Author: MinkenWorld
Date: 2025-11-06
"""
import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.config import settings
from app.services.shopping_chat_service import (
    FALLBACK_RESPONSE,
    ITERATION_LIMIT_RESPONSE,
    ShoppingAssistantTimeout,
    ShoppingChatService,
    limit_history,
)


def text_block(text):
    return SimpleNamespace(type="text", text=text)


def tool_block(name, tool_input, block_id):
    return SimpleNamespace(type="tool_use", name=name, input=tool_input, id=block_id)


def model_response(content, stop_reason="end_turn"):
    return SimpleNamespace(
        content=content,
        stop_reason=stop_reason,
        usage=SimpleNamespace(input_tokens=10, output_tokens=5)
    )


def tool_round(*blocks):
    return model_response(list(blocks), stop_reason="tool_use")


def fake_client(*responses):
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=list(responses))
    return client


def products_payload(*product_ids):
    return json.dumps({
        "message": "found",
        "products": [{"id": pid, "title": pid, "currency": "KES"} for pid in product_ids]
    })


class TestToolLoop:
    """Test ShoppingChatService.process_query"""

    def test_plain_answer_makes_one_model_call(self):
        client = fake_client(model_response([text_block("Hello! "), text_block("How can I help?")]))
        service = ShoppingChatService(client=client)

        result = asyncio.run(service.process_query("hi"))

        assert result.content == "Hello! How can I help?"
        assert result.products == []
        assert result.tools_used == []
        assert result.iterations == 0
        assert client.messages.create.await_count == 1

    def test_each_tool_round_adds_one_model_call(self):
        client = fake_client(
            tool_round(tool_block("search_products", {"query": "car"}, "t1")),
            tool_round(
                tool_block("search_products", {"query": "bags"}, "t2"),
                tool_block("get_categories", {}, "t3"),
            ),
            model_response([text_block("Here you go")]),
        )
        execute = AsyncMock(side_effect=[
            products_payload("car_1", "car_2"),
            products_payload("bag_1"),
            json.dumps({"message": "Cars", "categories": []}),
        ])
        service = ShoppingChatService(client=client)

        with patch("app.services.shopping_chat_service.execute_tool", new=execute):
            result = asyncio.run(service.process_query("show me cars and bags"))

        assert client.messages.create.await_count == 3
        assert result.iterations == 2
        assert result.tools_used == ["search_products", "search_products", "get_categories"]
        assert [p["id"] for p in result.products] == ["car_1", "car_2", "bag_1"]
        assert result.content == "Here you go"
        assert result.input_tokens == 30
        assert result.output_tokens == 15

    def test_tool_results_are_sent_back_in_order(self):
        client = fake_client(
            tool_round(
                tool_block("search_products", {"query": "a"}, "t1"),
                tool_block("search_products", {"query": "b"}, "t2"),
            ),
            model_response([text_block("done")]),
        )
        execute = AsyncMock(side_effect=[products_payload("a"), products_payload("b")])
        service = ShoppingChatService(client=client)

        with patch("app.services.shopping_chat_service.execute_tool", new=execute):
            asyncio.run(service.process_query("a and b"))

        messages = client.messages.create.await_args_list[1].kwargs["messages"]
        assert messages[-2]["role"] == "assistant"
        assert messages[-1]["role"] == "user"
        assert [r["tool_use_id"] for r in messages[-1]["content"]] == ["t1", "t2"]

    def test_loop_stops_at_iteration_cap(self):
        cap = settings.MAX_TOOL_ITERATIONS
        rounds = [tool_round(tool_block("list_all_products", {}, f"t{i}")) for i in range(cap + 1)]
        client = fake_client(*rounds)
        execute = AsyncMock(return_value=products_payload("p"))
        service = ShoppingChatService(client=client)

        with patch("app.services.shopping_chat_service.execute_tool", new=execute):
            result = asyncio.run(service.process_query("everything"))

        assert client.messages.create.await_count == cap + 1
        assert result.iterations == cap
        assert result.content == ITERATION_LIMIT_RESPONSE
        assert len(result.products) == cap

    def test_empty_answer_uses_fallback(self):
        client = fake_client(model_response([]))
        service = ShoppingChatService(client=client)

        assert asyncio.run(service.process_query("?")).content == FALLBACK_RESPONSE

    def test_history_is_passed_before_the_new_message(self):
        client = fake_client(model_response([text_block("ok")]))
        service = ShoppingChatService(client=client)

        asyncio.run(service.process_query("and cheaper?", history=[
            {"role": "user", "content": "show me cars"},
            {"role": "assistant", "content": "Here are cars"},
        ]))

        messages = client.messages.create.await_args.kwargs["messages"]
        assert [m["content"] for m in messages] == ["show me cars", "Here are cars", "and cheaper?"]

    def test_timeout(self):
        async def slow(**kwargs):
            await asyncio.sleep(1)

        client = MagicMock()
        client.messages.create = slow
        service = ShoppingChatService(client=client)
        service.timeout = 0.01

        with pytest.raises(ShoppingAssistantTimeout):
            asyncio.run(service.process_query("hi"))

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "ANTHROPIC_API_KEY", "")

        with pytest.raises(ValueError):
            ShoppingChatService()


class TestLimitHistory:
    """Test limit_history"""

    def test_empty(self):
        assert limit_history([]) == ([], 0)

    def test_keeps_most_recent_messages(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_HISTORY_MESSAGES", 4)
        history = [
            {"role": "user" if i % 2 == 0 else "assistant", "content": f"m{i}"}
            for i in range(10)
        ]

        limited, _ = limit_history(history)

        assert [m["content"] for m in limited] == ["m6", "m7", "m8", "m9"]

    def test_drops_other_roles_and_leading_assistant(self):
        history = [
            {"role": "assistant", "content": "welcome"},
            {"role": "system", "content": "ignore me"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": ""},
            {"role": "assistant", "content": "hello"},
        ]

        limited, _ = limit_history(history)

        assert limited == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]

    def test_trims_by_token_budget(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_HISTORY_TOKENS", 100)
        history = [
            {"role": "user", "content": "x" * 400},
            {"role": "assistant", "content": "y" * 400},
            {"role": "user", "content": "short"},
            {"role": "assistant", "content": "reply"},
        ]

        limited, tokens = limit_history(history)

        assert [m["content"] for m in limited] == ["short", "reply"]
        assert tokens <= 100
