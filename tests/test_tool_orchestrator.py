"""Chat turns against a scripted chat-completions endpoint."""

import json
from datetime import date

import httpx
import pytest

from app.core.errors import ExternalServiceError
from app.services.llm_client import LLMClient
from app.services.tool_orchestrator import DONE_REPLY, ToolOrchestrator, build_system_prompt
from app.services.context_snapshot import ContextSnapshotBuilder

HISTORY = [{"role": "user", "content": "hola"}]


class ScriptedLLM:
    """Answers each request with the next scripted assistant message."""

    def __init__(self, *messages):
        self.messages = list(messages)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        message = self.messages.pop(0)
        if isinstance(message, httpx.Response):
            return message
        return httpx.Response(200, json={"choices": [{"message": message}]})

    def client(self, api_key="test-key") -> LLMClient:
        return LLMClient(api_key=api_key, base_url="http://llm.test/v1", model="test-model", transport=httpx.MockTransport(self))


def tool_call(call_id, name, arguments):
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


def calls(*tool_calls):
    return {"role": "assistant", "content": None, "tool_calls": list(tool_calls)}


def tool_results(request):
    return [json.loads(m["content"]) for m in request["messages"] if m["role"] == "tool"]


async def test_plain_answer_needs_one_round_trip(db, user) -> None:
    llm = ScriptedLLM({"role": "assistant", "content": "Vas genial este mes."})

    reply = await ToolOrchestrator(db, user, llm=llm.client()).respond(HISTORY)

    assert reply == "Vas genial este mes."
    assert len(llm.requests) == 1
    first = llm.requests[0]
    assert first["model"] == "test-model"
    assert first["tool_choice"] == "auto"
    assert {t["function"]["name"] for t in first["tools"]} == {
        "create_operation",
        "delete_operation",
        "create_savings_goal",
        "add_savings_contribution",
        "create_debt",
        "add_debt_payment",
    }
    assert first["messages"][0]["role"] == "system"
    assert "FinyBot" in first["messages"][0]["content"]
    assert first["messages"][1:] == HISTORY


async def test_calls_in_one_turn_run_in_order(db, user) -> None:
    """The contribution sees the goal created by the call before it."""
    llm = ScriptedLLM(
        calls(
            tool_call("call_1", "create_savings_goal", {"name": "Viaje", "target_amount": 1000}),
            tool_call("call_2", "add_savings_contribution", {"savings_goal_name": "viaje", "amount": "200"}),
        ),
        {"role": "assistant", "content": "Meta creada y 200 aportados."},
    )

    reply = await ToolOrchestrator(db, user, llm=llm.client()).respond(HISTORY)

    assert reply == "Meta creada y 200 aportados."
    assert len(llm.requests) == 2
    second = llm.requests[1]
    assert "tools" not in second
    assistant_turn = second["messages"][-3]
    assert assistant_turn["role"] == "assistant"
    assert [c["id"] for c in assistant_turn["tool_calls"]] == ["call_1", "call_2"]
    assert [m["tool_call_id"] for m in second["messages"][-2:]] == ["call_1", "call_2"]

    created, contributed = tool_results(second)
    assert created["success"] is True
    assert contributed["success"] is True
    assert contributed["goal"]["current_amount"] == 200


async def test_failed_action_is_reported_to_the_model(db, user) -> None:
    llm = ScriptedLLM(
        calls(tool_call("call_1", "add_debt_payment", {"debt_name": "Hipoteca", "amount": 50})),
        {"role": "assistant", "content": "No encuentro esa deuda."},
    )

    reply = await ToolOrchestrator(db, user, llm=llm.client()).respond(HISTORY)

    assert reply == "No encuentro esa deuda."
    [result] = tool_results(llm.requests[1])
    assert result["success"] is False
    assert result["code"] == "debt_not_found"


@pytest.mark.parametrize(
    "call, code",
    [
        (tool_call("c", "create_debt", "{not json"), "invalid_arguments"),
        (tool_call("c", "create_debt", "[1, 2]"), "invalid_arguments"),
        (tool_call("c", "create_debt", {"initial_amount": 10}), "invalid_arguments"),
        (tool_call("c", "transfer_money", {"amount": 10}), "unknown_tool"),
        (tool_call("c", ["create_debt"], {}), "unknown_tool"),
        ({"id": "c", "function": "create_debt"}, "unknown_tool"),
        ({"id": "c"}, "unknown_tool"),
        ("create_debt", "unknown_tool"),
        (tool_call("c", "create_savings_goal", {"name": "Luna", "target_amount": 1e30}), "invalid_amount"),
    ],
)
async def test_bad_tool_calls_become_error_payloads(db, user, call, code) -> None:
    orchestrator = ToolOrchestrator(db, user, llm=ScriptedLLM().client())

    result = await orchestrator.dispatch(call)

    assert result["success"] is False
    assert result["code"] == code


async def test_malformed_call_does_not_abort_the_turn(db, user) -> None:
    llm = ScriptedLLM(
        calls(
            {"id": "call_1", "type": "function", "function": {"name": ["create_debt"], "arguments": "{}"}},
            tool_call("call_2", "create_debt", {"name": "Coche", "initial_amount": 3000}),
        ),
        {"role": "assistant", "content": "Deuda registrada."},
    )

    reply = await ToolOrchestrator(db, user, llm=llm.client()).respond(HISTORY)

    assert reply == "Deuda registrada."
    broken, created = tool_results(llm.requests[1])
    assert broken["code"] == "unknown_tool"
    assert created["success"] is True
    assert created["debt"]["current_balance"] == 3000


async def test_schema_errors_name_the_field(db, user) -> None:
    orchestrator = ToolOrchestrator(db, user, llm=ScriptedLLM().client())

    result = await orchestrator.dispatch(
        tool_call("c", "add_debt_payment", {"debt_name": "Coche", "amount": "mucho"})
    )

    assert result["code"] == "invalid_arguments"
    assert any(err.startswith("amount") for err in result["details"]["errors"])


async def test_operation_is_created_and_deleted_by_id(db, user, categories) -> None:
    llm = ScriptedLLM(
        calls(
            tool_call(
                "call_1",
                "create_operation",
                {
                    "amount": 12.5,
                    "concept": "Taxi",
                    "type": "expense",
                    "category_id": str(categories["Transporte"].id),
                    "operation_date": "2026-10-18",
                },
            )
        ),
        {"role": "assistant", "content": None},
    )
    orchestrator = ToolOrchestrator(db, user, llm=llm.client())

    reply = await orchestrator.respond(HISTORY)

    assert reply == DONE_REPLY
    [created] = tool_results(llm.requests[1])
    assert created["transaction"]["category_name"] == "Transporte"

    deleted = await orchestrator.dispatch(
        tool_call("call_2", "delete_operation", {"operation_id": created["transaction"]["id"]})
    )
    assert deleted["deleted"]["concept"] == "Taxi"


async def test_recent_operations_and_categories_reach_the_prompt(db, user, executor, categories) -> None:
    created = await executor.create_transaction(30, "Gasolina", "expense", categories["Transporte"].id, "2026-10-10")

    snapshot = await ContextSnapshotBuilder(db, user).build(today=date(2026, 10, 19))
    prompt = build_system_prompt(snapshot)

    assert f"[ID:{created.data['transaction']['id']}]" in prompt
    assert f"ID: {categories['Supermercado'].id}" in prompt
    assert "Daily budget: -2.50 EUR/day" in prompt


async def test_llm_http_error_raises(db, user) -> None:
    llm = ScriptedLLM(httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(ExternalServiceError):
        await ToolOrchestrator(db, user, llm=llm.client()).respond(HISTORY)


async def test_unreachable_llm_raises() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = LLMClient(api_key="k", base_url="http://llm.test", transport=httpx.MockTransport(refuse))

    with pytest.raises(ExternalServiceError):
        await client.complete(HISTORY)


async def test_missing_api_key_fails_before_any_request() -> None:
    llm = ScriptedLLM()

    with pytest.raises(ExternalServiceError):
        await llm.client(api_key="").complete(HISTORY)
    assert llm.requests == []


async def test_malformed_completion_body_raises() -> None:
    llm = ScriptedLLM(httpx.Response(200, json={"choices": []}))

    with pytest.raises(ExternalServiceError):
        await llm.client().complete(HISTORY)
