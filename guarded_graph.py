"""
Guarded LangGraph StateGraph

The access check runs as a checkpoint node between planning and execution.
"""

import logging
from typing import TypedDict, Optional, Any

from langgraph.graph import StateGraph, END

logger = logging.getLogger("Graph")


class RequestState(TypedDict):
    resource_id: str
    identity: str
    operation: str
    result: Optional[Any]
    blocked: bool
    block_reason: Optional[dict]
    last_proof: Optional[dict]


def initial_state(resource_id, identity, operation) -> RequestState:
    return {
        "resource_id": resource_id,
        "identity": identity,
        "operation": operation,
        "result": None,
        "blocked": False,
        "block_reason": None,
        "last_proof": None
    }


def build_guarded_graph(controller, executor=None):
    """
    controller: AccessController used by the checkpoint.
    executor: optional callable(state) -> result, run only when allowed.
    """

    def plan_node(state: RequestState) -> RequestState:
        logger.info(f"[Plan] {state['identity']} wants {state['operation']} on {state['resource_id']}")
        return state

    def access_checkpoint(state: RequestState) -> RequestState:
        proof = controller.check(state["resource_id"], state["identity"], state["operation"])
        state["last_proof"] = proof.to_dict()
        state["blocked"] = not proof.allowed
        state["block_reason"] = None if proof.allowed else proof.trace
        return state

    def execute_node(state: RequestState) -> RequestState:
        if executor is not None:
            state["result"] = executor(state)
        else:
            state["result"] = {"status": "SUCCESS", "operation": state["operation"]}
        return state

    def blocked_node(state: RequestState) -> RequestState:
        logger.info(f"[Blocked] Reason: {state['block_reason']}")
        state["result"] = {"status": "DENIED", "reason": state["block_reason"]}
        return state

    def route_after_check(state: RequestState) -> str:
        if state.get("blocked"):
            return "blocked"
        return "execute"

    graph = StateGraph(RequestState)

    graph.add_node("plan", plan_node)
    graph.add_node("access_check", access_checkpoint)
    graph.add_node("execute", execute_node)
    graph.add_node("blocked", blocked_node)

    graph.set_entry_point("plan")
    graph.add_edge("plan", "access_check")
    graph.add_conditional_edges("access_check", route_after_check)
    graph.add_edge("execute", END)
    graph.add_edge("blocked", END)

    return graph.compile()
