"""
Guarded LangChain Tools

Factory for LangChain Tool objects whose invocation is gated by an
AccessController check on one resource.
"""

from typing import Optional, Callable, Any, Type

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field


def create_guarded_tool(
    name: str,
    func: Callable,
    controller,
    resource_id: str,
    operation: str,
    identity: str,
    description: str,
    args_schema: Optional[Type[BaseModel]] = None,
) -> StructuredTool:
    """
    Creates a LangChain StructuredTool with access enforcement.

    Args:
        name: Tool name (for LangChain).
        func: The underlying function to call.
        controller: AccessController holding the resource's record.
        resource_id: Privacy group id or contract address being acted on.
        operation: "READ" or "WRITE".
        identity: Lookup or address of the calling identity.
        description: Tool description (for LangChain).
        args_schema: Optional Pydantic model for tool arguments.

    Returns:
        A StructuredTool that returns a DENIED dict instead of calling func
        when the identity is not authorized.
    """

    def guarded_func(**kwargs) -> Any:
        proof = controller.check(resource_id, identity, operation)
        if not proof.allowed:
            return {
                "status": "DENIED",
                "error": "Access Policy Failed",
                "proof": proof.trace,
                "policy": proof.policy_name
            }
        return func(**kwargs)

    return StructuredTool.from_function(
        name=name,
        func=guarded_func,
        description=description,
        args_schema=args_schema
    )


class StoreArgs(BaseModel):
    num: int = Field(description="Value to store in the shared contract")


class RetrieveArgs(BaseModel):
    pass


def storage_tools(contract, controller, resource_id, identity):
    """store/retrieve tools for one identity against one guarded contract."""
    store = create_guarded_tool(
        name="store",
        func=lambda num: contract.store(num, sender=identity),
        controller=controller,
        resource_id=resource_id,
        operation="WRITE",
        identity=identity,
        description="Store a value in the shared contract",
        args_schema=StoreArgs,
    )
    retrieve = create_guarded_tool(
        name="retrieve",
        func=lambda: contract.retrieve(sender=identity),
        controller=controller,
        resource_id=resource_id,
        operation="READ",
        identity=identity,
        description="Read the value held by the shared contract",
        args_schema=RetrieveArgs,
    )
    return store, retrieve
