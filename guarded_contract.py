import logging

from registry import METHOD_OPERATIONS

logger = logging.getLogger("Guard")


class StorageContract:
    """In-memory stand-in for the SimpleStorage contract (store / retrieve)."""

    def __init__(self, address="0x0000000000000000000000000000000000005354"):
        self.address = address
        self.value = 0
        self.writes = []

    def store(self, num, sender=None):
        self.value = int(num)
        self.writes.append((sender, self.value))
        return {"status": "SUCCESS", "stored": self.value}

    def retrieve(self, sender=None):
        return {"status": "SUCCESS", "value": self.value}


class GuardedContract:
    """
    Application-level gate in front of a contract.
    Every call is checked against the resource's authorization record
    before it reaches the contract.
    """

    def __init__(self, contract, controller, resource_id):
        self.contract = contract
        self.controller = controller
        self.resource_id = resource_id

    def call(self, identity, method, **kwargs):
        operation = METHOD_OPERATIONS.get(method)
        if operation is None:
            return {
                "status": "DENIED",
                "error": f"Method '{method}' is not guarded",
                "proof": {"known_method": False},
                "policy": "Unknown"
            }

        proof = self.controller.check(self.resource_id, identity, operation)
        if not proof.allowed:
            # Return the proof so the caller can see which layer failed
            return {
                "status": "DENIED",
                "error": "Access Policy Failed",
                "proof": proof.trace,
                "policy": proof.policy_name
            }

        logger.info(f"[Guard] Allowed: {identity} -> {method}")
        return getattr(self.contract, method)(sender=identity, **kwargs)
