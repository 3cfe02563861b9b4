import logging
import time

from identity import UnknownIdentityError, normalize_identity, parse_lookup
from registry import OPERATIONS

logger = logging.getLogger("Warden")


class AuthorizationRecord:
    """
    A shared resource (privacy group id or contract address) and the
    identities allowed to act on it. Membership is fixed at construction.
    """

    def __init__(self, resource_id, authorized_identities, member_nodes=None, description=""):
        if not resource_id:
            raise ValueError("resource_id is required")
        self.resource_id = str(resource_id)
        self.authorized_identities = frozenset(normalize_identity(i) for i in authorized_identities)
        self.member_nodes = (
            frozenset(normalize_identity(n) for n in member_nodes)
            if member_nodes is not None else None
        )
        self.description = description

        if self.member_nodes is not None:
            for identity in self.authorized_identities:
                node_id = parse_lookup(identity)[1]
                if node_id is not None and node_id not in self.member_nodes:
                    raise ValueError(f"{identity} is authorized but {node_id} is not a member node of {self.resource_id}")

    def __repr__(self):
        return (f"<AuthorizationRecord {self.resource_id} "
                f"identities={sorted(self.authorized_identities)} nodes={self.member_nodes and sorted(self.member_nodes)}>")

    def to_dict(self):
        return {
            "resource_id": self.resource_id,
            "authorized_identities": sorted(self.authorized_identities),
            "member_nodes": sorted(self.member_nodes) if self.member_nodes is not None else None,
            "description": self.description,
        }

    @classmethod
    def spanning(cls, resource_id, authorized_identities, description=""):
        """Record whose member nodes are the nodes of its authorized lookups."""
        nodes = {parse_lookup(i)[1] for i in authorized_identities} - {None}
        return cls(resource_id, authorized_identities, member_nodes=nodes, description=description)

    @classmethod
    def from_dict(cls, data):
        return cls(
            data["resource_id"],
            data["authorized_identities"],
            member_nodes=data.get("member_nodes"),
            description=data.get("description", ""),
        )


def is_authorized(record, identity):
    """allow iff identity is in the record's authorized set. No side effects."""
    return normalize_identity(identity) in record.authorized_identities


class DecisionProof:
    def __init__(self, allowed, trace, policy_name, resource_id=None, identity=None, operation=None):
        self.allowed = allowed
        self.trace = trace
        self.policy_name = policy_name
        self.resource_id = resource_id
        self.identity = identity
        self.operation = operation
        self.timestamp = time.time()

    def __repr__(self):
        return (f"<DecisionProof allowed={self.allowed} policy={self.policy_name} "
                f"resource={self.resource_id} identity={self.identity} trace={self.trace}>")

    def to_dict(self):
        return {
            "allowed": self.allowed,
            "policy": self.policy_name,
            "resource_id": self.resource_id,
            "identity": self.identity,
            "operation": self.operation,
            "trace": self.trace,
            "timestamp": self.timestamp
        }


class AccessPolicy:
    """
    Two-layer check:
      node_member         - requester's node belongs to the privacy group (infrastructure)
      identity_authorized - requester is individually on the allow-list (application)
    All clauses must hold.
    """

    name = "IndividualAccess"

    def __init__(self, directory=None):
        self.directory = directory

    def evaluate(self, record, identity, operation):
        op = str(operation).strip().upper()
        clauses = {"known_operation": lambda: op in OPERATIONS}
        if record.member_nodes is not None:
            clauses["node_member"] = lambda: self._node_of(identity) in record.member_nodes
        clauses["identity_authorized"] = lambda: self._identity_matches(record, identity)

        trace = {}
        for clause_name, clause in clauses.items():
            try:
                trace[clause_name] = bool(clause())
            except Exception as e:
                logger.warning(f"[Policy] Error evaluating clause '{clause_name}': {e}")
                trace[clause_name] = False  # Fail closed

        return DecisionProof(all(trace.values()), trace, self.name,
                             record.resource_id, normalize_identity(identity), op)

    def _resolve(self, identity):
        if self.directory is None:
            return None
        try:
            return self.directory.resolve(identity)
        except UnknownIdentityError:
            return None

    def _node_of(self, identity):
        resolved = self._resolve(identity)
        if resolved is not None:
            return resolved.node_id
        return parse_lookup(identity)[1]

    def _identity_matches(self, record, identity):
        if is_authorized(record, identity):
            return True
        # A lookup may be listed by address or the other way round
        resolved = self._resolve(identity)
        if resolved is None:
            return False
        return not record.authorized_identities.isdisjoint(resolved.aliases())


class AccessController:
    """Holds the authorization records of a run and answers access checks."""

    def __init__(self, records=(), directory=None, ledger=None):
        self.policy = AccessPolicy(directory)
        self.ledger = ledger
        self._records = {}
        for record in records:
            self.register(record)

    def register(self, record):
        if record.resource_id in self._records:
            raise ValueError(f"Resource '{record.resource_id}' already registered; membership is static")
        self._records[record.resource_id] = record
        logger.info(f"[Warden] Registered {record.resource_id} "
                    f"({len(record.authorized_identities)} identities)")
        return record

    def get(self, resource_id):
        return self._records.get(resource_id)

    def resources(self):
        return list(self._records)

    def check(self, resource_id, identity, operation):
        """Returns a DecisionProof for (resource, identity, operation)."""
        record = self._records.get(resource_id)
        if record is None:
            proof = DecisionProof(False, {"unknown_resource": False}, "Unknown",
                                  resource_id, normalize_identity(identity), str(operation).strip().upper())
        else:
            proof = self.policy.evaluate(record, identity, operation)

        outcome = "ALLOW" if proof.allowed else "DENY"
        logger.info(f"[Warden] {outcome} {proof.identity} {proof.operation} on {resource_id} {proof.trace}")

        if self.ledger is not None:
            self.ledger.log_decision(proof)
        return proof
