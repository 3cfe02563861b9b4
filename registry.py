# registry.py

# Operation -> guarded contract method
# READ is a view call, WRITE submits a transaction.
OPERATIONS = {
    "READ": "retrieve",
    "WRITE": "store",
}

# Reverse lookup used by the contract guard
METHOD_OPERATIONS = {method: op for op, method in OPERATIONS.items()}

# Node topology (local port-forwarded RPC endpoints)
NODES = [
    {"name": "Node 1", "id": "node1", "url": "http://localhost:31548"},
    {"name": "Node 2", "id": "node2", "url": "http://localhost:31648"},
    {"name": "Node 3", "id": "node3", "url": "http://localhost:31748"},
]

# Two EOAs per node
IDENTITY_CONFIGS = [
    {"name": "EOA1", "lookup": "eoa1@node1"},
    {"name": "EOA2", "lookup": "eoa2@node1"},
    {"name": "EOA3", "lookup": "eoa3@node2"},
    {"name": "EOA4", "lookup": "eoa4@node2"},
    {"name": "EOA5", "lookup": "eoa5@node3"},
    {"name": "EOA6", "lookup": "eoa6@node3"},
]

# Authorization records rebuilt from literals at startup.
# member_nodes=None means the record carries no node-level layer.
SAMPLE_RECORDS = [
    {
        "resource_id": "lending-group",
        "authorized_identities": ["eoa1@node1", "eoa4@node2"],
        "member_nodes": ["node1", "node2"],
        "description": "Bilateral lending between EOA1 and EOA4",
    },
    {
        "resource_id": "node1-internal",
        "authorized_identities": ["eoa1@node1", "eoa2@node1"],
        "member_nodes": ["node1"],
        "description": "Both Node 1 EOAs, nobody else",
    },
    {
        "resource_id": "audit-readers",
        "authorized_identities": ["eoa3@node2", "eoa5@node3"],
        "member_nodes": None,
        "description": "Identity-scoped only",
    },
]
