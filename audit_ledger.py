import hashlib
import json
import logging
import time

logger = logging.getLogger("Ledger")

GENESIS_HASH = "0" * 64


def _hash_entry(entry):
    # Deterministic serialization so the chain can be re-verified later
    serialized = json.dumps(entry, sort_keys=True)
    return hashlib.sha256(serialized.encode()).hexdigest()


class DecisionLedger:
    """
    Append-only JSONL log of access decisions.
    Every entry carries the hash of its predecessor.
    """

    def __init__(self, filepath="audit.chain"):
        self.filepath = filepath
        self.last_hash = self._get_last_hash()

    def _get_last_hash(self):
        try:
            with open(self.filepath, 'r') as f:
                lines = [line for line in f if line.strip()]
        except FileNotFoundError:
            return GENESIS_HASH
        if not lines:
            return GENESIS_HASH
        try:
            return json.loads(lines[-1])['curr_hash']
        except (json.JSONDecodeError, KeyError):
            logger.warning(f"[Ledger] Unreadable tail in {self.filepath}, restarting chain")
            return GENESIS_HASH

    def log_decision(self, proof):
        entry = {
            "prev_hash": self.last_hash,
            "ts": time.time(),
            "resource_id": proof.resource_id,
            "identity": proof.identity,
            "operation": proof.operation,
            "policy": proof.policy_name,
            "decision": proof.allowed,
            "trace": proof.trace
        }
        curr_hash = _hash_entry(entry)
        entry['curr_hash'] = curr_hash

        with open(self.filepath, 'a') as f:
            f.write(json.dumps(entry) + "\n")

        self.last_hash = curr_hash
        return curr_hash

    def entries(self):
        try:
            with open(self.filepath, 'r') as f:
                return [json.loads(line) for line in f if line.strip()]
        except FileNotFoundError:
            return []

    def verify_chain(self):
        """Recomputes every hash; False on the first broken link."""
        try:
            entries = self.entries()
        except json.JSONDecodeError as e:
            logger.error(f"[Ledger] Corrupt entry: {e}")
            return False

        prev = GENESIS_HASH
        for index, entry in enumerate(entries):
            body = {k: v for k, v in entry.items() if k != 'curr_hash'}
            if body.get('prev_hash') != prev or _hash_entry(body) != entry.get('curr_hash'):
                logger.error(f"[Ledger] Chain broken at entry {index}")
                return False
            prev = entry['curr_hash']
        return True
