"""
Identity endorsements.

A privacy group only executes an operation once its members endorse it.
Here an endorsement is an Ed25519 signature by one identity over
(resource, operation, payload digest), and the validator counts only
endorsers that are individually authorized on the record.
"""

import hashlib
import json
import logging
import time

from nacl.signing import SigningKey, VerifyKey
from nacl.encoding import HexEncoder
from nacl.exceptions import BadSignatureError

from access_control import DecisionProof
from identity import UnknownIdentityError, normalize_identity

logger = logging.getLogger("Endorsement")


def payload_digest(payload):
    """SHA-256 over the sorted-key JSON of the operation payload."""
    return hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()


class Endorsement:
    def __init__(self, resource_id, operation, digest, endorser, timestamp, signature, nonce=0, expiry=0.0):
        self.resource_id = resource_id
        self.operation = operation
        self.digest = digest
        self.endorser = endorser
        self.timestamp = timestamp
        self.signature = signature
        self.nonce = nonce
        self.expiry = expiry

    def __repr__(self):
        return f"<Endorsement {self.endorser} {self.operation}@{self.resource_id} nonce={self.nonce} sig={self.signature[:8]}...>"

    def _payload(self):
        return json.dumps({
            "resource_id": self.resource_id,
            "operation": self.operation,
            "digest": self.digest,
            "endorser": self.endorser,
            "timestamp": self.timestamp,
            "nonce": self.nonce,
            "expiry": self.expiry
        }, sort_keys=True).encode()

    def to_dict(self):
        return {
            "resource_id": self.resource_id,
            "operation": self.operation,
            "digest": self.digest,
            "endorser": self.endorser,
            "timestamp": self.timestamp,
            "nonce": self.nonce,
            "expiry": self.expiry,
            "signature": self.signature
        }

    @staticmethod
    def create(signing_key_hex, resource_id, operation, payload, endorser, timestamp=None, nonce=0, ttl=60):
        """Signs an endorsement of `payload` for one operation on one resource."""
        sk = SigningKey(signing_key_hex, encoder=HexEncoder)
        timestamp = time.time() if timestamp is None else timestamp
        endorsement = Endorsement(
            resource_id,
            str(operation).upper(),
            payload_digest(payload),
            normalize_identity(endorser),
            timestamp,
            "",
            nonce,
            timestamp + ttl
        )
        endorsement.signature = sk.sign(endorsement._payload()).signature.hex()
        return endorsement

    def is_valid(self, public_key_hex, now=None):
        """Checks expiry and signature. Replay is tracked by EndorsementValidator."""
        now = time.time() if now is None else now
        if now > self.expiry:
            return False

        vk = VerifyKey(public_key_hex, encoder=HexEncoder)
        try:
            vk.verify(self._payload(), bytes.fromhex(self.signature))
            return True
        except (BadSignatureError, ValueError):
            return False


class EndorsementValidator:
    def __init__(self, directory):
        self.directory = directory
        self._consumed = set()  # (endorser lookup, nonce) already used by an approved request

    def _canonical(self, entry):
        try:
            return self.directory.resolve(entry).lookup
        except UnknownIdentityError:
            return entry

    def validate(self, record, operation, payload, endorsements, quorum=None, now=None):
        """
        Returns a DecisionProof whose trace has one entry per authorized
        identity (True when it endorsed). quorum=None requires all of them.
        An approved request consumes its endorsements; replaying one later
        (same endorser and nonce) does not count.
        """
        op = str(operation).upper()
        digest = payload_digest(payload)
        # One slot per identity, even when the record lists it by several aliases
        trace = {self._canonical(entry): False for entry in sorted(record.authorized_identities)}
        counted = []

        for endorsement in endorsements:
            try:
                endorser = self.directory.resolve(endorsement.endorser)
            except UnknownIdentityError:
                logger.warning(f"[Endorsement] Unknown endorser {endorsement.endorser}")
                continue

            if (endorsement.resource_id != record.resource_id
                    or endorsement.operation != op
                    or endorsement.digest != digest):
                logger.warning(f"[Endorsement] {endorser.lookup} endorsed a different request")
                continue

            if not endorsement.is_valid(endorser.public_key, now=now):
                logger.warning(f"[Endorsement] Invalid or expired signature from {endorser.lookup}")
                continue

            if endorser.lookup not in trace:
                logger.warning(f"[Endorsement] {endorser.lookup} is not authorized on {record.resource_id}")
                continue

            if (endorser.lookup, endorsement.nonce) in self._consumed:
                logger.warning(f"[Endorsement] Replayed endorsement from {endorser.lookup} (nonce {endorsement.nonce})")
                continue

            trace[endorser.lookup] = True
            counted.append((endorser.lookup, endorsement.nonce))

        required = len(trace) if quorum is None else quorum
        endorsed = sum(1 for v in trace.values() if v)
        allowed = required > 0 and endorsed >= required
        if allowed:
            self._consumed.update(counted)
        return DecisionProof(allowed, trace, "Endorsement", record.resource_id, None, op)
