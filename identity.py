"""
Verifier / identity resolution.

Each identity is an Ed25519 key pair. Its address is derived from the
verify key, so an identity can be referenced by name ("EOA1"), by lookup
string ("eoa1@node1") or by address ("0x...").
"""

import logging

from nacl.signing import SigningKey
from nacl.encoding import HexEncoder
from nacl.hash import blake2b

logger = logging.getLogger("Identity")


class UnknownIdentityError(KeyError):
    pass


def normalize_identity(value):
    """Canonical form used for every identity comparison."""
    return str(value).strip().lower()


def parse_lookup(lookup):
    """
    Splits "eoa1@node1" into ("eoa1", "node1").
    A lookup without a node part returns (name, None).
    """
    lookup = normalize_identity(lookup)
    if "@" not in lookup:
        return lookup, None
    name, _, node_id = lookup.rpartition("@")
    return name, (node_id or None)


def derive_address(verify_key_hex):
    raw = bytes.fromhex(verify_key_hex)
    digest = blake2b(raw, digest_size=20, encoder=HexEncoder)
    return "0x" + digest.decode("utf-8")


class Identity:
    def __init__(self, name, lookup, public_key, node_id=None, address=None):
        self.name = name
        self.lookup = normalize_identity(lookup)
        self.public_key = public_key
        self.node_id = node_id if node_id is not None else parse_lookup(lookup)[1]
        self.address = normalize_identity(address or derive_address(public_key))

    def __repr__(self):
        return f"<Identity {self.name} lookup={self.lookup} node={self.node_id} address={self.address}>"

    def aliases(self):
        """Every normalized string this identity may be referenced by."""
        return {normalize_identity(self.name), self.lookup, self.address}

    def to_dict(self):
        return {
            "name": self.name,
            "lookup": self.lookup,
            "node_id": self.node_id,
            "public": self.public_key,
            "address": self.address,
        }


class IdentityDirectory:
    """
    In-process replacement for the SDK's verifier resolution.
    Holds public identities and, when generated locally, their signing keys.
    """

    def __init__(self):
        self._identities = {}   # lookup -> Identity
        self._aliases = {}      # alias -> lookup
        self._signing_keys = {} # lookup -> private hex

    def __len__(self):
        return len(self._identities)

    def __iter__(self):
        return iter(self._identities.values())

    def __contains__(self, ref):
        return normalize_identity(ref) in self._aliases

    def add(self, identity, signing_key_hex=None):
        for alias in identity.aliases():
            owner = self._aliases.get(alias)
            if owner is not None and owner != identity.lookup:
                raise ValueError(f"Alias '{alias}' already bound to {owner}")

        self._identities[identity.lookup] = identity
        for alias in identity.aliases():
            self._aliases[alias] = identity.lookup
        if signing_key_hex:
            self._signing_keys[identity.lookup] = signing_key_hex
        return identity

    def resolve(self, ref):
        """Resolves a name, lookup or address to an Identity."""
        lookup = self._aliases.get(normalize_identity(ref))
        if lookup is None:
            raise UnknownIdentityError(ref)
        return self._identities[lookup]

    def get_verifiers(self, lookup):
        try:
            return [self.resolve(lookup)]
        except UnknownIdentityError:
            return []

    def signing_key(self, ref):
        identity = self.resolve(ref)
        if identity.lookup not in self._signing_keys:
            raise UnknownIdentityError(f"No signing key held for {identity.lookup}")
        return self._signing_keys[identity.lookup]

    @classmethod
    def generate(cls, configs):
        """Creates a fresh key pair for each {"name", "lookup"} config."""
        directory = cls()
        for config in configs:
            sk = SigningKey.generate()
            public = sk.verify_key.encode(encoder=HexEncoder).decode("utf-8")
            identity = Identity(config["name"], config["lookup"], public)
            directory.add(identity, sk.encode(encoder=HexEncoder).decode("utf-8"))
            logger.debug(f"[Identity] {identity.name} -> {identity.address}")
        return directory

    @classmethod
    def from_keys(cls, keys):
        """
        Builds a directory from the "identities" section written by keygen.py:
        {lookup: {"name", "public", "private"?}}
        """
        directory = cls()
        for lookup, entry in keys.get("identities", {}).items():
            identity = Identity(entry.get("name", lookup), lookup, entry["public"])
            directory.add(identity, entry.get("private"))
        return directory
