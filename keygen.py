from nacl.signing import SigningKey
from nacl.encoding import HexEncoder
import json

from identity import derive_address
from registry import IDENTITY_CONFIGS
from settings import WardenSettings


def _keypair():
    sk = SigningKey.generate()
    return {
        "private": sk.encode(encoder=HexEncoder).decode('utf-8'),
        "public": sk.verify_key.encode(encoder=HexEncoder).decode('utf-8')
    }


def generate_keys(path="keys.json", configs=IDENTITY_CONFIGS):
    # 1. Root Key (signs authorization manifests)
    keys = {"root": _keypair(), "identities": {}}

    # 2. One key per identity (signs endorsements)
    for config in configs:
        entry = _keypair()
        entry["name"] = config["name"]
        entry["address"] = derive_address(entry["public"])
        keys["identities"][config["lookup"]] = entry

    with open(path, "w") as f:
        json.dump(keys, f, indent=2)

    print(f"[KeyGen] Generated {path}")
    print(f"Root Public: {keys['root']['public']}")
    for lookup, entry in keys["identities"].items():
        print(f"  {entry['name']:<5} {lookup:<12} {entry['address']}")
    return keys


if __name__ == "__main__":
    generate_keys(WardenSettings().keys_path)
