import json
from nacl.signing import SigningKey
from nacl.encoding import HexEncoder

from registry import SAMPLE_RECORDS
from settings import WardenSettings


def manifest_payload(records):
    # Must match the serialization used by manifest_loader
    return json.dumps(records, sort_keys=True).encode()


def sign_manifest(records, root_private_hex):
    sk = SigningKey(root_private_hex, encoder=HexEncoder)
    sig = sk.sign(manifest_payload(records)).signature.hex()
    return {
        "signature": sig,
        "records": records
    }


def write_manifest(keys_path="keys.json", manifest_path="groups.json", records=SAMPLE_RECORDS):
    with open(keys_path, "r") as f:
        keys = json.load(f)

    manifest = sign_manifest(records, keys["root"]["private"])

    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print(f"[Manifest] Signed {len(records)} records into {manifest_path} with Root Key: {keys['root']['public']}")
    return manifest


if __name__ == "__main__":
    settings = WardenSettings()
    write_manifest(settings.keys_path, settings.manifest_path)
