import json
import logging
from typing import List, Optional

from nacl.signing import VerifyKey
from nacl.encoding import HexEncoder
from nacl.exceptions import BadSignatureError
from pydantic import BaseModel, Field, ValidationError

from access_control import AuthorizationRecord
from sign_manifest import manifest_payload

logger = logging.getLogger("Manifest")


class SecurityError(Exception):
    pass


class RecordModel(BaseModel):
    resource_id: str = Field(min_length=1)
    authorized_identities: List[str]
    member_nodes: Optional[List[str]] = None
    description: str = ""


class ManifestModel(BaseModel):
    signature: str
    records: List[dict]


def load_verified_records(manifest_path, public_key_hex):
    """
    Loads authorization records only if they are signed by the root key.
    """
    with open(manifest_path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SecurityError(f"Corrupt manifest {manifest_path}: {e}")
    return verify_manifest(data, public_key_hex)


def verify_manifest(data, public_key_hex):
    try:
        manifest = ManifestModel.model_validate(data)
        signature = bytes.fromhex(manifest.signature)
    except (ValidationError, ValueError) as e:
        raise SecurityError(f"Malformed manifest: {e}")

    # Signature covers the raw records exactly as signed
    payload = manifest_payload(manifest.records)

    try:
        verify_key = VerifyKey(public_key_hex, encoder=HexEncoder)
        verify_key.verify(payload, signature)
    except BadSignatureError:
        raise SecurityError("MANIFEST TAMPERING DETECTED: Invalid Signature")
    except Exception as e:
        raise SecurityError(f"Verification Error: {e}")

    try:
        models = [RecordModel.model_validate(r) for r in manifest.records]
    except ValidationError as e:
        raise SecurityError(f"Malformed record: {e}")

    try:
        records = [AuthorizationRecord.from_dict(m.model_dump()) for m in models]
    except ValueError as e:
        raise SecurityError(f"Inconsistent record: {e}")

    logger.info(f"[Manifest] Verified {len(records)} authorization records.")
    return records
