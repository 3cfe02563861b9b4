import json
import os
import tempfile
import unittest

from keygen import generate_keys
from manifest_loader import SecurityError, load_verified_records, verify_manifest
from registry import SAMPLE_RECORDS
from sign_manifest import sign_manifest, write_manifest


class TestManifest(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.keys_path = os.path.join(self.tmp.name, "keys.json")
        self.manifest_path = os.path.join(self.tmp.name, "groups.json")
        self.keys = generate_keys(self.keys_path)
        write_manifest(self.keys_path, self.manifest_path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_keys_cover_identities(self):
        self.assertEqual(len(self.keys["identities"]), 6)
        self.assertIn("eoa1@node1", self.keys["identities"])

    def test_load_verified(self):
        records = load_verified_records(self.manifest_path, self.keys["root"]["public"])
        by_id = {r.resource_id: r for r in records}
        self.assertEqual(set(by_id), {r["resource_id"] for r in SAMPLE_RECORDS})
        self.assertIn("eoa4@node2", by_id["lending-group"].authorized_identities)
        self.assertIsNone(by_id["audit-readers"].member_nodes)

    def test_tampered_membership_rejected(self):
        with open(self.manifest_path) as f:
            data = json.load(f)
        data["records"][0]["authorized_identities"].append("eoa5@node3")
        with self.assertRaises(SecurityError):
            verify_manifest(data, self.keys["root"]["public"])

    def test_wrong_root_key_rejected(self):
        other = self.keys["identities"]["eoa1@node1"]["public"]
        with self.assertRaises(SecurityError):
            load_verified_records(self.manifest_path, other)

    def test_malformed_record_rejected(self):
        records = [{"resource_id": "", "authorized_identities": ["a"]}]
        manifest = sign_manifest(records, self.keys["root"]["private"])
        with self.assertRaises(SecurityError):
            verify_manifest(manifest, self.keys["root"]["public"])

    def test_corrupt_manifest_file_rejected(self):
        with open(self.manifest_path, "a") as f:
            f.write("garbage")
        with self.assertRaises(SecurityError):
            load_verified_records(self.manifest_path, self.keys["root"]["public"])

    def test_non_hex_root_key_rejected(self):
        with self.assertRaises(SecurityError):
            load_verified_records(self.manifest_path, "zz")

    def test_inconsistent_record_rejected(self):
        records = [{"resource_id": "G1", "authorized_identities": ["a@node2"], "member_nodes": ["node1"]}]
        manifest = sign_manifest(records, self.keys["root"]["private"])
        with self.assertRaises(SecurityError):
            verify_manifest(manifest, self.keys["root"]["public"])

    def test_missing_signature_rejected(self):
        with self.assertRaises(SecurityError):
            verify_manifest({"records": SAMPLE_RECORDS}, self.keys["root"]["public"])


if __name__ == '__main__':
    unittest.main()
