import json
import os
import tempfile
import unittest

from access_control import AccessController, AuthorizationRecord
from audit_ledger import GENESIS_HASH, DecisionLedger


class TestDecisionLedger(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "audit.chain")
        self.ledger = DecisionLedger(self.path)
        self.controller = AccessController([AuthorizationRecord("G1", ["A", "B"])], ledger=self.ledger)

    def tearDown(self):
        self.tmp.cleanup()

    def test_chain_links(self):
        self.assertEqual(self.ledger.last_hash, GENESIS_HASH)
        self.controller.check("G1", "A", "READ")
        self.controller.check("G1", "C", "WRITE")

        entries = self.ledger.entries()
        self.assertEqual(len(entries), 2)
        self.assertEqual(entries[0]["prev_hash"], GENESIS_HASH)
        self.assertEqual(entries[1]["prev_hash"], entries[0]["curr_hash"])
        self.assertEqual([e["decision"] for e in entries], [True, False])
        self.assertTrue(self.ledger.verify_chain())

    def test_resume_from_existing_file(self):
        self.controller.check("G1", "A", "READ")
        reopened = DecisionLedger(self.path)
        self.assertEqual(reopened.last_hash, self.ledger.last_hash)

    def test_tampering_detected(self):
        self.controller.check("G1", "C", "READ")
        self.controller.check("G1", "A", "READ")

        with open(self.path) as f:
            lines = f.readlines()
        forged = json.loads(lines[0])
        forged["decision"] = True
        lines[0] = json.dumps(forged) + "\n"
        with open(self.path, "w") as f:
            f.writelines(lines)

        self.assertFalse(self.ledger.verify_chain())

    def test_empty_ledger_verifies(self):
        self.assertEqual(self.ledger.entries(), [])
        self.assertTrue(self.ledger.verify_chain())


if __name__ == '__main__':
    unittest.main()
