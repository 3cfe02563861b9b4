import logging
import sys

from access_control import AccessController, AuthorizationRecord
from audit_ledger import DecisionLedger
from endorsement import Endorsement, EndorsementValidator
from guarded_contract import GuardedContract, StorageContract
from identity import IdentityDirectory
from registry import IDENTITY_CONFIGS, NODES, SAMPLE_RECORDS
from settings import WardenSettings

logger = logging.getLogger("IsolationDemo")

GROUP = "lending-group"


class IsolationDemo:
    """
    Two-layer isolation walkthrough:
      infrastructure - which nodes belong to the privacy group
      application    - which individual EOAs are on the allow-list
    """

    def __init__(self, ledger_path=None, endorsement_ttl=60):
        self.directory = IdentityDirectory.generate(IDENTITY_CONFIGS)
        self.ledger = DecisionLedger(ledger_path) if ledger_path else None
        self.controller = AccessController(
            [AuthorizationRecord.from_dict(r) for r in SAMPLE_RECORDS],
            directory=self.directory,
            ledger=self.ledger,
        )
        self.endorsement_ttl = endorsement_ttl

    def run(self):
        print("=== TWO-LAYER PRIVACY GROUP ISOLATION ===")
        record = self.controller.get(GROUP)
        print(f"Group: {record.resource_id} ({record.description})")

        print("\n--- Identities ---")
        for identity in self.directory:
            print(f"  {identity.name}: {identity.lookup} {identity.address}")

        print("\n--- Layer 1: Infrastructure (node membership) ---")
        for node in NODES:
            member = node["id"] in record.member_nodes
            print(f"  {node['name']}: {'[>] MEMBER' if member else '[x] EXCLUDED'}")

        print("\n--- Layer 2: Application (individual identity) ---")
        for identity in self.directory:
            proof = self.controller.check(GROUP, identity.lookup, "READ")
            marker = "[>] ALLOWED" if proof.allowed else "[x] DENIED "
            print(f"  {identity.name}: {marker} {proof.trace}")

        print("\n--- Guarded contract calls ---")
        contract = GuardedContract(StorageContract(), self.controller, GROUP)
        self._show("EOA1 store(42)", contract.call("eoa1@node1", "store", num=42))
        self._show("EOA2 store(99)", contract.call("eoa2@node1", "store", num=99))
        self._show("EOA5 retrieve()", contract.call("eoa5@node3", "retrieve"))
        # Authorized by address instead of lookup
        eoa4 = self.directory.resolve("EOA4")
        self._show("EOA4 retrieve() by address", contract.call(eoa4.address, "retrieve"))

        print("\n--- Endorsement consensus (all members sign) ---")
        payload = {"method": "store", "num": 7}
        endorsements = [
            Endorsement.create(self.directory.signing_key(name), GROUP, "WRITE", payload, name,
                               ttl=self.endorsement_ttl)
            for name in ("eoa1@node1", "eoa4@node2")
        ]
        validator = EndorsementValidator(self.directory)
        partial = validator.validate(record, "WRITE", payload, endorsements[:1])
        full = validator.validate(record, "WRITE", payload, endorsements)
        print(f"  One endorsement:  allowed={partial.allowed} {partial.trace}")
        print(f"  Both endorsements: allowed={full.allowed} {full.trace}")

        if self.ledger is not None:
            print(f"\nLedger intact: {self.ledger.verify_chain()} ({len(self.ledger.entries())} entries)")

    @staticmethod
    def _show(label, result):
        print(f"  {label}: {result.get('status')} {result}")


def main():
    settings = WardenSettings()
    logging.basicConfig(level=settings.log_level, format="%(message)s")
    try:
        IsolationDemo(settings.ledger_path, settings.endorsement_ttl).run()
    except Exception as e:
        logger.error(f"[IsolationDemo] Failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
