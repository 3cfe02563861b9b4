import unittest
import sys

SUITES = [
    ("Identity Resolution", "test_identity.py"),
    ("Access Decisions", "test_access_control.py"),
    ("Decision Ledger", "test_audit_ledger.py"),
    ("Endorsements", "test_endorsement.py"),
    ("Signed Manifests", "test_manifest.py"),
    ("Guarded Contract", "test_guarded_contract.py"),
    ("Agent Adapters", "test_guarded_tools.py"),
    ("System Integration", "test_integration.py"),
]


def run_tests():
    print("==========================================")
    print("       ACCESS WARDEN TEST SUITE           ")
    print("==========================================\n")

    for title, pattern in SUITES:
        print(f">>> Running {title} Tests...")
        suite = unittest.defaultTestLoader.discover('.', pattern=pattern)
        result = unittest.TextTestRunner(verbosity=1).run(suite)
        if not result.wasSuccessful():
            print(f"!!! {title} Tests FAILED")
            sys.exit(1)
        print("\n")

    print("==========================================")
    print("      ALL SYSTEMS VERIFIED: GO.")
    print("==========================================")


if __name__ == "__main__":
    run_tests()
